"""
Channel widgets: tab bar, scrolling text view and input line.

All three read from the Dashboard on every refresh; they hold no decode
state of their own.
"""

from typing import TYPE_CHECKING

from rich.text import Text
from textual.widget import Widget
from textual.widgets import Static

if TYPE_CHECKING:
    from ...rtt.dashboard import Dashboard


class TabBar(Static):
    """One line of tab labels, F1..F12 select"""

    DEFAULT_CSS = """
    TabBar {
        height: 1;
        background: $warning;
        color: black;
    }
    """

    def __init__(self, dashboard: "Dashboard", *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.dashboard = dashboard

    def build(self) -> Text:
        text = Text()
        for i, name in enumerate(self.dashboard.tab_names()):
            if i:
                text.append(" │ ")
            style = "bold green" if i == self.dashboard.current_tab else ""
            text.append(f"F{i + 1} {name}", style=style)
        return text

    def refresh_tabs(self) -> None:
        self.update(self.build())


class ChannelView(Widget):
    """
    Wrapped, windowed messages of the active tab.

    PageUp/PageDown move the scroll offset; the decoder clamps it to the
    widget's current size on every render.
    """

    DEFAULT_CSS = """
    ChannelView {
        height: 1fr;
    }
    """

    def __init__(self, dashboard: "Dashboard", *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.dashboard = dashboard

    def render(self) -> Text:
        rows = self.dashboard.current.visible_lines(self.size.width, self.size.height)
        return Text("\n".join(rows), no_wrap=True, overflow="crop")


class InputLine(Static):
    """Pending input of the active tab, only shown for writable channels"""

    DEFAULT_CSS = """
    InputLine {
        height: 1;
        background: $primary;
        color: $warning;
    }
    """

    def __init__(self, dashboard: "Dashboard", *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.dashboard = dashboard

    def refresh_input(self) -> None:
        tab = self.dashboard.current
        self.display = tab.has_down_channel
        self.update(Text(f"> {tab.input}"))

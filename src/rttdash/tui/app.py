"""
rttdash TUI

One tab per RTT channel. Every channel is polled on a timer whether or not
its tab is visible; only the active tab is rendered.

Layout:
┌─────────────────────────────────────────────┐
│ F1 Terminal │ F2 IMU │ F3 defmt             │  tab bar
├─────────────────────────────────────────────┤
│ messages (TEXT / STRUCTURED)                │
│   or                                        │
│ x/y/z chart (BINARY_LE)                     │
├─────────────────────────────────────────────┤
│ > pending input                             │  writable channels only
└─────────────────────────────────────────────┘

Keys: F1-F12 select tab, PageUp/PageDown scroll, Enter sends the input
line, Ctrl+C quits.
"""

import logging

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding

from .. import PACKAGE_LOGGER, __version__
from ..rtt.dashboard import Dashboard
from ..rtt.formats import DataFormat
from .notify import NotifyHandler
from .widgets import TabBar, ChannelView, InputLine, SampleChart


class RttDashApp(App):
    """
    rttdash TUI Application

    The app is a thin shell around a Dashboard: key events are forwarded to
    Dashboard.handle_key(), the poll timer calls Dashboard.poll(). Raw mode
    and the alternate screen are entered and left by App.run().
    """

    TITLE = "rttdash"
    SUB_TITLE = f"v{__version__}"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", priority=True),
        Binding("ctrl+q", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(self, dashboard: Dashboard, poll_interval: float = 1 / 60):
        super().__init__()
        self.dashboard = dashboard
        self.poll_interval = poll_interval
        self._notify_handler = NotifyHandler(self)

    def compose(self) -> ComposeResult:
        yield TabBar(self.dashboard, id="tab-bar")
        yield ChannelView(self.dashboard, id="channel-view")
        yield SampleChart(self.dashboard, id="sample-chart")
        yield InputLine(self.dashboard, id="input-line")

    def on_mount(self) -> None:
        """Start polling"""
        logging.getLogger(PACKAGE_LOGGER).addHandler(self._notify_handler)
        self.set_interval(self.poll_interval, self.poll_channels)
        self.refresh_view()

    def on_unmount(self) -> None:
        logging.getLogger(PACKAGE_LOGGER).removeHandler(self._notify_handler)

    def poll_channels(self) -> None:
        """Timer callback: read all channels, then repaint the active one"""
        self.dashboard.poll()
        self.refresh_view()

    def refresh_view(self) -> None:
        """Show the widgets matching the active tab's format and repaint"""
        tab = self.dashboard.current
        is_chart = tab.data_format is DataFormat.BINARY_LE

        view = self.query_one("#channel-view", ChannelView)
        chart = self.query_one("#sample-chart", SampleChart)
        view.display = not is_chart
        chart.display = is_chart
        (chart if is_chart else view).refresh()

        self.query_one("#tab-bar", TabBar).refresh_tabs()
        self.query_one("#input-line", InputLine).refresh_input()

    def on_key(self, event: events.Key) -> None:
        """Forward keys to the dashboard"""
        if self.dashboard.handle_key(event.key, event.character):
            self.exit()
            return
        event.stop()
        self.refresh_view()

    async def action_quit(self) -> None:
        self.dashboard.quit()
        self.exit()


def run_tui(dashboard: Dashboard, poll_interval: float = 1 / 60) -> None:
    """Run the dashboard until the operator quits"""
    app = RttDashApp(dashboard, poll_interval=poll_interval)
    app.run()

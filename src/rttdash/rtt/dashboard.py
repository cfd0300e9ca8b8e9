"""
Dashboard orchestrator.

Owns the tabs, the tab selection and the session lifecycle. It is UI
agnostic: the textual app forwards key names to handle_key() and polls on a
timer, tests drive it directly.
"""

import logging
from enum import Enum, auto
from pathlib import Path
from typing import Optional, Sequence

from .channel import ChannelDecoder
from ..errors import ChannelError

logger = logging.getLogger(__name__)


class DashboardState(Enum):
    """Session lifecycle"""
    RUNNING = auto()
    SHUTTING_DOWN = auto()


QUIT_KEYS = ("ctrl+c", "ctrl+q")
TAB_KEYS = tuple(f"f{n}" for n in range(1, 13))


class Dashboard:
    """
    Tabs of ChannelDecoders plus the current selection.

    Args:
        tabs: decoders in display order, must not be empty
        log_dir: directory for session logs, None disables logging
        session_name: prefix for log file names
    """

    def __init__(
        self,
        tabs: Sequence[ChannelDecoder],
        log_dir: Optional[Path] = None,
        session_name: str = "rtt",
    ):
        if not tabs:
            raise ChannelError("Failed to initialize RTT UI: No RTT channels configured")

        self.tabs = list(tabs)
        self.current_tab = 0
        self.log_dir = Path(log_dir) if log_dir is not None else None
        self.session_name = session_name
        self.state = DashboardState.RUNNING

    @property
    def current(self) -> ChannelDecoder:
        return self.tabs[self.current_tab]

    @property
    def running(self) -> bool:
        return self.state is DashboardState.RUNNING

    def tab_names(self) -> list[str]:
        return [tab.name for tab in self.tabs]

    # --------------------------------------------------------------------------
    # Event cycle
    # --------------------------------------------------------------------------

    def poll(self) -> None:
        """Poll every channel, visible or not, so no tab misses data"""
        for tab in self.tabs:
            tab.poll()

    def select_tab(self, index: int) -> None:
        if 0 <= index < len(self.tabs):
            self.current_tab = index

    def handle_key(self, key: str, character: Optional[str] = None) -> bool:
        """
        Apply one key event to the active tab.

        Returns True if the application should exit.
        """
        if not self.running:
            return True

        tab = self.current

        if key in QUIT_KEYS:
            self.quit()
            return True
        elif key in TAB_KEYS:
            self.select_tab(int(key[1:]) - 1)
        elif key == "enter":
            tab.submit_input()
        elif key == "backspace":
            tab.input = tab.input[:-1]
        elif key == "pageup":
            tab.scroll_up()
        elif key == "pagedown":
            tab.scroll_down()
        elif character is not None and character.isprintable():
            tab.input += character

        return False

    def quit(self) -> None:
        self.state = DashboardState.SHUTTING_DOWN

    # --------------------------------------------------------------------------
    # Teardown
    # --------------------------------------------------------------------------

    def log_path(self, index: int) -> Optional[Path]:
        """Log file for tab `index`, None if logging is off or the format can't be logged"""
        extension = self.tabs[index].log_extension()
        if self.log_dir is None or extension is None:
            return None
        return self.log_dir / f"{self.session_name}_channel{index}.{extension}"

    def shutdown(self) -> list[Path]:
        """
        Write every tab's content to its session log.

        Failures are reported per file and never stop the remaining files.
        Returns the paths that were written.
        """
        self.quit()
        written: list[Path] = []

        if self.log_dir is None:
            return written

        for i, tab in enumerate(self.tabs):
            path = self.log_path(i)
            if path is None:
                logger.warning("Cannot write %s output of channel %d ('%s') to disk",
                               tab.data_format.value, i, tab.name)
                continue

            try:
                with open(path, "wb") as f:
                    f.write(tab.serialize())
            except OSError as e:
                logger.error("Error writing log channel %d to %s: %s", i, path, e)
                continue

            written.append(path)
            logger.info("Wrote channel %d log to %s", i, path)

        return written

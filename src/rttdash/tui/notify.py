"""
Route log records to textual notifications.

While the TUI owns the terminal, warnings and errors from the decoders and
the transport are shown as toasts instead of being printed.
"""

import logging
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from textual.app import App


class NotifyHandler(logging.Handler):
    """
    Logging handler that calls App.notify.

    A failing channel logs on every poll; identical messages are shown at
    most once per `repeat_after` seconds.
    """

    def __init__(self, app: "App", level: int = logging.WARNING, repeat_after: float = 5.0):
        super().__init__(level)
        self.app = app
        self.repeat_after = repeat_after
        self._last_shown: dict[str, float] = {}

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return

        now = time.monotonic()
        last = self._last_shown.get(message)
        if last is not None and now - last < self.repeat_after:
            return
        self._last_shown[message] = now

        severity = "error" if record.levelno >= logging.ERROR else "warning"
        self.app.notify(message, severity=severity)

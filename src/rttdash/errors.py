"""
Exception hierarchy for rttdash.

Startup failures (ConfigError, ChannelError, TransportError while attaching)
abort before the TUI starts. TransportError during polling is logged and
retried on the next tick.
"""


class RttDashError(Exception):
    """Base class for all rttdash errors."""


class ConfigError(RttDashError):
    """Invalid or incomplete configuration."""


class ChannelError(RttDashError):
    """A channel or the channel set could not be constructed."""


class TransportError(RttDashError):
    """Reading from or writing to an RTT channel failed."""


class FrameDecodeError(RttDashError):
    """The structured-log decoder rejected the buffered bytes as malformed."""


class NotSerializableError(RttDashError):
    """Content of this data format cannot be written to a log file."""

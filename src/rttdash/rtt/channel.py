"""
Channel decoder.

One ChannelDecoder backs one dashboard tab. It owns the channel's up and/or
down endpoint and every piece of decode state for that channel:

- TEXT: display lines, reassembling a line split across two reads
- BINARY_LE: float samples plus the <4 leftover bytes of a partial sample
- STRUCTURED: display lines produced by the frame adapter

The scroll offset is plain state here; the visible window is recomputed
from it by the pure helpers in scrollback on every render.
"""

import codecs
import logging
import struct
import textwrap
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from .formats import DataFormat
from .scrollback import clamp_offset, window
from .structured import StructuredLogAdapter
from ..errors import ChannelError, ConfigError, NotSerializableError, TransportError

if TYPE_CHECKING:
    from ..transport.base import UpEndpoint, DownEndpoint

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 1024
SAMPLE_SIZE = 4
CHART_BOUNDS = (-2000.0, 2000.0)
CHART_POINTS = 128

_LOG_EXTENSIONS = {
    DataFormat.TEXT: "txt",
    DataFormat.BINARY_LE: "dat",
}


class ChannelDecoder:
    """
    Buffering and decode state for a single RTT channel.

    At least one of `up` and `down` must be given. A STRUCTURED channel
    also needs a StructuredLogAdapter.
    """

    def __init__(
        self,
        up: Optional["UpEndpoint"],
        down: Optional["DownEndpoint"],
        name: Optional[str] = None,
        data_format: DataFormat = DataFormat.TEXT,
        show_timestamps: bool = False,
        structured: Optional[StructuredLogAdapter] = None,
    ):
        if up is None and down is None:
            raise ChannelError("A channel needs an up or a down endpoint")
        if data_format is DataFormat.STRUCTURED and structured is None:
            raise ConfigError("Structured channel selected but no frame decoder tables are loaded")

        self.up = up
        self.down = down
        self.name = (
            name
            or (up.name if up is not None else None)
            or (down.name if down is not None else None)
            or "Unnamed channel"
        )
        self._format = data_format
        self.show_timestamps = show_timestamps
        self.structured = structured

        self.messages: list[str] = []
        self.data: list[float] = []
        self.leftovers = b""
        self.last_line_done = True
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.input = ""
        self.scroll_offset = 0

    def __repr__(self) -> str:
        return f"<ChannelDecoder {self.name!r} {self._format.value}>"

    @property
    def data_format(self) -> DataFormat:
        return self._format

    @property
    def has_down_channel(self) -> bool:
        return self.down is not None

    # --------------------------------------------------------------------------
    # Polling
    # --------------------------------------------------------------------------

    def poll(self) -> None:
        """
        Read pending bytes from the up endpoint and decode them.

        A failed read is logged and leaves the state untouched so the next
        poll simply retries.
        """
        if self.up is None:
            return

        try:
            chunk = self.up.read(READ_CHUNK_SIZE)
        except TransportError as e:
            logger.error("Error reading from RTT channel '%s': %s", self.name, e)
            return

        if not chunk:
            return

        if self._format is DataFormat.TEXT:
            self._decode_text(chunk)
        elif self._format is DataFormat.BINARY_LE:
            self._decode_binary(chunk)
        elif self._format is DataFormat.STRUCTURED:
            for line in self.structured.feed(chunk):
                self._push_line(line)

    def _push_line(self, line: str, anchored: bool = True) -> None:
        self.messages.append(line)
        # Keep the scrolled-back view on the same content as history grows
        if anchored and self.scroll_offset != 0:
            self.scroll_offset += 1

    def _decode_text(self, chunk: bytes) -> None:
        # A multi-byte character split across reads is held back by the decoder
        incoming = self._utf8.decode(chunk)
        if not incoming:
            return

        last_line_done = self.last_line_done
        continued = False
        if not last_line_done and self.messages:
            incoming = self.messages.pop() + incoming
            continued = True
        self.last_line_done = incoming.endswith("\n")

        segments = incoming.split("\n")
        if self.last_line_done:
            segments.pop()

        # Timestamped at receipt of the newline, not of the first character
        stamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]

        for i, segment in enumerate(segments):
            if self.show_timestamps and (last_line_done or i > 0):
                segment = f"{stamp} {segment}"
            # The popped continuation goes back in place, the line count is unchanged
            self._push_line(segment, anchored=not (continued and i == 0))

    def _decode_binary(self, chunk: bytes) -> None:
        buffer = self.leftovers + chunk
        usable = len(buffer) - len(buffer) % SAMPLE_SIZE

        self.data.extend(value for (value,) in struct.iter_unpack("<f", buffer[:usable]))
        self.leftovers = buffer[usable:]

    # --------------------------------------------------------------------------
    # Input
    # --------------------------------------------------------------------------

    def submit_input(self) -> None:
        """Send the pending input line, newline-terminated, to the down endpoint"""
        if self.down is None:
            return

        line = self.input + "\n"
        try:
            self.down.write(line.encode("utf-8"))
        except TransportError as e:
            logger.error("Error writing to RTT channel '%s': %s", self.name, e)
        finally:
            self.input = ""

    # --------------------------------------------------------------------------
    # Scrolling and rendering
    # --------------------------------------------------------------------------

    def scroll(self, delta: int) -> None:
        """Move the view `delta` rows into history, never past the newest row"""
        self.scroll_offset = max(0, self.scroll_offset + delta)

    def scroll_up(self) -> None:
        self.scroll(1)

    def scroll_down(self) -> None:
        self.scroll(-1)

    def wrapped_lines(self, width: int) -> list[str]:
        """Every message wrapped to `width` columns, one entry per screen row"""
        rows: list[str] = []
        for message in self.messages:
            rows.extend(textwrap.wrap(message, width=max(1, width), replace_whitespace=False) or [""])
        return rows

    def visible_lines(self, width: int, height: int) -> list[str]:
        """
        Rows to paint in a viewport of `width` x `height`.

        Wrapping happens first so the window counts screen rows. The
        clamped scroll offset is stored back.
        """
        rows = self.wrapped_lines(width)
        height = max(0, height)
        self.scroll_offset = clamp_offset(len(rows), height, self.scroll_offset)
        return rows[window(len(rows), height, self.scroll_offset)]

    def series(self, max_points: int = CHART_POINTS) -> tuple[list[tuple[float, float]], ...]:
        """
        Chart series for BINARY_LE channels.

        Samples are taken as (x, y, z) triples; the most recent
        `max_points` complete triples are returned as three
        (index, value) lists.
        """
        complete = len(self.data) - len(self.data) % 3
        start = max(0, complete - max_points * 3)
        samples = self.data[start:complete]

        return tuple(
            [(float(i), float(value)) for i, value in enumerate(samples[axis::3])]
            for axis in range(3)
        )

    # --------------------------------------------------------------------------
    # Session logs
    # --------------------------------------------------------------------------

    def log_extension(self) -> Optional[str]:
        """File extension for this channel's log, None if it cannot be logged"""
        return _LOG_EXTENSIONS.get(self._format)

    def serialize(self) -> bytes:
        """Content of this channel's log file"""
        if self._format is DataFormat.TEXT:
            return "".join(f"{line}\n" for line in self.messages).encode("utf-8")
        if self._format is DataFormat.BINARY_LE:
            return struct.pack(f"<{len(self.data)}f", *self.data)
        raise NotSerializableError(f"Cannot write {self._format.value} output of '{self.name}' to disk")

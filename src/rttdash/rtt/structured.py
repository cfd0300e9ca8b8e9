"""
Structured-log frame adapter.

Structured channels carry binary log frames whose grammar is owned by an
external decoder (a defmt-style decoder driven by tables extracted from the
firmware image). The decoder is loaded from an import path of the form
"package.module:factory". The factory is called with the firmware image path
and returns FrameTables.

The adapter only deals with buffering: bytes accumulate in an arena, the
decoder is invoked until it reports insufficient data, and every decoded
frame becomes one display line plus an optional source-location line.
"""

import importlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Protocol

from ..errors import ConfigError, FrameDecodeError, RttDashError

logger = logging.getLogger(__name__)


class Frame(Protocol):
    """A decoded log record"""

    def index(self) -> int:
        """Key into the location table"""
        ...

    def display(self) -> str:
        """Human-readable rendering of the record"""
        ...


@dataclass(frozen=True)
class Location:
    """Source location of a log statement"""
    file: Path
    line: int


# decode(data, table) -> (frame, consumed) or None when more bytes are needed.
# `data` is the adapter's own buffer, valid only for the duration of the call.
# Raises FrameDecodeError for malformed input.
DecodeFn = Callable[[bytearray, Any], Optional[tuple[Frame, int]]]


@dataclass
class FrameTables:
    """Everything needed to decode one firmware's frames"""
    decode: DecodeFn
    table: Any
    locations: Optional[Mapping[int, Location]] = None


FrameDecoderFactory = Callable[[Optional[Path]], FrameTables]


def load_frame_decoder(path: str) -> FrameDecoderFactory:
    """
    Resolve a "module:factory" import path.

    Raises:
        ConfigError: if the path is malformed or cannot be imported
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(f"Frame decoder must be given as 'module:factory', got '{path}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Could not import frame decoder module '{module_name}': {e}") from e

    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ConfigError(f"'{attr}' in '{module_name}' is not a callable frame decoder factory")

    return factory


def format_location(location: Location, cwd: Optional[Path] = None) -> str:
    """
    Annotation line for a frame's source location.

    Paths under the working directory are shown relative to it.
    """
    cwd = cwd or Path(os.getcwd())
    try:
        path = Path(location.file).relative_to(cwd)
    except ValueError:
        # not relative; use full path
        path = Path(location.file)
    return f"└─ {path}:{location.line}"


class StructuredLogAdapter:
    """
    Turns a byte stream into display lines using an external frame decoder.

    Bytes that do not yet form a complete frame stay in the arena until the
    next feed() call.
    """

    def __init__(self, tables: FrameTables):
        self.tables = tables
        self._arena = bytearray()

    @property
    def pending(self) -> int:
        """Number of undecoded bytes held back"""
        return len(self._arena)

    def feed(self, data: bytes) -> list[str]:
        """Append `data` and decode as many frames as possible"""
        self._arena += data
        lines: list[str] = []

        while self._arena:
            try:
                result = self.tables.decode(self._arena, self.tables.table)
            except FrameDecodeError as e:
                # Drop the arena so decoding resynchronises on fresh data
                logger.error("Malformed structured-log frame, discarding %d bytes: %s",
                             len(self._arena), e)
                self._arena.clear()
                break

            if result is None:
                break

            frame, consumed = result
            if consumed <= 0:
                raise RttDashError(f"frame decoder consumed {consumed} bytes")

            lines.append(frame.display())

            if self.tables.locations is not None:
                location = self.tables.locations.get(frame.index())
                if location is not None:
                    lines.append(format_location(location))

            del self._arena[:consumed]

        return lines

"""
RTT channel decoding and dashboard orchestration.
"""

from .formats import DataFormat
from .channel import ChannelDecoder, CHART_BOUNDS, READ_CHUNK_SIZE
from .scrollback import clamp_offset, window
from .structured import (
    Frame,
    FrameTables,
    Location,
    StructuredLogAdapter,
    load_frame_decoder,
)
from .pairing import build_decoders, pull_channel
from .dashboard import Dashboard, DashboardState

__all__ = [
    "DataFormat",
    "ChannelDecoder",
    "CHART_BOUNDS",
    "READ_CHUNK_SIZE",
    "clamp_offset",
    "window",
    "Frame",
    "FrameTables",
    "Location",
    "StructuredLogAdapter",
    "load_frame_decoder",
    "build_decoders",
    "pull_channel",
    "Dashboard",
    "DashboardState",
]

"""
rttdash - RTT Channel Dashboard

A terminal dashboard for SEGGER RTT channels read through a debug probe.
Each channel gets a tab, decoded as text, little-endian float samples
(charted), or structured log frames.

Usage:
    # Command-line interface
    rttdash                     # Attach and open the dashboard
    rttdash attach -c rtt.py    # Attach using a config file
    rttdash probes              # List connected debug probes
    rttdash channels            # List RTT channels on the target

    # Python API
    from rttdash.rtt import ChannelDecoder, Dashboard, build_decoders
"""

__version__ = "0.1.0"

# Parent of every module logger in the package
PACKAGE_LOGGER = __name__

from .errors import RttDashError
from .rtt import ChannelDecoder, Dashboard, DataFormat, build_decoders

__all__ = ["PACKAGE_LOGGER", "ChannelDecoder", "Dashboard", "DataFormat", "build_decoders", "RttDashError", "__version__"]

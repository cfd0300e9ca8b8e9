"""
pyocd RTT backend.

Uses pyocd for probe access and its generic RTT control block support:
- Probe selection by unique ID
- Target override (chip name) or auto-detection
- Control block located at a fixed address or by scanning RAM
- Non-blocking up-channel reads and down-channel writes
"""

import logging
import time
from typing import Any, Optional

from .base import UpEndpoint, DownEndpoint, RttBackend, register_backend
from ..errors import TransportError

logger = logging.getLogger(__name__)


class PyOCDUpEndpoint(UpEndpoint):
    """
    Up channel backed by a pyocd RTTUpChannel.

    pyocd drains everything the target has written in one read, so the
    surplus is held here and handed out `max_bytes` at a time.
    """

    def __init__(self, channel: Any, number: int):
        self._channel = channel
        self._number = number
        self._pending = bytearray()

    @property
    def number(self) -> int:
        return self._number

    @property
    def name(self) -> Optional[str]:
        return getattr(self._channel, "name", None) or None

    def read(self, max_bytes: int) -> bytes:
        from pyocd.core import exceptions

        if not self._pending:
            try:
                self._pending += self._channel.read()
            except (exceptions.Error, OSError) as e:
                raise TransportError(f"read from up channel {self._number} failed: {e}") from e

        data = bytes(self._pending[:max_bytes])
        del self._pending[:max_bytes]
        return data


class PyOCDDownEndpoint(DownEndpoint):
    """Down channel backed by a pyocd RTTDownChannel."""

    def __init__(self, channel: Any, number: int):
        self._channel = channel
        self._number = number

    @property
    def number(self) -> int:
        return self._number

    @property
    def name(self) -> Optional[str]:
        return getattr(self._channel, "name", None) or None

    def write(self, data: bytes) -> None:
        from pyocd.core import exceptions

        try:
            written = self._channel.write(data)
        except (exceptions.Error, OSError) as e:
            raise TransportError(f"write to down channel {self._number} failed: {e}") from e

        # Non-blocking write: a full target buffer accepts only part of the line
        if written is not None and written < len(data):
            raise TransportError(
                f"down channel {self._number} full, wrote {written} of {len(data)} bytes"
            )


class PyOCDRttBackend(RttBackend):
    """
    RTT over any probe pyocd supports (ST-Link, CMSIS-DAP, J-Link).

    The target is attached without halting or resetting it so a running
    firmware keeps producing output.
    """

    def __init__(self, probe, rtt):
        super().__init__(probe, rtt)
        self._session = None
        self._target = None
        self._control_block = None
        self._up: list[PyOCDUpEndpoint] = []
        self._down: list[PyOCDDownEndpoint] = []

    def connect(self) -> None:
        """Open the probe session and start RTT."""
        try:
            from pyocd.core.helpers import ConnectHelper
        except ImportError as e:
            raise TransportError("pyocd not installed. Install with: pip install pyocd") from e

        options = {"connect_mode": "attach"}
        if self.probe.target:
            options["target_override"] = self.probe.target

        try:
            self._session = ConnectHelper.session_with_chosen_probe(
                unique_id=self.probe.unique_id,
                blocking=False,
                auto_open=False,
                **options
            )
        except Exception as e:
            raise TransportError(f"probe selection failed: {e}") from e

        if self._session is None:
            raise TransportError("No debug probe found")

        try:
            self._session.open()
            self._target = self._session.board.target
        except Exception as e:
            self.disconnect()
            raise TransportError(f"connection failed: {e}") from e

        self._connected = True
        logger.info("Connected to %s (%s)", self._session.probe.description, self._target.part_number)

        try:
            self._start_rtt()
        except TransportError:
            self.disconnect()
            raise

    def _start_rtt(self) -> None:
        """Locate the control block, retrying until the configured timeout."""
        from pyocd.core import exceptions
        from pyocd.debug.rtt import GenericRTTControlBlock

        self._control_block = GenericRTTControlBlock(
            self._target,
            address=self.rtt.address,
            size=self.rtt.scan_size,
        )

        deadline = time.monotonic() + self.rtt.timeout
        while True:
            try:
                self._control_block.start()
                break
            except exceptions.Error as e:
                if time.monotonic() >= deadline:
                    raise TransportError(f"RTT control block not found: {e}") from e
                logger.debug("RTT control block not ready yet: %s", e)
                time.sleep(0.1)

        self._up = [
            PyOCDUpEndpoint(channel, number)
            for number, channel in enumerate(self._control_block.up_channels)
        ]
        self._down = [
            PyOCDDownEndpoint(channel, number)
            for number, channel in enumerate(self._control_block.down_channels)
        ]
        logger.info("RTT started: %d up, %d down channels", len(self._up), len(self._down))

    def disconnect(self):
        """Close the pyocd session."""
        if self._session:
            try:
                self._session.close()
            except Exception as e:
                logger.warning("Error closing probe session: %s", e)
            self._session = None
            self._target = None
        self._control_block = None
        self._connected = False

    def up_channels(self) -> list[UpEndpoint]:
        return list(self._up)

    def down_channels(self) -> list[DownEndpoint]:
        return list(self._down)

    def get_info(self) -> dict[str, str]:
        """Get probe and target information."""
        if not self._connected or not self._session:
            return {"error": "Not connected"}

        info = {
            "probe": self._session.probe.description,
            "probe_id": self._session.probe.unique_id,
        }

        if self._target:
            info["target"] = self._target.part_number

        return info


# Register this backend
register_backend("pyocd", PyOCDRttBackend)

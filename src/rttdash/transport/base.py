"""
Transport abstraction for RTT channels.

A backend attaches to a target through a debug probe, locates the RTT
control block and exposes its up (target -> host) and down (host -> target)
channels as endpoints. The decoders only ever see the endpoint interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..config import ProbeConfig, RttConfig


# --------------------------------------------------------------------------
# Endpoints
# --------------------------------------------------------------------------

class Endpoint(ABC):
    """One RTT channel buffer, identified by its number in the control block."""

    @property
    @abstractmethod
    def number(self) -> int:
        """Channel index used to pair up and down buffers."""
        pass

    @property
    def name(self) -> Optional[str]:
        """Name advertised by the firmware, if any."""
        return None


class UpEndpoint(Endpoint):
    """Readable channel (target to host)."""

    @abstractmethod
    def read(self, max_bytes: int) -> bytes:
        """
        Return up to `max_bytes` of pending data without blocking.

        An empty result means no data is available yet. Raises
        TransportError when the probe access fails.
        """
        pass


class DownEndpoint(Endpoint):
    """Writable channel (host to target)."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Write all of `data` or raise TransportError."""
        pass


# --------------------------------------------------------------------------
# Backend Base Class
# --------------------------------------------------------------------------

class RttBackend(ABC):
    """Base class for RTT transports."""

    def __init__(self, probe: ProbeConfig, rtt: RttConfig):
        self.probe = probe
        self.rtt = rtt
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    @abstractmethod
    def connect(self) -> None:
        """Attach to the target and locate the control block. Raises TransportError."""
        pass

    @abstractmethod
    def disconnect(self):
        """Release the probe."""
        pass

    @abstractmethod
    def up_channels(self) -> list[UpEndpoint]:
        """Readable endpoints discovered on the target."""
        pass

    @abstractmethod
    def down_channels(self) -> list[DownEndpoint]:
        """Writable endpoints discovered on the target."""
        pass

    def get_info(self) -> dict[str, str]:
        """Probe and target description for display."""
        return {}

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


# --------------------------------------------------------------------------
# Backend Registry
# --------------------------------------------------------------------------

_BACKEND_REGISTRY: dict[str, type[RttBackend]] = {}


def register_backend(name: str, backend_class: type[RttBackend]):
    """Register a backend class under a transport name."""
    _BACKEND_REGISTRY[name] = backend_class


def get_backend(name: str, probe: ProbeConfig, rtt: RttConfig) -> Optional[RttBackend]:
    """
    Get a backend instance for a transport name.

    Returns None if no backend is registered under that name.
    """
    backend_class = _BACKEND_REGISTRY.get(name)

    if backend_class is None:
        return None

    return backend_class(probe, rtt)


def list_backends() -> dict[str, type[RttBackend]]:
    """List all registered backends."""
    return _BACKEND_REGISTRY.copy()


# --------------------------------------------------------------------------
# Import concrete backends to register them
# --------------------------------------------------------------------------

from . import backend_pyocd  # noqa: E402,F401

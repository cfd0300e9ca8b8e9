"""Shared fixtures: in-memory RTT endpoints and backend."""

from typing import Optional

import pytest

from rttdash.errors import TransportError
from rttdash.transport.base import UpEndpoint, DownEndpoint, RttBackend, register_backend


class FakeUp(UpEndpoint):
    """Up channel fed from a list of chunks; each read returns the next one."""

    def __init__(self, number: int, chunks=(), name: Optional[str] = None):
        self._number = number
        self._name = name
        self.chunks = list(chunks)
        self.fail = False

    @property
    def number(self) -> int:
        return self._number

    @property
    def name(self) -> Optional[str]:
        return self._name

    def read(self, max_bytes: int) -> bytes:
        if self.fail:
            raise TransportError("probe went away")
        if not self.chunks:
            return b""
        chunk = self.chunks.pop(0)
        assert len(chunk) <= max_bytes
        return chunk


class FakeDown(DownEndpoint):
    """Down channel recording every write."""

    def __init__(self, number: int, name: Optional[str] = None):
        self._number = number
        self._name = name
        self.written: list[bytes] = []
        self.fail = False

    @property
    def number(self) -> int:
        return self._number

    @property
    def name(self) -> Optional[str]:
        return self._name

    def write(self, data: bytes) -> None:
        if self.fail:
            raise TransportError("down buffer full")
        self.written.append(data)


class FakeBackend(RttBackend):
    """Backend serving the endpoints stored on the class."""

    ups: list = []
    downs: list = []

    def connect(self) -> None:
        self._connected = True

    def disconnect(self):
        self._connected = False

    def up_channels(self):
        return list(self.ups)

    def down_channels(self):
        return list(self.downs)

    def get_info(self):
        return {"probe": "fake probe", "target": "fake target"}


register_backend("fake", FakeBackend)


@pytest.fixture
def fake_backend():
    """Fresh endpoints for the 'fake' transport."""
    FakeBackend.ups = [FakeUp(0, name="Terminal"), FakeUp(1, name="IMU")]
    FakeBackend.downs = [FakeDown(0, name="Terminal")]
    yield FakeBackend
    FakeBackend.ups = []
    FakeBackend.downs = []

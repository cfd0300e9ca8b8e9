"""
RTT transport implementations.
"""

from .base import (
    Endpoint,
    UpEndpoint,
    DownEndpoint,
    RttBackend,
    get_backend,
    register_backend,
    list_backends,
)

__all__ = [
    "Endpoint",
    "UpEndpoint",
    "DownEndpoint",
    "RttBackend",
    "get_backend",
    "register_backend",
    "list_backends",
]

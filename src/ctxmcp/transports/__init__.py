"""Transports delivering requests to a server."""

from .base import Transport
from .in_process import InProcessClientTransport, InProcessTransport, connect_in_process

__all__ = [
    "Transport",
    "InProcessTransport",
    "InProcessClientTransport",
    "connect_in_process",
]

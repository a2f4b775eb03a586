"""Adapters implementing the application ports."""

from __future__ import annotations

from .console import RichConsoleAdapter
from .transport import ConnectionState, TcpTransport, UdpTransport, create_transport

__all__ = [
    "ConnectionState",
    "RichConsoleAdapter",
    "TcpTransport",
    "UdpTransport",
    "create_transport",
]

"""Protocols the application layer depends on."""

from __future__ import annotations

from .console import ConsolePort
from .time import ClockPort
from .transport import ErrorSink, TransportFactory, TransportPort

__all__ = ["ClockPort", "ConsolePort", "ErrorSink", "TransportFactory", "TransportPort"]

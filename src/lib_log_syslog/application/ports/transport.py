"""Port describing the transport strategies used by the dispatcher."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from lib_log_syslog.domain.config import EndpointConfig
from lib_log_syslog.domain.errors import SyslogTransportError
from lib_log_syslog.domain.frame import Frame

ErrorSink = Callable[[SyslogTransportError], None]
"""Receives errors noticed outside of a specific send (socket close, ICMP)."""


@runtime_checkable
class TransportPort(Protocol):
    """Deliver encoded frames to a collector."""

    async def send(self, frame: Frame) -> None:
        """Deliver ``frame``; raise :class:`SyslogTransportError` on failure."""

    async def aclose(self) -> None:
        """Finish in-flight work and release any connection."""

    def close_nowait(self) -> None:
        """Release any connection immediately, without awaiting in-flight work."""


TransportFactory = Callable[[EndpointConfig, ErrorSink], TransportPort]
"""Builds the strategy matching ``config.protocol`` for one dispatcher."""


__all__ = ["ErrorSink", "TransportFactory", "TransportPort"]

"""Datagram (UDP) transport: one ephemeral endpoint per frame.

Nothing is kept between sends. Each call resolves the destination, opens a
datagram endpoint, sends a single datagram and closes the endpoint right away;
UDP gives no delivery confirmation, so a successful return only means the
datagram was handed to the operating system.
"""

from __future__ import annotations

import asyncio
import logging

from lib_log_syslog.application.ports.transport import ErrorSink, TransportPort
from lib_log_syslog.domain.errors import SyslogConnectError, SyslogWriteError
from lib_log_syslog.domain.frame import Frame

LOGGER = logging.getLogger(__name__)


class _DatagramProtocol(asyncio.DatagramProtocol):
    """Forward ICMP-style errors reported by the event loop."""

    def __init__(self, owner: "UdpTransport") -> None:
        self._owner = owner

    def error_received(self, exc: Exception) -> None:
        self._owner._notify(exc)


class UdpTransport(TransportPort):
    """Send every frame as one datagram to ``host:port``."""

    def __init__(self, host: str, port: int, *, on_error: ErrorSink | None = None) -> None:
        self._host = host
        self._port = port
        self._on_error = on_error

    async def send(self, frame: Frame) -> None:
        loop = asyncio.get_running_loop()
        try:
            endpoint, _ = await loop.create_datagram_endpoint(
                lambda: _DatagramProtocol(self),
                remote_addr=(self._host, self._port),
            )
        except (OSError, UnicodeError, ValueError, OverflowError) as exc:
            raise SyslogConnectError(
                f"Can't connect to {self._host}:{self._port}: {exc}",
                host=self._host,
                port=self._port,
                protocol="udp",
            ) from exc
        try:
            endpoint.sendto(frame.data)
        except OSError as exc:
            raise SyslogWriteError(
                f"Can't send to {self._host}:{self._port}: {exc}",
                host=self._host,
                port=self._port,
                protocol="udp",
            ) from exc
        finally:
            endpoint.close()

    async def aclose(self) -> None:
        return None

    def close_nowait(self) -> None:
        return None

    def _notify(self, exc: Exception) -> None:
        LOGGER.debug("Datagram error from %s:%s: %s", self._host, self._port, exc)
        if self._on_error is None:
            return
        error = SyslogWriteError(
            f"Can't send to {self._host}:{self._port}: {exc}",
            host=self._host,
            port=self._port,
            protocol="udp",
        )
        error.__cause__ = exc
        self._on_error(error)


__all__ = ["UdpTransport"]

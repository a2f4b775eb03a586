"""Error taxonomy for syslog delivery failures."""

from __future__ import annotations


class SyslogError(Exception):
    """Base class for every error raised by :mod:`lib_log_syslog`."""


class SyslogTransportError(SyslogError):
    """Delivery to the collector failed.

    Attributes
    ----------
    host / port:
        Destination the frame was addressed to.
    protocol:
        ``"tcp"`` or ``"udp"``.
    """

    def __init__(self, message: str, *, host: str, port: int, protocol: str) -> None:
        super().__init__(message)
        self.host = host
        self.port = port
        self.protocol = protocol

    @property
    def destination(self) -> str:
        return f"{self.host}:{self.port}"


class SyslogConnectError(SyslogTransportError):
    """The transport could not be established (resolution, connect, endpoint)."""


class SyslogWriteError(SyslogTransportError):
    """The transport was available but writing the frame failed."""


__all__ = [
    "SyslogConnectError",
    "SyslogError",
    "SyslogTransportError",
    "SyslogWriteError",
]

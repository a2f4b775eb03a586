"""Endpoint configuration value objects.

Purpose
-------
Capture everything the encoder and the transports need to know about the
destination in one immutable object, so a send that already started keeps the
settings it was issued with while the owner reconfigures for later sends.

Contents
--------
* :class:`TransportProtocol` - ``tcp`` or ``udp``.
* :class:`EndpointConfig` - frozen dataclass with the endpoint settings.
* :func:`parse_destination` / :func:`coerce_port` - split ``host[:port]``
  strings and validate ports.
* :func:`default_tag` - process identity used when no tag is configured.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from .levels import Facility

DEFAULT_PORT = 514
MAX_PORT = 65535
DEFAULT_HOST = "localhost"
DEFAULT_HOSTNAME = "localhost"


class TransportProtocol(str, Enum):
    """Transport used to reach the collector."""

    TCP = "tcp"
    UDP = "udp"

    @classmethod
    def from_value(cls, value: "TransportProtocol | str | None") -> "TransportProtocol":
        """Return the protocol for ``value``; ``None`` and ``""`` select TCP.

        >>> TransportProtocol.from_value("UDP")
        <TransportProtocol.UDP: 'udp'>
        """
        if value is None or value == "":
            return cls.TCP
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown transport protocol: {value!r}") from exc


def coerce_port(value: int | str | None, default: int = DEFAULT_PORT) -> int:
    """Return ``value`` as a TCP/UDP port; empty values and ``0`` select ``default``.

    >>> coerce_port("601"), coerce_port(None), coerce_port(0)
    (601, 514, 514)
    """
    if value is None or value == "":
        return default
    try:
        port = int(value)
    except ValueError as exc:
        raise ValueError(f"Syslog port must be an integer, got {value!r}") from exc
    if port == 0:
        return default
    if not 0 < port <= MAX_PORT:
        raise ValueError(f"Syslog port must be between 1 and {MAX_PORT}, got {port}")
    return port


def parse_destination(value: str | None, default_port: int = DEFAULT_PORT) -> tuple[str, int]:
    """Split ``host`` or ``host:port`` into a host/port pair.

    Examples
    --------
    >>> parse_destination("example.com")
    ('example.com', 514)
    >>> parse_destination("example.com:601")
    ('example.com', 601)
    >>> parse_destination(None)
    ('localhost', 514)
    """
    if not value:
        return DEFAULT_HOST, default_port
    host, _, port_text = value.partition(":")
    return host or DEFAULT_HOST, coerce_port(port_text, default_port)


def default_tag() -> str:
    """Return the tag used when the caller configures none."""
    script = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else ""
    return script or "lib_log_syslog"


@dataclass(slots=True, frozen=True)
class EndpointConfig:
    """Immutable endpoint settings.

    Attributes
    ----------
    tag:
        Default program tag written before ``[pid]``.
    facility:
        Numeric facility; values outside :class:`Facility` are kept verbatim.
    hostname:
        Host name the messages claim to originate from.
    syslog_host / port:
        Collector address.
    protocol:
        :class:`TransportProtocol` selecting the dispatch strategy.
    quiet:
        Suppress diagnostic console output on transport errors.
    """

    tag: str
    facility: int = int(Facility.user)
    hostname: str = DEFAULT_HOSTNAME
    syslog_host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    protocol: TransportProtocol = TransportProtocol.TCP
    quiet: bool = False

    def __post_init__(self) -> None:
        if not 0 < self.port <= MAX_PORT:
            raise ValueError(f"Syslog port must be between 1 and {MAX_PORT}, got {self.port}")

    @property
    def destination(self) -> str:
        return f"{self.syslog_host}:{self.port}"

    @property
    def stream(self) -> bool:
        """``True`` when frames travel over a byte stream and need a terminator."""
        return self.protocol is TransportProtocol.TCP

    def replace(self, **changes: Any) -> "EndpointConfig":
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)


__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_HOSTNAME",
    "DEFAULT_PORT",
    "EndpointConfig",
    "MAX_PORT",
    "TransportProtocol",
    "coerce_port",
    "default_tag",
    "parse_destination",
]

"""Domain value objects and pure functions for syslog encoding."""

from __future__ import annotations

from .config import EndpointConfig, TransportProtocol, coerce_port, default_tag, parse_destination
from .errors import SyslogConnectError, SyslogError, SyslogTransportError, SyslogWriteError
from .formatting import format_message
from .frame import Frame, encode, format_timestamp
from .levels import Facility, Severity, compute_priority, resolve_facility, resolve_severity

__all__ = [
    "EndpointConfig",
    "Facility",
    "Frame",
    "Severity",
    "SyslogConnectError",
    "SyslogError",
    "SyslogTransportError",
    "SyslogWriteError",
    "TransportProtocol",
    "coerce_port",
    "compute_priority",
    "default_tag",
    "encode",
    "format_message",
    "format_timestamp",
    "parse_destination",
    "resolve_facility",
    "resolve_severity",
]

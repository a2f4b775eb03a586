"""Syslog client library with TCP and UDP transports.

Build an isolated logger with :class:`SysLogger`, or use the shared instance
returned by :func:`default_logger` for zero-setup scripts.
"""

from __future__ import annotations

from .__init__conf__ import summary_info
from .adapters import ConnectionState
from .domain import (
    EndpointConfig,
    Facility,
    Frame,
    Severity,
    SyslogConnectError,
    SyslogError,
    SyslogTransportError,
    SyslogWriteError,
    TransportProtocol,
    encode,
    format_message,
    parse_destination,
)
from .runtime import clear_default_logger, default_logger, set_default_logger
from .syslogger import SysLogger

__all__ = [
    "ConnectionState",
    "EndpointConfig",
    "Facility",
    "Frame",
    "Severity",
    "SysLogger",
    "SyslogConnectError",
    "SyslogError",
    "SyslogTransportError",
    "SyslogWriteError",
    "TransportProtocol",
    "clear_default_logger",
    "default_logger",
    "encode",
    "format_message",
    "parse_destination",
    "set_default_logger",
    "summary_info",
]

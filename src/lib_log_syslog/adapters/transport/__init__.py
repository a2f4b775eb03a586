"""Transport strategies and the factory selecting one per endpoint."""

from __future__ import annotations

from lib_log_syslog.application.ports.transport import ErrorSink, TransportPort
from lib_log_syslog.domain.config import EndpointConfig, TransportProtocol

from .tcp import ConnectionState, TcpTransport
from .udp import UdpTransport


def create_transport(config: EndpointConfig, on_error: ErrorSink) -> TransportPort:
    """Return a fresh strategy for ``config.protocol``.

    >>> cfg = EndpointConfig(tag="t", protocol=TransportProtocol.UDP)
    >>> type(create_transport(cfg, lambda error: None)).__name__
    'UdpTransport'
    """
    if config.protocol is TransportProtocol.UDP:
        return UdpTransport(config.syslog_host, config.port, on_error=on_error)
    return TcpTransport(config.syslog_host, config.port, on_error=on_error)


__all__ = ["ConnectionState", "TcpTransport", "UdpTransport", "create_transport"]

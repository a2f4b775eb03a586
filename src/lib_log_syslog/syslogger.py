"""Logging façade that wires the encoder, dispatcher and adapters together.

Purpose
-------
Expose a small, console-like API (``log``, ``info``, ``warn``, ``error``,
``dir``, ``time``/``time_end``, ``trace``, ``assert_``) on top of a
:class:`TransportDispatcher` owned by each :class:`SysLogger` instance.

Contents
--------
* :class:`SysLogger` - explicitly constructed, explicitly owned logger.
* :class:`_SystemClock` - UTC clock used for frame timestamps.

System Role
-----------
Composition point: it chooses the concrete transport factory and diagnostic
console, while every delivery decision stays in the dispatcher. Sends never
block: inside an event loop they return an :class:`asyncio.Task`, elsewhere a
:class:`concurrent.futures.Future` resolved by the dispatcher's background
loop. Synchronous programs call :meth:`SysLogger.flush` or
:meth:`SysLogger.close` to wait for delivery. The optional
process-wide default instance lives in :mod:`lib_log_syslog.runtime`.

Examples
--------
>>> logger = SysLogger(tag="docs", protocol="udp", syslog_host="localhost:5514", quiet=True)
>>> logger.config.port, logger.config.protocol.value
(5514, 'udp')
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import time
import traceback
from datetime import datetime, timezone
from typing import Any, Optional, Union

from rich.pretty import pretty_repr

from .adapters import RichConsoleAdapter, create_transport
from .application import DoneCallback, ErrorListener, TransportDispatcher
from .application.ports import ClockPort, ConsolePort, TransportFactory
from .domain import EndpointConfig, Severity, TransportProtocol, default_tag, format_message, parse_destination
from .domain.errors import SyslogTransportError
from .domain.levels import FacilityLike, SeverityLike, resolve_facility

LOGGER = logging.getLogger(__name__)

SendResult = Union[
    "asyncio.Task[Optional[SyslogTransportError]]",
    "concurrent.futures.Future[Optional[SyslogTransportError]]",
    None,
]


class _SystemClock(ClockPort):
    """Concrete clock port returning timezone-aware UTC timestamps."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class SysLogger:
    """Syslog client bound to one destination.

    Parameters mirror :meth:`set`; ``clock``, ``console``, ``transport_factory``
    and ``pid`` exist so tests and embedding applications can swap the
    collaborators.
    """

    def __init__(
        self,
        tag: str | None = None,
        facility: FacilityLike = None,
        hostname: str | None = None,
        syslog_host: str | None = None,
        protocol: TransportProtocol | str | None = None,
        quiet: bool | None = None,
        *,
        clock: ClockPort | None = None,
        console: ConsolePort | None = None,
        transport_factory: TransportFactory | None = None,
        pid: int | None = None,
    ) -> None:
        self._clock = clock or _SystemClock()
        self._console = console or RichConsoleAdapter()
        self._transport_factory = transport_factory or create_transport
        self._pid = pid
        self._times: dict[str, float] = {}
        self._dispatcher = TransportDispatcher(
            _build_config(tag, facility, hostname, syslog_host, protocol, quiet),
            self._transport_factory,
            clock=self._clock,
            console=self._console,
            pid=pid,
        )

    # -- configuration -------------------------------------------------

    @property
    def config(self) -> EndpointConfig:
        return self._dispatcher.config

    @property
    def dispatcher(self) -> TransportDispatcher:
        return self._dispatcher

    def set(
        self,
        tag: str | None = None,
        facility: FacilityLike = None,
        hostname: str | None = None,
        syslog_host: str | None = None,
        protocol: TransportProtocol | str | None = None,
        quiet: bool | None = None,
    ) -> "SysLogger":
        """Reset every endpoint setting; omitted values fall back to defaults.

        ``syslog_host`` accepts ``host`` or ``host:port`` (port defaults to 514).
        """
        config = _build_config(tag, facility, hostname, syslog_host, protocol, quiet)
        self._dispatcher.configure(
            tag=config.tag,
            facility=config.facility,
            hostname=config.hostname,
            syslog_host=config.syslog_host,
            port=config.port,
            protocol=config.protocol,
            quiet=config.quiet,
        )
        return self

    def set_tag(self, tag: str | None) -> "SysLogger":
        self._dispatcher.set_tag(tag)
        return self

    def set_facility(self, facility: FacilityLike) -> "SysLogger":
        self._dispatcher.set_facility(facility)
        return self

    def set_hostname(self, hostname: str | None) -> "SysLogger":
        self._dispatcher.set_hostname(hostname)
        return self

    def set_syslog_host(self, host: str | None) -> "SysLogger":
        self._dispatcher.set_syslog_host(host)
        return self

    def set_port(self, port: int | str | None) -> "SysLogger":
        self._dispatcher.set_port(port)
        return self

    def set_protocol(self, protocol: TransportProtocol | str | None) -> "SysLogger":
        self._dispatcher.set_protocol(protocol)
        return self

    def set_quiet(self, quiet: bool | None) -> "SysLogger":
        self._dispatcher.set_quiet(quiet)
        return self

    def get(self, *args: Any, **kwargs: Any) -> "SysLogger":
        """Return a new, independent logger configured like :meth:`set`.

        The new instance shares the clock, console and transport factory but
        none of the connection state.
        """
        return SysLogger(
            *args,
            clock=self._clock,
            console=self._console,
            transport_factory=self._transport_factory,
            pid=self._pid,
            **kwargs,
        )

    # -- events --------------------------------------------------------

    def add_error_listener(self, listener: ErrorListener) -> ErrorListener:
        """Register ``listener`` for every delivery failure of this logger."""
        return self._dispatcher.add_error_listener(listener)

    def remove_error_listener(self, listener: ErrorListener) -> None:
        self._dispatcher.remove_error_listener(listener)

    on_error = add_error_listener

    # -- sending -------------------------------------------------------

    def send(
        self,
        message: str,
        severity: SeverityLike = None,
        tag: str | None = None,
        on_done: DoneCallback | None = None,
    ) -> SendResult:
        """Send ``message`` verbatim; see :meth:`TransportDispatcher.send`."""
        return self._dispatcher.send(message, severity, tag, on_done)

    def log(self, *args: Any) -> SendResult:
        """Format ``args`` and send them with notice severity."""
        return self.send(format_message(*args), Severity.notice)

    notice = log

    def info(self, *args: Any) -> SendResult:
        return self.send(format_message(*args), Severity.info)

    def warn(self, *args: Any) -> SendResult:
        return self.send(format_message(*args), Severity.warn)

    def error(self, *args: Any) -> SendResult:
        return self.send(format_message(*args), Severity.err)

    def dir(self, obj: Any) -> SendResult:
        """Send a pretty-printed rendering of ``obj`` with notice severity."""
        return self.send(pretty_repr(obj) + "\n", Severity.notice)

    def time(self, label: str) -> None:
        """Start the named timer ``label``."""
        self._times[label] = time.perf_counter()

    def time_end(self, label: str) -> SendResult:
        """Stop ``label`` and send ``"label: <ms>ms"`` with notice severity.

        An unknown label is logged locally and nothing is sent.
        """
        started = self._times.pop(label, None)
        if started is None:
            LOGGER.warning("No such timer label: %r", label)
            return None
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        return self.log("%s: %dms", label, elapsed_ms)

    def trace(self, label: str = "") -> SendResult:
        """Send ``"Trace: label"`` plus the caller's stack with error severity."""
        stack = "".join(traceback.format_stack()[:-1])
        return self.send(f"Trace: {label}\n{stack}".rstrip("\n"), Severity.err)

    def assert_(self, expression: Any, *args: Any) -> SendResult:
        """Send the formatted ``args`` with error severity when ``expression`` is falsy."""
        if expression:
            return None
        return self.send(format_message(*args), Severity.err)

    # -- lifecycle -----------------------------------------------------

    def flush(self, timeout: float | None = None) -> bool:
        """Block until sends issued outside an event loop have completed."""
        return self._dispatcher.flush(timeout)

    def close(self, timeout: float | None = None) -> bool:
        """Finish synchronous sends and release the connection and background loop."""
        return self._dispatcher.close(timeout)

    async def drain(self) -> None:
        """Wait for every scheduled send to complete."""
        await self._dispatcher.drain()

    async def aclose(self) -> None:
        """Wait for scheduled sends and close the connection, if any."""
        await self._dispatcher.aclose()


def _build_config(
    tag: str | None,
    facility: FacilityLike,
    hostname: str | None,
    syslog_host: str | None,
    protocol: TransportProtocol | str | None,
    quiet: bool | None,
) -> EndpointConfig:
    host, port = parse_destination(syslog_host)
    return EndpointConfig(
        tag=tag or default_tag(),
        facility=resolve_facility(facility),
        hostname=hostname or "localhost",
        syslog_host=host,
        port=port,
        protocol=TransportProtocol.from_value(protocol),
        quiet=bool(quiet),
    )


__all__ = ["SysLogger"]

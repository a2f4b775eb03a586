"""Transport dispatcher owning one syslog destination.

Purpose
-------
Turn a message into a frame, hand it to the transport strategy selected by the
endpoint configuration, and report the outcome.

Contents
--------
* :class:`TransportDispatcher` - per-instance state: configuration, the current
  transport strategy, error listeners and in-flight deliveries.

System Role
-----------
Application-layer service used by :class:`lib_log_syslog.SysLogger`. It only
knows the transport through :class:`TransportPort`; the composition root passes
a factory that builds the TCP or UDP adapter for the configured protocol.

Failure signalling
------------------
A failed delivery never raises from :meth:`TransportDispatcher.send`; invalid
configuration is rejected earlier, by the setters. The error is handed to every
registered error listener, to the per-send ``on_done`` callback and, unless the
endpoint is ``quiet``, to the diagnostic console.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from collections.abc import Callable
from typing import Any, Optional

from lib_log_syslog.domain.config import EndpointConfig, TransportProtocol, coerce_port, default_tag
from lib_log_syslog.domain.errors import SyslogTransportError
from lib_log_syslog.domain.frame import Frame, encode
from lib_log_syslog.domain.levels import FacilityLike, SeverityLike, resolve_facility, resolve_severity

from .background import BackgroundLoop
from .ports import ClockPort, ConsolePort, TransportFactory, TransportPort

LOGGER = logging.getLogger(__name__)

ErrorListener = Callable[[SyslogTransportError], None]
DoneCallback = Callable[[Optional[SyslogTransportError]], None]

_TRANSPORT_FIELDS = ("protocol", "syslog_host", "port")


class TransportDispatcher:
    """Encode messages and deliver them through the configured transport.

    Inside a running event loop :meth:`send` schedules the delivery and returns
    the :class:`asyncio.Task`; the task result is the error or ``None``.
    Without a running loop the delivery is submitted to a background loop
    owned by the dispatcher and a :class:`concurrent.futures.Future` is
    returned; the call never waits for the network. The background loop keeps
    the TCP stream open between such sends until :meth:`close`.
    """

    def __init__(
        self,
        config: EndpointConfig,
        transport_factory: TransportFactory,
        *,
        clock: ClockPort,
        console: ConsolePort | None = None,
        pid: int | None = None,
    ) -> None:
        self._config = config
        self._factory = transport_factory
        self._clock = clock
        self._console = console
        self._pid = pid
        self._listeners: list[ErrorListener] = []
        self._inflight: set[asyncio.Task[Any]] = set()
        self._background = BackgroundLoop()
        self._transport = transport_factory(config, self._on_transport_error)

    @property
    def config(self) -> EndpointConfig:
        return self._config

    @property
    def transport(self) -> TransportPort:
        return self._transport

    @property
    def state(self) -> Any:
        """Connection state of a stream transport, ``None`` for datagrams."""
        return getattr(self._transport, "state", None)

    def send(
        self,
        message: str,
        severity: SeverityLike = None,
        tag: str | None = None,
        on_done: DoneCallback | None = None,
    ) -> asyncio.Task[SyslogTransportError | None] | concurrent.futures.Future[SyslogTransportError | None]:
        """Encode ``message`` and deliver it.

        Parameters
        ----------
        message:
            Message body; non-string values are rendered with :func:`str`.
        severity:
            :class:`Severity`, raw number or severity name; ``None`` is notice.
        tag:
            Overrides the configured tag for this send.
        on_done:
            Called with ``None`` on success or the error on failure.
        """
        config = self._config
        frame = encode(
            config,
            resolve_severity(severity),
            tag or config.tag,
            str(message),
            self._clock.now(),
            pid=self._pid,
        )
        transport = self._transport
        loop = _running_loop()
        if loop is None:
            return self._background.submit(self._deliver(transport, frame, config, on_done))
        task = loop.create_task(self._deliver(transport, frame, config, on_done))
        self._track(task)
        return task

    def add_error_listener(self, listener: ErrorListener) -> ErrorListener:
        """Register ``listener`` for every delivery failure; usable as a decorator."""
        self._listeners.append(listener)
        return listener

    def remove_error_listener(self, listener: ErrorListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def configure(self, **changes: Any) -> "TransportDispatcher":
        """Replace configuration fields for subsequent sends.

        Changing ``protocol``, ``syslog_host`` or ``port`` swaps in a new
        transport; the previous one finishes its in-flight sends and then
        releases its connection.
        """
        previous = self._config
        updated = previous.replace(**changes)
        self._config = updated
        if any(getattr(previous, name) != getattr(updated, name) for name in _TRANSPORT_FIELDS):
            self._swap_transport()
        return self

    def set_tag(self, tag: str | None) -> "TransportDispatcher":
        return self.configure(tag=tag or default_tag())

    def set_facility(self, facility: FacilityLike) -> "TransportDispatcher":
        return self.configure(facility=resolve_facility(facility))

    def set_hostname(self, hostname: str | None) -> "TransportDispatcher":
        return self.configure(hostname=hostname or "localhost")

    def set_syslog_host(self, host: str | None) -> "TransportDispatcher":
        return self.configure(syslog_host=host or "localhost")

    def set_port(self, port: int | str | None) -> "TransportDispatcher":
        return self.configure(port=coerce_port(port))

    def set_protocol(self, protocol: TransportProtocol | str | None) -> "TransportDispatcher":
        return self.configure(protocol=TransportProtocol.from_value(protocol))

    def set_quiet(self, quiet: bool | None) -> "TransportDispatcher":
        return self.configure(quiet=bool(quiet))

    async def drain(self) -> None:
        """Wait until every delivery scheduled on the running loop has completed."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def aclose(self) -> None:
        """Drain in-flight deliveries and close the current transport."""
        await self.drain()
        await self._transport.aclose()

    def flush(self, timeout: float | None = None) -> bool:
        """Block until sends issued outside an event loop have completed.

        Returns ``False`` when ``timeout`` expired first.
        """
        return self._background.flush(timeout)

    def close(self, timeout: float | None = None) -> bool:
        """Finish synchronous sends, close the transport and stop the background loop.

        Returns ``False`` when pending sends did not finish within ``timeout``.
        """
        if self._background.is_running():
            self._background.submit(self._transport.aclose())
            return self._background.stop(timeout)
        self._transport.close_nowait()
        return True

    async def _deliver(
        self,
        transport: TransportPort,
        frame: Frame,
        config: EndpointConfig,
        on_done: DoneCallback | None,
    ) -> SyslogTransportError | None:
        try:
            await transport.send(frame)
        except SyslogTransportError as error:
            self._report(error, config)
            self._complete(on_done, error)
            return error
        self._complete(on_done, None)
        return None

    def _swap_transport(self) -> None:
        retired = self._transport
        self._transport = self._factory(self._config, self._on_transport_error)
        LOGGER.debug("Switched transport to %s %s", self._config.protocol.value, self._config.destination)
        loop = _running_loop()
        if loop is not None:
            self._track(loop.create_task(retired.aclose()))
        elif self._background.is_running():
            self._background.submit(retired.aclose())
        else:
            retired.close_nowait()

    def _track(self, task: asyncio.Task[Any]) -> None:
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    def _on_transport_error(self, error: SyslogTransportError) -> None:
        self._report(error, self._config)

    def _report(self, error: SyslogTransportError, config: EndpointConfig) -> None:
        LOGGER.debug("Syslog delivery to %s failed: %s", error.destination, error)
        if not config.quiet and self._console is not None:
            self._console.emit(error)
        for listener in list(self._listeners):
            try:
                listener(error)
            except Exception:
                LOGGER.exception("Syslog error listener %r raised", listener)

    @staticmethod
    def _complete(on_done: DoneCallback | None, error: SyslogTransportError | None) -> None:
        if on_done is None:
            return
        try:
            on_done(error)
        except Exception:
            LOGGER.exception("Syslog completion callback %r raised", on_done)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


__all__ = ["DoneCallback", "ErrorListener", "TransportDispatcher"]

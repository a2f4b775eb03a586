"""Stream (TCP) transport with a lazily established, reused connection.

Purpose
-------
Keep at most one connection to the collector and serialise every send behind a
single connect attempt.

State machine
-------------
``DISCONNECTED``
    No handle. A send queues its frame and starts the one connect attempt.
``CONNECTING``
    Attempt in flight. Further sends queue behind it, in call order.
``OPEN``
    Sends write directly. A failed write, a peer close or a socket error
    discards the handle and returns to ``DISCONNECTED`` so the next send
    reconnects from scratch.

A failed connect fails every queued send with :class:`SyslogConnectError`; it is
never retried automatically.
When the owning event loop shuts down the stream is released with it, and
:meth:`TcpTransport.close_nowait` drops it from any thread.

System Role
-----------
Concrete :class:`TransportPort` built by
:func:`lib_log_syslog.adapters.transport.create_transport` for ``tcp``
endpoints.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from contextlib import suppress
from enum import Enum
from typing import Any

from lib_log_syslog.application.ports.transport import ErrorSink, TransportPort
from lib_log_syslog.domain.errors import SyslogConnectError, SyslogWriteError
from lib_log_syslog.domain.frame import Frame

LOGGER = logging.getLogger(__name__)

Connector = Callable[[str, int], Awaitable[tuple[asyncio.StreamReader, asyncio.StreamWriter]]]


class ConnectionState(Enum):
    """Lifecycle of the stream handle."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"


class TcpTransport(TransportPort):
    """Deliver newline-terminated frames over one reusable stream."""

    def __init__(
        self,
        host: str,
        port: int,
        *,
        on_error: ErrorSink | None = None,
        connector: Connector | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._on_error = on_error
        self._connector: Connector = connector or asyncio.open_connection
        self._state = ConnectionState.DISCONNECTED
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._pending: deque[tuple[Frame, asyncio.Future[None]]] = deque()
        self._connect_task: asyncio.Task[None] | None = None
        self._watch_task: asyncio.Task[None] | None = None
        self.connect_attempts = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def pending(self) -> int:
        """Number of frames queued behind the current connect attempt."""
        return len(self._pending)

    async def send(self, frame: Frame) -> None:
        loop = asyncio.get_running_loop()
        if self._state is ConnectionState.OPEN:
            writer = self._writer
            if writer is not None and self._usable(writer, loop):
                await self._write(writer, (frame,))
                return
            self._discard()

        waiter: asyncio.Future[None] = loop.create_future()
        self._pending.append((frame, waiter))
        if self._state is ConnectionState.DISCONNECTED:
            self._state = ConnectionState.CONNECTING
            self._connect_task = loop.create_task(self._establish())
        await waiter

    async def aclose(self) -> None:
        """Let a connect attempt flush its queue, then close the stream."""
        loop = asyncio.get_running_loop()
        task = self._connect_task
        if task is not None and not task.done() and task.get_loop() is loop:
            await asyncio.wait([task])
        writer, owner = self._writer, self._loop
        self._discard()
        if writer is not None and owner is loop:
            with suppress(OSError, RuntimeError):
                await writer.wait_closed()

    def close_nowait(self) -> None:
        """Drop the stream without waiting; callable from any thread."""
        self._discard()

    async def _establish(self) -> None:
        self.connect_attempts += 1
        LOGGER.debug("Connecting to syslog collector %s:%s", self._host, self._port)
        try:
            reader, writer = await self._connector(self._host, self._port)
        except (OSError, UnicodeError, ValueError, OverflowError) as exc:
            self._state = ConnectionState.DISCONNECTED
            error = SyslogConnectError(
                f"Can't connect to {self._host}:{self._port}: {exc}",
                host=self._host,
                port=self._port,
                protocol="tcp",
            )
            error.__cause__ = exc
            self._fail_pending(error)
            return
        except BaseException as exc:
            self._state = ConnectionState.DISCONNECTED
            self._fail_pending(exc)
            raise

        loop = asyncio.get_running_loop()
        self._reader, self._writer, self._loop = reader, writer, loop
        self._state = ConnectionState.OPEN
        self._watch_task = loop.create_task(self._watch(reader, writer))
        LOGGER.debug("Connected to syslog collector %s:%s", self._host, self._port)

        batch = list(self._pending)
        self._pending.clear()
        try:
            await self._write(writer, (frame for frame, _ in batch))
        except SyslogWriteError as error:
            for _, waiter in batch:
                if not waiter.done():
                    waiter.set_exception(error)
            return
        for _, waiter in batch:
            if not waiter.done():
                waiter.set_result(None)

    async def _write(self, writer: asyncio.StreamWriter, frames: Iterable[Frame]) -> None:
        try:
            for frame in frames:
                writer.write(frame.data)
            await writer.drain()
        except OSError as exc:
            if self._writer is writer:
                self._discard()
            raise SyslogWriteError(
                f"Can't write to {self._host}:{self._port}: {exc}",
                host=self._host,
                port=self._port,
                protocol="tcp",
            ) from exc

    async def _watch(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        # Collectors never answer; reading only detects close and reset.
        try:
            while await reader.read(4096):
                pass
        except asyncio.CancelledError:
            # The owning loop is shutting down; release the socket with it.
            if self._writer is writer:
                self._discard()
            raise
        except OSError as exc:
            if self._writer is writer:
                self._discard()
                self._notify(
                    SyslogWriteError(
                        f"Connection to {self._host}:{self._port} lost: {exc}",
                        host=self._host,
                        port=self._port,
                        protocol="tcp",
                    )
                )
            return
        if self._writer is writer:
            LOGGER.debug("Syslog collector %s:%s closed the connection", self._host, self._port)
            self._discard()

    def _usable(self, writer: asyncio.StreamWriter, loop: asyncio.AbstractEventLoop) -> bool:
        return self._loop is loop and not writer.is_closing()

    def _discard(self) -> None:
        writer, watcher, owner = self._writer, self._watch_task, self._loop
        self._reader = self._writer = None
        self._loop = None
        self._watch_task = None
        if self._state is ConnectionState.OPEN:
            self._state = ConnectionState.DISCONNECTED
        if owner is not None and owner is not _running_loop() and not owner.is_closed():
            # Handles must be released on the thread running their loop.
            try:
                owner.call_soon_threadsafe(_release, writer, watcher)
                return
            except RuntimeError:
                pass
        _release(writer, watcher)

    def _fail_pending(self, error: BaseException) -> None:
        while self._pending:
            _, waiter = self._pending.popleft()
            if not waiter.done():
                waiter.set_exception(error)

    def _notify(self, error: SyslogWriteError) -> None:
        if self._on_error is not None:
            self._on_error(error)


def _release(writer: asyncio.StreamWriter | None, watcher: asyncio.Task[None] | None) -> None:
    if watcher is not None and watcher is not _current_task():
        watcher.cancel()
    if writer is not None:
        # The owning loop may already be closed.
        with suppress(RuntimeError):
            writer.close()


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def _current_task() -> Any:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


__all__ = ["ConnectionState", "Connector", "TcpTransport"]

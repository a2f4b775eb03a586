"""Event loop on a daemon thread for callers without a running loop.

Purpose
-------
Let plain synchronous code send syslog frames without blocking: work is
submitted to a private event loop that lives as long as its owner, so a TCP
stream opened for one send is reused by the next.

Contents
--------
* :class:`BackgroundLoop` - start-on-demand loop thread with drain-on-stop
  semantics.

System Role
-----------
Owned one per :class:`~lib_log_syslog.application.dispatcher.TransportDispatcher`.
The thread is a daemon; an ``atexit`` hook drains and stops it so frames
submitted just before interpreter exit are still written.
"""

from __future__ import annotations

import asyncio
import atexit
import concurrent.futures
import logging
import threading
from collections.abc import Coroutine
from typing import Any, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class BackgroundLoop:
    """Run coroutines on a private event loop hosted by a daemon thread.

    Examples
    --------
    >>> async def answer() -> int:
    ...     return 42
    >>> runner = BackgroundLoop()
    >>> runner.submit(answer()).result(timeout=5)
    42
    >>> runner.stop()
    True
    >>> runner.is_running()
    False
    """

    def __init__(self, *, name: str = "lib_log_syslog-loop", stop_timeout: float | None = 5.0) -> None:
        """Create an idle runner; the thread starts on the first :meth:`submit`.

        Parameters
        ----------
        name:
            Thread name, visible in debuggers and thread dumps.
        stop_timeout:
            Default drain deadline (seconds) used by :meth:`stop`. ``None``
            waits indefinitely.
        """
        self._name = name
        self._stop_timeout = stop_timeout
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._pending: set[concurrent.futures.Future[Any]] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        return self._loop

    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> asyncio.AbstractEventLoop:
        """Start the loop thread if needed and return its event loop."""
        with self._lock:
            if self._loop is not None and self.is_running():
                return self._loop
            loop = asyncio.new_event_loop()
            ready = threading.Event()
            thread = threading.Thread(target=self._run, args=(loop, ready), name=self._name, daemon=True)
            thread.start()
            ready.wait()
            self._loop, self._thread = loop, thread
            atexit.register(self.stop)
            LOGGER.debug("Started background event loop %s", self._name)
            return loop

    def submit(self, coro: Coroutine[Any, Any, T]) -> concurrent.futures.Future[T]:
        """Schedule ``coro`` on the background loop and return immediately."""
        loop = self.start()
        future = asyncio.run_coroutine_threadsafe(coro, loop)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for submitted work; return ``False`` when ``timeout`` expired first."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = concurrent.futures.wait(pending, timeout=timeout)
        return not not_done

    def stop(self, timeout: float | None = None) -> bool:
        """Drain submitted work, stop the loop and join the thread.

        Parameters
        ----------
        timeout:
            Per-call override for the drain deadline; ``None`` uses the
            ``stop_timeout`` given at construction.

        Returns
        -------
        bool
            ``True`` when every submitted coroutine finished and the thread
            exited in time.
        """
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = self._thread = None
        if loop is None or thread is None:
            return True
        atexit.unregister(self.stop)
        effective_timeout = timeout if timeout is not None else self._stop_timeout
        drained = self.flush(effective_timeout)
        loop.call_soon_threadsafe(loop.stop)
        thread.join(effective_timeout)
        if thread.is_alive():
            LOGGER.warning("Background event loop %s did not stop within %ss", self._name, effective_timeout)
            return False
        if not drained:
            LOGGER.warning("Background event loop %s stopped with unfinished sends", self._name)
        return drained

    def _forget(self, future: concurrent.futures.Future[Any]) -> None:
        with self._lock:
            self._pending.discard(future)

    @staticmethod
    def _run(loop: asyncio.AbstractEventLoop, ready: threading.Event) -> None:
        asyncio.set_event_loop(loop)
        loop.call_soon(ready.set)
        try:
            loop.run_forever()
        finally:
            leftovers = asyncio.all_tasks(loop)
            for task in leftovers:
                task.cancel()
            if leftovers:
                loop.run_until_complete(asyncio.gather(*leftovers, return_exceptions=True))
            loop.run_until_complete(loop.shutdown_asyncgens())
            asyncio.set_event_loop(None)
            loop.close()


__all__ = ["BackgroundLoop"]

from __future__ import annotations

import socket
import threading
import time
from datetime import datetime, timezone
from io import StringIO
from typing import Callable, Iterator

import pytest
from rich.console import Console

from lib_log_syslog.domain.errors import SyslogTransportError

FIXED_NOW = datetime(2024, 3, 5, 7, 8, 9, tzinfo=timezone.utc)


class FixedClock:
    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current


class RecordingConsole:
    def __init__(self) -> None:
        self.errors: list[SyslogTransportError] = []

    def emit(self, error: SyslogTransportError) -> None:
        self.errors.append(error)


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TcpCollector:
    """Threaded TCP collector recording every byte received per connection."""

    def __init__(self) -> None:
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(8)
        self._sock.settimeout(0.05)
        self.port = self._sock.getsockname()[1]
        self.address = f"127.0.0.1:{self.port}"
        self.connections: list[socket.socket] = []
        self.accepted = 0
        self.closed = 0
        self._chunks: list[bytes] = []
        self._lock = threading.Lock()
        self._running = threading.Event()
        self._thread = threading.Thread(target=self._accept_loop, daemon=True)

    @property
    def data(self) -> bytes:
        with self._lock:
            return b"".join(self._chunks)

    def lines(self) -> list[str]:
        return [line for line in self.data.decode("utf-8").split("\n") if line]

    def start(self) -> None:
        self._running.set()
        self._thread.start()

    def drop_clients(self) -> None:
        with self._lock:
            clients, self.connections = list(self.connections), []
        for conn in clients:
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            conn.close()

    def close(self) -> None:
        self._running.clear()
        self._thread.join(timeout=1)
        self.drop_clients()
        self._sock.close()

    def _accept_loop(self) -> None:
        while self._running.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            with self._lock:
                self.connections.append(conn)
                self.accepted += 1
            threading.Thread(target=self._read_loop, args=(conn,), daemon=True).start()

    def _read_loop(self, conn: socket.socket) -> None:
        while True:
            try:
                chunk = conn.recv(4096)
            except OSError:
                return
            if not chunk:
                with self._lock:
                    self.closed += 1
                return
            with self._lock:
                self._chunks.append(chunk)


class UdpCollector:
    """Threaded UDP collector recording every datagram."""

    def __init__(self) -> None:
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.settimeout(0.05)
        self.port = self._sock.getsockname()[1]
        self.address = f"127.0.0.1:{self.port}"
        self.datagrams: list[bytes] = []
        self._running = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self) -> None:
        self._running.set()
        self._thread.start()

    def close(self) -> None:
        self._running.clear()
        self._thread.join(timeout=1)
        self._sock.close()

    def _run(self) -> None:
        while self._running.is_set():
            try:
                data, _ = self._sock.recvfrom(65535)
            except socket.timeout:
                continue
            except OSError:
                break
            self.datagrams.append(data)


@pytest.fixture(name="wait_until")
def wait_until_fixture() -> Callable[..., bool]:
    return wait_until


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def recording_console() -> RecordingConsole:
    return RecordingConsole()


@pytest.fixture
def record_console() -> Console:
    return Console(file=StringIO(), record=True, width=200)


@pytest.fixture
def tcp_collector() -> Iterator[TcpCollector]:
    collector = TcpCollector()
    collector.start()
    try:
        yield collector
    finally:
        collector.close()


@pytest.fixture
def udp_collector() -> Iterator[UdpCollector]:
    collector = UdpCollector()
    collector.start()
    try:
        yield collector
    finally:
        collector.close()


@pytest.fixture
def closed_port() -> int:
    """Return a localhost port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port

from __future__ import annotations

import asyncio
from typing import Callable

import pytest

from lib_log_syslog.adapters.transport.tcp import ConnectionState, TcpTransport
from lib_log_syslog.application.background import BackgroundLoop
from lib_log_syslog.domain.errors import SyslogConnectError, SyslogTransportError, SyslogWriteError
from lib_log_syslog.domain.frame import Frame


def _frame(body: str) -> Frame:
    return Frame(text=f"<13>2024-03-05 07:08:09 web01 app[1]: {body}\n", priority=13)


async def _until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            return False
        await asyncio.sleep(0.01)
    return True


class _FakeWriter:
    def __init__(self) -> None:
        self.written: list[bytes] = []
        self.fail = False
        self.closed = False

    def write(self, data: bytes) -> None:
        if self.fail:
            raise BrokenPipeError("broken pipe")
        self.written.append(data)

    async def drain(self) -> None:
        return None

    def is_closing(self) -> bool:
        return self.closed

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        return None


class _ResettingReader:
    def __init__(self) -> None:
        self.reset = asyncio.Event()

    async def read(self, size: int) -> bytes:
        await self.reset.wait()
        raise ConnectionResetError("connection reset by peer")


class _FakeConnector:
    def __init__(self, reader_factory: Callable[[], object] | None = None) -> None:
        self.writers: list[_FakeWriter] = []
        self.readers: list[object] = []
        self._reader_factory = reader_factory or asyncio.StreamReader

    async def __call__(self, host: str, port: int):
        await asyncio.sleep(0)
        reader, writer = self._reader_factory(), _FakeWriter()
        self.readers.append(reader)
        self.writers.append(writer)
        return reader, writer


def test_concurrent_sends_share_one_connect_attempt_in_order(tcp_collector, wait_until) -> None:
    transport = TcpTransport("127.0.0.1", tcp_collector.port)

    async def scenario() -> None:
        await asyncio.gather(transport.send(_frame("one")), transport.send(_frame("two")), transport.send(_frame("three")))
        assert transport.state is ConnectionState.OPEN
        await transport.aclose()

    asyncio.run(scenario())

    assert transport.connect_attempts == 1
    assert wait_until(lambda: len(tcp_collector.lines()) == 3)
    assert [line.rsplit(": ", 1)[1] for line in tcp_collector.lines()] == ["one", "two", "three"]
    assert tcp_collector.accepted == 1


def test_open_connection_is_reused(tcp_collector, wait_until) -> None:
    transport = TcpTransport("127.0.0.1", tcp_collector.port)

    async def scenario() -> None:
        await transport.send(_frame("first"))
        await transport.send(_frame("second"))
        await transport.aclose()

    asyncio.run(scenario())

    assert transport.connect_attempts == 1
    assert wait_until(lambda: len(tcp_collector.lines()) == 2)
    assert tcp_collector.accepted == 1


def test_frames_arrive_byte_exact(tcp_collector, wait_until) -> None:
    transport = TcpTransport("127.0.0.1", tcp_collector.port)
    frame = _frame("grüße")

    async def scenario() -> None:
        await transport.send(frame)
        await transport.aclose()

    asyncio.run(scenario())

    assert wait_until(lambda: tcp_collector.data == frame.data)


def test_connect_failure_fails_every_queued_send(closed_port: int) -> None:
    transport = TcpTransport("127.0.0.1", closed_port)

    async def scenario() -> list[object]:
        return await asyncio.gather(
            transport.send(_frame("a")),
            transport.send(_frame("b")),
            return_exceptions=True,
        )

    results = asyncio.run(scenario())

    assert len(results) == 2
    assert all(isinstance(result, SyslogConnectError) for result in results)
    assert results[0].destination == f"127.0.0.1:{closed_port}"
    assert transport.state is ConnectionState.DISCONNECTED
    assert transport.pending == 0
    assert transport.connect_attempts == 1


def test_failed_connect_is_not_retried_until_next_send(closed_port: int) -> None:
    transport = TcpTransport("127.0.0.1", closed_port)

    async def scenario() -> None:
        with pytest.raises(SyslogConnectError):
            await transport.send(_frame("a"))
        await asyncio.sleep(0.05)
        assert transport.connect_attempts == 1
        with pytest.raises(SyslogConnectError):
            await transport.send(_frame("b"))

    asyncio.run(scenario())
    assert transport.connect_attempts == 2


def test_write_failure_discards_handle_and_next_send_reconnects() -> None:
    connector = _FakeConnector()
    transport = TcpTransport("collector", 514, connector=connector)

    async def scenario() -> None:
        await transport.send(_frame("ok"))
        connector.writers[0].fail = True

        with pytest.raises(SyslogWriteError):
            await transport.send(_frame("lost"))
        assert transport.state is ConnectionState.DISCONNECTED
        assert connector.writers[0].closed is True

        await transport.send(_frame("again"))
        assert transport.state is ConnectionState.OPEN
        await transport.aclose()

    asyncio.run(scenario())

    assert transport.connect_attempts == 2
    assert connector.writers[0].written == [_frame("ok").data]
    assert connector.writers[1].written == [_frame("again").data]


def test_socket_error_notifies_and_disconnects() -> None:
    connector = _FakeConnector(_ResettingReader)
    errors: list[SyslogTransportError] = []
    transport = TcpTransport("collector", 514, on_error=errors.append, connector=connector)

    async def scenario() -> None:
        await transport.send(_frame("ok"))
        connector.readers[0].reset.set()
        assert await _until(lambda: transport.state is ConnectionState.DISCONNECTED)

    asyncio.run(scenario())

    assert len(errors) == 1
    assert isinstance(errors[0], SyslogWriteError)
    assert errors[0].protocol == "tcp"
    assert connector.writers[0].closed is True


def test_peer_close_returns_to_disconnected(tcp_collector, wait_until) -> None:
    transport = TcpTransport("127.0.0.1", tcp_collector.port)

    async def scenario() -> None:
        await transport.send(_frame("before"))
        assert await _until(lambda: tcp_collector.accepted == 1)
        tcp_collector.drop_clients()
        assert await _until(lambda: transport.state is ConnectionState.DISCONNECTED)
        await transport.send(_frame("after"))
        await transport.aclose()

    asyncio.run(scenario())

    assert transport.connect_attempts == 2
    assert wait_until(lambda: tcp_collector.accepted == 2)


def test_aclose_flushes_a_connect_in_progress(tcp_collector, wait_until) -> None:
    transport = TcpTransport("127.0.0.1", tcp_collector.port)

    async def scenario() -> None:
        task = asyncio.get_running_loop().create_task(transport.send(_frame("queued")))
        await asyncio.sleep(0)
        assert transport.state is ConnectionState.CONNECTING
        await transport.aclose()
        assert await task is None

    asyncio.run(scenario())

    assert transport.state is ConnectionState.DISCONNECTED
    assert wait_until(lambda: tcp_collector.lines() == [_frame("queued").text.rstrip("\n")])


def test_aclose_without_connection_is_noop() -> None:
    transport = TcpTransport("127.0.0.1", 9)

    asyncio.run(transport.aclose())

    assert transport.state is ConnectionState.DISCONNECTED
    assert transport.connect_attempts == 0


@pytest.mark.parametrize("port", [70000, -1])
def test_out_of_range_port_fails_as_connect_error(port: int) -> None:
    transport = TcpTransport("127.0.0.1", port)

    async def scenario() -> None:
        with pytest.raises(SyslogConnectError) as excinfo:
            await transport.send(_frame("nowhere"))
        assert excinfo.value.destination == f"127.0.0.1:{port}"

    asyncio.run(scenario())

    assert transport.state is ConnectionState.DISCONNECTED
    assert transport.pending == 0


def test_loop_shutdown_releases_open_stream(tcp_collector, wait_until) -> None:
    transport = TcpTransport("127.0.0.1", tcp_collector.port)

    async def scenario() -> None:
        await transport.send(_frame("left open"))
        assert transport.state is ConnectionState.OPEN

    asyncio.run(scenario())

    assert transport.state is ConnectionState.DISCONNECTED
    assert wait_until(lambda: tcp_collector.closed == 1)
    assert tcp_collector.lines() == [_frame("left open").text.rstrip("\n")]


def test_close_nowait_from_another_thread_releases_stream(tcp_collector, wait_until) -> None:
    transport = TcpTransport("127.0.0.1", tcp_collector.port)
    runner = BackgroundLoop(name="tcp-test-loop")
    try:
        runner.submit(transport.send(_frame("opened elsewhere"))).result(timeout=5)
        assert transport.state is ConnectionState.OPEN

        transport.close_nowait()

        assert transport.state is ConnectionState.DISCONNECTED
        assert wait_until(lambda: tcp_collector.closed == 1)
    finally:
        assert runner.stop(timeout=5) is True

"""Tests for the WebSocket relay and its transport."""

import asyncio
from collections.abc import AsyncIterator, Callable

import pytest
from aiohttp.test_utils import TestServer

from aiosyncbeat.config import RoomConfig
from aiosyncbeat.discovery import build_relay_url
from aiosyncbeat.room import Room
from aiosyncbeat.transport import TransportUnavailableError
from aiosyncbeat.transport.relay import RelayServer, WebSocketTransport

from .helpers import FakeClock, FakeDriver


async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.01)


@pytest.fixture
def relay() -> RelayServer:
    return RelayServer()


@pytest.fixture
async def relay_url(relay: RelayServer) -> AsyncIterator[str]:
    server = TestServer(relay.app)
    await server.start_server()
    yield build_relay_url(server.host, server.port)
    await server.close()


async def test_broadcast_reaches_other_members_only(
    relay: RelayServer, relay_url: str
) -> None:
    first, second, elsewhere = (WebSocketTransport(relay_url) for _ in range(3))
    received: dict[str, list[str | bytes]] = {"first": [], "second": [], "elsewhere": []}
    try:
        await first.open("1234", received["first"].append)
        await second.open("1234", received["second"].append)
        await elsewhere.open("9999", received["elsewhere"].append)
        await _wait_until(lambda: relay.members("1234") == 2 and relay.members("9999") == 1)

        await first.send('{"hello": 1}')
        await _wait_until(lambda: bool(received["second"]))

        assert received["second"] == ['{"hello": 1}']
        assert received["first"] == []
        assert received["elsewhere"] == []
        assert first.room_id == "1234"
    finally:
        for transport in (first, second, elsewhere):
            await transport.close()

    await _wait_until(lambda: relay.members("1234") == 0)


async def test_send_requires_open_channel(relay_url: str) -> None:
    transport = WebSocketTransport(relay_url)

    with pytest.raises(TransportUnavailableError):
        await transport.send("{}")
    assert not transport.connected
    assert transport.room_id is None


async def test_rooms_sync_through_relay(relay_url: str) -> None:
    clock = FakeClock()
    config = RoomConfig(drift_check_interval=3600, host_broadcast_interval=3600, join_delay=0)
    host = Room(WebSocketTransport(relay_url), FakeDriver(), config=config, clock=clock)
    listener = Room(WebSocketTransport(relay_url), FakeDriver(), config=config, clock=clock)
    try:
        code = await host.create("Alice")
        track = host.add_track("https://youtu.be/aaaaaaaaaaa")
        await listener.join(code, "Bob")

        await _wait_until(lambda: len(listener.members) == 2 and listener.queue == [track])

        host.toggle_play()
        await _wait_until(lambda: listener.cursor.is_playing)
        assert listener.cursor == host.cursor
    finally:
        await listener.leave()
        await host.leave()


async def test_relay_start_and_stop() -> None:
    relay = RelayServer()

    await relay.start("127.0.0.1", 0)
    await relay.stop()


def test_build_relay_url() -> None:
    assert build_relay_url("192.168.1.5", 8927) == "ws://192.168.1.5:8927"
    assert build_relay_url("fe80::1", 8927) == "ws://[fe80::1]:8927"

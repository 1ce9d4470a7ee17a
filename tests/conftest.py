"""Shared fixtures for room tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest

from aiosyncbeat.config import RoomConfig
from aiosyncbeat.room import Room

from .helpers import CapturingTransport, FakeClock, FakeDriver, flush


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def transport() -> CapturingTransport:
    return CapturingTransport()


@pytest.fixture
def config() -> RoomConfig:
    # Periodic steps are triggered by hand in tests.
    return RoomConfig(drift_check_interval=3600, host_broadcast_interval=3600, join_delay=0)


@pytest.fixture
def room(
    transport: CapturingTransport, driver: FakeDriver, config: RoomConfig, clock: FakeClock
) -> Room:
    return Room(transport, driver, config=config, clock=clock)


@pytest.fixture
async def host_room(room: Room) -> AsyncIterator[Room]:
    await room.create("Alice", room_id="1234")
    yield room
    await room.leave()


@pytest.fixture
async def listener_room(room: Room, transport: CapturingTransport) -> AsyncIterator[Room]:
    await room.join("1234", "Bob")
    await flush()
    transport.clear()
    yield room
    await room.leave()

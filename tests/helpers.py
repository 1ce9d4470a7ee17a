"""Test doubles for rooms: a controllable clock, driver and transport."""

from __future__ import annotations

import asyncio
from typing import Any

from aiosyncbeat.codec import decode_message, encode_message
from aiosyncbeat.driver import PlaybackDriver
from aiosyncbeat.models import DriverState, RoomMessage, Track
from aiosyncbeat.transport import DataCallback, Transport, TransportUnavailableError


async def flush(rounds: int = 50) -> None:
    """Let queued callbacks and room tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDriver(PlaybackDriver):
    """Playback driver whose position and state are set by the test."""

    def __init__(self) -> None:
        super().__init__()
        self.supported = True
        self.failing = False
        self.position = 0.0
        self.state = DriverState.UNSTARTED
        self.loaded: Track | None = None
        self.calls: list[tuple[Any, ...]] = []

    def supports(self, track: Track) -> bool:
        return self.supported

    def get_position(self) -> float:
        self._check()
        return self.position

    def get_state(self) -> DriverState:
        self._check()
        return self.state

    def play(self) -> None:
        self._record("play")
        self.state = DriverState.PLAYING

    def pause(self) -> None:
        self._record("pause")
        self.state = DriverState.PAUSED

    def seek(self, seconds: float) -> None:
        self._record("seek", seconds)
        self.position = seconds

    def load(self, track: Track | None) -> None:
        self._record("load", track.id if track is not None else None)
        self.loaded = track
        self.position = 0.0
        self.state = DriverState.UNSTARTED

    def emit(self, state: DriverState) -> None:
        """Report ``state`` to the registered listeners."""
        self.state = state
        self._notify_state(state)

    def actions(self) -> list[str]:
        """Return the names of the recorded calls."""
        return [call[0] for call in self.calls]

    def _record(self, *call: Any) -> None:
        self._check()
        self.calls.append(call)

    def _check(self) -> None:
        if self.failing:
            raise RuntimeError("player destroyed")


class CapturingTransport(Transport):
    """Transport keeping every sent payload and delivering payloads on demand."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.opened: list[str] = []
        self.fail_open = False
        self.fail_close = False
        self._room_id: str | None = None
        self._callback: DataCallback | None = None

    @property
    def connected(self) -> bool:
        return self._room_id is not None

    @property
    def room_id(self) -> str | None:
        return self._room_id

    async def open(self, room_id: str, callback: DataCallback) -> None:
        if self.fail_open:
            raise ConnectionError("relay unreachable")
        self.opened.append(room_id)
        self._room_id = room_id
        self._callback = callback

    async def close(self) -> None:
        self._room_id = None
        self._callback = None
        if self.fail_close:
            raise ConnectionError("socket already broken")

    async def send(self, data: str) -> None:
        if self._room_id is None:
            raise TransportUnavailableError("Not subscribed to a room")
        self.sent.append(data)

    def deliver(self, message: RoomMessage | str | bytes) -> None:
        """Hand a payload to the room as if another member had sent it."""
        assert self._callback is not None
        data = encode_message(message) if isinstance(message, RoomMessage) else message
        self._callback(data)

    def messages(self) -> list[RoomMessage]:
        """Return the sent payloads decoded."""
        decoded = [decode_message(data) for data in self.sent]
        return [message for message in decoded if message is not None]

    def clear(self) -> None:
        self.sent.clear()

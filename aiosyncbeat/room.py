"""A syncbeat room as seen by one member process."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Coroutine
from contextlib import suppress
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Self

from aiosyncbeat.codec import decode_message, encode_message
from aiosyncbeat.config import RoomConfig
from aiosyncbeat.driver import PlaybackAdapter, PlaybackDriver
from aiosyncbeat.engine import HostRole, ListenerRole, SyncRole
from aiosyncbeat.models import (
    DriverState,
    JoinMessage,
    LeaveMessage,
    Member,
    PlaybackCursor,
    RequestSyncMessage,
    RoomMessage,
    RoomSnapshot,
    Track,
)
from aiosyncbeat.resolver import TrackDescriptor, resolve_track
from aiosyncbeat.state import RoomState
from aiosyncbeat.transport import Transport, TransportUnavailableError
from aiosyncbeat.util import new_id, new_room_code

logger = logging.getLogger(__name__)

Resolver = Callable[[str], TrackDescriptor]


@dataclass(slots=True)
class _InboundData:
    """Payload delivered by the transport."""

    data: str | bytes


@dataclass(slots=True)
class _DriverStateChanged:
    """State change reported by the local playback driver."""

    state: DriverState


_RoomEvent = _InboundData | _DriverStateChanged


class Room:
    """
    Membership of one process in a synchronized listening room.

    The room owns the replicated state, the role selected when creating or joining, and
    every task: the event reader, the outbound writer, the periodic role tick and the
    one-shot join announcement. Transport deliveries and driver notifications are
    serialized through a single event queue.
    """

    def __init__(
        self,
        transport: Transport,
        driver: PlaybackDriver,
        *,
        config: RoomConfig | None = None,
        resolver: Resolver = resolve_track,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Create an inactive room.

        Args:
            transport: Broadcast channel to the other members.
            driver: Local media player rendering the current track.
            config: Timing configuration, defaults to RoomConfig().
            resolver: Function turning a URL into track metadata.
            clock: Wall clock in seconds since the epoch, shared semantics with the
                other members since cursors are anchored to it.
        """
        self._transport = transport
        self._adapter = PlaybackAdapter(driver)
        self._config = config or RoomConfig()
        self._resolver = resolver
        self._clock = clock
        self._state = RoomState()
        self._member: Member | None = None
        self._role: SyncRole | None = None
        self._room_id: str | None = None
        self._events: asyncio.Queue[_RoomEvent] = asyncio.Queue()
        self._outbox: asyncio.Queue[RoomMessage] = asyncio.Queue()
        self._tasks: list[asyncio.Task[None]] = []
        self._remove_driver_listener: Callable[[], None] | None = None

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    @property
    def active(self) -> bool:
        """Return True between create()/join() and leave()."""
        return self._role is not None

    @property
    def room_id(self) -> str | None:
        """Return the code of the room, if active."""
        return self._room_id

    @property
    def member(self) -> Member | None:
        """Return the local member, if active."""
        return self._member

    @property
    def is_host(self) -> bool:
        """Return True if the local member hosts the room."""
        return self._role is not None and self._role.is_host

    @property
    def role(self) -> SyncRole | None:
        """Return the active role."""
        return self._role

    @property
    def config(self) -> RoomConfig:
        """Return the timing configuration."""
        return self._config

    @property
    def state(self) -> RoomState:
        """Return the replicated state held by this process."""
        return self._state

    @property
    def adapter(self) -> PlaybackAdapter:
        """Return the adapter wrapping the local playback driver."""
        return self._adapter

    @property
    def resolver(self) -> Resolver:
        """Return the track resolver."""
        return self._resolver

    @property
    def members(self) -> list[Member]:
        """Return the known members."""
        return self._state.members

    @property
    def queue(self) -> list[Track]:
        """Return the queue in play order."""
        return self._state.queue

    @property
    def cursor(self) -> PlaybackCursor:
        """Return the playback cursor."""
        return self._state.cursor

    @property
    def current_track(self) -> Track | None:
        """Return the track the cursor points at."""
        return self._state.current_track()

    def now(self) -> float:
        """Return the wall clock time cursors are anchored to."""
        return self._clock()

    def snapshot(self) -> RoomSnapshot:
        """Return a copy of the full replicated state."""
        return self._state.snapshot()

    async def create(self, display_name: str, room_id: str | None = None) -> str:
        """Create a room hosted by this process and return its code."""
        room_id = room_id or new_room_code()
        member = Member(id=new_id(), display_name=display_name, is_host=True)
        await self._start(room_id, member, HostRole(self))
        logger.info("Created room %s as %s", room_id, display_name)
        return room_id

    async def join(self, room_id: str, display_name: str) -> None:
        """Join the room ``room_id`` as a listener."""
        member = Member(id=new_id(), display_name=display_name, is_host=False)
        await self._start(room_id, member, ListenerRole(self))
        self._spawn(self._announce())
        logger.info("Joining room %s as %s", room_id, display_name)

    async def leave(self) -> None:
        """Leave the room, stop every task and reset the local state."""
        if self._role is None:
            return
        member = self._member
        assert member is not None
        logger.info("Leaving room %s", self._room_id)

        current_task = asyncio.current_task()
        for task in self._tasks:
            if task is not current_task:
                task.cancel()
        for task in self._tasks:
            if task is not current_task:
                with suppress(asyncio.CancelledError):
                    await task
        self._tasks = []

        try:
            await self._transport.send(encode_message(LeaveMessage(sender_id=member.id)))
        except (TransportUnavailableError, ConnectionError) as err:
            logger.debug("Could not announce leave: %s", err)
        try:
            await self._transport.close()
        finally:
            if self._remove_driver_listener is not None:
                self._remove_driver_listener()
                self._remove_driver_listener = None
            self._adapter.unload()
            self._state.reset()
            self._events = asyncio.Queue()
            self._outbox = asyncio.Queue()
            self._role = None
            self._member = None
            self._room_id = None

    def add_track(self, url: str) -> Track:
        """Add ``url`` to the end of the queue."""
        return self._require_role().add_track(url)

    def remove_track(self, track_id: str) -> bool:
        """Remove a track. Only the host and the member that added it may do so."""
        return self._require_role().remove_track(track_id)

    def toggle_play(self) -> None:
        """Toggle play/pause. Does nothing for listeners."""
        self._require_role().toggle_play()

    def next_track(self) -> None:
        """Skip to the next track. Does nothing for listeners."""
        self._require_role().next_track()

    def play_track(self, track_id: str) -> bool:
        """Jump to a queued track. Does nothing for listeners."""
        return self._require_role().play_track(track_id)

    def seek(self, seconds: float) -> None:
        """Move the position of the current track. Does nothing for listeners."""
        self._require_role().seek(seconds)

    def request_sync(self) -> None:
        """Ask the host to resend the full room state."""
        role = self._require_role()
        self.send_message(RequestSyncMessage(sender_id=role.member.id))

    def send_message(self, message: RoomMessage) -> None:
        """Queue ``message`` for broadcast without waiting for it to be sent."""
        if not self._transport.connected:
            logger.warning(
                "Dropping %s, not connected to a room channel", type(message).__name__
            )
            return
        self._outbox.put_nowait(message)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_role(self) -> SyncRole:
        if self._role is None:
            raise RuntimeError("Room is not active")
        return self._role

    async def _start(self, room_id: str, member: Member, role: SyncRole) -> None:
        if self._role is not None:
            raise RuntimeError(f"Already in room {self._room_id}")
        self._member = member
        self._room_id = room_id
        self._state.add_member(member)
        try:
            await self._transport.open(room_id, self._on_transport_data)
        except Exception:
            self._state.reset()
            self._member = None
            self._room_id = None
            raise
        self._role = role
        self._remove_driver_listener = self._adapter.driver.add_state_listener(
            self._on_driver_state
        )
        self._spawn(self._reader())
        self._spawn(self._writer())
        self._spawn(self._tick_loop())

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.append(task)

    def _on_transport_data(self, data: str | bytes) -> None:
        self._events.put_nowait(_InboundData(data))

    def _on_driver_state(self, state: DriverState) -> None:
        self._events.put_nowait(_DriverStateChanged(state))

    async def _announce(self) -> None:
        # Give the transport time to attach before the host answers.
        await asyncio.sleep(self._config.join_delay)
        member = self._member
        if member is None:
            return
        self.send_message(JoinMessage(sender_id=member.id, payload=member))
        self.send_message(RequestSyncMessage(sender_id=member.id))

    async def _reader(self) -> None:
        while True:
            event = await self._events.get()
            try:
                self._process(event)
            except Exception:
                logger.exception("Error processing room event %s", type(event).__name__)

    def _process(self, event: _RoomEvent) -> None:
        role = self._role
        if role is None:
            return
        match event:
            case _InboundData(data=data):
                message = decode_message(data)
                if message is None:
                    return
                if message.sender_id == role.member.id:
                    return
                logger.debug("Received %s from %s", type(message).__name__, message.sender_id)
                role.handle_message(message)
            case _DriverStateChanged(state=state):
                role.handle_driver_state(state)

    async def _writer(self) -> None:
        while True:
            message = await self._outbox.get()
            try:
                await self._transport.send(encode_message(message))
            except (TransportUnavailableError, ConnectionError) as err:
                logger.warning("Failed to send %s: %s", type(message).__name__, err)
            except Exception:
                logger.exception("Unexpected error sending %s", type(message).__name__)

    async def _tick_loop(self) -> None:
        while (role := self._role) is not None:
            await asyncio.sleep(role.tick_interval)
            try:
                role.tick()
            except Exception:
                logger.exception("Error in periodic %s step", type(role).__name__)

    async def __aenter__(self) -> Self:
        """Enter the async context manager returning this instance."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Leave the room when leaving the async context manager."""
        await self.leave()

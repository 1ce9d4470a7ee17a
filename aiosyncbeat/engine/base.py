"""Behaviour shared by the host and listener roles of a room member."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from aiosyncbeat.models import (
    DriverState,
    JoinMessage,
    LeaveMessage,
    Member,
    PlaybackCursor,
    RequestSyncMessage,
    RoomMessage,
    SyncPlaybackMessage,
    Track,
    UpdateQueueMessage,
    UpdateQueuePayload,
)
from aiosyncbeat.util import new_id

# The cyclic import is not an issue during runtime, so hide it
if TYPE_CHECKING:
    from aiosyncbeat.room import Room

logger = logging.getLogger(__name__)


class SyncRole(ABC):
    """
    Protocol logic of one room member.

    A role reacts to inbound messages, mutates the room state and emits outbound
    messages through the room. Every method runs to completion without awaiting, so
    steps never interleave within a process.
    """

    is_host: bool = False

    def __init__(self, room: Room) -> None:
        """Bind the role to ``room``."""
        self._room = room

    @property
    def member(self) -> Member:
        """Return the local member."""
        member = self._room.member
        assert member is not None
        return member

    @property
    @abstractmethod
    def tick_interval(self) -> float:
        """Return the period of tick() in seconds."""

    @abstractmethod
    def tick(self) -> None:
        """Run the periodic step of this role."""

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------
    def handle_message(self, message: RoomMessage) -> None:
        """Dispatch an inbound message to its handler."""
        match message:
            case JoinMessage(payload=member):
                self._on_join(member)
            case LeaveMessage(sender_id=sender_id):
                self._on_leave(sender_id)
            case UpdateQueueMessage(payload=payload):
                self._on_update_queue(payload)
            case SyncPlaybackMessage(payload=cursor):
                self._on_sync_playback(cursor)
            case RequestSyncMessage(sender_id=sender_id):
                self._on_request_sync(sender_id)
            case _:
                logger.debug("Unhandled room message type: %s", type(message).__name__)

    def handle_driver_state(self, state: DriverState) -> None:
        """React to a state change reported by the local playback driver."""

    def _on_join(self, member: Member) -> None:
        logger.debug("Ignoring join of %s", member.id)

    def _on_leave(self, sender_id: str) -> None:
        if self._room.state.remove_member(sender_id):
            logger.info("Member %s left the room", sender_id)

    def _on_update_queue(self, payload: UpdateQueuePayload) -> None:
        self._room.state.replace_queue(payload.queue)
        logger.debug("Queue replaced, %d tracks", len(payload.queue))
        if payload.members is not None:
            self._apply_members(payload.members)

    def _apply_members(self, members: list[Member]) -> None:
        self._room.state.replace_members(members)

    def _on_sync_playback(self, cursor: PlaybackCursor) -> None:
        logger.debug("Ignoring playback sync")

    def _on_request_sync(self, sender_id: str) -> None:
        logger.debug("Ignoring sync request of %s", sender_id)

    # ------------------------------------------------------------------
    # Queue edits, allowed for every member
    # ------------------------------------------------------------------
    def add_track(self, url: str) -> Track:
        """Resolve ``url``, append it to the queue and broadcast the new queue."""
        state = self._room.state
        was_empty = not state.queue
        descriptor = self._room.resolver(url)
        track = Track(
            id=new_id(),
            source_url=url,
            platform=descriptor.platform,
            title=descriptor.title,
            thumbnail_ref=descriptor.thumbnail_ref,
            added_by=self.member.display_name,
            duration_seconds=descriptor.duration_seconds,
        )
        state.append_track(track)
        logger.info("Added track %s (%s)", track.id, track.title)
        self.broadcast_queue()
        self._after_track_added(track, was_empty)
        return track

    def _after_track_added(self, track: Track, was_empty: bool) -> None:
        """Run role specific follow-ups of a local insertion."""

    def can_remove(self, track: Track) -> bool:
        """Return True if the local member may remove ``track``."""
        return self.is_host or track.added_by == self.member.display_name

    def remove_track(self, track_id: str) -> bool:
        """Remove a track and broadcast the new queue. Return False if not allowed."""
        state = self._room.state
        track = state.find_track(track_id)
        if track is None:
            logger.debug("Track %s is not queued", track_id)
            return False
        if not self.can_remove(track):
            logger.warning("Not allowed to remove track %s added by %s", track_id, track.added_by)
            return False
        state.remove_track(track_id)
        logger.info("Removed track %s", track_id)
        self.broadcast_queue()
        return True

    def broadcast_queue(self, *, include_members: bool = False) -> None:
        """Send the whole queue, optionally with the member list."""
        state = self._room.state
        payload = UpdateQueuePayload(
            queue=state.queue,
            members=state.members if include_members else None,
        )
        self._room.send_message(UpdateQueueMessage(sender_id=self.member.id, payload=payload))

    # ------------------------------------------------------------------
    # Playback control, only the host acts on these
    # ------------------------------------------------------------------
    def toggle_play(self) -> None:
        """Toggle between playing and paused."""
        self._ignore_playback_control("toggle_play")

    def next_track(self) -> None:
        """Skip to the next queued track."""
        self._ignore_playback_control("next_track")

    def play_track(self, track_id: str) -> bool:
        """Start playing the queued track with ``track_id``."""
        self._ignore_playback_control("play_track")
        return False

    def seek(self, seconds: float) -> None:
        """Move the playback position of the current track."""
        self._ignore_playback_control("seek")

    def _ignore_playback_control(self, action: str) -> None:
        logger.info("Ignoring %s, only the host controls playback", action)

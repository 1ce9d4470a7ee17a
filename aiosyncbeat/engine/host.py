"""Host role: the single writer of playback state in a room."""

from __future__ import annotations

import logging

from aiosyncbeat.models import (
    DriverState,
    Member,
    PlaybackCursor,
    SyncPlaybackMessage,
    Track,
)

from .base import SyncRole

logger = logging.getLogger(__name__)


class HostRole(SyncRole):
    """
    Authoritative side of the room.

    Answers joins and sync requests with the full room state, re-broadcasts the playback
    cursor periodically while playing and turns local driver events into cursor updates.
    """

    is_host = True

    @property
    def tick_interval(self) -> float:
        """Return the cursor re-broadcast period."""
        return self._room.config.host_broadcast_interval

    def tick(self) -> None:
        """Re-anchor the cursor to the driver position while playing."""
        cursor = self._room.state.cursor
        if not cursor.is_playing:
            return
        now = self._room.now()
        position = self._room.adapter.position(fallback=cursor.expected_position(now))
        self._set_cursor(
            is_playing=True,
            current_track_id=cursor.current_track_id,
            position_seconds=position,
        )

    def send_state(self) -> None:
        """Send queue, members and cursor to the room."""
        self.broadcast_queue(include_members=True)
        self.broadcast_cursor()

    def broadcast_cursor(self) -> None:
        """Send the current playback cursor."""
        self._room.send_message(
            SyncPlaybackMessage(sender_id=self.member.id, payload=self._room.state.cursor)
        )

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------
    def _on_join(self, member: Member) -> None:
        if self._room.state.add_member(member):
            logger.info("Member %s (%s) joined the room", member.id, member.display_name)
        else:
            logger.debug("Member %s joined again", member.id)
        self.send_state()

    def _on_request_sync(self, sender_id: str) -> None:
        logger.debug("Sync requested by %s", sender_id)
        self.send_state()

    def _apply_members(self, members: list[Member]) -> None:
        logger.debug("Keeping own member list, the host is the membership authority")

    def handle_driver_state(self, state: DriverState) -> None:
        """Turn driver transitions of the current track into cursor updates."""
        cursor = self._room.state.cursor
        adapter = self._room.adapter
        loaded = adapter.track
        if loaded is None or loaded.id != cursor.current_track_id:
            logger.debug("Ignoring driver state %s of a stale track", state.value)
            return
        if state is DriverState.ENDED:
            logger.info("Track %s ended", loaded.id)
            self.next_track()
            return
        if state not in (DriverState.PLAYING, DriverState.PAUSED):
            return
        position = adapter.position(fallback=cursor.expected_position(self._room.now()))
        self._set_cursor(
            is_playing=state is DriverState.PLAYING,
            current_track_id=cursor.current_track_id,
            position_seconds=position,
        )

    # ------------------------------------------------------------------
    # Local actions
    # ------------------------------------------------------------------
    def _after_track_added(self, track: Track, was_empty: bool) -> None:
        if not was_empty or self._room.state.cursor.current_track_id is not None:
            return
        self._set_cursor(is_playing=False, current_track_id=track.id, position_seconds=0.0)
        self._room.adapter.load(track)

    def toggle_play(self) -> None:
        """Toggle the current track between playing and paused."""
        cursor = self._room.state.cursor
        if cursor.current_track_id is None:
            logger.info("Nothing to play")
            return
        adapter = self._room.adapter
        adapter.load(self._room.state.current_track())
        position = adapter.position(fallback=cursor.expected_position(self._room.now()))
        self._set_cursor(
            is_playing=not cursor.is_playing,
            current_track_id=cursor.current_track_id,
            position_seconds=position,
        )
        self._render()

    def next_track(self) -> None:
        """Advance to the next queued track, or stop at the end of the queue."""
        state = self._room.state
        queue = state.queue
        next_index = state.index_of(state.cursor.current_track_id) + 1
        if next_index < len(queue):
            self._set_cursor(
                is_playing=True, current_track_id=queue[next_index].id, position_seconds=0.0
            )
        else:
            logger.info("Reached the end of the queue")
            self._set_cursor(is_playing=False, current_track_id=None, position_seconds=0.0)
        self._render()

    def play_track(self, track_id: str) -> bool:
        """Start the queued track with ``track_id`` from the beginning."""
        if self._room.state.find_track(track_id) is None:
            logger.warning("Cannot play track %s, it is not queued", track_id)
            return False
        self._set_cursor(is_playing=True, current_track_id=track_id, position_seconds=0.0)
        self._render()
        self._room.adapter.seek(0.0)
        return True

    def seek(self, seconds: float) -> None:
        """Move the position of the current track to ``seconds``."""
        cursor = self._room.state.cursor
        if cursor.current_track_id is None:
            logger.info("Nothing to seek")
            return
        position = max(0.0, seconds)
        self._set_cursor(
            is_playing=cursor.is_playing,
            current_track_id=cursor.current_track_id,
            position_seconds=position,
        )
        self._room.adapter.seek(position)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _set_cursor(
        self, *, is_playing: bool, current_track_id: str | None, position_seconds: float
    ) -> None:
        previous = self._room.state.cursor
        cursor = PlaybackCursor(
            is_playing=is_playing,
            current_track_id=current_track_id,
            position_seconds=position_seconds,
            observed_at=self._room.now(),
        )
        self._room.state.overwrite_cursor(cursor)
        if previous.current_track_id != current_track_id or previous.is_playing != is_playing:
            logger.info(
                "Playback %s, track %s at %.1fs",
                "playing" if is_playing else "paused",
                current_track_id,
                position_seconds,
            )
        self.broadcast_cursor()

    def _render(self) -> None:
        """Make the local driver follow the cursor."""
        adapter = self._room.adapter
        adapter.load(self._room.state.current_track())
        if self._room.state.cursor.is_playing:
            adapter.play()
        else:
            adapter.pause()

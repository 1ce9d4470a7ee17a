"""In-memory replicated state of a room."""

from __future__ import annotations

import logging

from aiosyncbeat.models import Member, PlaybackCursor, RoomSnapshot, Track

logger = logging.getLogger(__name__)


class RoomState:
    """
    Members, queue and playback cursor as held by one process.

    Every process owns its own copy. Copies are only reconciled through received
    messages, which always carry whole values, so every replace operation here is a
    plain overwrite.
    """

    def __init__(self) -> None:
        """Initialize an empty room state."""
        self._members: list[Member] = []
        self._queue: list[Track] = []
        self._cursor = PlaybackCursor()

    @property
    def members(self) -> list[Member]:
        """Return a copy of the member list."""
        return list(self._members)

    @property
    def queue(self) -> list[Track]:
        """Return a copy of the queue in play order."""
        return list(self._queue)

    @property
    def cursor(self) -> PlaybackCursor:
        """Return the current playback cursor."""
        return self._cursor

    # Members

    def add_member(self, member: Member) -> bool:
        """Add ``member`` unless a member with the same id exists. Return True if added."""
        if any(existing.id == member.id for existing in self._members):
            return False
        self._members.append(member)
        return True

    def remove_member(self, member_id: str) -> bool:
        """Remove the member with ``member_id``. Return True if it was present."""
        remaining = [member for member in self._members if member.id != member_id]
        removed = len(remaining) != len(self._members)
        self._members = remaining
        return removed

    def replace_members(self, members: list[Member]) -> None:
        """Overwrite the member list."""
        self._members = list(members)

    def get_member(self, member_id: str) -> Member | None:
        """Return the member with ``member_id``, if known."""
        for member in self._members:
            if member.id == member_id:
                return member
        return None

    # Queue

    def replace_queue(self, queue: list[Track]) -> None:
        """Overwrite the queue."""
        self._queue = list(queue)

    def append_track(self, track: Track) -> None:
        """Append ``track`` to the end of the queue."""
        self._queue.append(track)

    def remove_track(self, track_id: str) -> Track | None:
        """Remove and return the track with ``track_id``, if queued."""
        track = self.find_track(track_id)
        if track is not None:
            self._queue = [entry for entry in self._queue if entry.id != track_id]
        return track

    def find_track(self, track_id: str | None) -> Track | None:
        """Return the queued track with ``track_id``, if any."""
        if track_id is None:
            return None
        for track in self._queue:
            if track.id == track_id:
                return track
        return None

    def index_of(self, track_id: str | None) -> int:
        """Return the queue index of ``track_id``, or -1 if it is not queued."""
        for index, track in enumerate(self._queue):
            if track.id == track_id:
                return index
        return -1

    def current_track(self) -> Track | None:
        """Return the track the cursor points at, if it is still queued."""
        return self.find_track(self._cursor.current_track_id)

    # Cursor

    def overwrite_cursor(self, cursor: PlaybackCursor) -> None:
        """Replace the playback cursor."""
        self._cursor = cursor

    # Whole state

    def snapshot(self) -> RoomSnapshot:
        """Return a copy of the full state."""
        return RoomSnapshot(members=self.members, queue=self.queue, cursor=self._cursor)

    def reset(self) -> None:
        """Drop all members and tracks and rewind the cursor."""
        logger.debug("Resetting room state")
        self._members = []
        self._queue = []
        self._cursor = PlaybackCursor()

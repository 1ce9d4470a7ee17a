"""Replicated room data for the syncbeat protocol.

These records are held independently by every room member and travel verbatim inside
messages. Members and tracks are immutable once created, the queue is an ordered list
of tracks and the playback cursor anchors a position in the current track to the wall
clock time at which it was observed.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mashumaro.config import BaseConfig
from mashumaro.mixins.orjson import DataClassORJSONMixin

from .types import Platform


@dataclass(frozen=True)
class Member(DataClassORJSONMixin):
    """A participant of a room."""

    id: str
    """Unique identifier, stable for the lifetime of the session."""
    display_name: str
    """Friendly name, also used as ``added_by`` on tracks."""
    is_host: bool = False
    """True for the single member with write authority over playback."""


@dataclass(frozen=True)
class Track(DataClassORJSONMixin):
    """An entry of the shared play queue."""

    id: str
    """Identifier generated locally at insertion, unique within the queue."""
    source_url: str
    """URL the track was added from."""
    platform: Platform
    """Platform the URL was classified as."""
    title: str
    thumbnail_ref: str
    added_by: str
    """Display name of the member that added the track."""
    duration_seconds: float | None = None
    """Track length in seconds, if known."""

    class Config(BaseConfig):
        """Config for parsing json messages."""

        omit_none = True


@dataclass(frozen=True)
class PlaybackCursor(DataClassORJSONMixin):
    """Host playback state anchored to a wall clock observation."""

    is_playing: bool = False
    current_track_id: str | None = None
    position_seconds: float = 0.0
    """Position in the current track as of ``observed_at``."""
    observed_at: float = 0.0
    """Wall clock time (seconds since the epoch) the position was read at."""

    def expected_position(self, now: float) -> float:
        """Return the interpolated position in the current track at wall clock ``now``."""
        if not self.is_playing:
            return self.position_seconds
        return self.position_seconds + (now - self.observed_at)


@dataclass
class RoomSnapshot(DataClassORJSONMixin):
    """Full replicated state of a room."""

    members: list[Member] = field(default_factory=list)
    queue: list[Track] = field(default_factory=list)
    cursor: PlaybackCursor = field(default_factory=PlaybackCursor)

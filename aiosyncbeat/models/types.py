"""Models for enum types used by syncbeat."""

from dataclasses import dataclass
from enum import Enum

from mashumaro.config import BaseConfig
from mashumaro.mixins.orjson import DataClassORJSONMixin
from mashumaro.types import Discriminator


# Base message class
@dataclass
class RoomMessage(DataClassORJSONMixin):
    """Base class for all messages exchanged between room members."""

    class Config(BaseConfig):
        """Config for parsing json messages."""

        discriminator = Discriminator(field="type", include_subtypes=True)


# Enums


class MessageType(Enum):
    """Tags of the five room message kinds."""

    JOIN = "JOIN"
    """A member announces itself to the room."""
    LEAVE = "LEAVE"
    """A member leaves the room (best effort)."""
    UPDATE_QUEUE = "UPDATE_QUEUE"
    """Full queue (and optionally the member list) after an edit."""
    SYNC_PLAYBACK = "SYNC_PLAYBACK"
    """Full playback cursor from the host."""
    REQUEST_SYNC = "REQUEST_SYNC"
    """Ask the host to resend queue, members and cursor."""


class Platform(Enum):
    """Source platform of a track."""

    YOUTUBE = "youtube"
    """Embeddable video platform with a controllable player."""
    SPOTIFY = "spotify"
    SOUNDCLOUD = "soundcloud"
    GENERIC = "generic"
    """Anything that could not be classified."""


class DriverState(Enum):
    """States reported by a playback driver."""

    UNSTARTED = "unstarted"
    PLAYING = "playing"
    PAUSED = "paused"
    BUFFERING = "buffering"
    ENDED = "ended"

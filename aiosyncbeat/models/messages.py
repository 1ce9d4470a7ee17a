"""Room messages for the syncbeat protocol.

Every message is an envelope ``{type, payload, sender_id}``. The five message kinds form a
closed union discriminated on ``type``:

* ``JOIN`` carries the joining member and is handled by the host.
* ``LEAVE`` carries an empty payload and removes the sender from everyone's member list.
* ``UPDATE_QUEUE`` carries the whole queue, plus the member list when sent by the host.
* ``SYNC_PLAYBACK`` carries the host playback cursor and is handled by listeners.
* ``REQUEST_SYNC`` carries an empty payload and asks the host to resend its state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from mashumaro.config import BaseConfig
from mashumaro.mixins.orjson import DataClassORJSONMixin

from .room import Member, PlaybackCursor, Track
from .types import RoomMessage


@dataclass
class EmptyPayload(DataClassORJSONMixin):
    """Payload of messages that carry no data."""


# JOIN
@dataclass
class JoinMessage(RoomMessage):
    """Message sent by a member announcing its presence."""

    sender_id: str
    payload: Member
    type: Literal["JOIN"] = "JOIN"


# LEAVE
@dataclass
class LeaveMessage(RoomMessage):
    """Message sent by a member that leaves the room."""

    sender_id: str
    payload: EmptyPayload = field(default_factory=EmptyPayload)
    type: Literal["LEAVE"] = "LEAVE"


# UPDATE_QUEUE
@dataclass
class UpdateQueuePayload(DataClassORJSONMixin):
    """Whole queue after an edit."""

    queue: list[Track]
    """Complete queue in play order."""
    members: list[Member] | None = None
    """Complete member list, only sent by the host."""

    class Config(BaseConfig):
        """Config for parsing json messages."""

        omit_none = True


@dataclass
class UpdateQueueMessage(RoomMessage):
    """Message replacing the queue of every receiver."""

    sender_id: str
    payload: UpdateQueuePayload
    type: Literal["UPDATE_QUEUE"] = "UPDATE_QUEUE"


# SYNC_PLAYBACK
@dataclass
class SyncPlaybackMessage(RoomMessage):
    """Message replacing the playback cursor of every listener."""

    sender_id: str
    payload: PlaybackCursor
    type: Literal["SYNC_PLAYBACK"] = "SYNC_PLAYBACK"


# REQUEST_SYNC
@dataclass
class RequestSyncMessage(RoomMessage):
    """Message asking the host to resend queue, members and cursor."""

    sender_id: str
    payload: EmptyPayload = field(default_factory=EmptyPayload)
    type: Literal["REQUEST_SYNC"] = "REQUEST_SYNC"

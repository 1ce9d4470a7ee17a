"""Models for the syncbeat room protocol."""

from __future__ import annotations

__all__ = [
    "DriverState",
    "EmptyPayload",
    "JoinMessage",
    "LeaveMessage",
    "Member",
    "MessageType",
    "Platform",
    "PlaybackCursor",
    "RequestSyncMessage",
    "RoomMessage",
    "RoomSnapshot",
    "SyncPlaybackMessage",
    "Track",
    "UpdateQueueMessage",
    "UpdateQueuePayload",
    "messages",
    "room",
    "types",
]

from . import messages, room, types
from .messages import (
    EmptyPayload,
    JoinMessage,
    LeaveMessage,
    RequestSyncMessage,
    SyncPlaybackMessage,
    UpdateQueueMessage,
    UpdateQueuePayload,
)
from .room import Member, PlaybackCursor, RoomSnapshot, Track
from .types import DriverState, MessageType, Platform, RoomMessage

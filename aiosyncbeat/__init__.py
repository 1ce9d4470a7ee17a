"""Syncbeat: listen to music together with a host-authoritative playback cursor."""

from __future__ import annotations

# Re-export the room API for easy import
from aiosyncbeat.config import RoomConfig
from aiosyncbeat.driver import PlaybackAdapter, PlaybackDriver, SimulatedPlaybackDriver
from aiosyncbeat.models import (
    DriverState,
    Member,
    Platform,
    PlaybackCursor,
    RoomSnapshot,
    Track,
)
from aiosyncbeat.resolver import TrackDescriptor, resolve_track
from aiosyncbeat.room import Room
from aiosyncbeat.transport import Transport, TransportUnavailableError
from aiosyncbeat.transport.local import LocalBroadcastHub, LocalTransport
from aiosyncbeat.transport.relay import RelayServer, WebSocketTransport

__all__ = [
    "DriverState",
    "LocalBroadcastHub",
    "LocalTransport",
    "Member",
    "Platform",
    "PlaybackAdapter",
    "PlaybackCursor",
    "PlaybackDriver",
    "RelayServer",
    "Room",
    "RoomConfig",
    "RoomSnapshot",
    "SimulatedPlaybackDriver",
    "Track",
    "TrackDescriptor",
    "Transport",
    "TransportUnavailableError",
    "WebSocketTransport",
    "resolve_track",
]

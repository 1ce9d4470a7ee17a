"""In-process broadcast transport for rooms living in the same event loop."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from . import DataCallback, Transport, TransportUnavailableError

logger = logging.getLogger(__name__)


class LocalBroadcastHub:
    """Registry of in-process room channels shared by LocalTransport instances."""

    def __init__(self) -> None:
        """Initialize an empty hub."""
        self._channels: defaultdict[str, set[LocalTransport]] = defaultdict(set)

    def transport(self) -> LocalTransport:
        """Create a new transport attached to this hub."""
        return LocalTransport(self)

    def subscribers(self, room_id: str) -> int:
        """Return the number of transports subscribed to ``room_id``."""
        return len(self._channels.get(room_id, ()))

    def _subscribe(self, room_id: str, transport: LocalTransport) -> None:
        self._channels[room_id].add(transport)

    def _unsubscribe(self, room_id: str, transport: LocalTransport) -> None:
        channel = self._channels.get(room_id)
        if channel is None:
            return
        channel.discard(transport)
        if not channel:
            del self._channels[room_id]

    def _broadcast(self, room_id: str, sender: LocalTransport, data: str) -> None:
        loop = asyncio.get_running_loop()
        for transport in list(self._channels.get(room_id, ())):
            if transport is sender:
                continue
            loop.call_soon(transport._deliver, room_id, data)  # noqa: SLF001


class LocalTransport(Transport):
    """Transport delivering broadcasts through a LocalBroadcastHub."""

    def __init__(self, hub: LocalBroadcastHub) -> None:
        """Create a transport attached to ``hub``."""
        self._hub = hub
        self._room_id: str | None = None
        self._callback: DataCallback | None = None

    @property
    def connected(self) -> bool:
        """Return True while a room channel is open."""
        return self._room_id is not None

    @property
    def room_id(self) -> str | None:
        """Return the identifier of the open room channel."""
        return self._room_id

    async def open(self, room_id: str, callback: DataCallback) -> None:
        """Subscribe to the channel of ``room_id``."""
        await self.close()
        self._room_id = room_id
        self._callback = callback
        self._hub._subscribe(room_id, self)  # noqa: SLF001
        logger.debug("Subscribed to local room %s", room_id)

    async def close(self) -> None:
        """Unsubscribe from the open channel."""
        if self._room_id is None:
            return
        self._hub._unsubscribe(self._room_id, self)  # noqa: SLF001
        logger.debug("Unsubscribed from local room %s", self._room_id)
        self._room_id = None
        self._callback = None

    async def send(self, data: str) -> None:
        """Broadcast ``data`` to the other subscribers."""
        if self._room_id is None:
            raise TransportUnavailableError("Not subscribed to a room")
        self._hub._broadcast(self._room_id, self, data)  # noqa: SLF001

    def _deliver(self, room_id: str, data: str) -> None:
        # Deliveries scheduled before a close or a channel switch are dropped.
        if self._callback is None or self._room_id != room_id:
            return
        self._callback(data)

"""
Broadcast transports connecting the members of a room.

A transport is scoped to one room identifier at a time. Broadcasts reach every other
current subscriber of that room but never the sender, with no ordering and no delivery
guarantee.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

__all__ = [
    "DataCallback",
    "Transport",
    "TransportUnavailableError",
]

DataCallback = Callable[[str | bytes], None]


class TransportUnavailableError(RuntimeError):
    """Raised when sending without an open room channel."""


class Transport(ABC):
    """Named channel broadcast primitive."""

    @property
    @abstractmethod
    def connected(self) -> bool:
        """Return True while a room channel is open."""

    @property
    @abstractmethod
    def room_id(self) -> str | None:
        """Return the identifier of the open room channel."""

    @abstractmethod
    async def open(self, room_id: str, callback: DataCallback) -> None:
        """
        Subscribe to the channel of ``room_id``.

        ``callback`` is invoked on the event loop for every payload broadcast by another
        subscriber. An already open channel is closed first.
        """

    @abstractmethod
    async def close(self) -> None:
        """Unsubscribe from the open channel. Does nothing when none is open."""

    @abstractmethod
    async def send(self, data: str) -> None:
        """
        Broadcast ``data`` to the other subscribers of the open channel.

        Raises TransportUnavailableError when no channel is open.
        """

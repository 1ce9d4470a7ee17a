"""WebSocket relay transport.

The relay is a plain broadcast medium: every text frame a socket sends to
``/rooms/{room_id}`` is forwarded to the other sockets connected to the same room. It
keeps no room state of its own, all protocol logic stays in the members.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from contextlib import suppress

from aiohttp import ClientSession, ClientWebSocketResponse, WSMsgType, web
from yarl import URL

from . import DataCallback, Transport, TransportUnavailableError

logger = logging.getLogger(__name__)

ROOM_PATH = "/rooms/{room_id}"
HEARTBEAT = 30


class RelayServer:
    """Forwards room broadcasts between WebSocket clients."""

    def __init__(self) -> None:
        """Initialize a relay without connected sockets."""
        self._rooms: defaultdict[str, set[web.WebSocketResponse]] = defaultdict(set)
        self._runner: web.AppRunner | None = None
        self._app = web.Application()
        self._app.router.add_get(ROOM_PATH, self.on_member_connect)

    @property
    def app(self) -> web.Application:
        """Return the aiohttp application serving the relay."""
        return self._app

    def members(self, room_id: str) -> int:
        """Return the number of sockets connected to ``room_id``."""
        return len(self._rooms.get(room_id, ()))

    async def start(self, host: str = "0.0.0.0", port: int = 8927) -> None:  # noqa: S104
        """Serve the relay on ``host``:``port``."""
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, host, port)
        await site.start()
        logger.info("Relay listening on %s:%d", host, port)

    async def stop(self) -> None:
        """Close every socket and stop serving."""
        for sockets in list(self._rooms.values()):
            for wsock in list(sockets):
                with suppress(Exception):
                    await wsock.close()
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
        logger.info("Relay stopped")

    async def on_member_connect(self, request: web.Request) -> web.WebSocketResponse:
        """Handle a WebSocket connection for one room member."""
        room_id = request.match_info["room_id"]
        wsock = web.WebSocketResponse(heartbeat=HEARTBEAT)
        await wsock.prepare(request)
        logger.debug("Member connected to room %s from %s", room_id, request.remote)

        self._rooms[room_id].add(wsock)
        try:
            async for msg in wsock:
                if msg.type is WSMsgType.TEXT:
                    await self._forward(room_id, wsock, msg.data)
                elif msg.type is WSMsgType.ERROR:
                    logger.warning("WebSocket error in room %s: %s", room_id, wsock.exception())
        finally:
            sockets = self._rooms.get(room_id)
            if sockets is not None:
                sockets.discard(wsock)
                if not sockets:
                    del self._rooms[room_id]
            logger.debug("Member disconnected from room %s", room_id)
        return wsock

    async def _forward(self, room_id: str, sender: web.WebSocketResponse, data: str) -> None:
        for wsock in list(self._rooms.get(room_id, ())):
            if wsock is sender or wsock.closed:
                continue
            try:
                await wsock.send_str(data)
            except ConnectionError:
                logger.debug("Dropping broadcast to a closing socket in room %s", room_id)


class WebSocketTransport(Transport):
    """Transport connecting to a RelayServer."""

    def __init__(self, url: str, *, session: ClientSession | None = None) -> None:
        """Create a transport for the relay at ``url`` (e.g. ``ws://host:8927``)."""
        self._url = URL(url)
        self._session = session
        self._owns_session = session is None
        self._ws: ClientWebSocketResponse | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._send_lock = asyncio.Lock()
        self._room_id: str | None = None
        self._callback: DataCallback | None = None

    @property
    def connected(self) -> bool:
        """Return True while the relay socket is open."""
        return self._ws is not None and not self._ws.closed

    @property
    def room_id(self) -> str | None:
        """Return the identifier of the open room channel."""
        return self._room_id if self.connected else None

    async def open(self, room_id: str, callback: DataCallback) -> None:
        """Connect to the relay channel of ``room_id``."""
        await self.close()
        if self._session is None:
            self._session = ClientSession()
        url = self._url / "rooms" / room_id
        logger.info("Connecting to relay at %s", url)
        self._ws = await self._session.ws_connect(url, heartbeat=HEARTBEAT)
        self._room_id = room_id
        self._callback = callback
        self._reader_task = asyncio.get_running_loop().create_task(self._reader_loop())

    async def close(self) -> None:
        """Disconnect from the relay and release resources."""
        current_task = asyncio.current_task()
        if self._reader_task is not None:
            if self._reader_task is not current_task:
                self._reader_task.cancel()
                with suppress(asyncio.CancelledError):
                    await self._reader_task
            self._reader_task = None
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
        self._room_id = None
        self._callback = None

    async def send(self, data: str) -> None:
        """Broadcast ``data`` through the relay."""
        if self._ws is None or self._ws.closed:
            raise TransportUnavailableError("Relay socket is not connected")
        async with self._send_lock:
            await self._ws.send_str(data)

    async def _reader_loop(self) -> None:
        assert self._ws is not None
        try:
            async for msg in self._ws:
                if msg.type is WSMsgType.TEXT:
                    if self._callback is not None:
                        self._callback(msg.data)
                elif msg.type is WSMsgType.ERROR:
                    logger.error("WebSocket error: %s", self._ws.exception())
                    break
        except asyncio.CancelledError:  # pragma: no cover - cancellation path
            pass
        except Exception:
            logger.exception("Relay reader encountered an error")
        logger.info("Relay connection closed")

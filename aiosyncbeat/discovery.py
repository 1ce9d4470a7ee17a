"""mDNS advertisement and discovery of syncbeat relays on the local network."""

from __future__ import annotations

import asyncio
import logging
import socket

from zeroconf import ServiceInfo, ServiceStateChange, Zeroconf
from zeroconf.asyncio import AsyncServiceBrowser, AsyncServiceInfo, AsyncZeroconf

logger = logging.getLogger(__name__)

SERVICE_TYPE = "_syncbeat-relay._tcp.local."
LOOKUP_TIMEOUT_MS = 3000


def build_relay_url(host: str, port: int) -> str:
    """Construct the relay WebSocket URL from an address and port."""
    if ":" in host:
        host = f"[{host}]"
    return f"ws://{host}:{port}"


def _local_ipv4_addresses() -> list[str]:
    addresses: set[str] = set()
    try:
        for *_, sockaddr in socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET):
            addresses.add(str(sockaddr[0]))
    except socket.gaierror:
        logger.debug("Could not resolve local host name")
    addresses.discard("127.0.0.1")
    return sorted(addresses) or ["127.0.0.1"]


class RelayAdvertisement:
    """Announces a running relay via mDNS."""

    def __init__(self, port: int, name: str | None = None) -> None:
        """Prepare the advertisement of a relay listening on ``port``."""
        self._port = port
        self._name = name or socket.gethostname()
        self._zeroconf: AsyncZeroconf | None = None
        self._info: ServiceInfo | None = None

    async def start(self) -> None:
        """Register the relay service."""
        self._info = ServiceInfo(
            SERVICE_TYPE,
            f"{self._name}.{SERVICE_TYPE}",
            addresses=[socket.inet_aton(address) for address in _local_ipv4_addresses()],
            port=self._port,
        )
        self._zeroconf = AsyncZeroconf()
        await self._zeroconf.async_register_service(self._info)
        logger.info("Advertising relay %s on port %d", self._name, self._port)

    async def stop(self) -> None:
        """Unregister the relay service."""
        if self._zeroconf is None:
            return
        if self._info is not None:
            await self._zeroconf.async_unregister_service(self._info)
            self._info = None
        await self._zeroconf.async_close()
        self._zeroconf = None


class RelayDiscovery:
    """
    Browses the local network for syncbeat relays.

    Every relay that is announced gets resolved to a WebSocket URL. The most recently
    resolved relay that is still announced is the current one.
    """

    def __init__(self) -> None:
        """Initialize the discovery without browsing."""
        self._zeroconf: AsyncZeroconf | None = None
        self._browser: AsyncServiceBrowser | None = None
        self._relays: dict[str, str] = {}
        self._first: asyncio.Future[str] | None = None
        self._lookups: set[asyncio.Task[None]] = set()

    async def start(self) -> None:
        """Start browsing until stop() is called."""
        self._first = asyncio.get_running_loop().create_future()
        self._zeroconf = AsyncZeroconf()
        try:
            self._browser = AsyncServiceBrowser(
                self._zeroconf.zeroconf,
                SERVICE_TYPE,
                handlers=[self._on_service_state_change],
            )
        except Exception:
            await self.stop()
            raise

    async def wait_for_first_relay(self) -> str:
        """Wait indefinitely for the first relay to be resolved."""
        if self._first is None:
            raise RuntimeError("Discovery not started. Call start() first.")
        return await self._first

    def current_url(self) -> str | None:
        """Return the URL of the current relay, or None if none is announced."""
        if not self._relays:
            return None
        return next(reversed(self._relays.values()))

    async def stop(self) -> None:
        """Stop browsing and release resources."""
        for task in list(self._lookups):
            task.cancel()
        if self._browser is not None:
            await self._browser.async_cancel()
            self._browser = None
        if self._zeroconf is not None:
            await self._zeroconf.async_close()
            self._zeroconf = None
        self._relays.clear()
        if self._first is not None and not self._first.done():
            self._first.cancel()
        self._first = None

    def _on_service_state_change(
        self,
        zeroconf: Zeroconf,
        service_type: str,
        name: str,
        state_change: ServiceStateChange,
    ) -> None:
        if state_change is ServiceStateChange.Removed:
            if self._relays.pop(name, None) is not None:
                logger.info("Relay %s went away", name)
            return
        task = asyncio.get_running_loop().create_task(self._lookup(zeroconf, service_type, name))
        self._lookups.add(task)
        task.add_done_callback(self._lookups.discard)

    async def _lookup(self, zeroconf: Zeroconf, service_type: str, name: str) -> None:
        info = AsyncServiceInfo(service_type, name)
        if not await info.async_request(zeroconf, LOOKUP_TIMEOUT_MS):
            logger.debug("Relay %s did not answer the lookup", name)
            return
        addresses = info.parsed_addresses()
        if not addresses or info.port is None:
            return
        url = build_relay_url(addresses[0], info.port)
        self._relays.pop(name, None)
        self._relays[name] = url
        logger.debug("Resolved relay %s to %s", name, url)
        if self._first is not None and not self._first.done():
            self._first.set_result(url)

"""
RelayPool — owns the endpoint status table and one RelayConnection per
connected relay.

Endpoint failures never escape as exceptions: a failed or timed-out connect,
a dropped socket and a failed query all become status transitions and log
lines. Every transition of one endpoint happens under that endpoint's own
lock; endpoints never wait on each other.

There is no automatic retry. reconnect() re-attempts every endpoint that is
not connected and is driven by the scheduler in main.py.
"""
import asyncio
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable

from loguru import logger

from config.settings import CONNECT_TIMEOUT_MS
from longform.errors import ConnectError, ConnectTimeout, QueryError
from longform.relays.connection import RelayConnection
from longform.relays.models import FilterSpec, RawEvent, RelayEndpoint, RelayStatus


@dataclass(frozen=True)
class RelayHealth:
    state:     str      # 'disconnected' | 'partial' | 'connected'
    connected: int
    total:     int


class RelayPool:
    """
    connection_factory(url, on_close=...) must return an object with
    async connect(), async query(FilterSpec), async close() and is_open.
    Tests pass fakes here.
    """

    def __init__(
        self,
        connect_timeout_ms: int = CONNECT_TIMEOUT_MS,
        connection_factory: Callable[..., RelayConnection] = RelayConnection,
    ):
        self.connect_timeout = connect_timeout_ms / 1000
        self._factory        = connection_factory
        self._endpoints:   dict[str, RelayEndpoint] = {}
        self._locks:       dict[str, asyncio.Lock] = {}
        self._connections: dict[str, RelayConnection] = {}

    # ── State ──────────────────────────────────────────────────────────────────

    @property
    def connected(self) -> list[str]:
        """URLs currently connected, in configured order."""
        return [
            url for url, endpoint in self._endpoints.items()
            if endpoint.status is RelayStatus.CONNECTED
        ]

    def snapshot(self) -> list[RelayEndpoint]:
        return [replace(endpoint) for endpoint in self._endpoints.values()]

    def health(self) -> RelayHealth:
        connected = len(self.connected)
        total     = len(self._endpoints)
        if connected == 0:
            state = "disconnected"
        elif connected < total:
            state = "partial"
        else:
            state = "connected"
        return RelayHealth(state=state, connected=connected, total=total)

    # ── Connect ────────────────────────────────────────────────────────────────

    async def initialize(self, endpoints: list[str]) -> list[str]:
        """
        Register every endpoint and attempt all connects concurrently.
        Returns the connected subset once every attempt has settled.
        """
        urls = list(dict.fromkeys(endpoints))
        for url in urls:
            self._register(url)

        logger.info(f"[Pool] connecting to {len(urls)} relays")
        await asyncio.gather(*(self.connect(url) for url in urls))

        connected = self.connected
        logger.info(f"[Pool] connected to {len(connected)}/{len(urls)} relays")
        return connected

    async def connect(self, url: str) -> bool:
        """One bounded connect attempt. Returns True if the relay is connected afterwards."""
        endpoint = self._register(url)
        async with self._locks[url]:
            if endpoint.status is RelayStatus.CONNECTED:
                return True
            endpoint.status = RelayStatus.CONNECTING

            connection = self._factory(url, on_close=self._on_closed)
            try:
                await asyncio.wait_for(connection.connect(), timeout=self.connect_timeout)
            except asyncio.TimeoutError:
                failure: Exception = ConnectTimeout(url, self.connect_timeout)
            except ConnectError as exc:
                failure = exc
            except Exception as exc:
                failure = ConnectError(url, repr(exc))
            else:
                endpoint.status         = RelayStatus.CONNECTED
                endpoint.last_connected = datetime.now(timezone.utc)
                self._connections[url]  = connection
                logger.info(f"[Pool] ✅ connected to {url}")
                return True

            endpoint.status     = RelayStatus.ERROR
            endpoint.errors    += 1
            endpoint.last_error = str(failure)
            logger.warning(f"[Pool] failed to connect: {failure}")
            return False

    async def reconnect(self) -> list[str]:
        """Re-attempt every endpoint that is not connected."""
        pending = [
            url for url, endpoint in self._endpoints.items()
            if endpoint.status is not RelayStatus.CONNECTED
        ]
        if pending:
            logger.info(f"[Pool] re-attempting {len(pending)} relays")
            await asyncio.gather(*(self.connect(url) for url in pending))
        return self.connected

    async def close(self) -> None:
        for url in list(self._connections):
            async with self._locks[url]:
                connection = self._connections.pop(url, None)
                if connection is not None:
                    await connection.close()
                self._endpoints[url].status = RelayStatus.DISCONNECTED
        logger.info("[Pool] all relay connections closed")

    # ── Query ──────────────────────────────────────────────────────────────────

    async def query(self, connected: list[str], spec: FilterSpec, timeout_s: float) -> list[RawEvent]:
        """
        Send `spec` to every relay in `connected` in parallel. A relay that
        errors or exceeds `timeout_s` contributes nothing. Results are
        concatenated in the order of `connected`.
        """
        if spec.limit <= 0:
            raise QueryError(f"filter {spec.describe()} has non-positive limit {spec.limit}")

        batches = await asyncio.gather(
            *(self._query_one(url, spec, timeout_s) for url in connected)
        )
        return [event for batch in batches for event in batch]

    async def _query_one(self, url: str, spec: FilterSpec, timeout_s: float) -> list[RawEvent]:
        connection = self._connections.get(url)
        if connection is None:
            logger.debug(f"[Pool] {url} has no live connection, skipping")
            return []
        try:
            events = await asyncio.wait_for(connection.query(spec), timeout=timeout_s)
        except asyncio.TimeoutError:
            logger.warning(f"[Pool] {url} query timed out after {timeout_s:g}s ({spec.describe()})")
            return []
        except Exception as exc:
            logger.warning(f"[Pool] {url} query failed ({spec.describe()}): {exc}")
            return []
        logger.debug(f"[Pool] {url} → {len(events)} events ({spec.describe()})")
        return events

    # ── Internal ───────────────────────────────────────────────────────────────

    def _register(self, url: str) -> RelayEndpoint:
        if url not in self._endpoints:
            self._endpoints[url] = RelayEndpoint(url=url)
            self._locks[url]     = asyncio.Lock()
        return self._endpoints[url]

    async def _on_closed(self, url: str, error: Exception | None) -> None:
        """Drop notification from a live connection."""
        async with self._locks[url]:
            endpoint = self._endpoints[url]
            if endpoint.status is not RelayStatus.CONNECTED:
                return
            self._connections.pop(url, None)
            if error is None:
                endpoint.status = RelayStatus.DISCONNECTED
                logger.info(f"[Pool] ❌ disconnected from {url}")
            else:
                endpoint.status     = RelayStatus.ERROR
                endpoint.errors    += 1
                endpoint.last_error = str(error)
                logger.error(f"[Pool] ⚠️ error with {url}: {error}")

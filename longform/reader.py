"""
LongformReader — owns one RelayPool and runs fetch cycles:

  connected subset → fetch_all → (profiles) → process_events → self.posts

Cycles are single-flight. refresh() called while another cycle is running
raises RefreshInProgress instead of starting a second, interleaved cycle.
A cycle that fails with NoConnectionsAvailable keeps the previous posts,
records the error in last_error and re-raises so the caller can retry.
"""
import asyncio
from datetime import datetime, timezone

from loguru import logger

from config.settings import FETCH_PROFILES, QUERY_TIMEOUT_MS
from longform.classifier.posts import ExtractionConfig, Post, process_events
from longform.collector.aggregator import fetch_all, fetch_profiles
from longform.errors import NoConnectionsAvailable, ReaderError, RefreshInProgress
from longform.relays.pool import RelayPool
from longform.relays.sources import RelayConfig, build_filters
from longform.view import SortMode, select_posts


class LongformReader:

    def __init__(
        self,
        relay_config: RelayConfig,
        pool: RelayPool | None = None,
        extraction: ExtractionConfig | None = None,
        query_timeout_ms: int = QUERY_TIMEOUT_MS,
        with_profiles: bool = FETCH_PROFILES,
    ):
        self.config        = relay_config
        self.pool          = pool or RelayPool()
        self.extraction    = extraction or ExtractionConfig(rules=relay_config.platforms)
        self.query_timeout = query_timeout_ms / 1000
        self.with_profiles = with_profiles

        self.posts:        list[Post] = []
        self.last_error:   ReaderError | None = None
        self.last_fetched: datetime | None = None
        self._cycle_lock   = asyncio.Lock()

    @property
    def refreshing(self) -> bool:
        return self._cycle_lock.locked()

    async def start(self) -> list[str]:
        """Connect to every configured relay. Returns the connected subset."""
        logger.info(f"[Reader] initializing with {len(self.config.relays)} relays")
        return await self.pool.initialize(list(self.config.relays))

    async def refresh(self, now: float | None = None) -> list[Post]:
        if self._cycle_lock.locked():
            logger.warning("[Reader] fetch cycle already running, refresh rejected")
            raise RefreshInProgress()

        async with self._cycle_lock:
            connected = self.pool.connected
            filters   = build_filters(self.config.filters, now)
            try:
                events = await fetch_all(self.pool, connected, filters, self.query_timeout)
            except NoConnectionsAvailable as exc:
                self.last_error = exc
                logger.error(f"[Reader] fetch cycle aborted: {exc}")
                raise

            profiles = {}
            if self.with_profiles:
                authors = [
                    e.pubkey for e in events
                    if e.kind == self.extraction.kind
                    and len(e.content) >= self.extraction.min_content_length
                ]
                profiles = await fetch_profiles(self.pool, connected, authors, self.query_timeout)

            self.posts        = process_events(events, self.extraction, profiles)
            self.last_error   = None
            self.last_fetched = datetime.now(timezone.utc)
            logger.info(f"[Reader] {len(self.posts)} posts from {len(connected)} relays")
            return self.posts

    def view(self, source: str = "all", sort: str | SortMode = SortMode.NEWEST) -> list[Post]:
        return select_posts(self.posts, source, sort)

    async def close(self) -> None:
        await self.pool.close()

"""
Live smoke test — connects to the configured relays, runs one fetch cycle
and prints the resulting posts with the configured source filter and sort.

Usage:
    SOURCE_FILTER=highlighter SORT_MODE=oldest python scripts/fetch_once.py
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger

from config.settings import RELAYS_CONFIG, SORT_MODE, SOURCE_FILTER
from longform.errors import NoConnectionsAvailable
from longform.reader import LongformReader
from longform.relays.sources import load_relay_config


async def main() -> None:
    logger.info("=" * 60)
    logger.info("Longform Reader smoke test")
    logger.info("=" * 60)

    reader = LongformReader(load_relay_config(RELAYS_CONFIG))

    # ── 1. Connect ────────────────────────────────────────────────────────────
    logger.info("\n[1] Relays")
    await reader.start()
    for endpoint in reader.pool.snapshot():
        logger.info(
            f"    {endpoint.url:<36} {endpoint.status.value:<12}"
            f"{' ' + endpoint.last_error if endpoint.last_error else ''}"
        )
    health = reader.pool.health()
    logger.info(f"    → {health.state} ({health.connected}/{health.total})")

    # ── 2. Fetch cycle ────────────────────────────────────────────────────────
    logger.info("\n[2] Fetch cycle")
    try:
        await reader.refresh()
    except NoConnectionsAvailable as exc:
        logger.error(f"    {exc} — nothing to fetch")
        await reader.close()
        return

    # ── 3. Posts ──────────────────────────────────────────────────────────────
    posts = reader.view(source=SOURCE_FILTER, sort=SORT_MODE)
    logger.info(f"\n[3] {len(posts)} posts (source={SOURCE_FILTER}, sort={SORT_MODE})")
    for post in posts[:20]:
        logger.info(
            f"    {post.published_at:%Y-%m-%d} [{post.source.value} {post.source_confidence:.1f}]"
            f" {post.title}"
        )
        logger.info(
            f"        {post.author} · {post.word_count:,} words · {post.read_minutes} min read"
            f"{' · #' + ' #'.join(post.topics[:5]) if post.topics else ''}"
        )

    await reader.close()
    logger.info("\n" + "=" * 60)
    logger.info("Smoke test complete.")
    logger.info("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())

"""
Entry point — connects to the configured relays and wires the scheduler jobs.

The refresh job runs a fetch cycle every REFRESH_INTERVAL_S; max_instances=1
keeps cycles from overlapping and the reader itself rejects a concurrent
refresh. The reconnect job re-attempts every relay that is not connected,
every RECONNECT_INTERVAL_S. The pool never retries on its own.

Usage:
    python -m longform.main
    # or: longform-reader  (console script)
"""
import asyncio
import signal
import sys
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from config.settings import (
    LOG_LEVEL,
    LOGS_DIR,
    RECONNECT_INTERVAL_S,
    RELAYS_CONFIG,
    REFRESH_INTERVAL_S,
)
from longform.errors import NoConnectionsAvailable, RefreshInProgress
from longform.monitoring.alerts import alert_fetch_failure, alert_relay_health, alert_startup
from longform.reader import LongformReader
from longform.relays.sources import load_relay_config

# ── Logging ────────────────────────────────────────────────────────────────────
LOGS_DIR.mkdir(parents=True, exist_ok=True)
logger.remove()
logger.add(sys.stderr, level=LOG_LEVEL)
logger.add(
    LOGS_DIR / "longform_{time:YYYY-MM-DD}.log",
    rotation="00:00",
    retention="14 days",
    level=LOG_LEVEL,
    encoding="utf-8",
)


# ── Job runners ────────────────────────────────────────────────────────────────

async def _run_refresh(reader: LongformReader) -> None:
    try:
        await reader.refresh()
    except RefreshInProgress:
        logger.debug("[Scheduler] refresh skipped — previous cycle still running")
        return
    except NoConnectionsAvailable as exc:
        await alert_fetch_failure(str(exc))
        return
    except Exception as exc:
        logger.exception(f"[Scheduler] refresh failed: {exc}")
        await alert_fetch_failure(repr(exc))
        return

    for post in reader.view()[:5]:
        logger.info(
            f"[Scheduler]   {post.published_at:%Y-%m-%d} [{post.source.value}] "
            f"{post.title[:60]} — {post.author} ({post.read_minutes} min)"
        )


async def _run_reconnect(reader: LongformReader) -> None:
    try:
        await reader.pool.reconnect()
    except Exception as exc:
        logger.exception(f"[Scheduler] reconnect pass failed: {exc}")
        return
    health = reader.pool.health()
    logger.info(f"[Scheduler] relays: {health.state} ({health.connected}/{health.total})")
    await alert_relay_health(health.connected, health.total)


# ── Scheduler setup ────────────────────────────────────────────────────────────

def build_scheduler(reader: LongformReader) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")

    scheduler.add_job(
        _run_refresh,
        "interval",
        seconds       = REFRESH_INTERVAL_S,
        args          = [reader],
        id            = "refresh",
        name          = "Fetch longform posts",
        max_instances = 1,
        coalesce      = True,
        next_run_time = datetime.now(timezone.utc),
    )
    scheduler.add_job(
        _run_reconnect,
        "interval",
        seconds       = RECONNECT_INTERVAL_S,
        args          = [reader],
        id            = "reconnect",
        name          = "Re-attempt failed relays",
        max_instances = 1,
        coalesce      = True,
    )
    return scheduler


# ── Main ───────────────────────────────────────────────────────────────────────

async def main() -> None:
    logger.info("Longform Reader starting up")

    reader    = LongformReader(load_relay_config(RELAYS_CONFIG))
    connected = await reader.start()
    total     = len(reader.config.relays)
    await alert_startup(len(connected), total)
    await alert_relay_health(len(connected), total)

    scheduler = build_scheduler(reader)
    scheduler.start()
    logger.info(f"Scheduler running — {len(scheduler.get_jobs())} jobs active")

    # Graceful shutdown on SIGINT / SIGTERM
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    await stop.wait()
    logger.info("Shutting down scheduler…")
    scheduler.shutdown(wait=False)
    await reader.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()

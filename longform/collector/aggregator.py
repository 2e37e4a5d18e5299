"""
Query aggregator — runs the filter plan across the connected relays and
returns one deduplicated list of events.

  1. fetch_all(pool, connected, filters)
       Fails fast with NoConnectionsAvailable when `connected` is empty.
       Filters run one after another; a failing filter is logged and skipped.
       Dedup is by event id only; the first occurrence in filter order wins,
       so the result order follows the filter list, not network arrival.

  2. fetch_profiles(pool, connected, pubkeys)
       Best-effort kind-0 lookup for author display names. Never raises.
"""
from loguru import logger

from config.settings import QUERY_TIMEOUT_MS
from longform.errors import NoConnectionsAvailable
from longform.relays.models import PROFILE_KIND, AuthorProfile, FilterSpec, RawEvent
from longform.relays.pool import RelayPool

_PROFILE_BATCH = 100   # authors per kind-0 REQ


# ── Events ─────────────────────────────────────────────────────────────────────

async def fetch_all(
    pool: RelayPool,
    connected: list[str],
    filters: list[FilterSpec],
    timeout_s: float = QUERY_TIMEOUT_MS / 1000,
) -> list[RawEvent]:
    if not connected:
        raise NoConnectionsAvailable()

    logger.info(f"[Aggregator] fetching from {len(connected)} connected relays")

    collected: list[RawEvent] = []
    for spec in filters:
        try:
            events = await pool.query(connected, spec, timeout_s)
        except Exception as exc:
            logger.error(f"[Aggregator] filter {spec.describe()} failed: {exc}")
            continue
        logger.info(f"[Aggregator] fetched {len(events)} events with filter {spec.describe()}")
        collected.extend(events)

    unique = dedupe_events(collected)
    logger.info(f"[Aggregator] {len(collected)} events → {len(unique)} unique")
    return unique


def dedupe_events(events: list[RawEvent]) -> list[RawEvent]:
    """Keep the first event seen for each id."""
    seen: set[str] = set()
    unique: list[RawEvent] = []
    for event in events:
        if event.id in seen:
            continue
        seen.add(event.id)
        unique.append(event)
    return unique


# ── Profiles ───────────────────────────────────────────────────────────────────

async def fetch_profiles(
    pool: RelayPool,
    connected: list[str],
    pubkeys: list[str],
    timeout_s: float = QUERY_TIMEOUT_MS / 1000,
) -> dict[str, AuthorProfile]:
    """Newest kind-0 profile per author. Missing authors are simply absent."""
    wanted = sorted(set(pubkeys))
    if not connected or not wanted:
        return {}

    profiles: dict[str, AuthorProfile] = {}
    for start in range(0, len(wanted), _PROFILE_BATCH):
        batch = tuple(wanted[start:start + _PROFILE_BATCH])
        spec  = FilterSpec(kind=PROFILE_KIND, authors=batch, limit=len(batch), name="profiles")
        try:
            events = await pool.query(connected, spec, timeout_s)
        except Exception as exc:
            logger.warning(f"[Aggregator] profile lookup failed: {exc}")
            continue

        for event in events:
            profile = AuthorProfile.from_event(event)
            if profile is None or profile.pubkey not in batch:
                continue
            current = profiles.get(profile.pubkey)
            if current is None or profile.created_at > current.created_at:
                profiles[profile.pubkey] = profile

    logger.debug(f"[Aggregator] resolved {len(profiles)}/{len(wanted)} author profiles")
    return profiles

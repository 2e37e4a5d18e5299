"""
Loads config/relays.yaml: the relay list, the filter plan and the platform
rules used for provenance scoring.

Filters are stored relative ("since_days: 30") and turned into absolute
FilterSpecs at the start of every fetch cycle by build_filters().
"""
import time
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from loguru import logger

from config.settings import LONGFORM_KIND
from longform.classifier.provenance import DEFAULT_RULES, PlatformRule, Source
from longform.relays.models import FilterSpec

_DAY_S = 24 * 60 * 60


@dataclass(frozen=True)
class FilterTemplate:
    name:       str = ""
    since_days: int | None = None
    tags:       dict[str, tuple[str, ...]] = field(default_factory=dict)
    limit:      int = 100
    kind:       int = LONGFORM_KIND


# Recent posts, topic-tagged posts and posts mentioning the known platforms.
DEFAULT_FILTERS: tuple[FilterTemplate, ...] = (
    FilterTemplate(name="recent", since_days=30, limit=100),
    FilterTemplate(name="tagged", tags={"t": ("longform", "article", "blog")}, limit=50),
    FilterTemplate(name="platform-mentions", tags={"p": ("highlighter", "habla")}, limit=50),
)


@dataclass(frozen=True)
class RelayConfig:
    relays:    tuple[str, ...]
    filters:   tuple[FilterTemplate, ...] = DEFAULT_FILTERS
    platforms: tuple[PlatformRule, ...] = DEFAULT_RULES


def build_filters(templates: tuple[FilterTemplate, ...], now: float | None = None) -> list[FilterSpec]:
    """Resolve relative windows against `now` (unix seconds)."""
    now = time.time() if now is None else now
    return [
        FilterSpec(
            kind  = t.kind,
            since = int(now) - t.since_days * _DAY_S if t.since_days is not None else None,
            tags  = dict(t.tags),
            limit = t.limit,
            name  = t.name,
        )
        for t in templates
    ]


def load_relay_config(path: Path) -> RelayConfig:
    """Parse relays.yaml. Missing sections fall back to the built-in defaults."""
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    relays = tuple(str(url).strip() for url in data.get("relays", []) if str(url).strip())
    if not relays:
        raise ValueError(f"{path}: no relays configured")

    filters = DEFAULT_FILTERS
    if data.get("filters"):
        filters = tuple(_parse_filter(raw) for raw in data["filters"])

    platforms = DEFAULT_RULES
    if data.get("platforms"):
        platforms = tuple(_parse_platform(raw) for raw in data["platforms"])

    logger.debug(
        f"[Config] {path.name}: {len(relays)} relays, {len(filters)} filters,"
        f" {len(platforms)} platform rules"
    )
    return RelayConfig(relays=relays, filters=filters, platforms=platforms)


# ── Helpers ────────────────────────────────────────────────────────────────────

def _parse_filter(raw: dict) -> FilterTemplate:
    tags = {
        str(letter): tuple(str(v) for v in values)
        for letter, values in (raw.get("tags") or {}).items()
    }
    since_days = raw.get("since_days")
    return FilterTemplate(
        name       = str(raw.get("name", "")),
        since_days = int(since_days) if since_days is not None else None,
        tags       = tags,
        limit      = int(raw.get("limit", 100)),
        kind       = int(raw.get("kind", LONGFORM_KIND)),
    )


def _parse_platform(raw: dict) -> PlatformRule:
    return PlatformRule(
        source     = Source(raw["source"]),
        client     = tuple(str(f).lower() for f in raw.get("client", [])),
        indicators = tuple(str(i).lower() for i in raw.get("indicators", [])),
    )

"""
Post dataclass and the RawEvent → Post mapping.

process_events() keeps the aggregator's order and never sorts; ordering for
display is select_posts()' job (longform/view.py). Events of another kind or
with content under the substantiveness floor produce no Post.
"""
from dataclasses import dataclass
from datetime import datetime, timezone

from bech32 import bech32_encode, convertbits
from loguru import logger

from config.settings import (
    CLIENT_CONFIDENCE,
    INDICATOR_CAP,
    INDICATOR_WEIGHT,
    LONGFORM_KIND,
    MIN_CONTENT_LENGTH,
    SUMMARY_MAX_LENGTH,
    TIER_GATE,
    TITLE_MAX_LENGTH,
    WORDS_PER_MINUTE,
)
from longform.classifier.provenance import DEFAULT_RULES, PlatformRule, Source, classify_source
from longform.classifier.text import count_words, extract_summary, extract_title, read_minutes
from longform.relays.models import AuthorProfile, RawEvent


@dataclass(frozen=True)
class Post:
    id:                str
    pubkey:            str
    author:            str
    title:             str
    summary:           str
    content:           str
    created_at:        int
    published_at:      datetime
    source:            Source
    source_confidence: float
    word_count:        int
    read_minutes:      int
    topics:            tuple[str, ...] = ()
    image:             str | None = None
    author_picture:    str | None = None


@dataclass(frozen=True)
class ExtractionConfig:
    kind:               int = LONGFORM_KIND
    min_content_length: int = MIN_CONTENT_LENGTH
    title_max_length:   int = TITLE_MAX_LENGTH
    summary_max_length: int = SUMMARY_MAX_LENGTH
    words_per_minute:   int = WORDS_PER_MINUTE
    rules:              tuple[PlatformRule, ...] = DEFAULT_RULES
    tier_gate:          float = TIER_GATE
    client_confidence:  float = CLIENT_CONFIDENCE
    indicator_weight:   float = INDICATOR_WEIGHT
    indicator_cap:      float = INDICATOR_CAP


# ── Public API ─────────────────────────────────────────────────────────────────

def process_events(
    events: list[RawEvent],
    config: ExtractionConfig | None = None,
    profiles: dict[str, AuthorProfile] | None = None,
) -> list[Post]:
    """Map deduplicated events to Posts, in input order."""
    config   = config or ExtractionConfig()
    profiles = profiles or {}

    posts: list[Post] = []
    seen: set[str] = set()
    for event in events:
        if event.id in seen:
            continue
        seen.add(event.id)
        post = build_post(event, config, profiles.get(event.pubkey))
        if post is not None:
            posts.append(post)

    logger.info(
        f"[Classifier] {len(seen)} events → {len(posts)} posts"
        f" ({len(seen) - len(posts)} dropped as off-kind or too short)"
    )
    return posts


def build_post(
    event: RawEvent,
    config: ExtractionConfig,
    profile: AuthorProfile | None = None,
) -> Post | None:
    if event.kind != config.kind or len(event.content) < config.min_content_length:
        return None

    title_tag   = event.first_tag("title")
    summary_tag = event.first_tag("summary")
    image_tag   = event.first_tag("image")

    source, confidence = classify_source(
        event.content,
        event.tags,
        config.rules,
        tier_gate         = config.tier_gate,
        client_confidence = config.client_confidence,
        indicator_weight  = config.indicator_weight,
        indicator_cap     = config.indicator_cap,
    )
    words = count_words(event.content)

    return Post(
        id                = event.id,
        pubkey            = event.pubkey,
        author            = profile.name if profile and profile.name else format_pubkey(event.pubkey),
        author_picture    = (profile.picture or None) if profile else None,
        title             = (
            title_tag.value if title_tag and title_tag.value
            else extract_title(event.content, config.title_max_length)
        ),
        summary           = (
            summary_tag.value if summary_tag and summary_tag.value
            else extract_summary(event.content, config.summary_max_length)
        ),
        content           = event.content,
        created_at        = event.created_at,
        published_at      = _published_at(event),
        topics            = tuple(event.tag_values("t")),
        source            = source,
        source_confidence = confidence,
        word_count        = words,
        read_minutes      = read_minutes(words, config.words_per_minute),
        image             = image_tag.value if image_tag and image_tag.value else None,
    )


def format_pubkey(pubkey: str) -> str:
    """Shortened npub (bech32) form of a hex public key, e.g. 'npub1abcdefg...uvwxyz'."""
    try:
        raw = bytes.fromhex(pubkey)
    except ValueError:
        return pubkey[:12] + "..."
    data = convertbits(raw, 8, 5) if len(raw) == 32 else None
    npub = bech32_encode("npub", data) if data else None
    if not npub:
        return pubkey[:12] + "..."
    return f"{npub[:12]}...{npub[-6:]}"


# ── Helpers ────────────────────────────────────────────────────────────────────

def _published_at(event: RawEvent) -> datetime:
    """published_at tag (unix seconds) if it parses, else created_at."""
    tag = event.first_tag("published_at")
    if tag and tag.value:
        try:
            return datetime.fromtimestamp(int(tag.value), tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            logger.debug(f"[Classifier] {event.id[:12]} bad published_at {tag.value!r}")
    return datetime.fromtimestamp(event.created_at, tz=timezone.utc)

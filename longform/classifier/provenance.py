"""
Provenance classification — which authoring platform produced a post.

Two tiers:
  1. client tag: case-insensitive substring match against each platform's
     client fragments. A hit scores CLIENT_CONFIDENCE (0.9).
  2. only if tier 1 scored below TIER_GATE: count how many of each platform's
     indicator phrases occur in the content or the joined tag text. The
     strictly highest non-zero count wins with min(cap, count * weight).
     A tie for first place leaves the result unknown.

Pure function of (content, tags); no I/O.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from config.settings import CLIENT_CONFIDENCE, INDICATOR_CAP, INDICATOR_WEIGHT, TIER_GATE


class Source(str, Enum):
    UNKNOWN     = "unknown"
    HIGHLIGHTER = "highlighter"
    HABLA       = "habla"


@dataclass(frozen=True)
class PlatformRule:
    source:     Source
    client:     tuple[str, ...]     # lower-case fragments of the client tag
    indicators: tuple[str, ...]     # lower-case phrases searched in content + tags


DEFAULT_RULES: tuple[PlatformRule, ...] = (
    PlatformRule(
        source     = Source.HIGHLIGHTER,
        client     = ("highlighter",),
        indicators = ("highlighter.com", "highlighter", "highlight"),
    ),
    PlatformRule(
        source     = Source.HABLA,
        client     = ("habla",),
        indicators = ("habla.news", "habla", "speak"),
    ),
)


def classify_source(
    content: str,
    tags: Iterable,
    rules: tuple[PlatformRule, ...] = DEFAULT_RULES,
    *,
    tier_gate: float = TIER_GATE,
    client_confidence: float = CLIENT_CONFIDENCE,
    indicator_weight: float = INDICATOR_WEIGHT,
    indicator_cap: float = INDICATOR_CAP,
) -> tuple[Source, float]:
    """Return (source, confidence) for one event's content and tags."""
    tags = list(tags)
    source, confidence = Source.UNKNOWN, 0.0

    client = next((t.value for t in tags if t.name == "client"), "").lower()
    if client:
        for rule in rules:
            if any(fragment in client for fragment in rule.client):
                source, confidence = rule.source, client_confidence
                break

    if confidence >= tier_gate:
        return source, confidence

    haystacks = (
        content.lower(),
        " ".join(" ".join((t.name, *t.values)) for t in tags).lower(),
    )
    scores = sorted(
        ((rule.source, _count_indicators(rule.indicators, haystacks)) for rule in rules),
        key=lambda pair: pair[1],
        reverse=True,
    )
    if not scores or scores[0][1] == 0:
        return source, confidence
    if len(scores) > 1 and scores[1][1] == scores[0][1]:
        return source, confidence

    best, count = scores[0]
    return best, min(indicator_cap, count * indicator_weight)


def _count_indicators(indicators: tuple[str, ...], haystacks: tuple[str, ...]) -> int:
    # Each phrase counts once, wherever it appears.
    return sum(1 for phrase in indicators if any(phrase in h for h in haystacks))

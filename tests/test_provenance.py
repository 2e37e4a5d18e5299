"""Tests for the two-tier provenance classifier."""
import pytest

from longform.classifier.provenance import PlatformRule, Source, classify_source
from longform.relays.models import Tag


def _tags(*raw):
    return [Tag.from_wire(list(t)) for t in raw]


NEUTRAL = "A plain essay about gardening and the weather."


def test_client_tag_highlighter():
    assert classify_source(NEUTRAL, _tags(("client", "Highlighter App"))) == (Source.HIGHLIGHTER, 0.9)


def test_client_tag_habla_is_case_insensitive():
    assert classify_source(NEUTRAL, _tags(("client", "HABLA.NEWS"))) == (Source.HABLA, 0.9)


def test_client_tag_wins_over_content():
    content = "habla habla.news speak"
    assert classify_source(content, _tags(("client", "highlighter"))) == (Source.HIGHLIGHTER, 0.9)


def test_content_indicators_score_per_phrase():
    source, confidence = classify_source("Originally posted on habla.news", [])
    assert source is Source.HABLA
    assert confidence == pytest.approx(0.6)


def test_indicator_score_is_capped():
    source, confidence = classify_source("See highlighter.com for more", [])
    assert source is Source.HIGHLIGHTER
    assert confidence == pytest.approx(0.7)


def test_tag_text_counts_as_indicator():
    source, confidence = classify_source(NEUTRAL, _tags(("t", "habla")))
    assert source is Source.HABLA
    assert confidence == pytest.approx(0.3)


def test_unknown_client_falls_through_to_indicators():
    source, confidence = classify_source("I love to highlight passages", _tags(("client", "coracle")))
    assert source is Source.HIGHLIGHTER
    assert confidence == pytest.approx(0.3)


def test_tie_stays_unknown():
    assert classify_source("I highlight things and speak loudly", []) == (Source.UNKNOWN, 0.0)


def test_no_signal_stays_unknown():
    assert classify_source(NEUTRAL, _tags(("title", "Gardening"))) == (Source.UNKNOWN, 0.0)


def test_custom_rules_and_thresholds():
    rules = (PlatformRule(Source.HABLA, client=("yakihonne",), indicators=("yaki",)),)
    assert classify_source(NEUTRAL, _tags(("client", "YakiHonne")), rules) == (Source.HABLA, 0.9)
    assert classify_source(
        NEUTRAL, _tags(("client", "YakiHonne")), rules, client_confidence=0.8
    ) == (Source.HABLA, 0.8)

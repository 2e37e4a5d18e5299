"""Tests for RawEvent → Post mapping."""
from datetime import datetime, timezone

from fakes import LONG_TEXT, PUBKEY, make_event
from longform.classifier.posts import ExtractionConfig, format_pubkey, process_events
from longform.classifier.provenance import Source
from longform.relays.models import AuthorProfile


def test_short_content_produces_no_post():
    assert process_events([make_event("short", "x" * 50)]) == []


def test_content_at_floor_is_kept():
    posts = process_events([make_event("edge", "y" * 100)])
    assert [p.id for p in posts] == ["edge"]


def test_floor_is_configurable():
    config = ExtractionConfig(min_content_length=10)
    assert len(process_events([make_event("tiny", "twelve chars")], config)) == 1


def test_other_kinds_are_dropped():
    assert process_events([make_event("note", LONG_TEXT, kind=1)]) == []


def test_tags_override_derived_fields():
    event = make_event("tagged", "# Derived Title\n" + LONG_TEXT, tags=[
        ["title", "Explicit Title"],
        ["summary", "Explicit summary."],
        ["image", "https://img.example/cover.jpg"],
        ["t", "nostr"],
        ["t", "essays"],
        ["client", "Highlighter App"],
    ])

    post = process_events([event])[0]

    assert post.title == "Explicit Title"
    assert post.summary == "Explicit summary."
    assert post.image == "https://img.example/cover.jpg"
    assert post.topics == ("nostr", "essays")
    assert post.source is Source.HIGHLIGHTER
    assert post.source_confidence == 0.9


def test_missing_or_empty_tags_fall_back_to_extraction():
    event = make_event("derived", "# Hello World\nBody text " + LONG_TEXT, tags=[["title", ""]])

    post = process_events([event])[0]

    assert post.title == "Hello World"
    assert post.summary.startswith("Hello World Body text")
    assert post.image is None
    assert post.topics == ()
    assert post.source is Source.UNKNOWN


def test_published_at_tag_and_fallback():
    tagged = make_event("a", created_at=1_700_000_000, tags=[["published_at", "1600000000"]])
    broken = make_event("b", created_at=1_700_000_000, tags=[["published_at", "yesterday"]])

    post_a, post_b = process_events([tagged, broken])

    assert post_a.published_at == datetime.fromtimestamp(1_600_000_000, tz=timezone.utc)
    assert post_b.published_at == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)


def test_metrics_for_400_words():
    post = process_events([make_event("words", " ".join(["lorem"] * 400))])[0]
    assert post.word_count == 400
    assert post.read_minutes == 2


def test_order_is_preserved_and_ids_are_unique():
    events = [
        make_event("c", created_at=3),
        make_event("a", created_at=1),
        make_event("skip", "too short"),
        make_event("b", created_at=2),
        make_event("a", created_at=1),
    ]
    assert [p.id for p in process_events(events)] == ["c", "a", "b"]


def test_author_from_profile_or_npub():
    profile = AuthorProfile(pubkey=PUBKEY, name="fiatjaf", picture="https://img.example/f.png")
    other = "ff" * 32
    events = [make_event("with-profile"), make_event("without", pubkey=other)]

    named, anonymous = process_events(events, profiles={PUBKEY: profile})

    assert named.author == "fiatjaf"
    assert named.author_picture == "https://img.example/f.png"
    assert anonymous.author == format_pubkey(other)
    assert anonymous.author_picture is None


def test_format_pubkey_shortens_npub():
    assert format_pubkey(PUBKEY) == "npub180cvv07...yjh6w6"


def test_format_pubkey_falls_back_for_bad_keys():
    assert format_pubkey("not-a-hex-key-at-all") == "not-a-hex-ke..."
    assert format_pubkey("abcd") == "abcd..."

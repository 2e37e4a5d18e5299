"""Tests for select_posts: source filtering and sort order."""
from datetime import datetime, timezone

import pytest

from longform.classifier.posts import Post
from longform.classifier.provenance import Source
from longform.view import SortMode, select_posts


def _post(post_id: str, day: int, source: Source = Source.UNKNOWN) -> Post:
    return Post(
        id                = post_id,
        pubkey            = "ab" * 32,
        author            = "someone",
        title             = post_id,
        summary           = "",
        content           = "",
        created_at        = 0,
        published_at      = datetime(2024, 1, day, tzinfo=timezone.utc),
        source            = source,
        source_confidence = 0.0,
        word_count        = 0,
        read_minutes      = 0,
    )


POSTS = [
    _post("mid", 15, Source.HABLA),
    _post("old", 1, Source.HIGHLIGHTER),
    _post("new", 30, Source.HIGHLIGHTER),
    _post("mid-too", 15),
]


def test_newest_first_by_default():
    assert [p.id for p in select_posts(POSTS)] == ["new", "mid", "mid-too", "old"]


def test_oldest_first():
    assert [p.id for p in select_posts(POSTS, sort="oldest")] == ["old", "mid", "mid-too", "new"]


def test_source_filter():
    selected = select_posts(POSTS, source=Source.HIGHLIGHTER, sort=SortMode.OLDEST)
    assert [p.id for p in selected] == ["old", "new"]
    assert [p.id for p in select_posts(POSTS, source="unknown")] == ["mid-too"]


def test_input_list_is_untouched():
    before = list(POSTS)
    select_posts(POSTS, sort="oldest")
    assert POSTS == before


def test_unknown_parameters_raise():
    with pytest.raises(ValueError):
        select_posts(POSTS, sort="random")
    with pytest.raises(ValueError):
        select_posts(POSTS, source="myspace")

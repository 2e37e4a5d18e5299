"""
Display-side selection over a post list: source filter and sort order.

"newest" sorts by published_at descending, "oldest" ascending. Both sorts
are stable, so posts published at the same moment keep the classifier order.
"""
from enum import Enum

from longform.classifier.posts import Post
from longform.classifier.provenance import Source

ALL_SOURCES = "all"


class SortMode(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"


def select_posts(
    posts: list[Post],
    source: str | Source = ALL_SOURCES,
    sort: str | SortMode = SortMode.NEWEST,
) -> list[Post]:
    """Return a new list; `posts` is left untouched. Raises ValueError on unknown values."""
    sort = SortMode(sort)

    selected = list(posts)
    if source != ALL_SOURCES:
        wanted = Source(source)
        selected = [post for post in selected if post.source is wanted]

    selected.sort(key=lambda post: post.published_at, reverse=sort is SortMode.NEWEST)
    return selected

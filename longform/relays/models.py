"""
Relay-side data shapes: endpoint status records, raw events and filters.

RawEvent and Tag are frozen once decoded from the wire. RelayEndpoint is the
only mutable record and is owned by RelayPool.
"""
import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from loguru import logger

from config.settings import LONGFORM_KIND


class RelayStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING   = "connecting"
    CONNECTED    = "connected"
    ERROR        = "error"


@dataclass
class RelayEndpoint:
    url:            str
    status:         RelayStatus = RelayStatus.DISCONNECTED
    errors:         int = 0
    last_connected: datetime | None = None
    last_error:     str = ""


@dataclass(frozen=True)
class Tag:
    name:   str
    values: tuple[str, ...] = ()

    @property
    def value(self) -> str:
        return self.values[0] if self.values else ""

    @classmethod
    def from_wire(cls, raw: list) -> "Tag":
        return cls(name=str(raw[0]), values=tuple(str(v) for v in raw[1:]))


@dataclass(frozen=True)
class RawEvent:
    id:         str
    pubkey:     str
    created_at: int
    kind:       int
    content:    str
    tags:       tuple[Tag, ...] = ()

    def first_tag(self, name: str) -> Tag | None:
        for tag in self.tags:
            if tag.name == name:
                return tag
        return None

    def tag_values(self, name: str) -> list[str]:
        """The first value of every tag called `name`, in order."""
        return [t.value for t in self.tags if t.name == name and t.value]

    @classmethod
    def from_wire(cls, raw: Any) -> "RawEvent | None":
        """
        Decode an event object as sent inside an EVENT message.
        Returns None for anything malformed; callers drop those silently.
        """
        if not isinstance(raw, dict):
            return None
        try:
            event_id   = raw["id"]
            pubkey     = raw["pubkey"]
            created_at = raw["created_at"]
            kind       = raw["kind"]
            content    = raw["content"]
            raw_tags   = raw.get("tags", [])
        except KeyError as exc:
            logger.debug(f"[Event] dropping event without {exc}")
            return None

        if not (isinstance(event_id, str) and event_id and isinstance(pubkey, str)):
            return None
        if isinstance(created_at, bool) or not isinstance(created_at, int):
            return None
        if isinstance(kind, bool) or not isinstance(kind, int):
            return None
        if not isinstance(content, str) or not isinstance(raw_tags, list):
            return None

        tags = tuple(
            Tag.from_wire(t) for t in raw_tags
            if isinstance(t, list) and t and isinstance(t[0], str)
        )
        return cls(
            id         = event_id,
            pubkey     = pubkey,
            created_at = created_at,
            kind       = kind,
            content    = content,
            tags       = tags,
        )


PROFILE_KIND = 0


@dataclass(frozen=True)
class AuthorProfile:
    pubkey:     str
    name:       str = ""
    picture:    str = ""
    created_at: int = 0

    @classmethod
    def from_event(cls, event: RawEvent) -> "AuthorProfile | None":
        """Parse a kind-0 metadata event; its content is a JSON object."""
        if event.kind != PROFILE_KIND:
            return None
        try:
            meta = json.loads(event.content)
        except ValueError:
            return None
        if not isinstance(meta, dict):
            return None
        name = meta.get("display_name") or meta.get("name") or ""
        return cls(
            pubkey     = event.pubkey,
            name       = str(name).strip(),
            picture    = str(meta.get("picture") or ""),
            created_at = event.created_at,
        )


@dataclass(frozen=True)
class FilterSpec:
    """
    One REQ filter. `tags` maps a single-letter tag name to the values any of
    which must be present, e.g. {"t": ("longform", "blog")}.
    """
    kind:    int = LONGFORM_KIND
    since:   int | None = None
    tags:    dict[str, tuple[str, ...]] = field(default_factory=dict)
    authors: tuple[str, ...] = ()
    limit:   int = 100
    name:    str = ""

    def to_wire(self) -> dict:
        wire: dict[str, Any] = {"kinds": [self.kind], "limit": self.limit}
        if self.since is not None:
            wire["since"] = self.since
        if self.authors:
            wire["authors"] = list(self.authors)
        for letter, values in self.tags.items():
            wire[f"#{letter}"] = list(values)
        return wire

    def describe(self) -> str:
        return self.name or str(self.to_wire())

"""Scripted stand-ins for relay connections, shared by the test modules."""
import asyncio
from dataclasses import dataclass, field

from longform.errors import ConnectError, QueryError
from longform.relays.models import FilterSpec, RawEvent, Tag

PUBKEY = "3bf0c63fcb93463407af97a5e5ee64fa883d107ef9e558472c4eb9aaaefa459d"
LONG_TEXT = "This is a long enough body of text for the reader to treat as a real article. " * 3


def make_event(
    event_id: str,
    content: str = LONG_TEXT,
    *,
    kind: int = 30023,
    pubkey: str = PUBKEY,
    created_at: int = 1_700_000_000,
    tags: list[list[str]] | None = None,
) -> RawEvent:
    return RawEvent(
        id         = event_id,
        pubkey     = pubkey,
        created_at = created_at,
        kind       = kind,
        content    = content,
        tags       = tuple(Tag.from_wire(t) for t in (tags or [])),
    )


@dataclass
class RelayScript:
    connect_delay: float = 0.0
    connect_error: str | None = None
    query_delay:   float = 0.0
    query_error:   str | None = None
    # keyed by FilterSpec.name; "*" answers any filter without its own entry
    events:        dict[str, list[RawEvent]] = field(default_factory=dict)


class FakeConnection:
    def __init__(self, url, on_close=None, script: RelayScript | None = None):
        self.url      = url
        self.on_close = on_close
        self.script   = script or RelayScript()
        self.is_open  = False
        self.closed   = False
        self.queries: list[FilterSpec] = []

    async def connect(self) -> None:
        if self.script.connect_delay:
            await asyncio.sleep(self.script.connect_delay)
        if self.script.connect_error:
            raise ConnectError(self.url, self.script.connect_error)
        self.is_open = True

    async def query(self, spec: FilterSpec) -> list[RawEvent]:
        self.queries.append(spec)
        if self.script.query_delay:
            await asyncio.sleep(self.script.query_delay)
        if self.script.query_error:
            raise QueryError(self.script.query_error)
        return list(self.script.events.get(spec.name, self.script.events.get("*", [])))

    async def close(self) -> None:
        self.is_open = False
        self.closed  = True

    async def drop(self, error: Exception | None = None) -> None:
        """Relay-side close, as the listener task would report it."""
        self.is_open = False
        await self.on_close(self.url, error)


class FakeRelayNet:
    """Connection factory handing out FakeConnections scripted per URL."""

    def __init__(self):
        self.scripts:     dict[str, RelayScript] = {}
        self.connections: dict[str, FakeConnection] = {}

    def script(self, url: str, **kwargs) -> RelayScript:
        self.scripts[url] = RelayScript(**kwargs)
        return self.scripts[url]

    def factory(self, url, on_close=None) -> FakeConnection:
        conn = FakeConnection(url, on_close, self.scripts.setdefault(url, RelayScript()))
        self.connections[url] = conn
        return conn


class StubPool:
    """Answers pool.query() from a dict keyed by filter name."""

    def __init__(self, answers: dict[str, list[RawEvent] | Exception] | None = None):
        self.answers = answers or {}
        self.calls: list[FilterSpec] = []

    async def query(self, connected, spec, timeout_s):
        self.calls.append(spec)
        answer = self.answers.get(spec.name, [])
        if isinstance(answer, Exception):
            raise answer
        return list(answer)

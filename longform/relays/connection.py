"""
WebSocket wrapper for one relay, speaking the NIP-01 message set:

  client → relay   ["REQ", sub_id, filter]   ["CLOSE", sub_id]
  relay  → client  ["EVENT", sub_id, event]  ["EOSE", sub_id]
                   ["CLOSED", sub_id, msg]   ["NOTICE", msg]

One background task reads the socket and routes messages to per-subscription
queues. When the socket drops on its own, the on_close callback is awaited
with the causing exception (None for a clean close) so the pool can update
the endpoint record. Timeouts are applied by the caller.
"""
import asyncio
import contextlib
import json
import uuid
from typing import Awaitable, Callable

import websockets
from loguru import logger
from websockets.exceptions import ConnectionClosed, WebSocketException

from longform.errors import ConnectError, QueryError
from longform.relays.models import FilterSpec, RawEvent

CloseCallback = Callable[[str, Exception | None], Awaitable[None]]


class RelayConnection:
    """One socket per relay; many concurrent subscriptions over it."""

    def __init__(self, url: str, on_close: CloseCallback | None = None):
        self.url       = url
        self._on_close = on_close
        self._ws       = None
        self._reader:  asyncio.Task | None = None
        self._subs:    dict[str, asyncio.Queue] = {}
        self._closing  = False

    @property
    def is_open(self) -> bool:
        return self._ws is not None and self._reader is not None and not self._reader.done()

    # ── Lifecycle ──────────────────────────────────────────────────────────────

    async def connect(self) -> None:
        try:
            self._ws = await websockets.connect(self.url, open_timeout=None, max_size=None)
        except (OSError, WebSocketException) as exc:
            raise ConnectError(self.url, str(exc) or type(exc).__name__) from exc
        self._reader = asyncio.create_task(self._listen(), name=f"relay-listen {self.url}")

    async def close(self) -> None:
        self._closing = True
        if self._ws is not None:
            await self._ws.close()
        if self._reader is not None:
            await asyncio.gather(self._reader, return_exceptions=True)

    # ── Queries ────────────────────────────────────────────────────────────────

    async def query(self, spec: FilterSpec) -> list[RawEvent]:
        """Run one subscription until EOSE and return every decodable event."""
        if not self.is_open:
            raise QueryError(f"{self.url} is not connected")

        sub_id = uuid.uuid4().hex[:16]
        queue: asyncio.Queue = asyncio.Queue()
        self._subs[sub_id] = queue
        events: list[RawEvent] = []
        try:
            await self._send(["REQ", sub_id, spec.to_wire()])
            while True:
                kind, payload = await queue.get()
                if kind == "event":
                    event = RawEvent.from_wire(payload)
                    if event is not None:
                        events.append(event)
                elif kind == "eose":
                    break
                elif kind == "closed":
                    raise QueryError(f"{self.url} closed subscription: {payload}")
                else:
                    raise QueryError(f"{self.url} dropped mid-query: {payload}")
        finally:
            self._subs.pop(sub_id, None)
            if self.is_open:
                with contextlib.suppress(QueryError):
                    await self._send(["CLOSE", sub_id])
        return events

    # ── Internal ───────────────────────────────────────────────────────────────

    async def _send(self, message: list) -> None:
        try:
            await self._ws.send(json.dumps(message))
        except ConnectionClosed as exc:
            raise QueryError(f"{self.url} send failed: {exc}") from exc

    async def _listen(self) -> None:
        error: Exception | None = None
        try:
            async for message in self._ws:
                self._dispatch(message)
        except ConnectionClosed as exc:
            error = exc
        finally:
            self._fail_pending(str(error) if error else "connection closed")

        if not self._closing and self._on_close is not None:
            await self._on_close(self.url, error)

    def _dispatch(self, message) -> None:
        try:
            data = json.loads(message)
        except (TypeError, ValueError):
            logger.debug(f"[Relay] {self.url} sent non-JSON frame, ignoring")
            return
        if not isinstance(data, list) or not data:
            return

        verb = data[0]
        if verb == "NOTICE":
            logger.info(f"[Relay] {self.url} notice: {data[1] if len(data) > 1 else ''}")
            return
        if len(data) < 2 or data[1] not in self._subs:
            return

        queue = self._subs[data[1]]
        if verb == "EVENT" and len(data) >= 3:
            queue.put_nowait(("event", data[2]))
        elif verb == "EOSE":
            queue.put_nowait(("eose", None))
        elif verb == "CLOSED":
            queue.put_nowait(("closed", data[2] if len(data) > 2 else ""))

    def _fail_pending(self, reason: str) -> None:
        for queue in self._subs.values():
            queue.put_nowait(("lost", reason))

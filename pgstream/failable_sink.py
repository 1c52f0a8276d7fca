"""A sink whose failures can be scheduled, for exercising failover."""

from __future__ import annotations

import asyncio
from typing import ClassVar, Iterable

from pgstream.events import TriggeredEvent
from pgstream.sink import Sink


class SinkFailureError(Exception):
    """A simulated failure of the sink."""

    def __init__(self) -> None:
        super().__init__("Simulated sink failure: Test failure")


class FailableSink(Sink):
    """Stores events like a memory sink, but can fail on a chosen call."""

    name: ClassVar[str] = "failable_sink"

    def __init__(self) -> None:
        self._events: list[TriggeredEvent] = []
        self._lock = asyncio.Lock()
        self._fail_on_call: int | None = None
        self._call_count = 0

    def fail_on_call(self, n: int) -> None:
        """Fail the ``n``-th call to publish_events, counting from zero."""
        self._fail_on_call = n

    def succeed_always(self) -> None:
        """Let every call succeed."""
        self._fail_on_call = None

    async def events(self) -> list[TriggeredEvent]:
        """Return a copy of the events stored by successful calls."""
        async with self._lock:
            return list(self._events)

    def call_count(self) -> int:
        """Number of publish_events calls so far, failed ones included."""
        return self._call_count

    async def publish_events(self, events: Iterable[TriggeredEvent]) -> None:
        call_num = self._call_count
        self._call_count += 1
        if call_num == self._fail_on_call:
            raise SinkFailureError()
        batch = list(events)
        async with self._lock:
            self._events.extend(batch)
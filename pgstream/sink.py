"""Destinations that receive triggered events."""

from __future__ import annotations

import abc
import asyncio
import logging
from typing import ClassVar, Iterable

from pgstream.events import TriggeredEvent

logger = logging.getLogger(__name__)


class Sink(abc.ABC):
    """A system that receives events from streams.

    Publishing may be retried by the stream, so implementations should be
    idempotent where possible and safe under concurrent calls.
    """

    name: ClassVar[str]

    @abc.abstractmethod
    async def publish_events(self, events: Iterable[TriggeredEvent]) -> None:
        """Deliver a batch of events; raise if the destination rejects them."""


class MemorySink(Sink):
    """Keeps every published event in memory, for tests and development."""

    name: ClassVar[str] = "memory"

    def __init__(self) -> None:
        self._events: list[TriggeredEvent] = []
        self._lock = asyncio.Lock()

    async def publish_events(self, events: Iterable[TriggeredEvent]) -> None:
        batch = list(events)
        async with self._lock:
            logger.info("writing a batch of %d events:", len(batch))
            for event in batch:
                logger.info("  %r", event)
            self._events.extend(batch)

    async def events(self) -> list[TriggeredEvent]:
        """Return a copy of every event stored since creation or the last clear."""
        async with self._lock:
            return list(self._events)

    async def clear(self) -> None:
        """Forget every stored event."""
        async with self._lock:
            self._events.clear()
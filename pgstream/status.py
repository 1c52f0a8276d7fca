"""Health status of a stream."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from pgstream.events import EventIdentifier


@dataclass(frozen=True)
class Healthy:
    """Events reach the sink normally."""


@dataclass(frozen=True)
class Failover:
    """The sink is unreachable; replay resumes from the checkpoint event."""

    checkpoint_event_id: EventIdentifier


StreamStatus = Union[Healthy, Failover]


def publication_name(stream_id: int) -> str:
    """Name of the Postgres publication used by a stream."""
    return f"pgstream_stream_{stream_id}"
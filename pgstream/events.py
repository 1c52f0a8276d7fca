"""Triggered events and their conversion from replicated table rows."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Sequence, Union

from pgstream.lsn import PgLsn

_U64_MASK = (1 << 64) - 1


class InvalidDataError(Exception):
    """Raised when a row lacks data required to build an event."""

    def __init__(self, description: str, detail: str) -> None:
        super().__init__(f"{description}: {detail}")
        self.description = description
        self.detail = detail


@dataclass(frozen=True)
class Json:
    """A JSON cell value, kept apart from plain text and integer cells."""

    value: Any


@dataclass(frozen=True)
class ColumnSchema:
    """Description of one column of a replicated table."""

    name: str
    type_name: str = ""
    modifier: int = -1
    nullable: bool = True
    primary: bool = False


@dataclass
class TableRow:
    """A row of cells: UUID, datetime, Json, int, str or None."""

    values: list[Any] = field(default_factory=list)


@dataclass
class InsertEvent:
    """A replicated insert of one row."""

    table_id: int
    table_row: TableRow
    start_lsn: PgLsn = field(default_factory=PgLsn)
    commit_lsn: PgLsn = field(default_factory=PgLsn)


@dataclass(frozen=True)
class UnsupportedEvent:
    """Any replication event other than an insert."""


Event = Union[InsertEvent, UnsupportedEvent]


@dataclass(frozen=True, order=True)
class EventIdentifier:
    """Primary key of a row in the events table; ordered by id, then time."""

    id: str
    created_at: datetime

    def primary_keys(self) -> tuple[str, datetime]:
        return self.id, self.created_at


@dataclass
class TriggeredEvent:
    """An event produced by a subscription trigger."""

    id: EventIdentifier
    payload: Any
    metadata: Any | None
    stream_id: int
    lsn: PgLsn | None = None

    def primary_keys(self) -> tuple[EventIdentifier, datetime]:
        return self.id, self.id.created_at


def _missing(name: str) -> InvalidDataError:
    return InvalidDataError(
        f"Missing {name}",
        f"The '{name}' column is required but was not found or is null",
    )


def _parse_lsn(text: str) -> PgLsn | None:
    try:
        return PgLsn.parse(text)
    except ValueError:
        return None


def convert_event_from_table(
    table_row: TableRow, column_schemas: Sequence[ColumnSchema]
) -> TriggeredEvent:
    """Build a TriggeredEvent from a row laid out by ``column_schemas``."""
    found: dict[str, Any] = {}
    for column, cell in zip(column_schemas, table_row.values):
        name = column.name
        if name == "id" and isinstance(cell, uuid.UUID):
            found["id"] = str(cell)
        elif name == "created_at" and isinstance(cell, datetime):
            found["created_at"] = cell
        elif name in ("payload", "metadata") and isinstance(cell, Json):
            found[name] = cell.value
        elif (
            name == "stream_id"
            and isinstance(cell, int)
            and not isinstance(cell, bool)
        ):
            found["stream_id"] = cell & _U64_MASK
        elif name == "lsn" and isinstance(cell, str):
            found["lsn"] = _parse_lsn(cell)

    for required in ("id", "created_at", "payload", "stream_id"):
        if required not in found:
            raise _missing(required)

    return TriggeredEvent(
        id=EventIdentifier(found["id"], found["created_at"]),
        payload=found["payload"],
        metadata=found.get("metadata"),
        stream_id=found["stream_id"],
        lsn=found.get("lsn"),
    )


def convert_events_from_table_rows(
    table_rows: Iterable[TableRow], column_schemas: Sequence[ColumnSchema]
) -> list[TriggeredEvent]:
    """Convert every row; the first invalid row raises."""
    return [convert_event_from_table(row, column_schemas) for row in table_rows]


def convert_stream_events_from_events(
    events: Iterable[Event], column_schemas: Sequence[ColumnSchema]
) -> list[TriggeredEvent]:
    """Convert insert events, skipping every other kind of event."""
    return [
        convert_event_from_table(event.table_row, column_schemas)
        for event in events
        if isinstance(event, InsertEvent)
    ]
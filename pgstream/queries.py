"""SQL queries against the stream's bookkeeping tables.

Every function takes an asynchronous connection that runs ``$n``-style
parameterised SQL through ``fetch``, ``fetchrow``, ``fetchval`` and
``execute`` coroutines. Rows are read by column name.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Mapping, Protocol, Sequence, TypeVar

SCHEMA_NAME = "pgstream"
EVENTS_TABLE = "events"

_EVENTS = f"{SCHEMA_NAME}.{EVENTS_TABLE}"
_STREAMS = f"{SCHEMA_NAME}.streams"

_R = TypeVar("_R")


class _Connection(Protocol):
    async def fetch(self, query: str, *args: Any) -> Sequence[Mapping[str, Any]]: ...

    async def fetchrow(self, query: str, *args: Any) -> Mapping[str, Any] | None: ...

    async def fetchval(self, query: str, *args: Any) -> Any: ...

    async def execute(self, query: str, *args: Any) -> Any: ...


def _from_row(cls: type[_R], row: Mapping[str, Any]) -> _R:
    return cls(**{f.name: row[f.name] for f in fields(cls)})


def _sql(*clauses: str) -> str:
    return " ".join(clauses)


@dataclass(frozen=True)
class EventRow:
    id: str
    created_at: datetime
    payload: Any
    metadata: Any | None
    stream_id: int
    lsn: str | None


@dataclass(frozen=True)
class PartitionRecord:
    partition_name: str


@dataclass(frozen=True)
class StreamStateRow:
    id: int
    next_maintenance_at: datetime
    failover_checkpoint_id: str | None
    failover_checkpoint_ts: datetime | None
    event_id: str | None
    event_created_at: datetime | None
    event_payload: Any | None
    event_metadata: Any | None
    event_stream_id: int | None
    event_lsn: str | None


_FETCH_EVENT = _sql(
    "select ev.id::text as id, ev.created_at, ev.payload, ev.metadata,",
    "ev.stream_id, ev.lsn::text as lsn",
    f"from {_EVENTS} ev",
    "where ev.id = $1::uuid and ev.created_at = $2",
)


async def fetch_event(
    conn: _Connection, event_id: str, event_created_at: datetime
) -> EventRow:
    """Fetch one event by id and creation time; LookupError if absent."""
    row = await conn.fetchrow(_FETCH_EVENT, event_id, event_created_at)
    if row is None:
        raise LookupError(f"event {event_id} at {event_created_at} not found")
    return _from_row(EventRow, row)


_LIST_PARTITIONS = _sql(
    "select child.relname as partition_name",
    "from pg_inherits inh",
    "join pg_class child on child.oid = inh.inhrelid",
    "join pg_class parent on parent.oid = inh.inhparent",
    "join pg_namespace ns on ns.oid = parent.relnamespace",
    "where ns.nspname = $1 and parent.relname = $2",
    "order by child.relname",
)


async def list_partitions(
    conn: _Connection, schema_name: str, table_name: str
) -> list[PartitionRecord]:
    """List the partitions of a table, ordered by name."""
    rows = await conn.fetch(_LIST_PARTITIONS, schema_name, table_name)
    return [_from_row(PartitionRecord, row) for row in rows]


async def create_partition(
    conn: _Connection,
    schema_name: str,
    table_name: str,
    partition_name: str,
    range_start: str,
    range_end: str,
) -> None:
    """Create a range partition unless it already exists."""
    statement = _sql(
        f"create table if not exists {schema_name}.{partition_name}",
        f"partition of {schema_name}.{table_name}",
        f"for values from ('{range_start}') to ('{range_end}')",
    )
    await conn.execute(statement)


async def drop_partition(
    conn: _Connection, schema_name: str, partition_name: str
) -> None:
    """Drop a partition if it exists."""
    await conn.execute(f"drop table if exists {schema_name}.{partition_name}")


_FETCH_EVENTS_TABLE_ID = _sql(
    "select cls.oid",
    "from pg_class cls",
    "join pg_namespace ns on ns.oid = cls.relnamespace",
    "where ns.nspname = $1 and cls.relname = $2",
)


async def fetch_events_table_id(conn: _Connection) -> int:
    """Return the OID of the events table; LookupError if it does not exist."""
    oid = await conn.fetchval(_FETCH_EVENTS_TABLE_ID, SCHEMA_NAME, EVENTS_TABLE)
    if oid is None:
        raise LookupError(f"table {SCHEMA_NAME}.{EVENTS_TABLE} not found")
    return int(oid)


_FETCH_STREAM_STATE = _sql(
    "select st.id, st.failover_checkpoint_id, st.failover_checkpoint_ts,",
    "st.next_maintenance_at,",
    "ev.id::text as event_id, ev.created_at as event_created_at,",
    "ev.payload as event_payload, ev.metadata as event_metadata,",
    "ev.stream_id as event_stream_id, ev.lsn::text as event_lsn",
    f"from {_STREAMS} st",
    f"left join {_EVENTS} ev",
    "on ev.id::text = st.failover_checkpoint_id",
    "and ev.created_at = st.failover_checkpoint_ts",
    "where st.id = $1",
)


async def fetch_stream_state(
    conn: _Connection, stream_id: int
) -> StreamStateRow | None:
    """Fetch a stream's state with its checkpoint event, or None if unknown."""
    row = await conn.fetchrow(_FETCH_STREAM_STATE, stream_id)
    if row is None:
        return None
    return _from_row(StreamStateRow, row)


_UPSERT_STREAM_STATUS = _sql(
    f"insert into {_STREAMS} (id, failover_checkpoint_id, failover_checkpoint_ts)",
    "values ($1, $2, $3)",
    "on conflict (id) do update set",
    "failover_checkpoint_id = excluded.failover_checkpoint_id,",
    "failover_checkpoint_ts = excluded.failover_checkpoint_ts",
)


async def upsert_stream_status(
    conn: _Connection,
    stream_id: int,
    failover_checkpoint_id: str | None,
    failover_checkpoint_ts: datetime | None,
) -> None:
    """Store the failover checkpoint of a stream; both None means healthy."""
    await conn.execute(
        _UPSERT_STREAM_STATUS,
        stream_id,
        failover_checkpoint_id,
        failover_checkpoint_ts,
    )


_UPSERT_STREAM_MAINTENANCE = _sql(
    f"insert into {_STREAMS} (id, next_maintenance_at)",
    "values ($1, $2)",
    "on conflict (id) do update set",
    "next_maintenance_at = excluded.next_maintenance_at",
)


async def upsert_stream_maintenance(
    conn: _Connection, stream_id: int, next_maintenance_at: datetime
) -> None:
    """Store when a stream's next maintenance is due."""
    await conn.execute(_UPSERT_STREAM_MAINTENANCE, stream_id, next_maintenance_at)


_INSERT_STREAM_STATE = _sql(
    f"insert into {_STREAMS}",
    "(id, next_maintenance_at, failover_checkpoint_id, failover_checkpoint_ts)",
    "values ($1, $2, null, null)",
)


async def insert_stream_state(
    conn: _Connection, stream_id: int, next_maintenance_at: datetime
) -> None:
    """Insert a fresh, healthy state row for a stream."""
    await conn.execute(_INSERT_STREAM_STATE, stream_id, next_maintenance_at)
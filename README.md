# pgstream

Building blocks for handling events that Postgres triggers write into a
`pgstream.events` table: event and status types, sinks that receive events, a
handle for a single background task, and async SQL helpers for the stream's
bookkeeping tables. Only the standard library is needed.

## Install

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Modules

### `pgstream.lsn`

`PgLsn` is a Postgres write-ahead log position, a frozen, ordered dataclass
holding a 64-bit `value`. `PgLsn.parse("0/16B3748")` reads the textual
`HI/LO` hexadecimal form and raises `ValueError` when the text is malformed or
a half exceeds 32 bits. `str()` writes the same form back (upper-case hex) and
`int()` gives the 64-bit value.

### `pgstream.events`

- `EventIdentifier(id, created_at)`: the primary key of an event row. It is
  frozen and hashable, compares by `id` first and then by `created_at`, and
  `primary_keys()` returns `(id, created_at)`.
- `TriggeredEvent(id, payload, metadata, stream_id, lsn=None)`:
  `primary_keys()` returns `(id, id.created_at)`.
- Row types: `ColumnSchema(name, type_name="", modifier=-1, nullable=True,
  primary=False)`, `TableRow(values)`, `InsertEvent(table_id, table_row,
  start_lsn, commit_lsn)`, `UnsupportedEvent()`, and `Json(value)`, which
  marks a JSON cell. The other cells are `uuid.UUID`, `datetime`, `int`, `str`
  or `None`.
- `convert_event_from_table(table_row, column_schemas)` matches cells to
  columns by position and reads `id` (UUID), `created_at` (datetime),
  `payload` and `metadata` (`Json`), `stream_id` (int, taken as unsigned
  64-bit) and `lsn` (text; anything that does not parse becomes `None`). A
  missing or null `id`, `created_at`, `payload` or `stream_id` raises
  `InvalidDataError`, whose message begins with `Missing <column>`.
- `convert_events_from_table_rows(table_rows, column_schemas)` converts each
  row in turn; `convert_stream_events_from_events(events, column_schemas)`
  converts the `InsertEvent`s and skips every other event.

### `pgstream.status`

The two states of a stream: `Healthy()` and
`Failover(checkpoint_event_id)`. `publication_name(stream_id)` returns
`"pgstream_stream_<stream_id>"`.

### `pgstream.sink`

`Sink` is the abstract interface: a class attribute `name` and an async
`publish_events(events)` that raises when delivery fails. `MemorySink`
(`name == "memory"`) keeps every published event; `events()` returns a copy
of them and `clear()` forgets them.

### `pgstream.failable_sink`

`FailableSink` (`name == "failable_sink"`) stores events like `MemorySink`,
but `fail_on_call(n)` makes the `n`-th call to `publish_events` (counting from
zero) raise `SinkFailureError` without storing anything. `succeed_always()`
removes the scheduled failure, `call_count()` counts every call, failed ones
included, and `events()` returns the stored events.

### `pgstream.task`

`TaskHandle` lets at most one background task run at a time. `try_start()`
returns an `asyncio.Future` for the task to resolve with its result, or
`None` if a task is already running. Cancelling the future, or setting an
exception on it, means the task ended without a result and the handle goes
back to idle. `status()` returns a `TaskStatus` (`IDLE`, `RUNNING`,
`COMPLETED`); `take_result()` hands a completed result back once and returns
to idle; `wait()` waits for the running task and returns its result, or
`None`; `reset()` returns to idle.

### `pgstream.queries`

Async helpers taking any connection object that offers `fetch`, `fetchrow`,
`fetchval` and `execute` coroutines with `$n` parameters and rows readable by
column name:

- `fetch_event(conn, event_id, event_created_at)` returns an `EventRow` and
  raises `LookupError` if no such event exists.
- `fetch_stream_state(conn, stream_id)` returns a `StreamStateRow` (with the
  checkpoint event's columns, if any) or `None`.
- `upsert_stream_status`, `upsert_stream_maintenance` and
  `insert_stream_state` write the `pgstream.streams` row.
- `list_partitions` returns `PartitionRecord`s ordered by name;
  `create_partition` and `drop_partition` create and drop range partitions.
- `fetch_events_table_id(conn)` returns the OID of `pgstream.events` and
  raises `LookupError` if the table is missing.

## Example

```python
import asyncio
from datetime import datetime, timezone

from pgstream.events import EventIdentifier, TriggeredEvent
from pgstream.sink import MemorySink


async def main() -> None:
    sink = MemorySink()
    event = TriggeredEvent(
        id=EventIdentifier("event1", datetime.now(timezone.utc)),
        payload={"hello": "world"},
        metadata=None,
        stream_id=1,
        lsn=None,
    )
    await sink.publish_events([event])
    print(len(await sink.events()))


asyncio.run(main())
```

## What this package does not do

It has no stream runner that reads replicated events, publishes them, enters
failover and replays missed events; no database driver or connection pool;
no schema migrations; no scheduled partition maintenance; and no command-line
tool. The pieces above are meant to be assembled by the caller, who supplies
the database connection.
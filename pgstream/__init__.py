"""Event types, sinks, a task handle and SQL helpers for streaming Postgres trigger events."""

__version__ = "0.1.0"

__all__ = ["events", "failable_sink", "lsn", "queries", "sink", "status", "task"]
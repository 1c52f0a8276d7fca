from datetime import datetime, timezone

from pgstream.events import EventIdentifier
from pgstream.status import Failover, Healthy, publication_name


def test_stream_status_equality():
    status1 = Healthy()
    status2 = Healthy()
    assert status1 == status2

    ts = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)
    checkpoint_id = EventIdentifier("event1", ts)
    status3 = Failover(checkpoint_event_id=checkpoint_id)
    status4 = Failover(checkpoint_event_id=checkpoint_id)
    assert status3 == status4

    assert status1 != status3


def test_failover_with_different_checkpoints_differ():
    ts = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)
    assert Failover(EventIdentifier("a", ts)) != Failover(EventIdentifier("b", ts))


def test_failover_exposes_checkpoint():
    ts = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)
    status = Failover(EventIdentifier("event1", ts))
    assert status.checkpoint_event_id.primary_keys() == ("event1", ts)


def test_publication_name():
    assert publication_name(1) == "pgstream_stream_1"
    assert publication_name(42).startswith("pgstream_stream_")
    assert publication_name(42).endswith("42")
"""Unit tests for the event stores.

Run with: pytest tests/test_store.py -v
"""

import json
import os
import stat
from datetime import datetime, timezone

import pytest

from eventpoll.events import EventService
from eventpoll.models import Event, Option, Vote, utc_now
from eventpoll.store import InMemoryEventStore, JsonFileEventStore, build_store


def make_event(event_id: str = "abc123") -> Event:
    return Event(
        id=event_id,
        title="Team sync",
        created_at=datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc),
        options=[Option(id="opt_0", label="Mon"), Option(id="opt_1", label="Tue")],
        votes=[
            Vote(
                name="Bob",
                voted_at=datetime(2026, 1, 1, 9, 30, tzinfo=timezone.utc),
                selections=["opt_1", "opt_1"],
            )
        ],
    )


class TestJsonFileEventStore:
    """Tests for the flat-file store."""

    def test_missing_file_loads_empty(self, tmp_path):
        """A first run with no data file yields no events."""
        store = JsonFileEventStore(str(tmp_path / "events.json"))
        assert store.load() == {}

    def test_corrupt_file_loads_empty(self, tmp_path):
        """Unparsable content degrades to no events instead of raising."""
        path = tmp_path / "events.json"
        path.write_text("{not json", encoding="utf-8")
        assert JsonFileEventStore(str(path)).load() == {}

    def test_non_object_document_loads_empty(self, tmp_path):
        """A JSON array at the top level is treated as no events."""
        path = tmp_path / "events.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert JsonFileEventStore(str(path)).load() == {}

    def test_malformed_event_is_skipped(self, tmp_path):
        """An entry missing required fields is left out of the mapping."""
        path = tmp_path / "events.json"
        path.write_text(json.dumps({"x": {"id": "x"}}), encoding="utf-8")
        assert JsonFileEventStore(str(path)).load() == {}

    def test_malformed_event_does_not_drop_its_siblings(self, tmp_path):
        """A good event next to a broken one survives a load/create/save cycle."""
        path = tmp_path / "events.json"
        good = make_event("aaaaaa").model_dump(mode="json", by_alias=True)
        broken = dict(good, id="bbbbbb")
        del broken["createdAt"]
        path.write_text(json.dumps({"aaaaaa": good, "bbbbbb": broken}), encoding="utf-8")

        store = JsonFileEventStore(str(path))
        assert set(store.load()) == {"aaaaaa"}

        created = EventService(store).create_event("New", ["x", "y"])

        assert set(store.load()) == {"aaaaaa", created.id}
        assert store.load()["aaaaaa"] == make_event("aaaaaa")

    def test_save_then_load_keeps_events(self, tmp_path):
        """Saved events come back equal, duplicate selections included."""
        store = JsonFileEventStore(str(tmp_path / "events.json"))
        event = make_event()
        store.save({event.id: event})

        loaded = store.load()
        assert loaded == {event.id: event}
        assert loaded[event.id].votes[0].selections == ["opt_1", "opt_1"]

    def test_file_uses_camel_case_keys(self, tmp_path):
        """The document maps id -> event with createdAt/votedAt as ISO strings."""
        path = tmp_path / "events.json"
        JsonFileEventStore(str(path)).save({"abc123": make_event()})

        doc = json.loads(path.read_text(encoding="utf-8"))
        stored = doc["abc123"]
        assert set(stored) == {"id", "title", "createdAt", "options", "votes"}
        assert stored["createdAt"].startswith("2026-01-01T09:00:00")
        assert set(stored["votes"][0]) == {"name", "votedAt", "selections"}
        assert stored["options"][0] == {"id": "opt_0", "label": "Mon"}

    def test_reads_iso_timestamps_with_z_suffix(self, tmp_path):
        """Files written with millisecond Z timestamps are accepted."""
        path = tmp_path / "events.json"
        path.write_text(json.dumps({
            "a1b2c3": {
                "id": "a1b2c3",
                "title": "Lunch",
                "createdAt": "2026-02-21T12:00:00.000Z",
                "options": [{"id": "opt_0", "label": "A"}, {"id": "opt_1", "label": "B"}],
                "votes": [],
            }
        }), encoding="utf-8")

        event = JsonFileEventStore(str(path)).load()["a1b2c3"]
        assert event.created_at.tzinfo is not None
        assert event.title == "Lunch"

    def test_save_replaces_whole_file_without_leftovers(self, tmp_path):
        """Saving twice leaves only the latest mapping and no temp files."""
        path = tmp_path / "events.json"
        store = JsonFileEventStore(str(path))
        store.save({"one111": make_event("one111")})
        store.save({"two222": make_event("two222")})

        assert set(store.load()) == {"two222"}
        assert os.listdir(tmp_path) == ["events.json"]

    @pytest.mark.skipif(os.name == "nt", reason="POSIX file modes")
    def test_new_file_follows_umask(self, tmp_path):
        """A fresh data file gets the mode a plain open() would give it."""
        path = tmp_path / "events.json"
        old = os.umask(0o022)
        try:
            JsonFileEventStore(str(path)).save({"abc123": make_event()})
        finally:
            os.umask(old)

        assert stat.S_IMODE(path.stat().st_mode) == 0o644

    @pytest.mark.skipif(os.name == "nt", reason="POSIX file modes")
    def test_existing_file_keeps_its_mode(self, tmp_path):
        """Replacing the data file does not change its permissions."""
        path = tmp_path / "events.json"
        path.write_text("{}", encoding="utf-8")
        path.chmod(0o640)

        JsonFileEventStore(str(path)).save({"abc123": make_event()})

        assert stat.S_IMODE(path.stat().st_mode) == 0o640

    def test_timestamps_are_written_with_milliseconds(self, tmp_path):
        """createdAt/votedAt use the toISOString() shape: three fractional digits and Z."""
        path = tmp_path / "events.json"
        event = make_event()
        event.created_at = datetime(2026, 10, 18, 19, 58, 4, 857191, tzinfo=timezone.utc)
        JsonFileEventStore(str(path)).save({event.id: event})

        stored = json.loads(path.read_text(encoding="utf-8"))[event.id]
        assert stored["createdAt"] == "2026-10-18T19:58:04.857Z"
        assert stored["votes"][0]["votedAt"] == "2026-01-01T09:30:00.000Z"

    def test_fresh_timestamps_survive_a_round_trip(self, tmp_path):
        """utc_now() is already millisecond-precise, so reloading gives equal values."""
        now = utc_now()
        assert now.microsecond % 1000 == 0

        store = JsonFileEventStore(str(tmp_path / "events.json"))
        event = make_event()
        event.created_at = now
        store.save({event.id: event})

        assert store.load()[event.id].created_at == now


class TestInMemoryEventStore:
    """Tests for the in-memory store."""

    def test_load_returns_copies(self):
        """Mutating a loaded event does not change stored state until saved."""
        store = InMemoryEventStore({"abc123": make_event()})
        loaded = store.load()
        loaded["abc123"].votes.clear()

        assert len(store.load()["abc123"].votes) == 1

    def test_build_store_selects_backend(self, tmp_path):
        """':memory:' picks the in-memory store, anything else a file path."""
        assert isinstance(build_store(":memory:"), InMemoryEventStore)
        assert isinstance(build_store(str(tmp_path / "e.json")), JsonFileEventStore)

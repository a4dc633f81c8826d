"""Tests for on-device storage, the event mirror and identity resolution."""

import json

import pytest

from event_planner.storage.identity import IdentityResolver
from event_planner.storage.local import FileStorage, MemoryStorage, StorageError
from event_planner.storage.mirror import EventMirror


class TestMemoryStorage:
    """Tests for session-scoped storage."""

    def test_set_get_remove(self):
        storage = MemoryStorage()
        assert storage.get_item("k") is None

        storage.set_item("k", "v")
        assert storage.get_item("k") == "v"

        storage.remove_item("k")
        assert storage.get_item("k") is None

    def test_remove_missing_key_is_noop(self):
        storage = MemoryStorage({"a": "1"})
        storage.remove_item("missing")
        assert storage.get_item("a") == "1"

    def test_clear(self):
        storage = MemoryStorage({"a": "1", "b": "2"})
        storage.clear()
        assert storage.get_item("a") is None


class TestFileStorage:
    """Tests for persistent file-backed storage."""

    def test_values_survive_new_instance(self, tmp_path):
        FileStorage(tmp_path).set_item("greeting", "hello")
        assert FileStorage(tmp_path).get_item("greeting") == "hello"

    def test_missing_file_reads_as_empty(self, tmp_path):
        storage = FileStorage(tmp_path / "not-created-yet")
        assert storage.get_item("anything") is None

    def test_creates_directory_on_first_write(self, tmp_path):
        storage = FileStorage(tmp_path / "nested" / "dir")
        storage.set_item("k", "v")
        assert storage.path.exists()

    def test_corrupt_file_raises(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            storage.get_item("k")

    def test_remove_and_clear(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set_item("a", "1")
        storage.set_item("b", "2")

        storage.remove_item("a")
        assert storage.get_item("a") is None
        assert storage.get_item("b") == "2"

        storage.clear()
        assert storage.get_item("b") is None


class TestEventMirror:
    """Tests for the mirrored event list."""

    def test_empty_mirror_loads_as_empty_list(self, mirror: EventMirror):
        assert mirror.load() == []

    def test_prepend_puts_newest_first(self, mirror: EventMirror):
        mirror.prepend({"id": "1"})
        mirror.prepend({"id": "2"})
        assert [r["id"] for r in mirror.load()] == ["2", "1"]

    def test_replace_by_id(self, mirror: EventMirror):
        mirror.save([{"id": "1", "event_name": "Old"}, {"id": "2"}])

        assert mirror.replace({"id": "1", "event_name": "New"}) is True
        assert mirror.find("1") == {"id": "1", "event_name": "New"}

    def test_replace_unknown_id_leaves_mirror_unchanged(self, mirror: EventMirror):
        mirror.save([{"id": "1"}])
        assert mirror.replace({"id": "9"}) is False
        assert mirror.load() == [{"id": "1"}]

    def test_remove(self, mirror: EventMirror):
        mirror.save([{"id": "1"}, {"id": "2"}])
        mirror.remove("1")
        assert mirror.find("1") is None
        assert mirror.find("2") == {"id": "2"}

    def test_corrupt_record_loads_as_empty(self, mirror: EventMirror):
        mirror.storage.set_item(mirror.key, "[{broken")
        assert mirror.load() == []

    def test_non_list_record_loads_as_empty(self, mirror: EventMirror):
        mirror.storage.set_item(mirror.key, json.dumps({"id": "1"}))
        assert mirror.load() == []

    def test_unreadable_storage_loads_as_empty(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.path.write_text("garbage", encoding="utf-8")
        assert EventMirror(storage, "events").load() == []


class TestIdentityResolver:
    """Tests for current-identity resolution."""

    def test_no_identity(self, identity: IdentityResolver):
        assert identity.resolve_user_id() is None

    def test_persistent_identity(self, identity: IdentityResolver):
        identity.persistent.set_item("user", json.dumps({"id": "u1"}))
        assert identity.resolve_user_id() == "u1"

    def test_session_scope_checked_first(self, identity: IdentityResolver):
        identity.session.set_item("user", json.dumps({"id": "session-user"}))
        identity.persistent.set_item("user", json.dumps({"id": "stored-user"}))
        assert identity.resolve_user_id() == "session-user"

    def test_malformed_record_means_no_identity(self, identity: IdentityResolver):
        identity.persistent.set_item("user", "{not json")
        assert identity.resolve_user_id() is None

    def test_record_without_id_means_no_identity(self, identity: IdentityResolver):
        identity.persistent.set_item("user", json.dumps({"email": "a@b.c"}))
        assert identity.resolve_user_id() is None

    def test_non_object_record_means_no_identity(self, identity: IdentityResolver):
        identity.persistent.set_item("user", json.dumps(["u1"]))
        assert identity.resolve_user_id() is None

    def test_numeric_id_is_stringified(self, identity: IdentityResolver):
        identity.persistent.set_item("user", json.dumps({"id": 42}))
        assert identity.resolve_user_id() == "42"

    def test_remember_and_forget(self, identity: IdentityResolver):
        identity.remember({"id": "u1"}, persistent=False)
        assert identity.session.get_item("user") is not None
        assert identity.resolve_user_id() == "u1"

        identity.forget()
        assert identity.resolve_user_id() is None

    def test_remember_requires_id(self, identity: IdentityResolver):
        with pytest.raises(ValueError):
            identity.remember({"email": "a@b.c"})

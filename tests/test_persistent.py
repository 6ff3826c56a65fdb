"""Tests for PersistentStore and the Storage back-ends."""

import json
import logging

import pytest

from signalry import (
    FileStorage,
    MemoryStorage,
    Owner,
    PersistentStore,
    SerializationError,
    autorun,
    transaction,
)


class TestPersistentStore:
    def test_default_when_absent(self):
        storage = MemoryStorage()
        store = PersistentStore("prefs", {"theme": "dark"}, storage)
        assert store.state.get() == {"theme": "dark"}
        # the effect writes the initial value through
        assert json.loads(storage.get("prefs")) == {"theme": "dark"}

    def test_stored_record_supersedes_default(self):
        storage = MemoryStorage({"prefs": '{"theme": "light"}'})
        store = PersistentStore("prefs", {"theme": "dark"}, storage)
        assert store.state.get() == {"theme": "light"}

    def test_malformed_record_falls_back(self, caplog):
        storage = MemoryStorage({"prefs": "{not json"})
        with caplog.at_level(logging.WARNING, logger="signalry.persistent"):
            store = PersistentStore("prefs", {"theme": "dark"}, storage)
        assert store.state.get() == {"theme": "dark"}
        assert "Discarding unreadable record" in caplog.text

    def test_every_write_is_persisted(self):
        storage = MemoryStorage()
        store = PersistentStore("count", 0, storage)
        store.set(1)
        assert storage.get("count") == "1"
        store.update(lambda n: n + 41)
        assert storage.get("count") == "42"

    def test_round_trip_across_instances(self):
        storage = MemoryStorage()
        first = PersistentStore("cart", [], storage)
        first.set(["apple", "pear"])
        second = PersistentStore("cart", [], storage)
        assert second.state.get() == ["apple", "pear"]

    def test_reset_restores_original_default(self):
        storage = MemoryStorage({"n": "7"})
        store = PersistentStore("n", 0, storage)
        assert store.state.get() == 7
        store.set(9)
        store.reset()
        assert store.state.get() == 0
        assert storage.get("n") == "0"

    def test_unencodable_value_raises_and_changes_nothing(self):
        storage = MemoryStorage()
        store = PersistentStore("data", {"ok": True}, storage)
        log = []
        autorun(lambda: log.append(store.state.get()))
        with pytest.raises(SerializationError) as info:
            store.set({"bad": object()})
        assert info.value.key == "data"
        assert isinstance(info.value.__cause__, TypeError)
        assert store.state.get() == {"ok": True}
        assert json.loads(storage.get("data")) == {"ok": True}
        assert len(log) == 1

    def test_serialization_error_is_value_error(self):
        store = PersistentStore("s", "x", MemoryStorage())
        with pytest.raises(ValueError):
            store.update(lambda _: {1, 2})

    def test_custom_codec(self):
        storage = MemoryStorage()
        store = PersistentStore("word", "hi", storage, dumps=str.upper, loads=str.lower)
        store.set("hello")
        assert storage.get("word") == "HELLO"
        assert PersistentStore("word", "", storage, dumps=str.upper, loads=str.lower).state.get() == "hello"

    def test_writes_in_transaction_persist_once_settled(self):
        writes = []

        class RecordingStorage(MemoryStorage):
            def set(self, key, value):
                writes.append(value)
                super().set(key, value)

        store = PersistentStore("n", 0, RecordingStorage())
        with transaction():
            store.set(1)
            store.set(2)
        assert writes == ["0", "2"]

    def test_dispose_stops_persisting(self):
        storage = MemoryStorage()
        with Owner() as owner:
            store = PersistentStore("n", 0, storage, owner=owner)
            store.set(1)
        store.set(2)
        assert store.state.get() == 2
        assert storage.get("n") == "1"

    def test_failing_subscriber_does_not_block_persisting(self):
        storage = MemoryStorage()
        store = PersistentStore("k", 0, storage)

        def picky():
            if store.state.get() == 1:
                raise RuntimeError("subscriber failed")

        autorun(picky)
        store.set(5)  # persisting re-subscribes after picky
        with pytest.raises(RuntimeError):
            store.set(1)
        assert store.state.get() == 1
        assert json.loads(storage.get("k")) == 1


class TestMemoryStorage:
    def test_get_set(self):
        storage = MemoryStorage()
        assert storage.get("k") is None
        storage.set("k", "v")
        assert storage.get("k") == "v"
        assert "k" in storage


class TestFileStorage:
    def test_get_set(self, tmp_path):
        storage = FileStorage(tmp_path / "state")
        assert storage.get("k") is None
        storage.set("k", "v")
        assert storage.get("k") == "v"

    def test_survives_new_instance(self, tmp_path):
        FileStorage(tmp_path).set("user/prefs", '{"a": 1}')
        assert FileStorage(tmp_path).get("user/prefs") == '{"a": 1}'

    def test_keys_stay_inside_directory(self, tmp_path):
        base = tmp_path / "state"
        storage = FileStorage(base)
        storage.set("../escape", "x")
        storage.set("..", "y")
        assert {p.parent for p in base.iterdir()} == {base}
        assert storage.get("../escape") == "x"
        assert storage.get("..") == "y"

    def test_with_persistent_store(self, tmp_path):
        PersistentStore("theme", "dark", FileStorage(tmp_path)).set("light")
        assert PersistentStore("theme", "dark", FileStorage(tmp_path)).state.get() == "light"

"""Tests for the key-value port and record store."""

import json
import pytest
from pathlib import Path

from lifeos.models import ChatMessage, Memory
from lifeos.storage import (
    MEMORIES_KEY,
    MESSAGES_KEY,
    FileStorage,
    KeyValueStorage,
    RecordStore,
    StorageCorruptError,
)


@pytest.fixture
def store(storage: FileStorage) -> RecordStore:
    return RecordStore(storage)


def _records():
    memories = [
        Memory(id="2", timestamp="2026-01-02T00:00:00.000Z", content="b", category="Idea"),
        Memory(id="1", timestamp="2026-01-01T00:00:00.000Z", content="a", category="Goal"),
    ]
    messages = [ChatMessage(id="1", role="user", content="a", timestamp="t")]
    return memories, messages


class TestFileStorage:
    def test_satisfies_protocol(self, storage: FileStorage):
        assert isinstance(storage, KeyValueStorage)

    def test_missing_key(self, storage: FileStorage):
        assert storage.get_item("nope") is None

    def test_set_get_remove(self, storage: FileStorage):
        storage.set_item("k", "[1]")
        assert storage.get_item("k") == "[1]"
        storage.remove_item("k")
        assert storage.get_item("k") is None

    def test_remove_missing_is_noop(self, storage: FileStorage):
        storage.remove_item("never-set")

    def test_one_file_per_key(self, storage: FileStorage):
        storage.set_item(MEMORIES_KEY, "[]")
        assert (storage.root / f"{MEMORIES_KEY}.json").exists()
        assert not list(storage.root.glob("*.tmp"))

    def test_key_sanitized(self, storage: FileStorage):
        storage.set_item("../escape", "x")
        assert storage.get_item("../escape") == "x"
        assert all(p.parent == storage.root for p in storage.root.iterdir())


class TestRecordStore:
    def test_empty_load(self, store: RecordStore):
        assert store.load() == ([], [])

    def test_save_and_load(self, store: RecordStore):
        memories, messages = _records()
        store.save(memories, messages)
        assert store.load() == (memories, messages)

    def test_order_preserved(self, store: RecordStore):
        memories, messages = _records()
        store.save(memories, messages)
        loaded, _ = store.load()
        assert [m.id for m in loaded] == ["2", "1"]

    def test_persisted_as_json_arrays(self, store: RecordStore, storage: FileStorage):
        memories, messages = _records()
        store.save(memories, messages)
        raw = json.loads(storage.get_item(MEMORIES_KEY))
        assert raw[0]["category"] == "Idea"
        assert json.loads(storage.get_item(MESSAGES_KEY))[0]["role"] == "user"

    def test_erase_removes_both_keys(self, store: RecordStore, storage: FileStorage):
        store.save(*_records())
        store.erase()
        assert storage.get_item(MEMORIES_KEY) is None
        assert storage.get_item(MESSAGES_KEY) is None
        assert store.load() == ([], [])

    def test_invalid_json_raises(self, store: RecordStore, storage: FileStorage):
        storage.set_item(MEMORIES_KEY, "{not json")
        with pytest.raises(StorageCorruptError, match=MEMORIES_KEY):
            store.load()

    def test_non_array_raises(self, store: RecordStore, storage: FileStorage):
        storage.set_item(MESSAGES_KEY, '{"id": 1}')
        with pytest.raises(StorageCorruptError, match=MESSAGES_KEY):
            store.load()

    def test_record_missing_fields_raises(self, store: RecordStore, storage: FileStorage):
        storage.set_item(MEMORIES_KEY, '[{"id": "1"}]')
        with pytest.raises(StorageCorruptError):
            store.load()

    @pytest.mark.parametrize(
        "key,record",
        [
            (
                MEMORIES_KEY,
                {"id": "1", "timestamp": "t", "content": "c", "category": "Idea", "metadata": "oops"},
            ),
            (
                MEMORIES_KEY,
                {"id": 1, "timestamp": "t", "content": "c", "category": "Idea"},
            ),
            (
                MESSAGES_KEY,
                {"id": "1", "role": "user", "content": "c", "timestamp": 1700000000000},
            ),
            (
                MESSAGES_KEY,
                {"id": "1", "role": "assistant", "content": "c", "timestamp": "t"},
            ),
        ],
    )
    def test_wrong_field_types_raise(self, store: RecordStore, storage: FileStorage, key, record):
        storage.set_item(key, json.dumps([record]))
        with pytest.raises(StorageCorruptError) as exc_info:
            store.load()
        assert exc_info.value.key == key

    def test_reload_from_disk(self, tmp_path: Path):
        memories, messages = _records()
        RecordStore(FileStorage(tmp_path / "s")).save(memories, messages)
        assert RecordStore(FileStorage(tmp_path / "s")).load() == (memories, messages)

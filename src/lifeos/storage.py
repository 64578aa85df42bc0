"""Record store persisted through a key-value storage port.

Layout:
    ~/.lifeos/storage/
    ├── life_os_memories.json     # JSON array of memories, newest first
    └── life_os_messages.json     # JSON array of chat messages, oldest first
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Protocol, runtime_checkable

from lifeos.models import ChatMessage, Memory

logger = logging.getLogger(__name__)

MEMORIES_KEY = "life_os_memories"
MESSAGES_KEY = "life_os_messages"


class StorageCorruptError(Exception):
    """A persisted entry exists but cannot be decoded."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Corrupt storage entry '{key}': {reason}")
        self.key = key


@runtime_checkable
class KeyValueStorage(Protocol):
    """String-keyed persistent storage, modeled on browser localStorage."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class FileStorage:
    """One file per key under a root directory. Writes replace files atomically."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.root / f"{safe}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        os.replace(tmp, path)

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class RecordStore:
    """Serializes the memory and message lists to storage under two fixed keys."""

    def __init__(self, storage: KeyValueStorage) -> None:
        self.storage = storage

    def load(self) -> tuple[list[Memory], list[ChatMessage]]:
        """Read both keys. Missing keys load as empty lists; corrupt ones raise."""
        memories = self._read_records(MEMORIES_KEY, Memory)
        messages = self._read_records(MESSAGES_KEY, ChatMessage)
        logger.info("Loaded %d memories, %d messages", len(memories), len(messages))
        return memories, messages

    def _read_records(self, key: str, record_cls):
        try:
            return [record_cls.from_dict(d) for d in self._read_array(key)]
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise StorageCorruptError(key, f"malformed record ({e!r})") from e

    def _read_array(self, key: str) -> list[dict]:
        raw = self.storage.get_item(key)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageCorruptError(key, str(e)) from e
        if not isinstance(data, list) or not all(isinstance(d, dict) for d in data):
            raise StorageCorruptError(key, "expected a JSON array of objects")
        return data

    def save(self, memories: list[Memory], messages: list[ChatMessage]) -> None:
        self.storage.set_item(
            MEMORIES_KEY, json.dumps([m.to_dict() for m in memories], ensure_ascii=False)
        )
        self.storage.set_item(
            MESSAGES_KEY, json.dumps([m.to_dict() for m in messages], ensure_ascii=False)
        )

    def erase(self) -> None:
        self.storage.remove_item(MEMORIES_KEY)
        self.storage.remove_item(MESSAGES_KEY)
        logger.info("Erased persisted records")

"""Record types: memories, chat messages and state snapshots.

Records are persisted as JSON objects with camelCase keys; attributes are
snake_case. Absent optional fields are omitted on write.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Literal

CATEGORIES: tuple[str, ...] = (
    "Thought",
    "Decision",
    "Idea",
    "Goal",
    "Learning",
    "Event",
    "Relationship",
    "Problem",
    "Experiment",
    "Identity",
)

DEFAULT_CATEGORY = "Thought"

STORED_MARKER = "[Stored]"

Role = Literal["user", "system"]


def _require_str(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key!r} must be a string, got {type(value).__name__}")
    return value


@dataclass
class MemoryMetadata:
    """Structured fields extracted by the model. All optional."""

    intent: str | None = None
    facts: list[str] | None = None
    emotions: list[str] | None = None
    importance: float | None = None
    tags: list[str] | None = None

    def to_dict(self) -> dict:
        data: dict = {}
        for key in ("intent", "facts", "emotions", "importance", "tags"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> MemoryMetadata:
        return cls(
            intent=data.get("intent"),
            facts=data.get("facts"),
            emotions=data.get("emotions"),
            importance=data.get("importance"),
            tags=data.get("tags"),
        )


@dataclass
class Memory:
    """A stored, categorized record derived from user input."""

    id: str
    timestamp: str
    content: str
    category: str
    metadata: MemoryMetadata = field(default_factory=MemoryMetadata)
    inferred_life_phase: str | None = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "timestamp": self.timestamp,
            "content": self.content,
            "category": self.category,
            "metadata": self.metadata.to_dict(),
        }
        if self.inferred_life_phase is not None:
            data["inferredLifePhase"] = self.inferred_life_phase
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Memory:
        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise TypeError("'metadata' must be an object")
        return cls(
            id=_require_str(data, "id"),
            timestamp=_require_str(data, "timestamp"),
            content=_require_str(data, "content"),
            category=_require_str(data, "category"),
            metadata=MemoryMetadata.from_dict(metadata),
            inferred_life_phase=data.get("inferredLifePhase"),
        )


@dataclass
class ChatMessage:
    """A single timeline entry, from the user or the system."""

    id: str
    role: Role
    content: str
    timestamp: str
    is_retrieval: bool = False

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp,
        }
        if self.is_retrieval:
            data["isRetrieval"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict) -> ChatMessage:
        role = data["role"]
        if role not in ("user", "system"):
            raise ValueError(f"unknown role {role!r}")
        return cls(
            id=_require_str(data, "id"),
            role=role,
            content=_require_str(data, "content"),
            timestamp=_require_str(data, "timestamp"),
            is_retrieval=bool(data.get("isRetrieval", False)),
        )


@dataclass
class Snapshot:
    """Independent copy of both record lists at one point in time."""

    memories: list[Memory]
    messages: list[ChatMessage]

    @classmethod
    def capture(cls, memories: list[Memory], messages: list[ChatMessage]) -> Snapshot:
        return cls(memories=copy.deepcopy(memories), messages=copy.deepcopy(messages))

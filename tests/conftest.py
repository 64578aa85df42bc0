"""Shared fixtures: a scripted engine and a journal backed by tmp storage."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from lifeos.classifier import Dispatcher
from lifeos.config import EngineConfig
from lifeos.core import Journal
from lifeos.engines.base import AgentResponse, EngineError
from lifeos.storage import FileStorage, RecordStore

CAPTURE_JSON = json.dumps(
    {
        "category": "Decision",
        "intent": "Commit to a plan",
        "facts": ["Moving to Lisbon in March"],
        "emotions": ["excited"],
        "importance": 8,
        "tags": ["move", "lisbon"],
        "lifePhase": "Transition",
    }
)


class MockEngine:
    """Returns canned text; records every call. Optionally blocks on a gate."""

    def __init__(
        self,
        capture_text: str = CAPTURE_JSON,
        retrieval_text: str = "You said you would move to Lisbon.",
        fail: bool = False,
    ) -> None:
        self.capture_text = capture_text
        self.retrieval_text = retrieval_text
        self.fail = fail
        self.gate: asyncio.Event | None = None
        self.calls: list[dict] = []

    @property
    def name(self) -> str:
        return "mock"

    async def send(self, message, *, system_prompt=None, model=None,
                   temperature=None, response_schema=None) -> AgentResponse:
        self.calls.append(
            {
                "message": message,
                "system_prompt": system_prompt,
                "model": model,
                "temperature": temperature,
                "response_schema": response_schema,
            }
        )
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise EngineError("boom")
        text = self.capture_text if response_schema is not None else self.retrieval_text
        return AgentResponse(text=text, model=model)

    async def health_check(self) -> bool:
        return not self.fail


@pytest.fixture
def engine() -> MockEngine:
    return MockEngine()


@pytest.fixture
def storage(tmp_path: Path) -> FileStorage:
    return FileStorage(tmp_path / "storage")


@pytest.fixture
def journal(engine: MockEngine, storage: FileStorage) -> Journal:
    j = Journal(
        store=RecordStore(storage),
        dispatcher=Dispatcher(engine, EngineConfig()),
    )
    j.load()
    return j


@pytest.fixture
def make_engine():
    """Factory for engines with non-default scripted behavior."""
    return MockEngine

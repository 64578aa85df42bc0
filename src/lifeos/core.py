"""Journal orchestrator: command handlers over the owned record state.

Responsibilities:
1. Own the memory and message lists (newest memory first, oldest message first)
2. Snapshot state before each submission for undo/redo
3. Route submissions through the dispatcher and apply the result
4. Persist both lists after every mutation
5. Erase everything on request
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from lifeos.classifier import Dispatcher, DispatchResult, StorageResult
from lifeos.history import HistoryStack
from lifeos.models import STORED_MARKER, ChatMessage, Memory, MemoryMetadata, Snapshot
from lifeos.storage import RecordStore

if TYPE_CHECKING:
    from lifeos.engines.base import Engine

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class JournalState:
    """Live state. `version` increments on every mutation."""

    memories: list[Memory] = field(default_factory=list)
    messages: list[ChatMessage] = field(default_factory=list)
    version: int = 0

    def snapshot(self) -> Snapshot:
        return Snapshot.capture(self.memories, self.messages)


class Journal:
    """Core orchestrator. Applies user commands to state and persists it."""

    def __init__(
        self,
        store: RecordStore,
        dispatcher: Dispatcher,
        history_depth: int = 10,
    ) -> None:
        self.store = store
        self.dispatcher = dispatcher
        self.history = HistoryStack(depth=history_depth)
        self.state = JournalState()
        self.is_processing = False
        self._last_id = 0

    @property
    def engine(self) -> Engine:
        return self.dispatcher.engine

    @property
    def memories(self) -> list[Memory]:
        return self.state.memories

    @property
    def messages(self) -> list[ChatMessage]:
        return self.state.messages

    # ── Lifecycle ─────────────────────────────────────────────

    def load(self) -> None:
        """Load persisted records. Corrupt storage raises StorageCorruptError."""
        memories, messages = self.store.load()
        self.state = JournalState(memories=memories, messages=messages)
        for record in [*memories, *messages]:
            if record.id.isdigit():
                self._last_id = max(self._last_id, int(record.id))

    def _persist(self) -> None:
        self.state.version += 1
        self.store.save(self.state.memories, self.state.messages)

    def _next_id(self) -> str:
        """Millisecond timestamp, bumped past the last issued id on collision."""
        self._last_id = max(int(time.time() * 1000), self._last_id + 1)
        return str(self._last_id)

    # ── Commands ──────────────────────────────────────────────

    async def submit(self, text: str) -> DispatchResult | None:
        """Handle one user submission.

        Returns the dispatch result, or None when the input was empty, another
        submission was in flight, or the engine call failed.
        """
        if not text.strip() or self.is_processing:
            return None

        self.history.save(self.state.snapshot())

        self.state.messages.append(
            ChatMessage(id=self._next_id(), role="user", content=text, timestamp=_now_iso())
        )
        self._persist()

        memories_at_submit = list(self.state.memories)
        self.is_processing = True
        try:
            result = await self.dispatcher.process_input(text, memories_at_submit)
        except Exception:
            logger.exception("Submission abandoned: engine call failed")
            return None
        finally:
            self.is_processing = False

        self._apply(text, result)
        return result

    def _apply(self, text: str, result: DispatchResult) -> None:
        # Lands atop whatever is current, including any undo issued meanwhile.
        if isinstance(result, StorageResult):
            capture = result.capture
            memory = Memory(
                id=self._next_id(),
                timestamp=_now_iso(),
                content=text,
                category=capture.category,
                metadata=MemoryMetadata(
                    intent=capture.intent,
                    facts=capture.facts,
                    emotions=capture.emotions,
                    importance=capture.importance,
                    tags=capture.tags,
                ),
                inferred_life_phase=capture.life_phase,
            )
            self.state.memories.insert(0, memory)
            reply = ChatMessage(
                id=self._next_id(), role="system", content=STORED_MARKER, timestamp=_now_iso()
            )
        else:
            reply = ChatMessage(
                id=self._next_id(),
                role="system",
                content=result.text,
                timestamp=_now_iso(),
                is_retrieval=True,
            )
        self.state.messages.append(reply)
        self._persist()

    def undo(self) -> bool:
        previous = self.history.undo(self.state.snapshot())
        if previous is None:
            return False
        self._restore(previous)
        return True

    def redo(self) -> bool:
        following = self.history.redo(self.state.snapshot())
        if following is None:
            return False
        self._restore(following)
        return True

    def _restore(self, snapshot: Snapshot) -> None:
        self.state.memories = snapshot.memories
        self.state.messages = snapshot.messages
        self._persist()

    def erase(self) -> None:
        """Remove all records, both persisted keys and both history stacks."""
        self.state.memories = []
        self.state.messages = []
        self.state.version += 1
        self.history.clear()
        self.store.erase()
        logger.info("Journal erased")

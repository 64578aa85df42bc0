"""Bounded undo/redo stacks of full-state snapshots."""

from __future__ import annotations

from lifeos.models import Snapshot

DEFAULT_DEPTH = 10


class HistoryStack:
    """Undo stack capped at `depth` entries, paired with an unbounded redo stack.

    Redo can only grow through undo, so it never holds more entries than
    history did.
    """

    def __init__(self, depth: int = DEFAULT_DEPTH) -> None:
        self.depth = depth
        self._history: list[Snapshot] = []
        self._redo: list[Snapshot] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def __len__(self) -> int:
        return len(self._history)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def save(self, current: Snapshot) -> None:
        """Record `current` before a mutating action. Clears redo."""
        self._history.append(current)
        self._history = self._history[-self.depth :]
        self._redo.clear()

    def undo(self, current: Snapshot) -> Snapshot | None:
        """Return the previous state, parking `current` on the redo stack."""
        if not self._history:
            return None
        self._redo.append(current)
        return self._history.pop()

    def redo(self, current: Snapshot) -> Snapshot | None:
        """Return the next state, parking `current` back on the history stack."""
        if not self._redo:
            return None
        self._history.append(current)
        self._history = self._history[-self.depth :]
        return self._redo.pop()

    def clear(self) -> None:
        self._history.clear()
        self._redo.clear()

"""
Undo/Redo History

Two bounded stacks of opaque snapshots. The history does not know what
a snapshot is; the store passes AppState instances, the tests pass
anything.

When a stack is full the oldest snapshot is discarded first.
"""

from collections import deque
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

DEFAULT_HISTORY_LIMIT = 150


class UndoRedoHistory(Generic[T]):

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self._limit = limit
        self._undo: deque[T] = deque(maxlen=limit)
        self._redo: deque[T] = deque(maxlen=limit)

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def record(self, previous: T) -> None:
        """Remember the state a new change replaced. Clears the redo stack."""
        self._undo.append(previous)
        self._redo.clear()

    def undo(self, current: T) -> Optional[T]:
        """
        Step back.

        Returns the snapshot to restore, or None if there is nothing to
        undo (in which case `current` is not pushed anywhere).
        """
        if not self._undo:
            return None
        previous = self._undo.pop()
        self._redo.append(current)
        return previous

    def redo(self, current: T) -> Optional[T]:
        """Step forward again; None if there is nothing to redo."""
        if not self._redo:
            return None
        following = self._redo.pop()
        self._undo.append(current)
        return following

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()

"""Undo/redo bookkeeping over whole-application snapshots."""
from __future__ import annotations

from typing import Callable, List

from models.outfit_layer import AppStateSnapshot

Reducer = Callable[[AppStateSnapshot], AppStateSnapshot]


class SnapshotHistory:
    """Holds the current snapshot plus two unbounded LIFO stacks.

    Every tracked mutation pushes the snapshot it started from, so one undo
    reverses exactly one user-visible change. Snapshots are immutable and are
    stored as-is.
    """

    def __init__(self, initial: AppStateSnapshot | None = None) -> None:
        self.current = initial or AppStateSnapshot()
        self.undo_stack: List[AppStateSnapshot] = []
        self.redo_stack: List[AppStateSnapshot] = []

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def update_with_history(
        self, reducer: Reducer, base: AppStateSnapshot | None = None
    ) -> AppStateSnapshot:
        """Apply ``reducer`` and record the previous snapshot for undo.

        ``base`` overrides the snapshot that is reduced and pushed; it is used
        when the live snapshot carries an untracked optimistic change that must
        not end up on the undo stack.
        """

        previous = base if base is not None else self.current
        next_snapshot = reducer(previous)
        self.undo_stack.append(previous)
        self.redo_stack.clear()
        self.current = next_snapshot
        return next_snapshot

    def undo(self) -> bool:
        if not self.undo_stack:
            return False
        previous = self.undo_stack.pop()
        self.redo_stack.append(self.current)
        self.current = previous
        return True

    def redo(self) -> bool:
        if not self.redo_stack:
            return False
        following = self.redo_stack.pop()
        self.undo_stack.append(self.current)
        self.current = following
        return True

    def replace_current(self, snapshot: AppStateSnapshot) -> None:
        """Install ``snapshot`` without recording anything."""

        self.current = snapshot

    def reset(self, snapshot: AppStateSnapshot | None = None) -> None:
        self.current = snapshot or AppStateSnapshot()
        self.undo_stack.clear()
        self.redo_stack.clear()


__all__ = ["Reducer", "SnapshotHistory"]

"""Unit tests for the snapshot undo/redo manager."""

from dataclasses import replace

from memory.undo_history import SnapshotHistory
from models.outfit_layer import AppStateSnapshot, create_base_layer


def _base() -> AppStateSnapshot:
    return AppStateSnapshot(outfit_history=(create_base_layer("A"),))


def _select_pose(index: int):
    return lambda snapshot: replace(snapshot, current_pose_index=index)


def test_undo_then_redo_is_identity() -> None:
    history = SnapshotHistory(_base())
    before = history.current

    after = history.update_with_history(_select_pose(2))

    assert history.undo()
    assert history.current == before
    assert history.redo()
    assert history.current == after
    assert history.current is after


def test_new_action_clears_redo_stack() -> None:
    history = SnapshotHistory(_base())
    history.update_with_history(_select_pose(1))
    history.update_with_history(_select_pose(2))
    history.undo()
    history.undo()
    assert history.can_redo

    history.update_with_history(_select_pose(3))

    assert not history.can_redo
    assert len(history.undo_stack) == 1


def test_undo_and_redo_on_empty_stacks_are_noops() -> None:
    history = SnapshotHistory(_base())
    current = history.current

    assert history.undo() is False
    assert history.redo() is False
    assert history.current is current


def test_base_override_keeps_optimistic_state_off_the_stack() -> None:
    history = SnapshotHistory(_base())
    before = history.current
    history.replace_current(replace(before, current_pose_index=4))

    history.update_with_history(_select_pose(4), base=before)

    assert history.undo_stack == [before]
    history.undo()
    assert history.current.current_pose_index == 0


def test_reset_clears_both_stacks() -> None:
    history = SnapshotHistory(_base())
    history.update_with_history(_select_pose(1))
    history.undo()

    history.reset()

    assert history.current == AppStateSnapshot()
    assert not history.can_undo
    assert not history.can_redo

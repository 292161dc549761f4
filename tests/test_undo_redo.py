"""Tests for the in-memory undo/redo history."""

from diet_planner.services.undo_redo import UndoRedoHistory


def test_set_undo_redo_walks_history() -> None:
    history = UndoRedoHistory(present={"calories": 100})

    history.set({"calories": 200})
    history.set({"calories": 300})

    assert history.undo() == {"calories": 200}
    assert history.undo() == {"calories": 100}
    assert history.undo() is None
    assert history.redo() == {"calories": 200}
    assert history.present == {"calories": 200}
    assert history.can_undo is True
    assert history.can_redo is True


def test_set_discards_redo_branch() -> None:
    history = UndoRedoHistory(present=1)
    history.set(2)
    history.undo()

    history.set(3)

    assert history.can_redo is False
    assert history.state.past == [1]
    assert history.present == 3


def test_set_ignores_unchanged_value() -> None:
    history = UndoRedoHistory(present=[1, 2])

    history.set([1, 2])

    assert history.can_undo is False


def test_values_are_cloned() -> None:
    value = {"meals": ["Obiad"]}
    history = UndoRedoHistory(present=value)

    value["meals"].append("Kolacja")
    history.set(value)
    value["meals"].append("Przekąska")

    assert history.present == {"meals": ["Obiad", "Kolacja"]}
    assert history.undo() == {"meals": ["Obiad"]}


def test_reset_clears_history() -> None:
    history = UndoRedoHistory(present="a")
    history.set("b")

    history.reset("c")

    assert history.present == "c"
    assert history.can_undo is False
    assert history.can_redo is False

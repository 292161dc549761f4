"""Linear in-memory undo/redo history for editor state."""

import copy
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class HistoryState(Generic[T]):
    """Snapshot of the history lists, oldest first."""

    past: list[T]
    present: T
    future: list[T]


@dataclass
class UndoRedoHistory(Generic[T]):
    """Undo/redo over values of any type.

    Stored values are cloned on the way in and out, so callers may keep
    mutating what they pass to :meth:`set`. A new value discards the redo
    branch.
    """

    present: T
    clone: Callable[[T], T] = copy.deepcopy
    past: list[T] = field(default_factory=list)
    future: list[T] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.present = self.clone(self.present)

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    @property
    def state(self) -> HistoryState[T]:
        """Return a copy of the current history."""
        return HistoryState(
            past=list(self.past), present=self.clone(self.present), future=list(self.future)
        )

    def set(self, value: T) -> None:
        """Record a new present value; equal values are ignored."""
        if value == self.present:
            return
        self.past.append(self.present)
        self.present = self.clone(value)
        self.future = []

    def undo(self) -> T | None:
        """Step back and return the restored value, or None at the start."""
        if not self.past:
            return None
        previous = self.past.pop()
        self.future.insert(0, self.present)
        self.present = previous
        return self.clone(previous)

    def redo(self) -> T | None:
        """Step forward and return the restored value, or None at the end."""
        if not self.future:
            return None
        following = self.future.pop(0)
        self.past.append(self.present)
        self.present = following
        return self.clone(following)

    def reset(self, value: T) -> None:
        """Replace the present value and forget all history."""
        self.present = self.clone(value)
        self.past = []
        self.future = []

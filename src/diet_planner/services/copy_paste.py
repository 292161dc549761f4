"""Clipboard for copying meals and whole days between day plans.

Copy stores a deep clone so later edits of the live entity never leak into
the clipboard. Paste returns a fresh clone with new ids at every level and
leaves the clipboard armed, so one copy can be pasted any number of times
until :meth:`clear` is called.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import uuid4

from diet_planner.domain.clipboard import CopyPasteDayState, CopyPasteState
from diet_planner.domain.diet import (
    DayPlan,
    Meal,
    clone_day_plan,
    clone_ingredient,
    clone_meal,
)

COPY_SUFFIX = " (kopia)"


def _new_id() -> str:
    return str(uuid4())


def _reissue_meal(meal: Meal, new_id: Callable[[], str]) -> Meal:
    pasted = clone_meal(meal)
    pasted.id = new_id()
    pasted.ingredients = [
        clone_ingredient(item, new_id=new_id()) for item in meal.ingredients
    ]
    return pasted


@dataclass
class MealClipboard:
    """Copy/paste of single meals."""

    id_factory: Callable[[], str] = _new_id
    state: CopyPasteState = field(default_factory=CopyPasteState)

    @property
    def can_paste(self) -> bool:
        """Return True when a meal is held."""
        return self.state.is_active and self.state.source_meal is not None

    def copy(self, meal: Meal, day_id: str, order_index: int = 0) -> None:
        """Store a deep clone of ``meal``."""
        self.state = CopyPasteState(
            is_active=True,
            source_meal=clone_meal(meal),
            source_day_id=day_id,
            source_order_index=order_index,
        )

    def paste(self, target_day_id: str | None = None) -> Meal | None:
        """Return a new meal cloned from the clipboard, or None when empty."""
        source = self.state.source_meal
        if source is None:
            return None
        pasted = _reissue_meal(source, self.id_factory)
        pasted.name = source.name + COPY_SUFFIX
        return pasted

    def clear(self) -> None:
        """Drop the held meal."""
        self.state = CopyPasteState()


@dataclass
class DayClipboard:
    """Copy/paste of whole day plans."""

    id_factory: Callable[[], str] = _new_id
    state: CopyPasteDayState = field(default_factory=CopyPasteDayState)

    @property
    def can_paste(self) -> bool:
        """Return True when a day is held."""
        return self.state.is_active and self.state.source_day_plan is not None

    def copy(self, day_plan: DayPlan, day_id: str | None = None) -> None:
        """Store a deep clone of ``day_plan`` with all meals and ingredients."""
        self.state = CopyPasteDayState(
            is_active=True,
            source_day_plan=clone_day_plan(day_plan),
            source_day_id=day_id or day_plan.id,
        )

    def paste(self, target_day_id: str | None = None) -> DayPlan | None:
        """Return a new day cloned from the clipboard, or None when empty.

        The name is kept as-is; callers rename the pasted day.
        """
        source = self.state.source_day_plan
        if source is None:
            return None
        pasted = clone_day_plan(source)
        pasted.id = self.id_factory()
        pasted.meals = [_reissue_meal(meal, self.id_factory) for meal in source.meals]
        return pasted

    def clear(self) -> None:
        """Drop the held day."""
        self.state = CopyPasteDayState()

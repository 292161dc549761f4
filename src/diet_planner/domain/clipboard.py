"""Domain models for the meal and day clipboard."""

from dataclasses import dataclass

from diet_planner.domain.diet import DayPlan, Meal


@dataclass(frozen=True)
class CopyPasteState:
    """Meal clipboard contents."""

    is_active: bool = False
    source_meal: Meal | None = None
    source_day_id: str | None = None
    source_order_index: int = 0


@dataclass(frozen=True)
class CopyPasteDayState:
    """Day clipboard contents."""

    is_active: bool = False
    source_day_plan: DayPlan | None = None
    source_day_id: str | None = None

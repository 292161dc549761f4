"""Domain models for diet snapshots."""

from dataclasses import dataclass, field
from datetime import datetime

from diet_planner.domain.diet import DayPlan, Meal

TRIGGER_TYPES = {
    "calculator",
    "meal_added",
    "meal_deleted",
    "meal_edited",
    "manual",
    "important_notes_updated",
    "template_applied",
    "client_created",
    "meal_reorder",
}
MANUAL_TRIGGER = "manual"
CALCULATOR_TRIGGER = "calculator"


@dataclass(frozen=True)
class ClientSettings:
    """Client fields captured together with the diet."""

    show_macros: bool = False
    current_process: str = ""
    current_weight: float | None = None
    current_activity_level: float | None = None
    important_notes: str | None = None


@dataclass(frozen=True)
class SnapshotData:
    """Full diet state embedded in a snapshot."""

    day_plans: list[DayPlan] = field(default_factory=list)
    day_calories: dict[str, float] = field(default_factory=dict)
    day_macros: dict[str, dict[str, object]] = field(default_factory=dict)
    client_settings: ClientSettings | None = None


@dataclass(frozen=True)
class Snapshot:
    """Persisted point-in-time capture of a client's diet."""

    id: str
    client_id: str
    created_at: datetime
    trigger_type: str
    is_current: bool
    data: SnapshotData = field(default_factory=SnapshotData)
    trigger_description: str | None = None
    version_name: str | None = None
    total_calories: float | None = None
    total_protein: float | None = None
    total_fat: float | None = None
    total_carbs: float | None = None

    @property
    def is_manual(self) -> bool:
        """Manual snapshots stay out of the automatic undo history."""
        return self.trigger_type == MANUAL_TRIGGER


@dataclass
class SnapshotStack:
    """Undo history relative to the current snapshot.

    ``past[0]`` is the next undo target and ``future[-1]`` the next redo
    target.
    """

    past: list[Snapshot]
    current: Snapshot
    future: list[Snapshot]

    def snapshot_ids(self) -> list[str]:
        """Return ids from newest to oldest."""
        return (
            [snap.id for snap in self.future]
            + [self.current.id]
            + [snap.id for snap in self.past]
        )


@dataclass(frozen=True)
class SnapshotTotals:
    """Diet-wide totals over meals counted towards daily calories."""

    calories: float
    protein: float
    fat: float
    carbs: float


@dataclass(frozen=True)
class SnapshotComparison:
    """Differences between two snapshots."""

    calories_diff: float
    protein_diff: float
    fat_diff: float
    carbs_diff: float
    meals_added: list[Meal]
    meals_removed: list[Meal]
    change_percentage: float

"""Snapshot persistence interface and pure snapshot helpers."""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from diet_planner.domain.diet import DayPlan, day_plan_from_row, day_plan_to_dict
from diet_planner.domain.snapshots import (
    ClientSettings,
    Snapshot,
    SnapshotComparison,
    SnapshotData,
    SnapshotStack,
    SnapshotTotals,
)
from diet_planner.services.precision import parse_polish_number_safe

_logger = logging.getLogger(__name__)

_MACRO_TARGETS = {
    "target_protein_grams": "proteinGrams",
    "target_protein_percentage": "proteinPercentage",
    "target_fat_grams": "fatGrams",
    "target_fat_percentage": "fatPercentage",
    "target_carbs_grams": "carbsGrams",
    "target_carbs_percentage": "carbsPercentage",
    "target_fiber_grams": "fiberGrams",
}


class SnapshotRepository(Protocol):
    """Persistence interface for diet snapshots."""

    def list_snapshots(
        self, client_id: str, limit: int = 50, exclude_manual: bool = False
    ) -> list[Snapshot]:
        """Return the client's snapshots, newest first."""

    def create_snapshot(
        self,
        client_id: str,
        trigger_type: str,
        trigger_description: str | None = None,
        skip_throttling: bool = False,
        version_name: str | None = None,
    ) -> Snapshot | None:
        """Capture the client's diet as a new current snapshot."""

    def restore_snapshot(self, snapshot_id: str, skip_refresh: bool = False) -> bool:
        """Rewrite the client's diet from a snapshot and mark it current."""

    def ensure_current_snapshot(self, client_id: str) -> bool:
        """Mark the newest snapshot current when none is."""

    def restore_important_notes_snapshot(self, snapshot_id: str) -> bool:
        """Restore only the client's important notes from a snapshot."""

    def delete_old_snapshots(self, client_id: str, keep_count: int = 50) -> bool:
        """Delete all but the ``keep_count`` newest snapshots."""


@dataclass(frozen=True)
class RestoreRows:
    """Flat rows ready for batch insertion when restoring a snapshot."""

    day_plans: list[dict[str, object]] = field(default_factory=list)
    settings: list[dict[str, object]] = field(default_factory=list)
    meals: list[dict[str, object]] = field(default_factory=list)
    ingredients: list[dict[str, object]] = field(default_factory=list)


def build_snapshot_stack(snapshots: Sequence[Snapshot]) -> SnapshotStack | None:
    """Split a newest-first snapshot list around the current snapshot.

    Snapshots newer than current become ``future`` (so ``future[-1]`` is the
    one adjacent to current) and older ones become ``past`` (so ``past[0]`` is
    adjacent to current). Returns None for an empty list. Without a current
    flag the newest snapshot is used; with several, the newest flagged one.
    """
    if not snapshots:
        return None

    current_indexes = [index for index, snap in enumerate(snapshots) if snap.is_current]
    if not current_indexes:
        _logger.warning(
            "No current snapshot among %s snapshots, using newest", len(snapshots)
        )
        return SnapshotStack(past=list(snapshots[1:]), current=snapshots[0], future=[])
    if len(current_indexes) > 1:
        _logger.warning(
            "Multiple current snapshots: %s",
            [snapshots[index].id for index in current_indexes],
        )

    index = current_indexes[0]
    return SnapshotStack(
        past=list(snapshots[index + 1 :]),
        current=snapshots[index],
        future=list(snapshots[:index]),
    )


def snapshot_totals(day_plans: Iterable[DayPlan]) -> SnapshotTotals:
    """Sum nutrition over meals counted towards daily totals.

    Calories are rounded to whole numbers, macros to two decimals.
    """
    calories = protein = fat = carbs = 0.0
    for day_plan in day_plans:
        for meal in day_plan.meals:
            if not meal.count_towards_daily_calories:
                continue
            calories += meal.calories
            protein += meal.protein
            fat += meal.fat
            carbs += meal.carbs
    return SnapshotTotals(
        calories=float(round(calories)),
        protein=round(protein, 2),
        fat=round(fat, 2),
        carbs=round(carbs, 2),
    )


def compare_snapshots(first: Snapshot, second: Snapshot) -> SnapshotComparison:
    """Describe what changed from ``first`` to ``second``."""
    calories_diff = (second.total_calories or 0) - (first.total_calories or 0)
    first_meals = [meal for day in first.data.day_plans for meal in day.meals]
    second_meals = [meal for day in second.data.day_plans for meal in day.meals]
    first_keys = {(meal.name, meal.dish) for meal in first_meals}
    second_keys = {(meal.name, meal.dish) for meal in second_meals}

    change_percentage = 0.0
    if first.total_calories:
        change_percentage = abs(calories_diff / first.total_calories) * 100

    return SnapshotComparison(
        calories_diff=calories_diff,
        protein_diff=(second.total_protein or 0) - (first.total_protein or 0),
        fat_diff=(second.total_fat or 0) - (first.total_fat or 0),
        carbs_diff=(second.total_carbs or 0) - (first.total_carbs or 0),
        meals_added=[m for m in second_meals if (m.name, m.dish) not in first_keys],
        meals_removed=[m for m in first_meals if (m.name, m.dish) not in second_keys],
        change_percentage=change_percentage,
    )


def settings_row(
    data: SnapshotData, snapshot_day_id: str, client_id: str, day_plan_id: str
) -> dict[str, object]:
    """Build a ``client_diet_settings`` row from a snapshot day's targets."""
    macros = data.day_macros.get(snapshot_day_id) or {}
    row: dict[str, object] = {
        "client_id": client_id,
        "day_plan_id": day_plan_id,
        "target_calories": parse_polish_number_safe(
            data.day_calories.get(snapshot_day_id)
        ),
    }
    for column, key in _MACRO_TARGETS.items():
        row[column] = parse_polish_number_safe(macros.get(key))
    return row


def rows_for_restore(
    data: SnapshotData, client_id: str, new_id: Callable[[], str]
) -> RestoreRows:
    """Flatten snapshot data into insert rows with fresh identifiers.

    Identifiers are generated up front so meals and ingredients can point at
    their parents without waiting for the database.
    """
    rows = RestoreRows()
    for day_plan in data.day_plans:
        day_plan_id = new_id()
        rows.day_plans.append(
            {
                "id": day_plan_id,
                "name": day_plan.name,
                "day_number": day_plan.day_number or 1,
                "template_id": None,
            }
        )
        rows.settings.append(settings_row(data, day_plan.id, client_id, day_plan_id))

        for meal in day_plan.meals:
            meal_id = new_id()
            rows.meals.append(
                {
                    "id": meal_id,
                    "name": meal.name,
                    "dish": meal.dish,
                    "instructions": "\n".join(meal.instructions),
                    "calories": meal.calories,
                    "protein": meal.protein,
                    "carbs": meal.carbs,
                    "fat": meal.fat,
                    "fiber": meal.fiber,
                    "count_in_daily_total": meal.count_towards_daily_calories,
                    "day_plan_id": day_plan_id,
                    "order_index": meal.order_index or 0,
                    "time": meal.time or "",
                }
            )
            for position, ingredient in enumerate(meal.ingredients):
                rows.ingredients.append(
                    {
                        "meal_id": meal_id,
                        "name": ingredient.name,
                        "quantity": ingredient.quantity,
                        "unit": ingredient.unit,
                        "calories": ingredient.calories,
                        "protein": ingredient.protein,
                        "carbs": ingredient.carbs,
                        "fat": ingredient.fat,
                        "fiber": ingredient.fiber,
                        "order_index": position,
                    }
                )
    return rows


def snapshot_data_from_payload(payload: Mapping[str, object] | None) -> SnapshotData:
    """Parse the JSON stored in ``snapshot_data``."""
    if not payload:
        return SnapshotData()
    day_calories = payload.get("dayCalories") or {}
    day_macros = payload.get("dayMacros") or {}
    return SnapshotData(
        day_plans=[
            day_plan_from_row(row)
            for row in payload.get("dayPlans") or []
            if isinstance(row, dict)
        ],
        day_calories={
            str(day_id): parse_polish_number_safe(value)
            for day_id, value in day_calories.items()
        },
        day_macros={
            str(day_id): dict(value)
            for day_id, value in day_macros.items()
            if isinstance(value, dict)
        },
        client_settings=_client_settings_from_payload(payload.get("clientSettings")),
    )


def snapshot_data_to_payload(data: SnapshotData) -> dict[str, object]:
    """Serialize snapshot data to the stored JSON shape."""
    payload: dict[str, object] = {
        "dayPlans": [day_plan_to_dict(day_plan) for day_plan in data.day_plans],
        "dayCalories": dict(data.day_calories),
        "dayMacros": {key: dict(value) for key, value in data.day_macros.items()},
    }
    settings = data.client_settings
    if settings is not None:
        payload["clientSettings"] = {
            "showMacrosInJadlospis": settings.show_macros,
            "obecnyProces": settings.current_process,
            "current_weight": settings.current_weight,
            "current_activity_level": settings.current_activity_level,
            "wazneInformacje": settings.important_notes,
        }
    return payload


def snapshot_from_row(row: Mapping[str, object]) -> Snapshot:
    """Build a snapshot from a ``diet_snapshots`` row."""
    created_at = row.get("created_at")
    if isinstance(created_at, str):
        created_at = datetime.fromisoformat(created_at)
    return Snapshot(
        id=str(row["id"]),
        client_id=str(row.get("client_id") or ""),
        created_at=created_at,
        trigger_type=str(row.get("trigger_type") or ""),
        is_current=bool(row.get("is_current")),
        data=snapshot_data_from_payload(row.get("snapshot_data")),
        trigger_description=row.get("trigger_description"),
        version_name=row.get("version_name"),
        total_calories=_optional_float(row.get("total_calories")),
        total_protein=_optional_float(row.get("total_protein")),
        total_fat=_optional_float(row.get("total_fat")),
        total_carbs=_optional_float(row.get("total_carbs")),
    )


def _client_settings_from_payload(raw: object) -> ClientSettings | None:
    if not isinstance(raw, dict):
        return None
    return ClientSettings(
        show_macros=bool(raw.get("showMacrosInJadlospis")),
        current_process=str(raw.get("obecnyProces") or ""),
        current_weight=_optional_float(raw.get("current_weight")),
        current_activity_level=_optional_float(raw.get("current_activity_level")),
        important_notes=raw.get("wazneInformacje"),
    )


def _optional_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None

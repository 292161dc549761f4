"""Supabase-backed diet snapshot repository."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from uuid import uuid4

from supabase import Client

from diet_planner.domain.diet import DayPlan, day_plan_from_row
from diet_planner.domain.snapshots import (
    CALCULATOR_TRIGGER,
    MANUAL_TRIGGER,
    ClientSettings,
    Snapshot,
    SnapshotData,
)
from diet_planner.services.snapshots import (
    RestoreRows,
    SnapshotRepository,
    rows_for_restore,
    settings_row,
    snapshot_data_to_payload,
    snapshot_from_row,
    snapshot_totals,
)

_logger = logging.getLogger(__name__)

_SNAPSHOTS = "diet_snapshots"
_SETTINGS = "client_diet_settings"
_DAY_PLANS = "day_plans"
_MEALS = "meals"
_INGREDIENTS = "meal_ingredients"
_CLIENTS = "clients"

_MACRO_COLUMNS = {
    "proteinGrams": "target_protein_grams",
    "proteinPercentage": "target_protein_percentage",
    "fatGrams": "target_fat_grams",
    "fatPercentage": "target_fat_percentage",
    "carbsGrams": "target_carbs_grams",
    "carbsPercentage": "target_carbs_percentage",
    "fiberGrams": "target_fiber_grams",
}


def _new_id() -> str:
    return str(uuid4())


@dataclass
class SupabaseSnapshotRepository(SnapshotRepository):
    """Supabase implementation for diet snapshots.

    Moving the current flag takes two writes (unmark, then mark or insert).
    When the second one fails the previously current rows are marked again.
    """

    client: Client
    meal_chunk_size: int = 50
    ingredient_chunk_size: int = 30
    id_factory: Callable[[], str] = _new_id

    def list_snapshots(
        self, client_id: str, limit: int = 50, exclude_manual: bool = False
    ) -> list[Snapshot]:
        """Return the client's snapshots, newest first."""
        query = (
            self.client.table(_SNAPSHOTS)
            .select("*")
            .eq("client_id", client_id)
            .order("created_at", desc=True)
        )
        if exclude_manual:
            query = query.neq("trigger_type", MANUAL_TRIGGER)
        if limit:
            query = query.limit(limit)
        response = query.execute()
        return [snapshot_from_row(row) for row in response.data or []]

    def create_snapshot(
        self,
        client_id: str,
        trigger_type: str,
        trigger_description: str | None = None,
        skip_throttling: bool = False,
        version_name: str | None = None,
    ) -> Snapshot | None:
        """Capture the client's current diet as the new current snapshot.

        Snapshots are never throttled; ``skip_throttling`` is accepted for
        callers that pass it.
        """
        client_row = self._get_client(client_id)
        if client_row is None:
            _logger.error("Cannot snapshot unknown client %s", client_id)
            return None
        day_plans, settings = self._load_diet(client_id)

        day_calories: dict[str, float] = {}
        day_macros: dict[str, dict[str, object]] = {}
        for setting in settings:
            day_id = str(setting["day_plan_id"])
            day_calories[day_id] = float(setting.get("target_calories") or 0)
            day_macros[day_id] = {
                key: "" if setting.get(column) is None else str(setting[column])
                for key, column in _MACRO_COLUMNS.items()
            }
        data = SnapshotData(
            day_plans=day_plans,
            day_calories=day_calories,
            day_macros=day_macros,
            client_settings=_client_settings_from_row(client_row),
        )
        totals = snapshot_totals(day_plans)

        previous_ids = self._current_ids(client_id)
        self._unmark_current(client_id)
        try:
            response = (
                self.client.table(_SNAPSHOTS)
                .insert(
                    {
                        "client_id": client_id,
                        "snapshot_data": snapshot_data_to_payload(data),
                        "trigger_type": trigger_type,
                        "trigger_description": trigger_description,
                        "version_name": version_name,
                        "total_calories": totals.calories,
                        "total_protein": totals.protein,
                        "total_fat": totals.fat,
                        "total_carbs": totals.carbs,
                        "is_current": True,
                    }
                )
                .execute()
            )
            if not response.data:
                raise RuntimeError("Failed to create snapshot")
        except Exception:
            _logger.error("Snapshot insert failed for client %s", client_id)
            self._mark_current(previous_ids)
            raise
        snapshot = snapshot_from_row(response.data[0])
        _logger.info(
            "Created %s snapshot %s for client %s", trigger_type, snapshot.id, client_id
        )
        return snapshot

    def restore_snapshot(self, snapshot_id: str, skip_refresh: bool = False) -> bool:
        """Replace the client's diet with the snapshot and mark it current.

        Calculator snapshots only carry day targets, so restoring one syncs
        days by name and rewrites their targets without touching meals.
        """
        try:
            row = self._get_snapshot_row(snapshot_id)
            if row is None:
                _logger.error("Snapshot %s not found", snapshot_id)
                return False
            snapshot = snapshot_from_row(row)
            client_id = snapshot.client_id

            if snapshot.trigger_type == CALCULATOR_TRIGGER:
                self._restore_calculator(snapshot)
                self._apply_client_settings(client_id, row)
                if not self._move_current_flag(client_id, snapshot_id):
                    return False
            else:
                self._delete_diet(client_id)
                rows = rows_for_restore(snapshot.data, client_id, self.id_factory)
                self._insert_rows(rows)
                self._apply_client_settings(client_id, row)
                if not self._move_current_flag(client_id, snapshot_id):
                    return False
                self._normalize_day_numbers(rows.day_plans)
        except Exception:
            _logger.exception("Failed to restore snapshot %s", snapshot_id)
            return False

        _logger.info(
            "Restored snapshot %s for client %s (skip_refresh=%s)",
            snapshot_id,
            client_id,
            skip_refresh,
        )
        return True

    def ensure_current_snapshot(self, client_id: str) -> bool:
        """Mark the newest snapshot current when none is."""
        try:
            current = (
                self.client.table(_SNAPSHOTS)
                .select("id")
                .eq("client_id", client_id)
                .eq("is_current", True)
                .execute()
            )
            if current.data:
                return True
            newest = (
                self.client.table(_SNAPSHOTS)
                .select("id")
                .eq("client_id", client_id)
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
            if not newest.data:
                _logger.error("No snapshots to mark current for client %s", client_id)
                return False
            snapshot_id = newest.data[0]["id"]
            self.client.table(_SNAPSHOTS).update({"is_current": True}).eq(
                "id", snapshot_id
            ).execute()
        except Exception:
            _logger.exception("Failed to repair current snapshot for %s", client_id)
            return False
        _logger.info("Marked newest snapshot %s current for %s", snapshot_id, client_id)
        return True

    def restore_important_notes_snapshot(self, snapshot_id: str) -> bool:
        """Restore only the client's important notes from a snapshot."""
        try:
            row = self._get_snapshot_row(snapshot_id)
            if row is None:
                _logger.error("Snapshot %s not found", snapshot_id)
                return False
            raw_settings = (row.get("snapshot_data") or {}).get("clientSettings")
            if not isinstance(raw_settings, dict) or "wazneInformacje" not in raw_settings:
                _logger.error("Snapshot %s holds no important notes", snapshot_id)
                return False
            client_id = str(row["client_id"])
            self.client.table(_CLIENTS).update(
                {"important_notes": raw_settings["wazneInformacje"]}
            ).eq("id", client_id).execute()
            return self._move_current_flag(client_id, snapshot_id)
        except Exception:
            _logger.exception("Failed to restore notes from snapshot %s", snapshot_id)
            return False

    def delete_old_snapshots(self, client_id: str, keep_count: int = 50) -> bool:
        """Delete all but the newest ``keep_count`` snapshots, never the current one."""
        response = (
            self.client.table(_SNAPSHOTS)
            .select("id, is_current")
            .eq("client_id", client_id)
            .order("created_at", desc=True)
            .execute()
        )
        rows = response.data or []
        if len(rows) <= keep_count:
            return True
        stale_ids = [row["id"] for row in rows[keep_count:] if not row.get("is_current")]
        if stale_ids:
            self.client.table(_SNAPSHOTS).delete().in_("id", stale_ids).execute()
            _logger.info(
                "Deleted %s old snapshots for client %s", len(stale_ids), client_id
            )
        return True

    def _get_snapshot_row(self, snapshot_id: str) -> dict[str, object] | None:
        response = (
            self.client.table(_SNAPSHOTS)
            .select("*")
            .eq("id", snapshot_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]

    def _get_client(self, client_id: str) -> dict[str, object] | None:
        response = (
            self.client.table(_CLIENTS).select("*").eq("id", client_id).limit(1).execute()
        )
        if not response.data:
            return None
        return response.data[0]

    def _load_diet(
        self, client_id: str
    ) -> tuple[list[DayPlan], list[dict[str, object]]]:
        """Return the client's day plans with meals and ingredients, and targets."""
        settings = (
            self.client.table(_SETTINGS).select("*").eq("client_id", client_id).execute()
        ).data or []
        if not settings:
            return [], []
        day_plan_ids = [row["day_plan_id"] for row in settings]

        day_rows = (
            self.client.table(_DAY_PLANS)
            .select("*")
            .in_("id", day_plan_ids)
            .order("day_number")
            .execute()
        ).data or []
        meal_rows = (
            self.client.table(_MEALS)
            .select("*")
            .in_("day_plan_id", day_plan_ids)
            .order("order_index")
            .execute()
        ).data or []

        ingredients_by_meal: dict[str, list[dict[str, object]]] = {}
        if meal_rows:
            ingredient_rows = (
                self.client.table(_INGREDIENTS)
                .select("*")
                .in_("meal_id", [row["id"] for row in meal_rows])
                .order("order_index")
                .execute()
            ).data or []
            for ingredient in ingredient_rows:
                ingredients_by_meal.setdefault(ingredient["meal_id"], []).append(
                    ingredient
                )

        meals_by_day: dict[str, list[dict[str, object]]] = {}
        for meal in meal_rows:
            meals_by_day.setdefault(meal["day_plan_id"], []).append(
                {**meal, "ingredients": ingredients_by_meal.get(meal["id"], [])}
            )
        day_plans = [
            day_plan_from_row(
                {
                    **row,
                    "meals": sorted(
                        meals_by_day.get(row["id"], []),
                        key=lambda meal: meal.get("order_index") or 0,
                    ),
                }
            )
            for row in day_rows
        ]
        return day_plans, settings

    def _delete_diet(self, client_id: str) -> None:
        settings = (
            self.client.table(_SETTINGS)
            .select("day_plan_id")
            .eq("client_id", client_id)
            .execute()
        ).data or []
        day_plan_ids = [row["day_plan_id"] for row in settings]
        if not day_plan_ids:
            return
        self.client.table(_SETTINGS).delete().eq("client_id", client_id).execute()
        # Meals and ingredients cascade from day_plans.
        self.client.table(_DAY_PLANS).delete().in_("id", day_plan_ids).execute()

    def _restore_calculator(self, snapshot: Snapshot) -> None:
        """Match current days to the snapshot by name and restore their targets."""
        client_id = snapshot.client_id
        settings = (
            self.client.table(_SETTINGS)
            .select("day_plan_id")
            .eq("client_id", client_id)
            .execute()
        ).data or []
        day_plan_ids = [row["day_plan_id"] for row in settings]
        current_days: list[dict[str, object]] = []
        if day_plan_ids:
            current_days = (
                self.client.table(_DAY_PLANS)
                .select("id, name")
                .in_("id", day_plan_ids)
                .execute()
            ).data or []
        current_by_name = {row["name"]: row["id"] for row in current_days}
        target_names = {day_plan.name for day_plan in snapshot.data.day_plans}

        for row in current_days:
            if row["name"] in target_names:
                continue
            self.client.table(_SETTINGS).delete().eq("client_id", client_id).eq(
                "day_plan_id", row["id"]
            ).execute()
            self.client.table(_DAY_PLANS).delete().eq("id", row["id"]).execute()

        for day_plan in snapshot.data.day_plans:
            current_id = current_by_name.get(day_plan.name)
            if current_id is None:
                day_plan_id = self.id_factory()
                self.client.table(_DAY_PLANS).insert(
                    {
                        "id": day_plan_id,
                        "name": day_plan.name,
                        "day_number": day_plan.day_number or 1,
                        "template_id": None,
                    }
                ).execute()
                self.client.table(_SETTINGS).insert(
                    settings_row(snapshot.data, day_plan.id, client_id, day_plan_id)
                ).execute()
                continue
            targets = settings_row(snapshot.data, day_plan.id, client_id, current_id)
            del targets["client_id"], targets["day_plan_id"]
            self.client.table(_SETTINGS).update(targets).eq("client_id", client_id).eq(
                "day_plan_id", current_id
            ).execute()

    def _apply_client_settings(self, client_id: str, row: Mapping[str, object]) -> None:
        raw_settings = (row.get("snapshot_data") or {}).get("clientSettings")
        if not isinstance(raw_settings, dict):
            return
        updates = _client_updates(raw_settings)
        if updates:
            self.client.table(_CLIENTS).update(updates).eq("id", client_id).execute()

    def _insert_rows(self, rows: RestoreRows) -> None:
        if rows.day_plans:
            self.client.table(_DAY_PLANS).insert(rows.day_plans).execute()
        if rows.settings:
            self.client.table(_SETTINGS).insert(rows.settings).execute()
        self._insert_chunked(_MEALS, rows.meals, self.meal_chunk_size)
        self._insert_chunked(_INGREDIENTS, rows.ingredients, self.ingredient_chunk_size)

    def _insert_chunked(
        self, table: str, rows: list[dict[str, object]], chunk_size: int
    ) -> None:
        for start in range(0, len(rows), chunk_size):
            self.client.table(table).insert(rows[start : start + chunk_size]).execute()

    def _unmark_current(self, client_id: str) -> None:
        self.client.table(_SNAPSHOTS).update({"is_current": False}).eq(
            "client_id", client_id
        ).eq("is_current", True).execute()

    def _current_ids(self, client_id: str) -> list[str]:
        rows = (
            self.client.table(_SNAPSHOTS)
            .select("id")
            .eq("client_id", client_id)
            .eq("is_current", True)
            .execute()
        ).data or []
        return [row["id"] for row in rows]

    def _mark_current(self, snapshot_ids: list[str]) -> None:
        if snapshot_ids:
            self.client.table(_SNAPSHOTS).update({"is_current": True}).in_(
                "id", snapshot_ids
            ).execute()

    def _move_current_flag(self, client_id: str, snapshot_id: str) -> bool:
        previous_ids = self._current_ids(client_id)
        self._unmark_current(client_id)
        response = (
            self.client.table(_SNAPSHOTS)
            .update({"is_current": True})
            .eq("id", snapshot_id)
            .execute()
        )
        if response.data:
            return True

        _logger.error("Failed to mark snapshot %s current", snapshot_id)
        self._mark_current(previous_ids)
        return False

    def _normalize_day_numbers(self, day_plans: list[dict[str, object]]) -> None:
        """Renumber restored days 1..N keeping their stored order."""
        ordered = sorted(day_plans, key=lambda row: row.get("day_number") or 0)
        for position, row in enumerate(ordered, start=1):
            if row.get("day_number") != position:
                self.client.table(_DAY_PLANS).update({"day_number": position}).eq(
                    "id", row["id"]
                ).execute()


def _client_settings_from_row(row: Mapping[str, object]) -> ClientSettings:
    return ClientSettings(
        show_macros=bool(row.get("show_macros")),
        current_process=str(row.get("current_process") or ""),
        current_weight=_optional_float(row.get("current_weight")),
        current_activity_level=_optional_float(row.get("current_activity_level")),
        important_notes=row.get("important_notes"),
    )


def _client_updates(raw: Mapping[str, object]) -> dict[str, object]:
    """Map stored client settings to ``clients`` columns; empty numbers become null."""
    updates: dict[str, object] = {}
    for key in ("current_weight", "current_activity_level"):
        if key not in raw:
            continue
        value = raw[key]
        if value in (None, "", 0):
            updates[key] = None
            continue
        number = _optional_float(value)
        if number is not None:
            updates[key] = number
    if "wazneInformacje" in raw:
        updates["important_notes"] = raw["wazneInformacje"]
    return updates


def _optional_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None

"""Pydantic request models for the HTTP API."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from diet_planner.domain.diet import DayPlan, Meal, day_plan_from_row, meal_from_row
from diet_planner.domain.snapshots import TRIGGER_TYPES

NumericInput = float | str | None


class IngredientPayload(BaseModel):
    """Ingredient line as sent by the editor."""

    id: str
    name: str
    quantity: float
    unit: str
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    ingredient_id: str | None = None
    unit_weight: float | None = None


class MealPayload(BaseModel):
    """Meal as sent by the editor."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    dish: str = ""
    instructions: list[str] = Field(default_factory=list)
    ingredients: list[IngredientPayload] = Field(default_factory=list)
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    count_towards_daily_calories: bool = Field(
        default=True, alias="countTowardsDailyCalories"
    )
    time: str | None = None
    order_index: int | None = None

    def to_domain(self) -> Meal:
        return meal_from_row(self.model_dump(by_alias=True))


class DayPlanPayload(BaseModel):
    """Day plan as sent by the editor."""

    id: str
    name: str
    meals: list[MealPayload] = Field(default_factory=list)
    day_number: int | None = None

    def to_domain(self) -> DayPlan:
        return day_plan_from_row(self.model_dump(by_alias=True))


class CopyMealRequest(BaseModel):
    meal: MealPayload
    day_id: str
    order_index: int = 0


class CopyDayRequest(BaseModel):
    day_plan: DayPlanPayload


class PasteRequest(BaseModel):
    target_day_id: str | None = None


class CreateSnapshotRequest(BaseModel):
    """Snapshot creation after an edit."""

    trigger_type: str
    trigger_description: str | None = None
    version_name: str | None = None

    @field_validator("trigger_type")
    @classmethod
    def _known_trigger(cls, value: str) -> str:
        if value not in TRIGGER_TYPES:
            raise ValueError(f"Unknown trigger type: {value}")
        return value


class MacrosRequest(BaseModel):
    quantity: NumericInput
    nutrition_per_100g: dict[str, float | None]
    unit_weight: NumericInput = 100
    unit: str | None = None


class ScaleRequest(BaseModel):
    ingredients: list[dict[str, object]]
    target_total: NumericInput
    current_total: NumericInput


class QuantityRequest(BaseModel):
    value: NumericInput
    minimum: float = 0.1
    maximum: float = 9999


class FormatRequest(BaseModel):
    value: NumericInput
    decimals: int | None = None


class RealtimeEvent(BaseModel):
    """Change notification forwarded from the database."""

    client_id: str
    table: str
    type: str

"""Pydantic models for the AI macro optimization contract."""

from typing import Literal

from pydantic import BaseModel, Field


class TargetMacros(BaseModel):
    """Macro targets in grams."""

    protein: float
    fat: float
    carbs: float


class OptimizationIngredient(BaseModel):
    """Ingredient sent to or returned by the optimizer."""

    id: str
    name: str
    quantity: float
    unit: str
    calories: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    carbs: float = 0.0
    fiber: float = 0.0
    original_unit: str | None = None
    original_quantity: float | None = None
    unit_weight: float | None = None


class OptimizationContext(BaseModel):
    """Where the optimized meal lives."""

    template_id: str | None = None
    day_plan_id: str | None = None
    client_id: str | None = None


class OptimizationRequest(BaseModel):
    """Request body for the optimization function."""

    user_id: str
    meal_name: str
    target_macros: TargetMacros
    current_ingredients: list[OptimizationIngredient]
    context: OptimizationContext | None = None
    ai_model: Literal["gpt-4o-mini", "gpt-5", "gpt-5-mini", "gpt-5-nano"] = (
        "gpt-4o-mini"
    )


class MacroSummary(BaseModel):
    total_calories: float
    total_protein: float
    total_fat: float
    total_carbs: float
    total_fiber: float = 0.0
    protein_percentage: float = 0.0
    fat_percentage: float = 0.0
    carbs_percentage: float = 0.0


class TargetAchievement(BaseModel):
    protein_achievement: float
    fat_achievement: float
    carbs_achievement: float


class MacroComparison(BaseModel):
    calorie_difference: float
    protein_difference: float
    fat_difference: float
    carbs_difference: float
    target_achievement: TargetAchievement


class Achievability(BaseModel):
    overall_score: float
    feasibility: Literal["high", "medium", "low"]
    main_challenges: list[str] = Field(default_factory=list)


class OptimizationResult(BaseModel):
    """Successful optimization payload."""

    optimized_ingredients: list[OptimizationIngredient]
    macro_summary: MacroSummary
    comparison: MacroComparison
    ai_comment: str = ""
    achievability: Achievability


class OptimizationError(BaseModel):
    code: str
    message: str
    details: str | None = None


class OptimizationResponse(BaseModel):
    """Envelope returned by the optimization function."""

    success: bool
    data: OptimizationResult | None = None
    error: OptimizationError | None = None

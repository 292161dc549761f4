"""Stateless nutrition and number formatting endpoints."""

import dataclasses

from fastapi import APIRouter, Depends

from diet_planner.api.dependencies import require_api_token
from diet_planner.api.schemas import (
    FormatRequest,
    MacrosRequest,
    QuantityRequest,
    ScaleRequest,
)
from diet_planner.services.nutrition import (
    calculate_nutrition_macros,
    scale_ingredients_by_ratio,
)
from diet_planner.services.precision import (
    format_polish_number,
    parse_polish_number_safe,
    validate_quantity_input,
)

router = APIRouter(tags=["calculations"], dependencies=[Depends(require_api_token)])


@router.post("/nutrition/macros")
async def nutrition_macros(payload: MacrosRequest) -> dict[str, float]:
    """Compute nutrition for a quantity of an ingredient."""
    values = calculate_nutrition_macros(
        payload.quantity,
        payload.nutrition_per_100g,
        payload.unit_weight,
        payload.unit,
    )
    return dataclasses.asdict(values)


@router.post("/nutrition/scale")
async def nutrition_scale(payload: ScaleRequest) -> dict[str, object]:
    """Scale ingredient quantities so the meal hits a new total."""
    ingredients = scale_ingredients_by_ratio(
        payload.ingredients, payload.target_total, payload.current_total
    )
    return {"ingredients": list(ingredients)}


@router.post("/numbers/validate-quantity")
async def validate_quantity(payload: QuantityRequest) -> dict[str, object]:
    """Parse a typed quantity and clamp it to the allowed range."""
    result = validate_quantity_input(payload.value, payload.minimum, payload.maximum)
    return dataclasses.asdict(result)


@router.post("/numbers/format")
async def format_number(payload: FormatRequest) -> dict[str, object]:
    """Render a number with a decimal comma."""
    return {
        "value": parse_polish_number_safe(payload.value),
        "formatted": format_polish_number(payload.value, payload.decimals),
    }

"""Nutrition calculations and proportional ingredient scaling."""

import dataclasses
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import TypeVar

from diet_planner.domain.diet import Ingredient, NutritionValues
from diet_planner.services.precision import (
    Numeric,
    precise_add,
    precise_multiply,
    round_decimal,
    to_decimal,
)

_logger = logging.getLogger(__name__)

_FIELDS = ("calories", "protein", "carbs", "fat", "fiber")
_GRAM_UNITS = {"g", "gram", "gramy"}
_MILLILITRE_UNITS = {"ml", "mililitr", "mililitry"}

T = TypeVar("T")


def calculate_nutrition_macros(
    quantity: Numeric,
    nutrition_per_100g: Mapping[str, Numeric],
    unit_weight: Numeric = 100,
    unit: str | None = None,
) -> NutritionValues:
    """Compute ingredient nutrition from a per-100g basis.

    Grams are taken as-is, millilitres use ``unit_weight`` as grams per 100 ml
    and every other unit (pieces, spoons) uses it as grams per unit. Each field
    is rounded to one decimal; missing fields count as zero.
    """
    qty = to_decimal(quantity)
    weight = to_decimal(unit_weight)
    if unit in _GRAM_UNITS:
        grams = qty
    elif unit in _MILLILITRE_UNITS:
        grams = qty / 100 * weight
    else:
        grams = qty * weight
    multiplier = grams / 100

    values = {
        name: precise_multiply(nutrition_per_100g.get(name) or 0, multiplier, 1)
        for name in _FIELDS
    }
    return NutritionValues(**values)


def scale_ingredients_by_ratio(
    ingredients: Sequence[T], target_total: Numeric, current_total: Numeric
) -> Sequence[T]:
    """Rescale every quantity by ``target_total / current_total``.

    A zero target or current total leaves the input untouched. Otherwise a new
    list is returned; elements are copied with only ``quantity`` replaced.
    """
    target = to_decimal(target_total)
    current = to_decimal(current_total)
    if current.is_zero() or target.is_zero():
        _logger.warning("Invalid scaling: target=%s, current=%s", target, current)
        return ingredients

    ratio = target / current
    scaled: list[T] = []
    for ingredient in ingredients:
        quantity = round_decimal(to_decimal(_quantity_of(ingredient)) * ratio, 1)
        scaled.append(_with_quantity(ingredient, quantity))
    return scaled


def sum_meal_nutrition(ingredients: Iterable[Ingredient]) -> NutritionValues:
    """Sum ingredient nutrition without float drift."""
    totals = dict.fromkeys(_FIELDS, 0.0)
    for ingredient in ingredients:
        for name in _FIELDS:
            totals[name] = precise_add(totals[name], getattr(ingredient, name), 1)
    return NutritionValues(**totals)


def ingredient_nutrition(
    ingredient: Ingredient, nutrition_per_100g: Mapping[str, Numeric]
) -> Ingredient:
    """Return a copy of the ingredient with nutrition recomputed."""
    values = calculate_nutrition_macros(
        ingredient.quantity,
        nutrition_per_100g,
        ingredient.unit_weight if ingredient.unit_weight is not None else 100,
        ingredient.unit,
    )
    return dataclasses.replace(ingredient, **dataclasses.asdict(values))


def _quantity_of(ingredient: object) -> Numeric:
    if isinstance(ingredient, Mapping):
        return ingredient.get("quantity")
    return getattr(ingredient, "quantity", None)


def _with_quantity(ingredient: T, quantity: float) -> T:
    if dataclasses.is_dataclass(ingredient) and not isinstance(ingredient, type):
        return dataclasses.replace(ingredient, quantity=quantity)
    if isinstance(ingredient, Mapping):
        return {**ingredient, "quantity": quantity}  # type: ignore[return-value]
    raise TypeError(f"Cannot scale ingredient of type {type(ingredient).__name__}")

"""Tests for nutrition calculations and ingredient scaling."""

import pytest

from diet_planner.domain.diet import Ingredient
from diet_planner.services.nutrition import (
    calculate_nutrition_macros,
    ingredient_nutrition,
    scale_ingredients_by_ratio,
    sum_meal_nutrition,
)

CHICKEN = {"calories": 165, "protein": 31, "carbs": 0, "fat": 3.6, "fiber": 0}


def test_macros_from_unit_weight() -> None:
    values = calculate_nutrition_macros(150, CHICKEN, 1)

    assert values.calories == 247.5
    assert values.protein == 46.5
    assert values.fat == 5.4
    assert values.carbs == 0.0
    assert values.fiber == 0.0


def test_macros_for_grams_ignore_unit_weight() -> None:
    values = calculate_nutrition_macros(150, CHICKEN, 30, unit="g")

    assert values.calories == 247.5


def test_macros_for_millilitres() -> None:
    milk = {"calories": 42, "protein": 3.4}

    values = calculate_nutrition_macros(200, milk, 103, unit="ml")

    assert values.calories == 86.5
    assert values.protein == 7.0


def test_macros_for_pieces() -> None:
    banana = {"calories": 89, "protein": 1.1, "carbs": 22.8, "fat": 0.3, "fiber": 2.6}

    values = calculate_nutrition_macros("2", banana, 120, unit="szt")

    assert values.calories == 213.6
    assert values.carbs == 54.7
    assert values.protein == 2.6


def test_macros_missing_fields_default_to_zero() -> None:
    values = calculate_nutrition_macros(100, {"calories": None}, 100, unit="g")

    assert values.calories == 0.0
    assert values.protein == 0.0


def test_scale_with_equal_totals_keeps_quantities() -> None:
    ingredients = [{"id": "1", "quantity": 150}]

    scaled = scale_ingredients_by_ratio(ingredients, 150, 150)

    assert scaled == [{"id": "1", "quantity": 150.0}]
    assert scaled is not ingredients


@pytest.mark.parametrize(("target", "current"), [(0, 150), (150, 0), (None, 100)])
def test_scale_with_zero_total_returns_input(target, current) -> None:  # type: ignore[no-untyped-def]
    ingredients = [{"id": "1", "quantity": 150}]

    assert scale_ingredients_by_ratio(ingredients, target, current) is ingredients


def test_scale_dataclasses_without_mutation() -> None:
    original = Ingredient(id="1", name="Ryż", quantity=100, unit="g", calories=130)

    scaled = scale_ingredients_by_ratio([original], 200, 100)

    assert scaled[0].quantity == 200.0
    assert scaled[0].calories == 130
    assert scaled[0].name == "Ryż"
    assert original.quantity == 100


def test_scale_rounds_to_one_decimal() -> None:
    scaled = scale_ingredients_by_ratio([{"quantity": 100}], 1, 3)

    assert scaled[0]["quantity"] == 33.3


def test_scale_rejects_unknown_ingredient_types() -> None:
    with pytest.raises(TypeError):
        scale_ingredients_by_ratio([object()], 2, 1)


def test_sum_meal_nutrition_avoids_float_drift() -> None:
    ingredients = [
        Ingredient(id="1", name="A", quantity=1, unit="g", calories=0.1, protein=1.15),
        Ingredient(id="2", name="B", quantity=1, unit="g", calories=0.2, protein=2.1),
    ]

    totals = sum_meal_nutrition(ingredients)

    assert totals.calories == 0.3
    assert totals.protein == 3.3


def test_ingredient_nutrition_returns_recomputed_copy() -> None:
    ingredient = Ingredient(id="1", name="Kurczak", quantity=150, unit="g")

    updated = ingredient_nutrition(ingredient, CHICKEN)

    assert updated.calories == 247.5
    assert updated.protein == 46.5
    assert ingredient.calories == 0.0

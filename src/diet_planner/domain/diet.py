"""Domain models for diet plans."""

from dataclasses import dataclass, field


@dataclass
class Ingredient:
    """Ingredient line inside a meal."""

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


@dataclass
class Meal:
    """Meal with its ingredients and aggregate nutrition."""

    id: str
    name: str
    dish: str
    instructions: list[str] = field(default_factory=list)
    ingredients: list[Ingredient] = field(default_factory=list)
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    count_towards_daily_calories: bool = True
    time: str | None = None
    order_index: int | None = None


@dataclass
class DayPlan:
    """Named day of a diet with ordered meals."""

    id: str
    name: str
    meals: list[Meal] = field(default_factory=list)
    day_number: int | None = None


@dataclass(frozen=True)
class NutritionValues:
    """Calories and macronutrients for an ingredient or meal."""

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float


def clone_ingredient(ingredient: Ingredient, new_id: str | None = None) -> Ingredient:
    """Return a copy of an ingredient, optionally under a new id."""
    return Ingredient(
        id=new_id if new_id is not None else ingredient.id,
        name=ingredient.name,
        quantity=ingredient.quantity,
        unit=ingredient.unit,
        calories=ingredient.calories,
        protein=ingredient.protein,
        carbs=ingredient.carbs,
        fat=ingredient.fat,
        fiber=ingredient.fiber,
        ingredient_id=ingredient.ingredient_id,
        unit_weight=ingredient.unit_weight,
    )


def clone_meal(meal: Meal) -> Meal:
    """Return a deep copy of a meal keeping every identifier."""
    return Meal(
        id=meal.id,
        name=meal.name,
        dish=meal.dish,
        instructions=list(meal.instructions),
        ingredients=[clone_ingredient(item) for item in meal.ingredients],
        calories=meal.calories,
        protein=meal.protein,
        carbs=meal.carbs,
        fat=meal.fat,
        fiber=meal.fiber,
        count_towards_daily_calories=meal.count_towards_daily_calories,
        time=meal.time,
        order_index=meal.order_index,
    )


def clone_day_plan(day_plan: DayPlan) -> DayPlan:
    """Return a deep copy of a day plan keeping every identifier."""
    return DayPlan(
        id=day_plan.id,
        name=day_plan.name,
        meals=[clone_meal(meal) for meal in day_plan.meals],
        day_number=day_plan.day_number,
    )


def ingredient_from_row(row: dict[str, object]) -> Ingredient:
    """Build an ingredient from a stored row or snapshot payload."""
    unit_weight = row.get("unit_weight")
    ingredient_id = row.get("ingredient_id")
    return Ingredient(
        id=str(row.get("id") or ""),
        name=str(row.get("name") or ""),
        quantity=float(row.get("quantity") or 0.0),
        unit=str(row.get("unit") or ""),
        calories=float(row.get("calories") or 0.0),
        protein=float(row.get("protein") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        fat=float(row.get("fat") or 0.0),
        fiber=float(row.get("fiber") or 0.0),
        ingredient_id=str(ingredient_id) if ingredient_id else None,
        unit_weight=float(unit_weight) if unit_weight is not None else None,
    )


def meal_from_row(row: dict[str, object]) -> Meal:
    """Build a meal from a stored row or snapshot payload."""
    instructions = row.get("instructions") or []
    if isinstance(instructions, str):
        instructions = [line for line in instructions.split("\n") if line.strip()]
    counted = row.get("countTowardsDailyCalories")
    if counted is None:
        counted = row.get("count_in_daily_total")
    order_index = row.get("order_index")
    return Meal(
        id=str(row.get("id") or ""),
        name=str(row.get("name") or ""),
        dish=str(row.get("dish") or ""),
        instructions=[str(line) for line in instructions],
        ingredients=[
            ingredient_from_row(item)
            for item in row.get("ingredients") or []
            if isinstance(item, dict)
        ],
        calories=float(row.get("calories") or 0.0),
        protein=float(row.get("protein") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        fat=float(row.get("fat") or 0.0),
        fiber=float(row.get("fiber") or 0.0),
        count_towards_daily_calories=counted is not False,
        time=str(row["time"]) if row.get("time") else None,
        order_index=int(order_index) if order_index is not None else None,
    )


def day_plan_from_row(row: dict[str, object]) -> DayPlan:
    """Build a day plan from a stored row or snapshot payload."""
    day_number = row.get("day_number")
    return DayPlan(
        id=str(row.get("id") or ""),
        name=str(row.get("name") or ""),
        meals=[
            meal_from_row(meal)
            for meal in row.get("meals") or []
            if isinstance(meal, dict)
        ],
        day_number=int(day_number) if day_number is not None else None,
    )


def ingredient_to_dict(ingredient: Ingredient) -> dict[str, object]:
    return {
        "id": ingredient.id,
        "ingredient_id": ingredient.ingredient_id,
        "name": ingredient.name,
        "quantity": ingredient.quantity,
        "unit": ingredient.unit,
        "unit_weight": ingredient.unit_weight,
        "calories": ingredient.calories,
        "protein": ingredient.protein,
        "carbs": ingredient.carbs,
        "fat": ingredient.fat,
        "fiber": ingredient.fiber,
    }


def meal_to_dict(meal: Meal) -> dict[str, object]:
    return {
        "id": meal.id,
        "name": meal.name,
        "dish": meal.dish,
        "instructions": list(meal.instructions),
        "ingredients": [ingredient_to_dict(item) for item in meal.ingredients],
        "calories": meal.calories,
        "protein": meal.protein,
        "carbs": meal.carbs,
        "fat": meal.fat,
        "fiber": meal.fiber,
        "countTowardsDailyCalories": meal.count_towards_daily_calories,
        "time": meal.time,
        "order_index": meal.order_index,
    }


def day_plan_to_dict(day_plan: DayPlan) -> dict[str, object]:
    return {
        "id": day_plan.id,
        "name": day_plan.name,
        "day_number": day_plan.day_number,
        "meals": [meal_to_dict(meal) for meal in day_plan.meals],
    }

"""Meal aggregation."""

import math
from collections.abc import Iterable

from mess_analyzer.domain.nutrition import FoodNutrition, MealTotals


def aggregate(items: Iterable[FoodNutrition]) -> MealTotals:
    """Sum item macros field by field and round each total to one decimal."""
    calories = protein = carbs = fat = fiber = 0.0
    for item in items:
        calories += item.calories or 0.0
        protein += item.protein or 0.0
        carbs += item.carbs or 0.0
        fat += item.fat or 0.0
        fiber += item.fiber or 0.0
    return MealTotals(
        calories=round_half_up(calories, 1),
        protein=round_half_up(protein, 1),
        carbs=round_half_up(carbs, 1),
        fat=round_half_up(fat, 1),
        fiber=round_half_up(fiber, 1),
    )


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, unlike the banker's rounding of round()."""
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale

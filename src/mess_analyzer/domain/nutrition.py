"""Nutrition domain models."""

from dataclasses import dataclass

NUTRIENT_FIELDS = ("calories", "protein", "carbs", "fat", "fiber")


@dataclass(frozen=True)
class FoodNutrition:
    """Macro estimate for a single food item, per serving."""

    name: str
    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float
    serving: str = "100g"
    is_estimate: bool = False


@dataclass(frozen=True)
class MealTotals:
    """Summed macros for a meal, rounded to one decimal place."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0

"""Domain models for saved meals and daily rollups."""

from dataclasses import dataclass
from datetime import datetime

from mess_analyzer.domain.nutrition import MealTotals


@dataclass(frozen=True)
class Meal:
    """A meal confirmed and saved by the user."""

    id: int
    date: datetime
    items: tuple[str, ...]
    nutrition: MealTotals
    insights: str


@dataclass(frozen=True)
class DailyAggregate:
    """Running nutrition sum for every meal saved on one calendar date."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    meal_count: int = 0

    def add(self, totals: MealTotals) -> "DailyAggregate":
        """Return a new aggregate that includes one more meal."""
        return DailyAggregate(
            calories=self.calories + totals.calories,
            protein=self.protein + totals.protein,
            carbs=self.carbs + totals.carbs,
            fat=self.fat + totals.fat,
            fiber=self.fiber + totals.fiber,
            meal_count=self.meal_count + 1,
        )

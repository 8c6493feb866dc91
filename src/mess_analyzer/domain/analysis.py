"""Result model for a menu analysis."""

from dataclasses import dataclass

from mess_analyzer.domain.insights import Insight
from mess_analyzer.domain.nutrition import FoodNutrition, MealTotals


@dataclass(frozen=True)
class MealAnalysis:
    """Per-item nutrition, totals and insights for an unsaved meal."""

    items: list[FoodNutrition]
    totals: MealTotals
    insights: list[Insight]
    hydration_tip: str
    portion_tip: str

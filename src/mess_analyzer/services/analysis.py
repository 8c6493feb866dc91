"""Menu analysis: nutrition lookup, totals and insights for an unsaved meal."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from mess_analyzer.domain.analysis import MealAnalysis
from mess_analyzer.services.insights import InsightGenerator, portion_advice
from mess_analyzer.services.meals import aggregate
from mess_analyzer.services.nutrition import NutritionResolver

_logger = logging.getLogger(__name__)


@dataclass
class MealAnalysisService:
    """Runs the analyze step between menu extraction and saving."""

    resolver: NutritionResolver
    insight_generator: InsightGenerator

    async def analyze(self, items: Sequence[str]) -> MealAnalysis:
        """Resolve every item, total the meal and attach insights."""
        names = [item.strip() for item in items if item and item.strip()]
        if not names:
            raise ValueError("No menu items to analyze")
        nutrition = await self.resolver.resolve_many(names)
        totals = aggregate(nutrition)
        insights = await self.insight_generator.generate_insights(totals)
        estimates = sum(1 for item in nutrition if item.is_estimate)
        _logger.info(
            "Analyzed %s items (%s estimated): %.1f kcal",
            len(nutrition),
            estimates,
            totals.calories,
        )
        return MealAnalysis(
            items=nutrition,
            totals=totals,
            insights=insights,
            hydration_tip=self.insight_generator.hydration_reminder(),
            portion_tip=portion_advice(totals.calories),
        )

"""Rule-based and AI-assisted meal insights."""

import logging
import random
from dataclasses import dataclass, field

from mess_analyzer.domain.insights import AlertThresholds, Insight
from mess_analyzer.domain.nutrition import MealTotals
from mess_analyzer.services.assistant import Assistant

HYDRATION_TIPS = (
    "Remember to drink water! Aim for 8 glasses throughout the day.",
    "Stay hydrated! Water helps with digestion and energy levels.",
    "Don't forget your water intake! Keep a bottle with you.",
    "Hydration check: Have you had enough water today?",
)

LARGE_MEAL_CALORIES = 800
LIGHT_MEAL_CALORIES = 300

_logger = logging.getLogger(__name__)


@dataclass
class InsightGenerator:
    """Applies threshold rules to meal totals and adds an AI narrative."""

    assistant: Assistant
    thresholds: AlertThresholds = field(default_factory=AlertThresholds)
    rng: random.Random = field(default_factory=random.Random)

    async def generate_insights(self, totals: MealTotals) -> list[Insight]:
        """Return every rule that fires, then the AI insight when available."""
        insights = self.rule_insights(totals)
        try:
            narrative = await self.assistant.analyze_diet(totals)
        except Exception:
            _logger.exception("Error getting AI insights")
        else:
            insights.append(
                Insight(type="ai", title="AI Nutritionist Says", message=narrative)
            )
        return insights

    def rule_insights(self, totals: MealTotals) -> list[Insight]:
        """Apply the fixed threshold rules; limits themselves never trigger."""
        limits = self.thresholds
        insights: list[Insight] = []
        if totals.carbs > limits.high_carbs:
            insights.append(
                Insight(
                    type="warning",
                    title="High Carbs Alert",
                    message=(
                        "Your meal is high in carbohydrates today. "
                        "Consider adding more protein-rich foods."
                    ),
                )
            )
        if totals.protein < limits.low_protein:
            insights.append(
                Insight(
                    type="warning",
                    title="Low Protein",
                    message=(
                        "You might not be getting enough protein. "
                        "Try adding dal, paneer, or eggs to your diet."
                    ),
                )
            )
        if totals.calories > limits.high_calories:
            insights.append(
                Insight(
                    type="info",
                    title="Calorie Watch",
                    message=(
                        "You're close to exceeding your daily calorie goal. "
                        "Consider lighter meals for the rest of the day."
                    ),
                )
            )
        if totals.calories < limits.low_calories:
            insights.append(
                Insight(
                    type="info",
                    title="Low Calories",
                    message=(
                        "Your calorie intake seems low. "
                        "Make sure you're eating enough to fuel your activities."
                    ),
                )
            )
        return insights

    def hydration_reminder(self) -> str:
        """Pick a random hydration tip."""
        return self.rng.choice(HYDRATION_TIPS)


def portion_advice(calories: float) -> str:
    """Describe the portion size by calorie bracket."""
    if calories > LARGE_MEAL_CALORIES:
        return (
            "Large meal detected! Consider eating slowly "
            "and stopping when you feel 80% full."
        )
    if calories < LIGHT_MEAL_CALORIES:
        return "Light meal! Make sure to have balanced snacks if you get hungry later."
    return "Portion size looks good! Remember to eat mindfully and enjoy your food."

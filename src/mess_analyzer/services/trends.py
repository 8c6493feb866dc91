"""Trend and summary statistics over the meal history."""

from dataclasses import dataclass
from datetime import date, timedelta

from mess_analyzer.domain.meals import DailyAggregate
from mess_analyzer.domain.stats import TrendPoint, WeeklyStats
from mess_analyzer.services.history import HistoryStore
from mess_analyzer.services.meals import round_half_up

TREND_DAYS = 7


@dataclass
class TrendReporter:
    """Derives chart data and weekly stats from the history store."""

    history: HistoryStore

    def get_weekly_stats(self, days: int | None = None) -> WeeklyStats:
        """Summarise stored days; all of them unless a trailing window is given.

        Averages divide by the number of days that have data. The best day is
        the first one reaching the highest health score.
        """
        aggregates = self.history.get_daily_aggregates()
        if days is not None:
            window = set(_trailing_keys(self.history.today().date(), days))
            aggregates = {day: agg for day, agg in aggregates.items() if day in window}
        if not aggregates:
            return WeeklyStats(
                total_meals=0,
                avg_calories=0,
                avg_protein=0,
                avg_carbs=0,
                avg_fat=0,
                best_day=None,
            )

        goal_calories = self.history.get_preferences().calories
        total = DailyAggregate()
        best_day: str | None = None
        best_score = 0.0
        for day, aggregate in aggregates.items():
            total = DailyAggregate(
                calories=total.calories + aggregate.calories,
                protein=total.protein + aggregate.protein,
                carbs=total.carbs + aggregate.carbs,
                fat=total.fat + aggregate.fat,
                meal_count=total.meal_count + aggregate.meal_count,
            )
            score = health_score(aggregate, goal_calories)
            if best_day is None or score > best_score:
                best_day, best_score = day, score

        num_days = len(aggregates)
        return WeeklyStats(
            total_meals=total.meal_count,
            avg_calories=round_half_up(total.calories / num_days),
            avg_protein=round_half_up(total.protein / num_days),
            avg_carbs=round_half_up(total.carbs / num_days),
            avg_fat=round_half_up(total.fat / num_days),
            best_day=best_day,
        )

    def get_trend_data(self) -> list[TrendPoint]:
        """Return seven daily points, six days ago through today."""
        aggregates = self.history.get_daily_aggregates()
        today = self.history.today().date()
        points = []
        for offset in range(TREND_DAYS - 1, -1, -1):
            day = today - timedelta(days=offset)
            key = day.isoformat()
            points.append(
                TrendPoint(
                    date=key,
                    short_date=f"{day:%b} {day.day}",
                    data=aggregates.get(key, DailyAggregate()),
                )
            )
        return points


def health_score(aggregate: DailyAggregate, goal_calories: float) -> float:
    """Protein minus one point per 100 kcal away from the calorie goal."""
    return aggregate.protein - abs(aggregate.calories - goal_calories) / 100


def _trailing_keys(today: date, days: int) -> list[str]:
    return [(today - timedelta(days=offset)).isoformat() for offset in range(days)]

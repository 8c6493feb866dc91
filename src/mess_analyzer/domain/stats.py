"""Domain models for statistics."""

from dataclasses import dataclass

from mess_analyzer.domain.meals import DailyAggregate


@dataclass(frozen=True)
class WeeklyStats:
    """Summary statistics over the stored daily aggregates."""

    total_meals: int
    avg_calories: float
    avg_protein: float
    avg_carbs: float
    avg_fat: float
    best_day: str | None


@dataclass(frozen=True)
class TrendPoint:
    """One day of the trend chart."""

    date: str
    short_date: str
    data: DailyAggregate

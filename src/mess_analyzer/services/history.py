"""Meal history persisted through a key-value state repository."""

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol, TypeVar
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from mess_analyzer.domain.meals import DailyAggregate, Meal
from mess_analyzer.domain.nutrition import NUTRIENT_FIELDS, MealTotals
from mess_analyzer.domain.preferences import DailyGoals

MEALS_KEY = "mess_analyzer_meals"
DAILY_KEY = "mess_analyzer_weekly"
PREFERENCES_KEY = "mess_analyzer_preferences"

_T = TypeVar("_T")

_logger = logging.getLogger(__name__)


class StateReadError(RuntimeError):
    """Stored state exists but cannot be decoded."""


class StateRepository(Protocol):
    """Durable key-value storage for structured JSON values."""

    def load(self, key: str) -> object | None:
        """Return the value stored under a key, or None when absent."""

    def save_many(self, values: dict[str, object]) -> None:
        """Store several keys in a single write."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class HistoryStore:
    """Owns saved meals, per-day aggregates and the preferences blob."""

    repository: StateRepository
    timezone_name: str = "UTC"
    default_goals: DailyGoals = field(default_factory=DailyGoals)
    clock: Callable[[], datetime] = _utc_now

    def save_meal(
        self,
        items: Sequence[str],
        totals: MealTotals,
        insights: str = "Saved meal",
    ) -> Meal:
        """Append a meal and fold it into its day's aggregate in one write."""
        if not items:
            raise ValueError("No meal to save. Please analyze a menu first.")
        now = _aware(self.clock())
        meal_rows = self._meal_rows()
        daily_rows = self._daily_rows()
        meal = Meal(
            id=_next_meal_id(now, meal_rows),
            date=now,
            items=tuple(items),
            nutrition=totals,
            insights=insights,
        )
        day = self.date_key(now)
        bucket = _stored(_parse_aggregate, daily_rows.get(day, {})).add(totals)
        meal_rows.append(_meal_to_row(meal))
        daily_rows[day] = _aggregate_to_row(bucket)
        self.repository.save_many({MEALS_KEY: meal_rows, DAILY_KEY: daily_rows})
        _logger.info(
            "Saved meal %s on %s (%s items, %.1f kcal)",
            meal.id,
            day,
            len(meal.items),
            totals.calories,
        )
        return meal

    def get_all_meals(self) -> list[Meal]:
        """Return every saved meal in insertion order."""
        return [_stored(_parse_meal, row) for row in self._meal_rows()]

    def get_recent_meals(self, days: int = 7) -> list[Meal]:
        """Return meals saved within the last `days` days."""
        cutoff = _aware(self.clock()) - timedelta(days=days)
        return [meal for meal in self.get_all_meals() if meal.date >= cutoff]

    def get_daily_aggregates(self) -> dict[str, DailyAggregate]:
        """Return the per-day rollups keyed by ISO date, in stored order."""
        return {
            day: _stored(_parse_aggregate, row)
            for day, row in self._daily_rows().items()
        }

    def rebuild_daily_aggregates(self) -> dict[str, DailyAggregate]:
        """Recompute the per-day rollups from the meal log and persist them."""
        rebuilt: dict[str, DailyAggregate] = {}
        for meal in self.get_all_meals():
            day = self.date_key(meal.date)
            rebuilt[day] = rebuilt.get(day, DailyAggregate()).add(meal.nutrition)
        self.repository.save_many(
            {DAILY_KEY: {day: _aggregate_to_row(agg) for day, agg in rebuilt.items()}}
        )
        _logger.info("Rebuilt daily aggregates for %s days", len(rebuilt))
        return rebuilt

    def clear_all(self) -> None:
        """Delete every meal and aggregate. Preferences are kept."""
        self.repository.save_many({MEALS_KEY: [], DAILY_KEY: {}})
        _logger.info("Cleared meal history")

    def export(self) -> dict[str, object]:
        """Return a backup snapshot of meals and daily aggregates."""
        return {
            "meals": self._meal_rows(),
            "weeklyData": self._daily_rows(),
            "exportDate": _aware(self.clock()).isoformat(),
        }

    def import_snapshot(self, snapshot: Mapping[str, object]) -> None:
        """Restore the sections present in a snapshot, leaving others untouched.

        Every section is validated before anything is written.
        """
        if not isinstance(snapshot, Mapping):
            raise ValueError("Snapshot must be an object")
        values: dict[str, object] = {}
        try:
            if snapshot.get("meals") is not None:
                meals = snapshot["meals"]
                if not isinstance(meals, list):
                    raise TypeError("meals must be a list")
                values[MEALS_KEY] = [_meal_to_row(_parse_meal(row)) for row in meals]
            if snapshot.get("weeklyData") is not None:
                daily = snapshot["weeklyData"]
                if not isinstance(daily, Mapping):
                    raise TypeError("weeklyData must be an object")
                values[DAILY_KEY] = {
                    str(day): _aggregate_to_row(_parse_aggregate(row))
                    for day, row in daily.items()
                }
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ValueError(f"Invalid snapshot: {exc}") from exc
        if values:
            self.repository.save_many(values)
            _logger.info("Imported snapshot sections: %s", ", ".join(sorted(values)))

    def get_preferences(self) -> DailyGoals:
        """Return stored daily goals, or the configured defaults."""
        raw = self.repository.load(PREFERENCES_KEY)
        if isinstance(raw, Mapping):
            try:
                return DailyGoals.model_validate(raw)
            except ValidationError as exc:
                raise StateReadError(f"Stored preferences are invalid: {exc}") from exc
        return self.default_goals

    def update_preferences(self, goals: DailyGoals) -> DailyGoals:
        """Persist new daily goals."""
        self.repository.save_many({PREFERENCES_KEY: goals.model_dump()})
        return goals

    def date_key(self, when: datetime) -> str:
        """Return the calendar date of a timestamp in the store's timezone."""
        return _aware(when).astimezone(ZoneInfo(self.timezone_name)).date().isoformat()

    def today(self) -> datetime:
        """Return the current time in the store's timezone."""
        return _aware(self.clock()).astimezone(ZoneInfo(self.timezone_name))

    def _meal_rows(self) -> list[dict[str, object]]:
        raw = self.repository.load(MEALS_KEY)
        return list(raw) if isinstance(raw, list) else []

    def _daily_rows(self) -> dict[str, dict[str, object]]:
        raw = self.repository.load(DAILY_KEY)
        return dict(raw) if isinstance(raw, Mapping) else {}


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _stored(parse: Callable[[Mapping[str, object]], _T], row: object) -> _T:
    """Parse a persisted row, reporting malformed rows as StateReadError."""
    try:
        return parse(row)  # type: ignore[arg-type]
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise StateReadError(f"Stored row is invalid: {exc}") from exc


def _next_meal_id(now: datetime, rows: list[dict[str, object]]) -> int:
    """Millisecond timestamp, bumped past the highest id already stored."""
    candidate = int(now.timestamp() * 1000)
    highest = max((int(row.get("id") or 0) for row in rows), default=0)
    return candidate if candidate > highest else highest + 1


def _meal_to_row(meal: Meal) -> dict[str, object]:
    return {
        "id": meal.id,
        "date": meal.date.isoformat(),
        "items": list(meal.items),
        "nutrition": {name: getattr(meal.nutrition, name) for name in NUTRIENT_FIELDS},
        "insights": meal.insights,
    }


def _parse_meal(row: Mapping[str, object]) -> Meal:
    nutrition = row.get("nutrition") or {}
    return Meal(
        id=int(row["id"]),
        date=_aware(datetime.fromisoformat(str(row["date"]))),
        items=tuple(str(item) for item in row.get("items") or []),
        nutrition=MealTotals(
            **{name: float(nutrition.get(name) or 0.0) for name in NUTRIENT_FIELDS}
        ),
        insights=str(row.get("insights") or ""),
    )


def _aggregate_to_row(aggregate: DailyAggregate) -> dict[str, object]:
    return {
        "calories": aggregate.calories,
        "protein": aggregate.protein,
        "carbs": aggregate.carbs,
        "fat": aggregate.fat,
        "fiber": aggregate.fiber,
        "mealCount": aggregate.meal_count,
    }


def _parse_aggregate(row: Mapping[str, object]) -> DailyAggregate:
    return DailyAggregate(
        calories=float(row.get("calories") or 0.0),
        protein=float(row.get("protein") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        fat=float(row.get("fat") or 0.0),
        fiber=float(row.get("fiber") or 0.0),
        meal_count=int(row.get("mealCount") or 0),
    )

"""Nutrition lookups: cache, bundled table, USDA FDC, then a fixed estimate."""

import asyncio
import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from mess_analyzer.adapters.fdc_client import FdcClient
from mess_analyzer.domain.nutrition import NUTRIENT_FIELDS, FoodNutrition
from mess_analyzer.services.cache import Cache

NutritionTable = dict[str, dict[str, float]]

BUNDLED_TABLE_PATH = Path(__file__).resolve().parent.parent / "data" / "nutrition_db.json"
DEFAULT_SERVING = "100g"

# Label fragments per nutrient, tried in order until one yields a non-zero value.
_FDC_LABELS: dict[str, tuple[str, ...]] = {
    "calories": ("energy", "calor"),
    "protein": ("protein",),
    "carbs": ("carbohydrate",),
    "fat": ("total lipid", "fat"),
    "fiber": ("fiber",),
}

_FALLBACK = {"calories": 150.0, "protein": 5.0, "carbs": 20.0, "fat": 5.0, "fiber": 2.0}

_logger = logging.getLogger(__name__)


def load_nutrition_table(path: str | Path | None = None) -> NutritionTable:
    """Load a lookup table keyed by lowercase food name.

    A missing or unreadable custom table falls back to the bundled one.
    """
    if path is not None:
        try:
            return _read_table(Path(path))
        except (OSError, ValueError) as exc:
            _logger.warning("Could not load nutrition table %s: %s", path, exc)
    return _read_table(BUNDLED_TABLE_PATH)


def _read_table(path: Path) -> NutritionTable:
    with path.open("r", encoding="utf-8") as handle:
        raw = json.load(handle)
    if not isinstance(raw, dict):
        raise ValueError("Nutrition table must be a JSON object")
    return {
        str(name).strip().lower(): {
            nutrient: float(values.get(nutrient, 0.0)) for nutrient in NUTRIENT_FIELDS
        }
        for name, values in raw.items()
    }


@dataclass
class NutritionResolver:
    """Resolve free-text food names to macro estimates with caching."""

    fdc_client: FdcClient
    cache: Cache
    table: NutritionTable = field(default_factory=load_nutrition_table)

    async def resolve(self, item_name: str) -> FoodNutrition:
        """Return nutrition for one item; never raises for lookup failures."""
        cache_key = item_name.strip().lower()
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodNutrition):
            return cached

        result = self.search_local(item_name)
        if result is None:
            result = await self._search_remote(item_name)
        if result is None:
            _logger.info("Using fallback estimate for %r", item_name)
            result = FoodNutrition(name=item_name, is_estimate=True, **_FALLBACK)

        self.cache.set(cache_key, result)
        return result

    async def resolve_many(self, items: Iterable[str]) -> list[FoodNutrition]:
        """Resolve items concurrently; output order follows input order."""
        return list(await asyncio.gather(*(self.resolve(item) for item in items)))

    def search_local(self, item_name: str) -> FoodNutrition | None:
        """Match against the bundled table.

        Exact match first, then the first key in table order where either
        string contains the other.
        """
        search_term = item_name.strip().lower()
        values = self.table.get(search_term)
        if values is None:
            for key, candidate in self.table.items():
                if key in search_term or search_term in key:
                    values = candidate
                    break
        if values is None:
            return None
        return _from_values(item_name, values)

    def clear_cache(self) -> None:
        """Forget every cached lookup."""
        self.cache.clear()

    async def _search_remote(self, item_name: str) -> FoodNutrition | None:
        try:
            payload = await self.fdc_client.search_foods(item_name, page_size=1)
            foods = payload.get("foods") or []
            if not foods:
                _logger.info("FDC search returned no foods for %r", item_name)
                return None
            return _from_values(item_name, _extract_nutrients(foods[0]))
        except Exception as exc:
            _logger.warning(
                "FDC lookup failed for %r (status=%s): %s",
                item_name,
                _status_code_from_exception(exc),
                exc,
            )
            return None


def _from_values(name: str, values: Mapping[str, float]) -> FoodNutrition:
    return FoodNutrition(
        name=name,
        calories=float(values.get("calories", 0.0)),
        protein=float(values.get("protein", 0.0)),
        carbs=float(values.get("carbs", 0.0)),
        fat=float(values.get("fat", 0.0)),
        fiber=float(values.get("fiber", 0.0)),
        serving=DEFAULT_SERVING,
    )


def _extract_nutrients(food: Mapping[str, object]) -> dict[str, float]:
    """Pick macros from an FDC search hit by nutrient-name substring."""
    nutrients = food.get("foodNutrients") or []
    values: dict[str, float] = {}
    for nutrient, fragments in _FDC_LABELS.items():
        value = 0.0
        for fragment in fragments:
            value = _nutrient_value(nutrients, fragment)
            if value:
                break
        values[nutrient] = value
    return values


def _nutrient_value(nutrients: Iterable[Mapping[str, object]], fragment: str) -> float:
    for nutrient in nutrients:
        label = str(nutrient.get("nutrientName") or "").lower()
        if fragment in label:
            amount = nutrient.get("value")
            return float(amount) if isinstance(amount, int | float) else 0.0
    return 0.0


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"

"""Shared test fakes and fixtures."""

import random
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from mess_analyzer.adapters.fdc_client import FdcClient
from mess_analyzer.config import Settings
from mess_analyzer.containers import AppContainer
from mess_analyzer.services.analysis import MealAnalysisService
from mess_analyzer.services.assistant import Assistant, TextClient
from mess_analyzer.services.cache import LruCache
from mess_analyzer.services.history import HistoryStore, StateRepository
from mess_analyzer.services.insights import InsightGenerator
from mess_analyzer.services.menu_reader import MenuReader, VisionClient
from mess_analyzer.services.nutrition import NutritionResolver
from mess_analyzer.services.trends import TrendReporter


@dataclass
class InMemoryStateRepository(StateRepository):
    """Dict-backed state repository that records every write."""

    values: dict[str, object] = field(default_factory=dict)
    writes: list[dict[str, object]] = field(default_factory=list)

    def load(self, key: str) -> object | None:
        return self.values.get(key)

    def save_many(self, values: dict[str, object]) -> None:
        self.writes.append(dict(values))
        self.values.update(values)


@dataclass
class FailingStateRepository(StateRepository):
    """State repository whose writes always fail."""

    values: dict[str, object] = field(default_factory=dict)

    def load(self, key: str) -> object | None:
        return self.values.get(key)

    def save_many(self, values: dict[str, object]) -> None:
        raise OSError("disk full")


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with a canned search payload."""

    search_payload: dict[str, object] = field(
        default_factory=lambda: {
            "foods": [
                {
                    "fdcId": 171477,
                    "description": "Chicken, broilers or fryers, breast, meat only",
                    "foodNutrients": [
                        {"nutrientName": "Protein", "value": 31.0},
                        {"nutrientName": "Total lipid (fat)", "value": 3.6},
                        {
                            "nutrientName": "Carbohydrate, by difference",
                            "value": 0.0,
                        },
                        {"nutrientName": "Energy", "value": 165.0},
                        {"nutrientName": "Fiber, total dietary", "value": 0.0},
                    ],
                }
            ]
        }
    )
    error: Exception | None = None
    queries: list[str] = field(default_factory=list)

    async def search_foods(self, query: str, page_size: int = 1) -> dict[str, object]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.search_payload


@dataclass
class FakeTextClient(TextClient):
    """Fake text model returning a fixed reply and recording prompts."""

    reply: str = "Looks like a balanced meal. Add some fruit for fiber."
    error: Exception | None = None
    prompts: list[str] = field(default_factory=list)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@dataclass
class FakeVisionClient(VisionClient):
    """Fake vision client returning a fixed transcription."""

    payload: dict[str, object] = field(
        default_factory=lambda: {"text": "Rice\nDal Tadka\nRoti", "confidence": 0.8}
    )
    calls: list[dict[str, object]] = field(default_factory=list)

    async def extract(
        self,
        *,
        model: str,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.calls.append({"model": model, "image_data_url": image_data_url})
        return self.payload


@dataclass
class FixedClock:
    """Clock that returns a settable instant."""

    now: datetime = field(
        default_factory=lambda: datetime(2024, 3, 15, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        openai_api_key="openai-key",
        fdc_api_key="fdc-key",
        data_file=str(tmp_path / "state.json"),
        environment="test",
    )


@pytest.fixture
def state_repository() -> InMemoryStateRepository:
    return InMemoryStateRepository()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def text_client() -> FakeTextClient:
    return FakeTextClient()


@pytest.fixture
def history_store(
    state_repository: InMemoryStateRepository, clock: FixedClock
) -> HistoryStore:
    return HistoryStore(repository=state_repository, clock=clock)


@pytest.fixture
def container(
    settings: Settings,
    history_store: HistoryStore,
    fdc_client: FakeFdcClient,
    text_client: FakeTextClient,
) -> AppContainer:
    resolver = NutritionResolver(fdc_client=fdc_client, cache=LruCache())
    assistant = Assistant(text_client)
    insight_generator = InsightGenerator(
        assistant=assistant,
        thresholds=settings.alert_thresholds(),
        rng=random.Random(7),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        nutrition_resolver=resolver,
        assistant=assistant,
        insight_generator=insight_generator,
        analysis_service=MealAnalysisService(
            resolver=resolver, insight_generator=insight_generator
        ),
        menu_reader=MenuReader(
            client=FakeVisionClient(), model="gpt-4o-mini", store=False
        ),
        history_store=history_store,
        trend_reporter=TrendReporter(history_store),
        close_resources=close_resources,
    )

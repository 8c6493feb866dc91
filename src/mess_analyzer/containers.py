"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from openai import AsyncOpenAI
from supabase import create_client

from mess_analyzer.adapters.fdc_client import HttpxFdcClient
from mess_analyzer.adapters.json_file_state_repository import JsonFileStateRepository
from mess_analyzer.adapters.openai_text_client import OpenAITextClient
from mess_analyzer.adapters.openai_vision_client import OpenAIVisionClient
from mess_analyzer.adapters.supabase_state_repository import SupabaseStateRepository
from mess_analyzer.config import Settings
from mess_analyzer.services.analysis import MealAnalysisService
from mess_analyzer.services.assistant import Assistant
from mess_analyzer.services.cache import LruCache
from mess_analyzer.services.history import HistoryStore, StateRepository
from mess_analyzer.services.insights import InsightGenerator
from mess_analyzer.services.menu_reader import MenuReader
from mess_analyzer.services.nutrition import NutritionResolver, load_nutrition_table
from mess_analyzer.services.trends import TrendReporter


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    nutrition_resolver: NutritionResolver
    assistant: Assistant
    insight_generator: InsightGenerator
    analysis_service: MealAnalysisService
    menu_reader: MenuReader
    history_store: HistoryStore
    trend_reporter: TrendReporter
    close_resources: Callable[[], Awaitable[None]]


def build_state_repository(settings: Settings) -> StateRepository:
    """Create the configured persistence backend."""
    if settings.storage_backend == "file":
        return JsonFileStateRepository(Path(settings.data_file))
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required for supabase storage"
            )
        return SupabaseStateRepository(
            create_client(settings.supabase_url, settings.supabase_service_key)
        )
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
    )
    openai_client = AsyncOpenAI(api_key=resolved_settings.openai_api_key)
    text_client = OpenAITextClient(
        client=openai_client,
        model=resolved_settings.openai_model,
        store=resolved_settings.openai_store,
    )

    nutrition_resolver = NutritionResolver(
        fdc_client=fdc_client,
        cache=LruCache(resolved_settings.nutrition_cache_size),
        table=load_nutrition_table(resolved_settings.nutrition_db_path),
    )
    assistant = Assistant(text_client)
    insight_generator = InsightGenerator(
        assistant=assistant,
        thresholds=resolved_settings.alert_thresholds(),
    )
    analysis_service = MealAnalysisService(
        resolver=nutrition_resolver,
        insight_generator=insight_generator,
    )
    menu_reader = MenuReader(
        client=OpenAIVisionClient(openai_client),
        model=resolved_settings.openai_model,
        store=resolved_settings.openai_store,
    )
    history_store = HistoryStore(
        repository=build_state_repository(resolved_settings),
        timezone_name=resolved_settings.timezone,
        default_goals=resolved_settings.daily_goals(),
    )
    trend_reporter = TrendReporter(history_store)

    async def close_resources() -> None:
        await fdc_client.close()
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        nutrition_resolver=nutrition_resolver,
        assistant=assistant,
        insight_generator=insight_generator,
        analysis_service=analysis_service,
        menu_reader=menu_reader,
        history_store=history_store,
        trend_reporter=trend_reporter,
        close_resources=close_resources,
    )

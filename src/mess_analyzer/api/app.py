"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from mess_analyzer.api.models import (
    ChatRequest,
    ItemsRequest,
    MenuItemsResponse,
    MenuTextRequest,
    SaveMealRequest,
)
from mess_analyzer.app_logging import configure_logging
from mess_analyzer.containers import AppContainer
from mess_analyzer.domain.analysis import MealAnalysis
from mess_analyzer.domain.meals import DailyAggregate, Meal
from mess_analyzer.domain.menu import FoodClassification
from mess_analyzer.domain.nutrition import MealTotals
from mess_analyzer.domain.preferences import DailyGoals
from mess_analyzer.domain.stats import TrendPoint, WeeklyStats
from mess_analyzer.services.history import StateReadError
from mess_analyzer.services.menu_reader import validate_image


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Mess Analyzer", lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(ValueError)
    async def invalid_input(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
        )

    @app.exception_handler(StateReadError)
    async def unreadable_state(request: Request, exc: StateReadError) -> JSONResponse:
        logger.error("Stored state could not be read", exc_info=exc)
        detail = _format_error(container, exc, "Stored data is unreadable.")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": detail},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/menu/text")
    async def menu_from_text(payload: MenuTextRequest) -> MenuItemsResponse:
        """Clean typed menu text into food items."""
        try:
            items = await container.assistant.clean_menu_text(payload.text)
        except ValueError:
            raise
        except Exception as exc:
            logger.exception("Menu cleaning failed")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=_format_error(container, exc, "Couldn't process the menu text."),
            ) from exc
        return MenuItemsResponse(items=items)

    @app.post("/menu/photo")
    async def menu_from_photo(request: Request) -> MenuItemsResponse:
        """Read a menu photo sent as the raw request body."""
        image_bytes = await request.body()
        validate_image(request.headers.get("content-type"), len(image_bytes))
        try:
            menu = await container.menu_reader.read_menu(image_bytes)
        except Exception as exc:
            logger.exception("Menu photo extraction failed")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=_format_error(
                    container,
                    exc,
                    (
                        "Failed to process image. "
                        "Please try a clearer image or type the menu manually."
                    ),
                ),
            ) from exc
        if not menu.text.strip():
            raise ValueError(
                "No text found in the photo. Please type the menu instead."
            )
        try:
            items = await container.assistant.clean_menu_text(menu.text)
        except Exception as exc:
            logger.exception("Menu cleaning failed")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=_format_error(container, exc, "Couldn't process the menu text."),
            ) from exc
        return MenuItemsResponse(
            items=items, text=menu.text, confidence=menu.confidence
        )

    @app.post("/menu/classify")
    async def classify_menu(payload: ItemsRequest) -> FoodClassification:
        """Group food items into meal categories."""
        if not payload.items:
            raise ValueError("No menu items to classify")
        try:
            return await container.assistant.classify_food_items(payload.items)
        except Exception as exc:
            logger.exception("Food classification failed")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=_format_error(container, exc, "Couldn't classify the menu."),
            ) from exc

    @app.post("/meals/analyze")
    async def analyze_meal(payload: ItemsRequest) -> MealAnalysis:
        """Look up nutrition for the items and return totals with insights."""
        return await container.analysis_service.analyze(payload.items)

    @app.post("/meals", status_code=status.HTTP_201_CREATED)
    async def save_meal(payload: SaveMealRequest) -> Meal:
        """Persist an analyzed meal."""
        return container.history_store.save_meal(
            items=payload.items,
            totals=MealTotals(**payload.nutrition.model_dump()),
            insights=payload.insights,
        )

    @app.get("/meals")
    async def list_meals(days: int | None = Query(default=None, ge=1)) -> list[Meal]:
        """Return all saved meals, or those from the last `days` days."""
        if days is None:
            return container.history_store.get_all_meals()
        return container.history_store.get_recent_meals(days)

    @app.delete("/meals")
    async def clear_meals() -> dict[str, str]:
        """Delete every saved meal and daily aggregate."""
        container.history_store.clear_all()
        return {"status": "cleared"}

    @app.post("/meals/rebuild")
    async def rebuild_aggregates() -> dict[str, DailyAggregate]:
        """Recompute daily aggregates from the saved meals."""
        return container.history_store.rebuild_daily_aggregates()

    @app.get("/stats/weekly")
    async def weekly_stats(days: int | None = Query(default=None, ge=1)) -> WeeklyStats:
        """Return summary statistics over stored days."""
        return container.trend_reporter.get_weekly_stats(days)

    @app.get("/stats/trends")
    async def trends() -> list[TrendPoint]:
        """Return the seven-day trend series."""
        return container.trend_reporter.get_trend_data()

    @app.get("/preferences")
    async def get_preferences() -> DailyGoals:
        """Return the daily goals."""
        return container.history_store.get_preferences()

    @app.put("/preferences")
    async def update_preferences(goals: DailyGoals) -> DailyGoals:
        """Replace the daily goals."""
        return container.history_store.update_preferences(goals)

    @app.get("/export")
    async def export_data() -> dict[str, object]:
        """Return a backup snapshot."""
        return container.history_store.export()

    @app.post("/import")
    async def import_data(snapshot: dict[str, object]) -> dict[str, str]:
        """Restore a backup snapshot."""
        container.history_store.import_snapshot(snapshot)
        return {"status": "imported"}

    @app.post("/alternatives")
    async def alternatives(payload: ItemsRequest) -> dict[str, str]:
        """Suggest healthier alternatives for the items."""
        if not payload.items:
            raise ValueError("No menu items to improve")
        return {
            "suggestions": await container.assistant.suggest_alternatives(payload.items)
        }

    @app.post("/chat")
    async def chat(payload: ChatRequest) -> dict[str, str]:
        """Answer a nutrition question."""
        reply = await container.assistant.chat(payload.message, payload.context)
        return {"reply": reply}

    return app


def _format_error(container: AppContainer, exc: Exception, fallback: str) -> str:
    """Return a user-facing error message with local debug info."""
    if container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback

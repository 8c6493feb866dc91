"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from mess_analyzer.domain.insights import AlertThresholds
from mess_analyzer.domain.preferences import DailyGoals

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-4o-mini"
    openai_store: bool = False
    fdc_api_key: str = "DEMO_KEY"
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    storage_backend: str = "file"
    data_file: str = "mess_analyzer_state.json"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    timezone: str = "UTC"
    nutrition_cache_size: int = 512
    nutrition_db_path: str | None = None
    goal_calories: float = 2000
    goal_protein: float = 50
    goal_carbs: float = 275
    goal_fat: float = 65
    goal_fiber: float = 25
    goal_water: int = 8
    alert_high_carbs: float = 300
    alert_low_protein: float = 30
    alert_high_calories: float = 2500
    alert_low_calories: float = 1200
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def daily_goals(self) -> DailyGoals:
        """Return the configured default daily goals."""
        return DailyGoals(
            calories=self.goal_calories,
            protein=self.goal_protein,
            carbs=self.goal_carbs,
            fat=self.goal_fat,
            fiber=self.goal_fiber,
            water=self.goal_water,
        )

    def alert_thresholds(self) -> AlertThresholds:
        """Return the configured insight thresholds."""
        return AlertThresholds(
            high_carbs=self.alert_high_carbs,
            low_protein=self.alert_low_protein,
            high_calories=self.alert_high_calories,
            low_calories=self.alert_low_calories,
        )

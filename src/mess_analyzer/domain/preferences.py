"""User preference models."""

from pydantic import BaseModel, Field


class DailyGoals(BaseModel):
    """Daily intake goals stored in the preferences blob."""

    calories: float = Field(default=2000, ge=0)
    protein: float = Field(default=50, ge=0)
    carbs: float = Field(default=275, ge=0)
    fat: float = Field(default=65, ge=0)
    fiber: float = Field(default=25, ge=0)
    water: int = Field(default=8, ge=0)

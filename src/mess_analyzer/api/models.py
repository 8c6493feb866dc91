"""Pydantic request models for the HTTP API."""

from pydantic import BaseModel, Field


class MenuTextRequest(BaseModel):
    """Typed menu text."""

    text: str


class ItemsRequest(BaseModel):
    """A list of food item names."""

    items: list[str]


class TotalsPayload(BaseModel):
    """Meal totals sent back by the client when saving."""

    calories: float = Field(default=0.0, ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)
    fiber: float = Field(default=0.0, ge=0)


class SaveMealRequest(BaseModel):
    """An analyzed meal the user confirmed."""

    items: list[str]
    nutrition: TotalsPayload
    insights: str = "Saved meal"


class ChatRequest(BaseModel):
    """A chat question with optional meal context."""

    message: str
    context: dict[str, object] | None = None


class MenuItemsResponse(BaseModel):
    """Food items extracted from a menu."""

    items: list[str]
    text: str | None = None
    confidence: float | None = None

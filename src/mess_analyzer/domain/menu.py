"""Models for menu extraction and classification results."""

from pydantic import BaseModel, Field, field_validator


class MenuText(BaseModel):
    """Text read from a menu photo."""

    text: str
    confidence: float = Field(ge=0.0, le=1.0)


class ClassifiedFood(BaseModel):
    """Category guess for one food item."""

    name: str
    category: str
    ingredients: list[str] = Field(default_factory=list)
    cooking_method: str | None = None

    @field_validator("ingredients", mode="before")
    @classmethod
    def _split_ingredients(cls, value: object) -> object:
        """Models sometimes answer "rice, peas" instead of a list."""
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


class FoodClassification(BaseModel):
    """Classification of a list of food items."""

    items: list[ClassifiedFood]

"""Language-model helpers: menu cleaning, classification, advice and chat."""

import json
import logging
import re
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Protocol

from pydantic import ValidationError

from mess_analyzer.domain.menu import ClassifiedFood, FoodClassification
from mess_analyzer.domain.nutrition import MealTotals

CLEAN_MENU_PROMPT = (
    "You are a nutrition expert. Extract and clean the following mess menu text.\n"
    "List only the food items, one per line, with proper names. "
    "Remove any prices, timings, or extra text.\n"
    "Menu text: "
)
CLASSIFY_FOOD_PROMPT = (
    "Classify the following food items into categories "
    "(Breakfast, Lunch, Dinner, Snacks, Beverages).\n"
    "Also identify the main ingredients and cooking method. Return as JSON with "
    'the shape {"items": [{"name", "category", "ingredients", "cooking_method"}]}.\n'
    "Food items: "
)
ANALYZE_DIET_PROMPT = (
    "As a friendly nutritionist, analyze this daily meal data and provide insights:\n"
    "- Highlight any nutritional patterns (high carbs, low protein, etc.)\n"
    "- Suggest 2-3 healthier alternatives\n"
    "- Give hydration reminders if needed\n"
    "- Provide portion advice\n"
    "- Be conversational and encouraging\n\n"
    "Meal data: "
)
CHAT_PROMPT = (
    "You are a friendly college nutritionist chatbot helping students eat healthier.\n"
    "Respond in a warm, conversational tone. Provide practical advice for college "
    "mess food.\nKeep responses concise (2-3 sentences). User question: "
)
ALTERNATIVES_PROMPT = (
    "As a nutritionist, suggest 3 healthier alternatives for these mess food "
    "items: {items}.\nKeep it brief and practical for college students. "
    "Format as a simple numbered list."
)

ALTERNATIVES_FALLBACK = (
    "Try adding more vegetables, choosing brown rice over white rice, "
    "and including protein in every meal."
)
CHAT_FALLBACK = "Sorry, I'm having trouble connecting right now. Please try again!"

_LIST_PREFIX = re.compile(r"^[\d.)\-*]+\s*")
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

_CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Beverages", ("tea", "coffee", "juice", "milk", "shake")),
    ("Breakfast", ("paratha", "poha", "upma", "idli", "dosa", "breakfast")),
    ("Lunch/Dinner", ("rice", "roti", "dal", "curry", "sabzi")),
    ("Snacks", ("samosa", "pakora", "biscuit")),
)
DEFAULT_CATEGORY = "Main Course"

_logger = logging.getLogger(__name__)


class TextClient(Protocol):
    """Interface for a hosted generative-text model."""

    async def generate(self, prompt: str) -> str:
        """Return the model's free-text answer to a prompt."""


@dataclass
class Assistant:
    """Prompts the text model and shapes its free-text answers."""

    client: TextClient

    async def clean_menu_text(self, raw_text: str) -> list[str]:
        """Turn raw menu text into a list of food item names."""
        if not raw_text or not raw_text.strip():
            raise ValueError("Please enter menu items")
        response = await self.client.generate(CLEAN_MENU_PROMPT + raw_text.strip())
        return parse_menu_lines(response)

    async def classify_food_items(self, items: Sequence[str]) -> FoodClassification:
        """Classify items, falling back to keyword categories."""
        response = await self.client.generate(CLASSIFY_FOOD_PROMPT + ", ".join(items))
        match = _JSON_OBJECT.search(response)
        if match:
            try:
                return FoodClassification.model_validate(json.loads(match.group(0)))
            except (json.JSONDecodeError, ValidationError):
                _logger.info("Could not parse classification JSON, using keywords")
        return FoodClassification(
            items=[
                ClassifiedFood(name=item, category=guess_category(item), ingredients=[item])
                for item in items
            ]
        )

    async def analyze_diet(self, totals: MealTotals) -> str:
        """Ask for a narrative analysis of a meal's totals."""
        payload = json.dumps(asdict(totals), indent=2)
        return await self.client.generate(ANALYZE_DIET_PROMPT + payload)

    async def suggest_alternatives(self, items: Sequence[str]) -> str:
        """Suggest healthier swaps for the given items."""
        try:
            return await self.client.generate(
                ALTERNATIVES_PROMPT.format(items=", ".join(items))
            )
        except Exception:
            _logger.exception("Error suggesting alternatives")
            return ALTERNATIVES_FALLBACK

    async def chat(self, message: str, context: dict[str, object] | None = None) -> str:
        """Answer a user question, optionally grounded in the current meal."""
        if not message or not message.strip():
            raise ValueError("Message must not be empty")
        prompt = CHAT_PROMPT + message.strip()
        if context:
            prompt += f"\n\nContext (today's meal data): {json.dumps(context)}"
        try:
            return await self.client.generate(prompt)
        except Exception:
            _logger.exception("Chat request failed")
            return CHAT_FALLBACK


def parse_menu_lines(response: str) -> list[str]:
    """Keep one food item per line, dropping bullets, numbering and noise."""
    items = []
    for line in response.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith(("-", "*")):
            continue
        cleaned = _LIST_PREFIX.sub("", stripped).strip()
        if len(cleaned) > 2:
            items.append(cleaned)
    return items


def guess_category(food_item: str) -> str:
    """Guess a meal category from keywords in the item name."""
    lower = food_item.lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return category
    return DEFAULT_CATEGORY

"""Insight models."""

from dataclasses import dataclass
from typing import Literal

InsightType = Literal["warning", "info", "ai", "success"]


@dataclass(frozen=True)
class Insight:
    """A single dietary insight shown next to a meal analysis."""

    type: InsightType
    title: str
    message: str


@dataclass(frozen=True)
class AlertThresholds:
    """Limits that trigger rule-based insights."""

    high_carbs: float = 300
    low_protein: float = 30
    high_calories: float = 2500
    low_calories: float = 1200

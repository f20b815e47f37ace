from __future__ import annotations

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..weather.models import WeatherSnapshot

TITLE_MAX_LENGTH = 60
REASON_MAX_LENGTH = 140


class Mood(str, Enum):
    chill = "chill"
    social = "social"
    active = "active"
    focus = "focus"
    surprise = "surprise"


class Budget(str, Enum):
    free = "free"
    low = "low"
    medium = "medium"
    high = "high"


class PlacePreference(str, Enum):
    indoor = "indoor"
    outdoor = "outdoor"
    either = "either"


class Label(str, Enum):
    indoor = "indoor"
    outdoor = "outdoor"


def clamp_confidence(value: float, low: int = 0, high: int = 100) -> int:
    """Round to the nearest integer and clamp into ``[low, high]``."""
    return max(low, min(high, round(value)))


class Preferences(BaseModel):
    mood: Mood | None = None
    budget: Budget | None = None
    place: PlacePreference | None = None


class Recommendation(BaseModel):
    title: str = Field(..., min_length=2, max_length=TITLE_MAX_LENGTH)
    reason: str = Field(..., min_length=10, max_length=REASON_MAX_LENGTH)
    label: Label
    confidence: int = Field(..., ge=0, le=100)

    @field_validator("title", mode="before")
    @classmethod
    def _truncate_title(cls, value: Any) -> Any:
        return value[:TITLE_MAX_LENGTH] if isinstance(value, str) else value

    @field_validator("reason", mode="before")
    @classmethod
    def _truncate_reason(cls, value: Any) -> Any:
        return value[:REASON_MAX_LENGTH] if isinstance(value, str) else value

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
            return clamp_confidence(value)
        return value


class RecommendRequest(BaseModel):
    # Missing, null and blank cities are rejected together by the orchestrator.
    city: str | None = None
    preferences: Preferences | None = None


class RecommendResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    city: str
    weather: WeatherSnapshot
    recommendations: list[Recommendation] = Field(..., min_length=5, max_length=8)


class ErrorResponse(BaseModel):
    error: str

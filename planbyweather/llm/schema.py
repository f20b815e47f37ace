from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ModelMalformedError
from ..recommendations.models import (
    REASON_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    Label,
    Recommendation,
)

SCHEMA_NAME = "planbyweather_recommendations"
MIN_RECOMMENDATIONS = 5
MAX_RECOMMENDATIONS = 8

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "recommendations": {
            "type": "array",
            "minItems": MIN_RECOMMENDATIONS,
            "maxItems": MAX_RECOMMENDATIONS,
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "title": {"type": "string", "minLength": 2, "maxLength": TITLE_MAX_LENGTH},
                    "reason": {"type": "string", "minLength": 10, "maxLength": REASON_MAX_LENGTH},
                    "label": {"type": "string", "enum": ["indoor", "outdoor"]},
                    "confidence": {"type": "integer", "minimum": 0, "maximum": 100},
                },
                "required": ["title", "reason", "label", "confidence"],
            },
        },
    },
    "required": ["recommendations"],
}


class ModelRecommendation(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    title: str = Field(..., min_length=2, max_length=TITLE_MAX_LENGTH)
    reason: str = Field(..., min_length=10, max_length=REASON_MAX_LENGTH)
    label: Literal["indoor", "outdoor"]
    confidence: int = Field(..., ge=0, le=100)


class ModelOutput(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    recommendations: list[ModelRecommendation] = Field(
        ..., min_length=MIN_RECOMMENDATIONS, max_length=MAX_RECOMMENDATIONS
    )


def response_format() -> dict[str, Any]:
    """The ``response_format`` argument for a strict structured completion."""
    return {
        "type": "json_schema",
        "json_schema": {
            "name": SCHEMA_NAME,
            "schema": RESPONSE_SCHEMA,
            "strict": True,
        },
    }


def decode_recommendations(text: str) -> list[Recommendation]:
    """
    Strictly decode model output text into recommendations.

    Any deviation from RESPONSE_SCHEMA (invalid JSON, missing or non-array
    ``recommendations``, extra fields, out-of-range values, wrong length)
    raises ModelMalformedError. Nothing is partially accepted.
    """
    try:
        output = ModelOutput.model_validate_json(text)
    except ValidationError as exc:
        raise ModelMalformedError(
            f"Model output does not match the recommendations schema: {exc.error_count()} error(s)"
        ) from exc

    # Recommendation re-clamps and re-truncates on construction.
    return [
        Recommendation(
            title=item.title,
            reason=item.reason,
            label=Label(item.label),
            confidence=item.confidence,
        )
        for item in output.recommendations
    ]

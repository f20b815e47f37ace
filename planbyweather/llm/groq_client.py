from __future__ import annotations

import json
import logging
from typing import Any

from groq import Groq, GroqError

from ..errors import ModelMalformedError, ModelUnavailableError
from ..recommendations.models import Preferences, Recommendation
from ..recommendations.rules import evaluate
from ..weather.models import WeatherSnapshot
from .config import DEFAULT_LLM_CONFIG, LLMConfig
from .schema import decode_recommendations, response_format

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "\n".join([
    "You are a day-planning assistant for city life.",
    "Goal: Based on the weather, return 5-8 short activity ideas with a short reason.",
    "Constraints:",
    "- Write in ENGLISH.",
    "- No fluff. Be clear and practical.",
    "- If the weather is bad, prefer indoor suggestions.",
    "- Output MUST be valid JSON matching the schema (no extra text).",
])

DEFAULT_MOOD = "chill"
DEFAULT_BUDGET = "low"
DEFAULT_PLACE = "either"


def build_user_payload(
    city: str,
    preferences: Preferences | None,
    snapshot: WeatherSnapshot,
) -> dict[str, Any]:
    prefs = preferences or Preferences()
    hints = evaluate(snapshot)
    return {
        "city": city,
        "preferences": {
            "mood": prefs.mood.value if prefs.mood else DEFAULT_MOOD,
            "budget": prefs.budget.value if prefs.budget else DEFAULT_BUDGET,
            "place": prefs.place.value if prefs.place else DEFAULT_PLACE,
        },
        "weather": snapshot.model_dump(mode="json", by_alias=True),
        "rules": {"preferIndoor": hints.prefer_indoor, "notes": hints.notes},
    }


def _build_messages(payload: dict[str, Any]) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": json.dumps(payload)},
    ]


def generate(
    city: str,
    preferences: Preferences | None,
    snapshot: WeatherSnapshot,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> list[Recommendation]:
    """
    Ask the Groq model for structured activity recommendations.

    Raises ModelUnavailableError when the API cannot be reached or answers
    with an error status, and ModelMalformedError when the answer is not
    schema-conforming JSON. Never falls back by itself.
    """
    messages = _build_messages(build_user_payload(city, preferences, snapshot))

    try:
        # One bounded attempt; retrying is the caller's fallback chain.
        client = Groq(api_key=config.api_key, timeout=config.timeout, max_retries=0)
        response = client.chat.completions.create(
            model=config.model,
            messages=messages,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            response_format=response_format(),
        )
    except GroqError as exc:
        raise ModelUnavailableError(f"Groq request failed: {exc}") from exc

    choices = getattr(response, "choices", None) or []
    content = choices[0].message.content if choices else None
    if not isinstance(content, str):
        raise ModelMalformedError("Groq response did not contain JSON text.")

    recommendations = decode_recommendations(content)
    logger.info("Model returned %d recommendations for %s", len(recommendations), city)
    return recommendations

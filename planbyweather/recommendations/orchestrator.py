from __future__ import annotations

import logging
import time
from typing import Callable, NamedTuple, Sequence

from ..errors import InvalidRequestError, ModelGenerationError
from ..llm import groq_client
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..weather.client import fetch_weather
from ..weather.config import DEFAULT_WEATHER_CONFIG, WeatherConfig
from ..weather.models import WeatherSnapshot
from . import fallback
from .models import Preferences, Recommendation, RecommendRequest, RecommendResponse

logger = logging.getLogger(__name__)


class Strategy(NamedTuple):
    name: str
    run: Callable[[str, Preferences, WeatherSnapshot], list[Recommendation]]


def model_strategy(config: LLMConfig) -> Strategy:
    def run(city: str, preferences: Preferences, snapshot: WeatherSnapshot) -> list[Recommendation]:
        return groq_client.generate(city, preferences, snapshot, config=config)

    return Strategy("model", run)


def fallback_strategy() -> Strategy:
    def run(city: str, preferences: Preferences, snapshot: WeatherSnapshot) -> list[Recommendation]:
        return fallback.generate(snapshot, preferences.place)

    return Strategy("fallback", run)


def build_strategies(llm_config: LLMConfig) -> list[Strategy]:
    """Model first when it is configured; the rule-based fallback is always last."""
    strategies: list[Strategy] = []
    if llm_config.is_configured:
        strategies.append(model_strategy(llm_config))
    strategies.append(fallback_strategy())
    return strategies


def run_strategies(
    strategies: Sequence[Strategy],
    city: str,
    preferences: Preferences,
    snapshot: WeatherSnapshot,
) -> tuple[str, list[Recommendation]]:
    """
    Run strategies in order and return the first successful result.

    Only ModelGenerationError moves the chain on; anything else propagates.
    The last strategy's failure is re-raised.
    """
    for index, strategy in enumerate(strategies):
        try:
            return strategy.name, strategy.run(city, preferences, snapshot)
        except ModelGenerationError as exc:
            if index == len(strategies) - 1:
                raise
            logger.warning(
                "Strategy %r failed (%s: %s), falling back",
                strategy.name,
                type(exc).__name__,
                exc,
            )
    raise ValueError("at least one strategy is required")


def recommend(
    request: RecommendRequest,
    weather_config: WeatherConfig = DEFAULT_WEATHER_CONFIG,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> RecommendResponse:
    start_time = time.time()

    city = (request.city or "").strip()
    if not city:
        raise InvalidRequestError("city is required.")
    preferences = request.preferences or Preferences()

    logger.info(
        "Recommend request city=%s preferences=%s",
        city,
        preferences.model_dump(mode="json", exclude_none=True),
    )

    snapshot = fetch_weather(city, weather_config)

    source, recommendations = run_strategies(
        build_strategies(llm_config), city, preferences, snapshot,
    )

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    logger.info(
        "Recommend done city=%s source=%s count=%d elapsed_ms=%s",
        city,
        source,
        len(recommendations),
        elapsed_ms,
    )

    return RecommendResponse(city=city, weather=snapshot, recommendations=recommendations)

from __future__ import annotations

import logging
import math
import re
from typing import Any

import requests

from ..errors import UpstreamWeatherError
from .config import DEFAULT_WEATHER_CONFIG, WeatherConfig
from .models import WeatherSnapshot

logger = logging.getLogger(__name__)

_RAINY_CONDITION_RE = re.compile(r"rain|drizzle|storm|thunder", re.IGNORECASE)


def _as_float(value: Any) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    block = data.get(key)
    return block if isinstance(block, dict) else {}


def normalize_snapshot(city: str, data: dict[str, Any]) -> WeatherSnapshot:
    """
    Turn an OpenWeather "current weather" payload into a WeatherSnapshot.

    Raises UpstreamWeatherError when temperature or wind speed are missing
    or not finite numbers.
    """
    if not isinstance(data, dict):
        raise UpstreamWeatherError("Weather API returned unexpected data shape.")

    temp_c = _as_float(_section(data, "main").get("temp"))
    wind_mps = _as_float(_section(data, "wind").get("speed"))
    if temp_c is None or wind_mps is None:
        raise UpstreamWeatherError("Weather API returned unexpected data shape.")

    conditions = data.get("weather")
    first = conditions[0] if isinstance(conditions, list) and conditions else {}
    if not isinstance(first, dict):
        first = {}
    condition = str(first.get("main") or first.get("description") or "unknown")

    rain = _section(data, "rain")
    has_rain_volume = bool(rain.get("1h") or rain.get("3h"))
    is_rainy = has_rain_volume or bool(_RAINY_CONDITION_RE.search(condition))

    return WeatherSnapshot(
        city=city,
        temp_c=temp_c,
        wind_mps=wind_mps,
        condition=condition,
        is_rainy=is_rainy,
    )


def fetch_weather(city: str, config: WeatherConfig = DEFAULT_WEATHER_CONFIG) -> WeatherSnapshot:
    """Fetch current conditions for ``city`` from OpenWeather."""
    params = {
        "q": city,
        "appid": config.require_api_key(),
        "units": config.units,
    }
    try:
        response = requests.get(config.base_url, params=params, timeout=config.timeout)
    except requests.RequestException as exc:
        logger.error("Weather request for %r failed: %s", city, exc)
        raise UpstreamWeatherError(f"Weather API request failed: {exc}") from exc

    if not response.ok:
        detail = response.text or response.reason or ""
        raise UpstreamWeatherError(
            f"Weather API error ({response.status_code}): {detail}",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError as exc:
        raise UpstreamWeatherError("Weather API returned a non-JSON body.") from exc

    snapshot = normalize_snapshot(city, data)
    logger.info("Weather for %s: %s", city, snapshot.model_dump(by_alias=True))
    return snapshot

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from ..errors import ConfigurationError

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class WeatherConfig:
    api_key: str = os.getenv("WEATHER_API_KEY", "")
    base_url: str = "https://api.openweathermap.org/data/2.5/weather"
    units: str = "metric"
    timeout: float = 10.0

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError("Missing WEATHER_API_KEY on the server.")
        return self.api_key


DEFAULT_WEATHER_CONFIG = WeatherConfig()

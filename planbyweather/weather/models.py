from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class WeatherSnapshot(BaseModel):
    """Normalised current conditions for one city at request time."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    provider: Literal["openweather"] = "openweather"
    city: str
    temp_c: float = Field(..., alias="tempC")
    wind_mps: float = Field(..., alias="windMps")
    condition: str
    is_rainy: bool = Field(..., alias="isRainy")

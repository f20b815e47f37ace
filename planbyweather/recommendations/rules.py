"""Weather rules shared by both recommendation strategies."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..weather.models import WeatherSnapshot

COLD_THRESHOLD_C = 8.0
HOT_THRESHOLD_C = 32.0
WINDY_THRESHOLD_MPS = 10.0

RAIN_NOTE = "Rain expected: cut back on outdoor suggestions."
COLD_NOTE = "Cold: avoid long outdoor activities."
HOT_NOTE = "Hot: favour shaded or air-conditioned options."
WINDY_NOTE = "Windy: weight indoor plans over walks and parks."


class WeatherFlags(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    too_cold: bool = Field(..., alias="tooCold")
    too_hot: bool = Field(..., alias="tooHot")
    too_windy: bool = Field(..., alias="tooWindy")


class RuleHints(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    prefer_indoor: bool = Field(..., alias="preferIndoor")
    flags: WeatherFlags
    notes: list[str] = Field(default_factory=list)


def evaluate(snapshot: WeatherSnapshot) -> RuleHints:
    """Derive the adverse-weather flags and the indoor bias for a snapshot."""
    too_cold = snapshot.temp_c < COLD_THRESHOLD_C
    too_hot = snapshot.temp_c > HOT_THRESHOLD_C
    too_windy = snapshot.wind_mps > WINDY_THRESHOLD_MPS

    notes: list[str] = []
    if snapshot.is_rainy:
        notes.append(RAIN_NOTE)
    if too_cold:
        notes.append(COLD_NOTE)
    if too_hot:
        notes.append(HOT_NOTE)
    if too_windy:
        notes.append(WINDY_NOTE)

    return RuleHints(
        prefer_indoor=snapshot.is_rainy or too_cold or too_hot or too_windy,
        flags=WeatherFlags(too_cold=too_cold, too_hot=too_hot, too_windy=too_windy),
        notes=notes,
    )

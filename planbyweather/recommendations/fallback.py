from __future__ import annotations

from typing import NamedTuple

from ..weather.models import WeatherSnapshot
from .models import Label, PlacePreference, Recommendation, clamp_confidence
from .rules import evaluate

MAX_MIXED_RESULTS = 7


class Candidate(NamedTuple):
    title: str
    reason: str
    label: Label
    confidence: int


INDOOR_POOL: tuple[Candidate, ...] = (
    Candidate("Coffee + a book", "Low effort, cozy, and weather-proof.", Label.indoor, 74),
    Candidate("Museum / gallery visit", "A solid 1-2 hour plan that doesn't depend on the weather.", Label.indoor, 70),
    Candidate("Cinema or a small event", "One of the safest picks when it's rainy or windy.", Label.indoor, 68),
    Candidate("Gym / short home workout", "If you want something active in a controlled environment.", Label.indoor, 66),
    Candidate("Try a new recipe", "A fun low-budget option you can do at home.", Label.indoor, 62),
)

OUTDOOR_POOL: tuple[Candidate, ...] = (
    Candidate("Short walk + photos", "If the weather is okay, it's the simplest plan that feels good.", Label.outdoor, 74),
    Candidate("Park coffee break", "Keep it short to keep the risk low.", Label.outdoor, 70),
    Candidate("Bike ride / waterfront loop", "Great energy boost if the wind is not too strong.", Label.outdoor, 66),
    Candidate("Neighborhood walk (new route)", "Keep the scope small: 60-90 minutes.", Label.outdoor, 64),
    Candidate("Market run + a small detour", "Practical + a bit of fresh air.", Label.outdoor, 60),
)

# Offered only when the user insists on outdoor plans on a bad-weather day.
OUTDOOR_WARNING_POOL: tuple[tuple[str, int], ...] = (
    ("Quick errand walk", 45),
    ("Short café hop nearby", 42),
)

RAINY_WARNING = "It's rainy - bring a jacket/umbrella and keep it short."
ADVERSE_WARNING = "Weather is not ideal - keep it short and flexible."


def _to_recommendation(candidate: Candidate) -> Recommendation:
    return Recommendation(
        title=candidate.title,
        reason=candidate.reason,
        label=candidate.label,
        confidence=clamp_confidence(candidate.confidence),
    )


def generate(
    snapshot: WeatherSnapshot,
    place: PlacePreference | None = None,
) -> list[Recommendation]:
    """
    Deterministic rule-based recommendations.

    Bad weather always biases the list to indoor plans. When the user
    explicitly asked for outdoor plans on such a day, two short outdoor
    ideas with a weather warning are appended at lower confidence.
    """
    prefer_indoor = evaluate(snapshot).prefer_indoor
    place = PlacePreference(place) if place is not None else None
    user_target = place if place in (PlacePreference.indoor, PlacePreference.outdoor) else None

    if prefer_indoor:
        target = Label.indoor
    elif user_target is not None:
        target = Label(user_target.value)
    else:
        target = Label.outdoor

    pool = INDOOR_POOL if target is Label.indoor else OUTDOOR_POOL
    base = [_to_recommendation(c) for c in pool]

    if prefer_indoor and user_target is PlacePreference.outdoor:
        warning = RAINY_WARNING if snapshot.is_rainy else ADVERSE_WARNING
        extras = [
            _to_recommendation(Candidate(title, warning, Label.outdoor, confidence))
            for title, confidence in OUTDOOR_WARNING_POOL
        ]
        return (base + extras)[:MAX_MIXED_RESULTS]

    return base

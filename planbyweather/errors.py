"""Exception hierarchy for the recommendation service."""

from __future__ import annotations


class PlanByWeatherError(Exception):
    """Base exception for all planbyweather errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(PlanByWeatherError):
    """A required setting (e.g. the weather API key) is missing."""


class InvalidRequestError(PlanByWeatherError):
    """The request body is unusable (empty city, unparsable JSON)."""

    status_code = 400


class UpstreamWeatherError(PlanByWeatherError):
    """The weather provider failed or returned an unexpected payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = status_code
        # Unknown city is passed through, anything else is a bad gateway.
        self.status_code = 404 if status_code == 404 else 502


class ModelGenerationError(PlanByWeatherError):
    """Model-assisted generation failed. Never surfaced to the caller."""


class ModelUnavailableError(ModelGenerationError):
    """Network failure, timeout or non-success status from the model API."""


class ModelMalformedError(ModelGenerationError):
    """The model answered, but not with output matching the schema."""

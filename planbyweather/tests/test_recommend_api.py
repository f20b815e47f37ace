import json
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from planbyweather.app import app, get_llm_config, get_weather_config
from planbyweather.errors import ConfigurationError, ModelMalformedError, UpstreamWeatherError
from planbyweather.llm.config import LLMConfig
from planbyweather.recommendations import fallback
from planbyweather.recommendations.fallback import INDOOR_POOL
from planbyweather.weather.config import WeatherConfig
from planbyweather.weather.models import WeatherSnapshot

client = TestClient(app)

COLD_SNAPSHOT = WeatherSnapshot(
    city="Istanbul", temp_c=2.0, wind_mps=3.0, condition="Clear", is_rainy=False,
)


@pytest.fixture(autouse=True)
def _configs():
    app.dependency_overrides[get_weather_config] = lambda: WeatherConfig(api_key="weather-key")
    app.dependency_overrides[get_llm_config] = lambda: LLMConfig(api_key="", enabled=True)
    yield
    app.dependency_overrides.clear()


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@patch("planbyweather.recommendations.orchestrator.fetch_weather", return_value=COLD_SNAPSHOT)
def test_recommend_returns_response_shape(mock_fetch):
    resp = client.post("/recommend", json={"city": "Istanbul", "preferences": {"place": "either"}})
    assert resp.status_code == 200
    body = resp.json()
    assert body["city"] == "Istanbul"
    assert body["weather"] == {
        "provider": "openweather",
        "city": "Istanbul",
        "tempC": 2.0,
        "windMps": 3.0,
        "condition": "Clear",
        "isRainy": False,
    }
    assert [r["title"] for r in body["recommendations"]] == [c.title for c in INDOOR_POOL]
    for rec in body["recommendations"]:
        assert set(rec) == {"title", "reason", "label", "confidence"}
        assert rec["label"] in ("indoor", "outdoor")
        assert isinstance(rec["confidence"], int)


@patch("planbyweather.recommendations.orchestrator.fetch_weather", return_value=COLD_SNAPSHOT)
def test_recommend_without_preferences(mock_fetch):
    resp = client.post("/recommend", json={"city": "Istanbul"})
    assert resp.status_code == 200
    assert len(resp.json()["recommendations"]) == 5


@pytest.mark.parametrize("body", [{"city": ""}, {"city": "   "}, {"city": None}, {}])
@patch("planbyweather.recommendations.orchestrator.fetch_weather")
def test_recommend_rejects_empty_city(mock_fetch, body):
    resp = client.post("/recommend", json=body)
    assert resp.status_code == 400
    assert resp.json() == {"error": "city is required."}
    mock_fetch.assert_not_called()


def test_recommend_rejects_invalid_json():
    resp = client.post(
        "/recommend",
        content="{not json",
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid JSON body."}


def test_recommend_rejects_unknown_preference_value():
    resp = client.post("/recommend", json={"city": "Istanbul", "preferences": {"mood": "grumpy"}})
    assert resp.status_code == 400
    assert "preferences.mood" in resp.json()["error"]


@patch("planbyweather.recommendations.orchestrator.fetch_weather")
def test_recommend_weather_error_is_reported(mock_fetch):
    mock_fetch.side_effect = UpstreamWeatherError("Weather API error (500): boom", status_code=500)
    resp = client.post("/recommend", json={"city": "Istanbul"})
    assert resp.status_code == 502
    assert resp.json() == {"error": "Weather API error (500): boom"}


@patch("planbyweather.recommendations.orchestrator.fetch_weather")
def test_recommend_unknown_city_is_not_found(mock_fetch):
    mock_fetch.side_effect = UpstreamWeatherError("Weather API error (404): city not found", status_code=404)
    resp = client.post("/recommend", json={"city": "Atlantis"})
    assert resp.status_code == 404
    assert "city not found" in resp.json()["error"]


@patch("planbyweather.recommendations.orchestrator.groq_client.generate")
@patch("planbyweather.recommendations.orchestrator.fetch_weather", return_value=COLD_SNAPSHOT)
def test_recommend_model_failure_is_absorbed(mock_fetch, mock_generate):
    app.dependency_overrides[get_llm_config] = lambda: LLMConfig(api_key="groq-key", enabled=True)
    mock_generate.side_effect = ModelMalformedError("Groq response did not contain JSON text.")

    resp = client.post("/recommend", json={"city": "Istanbul", "preferences": {"place": "outdoor"}})

    assert resp.status_code == 200
    assert len(resp.json()["recommendations"]) == 7
    mock_generate.assert_called_once()


def test_recommend_missing_weather_key_is_configuration_error():
    app.dependency_overrides[get_weather_config] = lambda: WeatherConfig(api_key="")
    resp = client.post("/recommend", json={"city": "Istanbul"})
    assert resp.status_code == 500
    assert "WEATHER_API_KEY" in resp.json()["error"]


def test_startup_fails_without_weather_key():
    app.dependency_overrides[get_weather_config] = lambda: WeatherConfig(api_key="")
    with pytest.raises(ConfigurationError):
        with TestClient(app):
            pass


def test_startup_succeeds_with_weather_key():
    with TestClient(app) as c:
        assert c.get("/health").status_code == 200


def test_cors_preflight():
    resp = client.options(
        "/recommend",
        headers={
            "origin": "http://localhost:5173",
            "access-control-request-method": "POST",
            "access-control-request-headers": "content-type",
        },
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"


@patch("planbyweather.llm.groq_client.Groq")
@patch("planbyweather.recommendations.orchestrator.fetch_weather", return_value=COLD_SNAPSHOT)
def test_recommend_malformed_groq_output_returns_fallback(mock_fetch, mock_groq_cls):
    app.dependency_overrides[get_llm_config] = lambda: LLMConfig(api_key="groq-key", enabled=True)
    choice = MagicMock()
    choice.message.content = json.dumps({"recommendations": "nope"})
    mock_groq_cls.return_value.chat.completions.create.return_value.choices = [choice]

    resp = client.post("/recommend", json={"city": "Istanbul", "preferences": {"place": "either"}})

    assert resp.status_code == 200
    expected = [r.model_dump(mode="json") for r in fallback.generate(COLD_SNAPSHOT, None)]
    assert resp.json()["recommendations"] == expected


def test_recommend_wrong_method_returns_error_object():
    resp = client.get("/recommend")
    assert resp.status_code == 405
    assert resp.json() == {"error": "Method not allowed. Use POST."}


def test_unknown_route_returns_error_object():
    resp = client.get("/nowhere")
    assert resp.status_code == 404
    assert "error" in resp.json()


@patch("planbyweather.recommendations.orchestrator.fallback.generate", side_effect=RuntimeError("pool exploded"))
@patch("planbyweather.recommendations.orchestrator.fetch_weather", return_value=COLD_SNAPSHOT)
def test_unexpected_error_returns_error_object(mock_fetch, mock_generate):
    safe_client = TestClient(app, raise_server_exceptions=False)

    resp = safe_client.post("/recommend", json={"city": "Istanbul"})

    assert resp.status_code == 500
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.json() == {"error": "pool exploded"}

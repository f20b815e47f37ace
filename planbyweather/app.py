from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import PlanByWeatherError
from .llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from .recommendations.models import ErrorResponse, RecommendRequest, RecommendResponse
from .recommendations.orchestrator import recommend
from .weather.config import DEFAULT_WEATHER_CONFIG, WeatherConfig

logger = logging.getLogger(__name__)


def get_weather_config() -> WeatherConfig:
    return DEFAULT_WEATHER_CONFIG


def get_llm_config() -> LLMConfig:
    return DEFAULT_LLM_CONFIG


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Refuse to start without the weather credential.
    weather_config = app.dependency_overrides.get(get_weather_config, get_weather_config)()
    weather_config.require_api_key()
    llm_config = app.dependency_overrides.get(get_llm_config, get_llm_config)()
    if not llm_config.is_configured:
        logger.info("GROQ_API_KEY not set, serving rule-based recommendations only")
    yield


app = FastAPI(title="PlanByWeather Recommendation API", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


# ── Error handling ───────────────────────────────────────────────────────


@app.exception_handler(PlanByWeatherError)
async def handle_service_error(request: Request, exc: PlanByWeatherError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request to %s failed: %s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(e.get("type") == "json_invalid" for e in errors):
        message = "Invalid JSON body."
    elif errors:
        first = errors[0]
        location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request."
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405:
        message = "Method not allowed. Use POST." if request.url.path == "/recommend" else "Method not allowed."
    else:
        message = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
    message = str(exc) or "Unknown error"
    return JSONResponse(status_code=500, content={"error": message})


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post(
    "/recommend",
    response_model=RecommendResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
def recommend_endpoint(
    body: RecommendRequest,
    weather_config: WeatherConfig = Depends(get_weather_config),
    llm_config: LLMConfig = Depends(get_llm_config),
) -> RecommendResponse:
    return recommend(body, weather_config=weather_config, llm_config=llm_config)

"""Weather, health and landing page routes."""

from typing import Annotated

import structlog
from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import HTMLResponse

from supplyboard.api.dependencies import SettingsDep, WeatherServiceDep
from supplyboard.api.schemas import (
    ErrorResponse,
    ForecastSnapshot,
    HealthResponse,
    ReadinessResponse,
    SearchResult,
    WeatherSnapshot,
)
from supplyboard.services.provider import (
    UpstreamNotConfiguredError,
    UpstreamNotFoundError,
    UpstreamUnauthorizedError,
    WeatherProviderError,
)

logger = structlog.get_logger()

# Root router for landing page
root_router = APIRouter(tags=["root"])

# API router for weather endpoints
weather_router = APIRouter(prefix="/api/weather", tags=["weather"])

# Health router for health checks
health_router = APIRouter(prefix="/health", tags=["health"])

NOT_CONFIGURED_MESSAGE = (
    "Weather service not configured. Please provide OPENWEATHER_API_KEY."
)

WEATHER_ERRORS: dict[int | str, dict[str, object]] = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    500: {"model": ErrorResponse, "description": "Upstream weather service error"},
}

Latitude = Annotated[float, Query(ge=-90, le=90, description="Latitude")]
Longitude = Annotated[float, Query(ge=-180, le=180, description="Longitude")]
# At least one non-blank character
CityQuery = Annotated[
    str, Query(min_length=1, max_length=100, pattern=r"^\s*\S", description="City name")
]


LANDING_PAGE_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Supplyboard API</title>
    <style>
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: #f5f7fb;
            color: #1f2937;
            display: flex;
            align-items: center;
            justify-content: center;
            min-height: 100vh;
            margin: 0;
        }
        .container { max-width: 640px; padding: 2rem; }
        h1 { color: #1d4ed8; margin-bottom: 0.25rem; }
        code {
            display: block;
            background: #e5e7eb;
            border-radius: 6px;
            padding: 0.5rem 0.75rem;
            margin: 0.4rem 0;
        }
        a { color: #1d4ed8; margin-right: 1rem; }
    </style>
</head>
<body>
    <div class="container">
        <h1>Supplyboard API</h1>
        <p>Supply chain dashboard data and cached weather lookups.</p>
        <code>GET /api/dashboard/kpis</code>
        <code>GET /api/weather/current?lat=40.71&amp;lon=-74.01</code>
        <code>GET /api/weather/search?q=London</code>
        <p><a href="/docs">API Docs</a><a href="/metrics">Metrics</a></p>
    </div>
</body>
</html>
"""


@root_router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def landing_page() -> str:
    """Landing page with API information."""
    return LANDING_PAGE_HTML


def _gateway_error(exc: WeatherProviderError, fallback: str, **context: object) -> HTTPException:
    """Log a provider failure and translate it into a 500 response."""
    if isinstance(exc, UpstreamNotConfiguredError):
        logger.error("Weather provider not configured", **context)
        message = NOT_CONFIGURED_MESSAGE
    else:
        if isinstance(exc, UpstreamUnauthorizedError):
            kind = "unauthorized"
        elif isinstance(exc, UpstreamNotFoundError):
            kind = "not_found"
        else:
            kind = "unavailable"
        logger.error("Upstream weather request failed", kind=kind, error=str(exc), **context)
        message = str(exc) or fallback

    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


@weather_router.get("/current", response_model=WeatherSnapshot, responses=WEATHER_ERRORS)
async def get_current_weather(
    weather_service: WeatherServiceDep,
    lat: Latitude,
    lon: Longitude,
) -> WeatherSnapshot:
    """Get current weather for coordinates.

    Results are cached per coordinate pair rounded to two decimals.
    """
    try:
        return await weather_service.fetch_current(lat, lon)
    except WeatherProviderError as e:
        raise _gateway_error(e, "Failed to fetch weather data", lat=lat, lon=lon) from e


@weather_router.get("/city", response_model=WeatherSnapshot, responses=WEATHER_ERRORS)
async def get_weather_by_city(weather_service: WeatherServiceDep, q: CityQuery) -> WeatherSnapshot:
    """Get current weather for a city name."""
    try:
        return await weather_service.fetch_by_city(q.strip())
    except WeatherProviderError as e:
        raise _gateway_error(e, "Failed to fetch weather data", city=q) from e


@weather_router.get("/forecast", response_model=ForecastSnapshot, responses=WEATHER_ERRORS)
async def get_forecast(
    weather_service: WeatherServiceDep,
    lat: Latitude,
    lon: Longitude,
) -> ForecastSnapshot:
    """Get the multi-day forecast for coordinates."""
    try:
        return await weather_service.fetch_forecast(lat, lon)
    except WeatherProviderError as e:
        raise _gateway_error(e, "Failed to fetch forecast data", lat=lat, lon=lon) from e


@weather_router.get("/search", response_model=list[SearchResult], responses=WEATHER_ERRORS)
async def search_cities(weather_service: WeatherServiceDep, q: CityQuery) -> list[SearchResult]:
    """Search cities by name (at most five matches, never cached)."""
    try:
        return await weather_service.search_cities(q.strip())
    except WeatherProviderError as e:
        raise _gateway_error(e, "Failed to search cities", query=q) from e


@health_router.get("/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    """Liveness check: reports whether the service is running."""
    return HealthResponse(status="ok")


@health_router.get("/ready", response_model=ReadinessResponse)
async def readiness(
    weather_service: WeatherServiceDep, settings: SettingsDep
) -> ReadinessResponse:
    """Readiness check: reports whether the service is ready to accept traffic."""
    cache_status = "ok" if weather_service.is_healthy() else "unhealthy"

    if cache_status != "ok":
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Weather cache unavailable",
        )

    return ReadinessResponse(
        status="ok",
        checks={"cache": cache_status, "provider": settings.weather_provider},
    )

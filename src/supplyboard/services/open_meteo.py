"""Open-Meteo API client."""

from datetime import UTC, datetime
from typing import Any

from supplyboard.api.schemas import (
    CurrentConditions,
    ForecastPoint,
    ForecastSnapshot,
    Location,
    SearchResult,
    SunTimes,
    WeatherCondition,
    WeatherSnapshot,
)
from supplyboard.config import Settings
from supplyboard.services.icons import (
    WMO_BUCKETS,
    bucket_for,
    condition_name,
    icon_token,
    wmo_description,
)
from supplyboard.services.provider import (
    MAX_SEARCH_RESULTS,
    UpstreamNotFoundError,
    UpstreamUnavailableError,
    WeatherProvider,
    condition_code,
    malformed_payload,
    require,
)

CURRENT_FIELDS = (
    "temperature_2m,relative_humidity_2m,apparent_temperature,is_day,weather_code,"
    "pressure_msl,wind_speed_10m,wind_direction_10m,visibility"
)
DAILY_FIELDS = "temperature_2m_max,temperature_2m_min,sunrise,sunset"
HOURLY_FIELDS = (
    "temperature_2m,relative_humidity_2m,apparent_temperature,is_day,weather_code,"
    "pressure_msl,wind_speed_10m,wind_direction_10m"
)

FORECAST_DAYS = 5
# Match the 3-hour spacing of the OpenWeather forecast
FORECAST_STEP_HOURS = 3


def _coordinate_label(lat: float, lon: float) -> str:
    return f"{lat:.2f}, {lon:.2f}"


def _condition(code: int, is_day: bool) -> WeatherCondition:
    return WeatherCondition(
        id=code,
        main=condition_name(bucket_for(code, WMO_BUCKETS)),
        description=wmo_description(code),
        icon=icon_token(code, WMO_BUCKETS, is_day),
    )


def _column(block: dict[str, Any], name: str, index: int, default: Any = 0) -> Any:
    values = block.get(name) or []
    if index < len(values) and values[index] is not None:
        return values[index]
    return default


class OpenMeteoClient(WeatherProvider):
    """HTTP client for the Open-Meteo forecast and geocoding APIs.

    Open-Meteo needs no API key, so it never raises an unauthorized error.
    """

    name = "open-meteo"

    def __init__(self, settings: Settings) -> None:
        """Initialize client with settings."""
        super().__init__(settings.upstream_timeout_seconds)
        self._base_url = settings.open_meteo_forecast_url
        self._geocoding_url = settings.open_meteo_geocoding_url

    async def fetch_current(self, lat: float, lon: float) -> WeatherSnapshot:
        """Fetch current weather data for coordinates.

        Args:
            lat: Latitude (-90 to 90)
            lon: Longitude (-180 to 180)

        Returns:
            Normalized weather snapshot

        Raises:
            UpstreamUnavailableError: If the request fails or the payload is incomplete
        """
        params: dict[str, str | float | int] = {
            "latitude": lat,
            "longitude": lon,
            "current": CURRENT_FIELDS,
            "daily": DAILY_FIELDS,
            "forecast_days": 1,
            "timeformat": "unixtime",
            "wind_speed_unit": "ms",
        }
        data = await self._get_json(self._base_url, params)
        with malformed_payload():
            return self._parse_current(data)

    async def fetch_forecast(self, lat: float, lon: float) -> ForecastSnapshot:
        """Fetch a 5 day forecast sampled every 3 hours."""
        params: dict[str, str | float | int] = {
            "latitude": lat,
            "longitude": lon,
            "hourly": HOURLY_FIELDS,
            "forecast_days": FORECAST_DAYS,
            "timeformat": "unixtime",
            "wind_speed_unit": "ms",
        }
        data = await self._get_json(self._base_url, params)
        with malformed_payload():
            return self._parse_forecast(data)

    async def fetch_by_city(self, name: str) -> WeatherSnapshot:
        """Resolve a city through geocoding, then fetch its current weather."""
        matches = await self.search_cities(name, limit=1)
        if not matches:
            raise UpstreamNotFoundError("Location not found")

        match = matches[0]
        snapshot = await self.fetch_current(match.lat, match.lon)
        location = snapshot.location.model_copy(update={"name": name, "country": match.country})
        return snapshot.model_copy(update={"location": location})

    async def search_cities(
        self, query: str, limit: int = MAX_SEARCH_RESULTS
    ) -> list[SearchResult]:
        """Search cities through the Open-Meteo geocoding API."""
        params: dict[str, str | int] = {
            "name": query,
            "count": limit,
            "language": "en",
            "format": "json",
        }
        data = await self._get_json(self._geocoding_url, params)
        if not isinstance(data, dict):
            raise UpstreamUnavailableError("Unexpected geocoding response")

        with malformed_payload():
            return [
                SearchResult(
                    name=require(item, "name"),
                    country=item.get("country_code") or "",
                    state=item.get("admin1"),
                    lat=require(item, "latitude"),
                    lon=require(item, "longitude"),
                )
                for item in (data.get("results") or [])[:limit]
            ]

    def _parse_current(self, data: dict[str, Any]) -> WeatherSnapshot:
        """Parse Open-Meteo current conditions.

        Raises:
            UpstreamUnavailableError: If required fields are missing from response
        """
        lat = require(data, "latitude")
        lon = require(data, "longitude")
        current = require(data, "current")
        if "temperature_2m" not in current or "weather_code" not in current:
            raise UpstreamUnavailableError("Missing required weather data in 'current' field")

        daily = data.get("daily") or {}
        temp = current["temperature_2m"]

        return WeatherSnapshot(
            location=Location(name=_coordinate_label(lat, lon), lat=lat, lon=lon),
            current=CurrentConditions(
                temp=temp,
                feels_like=current.get("apparent_temperature", temp),
                temp_min=_column(daily, "temperature_2m_min", 0, temp),
                temp_max=_column(daily, "temperature_2m_max", 0, temp),
                humidity=current.get("relative_humidity_2m", 0),
                pressure=current.get("pressure_msl", 0),
                wind_speed=current.get("wind_speed_10m") or 0,
                wind_deg=current.get("wind_direction_10m") or 0,
                weather=_condition(
                    condition_code(current["weather_code"]), bool(current.get("is_day", 1))
                ),
                visibility=current.get("visibility") or 0,
                dt=int(current.get("time", 0)),
            ),
            sys=SunTimes(
                sunrise=int(_column(daily, "sunrise", 0)),
                sunset=int(_column(daily, "sunset", 0)),
            ),
        )

    def _parse_forecast(self, data: dict[str, Any]) -> ForecastSnapshot:
        lat = require(data, "latitude")
        lon = require(data, "longitude")
        hourly = require(data, "hourly")
        times = hourly.get("time") or []
        if not times:
            raise UpstreamUnavailableError("Missing hourly data in forecast response")

        points = []
        for idx in range(0, len(times), FORECAST_STEP_HOURS):
            dt = int(times[idx])
            temp = _column(hourly, "temperature_2m", idx)
            points.append(
                ForecastPoint(
                    dt=dt,
                    dt_txt=datetime.fromtimestamp(dt, UTC).strftime("%Y-%m-%d %H:%M:%S"),
                    temp=temp,
                    feels_like=_column(hourly, "apparent_temperature", idx, temp),
                    temp_min=temp,
                    temp_max=temp,
                    humidity=_column(hourly, "relative_humidity_2m", idx),
                    pressure=_column(hourly, "pressure_msl", idx),
                    wind_speed=_column(hourly, "wind_speed_10m", idx),
                    wind_deg=_column(hourly, "wind_direction_10m", idx),
                    weather=_condition(
                        condition_code(_column(hourly, "weather_code", idx)),
                        bool(_column(hourly, "is_day", idx, 1)),
                    ),
                )
            )

        return ForecastSnapshot(
            points=tuple(points),
            city=Location(name=_coordinate_label(lat, lon), lat=lat, lon=lon),
        )

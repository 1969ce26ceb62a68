"""OpenWeather API client."""

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
from supplyboard.services.icons import OPENWEATHER_BUCKETS, icon_token
from supplyboard.services.provider import (
    MAX_SEARCH_RESULTS,
    UpstreamNotConfiguredError,
    UpstreamUnavailableError,
    WeatherProvider,
    condition_code,
    malformed_payload,
    require,
)


class OpenWeatherClient(WeatherProvider):
    """HTTP client for the OpenWeather current, forecast and geocoding APIs."""

    name = "openweather"

    def __init__(self, settings: Settings) -> None:
        """Initialize client with settings."""
        super().__init__(settings.upstream_timeout_seconds)
        self._api_key = settings.openweather_api_key
        self._base_url = settings.openweather_base_url.rstrip("/")
        self._geo_url = settings.openweather_geo_url.rstrip("/")

    async def _call(self, url: str, **params: Any) -> Any:
        if not self._api_key:
            raise UpstreamNotConfiguredError("OpenWeather API key not configured")
        return await self._get_json(url, {**params, "appid": self._api_key})

    async def fetch_current(self, lat: float, lon: float) -> WeatherSnapshot:
        """Fetch current weather data for coordinates.

        Args:
            lat: Latitude (-90 to 90)
            lon: Longitude (-180 to 180)

        Returns:
            Normalized weather snapshot

        Raises:
            UpstreamUnauthorizedError: If the API key is missing or rejected
            UpstreamNotFoundError: If the location is unknown
            UpstreamUnavailableError: On any other upstream failure
        """
        data = await self._call(f"{self._base_url}/weather", lat=lat, lon=lon, units="metric")
        with malformed_payload():
            return self._parse_current(data)

    async def fetch_by_city(self, name: str) -> WeatherSnapshot:
        """Fetch current weather for a city name.

        The snapshot carries the queried name rather than the provider's.
        """
        data = await self._call(f"{self._base_url}/weather", q=name, units="metric")
        with malformed_payload():
            return self._parse_current(data, location_name=name)

    async def fetch_forecast(self, lat: float, lon: float) -> ForecastSnapshot:
        """Fetch the 5 day / 3 hour forecast for coordinates."""
        data = await self._call(f"{self._base_url}/forecast", lat=lat, lon=lon, units="metric")
        with malformed_payload():
            return self._parse_forecast(data)

    async def search_cities(
        self, query: str, limit: int = MAX_SEARCH_RESULTS
    ) -> list[SearchResult]:
        """Search cities through the direct geocoding API."""
        data = await self._call(f"{self._geo_url}/direct", q=query, limit=limit)
        if not isinstance(data, list):
            raise UpstreamUnavailableError("Unexpected geocoding response")

        with malformed_payload():
            return [
                SearchResult(
                    name=require(item, "name"),
                    country=item.get("country") or "",
                    state=item.get("state"),
                    lat=require(item, "lat"),
                    lon=require(item, "lon"),
                )
                for item in data[:limit]
            ]

    @staticmethod
    def _condition(weather: list[dict[str, Any]], is_day: bool) -> WeatherCondition:
        if not weather:
            raise UpstreamUnavailableError("Missing 'weather' field in weather API response")
        first = weather[0]
        code = condition_code(first.get("id"))
        return WeatherCondition(
            id=code,
            main=first.get("main") or "",
            description=first.get("description") or "",
            icon=icon_token(code, OPENWEATHER_BUCKETS, is_day),
        )

    def _parse_current(
        self, data: dict[str, Any], location_name: str | None = None
    ) -> WeatherSnapshot:
        """Parse a current weather payload.

        Raises:
            UpstreamUnavailableError: If required fields are missing
        """
        main = require(data, "main")
        sys = data.get("sys") or {}
        wind = data.get("wind") or {}
        weather = require(data, "weather")
        observed = int(data.get("dt", 0))
        sunrise = int(sys.get("sunrise", 0))
        sunset = int(sys.get("sunset", 0))

        provider_icon = str(weather[0].get("icon", "")) if weather else ""
        if provider_icon[-1:] in ("d", "n"):
            is_day = provider_icon.endswith("d")
        else:
            is_day = sunrise <= observed < sunset

        return WeatherSnapshot(
            location=Location(
                name=location_name or data.get("name", ""),
                country=sys.get("country", ""),
                lat=require(data, "coord", "lat"),
                lon=require(data, "coord", "lon"),
            ),
            current=CurrentConditions(
                temp=require(main, "temp"),
                feels_like=main.get("feels_like", main["temp"]),
                temp_min=main.get("temp_min", main["temp"]),
                temp_max=main.get("temp_max", main["temp"]),
                humidity=main.get("humidity", 0),
                pressure=main.get("pressure", 0),
                wind_speed=wind.get("speed") or 0,
                wind_deg=wind.get("deg") or 0,
                weather=self._condition(weather, is_day),
                visibility=data.get("visibility") or 0,
                dt=observed,
            ),
            sys=SunTimes(sunrise=sunrise, sunset=sunset),
        )

    def _parse_forecast(self, data: dict[str, Any]) -> ForecastSnapshot:
        city = require(data, "city")
        coord = city.get("coord") or {}
        points = []
        for item in require(data, "list"):
            main = require(item, "main")
            wind = item.get("wind") or {}
            is_day = (item.get("sys") or {}).get("pod", "d") == "d"
            points.append(
                ForecastPoint(
                    dt=require(item, "dt"),
                    dt_txt=item.get("dt_txt", ""),
                    temp=require(main, "temp"),
                    feels_like=main.get("feels_like", main["temp"]),
                    temp_min=main.get("temp_min", main["temp"]),
                    temp_max=main.get("temp_max", main["temp"]),
                    humidity=main.get("humidity", 0),
                    pressure=main.get("pressure", 0),
                    wind_speed=wind.get("speed") or 0,
                    wind_deg=wind.get("deg") or 0,
                    weather=self._condition(item.get("weather") or [], is_day),
                )
            )

        return ForecastSnapshot(
            points=tuple(sorted(points, key=lambda p: p.dt)),
            city=Location(
                name=city.get("name", ""),
                country=city.get("country", ""),
                lat=coord.get("lat", 0.0),
                lon=coord.get("lon", 0.0),
            ),
        )

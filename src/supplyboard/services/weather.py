"""Weather service orchestrating the response caches and upstream provider."""

import structlog

from supplyboard.api.schemas import ForecastSnapshot, SearchResult, WeatherSnapshot
from supplyboard.config import Settings
from supplyboard.services.cache import Clock, ResponseCache, now_ms
from supplyboard.services.open_meteo import OpenMeteoClient
from supplyboard.services.openweather import OpenWeatherClient
from supplyboard.services.provider import MAX_SEARCH_RESULTS, WeatherProvider

logger = structlog.get_logger()


def build_provider(settings: Settings) -> WeatherProvider:
    """Create the provider selected by ``settings.weather_provider``."""
    if settings.weather_provider == "open-meteo":
        return OpenMeteoClient(settings)
    return OpenWeatherClient(settings)


class WeatherService:
    """Service for fetching weather data with caching.

    Current conditions and forecasts live in separate caches, each with its
    own sweep task. City search is never cached.
    """

    def __init__(
        self,
        provider: WeatherProvider,
        weather_cache: ResponseCache[WeatherSnapshot],
        forecast_cache: ResponseCache[ForecastSnapshot],
    ) -> None:
        """Initialize service with provider and caches."""
        self._provider = provider
        self.weather_cache = weather_cache
        self.forecast_cache = forecast_cache

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        provider: WeatherProvider | None = None,
        clock: Clock = now_ms,
    ) -> "WeatherService":
        """Build the service, its caches and (unless given) its provider."""

        def cache(name: str) -> ResponseCache:
            return ResponseCache(
                name=name,
                duration_ms=settings.cache_duration,
                cleanup_interval_ms=settings.cache_cleanup_interval,
                max_size=settings.cache_max_size,
                clock=clock,
            )

        return cls(
            provider=provider or build_provider(settings),
            weather_cache=cache("weather"),
            forecast_cache=cache("forecast"),
        )

    @property
    def provider_name(self) -> str:
        return self._provider.name

    async def fetch_current(self, lat: float, lon: float) -> WeatherSnapshot:
        """Get current weather for coordinates.

        Checks cache first, fetches from upstream on cache miss.

        Args:
            lat: Latitude
            lon: Longitude

        Returns:
            Normalized weather snapshot
        """
        cached = self.weather_cache.get(lat, lon)
        if cached is not None:
            logger.info("Cache hit for weather request", lat=lat, lon=lon, cache_hit=True)
            return cached

        logger.info("Cache miss, fetching from upstream", lat=lat, lon=lon, cache_hit=False)
        snapshot = await self._provider.fetch_current(lat, lon)
        self.weather_cache.set(lat, lon, snapshot)
        return snapshot

    async def fetch_forecast(self, lat: float, lon: float) -> ForecastSnapshot:
        """Get the forecast for coordinates, cache first."""
        cached = self.forecast_cache.get(lat, lon)
        if cached is not None:
            logger.info("Cache hit for forecast request", lat=lat, lon=lon, cache_hit=True)
            return cached

        logger.info(
            "Cache miss, fetching forecast from upstream", lat=lat, lon=lon, cache_hit=False
        )
        snapshot = await self._provider.fetch_forecast(lat, lon)
        self.forecast_cache.set(lat, lon, snapshot)
        return snapshot

    async def fetch_by_city(self, name: str) -> WeatherSnapshot:
        """Get current weather for a city name.

        Coordinates are unknown until the provider answers, so this always
        goes upstream. The result is cached under the resolved coordinates.
        """
        snapshot = await self._provider.fetch_by_city(name)
        self.weather_cache.set(snapshot.location.lat, snapshot.location.lon, snapshot)
        logger.info(
            "Fetched weather by city",
            city=name,
            lat=snapshot.location.lat,
            lon=snapshot.location.lon,
        )
        return snapshot

    async def search_cities(self, query: str) -> list[SearchResult]:
        """Search cities, returning at most five matches."""
        results = await self._provider.search_cities(query, limit=MAX_SEARCH_RESULTS)
        return results[:MAX_SEARCH_RESULTS]

    def start(self) -> None:
        """Start the periodic sweep of both caches."""
        self.weather_cache.start()
        self.forecast_cache.start()

    async def stop(self) -> None:
        await self.weather_cache.stop()
        await self.forecast_cache.stop()

    def is_healthy(self) -> bool:
        return self.weather_cache.is_healthy() and self.forecast_cache.is_healthy()

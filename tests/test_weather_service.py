"""Tests for the weather service cache-first behaviour."""

import pytest

from supplyboard.config import Settings
from supplyboard.services.open_meteo import OpenMeteoClient
from supplyboard.services.openweather import OpenWeatherClient
from supplyboard.services.provider import UpstreamUnavailableError
from supplyboard.services.weather import WeatherService, build_provider


@pytest.fixture
def service(settings: Settings, stub_provider, clock) -> WeatherService:
    return WeatherService.from_settings(settings, stub_provider, clock)


class TestWeatherService:
    @pytest.mark.asyncio
    async def test_second_request_is_served_from_cache(self, service, stub_provider) -> None:
        first = await service.fetch_current(40.7128, -74.0060)
        second = await service.fetch_current(40.7128, -74.0060)

        assert first == second
        assert stub_provider.calls["current"] == 1

    @pytest.mark.asyncio
    async def test_nearby_coordinates_share_cache_entry(self, service, stub_provider) -> None:
        await service.fetch_current(40.7128, -74.0060)
        await service.fetch_current(40.7129, -74.0061)

        assert stub_provider.calls["current"] == 1

    @pytest.mark.asyncio
    async def test_expired_entry_triggers_new_fetch(self, service, stub_provider, clock) -> None:
        await service.fetch_current(40.7128, -74.0060)
        clock.advance(600_001)
        await service.fetch_current(40.7128, -74.0060)

        assert stub_provider.calls["current"] == 2

    @pytest.mark.asyncio
    async def test_forecast_uses_its_own_cache(self, service, stub_provider) -> None:
        await service.fetch_current(40.7128, -74.0060)
        await service.fetch_forecast(40.7128, -74.0060)
        await service.fetch_forecast(40.7128, -74.0060)

        assert stub_provider.calls["current"] == 1
        assert stub_provider.calls["forecast"] == 1
        assert service.weather_cache.size == 1
        assert service.forecast_cache.size == 1

    @pytest.mark.asyncio
    async def test_city_lookup_caches_resolved_coordinates(self, service, stub_provider) -> None:
        snapshot = await service.fetch_by_city("London")
        again = await service.fetch_current(51.5074, -0.1278)

        assert snapshot.location.name == "London"
        assert again == snapshot
        assert stub_provider.calls["city"] == 1
        assert stub_provider.calls["current"] == 0

    @pytest.mark.asyncio
    async def test_city_lookup_always_goes_upstream(self, service, stub_provider) -> None:
        await service.fetch_by_city("London")
        await service.fetch_by_city("London")

        assert stub_provider.calls["city"] == 2

    @pytest.mark.asyncio
    async def test_search_is_truncated_and_not_cached(self, service, stub_provider) -> None:
        results = await service.search_cities("Spring")
        await service.search_cities("Spring")

        assert len(results) == 5
        assert stub_provider.calls["search"] == 2

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self, service, stub_provider) -> None:
        stub_provider.error = UpstreamUnavailableError("down")

        with pytest.raises(UpstreamUnavailableError):
            await service.fetch_current(40.7128, -74.0060)

        stub_provider.error = None
        await service.fetch_current(40.7128, -74.0060)

        assert stub_provider.calls["current"] == 2
        assert service.weather_cache.size == 1

    def test_is_healthy(self, service) -> None:
        assert service.is_healthy()


class TestBuildProvider:
    def test_default_is_openweather(self, settings: Settings) -> None:
        assert isinstance(build_provider(settings), OpenWeatherClient)

    def test_open_meteo(self, settings: Settings) -> None:
        chosen = build_provider(settings.model_copy(update={"weather_provider": "open-meteo"}))
        assert isinstance(chosen, OpenMeteoClient)

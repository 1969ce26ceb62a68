"""Test fixtures."""

from collections import Counter
from datetime import UTC, datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

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
from supplyboard.main import create_app
from supplyboard.services.cache import ResponseCache
from supplyboard.services.provider import WeatherProvider, WeatherProviderError
from supplyboard.services.store import BusinessStore

STORE_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


def make_weather(lat: float, lon: float, name: str = "Stub City") -> WeatherSnapshot:
    return WeatherSnapshot(
        location=Location(name=name, country="US", lat=lat, lon=lon),
        current=CurrentConditions(
            temp=21.0,
            feels_like=20.5,
            temp_min=19.0,
            temp_max=23.0,
            humidity=55,
            pressure=1013,
            wind_speed=3.2,
            wind_deg=180,
            weather=WeatherCondition(id=800, main="Clear", description="clear sky", icon="01d"),
            visibility=10000,
            dt=1_700_000_000,
        ),
        sys=SunTimes(sunrise=1_699_990_000, sunset=1_700_030_000),
    )


def make_forecast(lat: float, lon: float) -> ForecastSnapshot:
    condition = WeatherCondition(id=500, main="Rain", description="light rain", icon="10d")
    return ForecastSnapshot(
        points=(
            ForecastPoint(
                dt=1_700_000_000,
                dt_txt="2023-11-14 22:13:20",
                temp=12.0,
                feels_like=11.0,
                temp_min=11.5,
                temp_max=12.5,
                humidity=80,
                pressure=1009,
                weather=condition,
            ),
        ),
        city=Location(name="Stub City", country="US", lat=lat, lon=lon),
    )


class StubProvider(WeatherProvider):
    """In-process provider counting how often each operation is called."""

    name = "stub"

    def __init__(self, search_results: int = 8) -> None:
        super().__init__(timeout=1.0)
        self.calls: Counter[str] = Counter()
        self.error: WeatherProviderError | None = None
        self.city_coordinates = (51.5074, -0.1278)
        self._search_results = search_results

    def _record(self, operation: str) -> None:
        self.calls[operation] += 1
        if self.error is not None:
            raise self.error

    async def fetch_current(self, lat: float, lon: float) -> WeatherSnapshot:
        self._record("current")
        return make_weather(lat, lon)

    async def fetch_forecast(self, lat: float, lon: float) -> ForecastSnapshot:
        self._record("forecast")
        return make_forecast(lat, lon)

    async def fetch_by_city(self, name: str) -> WeatherSnapshot:
        self._record("city")
        lat, lon = self.city_coordinates
        return make_weather(lat, lon, name=name)

    async def search_cities(self, query: str, limit: int = 5) -> list[SearchResult]:
        self._record("search")
        return [
            SearchResult(name=f"{query} {i}", country="GB", lat=50.0 + i, lon=-1.0 - i)
            for i in range(self._search_results)
        ]


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        weather_provider="openweather",
        openweather_api_key="test-key",
        upstream_timeout_seconds=1.0,
        cache_duration=600_000,
        cache_cleanup_interval=1_800_000,
        cache_max_size=1000,
        seed_sample_data=False,
        export_delay_seconds=0.0,
        log_level="DEBUG",
        log_format="text",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_service(clock: FakeClock) -> ResponseCache:
    """Create test response cache."""
    return ResponseCache(
        name="test",
        duration_ms=600_000,
        cleanup_interval_ms=1_800_000,
        max_size=100,
        clock=clock,
    )


@pytest.fixture
def stub_provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def store_now() -> datetime:
    return STORE_NOW


@pytest.fixture
def store() -> BusinessStore:
    """Empty store whose clock is frozen at STORE_NOW."""
    return BusinessStore(clock=lambda: STORE_NOW)


@pytest.fixture
def app(settings: Settings, clock: FakeClock, store: BusinessStore) -> FastAPI:
    """Create test application."""
    return create_app(settings, store=store, clock=clock)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client."""
    return TestClient(app)

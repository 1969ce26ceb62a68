"""Upstream weather provider capability and error taxonomy."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import httpx
import structlog
from prometheus_client import Counter, Histogram

from supplyboard.api.schemas import ForecastSnapshot, SearchResult, WeatherSnapshot

logger = structlog.get_logger()

MAX_SEARCH_RESULTS = 5


class WeatherProviderError(Exception):
    """Base exception for upstream provider errors."""


class UpstreamUnauthorizedError(WeatherProviderError):
    """Raised when credentials are missing or rejected."""


class UpstreamNotConfiguredError(UpstreamUnauthorizedError):
    """Raised when no credential is configured for the provider."""


class UpstreamNotFoundError(WeatherProviderError):
    """Raised when the requested location cannot be resolved."""


class UpstreamUnavailableError(WeatherProviderError):
    """Raised on any other upstream failure, including timeouts."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# Metrics
upstream_requests = Counter(
    "upstream_requests_total",
    "Total upstream API requests",
    ["provider", "status"],
)
upstream_duration = Histogram(
    "upstream_request_duration_seconds",
    "Upstream request duration in seconds",
    ["provider"],
    buckets=[0.05, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 10.0],
)


class WeatherProvider(ABC):
    """A weather vendor able to produce normalized snapshots."""

    name: str = "provider"

    def __init__(self, timeout: float) -> None:
        self._timeout = timeout

    @abstractmethod
    async def fetch_current(self, lat: float, lon: float) -> WeatherSnapshot:
        """Fetch current conditions for coordinates."""

    @abstractmethod
    async def fetch_forecast(self, lat: float, lon: float) -> ForecastSnapshot:
        """Fetch the multi-point forecast for coordinates."""

    @abstractmethod
    async def fetch_by_city(self, name: str) -> WeatherSnapshot:
        """Fetch current conditions for a city name."""

    @abstractmethod
    async def search_cities(
        self, query: str, limit: int = MAX_SEARCH_RESULTS
    ) -> list[SearchResult]:
        """Search cities matching a free-text query."""

    async def _get_json(self, url: str, params: dict[str, Any]) -> Any:
        """Issue a GET request and decode the JSON body.

        Raises:
            UpstreamUnauthorizedError: On 401/403
            UpstreamNotFoundError: On 404
            UpstreamUnavailableError: On any other failure
        """
        with upstream_duration.labels(provider=self.name).time():
            try:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, params=params)

            except httpx.TimeoutException as e:
                upstream_requests.labels(provider=self.name, status="timeout").inc()
                raise UpstreamUnavailableError(
                    f"Weather API request timed out after {self._timeout}s"
                ) from e

            except httpx.RequestError as e:
                upstream_requests.labels(provider=self.name, status="error").inc()
                raise UpstreamUnavailableError(f"Weather API request failed: {e}") from e

        if response.status_code in (401, 403):
            upstream_requests.labels(provider=self.name, status="unauthorized").inc()
            raise UpstreamUnauthorizedError("Invalid API key")

        if response.status_code == 404:
            upstream_requests.labels(provider=self.name, status="not_found").inc()
            raise UpstreamNotFoundError("Location not found")

        if not response.is_success:
            upstream_requests.labels(provider=self.name, status="error").inc()
            logger.warning(
                "Upstream returned error status",
                provider=self.name,
                status_code=response.status_code,
                body=response.text[:200],
            )
            raise UpstreamUnavailableError(
                f"API request failed: {response.reason_phrase}",
                response.status_code,
            )

        upstream_requests.labels(provider=self.name, status="success").inc()
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailableError("Weather API returned invalid JSON") from e


def require(data: dict[str, Any], *path: str) -> Any:
    """Walk nested keys of an upstream payload.

    Raises:
        UpstreamUnavailableError: If any key along the path is missing
    """
    value: Any = data
    for key in path:
        if not isinstance(value, dict) or key not in value:
            raise UpstreamUnavailableError(
                f"Missing '{'.'.join(path)}' field in weather API response"
            )
        value = value[key]
    return value


def condition_code(value: Any) -> int:
    """Coerce a provider condition code to int.

    Raises:
        UpstreamUnavailableError: If the code is missing or not numeric
    """
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise UpstreamUnavailableError(
            f"Invalid weather condition code in weather API response: {value!r}"
        ) from e


@contextmanager
def malformed_payload() -> Iterator[None]:
    """Report payload values that fail normalization as an upstream failure."""
    try:
        yield
    except (TypeError, ValueError) as e:
        # pydantic.ValidationError is a ValueError
        raise UpstreamUnavailableError("Malformed weather API response") from e

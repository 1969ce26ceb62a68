"""Application configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Server settings
    app_host: str = Field(default="0.0.0.0", description="Server bind host")
    app_port: int = Field(default=8080, description="Server bind port")

    # Upstream API settings
    weather_provider: Literal["openweather", "open-meteo"] = Field(
        default="openweather",
        description="Upstream weather provider",
    )
    openweather_api_key: str | None = Field(
        default=None,
        description="OpenWeather API key",
    )
    openweather_base_url: str = Field(
        default="https://api.openweathermap.org/data/2.5",
        description="OpenWeather data API base URL",
    )
    openweather_geo_url: str = Field(
        default="https://api.openweathermap.org/geo/1.0",
        description="OpenWeather geocoding API base URL",
    )
    open_meteo_forecast_url: str = Field(
        default="https://api.open-meteo.com/v1/forecast",
        description="Open-Meteo forecast API URL",
    )
    open_meteo_geocoding_url: str = Field(
        default="https://geocoding-api.open-meteo.com/v1/search",
        description="Open-Meteo geocoding API URL",
    )
    upstream_timeout_seconds: float = Field(
        default=10.0,
        description="Upstream request timeout in seconds",
        ge=0.1,
        le=30.0,
    )

    # Cache settings (milliseconds)
    cache_duration: int = Field(
        default=600_000,
        description="Cache entry lifetime in milliseconds",
        ge=1,
    )
    cache_cleanup_interval: int = Field(
        default=1_800_000,
        description="Interval between cache sweeps in milliseconds",
        ge=1,
    )
    cache_max_size: int = Field(
        default=10000,
        description="Maximum cache entries",
        ge=1,
        le=1000000,
    )

    # Business data settings
    seed_sample_data: bool = Field(
        default=True,
        description="Populate the in-memory store with sample data on startup",
    )
    export_delay_seconds: float = Field(
        default=2.0,
        description="Simulated export generation time in seconds",
        ge=0.0,
        le=60.0,
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: str = Field(
        default="json",
        description="Log format (json or text)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()

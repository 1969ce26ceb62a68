"""Application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from supplyboard import __version__
from supplyboard.api.dashboard import business_router, dashboard_router
from supplyboard.api.errors import register_exception_handlers
from supplyboard.api.routes import health_router, root_router, weather_router
from supplyboard.config import Settings, get_settings
from supplyboard.middleware.logging import LoggingMiddleware, configure_logging
from supplyboard.services.cache import Clock, now_ms
from supplyboard.services.export import ExportService
from supplyboard.services.provider import WeatherProvider
from supplyboard.services.sample_data import seed_sample_data
from supplyboard.services.store import BusinessStore
from supplyboard.services.weather import WeatherService

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run the cache sweepers for the lifetime of the application."""
    weather_service: WeatherService = app.state.weather_service
    weather_service.start()
    logger.info(
        "Application started",
        provider=weather_service.provider_name,
        cache_duration_ms=weather_service.weather_cache.duration_ms,
        cleanup_interval_ms=weather_service.weather_cache.cleanup_interval_ms,
    )
    try:
        yield
    finally:
        await weather_service.stop()
        logger.info("Application stopped")


def create_app(
    settings: Settings | None = None,
    *,
    provider: WeatherProvider | None = None,
    store: BusinessStore | None = None,
    clock: Clock = now_ms,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        settings: Settings to use instead of the environment
        provider: Weather provider to use instead of the configured one
        store: Pre-built business store; a fresh one is created otherwise
        clock: Millisecond clock for the response caches
    """
    settings = settings or get_settings()

    configure_logging(settings)

    app = FastAPI(
        title="Supplyboard API",
        description="Supply chain dashboard with cached weather lookups",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    if store is None:
        store = BusinessStore()
        if settings.seed_sample_data:
            seed_sample_data(store)

    app.state.settings = settings
    app.state.store = store
    app.state.weather_service = WeatherService.from_settings(settings, provider, clock)
    app.state.export_service = ExportService(settings.export_delay_seconds)

    app.add_middleware(LoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(root_router)
    app.include_router(weather_router)
    app.include_router(dashboard_router)
    app.include_router(business_router)
    app.include_router(health_router)

    # Mount Prometheus metrics endpoint
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

    return app


def run() -> None:
    """Run the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "supplyboard.main:create_app",
        factory=True,
        host=settings.app_host,
        port=settings.app_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()

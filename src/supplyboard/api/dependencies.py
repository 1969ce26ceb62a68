"""FastAPI dependencies.

Services are built once by ``create_app`` and kept on ``app.state``; these
functions hand them to the routes.
"""

from typing import Annotated

from fastapi import Depends, Request

from supplyboard.config import Settings
from supplyboard.services.export import ExportService
from supplyboard.services.kpi import KPIAggregator
from supplyboard.services.store import BusinessStore
from supplyboard.services.weather import WeatherService


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


def get_weather_service(request: Request) -> WeatherService:
    """Get the application's weather service."""
    return request.app.state.weather_service


def get_store(request: Request) -> BusinessStore:
    """Get the application's business store."""
    return request.app.state.store


def get_kpi_aggregator(store: Annotated[BusinessStore, Depends(get_store)]) -> KPIAggregator:
    """Get a KPI aggregator over the application's store."""
    return KPIAggregator(store)


def get_export_service(request: Request) -> ExportService:
    return request.app.state.export_service


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
WeatherServiceDep = Annotated[WeatherService, Depends(get_weather_service)]
StoreDep = Annotated[BusinessStore, Depends(get_store)]
KPIDep = Annotated[KPIAggregator, Depends(get_kpi_aggregator)]
ExportServiceDep = Annotated[ExportService, Depends(get_export_service)]

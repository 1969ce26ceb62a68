"""API request and response schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class Snapshot(BaseModel):
    """Immutable normalized upstream result."""

    model_config = ConfigDict(frozen=True)


class Location(Snapshot):
    """Geographic location."""

    name: str = Field(..., description="Location name")
    country: str = Field(default="", description="ISO country code")
    lat: float = Field(..., ge=-90, le=90, description="Latitude")
    lon: float = Field(..., ge=-180, le=180, description="Longitude")


class WeatherCondition(Snapshot):
    """Condition code, text and shared icon token."""

    id: int = Field(..., description="Provider condition code")
    main: str = Field(..., description="Condition family")
    description: str = Field(..., description="Condition description")
    icon: str = Field(..., pattern=r"^\d{2}[dn]$", description="Icon token")


class CurrentConditions(Snapshot):
    """Current weather readings."""

    temp: float
    feels_like: float
    temp_min: float
    temp_max: float
    humidity: float
    pressure: float
    wind_speed: float = 0.0
    wind_deg: float = 0.0
    weather: WeatherCondition
    visibility: float = 0.0
    dt: int = Field(..., description="Observation time (unix seconds)")


class SunTimes(Snapshot):
    sunrise: int
    sunset: int


class WeatherSnapshot(Snapshot):
    """Normalized current weather."""

    location: Location
    current: CurrentConditions
    sys: SunTimes


class ForecastPoint(Snapshot):
    """Forecast readings for one timestamp."""

    dt: int
    dt_txt: str
    temp: float
    feels_like: float
    temp_min: float
    temp_max: float
    humidity: float
    pressure: float
    wind_speed: float = 0.0
    wind_deg: float = 0.0
    weather: WeatherCondition


class ForecastSnapshot(Snapshot):
    """Normalized multi-point forecast."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    points: tuple[ForecastPoint, ...] = Field(..., alias="list")
    city: Location


class SearchResult(Snapshot):
    """City search match."""

    name: str
    country: str = ""
    state: str | None = None
    lat: float
    lon: float


class CamelModel(BaseModel):
    """Model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KPISummary(CamelModel):
    """Dashboard KPI values."""

    total_inventory_value: str = Field(..., description="Inventory value, e.g. $1.2M")
    inventory_growth: str
    active_orders: int
    pending_orders: int
    supplier_performance: str
    on_time_delivery: str
    stock_alerts: int
    critical_items: str


class InventoryLevel(CamelModel):
    date: str = Field(..., description="ISO date")
    value: float


class IncludeData(CamelModel):
    inventory: bool = True
    orders: bool = True
    suppliers: bool = False


class ExportRequest(CamelModel):
    """Data export request."""

    format: Literal["xlsx", "csv", "pdf"] = "xlsx"
    date_range: Literal["7days", "30days", "90days", "1year"] = "30days"
    include_data: IncludeData = Field(default_factory=IncludeData)

    @model_validator(mode="after")
    def _require_dataset(self) -> "ExportRequest":
        data = self.include_data
        if not (data.inventory or data.orders or data.suppliers):
            raise ValueError("Select at least one dataset to export")
        return self


class ExportResult(CamelModel):
    """Synthetic export completion record."""

    export_id: str
    status: Literal["completed"] = "completed"
    message: str
    format: str
    date_range: str
    datasets: list[str]
    file_name: str
    download_url: str
    completed_at: datetime


class ErrorResponse(BaseModel):
    """Error response."""

    message: str = Field(..., description="Human readable error message")
    errors: list[dict[str, Any]] | None = Field(
        default=None, description="Per-field validation failures"
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Health status")


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    status: str = Field(..., description="Readiness status")
    checks: dict[str, str] = Field(default_factory=dict, description="Component checks")

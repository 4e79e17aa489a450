"""Schemas for flood reports."""

from pydantic import BaseModel, Field

from floodroute.schemas.weather import WeatherConditions


class ReportRequest(BaseModel):
    """Request schema for recording a flood report at a map click."""

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class ReportResponse(BaseModel):
    """Response schema after recording a flood report."""

    key: str
    count: int
    status: str
    weather: WeatherConditions | None = None
    popup: str | None = None


class ReportGridResponse(BaseModel):
    """Response schema for the whole report grid."""

    precision: int
    cell_count: int
    cells: dict[str, int] = Field(default_factory=dict)

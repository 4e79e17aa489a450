"""Schemas for weather conditions and hazard overlays."""

from typing import Any

from pydantic import BaseModel, Field


class WeatherConditions(BaseModel):
    """Current conditions at one coordinate."""

    text: str = ""
    precipitation_past_hour: float = 0.0
    unit: str = ""

    @classmethod
    def from_accuweather(cls, payload: Any) -> "WeatherConditions | None":
        """Parse an AccuWeather proxy payload ({locationKey, current: {...}}).

        Returns None when the payload carries no current conditions.
        """
        if not isinstance(payload, dict):
            return None
        current = payload.get("current")
        if not isinstance(current, dict):
            return None

        metric = (
            ((current.get("PrecipitationSummary") or {}).get("PastHour") or {}).get("Metric")
            or {}
        )
        try:
            precipitation = float(metric.get("Value") or 0.0)
        except (TypeError, ValueError):
            precipitation = 0.0
        return cls(
            text=str(current.get("WeatherText") or ""),
            precipitation_past_hour=precipitation,
            unit=str(metric.get("Unit") or ""),
        )


class HazardLayerResponse(BaseModel):
    """Response schema for the loaded hazard overlay."""

    source: str
    feature_count: int
    geojson: dict[str, Any]
    layers: list[dict[str, Any]] = Field(default_factory=list)

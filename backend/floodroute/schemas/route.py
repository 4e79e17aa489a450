"""Schemas for coordinates, routes and route selection results."""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class Coordinate(BaseModel):
    """A WGS84 (latitude, longitude) pair in degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


RouteGeometry = tuple[Coordinate, ...]


def geometry_from_geojson(geometry: dict | None) -> RouteGeometry:
    """Build a route geometry from a GeoJSON LineString ([lng, lat] pairs).

    A missing or malformed coordinate list yields an empty geometry.
    """
    if not isinstance(geometry, dict):
        return ()
    coords = geometry.get("coordinates") or []
    try:
        return tuple(Coordinate(lat=float(c[1]), lng=float(c[0])) for c in coords)
    except (TypeError, ValueError, IndexError) as e:
        logger.warning(f"Malformed route geometry: {e}")
        return ()


def geometry_to_geojson(geometry: RouteGeometry) -> dict:
    """Convert a route geometry back to a GeoJSON LineString."""
    return {
        "type": "LineString",
        "coordinates": [[c.lng, c.lat] for c in geometry],
    }


class RouteStep(BaseModel):
    """One turn-by-turn instruction."""

    model_config = ConfigDict(frozen=True)

    maneuver_type: str = ""
    modifier: str | None = None
    name: str = ""
    distance: float = 0.0

    @classmethod
    def from_osrm(cls, step: dict) -> "RouteStep":
        """Build a step from an OSRM step object, defaulting missing fields."""
        maneuver = step.get("maneuver")
        if not isinstance(maneuver, dict):
            maneuver = {}
        return cls(
            maneuver_type=str(maneuver.get("type") or ""),
            modifier=str(maneuver["modifier"]) if maneuver.get("modifier") else None,
            name=str(step.get("name") or ""),
            distance=_as_float(step.get("distance")),
        )


class RouteData(BaseModel):
    """Raw route data for one alternative returned by the routing service."""

    model_config = ConfigDict(frozen=True)

    geometry: RouteGeometry = ()
    distance: float = 0.0  # meters
    duration: float = 0.0  # seconds
    steps: tuple[RouteStep, ...] = ()

    @classmethod
    def from_osrm(cls, route: dict) -> "RouteData":
        """Build route data from an OSRM route object, defaulting missing fields."""
        steps: list[RouteStep] = []
        legs = route.get("legs")
        for leg in legs if isinstance(legs, list) else []:
            if not isinstance(leg, dict):
                continue
            leg_steps = leg.get("steps")
            for step in leg_steps if isinstance(leg_steps, list) else []:
                if isinstance(step, dict):
                    steps.append(RouteStep.from_osrm(step))
        return cls(
            geometry=geometry_from_geojson(route.get("geometry")),
            distance=_as_float(route.get("distance")),
            duration=_as_float(route.get("duration")),
            steps=tuple(steps),
        )


class RiskBreakdown(BaseModel):
    """Sub-scores and the weighted composite for one route."""

    learned: float = 0.0
    hazard: float = 0.0  # fraction of samples inside hazard polygons, 0..1
    rain: float = 0.0
    alert: float = 0.0
    combined: float = 0.0


class RouteCandidate(BaseModel):
    """A scored alternative route."""

    index: int  # position in the routing service response
    route: RouteData
    breakdown: RiskBreakdown

    @property
    def score(self) -> float:
        return self.breakdown.combined


class RouteRequest(BaseModel):
    """Request schema for planning a route."""

    origin: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    threshold: float | None = Field(default=None, ge=0)

    @field_validator("origin", "destination")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Location text must contain something other than whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("Location must not be empty")
        return v


class MapLayer(BaseModel):
    """A line layer definition the map client adds for a route."""

    id: str
    source: str
    paint: dict[str, Any]
    data: dict[str, Any]


class CandidateSummary(BaseModel):
    """Response schema for one scored alternative."""

    index: int
    score: float
    summary: str
    breakdown: RiskBreakdown


class RouteView(BaseModel):
    """Everything a map client needs to render one routing result."""

    state: str
    status: str
    generation: int
    applied: bool = True
    threshold: float | None = None
    above_threshold: bool = False
    summary: str | None = None
    directions: list[str] = Field(default_factory=list)
    popup: str | None = None
    popup_at: Coordinate | None = None  # best route midpoint
    candidates: list[CandidateSummary] = Field(default_factory=list)
    layers: list[MapLayer] = Field(default_factory=list)


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0

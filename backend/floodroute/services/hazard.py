"""Hazard overlay polygons and point membership."""

import logging
from typing import Any

from shapely.geometry import box, shape
from shapely.prepared import prep

from floodroute.schemas.route import Coordinate

logger = logging.getLogger(__name__)

# Half-width of the query box around a sample point (degrees)
POINT_TOLERANCE = 0.0001

POLYGON_TYPES = {"Polygon", "MultiPolygon"}


class HazardLayer:
    """Flood hazard polygons loaded from a GeoJSON FeatureCollection."""

    def __init__(self, geojson: dict[str, Any], source: str = "unknown"):
        self.geojson = geojson
        self.source = source
        self._zones: list[tuple[Any, tuple[float, float, float, float], float]] = []

        for feature in geojson.get("features") or []:
            geometry = (feature or {}).get("geometry")
            if not geometry or geometry.get("type") not in POLYGON_TYPES:
                continue
            try:
                geom = shape(geometry)
            except Exception as e:
                logger.debug(f"Skipping unreadable hazard feature: {e}")
                continue
            if geom.is_empty:
                continue
            risk = (feature.get("properties") or {}).get("risk")
            try:
                risk = float(risk) if risk is not None else 0.0
            except (TypeError, ValueError):
                risk = 0.0
            self._zones.append((prep(geom), geom.bounds, risk))

    @property
    def feature_count(self) -> int:
        return len(self._zones)

    def contains(self, point: Coordinate, tolerance: float = POINT_TOLERANCE) -> bool:
        """Check whether a point touches any hazard polygon."""
        return self.risk_at(point, tolerance) is not None

    def risk_at(self, point: Coordinate, tolerance: float = POINT_TOLERANCE) -> float | None:
        """Return the highest risk of the polygons touching a point, or None."""
        query = box(
            point.lng - tolerance,
            point.lat - tolerance,
            point.lng + tolerance,
            point.lat + tolerance,
        )
        best: float | None = None
        for zone, (minx, miny, maxx, maxy), risk in self._zones:
            if (
                point.lng + tolerance < minx
                or point.lng - tolerance > maxx
                or point.lat + tolerance < miny
                or point.lat - tolerance > maxy
            ):
                continue
            if zone.intersects(query):
                best = risk if best is None else max(best, risk)
        return best


def parse_hazard_geojson(payload: Any, source: str) -> HazardLayer | None:
    """Build a hazard layer from a payload, or None if it holds no polygons."""
    if not isinstance(payload, dict) or payload.get("type") != "FeatureCollection":
        logger.warning(f"Hazard payload from {source} is not a FeatureCollection")
        return None
    layer = HazardLayer(payload, source=source)
    if layer.feature_count == 0:
        logger.warning(f"Hazard payload from {source} has no polygon features")
        return None
    return layer

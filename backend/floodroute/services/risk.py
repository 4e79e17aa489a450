"""Route risk scoring.

A route's risk combines up to four sub-scores:

- learned: mean report count over sampled route points
- hazard: fraction of sampled points inside hazard polygons (0..1)
- rain: past-hour precipitation at the route midpoint, capped at 10 mm
- alert: 5 when the midpoint conditions mention severe weather, else 0

combined = w_learned*learned + w_noah*(hazard*3) + w_rain*rain + w_alert*alert

Any sub-score that cannot be computed counts as 0.
"""

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from floodroute.clients.weather import WeatherClient
from floodroute.config import Settings
from floodroute.schemas.route import Coordinate, RiskBreakdown
from floodroute.schemas.weather import WeatherConditions
from floodroute.services.hazard import HazardLayer
from floodroute.services.report_store import DEFAULT_PRECISION, ReportStore, grid_key
from floodroute.services.sampler import midpoint, sample_coordinates

logger = logging.getLogger(__name__)

LEARNED_SAMPLES = 30
HAZARD_SAMPLES = 20

# Hazard overlap (0..1) is stretched to 0..3 before weighting
HAZARD_SCALE = 3.0
MAX_RAIN_SCORE = 10.0
ALERT_SCORE = 5.0
SEVERE_WEATHER = re.compile(r"thunderstorm|tornado|flood|severe", re.IGNORECASE)


@dataclass(frozen=True)
class RiskWeights:
    """Weights applied to each sub-score."""

    learned: float = 1.0  # per report count
    noah: float = 3.0  # hazard polygon dominance
    rain: float = 0.2  # per mm of rain
    alert: float = 2.0  # severe weather penalty

    @classmethod
    def from_settings(cls, settings: Settings) -> "RiskWeights":
        return cls(
            learned=settings.weight_learned,
            noah=settings.weight_noah,
            rain=settings.weight_rain,
            alert=settings.weight_alert,
        )


DEFAULT_WEIGHTS = RiskWeights()


def combine(
    learned: float,
    hazard: float,
    rain: float,
    alert: float,
    weights: RiskWeights = DEFAULT_WEIGHTS,
) -> float:
    """Weighted composite of the four sub-scores."""
    return (
        weights.learned * learned
        + weights.noah * (hazard * HAZARD_SCALE)
        + weights.rain * rain
        + weights.alert * alert
    )


def learned_score(
    geometry: Sequence[Coordinate],
    grid: Mapping[str, int],
    precision: int = DEFAULT_PRECISION,
    max_samples: int = LEARNED_SAMPLES,
) -> float:
    """Mean report count over the sampled points of a route."""
    samples = sample_coordinates(geometry, max_samples)
    if not samples or not grid:
        return 0.0
    total = sum(grid.get(grid_key(p.lat, p.lng, precision), 0) for p in samples)
    return total / len(samples)


def hazard_score(
    geometry: Sequence[Coordinate],
    layer: HazardLayer | None,
    max_samples: int = HAZARD_SAMPLES,
) -> float:
    """Fraction of sampled route points that fall inside a hazard polygon."""
    if layer is None:
        return 0.0
    samples = sample_coordinates(geometry, max_samples)
    if not samples:
        return 0.0
    hits = sum(1 for p in samples if layer.contains(p))
    return hits / len(samples)


def weather_scores(conditions: WeatherConditions | None) -> tuple[float, float]:
    """Derive (rain, alert) sub-scores from current conditions."""
    if conditions is None:
        return 0.0, 0.0
    rain = min(MAX_RAIN_SCORE, max(0.0, conditions.precipitation_past_hour))
    alert = ALERT_SCORE if SEVERE_WEATHER.search(conditions.text or "") else 0.0
    return rain, alert


class RiskScorer:
    """Compute composite risk scores for route geometries."""

    def __init__(
        self,
        store: ReportStore,
        weather: WeatherClient | None = None,
        weights: RiskWeights = DEFAULT_WEIGHTS,
        learned_samples: int = LEARNED_SAMPLES,
        hazard_samples: int = HAZARD_SAMPLES,
    ):
        self.store = store
        self.weather = weather
        self.weights = weights
        self.learned_samples = learned_samples
        self.hazard_samples = hazard_samples

    async def grid_snapshot(self) -> dict[str, int]:
        """Read the whole report grid once; failures yield an empty grid."""
        try:
            return await self.store.all()
        except Exception as e:
            logger.warning(f"Report grid unavailable, learned score will be 0: {e}")
            return {}

    async def weather_at(self, point: Coordinate | None) -> WeatherConditions | None:
        if point is None or self.weather is None:
            return None
        try:
            return await self.weather.current(point)
        except Exception as e:
            logger.warning(f"Weather score failed: {e}")
            return None

    async def score(
        self,
        geometry: Sequence[Coordinate],
        hazard_layer: HazardLayer | None = None,
        grid: Mapping[str, int] | None = None,
    ) -> RiskBreakdown:
        """Score one route geometry."""
        if grid is None:
            grid = await self.grid_snapshot()

        try:
            learned = learned_score(
                geometry, grid, self.store.precision, self.learned_samples
            )
        except Exception as e:
            logger.warning(f"Learned score failed: {e}")
            learned = 0.0

        try:
            hazard = hazard_score(geometry, hazard_layer, self.hazard_samples)
        except Exception as e:
            logger.warning(f"Hazard score failed: {e}")
            hazard = 0.0

        # One weather sample per route, at the midpoint
        rain, alert = weather_scores(await self.weather_at(midpoint(geometry)))

        return RiskBreakdown(
            learned=learned,
            hazard=hazard,
            rain=rain,
            alert=alert,
            combined=combine(learned, hazard, rain, alert, self.weights),
        )

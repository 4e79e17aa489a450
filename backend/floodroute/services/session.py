"""Advisor session: the state one map client works against."""

import logging

import httpx
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from floodroute.clients.geocoding import GeocodingClient
from floodroute.clients.hazards import HazardClient
from floodroute.clients.routing import RoutingClient
from floodroute.clients.weather import WeatherClient
from floodroute.config import Settings
from floodroute.schemas.report import ReportResponse
from floodroute.schemas.route import Coordinate, RouteView
from floodroute.services import presentation
from floodroute.services.hazard import HazardLayer
from floodroute.services.report_store import ReportStore, SettingsReportStore, grid_key
from floodroute.services.risk import RiskScorer, RiskWeights
from floodroute.services.selector import RouteSelector
from floodroute.services.strategies import StrategyResult

logger = logging.getLogger(__name__)


class AdvisorSession:
    """Owns the report store, clients, hazard overlay and rendered routes.

    Every routing request takes a generation token. A finished request only
    replaces the rendered view if no newer request has been issued since.
    """

    def __init__(
        self,
        store: ReportStore,
        geocoder: GeocodingClient,
        router: RoutingClient,
        weather: WeatherClient | None = None,
        hazards: HazardClient | None = None,
        weights: RiskWeights | None = None,
        default_threshold: float = 2.0,
        learned_samples: int = 30,
        hazard_samples: int = 20,
    ):
        self.store = store
        self.weather = weather
        self.hazards = hazards
        self.default_threshold = default_threshold
        self.scorer = RiskScorer(
            store,
            weather=weather,
            weights=weights or RiskWeights(),
            learned_samples=learned_samples,
            hazard_samples=hazard_samples,
        )
        self.selector = RouteSelector(geocoder, router, self.scorer)
        self.hazard_layer: HazardLayer | None = None
        self.view: RouteView | None = None
        self._generation = 0

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: httpx.AsyncClient,
        session_maker: async_sessionmaker[AsyncSession],
    ) -> "AdvisorSession":
        """Wire a session to the configured services."""
        return cls(
            store=SettingsReportStore(session_maker, precision=settings.grid_precision),
            geocoder=GeocodingClient(client, settings.nominatim_url, settings.user_agent),
            router=RoutingClient(client, settings.osrm_url, settings.user_agent),
            weather=WeatherClient(client, settings.weather_proxy_url),
            hazards=HazardClient(
                client,
                proxy_url=settings.noah_geojson_proxy_url,
                direct_url=settings.noah_geojson_url,
            ),
            weights=RiskWeights.from_settings(settings),
            default_threshold=settings.default_threshold,
            learned_samples=settings.learned_samples,
            hazard_samples=settings.hazard_samples,
        )

    @property
    def generation(self) -> int:
        return self._generation

    def next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    async def plan(
        self, origin: str, destination: str, threshold: float | None = None
    ) -> RouteView:
        """Run a routing request and apply its view if it is still the latest."""
        token = self.next_generation()
        if threshold is None:
            threshold = self.default_threshold

        outcome = await self.selector.select(
            origin, destination, threshold, hazard_layer=self.hazard_layer
        )
        view = presentation.render(outcome, generation=token)

        if self.is_current(token):
            self.view = view
            logger.info(f"[STATUS] {view.status}")
        else:
            view.applied = False
            logger.warning(
                f"Discarding stale routing result {token} (latest is {self._generation})"
            )
        return view

    async def record_report(self, lat: float, lng: float) -> ReportResponse:
        """Record a flood report at a clicked point and look up its weather."""
        count = await self.store.increment(lat, lng)
        status = f"Flood report recorded (count={count})"
        logger.info(f"[STATUS] {status}")

        conditions = None
        if self.weather is not None:
            conditions = await self.scorer.weather_at(Coordinate(lat=lat, lng=lng))
        return ReportResponse(
            key=grid_key(lat, lng, self.store.precision),
            count=count,
            status=status,
            weather=conditions,
            popup=presentation.weather_popup(conditions),
        )

    async def clear_reports(self) -> str:
        """Forget every flood report and the rendered routes."""
        await self.store.clear()
        self.view = None
        status = "Local flood memory cleared."
        logger.info(f"[STATUS] {status}")
        return status

    async def load_hazards(self) -> StrategyResult[HazardLayer]:
        """(Re)load the hazard overlay; keeps the previous layer on failure."""
        if self.hazards is None:
            return StrategyResult()
        result = await self.hazards.load()
        if result.found:
            self.hazard_layer = result.value
        return result


def get_advisor(request: Request) -> AdvisorSession:
    """Dependency that provides the application's advisor session."""
    return request.app.state.advisor

"""Route selection over one request lifecycle.

IDLE -> RESOLVING_LOCATIONS -> REQUESTING_ROUTES -> SCORING_CANDIDATES -> SELECTED

RESOLVING_LOCATIONS and REQUESTING_ROUTES may end in FAILED instead. Each
call to ``RouteSelector.select`` walks the machine once from IDLE.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass, field

from floodroute.clients.geocoding import GeocodingClient
from floodroute.clients.routing import RoutingClient
from floodroute.exceptions import ExternalServiceError, InputResolutionError
from floodroute.schemas.route import Coordinate, RiskBreakdown, RouteCandidate
from floodroute.services.hazard import HazardLayer
from floodroute.services.risk import RiskScorer

logger = logging.getLogger(__name__)

UNRESOLVED_MESSAGE = "Could not resolve origin or destination. Use lat,lng or a valid address."
NO_ROUTES_MESSAGE = "No routes found."


class SelectionState(str, enum.Enum):
    """States of one routing request."""

    IDLE = "idle"
    RESOLVING_LOCATIONS = "resolving_locations"
    REQUESTING_ROUTES = "requesting_routes"
    SCORING_CANDIDATES = "scoring_candidates"
    SELECTED = "selected"
    FAILED = "failed"


@dataclass
class SelectionOutcome:
    """Result of one routing request."""

    state: SelectionState
    threshold: float
    message: str = ""
    origin: Coordinate | None = None
    destination: Coordinate | None = None
    candidates: list[RouteCandidate] = field(default_factory=list)
    history: list[SelectionState] = field(default_factory=list)
    failed_at: SelectionState | None = None

    @property
    def best(self) -> RouteCandidate | None:
        return self.candidates[0] if self.candidates else None

    @property
    def above_threshold(self) -> bool:
        """Advisory only: the best route is still the selection."""
        best = self.best
        return best is not None and best.score >= self.threshold


class RouteSelector:
    """Request alternative routes, score each one and pick the safest."""

    def __init__(
        self,
        geocoder: GeocodingClient,
        router: RoutingClient,
        scorer: RiskScorer,
    ):
        self.geocoder = geocoder
        self.router = router
        self.scorer = scorer

    async def _resolve(self, origin_text: str, destination_text: str) -> tuple[Coordinate, Coordinate]:
        origin = await self.geocoder.resolve(origin_text)
        if origin is None:
            raise InputResolutionError(f"Could not resolve origin {origin_text!r}")
        destination = await self.geocoder.resolve(destination_text)
        if destination is None:
            raise InputResolutionError(f"Could not resolve destination {destination_text!r}")
        return origin, destination

    async def _score_all(self, routes, hazard_layer: HazardLayer | None) -> list[RouteCandidate]:
        grid = await self.scorer.grid_snapshot()
        results = await asyncio.gather(
            *(self.scorer.score(r.geometry, hazard_layer, grid) for r in routes),
            return_exceptions=True,
        )
        candidates = []
        for index, (route, result) in enumerate(zip(routes, results)):
            if isinstance(result, BaseException):
                logger.warning(f"Scoring alternative {index} failed, using 0: {result}")
                result = RiskBreakdown()
            candidates.append(RouteCandidate(index=index, route=route, breakdown=result))
        return candidates

    async def select(
        self,
        origin_text: str,
        destination_text: str,
        threshold: float,
        hazard_layer: HazardLayer | None = None,
    ) -> SelectionOutcome:
        """Run one routing request to completion.

        Raises:
            InputResolutionError: if either location text is empty.
        """
        if not origin_text or not origin_text.strip():
            raise InputResolutionError("Origin is empty")
        if not destination_text or not destination_text.strip():
            raise InputResolutionError("Destination is empty")

        outcome = SelectionOutcome(state=SelectionState.IDLE, threshold=threshold)

        def enter(state: SelectionState) -> None:
            outcome.history.append(outcome.state)
            outcome.state = state
            logger.debug(f"Route selection -> {state.value}")

        def fail(message: str) -> SelectionOutcome:
            outcome.failed_at = outcome.state
            outcome.message = message
            enter(SelectionState.FAILED)
            logger.info(f"Route selection failed at {outcome.failed_at.value}: {message}")
            return outcome

        enter(SelectionState.RESOLVING_LOCATIONS)
        try:
            outcome.origin, outcome.destination = await self._resolve(
                origin_text, destination_text
            )
        except InputResolutionError as e:
            logger.info(str(e))
            return fail(UNRESOLVED_MESSAGE)

        enter(SelectionState.REQUESTING_ROUTES)
        try:
            routes = await self.router.alternatives(outcome.origin, outcome.destination)
        except ExternalServiceError as e:
            logger.warning(f"Routing request failed: {e}")
            return fail(f"Routing failed: {e.detail}")
        if not routes:
            return fail(NO_ROUTES_MESSAGE)

        enter(SelectionState.SCORING_CANDIDATES)
        candidates = await self._score_all(routes, hazard_layer)
        # sorted() is stable, so ties keep the routing service order
        outcome.candidates = sorted(candidates, key=lambda c: c.score)

        enter(SelectionState.SELECTED)
        best = outcome.best
        outcome.message = f"Best route selected (risk {best.score:.2f})."
        logger.info(
            f"Selected alternative {best.index} of {len(candidates)} (risk {best.score:.2f})"
        )
        return outcome

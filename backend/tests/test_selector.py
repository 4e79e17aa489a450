"""Tests for route selection over one request lifecycle."""

import pytest

from floodroute.exceptions import InputResolutionError
from floodroute.services.hazard import HazardLayer
from floodroute.services.selector import (
    NO_ROUTES_MESSAGE,
    UNRESOLVED_MESSAGE,
    SelectionState,
)

from conftest import osrm_route, square

ORIGIN = "14.5995,120.9842"
DESTINATION = "14.6100,120.9900"

# Three alternatives through different neighbourhoods
NORTH = [(14.5995, 120.9842), (14.6200, 120.9850), (14.6100, 120.9900)]
MIDDLE = [(14.5995, 120.9842), (14.6050, 120.9870), (14.6100, 120.9900)]
SOUTH = [(14.5995, 120.9842), (14.5900, 120.9950), (14.6100, 120.9900)]


class TestRouteSelector:
    """Tests for RouteSelector.select via an advisor session."""

    @pytest.mark.asyncio
    async def test_no_signals_scores_zero_and_picks_first(self, services, advisor):
        services.routes = [osrm_route(NORTH), osrm_route(MIDDLE), osrm_route(SOUTH)]

        outcome = await advisor.selector.select(ORIGIN, DESTINATION, 2.0)

        assert outcome.state == SelectionState.SELECTED
        assert [c.score for c in outcome.candidates] == [0.0, 0.0, 0.0]
        assert outcome.best.index == 0
        assert [c.index for c in outcome.candidates] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_picks_strict_minimum(self, services, advisor, store):
        services.routes = [osrm_route(NORTH), osrm_route(MIDDLE), osrm_route(SOUTH)]
        # Reports along the north and middle detours
        for _ in range(3):
            await store.increment(14.6200, 120.9850)
        await store.increment(14.6050, 120.9870)

        outcome = await advisor.selector.select(ORIGIN, DESTINATION, 2.0)

        assert outcome.best.index == 2
        scores = [c.score for c in outcome.candidates]
        assert scores == sorted(scores)
        assert [c.index for c in outcome.candidates] == [2, 1, 0]

    @pytest.mark.asyncio
    async def test_ties_keep_routing_service_order(self, services, advisor, store):
        services.routes = [osrm_route(NORTH), osrm_route(MIDDLE), osrm_route(SOUTH)]
        await store.increment(14.6200, 120.9850)

        outcome = await advisor.selector.select(ORIGIN, DESTINATION, 2.0)

        # Middle and south tie at 0; middle came first
        assert [c.index for c in outcome.candidates] == [1, 2, 0]

    @pytest.mark.asyncio
    async def test_hazard_layer_steers_selection(self, services, advisor):
        services.routes = [osrm_route(NORTH), osrm_route(SOUTH)]
        layer = HazardLayer(
            {"type": "FeatureCollection", "features": [square(14.62, 120.985, half=0.002)]}
        )

        outcome = await advisor.selector.select(ORIGIN, DESTINATION, 2.0, hazard_layer=layer)

        assert outcome.best.index == 1
        north = next(c for c in outcome.candidates if c.index == 0)
        assert north.breakdown.hazard == pytest.approx(1 / 3)

    @pytest.mark.asyncio
    async def test_above_threshold_is_advisory(self, services, advisor, store):
        services.routes = [osrm_route([(14.5995, 120.9842), (14.6100, 120.9900)])]
        for _ in range(5):
            await store.increment(14.5995, 120.9842)

        outcome = await advisor.selector.select(ORIGIN, DESTINATION, 2.0)

        assert outcome.state == SelectionState.SELECTED
        assert outcome.best.score == pytest.approx(2.5)
        assert outcome.above_threshold

    @pytest.mark.asyncio
    async def test_destination_geocoding_failure_halts(self, services, advisor):
        services.routes = [osrm_route(NORTH)]

        outcome = await advisor.selector.select(ORIGIN, "Atlantis", 2.0)

        assert outcome.state == SelectionState.FAILED
        assert outcome.failed_at == SelectionState.RESOLVING_LOCATIONS
        assert outcome.message == UNRESOLVED_MESSAGE
        assert services.calls_to("osrm.test") == []
        assert len(services.calls_to("nominatim.test")) == 1

    @pytest.mark.asyncio
    async def test_geocoded_origin(self, services, advisor):
        services.geocode["Manila"] = [{"lat": "14.5995", "lon": "120.9842"}]
        services.routes = [osrm_route(NORTH)]

        outcome = await advisor.selector.select("Manila", DESTINATION, 2.0)

        assert outcome.state == SelectionState.SELECTED
        assert outcome.origin.lat == 14.5995

    @pytest.mark.asyncio
    async def test_no_alternatives_fails(self, advisor):
        outcome = await advisor.selector.select(ORIGIN, DESTINATION, 2.0)
        assert outcome.state == SelectionState.FAILED
        assert outcome.failed_at == SelectionState.REQUESTING_ROUTES
        assert outcome.message == NO_ROUTES_MESSAGE

    @pytest.mark.asyncio
    async def test_routing_error_fails(self, services, advisor):
        services.osrm_status = 503
        outcome = await advisor.selector.select(ORIGIN, DESTINATION, 2.0)
        assert outcome.state == SelectionState.FAILED
        assert outcome.message == "Routing failed: HTTP 503"

    @pytest.mark.asyncio
    async def test_routing_error_code_fails(self, services, advisor):
        services.osrm_code = "NoRoute"
        outcome = await advisor.selector.select(ORIGIN, DESTINATION, 2.0)
        assert outcome.state == SelectionState.FAILED
        assert outcome.failed_at == SelectionState.REQUESTING_ROUTES
        assert outcome.message == "Routing failed: OSRM code NoRoute"

    @pytest.mark.asyncio
    async def test_malformed_legs_still_select(self, services, advisor):
        route = osrm_route(NORTH)
        route["legs"] = {"steps": []}
        services.routes = [route]

        view = await advisor.plan(ORIGIN, DESTINATION)

        assert view.state == "selected"
        assert view.directions == []

    @pytest.mark.asyncio
    async def test_state_history(self, services, advisor):
        services.routes = [osrm_route(NORTH)]
        outcome = await advisor.selector.select(ORIGIN, DESTINATION, 2.0)
        assert outcome.history == [
            SelectionState.IDLE,
            SelectionState.RESOLVING_LOCATIONS,
            SelectionState.REQUESTING_ROUTES,
            SelectionState.SCORING_CANDIDATES,
        ]

    @pytest.mark.asyncio
    async def test_empty_input_rejected(self, advisor):
        with pytest.raises(InputResolutionError):
            await advisor.selector.select("", DESTINATION, 2.0)

    @pytest.mark.asyncio
    async def test_weather_signal_applies_per_candidate(self, services, advisor):
        services.routes = [osrm_route(NORTH), osrm_route(SOUTH)]
        services.weather = {
            "current": {
                "WeatherText": "Severe thunderstorm",
                "PrecipitationSummary": {"PastHour": {"Metric": {"Value": 3.0, "Unit": "mm"}}},
            }
        }

        outcome = await advisor.selector.select(ORIGIN, DESTINATION, 2.0)

        # One weather call per candidate, at its midpoint
        assert len(services.calls_to("weather.test")) == 2
        assert outcome.best.score == pytest.approx(0.2 * 3.0 + 2.0 * 5.0)

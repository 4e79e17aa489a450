"""Tests for the advisor session."""

import asyncio

import pytest

from floodroute.schemas.route import RiskBreakdown, RouteCandidate, RouteData
from floodroute.services.selector import SelectionOutcome, SelectionState

from conftest import NOAH_DIRECT_URL, NOAH_PROXY_URL, osrm_route, square


def _selected(threshold: float, score: float = 0.0) -> SelectionOutcome:
    route = RouteData.from_osrm(osrm_route([(14.5995, 120.9842), (14.61, 120.99)]))
    return SelectionOutcome(
        state=SelectionState.SELECTED,
        threshold=threshold,
        candidates=[RouteCandidate(index=0, route=route, breakdown=RiskBreakdown(combined=score))],
    )


class TestGenerationToken:
    """Stale routing results must not overwrite newer ones."""

    def test_tokens_are_monotonic(self, advisor):
        first = advisor.next_generation()
        second = advisor.next_generation()
        assert second > first
        assert advisor.is_current(second)
        assert not advisor.is_current(first)

    @pytest.mark.asyncio
    async def test_stale_result_is_discarded(self, advisor):
        release_slow = asyncio.Event()

        async def select(origin, destination, threshold, hazard_layer=None):
            if origin == "slow":
                await release_slow.wait()
                return _selected(threshold, score=9.0)
            return _selected(threshold, score=1.0)

        advisor.selector.select = select

        slow = asyncio.create_task(advisor.plan("slow", "dest"))
        await asyncio.sleep(0)
        fast_view = await advisor.plan("fast", "dest")
        release_slow.set()
        slow_view = await slow

        assert fast_view.applied
        assert not slow_view.applied
        assert advisor.view is fast_view
        assert advisor.view.candidates[0].score == 1.0

    @pytest.mark.asyncio
    async def test_default_threshold_used(self, services, advisor):
        services.routes = [osrm_route([(14.5995, 120.9842), (14.61, 120.99)])]
        view = await advisor.plan("14.5995,120.9842", "14.61,120.99")
        assert view.threshold == 2.0
        assert advisor.view is view


class TestReports:
    """Tests for recording and clearing flood reports."""

    @pytest.mark.asyncio
    async def test_record_report(self, advisor):
        response = await advisor.record_report(14.5996, 120.9842)
        assert response.count == 1
        assert response.key == "14.600|120.984"
        assert response.status == "Flood report recorded (count=1)"
        assert response.popup is None

    @pytest.mark.asyncio
    async def test_record_report_with_weather(self, services, advisor):
        services.weather = {
            "current": {
                "WeatherText": "Rain",
                "PrecipitationSummary": {"PastHour": {"Metric": {"Value": 4.0, "Unit": "mm"}}},
            }
        }
        response = await advisor.record_report(14.6, 120.98)
        assert response.weather.text == "Rain"
        assert "Precip (past hour): 4 mm" in response.popup

    @pytest.mark.asyncio
    async def test_clear_forgets_reports_and_routes(self, services, advisor, store):
        services.routes = [osrm_route([(14.5995, 120.9842), (14.61, 120.99)])]
        await advisor.record_report(14.5995, 120.9842)
        await advisor.plan("14.5995,120.9842", "14.61,120.99")

        status = await advisor.clear_reports()

        assert status == "Local flood memory cleared."
        assert advisor.view is None
        assert await store.get(14.5995, 120.9842) == 0


class TestHazardLoading:
    """Tests for loading the hazard overlay into the session."""

    @pytest.mark.asyncio
    async def test_loaded_layer_is_kept(self, services, advisor):
        services.hazard_payloads[NOAH_PROXY_URL] = (
            200,
            {"type": "FeatureCollection", "features": [square(14.6, 120.98)]},
        )
        result = await advisor.load_hazards()
        assert result.found
        assert advisor.hazard_layer is result.value

    @pytest.mark.asyncio
    async def test_failed_reload_keeps_previous_layer(self, services, advisor):
        services.hazard_payloads[NOAH_DIRECT_URL] = (
            200,
            {"type": "FeatureCollection", "features": [square(14.6, 120.98)]},
        )
        await advisor.load_hazards()
        previous = advisor.hazard_layer

        services.hazard_payloads.clear()
        result = await advisor.load_hazards()

        assert not result.found
        assert advisor.hazard_layer is previous

"""Shared fixtures: fake external services wired through httpx.MockTransport."""

import json
import os

os.environ.setdefault("FLOODROUTE_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import httpx
import pytest

from floodroute.clients.geocoding import GeocodingClient
from floodroute.clients.hazards import HazardClient
from floodroute.clients.routing import RoutingClient
from floodroute.clients.weather import WeatherClient
from floodroute.services.report_store import MemoryReportStore
from floodroute.services.session import AdvisorSession

OSRM_URL = "http://osrm.test"
NOMINATIM_URL = "http://nominatim.test"
WEATHER_URL = "http://weather.test/api/accuweather"
NOAH_PROXY_URL = "http://proxy.test/api/noah"
NOAH_DIRECT_URL = "http://noah.test/flood.json"


def osrm_route(coords, distance=1000.0, duration=600.0, steps=None) -> dict:
    """Build an OSRM route object from (lat, lng) pairs."""
    return {
        "geometry": {"type": "LineString", "coordinates": [[lng, lat] for lat, lng in coords]},
        "distance": distance,
        "duration": duration,
        "legs": [{"steps": steps or []}],
    }


def osrm_step(maneuver_type="turn", modifier="left", name="Rizal Ave", distance=120.0) -> dict:
    maneuver = {"type": maneuver_type}
    if modifier is not None:
        maneuver["modifier"] = modifier
    return {"maneuver": maneuver, "name": name, "distance": distance}


def square(lat, lng, half=0.01, risk=2) -> dict:
    """A square hazard polygon feature centred on a point."""
    ring = [
        [lng - half, lat - half],
        [lng + half, lat - half],
        [lng + half, lat + half],
        [lng - half, lat + half],
        [lng - half, lat - half],
    ]
    return {
        "type": "Feature",
        "properties": {"risk": risk},
        "geometry": {"type": "Polygon", "coordinates": [ring]},
    }


class FakeServices:
    """Routes requests to canned responses and records every call."""

    def __init__(self):
        self.routes: list[dict] = []
        self.osrm_status = 200
        self.osrm_code = "Ok"
        self.geocode: dict[str, list] = {}
        self.weather: dict | None = None
        self.weather_status = 200
        self.hazard_payloads: dict[str, tuple[int, object]] = {}
        self.calls: list[httpx.Request] = []

    def calls_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.calls if r.url.host == host]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        host = request.url.host
        if host == "osrm.test":
            if self.osrm_status != 200:
                return httpx.Response(self.osrm_status, json={"code": "Error"})
            return httpx.Response(200, json={"code": self.osrm_code, "routes": self.routes})
        if host == "nominatim.test":
            q = request.url.params.get("q")
            return httpx.Response(200, json=self.geocode.get(q, []))
        if host == "weather.test":
            if self.weather_status != 200 or self.weather is None:
                return httpx.Response(self.weather_status if self.weather_status != 200 else 404)
            return httpx.Response(200, json=self.weather)
        url = str(request.url)
        if url in self.hazard_payloads:
            status, payload = self.hazard_payloads[url]
            return httpx.Response(status, content=json.dumps(payload).encode())
        return httpx.Response(404)


@pytest.fixture()
def services() -> FakeServices:
    return FakeServices()


@pytest.fixture()
async def http_client(services):
    async with httpx.AsyncClient(transport=httpx.MockTransport(services.handler)) as client:
        yield client


@pytest.fixture()
def store() -> MemoryReportStore:
    return MemoryReportStore()


@pytest.fixture()
def advisor(http_client, store) -> AdvisorSession:
    """A session with weather and hazards configured against fake services."""
    return AdvisorSession(
        store=store,
        geocoder=GeocodingClient(http_client, NOMINATIM_URL, "floodroute-tests"),
        router=RoutingClient(http_client, OSRM_URL),
        weather=WeatherClient(http_client, WEATHER_URL),
        hazards=HazardClient(http_client, proxy_url=NOAH_PROXY_URL, direct_url=NOAH_DIRECT_URL),
    )

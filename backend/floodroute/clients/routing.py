"""OSRM routing client."""

import logging

import httpx

from floodroute.exceptions import ExternalServiceError
from floodroute.schemas.route import Coordinate, RouteData

logger = logging.getLogger(__name__)

SERVICE_NAME = "routing"


class RoutingClient:
    """Request alternative driving routes from an OSRM server."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, user_agent: str | None = None):
        self._client = client
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent

    def _get_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers

    def route_url(self, origin: Coordinate, destination: Coordinate) -> str:
        coords = f"{origin.lng},{origin.lat};{destination.lng},{destination.lat}"
        return f"{self.base_url}/route/v1/driving/{coords}"

    async def alternatives(self, origin: Coordinate, destination: Coordinate) -> list[RouteData]:
        """Fetch alternative routes between two coordinates.

        Raises:
            ExternalServiceError: on a transport error, a non-success status,
                a response that is not JSON, or an OSRM error code with no
                routes. An "Ok" response with no routes returns an empty list.
        """
        params = {
            "overview": "full",
            "alternatives": "true",
            "geometries": "geojson",
            "steps": "true",
        }
        try:
            response = await self._client.get(
                self.route_url(origin, destination),
                params=params,
                headers=self._get_headers(),
            )
        except httpx.TimeoutException as e:
            raise ExternalServiceError(SERVICE_NAME, "request timed out") from e
        except httpx.RequestError as e:
            raise ExternalServiceError(SERVICE_NAME, f"connection error: {e}") from e

        if response.status_code != 200:
            raise ExternalServiceError(SERVICE_NAME, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise ExternalServiceError(SERVICE_NAME, "invalid JSON response") from e

        if not isinstance(data, dict):
            raise ExternalServiceError(SERVICE_NAME, "unexpected response shape")

        routes = data.get("routes")
        if not isinstance(routes, list):
            routes = []
        code = data.get("code")
        if code not in (None, "Ok"):
            if not routes:
                raise ExternalServiceError(SERVICE_NAME, f"OSRM code {code}")
            logger.info(f"OSRM returned code {code} with {len(routes)} routes")
        logger.debug(f"OSRM returned {len(routes)} alternatives")
        return [RouteData.from_osrm(r) for r in routes if isinstance(r, dict)]

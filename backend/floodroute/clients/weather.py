"""Weather proxy client (AccuWeather current conditions)."""

import logging

import httpx

from floodroute.schemas.route import Coordinate
from floodroute.schemas.weather import WeatherConditions

logger = logging.getLogger(__name__)


class WeatherClient:
    """Fetch current conditions for a coordinate from the weather proxy.

    Every failure yields None; weather never blocks the primary flow.
    """

    def __init__(self, client: httpx.AsyncClient, proxy_url: str | None):
        self._client = client
        self.proxy_url = proxy_url

    @property
    def enabled(self) -> bool:
        return bool(self.proxy_url)

    async def current(self, point: Coordinate) -> WeatherConditions | None:
        """Return current conditions at a point, or None."""
        if not self.proxy_url:
            return None
        try:
            response = await self._client.get(
                self.proxy_url,
                params={"lat": point.lat, "lng": point.lng},
                headers={"Accept": "application/json"},
            )
            if response.status_code != 200:
                logger.warning(f"Weather proxy returned {response.status_code}")
                return None
            return WeatherConditions.from_accuweather(response.json())
        except httpx.TimeoutException:
            logger.warning("Weather proxy timed out")
            return None
        except (httpx.RequestError, ValueError) as e:
            logger.warning(f"Weather proxy fetch failed: {e}")
            return None

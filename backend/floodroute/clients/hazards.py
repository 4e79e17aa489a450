"""NOAH hazard GeoJSON client."""

import logging
from typing import Any

import httpx

from floodroute.services.hazard import HazardLayer, parse_hazard_geojson
from floodroute.services.strategies import Strategy, StrategyResult, first_success

logger = logging.getLogger(__name__)


class HazardClient:
    """Fetch hazard polygons, preferring the proxy over the direct URL."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        proxy_url: str | None = None,
        direct_url: str | None = None,
    ):
        self._client = client
        self.proxy_url = proxy_url
        self.direct_url = direct_url

    async def _fetch_json(self, url: str) -> Any | None:
        try:
            response = await self._client.get(url, headers={"Accept": "application/json"})
            if response.status_code != 200:
                logger.warning(f"Hazard fetch from {url} returned {response.status_code}")
                return None
            return response.json()
        except httpx.TimeoutException:
            logger.warning(f"Hazard fetch from {url} timed out")
            return None
        except (httpx.RequestError, ValueError) as e:
            logger.warning(f"Hazard fetch from {url} failed: {e}")
            return None

    def strategies(self) -> list[Strategy[HazardLayer]]:
        """Build the ordered list of hazard sources that are configured."""
        chain: list[Strategy[HazardLayer]] = []
        for name, url in (("proxy", self.proxy_url), ("direct", self.direct_url)):
            if not url:
                continue

            async def run(url: str = url, name: str = name) -> HazardLayer | None:
                payload = await self._fetch_json(url)
                if payload is None:
                    return None
                return parse_hazard_geojson(payload, source=name)

            chain.append(Strategy(name=name, run=run))
        return chain

    async def load(self) -> StrategyResult[HazardLayer]:
        """Try each hazard source in order; the first usable layer wins."""
        result = await first_success(self.strategies())
        if result.found:
            logger.info(
                f"NOAH hazard polygons loaded via {result.name} "
                f"({result.value.feature_count} features)"
            )
        else:
            logger.warning("NOAH hazard polygons unavailable")
        return result

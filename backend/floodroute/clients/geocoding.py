"""Location resolution: literal "lat,lng" pairs or Nominatim search."""

import logging
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from floodroute.schemas.route import Coordinate

logger = logging.getLogger(__name__)


def parse_lat_lng(text: str) -> Coordinate | None:
    """Parse text of the form "lat,lng" into a coordinate."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 2:
        return None
    try:
        return Coordinate(lat=float(parts[0]), lng=float(parts[1]))
    except (ValueError, ValidationError):
        return None


class GeocodingClient:
    """Resolve free text to a coordinate with a Nominatim search service."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, user_agent: str):
        self._client = client
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent

    def _get_headers(self) -> dict[str, str]:
        """Get HTTP headers for API requests."""
        return {"Accept": "application/json", "User-Agent": self.user_agent}

    async def search(self, text: str) -> Coordinate | None:
        """Return the best-matching coordinate for text, or None."""
        url = f"{self.base_url}/search?format=json&q={quote(text)}"
        try:
            response = await self._client.get(url, headers=self._get_headers())
            if response.status_code != 200:
                logger.warning(f"Geocoding failed for {text!r}: HTTP {response.status_code}")
                return None
            results = response.json()
        except httpx.TimeoutException:
            logger.warning(f"Geocoding timed out for {text!r}")
            return None
        except (httpx.RequestError, ValueError) as e:
            logger.warning(f"Geocoding failed for {text!r}: {e}")
            return None

        if not isinstance(results, list) or not results:
            logger.info(f"No geocoding match for {text!r}")
            return None
        first = results[0] if isinstance(results[0], dict) else {}
        try:
            return Coordinate(lat=float(first.get("lat")), lng=float(first.get("lon")))
        except (TypeError, ValueError, ValidationError):
            logger.warning(f"Unusable geocoding result for {text!r}: {first}")
            return None

    async def resolve(self, text: str) -> Coordinate | None:
        """Resolve a literal coordinate pair, falling back to search."""
        if not text or not text.strip():
            return None
        literal = parse_lat_lng(text)
        if literal is not None:
            return literal
        return await self.search(text.strip())

"""Health check endpoint."""

from fastapi import APIRouter, Depends

from floodroute import __version__
from floodroute.services.session import AdvisorSession, get_advisor

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(advisor: AdvisorSession = Depends(get_advisor)) -> dict:
    """Liveness and optional-service status."""
    return {
        "status": "healthy",
        "version": __version__,
        "weather_enabled": bool(advisor.weather and advisor.weather.enabled),
        "hazard_layer_loaded": advisor.hazard_layer is not None,
    }

"""Hazard overlay endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from floodroute.schemas.weather import HazardLayerResponse
from floodroute.services.presentation import hazard_layer_style
from floodroute.services.session import AdvisorSession, get_advisor

router = APIRouter(prefix="/api/hazards", tags=["hazards"])


@router.get("", response_model=HazardLayerResponse)
async def get_hazards(advisor: AdvisorSession = Depends(get_advisor)) -> HazardLayerResponse:
    """Return the loaded hazard polygons with their map styling."""
    layer = advisor.hazard_layer
    if layer is None:
        raise HTTPException(503, "NOAH hazard polygons unavailable.")
    return HazardLayerResponse(
        source=layer.source,
        feature_count=layer.feature_count,
        geojson=layer.geojson,
        layers=hazard_layer_style(),
    )


@router.post("/reload")
async def reload_hazards(advisor: AdvisorSession = Depends(get_advisor)) -> dict:
    """Run the hazard loading chain again."""
    result = await advisor.load_hazards()
    if result.found:
        status = f"NOAH hazard polygons loaded (via {result.name})."
    else:
        status = "NOAH hazard polygons unavailable."
    return {
        "success": result.found,
        "source": result.name,
        "attempted": result.attempted,
        "status": status,
    }

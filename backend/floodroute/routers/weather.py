"""Weather lookup endpoint."""

from fastapi import APIRouter, Depends, HTTPException, Query

from floodroute.schemas.route import Coordinate
from floodroute.schemas.weather import WeatherConditions
from floodroute.services.session import AdvisorSession, get_advisor

router = APIRouter(prefix="/api/weather", tags=["weather"])


@router.get("", response_model=WeatherConditions)
async def get_weather(
    lat: float = Query(ge=-90, le=90),
    lng: float = Query(ge=-180, le=180),
    advisor: AdvisorSession = Depends(get_advisor),
) -> WeatherConditions:
    """Current conditions at a coordinate, when a weather proxy is configured."""
    conditions = await advisor.scorer.weather_at(Coordinate(lat=lat, lng=lng))
    if conditions is None:
        raise HTTPException(status_code=404, detail="Weather unavailable")
    return conditions

"""Route planning endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from floodroute.exceptions import InputResolutionError
from floodroute.schemas.route import RouteRequest, RouteView
from floodroute.services.session import AdvisorSession, get_advisor

router = APIRouter(prefix="/api/routes", tags=["routes"])


@router.post("", response_model=RouteView)
async def plan_route(
    request: RouteRequest,
    advisor: AdvisorSession = Depends(get_advisor),
) -> RouteView:
    """Resolve both locations, score the alternatives and select the safest.

    A failed request is still a normal result: it comes back with
    state "failed" and a user-facing status message.
    """
    try:
        return await advisor.plan(request.origin, request.destination, request.threshold)
    except InputResolutionError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/latest", response_model=RouteView)
async def latest_route(advisor: AdvisorSession = Depends(get_advisor)) -> RouteView:
    """Return the most recently applied routing result."""
    if advisor.view is None:
        raise HTTPException(status_code=404, detail="No route has been planned yet")
    return advisor.view

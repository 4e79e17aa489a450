"""API routers."""

from floodroute.routers.hazards import router as hazards_router
from floodroute.routers.health import router as health_router
from floodroute.routers.reports import router as reports_router
from floodroute.routers.routes import router as routes_router
from floodroute.routers.weather import router as weather_router

__all__ = [
    "hazards_router",
    "health_router",
    "reports_router",
    "routes_router",
    "weather_router",
]

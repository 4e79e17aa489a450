"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from floodroute import __version__
from floodroute.config import get_settings
from floodroute.database import async_session_maker, close_db, init_db
from floodroute.routers import (
    hazards_router,
    health_router,
    reports_router,
    routes_router,
    weather_router,
)
from floodroute.services.session import AdvisorSession

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting FloodRoute...")

    await init_db()
    logger.info("Database initialized")

    client = httpx.AsyncClient(timeout=settings.http_timeout)
    advisor = AdvisorSession.from_settings(settings, client, async_session_maker)
    app.state.advisor = advisor

    # Hazard polygons are optional; routing works without them
    await advisor.load_hazards()
    logger.info("Map ready.")

    yield

    # Shutdown
    logger.info("Shutting down FloodRoute...")
    await client.aclose()
    await close_db()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="FloodRoute",
    description="Flood-risk-aware route advisor",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health_router)
app.include_router(routes_router)
app.include_router(reports_router)
app.include_router(hazards_router)
app.include_router(weather_router)


@app.get("/")
async def root():
    """Root endpoint - shows API info."""
    return {
        "name": "FloodRoute",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }

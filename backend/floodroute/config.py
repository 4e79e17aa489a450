"""Application configuration from environment variables."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FLOODROUTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # External services
    osrm_url: str = Field(
        default="https://router.project-osrm.org",
        description="OSRM routing server base URL",
    )
    nominatim_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Nominatim geocoding base URL",
    )
    weather_proxy_url: str | None = Field(
        default=None,
        description="AccuWeather proxy endpoint (?lat=..&lng=..); unset disables weather",
    )
    noah_geojson_proxy_url: str | None = Field(
        default=None, description="NOAH hazard GeoJSON proxy endpoint"
    )
    noah_geojson_url: str | None = Field(
        default="https://noah.up.edu.ph/api/flood-geojson.json",
        description="Direct NOAH hazard GeoJSON URL",
    )

    # HTTP
    http_timeout: float = Field(
        default=10.0, gt=0, description="Timeout for every external call (seconds)"
    )
    user_agent: str = Field(
        default="floodroute/0.1 (flood-aware route advisor)",
        description="User-Agent sent to external services",
    )

    # Report grid and sampling
    grid_precision: int = Field(
        default=3, ge=0, le=8, description="Decimal places used to quantize report keys"
    )
    learned_samples: int = Field(default=30, ge=1, description="Samples for learned sub-score")
    hazard_samples: int = Field(default=20, ge=1, description="Samples for hazard sub-score")

    # Risk weights
    weight_learned: float = Field(default=1.0, ge=0, description="Per-report-count sensitivity")
    weight_noah: float = Field(default=3.0, ge=0, description="Hazard-polygon dominance")
    weight_rain: float = Field(default=0.2, ge=0, description="Per-mm rain sensitivity")
    weight_alert: float = Field(default=2.0, ge=0, description="Severe-weather penalty")

    default_threshold: float = Field(
        default=2.0, ge=0, description="Risk at or above which a warning is raised"
    )

    # Storage
    database_url: str = Field(
        default="sqlite+aiosqlite:///./floodroute.db",
        description="Database URL for the report store",
    )

    # Application
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    cors_origins: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:8080"],
        description="Allowed CORS origins (comma-separated or JSON array)",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str] | None) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        if v is None:
            return ["http://localhost:5173", "http://localhost:8080"]
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            # Handle comma-separated values
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Log level names are upper case."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

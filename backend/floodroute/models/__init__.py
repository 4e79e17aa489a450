"""SQLAlchemy ORM models."""

from floodroute.models.settings import SystemSetting

__all__ = [
    "SystemSetting",
]

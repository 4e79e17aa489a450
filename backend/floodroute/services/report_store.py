"""Flood report grid storage.

Reports are counted per quantized coordinate. The grid only grows through
``increment`` and is emptied by ``clear``; nothing expires.
"""

import asyncio
import logging
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from floodroute.models import SystemSetting

logger = logging.getLogger(__name__)

GRID_SETTINGS_KEY = "flood_grid"
DEFAULT_PRECISION = 3


def grid_key(lat: float, lng: float, precision: int = DEFAULT_PRECISION) -> str:
    """Quantize a coordinate to a grid cell key, e.g. '14.600|120.984'."""
    return f"{float(lat):.{precision}f}|{float(lng):.{precision}f}"


class ReportStore(Protocol):
    """Storage port for the report grid."""

    precision: int

    async def get(self, lat: float, lng: float) -> int: ...

    async def increment(self, lat: float, lng: float) -> int: ...

    async def clear(self) -> None: ...

    async def all(self) -> dict[str, int]: ...


class MemoryReportStore:
    """Report grid held in process memory."""

    def __init__(self, precision: int = DEFAULT_PRECISION, initial: dict[str, int] | None = None):
        self.precision = precision
        self._grid: dict[str, int] = dict(initial or {})

    async def get(self, lat: float, lng: float) -> int:
        return self._grid.get(grid_key(lat, lng, self.precision), 0)

    async def increment(self, lat: float, lng: float) -> int:
        key = grid_key(lat, lng, self.precision)
        self._grid[key] = self._grid.get(key, 0) + 1
        return self._grid[key]

    async def clear(self) -> None:
        self._grid.clear()

    async def all(self) -> dict[str, int]:
        return dict(self._grid)


class SettingsReportStore:
    """Report grid persisted as one JSON value in the settings table."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        precision: int = DEFAULT_PRECISION,
        key: str = GRID_SETTINGS_KEY,
    ):
        self.precision = precision
        self._session_maker = session_maker
        self._key = key
        # Increments are read-modify-write on a single row
        self._lock = asyncio.Lock()

    async def _load(self, db: AsyncSession) -> SystemSetting | None:
        result = await db.execute(select(SystemSetting).where(SystemSetting.key == self._key))
        return result.scalar_one_or_none()

    async def all(self) -> dict[str, int]:
        async with self._session_maker() as db:
            setting = await self._load(db)
        if not setting:
            return {}
        return _clean_grid(setting.value)

    async def get(self, lat: float, lng: float) -> int:
        grid = await self.all()
        return grid.get(grid_key(lat, lng, self.precision), 0)

    async def increment(self, lat: float, lng: float) -> int:
        key = grid_key(lat, lng, self.precision)
        async with self._lock, self._session_maker() as db:
            setting = await self._load(db)
            grid = _clean_grid(setting.value) if setting else {}
            grid[key] = grid.get(key, 0) + 1
            if setting:
                # Assign a new dict so the JSON column is flagged dirty
                setting.value = grid
            else:
                db.add(SystemSetting(key=self._key, value=grid))
            await db.commit()
        logger.debug(f"Report recorded at {key} (count={grid[key]})")
        return grid[key]

    async def clear(self) -> None:
        async with self._lock, self._session_maker() as db:
            await db.execute(delete(SystemSetting).where(SystemSetting.key == self._key))
            await db.commit()
        logger.info("Report grid cleared")


def _clean_grid(value: object) -> dict[str, int]:
    """Drop entries that are not non-negative integer counts."""
    if not isinstance(value, dict):
        logger.warning("Stored report grid is not a mapping; ignoring it")
        return {}
    grid: dict[str, int] = {}
    for key, count in value.items():
        try:
            count = int(count)
        except (TypeError, ValueError):
            continue
        if count > 0:
            grid[str(key)] = count
    return grid

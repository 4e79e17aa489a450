"""Reduce route geometries to a bounded number of sample points."""

from collections.abc import Sequence

from floodroute.schemas.route import Coordinate

DEFAULT_MAX_SAMPLES = 30


def sample_coordinates(
    geometry: Sequence[Coordinate], max_samples: int = DEFAULT_MAX_SAMPLES
) -> list[Coordinate]:
    """Pick at most max_samples points evenly spaced by index.

    The stride is max(1, len // max_samples) starting at index 0, so the
    first point is always included and the last one is not guaranteed.
    """
    if max_samples < 1:
        raise ValueError("max_samples must be at least 1")
    if not geometry:
        return []
    step = max(1, len(geometry) // max_samples)
    return list(geometry[::step][:max_samples])


def midpoint(geometry: Sequence[Coordinate]) -> Coordinate | None:
    """Return the point at the middle index, or None for an empty geometry."""
    if not geometry:
        return None
    return geometry[len(geometry) // 2]

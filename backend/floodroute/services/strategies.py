"""Ordered fallback strategies.

Each strategy returns a value or None. Strategies are tried in order and the
first non-None value wins; later strategies are not attempted.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Strategy(Generic[T]):
    """A named way of obtaining a value."""

    name: str
    run: Callable[[], Awaitable[T | None]]


@dataclass
class StrategyResult(Generic[T]):
    """Outcome of running a strategy chain."""

    value: T | None = None
    name: str | None = None
    attempted: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.value is not None


async def first_success(strategies: Sequence[Strategy[T]]) -> StrategyResult[T]:
    """Run strategies in order until one returns a value."""
    result: StrategyResult[T] = StrategyResult()
    for strategy in strategies:
        result.attempted.append(strategy.name)
        try:
            value = await strategy.run()
        except Exception as e:
            logger.warning(f"Strategy {strategy.name} failed: {e}")
            continue
        if value is not None:
            result.value = value
            result.name = strategy.name
            return result
        logger.debug(f"Strategy {strategy.name} returned nothing")
    return result

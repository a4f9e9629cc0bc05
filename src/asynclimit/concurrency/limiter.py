"""Concurrency limiter — at most N executions of an operation at once."""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable
from typing import Any

from asynclimit.concurrency.lane import Lane
from asynclimit.concurrency.pool import LanePool
from asynclimit.config.schema import LimitConfig
from asynclimit.types import LimiterStats

logger = logging.getLogger(__name__)


class ConcurrencyLimiter:
    """Callable wrapper that spreads calls round-robin over ``concurrency`` lanes.

    Each lane runs its operations one after another, so no more than
    ``concurrency`` operations execute at any instant. Calls are never
    rejected; excess calls queue in their lane without bound.
    """

    def __init__(self, operation: Callable[..., Any], config: LimitConfig | None = None) -> None:
        self._operation = operation
        self._config = config or LimitConfig()
        self._pool = LanePool([Lane(index=i) for i in range(self._config.concurrency)])
        functools.update_wrapper(self, operation, updated=())

        logger.debug(
            "Concurrency limiter for %s: %d lane(s)",
            getattr(operation, "__qualname__", operation),
            self._config.concurrency,
        )

    def __call__(self, /, *args: Any, **kwargs: Any) -> asyncio.Future:
        """Queue a call and return a future for its result."""
        return self._pool.dispatch(self._operation, *args, **kwargs)

    @property
    def concurrency(self) -> int:
        return self._config.concurrency

    @property
    def lanes(self) -> tuple[Lane, ...]:
        return self._pool.lanes

    @property
    def pool(self) -> LanePool:
        return self._pool

    @property
    def stats(self) -> LimiterStats:
        """Return current dispatch statistics."""
        lanes = self._pool.lanes
        return LimiterStats(
            lanes=len(lanes),
            accepted=sum(lane.dispatched for lane in lanes),
            in_flight=sum(lane.pending for lane in lanes),
            settled=sum(lane.settled for lane in lanes),
            failed=sum(lane.failed for lane in lanes),
            per_lane_dispatched=[lane.dispatched for lane in lanes],
        )

    async def drain(self) -> None:
        """Wait until every queued call has finished."""
        await self._pool.drain()


def limit(operation: Callable[..., Any], concurrency: int = 1) -> ConcurrencyLimiter:
    """Limit the number of simultaneous executions of ``operation``.

    Args:
        operation: Callable to limit. May return an awaitable or a plain value.
        concurrency: Maximum number of executions running at any time.

    Returns a callable with the same arguments as ``operation`` whose calls
    return an ``asyncio.Future`` for the operation's result.
    """
    return ConcurrencyLimiter(operation, LimitConfig(concurrency=concurrency))

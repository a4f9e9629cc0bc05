"""Rate limiter — spaced lanes with a bounded shared queue."""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable
from typing import Any

from asynclimit.concurrency.lane import DelayedLane, invoke
from asynclimit.concurrency.pool import LanePool
from asynclimit.config.defaults import DEFAULT_QUEUE_FULL_ERROR
from asynclimit.config.schema import RateLimitConfig
from asynclimit.errors.exceptions import QueueFullError
from asynclimit.types import LimiterStats

logger = logging.getLogger(__name__)


class RateLimiter:
    """Callable wrapper allowing ``requests_per_interval`` starts per ``interval``.

    Calls are spread round-robin over ``requests_per_interval`` delayed lanes.
    Each lane waits ``interval`` seconds after an operation settles before
    starting the next one. An optional ``max_queue_size`` caps the number of
    accepted-but-unsettled calls across all lanes; calls beyond it get a
    future already failed with ``QueueFullError``.
    """

    def __init__(self, operation: Callable[..., Any], config: RateLimitConfig) -> None:
        self._operation = operation
        self._config = config
        self._pool = LanePool(
            [
                DelayedLane(config.interval, index=i)
                for i in range(config.requests_per_interval)
            ]
        )
        functools.update_wrapper(self, operation, updated=())

        # Shared across lanes
        self._in_flight = 0

        # Stats
        self._total_accepted = 0
        self._total_rejected = 0

        logger.debug(
            "Rate limiter for %s: %d lane(s), interval=%.3fs, max_queue_size=%s",
            getattr(operation, "__qualname__", operation),
            config.requests_per_interval,
            config.interval,
            config.max_queue_size,
        )

    def __call__(self, /, *args: Any, **kwargs: Any) -> asyncio.Future:
        """Queue a call and return a future for its result.

        The queue check happens before any lane is touched, so a rejected
        call leaves the lanes and the in-flight counter unchanged.
        """
        max_queue_size = self._config.max_queue_size
        if max_queue_size is not None and self._in_flight >= max_queue_size:
            return self._reject()

        self._in_flight += 1
        self._total_accepted += 1
        return self._pool.dispatch(self._tracked, *args, **kwargs)

    async def _tracked(self, /, *args: Any, **kwargs: Any) -> Any:
        try:
            return await invoke(self._operation, *args, **kwargs)
        finally:
            self._in_flight -= 1

    def _reject(self) -> asyncio.Future:
        self._total_rejected += 1
        logger.warning(
            "Rejecting call to %s: %d of %d queue slots in use",
            getattr(self._operation, "__qualname__", self._operation),
            self._in_flight,
            self._config.max_queue_size,
        )
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        future.set_exception(
            QueueFullError(
                self._config.queue_full_error,
                max_queue_size=self._config.max_queue_size,
                in_flight=self._in_flight,
            )
        )
        return future

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    @property
    def interval(self) -> float:
        return self._config.interval

    @property
    def in_flight(self) -> int:
        """Calls accepted whose operation has not settled yet."""
        return self._in_flight

    @property
    def lanes(self) -> tuple[DelayedLane, ...]:
        return self._pool.lanes  # type: ignore[return-value]

    @property
    def pool(self) -> LanePool:
        return self._pool

    @property
    def stats(self) -> LimiterStats:
        """Return current rate limiter statistics."""
        lanes = self._pool.lanes
        return LimiterStats(
            lanes=len(lanes),
            accepted=self._total_accepted,
            rejected=self._total_rejected,
            in_flight=self._in_flight,
            settled=sum(lane.settled for lane in lanes),
            failed=sum(lane.failed for lane in lanes),
            per_lane_dispatched=[lane.dispatched for lane in lanes],
        )

    async def drain(self) -> None:
        """Wait until every queued call has finished, trailing delays included."""
        await self._pool.drain()


def rate_limit(
    operation: Callable[..., Any],
    interval: float | None = None,
    *,
    requests_per_interval: int = 1,
    max_queue_size: int | None = None,
    queue_full_error: str = DEFAULT_QUEUE_FULL_ERROR,
    config: RateLimitConfig | None = None,
) -> RateLimiter:
    """Limit how many calls of ``operation`` start within a time interval.

    Args:
        operation: Callable to rate-limit. May return an awaitable or a plain value.
        interval: Time interval in seconds. Required unless ``config`` is given.
        requests_per_interval: Maximum number of requests within the interval.
        max_queue_size: Maximum number of queued requests (None = unbounded).
        queue_full_error: Error message when the queue is full.
        config: Complete options; when given, the other keyword options are ignored.

    Returns a callable with the same arguments as ``operation`` whose calls
    return an ``asyncio.Future`` for the operation's result.
    """
    if config is None:
        if interval is None:
            raise TypeError("rate_limit() requires an 'interval' or a 'config'")
        config = RateLimitConfig(
            interval=interval,
            requests_per_interval=requests_per_interval,
            max_queue_size=max_queue_size,
            queue_full_error=queue_full_error,
        )
    return RateLimiter(operation, config)

"""Concurrency — lanes, lane pools, and the two limiter wrappers."""

from asynclimit.concurrency.lane import DelayedLane, Lane, delay
from asynclimit.concurrency.limiter import ConcurrencyLimiter, limit
from asynclimit.concurrency.pool import LanePool
from asynclimit.concurrency.rate_limiter import RateLimiter, rate_limit

__all__ = [
    "ConcurrencyLimiter",
    "DelayedLane",
    "Lane",
    "LanePool",
    "RateLimiter",
    "delay",
    "limit",
    "rate_limit",
]

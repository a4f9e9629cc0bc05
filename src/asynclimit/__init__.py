"""asynclimit — concurrency and rate limiting for async callables."""

from asynclimit.concurrency.lane import DelayedLane, Lane, delay
from asynclimit.concurrency.limiter import ConcurrencyLimiter, limit
from asynclimit.concurrency.pool import LanePool
from asynclimit.concurrency.rate_limiter import RateLimiter, rate_limit
from asynclimit.config.schema import LimitConfig, LimiterProfile, RateLimitConfig
from asynclimit.core import from_config, from_profile
from asynclimit.errors.exceptions import AsyncLimitError, LimiterConfigError, QueueFullError
from asynclimit.types import LimiterStats

__version__ = "0.1.0"

__all__ = [
    "AsyncLimitError",
    "ConcurrencyLimiter",
    "DelayedLane",
    "Lane",
    "LanePool",
    "LimitConfig",
    "LimiterConfigError",
    "LimiterProfile",
    "LimiterStats",
    "QueueFullError",
    "RateLimitConfig",
    "RateLimiter",
    "delay",
    "from_config",
    "from_profile",
    "limit",
    "rate_limit",
]

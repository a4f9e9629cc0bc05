"""Error handling — exceptions raised or delivered by limiters."""

from asynclimit.errors.exceptions import (
    AsyncLimitError,
    LimiterConfigError,
    QueueFullError,
)

__all__ = [
    "AsyncLimitError",
    "QueueFullError",
    "LimiterConfigError",
]

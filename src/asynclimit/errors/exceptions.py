"""Custom exception hierarchy for asynclimit."""

from __future__ import annotations

from typing import Any


class AsyncLimitError(Exception):
    """Base exception for all asynclimit errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class QueueFullError(AsyncLimitError):
    """A rate-limited call was rejected because the queue is at capacity.

    The wrapped operation was never invoked for this call.
    """

    def __init__(
        self,
        message: str = "Max queue size reached",
        max_queue_size: int | None = None,
        in_flight: int = 0,
    ) -> None:
        super().__init__(message)
        self.max_queue_size = max_queue_size
        self.in_flight = in_flight


class LimiterConfigError(AsyncLimitError, ValueError):
    """Invalid limiter configuration file or profile."""

    def __init__(
        self,
        message: str = "",
        path: str | None = None,
        profile: str | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.profile = profile

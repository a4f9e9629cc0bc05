"""Pydantic models for limiter configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field

from asynclimit.config.defaults import (
    DEFAULT_CONCURRENCY,
    DEFAULT_QUEUE_FULL_ERROR,
    DEFAULT_REQUESTS_PER_INTERVAL,
)
from asynclimit.types import LimiterKind


class LimitConfig(BaseModel):
    """Options for a concurrency limiter."""

    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1, strict=True)


class RateLimitConfig(BaseModel):
    """Options for a rate limiter.

    ``interval`` is the minimum spacing in seconds between the settle of one
    operation and the start of the next within a lane.
    """

    interval: float = Field(ge=0, allow_inf_nan=False)
    requests_per_interval: int = Field(default=DEFAULT_REQUESTS_PER_INTERVAL, ge=1, strict=True)
    max_queue_size: int | None = Field(default=None, ge=1)
    queue_full_error: str = DEFAULT_QUEUE_FULL_ERROR


class LimiterProfile(BaseModel):
    """A named limiter definition, as found in a limits YAML file."""

    kind: LimiterKind = LimiterKind.LIMIT
    description: str = ""

    # For limit
    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1)

    # For rate_limit
    interval: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    requests_per_interval: int = Field(default=DEFAULT_REQUESTS_PER_INTERVAL, ge=1)
    max_queue_size: int | None = Field(default=None, ge=1)
    queue_full_error: str = DEFAULT_QUEUE_FULL_ERROR

    def to_config(self) -> LimitConfig | RateLimitConfig:
        """Return the limiter options this profile describes."""
        if self.kind == LimiterKind.LIMIT:
            return LimitConfig(concurrency=self.concurrency)
        return RateLimitConfig(
            interval=self.interval,
            requests_per_interval=self.requests_per_interval,
            max_queue_size=self.max_queue_size,
            queue_full_error=self.queue_full_error,
        )


class LimitsFile(BaseModel):
    """Top-level contents of a limits YAML file."""

    limiters: dict[str, LimiterProfile] = Field(default_factory=dict)

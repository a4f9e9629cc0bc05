"""Build limiters from configuration objects and named profiles."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from asynclimit.concurrency.limiter import ConcurrencyLimiter
from asynclimit.concurrency.rate_limiter import RateLimiter
from asynclimit.config.loader import load_profile
from asynclimit.config.schema import LimitConfig, LimiterProfile, RateLimitConfig

logger = logging.getLogger(__name__)


def from_config(
    operation: Callable[..., Any],
    config: LimitConfig | RateLimitConfig,
) -> ConcurrencyLimiter | RateLimiter:
    """Wrap ``operation`` with the limiter matching the config model."""
    if isinstance(config, RateLimitConfig):
        return RateLimiter(operation, config)
    return ConcurrencyLimiter(operation, config)


def from_profile(
    operation: Callable[..., Any],
    profile: LimiterProfile | str,
    path: str | Path | None = None,
) -> ConcurrencyLimiter | RateLimiter:
    """Wrap ``operation`` as described by a limiter profile.

    ``profile`` is either a ``LimiterProfile`` or the name of one in the
    limits YAML file at ``path``.
    """
    if isinstance(profile, str):
        if path is None:
            raise TypeError("from_profile() needs 'path' when the profile is given by name")
        logger.info("Loading limiter profile '%s' from %s", profile, path)
        profile = load_profile(path, profile)
    return from_config(operation, profile.to_config())

"""Package-level default configuration values."""

from __future__ import annotations

from typing import Any

# Concurrency limiter
DEFAULT_CONCURRENCY = 1

# Rate limiter
DEFAULT_INTERVAL = 1.0  # seconds
DEFAULT_REQUESTS_PER_INTERVAL = 1
DEFAULT_MAX_QUEUE_SIZE: int | None = None  # unbounded
DEFAULT_QUEUE_FULL_ERROR = "Max queue size reached"

# Simulator
DEFAULT_SIMULATE_CALLS = 10
DEFAULT_SIMULATE_DURATION = 0.05  # seconds per synthetic operation

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "concurrency": DEFAULT_CONCURRENCY,
        "interval": DEFAULT_INTERVAL,
        "requests_per_interval": DEFAULT_REQUESTS_PER_INTERVAL,
        "max_queue_size": DEFAULT_MAX_QUEUE_SIZE,
        "queue_full_error": DEFAULT_QUEUE_FULL_ERROR,
        "simulate_calls": DEFAULT_SIMULATE_CALLS,
        "simulate_duration": DEFAULT_SIMULATE_DURATION,
        "log_level": DEFAULT_LOG_LEVEL,
    }

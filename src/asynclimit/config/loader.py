"""YAML loading and validation for limiter profiles."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from asynclimit.config.schema import LimiterProfile, LimitsFile
from asynclimit.errors.exceptions import LimiterConfigError
from asynclimit.types import LimiterKind


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load any YAML file safely."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise LimiterConfigError(f"Malformed YAML in {path}: {e}", path=str(path)) from e

    if not isinstance(raw, dict):
        raise LimiterConfigError(
            f"Expected YAML mapping, got {type(raw).__name__} in {path}", path=str(path)
        )

    return raw


def load_limits_yaml(path: str | Path) -> LimitsFile:
    """Load a limits YAML file and return validated limiter profiles.

    Expected shape::

        limiters:
          search_api:
            kind: rate_limit
            interval: 1.0
            requests_per_interval: 5
          db_writes:
            kind: limit
            concurrency: 4
    """
    raw = load_yaml(path)
    if "limiters" not in raw:
        raise LimiterConfigError(
            f"Invalid limits YAML: missing top-level 'limiters' key in {path}", path=str(path)
        )

    try:
        limits = LimitsFile(**raw)
    except ValidationError as e:
        raise LimiterConfigError(f"Invalid limits YAML {path}: {e}", path=str(path)) from e

    for name, profile in limits.limiters.items():
        if profile.kind == LimiterKind.RATE_LIMIT and profile.interval is None:
            raise LimiterConfigError(
                f"Limiter '{name}' in {path} is a rate_limit but has no 'interval'",
                path=str(path),
                profile=name,
            )

    return limits


def load_profile(path: str | Path, name: str) -> LimiterProfile:
    """Load a single named profile from a limits YAML file."""
    limits = load_limits_yaml(path)
    profile = limits.limiters.get(name)
    if profile is None:
        available = ", ".join(sorted(limits.limiters)) or "none"
        raise LimiterConfigError(
            f"Unknown limiter '{name}' in {path} (available: {available})",
            path=str(path),
            profile=name,
        )
    return profile

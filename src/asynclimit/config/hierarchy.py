"""Configuration hierarchy — merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config   (~/.asynclimit/config.yaml)
  3. Project config   (./asynclimit.yaml)
  4. Environment variables (ASYNCLIMIT_*)
  5. Runtime arguments
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from asynclimit.config.defaults import get_defaults
from asynclimit.config.schema import LimitConfig, RateLimitConfig
from asynclimit.errors.exceptions import LimiterConfigError

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".asynclimit" / "config.yaml"
_PROJECT_CONFIG_NAME = "asynclimit.yaml"

# Map of environment variables to config keys
_ENV_MAP: dict[str, str] = {
    "ASYNCLIMIT_CONCURRENCY": "concurrency",
    "ASYNCLIMIT_INTERVAL": "interval",
    "ASYNCLIMIT_REQUESTS_PER_INTERVAL": "requests_per_interval",
    "ASYNCLIMIT_MAX_QUEUE_SIZE": "max_queue_size",
    "ASYNCLIMIT_QUEUE_FULL_ERROR": "queue_full_error",
    "ASYNCLIMIT_LIMITS_FILE": "limits_file",
    "ASYNCLIMIT_LOG_LEVEL": "log_level",
}

# Keys that should be parsed as specific types
_TYPE_MAP: dict[str, type] = {
    "concurrency": int,
    "interval": float,
    "requests_per_interval": int,
    "max_queue_size": int,
    "simulate_calls": int,
    "simulate_duration": float,
}

# Values meaning "no limit" for optional limits
_UNBOUNDED = {"", "none", "null", "unbounded", "inf"}

# Limits where one of the _UNBOUNDED spellings means "no limit"
_OPTIONAL_LIMITS = {"max_queue_size"}

# Merged keys validated against each limiter model
_LIMIT_KEYS = ("concurrency",)
_RATE_LIMIT_KEYS = ("interval", "requests_per_interval", "max_queue_size", "queue_full_error")


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Every layer has its "unbounded" spellings normalised to ``None`` before
    merging. The merged limiter keys are then checked against
    ``LimitConfig``/``RateLimitConfig``; a bad value raises
    ``LimiterConfigError`` naming the layer it came from.
    """
    config = get_defaults()
    origins = dict.fromkeys(config, "defaults")

    for source, layer in _iter_layers(runtime_overrides):
        for key, value in _normalise_layer(layer).items():
            config[key] = value
            origins[key] = source

    _validate_limits(config, origins)
    return config


def _iter_layers(runtime_overrides: dict[str, Any]) -> Iterator[tuple[str, dict[str, Any]]]:
    """Yield ``(source, mapping)`` for every layer above the defaults, lowest first."""
    global_cfg = _load_yaml_config(_GLOBAL_CONFIG_PATH)
    if global_cfg:
        yield str(_GLOBAL_CONFIG_PATH), global_cfg

    project_path = _find_project_config()
    if project_path is not None:
        project_cfg = _load_yaml_config(project_path)
        if project_cfg:
            yield str(project_path), project_cfg

    yield "environment", _load_env_vars()

    # None means "not given" for runtime arguments
    yield "arguments", {k: v for k, v in runtime_overrides.items() if v is not None}


def _normalise_layer(layer: dict[str, Any]) -> dict[str, Any]:
    return {
        key: None if key in _OPTIONAL_LIMITS and _is_unbounded(value) else value
        for key, value in layer.items()
    }


def _is_unbounded(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float):
        return math.isinf(value)  # YAML .inf
    return isinstance(value, str) and value.strip().lower() in _UNBOUNDED


def _validate_limits(config: dict[str, Any], origins: dict[str, str]) -> None:
    """Check merged limiter settings and store their validated values."""
    for model, keys in ((LimitConfig, _LIMIT_KEYS), (RateLimitConfig, _RATE_LIMIT_KEYS)):
        try:
            validated = model(**{key: config[key] for key in keys})
        except ValidationError as e:
            bad = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            sources = ", ".join(f"{key} from {origins.get(key, 'defaults')}" for key in bad)
            raise LimiterConfigError(f"Invalid limiter settings ({sources}): {e}") from e
        config.update(validated.model_dump())


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Read one YAML layer; unreadable or non-mapping files are skipped."""
    if not path.is_file():
        return None
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Skipping config %s: %s", path, e)
        return None
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Skipping config %s: expected a mapping, got %s", path, type(data).__name__)
        return None
    return data


def _find_project_config() -> Path | None:
    """Nearest asynclimit.yaml from cwd upward."""
    cwd = Path.cwd()
    candidates = (parent / _PROJECT_CONFIG_NAME for parent in (cwd, *cwd.parents))
    return next((path for path in candidates if path.is_file()), None)


def _load_env_vars() -> dict[str, Any]:
    """Read ASYNCLIMIT_* environment variables that are set."""
    return {
        config_key: _coerce_env_value(config_key, os.environ[env_key])
        for env_key, config_key in _ENV_MAP.items()
        if env_key in os.environ
    }


def _coerce_env_value(key: str, value: str) -> Any:
    """Coerce an environment variable string to the type its key expects.

    Unconvertible numbers are kept as strings and rejected by validation.
    """
    if key in _OPTIONAL_LIMITS and _is_unbounded(value):
        return None

    target_type = _TYPE_MAP.get(key)
    if target_type is None:
        return value
    try:
        return target_type(value)
    except ValueError:
        logger.warning("Cannot convert env var for '%s' to %s: %s", key, target_type.__name__, value)
        return value

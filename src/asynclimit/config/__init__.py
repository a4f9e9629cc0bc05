"""Configuration — defaults, hierarchy, and limiter profile models."""

from asynclimit.config.schema import LimitConfig, LimiterProfile, LimitsFile, RateLimitConfig

__all__ = ["LimitConfig", "RateLimitConfig", "LimiterProfile", "LimitsFile"]

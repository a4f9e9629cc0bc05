"""Shared Pydantic models for asynclimit."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

# ── Enums ──


class LimiterKind(StrEnum):
    LIMIT = "limit"
    RATE_LIMIT = "rate_limit"


class CallOutcome(StrEnum):
    OK = "ok"
    FAILED = "failed"
    REJECTED = "rejected"


# ── Runtime models ──


class LimiterStats(BaseModel):
    """Snapshot of a wrapper's dispatch counters."""

    lanes: int = 1
    accepted: int = 0
    rejected: int = 0
    in_flight: int = 0
    settled: int = 0
    failed: int = 0
    per_lane_dispatched: list[int] = Field(default_factory=list)

    @property
    def rejection_rate(self) -> float:
        total = self.accepted + self.rejected
        return self.rejected / total if total > 0 else 0.0


class CallRecord(BaseModel):
    """Timing of one call made through a wrapper (used by the simulator)."""

    call: int
    lane: int
    queued_at: float
    started_at: float | None = None
    ended_at: float | None = None
    outcome: CallOutcome = CallOutcome.OK
    error: str | None = None

    @property
    def wait_seconds(self) -> float | None:
        if self.started_at is None:
            return None
        return self.started_at - self.queued_at

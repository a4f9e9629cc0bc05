"""Fixed-size pool of lanes with round-robin dispatch."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any

from asynclimit.concurrency.lane import Lane

logger = logging.getLogger(__name__)


class LanePool:
    """Round-robin dispatcher over a fixed, ordered set of lanes.

    The cursor selects the lane for the next call, then advances modulo the
    pool size. The first call goes to lane 0.
    """

    def __init__(self, lanes: Sequence[Lane]) -> None:
        if not lanes:
            raise ValueError("LanePool needs at least one lane")
        self._lanes: tuple[Lane, ...] = tuple(lanes)
        self._cursor = 0

    @property
    def lanes(self) -> tuple[Lane, ...]:
        return self._lanes

    @property
    def cursor(self) -> int:
        """Index of the lane that will receive the next call."""
        return self._cursor

    def __len__(self) -> int:
        return len(self._lanes)

    def next_lane(self) -> Lane:
        """Return the lane under the cursor and advance the cursor."""
        lane = self._lanes[self._cursor]
        self._cursor = (self._cursor + 1) % len(self._lanes)
        return lane

    def dispatch(self, operation: Callable[..., Any], /, *args: Any, **kwargs: Any) -> asyncio.Future:
        """Append the operation to the next lane in cyclic order."""
        return self.next_lane().append(operation, *args, **kwargs)

    async def drain(self) -> None:
        """Wait for every lane to finish its queued work."""
        await asyncio.gather(*(lane.drain() for lane in self._lanes))

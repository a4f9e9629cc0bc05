"""Lanes — sequential chains of queued work, optionally spaced by a delay."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def delay(seconds: float, value: T | None = None) -> T | None:
    """Complete after ``seconds`` and return ``value``."""
    await asyncio.sleep(seconds)
    return value


async def invoke(operation: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Any:
    """Call an operation, awaiting the result if it is awaitable."""
    result = operation(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


class Lane:
    """A FIFO chain of operations, at most one executing at a time.

    Each ``append`` replaces the tail with a task that waits for the previous
    tail to settle (whatever its outcome) and then runs the new operation.
    The caller gets a separate future carrying only its own outcome.
    """

    def __init__(self, index: int = 0) -> None:
        self.index = index
        self._tail: asyncio.Task[None] | None = None

        # Stats
        self._dispatched = 0
        self._settled = 0
        self._failed = 0

    def append(self, operation: Callable[..., Any], /, *args: Any, **kwargs: Any) -> asyncio.Future:
        """Queue ``operation(*args, **kwargs)`` behind everything already queued.

        Must be called with a running event loop. Returns a future resolved
        with the operation's result or failed with its exception.
        """
        loop = asyncio.get_running_loop()
        result: asyncio.Future = loop.create_future()
        previous = self._tail
        self._tail = loop.create_task(self._run(previous, result, operation, args, kwargs))
        self._dispatched += 1
        logger.debug("Lane %d: queued %s (pending: %d)", self.index, operation, self.pending)
        return result

    async def _run(
        self,
        previous: asyncio.Task[None] | None,
        result: asyncio.Future,
        operation: Callable[..., Any],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        if previous is not None and not previous.done():
            # asyncio.wait never raises the awaited task's outcome
            await asyncio.wait([previous])

        try:
            value = await invoke(operation, *args, **kwargs)
        except asyncio.CancelledError:
            self._settle(failed=True)
            result.cancel()
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            # The operation cancelled itself; the lane keeps its spacing
        except Exception as e:
            self._settle(failed=True)
            if not result.done():
                result.set_exception(e)
        else:
            self._settle(failed=False)
            if not result.done():
                result.set_result(value)

        await self._after_settle()

    def _settle(self, failed: bool) -> None:
        self._settled += 1
        if failed:
            self._failed += 1

    async def _after_settle(self) -> None:
        """Hook run on the tail after each operation settles."""

    @property
    def pending(self) -> int:
        """Operations appended but not yet settled."""
        return self._dispatched - self._settled

    @property
    def idle(self) -> bool:
        return self._tail is None or self._tail.done()

    @property
    def dispatched(self) -> int:
        return self._dispatched

    @property
    def settled(self) -> int:
        return self._settled

    @property
    def failed(self) -> int:
        return self._failed

    async def drain(self) -> None:
        """Wait until everything appended so far, delays included, has finished."""
        if self._tail is not None and not self._tail.done():
            await asyncio.wait([self._tail])

    def __repr__(self) -> str:
        return f"{type(self).__name__}(index={self.index}, pending={self.pending})"


class DelayedLane(Lane):
    """Lane that waits ``interval`` seconds after each operation settles.

    Spacing is completion-to-start: the next operation in this lane starts no
    sooner than ``interval`` after the previous one settled. Callers' futures
    are not held back by the delay.
    """

    def __init__(self, interval: float, index: int = 0) -> None:
        super().__init__(index=index)
        self.interval = interval

    async def _after_settle(self) -> None:
        await delay(self.interval)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(index={self.index}, interval={self.interval}, "
            f"pending={self.pending})"
        )

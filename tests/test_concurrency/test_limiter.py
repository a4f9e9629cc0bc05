"""Tests for the concurrency limiter."""

import asyncio

import pytest
from pydantic import ValidationError

from asynclimit.concurrency.limiter import ConcurrencyLimiter, limit
from asynclimit.types import LimiterStats


class TestLimitConstruction:
    def test_default_concurrency(self, recorder):
        limited = limit(recorder)
        assert limited.concurrency == 1
        assert len(limited.lanes) == 1

    def test_pool_size(self, recorder):
        limited = limit(recorder, 4)
        assert isinstance(limited, ConcurrencyLimiter)
        assert len(limited.lanes) == 4

    @pytest.mark.parametrize("bad", [0, -1, 1.5, "2"])
    def test_rejects_invalid_concurrency(self, recorder, bad):
        with pytest.raises(ValidationError):
            limit(recorder, bad)

    def test_preserves_metadata(self):
        async def fetch_page(url):
            """Fetch a page."""
            return url

        limited = limit(fetch_page)
        assert limited.__name__ == "fetch_page"
        assert limited.__doc__ == "Fetch a page."
        assert limited.__wrapped__ is fetch_page

    def test_independent_wrappers(self, recorder):
        a = limit(recorder, 2)
        b = limit(recorder, 2)
        assert a.lanes[0] is not b.lanes[0]


class TestSequentialExclusivity:
    async def test_single_lane_never_overlaps(self, slow_recorder):
        limited = limit(slow_recorder)
        keys = list(range(6))
        await asyncio.gather(*(limited(k) for k in keys))

        assert slow_recorder.max_running == 1
        for prev, nxt in zip(keys, keys[1:]):
            assert slow_recorder.starts[nxt] >= slow_recorder.ends[prev]

    async def test_returns_future_immediately(self, recorder):
        limited = limit(recorder)
        future = limited("x")
        assert isinstance(future, asyncio.Future)
        assert await future == "x"

    async def test_sync_operation_becomes_async(self):
        limited = limit(lambda a, b=0: a - b)
        assert await limited(5, b=2) == 3


class TestBoundedParallelism:
    @pytest.mark.parametrize("concurrency", [2, 3, 5])
    async def test_never_exceeds_concurrency(self, slow_recorder, concurrency):
        limited = limit(slow_recorder, concurrency)
        await asyncio.gather(*(limited(k) for k in range(concurrency * 3 + 1)))
        assert slow_recorder.max_running == concurrency

    async def test_staggered_arrivals(self, slow_recorder):
        limited = limit(slow_recorder, 2)
        futures = []
        for k in range(8):
            futures.append(limited(k))
            await asyncio.sleep(0.005)
        await asyncio.gather(*futures)
        assert slow_recorder.max_running <= 2

    async def test_results_reach_own_callers(self, recorder):
        limited = limit(recorder, 3)
        results = await asyncio.gather(*(limited(k, 0.01 * (k % 3)) for k in range(9)))
        assert results == list(range(9))


class TestFailureIsolation:
    async def test_third_of_five_fails(self, slow_recorder):
        slow_recorder.fail_on = {3}
        limited = limit(slow_recorder)
        futures = [limited(k) for k in range(1, 6)]
        results = await asyncio.gather(*futures, return_exceptions=True)

        assert results[:2] == [1, 2]
        assert isinstance(results[2], ValueError)
        assert str(results[2]) == "failed 3"
        assert results[3:] == [4, 5]
        assert slow_recorder.order == [1, 2, 3, 4, 5]

    async def test_failure_in_one_lane_spares_others(self, recorder):
        recorder.fail_on = {0}
        limited = limit(recorder, 2)
        bad, good = limited(0), limited(1)
        with pytest.raises(ValueError):
            await bad
        assert await good == 1

    async def test_never_rejects(self, recorder):
        limited = limit(recorder)
        results = await asyncio.gather(*(limited(k) for k in range(200)))
        assert len(results) == 200


class TestRoundRobin:
    async def test_n_calls_hit_n_lanes(self, recorder):
        limited = limit(recorder, 3)
        futures = [limited(k) for k in range(3)]
        assert [lane.dispatched for lane in limited.lanes] == [1, 1, 1]

        futures.append(limited(3))
        assert [lane.dispatched for lane in limited.lanes] == [2, 1, 1]
        await asyncio.gather(*futures)

    async def test_first_call_uses_lane_zero(self, recorder):
        limited = limit(recorder, 4)
        future = limited("first")
        assert limited.lanes[0].dispatched == 1
        assert limited.pool.cursor == 1
        await future


class TestLimiterStats:
    async def test_stats(self, recorder):
        recorder.fail_on = {1}
        limited = limit(recorder, 2)
        await asyncio.gather(*(limited(k) for k in range(4)), return_exceptions=True)
        await limited.drain()

        stats = limited.stats
        assert isinstance(stats, LimiterStats)
        assert stats.lanes == 2
        assert stats.accepted == 4
        assert stats.rejected == 0
        assert stats.in_flight == 0
        assert stats.settled == 4
        assert stats.failed == 1
        assert stats.per_lane_dispatched == [2, 2]
        assert stats.rejection_rate == 0.0


class TestArgumentPassThrough:
    async def test_keywords_named_like_internals(self):
        def schedule(*, operation, self):
            return f"{operation}:{self}"

        limited = limit(schedule, 2)
        assert await limited(operation="build", self="me") == "build:me"

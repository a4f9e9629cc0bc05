"""Tests for round-robin lane pool."""

import asyncio

import pytest

from asynclimit.concurrency.lane import Lane
from asynclimit.concurrency.pool import LanePool


class TestLanePool:
    def test_requires_lanes(self):
        with pytest.raises(ValueError):
            LanePool([])

    def test_first_call_goes_to_lane_zero(self):
        pool = LanePool([Lane(index=i) for i in range(3)])
        assert pool.cursor == 0
        assert pool.next_lane().index == 0

    def test_cyclic_order(self):
        pool = LanePool([Lane(index=i) for i in range(3)])
        picked = [pool.next_lane().index for _ in range(7)]
        assert picked == [0, 1, 2, 0, 1, 2, 0]

    def test_single_lane(self):
        lane = Lane()
        pool = LanePool([lane])
        assert pool.next_lane() is lane
        assert pool.next_lane() is lane
        assert pool.cursor == 0

    def test_size_is_fixed(self):
        lanes = [Lane(index=i) for i in range(2)]
        pool = LanePool(lanes)
        lanes.append(Lane(index=2))
        assert len(pool) == 2
        assert isinstance(pool.lanes, tuple)

    async def test_dispatch_spreads_calls(self, recorder):
        pool = LanePool([Lane(index=i) for i in range(4)])
        results = await asyncio.gather(*(pool.dispatch(recorder, k) for k in range(5)))
        assert results == [0, 1, 2, 3, 4]
        assert [lane.dispatched for lane in pool.lanes] == [2, 1, 1, 1]

    async def test_dispatch_keyword_named_operation(self):
        pool = LanePool([Lane()])
        assert await pool.dispatch(lambda operation: operation, operation="x") == "x"

    async def test_drain(self, slow_recorder):
        pool = LanePool([Lane(index=i) for i in range(2)])
        for k in range(4):
            pool.dispatch(slow_recorder, k)
        await pool.drain()
        assert all(lane.idle for lane in pool.lanes)
        assert len(slow_recorder.ends) == 4

import asyncio

import pytest


class OperationRecorder:
    """Async operation that records when each call starts and ends."""

    def __init__(self, duration: float = 0.0, fail_on: set | None = None) -> None:
        self.duration = duration
        self.fail_on = fail_on or set()
        self.starts: dict[object, float] = {}
        self.ends: dict[object, float] = {}
        self.order: list[object] = []
        self.running = 0
        self.max_running = 0

    async def __call__(self, key, duration: float | None = None):
        loop = asyncio.get_running_loop()
        self.starts[key] = loop.time()
        self.order.append(key)
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            await asyncio.sleep(self.duration if duration is None else duration)
            if key in self.fail_on:
                raise ValueError(f"failed {key}")
            return key
        finally:
            self.running -= 1
            self.ends[key] = loop.time()


@pytest.fixture
def recorder():
    """Fast-settling recording operation."""
    return OperationRecorder()


@pytest.fixture
def slow_recorder():
    """Recording operation that takes 20ms per call."""
    return OperationRecorder(duration=0.02)


@pytest.fixture
def sample_limits_yaml(tmp_path):
    """Write a limits YAML with one profile of each kind and return its path."""
    content = """
limiters:
  search_api:
    kind: rate_limit
    description: "Search endpoint, 5 requests per second"
    interval: 1.0
    requests_per_interval: 5
    max_queue_size: 20
  db_writes:
    kind: limit
    concurrency: 4
"""
    path = tmp_path / "limits.yaml"
    path.write_text(content)
    return path

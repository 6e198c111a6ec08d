"""Shared fixtures for snreach tests."""

import pytest

from snreach.logging import LogConfig, LogLevel, MemoryHandler
from snreach.network import reachability


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def captured_logs():
    """Route tracker logs at every level into a memory buffer."""
    manager = reachability.logger.manager
    previous = manager.config
    handler = MemoryHandler()
    manager.add_handler("memory", handler)
    manager.configure(LogConfig(level=LogLevel.TRACE, handlers=["memory"]))
    yield handler
    manager.configure(previous)
    manager.remove_handler("memory")

from __future__ import annotations

from typing import Callable

import pytest

from flow_tracker.persistence import PersistenceBridge
from flow_tracker.storage import MemoryStore


class ManualClock:
    """A clock that only moves when told to."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class ManualScheduler:
    """Queues transition commits until the test runs them."""

    def __init__(self) -> None:
        self.pending: list[tuple[float, Callable[[], None]]] = []

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        self.pending.append((delay_seconds, callback))

    def run_next(self) -> float:
        delay, callback = self.pending.pop(0)
        callback()
        return delay

    def run_all(self) -> None:
        while self.pending:
            self.run_next()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def bridge(store: MemoryStore) -> PersistenceBridge:
    return PersistenceBridge(store)

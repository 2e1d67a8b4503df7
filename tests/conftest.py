"""
Shared pytest fixtures and configuration for job-limiter tests.

This module provides:
- A controllable clock so TTL expiry can be tested without sleeping
- In-memory lock store / scheduler / metrics sink wired to that clock
- A ready JobPipeline
- Settings cache isolation

Usage:
    Fixtures are auto-discovered by pytest:

    def test_something(pipeline, clock, sink):
        ...
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from job_limiter.core.config import clear_settings_cache
from job_limiter.job import Job
from job_limiter.metrics import CounterMetricsSink
from job_limiter.pipeline import JobPipeline
from job_limiter.scheduling.memory import InMemoryJobScheduler
from job_limiter.stores.memory import InMemoryLockStore

# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Clock
# =============================================================================


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# Collaborators
# =============================================================================


@pytest.fixture
def store(clock: FakeClock) -> InMemoryLockStore:
    return InMemoryLockStore(clock=clock)


@pytest.fixture
def scheduler(clock: FakeClock) -> InMemoryJobScheduler:
    return InMemoryJobScheduler(clock=clock)


@pytest.fixture
def sink() -> CounterMetricsSink:
    return CounterMetricsSink()


@pytest.fixture
def pipeline(scheduler: InMemoryJobScheduler, store: InMemoryLockStore) -> JobPipeline:
    return JobPipeline(scheduler, store)


def first_argument(job: Job) -> str:
    """Resource extractor used throughout the tests."""
    return str(job.arguments[0])


@pytest.fixture
def extractor():
    return first_argument


# =============================================================================
# Settings isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_cache(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Fresh settings for every test, unaffected by the developer's environment."""
    import os

    for key in list(os.environ):
        if key.startswith("JOB_LIMITER_"):
            monkeypatch.delenv(key)
    clear_settings_cache()
    yield
    clear_settings_cache()

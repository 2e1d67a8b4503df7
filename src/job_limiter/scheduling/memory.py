"""In-memory job scheduler.

Keeps submitted jobs in a due-time ordered list.  Nothing runs by itself:
callers pull due jobs with :meth:`InMemoryJobScheduler.pop_due` and hand them
to :meth:`JobPipeline.perform <job_limiter.pipeline.JobPipeline.perform>`.
This makes it the natural scheduler for tests and for single-process runs
driven by an explicit loop.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from job_limiter.job import Job
from job_limiter.scheduling.protocol import JobHandle


@dataclass(frozen=True)
class ScheduledJob:
    """A submitted job and the clock reading at which it becomes due."""

    job: Job
    due_at: float
    queue_name: str
    delay_seconds: float


class InMemoryJobScheduler:
    """Thread-safe in-memory scheduler with an injectable clock."""

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._scheduled: list[ScheduledJob] = []
        self._lock = threading.Lock()

    def submit(self, job: Job, delay_seconds: float, queue_name: str) -> JobHandle:
        """Store ``job`` until ``delay_seconds`` have passed on the clock."""
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must not be negative, got {delay_seconds}")
        entry = ScheduledJob(
            job=job,
            due_at=self._clock() + delay_seconds,
            queue_name=queue_name,
            delay_seconds=delay_seconds,
        )
        with self._lock:
            self._scheduled.append(entry)
            self._scheduled.sort(key=lambda item: item.due_at)
        return JobHandle(
            job_id=job.job_id,
            queue_name=queue_name,
            delay_seconds=delay_seconds,
            scheduled_at=datetime.now(UTC) + timedelta(seconds=delay_seconds),
            external_ref=entry,
        )

    @property
    def enqueued(self) -> list[ScheduledJob]:
        """All jobs not yet popped, in due order."""
        with self._lock:
            return list(self._scheduled)

    def due(self, now: float | None = None) -> list[ScheduledJob]:
        """Jobs due at ``now`` (defaults to the clock), without removing them."""
        now = self._clock() if now is None else now
        with self._lock:
            return [item for item in self._scheduled if item.due_at <= now]

    def pop_due(self, now: float | None = None) -> list[ScheduledJob]:
        """Remove and return the jobs due at ``now``."""
        now = self._clock() if now is None else now
        with self._lock:
            ready = [item for item in self._scheduled if item.due_at <= now]
            self._scheduled = [item for item in self._scheduled if item.due_at > now]
        return ready

    def pop_next(self) -> ScheduledJob | None:
        """Remove and return the earliest job regardless of due time."""
        with self._lock:
            if not self._scheduled:
                return None
            return self._scheduled.pop(0)

    def __len__(self) -> int:
        with self._lock:
            return len(self._scheduled)

"""Metrics hooks for gate outcomes.

The throttle gate reports each decision as an ``(outcome tag, job)``
observation.  Observations are fire-and-forget: :func:`safe_observe` swallows
and logs anything a hook raises, so a broken metrics pipeline can never turn
into a lost or duplicated job.

Tags:
    enqueue.enqueued      enqueue lock acquired, job submitted
    enqueue.dropped       equivalent job already waiting, submission dropped
    perform.performed     perform lock acquired, body runs
    perform.rescheduled   perform lock held elsewhere, retry registered
    perform.dropped       retry already registered, execution dropped
    perform.release_failed  enqueue lock release failed before performing

Example:
    >>> sink = CounterMetricsSink()
    >>> gate = ThrottleGate(store, duration=60, extract_resource_id=first_argument, metrics_hook=sink)
    >>> sink.count("enqueue.dropped")
    0
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, Union, runtime_checkable

from job_limiter.core.logging import get_logger

if TYPE_CHECKING:
    from job_limiter.job import Job

logger = get_logger(__name__)

ENQUEUE_ENQUEUED = "enqueue.enqueued"
ENQUEUE_DROPPED = "enqueue.dropped"
PERFORM_PERFORMED = "perform.performed"
PERFORM_RESCHEDULED = "perform.rescheduled"
PERFORM_DROPPED = "perform.dropped"
PERFORM_RELEASE_FAILED = "perform.release_failed"

ALL_TAGS = (
    ENQUEUE_ENQUEUED,
    ENQUEUE_DROPPED,
    PERFORM_PERFORMED,
    PERFORM_RESCHEDULED,
    PERFORM_DROPPED,
    PERFORM_RELEASE_FAILED,
)


@runtime_checkable
class MetricsSink(Protocol):
    """Receives gate outcome observations."""

    def observe(self, tag: str, job: Job) -> None: ...


MetricsHook = Union[MetricsSink, Callable[[str, "Job"], None]]


def safe_observe(hook: MetricsHook | None, tag: str, job: Job) -> None:
    """Deliver one observation; never raises."""
    if hook is None:
        return
    observe = getattr(hook, "observe", None)
    try:
        if callable(observe):
            observe(tag, job)
        else:
            hook(tag, job)
    except Exception as e:
        logger.warning(
            "metrics_hook_error",
            tag=tag,
            job_class=job.job_class,
            job_id=job.job_id,
            error=str(e),
        )


class NullMetricsSink:
    """Discards every observation."""

    def observe(self, tag: str, job: Job) -> None:
        return None


class CounterMetricsSink:
    """Thread-safe per-tag counters plus the ordered observation log.

    Attributes:
        events: ``(tag, job)`` pairs in the order they were observed
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self.events: list[tuple[str, Job]] = []
        self._lock = threading.Lock()

    def observe(self, tag: str, job: Job) -> None:
        with self._lock:
            self._counts[tag] = self._counts.get(tag, 0) + 1
            self.events.append((tag, job))

    def count(self, tag: str) -> int:
        with self._lock:
            return self._counts.get(tag, 0)

    @property
    def tags(self) -> list[str]:
        """Observed tags in order."""
        with self._lock:
            return [tag for tag, _ in self.events]

    def collect(self) -> list[dict[str, object]]:
        """Counter samples for export."""
        with self._lock:
            return [
                {"name": "job_limiter_decisions_total", "labels": {"outcome": tag}, "value": count}
                for tag, count in sorted(self._counts.items())
            ]

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
            self.events.clear()

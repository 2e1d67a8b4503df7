"""Job scheduler protocol.

┌──────────────────────────────────────────────────────────────────────────────┐
│  JOB SCHEDULER PROTOCOL                                                      │
│                                                                              │
│  The scheduler stores, delays and eventually executes job payloads.  It is  │
│  an external collaborator: the gates decide WHETHER a job is submitted,     │
│  the scheduler decides WHEN and WHERE it runs.                               │
│                                                                              │
│   ┌────────────────┐  submit(job, delay, queue)  ┌──────────────────────┐   │
│   │  JobPipeline   │ ──────────────────────────► │ InMemoryJobScheduler │   │
│   │  (after the    │                             └──────────────────────┘   │
│   │  enqueue gates)│  submit(job, delay, queue)  ┌──────────────────────┐   │
│   │                │ ──────────────────────────► │ CeleryJobScheduler   │   │
│   └────────────────┘                             └──────────────────────┘   │
│                                                                              │
│  The scheduler gives no feedback channel back to the deciding process:      │
│  once a job is dropped nobody is told, and once submitted it will run.      │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from job_limiter.job import Job


@dataclass(frozen=True)
class JobHandle:
    """Receipt for a submitted job."""

    job_id: str | None
    queue_name: str
    delay_seconds: float
    scheduled_at: datetime | None = None
    external_ref: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "job_id": self.job_id,
            "queue_name": self.queue_name,
            "delay_seconds": self.delay_seconds,
            "scheduled_at": self.scheduled_at.isoformat() if self.scheduled_at else None,
        }


@runtime_checkable
class JobScheduler(Protocol):
    """Protocol for job scheduler adapters.

    Implementations:
        - InMemoryJobScheduler: single-process, drives tests and local runs
        - CeleryJobScheduler: ``send_task`` with ``countdown``
    """

    def submit(self, job: Job, delay_seconds: float, queue_name: str) -> JobHandle:
        """Place ``job`` on ``queue_name`` to run after ``delay_seconds``.

        Must accept copies of already-submitted jobs with identical arguments
        and a different delay or queue.
        """
        ...

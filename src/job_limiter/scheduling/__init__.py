"""Job scheduler adapters."""

from job_limiter.scheduling.celery import CeleryJobScheduler, job_from_task_request
from job_limiter.scheduling.memory import InMemoryJobScheduler, ScheduledJob
from job_limiter.scheduling.protocol import JobHandle, JobScheduler

__all__ = [
    "CeleryJobScheduler",
    "InMemoryJobScheduler",
    "JobHandle",
    "JobScheduler",
    "ScheduledJob",
    "job_from_task_request",
]

"""
job-limiter - dedup and throttle gates for background jobs.

Two gates decide, per job, whether a submission or an execution goes ahead:

- the **dedup gate** drops a submission while an identical job is still
  waiting to start;
- the **throttle gate** runs a job at most once per window per resource and
  reschedules instead of dropping whenever dropping could lose the latest
  request.

Both are built on a key-value lock store with atomic set-if-absent and TTL
expiry (Redis ``SET NX EX`` in production).

Quick start::

    from job_limiter import InMemoryJobScheduler, InMemoryLockStore, Job, JobPipeline

    pipeline = JobPipeline(InMemoryJobScheduler(), InMemoryLockStore())
    pipeline.throttle_job("RefreshFeed", duration=60, extract_resource_id=lambda job: job.arguments[0])

    result = pipeline.enqueue(Job("RefreshFeed", ("feed-42",)))
    result.submitted        # False if an equivalent job is already waiting
"""

__version__ = "0.1.0"

from job_limiter.core.errors import (
    InvalidConfigError,
    LimiterError,
    MisconfiguredResourceExtractorError,
    StoreUnavailableError,
    UnsupportedBackendError,
)
from job_limiter.decision import PROCEED, Decision, Drop, Proceed, Reschedule
from job_limiter.dedup import DedupGate
from job_limiter.job import Job
from job_limiter.keys import ThrottlePhase, dedup_key, throttle_key
from job_limiter.metrics import CounterMetricsSink, MetricsSink, NullMetricsSink
from job_limiter.pipeline import (
    DedupInterceptor,
    EnqueueResult,
    Interceptor,
    JobPipeline,
    PerformResult,
    ThrottleInterceptor,
)
from job_limiter.scheduling import InMemoryJobScheduler, JobHandle, JobScheduler
from job_limiter.stores import InMemoryLockStore, LockInfo, LockStore
from job_limiter.throttle import ThrottleGate

__all__ = [
    "__version__",
    # Job & decisions
    "Job",
    "Decision",
    "Proceed",
    "Drop",
    "Reschedule",
    "PROCEED",
    # Gates
    "DedupGate",
    "ThrottleGate",
    "ThrottlePhase",
    "dedup_key",
    "throttle_key",
    # Pipeline
    "JobPipeline",
    "Interceptor",
    "DedupInterceptor",
    "ThrottleInterceptor",
    "EnqueueResult",
    "PerformResult",
    # Collaborators
    "LockStore",
    "LockInfo",
    "InMemoryLockStore",
    "JobScheduler",
    "JobHandle",
    "InMemoryJobScheduler",
    "MetricsSink",
    "NullMetricsSink",
    "CounterMetricsSink",
    # Errors
    "LimiterError",
    "StoreUnavailableError",
    "UnsupportedBackendError",
    "InvalidConfigError",
    "MisconfiguredResourceExtractorError",
]

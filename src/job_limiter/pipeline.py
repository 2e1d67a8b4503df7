"""
Job pipeline — run the gates around job submission and job execution.

Manifesto:
    Gates only decide; something has to act on the decision.  The pipeline
    wraps each lifecycle step in a chain of interceptors, each getting the
    job and a ``proceed`` continuation.  Calling ``proceed()`` lets the job
    through to the next interceptor (and finally to the scheduler or the job
    body); not calling it stops the job there.

Architecture:
    ::

        pipeline.enqueue(job)                 pipeline.perform(job, body)
            │                                     │
            ▼                                     ▼
        [interceptor 1].around_enqueue        [interceptor 1].around_perform
            │ proceed()                           │ proceed()
            ▼                                     ▼
        [interceptor 2] ...                   [interceptor 2] ...
            │                                     │
            ▼                                     ▼
        scheduler.submit(job, delay, queue)   body(*job.arguments)

    Interceptors run in registration order, outermost first.  Job classes
    with no registration go straight to the scheduler / body.

    A job that is not submitted or not executed comes back with its
    ``job_id`` cleared; the caller's own Job object is never modified.

    If the scheduler raises after a gate admitted the job, that gate's lock
    is released before the error propagates.  A lock without a queued job
    would drop every later submission for the rest of its TTL.

Tags:
    pipeline, middleware, interceptors, job-limiter
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, Protocol

from job_limiter.core.durations import DEFAULT_RESCHEDULE_MULTIPLIER, Duration, to_seconds
from job_limiter.core.errors import StoreUnavailableError
from job_limiter.core.logging import LogContext, get_logger
from job_limiter.decision import PROCEED, Decision, Drop, Proceed, Reschedule
from job_limiter.dedup import DedupGate
from job_limiter.job import Job
from job_limiter.keys import DEFAULT_NAMESPACE
from job_limiter.metrics import MetricsHook
from job_limiter.scheduling.protocol import JobHandle, JobScheduler
from job_limiter.stores.protocol import LockStore
from job_limiter.throttle import ResourceExtractor, ThrottleGate

logger = get_logger(__name__)


@dataclass(frozen=True)
class EnqueueResult:
    """Outcome of :meth:`JobPipeline.enqueue`.

    Attributes:
        job: The job as submitted, or with ``job_id=None`` if it was dropped
        decision: The decision that stopped the chain, or Proceed
        handle: Scheduler handle when the job was submitted
    """

    job: Job
    decision: Decision
    handle: JobHandle | None = None

    @property
    def submitted(self) -> bool:
        return self.handle is not None


@dataclass(frozen=True)
class PerformResult:
    """Outcome of :meth:`JobPipeline.perform`.

    Attributes:
        job: The job as executed, or with ``job_id=None`` if the body did not run
        decision: The decision that stopped the chain, or Proceed
        value: Return value of the job body
        rescheduled: Submission of the rescheduled copy, if any
    """

    job: Job
    decision: Decision
    value: Any = None
    rescheduled: EnqueueResult | None = None

    @property
    def performed(self) -> bool:
        return isinstance(self.decision, Proceed) and self.job.job_id is not None


EnqueueStep = Callable[[], EnqueueResult]
PerformStep = Callable[[], PerformResult]
Resubmit = Callable[[Job, float, str], EnqueueResult]


class Interceptor(Protocol):
    """Wraps the enqueue and perform steps of one job class."""

    def around_enqueue(self, job: Job, proceed: EnqueueStep) -> EnqueueResult: ...

    def around_perform(self, job: Job, proceed: PerformStep) -> PerformResult: ...


class DedupInterceptor:
    """Applies a :class:`DedupGate`: drop duplicate pending submissions."""

    def __init__(self, gate: DedupGate) -> None:
        self.gate = gate

    def around_enqueue(self, job: Job, proceed: EnqueueStep) -> EnqueueResult:
        decision = self.gate.on_enqueue(job)
        if isinstance(decision, Proceed):
            return _proceed_or_abandon(self.gate, job, proceed)
        return EnqueueResult(job=job.without_id(), decision=decision)

    def around_perform(self, job: Job, proceed: PerformStep) -> PerformResult:
        self.gate.on_before_perform(job)
        return proceed()


def _proceed_or_abandon(gate: DedupGate | ThrottleGate, job: Job, proceed: EnqueueStep) -> EnqueueResult:
    """Continue the enqueue chain; release the gate's lock if it raises.

    A failed release is logged and the original error propagates.
    """
    try:
        return proceed()
    except Exception:
        try:
            gate.abandon_enqueue(job)
        except StoreUnavailableError as release_error:
            logger.error("enqueue_abandon_failed", **release_error.context.to_dict(), error=str(release_error))
        raise


class ThrottleInterceptor:
    """Applies a :class:`ThrottleGate` and submits rescheduled copies.

    ``resubmit`` sends the copy back through the enqueue chain, where its
    ``skip_throttle_gate`` flag lets it pass the throttle gate.  If that
    submission raises, the reschedule lock is released before the error
    propagates, so no lock keeps promising a retry that was never queued.
    """

    def __init__(self, gate: ThrottleGate, resubmit: Resubmit) -> None:
        self.gate = gate
        self.resubmit = resubmit

    def around_enqueue(self, job: Job, proceed: EnqueueStep) -> EnqueueResult:
        decision = self.gate.on_enqueue(job)
        if isinstance(decision, Proceed):
            return _proceed_or_abandon(self.gate, job, proceed)
        return EnqueueResult(job=job.without_id(), decision=decision)

    def around_perform(self, job: Job, proceed: PerformStep) -> PerformResult:
        decision = self.gate.on_perform(job)

        match decision:
            case Proceed():
                result = proceed()
                if decision.release_error is not None and isinstance(result.decision, Proceed):
                    result = replace(result, decision=decision)
                return result

            case Reschedule(delay=delay, job=retry):
                try:
                    submission = self.resubmit(retry, delay, retry.queue_name)
                except Exception:
                    self.gate.abandon_reschedule(job)
                    raise
                logger.info(
                    "job_rescheduled",
                    retry_job_id=retry.job_id,
                    delay_seconds=delay,
                    submitted=submission.submitted,
                )
                return PerformResult(job=job.without_id(), decision=decision, rescheduled=submission)

            case _:
                return PerformResult(job=job.without_id(), decision=decision)


class JobPipeline:
    """Registry of gates per job class plus the enqueue / perform entry points.

    Example:
        >>> pipeline = JobPipeline(InMemoryJobScheduler(), InMemoryLockStore())
        >>> pipeline.limit_queue("SyncAccount", expiration=timedelta(minutes=2))
        >>> pipeline.throttle_job("RefreshFeed", duration=60, extract_resource_id=lambda j: j.arguments[0])
        >>> pipeline.enqueue(Job("RefreshFeed", ("A",))).submitted
        True
        >>> pipeline.enqueue(Job("RefreshFeed", ("A",))).submitted
        False
    """

    def __init__(
        self,
        scheduler: JobScheduler,
        store: LockStore,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        reschedule_multiplier: float = DEFAULT_RESCHEDULE_MULTIPLIER,
    ) -> None:
        self.scheduler = scheduler
        self.store = store
        self.namespace = namespace
        self.reschedule_multiplier = reschedule_multiplier
        self._interceptors: dict[str, list[Interceptor]] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_interceptor(self, job_class: str, interceptor: Interceptor) -> None:
        """Append an interceptor to ``job_class``'s chain (innermost so far)."""
        self._interceptors.setdefault(job_class, []).append(interceptor)

    def interceptors_for(self, job_class: str) -> list[Interceptor]:
        return list(self._interceptors.get(job_class, ()))

    def limit_queue(self, job_class: str, expiration: Duration) -> DedupGate:
        """Drop submissions of ``job_class`` while an identical one is pending."""
        gate = DedupGate(self.store, expiration, namespace=self.namespace)
        self.add_interceptor(job_class, DedupInterceptor(gate))
        logger.debug("dedup_registered", job_class=job_class, expiration_seconds=gate.expiration)
        return gate

    def throttle_job(
        self,
        job_class: str,
        duration: Duration,
        extract_resource_id: ResourceExtractor,
        metrics_hook: MetricsHook | None = None,
    ) -> ThrottleGate:
        """Run ``job_class`` at most once per ``duration`` per resource."""
        gate = ThrottleGate(
            self.store,
            duration,
            extract_resource_id,
            metrics_hook,
            self.reschedule_multiplier,
            namespace=self.namespace,
        )
        self.add_interceptor(job_class, ThrottleInterceptor(gate, self._resubmit))
        logger.debug("throttle_registered", job_class=job_class, duration_seconds=gate.duration)
        return gate

    def _resubmit(self, job: Job, delay: float, queue_name: str) -> EnqueueResult:
        return self.enqueue(job, delay=delay, queue=queue_name)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def enqueue(self, job: Job, delay: Duration | None = 0.0, queue: str | None = None) -> EnqueueResult:
        """Run the enqueue chain; submit the job if every interceptor proceeds."""
        if queue is not None and queue != job.queue_name:
            job = job.on_queue(queue)
        delay_seconds = to_seconds(delay, name="delay") if delay else 0.0
        interceptors = self.interceptors_for(job.job_class)

        def submit() -> EnqueueResult:
            handle = self.scheduler.submit(job, delay_seconds, job.queue_name)
            return EnqueueResult(job=job, decision=PROCEED, handle=handle)

        def step(index: int) -> EnqueueResult:
            if index == len(interceptors):
                return submit()
            return interceptors[index].around_enqueue(job, lambda: step(index + 1))

        with LogContext(job_class=job.job_class, job_id=job.job_id, queue=job.queue_name):
            result = step(0)
            if result.submitted:
                logger.info("job_enqueued", delay_seconds=delay_seconds)
            else:
                logger.info("job_enqueue_dropped", decision=result.decision.name, reason=_reason(result.decision))
        return result

    def perform(self, job: Job, body: Callable[..., Any]) -> PerformResult:
        """Run the perform chain; call ``body(*job.arguments)`` if every interceptor proceeds.

        Exceptions raised by ``body`` propagate unchanged.  The enqueue lock
        has already been released by then, so a failed body never blocks new
        submissions.
        """
        interceptors = self.interceptors_for(job.job_class)

        def run() -> PerformResult:
            return PerformResult(job=job, decision=PROCEED, value=body(*job.arguments))

        def step(index: int) -> PerformResult:
            if index == len(interceptors):
                return run()
            return interceptors[index].around_perform(job, lambda: step(index + 1))

        with LogContext(job_class=job.job_class, job_id=job.job_id, queue=job.queue_name):
            result = step(0)
            if result.performed:
                logger.info("job_performed")
            else:
                logger.info("job_not_performed", decision=result.decision.name, reason=_reason(result.decision))
        return result


def _reason(decision: Decision) -> str:
    if isinstance(decision, Drop):
        return decision.reason
    if isinstance(decision, Reschedule):
        return f"retry in {decision.delay:g}s"
    return ""

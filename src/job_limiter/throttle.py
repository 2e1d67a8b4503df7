"""
Throttle gate — bound how often a job runs per resource, without losing work.

Manifesto:
    Dropping a redundant job is only safe if an equivalent job is already
    guaranteed to run *after* the drop.  The throttle gate keeps that promise
    with three TTL locks per resource:

    - ``enqueue``: one job for this resource is waiting in this queue
    - ``perform``: a job for this resource ran within the last ``duration``
    - ``reschedule``: a retry for this resource is already registered

    A submission or execution is dropped only while an ``enqueue`` or
    ``reschedule`` lock is held, i.e. only while some other job is still
    due to run.

Architecture:
    ::

        on_enqueue(job)
          skip_throttle_gate? ──yes──► Proceed (no lock, no metric)
          acquire enqueue(res:queue)
             ├── True  → Proceed     enqueue.enqueued
             └── False → Drop        enqueue.dropped

        on_perform(job)
          release enqueue(res:queue)          ◄── before anything else
          acquire perform(res)
             ├── True  → Proceed     perform.performed
             └── False → acquire reschedule(res)
                    ├── True  → Reschedule(ttl × multiplier, copy)
                    │                 perform.rescheduled
                    └── False → Drop  perform.dropped

    Releasing the enqueue lock first means a submission arriving while the
    body runs is accepted, so the newest request is never swallowed by a
    job that has already read its inputs.

    State per resource (expiry-driven)::

        Idle ──enqueue──► EnqueueLocked ──perform──► Performing ──TTL──► Idle
                                              │
                                   contention └──► RescheduleLocked ──TTL──►

Guardrails:
    ❌ DON'T: Pick a multiplier of 1.0 or less
    ✅ DO: Keep it above 1.0 so the retry lands after the perform lock
       expired even when the store's clock runs ahead of ours

    ❌ DON'T: Throttle below one second
    ✅ DO: Use whole-second windows; fractional ones are rounded up to the
       store's resolution

    ❌ DON'T: Swallow store errors from an acquire
    ✅ DO: Propagate them; only the enqueue-lock release in perform is
       reported instead of raised, because the perform attempt must still
       happen

Tags:
    throttle, locking, reschedule, ttl, job-limiter
"""

from __future__ import annotations

from collections.abc import Callable

from job_limiter.core.durations import (
    DEFAULT_RESCHEDULE_MULTIPLIER,
    MIN_THROTTLE_DURATION,
    Duration,
    to_seconds,
    ttl_seconds,
)
from job_limiter.core.errors import (
    InvalidConfigError,
    MisconfiguredResourceExtractorError,
    StoreUnavailableError,
)
from job_limiter.core.logging import get_logger
from job_limiter.decision import Drop, Proceed, Reschedule
from job_limiter.job import Job
from job_limiter.keys import DEFAULT_NAMESPACE, ThrottlePhase, enqueue_resource_id, serialize_arguments, throttle_key
from job_limiter.locking import acquire_lock, release_lock
from job_limiter.metrics import (
    ENQUEUE_DROPPED,
    ENQUEUE_ENQUEUED,
    PERFORM_DROPPED,
    PERFORM_PERFORMED,
    PERFORM_RELEASE_FAILED,
    PERFORM_RESCHEDULED,
    MetricsHook,
    safe_observe,
)
from job_limiter.stores.protocol import LockStore

logger = get_logger(__name__)

ResourceExtractor = Callable[[Job], str]


class ThrottleGate:
    """Three-lock throttle for one job type.

    Example:
        >>> gate = ThrottleGate(store, duration=60, extract_resource_id=lambda job: job.arguments[0])
        >>> gate.on_enqueue(Job("RefreshFeed", ("A",)))
        Proceed(release_error=None)
        >>> gate.on_perform(job)
        Proceed(release_error=None)
    """

    def __init__(
        self,
        store: LockStore,
        duration: Duration,
        extract_resource_id: ResourceExtractor,
        metrics_hook: MetricsHook | None = None,
        reschedule_multiplier: float = DEFAULT_RESCHEDULE_MULTIPLIER,
        *,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        if not callable(extract_resource_id):
            raise InvalidConfigError("extract_resource_id", extract_resource_id, "extract_resource_id must be callable")
        if isinstance(reschedule_multiplier, bool) or not reschedule_multiplier > 1.0:
            raise InvalidConfigError(
                "reschedule_multiplier",
                reschedule_multiplier,
                f"reschedule_multiplier must be greater than 1.0, got {reschedule_multiplier!r}",
            )
        self.store = store
        self.duration = to_seconds(duration, name="duration", minimum=MIN_THROTTLE_DURATION)
        self.extract_resource_id = extract_resource_id
        self.metrics_hook = metrics_hook
        self.reschedule_multiplier = float(reschedule_multiplier)
        self.namespace = namespace

    @property
    def lock_ttl(self) -> int:
        """TTL written for every lock of this gate."""
        return ttl_seconds(self.duration)

    @property
    def reschedule_delay(self) -> float:
        """Seconds until a rescheduled copy becomes due.

        Derived from the TTL actually written, so the retry always lands
        after the perform and reschedule locks have expired.
        """
        return self.lock_ttl * self.reschedule_multiplier

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def resource_id_for(self, job: Job) -> str:
        """Run the extractor and validate its result.

        Raises:
            MisconfiguredResourceExtractorError: The extractor raised or
                returned a non-string.
        """
        try:
            resource_id = self.extract_resource_id(job)
        except Exception as e:
            raise MisconfiguredResourceExtractorError(
                f"Resource extractor failed for {job.job_class}: {e}",
                cause=e,
            ).with_context(job_class=job.job_class, job_id=job.job_id) from e

        if not isinstance(resource_id, str):
            raise MisconfiguredResourceExtractorError(
                f"Resource extractor for {job.job_class} returned {type(resource_id).__name__}, expected str",
            ).with_context(job_class=job.job_class, job_id=job.job_id, returned=repr(resource_id))
        return resource_id

    def key_for(self, job: Job, phase: ThrottlePhase, resource_id: str | None = None) -> str:
        if resource_id is None:
            resource_id = self.resource_id_for(job)
        if phase is ThrottlePhase.ENQUEUE:
            resource_id = enqueue_resource_id(resource_id, job.queue_name)
        return throttle_key(job.job_class, resource_id, phase, namespace=self.namespace)

    def _acquire(self, job: Job, phase: ThrottlePhase, resource_id: str) -> bool:
        key = self.key_for(job, phase, resource_id)
        try:
            return acquire_lock(
                self.store,
                key,
                serialize_arguments(job.arguments),
                self.lock_ttl,
                job,
            )
        except StoreUnavailableError as e:
            e.with_context(resource_id=resource_id, phase=phase.value)
            raise

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def on_enqueue(self, job: Job) -> Proceed | Drop:
        """Admit at most one pending job per resource and queue.

        Raises:
            MisconfiguredResourceExtractorError: Before any lock is touched.
            StoreUnavailableError: The acquire failed; no decision was made.
        """
        if job.skip_throttle_gate:
            logger.debug("throttle_bypass", job_class=job.job_class, job_id=job.job_id)
            return Proceed()

        resource_id = self.resource_id_for(job)
        if self._acquire(job, ThrottlePhase.ENQUEUE, resource_id):
            safe_observe(self.metrics_hook, ENQUEUE_ENQUEUED, job)
            logger.debug("throttle_decision", phase="enqueue", resource_id=resource_id, decision="proceed")
            return Proceed()

        safe_observe(self.metrics_hook, ENQUEUE_DROPPED, job)
        logger.debug("throttle_decision", phase="enqueue", resource_id=resource_id, decision="drop")
        return Drop(reason="pending job for resource")

    def on_perform(self, job: Job) -> Proceed | Drop | Reschedule:
        """Decide whether the job runs now, runs later, or is redundant.

        A failed release of the enqueue lock does not stop the decision: it is
        logged, emitted as ``perform.release_failed`` and attached to the
        returned decision as ``release_error``.

        Raises:
            MisconfiguredResourceExtractorError: Before any lock is touched.
            StoreUnavailableError: An acquire failed.  If the enqueue release
                failed too, its message is kept in the acquire error's
                context as ``release_error``.
        """
        resource_id = self.resource_id_for(job)
        release_error = self._release_enqueue(job, resource_id)

        try:
            decision = self._decide_perform(job, resource_id, release_error)
        except StoreUnavailableError as e:
            if release_error is not None:
                e.with_context(release_error=str(release_error))
            raise

        if release_error is not None:
            logger.error(
                "enqueue_lock_release_failed",
                decision=decision.name,
                **release_error.context.to_dict(),
                error=str(release_error),
            )
            safe_observe(self.metrics_hook, PERFORM_RELEASE_FAILED, job)
        return decision

    def _release_enqueue(self, job: Job, resource_id: str) -> StoreUnavailableError | None:
        key = self.key_for(job, ThrottlePhase.ENQUEUE, resource_id)
        try:
            release_lock(self.store, key, job)
        except StoreUnavailableError as e:
            return e.with_context(resource_id=resource_id, phase=ThrottlePhase.ENQUEUE.value)
        return None

    def _decide_perform(
        self,
        job: Job,
        resource_id: str,
        release_error: StoreUnavailableError | None,
    ) -> Proceed | Drop | Reschedule:
        if self._acquire(job, ThrottlePhase.PERFORM, resource_id):
            safe_observe(self.metrics_hook, PERFORM_PERFORMED, job)
            logger.debug("throttle_decision", phase="perform", resource_id=resource_id, decision="proceed")
            return Proceed(release_error=release_error)

        if self._acquire(job, ThrottlePhase.RESCHEDULE, resource_id):
            safe_observe(self.metrics_hook, PERFORM_RESCHEDULED, job)
            logger.debug(
                "throttle_decision",
                phase="perform",
                resource_id=resource_id,
                decision="reschedule",
                delay_seconds=self.reschedule_delay,
            )
            return Reschedule(
                delay=self.reschedule_delay,
                job=job.copy_for_reschedule(),
                release_error=release_error,
            )

        safe_observe(self.metrics_hook, PERFORM_DROPPED, job)
        logger.debug("throttle_decision", phase="perform", resource_id=resource_id, decision="drop")
        return Drop(reason="retry already registered for resource", release_error=release_error)

    def abandon_enqueue(self, job: Job) -> None:
        """Release the enqueue lock after the job could not be submitted.

        A job that bypassed the gate took no lock, so nothing is released.
        """
        if job.skip_throttle_gate:
            return
        resource_id = self.resource_id_for(job)
        release_lock(self.store, self.key_for(job, ThrottlePhase.ENQUEUE, resource_id), job)
        logger.warning("enqueue_abandoned", job_class=job.job_class, resource_id=resource_id)

    def abandon_reschedule(self, job: Job) -> None:
        """Release the reschedule lock after the retry could not be submitted."""
        resource_id = self.resource_id_for(job)
        release_lock(self.store, self.key_for(job, ThrottlePhase.RESCHEDULE, resource_id), job)
        logger.warning("reschedule_abandoned", job_class=job.job_class, resource_id=resource_id)

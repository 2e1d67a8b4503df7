"""
Dedup gate — collapse duplicate pending submissions of an identical job.

Manifesto:
    While one instance of a job (same class, same arguments) is enqueued but
    has not started, submitting it again achieves nothing: the waiting
    instance will do the same work.  The dedup gate suppresses those
    re-submissions and clears its window the moment execution begins, so a
    submission arriving after that point is eligible again and the latest
    request's effect is never lost.

Architecture:
    ::

        on_enqueue(job)                       on_before_perform(job)
        ──────────────                        ──────────────────────
        key = ns:class:sha1(args)             key = ns:class:sha1(args)
        acquire(key, args, ttl=expiration)    release(key)   (idempotent)
           ├── True  → Proceed
           └── False → Drop

    The lock lives from successful enqueue until the job starts, or until
    ``expiration`` elapses if the job never starts (crashed worker, lost
    message).  ``expiration`` therefore bounds how long a stuck lock can
    suppress submissions.

Guardrails:
    ❌ DON'T: Treat a StoreUnavailableError as Drop or Proceed
    ✅ DO: Let it propagate; the caller retries or aborts the submission

Tags:
    dedup, locking, enqueue, job-limiter
"""

from __future__ import annotations

from job_limiter.core.durations import Duration, to_seconds, ttl_seconds
from job_limiter.core.logging import get_logger
from job_limiter.decision import PROCEED, Drop, Proceed
from job_limiter.job import Job
from job_limiter.keys import DEFAULT_NAMESPACE, dedup_key, serialize_arguments
from job_limiter.locking import acquire_lock, release_lock
from job_limiter.stores.protocol import LockStore

logger = get_logger(__name__)


class DedupGate:
    """Enqueue-to-perform dedup window for one job type.

    Example:
        >>> gate = DedupGate(store, expiration=timedelta(minutes=2))
        >>> gate.on_enqueue(Job("SyncAccount", (7,)))
        Proceed(release_error=None)
        >>> gate.on_enqueue(Job("SyncAccount", (7,)))
        Drop(reason='duplicate pending', release_error=None)
    """

    def __init__(self, store: LockStore, expiration: Duration, *, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.store = store
        self.expiration = to_seconds(expiration, name="expiration")
        self.namespace = namespace

    def key_for(self, job: Job) -> str:
        return dedup_key(job.job_class, job.arguments, namespace=self.namespace)

    def on_enqueue(self, job: Job) -> Proceed | Drop:
        """Acquire the dedup lock; Proceed iff this call created it.

        Raises:
            StoreUnavailableError: The lock store failed; no decision was made.
        """
        key = self.key_for(job)
        if acquire_lock(self.store, key, serialize_arguments(job.arguments), ttl_seconds(self.expiration), job):
            logger.debug("dedup_decision", lock_key=key, decision="proceed")
            return PROCEED

        logger.debug("dedup_decision", lock_key=key, decision="drop")
        return Drop(reason="duplicate pending")

    def on_before_perform(self, job: Job) -> None:
        """Release the dedup lock so equivalent submissions are accepted again.

        Must run before the job body.  Releasing an absent lock is a no-op.

        Raises:
            StoreUnavailableError: The release failed.  The caller chooses
                between aborting the execution and running despite a lock
                that keeps suppressing submissions until it expires.
        """
        release_lock(self.store, self.key_for(job), job)

    def abandon_enqueue(self, job: Job) -> None:
        """Release the dedup lock after the job could not be submitted."""
        key = self.key_for(job)
        release_lock(self.store, key, job)
        logger.warning("enqueue_abandoned", job_class=job.job_class, lock_key=key)

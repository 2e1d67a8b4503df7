"""Store calls shared by both gates.

Wraps ``LockStore.acquire`` / ``LockStore.release`` so that every failure
reaching a gate is a :class:`StoreUnavailableError` carrying the job identity
and lock key.  Stores that raise plain ``ConnectionError`` / ``TimeoutError``
/ ``OSError`` are normalized here; anything else is a bug and propagates
untouched.
"""

from __future__ import annotations

from job_limiter.core.errors import StoreUnavailableError
from job_limiter.core.logging import get_logger
from job_limiter.job import Job
from job_limiter.stores.protocol import LockStore

logger = get_logger(__name__)

_TRANSPORT_ERRORS = (ConnectionError, TimeoutError, OSError)


def _with_job(error: StoreUnavailableError, key: str, job: Job) -> StoreUnavailableError:
    error.with_context(job_class=job.job_class, job_id=job.job_id, queue_name=job.queue_name, lock_key=key)
    return error


def acquire_lock(store: LockStore, key: str, value: str, ttl_seconds: int, job: Job) -> bool:
    """Atomic set-if-absent; True iff this call created ``key``."""
    try:
        acquired = store.acquire(key, value, ttl_seconds)
    except StoreUnavailableError as exc:
        _with_job(exc, key, job)
        raise
    except _TRANSPORT_ERRORS as exc:
        raise _with_job(StoreUnavailableError(f"Lock acquire failed for {key}", cause=exc), key, job) from exc
    logger.debug("lock_acquire", lock_key=key, ttl_seconds=ttl_seconds, acquired=bool(acquired))
    return bool(acquired)


def release_lock(store: LockStore, key: str, job: Job) -> None:
    """Delete ``key``; missing keys are fine."""
    try:
        store.release(key)
    except StoreUnavailableError as exc:
        _with_job(exc, key, job)
        raise
    except _TRANSPORT_ERRORS as exc:
        raise _with_job(StoreUnavailableError(f"Lock release failed for {key}", cause=exc), key, job) from exc
    logger.debug("lock_release", lock_key=key)

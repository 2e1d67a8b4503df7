"""
Factory functions that create adapters from settings.

Manifesto:
    Backend names are resolved exactly once, here, at startup.  The gates
    receive a ready :class:`~job_limiter.stores.protocol.LockStore` and
    never look at class names or settings themselves.  Adapter modules
    with heavier imports (``redis``, ``celery``) are imported inside the
    branch that needs them.

Features:
    - ``create_lock_store()`` — InMemory / Redis lock store
    - ``create_job_scheduler()`` — InMemory / Celery job scheduler
    - ``create_pipeline()`` — JobPipeline wired from both

Tags:
    job-limiter, configuration, factory-pattern, lazy-imports, redis, celery

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .components import LockStoreBackend, SchedulerBackend, resolve_lock_store_backend, resolve_scheduler_backend
from .settings import get_settings

if TYPE_CHECKING:
    from job_limiter.pipeline import JobPipeline
    from job_limiter.scheduling.protocol import JobScheduler
    from job_limiter.stores.protocol import LockStore

    from .settings import LimiterSettings


def create_lock_store(settings: LimiterSettings | None = None) -> LockStore:
    """Create the lock store selected by *settings.lock_store_backend*.

    Raises:
        UnsupportedBackendError: Unknown backend name.
    """
    settings = settings or get_settings()
    match resolve_lock_store_backend(settings.lock_store_backend):
        case LockStoreBackend.MEMORY:
            from job_limiter.stores.memory import InMemoryLockStore

            return InMemoryLockStore()
        case LockStoreBackend.REDIS:
            from job_limiter.stores.redis import RedisLockStore

            return RedisLockStore.from_url(settings.redis_url, socket_timeout=settings.redis_socket_timeout)


def create_job_scheduler(settings: LimiterSettings | None = None, celery_app: Any = None) -> JobScheduler:
    """Create the job scheduler selected by *settings.scheduler_backend*.

    For the Celery backend an existing app can be passed; otherwise one is
    built from ``celery_broker_url`` / ``celery_result_backend``.

    Raises:
        UnsupportedBackendError: Unknown backend name.
    """
    settings = settings or get_settings()
    match resolve_scheduler_backend(settings.scheduler_backend):
        case SchedulerBackend.MEMORY:
            from job_limiter.scheduling.memory import InMemoryJobScheduler

            return InMemoryJobScheduler()
        case SchedulerBackend.CELERY:
            from job_limiter.scheduling.celery import CeleryJobScheduler

            if celery_app is None:
                from celery import Celery

                celery_app = Celery(
                    "job_limiter",
                    broker=settings.celery_broker_url,
                    backend=settings.celery_result_backend,
                )
            return CeleryJobScheduler(celery_app)


def create_pipeline(
    settings: LimiterSettings | None = None,
    *,
    store: LockStore | None = None,
    scheduler: JobScheduler | None = None,
    celery_app: Any = None,
) -> JobPipeline:
    """Create a :class:`~job_limiter.pipeline.JobPipeline` from settings.

    Both backends are resolved before anything is constructed, so a
    misspelled scheduler name fails before a Redis connection is set up.
    """
    from job_limiter.pipeline import JobPipeline

    settings = settings or get_settings()
    resolve_lock_store_backend(settings.lock_store_backend)
    resolve_scheduler_backend(settings.scheduler_backend)

    return JobPipeline(
        scheduler if scheduler is not None else create_job_scheduler(settings, celery_app),
        store if store is not None else create_lock_store(settings),
        namespace=settings.key_namespace,
        reschedule_multiplier=settings.reschedule_multiplier,
    )

"""Centralized configuration and adapter factories.

Quick start::

    from job_limiter.core.config import create_pipeline, get_settings

    settings = get_settings()
    print(settings.lock_store_backend)   # "memory"

    pipeline = create_pipeline(settings)

Architecture::

    settings.py       LimiterSettings (Pydantic) + get_settings() cache
    components.py     Backend enums + resolve_*_backend()
    factory.py        create_lock_store / job_scheduler / pipeline
"""

from .components import (
    LockStoreBackend,
    SchedulerBackend,
    resolve_lock_store_backend,
    resolve_scheduler_backend,
)
from .factory import (
    create_job_scheduler,
    create_lock_store,
    create_pipeline,
)
from .settings import (
    LimiterSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Components
    "LockStoreBackend",
    "SchedulerBackend",
    "resolve_lock_store_backend",
    "resolve_scheduler_backend",
    # Settings
    "LimiterSettings",
    "get_settings",
    "clear_settings_cache",
    # Factory
    "create_lock_store",
    "create_job_scheduler",
    "create_pipeline",
]

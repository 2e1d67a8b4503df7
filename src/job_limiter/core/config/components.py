"""
Component backend enumerations and resolution.

Each enum represents a pluggable adapter dimension.  Names coming from
configuration are resolved exactly once, at startup; an unknown name is a
configuration error, never a per-job error.

Example::

    from job_limiter.core.config.components import resolve_lock_store_backend

    backend = resolve_lock_store_backend("redis")   # LockStoreBackend.REDIS
    resolve_lock_store_backend("memcached")         # UnsupportedBackendError
"""

from __future__ import annotations

from enum import Enum

from job_limiter.core.errors import UnsupportedBackendError

# ── Backend enumerations ─────────────────────────────────────────────────


class LockStoreBackend(str, Enum):
    """Supported lock store backends."""

    MEMORY = "memory"
    REDIS = "redis"


class SchedulerBackend(str, Enum):
    """Supported job scheduler backends."""

    MEMORY = "memory"
    CELERY = "celery"


# ── Resolution ───────────────────────────────────────────────────────────


def _resolve(enum_cls: type[Enum], kind: str, name: str | Enum) -> Enum:
    if isinstance(name, enum_cls):
        return name
    try:
        return enum_cls(str(name).strip().lower())
    except ValueError:
        raise UnsupportedBackendError(kind, str(name), [member.value for member in enum_cls]) from None


def resolve_lock_store_backend(name: str | LockStoreBackend) -> LockStoreBackend:
    """Map a configured lock store name to :class:`LockStoreBackend`.

    Raises:
        UnsupportedBackendError: If the name is not a known backend.
    """
    return _resolve(LockStoreBackend, "lock store", name)  # type: ignore[return-value]


def resolve_scheduler_backend(name: str | SchedulerBackend) -> SchedulerBackend:
    """Map a configured scheduler name to :class:`SchedulerBackend`.

    Raises:
        UnsupportedBackendError: If the name is not a known backend.
    """
    return _resolve(SchedulerBackend, "scheduler", name)  # type: ignore[return-value]

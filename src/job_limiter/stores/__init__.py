"""Lock store adapters.

``RedisLockStore`` is imported lazily so that ``import job_limiter.stores``
does not open any connection machinery until a Redis store is requested.
"""

from job_limiter.stores.memory import InMemoryLockStore
from job_limiter.stores.protocol import LockInfo, LockStore

__all__ = ["InMemoryLockStore", "LockInfo", "LockStore", "RedisLockStore"]


def __getattr__(name: str):
    if name == "RedisLockStore":
        from job_limiter.stores.redis import RedisLockStore

        return RedisLockStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

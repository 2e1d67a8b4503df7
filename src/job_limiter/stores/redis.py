"""Redis lock store.

``acquire`` is a single ``SET key value NX EX ttl``: atomic check-and-set
with expiry on the Redis side, so the deciding processes need no lock of
their own.  ``release`` is ``DEL``.

Every Redis failure (connection refused, socket timeout, READONLY replica,
...) is raised as :class:`~job_limiter.core.errors.StoreUnavailableError`
with the client exception chained.  The socket timeout bounds how long a
gate can block on the store.

Example::

    store = RedisLockStore.from_url("redis://localhost:6379/0", socket_timeout=1.0)
    if store.acquire("limiter:RefreshFeed:42:perform", '["42"]', ttl_seconds=60):
        ...
"""

from __future__ import annotations

from typing import Any

import redis
from redis.exceptions import RedisError

from job_limiter.core.errors import StoreUnavailableError
from job_limiter.core.logging import get_logger
from job_limiter.stores.protocol import LockInfo

logger = get_logger(__name__)


class RedisLockStore:
    """Redis-backed lock store.

    Thread-safe and process-safe via Redis atomic operations.

    Args:
        client: A ``redis.Redis`` client created with ``decode_responses=True``
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str = "redis://localhost:6379/0", *, socket_timeout: float = 1.0) -> RedisLockStore:
        """Build a store with its own connection pool."""
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client)

    def acquire(self, key: str, value: str, ttl_seconds: int) -> bool:
        """``SET key value NX EX ttl``; True iff the key was created."""
        try:
            created = self._client.set(key, value, ex=int(ttl_seconds), nx=True)
        except RedisError as exc:
            logger.error("store_unavailable", operation="acquire", lock_key=key, error=str(exc))
            raise StoreUnavailableError(f"Lock acquire failed for {key}", cause=exc).with_context(lock_key=key) from exc
        return bool(created)

    def release(self, key: str) -> None:
        """``DEL key``; deleting a missing key is a no-op."""
        try:
            self._client.delete(key)
        except RedisError as exc:
            logger.error("store_unavailable", operation="release", lock_key=key, error=str(exc))
            raise StoreUnavailableError(f"Lock release failed for {key}", cause=exc).with_context(lock_key=key) from exc

    def inspect(self, key: str) -> LockInfo | None:
        """Value and remaining TTL of ``key``."""
        try:
            pipe = self._client.pipeline(transaction=True)
            pipe.get(key)
            pipe.pttl(key)
            value, pttl = pipe.execute()
        except RedisError as exc:
            raise StoreUnavailableError(f"Lock inspect failed for {key}", cause=exc).with_context(lock_key=key) from exc

        if value is None:
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        ttl_remaining = pttl / 1000.0 if pttl is not None and pttl >= 0 else None
        return LockInfo(key=key, value=value, ttl_remaining=ttl_remaining)

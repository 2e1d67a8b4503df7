"""In-memory lock store.

Single-process implementation of :class:`~job_limiter.stores.protocol.LockStore`
with lazy TTL expiry, checked on every access.  The clock is injectable so
expiry-driven protocol behaviour can be tested without sleeping.

Guardrails:
    ❌ DON'T: Use InMemoryLockStore when enqueue and perform happen in
       different processes (no sharing)
    ✅ DO: Use RedisLockStore for any multi-process deployment
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from job_limiter.core.logging import get_logger
from job_limiter.stores.protocol import LockInfo

logger = get_logger(__name__)


class InMemoryLockStore:
    """Thread-safe dict-backed lock store.

    Example:
        store = InMemoryLockStore()
        store.acquire("limiter:Job:1:perform", "[1]", ttl_seconds=60)   # True
        store.acquire("limiter:Job:1:perform", "[1]", ttl_seconds=60)   # False
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._locks: dict[str, tuple[str, float]] = {}
        self._mutex = threading.Lock()

    def _live(self, key: str, now: float) -> tuple[str, float] | None:
        entry = self._locks.get(key)
        if entry is None:
            return None
        if now >= entry[1]:
            del self._locks[key]
            return None
        return entry

    def acquire(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Atomically create ``key`` unless a live entry exists."""
        with self._mutex:
            now = self._clock()
            if self._live(key, now) is not None:
                return False
            self._locks[key] = (value, now + ttl_seconds)
            return True

    def release(self, key: str) -> None:
        """Delete ``key``; no-op if missing."""
        with self._mutex:
            self._locks.pop(key, None)

    def inspect(self, key: str) -> LockInfo | None:
        """Return the live lock under ``key``."""
        with self._mutex:
            now = self._clock()
            entry = self._live(key, now)
            if entry is None:
                return None
            return LockInfo(key=key, value=entry[0], ttl_remaining=entry[1] - now)

    def keys(self) -> list[str]:
        """All live keys, sorted."""
        with self._mutex:
            now = self._clock()
            return sorted(key for key in list(self._locks) if self._live(key, now) is not None)

    def clear(self) -> None:
        """Drop every lock (testing only)."""
        with self._mutex:
            count = len(self._locks)
            self._locks.clear()
        logger.warning("locks_cleared", count=count)

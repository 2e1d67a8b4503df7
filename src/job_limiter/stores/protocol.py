"""Lock store protocol.

The lock store is the only shared mutable resource of the system and the
only synchronization mechanism: correctness of both gates rests on
``acquire`` being a single atomic set-if-absent-with-TTL.  A store that
checks and then sets in two steps is not a valid implementation.

Implementations:
    - :class:`~job_limiter.stores.memory.InMemoryLockStore` — single process
    - :class:`~job_limiter.stores.redis.RedisLockStore` — ``SET NX EX``
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class LockInfo:
    """Introspection view of a held lock."""

    key: str
    value: str
    ttl_remaining: float | None

    def to_dict(self) -> dict[str, object]:
        return {"key": self.key, "value": self.value, "ttl_remaining": self.ttl_remaining}


@runtime_checkable
class LockStore(Protocol):
    """Key-value store with atomic set-if-absent and TTL expiry."""

    def acquire(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Create ``key`` with ``value`` and a TTL unless it already exists.

        Returns:
            True iff this call created the key; False if a live key existed.

        Raises:
            StoreUnavailableError: The store could not be reached in time.
        """
        ...

    def release(self, key: str) -> None:
        """Delete ``key`` if present; a missing key is not an error.

        Raises:
            StoreUnavailableError: The store could not be reached in time.
        """
        ...

    def inspect(self, key: str) -> LockInfo | None:
        """Return the live lock under ``key``, or None."""
        ...

"""Tests for InMemoryLockStore."""

import threading

from job_limiter.stores import InMemoryLockStore, LockInfo, LockStore


class TestInMemoryLockStore:
    """Set-if-absent, release and lazy TTL expiry."""

    def test_satisfies_protocol(self, store):
        assert isinstance(store, LockStore)

    def test_acquire_free_key(self, store):
        assert store.acquire("k", "v", 60) is True

    def test_acquire_held_key(self, store):
        store.acquire("k", "first", 60)
        assert store.acquire("k", "second", 60) is False
        assert store.inspect("k").value == "first"

    def test_release_then_acquire(self, store):
        store.acquire("k", "v", 60)
        store.release("k")
        assert store.acquire("k", "v", 60) is True

    def test_release_missing_key_is_noop(self, store):
        store.release("missing")
        assert store.keys() == []

    def test_ttl_expiry(self, store, clock):
        store.acquire("k", "v", 60)
        clock.advance(59.9)
        assert store.acquire("k", "v", 60) is False
        clock.advance(0.1)
        assert store.acquire("k", "v", 60) is True

    def test_inspect(self, store, clock):
        store.acquire("k", '["A"]', 60)
        clock.advance(15)
        assert store.inspect("k") == LockInfo(key="k", value='["A"]', ttl_remaining=45.0)

    def test_inspect_expired(self, store, clock):
        store.acquire("k", "v", 1)
        clock.advance(1)
        assert store.inspect("k") is None

    def test_keys_skips_expired(self, store, clock):
        store.acquire("b", "v", 10)
        store.acquire("a", "v", 100)
        clock.advance(50)
        assert store.keys() == ["a"]

    def test_clear(self, store):
        store.acquire("a", "v", 10)
        store.acquire("b", "v", 10)
        store.clear()
        assert store.keys() == []

    def test_concurrent_acquire_single_winner(self):
        store = InMemoryLockStore()
        results: list[bool] = []
        barrier = threading.Barrier(16)

        def contend():
            barrier.wait()
            results.append(store.acquire("shared", "v", 60))

        threads = [threading.Thread(target=contend) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1
        assert results.count(False) == 15

"""Tests for ``job_limiter.stores.redis.RedisLockStore`` — SET NX EX / DEL.

The Redis client is a MagicMock; no server is needed.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

redis = pytest.importorskip("redis")

from redis.exceptions import ConnectionError as RedisConnectionError  # noqa: E402
from redis.exceptions import TimeoutError as RedisTimeoutError  # noqa: E402

from job_limiter.core.errors import StoreUnavailableError  # noqa: E402
from job_limiter.stores.protocol import LockStore  # noqa: E402
from job_limiter.stores.redis import RedisLockStore  # noqa: E402


class TestRedisLockStoreInit:
    def test_from_url(self):
        with pytest.MonkeyPatch.context() as mp:
            client = MagicMock()
            mock_from_url = MagicMock(return_value=client)
            mp.setattr(redis, "from_url", mock_from_url)

            store = RedisLockStore.from_url("redis://custom:6380/1", socket_timeout=2.0)

            mock_from_url.assert_called_once_with(
                "redis://custom:6380/1",
                decode_responses=True,
                socket_timeout=2.0,
                socket_connect_timeout=2.0,
            )
            assert store._client is client

    def test_satisfies_protocol(self):
        assert isinstance(RedisLockStore(MagicMock()), LockStore)


class TestRedisLockStoreOperations:
    @pytest.fixture
    def store_and_client(self):
        client = MagicMock()
        return RedisLockStore(client), client

    def test_acquire_sends_set_nx_ex(self, store_and_client):
        store, client = store_and_client
        client.set.return_value = True

        assert store.acquire("limiter:Job:A:perform", '["A"]', 60) is True
        client.set.assert_called_once_with("limiter:Job:A:perform", '["A"]', ex=60, nx=True)

    def test_acquire_held_key(self, store_and_client):
        store, client = store_and_client
        client.set.return_value = None

        assert store.acquire("k", "v", 60) is False

    def test_release_sends_del(self, store_and_client):
        store, client = store_and_client
        store.release("k")
        client.delete.assert_called_once_with("k")

    def test_inspect(self, store_and_client):
        store, client = store_and_client
        pipe = client.pipeline.return_value
        pipe.execute.return_value = ['["A"]', 45000]

        info = store.inspect("k")

        assert info.value == '["A"]'
        assert info.ttl_remaining == 45.0
        pipe.get.assert_called_once_with("k")
        pipe.pttl.assert_called_once_with("k")

    def test_inspect_missing(self, store_and_client):
        store, client = store_and_client
        client.pipeline.return_value.execute.return_value = [None, -2]
        assert store.inspect("k") is None

    def test_inspect_without_ttl(self, store_and_client):
        store, client = store_and_client
        client.pipeline.return_value.execute.return_value = [b"v", -1]
        info = store.inspect("k")
        assert info.value == "v"
        assert info.ttl_remaining is None


class TestRedisLockStoreFailures:
    """Every client failure becomes StoreUnavailableError."""

    @pytest.fixture
    def store_and_client(self):
        client = MagicMock()
        return RedisLockStore(client), client

    def test_acquire_timeout(self, store_and_client):
        store, client = store_and_client
        client.set.side_effect = RedisTimeoutError("timed out")

        with pytest.raises(StoreUnavailableError) as exc_info:
            store.acquire("k", "v", 60)

        assert exc_info.value.context.lock_key == "k"
        assert isinstance(exc_info.value.__cause__, RedisTimeoutError)
        assert exc_info.value.retryable is True

    def test_release_connection_error(self, store_and_client):
        store, client = store_and_client
        client.delete.side_effect = RedisConnectionError("refused")

        with pytest.raises(StoreUnavailableError):
            store.release("k")

    def test_inspect_connection_error(self, store_and_client):
        store, client = store_and_client
        client.pipeline.return_value.execute.side_effect = RedisConnectionError("refused")

        with pytest.raises(StoreUnavailableError):
            store.inspect("k")

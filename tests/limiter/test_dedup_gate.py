"""Tests for DedupGate."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from job_limiter.core.errors import InvalidConfigError, StoreUnavailableError
from job_limiter.decision import Drop, Proceed
from job_limiter.dedup import DedupGate
from job_limiter.job import Job
from job_limiter.keys import dedup_key


@pytest.fixture
def gate(store):
    return DedupGate(store, expiration=timedelta(minutes=2))


class TestDedupGateEnqueue:
    def test_first_submission_proceeds(self, gate, store):
        job = Job("SyncAccount", (7,))
        assert gate.on_enqueue(job) == Proceed()
        assert store.inspect(dedup_key("SyncAccount", (7,))).value == "[7]"

    def test_duplicate_pending_is_dropped(self, gate):
        gate.on_enqueue(Job("SyncAccount", (7,)))
        decision = gate.on_enqueue(Job("SyncAccount", (7,)))
        assert isinstance(decision, Drop)
        assert decision.reason == "duplicate pending"

    def test_different_arguments_independent(self, gate):
        gate.on_enqueue(Job("SyncAccount", (7,)))
        assert isinstance(gate.on_enqueue(Job("SyncAccount", (8,))), Proceed)

    def test_different_job_class_independent(self, gate):
        gate.on_enqueue(Job("SyncAccount", (7,)))
        assert isinstance(gate.on_enqueue(Job("ExportAccount", (7,))), Proceed)

    def test_queue_does_not_matter(self, gate):
        gate.on_enqueue(Job("SyncAccount", (7,), queue_name="a"))
        assert isinstance(gate.on_enqueue(Job("SyncAccount", (7,), queue_name="b")), Drop)

    def test_lock_expires(self, gate, clock):
        gate.on_enqueue(Job("SyncAccount", (7,)))
        clock.advance(120)
        assert isinstance(gate.on_enqueue(Job("SyncAccount", (7,))), Proceed)

    def test_ttl_is_expiration(self, gate):
        store = MagicMock()
        store.acquire.return_value = True
        DedupGate(store, expiration=90.7).on_enqueue(Job("SyncAccount", (7,)))
        store.acquire.assert_called_once_with(dedup_key("SyncAccount", (7,)), "[7]", 91)

    def test_namespace(self, store):
        gate = DedupGate(store, expiration=60, namespace="jobs")
        assert gate.key_for(Job("SyncAccount", (7,))).startswith("jobs:SyncAccount:")

    def test_invalid_expiration(self, store):
        with pytest.raises(InvalidConfigError):
            DedupGate(store, expiration=0)


class TestDedupGatePerform:
    def test_release_reopens_window(self, gate):
        job = Job("SyncAccount", (7,))
        gate.on_enqueue(job)
        gate.on_before_perform(job)
        assert isinstance(gate.on_enqueue(Job("SyncAccount", (7,))), Proceed)

    def test_release_is_idempotent(self, gate):
        job = Job("SyncAccount", (7,))
        gate.on_before_perform(job)
        gate.on_before_perform(job)

    def test_abandon_enqueue_reopens_window(self, gate, store):
        job = Job("SyncAccount", (7,))
        gate.on_enqueue(job)

        gate.abandon_enqueue(job)

        assert store.keys() == []
        assert isinstance(gate.on_enqueue(Job("SyncAccount", (7,))), Proceed)


class TestDedupGateStoreFailures:
    def test_acquire_failure_propagates_with_context(self):
        store = MagicMock()
        store.acquire.side_effect = StoreUnavailableError("timed out")
        job = Job("SyncAccount", (7,), job_id="j1")

        with pytest.raises(StoreUnavailableError) as exc_info:
            DedupGate(store, expiration=60).on_enqueue(job)

        assert exc_info.value.context.job_id == "j1"
        assert exc_info.value.context.lock_key == dedup_key("SyncAccount", (7,))

    def test_plain_connection_errors_are_normalized(self):
        store = MagicMock()
        store.release.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(StoreUnavailableError) as exc_info:
            DedupGate(store, expiration=60).on_before_perform(Job("SyncAccount", (7,)))

        assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)

    def test_other_exceptions_are_not_wrapped(self):
        store = MagicMock()
        store.acquire.side_effect = KeyError("bug")

        with pytest.raises(KeyError):
            DedupGate(store, expiration=60).on_enqueue(Job("SyncAccount", (7,)))

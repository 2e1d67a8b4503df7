"""Tests for the Job descriptor and decisions."""

import dataclasses

import pytest

from job_limiter.decision import PROCEED, Drop, Proceed, Reschedule
from job_limiter.job import Job


class TestJob:
    def test_defaults(self):
        job = Job("RefreshFeed")
        assert job.arguments == ()
        assert job.queue_name == "default"
        assert job.job_id
        assert job.skip_throttle_gate is False

    def test_fresh_identity_per_instance(self):
        assert Job("RefreshFeed").job_id != Job("RefreshFeed").job_id

    def test_list_arguments_become_tuple(self):
        assert Job("RefreshFeed", ["A", 1]).arguments == ("A", 1)

    def test_empty_job_class_rejected(self):
        with pytest.raises(ValueError):
            Job("")

    def test_immutable(self):
        job = Job("RefreshFeed")
        with pytest.raises(dataclasses.FrozenInstanceError):
            job.job_id = None

    def test_copy_for_reschedule(self):
        job = Job("RefreshFeed", ("A",), queue_name="feeds")
        retry = job.copy_for_reschedule()

        assert retry.arguments == job.arguments
        assert retry.queue_name == "feeds"
        assert retry.job_class == job.job_class
        assert retry.skip_throttle_gate is True
        assert retry.job_id != job.job_id
        assert job.skip_throttle_gate is False

    def test_without_id(self):
        job = Job("RefreshFeed", ("A",))
        cleared = job.without_id()
        assert cleared.job_id is None
        assert job.job_id is not None
        assert cleared.arguments == job.arguments

    def test_on_queue(self):
        assert Job("RefreshFeed").on_queue("feeds").queue_name == "feeds"


class TestDecision:
    def test_names(self):
        assert Proceed().name == "proceed"
        assert Drop().name == "drop"
        assert Reschedule(delay=1.0, job=Job("X")).name == "reschedule"

    def test_proceed_singleton_equals_new_instances(self):
        assert PROCEED == Proceed()
        assert PROCEED.release_error is None

    def test_match(self):
        retry = Job("RefreshFeed").copy_for_reschedule()
        match Reschedule(delay=75.0, job=retry):
            case Reschedule(delay=delay, job=job):
                assert delay == 75.0
                assert job is retry
            case _:
                pytest.fail("Reschedule did not match")

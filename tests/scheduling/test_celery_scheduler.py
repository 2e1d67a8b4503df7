"""Tests for CeleryJobScheduler — send_task mapping, no broker needed."""

from types import SimpleNamespace
from unittest.mock import MagicMock

from job_limiter.job import Job
from job_limiter.scheduling import CeleryJobScheduler, JobScheduler, job_from_task_request
from job_limiter.scheduling.celery import SKIP_THROTTLE_HEADER


class TestCeleryJobScheduler:
    def test_satisfies_protocol(self):
        assert isinstance(CeleryJobScheduler(MagicMock()), JobScheduler)

    def test_submit_sends_task(self):
        app = MagicMock()
        app.send_task.return_value = SimpleNamespace(id="task-1")
        scheduler = CeleryJobScheduler(app)
        job = Job("RefreshFeed", ("A", 2), queue_name="feeds", job_id="task-1")

        handle = scheduler.submit(job, 0.0, "feeds")

        app.send_task.assert_called_once_with(
            "RefreshFeed",
            args=["A", 2],
            kwargs={},
            countdown=None,
            queue="feeds",
            task_id="task-1",
            headers={SKIP_THROTTLE_HEADER: False},
        )
        assert handle.job_id == "task-1"
        assert handle.queue_name == "feeds"
        assert handle.external_ref is app.send_task.return_value

    def test_delay_becomes_countdown(self):
        app = MagicMock()
        scheduler = CeleryJobScheduler(app)
        retry = Job("RefreshFeed", ("A",)).copy_for_reschedule()

        scheduler.submit(retry, 75.0, "default")

        kwargs = app.send_task.call_args.kwargs
        assert kwargs["countdown"] == 75.0
        assert kwargs["headers"] == {SKIP_THROTTLE_HEADER: True}

    def test_task_name_mapping(self):
        app = MagicMock()
        scheduler = CeleryJobScheduler(app, task_names={"RefreshFeed": "feeds.refresh"})

        assert scheduler.task_name_for("RefreshFeed") == "feeds.refresh"
        assert scheduler.task_name_for("Other") == "Other"

        scheduler.submit(Job("RefreshFeed", ("A",)), 0.0, "default")
        assert app.send_task.call_args.args == ("feeds.refresh",)


class TestJobFromTaskRequest:
    def test_rebuilds_job(self):
        request = SimpleNamespace(
            id="task-9",
            headers={SKIP_THROTTLE_HEADER: True},
            delivery_info={"routing_key": "feeds"},
        )
        job = job_from_task_request("RefreshFeed", request, ["A"])

        assert job == Job("RefreshFeed", ("A",), queue_name="feeds", job_id="task-9", skip_throttle_gate=True)

    def test_missing_request_fields(self):
        job = job_from_task_request("RefreshFeed", SimpleNamespace(), ("A",))

        assert job.queue_name == "default"
        assert job.skip_throttle_gate is False
        assert job.job_id is not None

    def test_header_promoted_to_request_attribute(self):
        request = SimpleNamespace(id="t", headers=None, job_limiter_skip_throttle_gate=True)
        assert job_from_task_request("RefreshFeed", request, ()).skip_throttle_gate is True

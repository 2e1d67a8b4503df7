"""Celery job scheduler — submit gated jobs to Celery workers.

WHY
───
Celery already stores, delays and runs payloads.  This adapter only maps a
:class:`~job_limiter.job.Job` onto ``app.send_task``: the job class names the
task, the arguments become positional args, the delay becomes ``countdown``.

ARCHITECTURE
────────────
::

    CeleryJobScheduler(app)
      └── .submit(job, delay, queue)  ─ app.send_task(task_name,
                                            args, countdown, queue, task_id)

    The worker side calls JobPipeline.perform() from inside the task, so
    the perform gates run before the task body.

    The throttle bypass flag travels as a message header so a worker can
    rebuild the Job exactly as submitted (see job_from_task_request).
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from job_limiter.core.logging import get_logger
from job_limiter.job import Job, new_job_id
from job_limiter.scheduling.protocol import JobHandle

if TYPE_CHECKING:
    from celery import Celery

logger = get_logger(__name__)

SKIP_THROTTLE_HEADER = "job_limiter_skip_throttle_gate"


class CeleryJobScheduler:
    """Celery-backed scheduler.

    Example:
        >>> from celery import Celery
        >>> app = Celery("jobs", broker="redis://localhost:6379/1")
        >>> scheduler = CeleryJobScheduler(app, task_names={"RefreshFeed": "feeds.refresh"})
        >>> scheduler.submit(Job("RefreshFeed", ("feed-42",)), 12.5, "feeds")
    """

    def __init__(self, celery_app: Celery, *, task_names: dict[str, str] | None = None) -> None:
        self.celery_app = celery_app
        self._task_names = dict(task_names or {})

    def task_name_for(self, job_class: str) -> str:
        """Celery task name for a job class (the class name unless mapped)."""
        return self._task_names.get(job_class, job_class)

    def submit(self, job: Job, delay_seconds: float, queue_name: str) -> JobHandle:
        """Send the job to Celery, delayed by ``countdown``."""
        task_name = self.task_name_for(job.job_class)
        async_result = self.celery_app.send_task(
            task_name,
            args=list(job.arguments),
            kwargs={},
            countdown=delay_seconds or None,
            queue=queue_name,
            task_id=job.job_id,
            headers={SKIP_THROTTLE_HEADER: job.skip_throttle_gate},
        )
        logger.debug(
            "job_submitted",
            task_name=task_name,
            job_id=job.job_id,
            queue=queue_name,
            delay_seconds=delay_seconds,
        )
        return JobHandle(
            job_id=getattr(async_result, "id", job.job_id),
            queue_name=queue_name,
            delay_seconds=delay_seconds,
            scheduled_at=datetime.now(UTC) + timedelta(seconds=delay_seconds),
            external_ref=async_result,
        )


def job_from_task_request(job_class: str, request: Any, args: tuple[Any, ...] | list[Any]) -> Job:
    """Rebuild the submitted :class:`Job` inside a bound Celery task.

    Example::

        @app.task(name="RefreshFeed", bind=True)
        def refresh_feed(self, feed_id):
            job = job_from_task_request("RefreshFeed", self.request, (feed_id,))
            pipeline.perform(job, do_refresh)
    """
    headers = getattr(request, "headers", None) or {}
    skip = bool(headers.get(SKIP_THROTTLE_HEADER) or getattr(request, SKIP_THROTTLE_HEADER, False))
    return Job(
        job_class=job_class,
        arguments=tuple(args),
        queue_name=(getattr(request, "delivery_info", None) or {}).get("routing_key") or "default",
        job_id=getattr(request, "id", None) or new_job_id(),
        skip_throttle_gate=skip,
    )

"""Job descriptor - the unit the gates decide about.

A :class:`Job` names a logical job type (``job_class``), its ordered
arguments and the queue it is headed for.  It is immutable: the gates never
write to it.  "Do not submit / do not execute this instance" is expressed by
the pipeline returning :meth:`Job.without_id`, so the cleared identity token
stays inspectable by whoever submitted the job.

Example:
    >>> job = Job("RefreshFeed", ("feed-42",), queue_name="feeds")
    >>> retry = job.copy_for_reschedule()
    >>> retry.arguments == job.arguments, retry.skip_throttle_gate
    (True, True)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any
from uuid import uuid4


def new_job_id() -> str:
    """Generate a fresh identity token."""
    return str(uuid4())


@dataclass(frozen=True)
class Job:
    """Immutable job descriptor.

    Attributes:
        job_class: Logical job type; part of every lock key
        arguments: Ordered job arguments (lists are converted to tuples)
        queue_name: Destination queue
        job_id: Identity token; ``None`` means "not submitted / not executed"
        skip_throttle_gate: Set only on rescheduled copies so they pass the
            throttle gate's enqueue phase unconditionally
    """

    job_class: str
    arguments: tuple[Any, ...] = ()
    queue_name: str = "default"
    job_id: str | None = field(default_factory=new_job_id)
    skip_throttle_gate: bool = False

    def __post_init__(self) -> None:
        if not self.job_class:
            raise ValueError("job_class must be a non-empty string")
        if not isinstance(self.arguments, tuple):
            object.__setattr__(self, "arguments", tuple(self.arguments))

    def copy_for_reschedule(self) -> Job:
        """Copy with identical arguments and queue, marked to bypass the throttle gate."""
        return replace(self, job_id=new_job_id(), skip_throttle_gate=True)

    def without_id(self) -> Job:
        """Copy with the identity token cleared."""
        return replace(self, job_id=None)

    def on_queue(self, queue_name: str) -> Job:
        """Copy headed for a different queue."""
        return replace(self, queue_name=queue_name)

"""Gate decisions.

A gate evaluation yields exactly one of :class:`Proceed`, :class:`Drop` or
:class:`Reschedule`.  Decisions are ephemeral; the pipeline consumes them and
they are never persisted.

::

    Decision = Proceed | Drop | Reschedule(delay, job)

    match decision:
        case Proceed():
            run_body()
        case Reschedule(delay=delay, job=retry):
            scheduler.submit(retry, delay, retry.queue_name)
        case Drop():
            pass
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from job_limiter.core.errors import StoreUnavailableError
    from job_limiter.job import Job


@dataclass(frozen=True)
class Proceed:
    """Submit (enqueue phase) or execute (perform phase) the job."""

    release_error: StoreUnavailableError | None = None

    name = "proceed"


@dataclass(frozen=True)
class Drop:
    """Do not submit / do not execute; an equivalent run is already guaranteed."""

    reason: str = ""
    release_error: StoreUnavailableError | None = None

    name = "drop"


@dataclass(frozen=True)
class Reschedule:
    """Do not execute now; submit ``job`` after ``delay`` seconds instead."""

    delay: float
    job: Job
    release_error: StoreUnavailableError | None = None

    name = "reschedule"


Decision = Union[Proceed, Drop, Reschedule]

PROCEED = Proceed()

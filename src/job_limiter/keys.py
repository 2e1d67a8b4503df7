"""
Lock key construction and argument serialization.

Manifesto:
    A lock key is the only thing two processes share when deciding about
    the same resource, so every process must derive it identically.  Keys
    are scoped to ``(namespace, job class, resource id, phase)`` so
    unrelated resources never contend.

Architecture:
    ::

        Dedup gate:
            {ns}:{job_class}:{sha1(serialized arguments)}

        Throttle gate:
            {ns}:{job_class}:{resource_id}:{queue}:enqueue
            {ns}:{job_class}:{resource_id}:perform
            {ns}:{job_class}:{resource_id}:reschedule

    Only the enqueue phase is namespaced by queue: an instance waiting in
    one queue must not suppress submissions headed for another, while
    execution is throttled per resource regardless of queue.

Examples:
    >>> serialize_arguments(("feed-42", {"full": True}))
    '["feed-42",{"full":true}]'
    >>> throttle_key("RefreshFeed", "feed-42", ThrottlePhase.PERFORM)
    'limiter:RefreshFeed:feed-42:perform'

Tags:
    locking, keys, hashing, deduplication, job-limiter
"""

from __future__ import annotations

import hashlib
import json
from enum import Enum
from typing import Any

DEFAULT_NAMESPACE = "limiter"


class ThrottlePhase(str, Enum):
    """Lock slots of the throttle gate, one per lifecycle phase."""

    ENQUEUE = "enqueue"
    PERFORM = "perform"
    RESCHEDULE = "reschedule"


def serialize_arguments(arguments: tuple[Any, ...] | list[Any]) -> str:
    """Canonical JSON for an argument list.

    Mapping keys are sorted so equal arguments always serialize equally;
    values JSON cannot represent are rendered with ``str``.
    """
    return json.dumps(list(arguments), sort_keys=True, separators=(",", ":"), default=str)


def arguments_digest(arguments: tuple[Any, ...] | list[Any]) -> str:
    """SHA-1 hex digest of the serialized arguments."""
    return hashlib.sha1(serialize_arguments(arguments).encode("utf-8")).hexdigest()


def dedup_key(job_class: str, arguments: tuple[Any, ...] | list[Any], *, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Key of the dedup gate's lock for one exact job (class + arguments)."""
    return f"{namespace}:{job_class}:{arguments_digest(arguments)}"


def enqueue_resource_id(resource_id: str, queue_name: str) -> str:
    """Resource id of the throttle gate's enqueue slot."""
    return f"{resource_id}:{queue_name}"


def throttle_key(
    job_class: str,
    resource_id: str,
    phase: ThrottlePhase | str,
    *,
    namespace: str = DEFAULT_NAMESPACE,
) -> str:
    """Key of one throttle gate lock slot.

    For :attr:`ThrottlePhase.ENQUEUE` pass the queue-scoped id from
    :func:`enqueue_resource_id`.
    """
    phase_name = phase.value if isinstance(phase, ThrottlePhase) else ThrottlePhase(phase).value
    return f"{namespace}:{job_class}:{resource_id}:{phase_name}"

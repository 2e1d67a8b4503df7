"""Duration helpers.

Durations are accepted as :class:`datetime.timedelta` or as a number of
seconds.  Lock TTLs are whole seconds (the store's resolution), rounded up
so a lock never expires before its window ends.
"""

from __future__ import annotations

import math
from datetime import timedelta

from job_limiter.core.errors import InvalidConfigError

Duration = timedelta | int | float


def to_seconds(duration: Duration, *, name: str = "duration", minimum: float | None = None) -> float:
    """Normalize a duration to positive float seconds.

    Args:
        duration: ``timedelta`` or seconds
        name: Setting name used in error messages
        minimum: Smallest accepted value in seconds, if any

    Raises:
        InvalidConfigError: If the duration is not positive, not a number,
            or below ``minimum``.
    """
    if isinstance(duration, timedelta):
        seconds = duration.total_seconds()
    elif isinstance(duration, (int, float)) and not isinstance(duration, bool):
        seconds = float(duration)
    else:
        raise InvalidConfigError(name, duration, f"{name} must be a timedelta or seconds, got {duration!r}")

    if not math.isfinite(seconds) or seconds <= 0:
        raise InvalidConfigError(name, duration, f"{name} must be positive, got {duration!r}")
    if minimum is not None and seconds < minimum:
        raise InvalidConfigError(name, duration, f"{name} must be at least {minimum:g}s, got {duration!r}")
    return seconds


def ttl_seconds(seconds: float) -> int:
    """Whole-second TTL for the lock store (rounded up, at least 1)."""
    return max(1, math.ceil(seconds))


MIN_THROTTLE_DURATION = 1.0
"""Throttle windows are whole-second at the store; shorter ones are refused."""

DEFAULT_RESCHEDULE_MULTIPLIER = 1.25
"""Reschedule delay = lock TTL x multiplier; the margin against clock skew."""

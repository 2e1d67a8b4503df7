"""Tests for job_limiter.core.durations."""

from datetime import timedelta

import pytest

from job_limiter.core.durations import to_seconds, ttl_seconds
from job_limiter.core.errors import InvalidConfigError


class TestToSeconds:
    def test_timedelta(self):
        assert to_seconds(timedelta(minutes=1)) == 60.0

    def test_int_and_float(self):
        assert to_seconds(10) == 10.0
        assert to_seconds(12.5) == 12.5

    @pytest.mark.parametrize("value", [0, -1, timedelta(0), float("inf"), float("nan")])
    def test_non_positive_or_infinite_rejected(self, value):
        with pytest.raises(InvalidConfigError):
            to_seconds(value)

    @pytest.mark.parametrize("value", ["60", None, True])
    def test_wrong_type_rejected(self, value):
        with pytest.raises(InvalidConfigError) as exc_info:
            to_seconds(value, name="expiration")
        assert exc_info.value.key == "expiration"

    def test_minimum(self):
        assert to_seconds(1, minimum=1.0) == 1.0
        with pytest.raises(InvalidConfigError) as exc_info:
            to_seconds(0.5, name="duration", minimum=1.0)
        assert exc_info.value.key == "duration"


class TestTtlSeconds:
    @pytest.mark.parametrize(
        "seconds, expected",
        [(60.0, 60), (12.9, 13), (10.9, 11), (90.5, 91), (0.2, 1), (1.0, 1)],
    )
    def test_whole_seconds_rounded_up(self, seconds, expected):
        assert ttl_seconds(seconds) == expected

    @pytest.mark.parametrize("seconds", [1.0, 1.5, 10.9, 59.99, 3600.0])
    def test_never_shorter_than_window(self, seconds):
        assert ttl_seconds(seconds) >= seconds

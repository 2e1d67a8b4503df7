"""
Centralized settings for job-limiter.

Manifesto:
    One validated, cached settings object.  Backend names stay plain
    strings here and are resolved by the factories, so an unknown adapter
    surfaces as :class:`~job_limiter.core.errors.UnsupportedBackendError`
    at startup rather than as a pydantic validation error.

All fields can be set via ``JOB_LIMITER_*`` environment variables (e.g.
``JOB_LIMITER_LOCK_STORE_BACKEND=redis``) or a ``.env`` file.

Tags:
    job-limiter, configuration, settings, pydantic, caching, validation

Doc-Types:
    api-reference
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from job_limiter.core.durations import DEFAULT_RESCHEDULE_MULTIPLIER


class LimiterSettings(BaseSettings):
    """job-limiter configuration."""

    model_config = SettingsConfigDict(
        env_prefix="JOB_LIMITER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Component backends ───────────────────────────────────────
    lock_store_backend: str = Field(default="memory", description="memory | redis")
    scheduler_backend: str = Field(default="memory", description="memory | celery")

    # ── Redis ────────────────────────────────────────────────────
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_socket_timeout: float = Field(
        default=1.0,
        description="Seconds before a lock store call is treated as unavailable",
    )

    # ── Celery ───────────────────────────────────────────────────
    celery_broker_url: str = Field(default="redis://localhost:6379/1")
    celery_result_backend: str = Field(default="redis://localhost:6379/2")

    # ── Locking ──────────────────────────────────────────────────
    key_namespace: str = Field(default="limiter")
    reschedule_multiplier: float = Field(
        default=DEFAULT_RESCHEDULE_MULTIPLIER,
        description="Reschedule delay = duration x multiplier; margin against clock skew",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    @field_validator("reschedule_multiplier")
    @classmethod
    def _multiplier_above_one(cls, value: float) -> float:
        if value <= 1.0:
            raise ValueError("reschedule_multiplier must be greater than 1.0")
        return value

    @field_validator("redis_socket_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("redis_socket_timeout must be positive")
        return value

    @field_validator("key_namespace")
    @classmethod
    def _non_empty_namespace(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("key_namespace must not be empty")
        return value.strip()


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, LimiterSettings] = {}


def get_settings(*, _force_reload: bool = False) -> LimiterSettings:
    """Load, validate, and cache a :class:`LimiterSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = LimiterSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()

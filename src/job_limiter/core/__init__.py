"""job-limiter core -- errors, logging, durations and configuration.

Architecture::

    errors.py          Structured error hierarchy (LimiterError, StoreUnavailableError)
    logging.py         structlog configuration + contextvars helpers
    durations.py       timedelta / seconds normalization, lock TTLs
    config/            LimiterSettings, backend enums, adapter factories

``job_limiter.core.config`` is not imported here; it pulls in the pipeline
through its factories.
"""

from job_limiter.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    LimiterError,
    MisconfiguredResourceExtractorError,
    StoreUnavailableError,
    UnsupportedBackendError,
    is_retryable,
)
from job_limiter.core.logging import LogContext, configure_logging, get_logger

__all__ = [
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidConfigError",
    "LimiterError",
    "LogContext",
    "MisconfiguredResourceExtractorError",
    "StoreUnavailableError",
    "UnsupportedBackendError",
    "configure_logging",
    "get_logger",
    "is_retryable",
]

"""
Structured error types for job-limiter.

Every failure the gates can surface carries a category, an explicit retry
flag, structured context (job class, job id, lock key, ...) and the chained
underlying exception.  Integrators decide what to do with a failed decision;
the gates never decide for them by silently mapping an error to Proceed or
Drop.

Manifesto:
    - **Surface, don't guess:** A lock store failure is not a Drop and not a
      Proceed.  Either guess could break the dedup/throttle safety proof.
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry the lock key and job identity
    - **Error Chaining:** The store client's exception is kept as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       LimiterError                               │
        │  (category, retryable, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  StoreUnavailableError     ConfigError                          │
        │  (STORE, retryable)        (CONFIG)                              │
        │                                 │                                │
        │                            UnsupportedBackendError              │
        │                            InvalidConfigError                   │
        │                                                                  │
        │  MisconfiguredResourceExtractorError                            │
        │  (EXTRACTOR)                                                     │
        └─────────────────────────────────────────────────────────────────┘

Tags:
    error-handling, exception-hierarchy, retry-logic, error-context,
    job-limiter

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        STORE: Lock store unreachable, timed out, or rejected a command
        CONFIG: Unknown backend, invalid setting
        EXTRACTOR: Resource-id extractor raised or returned garbage
        INTERNAL: Bugs, unexpected state
    """

    STORE = "STORE"
    CONFIG = "CONFIG"
    EXTRACTOR = "EXTRACTOR"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Only fields that are set end up in ``to_dict()``, so the context can be
    passed straight into a structured log call.

    Examples:
        >>> ctx = ErrorContext(job_class="RefreshFeed", lock_key="limiter:RefreshFeed:42:perform")
        >>> ctx.to_dict()
        {'job_class': 'RefreshFeed', 'lock_key': 'limiter:RefreshFeed:42:perform'}

    Attributes:
        job_class: Logical job type the decision was made for
        job_id: Identity token of the job instance
        queue_name: Destination queue
        lock_key: Lock store key involved in the failing call
        resource_id: Resource id the lock is scoped to
        metadata: Additional key-value pairs
    """

    job_class: str | None = None
    job_id: str | None = None
    queue_name: str | None = None
    lock_key: str | None = None
    resource_id: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["job_class", "job_id", "queue_name", "lock_key", "resource_id"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class LimiterError(Exception):
    """
    Base exception for all job-limiter errors.

    Subclasses set ``default_category`` and ``default_retryable`` so callers
    can branch on ``error.retryable`` without knowing the concrete type.

    Examples:
        >>> error = LimiterError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.retryable
        False

        Adding context fluently:

        >>> error = StoreUnavailableError("SET failed").with_context(lock_key="limiter:Job:abc")
        >>> error.context.lock_key
        'limiter:Job:abc'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> LimiterError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StoreUnavailableError("SET failed").with_context(
                lock_key=key,
                job_class=job.job_class,
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# STORE ERRORS
# =============================================================================


class StoreUnavailableError(LimiterError):
    """
    The lock store call failed or timed out.

    Retryable: the caller may retry the whole submission (or the whole
    perform), but the gate itself never retries and never substitutes a
    decision.
    """

    default_category = ErrorCategory.STORE
    default_retryable = True


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(LimiterError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class UnsupportedBackendError(ConfigError):
    """A lock store or scheduler adapter name that is not implemented."""

    def __init__(self, kind: str, name: str, supported: list[str] | None = None):
        self.kind = kind
        self.name = name
        self.supported = supported or []
        message = f"Unsupported {kind} backend: {name!r}"
        if self.supported:
            message += f" (supported: {', '.join(self.supported)})"
        super().__init__(message)


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# EXTRACTOR ERRORS
# =============================================================================


class MisconfiguredResourceExtractorError(LimiterError):
    """
    ``extract_resource_id`` raised or returned something other than a string.

    Raised synchronously, before any lock is touched: the job is neither
    enqueued nor performed.
    """

    default_category = ErrorCategory.EXTRACTOR
    default_retryable = False


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, LimiterError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "LimiterError",
    "StoreUnavailableError",
    "ConfigError",
    "UnsupportedBackendError",
    "InvalidConfigError",
    "MisconfiguredResourceExtractorError",
    "is_retryable",
]

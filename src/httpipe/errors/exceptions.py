"""
Unified exception hierarchy for httpipe.

Provides typed exceptions with retry classification so policies can make
retry decisions without string matching wherever possible.
"""

import asyncio
from typing import TYPE_CHECKING

from httpipe.types import ErrorCategory

if TYPE_CHECKING:
    from httpipe.http.response import HttpResponse


class HttpPipelineError(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for retry decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        return self.category in (
            ErrorCategory.TRANSIENT,
            ErrorCategory.UNKNOWN,
        )

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Permanent Errors (Don't Retry)
# =============================================================================


class PermanentError(HttpPipelineError):
    """Base class for permanent/non-retriable errors."""

    category = ErrorCategory.PERMANENT


class InvalidArgumentError(PermanentError, ValueError):
    """Required construction input was missing or invalid."""

    pass


class MalformedUrlError(PermanentError, ValueError):
    """Rewriting or building a URL produced an invalid URL."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause, {"url": url} if url else None)
        self.url = url


class UnsupportedConfigurationError(PermanentError):
    """Configuration rejected while building a pipeline or transport."""

    pass


class PipelineStateError(PermanentError, RuntimeError):
    """A pipeline continuation was used in a way the chain forbids."""

    pass


# =============================================================================
# Network/Connection Errors (Transient)
# =============================================================================


class TransientError(HttpPipelineError):
    """Base class for transient/retriable errors."""

    category = ErrorCategory.TRANSIENT


class ThrottlingError(TransientError):
    """Rate limited (429) - should back off."""

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, cause, context)
        self.retry_after = retry_after  # Seconds to wait if provided


class TimeoutError(TransientError):
    """Transport timeout (transient, retryable)."""

    pass


class ConnectionError(TransientError):
    """Transport connection failure (transient, retryable)."""

    pass


# =============================================================================
# Response Errors
# =============================================================================


class HttpResponseError(HttpPipelineError):
    """
    A response was received but its status indicates failure.

    The category is derived from the status code so retry decisions
    can treat it like any other classified error.
    """

    def __init__(
        self,
        response: "HttpResponse",
        message: str | None = None,
        cause: Exception | None = None,
    ):
        status = response.status_code
        super().__init__(
            message or f"HTTP {status}",
            cause,
            {"status_code": status},
        )
        self.response = response
        self.status_code = status
        self.category = classify_http_status(status)


# =============================================================================
# Error Classification Utilities
# =============================================================================


def classify_http_status(status_code: int) -> ErrorCategory:
    """Classify HTTP status code into error category."""
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code == 401:
        return ErrorCategory.AUTH

    if status_code in (408, 429):
        return ErrorCategory.TRANSIENT

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT

    if status_code >= 500:
        return ErrorCategory.TRANSIENT

    return ErrorCategory.UNKNOWN


def classify_exception(exc: BaseException) -> ErrorCategory:
    """Classify an exception into error category."""
    if isinstance(exc, HttpPipelineError):
        return exc.category

    # Cancellation is a control signal, never something to retry
    if isinstance(exc, asyncio.CancelledError):
        return ErrorCategory.PERMANENT

    if isinstance(exc, (OSError, asyncio.TimeoutError)):
        return ErrorCategory.TRANSIENT

    exc_type = type(exc).__name__.lower()
    exc_str = str(exc).lower()

    connection_markers = (
        "connectionerror",
        "connection refused",
        "connection reset",
        "connection aborted",
        "serverdisconnected",
        "name resolution",
        "broken pipe",
    )
    if any(m in exc_type or m in exc_str for m in connection_markers):
        return ErrorCategory.TRANSIENT

    if "timeout" in exc_type or "timeout" in exc_str:
        return ErrorCategory.TRANSIENT

    if isinstance(exc, (ValueError, TypeError)):
        return ErrorCategory.PERMANENT

    return ErrorCategory.UNKNOWN


def is_retryable_error(exc: BaseException) -> bool:
    """
    Check if exception should be retried.

    Transient and unknown errors are retryable; permanent and auth
    errors are not (this layer has no credentials to refresh).
    """
    if isinstance(exc, HttpPipelineError):
        return exc.is_retryable

    return classify_exception(exc) in (
        ErrorCategory.TRANSIENT,
        ErrorCategory.UNKNOWN,
    )


def wrap_exception(
    exc: Exception,
    context: dict | None = None,
) -> HttpPipelineError:
    """Wrap a generic exception in the matching HttpPipelineError subclass."""
    if isinstance(exc, HttpPipelineError):
        if context:
            exc.context.update(context)
        return exc

    category = classify_exception(exc)
    context = dict(context or {})
    context["error_type"] = type(exc).__name__

    if isinstance(exc, asyncio.TimeoutError) or "timeout" in str(exc).lower():
        return TimeoutError(str(exc) or "Request timed out", cause=exc, context=context)

    if category == ErrorCategory.TRANSIENT:
        return ConnectionError(str(exc), cause=exc, context=context)

    if category == ErrorCategory.PERMANENT:
        return PermanentError(str(exc), cause=exc, context=context)

    return HttpPipelineError(str(exc), cause=exc, context=context)


__all__ = [
    "HttpPipelineError",
    "PermanentError",
    "InvalidArgumentError",
    "MalformedUrlError",
    "UnsupportedConfigurationError",
    "PipelineStateError",
    "TransientError",
    "ThrottlingError",
    "TimeoutError",
    "ConnectionError",
    "HttpResponseError",
    "classify_http_status",
    "classify_exception",
    "is_retryable_error",
    "wrap_exception",
]

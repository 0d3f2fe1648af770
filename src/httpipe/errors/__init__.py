"""
Error classification and exception hierarchy.

Provides:
- HttpPipelineError hierarchy for typed exceptions
- Classification utilities for retry decisions
"""

from httpipe.errors.exceptions import (
    ConnectionError,
    HttpPipelineError,
    HttpResponseError,
    InvalidArgumentError,
    MalformedUrlError,
    PermanentError,
    PipelineStateError,
    ThrottlingError,
    TimeoutError,
    TransientError,
    UnsupportedConfigurationError,
    classify_exception,
    classify_http_status,
    is_retryable_error,
    wrap_exception,
)
from httpipe.types import ErrorCategory

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "HttpPipelineError",
    "PermanentError",
    "TransientError",
    # Specific errors
    "InvalidArgumentError",
    "MalformedUrlError",
    "UnsupportedConfigurationError",
    "PipelineStateError",
    "ThrottlingError",
    "TimeoutError",
    "ConnectionError",
    "HttpResponseError",
    # Functions
    "classify_http_status",
    "classify_exception",
    "is_retryable_error",
    "wrap_exception",
]

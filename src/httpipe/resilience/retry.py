"""
Retry configuration with exception-aware decisions.

Uses the exception hierarchy to decide what to retry:
- Transient errors: retry with exponential backoff and equal jitter
- Throttling errors: honor the server-provided Retry-After when present
- Permanent errors: fail immediately (no retry)
"""

import random
from dataclasses import dataclass, field

from httpipe.errors.exceptions import (
    HttpPipelineError,
    ThrottlingError,
    classify_exception,
)
from httpipe.types import ErrorCategory

RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0

    # If True, don't retry permanent errors even if attempts remain
    respect_permanent: bool = True

    # If True, use retry_after from ThrottlingError when available
    respect_retry_after: bool = True

    # Response statuses that trigger another attempt
    retry_statuses: frozenset[int] = RETRYABLE_STATUSES

    # Optional set of exception types to always retry (overrides classification)
    always_retry: set[type[Exception]] = field(default_factory=set)

    # Optional set of exception types to never retry (overrides classification)
    never_retry: set[type[Exception]] = field(default_factory=set)

    def __post_init__(self):
        """Ensure proper types from YAML/env vars."""
        self.max_attempts = int(self.max_attempts)
        self.base_delay = float(self.base_delay)
        self.max_delay = float(self.max_delay)
        self.exponential_base = float(self.exponential_base)
        # bool('false') would be True, so only convert non-bools
        if not isinstance(self.respect_permanent, bool):
            self.respect_permanent = str(self.respect_permanent).lower() in ("1", "true", "yes")
        if not isinstance(self.respect_retry_after, bool):
            self.respect_retry_after = str(self.respect_retry_after).lower() in ("1", "true", "yes")
        self.retry_statuses = frozenset(int(s) for s in self.retry_statuses)

        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("retry delays must be >= 0")

    def get_delay(self, attempt: int, error: Exception | None = None) -> float:
        """
        Calculate delay with equal jitter to prevent thundering herd.

        Args:
            attempt: 0-indexed attempt number
            error: Optional exception to check for retry_after

        Returns:
            Delay in seconds
        """
        if (
            self.respect_retry_after
            and isinstance(error, ThrottlingError)
            and error.retry_after
        ):
            return min(error.retry_after, self.max_delay)

        base_delay = self.base_delay * (self.exponential_base**attempt)

        # Equal jitter: half fixed, half random
        jitter = random.uniform(0, base_delay / 2)
        delay = (base_delay / 2) + jitter

        return min(delay, self.max_delay)

    def should_retry(self, error: Exception, attempt: int) -> bool:
        """
        Determine if error should be retried.

        Args:
            error: The exception that occurred
            attempt: 0-indexed current attempt

        Returns:
            True if should retry
        """
        if attempt >= self.max_attempts - 1:
            return False

        if self.never_retry and isinstance(error, tuple(self.never_retry)):
            return False

        if self.always_retry and isinstance(error, tuple(self.always_retry)):
            return True

        if isinstance(error, HttpPipelineError):
            if self.respect_permanent and not error.is_retryable:
                return False
            return error.is_retryable

        category = classify_exception(error)
        if self.respect_permanent and category == ErrorCategory.PERMANENT:
            return False

        return category in (
            ErrorCategory.TRANSIENT,
            ErrorCategory.UNKNOWN,
        )

    def should_retry_status(self, status_code: int, attempt: int) -> bool:
        """Determine if a response status should trigger another attempt."""
        return attempt < self.max_attempts - 1 and status_code in self.retry_statuses


# Default configurations
DEFAULT_RETRY = RetryConfig(max_attempts=3, base_delay=1.0)
NO_RETRY = RetryConfig(max_attempts=1)


@dataclass
class RetryStats:
    """Statistics from a retried call."""

    attempts: int = 0
    total_delay: float = 0.0
    final_error: Exception | None = None
    success: bool = False

    @property
    def retried(self) -> bool:
        """Whether any retries occurred."""
        return self.attempts > 1

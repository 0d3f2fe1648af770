"""
Resilience primitives.

Provides:
- RetryConfig: backoff, jitter, and retry classification used by RetryPolicy
- RetryStats: per-call retry statistics
"""

from httpipe.resilience.retry import (
    DEFAULT_RETRY,
    NO_RETRY,
    RETRYABLE_STATUSES,
    RetryConfig,
    RetryStats,
)

__all__ = [
    "DEFAULT_RETRY",
    "NO_RETRY",
    "RETRYABLE_STATUSES",
    "RetryConfig",
    "RetryStats",
]

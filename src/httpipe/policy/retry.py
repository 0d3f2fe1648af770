"""
Retry policy.

Retries run as an internal loop: every attempt sends a fresh copy of the
original request through a fresh continuation (next_policy.clone()), so
the downstream chain is traversed exactly once per attempt.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

from httpipe.errors.exceptions import (
    HttpPipelineError,
    classify_exception,
    is_retryable_error,
)
from httpipe.http.request import BytesBody
from httpipe.http.response import HttpResponse
from httpipe.policy.base import HttpPipelinePolicy
from httpipe.resilience.retry import DEFAULT_RETRY, RetryConfig, RetryStats

logger = logging.getLogger(__name__)

RETRY_COUNT_KEY = "retry_count"
RETRY_STATS_KEY = "retry_stats"


def parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header given as seconds or an HTTP date."""
    if not value:
        return None
    value = value.strip()
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return max(0.0, (when - datetime.now(UTC)).total_seconds())


def _error_category(error: Exception) -> str:
    if isinstance(error, HttpPipelineError):
        return error.category.value
    return classify_exception(error).value


class RetryPolicy(HttpPipelinePolicy):
    """
    Retries failed attempts with exponential backoff.

    An attempt fails when the rest of the chain raises a retryable error or
    returns a status in config.retry_statuses. Discarded responses are
    closed before the next attempt. Cancellation is never retried.

    Requests whose body is a one-shot stream are sent once: the first
    attempt consumes the stream, so a resend would upload an empty body.

    Args:
        config: Retry configuration (defaults to DEFAULT_RETRY)
        sleep: Coroutine function used to wait between attempts
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config or DEFAULT_RETRY
        self._sleep = sleep

    @property
    def config(self) -> RetryConfig:
        return self._config

    async def process(self, context, next_policy) -> HttpResponse:
        config = self._config
        original = context.request
        stats = RetryStats()
        context.set_data(RETRY_STATS_KEY, stats)
        replayable = original.body is None or isinstance(original.body, BytesBody)
        if not replayable:
            logger.debug(
                "Streaming body for %s %s cannot be replayed, sending once",
                original.method.value,
                original.url,
                extra={"operation": "retry", "http_url": str(original.url)},
            )

        for attempt in range(config.max_attempts):
            stats.attempts = attempt + 1
            context.set_data(RETRY_COUNT_KEY, attempt)
            context.request = original.buffer()

            try:
                response = await next_policy.clone().process()
            except Exception as e:
                stats.final_error = e
                category = _error_category(e)
                if not replayable or not config.should_retry(e, attempt):
                    self._log_failure(context, e, category, attempt)
                    raise
                delay = config.get_delay(attempt, e)
                logger.warning(
                    "Retryable error for %s %s, will retry",
                    original.method.value,
                    original.url,
                    extra={
                        "operation": "retry",
                        "http_url": str(original.url),
                        "attempt": attempt + 1,
                        "max_attempts": config.max_attempts,
                        "error_category": category,
                        "delay_seconds": round(delay, 2),
                        "delay_source": "exponential_backoff",
                        "error_message": str(e)[:200],
                    },
                )
            else:
                if not replayable or not config.should_retry_status(response.status_code, attempt):
                    stats.success = response.status_code < 400
                    if attempt > 0:
                        logger.info(
                            "Retry finished for %s %s after %d attempts",
                            original.method.value,
                            original.url,
                            attempt + 1,
                            extra={
                                "operation": "retry",
                                "attempt": attempt + 1,
                                "total_attempts": config.max_attempts,
                                "http_status": response.status_code,
                            },
                        )
                    return response

                delay, source = self._status_delay(response, attempt)
                logger.warning(
                    "Retryable status %d for %s %s, will retry",
                    response.status_code,
                    original.method.value,
                    original.url,
                    extra={
                        "operation": "retry",
                        "http_url": str(original.url),
                        "http_status": response.status_code,
                        "attempt": attempt + 1,
                        "max_attempts": config.max_attempts,
                        "delay_seconds": round(delay, 2),
                        "delay_source": source,
                    },
                )
                await response.close()

            stats.total_delay += delay
            await self._sleep(delay)

        # Unreachable: the final attempt either returns or raises
        raise RuntimeError("retry loop exited without a result")

    def _status_delay(self, response: HttpResponse, attempt: int) -> tuple[float, str]:
        config = self._config
        if config.respect_retry_after:
            retry_after = parse_retry_after(response.header_value("Retry-After"))
            if retry_after is not None:
                return min(retry_after, config.max_delay), "server"
        return config.get_delay(attempt), "exponential_backoff"

    def _log_failure(self, context, error: Exception, category: str, attempt: int) -> None:
        retryable = is_retryable_error(error)
        message = (
            "Max retries exhausted for %s %s" if retryable else "Permanent error for %s %s, not retrying"
        )
        logger.log(
            logging.ERROR if retryable else logging.WARNING,
            message,
            context.request.method.value,
            context.request.url,
            extra={
                "operation": "retry",
                "attempt": attempt + 1,
                "max_attempts": self._config.max_attempts,
                "error_category": category,
                "error_type": type(error).__name__,
                "error_message": str(error)[:200],
            },
        )

    def __repr__(self) -> str:
        return f"RetryPolicy(max_attempts={self._config.max_attempts})"

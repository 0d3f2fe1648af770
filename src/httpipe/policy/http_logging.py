"""Policy that logs each request, its response, and its failures."""

import logging
import time

from httpipe.http.response import HttpResponse
from httpipe.logging.utilities import log_exception, log_with_context
from httpipe.policy.base import HttpPipelinePolicy

logger = logging.getLogger(__name__)


class HttpLoggingPolicy(HttpPipelinePolicy):
    """
    Logs outbound requests and inbound responses.

    Failures are logged and re-raised unchanged. Query strings are logged
    through the http_url field, which JSONFormatter redacts.

    Args:
        level: Level for request/response lines
        log_headers: Include request header names in the request line extras
    """

    def __init__(self, level: int = logging.INFO, log_headers: bool = False) -> None:
        self._level = level
        self._log_headers = log_headers

    async def process(self, context, next_policy) -> HttpResponse:
        request = context.request
        method = request.method.value
        url = str(request.url)

        extras = {"http_method": method, "http_url": url}
        if self._log_headers:
            extras["headers"] = request.headers.names()
        log_with_context(logger, self._level, f"--> {method} {url}", **extras)

        start = time.perf_counter()
        try:
            response = await next_policy.process()
        except Exception as e:
            log_exception(
                logger,
                e,
                f"<-- {method} {url} failed",
                level=logging.WARNING,
                include_traceback=False,
                http_method=method,
                http_url=url,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        content_length = response.header_value("Content-Length")
        log_with_context(
            logger,
            self._level,
            f"<-- {response.status_code} {method} {url}",
            http_method=method,
            http_url=url,
            http_status=response.status_code,
            content_length=int(content_length) if content_length and content_length.isdigit() else None,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response

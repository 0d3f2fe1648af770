"""
Wire-level debug logging through aiohttp's tracing hooks.

Every event is logged at DEBUG on the "httpipe.transport.wiretap" logger,
so enabling the wiretap costs nothing unless that logger is turned up.
"""

import logging

import aiohttp

logger = logging.getLogger("httpipe.transport.wiretap")


async def _on_request_start(session, trace_config_ctx, params) -> None:
    logger.debug(
        "REQUEST %s %s headers=%s",
        params.method,
        params.url,
        dict(params.headers),
        extra={"http_method": params.method, "http_url": str(params.url), "wiretap": True},
    )


async def _on_request_chunk_sent(session, trace_config_ctx, params) -> None:
    logger.debug(
        "SENT %d bytes %s %s",
        len(params.chunk),
        params.method,
        params.url,
        extra={"content_length": len(params.chunk), "wiretap": True},
    )


async def _on_response_chunk_received(session, trace_config_ctx, params) -> None:
    logger.debug(
        "RECEIVED %d bytes %s %s",
        len(params.chunk),
        params.method,
        params.url,
        extra={"content_length": len(params.chunk), "wiretap": True},
    )


async def _on_request_end(session, trace_config_ctx, params) -> None:
    logger.debug(
        "RESPONSE %d %s %s headers=%s",
        params.response.status,
        params.method,
        params.url,
        dict(params.response.headers),
        extra={
            "http_method": params.method,
            "http_url": str(params.url),
            "http_status": params.response.status,
            "wiretap": True,
        },
    )


async def _on_request_exception(session, trace_config_ctx, params) -> None:
    logger.debug(
        "EXCEPTION %s %s: %r",
        params.method,
        params.url,
        params.exception,
        extra={
            "http_method": params.method,
            "http_url": str(params.url),
            "error_type": type(params.exception).__name__,
            "wiretap": True,
        },
    )


def create_wiretap_trace_config() -> aiohttp.TraceConfig:
    """Build a TraceConfig that logs requests, responses, and body chunks."""
    trace_config = aiohttp.TraceConfig()
    trace_config.on_request_start.append(_on_request_start)
    trace_config.on_request_chunk_sent.append(_on_request_chunk_sent)
    trace_config.on_response_chunk_received.append(_on_response_chunk_received)
    trace_config.on_request_end.append(_on_request_end)
    trace_config.on_request_exception.append(_on_request_exception)
    return trace_config

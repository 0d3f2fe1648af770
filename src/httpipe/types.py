"""
Core types and protocols used across modules.

This module provides base enums and protocol definitions that are shared
across the pipeline, policy, and transport layers.
"""

from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from httpipe.http.request import HttpRequest
    from httpipe.http.response import HttpResponse


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that should retry with backoff
                   (e.g., network timeouts, 429/503 responses)
        AUTH: Authentication failures requiring credential refresh
        PERMANENT: Non-retriable failures that won't succeed on retry
                   (e.g., malformed URLs, bad configuration, 404)
        UNKNOWN: Unclassified errors, may retry conservatively
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class HttpMethod(Enum):
    """HTTP request verbs."""

    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    CONNECT = "CONNECT"

    @property
    def allows_body(self) -> bool:
        return self not in _BODYLESS_METHODS


_BODYLESS_METHODS = frozenset(
    {HttpMethod.GET, HttpMethod.HEAD, HttpMethod.OPTIONS, HttpMethod.TRACE}
)


class ProxyType(Enum):
    """Proxy protocols supported by the transport."""

    HTTP = "http"
    SOCKS4 = "socks4"
    SOCKS5 = "socks5"


class HttpTransport(Protocol):
    """
    Protocol for the terminal stage of a pipeline.

    A transport performs the actual network call for a request. It owns
    its connections and must return each one to its pool exactly once,
    on both success and failure paths.
    """

    async def send(self, request: "HttpRequest") -> "HttpResponse":
        """
        Send a request over the network.

        Args:
            request: Request to send

        Returns:
            Response for the request

        Raises:
            TransientError: On connection failures or timeouts
        """
        ...


__all__ = [
    "ErrorCategory",
    "HttpMethod",
    "HttpTransport",
    "ProxyType",
]

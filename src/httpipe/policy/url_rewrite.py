"""
Request URL rewriting policies.

Each policy replaces one component of the current request URL and
assigns the result before continuing the chain. A rewrite that yields
a malformed URL raises MalformedUrlError from process(); the rest of the
chain is not invoked for that call.
"""

import logging

from httpipe.errors.exceptions import InvalidArgumentError
from httpipe.http.response import HttpResponse
from httpipe.http.url import (
    replace_host,
    replace_port,
    replace_scheme,
    url_explicit_port,
    url_scheme,
)
from httpipe.policy.base import HttpPipelinePolicy

logger = logging.getLogger(__name__)


class ProtocolPolicy(HttpPipelinePolicy):
    """
    Sets the URL scheme on each request.

    Args:
        protocol: Scheme to set, e.g. "https"
        overwrite: Replace a scheme the request already has. When False,
            only scheme-less URLs are changed.
    """

    def __init__(self, protocol: str, overwrite: bool = True) -> None:
        if not protocol:
            raise InvalidArgumentError("ProtocolPolicy requires a protocol")
        self._protocol = protocol
        self._overwrite = overwrite

    @property
    def protocol(self) -> str:
        return self._protocol

    @property
    def overwrite(self) -> bool:
        return self._overwrite

    async def process(self, context, next_policy) -> HttpResponse:
        if self._overwrite or url_scheme(context.request.url) is None:
            logger.debug(
                "Setting protocol to %s",
                self._protocol,
                extra={"policy": type(self).__name__, "scheme": self._protocol},
            )
            context.request.url = replace_scheme(context.request.url, self._protocol)
        return await next_policy.process()

    def __repr__(self) -> str:
        return f"ProtocolPolicy(protocol={self._protocol!r}, overwrite={self._overwrite})"


class HostPolicy(HttpPipelinePolicy):
    """Sets the given host on every request; userinfo, port, path and query are kept."""

    def __init__(self, host: str) -> None:
        if not host:
            raise InvalidArgumentError("HostPolicy requires a host")
        self._host = host

    @property
    def host(self) -> str:
        return self._host

    async def process(self, context, next_policy) -> HttpResponse:
        logger.debug(
            "Setting host to %s",
            self._host,
            extra={"policy": type(self).__name__, "host": self._host},
        )
        context.request.url = replace_host(context.request.url, self._host)
        return await next_policy.process()

    def __repr__(self) -> str:
        return f"HostPolicy(host={self._host!r})"


class PortPolicy(HttpPipelinePolicy):
    """
    Sets the given port on each request.

    Args:
        port: Port to set
        overwrite: Replace a port the URL already names explicitly. When
            False, only URLs without an explicit port are changed.
    """

    def __init__(self, port: int, overwrite: bool = True) -> None:
        if isinstance(port, bool) or not isinstance(port, int):
            raise InvalidArgumentError(f"PortPolicy requires an int port, got {port!r}")
        self._port = port
        self._overwrite = overwrite

    @property
    def port(self) -> int:
        return self._port

    async def process(self, context, next_policy) -> HttpResponse:
        if self._overwrite or url_explicit_port(context.request.url) is None:
            logger.debug(
                "Setting port to %d",
                self._port,
                extra={"policy": type(self).__name__, "port": self._port},
            )
            context.request.url = replace_port(context.request.url, self._port)
        return await next_policy.process()

    def __repr__(self) -> str:
        return f"PortPolicy(port={self._port}, overwrite={self._overwrite})"

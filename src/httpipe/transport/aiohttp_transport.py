"""
Terminal pipeline stage backed by aiohttp.

AiohttpTransport owns one lazily created ClientSession. Responses hold a
pooled connection until their body is fully read, reading fails, the read
is cancelled, or close() is called; the connection is released exactly
once in every case.
"""

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import replace
from typing import Any, TypeVar

import aiohttp
from aiohttp_socks import ProxyConnector
from aiohttp_socks import ProxyType as SocksProxyType
from yarl import URL

from httpipe.errors.exceptions import ConnectionError as HttpConnectionError
from httpipe.errors.exceptions import InvalidArgumentError
from httpipe.errors.exceptions import TimeoutError as HttpTimeoutError
from httpipe.http.headers import HttpHeaders
from httpipe.http.request import BytesBody, HttpRequest
from httpipe.http.response import HttpResponse
from httpipe.transport.options import ProxyOptions, TransportConfig, resolve_proxy_type
from httpipe.transport.wiretap import create_wiretap_trace_config
from httpipe.types import ProxyType

logger = logging.getLogger(__name__)

T = TypeVar("T")

Runner = Callable[[Awaitable[T]], Awaitable[T]]

_SOCKS_TYPES = {
    ProxyType.SOCKS4: SocksProxyType.SOCKS4,
    ProxyType.SOCKS5: SocksProxyType.SOCKS5,
}


def _translate_error(error: Exception, method: str, url: str) -> Exception:
    context = {"http_method": method, "http_url": url, "error_type": type(error).__name__}
    if isinstance(error, asyncio.TimeoutError):
        return HttpTimeoutError(f"Request timed out: {method} {url}", cause=error, context=context)
    return HttpConnectionError(f"Connection error: {error}", cause=error, context=context)


class AiohttpHttpResponse(HttpResponse):
    """Response wrapping an aiohttp.ClientResponse; single-consumption."""

    def __init__(
        self,
        request: HttpRequest,
        response: aiohttp.ClientResponse,
        run: Runner,
    ) -> None:
        super().__init__(request, response.status, HttpHeaders(response.headers))
        self._response = response
        self._run = run
        self._consumed = False
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    async def body(self) -> AsyncIterator[bytes]:
        if self._consumed:
            return
        self._consumed = True
        try:
            while True:
                chunk = await self._run(self._response.content.readany())
                if not chunk:
                    break
                yield chunk
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise self._error(e) from e
        finally:
            await self.close()

    async def body_as_bytes(self) -> bytes:
        if self._consumed:
            return b""
        self._consumed = True
        try:
            return await self._run(self._response.read())
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise self._error(e) from e
        finally:
            await self.close()

    async def close(self) -> None:
        if self._released:
            return
        self._released = True
        await self._run(self._release())

    async def _release(self) -> None:
        result = self._response.release()
        if inspect.isawaitable(result):
            await result

    def _error(self, error: Exception) -> Exception:
        method = self.request.method.value if self.request else ""
        url = str(self.request.url) if self.request else ""
        return _translate_error(error, method, url)


class AiohttpTransport:
    """
    HttpTransport implementation using aiohttp.ClientSession.

    Raises UnsupportedConfigurationError from the constructor for an
    unknown proxy type, so bad proxy settings never reach request time.
    """

    def __init__(self, config: TransportConfig | None = None) -> None:
        self._config = config or TransportConfig()
        self._proxy_type: ProxyType | None = None
        if self._config.proxy is not None:
            self._proxy_type = resolve_proxy_type(self._config.proxy.type)
            # Malformed addresses fail here rather than on first send
            self._config.proxy.host_and_port()
        self._session: aiohttp.ClientSession | None = None

    @property
    def config(self) -> TransportConfig:
        return self._config

    @property
    def proxy_type(self) -> ProxyType | None:
        return self._proxy_type

    async def _run(self, awaitable: Awaitable[T]) -> T:
        """Await on the configured loop, or the current loop if none is set."""
        loop = self._config.loop
        if loop is None or loop is asyncio.get_running_loop():
            return await awaitable
        future = asyncio.run_coroutine_threadsafe(_as_coroutine(awaitable), loop)
        return await asyncio.wrap_future(future)

    def _create_connector(self) -> aiohttp.BaseConnector:
        config = self._config
        connector_kwargs: dict[str, Any] = {
            "limit": config.max_connections,
            "limit_per_host": config.max_connections_per_host,
            "ssl": config.verify_ssl,
            "ttl_dns_cache": 300,
        }
        if self._proxy_type in _SOCKS_TYPES:
            proxy = config.proxy
            return ProxyConnector(
                proxy_type=_SOCKS_TYPES[self._proxy_type],
                host=proxy.host,
                port=proxy.port,
                username=proxy.username,
                password=proxy.password,
                rdns=True,
                **connector_kwargs,
            )
        return aiohttp.TCPConnector(**connector_kwargs)

    def _create_session(self) -> aiohttp.ClientSession:
        config = self._config
        timeout = aiohttp.ClientTimeout(
            total=config.timeout_total,
            connect=config.timeout_connect,
            sock_read=config.timeout_sock_read,
            sock_connect=config.timeout_sock_connect,
        )
        trace_configs = [create_wiretap_trace_config()] if config.enable_wiretap else None
        logger.debug(
            "Creating aiohttp session",
            extra={
                "operation": "create_session",
                "proxy_type": self._proxy_type.value if self._proxy_type else None,
                "port": config.port,
                "wiretap": config.enable_wiretap,
            },
        )
        return aiohttp.ClientSession(
            connector=self._create_connector(),
            timeout=timeout,
            trace_configs=trace_configs,
        )

    def _session_for_send(self) -> aiohttp.ClientSession:
        # Called on the I/O loop with no await before assignment
        if self._session is None or self._session.closed:
            self._session = self._create_session()
        return self._session

    def _resolve_url(self, url: URL) -> URL:
        if not url.is_absolute():
            raise InvalidArgumentError(f"Transport requires an absolute URL, got {url}")
        if self._config.port is not None and url.explicit_port is None:
            return url.with_port(self._config.port)
        return url

    def _request_kwargs(self, request: HttpRequest) -> dict[str, Any]:
        body = request.body
        kwargs: dict[str, Any] = {
            "headers": request.headers.as_multidict(),
            "allow_redirects": self._config.allow_redirects,
        }
        if body is not None:
            kwargs["data"] = body.content if isinstance(body, BytesBody) else body
        if self._proxy_type is ProxyType.HTTP:
            proxy: ProxyOptions = self._config.proxy
            kwargs["proxy"] = proxy.url()
            if proxy.username is not None:
                kwargs["proxy_auth"] = aiohttp.BasicAuth(proxy.username, proxy.password or "")
        return kwargs

    async def _send(self, request: HttpRequest) -> AiohttpHttpResponse:
        method = request.method.value
        url = self._resolve_url(request.url)
        session = self._session_for_send()
        try:
            response = await session.request(method, url, **self._request_kwargs(request))
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise _translate_error(e, method, str(url)) from e
        return AiohttpHttpResponse(request, response, self._run)

    async def send(self, request: HttpRequest) -> HttpResponse:
        """
        Send a request.

        Raises:
            TimeoutError: If aiohttp times out
            ConnectionError: On any other aiohttp client error
        """
        return await self._run(self._send(request))

    async def close(self) -> None:
        session = self._session
        self._session = None
        if session is not None and not session.closed:
            await self._run(session.close())

    def __repr__(self) -> str:
        return f"AiohttpTransport(proxy_type={self._proxy_type}, port={self._config.port})"


async def _as_coroutine(awaitable: Awaitable[T]) -> T:
    return await awaitable


class AiohttpTransportBuilder:
    """
    Builder for AiohttpTransport.

    Each build() returns a new transport using the settings held by the
    builder at that time.
    """

    def __init__(self, config: TransportConfig | None = None) -> None:
        self._config = config or TransportConfig()

    def set_config(self, config: TransportConfig) -> "AiohttpTransportBuilder":
        self._config = config
        return self

    def set_proxy(self, proxy: ProxyOptions | None) -> "AiohttpTransportBuilder":
        self._config = replace(self._config, proxy=proxy)
        return self

    def set_wiretap(self, enable_wiretap: bool) -> "AiohttpTransportBuilder":
        self._config = replace(self._config, enable_wiretap=enable_wiretap)
        return self

    def set_port(self, port: int | None) -> "AiohttpTransportBuilder":
        self._config = replace(self._config, port=port)
        return self

    def set_event_loop(self, loop: asyncio.AbstractEventLoop | None) -> "AiohttpTransportBuilder":
        self._config = replace(self._config, loop=loop)
        return self

    def build(self) -> AiohttpTransport:
        """
        Create a transport.

        Raises:
            UnsupportedConfigurationError: If the proxy type is unknown
        """
        return AiohttpTransport(self._config)

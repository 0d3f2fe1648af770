"""
aiohttp-backed transport.

Provides:
    - AiohttpTransport / AiohttpTransportBuilder: the terminal pipeline stage
    - AiohttpHttpResponse: response that returns its connection exactly once
    - TransportConfig / ProxyOptions: port, proxy, wiretap, loop, pool and timeouts
"""

from httpipe.transport.aiohttp_transport import (
    AiohttpHttpResponse,
    AiohttpTransport,
    AiohttpTransportBuilder,
)
from httpipe.transport.options import ProxyOptions, TransportConfig, resolve_proxy_type
from httpipe.transport.wiretap import create_wiretap_trace_config

__all__ = [
    "AiohttpHttpResponse",
    "AiohttpTransport",
    "AiohttpTransportBuilder",
    "ProxyOptions",
    "TransportConfig",
    "create_wiretap_trace_config",
    "resolve_proxy_type",
]

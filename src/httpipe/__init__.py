"""
httpipe: asynchronous HTTP pipeline with composable policies.

A request sent through an HttpPipeline passes through each policy in
order, reaches the transport, and the response unwinds back through the
policies in reverse order.

Modules:
    http        - Request, response, headers, URL builder, buffered and paged responses
    policy      - Policy contract and built-in policies
    pipeline    - HttpPipeline and its per-call context and continuation
    transport   - aiohttp transport with proxy, wiretap and event-loop options
    resilience  - Retry configuration
    errors      - Exception hierarchy and classification
    logging     - Structured JSON logging with per-call correlation IDs
    config      - YAML configuration

Example usage:
    from httpipe import HttpPipeline, HttpRequest, HostPolicy, ProtocolPolicy
    from httpipe.transport import AiohttpTransportBuilder

    pipeline = HttpPipeline(
        AiohttpTransportBuilder().build(),
        [ProtocolPolicy("https"), HostPolicy("api.example.com")],
    )
    async with pipeline:
        response = await pipeline.send(HttpRequest("GET", "http://localhost/status"))
        print(await response.buffer().body_as_string())
"""

from httpipe.errors import (
    HttpPipelineError,
    InvalidArgumentError,
    MalformedUrlError,
    UnsupportedConfigurationError,
)
from httpipe.http import (
    BufferedHttpResponse,
    HttpHeaders,
    HttpRequest,
    HttpResponse,
    StreamHttpResponse,
    UrlBuilder,
)
from httpipe.pipeline import (
    HttpPipeline,
    HttpPipelineBuilder,
    HttpPipelineCallContext,
    HttpPipelineNextPolicy,
)
from httpipe.policy import (
    AddHeadersPolicy,
    HostPolicy,
    HttpLoggingPolicy,
    HttpPipelinePolicy,
    PortPolicy,
    ProtocolPolicy,
    RetryPolicy,
)
from httpipe.types import ErrorCategory, HttpMethod, HttpTransport, ProxyType

__version__ = "0.1.0"

__all__ = [
    "AddHeadersPolicy",
    "BufferedHttpResponse",
    "ErrorCategory",
    "HostPolicy",
    "HttpHeaders",
    "HttpLoggingPolicy",
    "HttpMethod",
    "HttpPipeline",
    "HttpPipelineBuilder",
    "HttpPipelineCallContext",
    "HttpPipelineError",
    "HttpPipelineNextPolicy",
    "HttpPipelinePolicy",
    "HttpRequest",
    "HttpResponse",
    "HttpTransport",
    "InvalidArgumentError",
    "MalformedUrlError",
    "PortPolicy",
    "ProtocolPolicy",
    "ProxyType",
    "RetryPolicy",
    "StreamHttpResponse",
    "UnsupportedConfigurationError",
    "UrlBuilder",
]

"""
Pipeline policies.

Provides:
    - HttpPipelinePolicy: the middleware contract
    - ProtocolPolicy, HostPolicy, PortPolicy: URL rewriting
    - AddHeadersPolicy: fixed request headers
    - RetryPolicy: attempt loop with backoff
    - HttpLoggingPolicy: request/response logging
"""

from httpipe.policy.base import HttpPipelinePolicy
from httpipe.policy.headers import AddHeadersPolicy
from httpipe.policy.http_logging import HttpLoggingPolicy
from httpipe.policy.retry import RETRY_COUNT_KEY, RETRY_STATS_KEY, RetryPolicy
from httpipe.policy.url_rewrite import HostPolicy, PortPolicy, ProtocolPolicy

__all__ = [
    "HttpPipelinePolicy",
    "AddHeadersPolicy",
    "HostPolicy",
    "HttpLoggingPolicy",
    "PortPolicy",
    "ProtocolPolicy",
    "RetryPolicy",
    "RETRY_COUNT_KEY",
    "RETRY_STATS_KEY",
]

"""Pipeline configuration from YAML.

Builds the default policy chain and the aiohttp transport from one file:

    transport:
      port: 8080
      enable_wiretap: false
      proxy:
        type: socks5
        address: "proxy.internal:1080"
    protocol: https
    overwrite_protocol: false
    host: ${API_HOST:-api.example.com}
    headers:
      User-Agent: httpipe
    retry:
      max_attempts: 3
      base_delay: 0.5
    http_logging: true

Environment variables ARE supported using ${VAR_NAME} and
${VAR_NAME:-default} syntax in string values.
"""

import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from httpipe.errors.exceptions import UnsupportedConfigurationError
from httpipe.pipeline import HttpPipeline
from httpipe.policy import (
    AddHeadersPolicy,
    HostPolicy,
    HttpLoggingPolicy,
    HttpPipelinePolicy,
    ProtocolPolicy,
    RetryPolicy,
)
from httpipe.resilience.retry import RetryConfig
from httpipe.transport.aiohttp_transport import AiohttpTransportBuilder
from httpipe.transport.options import TransportConfig
from httpipe.types import HttpTransport

logger = logging.getLogger(__name__)

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-(([^}]*))?)?\}")


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return _ENV_PATTERN.sub(replacer, data)
    else:
        return data


@dataclass
class PipelineConfig:
    """Settings for the standard pipeline.

    Policies are created in this order when present:
    headers, protocol, host, retry, http logging. Retry sits before
    logging so each attempt is logged separately.
    """

    transport: TransportConfig = field(default_factory=TransportConfig)
    protocol: Optional[str] = None
    overwrite_protocol: bool = True
    host: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    retry: Optional[RetryConfig] = None
    http_logging: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        data = _expand_env_vars(dict(data or {}))
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise UnsupportedConfigurationError(
                f"Unknown pipeline settings: {', '.join(sorted(unknown))}"
            )

        retry = data.get("retry")
        if isinstance(retry, dict):
            try:
                retry = RetryConfig(**retry)
            except (TypeError, ValueError) as e:
                raise UnsupportedConfigurationError(f"Invalid retry settings: {e}", cause=e) from e

        overwrite = data.get("overwrite_protocol", True)
        if isinstance(overwrite, str):
            overwrite = overwrite.lower() in ("1", "true", "yes")

        http_logging = data.get("http_logging", False)
        if isinstance(http_logging, str):
            http_logging = http_logging.lower() in ("1", "true", "yes")

        return cls(
            transport=TransportConfig.from_dict(data.get("transport") or {}),
            protocol=data.get("protocol"),
            overwrite_protocol=bool(overwrite),
            host=data.get("host"),
            headers={str(k): str(v) for k, v in (data.get("headers") or {}).items()},
            retry=retry,
            http_logging=bool(http_logging),
        )

    def build_policies(self) -> list[HttpPipelinePolicy]:
        policies: list[HttpPipelinePolicy] = []
        if self.headers:
            policies.append(AddHeadersPolicy(self.headers))
        if self.protocol:
            policies.append(ProtocolPolicy(self.protocol, self.overwrite_protocol))
        if self.host:
            policies.append(HostPolicy(self.host))
        if self.retry is not None:
            policies.append(RetryPolicy(self.retry))
        if self.http_logging:
            policies.append(HttpLoggingPolicy())
        return policies


def load_config(path: Path) -> PipelineConfig:
    """Load pipeline configuration from a YAML file.

    A missing file yields the defaults.
    """
    path = Path(path)
    data = load_yaml(path)
    if not isinstance(data, dict):
        raise UnsupportedConfigurationError(f"Config file {path} must contain a mapping")
    config = PipelineConfig.from_dict(data)
    logger.debug(
        "Loaded pipeline config from %s",
        path,
        extra={"operation": "load_config"},
    )
    return config


def create_pipeline(
    config: PipelineConfig,
    extra_policies: Iterable[HttpPipelinePolicy] = (),
    transport: HttpTransport | None = None,
) -> HttpPipeline:
    """Build a pipeline from configuration.

    Args:
        config: Pipeline settings
        extra_policies: Policies appended after the configured ones
        transport: Transport to use instead of one built from config.transport

    Raises:
        UnsupportedConfigurationError: For unknown proxy types or invalid settings
    """
    if transport is None:
        transport = AiohttpTransportBuilder(config.transport).build()
    return HttpPipeline(transport, [*config.build_policies(), *extra_policies])

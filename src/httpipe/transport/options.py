"""Configuration models for the aiohttp transport."""

import asyncio
from dataclasses import dataclass
from typing import Any

from httpipe.errors.exceptions import InvalidArgumentError, UnsupportedConfigurationError
from httpipe.types import ProxyType


def resolve_proxy_type(value: "ProxyType | str") -> ProxyType:
    """
    Map a configured proxy type onto ProxyType.

    Raises:
        UnsupportedConfigurationError: If the type is not HTTP, SOCKS4 or SOCKS5
    """
    if isinstance(value, ProxyType):
        return value
    try:
        return ProxyType(str(value).strip().lower())
    except ValueError as e:
        raise UnsupportedConfigurationError(
            f"Unknown proxy type '{value}' in use. Not configuring proxy.",
            cause=e,
            context={"proxy_type": str(value)},
        ) from e


@dataclass(frozen=True)
class ProxyOptions:
    """
    Proxy settings for the transport.

    The type is checked when the transport is built, not here, so a bad
    value read from configuration fails at build time with
    UnsupportedConfigurationError.

    Attributes:
        type: ProxyType or its name ("http", "socks4", "socks5")
        address: (host, port) tuple or "host:port" string
        username: Optional proxy username
        password: Optional proxy password
    """

    type: ProxyType | str
    address: tuple[str, int] | str
    username: str | None = None
    password: str | None = None

    @property
    def host(self) -> str:
        return self.host_and_port()[0]

    @property
    def port(self) -> int:
        return self.host_and_port()[1]

    def host_and_port(self) -> tuple[str, int]:
        address = self.address
        if isinstance(address, str):
            host, sep, port_text = address.rpartition(":")
            if not sep or not host or not port_text.isdigit():
                raise UnsupportedConfigurationError(
                    f"Proxy address must be 'host:port', got {address!r}"
                )
            return host, int(port_text)
        try:
            host, port = address
            return host, int(port)
        except (TypeError, ValueError) as e:
            raise UnsupportedConfigurationError(
                f"Proxy address must be a (host, port) pair, got {address!r}", cause=e
            ) from e

    def url(self) -> str:
        """Proxy URL in the form aiohttp expects for HTTP proxies."""
        scheme = resolve_proxy_type(self.type).value
        return f"{scheme}://{self.host}:{self.port}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProxyOptions":
        address = data.get("address")
        if address is None and "host" in data:
            try:
                address = (data["host"], int(data.get("port", 0)))
            except (TypeError, ValueError) as e:
                raise UnsupportedConfigurationError(
                    f"Invalid proxy port: {data.get('port')!r}", cause=e
                ) from e
        if not data.get("type") or address is None:
            raise UnsupportedConfigurationError("Proxy configuration requires 'type' and 'address'")
        return cls(
            type=data["type"],
            address=tuple(address) if isinstance(address, list) else address,
            username=data.get("username"),
            password=data.get("password"),
        )


@dataclass
class TransportConfig:
    """
    Configuration for AiohttpTransport.

    Connection pool configuration balances performance and resource usage:
    - max_connections: Total concurrent connections across all hosts
    - max_connections_per_host: Concurrent connections to a single host

    Timeout configuration prevents indefinite hangs:
    - timeout_total: Time for the entire request (default: 300s)
    - timeout_connect: Time to acquire a connection (default: 30s)
    - timeout_sock_read: Time between reads (default: 60s)
    - timeout_sock_connect: Socket connection timeout (default: 30s)

    port applies only to request URLs without an explicit port. loop, when
    set, is the event loop every network operation runs on.
    """

    port: int | None = None
    proxy: ProxyOptions | None = None
    enable_wiretap: bool = False
    loop: asyncio.AbstractEventLoop | None = None
    max_connections: int = 100
    max_connections_per_host: int = 10
    timeout_total: float | None = 300
    timeout_connect: float | None = 30
    timeout_sock_read: float | None = 60
    timeout_sock_connect: float | None = 30
    verify_ssl: bool = True
    allow_redirects: bool = True

    def __post_init__(self) -> None:
        # bool("false") would be True, so only convert non-bools
        for name in ("enable_wiretap", "verify_ssl", "allow_redirects"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                setattr(self, name, str(value).strip().lower() in ("1", "true", "yes"))
        if self.port is not None:
            if isinstance(self.port, bool) or not 0 < int(self.port) <= 65535:
                raise InvalidArgumentError(f"port must be in 1..65535, got {self.port!r}")
            self.port = int(self.port)
        if self.max_connections < 0 or self.max_connections_per_host < 0:
            raise InvalidArgumentError("connection limits must be >= 0")
        for name in ("timeout_total", "timeout_connect", "timeout_sock_read", "timeout_sock_connect"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise InvalidArgumentError(f"{name} must be > 0 when provided")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransportConfig":
        """Create from a configuration mapping (e.g. the YAML 'transport' section)."""
        data = dict(data or {})
        proxy = data.pop("proxy", None)
        unknown = set(data) - set(cls.__dataclass_fields__) - {"loop"}
        if unknown:
            raise UnsupportedConfigurationError(
                f"Unknown transport settings: {', '.join(sorted(unknown))}"
            )
        data.pop("loop", None)
        return cls(
            proxy=ProxyOptions.from_dict(proxy) if isinstance(proxy, dict) else proxy,
            **data,
        )

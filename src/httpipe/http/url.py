"""
URL parsing and rebuilding.

URLs are never mutated in place: policies replace one component of the
current request URL and assign the result. Absolute URLs are rewritten
with yarl; UrlBuilder splits and rebuilds URLs that have no scheme yet,
such as "example.com/path".
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, replace

from yarl import URL

from httpipe.errors.exceptions import MalformedUrlError

# RFC 3986 section 3.1
_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_INVALID_HOST_CHARS = frozenset(" \t\r\n/?#@")


@dataclass(frozen=True)
class UrlBuilder:
    """Immutable set of URL components."""

    scheme: str | None = None
    host: str | None = None
    port: int | None = None
    path: str = ""
    query: str = ""
    fragment: str = ""

    @classmethod
    def parse(cls, url: "str | URL") -> "UrlBuilder":
        """
        Split a URL into components.

        A URL without "://" has no scheme; everything up to its first "/"
        is treated as the host, so "example.com/path" parses with host
        "example.com" and path "/path".
        """
        text = str(url)
        scheme = None
        if "://" in text:
            scheme, text = text.split("://", 1)
        elif text.startswith("//"):
            text = text[2:]

        text, _, fragment = text.partition("#")
        text, _, query = text.partition("?")
        authority, slash, path = text.partition("/")
        path = slash + path

        host = authority or None
        port = None
        if authority and ":" in authority and not authority.endswith("]"):
            host_part, _, port_text = authority.rpartition(":")
            if port_text.isdigit():
                host, port = host_part or None, int(port_text)

        return cls(
            scheme=scheme or None,
            host=host,
            port=port,
            path=path,
            query=query,
            fragment=fragment,
        )

    def with_scheme(self, scheme: str) -> "UrlBuilder":
        return replace(self, scheme=scheme)

    def with_host(self, host: str) -> "UrlBuilder":
        return replace(self, host=host)

    def with_port(self, port: int | None) -> "UrlBuilder":
        return replace(self, port=port)

    def with_path(self, path: str) -> "UrlBuilder":
        if path and not path.startswith("/"):
            path = "/" + path
        return replace(self, path=path)

    def with_query_param(self, name: str, value: str) -> "UrlBuilder":
        pair = f"{name}={value}"
        return replace(self, query=f"{self.query}&{pair}" if self.query else pair)

    def _validate(self) -> None:
        if not self.scheme or not _SCHEME_PATTERN.match(self.scheme):
            raise MalformedUrlError(
                f"Invalid URL scheme: {self.scheme!r}", url=str(self)
            )
        if not self.host or any(ch in _INVALID_HOST_CHARS for ch in self.host):
            raise MalformedUrlError(f"Invalid URL host: {self.host!r}", url=str(self))
        if self.port is not None and not 0 <= self.port <= 65535:
            raise MalformedUrlError(f"Invalid URL port: {self.port}", url=str(self))

    def to_url(self) -> URL:
        """
        Build an absolute yarl.URL.

        Raises:
            MalformedUrlError: If the components do not form a valid absolute URL
        """
        self._validate()
        try:
            return URL.build(
                scheme=self.scheme.lower(),
                host=self.host,
                port=self.port,
                path=self.path,
                query_string=self.query,
                fragment=self.fragment,
                encoded=True,
            )
        except (ValueError, TypeError) as e:
            raise MalformedUrlError(
                f"Could not build URL: {e}", url=str(self), cause=e
            ) from e

    def __str__(self) -> str:
        text = f"{self.scheme}://" if self.scheme else ""
        text += self.host or ""
        if self.port is not None:
            text += f":{self.port}"
        text += self.path
        if self.query:
            text += f"?{self.query}"
        if self.fragment:
            text += f"#{self.fragment}"
        return text


def _is_absolute(url: URL) -> bool:
    return bool(url.scheme) and url.host is not None


def _rewrite(url: URL, change: Callable[[URL], URL]) -> URL:
    try:
        return change(url)
    except (ValueError, TypeError) as e:
        raise MalformedUrlError(
            f"Could not rewrite URL: {e}", url=str(url), cause=e
        ) from e


def url_scheme(url: "str | URL") -> str | None:
    """Scheme of a request URL, or None when it has none."""
    url = URL(url, encoded=True) if isinstance(url, str) else url
    if _is_absolute(url):
        return url.scheme
    return UrlBuilder.parse(url).scheme


def url_explicit_port(url: "str | URL") -> int | None:
    """Port named in a request URL, or None when it relies on the default."""
    url = URL(url, encoded=True) if isinstance(url, str) else url
    if _is_absolute(url):
        return url.explicit_port
    return UrlBuilder.parse(url).port


def replace_scheme(url: URL, scheme: str) -> URL:
    """
    Return url with its scheme replaced.

    Absolute URLs are rewritten by yarl, keeping userinfo, IPv6 hosts and
    encoding intact. Scheme-less URLs fall back to UrlBuilder.

    Raises:
        MalformedUrlError: If the scheme is invalid or the result is not a valid URL
    """
    if not scheme or not _SCHEME_PATTERN.match(scheme):
        raise MalformedUrlError(f"Invalid URL scheme: {scheme!r}", url=str(url))
    if not _is_absolute(url):
        return UrlBuilder.parse(url).with_scheme(scheme).to_url()
    return _rewrite(url, lambda u: u.with_scheme(scheme.lower()))


def replace_host(url: URL, host: str) -> URL:
    """Return url with its host replaced; see replace_scheme."""
    if not host or any(ch in _INVALID_HOST_CHARS for ch in host):
        raise MalformedUrlError(f"Invalid URL host: {host!r}", url=str(url))
    if not _is_absolute(url):
        return UrlBuilder.parse(url).with_host(host).to_url()
    return _rewrite(url, lambda u: u.with_host(host))


def replace_port(url: URL, port: int) -> URL:
    """Return url with its port replaced; see replace_scheme."""
    if not 0 <= port <= 65535:
        raise MalformedUrlError(f"Invalid URL port: {port}", url=str(url))
    if not _is_absolute(url):
        return UrlBuilder.parse(url).with_port(port).to_url()
    return _rewrite(url, lambda u: u.with_port(port))

"""
The outgoing HTTP request.

A request carries a verb, an absolute or scheme-less URL, headers, and an
optional body producer. The body producer is an async iterable of byte
chunks; fixed bodies are replayable so a request copy can be resent.
"""

from collections.abc import AsyncIterable, AsyncIterator
from typing import Union

from yarl import URL

from httpipe.errors.exceptions import InvalidArgumentError
from httpipe.http.headers import HeadersInput, HttpHeaders
from httpipe.types import HttpMethod

CONTENT_LENGTH = "Content-Length"

BodyContent = Union[bytes, bytearray, memoryview, str, AsyncIterable[bytes]]


class BytesBody:
    """Replayable single-chunk body: every iteration yields the same bytes."""

    __slots__ = ("content",)

    def __init__(self, content: bytes) -> None:
        self.content = content

    async def _iterate(self) -> AsyncIterator[bytes]:
        yield self.content

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()

    def __len__(self) -> int:
        return len(self.content)


def _coerce_method(method: "HttpMethod | str | None") -> HttpMethod:
    if method is None or method == "":
        raise InvalidArgumentError("HTTP method is required")
    if isinstance(method, HttpMethod):
        return method
    try:
        return HttpMethod(str(method).upper())
    except ValueError as e:
        raise InvalidArgumentError(f"Unknown HTTP method: {method!r}", cause=e) from e


def _coerce_url(url: "URL | str | None") -> URL:
    if url is None or url == "":
        raise InvalidArgumentError("Request URL is required")
    if isinstance(url, URL):
        return url
    if not isinstance(url, str):
        raise InvalidArgumentError(f"Request URL must be str or yarl.URL, got {type(url).__name__}")
    try:
        return URL(url, encoded=True)
    except (ValueError, TypeError) as e:
        raise InvalidArgumentError(f"Invalid request URL: {url!r}", cause=e) from e


class HttpRequest:
    """
    Outgoing HTTP request.

    Headers belong to exactly one request; buffer() gives a copy whose
    headers can be changed without touching the original.
    """

    def __init__(
        self,
        method: HttpMethod | str,
        url: URL | str,
        headers: HeadersInput | None = None,
        body: BodyContent | None = None,
    ) -> None:
        self._method = _coerce_method(method)
        self._url = _coerce_url(url)
        self._headers = headers.copy() if isinstance(headers, HttpHeaders) else HttpHeaders(headers)
        self._body: AsyncIterable[bytes] | None = None
        if body is not None:
            self.set_body(body)

    @property
    def method(self) -> HttpMethod:
        return self._method

    @property
    def url(self) -> URL:
        return self._url

    @url.setter
    def url(self, url: URL | str) -> None:
        self._url = _coerce_url(url)

    @property
    def headers(self) -> HttpHeaders:
        return self._headers

    @property
    def body(self) -> AsyncIterable[bytes] | None:
        return self._body

    def header(self, name: str) -> str | None:
        return self._headers.value(name)

    def set_header(self, name: str, value: str | None) -> "HttpRequest":
        """Set a header, replacing any existing value; None removes it."""
        self._headers.set(name, value)
        return self

    def set_body(self, content: BodyContent | None) -> "HttpRequest":
        """
        Set the request content.

        Fixed content (bytes or str) always sets Content-Length to its byte
        length, replacing any value already present. Streaming content is
        used as-is; the caller is responsible for Content-Length or
        Transfer-Encoding in that case.
        """
        if content is None:
            self._body = None
            return self
        if not self._method.allows_body:
            raise InvalidArgumentError(f"{self._method.value} requests cannot have a body")

        if isinstance(content, str):
            content = content.encode("utf-8")
        if isinstance(content, (bytes, bytearray, memoryview)):
            data = bytes(content)
            self._headers.set(CONTENT_LENGTH, str(len(data)))
            self._body = BytesBody(data)
        elif isinstance(content, AsyncIterable):
            self._body = content
        else:
            raise InvalidArgumentError(
                f"Unsupported body type: {type(content).__name__}"
            )
        return self

    def buffer(self) -> "HttpRequest":
        """
        Copy the request with an independent headers object.

        Method and URL are immutable values and are shared; the body
        producer is shared by reference.
        """
        clone = HttpRequest.__new__(HttpRequest)
        clone._method = self._method
        clone._url = self._url
        clone._headers = self._headers.copy()
        clone._body = self._body
        return clone

    def __repr__(self) -> str:
        return f"<HttpRequest {self._method.value} {self._url}>"

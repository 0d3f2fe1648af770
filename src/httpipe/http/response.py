"""
HTTP response abstractions.

HttpResponse bodies are single-consumption: once the chunks have been read,
reading again yields nothing. Wrap a response with buffer() to read it
more than once.
"""

import codecs
from abc import ABC, abstractmethod
from collections.abc import AsyncIterable, AsyncIterator
from typing import TYPE_CHECKING

from httpipe.errors.exceptions import InvalidArgumentError
from httpipe.http.headers import HeadersInput, HttpHeaders
from httpipe.http.request import HttpRequest

if TYPE_CHECKING:
    from httpipe.http.buffered import BufferedHttpResponse

DEFAULT_ENCODING = "utf-8"


def _validate_status(status_code: int) -> int:
    if isinstance(status_code, bool) or not isinstance(status_code, int):
        raise InvalidArgumentError(f"Status code must be an int, got {status_code!r}")
    if not 100 <= status_code <= 599:
        raise InvalidArgumentError(f"Status code out of range: {status_code}")
    return status_code


def charset_from_content_type(content_type: str | None) -> str | None:
    """Extract a known charset parameter from a Content-Type value."""
    if not content_type:
        return None
    for param in content_type.split(";")[1:]:
        name, _, value = param.strip().partition("=")
        if name.strip().lower() == "charset":
            charset = value.strip().strip('"').strip("'")
            try:
                codecs.lookup(charset)
            except LookupError:
                return None
            return charset
    return None


class HttpResponse(ABC):
    """Base class for responses produced by a transport."""

    def __init__(
        self,
        request: HttpRequest | None,
        status_code: int,
        headers: HeadersInput | None = None,
    ) -> None:
        self._request = request
        self._status_code = _validate_status(status_code)
        self._headers = headers if isinstance(headers, HttpHeaders) else HttpHeaders(headers)

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def headers(self) -> HttpHeaders:
        return self._headers

    @property
    def request(self) -> HttpRequest | None:
        """The request that produced this response."""
        return self._request

    def header_value(self, name: str) -> str | None:
        return self.headers.value(name)

    @abstractmethod
    def body(self) -> AsyncIterator[bytes]:
        """Iterate over the body chunks."""

    async def body_as_bytes(self) -> bytes:
        chunks = [chunk async for chunk in self.body()]
        return b"".join(chunks)

    async def body_as_string(self, encoding: str | None = None) -> str:
        """
        Decode the body.

        Uses the given encoding, else the Content-Type charset, else UTF-8.
        """
        data = await self.body_as_bytes()
        encoding = encoding or charset_from_content_type(
            self.header_value("Content-Type")
        ) or DEFAULT_ENCODING
        return data.decode(encoding)

    async def close(self) -> None:
        """Release any resources held by the response."""
        return None

    def buffer(self) -> "BufferedHttpResponse":
        from httpipe.http.buffered import BufferedHttpResponse

        return BufferedHttpResponse(self)

    async def __aenter__(self) -> "HttpResponse":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.status_code}>"


class StreamHttpResponse(HttpResponse):
    """
    Response over an async iterable of chunks (or fixed bytes).

    The body can be consumed once; later reads yield no chunks.
    """

    def __init__(
        self,
        request: HttpRequest | None,
        status_code: int,
        headers: HeadersInput | None = None,
        body: AsyncIterable[bytes] | bytes | None = None,
    ) -> None:
        super().__init__(request, status_code, headers)
        if isinstance(body, (bytes, bytearray)):
            body = _single_chunk(bytes(body))
        self._body = body
        self._consumed = False

    async def body(self) -> AsyncIterator[bytes]:
        if self._consumed or self._body is None:
            return
        self._consumed = True
        async for chunk in self._body:
            yield chunk

    async def close(self) -> None:
        self._consumed = True
        aclose = getattr(self._body, "aclose", None)
        if aclose is not None:
            await aclose()


async def _single_chunk(data: bytes) -> AsyncIterator[bytes]:
    yield data

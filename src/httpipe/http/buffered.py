"""
HTTP response which buffers its body when/if it is read.

The first read starts one task over the inner response's body_as_bytes();
every read after that, concurrent or not, awaits the same task, so the
inner body is fetched at most once and all readers see the same bytes or
the same exception.
"""

import asyncio
from collections.abc import AsyncIterator

from httpipe.http.headers import HttpHeaders
from httpipe.http.request import HttpRequest
from httpipe.http.response import HttpResponse


class BufferedHttpResponse(HttpResponse):
    """Wraps a response so its body can be read any number of times."""

    def __init__(self, inner: HttpResponse) -> None:
        # Status, headers, and request all delegate to the inner response
        self._inner = inner
        self._cached_body: asyncio.Future[bytes] | None = None

    @property
    def inner(self) -> HttpResponse:
        return self._inner

    @property
    def status_code(self) -> int:
        return self._inner.status_code

    @property
    def headers(self) -> HttpHeaders:
        return self._inner.headers

    @property
    def request(self) -> HttpRequest | None:
        return self._inner.request

    def header_value(self, name: str) -> str | None:
        return self._inner.header_value(name)

    def _body_future(self) -> "asyncio.Future[bytes]":
        # No await between the check and the assignment, so concurrent
        # first readers on one loop always share a single task.
        if self._cached_body is None:
            self._cached_body = asyncio.ensure_future(self._inner.body_as_bytes())
        return self._cached_body

    async def body_as_bytes(self) -> bytes:
        # Shielded so one reader being cancelled does not fail the others
        return await asyncio.shield(self._body_future())

    async def body(self) -> AsyncIterator[bytes]:
        yield await self.body_as_bytes()

    async def close(self) -> None:
        await self._inner.close()

    def buffer(self) -> "BufferedHttpResponse":
        return self

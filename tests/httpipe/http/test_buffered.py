"""
Tests for BufferedHttpResponse.

Tests cover:
- Metadata delegates to the wrapped response
- The inner body is fetched at most once, even under concurrent readers
- Every reader observes the same failure
"""

import asyncio

import pytest

from httpipe.errors.exceptions import ConnectionError as HttpConnectionError
from httpipe.http.buffered import BufferedHttpResponse
from httpipe.http.request import HttpRequest
from httpipe.http.response import HttpResponse, StreamHttpResponse


class CountingResponse(HttpResponse):
    """Inner response that counts body fetches and can be told to fail."""

    def __init__(self, request, payload=b"payload", error=None):
        super().__init__(request, 200, {"Content-Type": "text/plain; charset=utf-8"})
        self.payload = payload
        self.error = error
        self.fetches = 0
        self.closed = False

    async def body(self):
        self.fetches += 1
        # Give concurrent readers a chance to pile up
        await asyncio.sleep(0.01)
        if self.error is not None:
            raise self.error
        yield self.payload

    async def close(self):
        self.closed = True


@pytest.fixture
def request_():
    return HttpRequest("GET", "https://example.com/item")


class TestBufferedHttpResponseMetadata:

    def test_delegates_status_headers_and_request(self, request_):
        inner = StreamHttpResponse(request_, 201, {"X-Id": "7"}, b"")
        buffered = BufferedHttpResponse(inner)

        assert buffered.status_code == 201
        assert buffered.header_value("x-id") == "7"
        assert buffered.headers is inner.headers
        assert buffered.request is request_
        assert buffered.inner is inner

    def test_buffer_of_buffered_is_itself(self, request_):
        buffered = CountingResponse(request_).buffer()

        assert buffered.buffer() is buffered

    @pytest.mark.asyncio
    async def test_close_closes_inner(self, request_):
        inner = CountingResponse(request_)
        async with BufferedHttpResponse(inner):
            pass

        assert inner.closed


class TestBufferedHttpResponseBody:

    @pytest.mark.asyncio
    async def test_no_fetch_until_first_read(self, request_):
        inner = CountingResponse(request_)
        BufferedHttpResponse(inner)
        await asyncio.sleep(0)

        assert inner.fetches == 0

    @pytest.mark.asyncio
    async def test_sequential_reads_fetch_once(self, request_):
        inner = CountingResponse(request_)
        buffered = BufferedHttpResponse(inner)

        assert await buffered.body_as_bytes() == b"payload"
        assert await buffered.body_as_bytes() == b"payload"
        assert await buffered.body_as_string() == "payload"
        assert [chunk async for chunk in buffered.body()] == [b"payload"]
        assert inner.fetches == 1

    @pytest.mark.asyncio
    async def test_concurrent_reads_fetch_once(self, request_):
        inner = CountingResponse(request_)
        buffered = BufferedHttpResponse(inner)

        results = await asyncio.gather(*(buffered.body_as_bytes() for _ in range(10)))

        assert results == [b"payload"] * 10
        assert inner.fetches == 1

    @pytest.mark.asyncio
    async def test_concurrent_mixed_readers_fetch_once(self, request_):
        inner = CountingResponse(request_, payload="héllo".encode("utf-8"))
        buffered = BufferedHttpResponse(inner)

        as_bytes, as_text = await asyncio.gather(
            buffered.body_as_bytes(), buffered.body_as_string()
        )

        assert as_bytes == "héllo".encode("utf-8")
        assert as_text == "héllo"
        assert inner.fetches == 1

    @pytest.mark.asyncio
    async def test_all_readers_see_identical_failure(self, request_):
        error = HttpConnectionError("connection reset")
        inner = CountingResponse(request_, error=error)
        buffered = BufferedHttpResponse(inner)

        results = await asyncio.gather(
            *(buffered.body_as_bytes() for _ in range(5)), return_exceptions=True
        )

        assert all(result is error for result in results)
        assert inner.fetches == 1

    @pytest.mark.asyncio
    async def test_failure_is_memoized_for_later_reads(self, request_):
        error = HttpConnectionError("connection reset")
        inner = CountingResponse(request_, error=error)
        buffered = BufferedHttpResponse(inner)

        with pytest.raises(HttpConnectionError) as first:
            await buffered.body_as_bytes()
        with pytest.raises(HttpConnectionError) as second:
            await buffered.body_as_bytes()

        assert first.value is second.value
        assert inner.fetches == 1

    @pytest.mark.asyncio
    async def test_cancelled_reader_does_not_cancel_others(self, request_):
        inner = CountingResponse(request_)
        buffered = BufferedHttpResponse(inner)

        doomed = asyncio.ensure_future(buffered.body_as_bytes())
        survivor = asyncio.ensure_future(buffered.body_as_bytes())
        await asyncio.sleep(0)
        doomed.cancel()

        assert await survivor == b"payload"
        assert doomed.cancelled()
        assert inner.fetches == 1

    @pytest.mark.asyncio
    async def test_stream_body_becomes_rereadable(self, request_):
        async def chunks():
            yield b"a"
            yield b"b"

        buffered = StreamHttpResponse(request_, 200, body=chunks()).buffer()

        assert await buffered.body_as_bytes() == b"ab"
        assert await buffered.body_as_bytes() == b"ab"

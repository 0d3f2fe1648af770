"""Shared fixtures for httpipe tests: an in-memory transport and recording policies."""

import asyncio
from collections.abc import Callable

import pytest

from httpipe.http.request import HttpRequest
from httpipe.http.response import HttpResponse, StreamHttpResponse
from httpipe.policy.base import HttpPipelinePolicy


class MockTransport:
    """
    Transport that records requests and answers from a handler.

    The handler receives the request and returns a response, or raises.
    By default every request gets a 200 with body b"ok".
    """

    def __init__(self, handler: Callable[[HttpRequest], HttpResponse] | None = None):
        self.requests: list[HttpRequest] = []
        self.closed = False
        self._handler = handler or (
            lambda request: StreamHttpResponse(request, 200, {"Content-Type": "text/plain"}, b"ok")
        )

    async def send(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        await asyncio.sleep(0)
        return self._handler(request)

    async def close(self) -> None:
        self.closed = True


class RecordingPolicy(HttpPipelinePolicy):
    """Appends '<name>:pre' and '<name>:post' to a shared event list."""

    def __init__(self, name: str, events: list[str]):
        self.name = name
        self.events = events

    async def process(self, context, next_policy):
        self.events.append(f"{self.name}:pre")
        response = await next_policy.process()
        self.events.append(f"{self.name}:post")
        return response


@pytest.fixture
def mock_transport():
    return MockTransport()


@pytest.fixture
def make_transport():
    return MockTransport


@pytest.fixture
def make_recording_policy():
    return RecordingPolicy

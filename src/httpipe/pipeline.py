"""
HTTP pipeline: an ordered chain of policies terminating in a transport.

Each send() builds its own call context and continuation, so a single
pipeline instance can be shared by any number of concurrent callers.
Policies run in declaration order on the way out and in reverse order on
the way back, exactly like nested function calls.
"""

import logging
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from httpipe.errors.exceptions import InvalidArgumentError, PipelineStateError
from httpipe.http.request import HttpRequest
from httpipe.http.response import HttpResponse
from httpipe.logging.context import bind_call_id, reset_call_id
from httpipe.policy.base import HttpPipelinePolicy
from httpipe.types import HttpTransport

logger = logging.getLogger(__name__)


class HttpPipelineCallContext:
    """
    State for a single call through the pipeline.

    Holds the current request (policies may replace it) and a mapping of
    out-of-band data visible to every policy for this call only.
    """

    __slots__ = ("request", "data", "call_id")

    def __init__(
        self,
        request: HttpRequest,
        data: Mapping[str, Any] | None = None,
        call_id: str | None = None,
    ) -> None:
        self.request = request
        self.data: dict[str, Any] = dict(data or {})
        self.call_id = call_id or uuid.uuid4().hex

    def get_data(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set_data(self, key: str, value: Any) -> "HttpPipelineCallContext":
        self.data[key] = value
        return self


class HttpPipelineNextPolicy:
    """
    Continuation for the rest of a pipeline from one position.

    process() may be awaited once per instance. clone() gives a fresh
    continuation at the same position for retry attempts.
    """

    __slots__ = ("_pipeline", "_context", "_index", "_used")

    def __init__(
        self,
        pipeline: "HttpPipeline",
        context: HttpPipelineCallContext,
        index: int = 0,
    ) -> None:
        self._pipeline = pipeline
        self._context = context
        self._index = index
        self._used = False

    @property
    def index(self) -> int:
        return self._index

    async def process(self) -> HttpResponse:
        """
        Invoke the next policy, or the transport when the policies are exhausted.

        Raises:
            PipelineStateError: If this continuation was already invoked
        """
        if self._used:
            raise PipelineStateError(
                "next_policy.process() called more than once; "
                "use next_policy.clone() for another attempt",
                context={"policy_index": self._index},
            )
        self._used = True

        policies = self._pipeline.policies
        if self._index < len(policies):
            policy = policies[self._index]
            return await policy.process(
                self._context,
                HttpPipelineNextPolicy(self._pipeline, self._context, self._index + 1),
            )
        return await self._pipeline.transport.send(self._context.request)

    def clone(self) -> "HttpPipelineNextPolicy":
        return HttpPipelineNextPolicy(self._pipeline, self._context, self._index)


class HttpPipeline:
    """Immutable chain of policies plus one transport."""

    def __init__(
        self,
        transport: HttpTransport,
        policies: Iterable[HttpPipelinePolicy] = (),
    ) -> None:
        if transport is None:
            raise InvalidArgumentError("HttpPipeline requires a transport")
        policies = tuple(policies)
        for policy in policies:
            if not isinstance(policy, HttpPipelinePolicy):
                raise InvalidArgumentError(
                    f"Pipeline policies must be HttpPipelinePolicy, got {type(policy).__name__}"
                )
        self._transport = transport
        self._policies = policies

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    @property
    def policies(self) -> tuple[HttpPipelinePolicy, ...]:
        return self._policies

    def __len__(self) -> int:
        return len(self._policies)

    async def send(
        self,
        request: HttpRequest,
        context_data: Mapping[str, Any] | None = None,
    ) -> HttpResponse:
        """
        Send a request through every policy and the transport.

        Args:
            request: Request to send
            context_data: Initial out-of-band data for this call

        Returns:
            The response after all policies have post-processed it

        Raises:
            Whatever the policies or the transport raise for this call
        """
        if request is None:
            raise InvalidArgumentError("Cannot send a None request")

        context = HttpPipelineCallContext(request, context_data)
        token = bind_call_id(context.call_id)
        try:
            logger.debug(
                "Sending request through pipeline",
                extra={
                    "http_method": request.method.value,
                    "http_url": str(request.url),
                },
            )
            return await HttpPipelineNextPolicy(self, context).process()
        finally:
            reset_call_id(token)

    async def close(self) -> None:
        close = getattr(self._transport, "close", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "HttpPipeline":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"HttpPipeline(policies={list(self._policies)!r}, transport={self._transport!r})"


class HttpPipelineBuilder:
    """Collects policies and a transport, then builds an HttpPipeline."""

    def __init__(self) -> None:
        self._transport: HttpTransport | None = None
        self._policies: list[HttpPipelinePolicy] = []

    def transport(self, transport: HttpTransport) -> "HttpPipelineBuilder":
        self._transport = transport
        return self

    def policies(self, *policies: HttpPipelinePolicy) -> "HttpPipelineBuilder":
        self._policies.extend(policies)
        return self

    def build(self) -> HttpPipeline:
        return HttpPipeline(self._transport, self._policies)

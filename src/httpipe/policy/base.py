"""
Pipeline policy contract.

A policy is configuration-only middleware: it may rewrite the request on
context, continue the chain with next_policy.process(), and inspect or
transform the response or error on the way back. Policies hold no per-call
state so one instance can serve any number of concurrent calls.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from httpipe.http.response import HttpResponse
    from httpipe.pipeline import HttpPipelineCallContext, HttpPipelineNextPolicy


class HttpPipelinePolicy(ABC):
    """
    Unit of middleware in an HttpPipeline.

    Implementations may:
        - return a response without calling next (short-circuit)
        - await next_policy.process() once and return its result
        - await it and transform the response or the raised error

    process() on a given next_policy may be awaited at most once. A policy
    that needs several attempts must call next_policy.clone().process()
    for each one.
    """

    @abstractmethod
    async def process(
        self,
        context: "HttpPipelineCallContext",
        next_policy: "HttpPipelineNextPolicy",
    ) -> "HttpResponse":
        """
        Process the call.

        Args:
            context: Per-call context holding the request and out-of-band data
            next_policy: Continuation for the rest of the chain

        Returns:
            The response for this call
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

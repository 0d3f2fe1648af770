"""Policy that stamps a fixed set of headers on every request."""

from httpipe.http.headers import HeadersInput, HttpHeaders
from httpipe.http.response import HttpResponse
from httpipe.policy.base import HttpPipelinePolicy


class AddHeadersPolicy(HttpPipelinePolicy):
    """Sets each configured header on the request, replacing existing values."""

    def __init__(self, headers: HeadersInput) -> None:
        self._headers = HttpHeaders(headers)

    @property
    def headers(self) -> HttpHeaders:
        return self._headers.copy()

    async def process(self, context, next_policy) -> HttpResponse:
        for name in self._headers.names():
            context.request.set_header(name, ",".join(self._headers.values(name)))
        return await next_policy.process()

    def __repr__(self) -> str:
        return f"AddHeadersPolicy(headers={self._headers.names()!r})"

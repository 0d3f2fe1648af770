"""
Paged responses.

A PagedResponse is one page of a listing: its items plus the link to the
next page. iterate_pages() follows next links until the service stops
returning one.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from httpipe.http.headers import HttpHeaders
from httpipe.http.request import HttpRequest

T = TypeVar("T")

FetchPage = Callable[[str], Awaitable["PagedResponse[T]"]]


@dataclass
class PagedResponse(Generic[T]):
    """One page of items deserialized from a response."""

    request: HttpRequest | None
    status_code: int
    headers: HttpHeaders
    items: list[T] = field(default_factory=list)
    next_link: str | None = None
    deserialized_headers: Any = None


async def iterate_pages(
    first_page: PagedResponse[T],
    fetch_next: FetchPage,
) -> AsyncIterator[PagedResponse[T]]:
    """
    Yield the first page, then fetch pages by next_link until it is None.

    Args:
        first_page: Page returned by the initial request
        fetch_next: Coroutine function taking a next link and returning a page
    """
    page: PagedResponse[T] | None = first_page
    while page is not None:
        yield page
        page = await fetch_next(page.next_link) if page.next_link else None


async def iterate_items(
    first_page: PagedResponse[T],
    fetch_next: FetchPage,
) -> AsyncIterator[T]:
    """Yield every item across all pages."""
    async for page in iterate_pages(first_page, fetch_next):
        for item in page.items:
            yield item

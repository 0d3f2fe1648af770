"""
Request and response model.

Provides:
    - HttpHeaders: case-insensitive ordered header multi-map
    - UrlBuilder: URL parsing and rebuilding over yarl
    - HttpRequest: outgoing request with replayable fixed bodies
    - HttpResponse / StreamHttpResponse: single-consumption responses
    - BufferedHttpResponse: memoized body for repeated reads
    - PagedResponse: one page of a listing, plus page iteration helpers
"""

from httpipe.http.buffered import BufferedHttpResponse
from httpipe.http.headers import HttpHeaders
from httpipe.http.paged import PagedResponse, iterate_items, iterate_pages
from httpipe.http.request import CONTENT_LENGTH, BytesBody, HttpRequest
from httpipe.http.response import HttpResponse, StreamHttpResponse
from httpipe.http.url import UrlBuilder

__all__ = [
    "CONTENT_LENGTH",
    "BufferedHttpResponse",
    "BytesBody",
    "HttpHeaders",
    "HttpRequest",
    "HttpResponse",
    "PagedResponse",
    "StreamHttpResponse",
    "UrlBuilder",
    "iterate_items",
    "iterate_pages",
]

"""
Case-insensitive, ordered HTTP header collection.

Backed by multidict's CIMultiDict (the header type aiohttp itself uses).
Names match case-insensitively; the stored name keeps the casing of its
first occurrence.
"""

from collections.abc import Iterable, Iterator, Mapping
from typing import Union

from multidict import CIMultiDict, CIMultiDictProxy

HeadersInput = Union[
    "HttpHeaders",
    Mapping[str, str],
    Iterable[tuple[str, str]],
]


class HttpHeaders:
    """Ordered multi-map of header names to string values."""

    __slots__ = ("_headers",)

    def __init__(self, headers: HeadersInput | None = None) -> None:
        self._headers: CIMultiDict[str] = CIMultiDict()
        if headers is None:
            return
        if isinstance(headers, HttpHeaders):
            self._headers.extend(headers._headers)
        elif isinstance(headers, (CIMultiDict, CIMultiDictProxy)):
            self._headers.extend(headers)
        elif isinstance(headers, Mapping):
            for name, value in headers.items():
                self.set(name, value)
        else:
            for name, value in headers:
                self.add(name, value)

    def _stored_name(self, name: str) -> str | None:
        lowered = name.lower()
        for key in self._headers.keys():
            if key.lower() == lowered:
                return key
        return None

    def set(self, name: str, value: str | None) -> "HttpHeaders":
        """
        Set a header, replacing every existing value for the name.

        A None value removes the header. When the header already exists,
        its original name casing and position are kept.
        """
        if value is None:
            self.remove(name)
            return self
        existing = self._stored_name(name)
        self._headers[existing if existing is not None else name] = str(value)
        return self

    def add(self, name: str, value: str) -> "HttpHeaders":
        """Append a value without replacing existing ones."""
        existing = self._stored_name(name)
        self._headers.add(existing if existing is not None else name, str(value))
        return self

    def remove(self, name: str) -> None:
        self._headers.popall(name, None)

    def value(self, name: str) -> str | None:
        """Return the first value for the name, or None."""
        return self._headers.get(name)

    def values(self, name: str) -> list[str]:
        return self._headers.getall(name, [])

    def names(self) -> list[str]:
        """Distinct header names in insertion order, with stored casing."""
        seen: set[str] = set()
        names = []
        for key in self._headers.keys():
            if key.lower() not in seen:
                seen.add(key.lower())
                names.append(str(key))
        return names

    def to_dict(self) -> dict[str, str]:
        """Flatten to a plain dict; repeated values are joined with ','."""
        return {name: ",".join(self.values(name)) for name in self.names()}

    def copy(self) -> "HttpHeaders":
        return HttpHeaders(self)

    def as_multidict(self) -> CIMultiDictProxy[str]:
        """Read-only view suitable for handing to aiohttp."""
        return CIMultiDictProxy(self._headers)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._headers

    def __len__(self) -> int:
        return len(self._headers)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._headers.items()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HttpHeaders):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return f"HttpHeaders({list(self)!r})"

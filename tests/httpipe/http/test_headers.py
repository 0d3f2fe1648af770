"""
Tests for httpipe.http.headers.

Tests cover:
- Case-insensitive lookup
- Last write wins, first-occurrence casing kept
- None removes
- Multi-value add and copy independence
"""

from multidict import CIMultiDict

from httpipe.http.headers import HttpHeaders


class TestHttpHeaders:
    """Tests for HttpHeaders."""

    def test_lookup_is_case_insensitive(self):
        headers = HttpHeaders({"Content-Type": "application/json"})

        assert headers.value("content-type") == "application/json"
        assert headers.value("CONTENT-TYPE") == "application/json"
        assert "content-TYPE" in headers

    def test_set_replaces_value_and_keeps_first_casing(self):
        headers = HttpHeaders()
        headers.set("X-Request-Id", "1")
        headers.set("x-request-id", "2")

        assert headers.values("X-REQUEST-ID") == ["2"]
        assert headers.names() == ["X-Request-Id"]

    def test_set_keeps_insertion_position(self):
        headers = HttpHeaders([("A", "1"), ("B", "2")])
        headers.set("a", "3")

        assert list(headers) == [("A", "3"), ("B", "2")]

    def test_set_none_removes_header(self):
        headers = HttpHeaders({"Accept": "*/*"})
        headers.set("accept", None)

        assert "Accept" not in headers
        assert headers.value("Accept") is None
        assert len(headers) == 0

    def test_add_appends_values(self):
        headers = HttpHeaders()
        headers.add("Accept", "text/html")
        headers.add("accept", "application/json")

        assert headers.values("Accept") == ["text/html", "application/json"]
        assert headers.value("Accept") == "text/html"
        assert headers.to_dict() == {"Accept": "text/html,application/json"}

    def test_set_replaces_all_values_of_a_multi_value_header(self):
        headers = HttpHeaders([("Accept", "a"), ("Accept", "b")])
        headers.set("ACCEPT", "c")

        assert headers.values("accept") == ["c"]

    def test_copy_is_structurally_independent(self):
        original = HttpHeaders({"A": "1"})
        copy = original.copy()
        copy.set("A", "2")
        copy.set("B", "3")

        assert original.value("A") == "1"
        assert "B" not in original
        assert copy.value("A") == "2"

    def test_constructing_from_headers_copies(self):
        original = HttpHeaders({"A": "1"})
        other = HttpHeaders(original)
        other.remove("A")

        assert original.value("A") == "1"

    def test_accepts_multidict(self):
        headers = HttpHeaders(CIMultiDict([("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")]))

        assert headers.values("set-cookie") == ["a=1", "b=2"]

    def test_values_are_stored_as_strings(self):
        headers = HttpHeaders()
        headers.set("Content-Length", 42)

        assert headers.value("Content-Length") == "42"

    def test_equality(self):
        assert HttpHeaders({"A": "1"}) == HttpHeaders([("A", "1")])
        assert HttpHeaders({"A": "1"}) != HttpHeaders({"A": "2"})

    def test_as_multidict_is_read_only_view(self):
        headers = HttpHeaders({"A": "1"})
        view = headers.as_multidict()

        assert view["a"] == "1"

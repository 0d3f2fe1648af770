"""Tests for UrlBuilder parsing and rebuilding."""

import pytest
from yarl import URL

from httpipe.errors.exceptions import MalformedUrlError
from httpipe.http.url import (
    UrlBuilder,
    replace_host,
    replace_port,
    replace_scheme,
    url_explicit_port,
    url_scheme,
)


class TestUrlBuilderParse:

    def test_parses_absolute_url(self):
        builder = UrlBuilder.parse("https://example.com:8443/a/b?x=1&y=2#frag")

        assert builder.scheme == "https"
        assert builder.host == "example.com"
        assert builder.port == 8443
        assert builder.path == "/a/b"
        assert builder.query == "x=1&y=2"
        assert builder.fragment == "frag"

    def test_parses_scheme_less_url_host_first(self):
        builder = UrlBuilder.parse("example.com/path?q=1")

        assert builder.scheme is None
        assert builder.host == "example.com"
        assert builder.path == "/path"
        assert builder.query == "q=1"

    def test_parses_yarl_url(self):
        builder = UrlBuilder.parse(URL("http://x/y"))

        assert builder.scheme == "http"
        assert builder.host == "x"
        assert builder.path == "/y"

    def test_path_only_has_no_host(self):
        builder = UrlBuilder.parse("/only/path")

        assert builder.scheme is None
        assert builder.host is None
        assert builder.path == "/only/path"


class TestUrlBuilderToUrl:

    def test_round_trip_keeps_components(self):
        url = UrlBuilder.parse("https://old-host/path?q=1").to_url()

        assert str(url) == "https://old-host/path?q=1"

    def test_with_host_keeps_path_and_query(self):
        url = UrlBuilder.parse("https://old-host/path?q=1").with_host("new-host").to_url()

        assert str(url) == "https://new-host/path?q=1"

    def test_with_scheme_on_scheme_less_url(self):
        url = UrlBuilder.parse("x/y").with_scheme("https").to_url()

        assert str(url) == "https://x/y"

    def test_builder_is_immutable(self):
        builder = UrlBuilder.parse("http://x/y")
        builder.with_scheme("https")

        assert builder.scheme == "http"

    def test_with_query_param_appends(self):
        url = UrlBuilder.parse("http://x/y?a=1").with_query_param("b", "2").to_url()

        assert url.query_string == "a=1&b=2"

    def test_with_path_adds_leading_slash(self):
        url = UrlBuilder.parse("http://x").with_path("p/q").to_url()

        assert url.path == "/p/q"

    def test_missing_scheme_is_malformed(self):
        with pytest.raises(MalformedUrlError):
            UrlBuilder.parse("x/y").to_url()

    def test_invalid_scheme_is_malformed(self):
        with pytest.raises(MalformedUrlError):
            UrlBuilder.parse("http://x/y").with_scheme("1nvalid").to_url()

    @pytest.mark.parametrize("host", ["", "bad host", "a/b", "user@host"])
    def test_invalid_host_is_malformed(self, host):
        with pytest.raises(MalformedUrlError):
            UrlBuilder.parse("http://x/y").with_host(host).to_url()

    def test_port_out_of_range_is_malformed(self):
        with pytest.raises(MalformedUrlError):
            UrlBuilder.parse("http://x/y").with_port(70000).to_url()

    def test_malformed_error_is_value_error(self):
        with pytest.raises(ValueError):
            UrlBuilder().to_url()


class TestReplaceComponents:

    def test_scheme_keeps_userinfo(self):
        url = replace_scheme(URL("http://user:pw@example.com/p"), "https")

        assert str(url) == "https://user:pw@example.com/p"
        assert url.user == "user"
        assert url.password == "pw"

    def test_host_keeps_userinfo_port_and_query(self):
        url = replace_host(URL("https://user@old-host:8443/path?q=1"), "new-host")

        assert str(url) == "https://user@new-host:8443/path?q=1"

    def test_ipv6_host_survives_scheme_change(self):
        url = replace_scheme(URL("http://[::1]:8080/p"), "https")

        assert url.host == "::1"
        assert url.port == 8080
        assert str(url) == "https://[::1]:8080/p"

    def test_ipv6_host_can_be_replaced(self):
        url = replace_host(URL("http://[::1]:8080/p"), "example.com")

        assert str(url) == "http://example.com:8080/p"

    def test_port_on_absolute_url(self):
        assert str(replace_port(URL("http://user@x/y"), 9000)) == "http://user@x:9000/y"

    def test_scheme_less_url_uses_builder(self):
        assert str(replace_scheme(URL("x/y", encoded=True), "https")) == "https://x/y"

    def test_invalid_values_are_malformed(self):
        url = URL("http://x/y")

        with pytest.raises(MalformedUrlError):
            replace_scheme(url, "not a scheme")
        with pytest.raises(MalformedUrlError):
            replace_host(url, "bad host")
        with pytest.raises(MalformedUrlError):
            replace_port(url, 70000)

    def test_url_scheme_and_port(self):
        assert url_scheme(URL("http://user:pw@x/y")) == "http"
        assert url_scheme(URL("x/y", encoded=True)) is None
        assert url_explicit_port(URL("http://x/y")) is None
        assert url_explicit_port(URL("http://[::1]:8080/y")) == 8080

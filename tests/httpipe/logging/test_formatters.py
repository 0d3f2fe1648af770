"""Tests for JSON and console log formatters."""

import json
import logging
import sys

import pytest

from httpipe.logging.context import clear_log_context, set_log_context
from httpipe.logging.formatters import ConsoleFormatter, JSONFormatter, json_serializer
from httpipe.types import ProxyType


def _make_record(
    msg="test message",
    level=logging.INFO,
    name="test.logger",
    exc_info=None,
    **extras,
):
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extras.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def clear_context():
    clear_log_context()
    yield
    clear_log_context()


class TestJSONFormatter:

    def test_formats_basic_json_with_required_fields(self):
        output = json.loads(JSONFormatter().format(_make_record()))

        assert output["level"] == "INFO"
        assert output["logger"] == "test.logger"
        assert output["message"] == "test message"
        assert output["ts"].endswith("Z")

    def test_includes_call_context(self):
        set_log_context(call_id="abc123", client_name="billing")
        output = json.loads(JSONFormatter().format(_make_record()))

        assert output["call_id"] == "abc123"
        assert output["client_name"] == "billing"

    def test_omits_empty_context(self):
        output = json.loads(JSONFormatter().format(_make_record()))

        assert "call_id" not in output
        assert "client_name" not in output

    def test_includes_http_extras(self):
        record = _make_record(http_method="GET", http_status=200, duration_ms=12.5)
        output = json.loads(JSONFormatter().format(record))

        assert output["http_method"] == "GET"
        assert output["http_status"] == 200
        assert output["duration_ms"] == 12.5

    def test_numeric_fields_are_coerced(self):
        record = _make_record(http_status="503", attempt="2", content_length="bad")
        output = json.loads(JSONFormatter().format(record))

        assert output["http_status"] == 503
        assert output["attempt"] == 2
        assert output["content_length"] is None

    def test_sanitizes_sensitive_query_params(self):
        record = _make_record(http_url="https://x/y?sig=abc&page=2&token=zzz")
        output = json.loads(JSONFormatter().format(record))

        assert output["http_url"] == "https://x/y?sig=[REDACTED]&page=2&token=[REDACTED]"

    def test_ignores_unknown_extras(self):
        output = json.loads(JSONFormatter().format(_make_record(something_else="x")))

        assert "something_else" not in output

    def test_source_location_on_debug_and_error(self):
        debug = json.loads(JSONFormatter().format(_make_record(level=logging.DEBUG)))
        info = json.loads(JSONFormatter().format(_make_record(level=logging.INFO)))

        assert debug["file"] == "test.py:42"
        assert "file" not in info

    def test_includes_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _make_record(level=logging.ERROR, exc_info=sys.exc_info())

        output = json.loads(JSONFormatter().format(record))

        assert output["exception"]["type"] == "ValueError"
        assert output["exception"]["message"] == "boom"
        assert "Traceback" in output["exception"]["stacktrace"]

    def test_json_serializer(self):
        assert json_serializer(ProxyType.SOCKS5) == "socks5"
        assert json_serializer(object).startswith("<class")


class TestConsoleFormatter:

    @pytest.fixture
    def formatter(self, monkeypatch):
        monkeypatch.setattr(sys.stdout, "isatty", lambda: False)
        return ConsoleFormatter()

    def test_plain_format(self, formatter):
        output = formatter.format(_make_record())

        assert " - INFO - test message" in output
        assert "\033[" not in output

    def test_includes_client_name_and_call_tag(self, formatter):
        set_log_context(client_name="billing", call_id="0123456789abcdef")

        output = formatter.format(_make_record())

        assert "[billing]" in output
        assert "[call:01234567] test message" in output

    def test_colors_when_tty(self, monkeypatch):
        monkeypatch.setattr(sys.stdout, "isatty", lambda: True)
        output = ConsoleFormatter().format(_make_record(level=logging.WARNING))

        assert "\033[33mWARNING\033[0m" in output

"""Tests for YAML pipeline configuration."""

from pathlib import Path

import pytest

from httpipe.config import PipelineConfig, _expand_env_vars, create_pipeline, load_config
from httpipe.errors.exceptions import UnsupportedConfigurationError
from httpipe.http.request import HttpRequest
from httpipe.policy import (
    AddHeadersPolicy,
    HostPolicy,
    HttpLoggingPolicy,
    ProtocolPolicy,
    RetryPolicy,
)
from httpipe.transport.aiohttp_transport import AiohttpTransport
from httpipe.types import ProxyType


class TestExpandEnvVars:

    def test_expands_set_variable(self, monkeypatch):
        monkeypatch.setenv("API_HOST", "api.internal")
        assert _expand_env_vars({"host": "${API_HOST}"}) == {"host": "api.internal"}

    def test_uses_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("API_HOST", raising=False)
        assert _expand_env_vars("${API_HOST:-fallback}") == "fallback"

    def test_leaves_unset_variable_without_default(self, monkeypatch):
        monkeypatch.delenv("API_HOST", raising=False)
        assert _expand_env_vars("${API_HOST}") == "${API_HOST}"

    def test_recurses_into_lists_and_leaves_non_strings(self, monkeypatch):
        monkeypatch.setenv("TOKEN", "t")
        assert _expand_env_vars(["${TOKEN}", 3, None]) == ["t", 3, None]


class TestPipelineConfig:

    def test_defaults_build_no_policies(self):
        assert PipelineConfig().build_policies() == []

    def test_policy_order(self):
        config = PipelineConfig.from_dict(
            {
                "headers": {"User-Agent": "httpipe"},
                "protocol": "https",
                "host": "api.example.com",
                "retry": {"max_attempts": 2},
                "http_logging": True,
            }
        )

        policies = config.build_policies()

        assert [type(p) for p in policies] == [
            AddHeadersPolicy,
            ProtocolPolicy,
            HostPolicy,
            RetryPolicy,
            HttpLoggingPolicy,
        ]
        assert policies[3].config.max_attempts == 2

    def test_string_booleans(self):
        config = PipelineConfig.from_dict(
            {"protocol": "https", "overwrite_protocol": "false", "http_logging": "yes"}
        )

        assert config.overwrite_protocol is False
        assert config.http_logging is True
        assert config.build_policies()[0].overwrite is False

    def test_unknown_key_is_unsupported(self):
        with pytest.raises(UnsupportedConfigurationError, match="colour"):
            PipelineConfig.from_dict({"colour": "blue"})

    def test_invalid_retry_is_unsupported(self):
        with pytest.raises(UnsupportedConfigurationError):
            PipelineConfig.from_dict({"retry": {"max_attempts": 0}})

    def test_transport_section(self):
        config = PipelineConfig.from_dict(
            {"transport": {"port": 8080, "proxy": {"type": "socks4", "address": "p:1080"}}}
        )

        assert config.transport.port == 8080
        assert config.transport.proxy.type == "socks4"


class TestLoadConfig:

    def test_missing_file_gives_defaults(self, tmp_path: Path):
        config = load_config(tmp_path / "missing.yaml")

        assert config == PipelineConfig()

    def test_loads_yaml_with_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("TARGET_HOST", "service.local")
        path = tmp_path / "pipeline.yaml"
        path.write_text(
            "protocol: https\n"
            "host: ${TARGET_HOST}\n"
            "transport:\n"
            "  enable_wiretap: true\n"
        )

        config = load_config(path)

        assert config.protocol == "https"
        assert config.host == "service.local"
        assert config.transport.enable_wiretap is True

    def test_env_defaults_for_transport_flags(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("WIRETAP", raising=False)
        monkeypatch.delenv("FOLLOW", raising=False)
        monkeypatch.setenv("VERIFY_SSL", "false")
        path = tmp_path / "pipeline.yaml"
        path.write_text(
            "transport:\n"
            "  enable_wiretap: \"${WIRETAP:-false}\"\n"
            "  verify_ssl: ${VERIFY_SSL}\n"
            "  allow_redirects: \"${FOLLOW:-true}\"\n"
        )

        config = load_config(path)

        assert config.transport.enable_wiretap is False
        assert config.transport.verify_ssl is False
        assert config.transport.allow_redirects is True

    def test_non_mapping_file_is_unsupported(self, tmp_path: Path):
        path = tmp_path / "pipeline.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(UnsupportedConfigurationError):
            load_config(path)


class TestCreatePipeline:

    @pytest.mark.asyncio
    async def test_uses_given_transport_and_extra_policies(self, mock_transport, make_recording_policy):
        events: list[str] = []
        extra = make_recording_policy("extra", events)
        config = PipelineConfig.from_dict({"protocol": "https", "host": "api.example.com"})

        pipeline = create_pipeline(config, [extra], transport=mock_transport)
        await pipeline.send(HttpRequest("GET", "http://localhost/status"))

        assert pipeline.policies[-1] is extra
        assert str(mock_transport.requests[0].url) == "https://api.example.com/status"
        assert events == ["extra:pre", "extra:post"]

    def test_builds_aiohttp_transport_by_default(self):
        config = PipelineConfig.from_dict(
            {"transport": {"proxy": {"type": "socks5", "address": "p:1080"}}}
        )

        pipeline = create_pipeline(config)

        assert isinstance(pipeline.transport, AiohttpTransport)
        assert pipeline.transport.proxy_type is ProxyType.SOCKS5

    def test_malformed_proxy_address_fails_at_build(self):
        config = PipelineConfig.from_dict(
            {"transport": {"proxy": {"type": "socks5", "address": ["p", "port"]}}}
        )

        with pytest.raises(UnsupportedConfigurationError):
            create_pipeline(config)

    def test_unknown_proxy_type_fails_at_build(self):
        config = PipelineConfig.from_dict(
            {"transport": {"proxy": {"type": "carrier-pigeon", "address": "p:1"}}}
        )

        with pytest.raises(UnsupportedConfigurationError):
            create_pipeline(config)

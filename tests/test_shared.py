"""
Unit tests for shared configuration, errors and service helpers.
"""

import re

import pytest
from pydantic import ValidationError as ConfigValidationError

from shared.base_service import origin_suffix_regex
from shared.config import ContributionsConfig, DEFAULT_CORS_ALLOWED_ORIGINS
from shared.errors import (
    CacheInconsistencyError,
    ContributionsError,
    ExternalServiceError,
    ServiceError,
    UpstreamDecodeError,
    UpstreamTransportError,
)
from shared.logging import configure_logging, get_logger, request_id_var, set_request_id, clear_context
from shared.tracing import deployment_tag


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run with a known environment and no stray .env file."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "GITHUB_TOKEN", "GITHUB_USER", "GITHUB_URL", "PORT", "ENV", "LOG_LEVEL",
        "AXIOM_TOKEN", "CONTRIBUTIONS_SINGLE_FLIGHT", "CORS_ALLOWED_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfig:
    """Environment-driven configuration."""

    def test_token_is_required(self, clean_env):
        with pytest.raises(ConfigValidationError):
            ContributionsConfig()

    def test_defaults(self, clean_env):
        clean_env.setenv("GITHUB_TOKEN", "abc")

        config = ContributionsConfig()

        assert config.github_token == "abc"
        assert config.user is None
        assert config.port == 3002
        assert config.env == "production"
        assert config.enable_tracing is False
        assert config.collapse_concurrent_refreshes is False
        assert config.upstream_timeout_seconds == 10.0
        assert config.cors_allowed_origins == DEFAULT_CORS_ALLOWED_ORIGINS

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("GITHUB_TOKEN", "abc")
        clean_env.setenv("GITHUB_USER", "finndore")
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("ENV", "development")
        clean_env.setenv("CONTRIBUTIONS_SINGLE_FLIGHT", "true")
        clean_env.setenv("CORS_ALLOWED_ORIGINS", '["https://example.com"]')

        config = ContributionsConfig()

        assert config.user == "finndore"
        assert config.port == 8080
        assert config.is_development is True
        assert config.collapse_concurrent_refreshes is True
        assert config.cors_allowed_origins == ["https://example.com"]

    def test_legacy_user_variable(self, clean_env):
        clean_env.setenv("GITHUB_TOKEN", "abc")
        clean_env.setenv("GITHUB_URL", "finndore")

        assert ContributionsConfig().user == "finndore"

    def test_blank_user_means_no_override(self, clean_env):
        clean_env.setenv("GITHUB_TOKEN", "abc")
        clean_env.setenv("GITHUB_USER", "   ")

        assert ContributionsConfig().user is None

    def test_axiom_token_enables_tracing(self, clean_env):
        clean_env.setenv("GITHUB_TOKEN", "abc")
        clean_env.setenv("AXIOM_TOKEN", "xaat-123")

        assert ContributionsConfig().enable_tracing is True


class TestErrors:
    """Error taxonomy."""

    def test_upstream_errors_are_external_service_errors(self):
        transport = UpstreamTransportError("refused", details={"user": "octocat"})
        decode = UpstreamDecodeError()

        assert isinstance(transport, ExternalServiceError)
        assert isinstance(decode, ExternalServiceError)
        assert transport.code == "UPSTREAM_TRANSPORT_ERROR"
        assert decode.code == "UPSTREAM_DECODE_ERROR"
        assert transport.message == "github: refused"
        assert transport.details == {"user": "octocat"}

    def test_cache_inconsistency_is_a_service_error(self):
        error = CacheInconsistencyError(details={"fetched_at_ms": 5})

        assert isinstance(error, ServiceError)
        assert isinstance(error, ContributionsError)
        assert error.code == "CACHE_INCONSISTENCY"

    def test_to_response(self):
        response = UpstreamDecodeError("bad shape").to_response()

        assert response.code == "UPSTREAM_DECODE_ERROR"
        assert response.message == "github: bad shape"
        assert response.trace_id is None


class TestOriginRegex:
    """CORS origin matching by suffix."""

    def test_matches_suffixes_only(self):
        pattern = re.compile(origin_suffix_regex(["https://finndore.dev", "finnnn.vercel.app"]))

        assert pattern.fullmatch("https://finndore.dev")
        assert pattern.fullmatch("https://branch-finnnn.vercel.app")
        assert not pattern.fullmatch("https://finndore.dev.evil.com")
        assert not pattern.fullmatch("https://finndoreXdev")

    def test_no_origins_means_no_regex(self):
        assert origin_suffix_regex([]) is None


class TestLoggingAndTracing:
    """Logging context and tracing helpers."""

    @pytest.mark.parametrize("development", [True, False])
    def test_configure_logging_and_log(self, development):
        configure_logging("gh", "info", development=development)

        get_logger("gh.test").info("hello", answer=42)

    def test_request_id_context(self):
        request_id = set_request_id()

        assert request_id_var.get() == request_id
        clear_context()
        assert request_id_var.get() is None

    def test_deployment_tag(self):
        assert deployment_tag(None, None) == "unknown_deployment"
        assert deployment_tag("dep-1", None) == "dep-1-unknown_replica"
        assert deployment_tag("dep-1", "r-2") == "dep-1-r-2"

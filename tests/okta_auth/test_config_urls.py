"""Unit tests for domain normalization and client configuration."""

import pytest
from pydantic import ValidationError

from okta_auth.config import ClientConfig
from okta_auth.errors import ConfigurationError
from okta_auth.urls import OktaApiUrls, normalize_domain


class TestNormalizeDomain:
    """Tests for normalize_domain."""

    @pytest.mark.parametrize(
        "domain,expected",
        [
            ("example.okta.com", "https://example.okta.com"),
            ("  example.okta.com  ", "https://example.okta.com"),
            ("https://example.okta.com", "https://example.okta.com"),
            ("http://localhost:8080", "http://localhost:8080"),
            ("https://example.okta.com/", "https://example.okta.com"),
            ("https://example.okta.com/app/home?x=1#top", "https://example.okta.com"),
            ("example.okta.com:8443", "https://example.okta.com:8443"),
        ],
    )
    def test_valid(self, domain, expected):
        """Test valid domains are turned into a root URL."""
        assert normalize_domain(domain) == expected

    @pytest.mark.parametrize("domain", ["", "   ", None])
    def test_blank(self, domain):
        """Test a blank domain is rejected."""
        with pytest.raises(ConfigurationError, match="blank"):
            normalize_domain(domain)

    @pytest.mark.parametrize("domain", ["ftp://example.okta.com", "https://"])
    def test_invalid(self, domain):
        """Test unsupported schemes and missing hosts are rejected."""
        with pytest.raises(ConfigurationError, match="Invalid Okta domain"):
            normalize_domain(domain)

    def test_authn_path(self):
        """Test the primary authentication path."""
        assert OktaApiUrls.AUTHN == "/api/v1/authn"


class TestClientConfig:
    """Tests for ClientConfig."""

    def test_defaults(self):
        """Test default settings."""
        config = ClientConfig(domain="example.okta.com")

        assert config.root_url == "https://example.okta.com"
        assert config.timeout == 30.0
        assert config.proxy is None
        assert "okta-auth" in config.user_agent
        assert config.push_poll_interval == 3.0
        assert config.push_max_attempts == 10

    def test_invalid_domain(self):
        """Test a malformed domain fails at construction."""
        with pytest.raises(ConfigurationError):
            ClientConfig(domain="ftp://example.okta.com")

    @pytest.mark.parametrize(
        "field,value",
        [("timeout", 0), ("push_poll_interval", -1), ("push_max_attempts", 0)],
    )
    def test_out_of_range(self, field, value):
        """Test numeric settings are range checked."""
        with pytest.raises(ValidationError):
            ClientConfig(domain="example.okta.com", **{field: value})

    def test_is_immutable(self):
        """Test settings can't be changed after construction."""
        config = ClientConfig(domain="example.okta.com")

        with pytest.raises(ValidationError):
            config.timeout = 5.0


class TestClientConfigFromEnv:
    """Tests for ClientConfig.from_env."""

    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        for name in (
            "OKTA_DOMAIN",
            "OKTA_TIMEOUT",
            "OKTA_PROXY",
            "OKTA_PUSH_POLL_INTERVAL",
            "OKTA_PUSH_MAX_ATTEMPTS",
        ):
            monkeypatch.delenv(name, raising=False)

    def test_without_domain(self):
        """Test None is returned when OKTA_DOMAIN is unset."""
        assert ClientConfig.from_env() is None

    def test_domain_only(self, monkeypatch):
        """Test only the domain is required."""
        monkeypatch.setenv("OKTA_DOMAIN", "example.okta.com")

        config = ClientConfig.from_env()

        assert config is not None
        assert config.root_url == "https://example.okta.com"
        assert config.timeout == 30.0

    def test_all_settings(self, monkeypatch):
        """Test every supported variable is read."""
        monkeypatch.setenv("OKTA_DOMAIN", "https://example.okta.com")
        monkeypatch.setenv("OKTA_TIMEOUT", "12.5")
        monkeypatch.setenv("OKTA_PROXY", "proxy.example.com:8080")
        monkeypatch.setenv("OKTA_PUSH_POLL_INTERVAL", "1")
        monkeypatch.setenv("OKTA_PUSH_MAX_ATTEMPTS", "4")

        config = ClientConfig.from_env()

        assert config.timeout == 12.5
        assert config.proxy == "proxy.example.com:8080"
        assert config.push_poll_interval == 1.0
        assert config.push_max_attempts == 4

    def test_invalid_value(self, monkeypatch):
        """Test an invalid value is reported."""
        monkeypatch.setenv("OKTA_DOMAIN", "example.okta.com")
        monkeypatch.setenv("OKTA_PUSH_MAX_ATTEMPTS", "many")

        with pytest.raises(ValidationError):
            ClientConfig.from_env()

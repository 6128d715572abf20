"""Unit tests for the configuration module."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest
from pydantic import ValidationError

from docling_serve_client.client import DoclingServeClientError
from docling_serve_client.config import (
    API_KEY_ENV_VAR,
    DEFAULT_API_KEY_HEADER,
    DEFAULT_BASE_URL,
    ClientConfig,
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
    LoggingConfig,
    Settings,
    find_config_file,
    load_settings,
)
from docling_serve_client.observability import LogFormat, LogLevel


if TYPE_CHECKING:
    from pathlib import Path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Run each test away from real config files and DOCLING_SERVE_* variables."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(API_KEY_ENV_VAR, raising=False)
    monkeypatch.delenv("DOCLING_SERVE_CLIENT__BASE_URL", raising=False)
    monkeypatch.delenv("DOCLING_SERVE_CLIENT__API_KEY", raising=False)


@pytest.fixture
def sample_config_yaml(tmp_path: Path) -> Path:
    """Create a sample configuration file."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("""
client:
  base_url: "http://docling.test:5001"
  api_key: "yaml-key"
  headers:
    X-Tenant: "acme"
  timeout: 120

observability:
  logging:
    level: "DEBUG"
    format: "json"
""")
    return config_file


@pytest.fixture
def minimal_config_yaml(tmp_path: Path) -> Path:
    """Create a minimal configuration file (uses all defaults)."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("# Empty config - uses all defaults\n")
    return config_file


@pytest.fixture
def config_with_interpolation(tmp_path: Path) -> Path:
    """Create a config file with environment variable interpolation."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("""
client:
  base_url: "${TEST_DOCLING_URL:-http://default:5001}"
  api_key: "${TEST_DOCLING_KEY}"
""")
    return config_file


# ---------------------------------------------------------------------------
# Schema Tests
# ---------------------------------------------------------------------------


class TestClientConfig:
    """Tests for the ClientConfig model."""

    def test_defaults(self) -> None:
        """Test the connection defaults."""
        config = ClientConfig()

        assert config.base_url == DEFAULT_BASE_URL == "http://localhost:8000/"
        assert config.api_key is None
        assert config.api_key_header == DEFAULT_API_KEY_HEADER == "X-Api-Key"
        assert config.headers == {}
        assert config.timeout is None

    def test_base_url_gets_trailing_slash(self) -> None:
        """Test base_url is normalized to end with a slash."""
        config = ClientConfig(base_url="http://docling:5001/api")
        assert config.base_url == "http://docling:5001/api/"

    def test_base_url_keeps_existing_slash(self) -> None:
        """Test base_url with a trailing slash is unchanged."""
        config = ClientConfig(base_url="https://docling.example.com/")
        assert config.base_url == "https://docling.example.com/"

    def test_base_url_requires_http_scheme(self) -> None:
        """Test non-http base URLs are rejected."""
        with pytest.raises(ValidationError, match="http:// or https://"):
            ClientConfig(base_url="ftp://docling:5001")

    def test_timeout_must_be_positive(self) -> None:
        """Test timeout bounds."""
        with pytest.raises(ValidationError):
            ClientConfig(timeout=0)

    def test_config_is_frozen(self) -> None:
        """Test configuration cannot be mutated after creation."""
        config = ClientConfig()
        with pytest.raises(ValidationError):
            config.base_url = "http://other:5001/"  # type: ignore[misc]

    def test_config_forbids_extra_fields(self) -> None:
        """Test unknown fields are rejected."""
        with pytest.raises(ValidationError):
            ClientConfig(url="http://docling:5001")  # type: ignore[call-arg]

    def test_default_headers_include_api_key(self) -> None:
        """Test the API key is sent in the X-Api-Key header."""
        config = ClientConfig(api_key="secret", headers={"X-Tenant": "acme"})

        headers = config.default_headers()

        assert isinstance(headers, httpx.Headers)
        assert headers["x-api-key"] == "secret"
        assert headers["x-tenant"] == "acme"

    def test_default_headers_custom_api_key_header(self) -> None:
        """Test the API key header name can be changed."""
        config = ClientConfig(api_key="secret", api_key_header="Authorization")

        headers = config.default_headers()

        assert headers["authorization"] == "secret"
        assert "x-api-key" not in headers

    def test_default_headers_without_api_key(self) -> None:
        """Test no API key header is sent when no key is configured."""
        assert "x-api-key" not in ClientConfig().default_headers()

    def test_api_key_is_secret(self) -> None:
        """Test the API key does not leak through repr."""
        config = ClientConfig(api_key="secret")
        assert "secret" not in repr(config)

    def test_httpx_timeout_none(self) -> None:
        """Test no timeout is applied by default."""
        timeout = ClientConfig().httpx_timeout()
        assert timeout.connect is None
        assert timeout.read is None

    def test_httpx_timeout_value(self) -> None:
        """Test a configured timeout applies to all phases."""
        timeout = ClientConfig(timeout=30).httpx_timeout()
        assert timeout.connect == 30
        assert timeout.read == 30


class TestApiKeyFileResolution:
    """Tests for api_key_file resolution."""

    def test_api_key_from_file(self, tmp_path: Path) -> None:
        """Test the API key is read from api_key_file."""
        key_file = tmp_path / "key.txt"
        key_file.write_text("key-from-file\n")

        config = ClientConfig(api_key_file=key_file)

        assert config.api_key is not None
        assert config.api_key.get_secret_value() == "key-from-file"

    def test_api_key_file_not_found(self, tmp_path: Path) -> None:
        """Test error when api_key_file doesn't exist."""
        with pytest.raises(ValidationError, match="API key file not found"):
            ClientConfig(api_key_file=tmp_path / "missing.txt")

    def test_api_key_takes_precedence_over_file(self, tmp_path: Path) -> None:
        """Test a direct api_key wins over api_key_file."""
        key_file = tmp_path / "key.txt"
        key_file.write_text("file-key")

        config = ClientConfig(api_key="direct-key", api_key_file=key_file)

        assert config.api_key is not None
        assert config.api_key.get_secret_value() == "direct-key"


class TestLoggingConfig:
    """Tests for the LoggingConfig model."""

    def test_defaults(self) -> None:
        """Test logging defaults."""
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format is None

    def test_accepts_uppercase_values(self) -> None:
        """Test enum values are case-insensitive."""
        config = LoggingConfig(level="WARNING", format="LOGFMT")  # type: ignore[arg-type]
        assert config.level == LogLevel.WARNING
        assert config.format == LogFormat.LOGFMT


# ---------------------------------------------------------------------------
# Settings Loading Tests
# ---------------------------------------------------------------------------


class TestSettingsLoading:
    """Tests for loading settings."""

    def test_load_settings_with_defaults(self) -> None:
        """Test loading settings with no config file."""
        settings = load_settings()

        assert settings.client.base_url == DEFAULT_BASE_URL
        assert settings.client.api_key is None
        assert settings.observability.logging.level == LogLevel.INFO

    def test_load_settings_from_yaml(self, sample_config_yaml: Path) -> None:
        """Test loading settings from a YAML file."""
        settings = load_settings(sample_config_yaml)

        assert settings.client.base_url == "http://docling.test:5001/"
        assert settings.client.api_key is not None
        assert settings.client.api_key.get_secret_value() == "yaml-key"
        assert settings.client.headers == {"X-Tenant": "acme"}
        assert settings.client.timeout == 120
        assert settings.observability.logging.level == LogLevel.DEBUG
        assert settings.observability.logging.format == LogFormat.JSON

    def test_load_settings_minimal_yaml(self, minimal_config_yaml: Path) -> None:
        """Test an empty config file yields defaults."""
        settings = load_settings(minimal_config_yaml)
        assert settings.client.base_url == DEFAULT_BASE_URL

    def test_load_settings_from_search_path(self, tmp_path: Path) -> None:
        """Test the default search locations are used without an explicit path."""
        (tmp_path / "docling-serve.yaml").write_text(
            'client:\n  base_url: "http://found:5001"\n'
        )

        settings = load_settings()

        assert settings.client.base_url == "http://found:5001/"

    def test_load_settings_requires_file(self) -> None:
        """Test require_config_file raises when no file is found."""
        with pytest.raises(ConfigurationFileNotFoundError) as exc_info:
            load_settings(require_config_file=True)

        assert exc_info.value.searched_paths

    def test_load_settings_nonexistent_file_optional(self, tmp_path: Path) -> None:
        """Test a missing optional file falls back to defaults."""
        settings = load_settings(tmp_path / "missing.yaml")
        assert settings.client.base_url == DEFAULT_BASE_URL

    def test_load_settings_invalid_value(self, tmp_path: Path) -> None:
        """Test validation errors are wrapped."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text('client:\n  base_url: "docling:5001"\n')

        with pytest.raises(ConfigurationValidationError) as exc_info:
            load_settings(config_file)

        assert exc_info.value.errors
        assert "validation error" in exc_info.value.message

    def test_load_settings_unknown_field(self, tmp_path: Path) -> None:
        """Test typos in a section are reported."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text('client:\n  baseurl: "http://docling:5001"\n')

        with pytest.raises(ConfigurationValidationError):
            load_settings(config_file)

    def test_load_settings_invalid_yaml(self, tmp_path: Path) -> None:
        """Test YAML syntax errors are wrapped."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("client: [unclosed\n")

        with pytest.raises(ConfigurationValidationError, match="Failed to load"):
            load_settings(config_file)

    def test_load_settings_is_not_cached(self, tmp_path: Path) -> None:
        """Test each call reads the configuration again."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text('client:\n  base_url: "http://first:5001"\n')
        first = load_settings(config_file)

        config_file.write_text('client:\n  base_url: "http://second:5001"\n')
        second = load_settings(config_file)

        assert first.client.base_url == "http://first:5001/"
        assert second.client.base_url == "http://second:5001/"


class TestEnvironmentVariableInterpolation:
    """Tests for ${VAR} interpolation in YAML values."""

    def test_interpolation_with_value(
        self,
        config_with_interpolation: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test interpolation when environment variable is set."""
        monkeypatch.setenv("TEST_DOCLING_URL", "http://env-docling:9000")
        monkeypatch.setenv("TEST_DOCLING_KEY", "env-key-xyz")

        settings = load_settings(config_with_interpolation)

        assert settings.client.base_url == "http://env-docling:9000/"
        assert settings.client.api_key is not None
        assert settings.client.api_key.get_secret_value() == "env-key-xyz"

    def test_interpolation_with_default(
        self,
        config_with_interpolation: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test interpolation uses default when variable not set."""
        monkeypatch.delenv("TEST_DOCLING_URL", raising=False)
        monkeypatch.setenv("TEST_DOCLING_KEY", "env-key-xyz")

        settings = load_settings(config_with_interpolation)

        assert settings.client.base_url == "http://default:5001/"

    def test_interpolation_empty_when_missing(
        self,
        config_with_interpolation: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test a missing variable without default becomes an empty string."""
        monkeypatch.delenv("TEST_DOCLING_KEY", raising=False)

        settings = load_settings(config_with_interpolation)

        assert settings.client.api_key is not None
        assert settings.client.api_key.get_secret_value() == ""
        assert "x-api-key" not in settings.client.default_headers()


class TestEnvironmentVariableOverrides:
    """Tests for environment variable overrides."""

    def test_env_override_nested(
        self,
        sample_config_yaml: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test an environment variable overrides the YAML value."""
        monkeypatch.setenv("DOCLING_SERVE_CLIENT__BASE_URL", "http://env:7000")

        settings = load_settings(sample_config_yaml)

        assert settings.client.base_url == "http://env:7000/"
        # Other YAML values survive
        assert settings.client.timeout == 120

    def test_env_override_logging_level(
        self,
        minimal_config_yaml: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test deeply nested environment variable override."""
        monkeypatch.setenv("DOCLING_SERVE_OBSERVABILITY__LOGGING__LEVEL", "ERROR")

        settings = load_settings(minimal_config_yaml)

        assert settings.observability.logging.level == LogLevel.ERROR

    def test_api_key_env_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test DOCLING_SERVE_API_KEY is used when no key is configured."""
        monkeypatch.setenv(API_KEY_ENV_VAR, "env-fallback-key")

        settings = load_settings()

        assert settings.client.api_key is not None
        assert settings.client.api_key.get_secret_value() == "env-fallback-key"

    def test_api_key_env_fallback_does_not_override_yaml(
        self,
        sample_config_yaml: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test a configured API key wins over the shortcut variable."""
        monkeypatch.setenv(API_KEY_ENV_VAR, "env-fallback-key")

        settings = load_settings(sample_config_yaml)

        assert settings.client.api_key is not None
        assert settings.client.api_key.get_secret_value() == "yaml-key"


class TestFindConfigFile:
    """Tests for find_config_file function."""

    def test_find_explicit_path(self, sample_config_yaml: Path) -> None:
        """Test finding an explicit path."""
        assert find_config_file(sample_config_yaml) == sample_config_yaml

    def test_find_explicit_path_string(self, sample_config_yaml: Path) -> None:
        """Test finding an explicit path given as a string."""
        assert find_config_file(str(sample_config_yaml)) == sample_config_yaml

    def test_find_nonexistent_returns_none(self, tmp_path: Path) -> None:
        """Test a missing explicit path returns None."""
        assert find_config_file(tmp_path / "missing.yaml") is None

    def test_find_searches_default_paths(self, tmp_path: Path) -> None:
        """Test the search order of the default locations."""
        yml = tmp_path / "docling-serve.yml"
        yml.write_text("")
        result = find_config_file()
        assert result is not None
        assert result.resolve() == yml.resolve()

        yaml = tmp_path / "docling-serve.yaml"
        yaml.write_text("")
        result = find_config_file()
        assert result is not None
        assert result.resolve() == yaml.resolve()

    def test_find_nothing(self) -> None:
        """Test None is returned when nothing is found."""
        assert find_config_file() is None


class TestExceptions:
    """Tests for configuration exceptions."""

    def test_configuration_error_base(self) -> None:
        """Test configuration errors share the library's base exception."""
        error = ConfigurationError("bad config")
        assert isinstance(error, DoclingServeClientError)
        assert error.message == "bad config"

    def test_configuration_file_not_found_error(self) -> None:
        """Test the message names the missing path."""
        error = ConfigurationFileNotFoundError(
            path="/etc/docling.yaml",
            searched_paths=["a.yaml", "b.yaml"],
        )
        assert isinstance(error, ConfigurationError)
        assert error.path == "/etc/docling.yaml"
        assert "/etc/docling.yaml" in str(error)
        assert error.searched_paths == ["a.yaml", "b.yaml"]

    def test_configuration_validation_error_no_errors(self) -> None:
        """Test errors default to an empty list."""
        error = ConfigurationValidationError("invalid")
        assert error.errors == []


class TestSettingsObject:
    """Tests for the Settings object."""

    def test_settings_has_all_sections(self) -> None:
        """Test settings expose the client and observability sections."""
        settings = Settings()

        assert isinstance(settings.client, ClientConfig)
        assert isinstance(settings.observability.logging, LoggingConfig)

    def test_settings_constructor_arguments_win(self) -> None:
        """Test constructor arguments take precedence."""
        settings = Settings(client=ClientConfig(base_url="http://init:5001"))
        assert settings.client.base_url == "http://init:5001/"

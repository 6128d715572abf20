"""Configuration schema models for docling-serve-client.

This module defines the Pydantic models for every configuration section.
They are used by the Settings class to validate configuration loaded from
YAML files and environment variables, and ``ClientConfig`` can also be
built directly in code.
"""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - needed at runtime for Pydantic
from typing import Annotated

import httpx
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)

from docling_serve_client.observability.logging import LogFormat, LogLevel


__all__ = [
    "DEFAULT_API_KEY_HEADER",
    "DEFAULT_BASE_URL",
    "ClientConfig",
    "ConfigBaseModel",
    "LoggingConfig",
    "ObservabilityConfig",
]


DEFAULT_BASE_URL = "http://localhost:8000/"
DEFAULT_API_KEY_HEADER = "X-Api-Key"


# ---------------------------------------------------------------------------
# Base Configuration Model
# ---------------------------------------------------------------------------


class ConfigBaseModel(BaseModel):
    """Base model for all configuration sections.

    Uses stricter settings than API models to catch configuration typos:
    - extra="forbid" raises errors for unknown fields
    - validate_default=True ensures defaults are validated
    - frozen=True keeps a configuration immutable once built
    """

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        validate_default=True,
        frozen=True,
    )


# ---------------------------------------------------------------------------
# docling-serve Connection
# ---------------------------------------------------------------------------


class ClientConfig(ConfigBaseModel):
    """docling-serve connection configuration.

    Attributes:
        base_url: Base URL of the docling-serve instance. Always stored with
            a trailing slash so relative paths resolve beneath it.
        api_key: Optional static API key sent with every request.
        api_key_file: Path to a file containing the API key, read when
            ``api_key`` is not set.
        api_key_header: Header name used for the API key.
        headers: Default headers sent with every request.
        timeout: Request timeout in seconds. None (default) imposes no
            timeout; callers can still cancel individual calls.
    """

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the docling-serve instance",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Static API key attached to every request",
    )
    api_key_file: Path | None = Field(
        default=None,
        description="Path to file containing the API key",
    )
    api_key_header: str = Field(
        default=DEFAULT_API_KEY_HEADER,
        min_length=1,
        description="Header carrying the API key",
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Default headers sent with every request",
    )
    timeout: Annotated[float, Field(gt=0)] | None = Field(
        default=None,
        description="Request timeout in seconds (None for no timeout)",
    )

    @field_validator("base_url")
    @classmethod
    def normalize_base_url(cls, v: str) -> str:
        """Validate the URL scheme and ensure a trailing slash."""
        if not v.startswith(("http://", "https://")):
            msg = "base_url must start with http:// or https://"
            raise ValueError(msg)
        return v if v.endswith("/") else f"{v}/"

    @model_validator(mode="after")
    def resolve_api_key_file(self) -> ClientConfig:
        """Read the API key from ``api_key_file`` when no key is set.

        Returns:
            Self with the resolved API key.

        Raises:
            ValueError: If api_key_file is specified but file doesn't exist.
        """
        if self.api_key is not None or self.api_key_file is None:
            return self

        if not self.api_key_file.is_file():
            msg = f"API key file not found: {self.api_key_file}"
            raise ValueError(msg)

        # Use object.__setattr__ since the model is frozen
        object.__setattr__(
            self,
            "api_key",
            SecretStr(self.api_key_file.read_text().strip()),
        )
        return self

    def default_headers(self) -> httpx.Headers:
        """Return the headers sent with every request, API key included."""
        headers = httpx.Headers(self.headers)
        if self.api_key is not None and self.api_key.get_secret_value():
            headers[self.api_key_header] = self.api_key.get_secret_value()
        return headers

    def httpx_timeout(self) -> httpx.Timeout:
        """Return the configured timeout as an httpx Timeout."""
        return httpx.Timeout(self.timeout)


# ---------------------------------------------------------------------------
# Observability Configuration
# ---------------------------------------------------------------------------


class LoggingConfig(ConfigBaseModel):
    """Logging configuration.

    Attributes:
        level: Minimum log level.
        format: Output format. None picks console output on a TTY and
            logfmt otherwise.
    """

    level: LogLevel = Field(default=LogLevel.INFO)
    format: LogFormat | None = Field(default=None)

    @field_validator("level", "format", mode="before")
    @classmethod
    def lowercase_enum_values(cls, v: object) -> object:
        """Accept enum values in any case (e.g. ``DEBUG`` from the environment)."""
        if isinstance(v, str):
            return v.lower()
        return v


class ObservabilityConfig(ConfigBaseModel):
    """Observability configuration.

    Attributes:
        logging: Logging configuration.
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

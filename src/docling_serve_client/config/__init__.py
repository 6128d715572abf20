"""Configuration module for docling-serve-client.

Configuration is managed with Pydantic settings, loaded from YAML files and
``DOCLING_SERVE_*`` environment variables. YAML values support ${VAR} and
${VAR:-default} interpolation. ``ClientConfig`` is immutable and can also be
built directly in code.

Example:
    >>> from docling_serve_client.config import ClientConfig, load_settings
    >>>
    >>> settings = load_settings()
    >>> print(settings.client.base_url)
    http://localhost:8000/
    >>>
    >>> config = ClientConfig(base_url="http://docling:5001", api_key="secret")
    >>> print(config.base_url)
    http://docling:5001/
"""

from __future__ import annotations

from docling_serve_client.config.exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
)
from docling_serve_client.config.schema import (
    DEFAULT_API_KEY_HEADER,
    DEFAULT_BASE_URL,
    ClientConfig,
    ConfigBaseModel,
    LoggingConfig,
    ObservabilityConfig,
)
from docling_serve_client.config.settings import (
    API_KEY_ENV_VAR,
    Settings,
    find_config_file,
    load_settings,
)


__all__ = [
    "API_KEY_ENV_VAR",
    "DEFAULT_API_KEY_HEADER",
    "DEFAULT_BASE_URL",
    "ClientConfig",
    "ConfigBaseModel",
    "ConfigurationError",
    "ConfigurationFileNotFoundError",
    "ConfigurationValidationError",
    "LoggingConfig",
    "ObservabilityConfig",
    "Settings",
    "find_config_file",
    "load_settings",
]

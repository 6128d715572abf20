"""Settings loading for docling-serve-client.

Settings come from constructor arguments, ``DOCLING_SERVE_*`` environment
variables and an optional YAML file, in that order of priority.

Example:
    >>> from docling_serve_client.config import load_settings
    >>> settings = load_settings()
    >>> print(settings.client.base_url)
    http://localhost:8000/
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import SecretStr, ValidationError, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from docling_serve_client.config.exceptions import (
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
)
from docling_serve_client.config.schema import ClientConfig, ObservabilityConfig


if TYPE_CHECKING:
    from collections.abc import Sequence


__all__ = [
    "API_KEY_ENV_VAR",
    "Settings",
    "find_config_file",
    "load_settings",
]


API_KEY_ENV_VAR = "DOCLING_SERVE_API_KEY"

# ${NAME} or ${NAME:-fallback}
_PLACEHOLDER = re.compile(
    r"\$\{(?P<name>[A-Z_][A-Z0-9_]*)(?::-(?P<fallback>[^}]*))?\}"
)


def _substitute(match: re.Match[str]) -> str:
    value = os.environ.get(match["name"])
    if value is None:
        return match["fallback"] or ""
    return value


def _interpolate_env_vars(value: object) -> object:
    """Replace ``${NAME}`` and ``${NAME:-fallback}`` placeholders.

    Strings nested in mappings and lists are handled too. A placeholder for
    an unset variable without fallback becomes an empty string.

    Example:
        >>> os.environ["DOCLING_KEY"] = "secret123"
        >>> _interpolate_env_vars({"api_key": "${DOCLING_KEY}"})
        {'api_key': 'secret123'}
        >>> _interpolate_env_vars("${MISSING:-http://docling:5001}")
        'http://docling:5001'
    """
    match value:
        case str():
            return _PLACEHOLDER.sub(_substitute, value)
        case dict():
            return {key: _interpolate_env_vars(item) for key, item in value.items()}
        case list():
            return [_interpolate_env_vars(item) for item in value]
        case _:
            return value


class _InterpolatingYamlConfigSettingsSource(YamlConfigSettingsSource):
    """YAML source whose string values may reference environment variables."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | str | None = None,
    ) -> None:
        # Passing yaml_file=None explicitly would mask model_config['yaml_file']
        kwargs: dict[str, Any] = {} if yaml_file is None else {"yaml_file": yaml_file}
        super().__init__(settings_cls, **kwargs)

    def _read_files(
        self,
        files: Path | str | Sequence[Path | str] | None,
    ) -> dict[str, Any]:
        data = _interpolate_env_vars(super()._read_files(files))
        return data if isinstance(data, dict) else {}


class Settings(BaseSettings):
    """Settings loaded from a YAML file and environment variables.

    Priority (highest to lowest):
    1. Constructor arguments
    2. Environment variables (``DOCLING_SERVE_CLIENT__BASE_URL`` etc.)
    3. YAML configuration file
    4. Default values

    ``DOCLING_SERVE_API_KEY`` is honoured as a shortcut when no API key was
    configured any other way.

    Attributes:
        client: docling-serve connection settings.
        observability: Logging settings.
    """

    model_config = SettingsConfigDict(
        yaml_file=None,
        yaml_file_encoding="utf-8",
        env_prefix="DOCLING_SERVE_",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    CONFIG_SEARCH_PATHS: ClassVar[list[Path]] = [
        Path("docling-serve.yaml"),
        Path("docling-serve.yml"),
        Path.home() / ".config" / "docling-serve-client" / "config.yaml",
    ]

    # Set by load_settings() for the duration of one instantiation
    _yaml_file_override: ClassVar[Path | str | None] = None

    client: ClientConfig = ClientConfig()
    observability: ObservabilityConfig = ObservabilityConfig()

    @model_validator(mode="after")
    def resolve_api_key_from_env(self) -> Settings:
        """Fall back to DOCLING_SERVE_API_KEY when no API key is configured."""
        if self.client.api_key is not None:
            return self

        env_key = os.environ.get(API_KEY_ENV_VAR)
        if env_key:
            self.client = self.client.model_copy(
                update={"api_key": SecretStr(env_key)},
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Order sources: init, environment, YAML, secrets (no dotenv)."""
        return (
            init_settings,
            env_settings,
            _InterpolatingYamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls._yaml_file_override,
            ),
            file_secret_settings,
        )


def find_config_file(config_path: Path | str | None = None) -> Path | None:
    """Find the configuration file.

    Args:
        config_path: Explicit path to a config file, or None to search
            the default locations.

    Returns:
        Path to the config file if found, None otherwise.
    """
    if config_path is not None:
        path = Path(config_path)
        return path if path.is_file() else None

    for search_path in Settings.CONFIG_SEARCH_PATHS:
        if search_path.is_file():
            return search_path

    return None


def load_settings(
    config_path: Path | str | None = None,
    *,
    require_config_file: bool = False,
) -> Settings:
    """Load and validate settings.

    Args:
        config_path: Path to a YAML config file. If None, the default
            locations are searched.
        require_config_file: Raise when no config file is found instead of
            using environment variables and defaults only.

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationFileNotFoundError: When require_config_file is True and
            no config file is found.
        ConfigurationValidationError: When validation fails.
    """
    config_file = find_config_file(config_path)

    if config_file is None and require_config_file:
        raise ConfigurationFileNotFoundError(
            path=str(config_path) if config_path else None,
            searched_paths=[str(p) for p in Settings.CONFIG_SEARCH_PATHS],
        )

    Settings._yaml_file_override = config_file  # noqa: SLF001
    try:
        return Settings()
    except ValidationError as exc:
        msg = f"Invalid configuration: {exc.error_count()} validation error(s)"
        raise ConfigurationValidationError(
            msg,
            errors=[dict(error) for error in exc.errors()],
        ) from exc
    except Exception as exc:
        # YAML syntax errors, undecodable environment values, ...
        msg = f"Failed to load configuration: {exc}"
        raise ConfigurationValidationError(msg) from exc
    finally:
        Settings._yaml_file_override = None  # noqa: SLF001

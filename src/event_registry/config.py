"""Configuration models and loading for the event registry."""

from __future__ import annotations

from copy import deepcopy
import logging
from pathlib import Path
from typing import Any, Literal

from platformdirs import user_config_path
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from .exceptions import ConfigValidationError

import tomllib  # stdlib since Python 3.11 (project requires >=3.11)

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = user_config_path("event-registry")
CONFIG_PATH = CONFIG_DIR / "config.toml"

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}

DEFAULT_NAME = "events"
DEFAULT_UNIQUE_NAME = "unique_events"


class RegistryConfig(BaseModel):
    """Behaviour switches fixed at registry creation time."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)
    unique_events: bool = Field(default=False, alias="uniqueEvents")
    debug: bool = False


class WaitOptions(BaseModel):
    """Options accepted by ``EventRegistry.wait``.

    ``timeout`` is expressed in milliseconds; ``False`` disables it.
    """

    model_config = ConfigDict(populate_by_name=True)
    timeout: float | Literal[False] = False
    resolve_on_timeout: bool = Field(default=True, alias="resolveOnTimeout")

    @field_validator("timeout", mode="before")
    @classmethod
    def _validate_timeout(cls, value: Any) -> float | bool:
        if value is None or value is False or value is True:
            return False
        if not isinstance(value, (int, float)):
            raise ValueError("timeout must be a number of milliseconds or False.")
        # Negative delays fire on the next loop iteration.
        return max(float(value), 0.0)

    @property
    def timeout_seconds(self) -> float | None:
        if self.timeout is False:
            return None
        return self.timeout / 1000.0


class PluginOptions(BaseModel):
    """Attribute names used when installing registries on a host.

    A string overrides the default attribute name, ``False`` skips the
    attachment and ``None`` keeps the default.
    """

    model_config = ConfigDict(populate_by_name=True)
    name: str | Literal[False] | None = None
    unique_name: str | Literal[False] | None = Field(default=None, alias="uniqueName")

    @field_validator("name", "unique_name", mode="before")
    @classmethod
    def _normalize_name(cls, value: Any) -> str | bool | None:
        if value is None or value is False:
            return value
        if not isinstance(value, str):
            raise ValueError("Attribute name must be a string or False.")
        normalized = value.strip()
        return normalized or None

    def resolved_name(self) -> str | None:
        if self.name is False:
            return None
        return self.name or DEFAULT_NAME

    def resolved_unique_name(self) -> str | None:
        if self.unique_name is False:
            return None
        return self.unique_name or DEFAULT_UNIQUE_NAME


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/event-registry/registry.log"

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Logging level must be a string.")
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"Unsupported log level {normalized!r}.")
        return normalized

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("log_file_path must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("log_file_path must not be empty.")
        return normalized


class Config(BaseModel):
    """Root configuration model for all sections."""

    model_config = ConfigDict(populate_by_name=True)
    registry: RegistryConfig = RegistryConfig()
    logging: LoggingConfig = LoggingConfig()


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump()


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override values onto base values."""
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _safe_default_config() -> dict[str, dict[str, Any]]:
    return deepcopy(DEFAULT_CONFIG)


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate merged config and fallback to safe defaults when possible."""
    try:
        config = Config.model_validate(raw)
        return config.model_dump()
    except ValidationError as exc:
        LOGGER.warning("Configuration validation failed, using safe defaults: %s", exc)
        return _safe_default_config()
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    A missing file is not an error; the defaults are returned.
    """
    target_path = config_path or CONFIG_PATH

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            LOGGER.warning("Failed to parse config at %s: %s", target_path, exc)
            raw_data = {}

    merged = _deep_merge(DEFAULT_CONFIG, raw_data)
    return _validate_config(merged)

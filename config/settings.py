"""Settings management utilities for the quote store.

Updates:
  v0.2.0 - 2026-10-15 - Load .env values through python-dotenv and add sync interval.
  v0.1.1 - 2026-10-09 - Require explicitly configured JSON files to exist.
  v0.1.0 - 2026-10-05 - Initial settings model with JSON and environment sources.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

from dotenv import dotenv_values
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

logger = logging.getLogger("quote_store.settings")

_DOTENV_FALLBACK_PATH = ".env"
ENV_PREFIX = "QUOTE_STORE_"
CONFIG_JSON_ENV = f"{ENV_PREFIX}CONFIG_JSON"
DEFAULT_CONFIG_PATH = Path("config") / "config.json"

DEFAULT_DB_PATH = Path("data") / "quotes.db"
DEFAULT_REMOTE_BASE_URL = "https://jsonplaceholder.typicode.com"
DEFAULT_SYNC_INTERVAL_SECONDS = 120.0


class SettingsError(Exception):
    """Raised when quote store configuration cannot be loaded or validated."""


def _read_dotenv_values() -> dict[str, str]:
    """Load ``.env`` entries into a mapping without mutating ``os.environ``."""
    env_file_override = os.getenv(f"{ENV_PREFIX}ENV_FILE")
    if env_file_override is not None:
        candidate = env_file_override.strip()
        if not candidate:
            return {}
        path = Path(candidate).expanduser()
    else:
        path = Path(_DOTENV_FALLBACK_PATH).expanduser()
    if not path.is_file():
        return {}
    raw_values = dotenv_values(str(path))
    return {str(key): str(value) for key, value in raw_values.items() if value is not None}


class QuoteStoreSettings(BaseSettings):
    """Application configuration sourced from keyword arguments, JSON, or the environment."""

    db_path: Path = Field(
        default=DEFAULT_DB_PATH,
        validate_default=True,
        description="SQLite file holding the durable key/value store.",
    )
    remote_base_url: str = Field(
        default=DEFAULT_REMOTE_BASE_URL,
        description="Base URL of the JSONPlaceholder style remote.",
    )
    remote_limit: int = Field(default=5, description="Posts requested per sync.")
    remote_text_limit: int = Field(
        default=220,
        description="Maximum characters kept from a remote post title/body.",
    )
    request_timeout_seconds: float = Field(default=15.0)
    retry_attempts: int = Field(default=3, description="Attempts per remote request.")
    sync_interval_seconds: float = Field(default=DEFAULT_SYNC_INTERVAL_SECONDS)
    notification_ttl_seconds: float = Field(
        default=8.0,
        description="Default lifetime of notifications; 0 keeps them until dismissed.",
    )
    seed_sample_quotes: bool = Field(
        default=True,
        description="Store a handful of sample quotes when nothing has been saved yet.",
    )

    model_config = cast(
        "SettingsConfigDict",
        {
            "env_prefix": ENV_PREFIX,
            "case_sensitive": False,
            "populate_by_name": True,
            "extra": "ignore",
        },
    )

    @field_validator("db_path", mode="before")
    def _normalise_path(cls, value: Any) -> Path:
        """Expand user-relative paths and coerce values to Path instances."""
        if value is None or not str(value).strip():
            raise ValueError("a filesystem path is required")
        path = Path(str(value).strip()).expanduser()
        return path.resolve()

    @field_validator("remote_base_url", mode="before")
    def _normalise_base_url(cls, value: Any) -> str:
        """Strip whitespace and trailing slashes from the remote URL."""
        text = str(value or "").strip().rstrip("/")
        if not text.startswith(("http://", "https://")):
            raise ValueError("remote_base_url must be an http(s) URL")
        return text

    @field_validator("remote_limit", "remote_text_limit", "retry_attempts")
    def _validate_positive_int(cls, value: int) -> int:
        """Ensure count-style settings are positive."""
        if value <= 0:
            raise ValueError("value must be greater than zero")
        return value

    @field_validator("request_timeout_seconds", "sync_interval_seconds")
    def _validate_positive_float(cls, value: float) -> float:
        """Ensure durations are positive."""
        if value <= 0:
            raise ValueError("duration must be greater than zero")
        return value

    @field_validator("notification_ttl_seconds")
    def _validate_ttl(cls, value: float) -> float:
        """Allow zero (sticky) but reject negative lifetimes."""
        if value < 0:
            raise ValueError("notification_ttl_seconds must not be negative")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
    ]:
        """Define configuration source precedence.

        Order (highest → lowest):
            1. Explicit keyword arguments (e.g. load_settings(remote_limit=10)).
            2. JSON configuration file.
            3. Environment variables and ``.env`` values.
            4. File secrets.
        """

        def env_with_dotenv(_: BaseSettings | None = None) -> dict[str, Any]:
            dotenv_data = {key.upper(): value for key, value in _read_dotenv_values().items()}
            environ = {key.upper(): value for key, value in os.environ.items()}
            data: dict[str, Any] = {}
            for field_name in cls.model_fields:
                key = f"{ENV_PREFIX}{field_name}".upper()
                value = environ.get(key, dotenv_data.get(key))
                if value is None:
                    continue
                stripped = str(value).strip()
                if stripped:
                    data[field_name] = stripped
            return data

        return (
            init_settings,
            cls._json_config_settings_source(settings_cls),
            cast("PydanticBaseSettingsSource", env_with_dotenv),
            file_secret_settings,
        )

    @classmethod
    def _json_config_settings_source(
        cls,
        _: type[BaseSettings],
    ) -> PydanticBaseSettingsSource:
        """Return settings extracted from an optional JSON config file."""

        def _loader(_: BaseSettings | None = None) -> dict[str, Any]:
            explicit_path = os.getenv(CONFIG_JSON_ENV)
            if explicit_path:
                path = Path(explicit_path).expanduser()
                if not path.exists():
                    raise SettingsError(f"Configuration file not found: {path}")
            else:
                path = DEFAULT_CONFIG_PATH
                if not path.exists():
                    return {}
            try:
                raw_contents = path.read_text(encoding="utf-8")
            except OSError as exc:  # pragma: no cover - filesystem failure is env-specific
                raise SettingsError(f"Unable to read configuration file: {path}") from exc
            try:
                data = json.loads(raw_contents)
            except json.JSONDecodeError as exc:
                raise SettingsError(f"Invalid JSON in configuration file: {path}") from exc
            if not isinstance(data, dict):
                raise SettingsError(f"Configuration file {path} must contain a JSON object")
            mapping_data = cast("Mapping[object, Any]", data)
            known = set(cls.model_fields)
            mapped: dict[str, Any] = {}
            for key, value in mapping_data.items():
                name = str(key)
                if name in known:
                    mapped[name] = value
                else:
                    logger.warning("Ignoring unknown configuration key %r in %s", name, path)
            return mapped

        return cast("PydanticBaseSettingsSource", _loader)


def load_settings(**overrides: Any) -> QuoteStoreSettings:
    """Return validated settings, raising SettingsError on failure."""
    try:
        return QuoteStoreSettings(**overrides)
    except SettingsError:
        raise
    except ValidationError as exc:
        raise SettingsError("Invalid quote store configuration") from exc


__all__ = [
    "CONFIG_JSON_ENV",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_DB_PATH",
    "DEFAULT_REMOTE_BASE_URL",
    "DEFAULT_SYNC_INTERVAL_SECONDS",
    "QuoteStoreSettings",
    "SettingsError",
    "load_settings",
]

"""Helpers for persisting runtime configuration overrides.

Updates:
  v0.1.1 - 2026-10-16 - Drop values equal to their defaults instead of writing them.
  v0.1.0 - 2026-10-09 - Write validated overrides to ``config/config.json``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

from pydantic import ValidationError

from .settings import DEFAULT_CONFIG_PATH, QuoteStoreSettings, SettingsError


def _normalise_value(key: str, value: object) -> Any:
    """Validate *value* through the settings model and return its JSON form."""
    try:
        validated = QuoteStoreSettings.model_validate({key: value})
    except ValidationError as exc:
        raise SettingsError(f"Invalid value for {key}: {value!r}") from exc
    normalised = getattr(validated, key)
    if isinstance(normalised, Path):
        return str(normalised)
    return normalised


def _default_for(key: str) -> Any:
    default = QuoteStoreSettings.model_fields[key].get_default(call_default_factory=True)
    if isinstance(default, Path):
        return str(default.expanduser().resolve())
    return default


def persist_settings_to_config(
    updates: Mapping[str, object | None],
    *,
    config_path: Path | None = None,
) -> Path:
    """Merge *updates* into the JSON config file and return its path.

    ``None`` removes a key. Values matching the built-in default are removed
    as well so the file only records real overrides.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    config_data: dict[str, Any] = {}
    if path.exists():
        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(parsed, Mapping):
                parsed_mapping = cast("Mapping[object, Any]", parsed)
                config_data = {str(key): value for key, value in parsed_mapping.items()}
        except json.JSONDecodeError:
            config_data = {}

    known = set(QuoteStoreSettings.model_fields)
    for key, value in updates.items():
        if key not in known:
            raise SettingsError(f"Unknown setting: {key}")
        if value is None:
            config_data.pop(key, None)
            continue
        normalised = _normalise_value(key, value)
        if normalised == _default_for(key):
            config_data.pop(key, None)
        else:
            config_data[key] = normalised

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config_data, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


__all__ = ["persist_settings_to_config"]

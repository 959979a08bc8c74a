"""Configuration helpers for the quote store.

Updates: v0.1.0 - 2026-10-05 - Expose settings loader and configuration error type.
"""

from .settings import (
    DEFAULT_DB_PATH,
    DEFAULT_REMOTE_BASE_URL,
    DEFAULT_SYNC_INTERVAL_SECONDS,
    QuoteStoreSettings,
    SettingsError,
    load_settings,
)

__all__ = [
    "DEFAULT_DB_PATH",
    "DEFAULT_REMOTE_BASE_URL",
    "DEFAULT_SYNC_INTERVAL_SECONDS",
    "QuoteStoreSettings",
    "SettingsError",
    "load_settings",
]

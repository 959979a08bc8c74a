"""Printable summaries for quote store configuration.

Updates:
  v0.1.1 - 2026-10-18 - Show sync interval and notification lifetime.
  v0.1.0 - 2026-10-11 - Extract CLI settings summary rendering.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .utils import describe_path

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from config import QuoteStoreSettings


def render_settings_summary(settings: QuoteStoreSettings) -> str:
    """Return a readable summary of the resolved configuration."""
    ttl = settings.notification_ttl_seconds
    ttl_desc = "until dismissed" if ttl == 0 else f"{ttl:g}s"
    lines = [
        "Quote store configuration summary",
        "---------------------------------",
        f"Database path: {describe_path(settings.db_path, expect_directory=False)}",
        f"Seed sample quotes: {'yes' if settings.seed_sample_quotes else 'no'}",
        "",
        "Remote sync",
        "-----------",
        f"Base URL: {settings.remote_base_url}",
        f"Posts per sync: {settings.remote_limit}",
        f"Text limit: {settings.remote_text_limit} characters",
        f"Request timeout: {settings.request_timeout_seconds:g}s",
        f"Retry attempts: {settings.retry_attempts}",
        f"Auto-sync interval: {settings.sync_interval_seconds:g}s",
        "",
        "Notifications",
        "-------------",
        f"Default lifetime: {ttl_desc}",
    ]
    return "\n".join(lines)


def print_settings_summary(settings: QuoteStoreSettings) -> None:
    """Emit a readable summary of core configuration and health checks."""
    print(render_settings_summary(settings))

"""Runtime boot helpers for the quote store CLI.

Updates:
  v0.1.1 - 2026-10-18 - Mirror notifications to stderr while a command runs.
  v0.1.0 - 2026-10-11 - Extract logging configuration helpers.
"""

from __future__ import annotations

import logging
import logging.config
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from core.notifications import Notification, NotificationSubscription, Notifier


def setup_logging(logging_conf_path: Path | None) -> None:
    """Configure logging using *logging_conf_path* when available."""
    path = logging_conf_path or Path("config/logging.conf")
    if path.exists():
        try:
            logging.config.fileConfig(path, disable_existing_loggers=False)
            return
        except Exception:  # pragma: no cover - configuration fallback
            pass
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def echo_notifications(notifier: Notifier) -> NotificationSubscription:
    """Print each notification to stderr until the subscription is closed."""

    def _echo(notification: Notification) -> None:
        print(f"[{notification.level.value}] {notification.message}", file=sys.stderr)

    return notifier.subscribe(_echo)

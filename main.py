"""Application entry point for the quote store.

Updates:
  v0.2.0 - 2026-10-18 - Echo notifications to stderr and add config-set dispatch.
  v0.1.1 - 2026-10-15 - Return exit code 2 when settings cannot be loaded.
  v0.1.0 - 2026-10-11 - Wire settings, quote book, and CLI commands.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from cli.commands import COMMAND_SPECS
from cli.parser import parse_args
from cli.runtime import echo_notifications, setup_logging
from cli.settings_summary import print_settings_summary
from config import SettingsError, load_settings
from core import QuoteStoreError, build_quote_book

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from config import QuoteStoreSettings
    from core.quote_book import QuoteBook


def _initialise_book(
    settings: QuoteStoreSettings,
    logger: logging.Logger,
) -> QuoteBook | None:
    try:
        return build_quote_book(settings)
    except QuoteStoreError as exc:
        logger.error("Failed to initialise quote store: %s", exc)
        return None


def main(argv: Sequence[str] | None = None) -> int:
    """Entrypoint that wires settings, services, and CLI commands."""
    args = parse_args(argv)
    setup_logging(args.logging_config)

    logger = logging.getLogger("quote_store.main")
    try:
        settings = load_settings()
    except SettingsError as exc:
        cause = exc.__cause__
        logger.error("Failed to load settings: %s%s", exc, f" ({cause})" if cause else "")
        return 2

    if args.print_settings:
        print_settings_summary(settings)
        return 0

    command = getattr(args, "command", None)
    spec = COMMAND_SPECS.get(command)
    if spec is None:
        spec = COMMAND_SPECS["list"]
        args.category = None
    args.settings = settings

    if not spec.requires_book:
        return spec.handler(None, args, logger)

    book = _initialise_book(settings, logger)
    if book is None:
        return 3
    try:
        with echo_notifications(book.notifier):
            return spec.handler(book, args, logger)
    finally:
        book.close()


if __name__ == "__main__":
    raise SystemExit(main())

"""CLI command handlers for the quote store.

Updates:
  v0.2.1 - 2026-10-19 - Report filter and export failures with exit code 1.
  v0.2.0 - 2026-10-18 - Add auto-sync and config-set commands.
  v0.1.1 - 2026-10-15 - Run sync handlers through asyncio.run.
  v0.1.0 - 2026-10-11 - Initial list, add, edit, delete, filter, import, and export handlers.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from config import SettingsError
from config.persistence import persist_settings_to_config
from core import (
    ALL_CATEGORIES,
    PeriodicSyncDriver,
    QuoteStoreError,
    default_export_filename,
)

from .utils import format_quote, print_and_log, resolve_export_format

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from core.quote_book import QuoteBook
else:  # pragma: no cover - runtime placeholders for type-only imports
    QuoteBook = object

CommandHandler = Callable[[QuoteBook | None, argparse.Namespace, logging.Logger], int]


@dataclass(frozen=True)
class CommandSpec:
    """Metadata for dispatching CLI command handlers."""

    handler: CommandHandler
    requires_book: bool = True


def _require_book(book: QuoteBook | None, action: str) -> QuoteBook:
    if book is None:
        raise ValueError(f"A quote book is required for {action}.")
    return book


def run_list(book: QuoteBook | None, args: argparse.Namespace, logger: logging.Logger) -> int:
    book = _require_book(book, "listing quotes")
    category = getattr(args, "category", None)
    quotes = (
        book.repository.list(category.strip() or ALL_CATEGORIES)
        if category is not None
        else book.visible_quotes()
    )
    if not quotes:
        print("No quotes in this category yet. Add one!")
        return 0
    for quote in quotes:
        print(format_quote(quote))
    logger.debug("Listed %d quotes", len(quotes))
    return 0


def run_categories(
    book: QuoteBook | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    del args, logger
    book = _require_book(book, "listing categories")
    current = book.filter_state.current()
    for category in [ALL_CATEGORIES, *book.categories()]:
        marker = "*" if category == current else " "
        print(f"{marker} {category}")
    return 0


def run_random(book: QuoteBook | None, args: argparse.Namespace, logger: logging.Logger) -> int:
    del args
    book = _require_book(book, "showing a quote")
    quote = book.show_random()
    if quote is None:
        print_and_log(logger, logging.INFO, "No quotes in this category yet. Add one!")
        return 0
    print(f'"{quote.text}"')
    print(f"  [{quote.category}]")
    return 0


def run_last(book: QuoteBook | None, args: argparse.Namespace, logger: logging.Logger) -> int:
    del args, logger
    book = _require_book(book, "showing the last quote")
    quote = book.last_shown()
    if quote is None:
        print("No quote shown in this session.")
        return 0
    print(format_quote(quote))
    return 0


def run_add(book: QuoteBook | None, args: argparse.Namespace, logger: logging.Logger) -> int:
    book = _require_book(book, "adding quotes")
    try:
        quote = book.add_quote(args.text, getattr(args, "category", None))
    except QuoteStoreError as exc:
        print_and_log(logger, logging.ERROR, f"Failed to add quote: {exc}")
        return 1
    print_and_log(logger, logging.INFO, f"Added {format_quote(quote)}")
    return 0


def run_edit(book: QuoteBook | None, args: argparse.Namespace, logger: logging.Logger) -> int:
    book = _require_book(book, "editing quotes")
    text = getattr(args, "text", None)
    category = getattr(args, "category", None)
    if text is None and category is None:
        logger.error("Provide --text and/or --category to edit a quote.")
        return 1
    try:
        quote = book.edit_quote(args.id, text=text, category=category)
    except QuoteStoreError as exc:
        print_and_log(logger, logging.ERROR, f"Failed to edit quote: {exc}")
        return 1
    print_and_log(logger, logging.INFO, f"Updated {format_quote(quote)}")
    return 0


def run_delete(book: QuoteBook | None, args: argparse.Namespace, logger: logging.Logger) -> int:
    book = _require_book(book, "deleting quotes")
    try:
        removed = book.delete_quote(args.id)
    except QuoteStoreError as exc:
        print_and_log(logger, logging.ERROR, f"Failed to delete quote: {exc}")
        return 1
    print_and_log(logger, logging.INFO, f"Deleted {removed.id}")
    return 0


def run_filter(book: QuoteBook | None, args: argparse.Namespace, logger: logging.Logger) -> int:
    book = _require_book(book, "filtering quotes")
    category = getattr(args, "category", None)
    if category is None:
        print(book.filter_state.current())
        return 0
    try:
        selected = book.select_category(category)
    except QuoteStoreError as exc:
        print_and_log(logger, logging.ERROR, f"Failed to set filter: {exc}")
        return 1
    print_and_log(logger, logging.INFO, f"Filter set to {selected}")
    return 0


def run_export(book: QuoteBook | None, args: argparse.Namespace, logger: logging.Logger) -> int:
    book = _require_book(book, "exporting quotes")
    path_value = getattr(args, "path", None)
    output_path = Path(path_value or default_export_filename()).expanduser()
    fmt = resolve_export_format(output_path, getattr(args, "format", None))
    try:
        resolved = book.export_to(output_path, fmt=fmt)
    except QuoteStoreError as exc:
        print_and_log(logger, logging.ERROR, f"Failed to export quotes: {exc}")
        return 1
    print_and_log(logger, logging.INFO, f"Quotes exported to {resolved} ({fmt})")
    return 0


def run_import(book: QuoteBook | None, args: argparse.Namespace, logger: logging.Logger) -> int:
    book = _require_book(book, "importing quotes")
    try:
        result = book.import_file(Path(args.path))
    except QuoteStoreError as exc:
        print_and_log(logger, logging.ERROR, f"Import failed: {exc}")
        return 1
    summary = result.summary()
    print_and_log(
        logger,
        logging.INFO,
        "Imported {imported} quotes (skipped={skipped}, reassigned ids={reassigned})".format(
            **summary
        ),
    )
    return 0


def run_sync(book: QuoteBook | None, args: argparse.Namespace, logger: logging.Logger) -> int:
    book = _require_book(book, "syncing")
    try:
        outcome = asyncio.run(book.sync())
    except QuoteStoreError as exc:
        print_and_log(logger, logging.ERROR, f"Sync failed: {exc}")
        return 1
    if outcome is None:
        logger.warning("A sync is already running.")
        return 0
    print_and_log(logger, logging.INFO, outcome.summary())
    if getattr(args, "undo", False):
        try:
            undone = book.undo_sync()
        except QuoteStoreError as exc:
            print_and_log(logger, logging.ERROR, f"Undo failed: {exc}")
            return 1
        if undone:
            print_and_log(logger, logging.INFO, "Sync undone. Local state restored.")
    return 0


def run_auto_sync(
    book: QuoteBook | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    book = _require_book(book, "auto-sync")
    interval = getattr(args, "interval", None)
    if interval is None:
        settings = getattr(args, "settings", None)
        interval = getattr(settings, "sync_interval_seconds", 120.0)
    iterations = getattr(args, "iterations", None)
    try:
        driver = PeriodicSyncDriver(book.sync_engine, interval)
    except ValueError as exc:
        logger.error("%s", exc)
        return 1
    logger.info("Auto-sync every %.0f seconds; press Ctrl+C to stop.", driver.interval)
    try:
        completed = asyncio.run(driver.run(iterations))
    except KeyboardInterrupt:
        logger.info("Auto-sync stopped.")
        return 0
    print_and_log(logger, logging.INFO, f"Auto-sync finished after {completed} runs.")
    return 0


def run_config_set(
    book: QuoteBook | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    del book
    try:
        path = persist_settings_to_config({args.key: getattr(args, "value", None)})
    except SettingsError as exc:
        print_and_log(logger, logging.ERROR, str(exc))
        return 2
    print_and_log(logger, logging.INFO, f"Saved {args.key} to {path}")
    return 0


COMMAND_SPECS: dict[str | None, CommandSpec] = {
    "list": CommandSpec(run_list),
    "categories": CommandSpec(run_categories),
    "random": CommandSpec(run_random),
    "last": CommandSpec(run_last),
    "add": CommandSpec(run_add),
    "edit": CommandSpec(run_edit),
    "delete": CommandSpec(run_delete),
    "filter": CommandSpec(run_filter),
    "export": CommandSpec(run_export),
    "import": CommandSpec(run_import),
    "sync": CommandSpec(run_sync),
    "auto-sync": CommandSpec(run_auto_sync),
    "config-set": CommandSpec(run_config_set, requires_book=False),
}


__all__ = ["CommandSpec", "COMMAND_SPECS"]

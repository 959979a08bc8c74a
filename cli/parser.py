"""Argument parser for the quote store CLI.

Updates:
  v0.2.0 - 2026-10-18 - Add auto-sync and config-set subcommands.
  v0.1.0 - 2026-10-11 - Initial quote browsing, editing, and import/export commands.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    """Return the configured argument parser."""
    parser = argparse.ArgumentParser(description="Quote store with server sync")
    parser.add_argument(
        "--logging-config",
        type=Path,
        default=None,
        help="Path to logging configuration file (INI format)",
    )
    parser.add_argument(
        "--print-settings",
        action="store_true",
        help="Print resolved settings and exit",
    )

    subparsers = parser.add_subparsers(dest="command")

    list_parser = subparsers.add_parser(
        "list",
        help="List quotes in the current filter (or an explicit category).",
    )
    list_parser.add_argument(
        "--category",
        default=None,
        help="Category to list instead of the saved filter ('all' lists everything).",
    )

    subparsers.add_parser("categories", help="List the distinct categories.")
    subparsers.add_parser("random", help="Show a random quote from the current filter.")
    subparsers.add_parser("last", help="Show the quote displayed last in this session.")

    add_parser = subparsers.add_parser("add", help="Add a new quote.")
    add_parser.add_argument("text", type=str, help="Quote text.")
    add_parser.add_argument(
        "--category",
        default=None,
        help="Category for the quote (default: Uncategorized).",
    )

    edit_parser = subparsers.add_parser("edit", help="Edit an existing quote.")
    edit_parser.add_argument("id", type=str, help="Quote identifier.")
    edit_parser.add_argument("--text", default=None, help="Replacement text.")
    edit_parser.add_argument("--category", default=None, help="Replacement category.")

    delete_parser = subparsers.add_parser("delete", help="Delete a quote by id.")
    delete_parser.add_argument("id", type=str, help="Quote identifier.")

    filter_parser = subparsers.add_parser(
        "filter",
        help="Show or persist the category filter.",
    )
    filter_parser.add_argument(
        "category",
        nargs="?",
        default=None,
        help="Category to select ('all' clears the filter). Omit to show the current one.",
    )

    export_parser = subparsers.add_parser(
        "export",
        help="Export every quote to JSON or YAML.",
    )
    export_parser.add_argument(
        "path",
        type=Path,
        nargs="?",
        default=None,
        help="Destination file path (default: quotes_<date>.json).",
    )
    export_parser.add_argument(
        "--format",
        choices=("json", "yaml"),
        default=None,
        help="Explicit output format (defaults based on file extension).",
    )

    import_parser = subparsers.add_parser("import", help="Import quotes from a JSON file.")
    import_parser.add_argument("path", type=Path, help="JSON file containing a quote array.")

    sync_parser = subparsers.add_parser("sync", help="Sync with the remote server once.")
    sync_parser.add_argument(
        "--undo",
        action="store_true",
        help=(
            "Sync and then restore the pre-sync collection in the same run. "
            "The snapshot lives in memory only, so a later invocation cannot undo."
        ),
    )

    auto_parser = subparsers.add_parser(
        "auto-sync",
        help="Sync periodically until interrupted.",
    )
    auto_parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between syncs (default: sync_interval_seconds setting).",
    )
    auto_parser.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="Stop after this many syncs (default: run until interrupted).",
    )

    config_parser = subparsers.add_parser(
        "config-set",
        help="Persist a setting override to config/config.json.",
    )
    config_parser.add_argument("key", type=str, help="Setting name, e.g. remote_limit.")
    config_parser.add_argument(
        "value",
        type=str,
        nargs="?",
        default=None,
        help="New value; omit to remove the override.",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return parsed CLI arguments."""
    return build_parser().parse_args(argv)

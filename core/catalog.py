"""Import and export quote collections as JSON (or YAML for export).

Updates:
  v0.2.1 - 2026-10-19 - Report undecodable import files as import errors; wrap export write failures.
  v0.2.0 - 2026-10-16 - Reassign colliding ids on import and report skipped entries.
  v0.1.1 - 2026-10-12 - Add YAML export alongside the canonical JSON array.
  v0.1.0 - 2026-10-06 - Export pretty-printed arrays and append imported quotes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, cast

import yaml

from models.quote_model import (
    DEFAULT_CATEGORY,
    Quote,
    clean_text,
    generate_quote_id,
    parse_timestamp,
    utc_now,
)

from .exceptions import QuoteImportError, QuoteStorageError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

    from .repository import QuoteRepository

logger = logging.getLogger("quote_store.catalog")

EXPORT_FORMATS = ("json", "yaml")


def default_export_filename(today: datetime | None = None) -> str:
    """Return the suggested download name, e.g. ``quotes_2026-10-19.json``."""
    stamp = (today or datetime.now(UTC)).date().isoformat()
    return f"quotes_{stamp}.json"


def export_quotes_json(quotes: Iterable[Quote]) -> str:
    """Return *quotes* as a two-space indented JSON array."""
    return json.dumps([quote.to_record() for quote in quotes], ensure_ascii=False, indent=2)


def export_quotes(
    repository: QuoteRepository,
    output_path: Path,
    *,
    fmt: str = "json",
) -> Path:
    """Write every stored quote to *output_path* and return the resolved path."""
    fmt_lower = fmt.lower()
    if fmt_lower not in EXPORT_FORMATS:
        raise ValueError("fmt must be 'json' or 'yaml'")

    quotes = repository.snapshot()
    resolved_path = output_path.expanduser()
    try:
        resolved_path.parent.mkdir(parents=True, exist_ok=True)
        if fmt_lower == "json":
            resolved_path.write_text(export_quotes_json(quotes) + "\n", encoding="utf-8")
        else:
            with resolved_path.open("w", encoding="utf-8") as handle:
                yaml.safe_dump(
                    [quote.to_record() for quote in quotes],
                    handle,
                    allow_unicode=True,
                    sort_keys=False,
                )
    except OSError as exc:
        raise QuoteStorageError(f"Cannot write export file {resolved_path}: {exc}") from exc
    logger.info("Exported %d quotes to %s", len(quotes), resolved_path)
    return resolved_path


@dataclass(slots=True)
class ImportResult:
    """Aggregate statistics from an import operation."""

    imported: int = 0
    skipped: int = 0
    reassigned: int = 0

    def summary(self) -> dict[str, int]:
        """Return aggregate counts for downstream reporting."""
        return {
            "imported": self.imported,
            "skipped": self.skipped,
            "reassigned": self.reassigned,
        }


def parse_import_payload(payload: str | bytes) -> list[dict[str, Any]]:
    """Decode *payload* and return its entries; the top level must be an array."""
    try:
        decoded: object = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise QuoteImportError(f"Import payload is not valid JSON: {exc}") from exc
    if not isinstance(decoded, list):
        raise QuoteImportError("JSON must be an array of quote objects")
    entries: list[dict[str, Any]] = []
    for raw_entry in cast("list[object]", decoded):
        if isinstance(raw_entry, dict):
            mapping = cast("Mapping[object, Any]", raw_entry)
            entries.append({str(key): value for key, value in mapping.items()})
        else:
            entries.append({})
    return entries


def normalise_entries(
    entries: Iterable[Mapping[str, Any]],
    *,
    existing_ids: Iterable[str] = (),
    now: datetime | None = None,
) -> tuple[list[Quote], ImportResult]:
    """Default missing fields and keep ids unique against *existing_ids*."""
    stamp = now or utc_now()
    taken = set(existing_ids)
    result = ImportResult()
    quotes: list[Quote] = []
    for entry in entries:
        text = clean_text(entry.get("text"))
        if not text:
            result.skipped += 1
            continue
        quote_id = clean_text(entry.get("id"))
        if not quote_id or quote_id in taken:
            if quote_id:
                result.reassigned += 1
            quote_id = generate_quote_id(taken)
        taken.add(quote_id)
        quotes.append(
            Quote(
                id=quote_id,
                text=text,
                category=clean_text(entry.get("category")) or DEFAULT_CATEGORY,
                last_modified=parse_timestamp(entry.get("lastModified")) or stamp,
            )
        )
    result.imported = len(quotes)
    return quotes, result


def import_quotes(repository: QuoteRepository, payload: str | bytes) -> ImportResult:
    """Append the quotes in *payload* to *repository* and persist them."""
    entries = parse_import_payload(payload)
    existing_ids = [quote.id for quote in repository.snapshot()]
    quotes, result = normalise_entries(entries, existing_ids=existing_ids)
    if quotes:
        repository.extend(quotes)
    if result.skipped:
        logger.warning("Skipped %d import entries without text", result.skipped)
    logger.info("Imported %d quotes", result.imported)
    return result


def import_quotes_file(repository: QuoteRepository, path: Path) -> ImportResult:
    """Read *path* and import its quotes."""
    try:
        contents = path.expanduser().read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise QuoteImportError(f"Import file is not valid UTF-8: {path}") from exc
    except OSError as exc:
        raise QuoteImportError(f"Cannot read import file: {path}") from exc
    return import_quotes(repository, contents)


__all__ = [
    "EXPORT_FORMATS",
    "ImportResult",
    "default_export_filename",
    "export_quotes",
    "export_quotes_json",
    "import_quotes",
    "import_quotes_file",
    "normalise_entries",
    "parse_import_payload",
]

"""Quote book façade tying the repository, filter, sync engine, and notifier together.

User-facing actions go through :class:`QuoteBook` so every outcome, success or
failure, is surfaced as a notification. Errors are re-raised after being
reported; the underlying components have already left state untouched.

Updates:
  v0.2.1 - 2026-10-19 - Notify filter and export failures.
  v0.2.0 - 2026-10-17 - Remember the last shown quote in session storage.
  v0.1.1 - 2026-10-14 - Surface store errors as notifications before re-raising.
  v0.1.0 - 2026-10-10 - Initial façade over repository, filter, and sync engine.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from models.quote_model import Quote

from .catalog import export_quotes, export_quotes_json, import_quotes, import_quotes_file
from .exceptions import QuoteStoreError, QuoteValidationError
from .notifications import NotificationLevel
from .storage import StorageDomain

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from .catalog import ImportResult
    from .filter_state import FilterState
    from .notifications import Notifier
    from .repository import QuoteRepository
    from .storage import PersistentStore
    from .sync import SyncEngine, SyncOutcome

logger = logging.getLogger("quote_store.book")

LAST_QUOTE_KEY = "last_quote"


class QuoteBook:
    """High-level API used by the command line front end."""

    def __init__(
        self,
        *,
        store: PersistentStore,
        repository: QuoteRepository,
        filter_state: FilterState,
        sync_engine: SyncEngine,
        notifier: Notifier,
    ) -> None:
        """Store collaborators built by :func:`core.factory.build_quote_book`."""
        self._store = store
        self._repository = repository
        self._filter_state = filter_state
        self._sync_engine = sync_engine
        self._notifier = notifier

    @property
    def repository(self) -> QuoteRepository:
        """Return the quote repository."""
        return self._repository

    @property
    def filter_state(self) -> FilterState:
        """Return the persisted category filter."""
        return self._filter_state

    @property
    def sync_engine(self) -> SyncEngine:
        """Return the sync engine."""
        return self._sync_engine

    @property
    def notifier(self) -> Notifier:
        """Return the notifier receiving user-facing messages."""
        return self._notifier

    @contextmanager
    def _surface_errors(self, prefix: str, ttl: float) -> Iterator[None]:
        try:
            yield
        except QuoteValidationError as exc:
            self._notifier.notify(f"{prefix}: {exc}", ttl, level=NotificationLevel.WARNING)
            raise
        except QuoteStoreError as exc:
            self._notifier.notify(f"{prefix}: {exc}", ttl, level=NotificationLevel.ERROR)
            raise

    # Browsing ----------------------------------------------------------- #

    def visible_quotes(self) -> list[Quote]:
        """Return quotes matching the current filter."""
        return self._repository.list(self._filter_state.current())

    def categories(self) -> list[str]:
        """Return the distinct categories currently stored."""
        return self._repository.categories()

    def select_category(self, category: str | None) -> str:
        """Persist the category filter and return the stored value."""
        with self._surface_errors("Could not save filter", 3.0):
            return self._filter_state.select(category)

    def show_random(self) -> Quote | None:
        """Pick a quote from the current filter and remember it for this session."""
        quote = self._repository.pick_random(self._filter_state.current())
        if quote is None:
            return None
        self._store.set_json(StorageDomain.SESSION, LAST_QUOTE_KEY, quote.to_record())
        return quote

    def last_shown(self) -> Quote | None:
        """Return the quote shown last in this session, if any."""
        payload = self._store.get_json(StorageDomain.SESSION, LAST_QUOTE_KEY)
        if not isinstance(payload, dict):
            return None
        try:
            return Quote.from_record(payload)
        except ValueError:
            logger.debug("Ignoring unusable session quote")
            return None

    # Mutations ---------------------------------------------------------- #

    def add_quote(self, text: str, category: str | None = None) -> Quote:
        """Add a quote and announce it."""
        with self._surface_errors("Could not add quote", 3.0):
            quote = self._repository.add(text, category)
        self._notifier.notify(
            f'Quote added in category "{quote.category}"',
            4.0,
            level=NotificationLevel.SUCCESS,
        )
        return quote

    def edit_quote(
        self,
        quote_id: str,
        *,
        text: str | None = None,
        category: str | None = None,
    ) -> Quote:
        """Edit a quote and announce it."""
        with self._surface_errors("Could not update quote", 3.0):
            quote = self._repository.edit(quote_id, text, category)
        self._notifier.notify("Quote updated", 3.0, level=NotificationLevel.SUCCESS)
        return quote

    def delete_quote(self, quote_id: str) -> Quote:
        """Delete a quote and announce it."""
        with self._surface_errors("Could not delete quote", 3.5):
            removed = self._repository.delete(quote_id)
        self._notifier.notify(
            f'Deleted quote: "{removed.text[:60]}..."',
            3.5,
            level=NotificationLevel.SUCCESS,
        )
        return removed

    # Import / export ---------------------------------------------------- #

    def export_json(self) -> str:
        """Return the whole collection as pretty-printed JSON."""
        return export_quotes_json(self._repository.snapshot())

    def export_to(self, path: Path, *, fmt: str = "json") -> Path:
        """Write the collection to *path*; unknown formats fail validation."""
        with self._surface_errors("Export failed", 6.0):
            try:
                resolved = export_quotes(self._repository, path, fmt=fmt)
            except ValueError as exc:
                raise QuoteValidationError(str(exc)) from exc
        self._notifier.notify(f"Exported quotes to {resolved.name}", 4.0)
        return resolved

    def import_json(self, payload: str | bytes) -> ImportResult:
        """Append quotes from a JSON payload."""
        with self._surface_errors("Import failed", 6.0):
            result = import_quotes(self._repository, payload)
        self._announce_import(result)
        return result

    def import_file(self, path: Path) -> ImportResult:
        """Append quotes from a JSON file."""
        with self._surface_errors("Import failed", 6.0):
            result = import_quotes_file(self._repository, path)
        self._announce_import(result)
        return result

    def _announce_import(self, result: ImportResult) -> None:
        message = f"Imported {result.imported} quotes"
        if result.skipped:
            message += f" ({result.skipped} skipped)"
        self._notifier.notify(message, 4.0, level=NotificationLevel.SUCCESS)

    # Sync --------------------------------------------------------------- #

    async def sync(self) -> SyncOutcome | None:
        """Run a sync; the engine reports its own notifications."""
        return await self._sync_engine.sync()

    def undo_sync(self) -> bool:
        """Undo the last sync when a snapshot is available."""
        with self._surface_errors("Undo failed", 5.0):
            return self._sync_engine.undo()

    def close(self) -> None:
        """End the session; durable data remains on disk."""
        self._store.close()


__all__ = ["LAST_QUOTE_KEY", "QuoteBook"]

"""In-memory quote collection with write-through persistence.

The repository is the single owner of the quote list. Every mutation builds a
new list, persists it to the durable domain and only then swaps it in, so a
failed write leaves both memory and disk on the previous state.

Updates:
  v0.3.0 - 2026-10-16 - Add whole-collection replacement for sync and undo.
  v0.2.0 - 2026-10-12 - Seed sample quotes on first boot; tolerate corrupt payloads.
  v0.1.0 - 2026-10-05 - Initial CRUD, category and random pick helpers.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Any

from models.quote_model import (
    ALL_CATEGORIES,
    DEFAULT_CATEGORY,
    Quote,
    advance_timestamp,
    clean_text,
    generate_quote_id,
    utc_now,
)

from .exceptions import QuoteNotFoundError, QuoteStorageError, QuoteValidationError
from .storage import StorageDomain

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .storage import PersistentStore

logger = logging.getLogger("quote_store.repository")

QUOTES_KEY = "quotes"

SAMPLE_QUOTES: tuple[tuple[str, str], ...] = (
    ("The secret of getting ahead is getting started.", "Motivation"),
    ("Simplicity is the ultimate sophistication.", "Philosophy"),
    ("Do what you can, with what you have, where you are.", "Motivation"),
    ("An investment in knowledge pays the best interest.", "Learning"),
)


def _validate_collection(quotes: Sequence[Quote]) -> None:
    seen: set[str] = set()
    for quote in quotes:
        if quote.id in seen:
            raise QuoteValidationError(f"Duplicate quote id {quote.id}")
        if not quote.text.strip():
            raise QuoteValidationError(f"Quote {quote.id} has empty text")
        if not quote.category.strip():
            raise QuoteValidationError(f"Quote {quote.id} has an empty category")
        seen.add(quote.id)


class QuoteRepository:
    """Owns the quote collection and mirrors it to a :class:`PersistentStore`."""

    def __init__(
        self,
        store: PersistentStore,
        *,
        seed_samples: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        """Restore the collection from *store*, seeding samples when nothing is saved."""
        self._store = store
        self._rng = rng or random.Random()
        self._quotes: list[Quote] = []
        loaded = self._load()
        if loaded is not None:
            self._quotes = loaded
        elif seed_samples:
            now = utc_now()
            samples: list[Quote] = []
            for text, category in SAMPLE_QUOTES:
                taken = {quote.id for quote in samples}
                samples.append(Quote(generate_quote_id(taken), text, category, now))
            self._commit(samples)
            logger.info("Seeded %d sample quotes", len(samples))

    # Persistence -------------------------------------------------------- #

    def _load(self) -> list[Quote] | None:
        payload: Any = self._store.get_json(StorageDomain.DURABLE, QUOTES_KEY)
        if payload is None:
            return None
        if not isinstance(payload, list):
            logger.error("Stored quotes are not a JSON array; ignoring saved data")
            return None
        quotes: list[Quote] = []
        seen: set[str] = set()
        for entry in payload:
            if not isinstance(entry, dict):
                logger.warning("Skipping non-object quote entry in storage")
                continue
            try:
                quote = Quote.from_record(entry)
            except ValueError as exc:
                logger.warning("Skipping invalid stored quote: %s", exc)
                continue
            if quote.id in seen:
                logger.warning("Skipping duplicate stored quote id %s", quote.id)
                continue
            seen.add(quote.id)
            quotes.append(quote)
        return quotes

    def _commit(self, quotes: list[Quote]) -> None:
        """Persist *quotes* and adopt them as the current collection."""
        records = [quote.to_record() for quote in quotes]
        try:
            self._store.set_json(StorageDomain.DURABLE, QUOTES_KEY, records)
        except QuoteStorageError:
            raise
        except Exception as exc:
            raise QuoteStorageError("Failed to persist quotes") from exc
        self._quotes = quotes

    def reload(self) -> None:
        """Re-read the collection from the durable domain."""
        self._quotes = self._load() or []

    # Queries ------------------------------------------------------------ #

    def __len__(self) -> int:
        """Return the number of stored quotes."""
        return len(self._quotes)

    def snapshot(self) -> tuple[Quote, ...]:
        """Return an immutable copy of the current collection."""
        return tuple(self._quotes)

    def get(self, quote_id: str) -> Quote:
        """Return the quote stored under *quote_id*."""
        for quote in self._quotes:
            if quote.id == quote_id:
                return quote
        raise QuoteNotFoundError(f"Quote {quote_id} not found")

    def list(self, category: str = ALL_CATEGORIES) -> list[Quote]:
        """Return quotes in stored order, optionally restricted to *category*."""
        if category == ALL_CATEGORIES:
            return list(self._quotes)
        return [quote for quote in self._quotes if quote.category == category]

    def categories(self) -> list[str]:
        """Return distinct categories in ascending order."""
        return sorted({quote.category for quote in self._quotes})

    def pick_random(self, category: str = ALL_CATEGORIES) -> Quote | None:
        """Return a uniformly chosen quote from *category* or ``None`` when empty."""
        pool = self.list(category)
        if not pool:
            return None
        return self._rng.choice(pool)

    # Mutations ---------------------------------------------------------- #

    def add(self, text: str, category: str | None = None) -> Quote:
        """Append a new quote and persist the collection."""
        cleaned_text = clean_text(text)
        if not cleaned_text:
            raise QuoteValidationError("Quote text must not be empty")
        quote = Quote(
            id=generate_quote_id({existing.id for existing in self._quotes}),
            text=cleaned_text,
            category=clean_text(category) or DEFAULT_CATEGORY,
            last_modified=utc_now(),
        )
        self._commit([*self._quotes, quote])
        logger.info("Added quote %s in category %s", quote.id, quote.category)
        return quote

    def edit(
        self,
        quote_id: str,
        text: str | None = None,
        category: str | None = None,
    ) -> Quote:
        """Replace the non-empty supplied fields of *quote_id*."""
        index = self._index_of(quote_id)
        current = self._quotes[index]
        updated = Quote(
            id=current.id,
            text=clean_text(text) or current.text,
            category=clean_text(category) or current.category,
            last_modified=advance_timestamp(current.last_modified),
        )
        quotes = list(self._quotes)
        quotes[index] = updated
        self._commit(quotes)
        logger.info("Updated quote %s", quote_id)
        return updated

    def delete(self, quote_id: str) -> Quote:
        """Remove *quote_id* and return the removed quote."""
        index = self._index_of(quote_id)
        quotes = list(self._quotes)
        removed = quotes.pop(index)
        self._commit(quotes)
        logger.info("Deleted quote %s", quote_id)
        return removed

    def extend(self, quotes: Iterable[Quote]) -> list[Quote]:
        """Append already-normalised *quotes*; ids must not collide."""
        additions = list(quotes)
        combined = [*self._quotes, *additions]
        _validate_collection(combined)
        self._commit(combined)
        return additions

    def replace_all(self, quotes: Iterable[Quote]) -> None:
        """Replace the whole collection (sync merges and undo)."""
        replacement = list(quotes)
        _validate_collection(replacement)
        self._commit(replacement)
        logger.debug("Replaced collection with %d quotes", len(replacement))

    def _index_of(self, quote_id: str) -> int:
        for index, quote in enumerate(self._quotes):
            if quote.id == quote_id:
                return index
        raise QuoteNotFoundError(f"Quote {quote_id} not found")


__all__ = ["QUOTES_KEY", "SAMPLE_QUOTES", "QuoteRepository"]

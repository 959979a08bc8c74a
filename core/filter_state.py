"""Persisted category filter selection.

Updates:
  v0.1.0 - 2026-10-06 - Cache the selected category and write it through on change.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from models.quote_model import ALL_CATEGORIES, clean_text

from .storage import StorageDomain

if TYPE_CHECKING:
    from .storage import PersistentStore

logger = logging.getLogger("quote_store.filter")

FILTER_KEY = "quote_filter"


class FilterState:
    """Remember the last selected category across sessions."""

    def __init__(self, store: PersistentStore) -> None:
        """Restore the saved selection from the durable domain."""
        self._store = store
        saved = store.get(StorageDomain.DURABLE, FILTER_KEY)
        self._current = clean_text(saved) or ALL_CATEGORIES

    def current(self) -> str:
        """Return the selected category or ``"all"``."""
        return self._current

    def select(self, category: str | None) -> str:
        """Persist *category* as the active filter and return it.

        No check is made against existing categories; an unknown category
        simply filters everything out.
        """
        value = clean_text(category) or ALL_CATEGORIES
        self._store.set(StorageDomain.DURABLE, FILTER_KEY, value)
        self._current = value
        logger.debug("Category filter set to %s", value)
        return value

    def reset(self) -> str:
        """Select every category again."""
        return self.select(ALL_CATEGORIES)


__all__ = ["FILTER_KEY", "FilterState"]

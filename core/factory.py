"""Factories for constructing QuoteBook instances from validated settings.

Updates:
  v0.1.1 - 2026-10-15 - Wire retry attempts and request timeout into the remote source.
  v0.1.0 - 2026-10-10 - Build store, repository, filter, sync engine, and notifier.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .filter_state import FilterState
from .notifications import Notifier
from .quote_book import QuoteBook
from .repository import QuoteRepository
from .retry import RetryPolicy
from .storage import PersistentStore
from .sync import PeriodicSyncDriver, SyncEngine
from .transport import JsonPlaceholderSource

if TYPE_CHECKING:  # pragma: no cover - typing only
    import random

    from config import QuoteStoreSettings

    from .transport import RemoteQuoteSource

factory_logger = logging.getLogger("quote_store.factory")


def build_remote_source(settings: QuoteStoreSettings) -> JsonPlaceholderSource:
    """Return the HTTP remote source configured by *settings*."""
    return JsonPlaceholderSource(
        base_url=settings.remote_base_url,
        limit=settings.remote_limit,
        text_limit=settings.remote_text_limit,
        timeout=settings.request_timeout_seconds,
        retry_policy=RetryPolicy(max_attempts=settings.retry_attempts),
    )


def build_quote_book(
    settings: QuoteStoreSettings,
    *,
    store: PersistentStore | None = None,
    transport: RemoteQuoteSource | None = None,
    notifier: Notifier | None = None,
    rng: random.Random | None = None,
) -> QuoteBook:
    """Wire every component for *settings*; keyword overrides are used in tests."""
    resolved_store = store or PersistentStore.open(settings.db_path)
    resolved_notifier = notifier or Notifier(default_ttl=settings.notification_ttl_seconds)
    resolved_transport = transport or build_remote_source(settings)
    repository = QuoteRepository(
        resolved_store,
        seed_samples=settings.seed_sample_quotes,
        rng=rng,
    )
    engine = SyncEngine(repository, resolved_transport, resolved_notifier)
    factory_logger.debug(
        "Quote book ready with %d quotes (store=%s)",
        len(repository),
        settings.db_path,
    )
    return QuoteBook(
        store=resolved_store,
        repository=repository,
        filter_state=FilterState(resolved_store),
        sync_engine=engine,
        notifier=resolved_notifier,
    )


def build_sync_driver(book: QuoteBook, settings: QuoteStoreSettings) -> PeriodicSyncDriver:
    """Return a periodic driver using the configured interval."""
    return PeriodicSyncDriver(book.sync_engine, settings.sync_interval_seconds)


__all__ = ["build_quote_book", "build_remote_source", "build_sync_driver"]

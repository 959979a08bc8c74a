"""Core service layer for the quote store.

Updates:
  v0.2.0 - 2026-10-17 - Export the periodic sync driver and factory helpers.
  v0.1.0 - 2026-10-10 - Surface QuoteRepository, SyncEngine, and the QuoteBook façade.
"""

from models.quote_model import ALL_CATEGORIES, DEFAULT_CATEGORY, Quote

from .catalog import (
    ImportResult,
    default_export_filename,
    export_quotes,
    export_quotes_json,
    import_quotes,
    import_quotes_file,
    parse_import_payload,
)
from .exceptions import (
    QuoteImportError,
    QuoteNotFoundError,
    QuoteStorageError,
    QuoteStoreError,
    QuoteValidationError,
    RemoteTransportError,
)
from .factory import build_quote_book, build_remote_source, build_sync_driver
from .filter_state import FilterState
from .notifications import (
    Notification,
    NotificationLevel,
    NotificationStatus,
    NotificationSubscription,
    Notifier,
)
from .quote_book import QuoteBook
from .repository import QuoteRepository
from .storage import MemoryKeyValueBackend, PersistentStore, SQLiteKeyValueBackend, StorageDomain
from .sync import MergeResult, PeriodicSyncDriver, SyncEngine, SyncOutcome, SyncState
from .transport import JsonPlaceholderSource, RemoteQuoteSource

__all__ = [
    "ALL_CATEGORIES",
    "DEFAULT_CATEGORY",
    "FilterState",
    "ImportResult",
    "JsonPlaceholderSource",
    "MemoryKeyValueBackend",
    "MergeResult",
    "Notification",
    "NotificationLevel",
    "NotificationStatus",
    "NotificationSubscription",
    "Notifier",
    "PeriodicSyncDriver",
    "PersistentStore",
    "Quote",
    "QuoteBook",
    "QuoteImportError",
    "QuoteNotFoundError",
    "QuoteRepository",
    "QuoteStorageError",
    "QuoteStoreError",
    "QuoteValidationError",
    "RemoteQuoteSource",
    "RemoteTransportError",
    "SQLiteKeyValueBackend",
    "StorageDomain",
    "SyncEngine",
    "SyncOutcome",
    "SyncState",
    "build_quote_book",
    "build_remote_source",
    "build_sync_driver",
    "default_export_filename",
    "export_quotes",
    "export_quotes_json",
    "import_quotes",
    "import_quotes_file",
    "parse_import_payload",
]

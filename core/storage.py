"""Key/value persistence with durable and session-scoped domains.

The durable domain lives in a single SQLite table so it survives restarts;
the session domain is an in-memory mapping that is cleared when the session
ends. Values are opaque strings (callers store JSON text).

Updates:
  v0.2.1 - 2026-10-15 - Close SQLite connections after each statement batch.
  v0.2.0 - 2026-10-11 - Add JSON helpers and explicit session teardown.
  v0.1.0 - 2026-10-05 - Extract connection helpers from the repository module.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from .exceptions import QuoteStorageError

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger("quote_store.storage")


class StorageDomain(str, Enum):
    """Lifetime of a stored value."""

    DURABLE = "durable"
    SESSION = "session"


class KeyValueBackend(Protocol):
    """Minimal contract shared by every backend."""

    def get(self, key: str) -> str | None:  # pragma: no cover - Protocol
        """Return the stored value for *key* or ``None``."""
        ...

    def set(self, key: str, value: str) -> None:  # pragma: no cover - Protocol
        """Store *value* under *key*."""
        ...

    def delete(self, key: str) -> None:  # pragma: no cover - Protocol
        """Remove *key* if present."""
        ...

    def clear(self) -> None:  # pragma: no cover - Protocol
        """Remove every key."""
        ...


def ensure_directory(path: Path) -> None:
    """Ensure the directory for the SQLite database exists."""
    path.parent.mkdir(parents=True, exist_ok=True)


def connect(db_path: Path) -> sqlite3.Connection:
    """Return a configured SQLite connection."""
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL;")
    conn.execute("PRAGMA synchronous = NORMAL;")
    return conn


class SQLiteKeyValueBackend:
    """Durable backend storing one row per key."""

    def __init__(self, db_path: Path | str) -> None:
        """Create the database file and schema when missing."""
        self._db_path = Path(db_path)
        ensure_directory(self._db_path)
        try:
            with self._transaction() as conn:
                conn.execute(
                    "CREATE TABLE IF NOT EXISTS kv_store ("
                    "key TEXT PRIMARY KEY, "
                    "value TEXT NOT NULL, "
                    "updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP);"
                )
        except sqlite3.Error as exc:
            raise QuoteStorageError(f"Failed to initialise store at {self._db_path}") from exc

    @property
    def db_path(self) -> Path:
        """Return the database location."""
        return self._db_path

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = connect(self._db_path)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def get(self, key: str) -> str | None:
        """Return the stored value for *key* or ``None``."""
        try:
            with self._transaction() as conn:
                row = conn.execute("SELECT value FROM kv_store WHERE key = ?;", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise QuoteStorageError(f"Failed to read key {key!r}") from exc
        if row is None:
            return None
        return str(row["value"])

    def set(self, key: str, value: str) -> None:
        """Insert or replace *key*."""
        try:
            with self._transaction() as conn:
                conn.execute(
                    "INSERT INTO kv_store (key, value, updated_at) "
                    "VALUES (?, ?, CURRENT_TIMESTAMP) "
                    "ON CONFLICT(key) DO UPDATE SET "
                    "value = excluded.value, updated_at = excluded.updated_at;",
                    (key, value),
                )
        except sqlite3.Error as exc:
            raise QuoteStorageError(f"Failed to write key {key!r}") from exc

    def delete(self, key: str) -> None:
        """Remove *key* if present."""
        try:
            with self._transaction() as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?;", (key,))
        except sqlite3.Error as exc:
            raise QuoteStorageError(f"Failed to delete key {key!r}") from exc

    def clear(self) -> None:
        """Remove every key."""
        try:
            with self._transaction() as conn:
                conn.execute("DELETE FROM kv_store;")
        except sqlite3.Error as exc:
            raise QuoteStorageError("Failed to clear store") from exc


class MemoryKeyValueBackend:
    """Process-local backend used for the session domain and in tests."""

    def __init__(self) -> None:
        """Initialise an empty mapping."""
        self._values: dict[str, str] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> str | None:
        """Return the stored value for *key* or ``None``."""
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*."""
        with self._lock:
            self._values[key] = value

    def delete(self, key: str) -> None:
        """Remove *key* if present."""
        with self._lock:
            self._values.pop(key, None)

    def clear(self) -> None:
        """Remove every key."""
        with self._lock:
            self._values.clear()

    def keys(self) -> tuple[str, ...]:
        """Return the stored keys."""
        with self._lock:
            return tuple(self._values)


class PersistentStore:
    """Route reads and writes to the backend for each :class:`StorageDomain`."""

    def __init__(
        self,
        durable: KeyValueBackend,
        session: KeyValueBackend | None = None,
    ) -> None:
        """Bind *durable* and optional *session* backends."""
        self._backends: dict[StorageDomain, KeyValueBackend] = {
            StorageDomain.DURABLE: durable,
            StorageDomain.SESSION: session if session is not None else MemoryKeyValueBackend(),
        }

    @classmethod
    def in_memory(cls) -> PersistentStore:
        """Return a store whose durable domain is also memory-backed."""
        return cls(MemoryKeyValueBackend(), MemoryKeyValueBackend())

    @classmethod
    def open(cls, db_path: Path | str) -> PersistentStore:
        """Return a store backed by the SQLite database at *db_path*."""
        return cls(SQLiteKeyValueBackend(db_path))

    def backend(self, domain: StorageDomain) -> KeyValueBackend:
        """Return the backend serving *domain*."""
        return self._backends[StorageDomain(domain)]

    def get(self, domain: StorageDomain, key: str) -> str | None:
        """Return the serialized value stored under *key* or ``None``."""
        return self.backend(domain).get(key)

    def set(self, domain: StorageDomain, key: str, value: str) -> None:
        """Store a serialized *value* under *key*."""
        self.backend(domain).set(key, value)

    def delete(self, domain: StorageDomain, key: str) -> None:
        """Remove *key* from *domain*."""
        self.backend(domain).delete(key)

    def get_json(self, domain: StorageDomain, key: str) -> Any | None:
        """Return the decoded JSON value stored under *key*.

        Corrupt payloads are logged and reported as absent so callers can fall
        back to defaults.
        """
        raw = self.get(domain, key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.error("Discarding corrupt JSON stored under %s/%s", domain.value, key)
            return None

    def set_json(self, domain: StorageDomain, key: str, value: Any) -> None:
        """Serialize *value* to JSON and store it under *key*."""
        self.set(domain, key, json.dumps(value, ensure_ascii=False))

    def end_session(self) -> None:
        """Drop every session-scoped value."""
        self.backend(StorageDomain.SESSION).clear()
        logger.debug("Session storage cleared")

    def close(self) -> None:
        """End the session; durable data stays on disk."""
        self.end_session()


__all__ = [
    "KeyValueBackend",
    "MemoryKeyValueBackend",
    "PersistentStore",
    "SQLiteKeyValueBackend",
    "StorageDomain",
    "connect",
    "ensure_directory",
]

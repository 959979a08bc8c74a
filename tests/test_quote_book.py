"""Tests for the QuoteBook façade and factory wiring.

Updates:
  v0.2.1 - 2026-10-19 - Cover notified filter, export, and undecodable import failures.
  v0.2.0 - 2026-10-17 - Cover session-scoped last shown quote.
  v0.1.0 - 2026-10-10 - Cover notifications for mutations, import, and sync.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from config import QuoteStoreSettings
from core.exceptions import (
    QuoteImportError,
    QuoteNotFoundError,
    QuoteStorageError,
    QuoteValidationError,
)
from core.factory import build_quote_book, build_remote_source, build_sync_driver
from core.notifications import NotificationLevel, Notifier
from core.quote_book import QuoteBook
from core.storage import MemoryKeyValueBackend, PersistentStore
from models.quote_model import Quote

if TYPE_CHECKING:
    from tests.conftest import FakeRemote


@pytest.fixture()
def settings(tmp_path: Path) -> QuoteStoreSettings:
    return QuoteStoreSettings(
        db_path=tmp_path / "quotes.db",
        seed_sample_quotes=False,
        sync_interval_seconds=30,
    )


@pytest.fixture()
def book(
    settings: QuoteStoreSettings,
    store: PersistentStore,
    remote: FakeRemote,
    notifier: Notifier,
) -> QuoteBook:
    return build_quote_book(settings, store=store, transport=remote, notifier=notifier)


def test_add_edit_delete_publish_notifications(book: QuoteBook, notifier: Notifier) -> None:
    quote = book.add_quote("Hello there", "Greeting")
    book.edit_quote(quote.id, text="General Kenobi")
    book.delete_quote(quote.id)

    messages = [(item.message, item.ttl_seconds) for item in notifier.history()]
    assert messages == [
        ('Quote added in category "Greeting"', 4.0),
        ("Quote updated", 3.0),
        ('Deleted quote: "General Kenobi..."', 3.5),
    ]


def test_errors_are_notified_and_reraised(book: QuoteBook, notifier: Notifier) -> None:
    with pytest.raises(QuoteValidationError):
        book.add_quote("   ")
    with pytest.raises(QuoteNotFoundError):
        book.delete_quote("missing")

    levels = [item.level for item in notifier.history()]
    assert levels == [NotificationLevel.WARNING, NotificationLevel.ERROR]
    assert notifier.history()[0].message.startswith("Could not add quote")


def test_visible_quotes_follow_filter(book: QuoteBook) -> None:
    book.add_quote("One", "A")
    only_b = book.add_quote("Two", "B")

    book.select_category("B")

    assert book.visible_quotes() == [only_b]
    assert book.categories() == ["A", "B"]
    assert book.show_random() == only_b


def test_last_shown_is_session_scoped(book: QuoteBook) -> None:
    assert book.last_shown() is None
    shown = book.show_random()
    assert shown is None

    quote = book.add_quote("Remember me", "A")
    assert book.show_random() == quote
    assert book.last_shown() == quote

    book.close()

    assert book.last_shown() is None
    assert book.repository.snapshot() == (quote,)


def test_import_json_reports_counts(book: QuoteBook, notifier: Notifier) -> None:
    result = book.import_json(json.dumps([{"text": "Imported"}, {"text": ""}]))

    assert result.imported == 1
    assert notifier.history()[-1].message == "Imported 1 quotes (1 skipped)"


def test_import_failure_is_notified(book: QuoteBook, notifier: Notifier) -> None:
    with pytest.raises(QuoteImportError):
        book.import_json("{}")

    failure = notifier.history()[-1]
    assert failure.level is NotificationLevel.ERROR
    assert failure.ttl_seconds == 6.0


def test_export_to_writes_file(book: QuoteBook, tmp_path: Path) -> None:
    book.add_quote("Exported", "A")

    path = book.export_to(tmp_path / "quotes.json")

    assert json.loads(path.read_text(encoding="utf-8"))[0]["text"] == "Exported"
    assert json.loads(book.export_json())[0]["text"] == "Exported"


@pytest.mark.asyncio()
async def test_sync_and_undo_through_book(book: QuoteBook, remote: FakeRemote) -> None:
    local = book.add_quote("Local", "A")
    remote.quotes = [Quote(local.id, "Server", "server-1")]

    outcome = await book.sync()

    assert outcome is not None
    assert book.repository.get(local.id).text == "Server"
    assert book.undo_sync() is True
    assert book.repository.get(local.id) == local


def test_factory_seeds_sqlite_store(tmp_path: Path, notifier: Notifier) -> None:
    settings = QuoteStoreSettings(db_path=tmp_path / "seeded.db")

    book = build_quote_book(settings, notifier=notifier)
    try:
        assert len(book.repository) == 4
        assert book.filter_state.current() == "all"
    finally:
        book.close()


def test_factory_helpers_use_settings(settings: QuoteStoreSettings, book: QuoteBook) -> None:
    source = build_remote_source(settings)
    driver = build_sync_driver(book, settings)

    assert source.base_url == "https://jsonplaceholder.typicode.com"
    assert source.limit == 5
    assert source.retry_policy.max_attempts == 3
    assert driver.interval == 30


class _RejectingBackend(MemoryKeyValueBackend):
    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    def set(self, key: str, value: str) -> None:
        if self.fail:
            raise QuoteStorageError("write rejected")
        super().set(key, value)


def test_filter_write_failure_is_notified(
    settings: QuoteStoreSettings,
    remote: FakeRemote,
    notifier: Notifier,
) -> None:
    backend = _RejectingBackend()
    book = build_quote_book(
        settings,
        store=PersistentStore(backend),
        transport=remote,
        notifier=notifier,
    )
    backend.fail = True

    with pytest.raises(QuoteStorageError):
        book.select_category("B")

    failure = notifier.history()[-1]
    assert failure.level is NotificationLevel.ERROR
    assert failure.message == "Could not save filter: write rejected"
    assert book.filter_state.current() == "all"


def test_export_failures_are_notified(
    book: QuoteBook,
    notifier: Notifier,
    tmp_path: Path,
) -> None:
    book.add_quote("Stuck", "A")
    target = tmp_path / "folder"
    target.mkdir()

    with pytest.raises(QuoteStorageError):
        book.export_to(target)
    with pytest.raises(QuoteValidationError):
        book.export_to(tmp_path / "quotes.csv", fmt="csv")

    failures = notifier.history()[-2:]
    assert [item.level for item in failures] == [
        NotificationLevel.ERROR,
        NotificationLevel.WARNING,
    ]
    assert all(item.message.startswith("Export failed") for item in failures)


def test_import_file_not_utf8_is_notified(
    book: QuoteBook,
    notifier: Notifier,
    tmp_path: Path,
) -> None:
    source = tmp_path / "latin1.json"
    source.write_bytes(b'[{"text": "caf\xe9"}]')

    with pytest.raises(QuoteImportError):
        book.import_file(source)

    assert notifier.history()[-1].message.startswith("Import failed")

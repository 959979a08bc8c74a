"""Tests for QuoteRepository CRUD and write-through behaviour.

Updates:
  v0.2.0 - 2026-10-16 - Cover replace_all validation and failed writes.
  v0.1.0 - 2026-10-10 - Cover add/edit/delete, categories, and restore.
"""

from __future__ import annotations

import random
from pathlib import Path

import pytest

from core.exceptions import QuoteNotFoundError, QuoteStorageError, QuoteValidationError
from core.repository import QUOTES_KEY, SAMPLE_QUOTES, QuoteRepository
from core.storage import MemoryKeyValueBackend, PersistentStore, StorageDomain
from models.quote_model import DEFAULT_CATEGORY, Quote


class _FailingBackend(MemoryKeyValueBackend):
    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    def set(self, key: str, value: str) -> None:
        if self.fail:
            raise OSError("disk full")
        super().set(key, value)


def test_add_trims_and_defaults_category(repository: QuoteRepository) -> None:
    quote = repository.add("  Stay curious.  ", "   ")

    assert quote.text == "Stay curious."
    assert quote.category == DEFAULT_CATEGORY
    assert repository.get(quote.id) == quote


def test_add_rejects_blank_text(repository: QuoteRepository) -> None:
    repository.add("Keep", "cat")
    before = repository.snapshot()

    with pytest.raises(QuoteValidationError):
        repository.add("  ", "cat")

    assert repository.snapshot() == before


def test_ids_stay_unique_across_mutations(repository: QuoteRepository) -> None:
    created = [repository.add(f"Quote {index}", "cat") for index in range(20)]
    repository.delete(created[3].id)
    repository.edit(created[5].id, text="Edited")
    repository.add("Another")

    ids = [quote.id for quote in repository.snapshot()]
    assert len(ids) == len(set(ids)) == 20


def test_edit_updates_supplied_fields_and_bumps_timestamp(
    repository: QuoteRepository,
) -> None:
    original = repository.add("Before", "Old")

    updated = repository.edit(original.id, text="After", category="  ")

    assert updated.id == original.id
    assert updated.text == "After"
    assert updated.category == "Old"
    assert updated.last_modified > original.last_modified


def test_edit_and_delete_unknown_id_leave_collection_unchanged(
    repository: QuoteRepository,
) -> None:
    repository.add("Only", "cat")
    before = repository.snapshot()

    with pytest.raises(QuoteNotFoundError):
        repository.edit("missing", text="x")
    with pytest.raises(QuoteNotFoundError):
        repository.delete("missing")

    assert repository.snapshot() == before


def test_list_filters_by_category(repository: QuoteRepository) -> None:
    first = repository.add("One", "A")
    repository.add("Two", "B")
    third = repository.add("Three", "A")

    assert repository.list("A") == [first, third]
    assert len(repository.list()) == 3
    assert repository.list("NonexistentCategory") == []
    assert repository.categories() == ["A", "B"]


def test_pick_random_respects_category(store: PersistentStore) -> None:
    repository = QuoteRepository(store, rng=random.Random(1))
    repository.add("One", "A")
    only_b = repository.add("Two", "B")

    assert repository.pick_random("B") == only_b
    assert repository.pick_random("C") is None


def test_mutations_are_written_through(store: PersistentStore) -> None:
    repository = QuoteRepository(store)
    quote = repository.add("Persist me", "Durable")

    restored = QuoteRepository(store)

    assert restored.snapshot() == (quote,)


def test_sqlite_restore_after_reopen(tmp_path: Path) -> None:
    db_path = tmp_path / "quotes.db"
    repository = QuoteRepository(PersistentStore.open(db_path))
    quote = repository.add("Across restarts", "Durable")

    restored = QuoteRepository(PersistentStore.open(db_path))

    assert restored.snapshot() == (quote,)


def test_seeds_samples_only_when_nothing_saved(store: PersistentStore) -> None:
    seeded = QuoteRepository(store, seed_samples=True)
    assert len(seeded) == len(SAMPLE_QUOTES)

    seeded.delete(seeded.snapshot()[0].id)
    again = QuoteRepository(store, seed_samples=True)

    assert len(again) == len(SAMPLE_QUOTES) - 1


def test_empty_saved_collection_is_not_reseeded(store: PersistentStore) -> None:
    store.set_json(StorageDomain.DURABLE, QUOTES_KEY, [])

    repository = QuoteRepository(store, seed_samples=True)

    assert len(repository) == 0


def test_corrupt_entries_are_skipped_on_load(store: PersistentStore) -> None:
    store.set_json(
        StorageDomain.DURABLE,
        QUOTES_KEY,
        [
            {"id": "a", "text": "Good", "category": "X"},
            "not an object",
            {"id": "b", "text": "  "},
            {"id": "a", "text": "Duplicate"},
        ],
    )

    repository = QuoteRepository(store)

    assert [quote.id for quote in repository.snapshot()] == ["a"]


def test_failed_write_leaves_memory_unchanged() -> None:
    backend = _FailingBackend()
    repository = QuoteRepository(PersistentStore(backend))
    kept = repository.add("Kept", "cat")
    backend.fail = True

    with pytest.raises(QuoteStorageError):
        repository.add("Lost", "cat")
    with pytest.raises(QuoteStorageError):
        repository.delete(kept.id)

    assert repository.snapshot() == (kept,)


def test_replace_all_rejects_duplicate_ids(repository: QuoteRepository) -> None:
    existing = repository.add("Existing", "cat")

    with pytest.raises(QuoteValidationError):
        repository.replace_all([Quote("dup", "a"), Quote("dup", "b")])

    assert repository.snapshot() == (existing,)

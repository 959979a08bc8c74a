"""Tests for the Quote dataclass and timestamp helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from models.quote_model import (
    DEFAULT_CATEGORY,
    Quote,
    advance_timestamp,
    generate_quote_id,
    parse_timestamp,
)


def test_record_uses_camel_case_timestamp() -> None:
    stamp = datetime(2026, 1, 2, 3, 4, 5, 6, tzinfo=UTC)
    quote = Quote("id-1", "Hello", "Greeting", stamp)

    record = quote.to_record()

    assert record == {
        "id": "id-1",
        "text": "Hello",
        "category": "Greeting",
        "lastModified": "2026-01-02T03:04:05.000006+00:00",
    }
    assert Quote.from_record(record) == quote


def test_from_record_defaults_blank_category() -> None:
    quote = Quote.from_record({"id": " q1 ", "text": "  Words  ", "category": "  "})

    assert quote.id == "q1"
    assert quote.text == "Words"
    assert quote.category == DEFAULT_CATEGORY


@pytest.mark.parametrize(
    "record",
    [
        {"text": "no id"},
        {"id": "q1", "text": "   "},
    ],
)
def test_from_record_rejects_unusable_entries(record: dict[str, str]) -> None:
    with pytest.raises(ValueError):
        Quote.from_record(record)


def test_parse_timestamp_accepts_epoch_milliseconds_and_iso() -> None:
    expected = datetime(2026, 10, 19, tzinfo=UTC)

    assert parse_timestamp(int(expected.timestamp() * 1000)) == expected
    assert parse_timestamp("2026-10-19T00:00:00") == expected
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(True) is None


def test_advance_timestamp_never_moves_backwards() -> None:
    previous = datetime(2030, 1, 1, tzinfo=UTC)
    earlier_now = previous - timedelta(days=1)

    advanced = advance_timestamp(previous, earlier_now)

    assert advanced > previous
    assert advance_timestamp(earlier_now, previous) == previous


def test_generate_quote_id_avoids_taken_ids() -> None:
    first = generate_quote_id()
    second = generate_quote_id({first})

    assert first.startswith("id-")
    assert second != first

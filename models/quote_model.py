"""Quote data model definitions.

Updates:
  v0.2.0 - 2026-10-12 - Add monotonic timestamp helper for edits.
  v0.1.0 - 2026-10-05 - Initial Quote schema with serialization helpers.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Container, Mapping

DEFAULT_CATEGORY = "Uncategorized"
ALL_CATEGORIES = "all"

_ID_PREFIX = "id-"
_MIN_STEP = timedelta(microseconds=1)


def utc_now() -> datetime:
    """Return an aware UTC timestamp."""
    return datetime.now(UTC)


def format_timestamp(value: datetime) -> str:
    """Return the canonical ISO-8601 text stored for *value*."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def parse_timestamp(value: Any) -> datetime | None:
    """Return a timezone-aware datetime parsed from loose inputs when possible."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # JavaScript style epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed
    return None


def advance_timestamp(previous: datetime, now: datetime | None = None) -> datetime:
    """Return a timestamp that is never earlier than *previous*.

    Clock skew or a restored backup can leave a stored ``last_modified`` ahead of
    the local clock; edits still have to move the value forward.
    """
    current = now or utc_now()
    if current > previous:
        return current
    return previous + _MIN_STEP


def generate_quote_id(taken: Container[str] = ()) -> str:
    """Return a fresh identifier that does not collide with *taken*."""
    while True:
        candidate = f"{_ID_PREFIX}{uuid.uuid4().hex[:12]}"
        if candidate not in taken:
            return candidate


def clean_text(value: Any) -> str:
    """Return *value* as a stripped string (empty when missing)."""
    if value is None:
        return ""
    return str(value).strip()


@dataclass(slots=True, frozen=True)
class Quote:
    """A single stored quote."""

    id: str
    text: str
    category: str = DEFAULT_CATEGORY
    last_modified: datetime = field(default_factory=utc_now)

    def to_record(self) -> dict[str, Any]:
        """Return the JSON shape used for storage and export."""
        return {
            "id": self.id,
            "text": self.text,
            "category": self.category,
            "lastModified": format_timestamp(self.last_modified),
        }

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> Quote:
        """Hydrate a stored quote, raising ``ValueError`` when it is unusable."""
        quote_id = clean_text(data.get("id"))
        text = clean_text(data.get("text"))
        if not quote_id:
            raise ValueError("quote record is missing an id")
        if not text:
            raise ValueError(f"quote {quote_id} has empty text")
        timestamp = parse_timestamp(data.get("lastModified", data.get("last_modified")))
        return cls(
            id=quote_id,
            text=text,
            category=clean_text(data.get("category")) or DEFAULT_CATEGORY,
            last_modified=timestamp or utc_now(),
        )

    def content(self) -> tuple[str, str]:
        """Return the user-visible fields used for content comparisons."""
        return (self.text, self.category)


__all__ = [
    "ALL_CATEGORIES",
    "DEFAULT_CATEGORY",
    "Quote",
    "advance_timestamp",
    "clean_text",
    "format_timestamp",
    "generate_quote_id",
    "parse_timestamp",
    "utc_now",
]

"""Data models for the quote store.

Updates: v0.1.0 - 2026-10-05 - Export Quote dataclass and sentinels.
"""

from .quote_model import ALL_CATEGORIES, DEFAULT_CATEGORY, Quote

__all__ = [
    "ALL_CATEGORIES",
    "DEFAULT_CATEGORY",
    "Quote",
]

"""Common exception classes for the core package.

All exceptions ultimately inherit from :class:`QuoteStoreError`, allowing
callers to catch a single base class for any store-related failure while
still distinguishing individual error categories when needed. Every error
here is recoverable: raising one never leaves the collection half-written.

Updates:
  v0.2.0 - 2026-10-14 - Add storage error for write-through failures.
  v0.1.0 - 2026-10-05 - Created module with validation/lookup/transport/import errors.
"""

from __future__ import annotations


class QuoteStoreError(Exception):
    """Base exception for quote store failures."""


class QuoteValidationError(QuoteStoreError):
    """Raised when a required quote field is empty after trimming."""


class QuoteNotFoundError(QuoteStoreError):
    """Raised when an operation references an id that is not stored."""


class QuoteStorageError(QuoteStoreError):
    """Raised when the persistent store rejects a read or write."""


class QuoteImportError(QuoteStoreError):
    """Raised when an import payload is not a JSON array of quote objects."""


class RemoteTransportError(QuoteStoreError):
    """Raised when the remote fetch fails or returns a non-success status."""


__all__ = [
    "QuoteImportError",
    "QuoteNotFoundError",
    "QuoteStorageError",
    "QuoteStoreError",
    "QuoteValidationError",
    "RemoteTransportError",
]

"""Retry helpers for transient remote failures.

Updates:
  v0.2.0 - 2026-10-09 - Bundle backoff knobs into RetryPolicy and log each retry.
  v0.1.0 - 2026-10-07 - Add async exponential backoff retry helper.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

import httpx

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("quote_store.retry")

T = TypeVar("T")

_RETRYABLE_HTTP_STATUS_CODES = {408, 429}


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Exponential backoff settings for one remote operation.

    ``max_attempts`` counts the first call; ``jitter_fraction`` adds up to that
    fraction of the computed delay at random.
    """

    max_attempts: int = 3
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 4.0
    jitter_fraction: float = 0.1

    def delay_for(self, attempt: int) -> float:
        """Return the pause after failed *attempt* (1-based)."""
        delay = min(self.max_delay_seconds, self.base_delay_seconds * (2 ** (attempt - 1)))
        if self.jitter_fraction <= 0:
            return delay
        return delay + (delay * self.jitter_fraction * random.random())


NO_RETRY = RetryPolicy(max_attempts=1)


def is_retryable_http_status(status_code: int) -> bool:
    """Return ``True`` when *status_code* suggests a transient failure."""
    return status_code in _RETRYABLE_HTTP_STATUS_CODES or 500 <= status_code < 600


def is_retryable_httpx_error(exc: Exception) -> bool:
    """Return ``True`` when *exc* represents a transient httpx error."""
    if isinstance(exc, httpx.HTTPStatusError):
        return is_retryable_http_status(exc.response.status_code)
    return isinstance(exc, (httpx.TimeoutException, httpx.TransportError))


async def async_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    should_retry: Callable[[Exception], bool],
    policy: RetryPolicy | None = None,
    description: str = "remote call",
) -> T:
    """Await *operation* until it succeeds or *policy* runs out of attempts.

    Non-retryable errors and the error from the final attempt propagate
    unchanged.
    """
    resolved = policy or RetryPolicy()
    attempts = max(1, int(resolved.max_attempts))
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            if attempt >= attempts or not should_retry(exc):
                raise
            delay = resolved.delay_for(attempt) if resolved.base_delay_seconds > 0 else 0.0
            logger.warning(
                "%s failed (attempt %d/%d): %s; retrying in %.2fs",
                description,
                attempt,
                attempts,
                exc,
                delay,
            )
            if delay:
                await asyncio.sleep(delay)
    raise RuntimeError("async_retry exhausted retries")  # pragma: no cover


__all__ = [
    "NO_RETRY",
    "RetryPolicy",
    "async_retry",
    "is_retryable_http_status",
    "is_retryable_httpx_error",
]

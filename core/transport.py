"""Remote quote source protocol and the JSONPlaceholder HTTP client.

Remote posts become quotes as follows: the post id is namespaced with
``srv-`` so it never collides with locally generated ids, the title (or body
when the title is blank) is truncated to ``text_limit`` characters, the
category is ``server-<userId>``, and ``last_modified`` is the fetch time.

Updates:
  v0.2.0 - 2026-10-14 - Add push() for posting a local quote upstream.
  v0.1.1 - 2026-10-09 - Retry transient HTTP failures with exponential backoff.
  v0.1.0 - 2026-10-07 - Introduce RemoteQuoteSource protocol and HTTPX client.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from models.quote_model import DEFAULT_CATEGORY, Quote, clean_text, utc_now

from .exceptions import RemoteTransportError
from .retry import RetryPolicy, async_retry, is_retryable_httpx_error

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from datetime import datetime

logger = logging.getLogger("quote_store.transport")

REMOTE_ID_PREFIX = "srv-"
DEFAULT_REMOTE_BASE_URL = "https://jsonplaceholder.typicode.com"
DEFAULT_REMOTE_LIMIT = 5
DEFAULT_TEXT_LIMIT = 220


@runtime_checkable
class RemoteQuoteSource(Protocol):
    """Anything able to return the current remote snapshot of quotes."""

    async def fetch_remote(self) -> list[Quote]:
        """Return remote quotes or raise :class:`RemoteTransportError`."""
        ...


def post_to_quote(
    post: Mapping[str, Any],
    *,
    fetched_at: datetime,
    text_limit: int = DEFAULT_TEXT_LIMIT,
) -> Quote | None:
    """Map a remote post onto a quote; ``None`` when it carries no usable text."""
    raw_id = clean_text(post.get("id"))
    if not raw_id:
        return None
    text = clean_text(post.get("title")) or clean_text(post.get("body"))
    text = text[:text_limit].strip()
    if not text:
        return None
    user_id = clean_text(post.get("userId"))
    category = f"server-{user_id}" if user_id else DEFAULT_CATEGORY
    return Quote(
        id=f"{REMOTE_ID_PREFIX}{raw_id}",
        text=text,
        category=category,
        last_modified=fetched_at,
    )


@dataclass(slots=True)
class JsonPlaceholderSource:
    """HTTPX-backed client for a JSONPlaceholder style ``/posts`` endpoint."""

    base_url: str = DEFAULT_REMOTE_BASE_URL
    limit: int = DEFAULT_REMOTE_LIMIT
    text_limit: int = DEFAULT_TEXT_LIMIT
    timeout: float = 15.0
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    client_factory: Callable[[], httpx.AsyncClient] | None = None

    def __post_init__(self) -> None:
        """Validate limits and normalise the base URL."""
        self.base_url = self.base_url.strip().rstrip("/")
        if not self.base_url:
            raise ValueError("remote base URL must not be empty")
        if self.limit <= 0:
            raise ValueError("remote limit must be greater than zero")
        if self.text_limit <= 0:
            raise ValueError("text limit must be greater than zero")

    def _client(self) -> tuple[httpx.AsyncClient, bool]:
        if self.client_factory is None:
            client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            return client, True
        return self.client_factory(), False

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        client, manage_client = self._client()
        try:

            async def _send_request() -> httpx.Response:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                return response

            response = await async_retry(
                _send_request,
                should_retry=is_retryable_httpx_error,
                policy=self.retry_policy,
                description=f"{method} {path}",
            )
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise RemoteTransportError(f"Remote returned HTTP {status} for {path}") from exc
        except httpx.HTTPError as exc:
            raise RemoteTransportError(f"Unable to reach remote: {exc}") from exc
        finally:
            if manage_client:
                await client.aclose()
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteTransportError("Remote returned invalid JSON") from exc

    async def fetch_remote(self) -> list[Quote]:
        """Fetch the latest posts and map them onto quotes."""
        data = await self._request("GET", "/posts", params={"_limit": self.limit})
        if not isinstance(data, list):
            raise RemoteTransportError("Remote payload must be a JSON array")
        fetched_at = utc_now()
        quotes: list[Quote] = []
        for entry in data:
            if not isinstance(entry, dict):
                logger.warning("Ignoring non-object remote entry")
                continue
            quote = post_to_quote(entry, fetched_at=fetched_at, text_limit=self.text_limit)
            if quote is None:
                logger.warning("Ignoring remote post without id or text: %s", entry.get("id"))
                continue
            quotes.append(quote)
        logger.info("Fetched %d remote quotes from %s", len(quotes), self.base_url)
        return quotes

    async def push(self, quote: Quote) -> dict[str, Any]:
        """Post *quote* to the remote and return the echoed payload."""
        payload = {
            "title": quote.text,
            "body": quote.text,
            "category": quote.category,
            "lastModified": quote.to_record()["lastModified"],
        }
        data = await self._request("POST", "/posts", json=payload)
        if not isinstance(data, dict):
            raise RemoteTransportError("Remote payload must be a JSON object")
        logger.info("Pushed quote %s to remote", quote.id)
        return {str(key): value for key, value in data.items()}


__all__ = [
    "DEFAULT_REMOTE_BASE_URL",
    "DEFAULT_REMOTE_LIMIT",
    "DEFAULT_TEXT_LIMIT",
    "JsonPlaceholderSource",
    "REMOTE_ID_PREFIX",
    "RemoteQuoteSource",
    "post_to_quote",
]

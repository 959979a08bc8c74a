"""Tests for the JSONPlaceholder HTTP source.

Updates:
  v0.2.0 - 2026-10-14 - Cover push() payloads.
  v0.1.1 - 2026-10-09 - Cover retries on transient HTTP failures.
  v0.1.0 - 2026-10-07 - Cover post mapping and error statuses.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import httpx
import pytest

from core.exceptions import RemoteTransportError
from core.retry import NO_RETRY, RetryPolicy
from core.transport import JsonPlaceholderSource, RemoteQuoteSource, post_to_quote
from models.quote_model import DEFAULT_CATEGORY, Quote

BASE_URL = "https://remote.test"


def _build_mock_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> httpx.AsyncClient:
    """Return an AsyncClient routed through *handler*."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)


def _source(
    handler: Callable[[httpx.Request], httpx.Response],
    **kwargs: object,
) -> JsonPlaceholderSource:
    return JsonPlaceholderSource(
        base_url=BASE_URL,
        client_factory=lambda: _build_mock_client(handler),
        retry_policy=kwargs.pop("retry_policy", NO_RETRY),  # type: ignore[arg-type]
        **kwargs,  # type: ignore[arg-type]
    )


def test_post_mapping_namespaces_ids_and_truncates() -> None:
    fetched_at = datetime(2026, 10, 19, tzinfo=UTC)
    quote = post_to_quote(
        {"id": 3, "userId": 1, "title": "x" * 300, "body": "ignored"},
        fetched_at=fetched_at,
        text_limit=220,
    )

    assert quote is not None
    assert quote.id == "srv-3"
    assert quote.category == "server-1"
    assert len(quote.text) == 220
    assert quote.last_modified == fetched_at


def test_post_mapping_falls_back_to_body_and_default_category() -> None:
    fetched_at = datetime(2026, 10, 19, tzinfo=UTC)

    quote = post_to_quote({"id": 4, "title": "  ", "body": "Body text"}, fetched_at=fetched_at)

    assert quote is not None
    assert quote.text == "Body text"
    assert quote.category == DEFAULT_CATEGORY
    assert post_to_quote({"title": "no id"}, fetched_at=fetched_at) is None
    assert post_to_quote({"id": 5, "title": "", "body": ""}, fetched_at=fetched_at) is None


@pytest.mark.asyncio()
async def test_fetch_remote_requests_limit_and_maps_posts() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {"id": 1, "userId": 2, "title": "First", "body": "b"},
                "garbage",
                {"id": 2, "userId": 2, "title": "", "body": ""},
            ],
        )

    source = _source(handler, limit=3)
    quotes = await source.fetch_remote()

    assert isinstance(source, RemoteQuoteSource)
    assert [quote.id for quote in quotes] == ["srv-1"]
    assert quotes[0].category == "server-2"
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/posts"
    assert seen[0].url.params["_limit"] == "3"


@pytest.mark.asyncio()
async def test_fetch_remote_raises_on_error_status() -> None:
    source = _source(lambda _: httpx.Response(404, json={"message": "missing"}))

    with pytest.raises(RemoteTransportError, match="HTTP 404"):
        await source.fetch_remote()


@pytest.mark.asyncio()
async def test_fetch_remote_rejects_non_array_payload() -> None:
    source = _source(lambda _: httpx.Response(200, json={"posts": []}))

    with pytest.raises(RemoteTransportError, match="array"):
        await source.fetch_remote()


@pytest.mark.asyncio()
async def test_fetch_remote_rejects_invalid_json() -> None:
    source = _source(lambda _: httpx.Response(200, content=b"<html>"))

    with pytest.raises(RemoteTransportError, match="invalid JSON"):
        await source.fetch_remote()


@pytest.mark.asyncio()
async def test_fetch_remote_wraps_connection_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    source = _source(handler)

    with pytest.raises(RemoteTransportError, match="Unable to reach remote"):
        await source.fetch_remote()


@pytest.mark.asyncio()
async def test_fetch_remote_retries_transient_status() -> None:
    responses = [httpx.Response(503), httpx.Response(200, json=[{"id": 1, "title": "Ok"}])]
    calls: list[int] = []

    def handler(_: httpx.Request) -> httpx.Response:
        calls.append(1)
        return responses[len(calls) - 1]

    source = _source(
        handler,
        retry_policy=RetryPolicy(max_attempts=2, base_delay_seconds=0, jitter_fraction=0),
    )
    quotes = await source.fetch_remote()

    assert len(calls) == 2
    assert [quote.id for quote in quotes] == ["srv-1"]


@pytest.mark.asyncio()
async def test_push_posts_quote_payload() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(201, json={"id": 101, "title": "Hello"})

    source = _source(handler)
    echoed = await source.push(Quote("id-1", "Hello", "Greeting"))

    assert echoed["id"] == 101
    assert captured[0].method == "POST"
    assert b'"category":"Greeting"' in captured[0].content.replace(b" ", b"")


def test_rejects_invalid_configuration() -> None:
    with pytest.raises(ValueError):
        JsonPlaceholderSource(base_url="  ")
    with pytest.raises(ValueError):
        JsonPlaceholderSource(limit=0)

"""Pytest configuration for shared quote store fixtures.

Updates:
  v0.2.0 - 2026-10-17 - Add gated fake remote for overlapping sync tests.
  v0.1.0 - 2026-10-10 - In-memory store, repository, notifier, and fake remote fixtures.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Iterator
from datetime import UTC, datetime

import pytest

from core.notifications import Notifier
from core.repository import QuoteRepository
from core.storage import PersistentStore
from core.sync import SyncEngine
from models.quote_model import Quote

FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRemote:
    """Remote source returning a configurable snapshot.

    When ``gate`` is set the fetch blocks until the event is released so tests
    can observe the engine mid-sync.
    """

    def __init__(self, quotes: list[Quote] | None = None) -> None:
        self.quotes: list[Quote] = list(quotes or [])
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.entered: asyncio.Event | None = None
        self.calls = 0

    async def fetch_remote(self) -> list[Quote]:
        self.calls += 1
        if self.entered is not None:
            self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.quotes)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store() -> Iterator[PersistentStore]:
    persistent = PersistentStore.in_memory()
    yield persistent
    persistent.close()


@pytest.fixture()
def repository(store: PersistentStore) -> QuoteRepository:
    return QuoteRepository(store, rng=random.Random(7))


@pytest.fixture()
def notifier(clock: FakeClock) -> Notifier:
    return Notifier(clock=clock)


@pytest.fixture()
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture()
def engine(repository: QuoteRepository, remote: FakeRemote, notifier: Notifier) -> SyncEngine:
    return SyncEngine(repository, remote, notifier, clock=lambda: FIXED_NOW)

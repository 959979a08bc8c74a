"""Server-wins synchronisation between the local repository and a remote source.

The merge rule is deliberately simple: a remote quote whose id exists locally
replaces the local entry wholesale, an unknown id is inserted, and both count
as applied. There is no field-level diffing and no timestamp comparison.
Before a merge is applied the local collection is snapshotted so the last
sync can be undone once.

Updates:
  v0.3.1 - 2026-10-19 - Keep the periodic loop alive when a merge cannot be stored.
  v0.3.0 - 2026-10-17 - Add PeriodicSyncDriver for interval-based syncing.
  v0.2.0 - 2026-10-15 - Drop overlapping sync() calls instead of queueing them.
  v0.1.0 - 2026-10-10 - Introduce SyncEngine, merge helper, and single-slot undo.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from models.quote_model import utc_now

from .exceptions import QuoteStoreError, RemoteTransportError
from .notifications import NotificationLevel, NotificationStatus

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from models.quote_model import Quote

    from .notifications import Notifier
    from .repository import QuoteRepository
    from .transport import RemoteQuoteSource

logger = logging.getLogger("quote_store.sync")

_STARTED_TTL = 2.0
_SUCCESS_TTL = 10.0
_FAILURE_TTL = 5.0
_UNDO_TTL = 4.0


class SyncState(str, Enum):
    """Lifecycle of the sync engine."""

    IDLE = "idle"
    SYNCING = "syncing"


@dataclass(frozen=True, slots=True)
class MergeResult:
    """Merged collection plus counters describing what changed."""

    quotes: tuple[Quote, ...]
    replaced: int
    inserted: int

    @property
    def applied(self) -> int:
        """Return the number of remote entries written (replaced + inserted)."""
        return self.replaced + self.inserted


@dataclass(frozen=True, slots=True)
class SyncOutcome:
    """Summary reported after a successful sync."""

    fetched: int
    applied: int
    replaced: int
    inserted: int
    completed_at: datetime

    def summary(self) -> str:
        """Return the user-facing description of the sync."""
        return (
            f"Applied {self.applied} server updates ({self.fetched} items fetched). "
            "Server changes take precedence."
        )


def merge_remote_quotes(
    local: Iterable[Quote],
    remote: Iterable[Quote],
    *,
    merged_at: datetime | None = None,
) -> MergeResult:
    """Upsert *remote* into *local* by id with the server winning on collisions.

    Local order is preserved, replaced entries keep their position and new ids
    are appended. Every applied entry is stamped with *merged_at*.
    """
    stamp = merged_at or utc_now()
    by_id: dict[str, Quote] = {quote.id: quote for quote in local}
    replaced = 0
    inserted = 0
    for remote_quote in remote:
        if remote_quote.id in by_id:
            replaced += 1
        else:
            inserted += 1
        by_id[remote_quote.id] = replace(remote_quote, last_modified=stamp)
    return MergeResult(quotes=tuple(by_id.values()), replaced=replaced, inserted=inserted)


class SyncEngine:
    """Fetch, merge, and undo remote snapshots for a :class:`QuoteRepository`."""

    def __init__(
        self,
        repository: QuoteRepository,
        transport: RemoteQuoteSource,
        notifier: Notifier,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Bind the repository, injected transport, and notifier."""
        self._repository = repository
        self._transport = transport
        self._notifier = notifier
        self._clock = clock
        self._state = SyncState.IDLE
        self._snapshot: tuple[Quote, ...] | None = None
        self._last_outcome: SyncOutcome | None = None

    @property
    def state(self) -> SyncState:
        """Return the current engine state."""
        return self._state

    @property
    def has_snapshot(self) -> bool:
        """Return ``True`` when a sync can be undone."""
        return self._snapshot is not None

    @property
    def last_outcome(self) -> SyncOutcome | None:
        """Return the outcome of the most recent successful sync."""
        return self._last_outcome

    async def sync(self) -> SyncOutcome | None:
        """Run one sync; returns ``None`` when a sync is already in flight.

        Raises:
          RemoteTransportError: The fetch failed; the repository is untouched.
        """
        if self._state is SyncState.SYNCING:
            logger.debug("Sync already in progress; dropping overlapping request")
            return None
        self._state = SyncState.SYNCING
        try:
            self._notifier.notify(
                "Syncing with server...",
                _STARTED_TTL,
                status=NotificationStatus.STARTED,
                title="Sync",
            )
            try:
                remote = await self._transport.fetch_remote()
            except Exception as exc:
                error = (
                    exc
                    if isinstance(exc, RemoteTransportError)
                    else RemoteTransportError(str(exc) or type(exc).__name__)
                )
                logger.warning("Sync failed: %s", error)
                self._notifier.notify(
                    f"Sync failed: {error}",
                    _FAILURE_TTL,
                    level=NotificationLevel.ERROR,
                    status=NotificationStatus.FAILED,
                    title="Sync",
                )
                if error is exc:
                    raise
                raise error from exc

            # Taken after the fetch so quotes added while awaiting are included.
            self._snapshot = self._repository.snapshot()
            result = merge_remote_quotes(self._snapshot, remote, merged_at=self._clock())
            try:
                self._repository.replace_all(result.quotes)
            except Exception as exc:
                self._snapshot = None
                logger.error("Unable to apply sync merge: %s", exc)
                self._notifier.notify(
                    f"Sync failed: {exc}",
                    _FAILURE_TTL,
                    level=NotificationLevel.ERROR,
                    status=NotificationStatus.FAILED,
                    title="Sync",
                )
                raise

            outcome = SyncOutcome(
                fetched=len(remote),
                applied=result.applied,
                replaced=result.replaced,
                inserted=result.inserted,
                completed_at=self._clock(),
            )
            self._last_outcome = outcome
            self._notifier.notify(
                outcome.summary(),
                _SUCCESS_TTL,
                level=NotificationLevel.SUCCESS,
                status=NotificationStatus.SUCCEEDED,
                title="Sync",
                metadata={
                    "fetched": outcome.fetched,
                    "applied": outcome.applied,
                    "action": "undo",
                },
            )
            logger.info(
                "Sync applied %d updates (%d replaced, %d inserted) from %d fetched",
                outcome.applied,
                outcome.replaced,
                outcome.inserted,
                outcome.fetched,
            )
            return outcome
        finally:
            self._state = SyncState.IDLE

    def undo(self) -> bool:
        """Restore the pre-sync collection; ``False`` when there is nothing to undo."""
        snapshot = self._snapshot
        if snapshot is None:
            return False
        self._repository.replace_all(snapshot)
        self._snapshot = None
        self._notifier.notify(
            "Sync undone. Local state restored.",
            _UNDO_TTL,
            level=NotificationLevel.SUCCESS,
            title="Sync",
        )
        logger.info("Restored %d quotes from sync snapshot", len(snapshot))
        return True


class PeriodicSyncDriver:
    """Invoke :meth:`SyncEngine.sync` on a fixed interval."""

    def __init__(self, engine: SyncEngine, interval_seconds: float) -> None:
        """Store the engine and interval; nothing runs until :meth:`start`."""
        if interval_seconds <= 0:
            raise ValueError("sync interval must be greater than zero")
        self._engine = engine
        self._interval = float(interval_seconds)
        self._task: asyncio.Task[None] | None = None

    @property
    def interval(self) -> float:
        """Return the interval in seconds."""
        return self._interval

    @property
    def running(self) -> bool:
        """Return ``True`` while the background task is alive."""
        return self._task is not None and not self._task.done()

    async def tick(self) -> SyncOutcome | None:
        """Run one sync, logging store failures so the schedule keeps going."""
        try:
            return await self._engine.sync()
        except RemoteTransportError as exc:
            logger.warning("Scheduled sync failed: %s", exc)
            return None
        except QuoteStoreError as exc:
            logger.error("Scheduled sync could not apply server changes: %s", exc)
            return None

    async def run(self, iterations: int | None = None) -> int:
        """Sleep-then-sync until cancelled or *iterations* syncs have run."""
        completed = 0
        while iterations is None or completed < iterations:
            await asyncio.sleep(self._interval)
            await self.tick()
            completed += 1
        return completed

    def start(self) -> asyncio.Task[None]:
        """Start (or restart) the background loop on the running event loop."""
        if self.running:
            self._task.cancel()  # type: ignore[union-attr]
        self._task = asyncio.get_running_loop().create_task(self._loop())
        logger.info("Auto-sync every %.0f seconds", self._interval)
        return self._task

    async def _loop(self) -> None:
        await self.run()

    async def stop(self) -> None:
        """Cancel the background loop and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


__all__ = [
    "MergeResult",
    "PeriodicSyncDriver",
    "SyncEngine",
    "SyncOutcome",
    "SyncState",
    "merge_remote_quotes",
]

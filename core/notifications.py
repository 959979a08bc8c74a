"""Time-boxed user notifications.

Updates:
  v0.2.0 - 2026-10-13 - Add TTL expiry, sticky messages, and dismissal.
  v0.1.1 - 2026-10-08 - Attach task status to sync lifecycle messages.
  v0.1.0 - 2026-10-05 - Introduce notification hub with subscriber fan-out.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("quote_store.notifications")

DEFAULT_TTL_SECONDS = 8.0


class NotificationLevel(str, Enum):
    """Severity levels communicated to listeners."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class NotificationStatus(str, Enum):
    """High-level lifecycle stage for a task notification."""
    STARTED = "started"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(slots=True)
class Notification:
    """Payload describing a single user-visible message."""
    id: uuid.UUID
    message: str
    level: NotificationLevel
    title: str = "Quotes"
    ttl_seconds: float | None = DEFAULT_TTL_SECONDS
    status: NotificationStatus | None = None
    expires_at: float | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def sticky(self) -> bool:
        """Return ``True`` when the message must be dismissed explicitly."""
        return self.expires_at is None

    def is_expired(self, now: float) -> bool:
        """Return ``True`` once the TTL has elapsed at monotonic time *now*."""
        return self.expires_at is not None and now >= self.expires_at

    def to_dict(self) -> dict[str, Any]:
        """Return a serialisable representation of the notification."""
        return {
            "id": str(self.id),
            "title": self.title,
            "message": self.message,
            "level": self.level.value,
            "status": self.status.value if self.status else None,
            "ttl_seconds": self.ttl_seconds,
            "sticky": self.sticky,
            "timestamp": self.timestamp.isoformat(),
            "metadata": dict(self.metadata),
        }


class NotificationSubscription:
    """Disposable handle that removes its callback when closed."""
    def __init__(
        self,
        notifier: Notifier,
        callback: Callable[[Notification], None],
    ) -> None:
        """Store *notifier* subscription metadata for later cleanup."""
        self._notifier = notifier
        self._callback = callback
        self._closed = False

    def close(self) -> None:
        """Detach the stored callback if it is still active."""
        if self._closed:
            return
        self._closed = True
        self._notifier.unsubscribe(self._callback)

    def __enter__(self) -> NotificationSubscription:
        """Return the subscription so it can be used as a context manager."""
        return self

    def __exit__(self, *_: object) -> None:
        """Ensure the callback is removed when leaving the context."""
        self.close()


class Notifier:
    """Fire-and-forget message hub; messages retract themselves after their TTL."""
    def __init__(
        self,
        *,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        history_limit: int = 200,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialise subscribers, active messages, and a bounded history."""
        self._default_ttl = default_ttl
        self._clock = clock
        self._subscribers: list[Callable[[Notification], None]] = []
        self._active: dict[uuid.UUID, Notification] = {}
        self._lock = threading.RLock()
        self._history: deque[Notification] = deque(maxlen=history_limit)

    def subscribe(self, callback: Callable[[Notification], None]) -> NotificationSubscription:
        """Register *callback* to receive future notifications."""
        with self._lock:
            self._subscribers.append(callback)
        return NotificationSubscription(self, callback)

    def unsubscribe(self, callback: Callable[[Notification], None]) -> None:
        """Remove a previously subscribed callback if present."""
        with self._lock:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass

    def notify(
        self,
        message: str,
        ttl: float | None = None,
        *,
        level: NotificationLevel = NotificationLevel.INFO,
        sticky: bool = False,
        title: str = "Quotes",
        status: NotificationStatus | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Notification:
        """Show *message* for *ttl* seconds; ``ttl=0`` or *sticky* never expires."""
        resolved_ttl = self._default_ttl if ttl is None else max(0.0, float(ttl))
        never_expires = sticky or resolved_ttl == 0
        notification = Notification(
            id=uuid.uuid4(),
            message=message,
            level=level,
            title=title,
            ttl_seconds=None if never_expires else resolved_ttl,
            status=status,
            expires_at=None if never_expires else self._clock() + resolved_ttl,
            metadata=dict(metadata or {}),
        )
        self.publish(notification)
        return notification

    def publish(self, notification: Notification) -> None:
        """Deliver *notification* to all registered subscribers."""
        with self._lock:
            self._history.append(notification)
            self._active[notification.id] = notification
            subscribers = list(self._subscribers)

        logger.debug(
            "Notification event",
            extra={
                "title": notification.title,
                "status": notification.status.value if notification.status else None,
                "level": notification.level.value,
                "notification_message": notification.message,
            },
        )

        for callback in subscribers:
            try:
                callback(notification)
            except Exception:  # pragma: no cover - subscriber bugs must not break callers
                logger.exception("Notification subscriber raised an exception")

    def active(self) -> tuple[Notification, ...]:
        """Return notifications still on screen, retracting expired ones."""
        now = self._clock()
        with self._lock:
            expired = [key for key, item in self._active.items() if item.is_expired(now)]
            for key in expired:
                del self._active[key]
            return tuple(self._active.values())

    def dismiss(self, notification_id: uuid.UUID) -> bool:
        """Retract a notification; returns ``False`` when it was already gone."""
        with self._lock:
            return self._active.pop(notification_id, None) is not None

    def history(self) -> tuple[Notification, ...]:
        """Return a snapshot of stored notifications."""
        with self._lock:
            return tuple(self._history)


__all__ = [
    "DEFAULT_TTL_SECONDS",
    "Notification",
    "NotificationLevel",
    "NotificationStatus",
    "NotificationSubscription",
    "Notifier",
]

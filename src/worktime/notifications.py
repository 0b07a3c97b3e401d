"""Notification delivery for break reminders."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Protocol

from pydantic import ValidationError

from . import codec
from .models import DeliveredNotification
from .storage import DELIVERED_NOTIFICATIONS_KEY, PersistenceGateway

logger = logging.getLogger(__name__)

APP_TITLE = "Work Time"


class NotificationGateway(Protocol):
    def request_permission(self) -> bool: ...

    def deliver(self, title: str, body: str) -> Optional[DeliveredNotification]: ...

    def list_delivered(self) -> list[DeliveredNotification]: ...

    def clear_all_and_reset_badge(self) -> None: ...


class RecordingNotificationGateway:
    """Keeps the delivered history and badge count.

    When a store is given the history survives restarts, and every call
    re-reads it first so several processes sharing one store agree on the
    history and the badge. Subclasses push the notification somewhere
    visible by overriding ``_push``.
    """

    def __init__(
        self,
        *,
        granted: bool = True,
        store: Optional[PersistenceGateway] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._granted = granted
        self._store = store
        self._clock = clock
        self._lock = threading.Lock()
        self._delivered: list[DeliveredNotification] = self._load_history()

    @property
    def badge(self) -> int:
        with self._lock:
            self._refresh()
            return max((item.badge for item in self._delivered), default=0)

    def request_permission(self) -> bool:
        if not self._granted:
            logger.info("Notifications are disabled; reminders will be suppressed.")
        return self._granted

    def deliver(self, title: str, body: str) -> Optional[DeliveredNotification]:
        if not self._granted:
            logger.debug("Notification suppressed (no permission): %s", title)
            return None
        with self._lock:
            self._refresh()
            badge = max((item.badge for item in self._delivered), default=0) + 1
            notification = DeliveredNotification(
                title=title, body=body, delivered_at=self._clock(), badge=badge
            )
            self._delivered.append(notification)
            self._save_history()
        logger.info("Notification delivered: %s", title)
        self._push(notification)
        return notification

    def list_delivered(self) -> list[DeliveredNotification]:
        """Newest first."""
        with self._lock:
            self._refresh()
            return sorted(
                self._delivered,
                key=lambda item: (item.delivered_at, item.badge),
                reverse=True,
            )

    def clear_all_and_reset_badge(self) -> None:
        with self._lock:
            self._delivered.clear()
            self._save_history()

    def _push(self, notification: DeliveredNotification) -> None:
        pass

    def _refresh(self) -> None:
        if self._store is not None:
            self._delivered = self._load_history()

    def _load_history(self) -> list[DeliveredNotification]:
        if self._store is None:
            return []
        blob = self._store.load(DELIVERED_NOTIFICATIONS_KEY)
        if blob is None:
            return []
        try:
            return codec.decode_notifications(blob)
        except ValidationError:
            logger.warning("Discarding unreadable notification history.", exc_info=True)
            return []

    def _save_history(self) -> None:
        if self._store is None:
            return
        try:
            self._store.save(
                DELIVERED_NOTIFICATIONS_KEY, codec.encode_notifications(self._delivered)
            )
        except Exception:
            logger.exception("Failed to persist notification history.")


class DesktopNotificationGateway(RecordingNotificationGateway):
    """Shows each notification as a desktop toast through plyer."""

    def __init__(self, *, timeout: int = 10, **kwargs) -> None:
        super().__init__(**kwargs)
        self._timeout = timeout

    def _push(self, notification: DeliveredNotification) -> None:
        threading.Thread(
            target=self._show_toast, args=(notification,), daemon=True
        ).start()

    def _show_toast(self, notification: DeliveredNotification) -> None:
        from plyer import notification as toast

        try:
            toast.notify(
                title=notification.title,
                message=notification.body,
                app_name=APP_TITLE,
                timeout=self._timeout,
            )
        except Exception:
            logger.exception("Failed to show desktop notification %r", notification.title)

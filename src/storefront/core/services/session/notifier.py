"""Local notifications."""

from __future__ import annotations

import threading
import uuid
from datetime import datetime
from typing import Protocol, runtime_checkable

from loguru import logger
from pydantic import BaseModel, Field


class NotificationCategory(BaseModel):
    id: str
    actions: list[str] = Field(default_factory=list)


class ScheduledNotification(BaseModel):
    id: str
    title: str
    body: str
    fire_at: datetime
    category_id: str | None = None


@runtime_checkable
class Notifier(Protocol):
    def request_authorization(self, options: list[str]) -> bool: ...

    def register_categories(self, categories: list[NotificationCategory]) -> None: ...

    def cancel_all(self) -> None: ...


class InMemoryNotifier:
    """Notifier keeping scheduled notifications in a dict."""

    def __init__(self, *, grant: bool = True):
        self._grant = grant
        self._lock = threading.Lock()
        self.authorized = False
        self.options: list[str] = []
        self.categories: dict[str, NotificationCategory] = {}
        self.pending: dict[str, ScheduledNotification] = {}

    def request_authorization(self, options: list[str]) -> bool:
        self.options = list(options)
        self.authorized = self._grant
        logger.debug("Notification authorization {} for {}", "granted" if self._grant else "denied", options)
        return self.authorized

    def register_categories(self, categories: list[NotificationCategory]) -> None:
        with self._lock:
            for category in categories:
                self.categories[category.id] = category

    def schedule(
        self,
        title: str,
        body: str,
        fire_at: datetime,
        *,
        notification_id: str | None = None,
        category_id: str | None = None,
    ) -> str:
        notification = ScheduledNotification(
            id=notification_id or str(uuid.uuid4()),
            title=title,
            body=body,
            fire_at=fire_at,
            category_id=category_id,
        )
        with self._lock:
            self.pending[notification.id] = notification
        return notification.id

    def cancel(self, ids: list[str]) -> None:
        with self._lock:
            for notification_id in ids:
                self.pending.pop(notification_id, None)

    def cancel_all(self) -> None:
        with self._lock:
            count = len(self.pending)
            self.pending.clear()
        logger.debug("Cancelled {} pending notifications", count)

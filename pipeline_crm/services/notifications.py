"""Transient success/error announcements for primary operations."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from pipeline_crm.core.enums import NotificationVariant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.DEFAULT
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_error(self) -> bool:
        return self.variant is NotificationVariant.DESTRUCTIVE


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


class NotificationCenter:
    """Logs every notification and keeps a bounded history for display."""

    def __init__(self, history_size: int = 50) -> None:
        self._history: deque[Notification] = deque(maxlen=history_size)

    def notify(self, notification: Notification) -> None:
        level = logging.WARNING if notification.is_error else logging.INFO
        logger.log(
            level,
            "notification: %s - %s",
            notification.title,
            notification.description,
            extra={"event": "notification.sent", "variant": notification.variant.value},
        )
        self._history.append(notification)

    def recent(self) -> list[Notification]:
        """Most recent first."""
        return list(reversed(self._history))

    def clear(self) -> None:
        self._history.clear()

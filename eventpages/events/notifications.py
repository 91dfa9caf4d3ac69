"""Notifications handed to whatever displays them.

A notification is ephemeral: the sink receives it once and decides when to
show and drop it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class NotificationEvent:
    kind: NotificationKind
    title: str
    detail: str | None = None

    @classmethod
    def success(cls, title: str, detail: str | None = None) -> "NotificationEvent":
        return cls(NotificationKind.SUCCESS, title, detail)

    @classmethod
    def error(cls, title: str, detail: str | None = None) -> "NotificationEvent":
        return cls(NotificationKind.ERROR, title, detail)

    @classmethod
    def warning(cls, title: str, detail: str | None = None) -> "NotificationEvent":
        return cls(NotificationKind.WARNING, title, detail)

    @classmethod
    def info(cls, title: str, detail: str | None = None) -> "NotificationEvent":
        return cls(NotificationKind.INFO, title, detail)


class NotificationSink(Protocol):
    def __call__(self, notification: NotificationEvent) -> None: ...


class CollectingNotificationSink:
    """Queues notifications until a caller drains them."""

    def __init__(self) -> None:
        self._pending: list[NotificationEvent] = []

    def __call__(self, notification: NotificationEvent) -> None:
        logger.debug(f"Notification {notification.kind.value}: {notification.title}")
        self._pending.append(notification)

    def drain(self) -> list[NotificationEvent]:
        pending, self._pending = self._pending, []
        return pending

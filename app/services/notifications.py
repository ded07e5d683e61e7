"""User-facing notifications for program operations."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol, runtime_checkable

from app.core.logging import get_logger

logger = get_logger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    level: NotificationLevel
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@runtime_checkable
class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


class LogNotifier:
    """Writes notifications to the structured log."""

    def notify(self, notification: Notification) -> None:
        if notification.level is NotificationLevel.ERROR:
            logger.warning("notification", title=notification.title, message=notification.message)
        else:
            logger.info("notification", title=notification.title, message=notification.message)


class RecordingNotifier:
    """Keeps every notification so a UI can render them."""

    def __init__(self):
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def errors(self) -> list[Notification]:
        return [n for n in self.notifications if n.level is NotificationLevel.ERROR]

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None

    def clear(self) -> None:
        self.notifications.clear()


def success(message: str) -> Notification:
    return Notification(title="Success", message=message, level=NotificationLevel.SUCCESS)


def error(message: str) -> Notification:
    return Notification(title="Error", message=message, level=NotificationLevel.ERROR)

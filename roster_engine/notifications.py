"""
User-facing notifications.

The engine only decides whether an operation succeeded and hands a short
message to a Notifier. How it is shown (toast, status line, stderr) belongs
to the presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


class NotificationLevel(str, Enum):
    """Severity of a notification."""

    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notification:
    """A single success/failure signal with display text."""

    level: NotificationLevel
    message: str

    @property
    def is_error(self) -> bool:
        return self.level is NotificationLevel.ERROR


class Notifier(Protocol):
    """Receives notifications once the state they describe is durable."""

    def notify(self, notification: Notification) -> None:
        """Present one notification."""
        ...


@dataclass(slots=True)
class CollectingNotifier:
    """Notifier that keeps every notification in memory, oldest first."""

    received: list[Notification] = field(default_factory=list)

    def notify(self, notification: Notification) -> None:
        self.received.append(notification)

    @property
    def last(self) -> Notification | None:
        return self.received[-1] if self.received else None

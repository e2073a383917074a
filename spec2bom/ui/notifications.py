"""Transient, dismissable user notifications."""

import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from spec2bom.core.logging import get_logger

logger = get_logger(__name__)


class Level(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    id: int
    message: str
    level: Level
    created_at: float


Listener = Callable[[Notification], None]


class Notifier:
    """Collects notifications that disappear after ``ttl_seconds``.

    Every notification is logged as well; listeners (such as the CLI) are
    called synchronously as each one is raised.
    """

    def __init__(
        self,
        ttl_seconds: float = 5.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._ids = itertools.count(1)
        self._items: dict[int, Notification] = {}
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def notify(self, message: str, level: Level | str = Level.SUCCESS) -> Notification:
        level = Level(level)
        notification = Notification(next(self._ids), message, level, self._clock())
        self._items[notification.id] = notification

        if level is Level.ERROR:
            logger.error("notification", message=message)
        else:
            logger.info("notification", message=message)

        for listener in self._listeners:
            listener(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(message, Level.SUCCESS)

    def error(self, message: str) -> Notification:
        return self.notify(message, Level.ERROR)

    def dismiss(self, notification_id: int) -> bool:
        return self._items.pop(notification_id, None) is not None

    def active(self, now: float | None = None) -> list[Notification]:
        """Notifications that have neither expired nor been dismissed."""
        now = self._clock() if now is None else now
        for expired in [
            n for n in self._items.values() if now - n.created_at >= self.ttl_seconds
        ]:
            del self._items[expired.id]
        return list(self._items.values())

"""
User-visible notifications (the toast layer).

Services report outcomes here; whatever renders the UI subscribes.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from errors import TaskFlowError
from models import utc_now
from .events import Observable


class Level(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: Level
    message: str
    error: Optional[TaskFlowError] = None
    created_at: datetime = field(default_factory=utc_now)


class Notifier:
    """Collects notifications, keeps a bounded history and fans them out."""

    def __init__(self, history_size: int = 50):
        self.history: deque[Notification] = deque(maxlen=history_size)
        self._channel = Observable("NOTIFY")

    def subscribe(self, callback: Callable[[Notification], None]) -> Callable[[], None]:
        return self._channel.subscribe(callback)

    def emit(self, level: Level, message: str, error: Optional[TaskFlowError] = None) -> Notification:
        note = Notification(level=level, message=message, error=error)
        self.history.append(note)
        self._channel.notify(note)
        return note

    def success(self, message: str) -> Notification:
        return self.emit(Level.SUCCESS, message)

    def info(self, message: str) -> Notification:
        return self.emit(Level.INFO, message)

    def warning(self, message: str, error: Optional[TaskFlowError] = None) -> Notification:
        return self.emit(Level.WARNING, message, error)

    def error(self, message: str, error: Optional[TaskFlowError] = None) -> Notification:
        return self.emit(Level.ERROR, message, error)

    def of_level(self, level: Level) -> list[Notification]:
        return [n for n in self.history if n.level == level]

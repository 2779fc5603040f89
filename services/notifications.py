import logging
from collections import deque
from datetime import datetime, timezone
from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from settings import RECENT_NOTIFICATIONS_LIMIT

logger = logging.getLogger('uvicorn.error')


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Notification(BaseModel):
    level: NotificationLevel
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    """Transient user-facing notifications. Keeps the most recent ones for display."""

    def __init__(self, limit: int = RECENT_NOTIFICATIONS_LIMIT):
        self._recent = deque(maxlen=limit)

    def success(self, message: str) -> Notification:
        logger.info(message)
        return self._push(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> Notification:
        logger.warning(message)
        return self._push(NotificationLevel.ERROR, message)

    def _push(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self._recent.append(notification)
        return notification

    @property
    def recent(self) -> List[Notification]:
        return list(self._recent)

    def clear(self):
        self._recent.clear()

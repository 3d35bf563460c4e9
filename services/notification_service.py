"""
User-visible notifications (toast equivalent).

Workflows push success/error messages; the notifications endpoint
drains them for display.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import structlog

logger = structlog.get_logger(__name__)

MAX_PENDING = 50


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Notification:
    kind: NotificationKind
    message: str
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message, "created_at": self.created_at}


class Notifier:
    """
    Pending notifications, oldest first.

    Only the most recent MAX_PENDING are kept if nobody drains them.
    """

    def __init__(self, max_pending: int = MAX_PENDING):
        self._pending: deque[Notification] = deque(maxlen=max_pending)

    def success(self, message: str) -> None:
        logger.info("notify_success", message=message)
        self._pending.append(Notification(NotificationKind.SUCCESS, message))

    def error(self, message: str) -> None:
        logger.info("notify_error", message=message)
        self._pending.append(Notification(NotificationKind.ERROR, message))

    def drain(self) -> list[Notification]:
        """Return and forget every pending notification."""
        items = list(self._pending)
        self._pending.clear()
        return items

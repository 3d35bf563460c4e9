"""
Explicit state of an asynchronous read, for screens that show
loading/success/failure independently per data source.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

import structlog

from exceptions import AppError, BackendUnauthorizedError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ResultStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class AsyncResult(Generic[T]):
    """Outcome of one read: data on success, a display message on failure."""
    status: ResultStatus
    data: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @classmethod
    def success(cls, data: T) -> "AsyncResult[T]":
        return cls(status=ResultStatus.SUCCESS, data=data)

    @classmethod
    def failure(cls, message: str) -> "AsyncResult[T]":
        return cls(status=ResultStatus.FAILURE, error=message)

    def to_dict(self, serialize: Callable[[T], Any] = lambda value: value) -> dict:
        return {
            "status": self.status.value,
            "data": serialize(self.data) if self.data is not None else None,
            "error": self.error,
        }


def capture(fetch: Callable[[], T], fallback_message: str) -> AsyncResult[T]:
    """
    Run a read and fold its outcome into an AsyncResult.

    Only AppError is folded; anything else is a bug and propagates.
    An expired session also propagates so the caller can send the
    admin back to login.
    """
    try:
        return AsyncResult.success(fetch())
    except BackendUnauthorizedError:
        raise
    except AppError as e:
        logger.warning("read_failed", code=e.code, error=e.message)
        display = getattr(e, "display_message", None)
        return AsyncResult.failure(display(fallback_message) if display else e.message)

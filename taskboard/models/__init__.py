"""Models package."""

from .session import Credentials, Session, SessionResponse
from .task import (
    DropRequest,
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskStatus,
    TaskUpdate,
)

__all__ = [
    "Credentials",
    "Session",
    "SessionResponse",
    "TaskStatus",
    "TaskCreate",
    "TaskUpdate",
    "DropRequest",
    "TaskResponse",
    "TaskListResponse",
]

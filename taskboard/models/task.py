"""Pydantic models for task API."""

from enum import Enum

from pydantic import BaseModel, Field

from ..config import MAX_TASK_NAME_LENGTH


class TaskStatus(str, Enum):
    """Task status enumeration. Each value is also a board column."""

    TODO = "Todo"
    PENDING = "Pending"
    DONE = "Done"


class TaskCreate(BaseModel):
    """Request model for creating a task."""

    task_name: str = Field(..., min_length=1, max_length=MAX_TASK_NAME_LENGTH)
    status: TaskStatus = TaskStatus.TODO
    request_id: str | None = Field(None, max_length=64)


class TaskUpdate(BaseModel):
    """Request model for renaming and/or moving a task."""

    task_name: str | None = Field(None, min_length=1, max_length=MAX_TASK_NAME_LENGTH)
    status: TaskStatus | None = None
    request_id: str | None = Field(None, max_length=64)


class DropRequest(BaseModel):
    """A drag gesture normalized to source column, destination column and item."""

    source_group: TaskStatus
    destination_group: TaskStatus | None = None
    item_id: str
    request_id: str | None = Field(None, max_length=64)


class TaskResponse(BaseModel):
    """Response model for a task."""

    id: str
    task_name: str
    status: TaskStatus
    owner_id: str
    created_at: int


class TaskListResponse(BaseModel):
    """Response model for task list."""

    tasks: list[TaskResponse]
    count: int

"""Task API router."""

from fastapi import APIRouter, Depends, status

from ..board import DropEvent, handle_drop
from ..errors import ValidationError
from ..models import (
    DropRequest,
    Session,
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
)
from ..services import tasks as task_service
from .deps import require_session

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def list_response(tasks: list[TaskResponse]) -> TaskListResponse:
    return TaskListResponse(tasks=tasks, count=len(tasks))


@router.get("", response_model=TaskListResponse)
def list_tasks(session: Session = Depends(require_session)):
    """Get all of the user's tasks, oldest first."""
    return list_response(task_service.list_tasks(session))


@router.post("", response_model=TaskListResponse, status_code=status.HTTP_201_CREATED)
def create_task(task_data: TaskCreate, session: Session = Depends(require_session)):
    """Create a task and return the refreshed list."""
    tasks = task_service.create_task(
        session, task_data.task_name, task_data.status, request_id=task_data.request_id
    )
    return list_response(tasks)


@router.post("/drop", response_model=TaskListResponse)
def drop_task(drop: DropRequest, session: Session = Depends(require_session)):
    """Apply a drag-and-drop gesture."""
    event = DropEvent(
        source_group=drop.source_group.value,
        destination_group=drop.destination_group.value if drop.destination_group else None,
        item_id=drop.item_id,
    )
    tasks = handle_drop(session, event, request_id=drop.request_id)
    if tasks is None:
        tasks = task_service.list_tasks(session)
    return list_response(tasks)


@router.patch("/{task_id}", response_model=TaskListResponse)
def update_task(
    task_id: str, task_data: TaskUpdate, session: Session = Depends(require_session)
):
    """Rename and/or move a task."""
    if task_data.task_name is None and task_data.status is None:
        raise ValidationError("Nothing to update")

    request_id = task_data.request_id
    tasks = None
    if task_data.task_name is not None:
        tasks = task_service.rename_task(
            session, task_id, task_data.task_name, request_id=request_id
        )
    if task_data.status is not None:
        if request_id and tasks is not None:
            request_id = f"{request_id}:status"
        tasks = task_service.move_task(
            session, task_id, task_data.status, request_id=request_id
        )
    return list_response(tasks)


@router.delete("/{task_id}", response_model=TaskListResponse)
def delete_task(
    task_id: str,
    request_id: str | None = None,
    session: Session = Depends(require_session),
):
    """Delete a task and return the refreshed list."""
    return list_response(task_service.delete_task(session, task_id, request_id=request_id))

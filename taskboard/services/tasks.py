"""User-scoped task operations.

Every operation takes the caller's session explicitly and refuses to run
without one. Mutations never patch a cached list: they return a fresh read of
all the owner's tasks.
"""

import logging
import time

from ulid import ULID

from .. import db
from ..config import MAX_TASK_NAME_LENGTH
from ..errors import Unauthenticated, ValidationError
from ..models import Session, TaskResponse, TaskStatus

logger = logging.getLogger(__name__)


def _require_session(session: Session | None) -> Session:
    if session is None:
        raise Unauthenticated()
    return session


def _clean_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Task name cannot be empty")
    if len(name) > MAX_TASK_NAME_LENGTH:
        raise ValidationError(
            f"Task name must be at most {MAX_TASK_NAME_LENGTH} characters"
        )
    return name


def parse_status(status: str | TaskStatus | None) -> TaskStatus:
    """Coerce a column name into a TaskStatus."""
    try:
        return TaskStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise ValidationError(f"Status must be one of {allowed}") from None


def list_tasks(session: Session | None) -> list[TaskResponse]:
    """All tasks owned by the session's user, oldest first."""
    session = _require_session(session)
    return [TaskResponse(**task) for task in db.get_tasks_by_owner(session.user_id)]


def create_task(
    session: Session | None,
    name: str,
    status: str | TaskStatus = TaskStatus.TODO,
    request_id: str | None = None,
) -> list[TaskResponse]:
    session = _require_session(session)
    name = _clean_name(name)
    status = parse_status(status)

    task_id = str(ULID())
    created = db.create_task(
        task_id,
        name,
        status.value,
        session.user_id,
        int(time.time()),
        request_id=request_id,
    )
    if created is None:
        logger.info("Skipped duplicate create request %s", request_id)
    else:
        logger.info("Created task %s in %s", task_id, status.value)
    return list_tasks(session)


def rename_task(
    session: Session | None,
    task_id: str,
    new_name: str,
    request_id: str | None = None,
) -> list[TaskResponse]:
    """Change only the task's name."""
    session = _require_session(session)
    new_name = _clean_name(new_name)
    db.update_task(
        task_id,
        session.user_id,
        task_name=new_name,
        request_id=request_id,
        updated_at=int(time.time()),
    )
    logger.info("Renamed task %s", task_id)
    return list_tasks(session)


def move_task(
    session: Session | None,
    task_id: str,
    new_status: str | TaskStatus,
    request_id: str | None = None,
) -> list[TaskResponse]:
    """Change only the task's status."""
    session = _require_session(session)
    new_status = parse_status(new_status)
    db.update_task(
        task_id,
        session.user_id,
        status=new_status.value,
        request_id=request_id,
        updated_at=int(time.time()),
    )
    logger.info("Moved task %s to %s", task_id, new_status.value)
    return list_tasks(session)


def delete_task(
    session: Session | None,
    task_id: str,
    request_id: str | None = None,
) -> list[TaskResponse]:
    session = _require_session(session)
    db.delete_task(
        task_id, session.user_id, request_id=request_id, deleted_at=int(time.time())
    )
    logger.info("Deleted task %s", task_id)
    return list_tasks(session)

"""Board view logic: column grouping, drop handling and inline form state.

The HTTP layer keeps no state of its own between requests; ``BoardState`` is
the model a page render is built from, and the same transitions back the
HTMX fragments.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

from .errors import TaskBoardError
from .models import Session, TaskResponse, TaskStatus
from .services import tasks as task_service

logger = logging.getLogger(__name__)

COLUMNS: tuple[TaskStatus, ...] = (TaskStatus.TODO, TaskStatus.PENDING, TaskStatus.DONE)


class RowState(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"


@dataclass(frozen=True)
class DropEvent:
    """A finished drag gesture.

    ``destination_group`` is None when the item was dropped outside every
    column.
    """

    source_group: str
    destination_group: str | None
    item_id: str


def group_by_status(tasks: Iterable[TaskResponse]) -> dict[TaskStatus, list[TaskResponse]]:
    """Partition tasks into the three columns, keeping their order."""
    groups: dict[TaskStatus, list[TaskResponse]] = {column: [] for column in COLUMNS}
    for task in tasks:
        if task.status in groups:
            groups[task.status].append(task)
    return groups


MoveFn = Callable[..., list[TaskResponse]]


def handle_drop(
    session: Session | None,
    event: DropEvent,
    move: MoveFn | None = None,
    request_id: str | None = None,
) -> list[TaskResponse] | None:
    """Turn a drop into a status change.

    Returns the refreshed task list, or None when the drop changes nothing
    (cancelled, or released over the column it started in).
    """
    if event.destination_group is None:
        return None
    if event.destination_group == event.source_group:
        return None
    destination = task_service.parse_status(event.destination_group)
    if move is None:
        move = task_service.move_task
    return move(session, event.item_id, destination, request_id=request_id)


@dataclass
class BoardState:
    """What one user currently sees on the board."""

    tasks: list[TaskResponse] = field(default_factory=list)
    adding: TaskStatus | None = None
    new_task_name: str = ""
    editing_id: str | None = None
    edit_name: str = ""
    error: str = ""

    @property
    def columns(self) -> dict[TaskStatus, list[TaskResponse]]:
        return group_by_status(self.tasks)

    def row_state(self, task_id: str) -> RowState:
        return RowState.EDITING if self.editing_id == task_id else RowState.VIEWING

    def _run(self, action: Callable[[], list[TaskResponse] | None]) -> bool:
        """Apply a service call; on failure keep the old list and record why."""
        try:
            result = action()
        except TaskBoardError as e:
            logger.info("Board action failed: %s", e.message)
            self.error = e.message
            return False
        self.error = ""
        if result is not None:
            self.tasks = result
        return True

    def refresh(self, session: Session | None) -> bool:
        return self._run(lambda: task_service.list_tasks(session))

    # -------------------- inline add --------------------
    def open_add(self, column: str) -> None:
        self.adding = task_service.parse_status(column)
        self.new_task_name = ""

    def cancel_add(self) -> None:
        self.adding = None
        self.new_task_name = ""

    def submit_add(
        self, session: Session | None, name: str, request_id: str | None = None
    ) -> bool:
        """Create a task in the open column. Blank input is ignored."""
        self.new_task_name = name
        if self.adding is None:
            self.error = "No column selected"
            return False
        if not name.strip():
            return False
        column = self.adding
        ok = self._run(
            lambda: task_service.create_task(session, name, column, request_id=request_id)
        )
        if ok:
            self.cancel_add()
        return ok

    # -------------------- inline rename --------------------
    def start_edit(self, task: TaskResponse) -> None:
        self.editing_id = task.id
        self.edit_name = task.task_name

    def cancel_edit(self) -> None:
        self.editing_id = None
        self.edit_name = ""

    def submit_edit(
        self, session: Session | None, name: str | None = None, request_id: str | None = None
    ) -> bool:
        if self.editing_id is None:
            return False
        if name is not None:
            self.edit_name = name
        task_id, new_name = self.editing_id, self.edit_name
        ok = self._run(
            lambda: task_service.rename_task(session, task_id, new_name, request_id=request_id)
        )
        if ok:
            self.cancel_edit()
        return ok

    # -------------------- delete / drop --------------------
    def delete(
        self, session: Session | None, task_id: str, request_id: str | None = None
    ) -> bool:
        return self._run(
            lambda: task_service.delete_task(session, task_id, request_id=request_id)
        )

    def drop(
        self, session: Session | None, event: DropEvent, request_id: str | None = None
    ) -> bool:
        return self._run(lambda: handle_drop(session, event, request_id=request_id))

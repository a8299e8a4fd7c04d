"""Kanban board page and its HTMX fragments."""

from html import escape

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from ulid import ULID

from ..board import COLUMNS, BoardState, DropEvent, RowState
from ..models import Session, TaskResponse, TaskStatus
from ..services import auth
from ..templating import templates
from .deps import optional_session, require_session

router = APIRouter(tags=["board"])


# =============================================================================
# Helper Functions
# =============================================================================


def new_request_id() -> str:
    return str(ULID())


def render_task_item(task: TaskResponse, state: BoardState) -> str:
    """Render a single task card as HTML."""
    task_id = escape(task.id)
    if state.row_state(task.id) == RowState.EDITING:
        return f"""
        <li id="task-{task_id}" class="task-item editing" data-id="{task_id}">
            <form hx-post="/board/tasks/{task_id}/rename" hx-target="#board" hx-swap="outerHTML">
                <input type="hidden" name="request_id" value="{new_request_id()}">
                <input type="text" name="task_name" value="{escape(state.edit_name)}" required autofocus>
                <button type="submit">Save</button>
                <button type="button"
                    hx-get="/board/tasks/{task_id}"
                    hx-target="#task-{task_id}"
                    hx-swap="outerHTML">Cancel</button>
            </form>
        </li>
        """
    return f"""
    <li id="task-{task_id}" class="task-item" data-id="{task_id}">
        <span class="task-title">{escape(task.task_name)}</span>
        <button class="edit-btn"
            hx-get="/board/tasks/{task_id}/edit"
            hx-target="#task-{task_id}"
            hx-swap="outerHTML"
            aria-label="Edit task">Edit</button>
        <button class="delete-btn"
            hx-post="/board/tasks/{task_id}/delete"
            hx-vals='{{"request_id": "{new_request_id()}"}}'
            hx-confirm="Delete this task?"
            hx-target="#board"
            hx-swap="outerHTML"
            aria-label="Delete task">Delete</button>
    </li>
    """


def render_add_form(column: TaskStatus, state: BoardState) -> str:
    return f"""
    <form class="add-form"
        hx-post="/board/columns/{column.value}/tasks"
        hx-target="#board"
        hx-swap="outerHTML">
        <input type="hidden" name="request_id" value="{new_request_id()}">
        <input type="text" name="task_name" value="{escape(state.new_task_name)}"
            placeholder="New task..." autofocus>
        <button type="submit">Add</button>
        <button type="button"
            hx-get="/board/columns/{column.value}"
            hx-target="#column-{column.value}"
            hx-swap="outerHTML">Cancel</button>
    </form>
    """


def render_column(column: TaskStatus, state: BoardState) -> str:
    """Render one status column with its tasks."""
    tasks = state.columns[column]
    items = "".join(render_task_item(task, state) for task in tasks)
    if state.adding == column:
        footer = render_add_form(column, state)
    else:
        footer = f"""
        <button class="add-btn"
            hx-get="/board/columns/{column.value}/add"
            hx-target="#column-{column.value}"
            hx-swap="outerHTML"
            aria-label="Add task to {column.value}">+</button>
        """
    return f"""
    <section id="column-{column.value}" class="column">
        <h2>{column.value} <span class="count">{len(tasks)}</span></h2>
        <ul class="task-list" data-column="{column.value}">{items}</ul>
        {footer}
    </section>
    """


def render_board(state: BoardState) -> str:
    """Render the three columns and the current error, if any."""
    columns = "".join(render_column(column, state) for column in COLUMNS)
    error = f'<p class="error" role="alert">{escape(state.error)}</p>' if state.error else ""
    return f"""
    <div id="board" class="board">
        {columns}
        {error}
    </div>
    """


def load_state(session: Session) -> BoardState:
    state = BoardState()
    state.refresh(session)
    return state


def find_task(state: BoardState, task_id: str) -> TaskResponse | None:
    for task in state.tasks:
        if task.id == task_id:
            return task
    return None


def task_missing(state: BoardState) -> HTMLResponse:
    """Re-render the whole board with an error when a card is gone."""
    state.error = "Task not found"
    return HTMLResponse(
        render_board(state),
        headers={"HX-Retarget": "#board", "HX-Reswap": "outerHTML"},
    )


# =============================================================================
# Page
# =============================================================================


@router.get("/", response_class=HTMLResponse)
def index(request: Request, session: Session | None = Depends(optional_session)):
    """Render the board, or send the visitor to the login page."""
    if session is None:
        return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)
    state = load_state(session)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "request": request,
            "email": session.email,
            "avatar_url": auth.get_avatar_url(session),
            "board_html": render_board(state),
        },
    )


# =============================================================================
# HTMX Endpoints (HTML Fragments)
# =============================================================================


@router.get("/board", response_class=HTMLResponse)
def board_fragment(session: Session = Depends(require_session)):
    return render_board(load_state(session))


@router.post("/board/drop", response_class=HTMLResponse)
def drop_fragment(
    item_id: str = Form(...),
    source_group: str = Form(...),
    destination_group: str | None = Form(None),
    request_id: str | None = Form(None),
    session: Session = Depends(require_session),
):
    """Apply a drop and return the refreshed board."""
    state = load_state(session)
    event = DropEvent(
        source_group=source_group,
        destination_group=destination_group or None,
        item_id=item_id,
    )
    state.drop(session, event, request_id=request_id)
    return render_board(state)


@router.get("/board/columns/{column}", response_class=HTMLResponse)
def column_fragment(column: TaskStatus, session: Session = Depends(require_session)):
    """Column without the add form (cancel)."""
    return render_column(column, load_state(session))


@router.get("/board/columns/{column}/add", response_class=HTMLResponse)
def add_form_fragment(column: TaskStatus, session: Session = Depends(require_session)):
    state = load_state(session)
    state.open_add(column)
    return render_column(column, state)


@router.post("/board/columns/{column}/tasks", response_class=HTMLResponse)
def create_task_fragment(
    column: TaskStatus,
    task_name: str = Form(""),
    request_id: str | None = Form(None),
    session: Session = Depends(require_session),
):
    """Create a task in a column and return the refreshed board."""
    state = load_state(session)
    state.open_add(column)
    state.submit_add(session, task_name, request_id=request_id)
    return render_board(state)


@router.get("/board/tasks/{task_id}", response_class=HTMLResponse)
def task_fragment(task_id: str, session: Session = Depends(require_session)):
    """Task card in viewing mode (cancel edit)."""
    state = load_state(session)
    task = find_task(state, task_id)
    if task is None:
        return task_missing(state)
    return render_task_item(task, state)


@router.get("/board/tasks/{task_id}/edit", response_class=HTMLResponse)
def edit_form_fragment(task_id: str, session: Session = Depends(require_session)):
    state = load_state(session)
    task = find_task(state, task_id)
    if task is None:
        return task_missing(state)
    state.start_edit(task)
    return render_task_item(task, state)


@router.post("/board/tasks/{task_id}/rename", response_class=HTMLResponse)
def rename_task_fragment(
    task_id: str,
    task_name: str = Form(""),
    request_id: str | None = Form(None),
    session: Session = Depends(require_session),
):
    state = load_state(session)
    task = find_task(state, task_id)
    if task is None:
        return task_missing(state)
    state.start_edit(task)
    state.submit_edit(session, task_name, request_id=request_id)
    return render_board(state)


@router.post("/board/tasks/{task_id}/delete", response_class=HTMLResponse)
def delete_task_fragment(
    task_id: str,
    request_id: str | None = Form(None),
    session: Session = Depends(require_session),
):
    state = load_state(session)
    state.delete(session, task_id, request_id=request_id)
    return render_board(state)

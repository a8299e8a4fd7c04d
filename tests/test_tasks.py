"""
Tests for the task service: owner scoping, ordering, mutations, errors.
"""
import pytest

from taskboard import config, db
from taskboard.errors import (
    RepositoryError,
    TaskNotFound,
    Unauthenticated,
    ValidationError,
)
from taskboard.models import TaskStatus
from taskboard.services import tasks as task_service


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Listing
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_list_tasks_empty(session):
    assert task_service.list_tasks(session) == []


def test_list_tasks_only_own(session, other_session):
    """A user never sees another user's tasks"""
    task_service.create_task(session, "Mine", "Todo")
    task_service.create_task(other_session, "Theirs", "Todo")

    tasks = task_service.list_tasks(session)
    assert [t.task_name for t in tasks] == ["Mine"]
    assert all(t.owner_id == session.user_id for t in tasks)


def test_list_tasks_ordered_by_creation(session):
    """Tasks come back in insertion order, even within the same second"""
    for name in ["first", "second", "third", "fourth"]:
        task_service.create_task(session, name, "Pending")

    tasks = task_service.list_tasks(session)
    assert [t.task_name for t in tasks] == ["first", "second", "third", "fourth"]
    created = [t.created_at for t in tasks]
    assert created == sorted(created)


def test_list_tasks_without_session():
    with pytest.raises(Unauthenticated):
        task_service.list_tasks(None)


def test_list_tasks_backend_failure(session, tmp_path, monkeypatch):
    """Driver errors surface as RepositoryError with the driver's message"""
    monkeypatch.setattr(config, "DATABASE_PATH", tmp_path)
    with pytest.raises(RepositoryError) as exc:
        task_service.list_tasks(session)
    assert exc.value.message


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Create
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_create_task_returns_refreshed_list(session):
    tasks = task_service.create_task(session, "Buy milk", "Todo")

    assert len(tasks) == 1
    task = tasks[0]
    assert task.task_name == "Buy milk"
    assert task.status == TaskStatus.TODO
    assert task.owner_id == session.user_id
    assert task.id
    assert tasks == task_service.list_tasks(session)


def test_create_task_strips_name(session):
    tasks = task_service.create_task(session, "  Walk dog  ", TaskStatus.DONE)
    assert tasks[0].task_name == "Walk dog"
    assert tasks[0].status == TaskStatus.DONE


@pytest.mark.parametrize("name", ["", "   ", None])
def test_create_task_rejects_empty_name(session, name):
    with pytest.raises(ValidationError):
        task_service.create_task(session, name, "Todo")
    assert task_service.list_tasks(session) == []


def test_create_task_rejects_unknown_status(session):
    with pytest.raises(ValidationError):
        task_service.create_task(session, "Task", "Archived")
    assert task_service.list_tasks(session) == []


def test_create_task_rejects_long_name(session):
    with pytest.raises(ValidationError):
        task_service.create_task(session, "x" * (config.MAX_TASK_NAME_LENGTH + 1), "Todo")


def test_create_task_same_request_id_writes_once(session):
    """A double submit with the same request id creates one task"""
    task_service.create_task(session, "Once", "Todo", request_id="req-1")
    tasks = task_service.create_task(session, "Once", "Todo", request_id="req-1")

    assert [t.task_name for t in tasks] == ["Once"]


def test_request_ids_are_per_owner(session, other_session):
    task_service.create_task(session, "A", "Todo", request_id="same")
    task_service.create_task(other_session, "B", "Todo", request_id="same")

    assert len(task_service.list_tasks(session)) == 1
    assert len(task_service.list_tasks(other_session)) == 1


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Rename / move / delete
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_rename_changes_only_name(session):
    task = task_service.create_task(session, "Old name", "Pending")[0]

    tasks = task_service.rename_task(session, task.id, "New name")

    renamed = tasks[0]
    assert renamed.id == task.id
    assert renamed.task_name == "New name"
    assert renamed.status == TaskStatus.PENDING
    assert renamed.owner_id == session.user_id
    assert renamed.created_at == task.created_at


def test_rename_rejects_empty_name(session):
    task = task_service.create_task(session, "Keep", "Todo")[0]
    with pytest.raises(ValidationError):
        task_service.rename_task(session, task.id, "  ")
    assert task_service.list_tasks(session)[0].task_name == "Keep"


def test_move_changes_only_status(session):
    task = task_service.create_task(session, "Report", "Todo")[0]

    tasks = task_service.move_task(session, task.id, "Done")

    assert tasks[0].status == TaskStatus.DONE
    assert tasks[0].task_name == "Report"


def test_move_rejects_unknown_status(session):
    task = task_service.create_task(session, "Report", "Todo")[0]
    with pytest.raises(ValidationError):
        task_service.move_task(session, task.id, "Blocked")
    assert task_service.list_tasks(session)[0].status == TaskStatus.TODO


def test_delete_removes_task(session):
    keep = task_service.create_task(session, "Keep", "Todo")[0]
    drop = task_service.create_task(session, "Drop", "Todo")[1]

    tasks = task_service.delete_task(session, drop.id)

    assert [t.id for t in tasks] == [keep.id]


def test_delete_same_request_id_is_noop(session):
    task = task_service.create_task(session, "Gone", "Todo")[0]
    task_service.delete_task(session, task.id, request_id="del-1")

    # the retried request is absorbed instead of failing with TaskNotFound
    assert task_service.delete_task(session, task.id, request_id="del-1") == []


def test_unknown_task_id(session):
    with pytest.raises(TaskNotFound):
        task_service.rename_task(session, "nope", "Name")
    with pytest.raises(TaskNotFound):
        task_service.move_task(session, "nope", "Done")
    with pytest.raises(TaskNotFound):
        task_service.delete_task(session, "nope")


def test_cannot_touch_other_users_task(session, other_session):
    theirs = task_service.create_task(other_session, "Private", "Todo")[0]

    with pytest.raises(TaskNotFound):
        task_service.rename_task(session, theirs.id, "Hijacked")
    with pytest.raises(TaskNotFound):
        task_service.move_task(session, theirs.id, "Done")
    with pytest.raises(TaskNotFound):
        task_service.delete_task(session, theirs.id)

    unchanged = task_service.list_tasks(other_session)[0]
    assert unchanged.task_name == "Private"
    assert unchanged.status == TaskStatus.TODO


def test_failed_mutation_does_not_burn_request_id(session):
    """A request id is only recorded when the mutation succeeds"""
    with pytest.raises(TaskNotFound):
        task_service.move_task(session, "missing", "Done", request_id="r")

    task = task_service.create_task(session, "Later", "Todo")[0]
    tasks = task_service.move_task(session, task.id, "Done", request_id="r")
    assert tasks[0].status == TaskStatus.DONE


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# No session
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_mutations_without_session_have_no_side_effect(session):
    task = task_service.create_task(session, "Safe", "Todo")[0]
    before = db.get_tasks_by_owner(session.user_id)

    with pytest.raises(Unauthenticated):
        task_service.create_task(None, "Sneaky", "Todo")
    with pytest.raises(Unauthenticated):
        task_service.rename_task(None, task.id, "Sneaky")
    with pytest.raises(Unauthenticated):
        task_service.move_task(None, task.id, "Done")
    with pytest.raises(Unauthenticated):
        task_service.delete_task(None, task.id)

    assert db.get_tasks_by_owner(session.user_id) == before

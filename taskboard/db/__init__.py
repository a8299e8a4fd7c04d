"""Database package."""

from .client import (
    create_session,
    create_task,
    create_user,
    delete_session,
    prune_expired,
    delete_task,
    get_profile,
    get_session,
    get_task,
    get_tasks_by_owner,
    get_user_by_email,
    get_user_by_id,
    init_db,
    update_avatar,
    update_task,
)

__all__ = [
    "init_db",
    "create_user",
    "get_user_by_id",
    "get_user_by_email",
    "create_session",
    "get_session",
    "delete_session",
    "prune_expired",
    "get_profile",
    "update_avatar",
    "create_task",
    "get_tasks_by_owner",
    "get_task",
    "update_task",
    "delete_task",
]

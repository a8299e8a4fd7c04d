"""SQLite storage for users, sessions, profiles and tasks.

Every task query and mutation is filtered by ``owner_id`` so a caller can
only see or change rows it owns.
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator

from .. import config
from ..errors import AuthError, RepositoryError, TaskNotFound

logger = logging.getLogger(__name__)


def get_connection() -> sqlite3.Connection:
    """Get a database connection with WAL mode enabled."""
    conn = sqlite3.connect(config.DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


@contextmanager
def get_db() -> Iterator[sqlite3.Connection]:
    """Context manager for database connections.

    Driver errors are re-raised as RepositoryError with the driver's message.
    """
    try:
        conn = get_connection()
    except sqlite3.Error as e:
        logger.error("Cannot open database %s: %s", config.DATABASE_PATH, e)
        raise RepositoryError(str(e)) from e
    try:
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        logger.error("Database error: %s", e)
        raise RepositoryError(str(e)) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db() -> None:
    """Initialize the database schema."""
    config.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
    with get_db() as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE,
                password_hash TEXT NOT NULL,
                created_at INTEGER NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                token TEXT PRIMARY KEY,
                user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                created_at INTEGER NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS profiles (
                user_id TEXT PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
                avatar_url TEXT
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS tasks (
                id TEXT PRIMARY KEY,
                task_name TEXT NOT NULL,
                status TEXT NOT NULL
                    CHECK (status IN ('Todo', 'Pending', 'Done')),
                owner_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                created_at INTEGER NOT NULL
            )
        """)
        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_tasks_owner_created
            ON tasks(owner_id, created_at)
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS processed_requests (
                owner_id TEXT NOT NULL,
                request_id TEXT NOT NULL,
                created_at INTEGER NOT NULL,
                PRIMARY KEY (owner_id, request_id)
            )
        """)


# =============================================================================
# Users, sessions, profiles
# =============================================================================


def create_user(user_id: str, email: str, password_hash: str, created_at: int) -> dict:
    """Create a new user with an empty profile.

    Raises AuthError when the email is already taken.
    """
    with get_db() as conn:
        try:
            conn.execute(
                """
                INSERT INTO users (id, email, password_hash, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (user_id, email, password_hash, created_at),
            )
        except sqlite3.IntegrityError:
            raise AuthError("User already registered") from None
        conn.execute(
            "INSERT INTO profiles (user_id, avatar_url) VALUES (?, NULL)",
            (user_id,),
        )
    return get_user_by_id(user_id)


def get_user_by_id(user_id: str) -> dict | None:
    with get_db() as conn:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return dict(row) if row else None


def get_user_by_email(email: str) -> dict | None:
    with get_db() as conn:
        row = conn.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
        return dict(row) if row else None


def create_session(token: str, user_id: str, created_at: int) -> None:
    with get_db() as conn:
        conn.execute(
            "INSERT INTO sessions (token, user_id, created_at) VALUES (?, ?, ?)",
            (token, user_id, created_at),
        )


def get_session(token: str, not_before: int = 0) -> dict | None:
    """Get a session joined with its user's email.

    Sessions created before ``not_before`` count as expired.
    """
    with get_db() as conn:
        row = conn.execute(
            """
            SELECT s.token, s.user_id, s.created_at, u.email
            FROM sessions s JOIN users u ON u.id = s.user_id
            WHERE s.token = ? AND s.created_at >= ?
            """,
            (token, not_before),
        ).fetchone()
        return dict(row) if row else None


def delete_session(token: str) -> None:
    with get_db() as conn:
        conn.execute("DELETE FROM sessions WHERE token = ?", (token,))


def prune_expired(session_cutoff: int, request_cutoff: int) -> None:
    """Drop sessions and recorded request ids older than the cutoffs."""
    with get_db() as conn:
        sessions = conn.execute(
            "DELETE FROM sessions WHERE created_at < ?", (session_cutoff,)
        ).rowcount
        requests = conn.execute(
            "DELETE FROM processed_requests WHERE created_at < ?", (request_cutoff,)
        ).rowcount
    if sessions or requests:
        logger.info("Pruned %d sessions and %d request ids", sessions, requests)


def get_profile(user_id: str) -> dict | None:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM profiles WHERE user_id = ?", (user_id,)
        ).fetchone()
        return dict(row) if row else None


def update_avatar(user_id: str, avatar_url: str | None) -> None:
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO profiles (user_id, avatar_url) VALUES (?, ?)
            ON CONFLICT(user_id) DO UPDATE SET avatar_url = excluded.avatar_url
            """,
            (user_id, avatar_url),
        )


# =============================================================================
# Tasks
# =============================================================================


def _claim_request(
    conn: sqlite3.Connection, owner_id: str, request_id: str | None, created_at: int
) -> bool:
    """Record a mutation's request id. False if it was already recorded."""
    if request_id is None:
        return True
    cursor = conn.execute(
        """
        INSERT OR IGNORE INTO processed_requests (owner_id, request_id, created_at)
        VALUES (?, ?, ?)
        """,
        (owner_id, request_id, created_at),
    )
    return cursor.rowcount > 0


def create_task(
    task_id: str,
    task_name: str,
    status: str,
    owner_id: str,
    created_at: int,
    request_id: str | None = None,
) -> dict | None:
    """Create a new task. Returns None for an already processed request id."""
    with get_db() as conn:
        if not _claim_request(conn, owner_id, request_id, created_at):
            return None
        conn.execute(
            """
            INSERT INTO tasks (id, task_name, status, owner_id, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (task_id, task_name, status, owner_id, created_at),
        )
    return get_task(task_id, owner_id)


def get_tasks_by_owner(owner_id: str) -> list[dict]:
    """Get all tasks of one owner, oldest first."""
    with get_db() as conn:
        cursor = conn.execute(
            """
            SELECT id, task_name, status, owner_id, created_at FROM tasks
            WHERE owner_id = ?
            ORDER BY created_at ASC, rowid ASC
            """,
            (owner_id,),
        )
        return [dict(row) for row in cursor.fetchall()]


def get_task(task_id: str, owner_id: str) -> dict | None:
    with get_db() as conn:
        row = conn.execute(
            """
            SELECT id, task_name, status, owner_id, created_at FROM tasks
            WHERE id = ? AND owner_id = ?
            """,
            (task_id, owner_id),
        ).fetchone()
        return dict(row) if row else None


def update_task(
    task_id: str,
    owner_id: str,
    task_name: str | None = None,
    status: str | None = None,
    request_id: str | None = None,
    updated_at: int = 0,
) -> None:
    """Update a task's name and/or status.

    Raises TaskNotFound when no row of that owner has the id; the request id
    is not recorded in that case.
    """
    updates = []
    params: list = []
    if task_name is not None:
        updates.append("task_name = ?")
        params.append(task_name)
    if status is not None:
        updates.append("status = ?")
        params.append(status)
    if not updates:
        return
    params.extend([task_id, owner_id])

    with get_db() as conn:
        if not _claim_request(conn, owner_id, request_id, updated_at):
            return
        cursor = conn.execute(
            f"UPDATE tasks SET {', '.join(updates)} WHERE id = ? AND owner_id = ?",
            params,
        )
        if cursor.rowcount == 0:
            raise TaskNotFound(task_id)


def delete_task(
    task_id: str, owner_id: str, request_id: str | None = None, deleted_at: int = 0
) -> None:
    """Delete a task by ID."""
    with get_db() as conn:
        if not _claim_request(conn, owner_id, request_id, deleted_at):
            return
        cursor = conn.execute(
            "DELETE FROM tasks WHERE id = ? AND owner_id = ?", (task_id, owner_id)
        )
        if cursor.rowcount == 0:
            raise TaskNotFound(task_id)

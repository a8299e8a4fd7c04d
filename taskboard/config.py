"""Application settings read from the environment."""

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).parent.parent

load_dotenv(BASE_DIR / ".env")

DATABASE_PATH = Path(os.getenv("TASKBOARD_DB", BASE_DIR / "tasks.db"))
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

HOST = os.getenv("TASKBOARD_HOST", "0.0.0.0")
PORT = int(os.getenv("TASKBOARD_PORT", "8000"))
RELOAD = os.getenv("TASKBOARD_RELOAD", "false").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("TASKBOARD_LOG_LEVEL", "INFO").upper()

SESSION_COOKIE = "taskboard_session"
SESSION_TTL_SECONDS = int(os.getenv("TASKBOARD_SESSION_TTL", str(30 * 24 * 3600)))
REQUEST_ID_TTL_SECONDS = int(os.getenv("TASKBOARD_REQUEST_ID_TTL", str(24 * 3600)))
COOKIE_SECURE = os.getenv("TASKBOARD_COOKIE_SECURE", "false").lower() in ("1", "true", "yes")

DEFAULT_AVATAR = os.getenv(
    "TASKBOARD_DEFAULT_AVATAR",
    "https://www.gravatar.com/avatar/?d=mp&s=80",
)

MIN_PASSWORD_LENGTH = 6
BCRYPT_ROUNDS = int(os.getenv("TASKBOARD_BCRYPT_ROUNDS", "12"))
MAX_TASK_NAME_LENGTH = 500

"""Sign-up, sign-in and session lookup."""

import logging
import re
import secrets
import time
from functools import lru_cache

import bcrypt
from ulid import ULID

from .. import config, db
from ..config import DEFAULT_AVATAR, MIN_PASSWORD_LENGTH
from ..errors import AuthError, Unauthenticated
from ..models import Session

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def _normalize_email(email: str) -> str:
    email = (email or "").strip().lower()
    if not EMAIL_RE.match(email):
        raise AuthError("Invalid email address")
    return email


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> bytes:
    return bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=rounds))


def _open_session(user: dict) -> Session:
    token = secrets.token_urlsafe(32)
    db.create_session(token, user["id"], int(time.time()))
    return Session(token=token, user_id=user["id"], email=user["email"])


def sign_up(email: str, password: str) -> Session:
    """Register a new user and return a signed-in session."""
    email = _normalize_email(email)
    password = password or ""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise AuthError(
            f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
        )
    secret = password.encode("utf-8")
    if len(secret) > MAX_PASSWORD_BYTES:
        raise AuthError(f"Password should be at most {MAX_PASSWORD_BYTES} bytes")
    if db.get_user_by_email(email):
        logger.warning("Sign-up rejected: email already registered")
        raise AuthError("User already registered")

    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    password_hash = bcrypt.hashpw(secret, salt).decode("ascii")
    user = db.create_user(str(ULID()), email, password_hash, int(time.time()))
    logger.info("Registered user %s", user["id"])
    return _open_session(user)


def sign_in(email: str, password: str) -> Session:
    """Check credentials and return a new session."""
    try:
        email = _normalize_email(email)
    except AuthError:
        raise AuthError("Invalid login credentials") from None
    secret = (password or "").encode("utf-8")
    user = db.get_user_by_email(email)
    too_long = len(secret) > MAX_PASSWORD_BYTES
    # unknown emails still pay for one bcrypt check
    if user:
        stored = user["password_hash"].encode("ascii")
    else:
        stored = _dummy_hash(config.BCRYPT_ROUNDS)
    matches = bcrypt.checkpw(secret[:MAX_PASSWORD_BYTES], stored)
    if not user or too_long or not matches:
        logger.warning("Sign-in rejected")
        raise AuthError("Invalid login credentials")
    logger.info("User %s signed in", user["id"])
    prune_expired()
    return _open_session(user)


def prune_expired() -> None:
    """Forget expired sessions and request ids too old to be retried."""
    now = int(time.time())
    db.prune_expired(
        now - config.SESSION_TTL_SECONDS, now - config.REQUEST_ID_TTL_SECONDS
    )


def sign_out(token: str | None) -> None:
    if token:
        db.delete_session(token)


def get_current_session(token: str | None) -> Session | None:
    """Resolve a session token. None when missing or unknown."""
    if not token:
        return None
    not_before = int(time.time()) - config.SESSION_TTL_SECONDS
    row = db.get_session(token, not_before=not_before)
    if not row:
        return None
    return Session(token=row["token"], user_id=row["user_id"], email=row["email"])


def get_avatar_url(session: Session | None) -> str:
    """The user's avatar, or the default image."""
    if session is None:
        raise Unauthenticated()
    profile = db.get_profile(session.user_id)
    if profile and profile["avatar_url"]:
        return profile["avatar_url"]
    return DEFAULT_AVATAR


def set_avatar_url(session: Session | None, avatar_url: str | None) -> None:
    if session is None:
        raise Unauthenticated()
    db.update_avatar(session.user_id, avatar_url or None)

"""Request dependencies resolving the caller's session."""

from fastapi import Depends, Request

from ..config import SESSION_COOKIE
from ..errors import Unauthenticated
from ..models import Session
from ..services import auth


def get_token(request: Request) -> str | None:
    """Session token from the Authorization header or the session cookie."""
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return request.cookies.get(SESSION_COOKIE)


def optional_session(request: Request) -> Session | None:
    return auth.get_current_session(get_token(request))


def require_session(session: Session | None = Depends(optional_session)) -> Session:
    if session is None:
        raise Unauthenticated()
    return session

"""Sign-up, login and logout: JSON API and HTML pages."""

from fastapi import APIRouter, Depends, Form, Request, Response, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel, Field

from ..config import COOKIE_SECURE, SESSION_COOKIE
from ..errors import AuthError
from ..models import Credentials, Session, SessionResponse
from ..services import auth
from ..templating import templates
from .deps import get_token, optional_session, require_session

router = APIRouter(tags=["auth"])


class AvatarUpdate(BaseModel):
    avatar_url: str | None = Field(None, max_length=2048)


def set_session_cookie(response: Response, session: Session) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        session.token,
        httponly=True,
        samesite="lax",
        secure=COOKIE_SECURE,
    )


def session_response(session: Session) -> SessionResponse:
    return SessionResponse(
        user_id=session.user_id,
        email=session.email,
        avatar_url=auth.get_avatar_url(session),
    )


# =============================================================================
# REST API Endpoints (JSON)
# =============================================================================


@router.post(
    "/api/auth/signup",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
)
def signup(credentials: Credentials, response: Response):
    """Register and sign in."""
    session = auth.sign_up(credentials.email, credentials.password)
    set_session_cookie(response, session)
    response.headers["X-Session-Token"] = session.token
    return session_response(session)


@router.post("/api/auth/login", response_model=SessionResponse)
def login(credentials: Credentials, response: Response):
    """Sign in with email and password."""
    session = auth.sign_in(credentials.email, credentials.password)
    set_session_cookie(response, session)
    response.headers["X-Session-Token"] = session.token
    return session_response(session)


@router.post("/api/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(request: Request, response: Response):
    """End the current session."""
    auth.sign_out(get_token(request))
    response.delete_cookie(SESSION_COOKIE)


@router.get("/api/auth/session", response_model=SessionResponse)
def current_session(session: Session = Depends(require_session)):
    """Get the signed-in user."""
    return session_response(session)


@router.put("/api/auth/avatar", response_model=SessionResponse)
def update_avatar(data: AvatarUpdate, session: Session = Depends(require_session)):
    """Set or clear the profile avatar."""
    auth.set_avatar_url(session, data.avatar_url)
    return session_response(session)


# =============================================================================
# HTML pages
# =============================================================================


def render_auth_page(request: Request, mode: str, error: str = "", email: str = ""):
    return templates.TemplateResponse(
        request,
        "auth.html",
        {"request": request, "mode": mode, "error": error, "email": email},
        status_code=status.HTTP_400_BAD_REQUEST if error else status.HTTP_200_OK,
    )


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, session: Session | None = Depends(optional_session)):
    if session is not None:
        return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    return render_auth_page(request, "login")


@router.post("/login", response_class=HTMLResponse)
def login_form(request: Request, email: str = Form(...), password: str = Form(...)):
    try:
        session = auth.sign_in(email, password)
    except AuthError as e:
        return render_auth_page(request, "login", e.message, email)
    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, session)
    return response


@router.get("/signup", response_class=HTMLResponse)
def signup_page(request: Request):
    return render_auth_page(request, "signup")


@router.post("/signup", response_class=HTMLResponse)
def signup_form(request: Request, email: str = Form(...), password: str = Form(...)):
    try:
        session = auth.sign_up(email, password)
    except AuthError as e:
        return render_auth_page(request, "signup", e.message, email)
    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, session)
    return response


@router.post("/logout")
def logout_form(request: Request):
    auth.sign_out(get_token(request))
    if request.headers.get("HX-Request"):
        response = Response(headers={"HX-Redirect": "/login"})
    else:
        response = RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(SESSION_COOKIE)
    return response

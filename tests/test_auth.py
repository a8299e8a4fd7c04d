"""
Tests for sign-up, sign-in, sign-out and profile avatars.
"""
import time

import bcrypt
import pytest

from taskboard import config, db
from taskboard.errors import AuthError, Unauthenticated
from taskboard.services import auth
from taskboard.services import tasks as task_service


def test_sign_up_returns_session():
    session = auth.sign_up("Dana@Example.com ", "secret123")
    assert session.email == "dana@example.com"
    assert session.token
    assert auth.get_current_session(session.token) == session


def test_sign_up_duplicate_email():
    auth.sign_up("dana@example.com", "secret123")
    with pytest.raises(AuthError, match="already registered"):
        auth.sign_up("DANA@example.com", "other-pass")


@pytest.mark.parametrize("email", ["", "no-at-sign", "a@b", "two words@x.io"])
def test_sign_up_invalid_email(email):
    with pytest.raises(AuthError):
        auth.sign_up(email, "secret123")


def test_sign_up_short_password():
    with pytest.raises(AuthError, match="at least"):
        auth.sign_up("dana@example.com", "12345")


def test_sign_in():
    auth.sign_up("dana@example.com", "secret123")
    session = auth.sign_in("dana@example.com", "secret123")
    assert session.email == "dana@example.com"


@pytest.mark.parametrize(
    "email,password",
    [
        ("dana@example.com", "wrong-pass"),
        ("nobody@example.com", "secret123"),
        ("not-an-email", "secret123"),
        ("dana@example.com", "x" * 100),
    ],
)
def test_sign_in_bad_credentials(email, password):
    auth.sign_up("dana@example.com", "secret123")
    with pytest.raises(AuthError, match="Invalid login credentials"):
        auth.sign_in(email, password)


def test_each_sign_in_gets_its_own_token():
    first = auth.sign_up("dana@example.com", "secret123")
    second = auth.sign_in("dana@example.com", "secret123")
    assert first.token != second.token
    assert first.user_id == second.user_id


def test_sign_out_invalidates_token():
    session = auth.sign_up("dana@example.com", "secret123")
    auth.sign_out(session.token)
    assert auth.get_current_session(session.token) is None


def test_unknown_or_missing_token():
    assert auth.get_current_session(None) is None
    assert auth.get_current_session("") is None
    assert auth.get_current_session("made-up") is None


def test_avatar_defaults_and_updates(session):
    assert auth.get_avatar_url(session) == config.DEFAULT_AVATAR

    auth.set_avatar_url(session, "https://img.example.com/me.png")
    assert auth.get_avatar_url(session) == "https://img.example.com/me.png"

    auth.set_avatar_url(session, "")
    assert auth.get_avatar_url(session) == config.DEFAULT_AVATAR


def test_avatar_requires_session():
    with pytest.raises(Unauthenticated):
        auth.get_avatar_url(None)


def test_sign_up_race_on_same_email(monkeypatch):
    """Two sign-ups that both pass the lookup still end in AuthError"""
    monkeypatch.setattr(db, "get_user_by_email", lambda email: None)
    auth.sign_up("race@example.com", "secret123")
    with pytest.raises(AuthError, match="already registered"):
        auth.sign_up("race@example.com", "secret123")


def test_sign_in_unknown_email_still_checks_a_hash(monkeypatch):
    calls = []
    real_checkpw = bcrypt.checkpw

    def counting_checkpw(password, hashed):
        calls.append(hashed)
        return real_checkpw(password, hashed)

    monkeypatch.setattr(bcrypt, "checkpw", counting_checkpw)
    with pytest.raises(AuthError):
        auth.sign_in("ghost@example.com", "secret123")
    assert len(calls) == 1


def test_expired_session_is_rejected(monkeypatch):
    session = auth.sign_up("dana@example.com", "secret123")
    monkeypatch.setattr(config, "SESSION_TTL_SECONDS", -10)
    assert auth.get_current_session(session.token) is None


def test_prune_expired_drops_sessions_and_request_ids(session):
    task_service.create_task(session, "Once", "Todo", request_id="r1")
    now = int(time.time())

    db.prune_expired(now + 10, now + 10)

    assert auth.get_current_session(session.token) is None
    # the old request id is forgotten, so the same id writes again
    tasks = task_service.create_task(session, "Once", "Todo", request_id="r1")
    assert len(tasks) == 2

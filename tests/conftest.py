"""Shared test fixtures: a fresh SQLite database per test."""

import pytest

from taskboard import config
from taskboard.db import init_db
from taskboard.services import auth


@pytest.fixture(autouse=True)
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "tasks.db"
    monkeypatch.setattr(config, "DATABASE_PATH", path)
    monkeypatch.setattr(config, "BCRYPT_ROUNDS", 4)
    init_db()
    return path


@pytest.fixture
def session():
    return auth.sign_up("alice@example.com", "secret123")


@pytest.fixture
def other_session():
    return auth.sign_up("bob@example.com", "hunter22")


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from taskboard.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_client(client):
    resp = client.post(
        "/api/auth/signup",
        json={"email": "carol@example.com", "password": "password1"},
    )
    assert resp.status_code == 201
    return client

"""
conftest.py — Shared fixtures for all worklog tests.
"""
from __future__ import annotations

import os

# Cheap hashes for tests; must be set before worklog.core.config is imported.
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-bytes")

from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from worklog.api.auth import create_user  # noqa: E402
from worklog.auth import sqlite_db  # noqa: E402
from worklog.auth.models import Role, User  # noqa: E402
from worklog.auth.passwords import hash_password  # noqa: E402
from worklog.core.config import TokenSettings  # noqa: E402

PASSWORD = "secret123"


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def db(tmp_path, monkeypatch):
    """Point every test at its own SQLite file."""
    monkeypatch.setattr(sqlite_db, "DB_PATH", str(tmp_path / "worklog-test.db"))
    sqlite_db.init_db()
    yield


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

@pytest.fixture
def token_settings() -> TokenSettings:
    return TokenSettings(
        secret="test-secret-key-with-at-least-32-bytes",
        algorithm="HS256",
        access_ttl_minutes=60,
        refresh_ttl_days=30,
        issuer="worklog-test",
        audience="worklog-test-users",
    )


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@pytest.fixture
def make_user():
    """Factory that inserts an account with the shared test password."""
    def _make(
        email: str = "editor@example.com",
        role: Role = Role.EDITOR,
        name: Optional[str] = None,
        is_active: bool = True,
    ) -> User:
        return create_user(
            email=email,
            password_hash=hash_password(PASSWORD),
            role=role,
            name=name or email.split("@")[0].title(),
            is_active=is_active,
        )
    return _make


# ---------------------------------------------------------------------------
# App + client
# ---------------------------------------------------------------------------

@pytest.fixture
def app():
    from worklog.api.app import create_app
    return create_app()


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def login(client):
    """Log in and return the Authorization header for that user."""
    def _login(email: str, password: str = PASSWORD) -> dict[str, str]:
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}
    return _login

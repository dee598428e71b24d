"""
api/auth.py — User directory: account CRUD, credential checks, login bookkeeping.
"""
from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Optional, Union

from ..auth.models import Role, TokenClaims, User
from ..auth.passwords import verify_password
from ..auth.sqlite_db import get_conn
from ..core.errors import (
    AccountDeactivated,
    DuplicateEmail,
    InvalidCredentials,
    InvalidRole,
    NotFound,
)

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def parse_role(role: Union[str, Role]) -> Role:
    try:
        return Role(role)
    except ValueError as exc:
        raise InvalidRole() from exc


# ── Lookups ───────────────────────────────────────────────────────────────────

def get_user_by_id(user_id: str) -> Optional[User]:
    with get_conn() as conn:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
    return User.from_row(row) if row else None


def get_user_by_email(email: str) -> Optional[User]:
    with get_conn() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE email = ?", (normalize_email(email),)
        ).fetchone()
    return User.from_row(row) if row else None


def get_users_by_ids(user_ids: list[str]) -> dict[str, User]:
    if not user_ids:
        return {}
    placeholders = ",".join("?" for _ in user_ids)
    with get_conn() as conn:
        rows = conn.execute(
            f"SELECT * FROM users WHERE id IN ({placeholders})", tuple(user_ids)
        ).fetchall()
    return {r["id"]: User.from_row(r) for r in rows}


# ── Writes ────────────────────────────────────────────────────────────────────

def create_user(
    *,
    email: str,
    password_hash: str,
    role: Union[str, Role] = Role.EDITOR,
    name: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    team_id: Optional[str] = None,
    is_active: bool = True,
) -> User:
    """
    Insert an account. The email is normalized first; the unique index on
    users.email is the final arbiter when two signups race.
    """
    parsed_role = parse_role(role)
    normalized = normalize_email(email)
    display_name = (name or " ".join(p for p in (first_name, last_name) if p)).strip()

    if get_user_by_email(normalized):
        raise DuplicateEmail()

    user_id = str(uuid.uuid4())
    now = _now()
    try:
        with get_conn() as conn:
            conn.execute(
                """
                INSERT INTO users
                  (id, email, name, first_name, last_name, password_hash,
                   role, is_active, team_id, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id, normalized, display_name or normalized, first_name, last_name,
                    password_hash, parsed_role.value, int(is_active), team_id, now,
                ),
            )
            conn.commit()
    except sqlite3.IntegrityError as exc:
        raise DuplicateEmail() from exc
    logger.info("Created user id=%s role=%s", user_id, parsed_role.value)
    return get_user_by_id(user_id)  # type: ignore[return-value]


def record_login(user: User) -> None:
    """Stamp last_login. Best-effort: a failed write never blocks the login."""
    now = _now()
    try:
        with get_conn() as conn:
            conn.execute("UPDATE users SET last_login = ? WHERE id = ?", (now, user.id))
            conn.commit()
        user.last_login = now
    except sqlite3.Error:
        logger.warning("Could not record last_login for user id=%s", user.id, exc_info=True)


def set_active(user_id: str, is_active: bool) -> User:
    return _update_user(user_id, "is_active", int(is_active))


def set_role(user_id: str, role: Union[str, Role]) -> User:
    return _update_user(user_id, "role", parse_role(role).value)


def set_password(user_id: str, password_hash: str) -> User:
    return _update_user(user_id, "password_hash", password_hash)


def set_team(user_id: str, team_id: Optional[str]) -> User:
    return _update_user(user_id, "team_id", team_id)


# ── Credentials ───────────────────────────────────────────────────────────────

def authenticate(email: str, password: str) -> User:
    """
    Resolve credentials to an active user.

    Unknown email and wrong password raise the same InvalidCredentials.
    A deactivated account is reported as such once the email is known.
    """
    user = get_user_by_email(email)
    if user is None:
        logger.info("Login failed: unknown email")
        raise InvalidCredentials()
    if not user.is_active:
        logger.info("Login failed: deactivated user id=%s", user.id)
        raise AccountDeactivated()
    if not verify_password(password, user.password_hash):
        logger.info("Login failed: bad password for user id=%s", user.id)
        raise InvalidCredentials()
    return user


def claims_for(user: User) -> TokenClaims:
    return TokenClaims(user_id=user.id, email=user.email, role=user.role)


# ── Listing ───────────────────────────────────────────────────────────────────

def list_users(
    *,
    role: Optional[str] = None,
    is_active: Optional[bool] = None,
    page: int = 1,
    limit: int = 50,
) -> dict:
    """Paginated user listing plus active/inactive counts and role distribution."""
    clauses: list[str] = []
    params: list = []
    if role:
        clauses.append("role = ?")
        params.append(parse_role(role).value)
    if is_active is not None:
        clauses.append("is_active = ?")
        params.append(int(is_active))
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

    with get_conn() as conn:
        rows = conn.execute(
            f"SELECT * FROM users {where} ORDER BY created_at DESC LIMIT ? OFFSET ?",
            (*params, limit, (page - 1) * limit),
        ).fetchall()
        stats = conn.execute(
            f"""
            SELECT COUNT(*) AS total_users,
                   COALESCE(SUM(is_active), 0) AS active_users,
                   COALESCE(SUM(1 - is_active), 0) AS inactive_users
            FROM users {where}
            """,
            tuple(params),
        ).fetchone()
        roles = conn.execute(
            f"SELECT role, COUNT(*) AS count FROM users {where} GROUP BY role ORDER BY count DESC",
            tuple(params),
        ).fetchall()

    total = stats["total_users"]
    return {
        "users": [User.from_row(r) for r in rows],
        "pagination": {
            "current_page": page,
            "total_pages": -(-total // limit) if limit else 0,
            "total_users": total,
            "limit": limit,
            "has_next_page": page * limit < total,
            "has_prev_page": page > 1,
        },
        "statistics": {
            "total_users": total,
            "active_users": stats["active_users"],
            "inactive_users": stats["inactive_users"],
        },
        "role_distribution": [{"role": r["role"], "count": r["count"]} for r in roles],
    }


# ── Private helpers ───────────────────────────────────────────────────────────

_UPDATABLE_COLUMNS = {"is_active", "role", "password_hash", "team_id"}


def _update_user(user_id: str, column: str, value) -> User:
    if column not in _UPDATABLE_COLUMNS:
        raise ValueError(f"Column {column!r} is not updatable.")
    with get_conn() as conn:
        updated = conn.execute(
            f"UPDATE users SET {column} = ? WHERE id = ?", (value, user_id)
        ).rowcount
        conn.commit()
    if updated == 0:
        raise NotFound("User not found.")
    return get_user_by_id(user_id)  # type: ignore[return-value]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

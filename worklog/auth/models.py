"""
auth/models.py — Pure-Python dataclass models for account entities.
No ORM dependency; raw sqlite3 rows are mapped here.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    TEAM_MANAGER = "team_manager"
    EDITOR = "editor"
    VIEWER = "viewer"


@dataclass
class User:
    id: str
    email: str
    name: str
    role: Role
    password_hash: str
    is_active: bool = True
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    team_id: Optional[str] = None
    created_at: Optional[str] = None
    last_login: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "User":
        return cls(
            id=row["id"],
            email=row["email"],
            name=row["name"],
            role=Role(row["role"]),
            password_hash=row["password_hash"],
            is_active=bool(row["is_active"]),
            first_name=row["first_name"],
            last_name=row["last_name"],
            team_id=row["team_id"],
            created_at=row["created_at"],
            last_login=row["last_login"],
        )

    def public_dict(self) -> dict:
        """Serializable view; the password hash never leaves this object."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "is_active": self.is_active,
            "team_id": self.team_id,
            "created_at": self.created_at,
            "last_login": self.last_login,
        }


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str
    role: Role

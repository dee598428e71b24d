"""
api/dto.py — Pydantic request and response models for all API endpoints.
"""
from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ..auth.models import Role, User
from ..core.models import Entry, TeamGoals

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _email(value: str) -> str:
    value = value.strip().lower()
    if not _EMAIL_RE.match(value):
        raise ValueError("Please enter a valid email")
    return value


# ── Auth ──────────────────────────────────────────────────────────────────────

class SignupRequest(BaseModel):
    email: str
    password: str
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Role = Role.EDITOR

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        return _email(v)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v.strip()) > 50:
            raise ValueError("Name cannot exceed 50 characters")
        return v.strip() if v is not None else v


class LoginRequest(BaseModel):
    email: str
    password: str = Field(min_length=1)


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    role: Role
    is_active: bool
    team_id: Optional[str] = None
    created_at: Optional[str] = None
    last_login: Optional[str] = None

    @classmethod
    def of(cls, user: User) -> "UserOut":
        return cls(**user.public_dict())


class SignupResponse(BaseModel):
    message: str = "User created successfully"
    user: UserOut


class LoginResponse(BaseModel):
    message: str = "Login successful"
    user: UserOut
    access_token: str


class RefreshResponse(BaseModel):
    message: str = "Token refreshed successfully"
    access_token: str


class MeResponse(BaseModel):
    user: UserOut


# ── Entries ───────────────────────────────────────────────────────────────────

class EntryResponse(BaseModel):
    message: Optional[str] = None
    entry: Entry


class BulkEntriesRequest(BaseModel):
    entries: list[dict[str, Any]] = Field(min_length=1)


# ── Users ─────────────────────────────────────────────────────────────────────

class UserPatchRequest(BaseModel):
    is_active: Optional[bool] = None
    role: Optional[Role] = None


class UserListResponse(BaseModel):
    users: list[UserOut]
    pagination: dict[str, Any]
    statistics: dict[str, Any]
    role_distribution: list[dict[str, Any]]


# ── Teams ─────────────────────────────────────────────────────────────────────

class TeamCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = ""
    code: Optional[str] = None
    color: Optional[str] = None
    goals: Optional[TeamGoals] = None
    team_manager_id: Optional[str] = None


class AddMemberRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        return _email(v)


class TeamMemberOut(BaseModel):
    id: str
    name: str
    email: str
    role: Role
    is_admin: bool


# ── Import ────────────────────────────────────────────────────────────────────

class ImportUsersRequest(BaseModel):
    users: list[dict[str, Any]]


class ImportDataRequest(BaseModel):
    entries: list[dict[str, Any]]

"""
permissions.py — Role-to-operation permission table.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from ..auth.models import Role
from .errors import Forbidden


class Permission(str, Enum):
    MANAGE_USERS = "manage_users"
    CREATE_TEAM = "create_team"
    MANAGE_TEAM_MEMBERS = "manage_team_members"
    RUN_MIGRATION = "run_migration"
    VIEW_TEAM_OVERVIEW = "view_team_overview"


PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.ADMIN: frozenset(Permission),
    Role.MANAGER: frozenset({Permission.MANAGE_TEAM_MEMBERS, Permission.VIEW_TEAM_OVERVIEW}),
    Role.TEAM_MANAGER: frozenset({Permission.VIEW_TEAM_OVERVIEW}),
    Role.EDITOR: frozenset(),
    Role.VIEWER: frozenset(),
}


def has_permission(role: Role, permission: Permission) -> bool:
    return permission in PERMISSIONS.get(role, frozenset())


def require_permission(role: Role, permission: Permission, message: Optional[str] = None) -> None:
    if not has_permission(role, permission):
        raise Forbidden(message)

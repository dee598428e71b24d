"""
api/dependencies.py — FastAPI dependency injection: token settings, current user, role guards.
"""
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from ..auth.models import User
from ..auth.token_utils import ACCESS, verify_token
from ..core.config import TokenSettings
from ..core.errors import AccountDeactivated, AuthenticationError, InvalidToken
from ..core.permissions import Permission, require_permission
from .auth import get_user_by_id


def get_token_settings(request: Request) -> TokenSettings:
    return request.app.state.token_settings


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    settings: TokenSettings = Depends(get_token_settings),
) -> User:
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("Authorization token required.")
    claims = verify_token(authorization[len("Bearer "):].strip(), settings, ACCESS)
    user = get_user_by_id(claims.user_id)
    if user is None:
        raise InvalidToken()
    if not user.is_active:
        raise AccountDeactivated()
    return user


def require(permission: Permission):
    """Return a dependency that enforces a permission from the role table."""
    def _check(user: User = Depends(get_current_user)) -> User:
        require_permission(
            user.role,
            permission,
            f"Role '{user.role.value}' is not permitted for this action.",
        )
        return user
    return _check


# Pre-built shortcuts
require_user_admin = require(Permission.MANAGE_USERS)
require_migration = require(Permission.RUN_MIGRATION)
require_team_lead = require(Permission.MANAGE_TEAM_MEMBERS)
require_team_overview = require(Permission.VIEW_TEAM_OVERVIEW)

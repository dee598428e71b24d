"""
api/routes_admin.py — Admin-only endpoints: user management and legacy-data migration.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth.models import Role, User
from ..core.config import MAX_PAGE_SIZE, USERS_PAGE_SIZE
from ..core.entries import legacy_status, migrate_legacy_entries
from ..core.errors import InvalidInput
from .auth import list_users, set_active, set_role
from .dependencies import require_migration, require_user_admin
from .dto import UserListResponse, UserOut, UserPatchRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/users", response_model=UserListResponse)
async def admin_list_users(
    role: Optional[Role] = None,
    is_active: Optional[bool] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=USERS_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    user: User = Depends(require_user_admin),
):
    listing = list_users(
        role=role.value if role else None, is_active=is_active, page=page, limit=limit
    )
    listing["users"] = [UserOut.of(u) for u in listing["users"]]
    return listing


@router.patch("/api/users/{user_id}", response_model=UserOut)
async def admin_update_user(
    user_id: str,
    body: UserPatchRequest,
    user: User = Depends(require_user_admin),
):
    if body.is_active is None and body.role is None:
        raise InvalidInput("Nothing to update. Provide is_active and/or role.")
    if user_id == user.id and body.is_active is False:
        raise InvalidInput("Admins cannot deactivate their own account.")

    target = None
    if body.is_active is not None:
        target = set_active(user_id, body.is_active)
    if body.role is not None:
        target = set_role(user_id, body.role)
    logger.info(
        "Admin id=%s updated user id=%s is_active=%s role=%s",
        user.id, user_id, target.is_active, target.role.value,
    )
    return UserOut.of(target)


@router.get("/api/migrate")
async def migrate_status(user: User = Depends(require_migration)):
    return legacy_status()


@router.post("/api/migrate")
async def migrate_run(user: User = Depends(require_migration)):
    migrated = migrate_legacy_entries()
    return {"message": "Migration completed successfully", "migrated_count": migrated}

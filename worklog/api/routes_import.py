"""
api/routes_import.py — Bulk user and entry import used when seeding a deployment.
"""
from __future__ import annotations

from fastapi import APIRouter

from ..core.imports import import_entries, import_users
from .dto import ImportDataRequest, ImportUsersRequest

router = APIRouter()


@router.post("/api/import/users")
def import_users_route(body: ImportUsersRequest):
    results = import_users(body.users)
    return {"message": "User import completed", "results": results}


@router.post("/api/import/data")
def import_data_route(body: ImportDataRequest):
    results = import_entries(body.entries)
    return {"message": "Data import completed", "results": results}

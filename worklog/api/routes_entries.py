"""
api/routes_entries.py — Owner-scoped entry CRUD, listing and batch create.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth.models import User
from ..core.config import ENTRIES_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.entries import (
    bulk_create,
    create_entry,
    delete_entry,
    get_entry,
    list_entries,
    update_entry,
)
from ..core.models import BulkResult, EntryInput, EntryPage, EntryPatch
from .dependencies import get_current_user
from .dto import BulkEntriesRequest, EntryResponse

router = APIRouter()


@router.get("/api/entries", response_model=EntryPage)
async def entries_list(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    sort_by: str = "date",
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=ENTRIES_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    user: User = Depends(get_current_user),
):
    return list_entries(
        user.id,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )


@router.post("/api/entries", status_code=201, response_model=EntryResponse)
async def entries_create(body: EntryInput, user: User = Depends(get_current_user)):
    entry = create_entry(user.id, body)
    return EntryResponse(message="Entry created successfully", entry=entry)


@router.post("/api/entries/bulk", response_model=BulkResult)
async def entries_bulk(body: BulkEntriesRequest, user: User = Depends(get_current_user)):
    return bulk_create(user.id, body.entries)


@router.get("/api/entries/{entry_id}", response_model=EntryResponse)
async def entries_get(entry_id: str, user: User = Depends(get_current_user)):
    return EntryResponse(entry=get_entry(entry_id, user.id))


@router.put("/api/entries/{entry_id}", response_model=EntryResponse)
async def entries_update(entry_id: str, body: EntryPatch, user: User = Depends(get_current_user)):
    entry = update_entry(entry_id, user.id, body)
    return EntryResponse(message="Entry updated successfully", entry=entry)


@router.delete("/api/entries/{entry_id}")
async def entries_delete(entry_id: str, user: User = Depends(get_current_user)):
    delete_entry(entry_id, user.id)
    return {"message": "Entry deleted successfully"}

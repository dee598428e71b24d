"""
imports.py — Bulk loading of accounts and historical entries.

Each item is handled on its own; failures are collected as readable strings
and the batch keeps going.
"""
from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..api.auth import create_user, get_user_by_email
from ..auth.passwords import hash_password
from .entries import create_entry, find_entry, update_entry
from .errors import WorklogError
from .models import EntryInput, EntryPatch

logger = logging.getLogger(__name__)


def import_users(items: list[dict[str, Any]]) -> dict[str, Any]:
    created = 0
    errors: list[str] = []
    for item in items:
        email = str(item.get("email") or "").strip()
        password = item.get("password")
        if not email or not password:
            errors.append(f"Missing email or password for user {item.get('name') or email or '?'}")
            continue
        if get_user_by_email(email):
            errors.append(f"User with email {email} already exists")
            continue
        try:
            create_user(
                email=email,
                password_hash=hash_password(str(password)),
                role=item.get("role") or "editor",
                name=item.get("name"),
            )
        except WorklogError as exc:
            errors.append(f"Failed to create user {email}: {exc.message}")
            continue
        created += 1

    logger.info("User import: created=%d errors=%d", created, len(errors))
    return {"users_created": created, "errors": errors}


def import_entries(items: list[dict[str, Any]]) -> dict[str, Any]:
    """
    Load entries keyed by member email. An existing (member, date) record is
    overwritten with the imported values rather than skipped.
    """
    created = updated = 0
    errors: list[str] = []
    for item in items:
        email = str(item.get("email") or "").strip()
        label = f"{email or '?'} on {item.get('date')}"
        user = get_user_by_email(email) if email else None
        if user is None:
            errors.append(f"User not found for email: {email or '?'}")
            continue

        fields = {k: v for k, v in item.items() if k != "email"}
        fields.setdefault("is_completed", True)
        try:
            data = EntryInput.model_validate(fields)
            existing = find_entry(user.id, data.date)
            if existing is None:
                create_entry(user.id, data)
                created += 1
            else:
                patch = EntryPatch.model_validate(data.model_dump(exclude={"date"}, exclude_none=True))
                update_entry(existing.id, user.id, patch)
                updated += 1
        except PydanticValidationError as exc:
            errors.append(f"Invalid entry for {label}: {exc.error_count()} validation error(s)")
        except WorklogError as exc:
            reason = "; ".join(exc.details) or exc.message
            errors.append(f"Failed to import entry for {label}: {reason}")

    logger.info(
        "Entry import: created=%d updated=%d errors=%d", created, updated, len(errors)
    )
    return {"entries_created": created, "entries_updated": updated, "errors": errors}

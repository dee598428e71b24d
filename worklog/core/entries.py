"""
entries.py — Entry store: one work record per user per calendar day.

Derived fields (productivity score, total hours) are computed by the plain
functions at the top of this module and applied on every create and update.
"""
from __future__ import annotations

import json
import logging
import math
import sqlite3
import uuid
from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from ..auth.sqlite_db import get_conn
from .config import (
    DEFAULT_ENERGY_LEVEL,
    DEFAULT_MOOD,
    DEFAULT_TARGET_VIDEOS,
    ENTRIES_PAGE_SIZE,
    LIST_ITEM_MAX_CHARS,
    MAX_SHIFT_HOURS,
    NOTES_MAX_CHARS,
)
from .errors import DuplicateEntry, InvalidInput, NotFound
from .models import (
    BulkItemResult,
    BulkResult,
    BulkSummary,
    Entry,
    EntryInput,
    EntryPage,
    EntryPatch,
)

logger = logging.getLogger(__name__)

_SORT_COLUMNS: dict[str, str] = {
    "date": "date",
    "videosCompleted": "videos_completed",
    "videos_completed": "videos_completed",
    "productivityScore": "productivity_score",
    "productivity_score": "productivity_score",
    "totalHours": "total_hours",
    "total_hours": "total_hours",
    "createdAt": "created_at",
    "created_at": "created_at",
}


# ── Derivations ───────────────────────────────────────────────────────────────

def round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 upward, the way dashboards have always shown these numbers."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def derive_productivity_score(videos_completed: int, target_videos: int) -> int:
    return int(round_half_up(videos_completed / target_videos * 100))


def derive_total_hours(shift_start: Optional[datetime], shift_end: Optional[datetime]) -> Optional[float]:
    if shift_start is None or shift_end is None:
        return None
    return round_half_up((shift_end - shift_start).total_seconds() / 3600, 2)


def validate_fields(
    *,
    videos_completed: int,
    target_videos: int,
    shift_start: Optional[datetime],
    shift_end: Optional[datetime],
    energy_level: int,
    notes: str,
    challenges: list[str],
    achievements: list[str],
) -> None:
    """Raise InvalidInput listing every violated constraint."""
    details: list[str] = []
    if videos_completed < 0:
        details.append("Videos completed cannot be negative")
    if target_videos < 1:
        details.append("Target videos must be at least 1")
    if shift_start is not None and shift_end is not None:
        if shift_end < shift_start:
            details.append("Shift end cannot be before shift start")
        elif (shift_end - shift_start).total_seconds() / 3600 > MAX_SHIFT_HOURS:
            details.append("Total hours cannot exceed 24")
    if not 1 <= energy_level <= 5:
        details.append("Energy level must be between 1 and 5")
    if len(notes) > NOTES_MAX_CHARS:
        details.append(f"Notes cannot exceed {NOTES_MAX_CHARS} characters")
    for label, items in (("Challenge", challenges), ("Achievement", achievements)):
        if any(len(item) > LIST_ITEM_MAX_CHARS for item in items):
            details.append(f"{label} description cannot exceed {LIST_ITEM_MAX_CHARS} characters")
    if details:
        raise InvalidInput("Validation failed", details=details)


# ── CRUD ──────────────────────────────────────────────────────────────────────

def create_entry(user_id: str, data: EntryInput) -> Entry:
    """
    Persist a new day record for user_id.

    The unique (user_id, date) index decides between concurrent creates:
    exactly one insert wins, the other raises DuplicateEntry.
    """
    target = data.target_videos if data.target_videos is not None else DEFAULT_TARGET_VIDEOS
    fields: dict[str, Any] = {
        "shift_start": data.shift_start,
        "shift_end": data.shift_end,
        "videos_completed": data.videos_completed,
        "target_videos": target,
        "notes": data.notes or "",
        "mood": (data.mood.value if data.mood else DEFAULT_MOOD),
        "energy_level": data.energy_level if data.energy_level is not None else DEFAULT_ENERGY_LEVEL,
        "challenges": data.challenges or [],
        "achievements": data.achievements or [],
        "is_completed": data.is_completed,
    }
    _validate(fields)
    _derive(fields)

    entry_id = str(uuid.uuid4())
    now = _now()
    try:
        with get_conn() as conn:
            conn.execute(
                """
                INSERT INTO entries
                  (id, user_id, date, shift_start, shift_end, total_hours,
                   videos_completed, target_videos, productivity_score, notes,
                   mood, energy_level, challenges, achievements, is_completed,
                   created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (entry_id, user_id, data.date.isoformat(), *_row_values(fields), now, now),
            )
            conn.commit()
    except sqlite3.IntegrityError as exc:
        if "UNIQUE" in str(exc):
            raise DuplicateEntry() from exc
        raise
    return _fetch(entry_id)  # type: ignore[return-value]


def get_entry(entry_id: str, owner_id: str) -> Entry:
    """Missing and not-owned are the same NotFound to the caller."""
    with get_conn() as conn:
        row = conn.execute(
            "SELECT * FROM entries WHERE id = ? AND user_id = ?", (entry_id, owner_id)
        ).fetchone()
    if not row:
        raise NotFound("Entry not found.")
    return Entry.from_row(row)


def update_entry(entry_id: str, owner_id: str, patch: EntryPatch) -> Entry:
    entry = get_entry(entry_id, owner_id)
    fields: dict[str, Any] = {
        "shift_start": entry.shift_start,
        "shift_end": entry.shift_end,
        "videos_completed": entry.videos_completed,
        "target_videos": entry.target_videos,
        "notes": entry.notes,
        "mood": entry.mood.value,
        "energy_level": entry.energy_level,
        "challenges": entry.challenges,
        "achievements": entry.achievements,
        "is_completed": entry.is_completed,
    }
    for name in patch.model_fields_set:
        value = getattr(patch, name)
        if value is None:
            continue
        fields[name] = value.value if name == "mood" else value

    _validate(fields)
    _derive(fields)
    with get_conn() as conn:
        conn.execute(
            """
            UPDATE entries SET
              shift_start = ?, shift_end = ?, total_hours = ?,
              videos_completed = ?, target_videos = ?, productivity_score = ?,
              notes = ?, mood = ?, energy_level = ?, challenges = ?,
              achievements = ?, is_completed = ?, updated_at = ?
            WHERE id = ? AND user_id = ?
            """,
            (*_row_values(fields), _now(), entry_id, owner_id),
        )
        conn.commit()
    return _fetch(entry_id)  # type: ignore[return-value]


def delete_entry(entry_id: str, owner_id: str) -> None:
    with get_conn() as conn:
        deleted = conn.execute(
            "DELETE FROM entries WHERE id = ? AND user_id = ?", (entry_id, owner_id)
        ).rowcount
        conn.commit()
    if deleted == 0:
        raise NotFound("Entry not found.")


def list_entries(
    user_id: str,
    *,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    sort_by: str = "date",
    sort_order: str = "desc",
    page: int = 1,
    limit: int = ENTRIES_PAGE_SIZE,
) -> EntryPage:
    column = _SORT_COLUMNS.get(sort_by)
    if column is None:
        raise InvalidInput(f"Cannot sort by '{sort_by}'.")
    if page < 1 or limit < 1:
        raise InvalidInput("page and limit must be positive.")
    direction = "ASC" if sort_order.lower() == "asc" else "DESC"

    where, params = _range_clause([user_id], start_date, end_date)
    with get_conn() as conn:
        total = conn.execute(f"SELECT COUNT(*) FROM entries {where}", params).fetchone()[0]
        rows = conn.execute(
            f"SELECT * FROM entries {where} ORDER BY {column} {direction}, id {direction} "
            "LIMIT ? OFFSET ?",
            (*params, limit, (page - 1) * limit),
        ).fetchall()

    total_pages = math.ceil(total / limit)
    return EntryPage(
        entries=[Entry.from_row(r) for r in rows],
        current_page=page,
        total_pages=total_pages,
        total_entries=total,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
        limit=limit,
    )


def entries_for_users(
    user_ids: list[str],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list[Entry]:
    """All entries for the given users in a date window, oldest first."""
    if not user_ids:
        return []
    where, params = _range_clause(user_ids, start_date, end_date)
    with get_conn() as conn:
        rows = conn.execute(
            f"SELECT * FROM entries {where} ORDER BY date ASC, created_at ASC", params
        ).fetchall()
    return [Entry.from_row(r) for r in rows]


def recent_entries(user_ids: Optional[list[str]], limit: int) -> list[Entry]:
    """Newest entries first. None means every user."""
    if user_ids is None:
        where, params = "", ()
    elif not user_ids:
        return []
    else:
        where, params = _range_clause(user_ids, None, None)
    with get_conn() as conn:
        rows = conn.execute(
            f"SELECT * FROM entries {where} ORDER BY date DESC, created_at DESC LIMIT ?",
            (*params, limit),
        ).fetchall()
    return [Entry.from_row(r) for r in rows]


def find_entry(user_id: str, day: date) -> Optional[Entry]:
    with get_conn() as conn:
        row = conn.execute(
            "SELECT * FROM entries WHERE user_id = ? AND date = ?", (user_id, day.isoformat())
        ).fetchone()
    return Entry.from_row(row) if row else None


# ── Batch ─────────────────────────────────────────────────────────────────────

def bulk_create(user_id: str, items: list[dict]) -> BulkResult:
    """
    Create each item independently. A bad or duplicate item is reported and
    the batch carries on; nothing already added is rolled back.
    """
    results: list[BulkItemResult] = []
    for item in items:
        raw_date = item.get("date") if isinstance(item, dict) else None
        label = str(raw_date) if raw_date is not None else None
        try:
            data = EntryInput.model_validate(item)
            entry = create_entry(user_id, data)
        except DuplicateEntry:
            results.append(BulkItemResult(
                date=label, status="skipped", reason="Entry already exists for this date",
            ))
        except InvalidInput as exc:
            results.append(BulkItemResult(
                date=label, status="error", reason="; ".join(exc.details) or exc.message,
            ))
        except PydanticValidationError as exc:
            reason = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            results.append(BulkItemResult(date=label, status="error", reason=reason))
        else:
            results.append(BulkItemResult(date=label, status="added", entry_id=entry.id))

    summary = BulkSummary(
        total=len(items),
        added=sum(1 for r in results if r.status == "added"),
        skipped=sum(1 for r in results if r.status == "skipped"),
        errors=sum(1 for r in results if r.status == "error"),
    )
    logger.info(
        "Bulk create user=%s total=%d added=%d skipped=%d errors=%d",
        user_id, summary.total, summary.added, summary.skipped, summary.errors,
    )
    return BulkResult(summary=summary, results=results)


# ── Legacy backfill ───────────────────────────────────────────────────────────

_LEGACY_WHERE = """
    notes IS NULL OR mood IS NULL OR energy_level IS NULL
    OR challenges IS NULL OR achievements IS NULL
    OR (total_hours IS NULL AND shift_start IS NOT NULL AND shift_end IS NOT NULL)
"""


def legacy_status() -> dict:
    with get_conn() as conn:
        total = conn.execute("SELECT COUNT(*) FROM entries").fetchone()[0]
        legacy = conn.execute(f"SELECT COUNT(*) FROM entries WHERE {_LEGACY_WHERE}").fetchone()[0]
    return {
        "total_entries": total,
        "legacy_entries": legacy,
        "current_entries": total - legacy,
        "needs_migration": legacy > 0,
    }


def migrate_legacy_entries() -> int:
    """Fill defaults on rows written before the current schema and recompute scores."""
    with get_conn() as conn:
        rows = conn.execute(f"SELECT * FROM entries WHERE {_LEGACY_WHERE}").fetchall()
        for row in rows:
            target = row["target_videos"] or DEFAULT_TARGET_VIDEOS
            start = _parse_ts(row["shift_start"])
            end = _parse_ts(row["shift_end"])
            total_hours = row["total_hours"]
            if total_hours is None and start and end and end >= start:
                total_hours = derive_total_hours(start, end)
            conn.execute(
                """
                UPDATE entries SET
                  notes = ?, mood = ?, energy_level = ?, challenges = ?,
                  achievements = ?, target_videos = ?, productivity_score = ?,
                  total_hours = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    row["notes"] or "",
                    row["mood"] or DEFAULT_MOOD,
                    row["energy_level"] or DEFAULT_ENERGY_LEVEL,
                    row["challenges"] or "[]",
                    row["achievements"] or "[]",
                    target,
                    derive_productivity_score(row["videos_completed"], target),
                    total_hours,
                    _now(),
                    row["id"],
                ),
            )
        conn.commit()
    logger.info("Migrated %d legacy entries", len(rows))
    return len(rows)


# ── Private helpers ───────────────────────────────────────────────────────────

def _validate(fields: dict[str, Any]) -> None:
    validate_fields(
        videos_completed=fields["videos_completed"],
        target_videos=fields["target_videos"],
        shift_start=fields["shift_start"],
        shift_end=fields["shift_end"],
        energy_level=fields["energy_level"],
        notes=fields["notes"],
        challenges=fields["challenges"],
        achievements=fields["achievements"],
    )


def _derive(fields: dict[str, Any]) -> None:
    fields["total_hours"] = derive_total_hours(fields["shift_start"], fields["shift_end"])
    fields["productivity_score"] = derive_productivity_score(
        fields["videos_completed"], fields["target_videos"]
    )


def _row_values(fields: dict[str, Any]) -> tuple:
    return (
        _iso(fields["shift_start"]),
        _iso(fields["shift_end"]),
        fields["total_hours"],
        fields["videos_completed"],
        fields["target_videos"],
        fields["productivity_score"],
        fields["notes"],
        fields["mood"],
        fields["energy_level"],
        json.dumps(fields["challenges"]),
        json.dumps(fields["achievements"]),
        int(fields["is_completed"]),
    )


def _range_clause(
    user_ids: list[str], start_date: Optional[date], end_date: Optional[date]
) -> tuple[str, tuple]:
    placeholders = ",".join("?" for _ in user_ids)
    clauses = [f"user_id IN ({placeholders})"]
    params: list = list(user_ids)
    if start_date is not None:
        clauses.append("date >= ?")
        params.append(start_date.isoformat())
    if end_date is not None:
        clauses.append("date <= ?")
        params.append(end_date.isoformat())
    return "WHERE " + " AND ".join(clauses), tuple(params)


def _fetch(entry_id: str) -> Optional[Entry]:
    with get_conn() as conn:
        row = conn.execute("SELECT * FROM entries WHERE id = ?", (entry_id,)).fetchone()
    return Entry.from_row(row) if row else None


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

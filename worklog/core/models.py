"""
models.py — Pydantic models for internal data flow.

These models describe what the stores read and write. Request and response
shapes for the HTTP layer live in api/dto.py.
"""
from __future__ import annotations

import datetime as dt
import json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from .config import DEFAULT_ENERGY_LEVEL, DEFAULT_MOOD


class Mood(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    EXCEL = "excel"


# ── Entries ───────────────────────────────────────────────────────────────────

def _coerce_date(value: Any) -> Any:
    # Browser clients send midnight timestamps ("2025-03-04T00:00:00.000Z").
    if isinstance(value, str) and len(value) > 10 and value[10] in "T ":
        return value[:10]
    if isinstance(value, dt.datetime):
        return value.date()
    return value


def _as_utc(value: Optional[dt.datetime]) -> Optional[dt.datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


class EntryInput(BaseModel):
    """Fields a user supplies when logging a day."""
    date: dt.date
    shift_start: Optional[dt.datetime] = None
    shift_end: Optional[dt.datetime] = None
    videos_completed: int = 0
    target_videos: Optional[int] = None
    notes: Optional[str] = None
    mood: Optional[Mood] = None
    energy_level: Optional[int] = None
    challenges: Optional[list[str]] = None
    achievements: Optional[list[str]] = None
    is_completed: bool = False

    @field_validator("date", mode="before")
    @classmethod
    def _day(cls, v: Any) -> Any:
        return _coerce_date(v)

    @field_validator("shift_start", "shift_end")
    @classmethod
    def _utc(cls, v: Optional[dt.datetime]) -> Optional[dt.datetime]:
        return _as_utc(v)


class EntryPatch(BaseModel):
    """Recognized mutable fields; anything else in a patch is ignored."""
    shift_start: Optional[dt.datetime] = None
    shift_end: Optional[dt.datetime] = None
    videos_completed: Optional[int] = None
    target_videos: Optional[int] = None
    notes: Optional[str] = None
    mood: Optional[Mood] = None
    energy_level: Optional[int] = None
    challenges: Optional[list[str]] = None
    achievements: Optional[list[str]] = None
    is_completed: Optional[bool] = None

    @field_validator("shift_start", "shift_end")
    @classmethod
    def _utc(cls, v: Optional[dt.datetime]) -> Optional[dt.datetime]:
        return _as_utc(v)


class Entry(BaseModel):
    id: str
    user_id: str
    date: dt.date
    shift_start: Optional[dt.datetime] = None
    shift_end: Optional[dt.datetime] = None
    total_hours: Optional[float] = None
    videos_completed: int
    target_videos: int
    productivity_score: int
    notes: str = ""
    mood: Mood = Mood(DEFAULT_MOOD)
    energy_level: int = DEFAULT_ENERGY_LEVEL
    challenges: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    is_completed: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Entry":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            date=row["date"],
            shift_start=row["shift_start"],
            shift_end=row["shift_end"],
            total_hours=row["total_hours"],
            videos_completed=row["videos_completed"],
            target_videos=row["target_videos"],
            productivity_score=row["productivity_score"],
            notes=row["notes"] or "",
            mood=row["mood"] or DEFAULT_MOOD,
            energy_level=row["energy_level"] or DEFAULT_ENERGY_LEVEL,
            challenges=json.loads(row["challenges"]) if row["challenges"] else [],
            achievements=json.loads(row["achievements"]) if row["achievements"] else [],
            is_completed=bool(row["is_completed"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


class EntryPage(BaseModel):
    entries: list[Entry]
    current_page: int
    total_pages: int
    total_entries: int
    has_next_page: bool
    has_prev_page: bool
    limit: int


class BulkItemResult(BaseModel):
    date: Optional[str] = None
    status: str                     # added | skipped | error
    entry_id: Optional[str] = None
    reason: Optional[str] = None


class BulkSummary(BaseModel):
    total: int
    added: int
    skipped: int
    errors: int


class BulkResult(BaseModel):
    summary: BulkSummary
    results: list[BulkItemResult]


# ── Teams ─────────────────────────────────────────────────────────────────────

class TeamGoals(BaseModel):
    daily_target: int
    weekly_target: int
    monthly_target: int


class Team(BaseModel):
    id: str
    name: str
    code: Optional[str] = None
    color: Optional[str] = None
    description: str = ""
    team_manager_id: Optional[str] = None
    goals: TeamGoals
    admins: list[str] = Field(default_factory=list)
    members: list[str] = Field(default_factory=list)
    created_at: Optional[str] = None


class TeamProgress(BaseModel):
    window: str
    window_start: dt.date
    window_end: dt.date
    videos_completed: int
    goal: int
    percentage: int


# ── Reporting ─────────────────────────────────────────────────────────────────

class DayRef(BaseModel):
    date: dt.date
    productivity_score: int
    videos_completed: int


class AnalyticsSummary(BaseModel):
    total_entries: int
    total_videos: int
    average_productivity: int
    average_videos_per_day: float
    consistency_score: int


class AnalyticsTrends(BaseModel):
    best_day: DayRef
    worst_day: DayRef
    most_productive_hour: int


class Analytics(BaseModel):
    summary: AnalyticsSummary
    trends: AnalyticsTrends


class LeaderboardRow(BaseModel):
    rank: int
    user_id: str
    name: Optional[str] = None
    total_videos: int
    total_hours: float
    average_productivity: int
    entries: int

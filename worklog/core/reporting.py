"""
reporting.py — Read-only aggregates over entries: analytics, leaderboard,
dashboard rollups and export rendering.

Every function here takes entries that were already fetched; nothing in this
module touches the database.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional, Union

from ..auth.models import TokenClaims, User
from .config import CONSISTENCY_THRESHOLD, FALLBACK_PRODUCTIVE_HOUR
from .entries import round_half_up
from .errors import InvalidInput, NoData
from .models import (
    Analytics,
    AnalyticsSummary,
    AnalyticsTrends,
    DayRef,
    Entry,
    ExportFormat,
    LeaderboardRow,
    Team,
    TeamProgress,
)

logger = logging.getLogger(__name__)

PERIODS = ("week", "month", "year")

EXPORT_HEADERS = [
    "Date",
    "Videos Completed",
    "Productivity Score",
    "Mood",
    "Energy Level",
    "Challenges",
    "Achievements",
    "Notes",
]

CSV_MEDIA_TYPE = "text/csv"
EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
LIST_SEPARATOR = "; "


# ── Windows ───────────────────────────────────────────────────────────────────

def period_window(period: str, now: Optional[datetime] = None) -> tuple[date, date]:
    """
    Dashboard window ending today: the last seven days for "week", the
    calendar month so far for "month", the calendar year so far for "year".
    """
    today = (now or datetime.now()).date()
    if period == "week":
        return today - timedelta(days=7), today
    if period == "month":
        return today.replace(day=1), today
    if period == "year":
        return today.replace(month=1, day=1), today
    raise InvalidInput(f"Unknown period '{period}'. Use one of {PERIODS}.")


# ── Analytics ─────────────────────────────────────────────────────────────────

def consistency_score(entries: list[Entry]) -> int:
    if not entries:
        return 0
    hits = sum(1 for e in entries if e.productivity_score >= CONSISTENCY_THRESHOLD)
    return int(round_half_up(hits / len(entries) * 100))


def average_productivity(entries: list[Entry]) -> int:
    if not entries:
        return 0
    return int(round_half_up(sum(e.productivity_score for e in entries) / len(entries)))


def most_productive_hour(entries: list[Entry]) -> int:
    """Shift-start hour with the highest summed score. Ties go to the later hour."""
    by_hour: dict[int, int] = defaultdict(int)
    for e in entries:
        if e.shift_start is not None:
            by_hour[e.shift_start.hour] += e.productivity_score
    if not by_hour:
        return FALLBACK_PRODUCTIVE_HOUR
    best_hour = None
    for hour in sorted(by_hour):
        if best_hour is None or by_hour[hour] >= by_hour[best_hour]:
            best_hour = hour
    return best_hour


def analytics(entries: list[Entry]) -> Analytics:
    """Summary and trends for a non-empty list of entries."""
    if not entries:
        raise NoData()

    total_videos = sum(e.videos_completed for e in entries)
    best = worst = entries[0]
    for e in entries[1:]:
        if e.productivity_score > best.productivity_score:
            best = e
        if e.productivity_score < worst.productivity_score:
            worst = e

    return Analytics(
        summary=AnalyticsSummary(
            total_entries=len(entries),
            total_videos=total_videos,
            average_productivity=average_productivity(entries),
            average_videos_per_day=round_half_up(total_videos / len(entries), 2),
            consistency_score=consistency_score(entries),
        ),
        trends=AnalyticsTrends(
            best_day=_day_ref(best),
            worst_day=_day_ref(worst),
            most_productive_hour=most_productive_hour(entries),
        ),
    )


def leaderboard(entries: Iterable[Entry], users: dict[str, User]) -> list[LeaderboardRow]:
    """
    One row per distinct user, ranked by summed videos. Users with equal
    totals keep the order in which they first appear in entries.
    """
    grouped: dict[str, list[Entry]] = {}
    for e in entries:
        grouped.setdefault(e.user_id, []).append(e)

    ranked = sorted(
        grouped.items(),
        key=lambda item: sum(e.videos_completed for e in item[1]),
        reverse=True,
    )
    rows: list[LeaderboardRow] = []
    for position, (user_id, user_entries) in enumerate(ranked, start=1):
        user = users.get(user_id)
        rows.append(LeaderboardRow(
            rank=position,
            user_id=user_id,
            name=user.name if user else None,
            total_videos=sum(e.videos_completed for e in user_entries),
            total_hours=_total_hours(user_entries),
            average_productivity=average_productivity(user_entries),
            entries=len(user_entries),
        ))
    return rows


# ── Dashboard rollups ─────────────────────────────────────────────────────────

def user_stats(entries: list[Entry]) -> dict[str, Any]:
    target_achievement = 0
    if entries:
        ratios = [e.videos_completed / e.target_videos * 100 for e in entries]
        target_achievement = int(round_half_up(sum(ratios) / len(ratios)))
    return {
        "total_videos": sum(e.videos_completed for e in entries),
        "total_hours": _total_hours(entries),
        "average_productivity": average_productivity(entries),
        "target_achievement": target_achievement,
        "consistency_score": consistency_score(entries),
        "entries_count": len(entries),
        "completed_entries": sum(1 for e in entries if e.is_completed),
    }


def daily_trends(entries: list[Entry]) -> list[dict[str, Any]]:
    by_day: dict[date, list[Entry]] = defaultdict(list)
    for e in entries:
        by_day[e.date].append(e)
    return [
        {
            "date": day.isoformat(),
            "daily_videos": sum(e.videos_completed for e in day_entries),
            "daily_hours": _total_hours(day_entries),
            "average_productivity": average_productivity(day_entries),
        }
        for day, day_entries in sorted(by_day.items())
    ]


def entry_feed(entries: Iterable[Entry], users: dict[str, User]) -> list[dict[str, Any]]:
    """Entries labelled with their author's name, for team views."""
    feed = []
    for e in entries:
        user = users.get(e.user_id)
        feed.append({
            "id": e.id,
            "user_id": e.user_id,
            "user_name": user.name if user else "Unknown User",
            "date": e.date.isoformat(),
            "videos_completed": e.videos_completed,
            "target_videos": e.target_videos,
            "productivity_score": e.productivity_score,
            "notes": e.notes,
        })
    return feed


def team_stats(
    team: Team,
    users: dict[str, User],
    weekly: TeamProgress,
    monthly: TeamProgress,
    month_entries: list[Entry],
) -> dict[str, Any]:
    """Headline numbers for a team manager's overview."""
    members = [users[m] for m in team.members if m in users]
    return {
        "total_members": len(members),
        "active_members": sum(1 for u in members if u.is_active),
        "average_productivity": average_productivity(month_entries),
        "total_videos_completed": monthly.videos_completed,
        "weekly_progress": weekly.percentage,
        "monthly_progress": monthly.percentage,
        "team_target": weekly.goal,
        "team_achievement": weekly.videos_completed,
    }


def mood_breakdown(entries: list[Entry]) -> list[dict[str, Any]]:
    return _breakdown(entries, "mood", lambda e: e.mood.value)


def energy_breakdown(entries: list[Entry]) -> list[dict[str, Any]]:
    return _breakdown(entries, "energy_level", lambda e: e.energy_level)


# ── Export ────────────────────────────────────────────────────────────────────

@dataclass
class ExportDocument:
    """A rendered export. body is a dict for JSON, text otherwise."""
    format: ExportFormat
    body: Union[dict, str]
    media_type: str
    filename: Optional[str] = None


def export_range(
    user: TokenClaims,
    entries: list[Entry],
    fmt: Union[str, ExportFormat],
    *,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    include_analytics: bool = False,
    now: Optional[datetime] = None,
) -> ExportDocument:
    """Render the caller's entries for download. Raises NoData when there is nothing to export."""
    try:
        fmt = ExportFormat(str(getattr(fmt, "value", fmt)).lower())
    except ValueError as exc:
        raise InvalidInput(f"Unknown export format '{fmt}'.") from exc
    if not entries:
        raise NoData("No data found for the specified date range.")

    now = now or datetime.now()
    stamp = now.date().isoformat()
    logger.info("Export user=%s format=%s entries=%d", user.user_id, fmt.value, len(entries))

    if fmt is ExportFormat.CSV:
        return ExportDocument(
            format=fmt,
            body=render_csv(entries),
            media_type=CSV_MEDIA_TYPE,
            filename=f"productivity-export-{stamp}.csv",
        )
    if fmt is ExportFormat.EXCEL:
        return ExportDocument(
            format=fmt,
            body=render_excel(entries),
            media_type=EXCEL_MEDIA_TYPE,
            filename=f"productivity-export-{stamp}.xlsx",
        )

    payload: dict[str, Any] = {
        "user": {"id": user.user_id, "email": user.email, "role": user.role.value},
        "export_info": {
            "generated_at": now.isoformat(),
            "date_range": (
                {"start_date": start_date.isoformat(), "end_date": end_date.isoformat()}
                if start_date and end_date else "All time"
            ),
            "total_entries": len(entries),
            "format": fmt.value,
        },
        "entries": [_export_record(e) for e in entries],
    }
    if include_analytics:
        payload["analytics"] = analytics(entries).model_dump(mode="json")
    return ExportDocument(format=fmt, body=payload, media_type="application/json")


def render_csv(entries: list[Entry]) -> str:
    """Comma-separated rows; free-text columns are always quoted."""
    lines = [",".join(EXPORT_HEADERS)]
    for e in entries:
        lines.append(",".join([
            e.date.isoformat(),
            str(e.videos_completed),
            str(e.productivity_score),
            e.mood.value,
            str(e.energy_level),
            _quote(LIST_SEPARATOR.join(e.challenges)),
            _quote(LIST_SEPARATOR.join(e.achievements)),
            _quote(e.notes),
        ]))
    return "\n".join(lines)


def render_excel(entries: list[Entry]) -> str:
    """Tab-separated rows; free text is quoted only when it holds a tab, newline or quote."""
    lines = ["\t".join(EXPORT_HEADERS)]
    for e in entries:
        lines.append("\t".join([
            e.date.isoformat(),
            str(e.videos_completed),
            str(e.productivity_score),
            e.mood.value,
            str(e.energy_level),
            _quote_if_needed(LIST_SEPARATOR.join(e.challenges)),
            _quote_if_needed(LIST_SEPARATOR.join(e.achievements)),
            _quote_if_needed(e.notes),
        ]))
    return "\n".join(lines)


# ── Private helpers ───────────────────────────────────────────────────────────

def _day_ref(entry: Entry) -> DayRef:
    return DayRef(
        date=entry.date,
        productivity_score=entry.productivity_score,
        videos_completed=entry.videos_completed,
    )


def _total_hours(entries: Iterable[Entry]) -> float:
    return round_half_up(sum(e.total_hours or 0.0 for e in entries), 2)


def _breakdown(entries: list[Entry], label: str, key) -> list[dict[str, Any]]:
    groups: dict[Any, list[Entry]] = defaultdict(list)
    for e in entries:
        groups[key(e)].append(e)
    return [
        {
            label: value,
            "count": len(group),
            "average_productivity": average_productivity(group),
            "total_videos": sum(e.videos_completed for e in group),
        }
        for value, group in sorted(groups.items(), key=lambda item: -len(item[1]))
    ]


def _export_record(entry: Entry) -> dict[str, Any]:
    return {
        "date": entry.date.isoformat(),
        "videos_completed": entry.videos_completed,
        "productivity_score": entry.productivity_score,
        "mood": entry.mood.value,
        "energy_level": entry.energy_level,
        "challenges": entry.challenges,
        "achievements": entry.achievements,
        "notes": entry.notes,
    }


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _quote_if_needed(text: str) -> str:
    if any(ch in text for ch in ('\t', '\n', '\r', '"')):
        return _quote(text)
    return text

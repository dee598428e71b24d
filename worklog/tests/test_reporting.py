"""
test_reporting.py — Analytics, leaderboard, dashboard rollups and export rendering.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

import pytest

from worklog.auth.models import Role, TokenClaims, User
from worklog.core.errors import InvalidInput, NoData
from worklog.core.models import Entry
from worklog.core.reporting import (
    EXCEL_MEDIA_TYPE,
    analytics,
    daily_trends,
    export_range,
    leaderboard,
    mood_breakdown,
    period_window,
    render_csv,
    render_excel,
    user_stats,
)

CLAIMS = TokenClaims(user_id="u1", email="ana@example.com", role=Role.EDITOR)


def _entry(
    day: int,
    score: int,
    videos: int = 10,
    user_id: str = "u1",
    hour: Optional[int] = None,
    hours: Optional[float] = None,
    **extra,
) -> Entry:
    start = datetime(2025, 3, day, hour, tzinfo=timezone.utc) if hour is not None else None
    return Entry(
        id=f"e-{user_id}-{day}",
        user_id=user_id,
        date=date(2025, 3, day),
        shift_start=start,
        total_hours=hours,
        videos_completed=videos,
        target_videos=15,
        productivity_score=score,
        **extra,
    )


def _user(user_id: str, name: str) -> User:
    return User(id=user_id, email=f"{user_id}@example.com", name=name, role=Role.EDITOR, password_hash="x")


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

def test_analytics_summary():
    entries = [_entry(1, 80, videos=12), _entry(2, 40, videos=6), _entry(3, 90, videos=14)]
    result = analytics(entries)
    assert result.summary.total_entries == 3
    assert result.summary.total_videos == 32
    assert result.summary.average_productivity == 70
    assert result.summary.average_videos_per_day == 10.67
    assert result.summary.consistency_score == 67


def test_best_and_worst_day_keep_first_on_ties():
    entries = [_entry(1, 50), _entry(2, 90), _entry(3, 90), _entry(4, 50)]
    trends = analytics(entries).trends
    assert trends.best_day.date == date(2025, 3, 2)
    assert trends.worst_day.date == date(2025, 3, 1)


def test_most_productive_hour():
    entries = [_entry(1, 60, hour=8), _entry(2, 70, hour=14), _entry(3, 20, hour=8)]
    assert analytics(entries).trends.most_productive_hour == 8


def test_most_productive_hour_tie_goes_to_later_hour():
    entries = [_entry(1, 50, hour=8), _entry(2, 50, hour=13)]
    assert analytics(entries).trends.most_productive_hour == 13


def test_most_productive_hour_falls_back_without_shift_starts():
    assert analytics([_entry(1, 50)]).trends.most_productive_hour == 9


def test_analytics_requires_entries():
    with pytest.raises(NoData):
        analytics([])


# ---------------------------------------------------------------------------
# Leaderboard
# ---------------------------------------------------------------------------

def test_leaderboard_ranks_by_total_videos():
    entries = [
        _entry(1, 60, videos=9, user_id="a", hours=8.0),
        _entry(1, 80, videos=12, user_id="b", hours=7.5),
        _entry(2, 40, videos=6, user_id="a", hours=6.25),
    ]
    rows = leaderboard(entries, {"a": _user("a", "Ana"), "b": _user("b", "Ben")})
    assert [(r.rank, r.user_id, r.total_videos) for r in rows] == [(1, "a", 15), (2, "b", 12)]
    assert rows[0].name == "Ana"
    assert rows[0].total_hours == 14.25
    assert rows[0].average_productivity == 50
    assert rows[0].entries == 2


def test_leaderboard_ties_keep_first_seen_order():
    entries = [
        _entry(1, 50, videos=5, user_id="late"),
        _entry(1, 50, videos=5, user_id="early"),
        _entry(2, 50, videos=9, user_id="top"),
    ]
    rows = leaderboard(entries, {})
    assert [r.user_id for r in rows] == ["top", "late", "early"]
    assert rows[1].name is None


# ---------------------------------------------------------------------------
# Dashboard rollups
# ---------------------------------------------------------------------------

def test_user_stats():
    entries = [
        _entry(1, 80, videos=12, hours=8.0, is_completed=True),
        _entry(2, 40, videos=6, hours=4.5),
    ]
    stats = user_stats(entries)
    assert stats["total_videos"] == 18
    assert stats["total_hours"] == 12.5
    assert stats["average_productivity"] == 60
    assert stats["target_achievement"] == 60
    assert stats["consistency_score"] == 50
    assert stats["entries_count"] == 2
    assert stats["completed_entries"] == 1


def test_user_stats_empty():
    assert user_stats([])["average_productivity"] == 0


def test_daily_trends_and_mood_breakdown():
    entries = [
        _entry(2, 80, videos=12, mood="excellent"),
        _entry(1, 40, videos=6, mood="poor"),
        _entry(3, 60, videos=9, mood="excellent"),
    ]
    trends = daily_trends(entries)
    assert [t["date"] for t in trends] == ["2025-03-01", "2025-03-02", "2025-03-03"]
    moods = mood_breakdown(entries)
    assert moods[0] == {"mood": "excellent", "count": 2, "average_productivity": 70, "total_videos": 21}


def test_period_window():
    now = datetime(2025, 3, 19, 15, 0)
    assert period_window("week", now) == (date(2025, 3, 12), date(2025, 3, 19))
    assert period_window("month", now) == (date(2025, 3, 1), date(2025, 3, 19))
    assert period_window("year", now) == (date(2025, 1, 1), date(2025, 3, 19))
    with pytest.raises(InvalidInput):
        period_window("decade", now)


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def test_export_with_no_entries_is_no_data():
    with pytest.raises(NoData):
        export_range(CLAIMS, [], "json")


def test_export_unknown_format():
    with pytest.raises(InvalidInput):
        export_range(CLAIMS, [_entry(1, 50)], "pdf")


def test_csv_quotes_free_text():
    entry = _entry(
        1, 53, videos=8,
        notes='Said "done", then left',
        challenges=["slow render", "power cut"],
        achievements=[],
    )
    lines = render_csv([entry]).split("\n")
    assert lines[0] == "Date,Videos Completed,Productivity Score,Mood,Energy Level,Challenges,Achievements,Notes"
    assert lines[1] == '2025-03-01,8,53,good,3,"slow render; power cut","","Said ""done"", then left"'


def test_excel_is_tab_separated():
    entry = _entry(1, 53, videos=8, notes="tab\there", achievements=["a", "b"])
    lines = render_excel([entry]).split("\n")
    assert lines[0].split("\t")[0] == "Date"
    assert lines[1] == '2025-03-01\t8\t53\tgood\t3\t\ta; b\t"tab\there"'


def test_export_documents():
    now = datetime(2025, 3, 20, 10, 0)
    entries = [_entry(1, 53, videos=8), _entry(2, 100, videos=15)]

    csv_doc = export_range(CLAIMS, entries, "csv", now=now)
    assert csv_doc.media_type == "text/csv"
    assert csv_doc.filename == "productivity-export-2025-03-20.csv"

    xlsx_doc = export_range(CLAIMS, entries, "excel", now=now)
    assert xlsx_doc.media_type == EXCEL_MEDIA_TYPE
    assert xlsx_doc.filename.endswith(".xlsx")

    json_doc = export_range(
        CLAIMS, entries, "json",
        start_date=date(2025, 3, 1), end_date=date(2025, 3, 31),
        include_analytics=True, now=now,
    )
    body = json_doc.body
    assert body["user"] == {"id": "u1", "email": "ana@example.com", "role": "editor"}
    assert body["export_info"]["total_entries"] == 2
    assert body["export_info"]["date_range"] == {"start_date": "2025-03-01", "end_date": "2025-03-31"}
    assert body["entries"][0]["productivity_score"] == 53
    assert body["analytics"]["summary"]["total_videos"] == 23


def test_json_export_without_range_says_all_time():
    doc = export_range(CLAIMS, [_entry(1, 50)], "json")
    assert doc.body["export_info"]["date_range"] == "All time"
    assert "analytics" not in doc.body

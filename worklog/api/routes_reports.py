"""
api/routes_reports.py — Export, personal analytics and the dashboard rollup.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from ..auth.models import User
from ..core.entries import entries_for_users, list_entries
from ..core.errors import InvalidInput
from ..core.models import ExportFormat
from ..core.reporting import (
    analytics,
    daily_trends,
    energy_breakdown,
    export_range,
    mood_breakdown,
    period_window,
    user_stats,
)
from ..core.teams import compute_progress, find_team_for_user
from .auth import claims_for
from .dependencies import get_current_user

router = APIRouter()

_PERIOD = Query(default="week", pattern="^(week|month|year)$")


@router.get("/api/export")
async def export(
    format: ExportFormat = ExportFormat.JSON,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    include_analytics: bool = Query(default=False, alias="includeAnalytics"),
    user: User = Depends(get_current_user),
):
    if (start_date is None) != (end_date is None):
        raise InvalidInput("start_date and end_date must be given together.")
    entries = entries_for_users([user.id], start_date, end_date)
    doc = export_range(
        claims_for(user),
        entries,
        format,
        start_date=start_date,
        end_date=end_date,
        include_analytics=include_analytics,
    )
    if doc.format is ExportFormat.JSON:
        return JSONResponse(doc.body)
    return Response(
        content=doc.body,
        media_type=doc.media_type,
        headers={"Content-Disposition": f'attachment; filename="{doc.filename}"'},
    )


@router.get("/api/analytics")
async def personal_analytics(period: str = _PERIOD, user: User = Depends(get_current_user)):
    start, end = period_window(period)
    body = {
        "period": period,
        "date_range": {"start_date": start.isoformat(), "end_date": end.isoformat()},
    }
    entries = entries_for_users([user.id], start, end)
    if not entries:
        body.update(message="No data available for the specified period", analytics=None)
        return body
    body["analytics"] = analytics(entries).model_dump(mode="json")
    return body


@router.get("/api/dashboard")
async def dashboard(period: str = _PERIOD, user: User = Depends(get_current_user)):
    start, end = period_window(period)
    entries = entries_for_users([user.id], start, end)
    recent = list_entries(user.id, sort_by="date", sort_order="desc", page=1, limit=5)

    goal_progress = None
    team = find_team_for_user(user)
    if team is not None:
        goal_progress = {
            "team_id": team.id,
            "team_name": team.name,
            "weekly": compute_progress(team, "week").model_dump(mode="json"),
            "monthly": compute_progress(team, "month").model_dump(mode="json"),
        }

    return {
        "period": period,
        "date_range": {"start_date": start.isoformat(), "end_date": end.isoformat()},
        "user_stats": user_stats(entries),
        "recent_entries": [e.model_dump(mode="json") for e in recent.entries],
        "productivity_trends": daily_trends(entries),
        "mood_insights": mood_breakdown(entries),
        "energy_insights": energy_breakdown(entries),
        "goal_progress": goal_progress,
    }

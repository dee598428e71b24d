"""
api/routes_teams.py — Team listing, creation, membership and goal progress.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..auth.models import Role, User
from ..core.config import TEAM_FEED_LIMIT, TEAM_OVERVIEW_RECENT
from ..core.entries import entries_for_users, recent_entries
from ..core.errors import NotFound
from ..core.models import Team
from ..core.reporting import entry_feed, leaderboard, period_window, team_stats
from ..core.teams import (
    add_member,
    compute_progress,
    create_team,
    find_team_for_user,
    get_user_teams,
    list_teams,
    remove_member,
)
from .auth import get_users_by_ids
from .dependencies import get_current_user, require_team_lead, require_team_overview
from .dto import AddMemberRequest, TeamCreateRequest, TeamMemberOut, UserOut

router = APIRouter()


def _team_view(team: Team) -> dict:
    users = get_users_by_ids(team.members)
    members = [
        TeamMemberOut(
            id=u.id,
            name=u.name,
            email=u.email,
            role=u.role,
            is_admin=u.id in team.admins,
        ).model_dump(mode="json")
        for u in (users[m] for m in team.members if m in users)
    ]
    view = team.model_dump(mode="json")
    view["member_details"] = members
    return view


def _acting_team(user: User) -> Team:
    team = find_team_for_user(user)
    if team is None:
        raise NotFound("You are not part of any team.")
    return team


@router.get("/api/teams")
async def teams_list(user: User = Depends(get_current_user)):
    teams = list_teams() if user.role == Role.ADMIN else get_user_teams(user.id)
    return {"teams": [_team_view(t) for t in teams]}


@router.post("/api/teams", status_code=201)
async def teams_create(body: TeamCreateRequest, user: User = Depends(get_current_user)):
    team = create_team(
        user,
        body.name,
        description=body.description,
        code=body.code,
        color=body.color,
        goals=body.goals,
        team_manager_id=body.team_manager_id,
    )
    return {"message": "Team created successfully", "team": _team_view(team)}


@router.post("/api/teams/members")
async def teams_add_member(body: AddMemberRequest, user: User = Depends(require_team_lead)):
    team = add_member(user, body.email)
    return {"message": "Team member added successfully", "team": _team_view(team)}


@router.get("/api/teams/progress")
async def teams_progress(user: User = Depends(get_current_user)):
    team = _acting_team(user)
    return {
        "team_id": team.id,
        "team_name": team.name,
        "weekly": compute_progress(team, "week"),
        "monthly": compute_progress(team, "month"),
    }


@router.get("/api/teams/leaderboard")
async def teams_leaderboard(
    period: str = Query(default="week", pattern="^(week|month|year)$"),
    user: User = Depends(get_current_user),
):
    team = _acting_team(user)
    start, end = period_window(period)
    rows = leaderboard(entries_for_users(team.members, start, end), get_users_by_ids(team.members))
    return {"team_id": team.id, "period": period, "leaderboard": rows}


@router.get("/api/teams/entries")
async def teams_entries(user: User = Depends(get_current_user)):
    if user.role == Role.ADMIN:
        entries = recent_entries(None, TEAM_FEED_LIMIT)
    else:
        entries = recent_entries(_acting_team(user).members, TEAM_FEED_LIMIT)
    users = get_users_by_ids(sorted({e.user_id for e in entries}))
    return {"entries": entry_feed(entries, users)}


@router.get("/api/teams/manager")
async def teams_manager_overview(user: User = Depends(require_team_overview)):
    team = _acting_team(user)
    users = get_users_by_ids(team.members)
    weekly = compute_progress(team, "week")
    monthly = compute_progress(team, "month")
    month_entries = entries_for_users(team.members, monthly.window_start, monthly.window_end)
    return {
        "team": {
            "id": team.id,
            "name": team.name,
            "code": team.code,
            "color": team.color,
            "description": team.description,
            "team_manager_id": team.team_manager_id,
        },
        "members": [UserOut.of(users[m]).model_dump(mode="json") for m in team.members if m in users],
        "stats": team_stats(team, users, weekly, monthly, month_entries),
        "recent_entries": entry_feed(recent_entries(team.members, TEAM_OVERVIEW_RECENT), users),
    }


@router.delete("/api/teams/{member_id}")
async def teams_remove_member(member_id: str, user: User = Depends(require_team_lead)):
    team = remove_member(user, member_id)
    return {"message": "Team member removed successfully", "team": _team_view(team)}

"""
teams.py — Team directory: membership management and goal progress.
"""
from __future__ import annotations

import calendar
import logging
import sqlite3
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from ..api.auth import get_user_by_email, get_user_by_id, set_team
from ..auth.models import Role, User
from ..auth.sqlite_db import get_conn
from .config import (
    DEFAULT_DAILY_TARGET,
    DEFAULT_MONTHLY_TARGET,
    DEFAULT_WEEKLY_TARGET,
    WEEK_START_DAY,
)
from .entries import entries_for_users, round_half_up
from .errors import AlreadyMember, CannotRemoveSelf, DuplicateTeam, InvalidInput, NotFound
from .models import Team, TeamGoals, TeamProgress
from .permissions import Permission, require_permission

logger = logging.getLogger(__name__)

WINDOWS = ("week", "month")


# ── Reads ─────────────────────────────────────────────────────────────────────

def get_team(team_id: str) -> Optional[Team]:
    with get_conn() as conn:
        row = conn.execute("SELECT * FROM teams WHERE id = ?", (team_id,)).fetchone()
        if not row:
            return None
        return _team_from_row(conn, row)


def get_user_teams(user_id: str) -> list[Team]:
    """Teams the user belongs to or administers, oldest first."""
    with get_conn() as conn:
        rows = conn.execute(
            """
            SELECT * FROM teams WHERE id IN (
                SELECT team_id FROM team_members WHERE user_id = ?
                UNION
                SELECT team_id FROM team_admins WHERE user_id = ?
            ) OR team_manager_id = ?
            ORDER BY created_at ASC
            """,
            (user_id, user_id, user_id),
        ).fetchall()
        return [_team_from_row(conn, r) for r in rows]


def find_team_for_user(user: User) -> Optional[Team]:
    """The team a user acts on: one they administer or manage first, then any they belong to."""
    teams = get_user_teams(user.id)
    for team in teams:
        if user.id in team.admins or team.team_manager_id == user.id:
            return team
    if teams:
        return teams[0]
    if user.team_id:
        return get_team(user.team_id)
    return None


def list_teams() -> list[Team]:
    with get_conn() as conn:
        rows = conn.execute("SELECT * FROM teams ORDER BY created_at ASC").fetchall()
        return [_team_from_row(conn, r) for r in rows]


# ── Writes ────────────────────────────────────────────────────────────────────

def create_team(
    acting_user: User,
    name: str,
    *,
    description: str = "",
    code: Optional[str] = None,
    color: Optional[str] = None,
    goals: Optional[TeamGoals] = None,
    team_manager_id: Optional[str] = None,
) -> Team:
    require_permission(acting_user.role, Permission.CREATE_TEAM, "Only admins can create teams.")
    if team_manager_id is not None:
        manager = get_user_by_id(team_manager_id)
        if manager is None:
            raise NotFound("Team manager not found.")
        if manager.role != Role.TEAM_MANAGER:
            raise InvalidInput("Team manager must have the team_manager role.")
    team = insert_team(
        name,
        admin_id=acting_user.id,
        description=description,
        code=code,
        color=color,
        goals=goals,
        team_manager_id=team_manager_id,
    )
    if team_manager_id is not None and manager.team_id is None:
        set_team(manager.id, team.id)
    return team


def insert_team(
    name: str,
    *,
    admin_id: Optional[str] = None,
    description: str = "",
    code: Optional[str] = None,
    color: Optional[str] = None,
    goals: Optional[TeamGoals] = None,
    team_manager_id: Optional[str] = None,
) -> Team:
    """Create a team row. The admin and team manager, when given, are also made members."""
    name = name.strip()
    if not name:
        raise InvalidInput("Team name is required.")
    goals = goals or TeamGoals(
        daily_target=DEFAULT_DAILY_TARGET,
        weekly_target=DEFAULT_WEEKLY_TARGET,
        monthly_target=DEFAULT_MONTHLY_TARGET,
    )
    team_id = str(uuid.uuid4())
    now = _now()
    try:
        with get_conn() as conn:
            conn.execute(
                """
                INSERT INTO teams
                  (id, name, code, color, description, team_manager_id,
                   daily_target, weekly_target, monthly_target, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    team_id, name, code, color, description, team_manager_id,
                    goals.daily_target, goals.weekly_target, goals.monthly_target, now,
                ),
            )
            if admin_id:
                conn.execute(
                    "INSERT INTO team_admins (team_id, user_id) VALUES (?, ?)", (team_id, admin_id)
                )
                conn.execute(
                    "INSERT INTO team_members (team_id, user_id, added_at) VALUES (?, ?, ?)",
                    (team_id, admin_id, now),
                )
            if team_manager_id and team_manager_id != admin_id:
                conn.execute(
                    "INSERT INTO team_members (team_id, user_id, added_at) VALUES (?, ?, ?)",
                    (team_id, team_manager_id, now),
                )
            conn.commit()
    except sqlite3.IntegrityError as exc:
        raise DuplicateTeam() from exc
    logger.info("Created team id=%s name=%r", team_id, name)
    return get_team(team_id)  # type: ignore[return-value]


def add_member(acting_user: User, target_email: str) -> Team:
    """
    Add the account behind target_email to the acting user's team, creating
    "<name>'s Team" when the acting user has none yet.
    """
    require_permission(
        acting_user.role, Permission.MANAGE_TEAM_MEMBERS, "Only admins and managers can add members."
    )
    target = get_user_by_email(target_email)
    if target is None:
        raise NotFound("No user found with that email.")

    for team in get_user_teams(acting_user.id):
        if target.id in team.members:
            raise AlreadyMember()

    team = find_team_for_user(acting_user)
    if team is None:
        team = _insert_default_team(acting_user)

    try:
        with get_conn() as conn:
            conn.execute(
                "INSERT INTO team_members (team_id, user_id, added_at) VALUES (?, ?, ?)",
                (team.id, target.id, _now()),
            )
            conn.commit()
    except sqlite3.IntegrityError as exc:
        raise AlreadyMember() from exc
    if target.team_id is None:
        set_team(target.id, team.id)
    logger.info("Added user id=%s to team id=%s", target.id, team.id)
    return get_team(team.id)  # type: ignore[return-value]


def remove_member(acting_user: User, target_user_id: str) -> Team:
    require_permission(
        acting_user.role, Permission.MANAGE_TEAM_MEMBERS, "Only admins and managers can remove members."
    )
    if target_user_id == acting_user.id:
        raise CannotRemoveSelf()

    team = find_team_for_user(acting_user)
    if team is None:
        raise NotFound("Team not found.")
    if target_user_id not in team.members:
        raise NotFound("Member not found in team.")

    with get_conn() as conn:
        conn.execute(
            "DELETE FROM team_members WHERE team_id = ? AND user_id = ?", (team.id, target_user_id)
        )
        conn.execute(
            "DELETE FROM team_admins WHERE team_id = ? AND user_id = ?", (team.id, target_user_id)
        )
        conn.commit()
    target = get_user_by_id(target_user_id)
    if target is not None and target.team_id == team.id:
        set_team(target.id, None)
    logger.info("Removed user id=%s from team id=%s", target_user_id, team.id)
    return get_team(team.id)  # type: ignore[return-value]


# ── Progress ──────────────────────────────────────────────────────────────────

def week_window(today: date, week_start_day: int = WEEK_START_DAY) -> tuple[date, date]:
    start = today - timedelta(days=(today.weekday() - week_start_day) % 7)
    return start, start + timedelta(days=6)


def month_window(today: date) -> tuple[date, date]:
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def compute_progress(team: Team, window: str = "week", today: Optional[date] = None) -> TeamProgress:
    """Member videos inside the window as a rounded percentage of the team goal."""
    today = today or datetime.now().date()
    if window == "week":
        start, end = week_window(today)
        goal = team.goals.weekly_target
    elif window == "month":
        start, end = month_window(today)
        goal = team.goals.monthly_target
    else:
        raise InvalidInput(f"Unknown window '{window}'. Use one of {WINDOWS}.")

    videos = sum(e.videos_completed for e in entries_for_users(team.members, start, end))
    percentage = int(round_half_up(videos / goal * 100)) if goal > 0 else 0
    return TeamProgress(
        window=window,
        window_start=start,
        window_end=end,
        videos_completed=videos,
        goal=goal,
        percentage=percentage,
    )


# ── Private helpers ───────────────────────────────────────────────────────────

_DEFAULT_NAME_ATTEMPTS = 50


def _insert_default_team(owner: User) -> Team:
    """Create "<name>'s Team", suffixing " (2)", " (3)" ... while the name is taken."""
    base = f"{owner.name}'s Team"
    for attempt in range(1, _DEFAULT_NAME_ATTEMPTS + 1):
        name = base if attempt == 1 else f"{base} ({attempt})"
        try:
            return insert_team(name, admin_id=owner.id)
        except DuplicateTeam:
            logger.info("Team name %r taken, trying another", name)
    raise DuplicateTeam(f"Could not find a free team name for {base!r}.")


def _team_from_row(conn: sqlite3.Connection, row) -> Team:
    members = conn.execute(
        "SELECT user_id FROM team_members WHERE team_id = ? ORDER BY added_at ASC, rowid ASC",
        (row["id"],),
    ).fetchall()
    admins = conn.execute(
        "SELECT user_id FROM team_admins WHERE team_id = ? ORDER BY rowid ASC", (row["id"],)
    ).fetchall()
    return Team(
        id=row["id"],
        name=row["name"],
        code=row["code"],
        color=row["color"],
        description=row["description"] or "",
        team_manager_id=row["team_manager_id"],
        goals=TeamGoals(
            daily_target=row["daily_target"],
            weekly_target=row["weekly_target"],
            monthly_target=row["monthly_target"],
        ),
        admins=[a["user_id"] for a in admins],
        members=[m["user_id"] for m in members],
        created_at=row["created_at"],
    )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

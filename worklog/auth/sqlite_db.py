"""
auth/sqlite_db.py — SQLite schema bootstrap and shared connection helper.
"""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Generator

from ..core.config import SQLITE_DB_PATH

DB_PATH = SQLITE_DB_PATH

_CREATE_USERS = """
CREATE TABLE IF NOT EXISTS users (
    id               TEXT PRIMARY KEY,
    email            TEXT UNIQUE NOT NULL,
    name             TEXT NOT NULL,
    first_name       TEXT,
    last_name        TEXT,
    password_hash    TEXT NOT NULL,
    role             TEXT NOT NULL CHECK(role IN ('admin','manager','team_manager','editor','viewer')),
    is_active        INTEGER NOT NULL DEFAULT 1,
    team_id          TEXT REFERENCES teams(id),
    created_at       TEXT NOT NULL,
    last_login       TEXT
);
"""

_CREATE_TEAMS = """
CREATE TABLE IF NOT EXISTS teams (
    id               TEXT PRIMARY KEY,
    name             TEXT UNIQUE NOT NULL,
    code             TEXT,
    color            TEXT,
    description      TEXT NOT NULL DEFAULT '',
    team_manager_id  TEXT REFERENCES users(id),
    daily_target     INTEGER NOT NULL DEFAULT 15,
    weekly_target    INTEGER NOT NULL DEFAULT 90,
    monthly_target   INTEGER NOT NULL DEFAULT 360,
    created_at       TEXT NOT NULL
);
"""

_CREATE_TEAM_MEMBERS = """
CREATE TABLE IF NOT EXISTS team_members (
    team_id     TEXT NOT NULL REFERENCES teams(id),
    user_id     TEXT NOT NULL REFERENCES users(id),
    added_at    TEXT NOT NULL,
    PRIMARY KEY (team_id, user_id)
);
"""

_CREATE_TEAM_ADMINS = """
CREATE TABLE IF NOT EXISTS team_admins (
    team_id     TEXT NOT NULL REFERENCES teams(id),
    user_id     TEXT NOT NULL REFERENCES users(id),
    PRIMARY KEY (team_id, user_id)
);
"""

_CREATE_ENTRIES = """
CREATE TABLE IF NOT EXISTS entries (
    id                  TEXT PRIMARY KEY,
    user_id             TEXT NOT NULL REFERENCES users(id),
    date                TEXT NOT NULL,
    shift_start         TEXT,
    shift_end           TEXT,
    total_hours         REAL,
    videos_completed    INTEGER NOT NULL DEFAULT 0 CHECK(videos_completed >= 0),
    target_videos       INTEGER NOT NULL DEFAULT 15 CHECK(target_videos >= 1),
    productivity_score  INTEGER NOT NULL DEFAULT 0,
    notes               TEXT,
    mood                TEXT CHECK(mood IN ('excellent','good','average','poor')),
    energy_level        INTEGER CHECK(energy_level BETWEEN 1 AND 5),
    challenges          TEXT,
    achievements        TEXT,
    is_completed        INTEGER NOT NULL DEFAULT 0,
    created_at          TEXT NOT NULL,
    updated_at          TEXT NOT NULL
);
"""

_INDEXES = [
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_entries_user_date ON entries(user_id, date);",
    "CREATE INDEX IF NOT EXISTS idx_entries_date ON entries(date);",
    "CREATE INDEX IF NOT EXISTS idx_entries_score ON entries(productivity_score);",
    "CREATE INDEX IF NOT EXISTS idx_users_role ON users(role);",
    "CREATE INDEX IF NOT EXISTS idx_users_active ON users(is_active);",
    "CREATE INDEX IF NOT EXISTS idx_team_members_user ON team_members(user_id);",
    "CREATE INDEX IF NOT EXISTS idx_team_admins_user ON team_admins(user_id);",
]


def init_db() -> None:
    """Create tables if they don't exist. Safe to call on every startup."""
    with get_conn() as conn:
        conn.execute(_CREATE_USERS)
        conn.execute(_CREATE_TEAMS)
        conn.execute(_CREATE_TEAM_MEMBERS)
        conn.execute(_CREATE_TEAM_ADMINS)
        conn.execute(_CREATE_ENTRIES)
        for idx in _INDEXES:
            conn.execute(idx)
        conn.commit()


@contextmanager
def get_conn() -> Generator[sqlite3.Connection, None, None]:
    """Yield an autocommit-safe connection with row_factory set."""
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL;")
    try:
        yield conn
    finally:
        conn.close()

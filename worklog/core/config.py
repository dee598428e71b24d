"""
config.py — environment variables and application constants.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

# ── Runtime ───────────────────────────────────────────────────────────────────
ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000")
APP_VERSION: str = "1.0.0"

# ── Storage ───────────────────────────────────────────────────────────────────
SQLITE_DB_PATH: str = os.getenv("SQLITE_DB_PATH", "worklog.db")

# ── Tokens ────────────────────────────────────────────────────────────────────
JWT_SECRET: str = os.getenv("JWT_SECRET", "")
JWT_ALGORITHM: str = "HS256"
JWT_ACCESS_TTL_MINUTES: int = int(os.getenv("JWT_ACCESS_TTL_MINUTES", str(7 * 24 * 60)))
JWT_REFRESH_TTL_DAYS: int = int(os.getenv("JWT_REFRESH_TTL_DAYS", "30"))
JWT_ISSUER: str = os.getenv("JWT_ISSUER", "worklog-productivity")
JWT_AUDIENCE: str = os.getenv("JWT_AUDIENCE", "worklog-users")
REFRESH_COOKIE_NAME: str = "refreshToken"

# ── Passwords ─────────────────────────────────────────────────────────────────
BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
PASSWORD_MIN_LENGTH: int = 6
PASSWORD_MAX_BYTES: int = 72       # bcrypt ignores (or rejects) anything longer

# ── Entries ───────────────────────────────────────────────────────────────────
DEFAULT_TARGET_VIDEOS: int = 15
DEFAULT_MOOD: str = "good"
DEFAULT_ENERGY_LEVEL: int = 3
NOTES_MAX_CHARS: int = 1000
LIST_ITEM_MAX_CHARS: int = 200
MAX_SHIFT_HOURS: float = 24.0

# ── Pagination ────────────────────────────────────────────────────────────────
ENTRIES_PAGE_SIZE: int = 10
USERS_PAGE_SIZE: int = 50
MAX_PAGE_SIZE: int = 200
TEAM_FEED_LIMIT: int = 100
TEAM_OVERVIEW_RECENT: int = 50

# ── Reporting ─────────────────────────────────────────────────────────────────
CONSISTENCY_THRESHOLD: int = 80
FALLBACK_PRODUCTIVE_HOUR: int = 9
WEEK_START_DAY: int = int(os.getenv("WEEK_START_DAY", "0"))   # 0 = Monday

# ── Team goals ────────────────────────────────────────────────────────────────
DEFAULT_DAILY_TARGET: int = 15
DEFAULT_WEEKLY_TARGET: int = 90
DEFAULT_MONTHLY_TARGET: int = 360


@dataclass(frozen=True)
class TokenSettings:
    secret: str
    algorithm: str
    access_ttl_minutes: int
    refresh_ttl_days: int
    issuer: str
    audience: str


def load_token_settings() -> TokenSettings:
    """Build the signing configuration once at startup. An empty secret is fatal."""
    if not JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be set")
    return TokenSettings(
        secret=JWT_SECRET,
        algorithm=JWT_ALGORITHM,
        access_ttl_minutes=JWT_ACCESS_TTL_MINUTES,
        refresh_ttl_days=JWT_REFRESH_TTL_DAYS,
        issuer=JWT_ISSUER,
        audience=JWT_AUDIENCE,
    )


def cookie_secure() -> bool:
    return ENVIRONMENT == "production"

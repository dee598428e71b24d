"""
auth/passwords.py — bcrypt password hashing.
"""
from __future__ import annotations

import bcrypt

from ..core.config import BCRYPT_ROUNDS, PASSWORD_MAX_BYTES, PASSWORD_MIN_LENGTH
from ..core.errors import InvalidInput


def check_password_policy(password: str) -> None:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise InvalidInput(f"Password must be at least {PASSWORD_MIN_LENGTH} characters.")
    if len(password.encode()) > PASSWORD_MAX_BYTES:
        raise InvalidInput(f"Password cannot exceed {PASSWORD_MAX_BYTES} bytes.")


def hash_password(password: str) -> str:
    """One-way hash with a fresh salt on every call."""
    check_password_policy(password)
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # malformed stored hash or over-long candidate
        return False

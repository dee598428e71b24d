"""
maintenance.py — Operator commands for account recovery.

  python -m worklog.maintenance reset-password EMAIL PASSWORD
  python -m worklog.maintenance check-login EMAIL PASSWORD
  python -m worklog.maintenance create-admin EMAIL NAME PASSWORD
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .api.auth import authenticate, create_user, get_user_by_email, set_password
from .auth.models import Role
from .auth.passwords import hash_password
from .auth.sqlite_db import init_db
from .core.config import LOG_LEVEL
from .core.errors import NotFound, WorklogError

logger = logging.getLogger(__name__)


def reset_password(email: str, password: str) -> None:
    user = get_user_by_email(email)
    if user is None:
        raise NotFound(f"No user with email {email}.")
    set_password(user.id, hash_password(password))
    logger.info("Password reset for user id=%s", user.id)


def check_login(email: str, password: str) -> str:
    user = authenticate(email, password)
    return f"OK: {user.email} ({user.role.value})"


def create_admin(email: str, name: str, password: str) -> None:
    user = create_user(
        email=email,
        password_hash=hash_password(password),
        role=Role.ADMIN,
        name=name,
    )
    logger.info("Created admin id=%s", user.id)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="worklog.maintenance")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("reset-password", help="Set a new password for an account")
    p.add_argument("email")
    p.add_argument("password")

    p = sub.add_parser("check-login", help="Try a login without issuing tokens")
    p.add_argument("email")
    p.add_argument("password")

    p = sub.add_parser("create-admin", help="Create an admin account")
    p.add_argument("email")
    p.add_argument("name")
    p.add_argument("password")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    args = build_parser().parse_args(argv)
    init_db()
    try:
        if args.command == "reset-password":
            reset_password(args.email, args.password)
            print(f"Password updated for {args.email}")
        elif args.command == "check-login":
            print(check_login(args.email, args.password))
        elif args.command == "create-admin":
            create_admin(args.email, args.name, args.password)
            print(f"Admin {args.email} created")
    except WorklogError as exc:
        print(f"{exc.code}: {exc.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

from .sqlite_db import init_db, get_conn
from .models import Role, TokenClaims, User
from .passwords import check_password_policy, hash_password, verify_password
from .token_utils import issue_access_token, issue_refresh_token, verify_token

__all__ = [
    "init_db",
    "get_conn",
    "Role",
    "TokenClaims",
    "User",
    "check_password_policy",
    "hash_password",
    "verify_password",
    "issue_access_token",
    "issue_refresh_token",
    "verify_token",
]

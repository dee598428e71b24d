"""
errors.py — Domain error taxonomy.

Every failure a caller may see is a WorklogError subclass carrying a stable
machine-readable code and the HTTP status the API maps it to.
"""
from __future__ import annotations

from typing import Optional


class WorklogError(Exception):
    code: str = "INTERNAL_ERROR"
    http_status: int = 500
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None, details: Optional[list] = None):
        self.message = message or self.default_message
        self.details = details or []
        super().__init__(self.message)


# ── 400 ───────────────────────────────────────────────────────────────────────

class ValidationError(WorklogError):
    code = "VALIDATION_ERROR"
    http_status = 400
    default_message = "Validation failed."


class InvalidInput(ValidationError):
    code = "INVALID_INPUT"


class InvalidRole(ValidationError):
    code = "INVALID_ROLE"
    default_message = "Invalid role. Must be admin, manager, team_manager, editor, or viewer."


class CannotRemoveSelf(ValidationError):
    code = "CANNOT_REMOVE_SELF"
    default_message = "Cannot remove yourself from the team."


# ── 401 ───────────────────────────────────────────────────────────────────────

class AuthenticationError(WorklogError):
    code = "UNAUTHORIZED"
    http_status = 401
    default_message = "Authentication required."


class InvalidToken(AuthenticationError):
    code = "INVALID_TOKEN"
    default_message = "Invalid or expired token."


class InvalidCredentials(AuthenticationError):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid email or password."


class AccountDeactivated(AuthenticationError):
    code = "ACCOUNT_DEACTIVATED"
    default_message = "Account is deactivated. Please contact administrator."


# ── 403 ───────────────────────────────────────────────────────────────────────

class AuthorizationError(WorklogError):
    code = "FORBIDDEN"
    http_status = 403
    default_message = "Insufficient permissions."


Forbidden = AuthorizationError


# ── 404 ───────────────────────────────────────────────────────────────────────

class NotFoundError(WorklogError):
    code = "NOT_FOUND"
    http_status = 404
    default_message = "Resource not found."


NotFound = NotFoundError


class NoData(NotFoundError):
    code = "NO_DATA"
    default_message = "No data found for the specified date range."


# ── 409 ───────────────────────────────────────────────────────────────────────

class ConflictError(WorklogError):
    code = "CONFLICT"
    http_status = 409
    default_message = "Resource already exists."


class DuplicateEmail(ConflictError):
    code = "DUPLICATE_EMAIL"
    default_message = "User with this email already exists."


class DuplicateEntry(ConflictError):
    code = "DUPLICATE_ENTRY"
    default_message = "Entry already exists for this date."


class AlreadyMember(ConflictError):
    code = "ALREADY_MEMBER"
    default_message = "User is already a member of this team."


class DuplicateTeam(ConflictError):
    code = "DUPLICATE_TEAM"
    default_message = "Team name already exists."

"""
auth/token_utils.py — Access and refresh token issuance and verification.

Tokens are stateless HS256 JWTs. Nothing is persisted, so a refresh token
stays usable until it expires or its user is deactivated.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

from ..core.config import TokenSettings
from ..core.errors import InvalidToken
from .models import Role, TokenClaims

ACCESS = "access"
REFRESH = "refresh"


def issue_access_token(claims: TokenClaims, settings: TokenSettings) -> str:
    now = datetime.now(timezone.utc)
    payload = _base_payload(claims, ACCESS, now)
    payload["exp"] = now + timedelta(minutes=settings.access_ttl_minutes)
    return jwt.encode(payload, settings.secret, algorithm=settings.algorithm)


def issue_refresh_token(claims: TokenClaims, settings: TokenSettings) -> str:
    now = datetime.now(timezone.utc)
    payload = _base_payload(claims, REFRESH, now)
    payload["exp"] = now + timedelta(days=settings.refresh_ttl_days)
    payload["iss"] = settings.issuer
    payload["aud"] = settings.audience
    return jwt.encode(payload, settings.secret, algorithm=settings.algorithm)


def verify_token(token: str, settings: TokenSettings, kind: str = ACCESS) -> TokenClaims:
    """
    Decode and check a token of the given kind.

    Bad signature, malformed structure, expiry, wrong issuer/audience and
    wrong kind all raise the same InvalidToken.
    """
    options = {"require": ["exp", "sub"]}
    kwargs = {}
    if kind == REFRESH:
        kwargs = {"issuer": settings.issuer, "audience": settings.audience}
    try:
        payload = jwt.decode(
            token,
            settings.secret,
            algorithms=[settings.algorithm],
            options=options,
            **kwargs,
        )
    except jwt.PyJWTError as exc:
        raise InvalidToken() from exc

    if payload.get("type") != kind:
        raise InvalidToken()
    try:
        return TokenClaims(
            user_id=payload["sub"],
            email=payload["email"],
            role=Role(payload["role"]),
        )
    except (KeyError, ValueError) as exc:
        raise InvalidToken() from exc


def _base_payload(claims: TokenClaims, kind: str, now: datetime) -> dict:
    return {
        "sub": claims.user_id,
        "email": claims.email,
        "role": claims.role.value,
        "type": kind,
        "iat": now,
    }

"""
api/routes_auth.py — Signup, password login, token refresh, logout, current user.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends
from fastapi.responses import JSONResponse

from ..auth.models import User
from ..auth.passwords import hash_password
from ..auth.token_utils import REFRESH, issue_access_token, issue_refresh_token, verify_token
from ..core.config import REFRESH_COOKIE_NAME, TokenSettings, cookie_secure
from ..core.errors import AccountDeactivated, AuthenticationError, InvalidToken
from .auth import authenticate, claims_for, create_user, get_user_by_id, record_login
from .dependencies import get_current_user, get_token_settings
from .dto import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    RefreshResponse,
    SignupRequest,
    SignupResponse,
    UserOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _set_refresh_cookie(response: JSONResponse, token: str, settings: TokenSettings) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=cookie_secure(),
        samesite="strict",
        max_age=settings.refresh_ttl_days * 86_400,
        path="/",
    )


# ── Routes ────────────────────────────────────────────────────────────────────

@router.post("/api/auth/signup", status_code=201, response_model=SignupResponse)
def signup(body: SignupRequest):
    user = create_user(
        email=body.email,
        password_hash=hash_password(body.password),
        role=body.role,
        name=body.name,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return SignupResponse(user=UserOut.of(user))


@router.post("/api/auth/login")
def login(body: LoginRequest, settings: TokenSettings = Depends(get_token_settings)):
    user = authenticate(body.email, body.password)
    record_login(user)
    claims = claims_for(user)
    payload = LoginResponse(
        user=UserOut.of(user),
        access_token=issue_access_token(claims, settings),
    )
    resp = JSONResponse(payload.model_dump(mode="json"))
    _set_refresh_cookie(resp, issue_refresh_token(claims, settings), settings)
    logger.info("Login user id=%s", user.id)
    return resp


@router.post("/api/auth/refresh", response_model=RefreshResponse)
def refresh(
    refresh_token: Optional[str] = Cookie(default=None, alias=REFRESH_COOKIE_NAME),
    settings: TokenSettings = Depends(get_token_settings),
):
    if not refresh_token:
        raise AuthenticationError("Refresh token not found.")
    claims = verify_token(refresh_token, settings, REFRESH)
    user = get_user_by_id(claims.user_id)
    if user is None:
        raise InvalidToken("User not found.")
    if not user.is_active:
        raise AccountDeactivated()
    return RefreshResponse(access_token=issue_access_token(claims_for(user), settings))


@router.post("/api/auth/logout")
async def logout():
    resp = JSONResponse({"message": "Logged out successfully"})
    resp.delete_cookie(key=REFRESH_COOKIE_NAME, path="/")
    return resp


@router.get("/api/me", response_model=MeResponse)
async def me(user: User = Depends(get_current_user)):
    return MeResponse(user=UserOut.of(user))

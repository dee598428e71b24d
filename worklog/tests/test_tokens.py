"""
test_tokens.py — Access/refresh token issue and verification.
"""
from __future__ import annotations

import dataclasses
import importlib

import pytest

from worklog.auth.models import Role, TokenClaims
from worklog.auth.token_utils import (
    ACCESS,
    REFRESH,
    issue_access_token,
    issue_refresh_token,
    verify_token,
)
from worklog.core.config import load_token_settings
from worklog.core.errors import InvalidToken

CLAIMS = TokenClaims(user_id="user-001", email="ana@example.com", role=Role.EDITOR)


def test_access_token_round_trips(token_settings):
    token = issue_access_token(CLAIMS, token_settings)
    assert verify_token(token, token_settings) == CLAIMS


def test_refresh_token_round_trips(token_settings):
    token = issue_refresh_token(CLAIMS, token_settings)
    assert verify_token(token, token_settings, REFRESH) == CLAIMS


def test_expired_token_is_invalid(token_settings):
    expired = dataclasses.replace(token_settings, access_ttl_minutes=-1)
    token = issue_access_token(CLAIMS, expired)
    with pytest.raises(InvalidToken):
        verify_token(token, token_settings)


def test_token_signed_with_other_secret_is_invalid(token_settings):
    other = dataclasses.replace(token_settings, secret="another-secret-key-with-32-bytes-min")
    token = issue_access_token(CLAIMS, other)
    with pytest.raises(InvalidToken):
        verify_token(token, token_settings)


def test_tampered_payload_is_invalid(token_settings):
    token = issue_access_token(CLAIMS, token_settings)
    admin = issue_access_token(dataclasses.replace(CLAIMS, role=Role.ADMIN), token_settings)
    header, _, signature = token.split(".")
    forged = ".".join([header, admin.split(".")[1], signature])
    with pytest.raises(InvalidToken):
        verify_token(forged, token_settings)


def test_garbage_is_invalid(token_settings):
    with pytest.raises(InvalidToken):
        verify_token("not-a-jwt", token_settings)


def test_refresh_token_rejected_as_access(token_settings):
    token = issue_refresh_token(CLAIMS, token_settings)
    with pytest.raises(InvalidToken):
        verify_token(token, token_settings, ACCESS)


def test_access_token_rejected_as_refresh(token_settings):
    token = issue_access_token(CLAIMS, token_settings)
    with pytest.raises(InvalidToken):
        verify_token(token, token_settings, REFRESH)


def test_refresh_token_with_wrong_audience_is_invalid(token_settings):
    token = issue_refresh_token(CLAIMS, dataclasses.replace(token_settings, audience="someone-else"))
    with pytest.raises(InvalidToken):
        verify_token(token, token_settings, REFRESH)


def test_empty_secret_is_fatal(monkeypatch):
    monkeypatch.setattr("worklog.core.config.JWT_SECRET", "")
    with pytest.raises(RuntimeError):
        load_token_settings()


def test_unset_secret_stops_startup():
    from worklog.core import config

    try:
        with pytest.MonkeyPatch.context() as mp:
            mp.delenv("JWT_SECRET", raising=False)
            mp.setattr("dotenv.load_dotenv", lambda *a, **kw: False)
            importlib.reload(config)
            assert config.JWT_SECRET == ""
            with pytest.raises(RuntimeError):
                config.load_token_settings()
    finally:
        importlib.reload(config)

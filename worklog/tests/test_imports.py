"""
test_imports.py — Bulk user and entry import endpoints.
"""
from __future__ import annotations

from datetime import date

from worklog.api.auth import get_user_by_email
from worklog.core.entries import find_entry


def test_import_users(client, make_user):
    make_user("taken@example.com")
    resp = client.post(
        "/api/import/users",
        json={"users": [
            {"name": "Ana", "email": "ana@example.com", "password": "secret123", "role": "editor"},
            {"name": "Taken", "email": "taken@example.com", "password": "secret123"},
            {"name": "Short", "email": "short@example.com", "password": "1"},
            {"name": "NoMail", "password": "secret123"},
        ]},
    )
    assert resp.status_code == 200
    results = resp.json()["results"]
    assert results["users_created"] == 1
    assert len(results["errors"]) == 3
    assert get_user_by_email("ana@example.com") is not None

    login = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "secret123"})
    assert login.status_code == 200


def test_import_entries_creates_and_updates(client, make_user):
    ana = make_user("ana@example.com")
    first = client.post(
        "/api/import/data",
        json={"entries": [
            {"email": "ana@example.com", "date": "2025-02-03", "videos_completed": 9},
            {"email": "ghost@example.com", "date": "2025-02-03", "videos_completed": 9},
        ]},
    ).json()["results"]
    assert first["entries_created"] == 1
    assert first["errors"] == ["User not found for email: ghost@example.com"]

    second = client.post(
        "/api/import/data",
        json={"entries": [
            {"email": "ana@example.com", "date": "2025-02-03", "videos_completed": 15, "notes": "recount"},
            {"email": "ana@example.com", "date": "2025-02-04", "videos_completed": -3},
        ]},
    ).json()["results"]
    assert second["entries_updated"] == 1
    assert second["entries_created"] == 0
    assert len(second["errors"]) == 1

    entry = find_entry(ana.id, date(2025, 2, 3))
    assert entry.videos_completed == 15
    assert entry.productivity_score == 100
    assert entry.notes == "recount"
    assert entry.is_completed is True

"""
test_api_entries.py — Entry endpoints: ownership, validation mapping, batch.
"""
from __future__ import annotations

import pytest


@pytest.fixture
def editor_headers(make_user, login):
    make_user("ed@example.com")
    return login("ed@example.com")


def _create(client, headers, **fields):
    body = {"date": "2025-03-03", "videos_completed": 8, **fields}
    return client.post("/api/entries", json=body, headers=headers)


def test_entries_require_auth(client):
    assert client.get("/api/entries").status_code == 401
    assert client.post("/api/entries", json={"date": "2025-03-03"}).status_code == 401


def test_create_entry_returns_derived_fields(client, editor_headers):
    resp = _create(
        client, editor_headers,
        shift_start="2025-03-03T09:00:00Z",
        shift_end="2025-03-03T17:30:00Z",
    )
    assert resp.status_code == 201
    entry = resp.json()["entry"]
    assert entry["productivity_score"] == 53
    assert entry["total_hours"] == 8.5
    assert entry["date"] == "2025-03-03"


def test_duplicate_day_is_409(client, editor_headers):
    assert _create(client, editor_headers).status_code == 201
    resp = _create(client, editor_headers, videos_completed=3)
    assert resp.status_code == 409
    assert resp.json()["error"] == "DUPLICATE_ENTRY"


def test_invalid_entry_is_400_with_details(client, editor_headers):
    resp = _create(client, editor_headers, videos_completed=-2, target_videos=0)
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "INVALID_INPUT"
    assert len(body["details"]) == 2


def test_malformed_body_is_validation_error(client, editor_headers):
    resp = client.post("/api/entries", json={"videos_completed": "lots"}, headers=editor_headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION_ERROR"
    assert resp.json()["details"]


def test_get_update_delete_own_entry(client, editor_headers):
    entry_id = _create(client, editor_headers).json()["entry"]["id"]

    assert client.get(f"/api/entries/{entry_id}", headers=editor_headers).status_code == 200

    resp = client.put(
        f"/api/entries/{entry_id}",
        json={"videos_completed": 15, "mood": "excellent", "unknown_field": 1},
        headers=editor_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["entry"]["productivity_score"] == 100
    assert resp.json()["entry"]["mood"] == "excellent"

    assert client.delete(f"/api/entries/{entry_id}", headers=editor_headers).status_code == 200
    assert client.get(f"/api/entries/{entry_id}", headers=editor_headers).status_code == 404


def test_other_users_entry_is_404(client, editor_headers, make_user, login):
    entry_id = _create(client, editor_headers).json()["entry"]["id"]
    make_user("snoop@example.com")
    snoop = login("snoop@example.com")
    assert client.get(f"/api/entries/{entry_id}", headers=snoop).status_code == 404
    assert client.delete(f"/api/entries/{entry_id}", headers=snoop).status_code == 404
    assert client.get(f"/api/entries/{entry_id}", headers=editor_headers).status_code == 200


def test_list_entries_paginates(client, editor_headers):
    for day in range(1, 6):
        _create(client, editor_headers, date=f"2025-03-0{day}", videos_completed=day)
    resp = client.get("/api/entries", params={"limit": 2, "page": 2}, headers=editor_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_entries"] == 5
    assert data["total_pages"] == 3
    assert [e["date"] for e in data["entries"]] == ["2025-03-03", "2025-03-02"]


def test_list_entries_bad_sort_is_400(client, editor_headers):
    resp = client.get("/api/entries", params={"sort_by": "password"}, headers=editor_headers)
    assert resp.status_code == 400


def test_bulk_endpoint_reports_per_item(client, editor_headers):
    _create(client, editor_headers, date="2025-03-02")
    resp = client.post(
        "/api/entries/bulk",
        json={"entries": [
            {"date": "2025-03-01", "videos_completed": 4},
            {"date": "2025-03-02", "videos_completed": 4},
            {"date": "2025-03-03", "videos_completed": -1},
        ]},
        headers=editor_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["summary"] == {"total": 3, "added": 1, "skipped": 1, "errors": 1}


def test_bulk_endpoint_rejects_empty_batch(client, editor_headers):
    resp = client.post("/api/entries/bulk", json={"entries": []}, headers=editor_headers)
    assert resp.status_code == 400

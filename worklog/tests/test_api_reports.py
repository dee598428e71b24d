"""
test_api_reports.py — Export, analytics and dashboard endpoints.
"""
from __future__ import annotations

from datetime import date, timedelta

import pytest

from worklog.core.reporting import EXCEL_MEDIA_TYPE


@pytest.fixture
def editor_headers(make_user, login):
    make_user("ed@example.com")
    return login("ed@example.com")


def _seed(client, headers, days_ago_and_videos):
    today = date.today()
    for days_ago, videos in days_ago_and_videos:
        day = today - timedelta(days=days_ago)
        resp = client.post(
            "/api/entries",
            json={
                "date": day.isoformat(),
                "videos_completed": videos,
                "notes": 'Finished "intro", fixed audio',
                "challenges": ["render queue"],
            },
            headers=headers,
        )
        assert resp.status_code == 201


def test_export_without_entries_is_404(client, editor_headers):
    resp = client.get("/api/export", headers=editor_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "NO_DATA"


def test_export_json_with_analytics(client, editor_headers):
    _seed(client, editor_headers, [(1, 12), (2, 6)])
    resp = client.get(
        "/api/export", params={"format": "json", "includeAnalytics": "true"}, headers=editor_headers
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["email"] == "ed@example.com"
    assert body["export_info"]["total_entries"] == 2
    assert body["analytics"]["summary"]["total_videos"] == 18
    assert body["entries"][0]["date"] < body["entries"][1]["date"]


def test_export_csv_attachment(client, editor_headers):
    _seed(client, editor_headers, [(1, 12)])
    resp = client.get("/api/export", params={"format": "csv"}, headers=editor_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=\"productivity-export-" in resp.headers["content-disposition"]
    assert '"Finished ""intro"", fixed audio"' in resp.text


def test_export_excel_attachment(client, editor_headers):
    _seed(client, editor_headers, [(1, 12)])
    resp = client.get("/api/export", params={"format": "excel"}, headers=editor_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith(EXCEL_MEDIA_TYPE)
    assert resp.headers["content-disposition"].endswith('.xlsx"')
    assert resp.text.split("\n")[0].count("\t") == 7


def test_export_unknown_format_is_400(client, editor_headers):
    resp = client.get("/api/export", params={"format": "pdf"}, headers=editor_headers)
    assert resp.status_code == 400


def test_export_half_range_is_400(client, editor_headers):
    _seed(client, editor_headers, [(1, 12)])
    resp = client.get("/api/export", params={"start_date": "2025-01-01"}, headers=editor_headers)
    assert resp.status_code == 400


def test_analytics_for_week(client, editor_headers):
    _seed(client, editor_headers, [(1, 15), (2, 9), (40, 1)])
    resp = client.get("/api/analytics", params={"period": "week"}, headers=editor_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["period"] == "week"
    summary = data["analytics"]["summary"]
    assert summary["total_entries"] == 2
    assert summary["total_videos"] == 24
    assert data["analytics"]["trends"]["most_productive_hour"] == 9


def test_analytics_without_entries_is_empty(client, editor_headers):
    resp = client.get("/api/analytics", headers=editor_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["analytics"] is None
    assert data["message"] == "No data available for the specified period"
    assert data["date_range"]["end_date"] == date.today().isoformat()


def test_dashboard_rollup(client, editor_headers):
    _seed(client, editor_headers, [(1, 15), (2, 9)])
    resp = client.get("/api/dashboard", params={"period": "week"}, headers=editor_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["user_stats"]["total_videos"] == 24
    assert data["user_stats"]["entries_count"] == 2
    assert len(data["recent_entries"]) == 2
    assert len(data["productivity_trends"]) == 2
    assert data["mood_insights"][0]["mood"] == "good"
    assert data["goal_progress"] is None


def test_dashboard_bad_period_is_400(client, editor_headers):
    assert client.get("/api/dashboard", params={"period": "decade"}, headers=editor_headers).status_code == 400


def test_export_omits_analytics_unless_requested(client, editor_headers):
    _seed(client, editor_headers, [(1, 12)])
    resp = client.get("/api/export", params={"format": "json"}, headers=editor_headers)
    assert "analytics" not in resp.json()

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from tests.conftest import FixedSource


@pytest.fixture
def client(settings, source):
    with TestClient(create_app(settings, source=source)) as c:
        yield c


@pytest.fixture
def small_client(settings, three_users):
    with TestClient(create_app(settings, source=FixedSource(three_users))) as c:
        yield c


def test_state_after_startup(client) -> None:
    body = client.get("/state").json()
    assert body["status"] == "ready"
    assert body["is_loading"] is False
    assert body["error"] is None
    assert body["counts"] == {"users": 50, "filtered_users": 50, "reports": 4}
    assert body["applied_filter"] == {"date_from": None, "date_to": None, "status": "all", "search_term": ""}


def test_apply_filter_and_export_agree(small_client) -> None:
    resp = small_client.post("/filters/apply", json={"status": "active", "date_from": "", "search_term": ""})
    assert resp.status_code == 200
    body = resp.json()
    assert body["committed"] is True
    assert body["overview"]["base_metrics"]["total_revenue"] == 300
    assert [c["value"] for c in body["overview"]["summary"]] == ["$300", "2", "0", "100.0%"]

    csv_resp = small_client.get("/export/csv")
    assert csv_resp.headers["content-type"].startswith("text/csv")
    assert "users-data-" in csv_resp.headers["content-disposition"]
    rows = csv_resp.text.splitlines()[1:]
    assert len(rows) == 2
    assert sum(int(r.split('","')[3].lstrip("$")) for r in rows) == 300


def test_invalid_filter_body_is_rejected(client) -> None:
    assert client.post("/filters/apply", json={"status": "archived"}).status_code == 422


def test_reset_and_draft(client) -> None:
    client.post("/filters/apply", json={"status": "pending"})
    draft = client.put("/filters/draft", json={"search_term": "jane"}).json()
    assert draft["draft_filter"]["search_term"] == "jane"
    assert client.get("/state").json()["applied_filter"]["status"] == "pending"
    body = client.post("/filters/reset").json()
    assert body["state"]["applied_filter"]["status"] == "all"
    assert body["state"]["draft_filter"]["search_term"] == ""


def test_refresh_keeps_filter(client) -> None:
    client.post("/filters/apply", json={"status": "inactive"})
    body = client.post("/refresh").json()
    assert body["state"]["applied_filter"]["status"] == "inactive"
    assert body["state"]["error"] is None


def test_empty_filter_overview(client) -> None:
    client.post("/filters/apply", json={"search_term": "zzz-nobody"})
    overview = client.get("/overview").json()
    assert [c["value"] for c in overview["summary"]] == ["$0", "0", "0", "0%"]
    assert overview["insights"] == []
    analytics = client.get("/analytics").json()["analytics"]
    assert all(p["sessions"] == 0 for p in analytics)


def test_charts_payload(client) -> None:
    body = client.get("/charts").json()
    assert len(body["trend"]) == 7
    assert [d["name"] for d in body["devices"]] == ["Desktop", "Mobile", "Tablet", "Other"]
    assert "$schema" in body["charts"]["revenue_trend"]
    assert body["summary"]["devices"]["top_device"] == "Desktop"


def test_users_table(client) -> None:
    body = client.get("/users", params={"per_page": 10, "sort_field": "email"}).json()
    assert body["total"] == 50
    assert len(body["rows"]) == 10
    emails = [r["email"] for r in body["rows"]]
    assert emails == sorted(emails)


def test_reports_roundtrip(client) -> None:
    resp = client.post("/reports", json={"title": "Churn Review", "last_generated": "2024-06-15"})
    assert resp.status_code == 201
    assert resp.json()["id"] == 5
    ids = [r["id"] for r in client.get("/reports").json()["reports"]]
    assert ids == [1, 2, 3, 4, 5]


def test_text_report_export(small_client) -> None:
    resp = small_client.get("/export/report")
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.text.startswith("Insights Dashboard - User Report")
    assert "Total Users: 3" in resp.text


def test_auto_refresh_toggle(client) -> None:
    assert client.post("/auto-refresh", json={"enabled": True, "interval": 60}).json() == {"auto_refresh": True}
    assert client.get("/state").json()["auto_refresh"] is True
    assert client.post("/auto-refresh", json={"enabled": False}).json() == {"auto_refresh": False}


def test_apply_trims_search_term(small_client) -> None:
    body = small_client.post("/filters/apply", json={"search_term": "doe ", "status": "all"}).json()
    assert body["state"]["applied_filter"]["search_term"] == "doe"
    assert body["state"]["counts"]["filtered_users"] == 1
    draft = small_client.put("/filters/draft", json={"search_term": "  jane"}).json()
    assert draft["draft_filter"]["search_term"] == "jane"


def test_users_table_local_filters_and_numeric_sort(small_client) -> None:
    body = small_client.get("/users", params={"country": "USA", "sort_field": "revenue", "sort_direction": "desc"}).json()
    assert [r["revenue"] for r in body["rows"]] == [300, 100]
    assert body["countries"] == ["UK", "USA"]
    assert body["per_page"] == 10
    body = small_client.get("/users", params={"status": "inactive"}).json()
    assert [r["name"] for r in body["rows"]] == ["Bob Johnson"]
    assert small_client.get("/users", params={"status": "archived"}).status_code == 422


def test_export_failure_returns_error_body(small_client, monkeypatch) -> None:
    dashboard = small_client.app.state.dashboard

    def boom():
        raise RuntimeError("export broke")

    monkeypatch.setattr(dashboard, "get_export_snapshot", boom)
    for path in ("/export/csv", "/export/report"):
        resp = small_client.get(path)
        assert resp.status_code == 500
        assert resp.json() == {"error": "export broke", "type": "RuntimeError"}

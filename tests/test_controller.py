from __future__ import annotations

import importlib
from datetime import datetime

import pytest

from src.timekeeper.timekeeper.attendance import controller as attendance_controller
from src.timekeeper.timekeeper.attendance import monitoring as monitoring_module
from src.timekeeper.timekeeper.attendance import service as attendance_service_module
from src.timekeeper.timekeeper.container import build_container
from src.timekeeper.timekeeper.main import create_app

NOW = datetime(2025, 3, 3, 10, 20)
CRON_HEADERS = {"Authorization": "Bearer test-cron-secret"}


@pytest.fixture
def app(users, attendance, activity_repo, notifier, monkeypatch):
    monkeypatch.setattr(attendance_service_module, "now_local", lambda: NOW)
    monkeypatch.setattr(attendance_controller, "now_local", lambda: NOW)
    monkeypatch.setattr(monitoring_module, "now_local", lambda: NOW)

    settings = importlib.import_module("config.testing")
    container = build_container(
        settings, users_repo=users, attendance_repo=attendance, activity_repo=activity_repo, notifier=notifier
    )
    app = create_app(settings=settings, container=container)
    yield app
    container.dispatcher.shutdown()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, username: str):
    resp = client.post("/login", json={"username": username, "password": f"{username}-pw"})
    assert resp.status_code == 200
    return resp


def test_login_and_logout(client):
    resp = login(client, "alice")
    assert resp.get_json()["user"] == {"user_id": 10, "full_name": "Alice", "role": "employee"}
    assert client.get("/api/me").get_json()["user_id"] == 10

    client.post("/logout")
    assert client.get("/api/me").status_code == 401


def test_bad_login_is_401(client):
    resp = client.post("/login", json={"username": "alice", "password": "wrong"})

    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Invalid username or password"}


def test_requires_session(client):
    assert client.post("/api/attendance/clock-in", json={"mode": "OFFICE"}).status_code == 401


def test_clock_in_flow(client):
    login(client, "alice")

    resp = client.post("/api/attendance/clock-in", json={"mode": "OFFICE"})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["attendance"]["status"] == "Late"
    assert body["attendance"]["late_sign_in_minutes"] == 20
    assert body["attendance"]["login_time"] == "2025-03-03T10:20:00"

    again = client.post("/api/attendance/clock-in", json={"mode": "OFFICE"})
    assert again.status_code == 409
    assert again.get_json() == {"error": "Already clocked in today"}

    today = client.get("/api/attendance/today").get_json()
    assert today["attendance"]["mode"] == "OFFICE"


def test_error_statuses(client):
    login(client, "alice")
    assert client.post("/api/attendance/clock-in", json={"mode": "MOON"}).status_code == 400
    assert client.post("/api/attendance/clock-out").status_code == 409
    assert client.post("/api/attendance/wfh-activity").status_code == 404

    client.post("/logout")
    login(client, "manager")
    assert client.post("/api/attendance/clock-in", json={}).status_code == 403


def test_wfh_heartbeat_and_metrics(client):
    login(client, "alice")
    client.post("/api/attendance/clock-in", json={"mode": "WFH"})

    beat = client.post("/api/attendance/wfh-activity")
    assert beat.status_code == 200
    assert beat.get_json()["wfh_activity_pings"] == 2

    snapshot = client.get("/api/attendance/wfh-activity").get_json()
    assert snapshot["attendance"]["mode"] == "WFH"
    assert "activity_score" in snapshot["metrics"]


def test_listing(client):
    login(client, "alice")
    client.post("/api/attendance/clock-in", json={"mode": "OFFICE"})

    resp = client.get("/api/attendance?start=2025-03-03&end=2025-03-03")
    body = resp.get_json()
    assert resp.status_code == 200
    assert [r["user_id"] for r in body["attendance"]] == [10]
    assert body["summary"]["office_lates"] == 1

    assert client.get("/api/attendance?start=03-03-2025").status_code == 400
    assert client.get("/api/attendance?user_id=abc").status_code == 400


def test_admin_routes(client, attendance):
    login(client, "alice")
    record_id = client.post("/api/attendance/clock-in", json={"mode": "OFFICE"}).get_json()["attendance"][
        "attendance_id"
    ]
    assert client.post(f"/api/admin/attendance/{record_id}/mode", json={"mode": "WFH"}).status_code == 403
    client.post("/logout")

    login(client, "admin")
    converted = client.post(f"/api/admin/attendance/{record_id}/mode", json={"mode": "WFH"})
    assert converted.status_code == 200
    assert converted.get_json()["attendance"]["mode"] == "WFH"
    assert converted.get_json()["attendance"]["edited_by"] == 1

    assert client.post("/api/admin/attendance/999/mode", json={"mode": "WFH"}).status_code == 404
    assert client.post("/api/admin/attendance/bulk-mark", json={"mode": "OFFICE"}).status_code == 400

    bulk = client.post("/api/admin/attendance/bulk-mark", json={"date": "2025-03-04", "mode": "LEAVE"})
    assert bulk.status_code == 200
    assert bulk.get_json() == {"success_count": 2, "error_count": 0, "errors": []}


def test_cron_endpoints_require_secret(client):
    assert client.post("/api/cron/wfh-inactivity-check").status_code == 401
    assert client.post("/api/cron/attendance-reminder", headers={"Authorization": "Bearer nope"}).status_code == 401

    sweep = client.post("/api/cron/wfh-inactivity-check", headers=CRON_HEADERS)
    assert sweep.status_code == 200
    assert sweep.get_json()["employees_checked"] == 0

    reminders = client.post("/api/cron/attendance-reminder", headers=CRON_HEADERS)
    assert reminders.status_code == 200
    assert "notifications_dispatched" in reminders.get_json()

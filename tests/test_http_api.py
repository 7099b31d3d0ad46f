from datetime import timedelta

import pytest

from timeclock.common.datetime_utils import civil_day, now_utc
from timeclock.main import create_app


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    app.config["TESTING"] = True
    return app.test_client()


def _login(client, user_id=1, role="worker"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


def test_requires_session(client):
    resp = client.post("/api/attendance/check-in")
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_check_in_then_duplicate_asks_for_refresh(client):
    _login(client)

    first = client.post("/api/attendance/check-in")
    assert first.status_code == 201
    assert first.get_json()["record"]["check_out_time"] is None

    second = client.post("/api/attendance/check-in")
    body = second.get_json()
    assert second.status_code == 409
    assert body["error"] == "AlreadyCheckedIn"
    assert body["refresh"] is True

    today = client.get("/api/attendance/today").get_json()
    assert today["record"]["attendance_id"] == first.get_json()["record"]["attendance_id"]


def test_check_out_without_session_is_conflict(client):
    _login(client)
    resp = client.post("/api/attendance/check-out")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "NoActiveSession"


def test_bad_date_query_is_400(client):
    _login(client)
    assert client.get("/api/attendance?start=2024-13-01").status_code == 400
    assert client.get("/api/attendance/summary?start=2024-01-10&end=2024-01-01").status_code == 400


def test_correction_flow_over_http(client, container):
    yesterday = civil_day(now_utc(), container.policy.tz) - timedelta(days=1)
    _login(client, user_id=1)

    created = client.post(
        "/api/corrections",
        json={
            "target_day": yesterday.isoformat(),
            "missing_field": "check_in",
            "requested_time": "09:00",
            "reason": "Phone died",
        },
    )
    assert created.status_code == 201
    request_id = created.get_json()["request"]["request_id"]

    assert client.get("/api/corrections/pending").status_code == 403

    _login(client, user_id=99, role="approver")
    pending = client.get("/api/corrections/pending").get_json()["requests"]
    assert [r["request_id"] for r in pending] == [request_id]

    approved = client.post(f"/api/corrections/{request_id}/approve", json={"remarks": "ok"})
    assert approved.status_code == 200
    assert approved.get_json()["record"]["work_date"] == yesterday.isoformat()

    again = client.post(f"/api/corrections/{request_id}/reject")
    assert again.status_code == 404


def test_correction_for_today_is_400(client, container):
    _login(client)
    resp = client.post(
        "/api/corrections",
        json={
            "target_day": civil_day(now_utc(), container.policy.tz).isoformat(),
            "missing_field": "check_out",
            "requested_time": "18:00",
            "reason": "x",
        },
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "ValidationError"


def test_check_in_with_geolocation(client):
    _login(client)

    resp = client.post("/api/attendance/check-in", json={"geolocation": {"latitude": 14.6, "longitude": 121.0}})

    assert resp.status_code == 201
    assert resp.get_json()["record"]["geolocation"] == {"latitude": 14.6, "longitude": 121.0}


def test_check_in_with_bad_geolocation_is_400(client):
    _login(client)
    resp = client.post("/api/attendance/check-in", json={"geolocation": "Manila"})
    assert resp.status_code == 400


def test_non_string_correction_fields_are_400(client, container):
    yesterday = civil_day(now_utc(), container.policy.tz) - timedelta(days=1)
    _login(client)

    resp = client.post(
        "/api/corrections",
        json={"target_day": yesterday.isoformat(), "missing_field": "check_out", "requested_time": 18, "reason": 5},
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "ValidationError"

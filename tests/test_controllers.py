from __future__ import annotations

import csv
import io
from datetime import datetime, timedelta

import pytest

from conftest import brk, closed_session
from timekeeping.main import create_app


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    app.config["TESTING"] = True
    return app


def _login(client, user_id=1, role="staff"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


@pytest.fixture
def client(app):
    c = app.test_client()
    _login(c)
    return c


@pytest.fixture
def admin(app):
    c = app.test_client()
    _login(c, user_id=99, role="admin")
    return c


def test_requires_login(app):
    resp = app.test_client().post("/api/attendance/clock-in")

    assert resp.status_code == 401


def test_clock_in_break_and_clock_out_flow(client, clock):
    resp = client.post("/api/attendance/clock-in")
    assert resp.status_code == 201
    assert resp.get_json()["session"]["status"] == "active"

    clock.advance(hours=4)
    resp = client.post("/api/attendance/breaks/start", json={"break_type": "lunch"})
    assert resp.status_code == 201
    assert resp.get_json()["break"]["label"] == "Lunch Break"

    clock.advance(minutes=10)
    live = client.get("/api/attendance/live").get_json()
    assert live["status"] == "On Lunch Break"
    assert live["worked"] == "04:10:00"
    assert live["open_break_elapsed"] == "00:10:00"

    clock.advance(minutes=35)
    resp = client.post("/api/attendance/breaks/end")
    assert resp.get_json()["message"] == "Lunch Break ended (45m)"

    clock.advance(hours=3, minutes=15)
    resp = client.post("/api/attendance/clock-out")
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["session"]["status"] == "completed"
    assert body["session"]["total_hours"] == 7.25

    assert client.get("/api/attendance/live").get_json()["status"] == "Not Clocked In"


def test_conflicts_map_to_409(client):
    client.post("/api/attendance/clock-in")

    resp = client.post("/api/attendance/clock-in")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "AlreadyClockedIn"

    resp = client.post("/api/attendance/breaks/end")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "NoOpenBreak"


def test_clock_out_when_not_clocked_in(client):
    resp = client.post("/api/attendance/clock-out")

    assert resp.status_code == 409
    assert resp.get_json()["success"] is False


def test_invalid_break_type_is_400(client, clock):
    client.post("/api/attendance/clock-in")
    clock.advance(minutes=5)

    resp = client.post("/api/attendance/breaks/start", json={"break_type": "nap"})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "ValidationError"


def test_clock_out_preview(client, clock):
    client.post("/api/attendance/clock-in")
    clock.advance(hours=6, minutes=30)

    body = client.get("/api/attendance/clock-out/preview").get_json()

    assert body["is_early"] is True
    assert body["shortfall"] == "01:30:00"
    assert body["shortfall_display"] == "1h 30m"


def test_history_is_scoped_to_the_caller(client, sessions_repo, fixed_now):
    day = fixed_now - timedelta(days=1)
    sessions_repo.add(closed_session(1, 1, day, day + timedelta(hours=8), total_hours=8.0))
    sessions_repo.add(closed_session(2, 2, day, day + timedelta(hours=6), total_hours=6.0))

    body = client.get("/api/attendance/history?period=week&employee_id=2").get_json()

    assert [s["session_id"] for s in body["sessions"]] == [1]
    assert body["total_hours"] == 8.0

    assert client.get("/api/attendance/history?period=year").status_code == 400


def test_correct_is_admin_only(client, admin, sessions_repo, fixed_now):
    day = fixed_now - timedelta(days=1)
    sessions_repo.add(closed_session(1, 1, day, day + timedelta(hours=8)))
    payload = {"clock_out": (day + timedelta(hours=9)).isoformat(), "note": "late fix"}

    assert client.post("/api/attendance/1/correct", json=payload).status_code == 403

    resp = admin.post("/api/attendance/1/correct", json=payload)
    assert resp.status_code == 200
    assert resp.get_json()["session"]["status"] == "corrected"
    assert resp.get_json()["session"]["total_hours"] == 9.0

    assert admin.post("/api/attendance/42/correct", json=payload).status_code == 404


def test_break_report_and_csv(admin, client, sessions_repo, breaks_repo, fixed_now):
    start = fixed_now - timedelta(hours=1)
    sessions_repo.add(closed_session(1, 1, start, start + timedelta(hours=2)))
    breaks_repo.add(brk(1, 1, "coffee", start + timedelta(minutes=10), start + timedelta(minutes=30)))

    assert client.get("/api/reports/breaks").status_code == 403

    body = admin.get("/api/reports/breaks?preset=today").get_json()
    assert body["summary"]["exceeded"] == 1
    assert body["rows"][0]["break_status"] == "Over Limit"
    assert body["rows"][0]["other"] == "20m"

    resp = admin.get("/api/reports/breaks.csv?preset=today")
    assert resp.mimetype == "text/csv"
    rows = list(csv.DictReader(io.StringIO(resp.data.decode("utf-8-sig"))))
    assert rows[0]["session_id"] == "1"
    assert rows[0]["breaks"] == "Coffee Break 08:10-08:30"


def test_custom_range_needs_valid_dates(admin):
    resp = admin.get("/api/reports/breaks?preset=custom&from=2026-02-01&to=nope")

    assert resp.status_code == 400


def test_timesheet_window(client, clock, sessions_repo):
    assert client.get("/api/reports/timesheet").get_json()["can_submit"] is False

    sessions_repo.add(closed_session(1, 1, datetime(2026, 2, 3, 9), datetime(2026, 2, 3, 17), total_hours=8.0))
    sessions_repo.add(closed_session(2, 1, datetime(2026, 2, 20, 9), datetime(2026, 2, 20, 13), total_hours=4.0))
    clock.now = datetime(2026, 2, 15, 10, 0)

    body = client.get("/api/reports/timesheet").get_json()
    assert body["can_submit"] is True
    assert body["period_start"] == "2026-02-01"
    assert body["total_hours"] == 8.0


def test_storage_failure_maps_to_503(monkeypatch, container, client):
    from timekeeping.core.exceptions import PersistenceFailure

    def broken(employee_id):
        raise PersistenceFailure("Database connection failed")

    monkeypatch.setattr(container.sessions_repo, "get_active_for_employee", broken)

    resp = client.get("/api/attendance/live")

    assert resp.status_code == 503
    assert resp.get_json()["error"] == "PersistenceFailure"


def test_session_detail_hides_other_employees(client, admin, sessions_repo, breaks_repo, fixed_now):
    day = fixed_now - timedelta(days=1)
    sessions_repo.add(closed_session(5, 2, day, day + timedelta(hours=8)))
    breaks_repo.add(brk(1, 5, "personal", day + timedelta(hours=1), day + timedelta(hours=1, minutes=5)))

    assert client.get("/api/attendance/5").status_code == 404

    body = admin.get("/api/attendance/5").get_json()
    assert body["session"]["employee_id"] == 2
    assert [b["label"] for b in body["breaks"]] == ["Personal Break"]

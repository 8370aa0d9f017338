from __future__ import annotations

import base64
from datetime import date, datetime, timedelta

import pytest

from src.geo_attendance.geo_attendance.main import create_app
from src.geo_attendance.geo_attendance.shifts.model import NewEntry
from tests.fakes import OFFICE, make_world, north_of, png_bytes

PHOTO = "data:image/png;base64," + base64.b64encode(png_bytes()).decode("ascii")


@pytest.fixture()
def world(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    container, shifts, leaves = make_world()
    app = create_app(container=container)
    return app, app.test_client(), shifts, leaves


def _punch(client, point=OFFICE, **extra):
    body = {"employee_id": 1, "lat": point.lat, "lng": point.lng, "photo": PHOTO}
    body.update(extra)
    return client.post("/api/punches", json=body)


def _login_admin(client):
    with client.session_transaction() as sess:
        sess["role"] = "admin"
        sess["username"] = "admin"


def test_app_uses_testing_settings(world):
    app, _, _, _ = world
    assert app.config["TESTING"] is True
    assert app.secret_key == "test-secret"


def test_punch_entry_then_exit(world):
    _, client, shifts, _ = world

    res = _punch(client)
    assert res.status_code == 201
    assert res.get_json()["kind"] == "entrada"
    assert "compliance_tier" in res.get_json()

    res = _punch(client)
    assert res.status_code == 201
    assert res.get_json()["kind"] == "salida"
    assert len(shifts.records) == 1

    res = client.get(f"/api/employees/1/shift-state?date={date.today():%Y-%m-%d}")
    assert res.get_json()["state"] == "COMPLETE"


def test_out_of_zone_punch_returns_422(world):
    _, client, shifts, _ = world
    res = _punch(client, point=north_of(OFFICE, 150))
    body = res.get_json()
    assert res.status_code == 422
    assert body["success"] is False
    assert body["location_name"] == "Oficina Principal"
    assert body["distance_meters"] == 150
    assert shifts.records == {}


def test_missing_sensor_data_is_retryable(world):
    _, client, _, _ = world
    res = client.post("/api/punches", json={"employee_id": 1, "photo": PHOTO})
    assert res.status_code == 503
    assert res.get_json()["retryable"] is True


def test_bad_employee_id_is_400(world):
    _, client, _, _ = world
    res = _punch(client, employee_id="abc")
    assert res.status_code == 400


def test_cross_day_confirmation_flow(world):
    _, client, shifts, _ = world
    yesterday = date.today() - timedelta(days=1)
    shift_id = shifts.create_entry(
        NewEntry(
            employee_id=1,
            work_date=yesterday,
            entry_time=datetime.combine(yesterday, datetime.min.time()) + timedelta(hours=22),
            entry_coords=OFFICE,
            entry_photo=None,
            minutes_late=0,
            compliance_tier=None,
            early_warning=False,
        )
    )

    res = _punch(client)
    body = res.get_json()
    assert res.status_code == 409
    assert body["needs_confirmation"] is True
    assert body["open_shift_id"] == shift_id

    res = client.post(f"/api/punches/pending/{body['token']}/confirm")
    assert res.status_code == 201
    assert res.get_json()["closed_previous_day"] is True
    assert not shifts.records[shift_id].is_open

    res = client.post(f"/api/punches/pending/{body['token']}/cancel")
    assert res.get_json()["discarded"] is False


def test_admin_routes_require_admin_role(world):
    _, client, _, _ = world
    assert client.get("/api/reports/fleet").status_code == 403
    assert client.post("/api/shifts/1/adjust", json={}).status_code == 403


def test_admin_adjust_and_justify(world):
    _, client, shifts, _ = world
    shift_id = _punch(client).get_json()["shift_id"]
    _login_admin(client)

    today = date.today()
    res = client.post(
        f"/api/shifts/{shift_id}/adjust",
        json={
            "entry_time": f"{today:%Y-%m-%d}T08:00",
            "exit_time": f"{today:%Y-%m-%d}T17:00",
            "justification": "Corrección de marcaje",
        },
    )
    assert res.status_code == 200
    shift = res.get_json()["shift"]
    assert shift["compliance_tier"] == "a_tiempo"
    assert shift["observations"].startswith("[Modificado por admin el ")

    res = client.post(f"/api/shifts/{shift_id}/adjust", json={"justification": ""})
    assert res.status_code == 400

    res = client.post(f"/api/shifts/{shift_id}/justification", json={"decision": "justificado", "notes": "ok"})
    assert res.get_json()["shift"]["justification"] == "justificado"


def test_statistics_and_fleet(world):
    _, client, _, _ = world
    _punch(client)
    res = client.get("/api/employees/1/statistics")
    stats = res.get_json()["statistics"]
    assert stats["total_days"] == 1

    _login_admin(client)
    res = client.get("/api/reports/fleet")
    assert res.status_code == 200
    assert len(res.get_json()["employees"]) == 3

    res = client.get("/api/reports/fleet?start=2025-03-03&end=2025-03-09")
    body = res.get_json()
    assert body["average_punctuality_percent"] == 0.0
    assert body["average_late_minutes"] == 0.0
    assert body["average_absences"] == 5.0


def test_leave_request_and_decision(world):
    _, client, _, leaves = world
    res = client.post("/api/leaves", json={"employee_id": 2, "kind": "permiso", "start_date": "2025-03-03"})
    assert res.status_code == 201
    leave_id = res.get_json()["leave_id"]

    assert client.post(f"/api/leaves/{leave_id}/decision", json={"approved": True}).status_code == 403
    _login_admin(client)
    assert client.post(f"/api/leaves/{leave_id}/decision", json={"approved": True}).status_code == 200
    assert leaves.get_by_id(leave_id).approval.value == "aprobado"


def test_nearest_location(world):
    _, client, _, _ = world
    res = client.get(f"/api/locations/nearest?lat={OFFICE.lat}&lng={OFFICE.lng}")
    assert res.get_json()["location"] == "Oficina Principal"

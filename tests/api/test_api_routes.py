from __future__ import annotations

import pytest

from src.org_manager.org_manager.main import create_app


@pytest.fixture
def app(container, people, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


def _login_as(client, employee):
    with client.session_transaction() as sess:
        sess["user_id"] = employee.employee_id
        sess["name"] = employee.name
        sess["role"] = employee.role.value


def test_login_sets_session_and_hides_password(client, people):
    res = client.post("/api/auth/login", json={"email": people.alice.email, "password": "secret123"})

    body = res.get_json()
    assert res.status_code == 200
    assert body["success"] is True
    assert body["data"]["name"] == "Alice"
    assert "passwordHash" not in body["data"]

    me = client.get("/api/auth/me").get_json()
    assert me["data"]["email"] == people.alice.email


def test_bad_login_is_401(client, people):
    res = client.post("/api/auth/login", json={"email": people.alice.email, "password": "nope"})

    assert res.status_code == 401
    assert res.get_json() == {"success": False, "message": "Invalid email or password"}


def test_protected_route_requires_login(client):
    res = client.get("/api/assets")

    assert res.status_code == 401
    assert res.get_json()["success"] is False


def test_role_gate_is_403(client, people):
    _login_as(client, people.alice)

    res = client.post("/api/assets", json={"name": "Laptop", "category": "Laptop"})

    assert res.status_code == 403


def test_assign_flow_over_http(client, people):
    _login_as(client, people.admin)
    created = client.post("/api/assets", json={"name": "Dell XPS", "category": "Laptop", "quantity": 5})
    asset = created.get_json()["data"]
    assert created.status_code == 201
    assert asset["assetCode"] == "AST00001"
    assert asset["quantityAssigned"] == 0

    res = client.post(
        "/api/assets/assign",
        json={"assetId": asset["assetId"], "employeeId": people.alice.employee_id, "quantityToAssign": 3},
    )
    body = res.get_json()
    assert res.status_code == 200
    assert body["message"] == "Asset assigned successfully. 2 unit(s) remaining."
    assert body["remaining"] == 2
    assert body["data"]["assignment"]["status"] == "Active"

    over = client.post(
        "/api/assets/assign",
        json={"assetId": asset["assetId"], "employeeId": people.bob.employee_id, "quantityToAssign": 3},
    )
    assert over.status_code == 400
    assert over.get_json()["message"] == "Only 2 unit(s) available. Cannot assign 3 unit(s)."

    no_target = client.post("/api/assets/assign", json={"assetId": asset["assetId"], "quantityToAssign": 1})
    assert no_target.get_json()["message"] == "Assign to an employee or provide a room."

    zero = client.post(
        "/api/assets/assign",
        json={"assetId": asset["assetId"], "employeeId": people.bob.employee_id, "quantityToAssign": 0},
    )
    assert zero.get_json()["message"] == "Quantity to assign must be at least 1."

    missing = client.get("/api/assets/999")
    assert missing.status_code == 404


def test_leave_apply_and_approve_over_http(client, people):
    _login_as(client, people.alice)
    applied = client.post(
        "/api/leaves/apply",
        json={"startDate": "2026-03-02", "endDate": "2026-03-04", "leaveType": "annual", "reason": "Holiday"},
    )
    assert applied.status_code == 201
    leave_id = applied.get_json()["data"]["leave"]["leaveId"]

    overlap = client.post(
        "/api/leaves/apply",
        json={"startDate": "2026-03-03", "endDate": "2026-03-03", "leaveType": "sick", "reason": "Flu"},
    )
    assert overlap.status_code == 400
    assert overlap.get_json()["message"] == "You already have a leave request for this period."

    _login_as(client, people.admin)
    approved = client.put(f"/api/leaves/{leave_id}/status", json={"status": "approved"})
    assert approved.status_code == 200
    assert approved.get_json()["message"] == "Leave approved successfully"

    records = client.get(f"/api/attendance?employee={people.alice.employee_id}").get_json()
    assert records["count"] == 3
    assert {r["record"]["status"] for r in records["data"]} == {"leave"}


def test_device_checkin_toggles(client, people):
    first = client.post("/api/attendance/device-checkin", json={"biometricId": "101", "timestamp": "2026-02-02T09:00:00"})
    second = client.post("/api/attendance/device-checkin", json={"biometricId": "101", "timestamp": "2026-02-02T17:00:00"})
    third = client.post("/api/attendance/device-checkin", json={"biometricId": "101", "timestamp": "2026-02-02T17:05:00"})

    assert first.get_json()["punchType"] == "CHECK-IN"
    assert second.get_json()["punchType"] == "CHECK-OUT"
    assert second.get_json()["data"]["attendance"]["status"] == "present"
    assert third.status_code == 400
    assert third.get_json()["message"] == "Already checked in and checked out for today"


def test_device_checkin_for_super_admin_is_skipped(client, people):
    res = client.post("/api/attendance/device-checkin", json={"biometricId": "1"})

    assert res.status_code == 200
    assert res.get_json() == {
        "success": True,
        "message": "Attendance not required for superAdmin",
        "skipped": True,
    }


def test_device_key_is_enforced_when_configured(app, client, people):
    app.config["DEVICE_API_KEY"] = "shared-key"

    denied = client.post("/api/attendance/device-checkin", json={"biometricId": "101"})
    allowed = client.post(
        "/api/attendance/device-checkin",
        json={"biometricId": "101"},
        headers={"X-Device-Key": "shared-key"},
    )

    assert denied.status_code == 401
    assert allowed.status_code == 200


def test_unknown_biometric_is_404(client, people):
    res = client.post("/api/attendance/device-checkin", json={"biometricId": "4242"})

    assert res.status_code == 404


def test_settings_round_trip(client, people):
    _login_as(client, people.admin)

    res = client.put("/api/settings", json={"key": "checkOutLeverageMinutes", "value": 5})
    assert res.status_code == 200
    assert res.get_json()["message"] == "Settings updated successfully"

    one = client.get("/api/settings/checkOutLeverageMinutes").get_json()
    assert one["data"] == {"key": "checkOutLeverageMinutes", "value": 5, "isDefault": False}

    assert client.get("/api/settings/nope").status_code == 404


def test_notifications_for_current_user(client, people):
    _login_as(client, people.alice)
    client.post(
        "/api/leaves/apply",
        json={"startDate": "2026-03-02", "endDate": "2026-03-02", "leaveType": "casual", "reason": "Errand"},
    )

    _login_as(client, people.admin)
    count = client.get("/api/notifications/unread-count").get_json()
    listing = client.get("/api/notifications").get_json()

    assert count["data"]["unreadCount"] == 1
    assert listing["unreadCount"] == 1
    assert listing["data"][0]["title"] == "New Leave Request"


def test_todos_over_http(client, people):
    _login_as(client, people.bob)

    created = client.post("/api/todos", json={"description": "Call IT"})
    todo_id = created.get_json()["data"]["todoId"]
    toggled = client.patch(f"/api/todos/{todo_id}/toggle")

    assert created.status_code == 201
    assert toggled.get_json()["data"]["status"] == "completed"
    assert client.delete(f"/api/todos/{todo_id}").get_json()["message"] == "Note deleted successfully"

from __future__ import annotations

import pytest
from flask import Flask

from retail_attendance.attendance.controller import register as register_attendance
from retail_attendance.container import Container
from retail_attendance.payroll.service import PayrollService
from retail_attendance.penalty.controller import register as register_penalties


@pytest.fixture
def client(
    attendance_repo, penalty_repo, policy_repo, engine, penalty_service, attendance_service, reconciliation
):
    container = Container(
        conn=None,
        attendance_repo=attendance_repo,
        penalties_repo=penalty_repo,
        policies_repo=policy_repo,
        penalty_engine=engine,
        penalty_service=penalty_service,
        attendance_service=attendance_service,
        reconciliation_service=reconciliation,
        payroll_service=PayrollService(penalty_service),
    )
    app = Flask(__name__)
    app.config["TESTING"] = True
    register_attendance(app, container)
    register_penalties(app, container)
    return app.test_client()


def test_day_lifecycle_over_http(client):
    resp = client.post("/api/attendance/E1/check-in", json={"employee_name": "Alice", "time": "09:00"})
    assert resp.status_code == 201
    assert resp.get_json()["data"]["status"] == "CHECKED_IN"

    resp = client.post("/api/attendance/E1/check-out", json={"time": "16:00"})
    body = resp.get_json()["data"]
    assert resp.status_code == 200
    assert body["status"] == "CHECKED_OUT"
    assert body["total_work_time"] == 420

    resp = client.get("/api/penalties/employees/E1/totals?from=2024-03-01&to=2024-03-31")
    totals = resp.get_json()["data"]
    assert totals["total_amount"] == "50.00"
    assert totals["breakdown"]["HOURLY"] == "50.00"


def test_domain_errors_map_to_status_codes(client):
    resp = client.post("/api/attendance/E1/check-out", json={"time": "17:00"})
    assert resp.status_code == 409
    assert resp.get_json()["message"] == "No check-in found for this day"

    resp = client.post("/api/attendance/E1/check-in", json={"employee_name": "Alice", "date": "15/03/2024"})
    assert resp.status_code == 400

    resp = client.post("/api/penalties/42/remove", json={}, headers={"X-Actor": "owner"})
    assert resp.status_code == 404


def test_manual_penalty_requires_actor(client):
    payload = {"employee_id": "E1", "date": "2024-03-15", "amount": "100", "reason": "uniform"}

    assert client.post("/api/penalties", json=payload).status_code == 400

    resp = client.post("/api/penalties", json=payload, headers={"X-Actor": "manager"})
    assert resp.status_code == 201
    assert resp.get_json()["data"]["penalty_type"] == "MANUAL"


def test_settings_update_and_final_salary(client):
    resp = client.put("/api/penalties/settings", json={"hourly_penalty_rate": "60"}, headers={"X-Actor": "owner"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["version"] == 1
    assert client.get("/api/penalties/settings").get_json()["data"]["hourly_penalty_rate"] == "60"

    client.post(
        "/api/penalties",
        json={"employee_id": "E1", "date": "2024-03-15", "amount": "700", "reason": "loss"},
        headers={"X-Actor": "manager"},
    )
    resp = client.get("/api/payroll/E1/salary?base_salary=500&from=2024-03-01&to=2024-03-31")
    assert resp.get_json()["data"]["final_salary"] == "0"


def test_reconcile_reports_no_action(client):
    resp = client.post("/api/attendance/E1/reconcile")

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["reconciled"] is False
    assert data["message"] == "No incomplete attendance from previous day"

"""
test_leave_api.py: Leave request lifecycle and permissions.
"""

from datetime import date

from conftest import auth_headers
from pocket_kintai.models import LeaveRequest


def _payload(**overrides):
    body = {
        "startDate": "2025-04-10",
        "endDate": "2025-04-11",
        "leaveType": "PAID",
        "reason": "Family trip",
    }
    body.update(overrides)
    return body


def _submit(client, user, **overrides):
    resp = client.post("/api/leave", json=_payload(**overrides), headers=auth_headers(user))
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


class TestCreate:

    def test_create_is_pending(self, client, employee):
        data = _submit(client, employee)
        assert data["status"] == "PENDING"
        assert data["leaveType"] == "PAID"
        assert data["user"] == {"id": employee.id, "name": employee.name, "email": employee.email}

    def test_start_after_end_rejected(self, client, employee):
        resp = client.post(
            "/api/leave",
            json=_payload(startDate="2025-04-12", endDate="2025-04-10"),
            headers=auth_headers(employee),
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Start date must be on or before end date"

    def test_single_day_allowed(self, client, employee):
        data = _submit(client, employee, startDate="2025-04-10", endDate="2025-04-10")
        assert data["startDate"] == data["endDate"] == "2025-04-10"

    def test_unknown_leave_type_rejected(self, client, employee):
        resp = client.post("/api/leave", json=_payload(leaveType="VACATION"), headers=auth_headers(employee))
        assert resp.status_code == 400

    def test_blank_reason_rejected(self, client, employee):
        resp = client.post("/api/leave", json=_payload(reason="   "), headers=auth_headers(employee))
        assert resp.status_code == 400
        assert resp.json()["message"] == "Reason is required"


class TestListAndGet:

    def test_employee_sees_only_own(self, client, employee, coworker):
        _submit(client, employee)
        _submit(client, coworker)
        data = client.get("/api/leave", headers=auth_headers(employee)).json()["data"]
        assert data["pagination"]["total"] == 1
        assert data["leaves"][0]["userId"] == employee.id

    def test_admin_sees_company_only(self, client, admin, employee, coworker, outsider):
        _submit(client, employee)
        _submit(client, coworker)
        _submit(client, outsider)
        data = client.get("/api/leave", headers=auth_headers(admin)).json()["data"]
        assert data["pagination"]["total"] == 2
        assert {lv["userId"] for lv in data["leaves"]} == {employee.id, coworker.id}

    def test_filters(self, client, employee):
        _submit(client, employee, startDate="2025-04-01", endDate="2025-04-02")
        _submit(client, employee, startDate="2025-05-01", endDate="2025-05-02")
        headers = auth_headers(employee)

        data = client.get("/api/leave?startDate=2025-04-01&endDate=2025-04-30", headers=headers).json()["data"]
        assert [lv["startDate"] for lv in data["leaves"]] == ["2025-04-01"]

        data = client.get("/api/leave?status=APPROVED", headers=headers).json()["data"]
        assert data["leaves"] == []

    def test_get_permissions(self, client, admin, employee, coworker):
        leave_id = _submit(client, employee)["id"]
        assert client.get(f"/api/leave/{leave_id}", headers=auth_headers(employee)).status_code == 200
        assert client.get(f"/api/leave/{leave_id}", headers=auth_headers(admin)).status_code == 200
        assert client.get(f"/api/leave/{leave_id}", headers=auth_headers(coworker)).status_code == 403

    def test_get_missing_is_404(self, client, employee):
        assert client.get("/api/leave/9999", headers=auth_headers(employee)).status_code == 404


class TestUpdate:

    def test_owner_updates_pending(self, client, employee):
        leave_id = _submit(client, employee)["id"]
        resp = client.put(
            f"/api/leave/{leave_id}",
            json={"endDate": "2025-04-15", "leaveType": "SICK"},
            headers=auth_headers(employee),
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["endDate"] == "2025-04-15"
        assert data["leaveType"] == "SICK"
        assert data["reason"] == "Family trip"

    def test_merged_dates_validated(self, client, employee):
        leave_id = _submit(client, employee)["id"]
        resp = client.put(
            f"/api/leave/{leave_id}", json={"startDate": "2025-04-20"}, headers=auth_headers(employee)
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Start date must be on or before end date"

    def test_non_owner_forbidden(self, client, admin, employee):
        leave_id = _submit(client, employee)["id"]
        resp = client.put(f"/api/leave/{leave_id}", json={"reason": "x"}, headers=auth_headers(admin))
        assert resp.status_code == 403

    def test_processed_request_is_frozen(self, client, admin, employee):
        leave_id = _submit(client, employee)["id"]
        client.put(f"/api/leave/{leave_id}/status", json={"status": "APPROVED"}, headers=auth_headers(admin))
        resp = client.put(f"/api/leave/{leave_id}", json={"reason": "x"}, headers=auth_headers(employee))
        assert resp.status_code == 400


class TestStatus:

    def test_admin_approves_with_comment(self, client, db, admin, employee):
        leave_id = _submit(client, employee)["id"]
        resp = client.put(
            f"/api/leave/{leave_id}/status",
            json={"status": "APPROVED", "comment": "Enjoy"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "APPROVED"
        lr = db.get(LeaveRequest, leave_id)
        assert lr.comment == "Enjoy"
        assert lr.start_date == date(2025, 4, 10)

    def test_employee_cannot_set_status(self, client, employee):
        leave_id = _submit(client, employee)["id"]
        resp = client.put(
            f"/api/leave/{leave_id}/status", json={"status": "APPROVED"}, headers=auth_headers(employee)
        )
        assert resp.status_code == 403

    def test_second_decision_rejected(self, client, admin, employee):
        leave_id = _submit(client, employee)["id"]
        headers = auth_headers(admin)
        client.put(f"/api/leave/{leave_id}/status", json={"status": "REJECTED"}, headers=headers)
        resp = client.put(f"/api/leave/{leave_id}/status", json={"status": "APPROVED"}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Leave request has already been processed"

    def test_pending_is_not_a_decision(self, client, admin, employee):
        leave_id = _submit(client, employee)["id"]
        resp = client.put(
            f"/api/leave/{leave_id}/status", json={"status": "PENDING"}, headers=auth_headers(admin)
        )
        assert resp.status_code == 400

"""
test_attendance_api.py: Clock-in/out lifecycle, history and summaries.
"""

from datetime import date, datetime, timedelta

import pytest

from conftest import auth_headers
from pocket_kintai.core.errors import ConflictError
from pocket_kintai.models import AttendanceRecord
from pocket_kintai.schemas.attendance import ClockInRequest
from pocket_kintai.services.attendance import AttendanceService


class TestClockIn:

    def test_requires_authentication(self, client):
        resp = client.post("/api/attendance/clock-in", json={})
        assert resp.status_code == 401
        assert resp.json() == {"status": "error", "message": "Authentication required"}

    def test_clock_in_creates_record(self, client, employee, clock):
        resp = client.post(
            "/api/attendance/clock-in",
            json={"location": "Office", "notes": "early"},
            headers=auth_headers(employee),
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] == "success"
        data = body["data"]
        assert data["userId"] == employee.id
        assert data["date"] == "2025-04-01"
        assert data["clockInTime"] == "2025-04-01T09:00:00"
        assert data["clockOutTime"] is None
        assert data["location"] == "Office"

    def test_clock_in_without_body(self, client, employee):
        resp = client.post("/api/attendance/clock-in", headers=auth_headers(employee))
        assert resp.status_code == 201

    def test_second_clock_in_same_day_rejected(self, client, employee, clock, db):
        headers = auth_headers(employee)
        assert client.post("/api/attendance/clock-in", json={}, headers=headers).status_code == 201
        clock.now = clock.now + timedelta(hours=2)
        resp = client.post("/api/attendance/clock-in", json={}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Already clocked in today"
        assert db.query(AttendanceRecord).count() == 1

    def test_next_day_clock_in_allowed(self, client, employee, clock):
        headers = auth_headers(employee)
        client.post("/api/attendance/clock-in", json={}, headers=headers)
        clock.now = clock.now + timedelta(days=1)
        assert client.post("/api/attendance/clock-in", json={}, headers=headers).status_code == 201

    def test_unique_constraint_race_maps_to_conflict(self, db, employee, clock, monkeypatch):
        """A row inserted between the pre-check and commit still yields the duplicate error."""
        service = AttendanceService(db)
        monkeypatch.setattr(service, "_today_record", lambda user, today: None)
        db.add(AttendanceRecord(user_id=employee.id, date=clock.now.date(), clock_in_time=clock.now))
        db.commit()

        with pytest.raises(ConflictError, match="Already clocked in today"):
            service.clock_in(employee, ClockInRequest(), clock.now)
        assert db.query(AttendanceRecord).count() == 1


class TestClockOut:

    def test_without_record_is_404(self, client, employee):
        resp = client.post("/api/attendance/clock-out", json={}, headers=auth_headers(employee))
        assert resp.status_code == 404
        assert resp.json()["message"] == "No attendance record found for today"

    def test_clock_out_keeps_clock_in_details(self, client, employee, clock):
        headers = auth_headers(employee)
        client.post("/api/attendance/clock-in", json={"location": "Office", "notes": "n1"}, headers=headers)
        clock.now = datetime(2025, 4, 1, 18, 0, 0)

        resp = client.post("/api/attendance/clock-out", json={"breakMinutes": 60}, headers=headers)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["clockOutTime"] == "2025-04-01T18:00:00"
        assert data["location"] == "Office"
        assert data["notes"] == "n1"
        assert data["breakMinutes"] == 60

    def test_clock_out_overrides_supplied_fields(self, client, employee, clock):
        headers = auth_headers(employee)
        client.post("/api/attendance/clock-in", json={"location": "Office"}, headers=headers)
        clock.now = datetime(2025, 4, 1, 17, 0, 0)
        data = client.post(
            "/api/attendance/clock-out", json={"location": "Home"}, headers=headers
        ).json()["data"]
        assert data["location"] == "Home"

    def test_double_clock_out_rejected(self, client, employee, clock):
        headers = auth_headers(employee)
        client.post("/api/attendance/clock-in", json={}, headers=headers)
        clock.now = datetime(2025, 4, 1, 18, 0, 0)
        client.post("/api/attendance/clock-out", json={}, headers=headers)
        resp = client.post("/api/attendance/clock-out", json={}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Already clocked out today"

    def test_negative_break_is_validation_error(self, client, employee):
        headers = auth_headers(employee)
        client.post("/api/attendance/clock-in", json={}, headers=headers)
        resp = client.post("/api/attendance/clock-out", json={"breakMinutes": -5}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["status"] == "error"


class TestToday:

    def test_status_transitions(self, client, employee, clock):
        headers = auth_headers(employee)
        data = client.get("/api/attendance/today", headers=headers).json()["data"]
        assert data == {"isClockedIn": False, "isClockedOut": False, "record": None}

        client.post("/api/attendance/clock-in", json={}, headers=headers)
        data = client.get("/api/attendance/today", headers=headers).json()["data"]
        assert data["isClockedIn"] is True
        assert data["isClockedOut"] is False

        clock.now = datetime(2025, 4, 1, 18, 0, 0)
        client.post("/api/attendance/clock-out", json={}, headers=headers)
        data = client.get("/api/attendance/today", headers=headers).json()["data"]
        assert data["isClockedOut"] is True


def _seed_days(db, user, days):
    for day in days:
        db.add(AttendanceRecord(
            user_id=user.id,
            date=day,
            clock_in_time=datetime.combine(day, datetime.min.time()) + timedelta(hours=9),
            clock_out_time=datetime.combine(day, datetime.min.time()) + timedelta(hours=18),
        ))
    db.commit()


class TestRecordsAndSummary:

    def test_records_paginated_newest_first(self, client, db, employee, coworker):
        _seed_days(db, employee, [date(2025, 4, d) for d in range(1, 13)])
        _seed_days(db, coworker, [date(2025, 4, 1)])

        resp = client.get("/api/attendance/records?page=2&limit=5", headers=auth_headers(employee))
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert [r["date"] for r in data["records"]] == [f"2025-04-{d:02d}" for d in range(7, 2, -1)]
        assert data["pagination"] == {"page": 2, "limit": 5, "total": 12, "totalPages": 3}

    def test_records_date_filter(self, client, db, employee):
        _seed_days(db, employee, [date(2025, 3, 31), date(2025, 4, 1), date(2025, 4, 2)])
        resp = client.get(
            "/api/attendance/records?startDate=2025-04-01&endDate=2025-04-30",
            headers=auth_headers(employee),
        )
        assert resp.json()["data"]["pagination"]["total"] == 2

    def test_summary_requires_both_dates(self, client, employee):
        resp = client.get("/api/attendance/summary?startDate=2025-04-01", headers=auth_headers(employee))
        assert resp.status_code == 400

    def test_summary_over_completed_records(self, client, db, employee):
        _seed_days(db, employee, [date(2025, 4, 1), date(2025, 4, 2)])
        db.add(AttendanceRecord(
            user_id=employee.id, date=date(2025, 4, 3), clock_in_time=datetime(2025, 4, 3, 9)
        ))
        db.commit()

        resp = client.get(
            "/api/attendance/summary?startDate=2025-04-01&endDate=2025-04-30",
            headers=auth_headers(employee),
        )
        data = resp.json()["data"]
        assert data["totalWorkingDays"] == 2
        assert data["totalWorkingHours"] == 18.0
        assert data["averageWorkingHours"] == 9.0
        assert data["dailyWorkingHours"] == [
            {"date": "2025-04-01", "hours": 9.0},
            {"date": "2025-04-02", "hours": 9.0},
        ]

    def test_empty_summary_averages_zero(self, client, employee):
        resp = client.get(
            "/api/attendance/summary?startDate=2025-04-01&endDate=2025-04-30",
            headers=auth_headers(employee),
        )
        data = resp.json()["data"]
        assert data["totalWorkingDays"] == 0
        assert data["averageWorkingHours"] == 0

"""Attendance tests — check-in/out, multi-punch, reports, HR marking."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal

from hrms.attendance.models import Attendance, AttendancePunch
from hrms.attendance.service import build_punch_pairs, calculate_punch_hours
from hrms.common.constants import AttendanceStatus, PunchType
from tests.conftest import make_employee

BASE = "/api/v1/attendance"


def _punch(kind: PunchType, hh: int, mm: int = 0) -> AttendancePunch:
    at = datetime(2026, 3, 2, hh, mm)
    return AttendancePunch(punch_type=kind, punch_time=at, punch_date=at.date())


async def _seed_day(db, employee, day: date, status=AttendanceStatus.present, hours="8"):
    row = Attendance(
        employee_id=employee.id,
        attendance_date=day,
        status=status,
        work_mode="Office",
        total_hours=Decimal(hours),
    )
    db.add(row)
    await db.commit()
    return row


# ═════════════════════════════════════════════════════════════════════
# Punch arithmetic
# ═════════════════════════════════════════════════════════════════════


class TestPunchHours:

    def test_work_and_break_hours(self):
        punches = [
            _punch(PunchType.punch_in, 9),
            _punch(PunchType.punch_out, 13),
            _punch(PunchType.punch_in, 13, 30),
            _punch(PunchType.punch_out, 18),
        ]
        work, brk = calculate_punch_hours(punches)
        assert work == Decimal("8.50")
        assert brk == Decimal("0.50")

    def test_trailing_punch_in_ignored(self):
        punches = [
            _punch(PunchType.punch_in, 9),
            _punch(PunchType.punch_out, 12),
            _punch(PunchType.punch_in, 13),
        ]
        work, brk = calculate_punch_hours(punches)
        assert work == Decimal("3.00")
        assert brk == Decimal("1.00")

    def test_pairs_mark_open_in_progress(self):
        pairs = build_punch_pairs([
            _punch(PunchType.punch_in, 9),
            _punch(PunchType.punch_out, 11, 15),
            _punch(PunchType.punch_in, 12),
        ])
        assert len(pairs) == 2
        assert pairs[0].hours_worked == 2.25
        assert pairs[1].status == "In Progress"
        assert pairs[1].punch_out is None


# ═════════════════════════════════════════════════════════════════════
# Check-in / check-out
# ═════════════════════════════════════════════════════════════════════


async def test_check_in_and_out(client, auth_headers):
    resp = await client.post(f"{BASE}/checkin", headers=auth_headers, json={"work_mode": "WFH"})
    assert resp.status_code == 200
    assert resp.json()["work_mode"] == "WFH"
    assert resp.json()["location"] == "WFH"

    resp = await client.post(f"{BASE}/checkout", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["total_hours"] >= 0


async def test_double_check_in_rejected(client, auth_headers):
    await client.post(f"{BASE}/checkin", headers=auth_headers, json={})
    resp = await client.post(f"{BASE}/checkin", headers=auth_headers, json={})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Already checked in today"


async def test_check_in_invalid_mode(client, auth_headers):
    resp = await client.post(f"{BASE}/checkin", headers=auth_headers, json={"work_mode": "Beach"})
    assert resp.status_code == 400


async def test_checkout_without_checkin(client, auth_headers):
    resp = await client.post(f"{BASE}/checkout", headers=auth_headers)
    assert resp.status_code == 400


async def test_checkout_twice_rejected(client, auth_headers):
    await client.post(f"{BASE}/checkin", headers=auth_headers, json={})
    await client.post(f"{BASE}/checkout", headers=auth_headers)
    resp = await client.post(f"{BASE}/checkout", headers=auth_headers)
    assert resp.status_code == 400


# ═════════════════════════════════════════════════════════════════════
# Multi-punch
# ═════════════════════════════════════════════════════════════════════


async def test_punch_cycle(client, auth_headers):
    resp = await client.post(f"{BASE}/punch-in", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["work_mode"] == "Office"

    resp = await client.get(f"{BASE}/today", headers=auth_headers)
    today = resp.json()
    assert today["has_attendance"] is True
    assert today["can_punch_out"] is True
    assert today["can_punch_in"] is False

    resp = await client.post(f"{BASE}/punch-out", headers=auth_headers, json={"notes": "lunch"})
    assert resp.status_code == 200

    resp = await client.post(f"{BASE}/punch-in", headers=auth_headers)
    assert resp.status_code == 200

    resp = await client.get(f"{BASE}/today", headers=auth_headers)
    assert resp.json()["punch_count"] == 3
    assert resp.json()["last_punch_type"] == "in"


async def test_punch_in_twice_rejected(client, auth_headers):
    await client.post(f"{BASE}/punch-in", headers=auth_headers)
    resp = await client.post(f"{BASE}/punch-in", headers=auth_headers)
    assert resp.status_code == 400


async def test_punch_out_without_record(client, auth_headers):
    resp = await client.post(f"{BASE}/punch-out", headers=auth_headers)
    assert resp.status_code == 400
    assert "punch in first" in resp.json()["detail"]


async def test_today_without_record(client, auth_headers):
    resp = await client.get(f"{BASE}/today", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["has_attendance"] is False
    assert resp.json()["can_punch_in"] is True


async def test_details_for_missing_day(client, auth_headers):
    resp = await client.get(f"{BASE}/details/2020-01-01", headers=auth_headers)
    assert resp.status_code == 404


async def test_details_include_pairs(client, auth_headers):
    await client.post(f"{BASE}/punch-in", headers=auth_headers)
    await client.post(f"{BASE}/punch-out", headers=auth_headers)
    resp = await client.get(f"{BASE}/details/{date.today().isoformat()}", headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["punches"]) == 2
    assert len(body["punch_pairs"]) == 1


# ═════════════════════════════════════════════════════════════════════
# Own rows and reports
# ═════════════════════════════════════════════════════════════════════


async def test_monthly_rows(client, db, employee, auth_headers):
    await _seed_day(db, employee, date(2026, 2, 2))
    await _seed_day(db, employee, date(2026, 2, 3), status=AttendanceStatus.absent, hours="0")
    await _seed_day(db, employee, date(2026, 3, 2))

    resp = await client.get(
        f"{BASE}/monthly", headers=auth_headers, params={"month": 2, "year": 2026},
    )
    assert resp.status_code == 200
    dates = [r["attendance_date"] for r in resp.json()]
    assert dates == ["2026-02-03", "2026-02-02"]


async def test_my_report_summary(client, db, employee, auth_headers):
    await _seed_day(db, employee, date(2026, 2, 2), hours="8")
    await _seed_day(db, employee, date(2026, 2, 3), hours="6")
    await _seed_day(db, employee, date(2026, 2, 4), status=AttendanceStatus.half_day, hours="4")

    resp = await client.get(
        f"{BASE}/my-report",
        headers=auth_headers,
        params={"start_date": "2026-02-01", "end_date": "2026-02-28"},
    )
    summary = resp.json()["summary"]
    assert summary["total_days"] == 3
    assert summary["present_days"] == 2
    assert summary["half_days"] == 1
    assert summary["total_work_hours"] == 18.0
    assert summary["avg_work_hours"] == 6.0


async def test_report_rejects_inverted_period(client, auth_headers):
    resp = await client.get(
        f"{BASE}/my-report",
        headers=auth_headers,
        params={"start_date": "2026-02-10", "end_date": "2026-02-01"},
    )
    assert resp.status_code == 422


async def test_team_report_only_direct_reports(client, db, employee, manager_headers):
    outsider = await make_employee(db)
    await _seed_day(db, employee, date(2026, 2, 2))
    await _seed_day(db, outsider, date(2026, 2, 2))

    resp = await client.get(
        f"{BASE}/report/team", headers=manager_headers, params={"month": 2, "year": 2026},
    )
    assert resp.status_code == 200
    rows = resp.json()["attendance"]
    assert [r["employee_id"] for r in rows] == [employee.id]
    assert rows[0]["employee_name"] == employee.full_name


async def test_team_report_forbidden_for_employee(client, auth_headers):
    resp = await client.get(f"{BASE}/report/team", headers=auth_headers)
    assert resp.status_code == 403


async def test_hr_views_any_employee_report(client, db, hr_headers):
    outsider = await make_employee(db)
    resp = await client.get(f"{BASE}/report/employee/{outsider.id}", headers=hr_headers)
    assert resp.status_code == 200


async def test_manager_cannot_view_all_report(client, manager_headers):
    resp = await client.get(f"{BASE}/report/all", headers=manager_headers)
    assert resp.status_code == 403


async def test_all_report_by_date(client, db, employee, manager, hr_headers):
    await _seed_day(db, employee, date(2026, 2, 2))
    await _seed_day(db, manager, date(2026, 2, 2))
    await _seed_day(db, manager, date(2026, 2, 3))

    resp = await client.get(f"{BASE}/report/all", headers=hr_headers, params={"date": "2026-02-02"})
    assert resp.json()["summary"]["total_days"] == 2


async def test_employee_report_manager_scope(client, db, employee, manager_headers):
    outsider = await make_employee(db)
    resp = await client.get(f"{BASE}/report/employee/{employee.id}", headers=manager_headers)
    assert resp.status_code == 200
    assert resp.json()["employee"]["id"] == employee.id

    resp = await client.get(f"{BASE}/report/employee/{outsider.id}", headers=manager_headers)
    assert resp.status_code == 403


async def test_status_summary(client, db, employee, auth_headers):
    await _seed_day(db, employee, date(2026, 2, 2))
    await _seed_day(db, employee, date(2026, 2, 3), status=AttendanceStatus.late)
    await _seed_day(db, employee, date(2026, 2, 4), status=AttendanceStatus.leave, hours="0")

    resp = await client.get(
        f"{BASE}/summary/{employee.id}", headers=auth_headers, params={"month": 2, "year": 2026},
    )
    data = resp.json()
    assert data["present_days"] == 1
    assert data["late_days"] == 1
    assert data["leave_days"] == 1
    assert data["total_hours"] == 16.0


# ═════════════════════════════════════════════════════════════════════
# HR marking
# ═════════════════════════════════════════════════════════════════════


async def test_mark_creates_row(client, employee, hr_headers):
    resp = await client.post(
        f"{BASE}/mark",
        headers=hr_headers,
        json={
            "employee_id": employee.id,
            "attendance_date": "2026-02-05",
            "status": "present",
            "check_in": "2026-02-05T09:00:00",
            "check_out": "2026-02-05T17:30:00",
        },
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["source"] == "manual"
    assert data["total_hours"] == 8.5


async def test_mark_overwrites_status(client, db, employee, hr_headers):
    await _seed_day(db, employee, date(2026, 2, 5))
    resp = await client.post(
        f"{BASE}/mark",
        headers=hr_headers,
        json={"employee_id": employee.id, "attendance_date": "2026-02-05", "status": "half-day"},
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "half-day"

    resp = await client.get(f"{BASE}/date/2026-02-05", headers=hr_headers)
    assert len(resp.json()) == 1


async def test_mark_requires_permission(client, employee, manager_headers):
    resp = await client.post(
        f"{BASE}/mark",
        headers=manager_headers,
        json={"employee_id": employee.id, "attendance_date": "2026-02-05", "status": "absent"},
    )
    assert resp.status_code == 403


async def test_mark_unknown_employee(client, hr_headers):
    resp = await client.post(
        f"{BASE}/mark",
        headers=hr_headers,
        json={"employee_id": 99999, "attendance_date": "2026-02-05", "status": "absent"},
    )
    assert resp.status_code == 404


async def test_by_date_lists_names(client, db, employee, hr_headers):
    await _seed_day(db, employee, date.today() - timedelta(days=1))
    resp = await client.get(
        f"{BASE}/date/{(date.today() - timedelta(days=1)).isoformat()}", headers=hr_headers,
    )
    assert resp.json()[0]["employee_number"] == employee.employee_number

"""Report tests — attendance, leave, payroll, headcount and CSV download."""

from __future__ import annotations

import csv
import io
from datetime import date
from decimal import Decimal

from hrms.attendance.models import Attendance
from hrms.common.constants import AttendanceStatus, EmploymentStatus, LeaveStatus
from hrms.leave.models import Leave, LeaveType
from hrms.reports.schemas import HeadcountBucket
from hrms.reports.service import to_csv
from tests.conftest import make_employee, make_master_item

BASE = "/api/v1/reports"


async def _attend(db, employee, day, status=AttendanceStatus.present, hours="8"):
    db.add(Attendance(
        employee_id=employee.id,
        attendance_date=day,
        status=status,
        work_mode="Office",
        total_hours=Decimal(hours),
    ))
    await db.commit()


async def _leave(db, employee, start, days, status, *, leave_type=None, code=None):
    db.add(Leave(
        employee_id=employee.id,
        leave_type_id=leave_type.id if leave_type else None,
        leave_type=code,
        start_date=start,
        end_date=start,
        total_days=Decimal(days),
        status=status,
    ))
    await db.commit()


def test_to_csv_header_and_rows():
    text = to_csv([HeadcountBucket(name="Pune", count=3)])
    assert text.splitlines() == ["name,count", "Pune,3"]


def test_to_csv_empty_with_columns():
    assert to_csv([], ["a", "b"]).strip() == "a,b"


async def test_reports_need_permission(client, manager_headers):
    for path in ("attendance", "leaves", "payroll", "headcount"):
        assert (await client.get(f"{BASE}/{path}", headers=manager_headers)).status_code == 403


async def test_attendance_report(client, db, hr_user, hr_headers):
    eng = await make_master_item(db, "departments", "Engineering")
    dev = await make_employee(db, first_name="Dev", department_id=eng.id)
    await _attend(db, dev, date(2026, 2, 2), hours="8")
    await _attend(db, dev, date(2026, 2, 3), AttendanceStatus.late, hours="7.5")
    await _attend(db, dev, date(2026, 2, 4), AttendanceStatus.absent, hours="0")
    await _attend(db, dev, date(2026, 3, 2))

    body = (await client.get(
        f"{BASE}/attendance",
        headers=hr_headers,
        params={"start_date": "2026-02-01", "end_date": "2026-02-28"},
    )).json()
    assert body["start_date"] == "2026-02-01"
    row = next(r for r in body["rows"] if r["employee_id"] == dev.id)
    assert row["department"] == "Engineering"
    assert (row["present"], row["late"], row["absent"]) == (1, 1, 1)
    assert row["total_days"] == 3
    assert row["total_hours"] == 15.5

    hr_row = next(r for r in body["rows"] if r["employee_id"] == hr_user.id)
    assert hr_row["total_days"] == 0


async def test_attendance_report_department_filter(client, db, hr_headers):
    eng = await make_master_item(db, "departments", "Engineering")
    dev = await make_employee(db, department_id=eng.id)
    body = (await client.get(
        f"{BASE}/attendance", headers=hr_headers, params={"department_id": eng.id},
    )).json()
    assert [r["employee_id"] for r in body["rows"]] == [dev.id]


async def test_attendance_report_defaults_to_current_month(client, hr_headers):
    body = (await client.get(f"{BASE}/attendance", headers=hr_headers)).json()
    assert body["start_date"] == date.today().replace(day=1).isoformat()


async def test_leave_report(client, db, employee, hr_headers):
    casual = LeaveType(name="Casual Leave", code="CL", days_allowed=Decimal("12"))
    db.add(casual)
    await db.commit()

    await _leave(db, employee, date(2026, 2, 2), "2", LeaveStatus.approved, leave_type=casual)
    await _leave(db, employee, date(2026, 3, 2), "1", LeaveStatus.approved, leave_type=casual)
    await _leave(db, employee, date(2026, 4, 2), "1.5", LeaveStatus.pending, leave_type=casual)
    await _leave(db, employee, date(2026, 5, 4), "1", LeaveStatus.approved, code="WFH")
    await _leave(db, employee, date(2025, 5, 4), "1", LeaveStatus.approved, leave_type=casual)

    body = (await client.get(f"{BASE}/leaves", headers=hr_headers, params={"year": 2026})).json()
    rows = {r["leave_type"]: r for r in body["rows"]}
    assert set(rows) == {"Casual Leave", "WFH"}
    assert rows["Casual Leave"]["approved_count"] == 2
    assert rows["Casual Leave"]["approved_days"] == 3.0
    assert rows["Casual Leave"]["pending_count"] == 1
    assert rows["Casual Leave"]["pending_days"] == 1.5
    assert rows["WFH"]["approved_count"] == 1


async def test_payroll_report_without_run(client, hr_headers):
    body = (await client.get(f"{BASE}/payroll", headers=hr_headers, params={"month": 1, "year": 2026})).json()
    assert body["run_id"] is None
    assert body["rows"] == []
    assert body["totals"]["employees"] == 0


async def test_payroll_report(client, employee, hr_headers, admin_headers):
    await client.put(
        f"/api/v1/payroll/salary-structure/{employee.id}",
        headers=hr_headers,
        json={"basic": 30000, "hra": 12000, "pf": 1800},
    )
    await client.post("/api/v1/payroll/generate", headers=admin_headers, json={"month": 1, "year": 2026})

    body = (await client.get(f"{BASE}/payroll", headers=hr_headers, params={"month": 1, "year": 2026})).json()
    assert body["run_status"] == "draft"
    assert len(body["rows"]) == 1
    assert body["rows"][0]["employee_number"] == employee.employee_number
    assert body["rows"][0]["present_days"] == 0
    assert body["totals"]["employees"] == 1
    assert body["totals"]["deductions"] == 1800.0


async def test_headcount(client, db, hr_headers):
    pune = await make_master_item(db, "locations", "Pune")
    await make_employee(db, location_id=pune.id)
    await make_employee(db, location_id=pune.id)
    await make_employee(db, is_active=False, employment_status=EmploymentStatus.resigned)

    body = (await client.get(f"{BASE}/headcount", headers=hr_headers)).json()
    assert body["total"] == 3
    assert body["by_location"][0] == {"name": "Pune", "count": 2}
    assert {"name": "Unassigned", "count": 1} in body["by_location"]
    statuses = {b["name"]: b["count"] for b in body["by_employment_status"]}
    assert statuses == {"working": 3, "resigned": 1}


async def test_download_csv(client, db, hr_headers):
    await make_employee(db, first_name="Zed")
    resp = await client.get(f"{BASE}/attendance/download", headers=hr_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "attachment" in resp.headers["content-disposition"]

    rows = list(csv.DictReader(io.StringIO(resp.text)))
    assert len(rows) == 2
    assert "employee_number" in rows[0]


async def test_download_headcount_csv(client, hr_headers):
    resp = await client.get(f"{BASE}/headcount/download", headers=hr_headers)
    lines = resp.text.splitlines()
    assert lines[0] == "dimension,name,count"
    assert "employment_status,working,1" in lines


async def test_download_unknown_report(client, hr_headers):
    resp = await client.get(f"{BASE}/bonuses/download", headers=hr_headers)
    assert resp.status_code == 404

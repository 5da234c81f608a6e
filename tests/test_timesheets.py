"""Timesheet tests — regular vs project submission, drafts, locks, HR desk."""

from __future__ import annotations

from datetime import date, timedelta

from hrms.common.constants import PeriodLockStatus, TimesheetStatus
from hrms.compliance.models import PayrollPeriodLock
from tests.conftest import assign, make_project, make_timesheet

BASE = "/api/v1/timesheets"

YESTERDAY = date.today() - timedelta(days=1)


def _regular(day: date = YESTERDAY, hours: float = 8, **kw) -> dict:
    return {"date": day.isoformat(), "total_hours": hours, **kw}


async def test_assignment_status_regular(client, auth_headers):
    resp = await client.get(f"{BASE}/assignment-status", headers=auth_headers)
    assert resp.json() == {"has_project": False, "assignments": [], "timesheet_type": "regular"}


async def test_assignment_status_project(client, db, employee, auth_headers):
    project = await make_project(db, project_name="Atlas")
    await assign(db, project, employee)
    body = (await client.get(f"{BASE}/assignment-status", headers=auth_headers)).json()
    assert body["has_project"] is True
    assert body["timesheet_type"] == "project_based"
    assert body["assignments"][0]["project_name"] == "Atlas"


# ═════════════════════════════════════════════════════════════════════
# Regular submissions
# ═════════════════════════════════════════════════════════════════════


async def test_submit_regular(client, auth_headers):
    resp = await client.post(
        f"{BASE}/regular/submit",
        headers=auth_headers,
        json=_regular(hours_breakdown={"meetings": 2, "dev": 6}),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "submitted"
    assert body["message"] == "Regular timesheet submitted successfully"

    rows = (await client.get(f"{BASE}/regular/my-timesheets", headers=auth_headers)).json()
    assert len(rows) == 1
    assert rows[0]["total_hours"] == 8.0
    assert rows[0]["submission_date"] is not None


async def test_resubmit_same_day_updates_row(client, auth_headers):
    first = await client.post(f"{BASE}/regular/submit", headers=auth_headers, json=_regular(hours=6))
    second = await client.post(f"{BASE}/regular/submit", headers=auth_headers, json=_regular(hours=7.5))
    assert first.json()["timesheet_id"] == second.json()["timesheet_id"]

    rows = (await client.get(f"{BASE}/regular/my-timesheets", headers=auth_headers)).json()
    assert [r["total_hours"] for r in rows] == [7.5]


async def test_save_as_draft(client, auth_headers):
    resp = await client.post(
        f"{BASE}/regular/submit", headers=auth_headers, json=_regular(save_as_draft=True),
    )
    assert resp.json()["status"] == "draft"
    assert "saved as draft" in resp.json()["message"]

    rows = (await client.get(f"{BASE}/regular/my-timesheets", headers=auth_headers)).json()
    assert rows[0]["submission_date"] is None


async def test_hours_out_of_range(client, auth_headers):
    resp = await client.post(f"{BASE}/regular/submit", headers=auth_headers, json=_regular(hours=25))
    assert resp.status_code == 422


async def test_regular_rejected_when_assigned(client, db, employee, auth_headers):
    project = await make_project(db)
    await assign(db, project, employee)
    resp = await client.post(f"{BASE}/regular/submit", headers=auth_headers, json=_regular())
    assert resp.status_code == 400
    assert "project-based" in resp.json()["detail"]


async def test_regular_allowed_outside_assignment_window(client, db, employee, auth_headers):
    project = await make_project(db)
    await assign(db, project, employee, start=date.today())
    resp = await client.post(f"{BASE}/regular/submit", headers=auth_headers, json=_regular())
    assert resp.status_code == 200


async def test_hr_cannot_submit(client, hr_headers):
    resp = await client.post(f"{BASE}/regular/submit", headers=hr_headers, json=_regular())
    assert resp.status_code == 403


async def test_locked_period_rejects_submission(client, db, auth_headers):
    db.add(PayrollPeriodLock(
        payroll_period=f"{YESTERDAY.year:04d}-{YESTERDAY.month:02d}",
        lock_status=PeriodLockStatus.locked,
    ))
    await db.commit()

    resp = await client.post(f"{BASE}/regular/submit", headers=auth_headers, json=_regular())
    assert resp.status_code == 422
    assert "locked" in resp.json()["detail"]


async def test_verified_timesheet_cannot_change(client, db, employee, auth_headers):
    await make_timesheet(db, employee, YESTERDAY, status=TimesheetStatus.verified)
    resp = await client.post(f"{BASE}/regular/submit", headers=auth_headers, json=_regular())
    assert resp.status_code == 422


# ═════════════════════════════════════════════════════════════════════
# Project submissions
# ═════════════════════════════════════════════════════════════════════


async def test_submit_project(client, db, employee, auth_headers):
    project = await make_project(db, project_name="Atlas")
    await assign(db, project, employee)

    resp = await client.post(
        f"{BASE}/project/submit",
        headers=auth_headers,
        json={**_regular(), "project_id": project.id},
    )
    assert resp.status_code == 200
    assert resp.json()["message"].startswith("Project timesheet")

    rows = (await client.get(
        f"{BASE}/project/my-timesheets", headers=auth_headers, params={"project_id": project.id},
    )).json()
    assert rows[0]["project_name"] == "Atlas"
    assert rows[0]["timesheet_type"] == "project"


async def test_project_submit_without_assignment(client, db, auth_headers):
    project = await make_project(db)
    resp = await client.post(
        f"{BASE}/project/submit",
        headers=auth_headers,
        json={**_regular(), "project_id": project.id},
    )
    assert resp.status_code == 403


async def test_my_timesheets_period_filter(client, db, employee, auth_headers):
    await make_timesheet(db, employee, date(2026, 2, 2))
    await make_timesheet(db, employee, date(2026, 3, 2))

    rows = (await client.get(
        f"{BASE}/regular/my-timesheets", headers=auth_headers, params={"month": 2, "year": 2026},
    )).json()
    assert [r["date"] for r in rows] == ["2026-02-02"]


async def test_my_stats(client, db, employee, auth_headers):
    await make_timesheet(db, employee, date(2026, 2, 2), hours="8")
    await make_timesheet(db, employee, date(2026, 2, 3), hours="6", status=TimesheetStatus.verified)
    await make_timesheet(db, employee, date(2026, 2, 4), hours="5", status=TimesheetStatus.draft)

    stats = (await client.get(
        f"{BASE}/my-stats", headers=auth_headers, params={"month": 2, "year": 2026},
    )).json()
    assert stats["submitted_days"] == 2
    assert stats["total_hours"] == 14.0
    assert stats["avg_hours"] == 7.0
    assert stats["by_status"] == {"submitted": 1, "verified": 1, "draft": 1}


# ═════════════════════════════════════════════════════════════════════
# HR desk
# ═════════════════════════════════════════════════════════════════════


async def test_pending_validation(client, db, employee, hr_headers):
    await make_timesheet(db, employee, date(2026, 2, 2))
    await make_timesheet(db, employee, date(2026, 2, 3), status=TimesheetStatus.draft)

    rows = (await client.get(f"{BASE}/admin/pending-validation", headers=hr_headers)).json()
    assert len(rows) == 1
    assert rows[0]["employee_number"] == employee.employee_number


async def test_admin_routes_forbidden_for_employee(client, auth_headers):
    resp = await client.get(f"{BASE}/admin/pending-validation", headers=auth_headers)
    assert resp.status_code == 403


async def test_review_verifies(client, db, employee, hr_user, hr_headers):
    sheet = await make_timesheet(db, employee, date(2026, 2, 2))
    resp = await client.put(
        f"{BASE}/admin/validate/{sheet.id}",
        headers=hr_headers,
        json={"status": "verified", "remarks": "ok"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "verified"
    assert body["verified_by"] == hr_user.id

    resp = await client.put(
        f"{BASE}/admin/validate/{sheet.id}", headers=hr_headers, json={"status": "rejected"},
    )
    assert resp.status_code == 422


async def test_review_missing(client, hr_headers):
    resp = await client.put(
        f"{BASE}/admin/validate/5555", headers=hr_headers, json={"status": "verified"},
    )
    assert resp.status_code == 404


async def test_client_validation_month(client, db, employee, hr_headers):
    project = await make_project(db)
    await make_timesheet(db, employee, date(2026, 2, 2), project=project)
    await make_timesheet(db, employee, date(2026, 2, 3), project=project)
    await make_timesheet(db, employee, date(2026, 3, 2), project=project)

    resp = await client.post(
        f"{BASE}/admin/validate",
        headers=hr_headers,
        json={
            "employee_id": employee.id,
            "project_id": project.id,
            "month": 2,
            "year": 2026,
            "validation_status": "mismatch",
            "client_hours": 12,
        },
    )
    assert resp.status_code == 200
    assert resp.json()["affected"] == 2

    stats = (await client.get(
        f"{BASE}/admin/stats", headers=hr_headers, params={"month": 2, "year": 2026},
    )).json()
    assert stats["total"] == 2
    assert stats["by_client_status"] == {"mismatch": 2}


async def test_admin_stats_all_time(client, db, employee, hr_headers):
    project = await make_project(db)
    await make_timesheet(db, employee, date(2026, 2, 2), project=project)
    await make_timesheet(db, employee, date(2026, 2, 3))

    stats = (await client.get(f"{BASE}/admin/stats", headers=hr_headers)).json()
    assert stats["total"] == 2
    assert stats["by_status"] == {"submitted": 2}
    assert stats["by_client_status"] == {"not_validated": 1}

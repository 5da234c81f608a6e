"""Compliance tests — daily status, history, admin/manager views, period locks."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select

from hrms.common.constants import TimesheetStatus
from hrms.compliance.service import compliance_rate
from hrms.notifications.models import Notification
from tests.conftest import assign, make_employee, make_master_item, make_project, make_timesheet

BASE = "/api/v1/compliance"

TODAY = date.today()


def test_compliance_rate():
    assert compliance_rate(0, 0) == 0.0
    assert compliance_rate(1, 3) == 33.33
    assert compliance_rate(4, 4) == 100.0


# ═════════════════════════════════════════════════════════════════════
# Employee views
# ═════════════════════════════════════════════════════════════════════


async def test_my_status_pending(client, auth_headers):
    body = (await client.get(f"{BASE}/my-status", headers=auth_headers)).json()
    assert body["status"] == "pending"
    assert body["is_submitted"] is False
    assert body["submission_details"] is None
    assert body["timesheet_type"] == "regular"


async def test_my_status_compliant(client, db, employee, auth_headers):
    project = await make_project(db)
    await assign(db, project, employee)
    await make_timesheet(db, employee, TODAY, project=project, hours="7")

    body = (await client.get(f"{BASE}/my-status", headers=auth_headers)).json()
    assert body["status"] == "compliant"
    assert body["timesheet_type"] == "project_based"
    assert body["submission_details"]["total_hours"] == 7.0
    assert body["this_month"]["submitted_days"] == 1


async def test_my_status_draft_is_pending(client, db, employee, auth_headers):
    await make_timesheet(db, employee, TODAY, status=TimesheetStatus.draft)
    body = (await client.get(f"{BASE}/my-status", headers=auth_headers)).json()
    assert body["status"] == "pending"
    assert body["submission_details"]["status"] == "draft"


async def test_my_history(client, db, employee, auth_headers):
    await make_timesheet(db, employee, date(2026, 2, 2))
    await make_timesheet(db, employee, date(2026, 2, 3), status=TimesheetStatus.draft)

    rows = (await client.get(
        f"{BASE}/my-history",
        headers=auth_headers,
        params={"start_date": "2026-02-01", "end_date": "2026-02-03"},
    )).json()
    assert [(r["date"], r["compliance_status"]) for r in rows] == [
        ("2026-02-03", "pending"),
        ("2026-02-02", "compliant"),
        ("2026-02-01", "missing"),
    ]


async def test_my_history_compliant_beats_draft(client, db, employee, auth_headers):
    project = await make_project(db)
    await make_timesheet(db, employee, date(2026, 2, 2), project=project)
    await make_timesheet(db, employee, date(2026, 2, 2), status=TimesheetStatus.draft)

    rows = (await client.get(
        f"{BASE}/my-history",
        headers=auth_headers,
        params={"start_date": "2026-02-02", "end_date": "2026-02-02"},
    )).json()
    assert rows[0]["compliance_status"] == "compliant"


async def test_my_history_draft_beats_rejected(client, db, employee, auth_headers):
    project = await make_project(db)
    await make_timesheet(db, employee, date(2026, 2, 4), status=TimesheetStatus.draft)
    await make_timesheet(db, employee, date(2026, 2, 4), project=project, status=TimesheetStatus.rejected)

    rows = (await client.get(
        f"{BASE}/my-history",
        headers=auth_headers,
        params={"start_date": "2026-02-04", "end_date": "2026-02-04"},
    )).json()
    assert rows[0]["compliance_status"] == "pending"
    assert rows[0]["status"] == "draft"


async def test_my_history_default_window(client, auth_headers):
    rows = (await client.get(f"{BASE}/my-history", headers=auth_headers)).json()
    assert len(rows) == 30
    assert rows[0]["date"] == TODAY.isoformat()


async def test_my_history_limited_to_a_year(client, auth_headers):
    resp = await client.get(
        f"{BASE}/my-history",
        headers=auth_headers,
        params={"start_date": "2024-01-01", "end_date": "2026-01-01"},
    )
    assert resp.status_code == 422


# ═════════════════════════════════════════════════════════════════════
# Admin views
# ═════════════════════════════════════════════════════════════════════


async def test_non_compliant(client, db, employee, manager, hr_user, hr_headers):
    day = date(2026, 2, 2)
    await make_timesheet(db, employee, day)
    await make_timesheet(db, manager, day, status=TimesheetStatus.draft)

    rows = (await client.get(
        f"{BASE}/admin/non-compliant", headers=hr_headers, params={"date": day.isoformat()},
    )).json()
    assert [r["employee_id"] for r in rows] == [hr_user.id, manager.id]
    assert rows[0]["draft_status"] == "not_started"
    assert rows[1]["draft_status"] == "draft_saved"


async def test_non_compliant_skips_exited(client, db, hr_user, hr_headers):
    from hrms.common.constants import EmploymentStatus

    await make_employee(db, employment_status=EmploymentStatus.resigned)
    rows = (await client.get(f"{BASE}/admin/non-compliant", headers=hr_headers)).json()
    assert [r["employee_id"] for r in rows] == [hr_user.id]


async def test_admin_views_forbidden_for_manager(client, manager_headers):
    resp = await client.get(f"{BASE}/admin/dashboard", headers=manager_headers)
    assert resp.status_code == 403


async def test_admin_dashboard(client, db, employee, manager, hr_headers):
    await make_timesheet(db, employee, TODAY)

    body = (await client.get(f"{BASE}/admin/dashboard", headers=hr_headers)).json()
    assert body["today"]["total_employees"] == 3
    assert body["today"]["submitted_count"] == 1
    assert body["today"]["pending_count"] == 2
    assert body["today"]["compliance_rate"] == 33.33
    assert len(body["trend"]) == 7
    assert body["trend"][-1]["date"] == TODAY.isoformat()
    assert body["pending_validations"] == 1
    assert len(body["non_compliant"]) == 2


async def test_admin_send_reminders(client, db, employee, manager, hr_headers):
    await make_timesheet(db, employee, TODAY)
    resp = await client.post(
        f"{BASE}/admin/send-reminders", headers=hr_headers, json={"employee_ids": [manager.id]},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 1
    assert body["reminded"][0]["employee_id"] == manager.id

    note = (await db.execute(
        select(Notification).where(Notification.recipient_id == manager.id)
    )).scalar_one()
    assert note.title == "Timesheet Reminder"


async def test_bulk_approve(client, db, employee, hr_headers):
    one = await make_timesheet(db, employee, date(2026, 2, 2))
    two = await make_timesheet(db, employee, date(2026, 2, 3))
    draft = await make_timesheet(db, employee, date(2026, 2, 4), status=TimesheetStatus.draft)

    resp = await client.post(
        f"{BASE}/admin/bulk-approve",
        headers=hr_headers,
        json={"timesheet_ids": [one.id, two.id, draft.id], "notes": "Looks fine"},
    )
    assert resp.status_code == 200
    assert resp.json()["approved_count"] == 2


async def test_bulk_approve_empty(client, hr_headers):
    resp = await client.post(f"{BASE}/admin/bulk-approve", headers=hr_headers, json={"timesheet_ids": []})
    assert resp.status_code == 400


# ═════════════════════════════════════════════════════════════════════
# Period locks
# ═════════════════════════════════════════════════════════════════════


async def test_close_and_reopen_month(client, db, employee, hr_headers, auth_headers):
    project = await make_project(db)
    await make_timesheet(db, employee, date(2026, 2, 2), project=project)

    resp = await client.post(f"{BASE}/admin/close-month", headers=hr_headers, json={"month": 2, "year": 2026})
    assert resp.status_code == 200
    body = resp.json()
    assert body["period"] == "2026-02"
    assert body["warnings"] == {"pending_timesheets": 1, "pending_client_validations": 1}

    status = (await client.get(f"{BASE}/period-status/2/2026", headers=auth_headers)).json()
    assert status["is_locked"] is True
    assert status["pending_verifications"] == 1

    resp = await client.post(
        f"{BASE}/admin/reopen-month",
        headers=hr_headers,
        json={"month": 2, "year": 2026, "reason": "Late client sign-off"},
    )
    assert resp.status_code == 200
    assert resp.json()["lock_status"] == "open"
    assert resp.json()["reopen_reason"] == "Late client sign-off"


async def test_period_status_unlocked_by_default(client, auth_headers):
    body = (await client.get(f"{BASE}/period-status/5/2026", headers=auth_headers)).json()
    assert body == {
        "period": "2026-05",
        "is_locked": False,
        "status": "open",
        "locked_at": None,
        "pending_verifications": 0,
    }


async def test_reopen_requires_reason(client, hr_headers):
    resp = await client.post(
        f"{BASE}/admin/reopen-month", headers=hr_headers, json={"month": 2, "year": 2026},
    )
    assert resp.status_code == 400


async def test_reopen_unknown_period(client, hr_headers):
    resp = await client.post(
        f"{BASE}/admin/reopen-month",
        headers=hr_headers,
        json={"month": 2, "year": 2026, "reason": "oops"},
    )
    assert resp.status_code == 404


async def test_monthly_report(client, db, hr_user, hr_headers):
    eng = await make_master_item(db, "departments", "Engineering")
    ann = await make_employee(db, first_name="Ann", department_id=eng.id)
    bob = await make_employee(db, first_name="Bob", department_id=eng.id)
    await make_timesheet(db, ann, date(2026, 2, 2))
    await make_timesheet(db, ann, date(2026, 2, 3))
    await make_timesheet(db, bob, date(2026, 2, 2))

    body = (await client.get(
        f"{BASE}/admin/monthly-report", headers=hr_headers, params={"month": 2, "year": 2026},
    )).json()
    assert body["period"] == "2026-02"
    assert [d["submitted_employees"] for d in body["daily_compliance"]] == [2, 1]
    assert body["department_compliance"] == [{
        "department": "Engineering",
        "total_employees": 2,
        "compliant_employees": 2,
        "compliance_rate": 100.0,
    }]
    laggards = body["top_non_compliant"]
    assert [r["employee_id"] for r in laggards] == [hr_user.id, bob.id]
    assert laggards[0]["missing_days"] == 2
    assert laggards[1]["compliance_rate"] == 50.0


# ═════════════════════════════════════════════════════════════════════
# Manager views
# ═════════════════════════════════════════════════════════════════════


async def test_manager_dashboard_scoped_to_team(client, db, employee, manager_headers):
    await make_employee(db)
    body = (await client.get(f"{BASE}/manager/dashboard", headers=manager_headers)).json()
    assert body["today"]["total_employees"] == 1
    assert [r["employee_id"] for r in body["non_compliant"]] == [employee.id]


async def test_manager_send_reminders(client, db, employee, manager_headers):
    outsider = await make_employee(db)
    resp = await client.post(
        f"{BASE}/manager/send-reminders",
        headers=manager_headers,
        json={"employee_ids": [employee.id, outsider.id]},
    )
    assert resp.json()["count"] == 1
    assert resp.json()["reminded"][0]["employee_id"] == employee.id


async def test_manager_views_forbidden_for_employee(client, auth_headers):
    resp = await client.get(f"{BASE}/manager/non-compliant", headers=auth_headers)
    assert resp.status_code == 403

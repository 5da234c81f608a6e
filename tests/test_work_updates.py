"""Work-update tests — per-project daily updates and their compliance view."""

from __future__ import annotations

from datetime import date, timedelta

from hrms.work_updates.models import WorkUpdate
from tests.conftest import assign, make_project

BASE = "/api/v1/work-updates"

TODAY = date.today()


def _update(project, day: date = TODAY, **kw) -> dict:
    return {
        "project_id": project.id,
        "update_date": day.isoformat(),
        "description": "Wired the payroll export",
        "hours_worked": 6,
        **kw,
    }


async def test_submit_and_list(client, db, employee, auth_headers):
    project = await make_project(db, project_name="Atlas", client_name="Globex")
    await assign(db, project, employee)

    resp = await client.post(f"{BASE}/submit", headers=auth_headers, json=_update(project, blockers="VPN"))
    assert resp.status_code == 201
    assert resp.json()["status"] == "submitted"
    assert resp.json()["hours_worked"] == 6.0

    rows = (await client.get(f"{BASE}/my-updates", headers=auth_headers)).json()
    assert len(rows) == 1
    assert rows[0]["project_name"] == "Atlas"
    assert rows[0]["client_name"] == "Globex"
    assert rows[0]["blockers"] == "VPN"


async def test_submit_requires_active_assignment(client, db, auth_headers):
    project = await make_project(db)
    resp = await client.post(f"{BASE}/submit", headers=auth_headers, json=_update(project))
    assert resp.status_code == 403


async def test_one_update_per_project_and_day(client, db, employee, auth_headers):
    project = await make_project(db)
    await assign(db, project, employee)
    await client.post(f"{BASE}/submit", headers=auth_headers, json=_update(project))
    resp = await client.post(f"{BASE}/submit", headers=auth_headers, json=_update(project))
    assert resp.status_code == 409


async def test_blank_description_rejected(client, db, employee, auth_headers):
    project = await make_project(db)
    await assign(db, project, employee)
    resp = await client.post(
        f"{BASE}/submit", headers=auth_headers, json=_update(project, description=""),
    )
    assert resp.status_code == 422


async def test_my_updates_filters(client, db, employee, auth_headers):
    one = await make_project(db)
    two = await make_project(db)
    await assign(db, one, employee)
    await assign(db, two, employee)
    await client.post(f"{BASE}/submit", headers=auth_headers, json=_update(one))
    await client.post(
        f"{BASE}/submit", headers=auth_headers, json=_update(one, TODAY - timedelta(days=3)),
    )
    await client.post(f"{BASE}/submit", headers=auth_headers, json=_update(two))

    rows = (await client.get(
        f"{BASE}/my-updates", headers=auth_headers, params={"project_id": one.id},
    )).json()
    assert [r["update_date"] for r in rows] == [
        TODAY.isoformat(), (TODAY - timedelta(days=3)).isoformat(),
    ]

    rows = (await client.get(
        f"{BASE}/my-updates",
        headers=auth_headers,
        params={"start_date": TODAY.isoformat(), "end_date": TODAY.isoformat()},
    )).json()
    assert len(rows) == 2


async def test_my_projects_lists_active_today(client, db, employee, auth_headers):
    current = await make_project(db, project_name="Current")
    future = await make_project(db, project_name="Future")
    await assign(db, current, employee)
    await assign(db, future, employee, start=TODAY + timedelta(days=7))

    rows = (await client.get(f"{BASE}/my-projects", headers=auth_headers)).json()
    assert [r["project_name"] for r in rows] == ["Current"]


async def test_compliance_status(client, db, employee, auth_headers):
    one = await make_project(db, project_name="Alpha")
    two = await make_project(db, project_name="Beta")
    await assign(db, one, employee)
    await assign(db, two, employee)
    await client.post(f"{BASE}/submit", headers=auth_headers, json=_update(one))

    body = (await client.get(f"{BASE}/compliance-status", headers=auth_headers)).json()
    assert body["total_projects"] == 2
    assert body["submitted_count"] == 1
    assert body["is_compliant"] is False
    assert {p["project_name"]: p["submitted"] for p in body["projects"]} == {
        "Alpha": True, "Beta": False,
    }

    await client.post(f"{BASE}/submit", headers=auth_headers, json=_update(two))
    body = (await client.get(f"{BASE}/compliance-status", headers=auth_headers)).json()
    assert body["is_compliant"] is True


async def test_compliance_without_projects(client, auth_headers):
    body = (await client.get(
        f"{BASE}/compliance-status", headers=auth_headers, params={"date": "2026-02-02"},
    )).json()
    assert body["date"] == "2026-02-02"
    assert body["total_projects"] == 0
    assert body["is_compliant"] is True


async def test_delete_today(client, db, employee, auth_headers):
    project = await make_project(db)
    await assign(db, project, employee)
    update_id = (await client.post(
        f"{BASE}/submit", headers=auth_headers, json=_update(project),
    )).json()["id"]

    resp = await client.delete(f"{BASE}/{update_id}", headers=auth_headers)
    assert resp.status_code == 200
    assert (await client.get(f"{BASE}/my-updates", headers=auth_headers)).json() == []


async def test_delete_past_update_rejected(client, db, employee, auth_headers):
    project = await make_project(db)
    old = WorkUpdate(
        employee_id=employee.id,
        project_id=project.id,
        update_date=TODAY - timedelta(days=2),
        description="Earlier work",
    )
    db.add(old)
    await db.commit()

    resp = await client.delete(f"{BASE}/{old.id}", headers=auth_headers)
    assert resp.status_code == 422


async def test_delete_others_update(client, db, manager, manager_headers, employee, auth_headers):
    project = await make_project(db)
    await assign(db, project, employee)
    update_id = (await client.post(
        f"{BASE}/submit", headers=auth_headers, json=_update(project),
    )).json()["id"]

    resp = await client.delete(f"{BASE}/{update_id}", headers=manager_headers)
    assert resp.status_code == 403


async def test_delete_missing(client, auth_headers):
    resp = await client.delete(f"{BASE}/31337", headers=auth_headers)
    assert resp.status_code == 404

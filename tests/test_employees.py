"""Employee directory tests — CRUD, visibility rules, profile, team."""

from __future__ import annotations

from sqlalchemy import select

from hrms.auth.models import UserSession
from hrms.common.audit import AuditTrail
from hrms.common.constants import UserRole
from tests.conftest import TestSessionFactory, headers_for, make_employee, make_master_item

BASE = "/api/v1/employees"


def _payload(**overrides) -> dict:
    data = {
        "employee_number": "CF1001",
        "first_name": "Priya",
        "last_name": "Sharma",
        "email": "priya.sharma@example.com",
        "date_of_joining": "2025-04-01",
    }
    data.update(overrides)
    return data


# ── Create ──────────────────────────────────────────────────────────


async def test_create_employee_as_hr(client, hr_headers):
    resp = await client.post(BASE, headers=hr_headers, json=_payload(password="Welcome123"))
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["employee_number"] == "CF1001"
    assert data["full_name"] == "Priya Sharma"
    assert data["role"] == "employee"
    assert "password" not in data
    assert "password_hash" not in data

    login = await client.post(
        "/api/v1/auth/login",
        json={"username": "CF1001", "password": "Welcome123"},
    )
    assert login.status_code == 200


async def test_create_employee_writes_audit(client, hr_user, hr_headers):
    resp = await client.post(BASE, headers=hr_headers, json=_payload())
    emp_id = resp.json()["data"]["id"]

    async with TestSessionFactory() as session:
        rows = (
            await session.execute(
                select(AuditTrail).where(
                    AuditTrail.entity_type == "employee",
                    AuditTrail.entity_id == str(emp_id),
                ),
            )
        ).scalars().all()
    assert len(rows) == 1
    assert rows[0].action == "create"
    assert rows[0].actor_id == hr_user.id


async def test_create_employee_forbidden_for_employee(client, auth_headers):
    resp = await client.post(BASE, headers=auth_headers, json=_payload())
    assert resp.status_code == 403


async def test_manager_cannot_update_employee(client, employee, manager_headers):
    resp = await client.put(f"{BASE}/{employee.id}", headers=manager_headers, json={"phone": "123"})
    assert resp.status_code == 403


async def test_create_employee_duplicate_email(client, hr_headers, employee):
    resp = await client.post(BASE, headers=hr_headers, json=_payload(email=employee.email))
    assert resp.status_code == 409
    assert "email" in resp.json()["errors"]


async def test_create_employee_duplicate_number(client, hr_headers, employee):
    resp = await client.post(
        BASE, headers=hr_headers, json=_payload(employee_number=employee.employee_number),
    )
    assert resp.status_code == 409


async def test_create_employee_invalid_email(client, hr_headers):
    resp = await client.post(BASE, headers=hr_headers, json=_payload(email="not-an-email"))
    assert resp.status_code == 422
    assert "email" in resp.json()["errors"]


# ── List ────────────────────────────────────────────────────────────


async def test_list_employees_employee_sees_brief(client, auth_headers):
    resp = await client.get(BASE, headers=auth_headers)
    assert resp.status_code == 200
    row = resp.json()["data"][0]
    assert "pan_number" not in row
    assert "employee_number" in row


async def test_list_employees_hr_sees_full(client, hr_headers, employee):
    resp = await client.get(BASE, headers=hr_headers)
    assert resp.status_code == 200
    row = resp.json()["data"][0]
    assert "employment_status" in row


async def test_list_employees_search(client, db, hr_headers):
    await make_employee(db, first_name="Zebediah", last_name="Quill")
    resp = await client.get(BASE, headers=hr_headers, params={"search": "Zebed"})
    data = resp.json()["data"]
    assert len(data) == 1
    assert data[0]["first_name"] == "Zebediah"


async def test_list_employees_filter_department(client, db, hr_headers):
    dept = await make_master_item(db, "departments", "Engineering")
    await make_employee(db, department_id=dept.id)
    await make_employee(db)

    resp = await client.get(BASE, headers=hr_headers, params={"department_id": dept.id})
    assert resp.json()["meta"]["total"] == 1


async def test_list_employees_pagination(client, db, hr_headers):
    for _ in range(5):
        await make_employee(db)
    resp = await client.get(BASE, headers=hr_headers, params={"page": 2, "page_size": 2})
    meta = resp.json()["meta"]
    assert meta["page"] == 2
    assert meta["has_prev"] is True
    assert len(resp.json()["data"]) == 2


# ── Get / visibility ────────────────────────────────────────────────


async def test_employee_can_view_self(client, employee, auth_headers):
    resp = await client.get(f"{BASE}/{employee.id}", headers=auth_headers)
    assert resp.status_code == 200


async def test_employee_cannot_view_others(client, manager, auth_headers):
    resp = await client.get(f"{BASE}/{manager.id}", headers=auth_headers)
    assert resp.status_code == 403


async def test_manager_can_view_direct_report(client, employee, manager_headers):
    resp = await client.get(f"{BASE}/{employee.id}", headers=manager_headers)
    assert resp.status_code == 200


async def test_manager_cannot_view_non_report(client, db, manager_headers):
    other = await make_employee(db)
    resp = await client.get(f"{BASE}/{other.id}", headers=manager_headers)
    assert resp.status_code == 403


async def test_get_employee_not_found(client, hr_headers):
    resp = await client.get(f"{BASE}/99999", headers=hr_headers)
    assert resp.status_code == 404
    assert resp.json()["title"] == "Employee Not Found"


async def test_employee_details_resolves_names(client, db, hr_headers, manager):
    dept = await make_master_item(db, "departments", "Finance")
    loc = await make_master_item(db, "locations", "Pune")
    emp = await make_employee(
        db, department_id=dept.id, location_id=loc.id, reporting_manager_id=manager.id,
    )
    resp = await client.get(f"{BASE}/{emp.id}/details", headers=hr_headers)
    data = resp.json()["data"]
    assert data["department_name"] == "Finance"
    assert data["location_name"] == "Pune"
    assert data["reporting_manager"]["id"] == manager.id


# ── Update ──────────────────────────────────────────────────────────


async def test_update_employee(client, employee, hr_headers):
    resp = await client.put(
        f"{BASE}/{employee.id}",
        headers=hr_headers,
        json={"phone": "9876543210", "pan_number": "ABCDE1234F"},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["phone"] == "9876543210"
    assert data["pan_number"] == "ABCDE1234F"


async def test_update_employee_email_conflict(client, employee, manager, hr_headers):
    resp = await client.put(
        f"{BASE}/{employee.id}", headers=hr_headers, json={"email": manager.email},
    )
    assert resp.status_code == 409


async def test_update_own_profile(client, auth_headers):
    resp = await client.put(
        f"{BASE}/profile/me",
        headers=auth_headers,
        json={"emergency_contact_name": "Ravi", "emergency_contact_phone": "9000000000"},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["emergency_contact_name"] == "Ravi"


async def test_profile_update_ignores_role(client, employee, auth_headers):
    resp = await client.put(
        f"{BASE}/profile/me", headers=auth_headers, json={"role": "admin"},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["role"] == "employee"


# ── Team ────────────────────────────────────────────────────────────


async def test_my_team(client, employee, manager_headers):
    resp = await client.get(f"{BASE}/my-team/list", headers=manager_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 1
    assert body["data"][0]["id"] == employee.id


async def test_reporting_other_manager_forbidden(client, db, manager_headers):
    other = await make_employee(db, role=UserRole.manager)
    resp = await client.get(f"{BASE}/reporting/{other.id}", headers=manager_headers)
    assert resp.status_code == 403


# ── Deactivate ──────────────────────────────────────────────────────


async def test_deactivate_revokes_sessions(client, db, employee, hr_headers):
    emp_headers = await headers_for(db, employee)
    resp = await client.put(f"{BASE}/{employee.id}/deactivate", headers=hr_headers)
    assert resp.status_code == 200

    async with TestSessionFactory() as session:
        open_sessions = (
            await session.execute(
                select(UserSession).where(
                    UserSession.employee_id == employee.id,
                    UserSession.is_revoked.is_(False),
                ),
            )
        ).scalars().all()
    assert open_sessions == []
    assert (await client.get("/api/v1/auth/me", headers=emp_headers)).status_code == 401


async def test_cannot_deactivate_self(client, hr_user, hr_headers):
    resp = await client.put(f"{BASE}/{hr_user.id}/deactivate", headers=hr_headers)
    assert resp.status_code == 403

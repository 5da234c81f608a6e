"""Notification tests — inbox, read state, ownership, HR send and broadcast."""

from __future__ import annotations

from hrms.common.constants import EmploymentStatus, NotificationType
from hrms.notifications.service import NotificationService
from tests.conftest import make_employee, make_master_item

BASE = "/api/v1/notifications"


async def _notify(db, employee, title="Hello", **kw):
    note = await NotificationService.create_notification(
        db, recipient_id=employee.id, title=title, message=f"{title} body", **kw,
    )
    await db.commit()
    return note


async def test_inbox_newest_first(client, db, employee, auth_headers):
    await _notify(db, employee, "First")
    await _notify(db, employee, "Second")

    resp = await client.get(f"{BASE}/my", headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert [n["title"] for n in body["data"]] == ["Second", "First"]
    assert body["unread"] == 2


async def test_inbox_only_own(client, db, employee, manager, auth_headers):
    await _notify(db, manager, "For manager")
    resp = await client.get(f"{BASE}/my", headers=auth_headers)
    assert resp.json()["data"] == []


async def test_mark_read_and_count(client, db, employee, auth_headers):
    note = await _notify(db, employee)
    await _notify(db, employee, "Other")

    resp = await client.put(f"{BASE}/{note.id}/read", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["is_read"] is True
    assert resp.json()["data"]["read_at"] is not None

    resp = await client.get(f"{BASE}/unread-count", headers=auth_headers)
    assert resp.json() == {"count": 1}

    resp = await client.get(f"{BASE}/my", headers=auth_headers, params={"unread_only": True})
    assert [n["title"] for n in resp.json()["data"]] == ["Other"]


async def test_mark_read_other_users_notification(client, db, manager, auth_headers):
    note = await _notify(db, manager)
    resp = await client.put(f"{BASE}/{note.id}/read", headers=auth_headers)
    assert resp.status_code == 403


async def test_mark_read_missing(client, auth_headers):
    resp = await client.put(f"{BASE}/4242/read", headers=auth_headers)
    assert resp.status_code == 404


async def test_mark_all_read(client, db, employee, auth_headers):
    for i in range(3):
        await _notify(db, employee, f"N{i}")
    resp = await client.put(f"{BASE}/mark-all-read", headers=auth_headers)
    assert resp.json()["count"] == 3
    resp = await client.get(f"{BASE}/unread-count", headers=auth_headers)
    assert resp.json()["count"] == 0


async def test_delete_notification(client, db, employee, auth_headers):
    note = await _notify(db, employee)
    resp = await client.delete(f"{BASE}/{note.id}", headers=auth_headers)
    assert resp.status_code == 200
    resp = await client.get(f"{BASE}/my", headers=auth_headers)
    assert resp.json()["data"] == []


async def test_send_requires_permission(client, employee, manager_headers):
    resp = await client.post(
        f"{BASE}/send",
        headers=manager_headers,
        json={"employee_id": employee.id, "title": "Hi", "message": "There"},
    )
    assert resp.status_code == 403


async def test_hr_send(client, employee, hr_headers, auth_headers):
    resp = await client.post(
        f"{BASE}/send",
        headers=hr_headers,
        json={"employee_id": employee.id, "title": "Docs", "message": "Upload PAN", "type": "reminder"},
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["notification_type"] == "reminder"

    inbox = (await client.get(f"{BASE}/my", headers=auth_headers)).json()
    assert inbox["data"][0]["title"] == "Docs"


async def test_hr_send_unknown_employee(client, hr_headers):
    resp = await client.post(
        f"{BASE}/send",
        headers=hr_headers,
        json={"employee_id": 99999, "title": "Docs", "message": "x"},
    )
    assert resp.status_code == 404


async def test_broadcast_skips_inactive_and_exited(client, db, hr_headers, employee, manager, hr_user):
    await make_employee(db, is_active=False)
    await make_employee(db, employment_status=EmploymentStatus.resigned)

    resp = await client.post(
        f"{BASE}/broadcast", headers=hr_headers, json={"title": "Townhall", "message": "Friday 4pm"},
    )
    assert resp.status_code == 201
    assert resp.json()["count"] == 3


async def test_broadcast_to_department(client, db, hr_headers):
    dept = await make_master_item(db, "departments", "Engineering")
    await make_employee(db, department_id=dept.id)
    await make_employee(db, department_id=dept.id)

    resp = await client.post(
        f"{BASE}/broadcast",
        headers=hr_headers,
        json={"title": "Deploy freeze", "message": "No deploys", "department_id": dept.id},
    )
    assert resp.json()["count"] == 2


async def test_broadcast_type_defaults_to_announcement(client, db, hr_headers, hr_user):
    await client.post(f"{BASE}/broadcast", headers=hr_headers, json={"title": "T", "message": "M"})
    notes = await NotificationService.get_notifications(db, hr_user.id)
    assert notes[0].notification_type == NotificationType.announcement

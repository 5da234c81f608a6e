"""Support-ticket tests — numbering, visibility, workflow, comments."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from hrms.common.constants import TicketStatus
from hrms.common.exceptions import ValidationException
from hrms.notifications.models import Notification
from hrms.support.service import check_transition

BASE = "/api/v1/support"


async def _raise(client, headers, subject="Laptop will not boot", **kw):
    resp = await client.post(
        BASE, headers=headers, json={"subject": subject, "description": "Black screen", **kw},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestTransitions:

    def test_allowed(self):
        check_transition(TicketStatus.open, TicketStatus.in_progress)
        check_transition(TicketStatus.resolved, TicketStatus.open)
        check_transition(TicketStatus.closed, TicketStatus.closed)

    def test_closed_only_reopens(self):
        with pytest.raises(ValidationException):
            check_transition(TicketStatus.closed, TicketStatus.resolved)


async def test_create_numbers_sequentially(client, employee, auth_headers):
    first = await _raise(client, auth_headers, category="IT", priority="high")
    second = await _raise(client, auth_headers, "Payslip missing")

    assert first["ticket_number"] == "TKT-00001"
    assert second["ticket_number"] == "TKT-00002"
    assert first["status"] == "open"
    assert first["category"] == "IT"
    assert first["raised_by_name"] == employee.full_name
    assert first["comments"] == []


async def test_list_scoped_for_employees(client, manager_headers, auth_headers, hr_headers):
    await _raise(client, auth_headers)
    await _raise(client, manager_headers, "Access card")

    mine = (await client.get(BASE, headers=auth_headers)).json()
    assert mine["meta"]["total"] == 1
    assert (await client.get(BASE, headers=hr_headers)).json()["meta"]["total"] == 2


async def test_list_filters(client, auth_headers, hr_headers):
    await _raise(client, auth_headers, priority="critical")
    await _raise(client, auth_headers, "Other", category="Payroll")

    rows = (await client.get(BASE, headers=hr_headers, params={"priority": "critical"})).json()["data"]
    assert len(rows) == 1
    rows = (await client.get(BASE, headers=hr_headers, params={"category": "Payroll"})).json()["data"]
    assert rows[0]["subject"] == "Other"


async def test_my_tickets(client, auth_headers, manager_headers):
    await _raise(client, auth_headers, "One")
    await _raise(client, manager_headers, "Two")
    rows = (await client.get(f"{BASE}/my-tickets", headers=auth_headers)).json()
    assert [t["subject"] for t in rows] == ["One"]


async def test_visibility(client, manager_headers, auth_headers, hr_headers):
    ticket = await _raise(client, auth_headers)
    assert (await client.get(f"{BASE}/{ticket['id']}", headers=auth_headers)).status_code == 200
    assert (await client.get(f"{BASE}/{ticket['id']}", headers=hr_headers)).status_code == 200
    assert (await client.get(f"{BASE}/{ticket['id']}", headers=manager_headers)).status_code == 403
    assert (await client.get(f"{BASE}/9999", headers=hr_headers)).status_code == 404


async def test_assign_gives_assignee_access(client, db, manager, manager_headers, auth_headers, hr_headers):
    ticket = await _raise(client, auth_headers)
    resp = await client.put(
        f"{BASE}/{ticket['id']}", headers=hr_headers, json={"assigned_to": manager.id},
    )
    assert resp.status_code == 200
    assert resp.json()["assigned_to_name"] == manager.full_name

    assert (await client.get(f"{BASE}/{ticket['id']}", headers=manager_headers)).status_code == 200
    note = (await db.execute(
        select(Notification).where(Notification.recipient_id == manager.id)
    )).scalar_one()
    assert note.title == "Ticket Assigned"

    # The assignee may now move it along
    resp = await client.put(
        f"{BASE}/{ticket['id']}", headers=manager_headers, json={"status": "in-progress"},
    )
    assert resp.json()["status"] == "in-progress"


async def test_raiser_cannot_update(client, auth_headers):
    ticket = await _raise(client, auth_headers)
    resp = await client.put(f"{BASE}/{ticket['id']}", headers=auth_headers, json={"priority": "critical"})
    assert resp.status_code == 403


async def test_status_workflow(client, db, employee, auth_headers, hr_headers):
    ticket = await _raise(client, auth_headers)

    resp = await client.put(f"{BASE}/{ticket['id']}", headers=hr_headers, json={"status": "resolved"})
    assert resp.json()["resolved_at"] is not None

    resp = await client.put(f"{BASE}/{ticket['id']}", headers=hr_headers, json={"status": "in-progress"})
    assert resp.status_code == 422

    resp = await client.put(f"{BASE}/{ticket['id']}", headers=hr_headers, json={"status": "open"})
    assert resp.json()["resolved_at"] is None

    notes = (await db.execute(
        select(Notification).where(Notification.recipient_id == employee.id)
    )).scalars().all()
    assert {n.title for n in notes} == {"Ticket Updated"}
    assert len(notes) == 2


async def test_assign_unknown_employee(client, auth_headers, hr_headers):
    ticket = await _raise(client, auth_headers)
    resp = await client.put(f"{BASE}/{ticket['id']}", headers=hr_headers, json={"assigned_to": 99999})
    assert resp.status_code == 404


async def test_owner_closes(client, auth_headers, manager_headers):
    ticket = await _raise(client, auth_headers)
    resp = await client.put(f"{BASE}/{ticket['id']}/close", headers=manager_headers)
    assert resp.status_code == 403

    resp = await client.put(f"{BASE}/{ticket['id']}/close", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "closed"
    assert resp.json()["closed_at"] is not None


async def test_comments(client, employee, hr_user, auth_headers, hr_headers, manager_headers):
    ticket = await _raise(client, auth_headers)

    resp = await client.post(
        f"{BASE}/{ticket['id']}/comment", headers=auth_headers, json={"comment": "Still broken"},
    )
    assert resp.status_code == 201
    assert resp.json()["author_name"] == employee.full_name

    await client.post(f"{BASE}/{ticket['id']}/comment", headers=hr_headers, json={"comment": "On it"})

    resp = await client.post(f"{BASE}/{ticket['id']}/comment", headers=manager_headers, json={"comment": "hi"})
    assert resp.status_code == 403

    detail = (await client.get(f"{BASE}/{ticket['id']}", headers=auth_headers)).json()
    assert [c["comment"] for c in detail["comments"]] == ["Still broken", "On it"]
    assert detail["comments"][1]["author_id"] == hr_user.id


async def test_empty_comment_rejected(client, auth_headers):
    ticket = await _raise(client, auth_headers)
    resp = await client.post(f"{BASE}/{ticket['id']}/comment", headers=auth_headers, json={"comment": ""})
    assert resp.status_code == 422

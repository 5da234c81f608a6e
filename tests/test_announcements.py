"""Announcement tests — ordering, expiry, HR writes, optional broadcast."""

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import func, select

from hrms.announcements.models import Announcement
from hrms.common.constants import AnnouncementPriority
from hrms.notifications.models import Notification

BASE = "/api/v1/announcements"


async def _post(client, headers, title="Townhall", **kw):
    resp = await client.post(BASE, headers=headers, json={"title": title, "content": f"{title} details", **kw})
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_create_sets_author(client, hr_user, hr_headers):
    body = await _post(client, hr_headers)
    assert body["created_by"] == hr_user.id
    assert body["author_name"] == f"{hr_user.first_name} {hr_user.last_name}"
    assert body["priority"] == "medium"
    assert body["is_active"] is True


async def test_create_forbidden_for_employee(client, auth_headers):
    resp = await client.post(BASE, headers=auth_headers, json={"title": "x", "content": "y"})
    assert resp.status_code == 403


async def test_list_pins_urgent_and_high(client, hr_headers, auth_headers):
    await _post(client, hr_headers, "Old urgent", announcement_type="urgent")
    await _post(client, hr_headers, "Plain")
    await _post(client, hr_headers, "High", priority="high")
    await _post(client, hr_headers, "Newest plain")

    titles = [a["title"] for a in (await client.get(BASE, headers=auth_headers)).json()]
    assert titles == ["High", "Old urgent", "Newest plain", "Plain"]


async def test_expired_and_inactive_hidden(client, db, hr_user, hr_headers, auth_headers):
    db.add(Announcement(
        title="Expired",
        content="gone",
        priority=AnnouncementPriority.low,
        expires_at=datetime.now() - timedelta(days=1),
        created_by=hr_user.id,
    ))
    await db.commit()
    live = await _post(client, hr_headers, "Live")
    hidden = await _post(client, hr_headers, "Hidden")
    await client.put(f"{BASE}/{hidden['id']}/deactivate", headers=hr_headers)

    titles = [a["title"] for a in (await client.get(BASE, headers=auth_headers)).json()]
    assert titles == [live["title"]]

    # include_inactive only takes effect for HR
    resp = await client.get(BASE, headers=auth_headers, params={"include_inactive": True})
    assert len(resp.json()) == 1
    resp = await client.get(BASE, headers=hr_headers, params={"include_inactive": True})
    assert len(resp.json()) == 3


async def test_get_and_missing(client, hr_headers, auth_headers):
    created = await _post(client, hr_headers)
    resp = await client.get(f"{BASE}/{created['id']}", headers=auth_headers)
    assert resp.json()["title"] == "Townhall"

    resp = await client.get(f"{BASE}/999", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["title"] == "Announcement Not Found"


async def test_update(client, hr_headers):
    created = await _post(client, hr_headers)
    resp = await client.put(
        f"{BASE}/{created['id']}", headers=hr_headers, json={"content": "Moved to Friday", "priority": "high"},
    )
    assert resp.status_code == 200
    assert resp.json()["content"] == "Moved to Friday"
    assert resp.json()["priority"] == "high"


async def test_delete(client, hr_headers):
    created = await _post(client, hr_headers)
    assert (await client.delete(f"{BASE}/{created['id']}", headers=hr_headers)).status_code == 200
    assert (await client.get(f"{BASE}/{created['id']}", headers=hr_headers)).status_code == 404


async def test_notify_employees_broadcasts(client, db, employee, manager, hr_headers):
    await _post(client, hr_headers, "Holiday party", notify_employees=True)
    count = (await db.execute(
        select(func.count(Notification.id)).where(Notification.title == "Holiday party")
    )).scalar()
    assert count == 3


async def test_no_broadcast_by_default(client, db, employee, hr_headers):
    await _post(client, hr_headers, "Quiet")
    count = (await db.execute(select(func.count(Notification.id)))).scalar()
    assert count == 0

"""Holiday tests — calendar CRUD, location scoping, upcoming widget."""

from __future__ import annotations

from datetime import date, timedelta

BASE = "/api/v1/holidays"


async def _holiday(client, headers, name, day, **kw):
    resp = await client.post(
        BASE, headers=headers, json={"name": name, "holiday_date": day, **kw},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_create_and_list(client, hr_headers, auth_headers):
    await _holiday(client, hr_headers, "Diwali", "2026-11-08", holiday_type="festival")
    await _holiday(client, hr_headers, "Republic Day", "2026-01-26")

    rows = (await client.get(BASE, headers=auth_headers, params={"year": 2026})).json()
    assert [h["name"] for h in rows] == ["Republic Day", "Diwali"]
    assert rows[1]["holiday_type"] == "festival"
    assert rows[0]["holiday_type"] == "public"


async def test_year_filter(client, hr_headers, auth_headers):
    await _holiday(client, hr_headers, "New Year", "2025-01-01")
    await _holiday(client, hr_headers, "New Year", "2026-01-01")
    rows = (await client.get(BASE, headers=auth_headers, params={"year": 2025})).json()
    assert [h["holiday_date"] for h in rows] == ["2025-01-01"]


async def test_location_filter_includes_company_wide(client, hr_headers, auth_headers):
    await _holiday(client, hr_headers, "Independence Day", "2026-08-15")
    await _holiday(client, hr_headers, "Onam", "2026-08-26", location="Kochi")
    await _holiday(client, hr_headers, "Ganesh Chaturthi", "2026-09-14", location="Mumbai")

    rows = (await client.get(BASE, headers=auth_headers, params={"location": "Kochi"})).json()
    assert [h["name"] for h in rows] == ["Independence Day", "Onam"]


async def test_duplicate_rejected_per_location(client, hr_headers):
    await _holiday(client, hr_headers, "Pongal", "2026-01-14", location="Chennai")
    resp = await client.post(
        BASE, headers=hr_headers,
        json={"name": "Pongal", "holiday_date": "2026-01-14", "location": "Chennai"},
    )
    assert resp.status_code == 409

    # Same name and date elsewhere is a different holiday
    await _holiday(client, hr_headers, "Pongal", "2026-01-14", location="Madurai")
    await _holiday(client, hr_headers, "Pongal", "2026-01-14")
    resp = await client.post(BASE, headers=hr_headers, json={"name": "Pongal", "holiday_date": "2026-01-14"})
    assert resp.status_code == 409


async def test_create_forbidden_for_manager(client, manager_headers):
    resp = await client.post(BASE, headers=manager_headers, json={"name": "x", "holiday_date": "2026-01-01"})
    assert resp.status_code == 403


async def test_upcoming(client, hr_headers, auth_headers):
    today = date.today()
    await _holiday(client, hr_headers, "Past", (today - timedelta(days=1)).isoformat())
    for offset in (30, 10, 20):
        await _holiday(client, hr_headers, f"In {offset}", (today + timedelta(days=offset)).isoformat())

    rows = (await client.get(f"{BASE}/upcoming", headers=auth_headers, params={"limit": 2})).json()
    assert [h["name"] for h in rows] == ["In 10", "In 20"]


async def test_update(client, hr_headers):
    created = await _holiday(client, hr_headers, "Holi", "2026-03-03")
    resp = await client.put(
        f"{BASE}/{created['id']}", headers=hr_headers, json={"holiday_date": "2026-03-04", "is_optional": True},
    )
    assert resp.status_code == 200
    assert resp.json()["holiday_date"] == "2026-03-04"
    assert resp.json()["is_optional"] is True


async def test_update_rejects_null_for_required_fields(client, hr_headers, auth_headers):
    created = await _holiday(client, hr_headers, "Pongal", "2026-01-14")
    resp = await client.put(f"{BASE}/{created['id']}", headers=hr_headers, json={"holiday_date": None})
    assert resp.status_code == 422
    assert "holiday_date" in resp.json()["errors"]

    # Nullable columns can still be cleared
    resp = await client.put(f"{BASE}/{created['id']}", headers=hr_headers, json={"location": None})
    assert resp.status_code == 200
    rows = (await client.get(BASE, headers=auth_headers)).json()
    assert rows[0]["holiday_date"] == "2026-01-14"


async def test_update_into_duplicate(client, hr_headers):
    await _holiday(client, hr_headers, "Eid", "2026-03-20")
    other = await _holiday(client, hr_headers, "Eid", "2026-03-21")
    resp = await client.put(f"{BASE}/{other['id']}", headers=hr_headers, json={"holiday_date": "2026-03-20"})
    assert resp.status_code == 409


async def test_delete(client, hr_headers, auth_headers):
    created = await _holiday(client, hr_headers, "Christmas", "2026-12-25")
    assert (await client.delete(f"{BASE}/{created['id']}", headers=hr_headers)).status_code == 200
    assert (await client.get(BASE, headers=auth_headers)).json() == []
    assert (await client.delete(f"{BASE}/{created['id']}", headers=hr_headers)).status_code == 404

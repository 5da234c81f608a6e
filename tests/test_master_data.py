"""Master-data tests — generic /{type} CRUD, uniqueness, in-use protection."""

from __future__ import annotations

from tests.conftest import make_employee, make_master_item

BASE = "/api/v1"


async def test_create_and_list_location(client, hr_headers, auth_headers):
    resp = await client.post(
        f"{BASE}/locations",
        headers=hr_headers,
        json={"name": "Mumbai", "code": "MUM", "attributes": {"timezone": "Asia/Kolkata"}},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["type"] == "locations"
    assert body["data"]["attributes"] == {"timezone": "Asia/Kolkata"}

    resp = await client.get(f"{BASE}/locations", headers=auth_headers)
    assert resp.status_code == 200
    assert [item["name"] for item in resp.json()] == ["Mumbai"]


async def test_unknown_type_is_404(client, hr_headers):
    resp = await client.get(f"{BASE}/spaceships", headers=hr_headers)
    assert resp.status_code == 404
    assert resp.json()["title"] == "Master data type Not Found"


async def test_create_requires_master_data_permission(client, auth_headers, manager_headers):
    for headers in (auth_headers, manager_headers):
        resp = await client.post(f"{BASE}/departments", headers=headers, json={"name": "Ops"})
        assert resp.status_code == 403


async def test_duplicate_name_case_insensitive(client, db, hr_headers):
    await make_master_item(db, "departments", "Engineering")
    resp = await client.post(
        f"{BASE}/departments", headers=hr_headers, json={"name": "engineering"},
    )
    assert resp.status_code == 409


async def test_same_name_allowed_across_types(client, db, hr_headers):
    await make_master_item(db, "departments", "Design")
    resp = await client.post(f"{BASE}/designations", headers=hr_headers, json={"name": "Design"})
    assert resp.status_code == 201


async def test_list_excludes_inactive_on_request(client, db, auth_headers):
    await make_master_item(db, "bands", "L1")
    await make_master_item(db, "bands", "L0", is_active=False)

    resp = await client.get(f"{BASE}/bands", headers=auth_headers)
    assert len(resp.json()) == 2

    resp = await client.get(
        f"{BASE}/bands", headers=auth_headers, params={"include_inactive": "false"},
    )
    assert [item["name"] for item in resp.json()] == ["L1"]


async def test_get_item_wrong_type_is_404(client, db, auth_headers):
    item = await make_master_item(db, "departments", "Sales")
    resp = await client.get(f"{BASE}/locations/{item.id}", headers=auth_headers)
    assert resp.status_code == 404
    resp = await client.get(f"{BASE}/departments/{item.id}", headers=auth_headers)
    assert resp.status_code == 200


async def test_update_item(client, db, hr_headers):
    item = await make_master_item(db, "cost-centers", "CC-01")
    resp = await client.put(
        f"{BASE}/cost-centers/{item.id}",
        headers=hr_headers,
        json={"description": "Head office", "is_active": False},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["description"] == "Head office"
    assert data["is_active"] is False


async def test_update_item_rejects_null_name(client, db, hr_headers):
    item = await make_master_item(db, "locations", "Pune")
    resp = await client.put(f"{BASE}/locations/{item.id}", headers=hr_headers, json={"name": None})
    assert resp.status_code == 422
    assert "name" in resp.json()["errors"]


async def test_update_item_rename_conflict(client, db, hr_headers):
    await make_master_item(db, "departments", "HR")
    item = await make_master_item(db, "departments", "Finance")
    resp = await client.put(
        f"{BASE}/departments/{item.id}", headers=hr_headers, json={"name": "HR"},
    )
    assert resp.status_code == 409


async def test_delete_item(client, db, hr_headers):
    item = await make_master_item(db, "pay-grades", "PG-1")
    resp = await client.delete(f"{BASE}/pay-grades/{item.id}", headers=hr_headers)
    assert resp.status_code == 200
    resp = await client.get(f"{BASE}/pay-grades/{item.id}", headers=hr_headers)
    assert resp.status_code == 404


async def test_delete_item_in_use_conflict(client, db, hr_headers):
    dept = await make_master_item(db, "departments", "Support")
    await make_employee(db, department_id=dept.id)
    resp = await client.delete(f"{BASE}/departments/{dept.id}", headers=hr_headers)
    assert resp.status_code == 409
    assert "assigned to employees" in resp.json()["detail"]


async def test_domain_routes_win_over_master_data(client, hr_headers):
    """/health and /employees must not be captured by the /{type} route."""
    resp = await client.get(f"{BASE}/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"

    resp = await client.get(f"{BASE}/employees", headers=hr_headers)
    assert resp.status_code == 200
    assert "meta" in resp.json()

"""Auth module tests — password login, sessions, RBAC, user role administration."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

from sqlalchemy import select

import hrms
from hrms.auth.models import UserSession
from hrms.auth.service import hash_password, hash_token, verify_password
from hrms.common.constants import PERMISSIONS, UserRole
from tests.conftest import DEFAULT_PASSWORD, TestSessionFactory, headers_for, make_employee


# ── Password hashing ────────────────────────────────────────────────


def test_password_hash_roundtrip():
    encoded = hash_password("s3cret-pass", method="pbkdf2:sha256:1000")
    assert encoded.startswith("pbkdf2:sha256:1000$")
    assert verify_password("s3cret-pass", encoded)
    assert not verify_password("wrong", encoded)


def test_password_hashes_are_salted():
    assert hash_password("same") != hash_password("same")


def test_verify_password_rejects_garbage():
    assert not verify_password("x", None)
    assert not verify_password("x", "not-a-hash")
    assert not verify_password("x", "md5$salt$abc")
    assert not verify_password("x", "pbkdf2:sha256:notanint$salt$digest")


# ── Login ───────────────────────────────────────────────────────────


async def test_login_with_email(client, employee):
    resp = await client.post(
        "/api/v1/auth/login",
        json={"username": employee.email, "password": DEFAULT_PASSWORD},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["token_type"] == "bearer"
    assert data["expires_in"] > 0
    assert data["user"]["id"] == employee.id


async def test_login_with_employee_number(client, employee):
    resp = await client.post(
        "/api/v1/auth/login",
        json={"username": employee.employee_number, "password": DEFAULT_PASSWORD},
    )
    assert resp.status_code == 200


async def test_login_wrong_password(client, employee):
    resp = await client.post(
        "/api/v1/auth/login",
        json={"username": employee.email, "password": "nope"},
    )
    assert resp.status_code == 401
    body = resp.json()
    assert body["status"] == 401
    assert body["error"] == "Invalid username or password."


async def test_login_with_corrupt_stored_hash(client, db, employee):
    employee.password_hash = "pbkdf2:sha256:notanint$salt$digest"
    await db.commit()

    resp = await client.post(
        "/api/v1/auth/login",
        json={"username": employee.email, "password": DEFAULT_PASSWORD},
    )
    assert resp.status_code == 401


async def test_login_inactive_user_rejected(client, db):
    emp = await make_employee(db, is_active=False)
    resp = await client.post(
        "/api/v1/auth/login",
        json={"username": emp.email, "password": DEFAULT_PASSWORD},
    )
    assert resp.status_code == 401


async def test_login_persists_session(client, employee):
    resp = await client.post(
        "/api/v1/auth/login",
        json={"username": employee.email, "password": DEFAULT_PASSWORD},
    )
    token = resp.json()["access_token"]

    async with TestSessionFactory() as session:
        row = (
            await session.execute(
                select(UserSession).where(UserSession.token_hash == hash_token(token)),
            )
        ).scalars().first()
    assert row is not None
    assert row.employee_id == employee.id
    assert row.is_revoked is False


# ── Session validation ──────────────────────────────────────────────


async def test_me_requires_token(client):
    resp = await client.get("/api/v1/auth/me")
    assert resp.status_code == 401


async def test_me_rejects_garbage_token(client):
    resp = await client.get(
        "/api/v1/auth/me", headers={"Authorization": "Bearer not.a.jwt"},
    )
    assert resp.status_code == 401


async def test_me_returns_permissions_and_reports(client, manager, manager_headers, employee):
    resp = await client.get("/api/v1/auth/me", headers=manager_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == manager.id
    assert data["role"] == "manager"
    assert set(data["permissions"]) == set(PERMISSIONS[UserRole.manager])
    assert data["direct_reports_count"] == 1


def test_every_granted_permission_is_checked():
    source = "\n".join(
        path.read_text()
        for path in Path(hrms.__file__).parent.rglob("*.py")
        if path.name != "constants.py"
    )
    granted = {perm for perms in PERMISSIONS.values() for perm in perms}
    assert {perm for perm in granted if f'"{perm}"' not in source} == set()


def test_permissions_are_not_inherited():
    assert "timesheet:submit" in PERMISSIONS[UserRole.manager]
    assert "timesheet:submit" not in PERMISSIONS[UserRole.hr]
    assert "profile:read_team" not in PERMISSIONS[UserRole.hr]
    assert "leave:request" in PERMISSIONS[UserRole.hr]


async def test_logout_revokes_session(client, auth_headers):
    resp = await client.post("/api/v1/auth/logout", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    resp = await client.get("/api/v1/auth/me", headers=auth_headers)
    assert resp.status_code == 401


async def test_expired_session_rejected(client, db, employee, auth_headers):
    async with TestSessionFactory() as session:
        rows = (
            await session.execute(
                select(UserSession).where(UserSession.employee_id == employee.id),
            )
        ).scalars().all()
        for row in rows:
            row.expires_at = datetime.now() - timedelta(minutes=1)
        await session.commit()

    resp = await client.get("/api/v1/auth/me", headers=auth_headers)
    assert resp.status_code == 401


async def test_role_change_applies_immediately(client, db, employee, auth_headers):
    """The stored role wins over the claim baked into the token."""
    resp = await client.get("/api/v1/auth/users", headers=auth_headers)
    assert resp.status_code == 403

    employee.role = UserRole.admin
    await db.commit()

    resp = await client.get("/api/v1/auth/users", headers=auth_headers)
    assert resp.status_code == 200


# ── Change password ─────────────────────────────────────────────────


async def test_change_password(client, employee, auth_headers):
    resp = await client.post(
        "/api/v1/auth/change-password",
        headers=auth_headers,
        json={"current_password": DEFAULT_PASSWORD, "new_password": "BrandNew123"},
    )
    assert resp.status_code == 200

    resp = await client.post(
        "/api/v1/auth/login",
        json={"username": employee.email, "password": "BrandNew123"},
    )
    assert resp.status_code == 200


async def test_change_password_wrong_current(client, auth_headers):
    resp = await client.post(
        "/api/v1/auth/change-password",
        headers=auth_headers,
        json={"current_password": "wrong-one", "new_password": "BrandNew123"},
    )
    assert resp.status_code == 422
    assert "current_password" in resp.json()["errors"]


async def test_change_password_too_short(client, auth_headers):
    resp = await client.post(
        "/api/v1/auth/change-password",
        headers=auth_headers,
        json={"current_password": DEFAULT_PASSWORD, "new_password": "short"},
    )
    assert resp.status_code == 422
    assert "new_password" in resp.json()["errors"]


# ── User administration ─────────────────────────────────────────────


async def test_list_users_admin_only(client, hr_headers, admin_headers, employee):
    resp = await client.get("/api/v1/auth/users", headers=hr_headers)
    assert resp.status_code == 403

    resp = await client.get("/api/v1/auth/users", headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["meta"]["total"] >= 3


async def test_list_users_filter_by_role(client, admin_headers, employee):
    resp = await client.get(
        "/api/v1/auth/users", params={"role": "employee"}, headers=admin_headers,
    )
    assert resp.status_code == 200
    roles = {u["role"] for u in resp.json()["data"]}
    assert roles == {"employee"}


async def test_get_user_not_found(client, admin_headers):
    resp = await client.get("/api/v1/auth/users/99999", headers=admin_headers)
    assert resp.status_code == 404


async def test_update_role(client, admin_headers, employee):
    resp = await client.put(
        f"/api/v1/auth/users/{employee.id}/role",
        headers=admin_headers,
        json={"role": "manager"},
    )
    assert resp.status_code == 200
    assert resp.json()["role"] == "manager"


async def test_make_hr_shortcut(client, admin_headers, employee):
    resp = await client.post(
        f"/api/v1/auth/users/{employee.id}/make-hr", headers=admin_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["user"]["role"] == "hr"


async def test_admin_cannot_demote_self(client, admin_user, admin_headers):
    resp = await client.post(
        f"/api/v1/auth/users/{admin_user.id}/make-employee", headers=admin_headers,
    )
    assert resp.status_code == 422


async def test_bulk_update_roles_collects_failures(client, admin_headers, employee, manager):
    resp = await client.post(
        "/api/v1/auth/users/bulk-update-roles",
        headers=admin_headers,
        json={
            "updates": [
                {"user_id": employee.id, "role": "manager"},
                {"user_id": manager.id, "role": "hr"},
                {"user_id": 424242, "role": "hr"},
            ],
        },
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["updated_count"] == 2
    assert data["failed_count"] == 1
    assert data["failures"][0]["user_id"] == 424242


async def test_sessions_are_independent(client, db, employee):
    first = await headers_for(db, employee)
    second = await headers_for(db, employee)
    assert first != second

    await client.post("/api/v1/auth/logout", headers=first)
    assert (await client.get("/api/v1/auth/me", headers=first)).status_code == 401
    assert (await client.get("/api/v1/auth/me", headers=second)).status_code == 200

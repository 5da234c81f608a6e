"""Security test suite — login rate limiting, token tampering, SQL hygiene."""

from __future__ import annotations

import ast
import os
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from hrms.auth.service import create_access_token, hash_token
from hrms.common.constants import UserRole
from hrms.config import settings
from tests.conftest import DEFAULT_PASSWORD

LOGIN = "/api/v1/auth/login"


# ═════════════════════════════════════════════════════════════════════
# 1. RATE LIMITING — login
# ═════════════════════════════════════════════════════════════════════


class TestRateLimiting:

    @pytest.fixture(autouse=True)
    def _enable_limiter(self):
        from hrms.common.rate_limit import limiter

        original = limiter.enabled
        limiter.enabled = True
        limiter.reset()
        yield
        limiter.enabled = original

    async def test_login_limited_per_minute(self, client, employee):
        limit = int(settings.LOGIN_RATE_LIMIT.split("/")[0])
        for i in range(limit):
            # Failed logins count too
            resp = await client.post(LOGIN, json={"username": employee.email, "password": f"bad-{i}"})
            assert resp.status_code == 401, f"Request {i + 1} should reach the handler"

        resp = await client.post(LOGIN, json={"username": employee.email, "password": DEFAULT_PASSWORD})
        assert resp.status_code == 429

    async def test_other_endpoints_unaffected(self, client, employee, auth_headers):
        limit = int(settings.LOGIN_RATE_LIMIT.split("/")[0])
        for _ in range(limit + 1):
            await client.post(LOGIN, json={"username": employee.email, "password": "bad"})

        resp = await client.get("/api/v1/auth/me", headers=auth_headers)
        assert resp.status_code == 200


# ═════════════════════════════════════════════════════════════════════
# 2. TOKENS
# ═════════════════════════════════════════════════════════════════════


class TestTokens:

    def test_tokens_are_unique(self):
        first, _ = create_access_token(1, UserRole.employee)
        second, _ = create_access_token(1, UserRole.employee)
        assert first != second
        assert hash_token(first) != hash_token(second)

    def test_expiry_matches_settings(self):
        token, expires_in = create_access_token(7, UserRole.hr)
        assert expires_in == settings.JWT_EXPIRY_HOURS * 3600
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        assert claims["sub"] == "7"
        assert claims["role"] == "hr"
        assert claims["type"] == "access"

    async def test_foreign_signature_rejected(self, client, employee):
        forged = jwt.encode(
            {
                "sub": str(employee.id),
                "type": "access",
                "exp": datetime.now(timezone.utc) + timedelta(hours=1),
            },
            "not-the-server-secret",
            algorithm=settings.JWT_ALGORITHM,
        )
        resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {forged}"})
        assert resp.status_code == 401

    async def test_wrong_token_type_rejected(self, client, employee):
        token = jwt.encode(
            {
                "sub": str(employee.id),
                "type": "refresh",
                "exp": datetime.now(timezone.utc) + timedelta(hours=1),
            },
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    async def test_valid_jwt_without_session_rejected(self, client, employee):
        token, _ = create_access_token(employee.id, employee.role)
        resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    async def test_expired_jwt_rejected(self, client, employee):
        token = jwt.encode(
            {
                "sub": str(employee.id),
                "type": "access",
                "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
            },
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401


# ═════════════════════════════════════════════════════════════════════
# 3. SQL — no interpolated statements in schema revisions
# ═════════════════════════════════════════════════════════════════════


def test_revisions_do_not_execute_fstrings():
    versions = os.path.join(os.path.dirname(__file__), "..", "alembic", "versions")
    for fname in os.listdir(versions):
        if not fname.endswith(".py"):
            continue
        with open(os.path.join(versions, fname)) as f:
            tree = ast.parse(f.read())
        for node in ast.walk(tree):
            if (
                isinstance(node, ast.Call)
                and isinstance(node.func, ast.Attribute)
                and node.func.attr == "execute"
                and node.args
            ):
                assert not isinstance(node.args[0], ast.JoinedStr), (
                    f"f-string passed to execute() in {fname}:{node.lineno}"
                )

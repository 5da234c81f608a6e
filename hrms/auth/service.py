"""Auth service — password login, JWT management, session lifecycle, user roles."""

from __future__ import annotations

import hashlib
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from hrms.auth.models import UserSession
from hrms.common.audit import create_audit_entry
from hrms.common.constants import UserRole
from hrms.common.exceptions import (
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from hrms.common.filters import apply_search
from hrms.common.pagination import PaginatedResponse, PaginationParams, paginate
from hrms.config import settings
from hrms.employees.models import Employee

logger = logging.getLogger(__name__)


# ── Passwords ───────────────────────────────────────────────────────

def hash_password(password: str, *, method: Optional[str] = None) -> str:
    return generate_password_hash(password, method=method or settings.PASSWORD_HASH_METHOD)


def verify_password(password: str, encoded: Optional[str]) -> bool:
    """False for a missing, wrong or unreadable stored hash."""
    if not encoded:
        return False
    try:
        return check_password_hash(encoded, password)
    except ValueError:
        # Unknown method or corrupt parameters in the stored hash
        logger.warning("Unreadable password hash rejected")
        return False


# ── JWT helpers ─────────────────────────────────────────────────────

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def create_access_token(employee_id: int, role: UserRole) -> tuple[str, int]:
    """Return (encoded_jwt, expires_in_seconds)."""
    expires_in = settings.JWT_EXPIRY_HOURS * 3600
    payload = {
        "sub": str(employee_id),
        "role": role.value,
        "type": "access",
        "jti": uuid.uuid4().hex,  # two logins in the same second must still differ
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_in


# ── Login / logout ──────────────────────────────────────────────────

async def authenticate(db: AsyncSession, username: str, password: str) -> Employee:
    """Resolve *username* (email or employee number) and check the password."""
    result = await db.execute(
        select(Employee).where(
            or_(Employee.email == username, Employee.employee_number == username),
            Employee.is_active.is_(True),
        ),
    )
    employee = result.scalars().first()
    if employee is None or not verify_password(password, employee.password_hash):
        logger.warning("Failed login for %s", username)
        raise UnauthorizedException("Invalid username or password.")
    return employee


async def create_session(
    db: AsyncSession,
    employee: Employee,
    ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> tuple[str, int]:
    """Issue an access token and persist its session row."""
    token, expires_in = create_access_token(employee.id, employee.role)
    db.add(
        UserSession(
            employee_id=employee.id,
            token_hash=hash_token(token),
            ip_address=ip,
            user_agent=user_agent,
            expires_at=datetime.now() + timedelta(seconds=expires_in),
        ),
    )
    employee.last_login_at = datetime.now()
    await db.flush()
    return token, expires_in


async def revoke_session(db: AsyncSession, token_hash: str) -> None:
    """Mark a session as revoked by its token hash."""
    result = await db.execute(
        select(UserSession).where(UserSession.token_hash == token_hash),
    )
    session = result.scalars().first()
    if session:
        session.is_revoked = True
        await db.flush()


async def change_password(
    db: AsyncSession,
    employee: Employee,
    current_password: str,
    new_password: str,
) -> None:
    if not verify_password(current_password, employee.password_hash):
        raise ValidationException({"current_password": ["Current password is incorrect."]})
    if current_password == new_password:
        raise ValidationException(
            {"new_password": ["New password must differ from the current one."]},
        )
    employee.password_hash = hash_password(new_password)
    await db.flush()
    await create_audit_entry(
        db,
        action="change_password",
        entity_type="employee",
        entity_id=employee.id,
        actor_id=employee.id,
    )


# ── User administration ─────────────────────────────────────────────

async def list_users(
    db: AsyncSession,
    pagination: PaginationParams,
    *,
    role: Optional[UserRole] = None,
    search: Optional[str] = None,
) -> PaginatedResponse:
    query = select(Employee).order_by(Employee.id)
    if role is not None:
        query = query.where(Employee.role == role)
    query = apply_search(
        query, Employee, search, ["first_name", "last_name", "email", "employee_number"],
    )
    return await paginate(db, query, pagination, model=Employee)


async def get_user(db: AsyncSession, user_id: int) -> Employee:
    employee = await db.get(Employee, user_id)
    if employee is None:
        raise NotFoundException("User", user_id)
    return employee


async def update_role(
    db: AsyncSession,
    actor: Employee,
    user_id: int,
    role: UserRole,
) -> Employee:
    """Change a user's role. An admin may not demote themselves."""
    employee = await get_user(db, user_id)
    if employee.id == actor.id and role != UserRole.admin:
        logger.warning("Admin %s attempted self-demotion to %s", actor.id, role.value)
        raise ValidationException({"role": ["You cannot remove your own admin role."]})

    old_role = employee.role
    if old_role == role:
        return employee

    employee.role = role
    await db.flush()
    await create_audit_entry(
        db,
        action="update_role",
        entity_type="employee",
        entity_id=employee.id,
        actor_id=actor.id,
        old_values={"role": old_role.value},
        new_values={"role": role.value},
    )
    logger.info("Role of employee %s changed %s -> %s", employee.id, old_role.value, role.value)
    return employee


async def bulk_update_roles(
    db: AsyncSession,
    actor: Employee,
    updates: list[tuple[int, UserRole]],
) -> dict:
    """Apply each update independently; failures are collected, not raised."""
    updated = 0
    failed: list[dict] = []
    for user_id, role in updates:
        try:
            await update_role(db, actor, user_id, role)
            updated += 1
        except (NotFoundException, ValidationException) as exc:
            failed.append({"user_id": user_id, "error": exc.detail})
    return {
        "updated_count": updated,
        "failed_count": len(failed),
        "failures": failed,
    }

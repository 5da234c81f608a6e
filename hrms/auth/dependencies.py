"""Request authentication and role/permission guards.

A request is authenticated when its bearer JWT verifies, is an access
token, and its sha256 hash matches an unrevoked, unexpired session row.
The employee's role is read from the database, not from the token.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.models import UserSession
from hrms.auth.service import hash_token
from hrms.common.constants import PERMISSIONS, UserRole
from hrms.common.exceptions import ForbiddenException, UnauthorizedException
from hrms.config import settings
from hrms.database import get_db
from hrms.employees.models import Employee

_INCLUDES: dict[UserRole, frozenset[UserRole]] = {
    UserRole.employee: frozenset({UserRole.employee}),
    UserRole.manager: frozenset({UserRole.manager, UserRole.employee}),
    UserRole.hr: frozenset({UserRole.hr, UserRole.manager, UserRole.employee}),
    UserRole.admin: frozenset(UserRole),
}


def has_role(employee: Employee, *roles: UserRole) -> bool:
    """True when the employee's role, or one it includes, is in *roles*."""
    return not _INCLUDES.get(employee.role, frozenset({employee.role})).isdisjoint(roles)


def is_hr(employee: Employee) -> bool:
    return has_role(employee, UserRole.hr)


def _bearer_token(request: Request) -> str:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme != "Bearer" or not token:
        raise UnauthorizedException("Missing or invalid Authorization header.")
    return token


def _subject(token: str) -> int:
    """Verify *token* and return the employee id it was issued for."""
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedException("Token has expired.")
    except JWTError:
        raise UnauthorizedException("Invalid token.")

    if claims.get("type") != "access":
        raise UnauthorizedException("Invalid token type.")
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedException("Invalid token subject.")


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Employee:
    token = _bearer_token(request)
    employee_id = _subject(token)
    token_hash = hash_token(token)

    session = await db.scalar(
        select(UserSession.id).where(
            UserSession.token_hash == token_hash,
            UserSession.employee_id == employee_id,
            UserSession.is_revoked.is_(False),
            UserSession.expires_at > datetime.now(),
        ),
    )
    if session is None:
        raise UnauthorizedException("Session invalid or expired.")

    employee = await db.scalar(
        select(Employee).where(Employee.id == employee_id, Employee.is_active.is_(True)),
    )
    if employee is None:
        raise UnauthorizedException("User account is inactive or not found.")

    # Logout revokes by this hash
    request.state.token_hash = token_hash
    return employee


def require_role(*allowed_roles: UserRole) -> Callable:
    """Dependency factory: the caller's role must include one of *allowed_roles*."""

    async def _guard(employee: Employee = Depends(get_current_user)) -> Employee:
        if not has_role(employee, *allowed_roles):
            allowed = ", ".join(r.value for r in allowed_roles)
            raise ForbiddenException(
                f"Role '{employee.role.value}' is not permitted here (needs: {allowed}).",
            )
        return employee

    return _guard


def has_permission(employee: Employee, *permissions: str) -> bool:
    """True when the employee's role is granted any of *permissions*.

    Grants are listed per role in PERMISSIONS and are not inherited.
    """
    granted = PERMISSIONS.get(employee.role, ())
    return any(p in granted for p in permissions)


def require_permission(*permissions: str) -> Callable:
    """Dependency factory: the caller's role must be granted one of *permissions*."""

    async def _guard(employee: Employee = Depends(get_current_user)) -> Employee:
        if not has_permission(employee, *permissions):
            needed = ", ".join(permissions)
            raise ForbiddenException(
                f"Permission '{needed}' is not granted to role '{employee.role.value}'.",
            )
        return employee

    return _guard

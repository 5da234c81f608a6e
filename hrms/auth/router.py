"""Auth router — password login, logout, current user, user/role administration."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth import service as auth_service
from hrms.auth.dependencies import get_current_user, require_permission
from hrms.auth.schemas import (
    BulkRoleUpdateRequest,
    BulkRoleUpdateResponse,
    ChangePasswordRequest,
    LoginRequest,
    MeResponse,
    RoleUpdateRequest,
    TokenResponse,
)
from hrms.common.audit import client_meta, create_audit_entry
from hrms.common.constants import PERMISSIONS, UserRole
from hrms.common.pagination import PaginatedResponse, PaginationParams
from hrms.common.rate_limit import limiter
from hrms.config import settings
from hrms.database import get_db
from hrms.employees.models import Employee
from hrms.employees.schemas import EmployeeBrief

router = APIRouter(prefix="", tags=["auth"])

_manage_users = require_permission("system:manage_users")


# ── POST /login ─────────────────────────────────────────────────────

@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    employee = await auth_service.authenticate(db, body.username, body.password)

    meta = client_meta(request)
    access_token, expires_in = await auth_service.create_session(
        db, employee, meta["ip_address"], meta["user_agent"],
    )

    await create_audit_entry(
        db,
        action="login",
        entity_type="user_session",
        entity_id=employee.id,
        actor_id=employee.id,
        **meta,
    )

    return TokenResponse(
        access_token=access_token,
        expires_in=expires_in,
        user=EmployeeBrief.model_validate(employee),
    )


# ── POST /logout — Revoke current session ──────────────────────────

@router.post("/logout")
async def logout(
    request: Request,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await auth_service.revoke_session(db, request.state.token_hash)

    await create_audit_entry(
        db,
        action="logout",
        entity_type="user_session",
        entity_id=employee.id,
        actor_id=employee.id,
        **client_meta(request),
    )

    return {"success": True, "message": "Logged out successfully"}


# ── GET /me — Current user profile ─────────────────────────────────

@router.get("/me", response_model=MeResponse)
async def me(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(func.count()).select_from(Employee).where(
            Employee.reporting_manager_id == employee.id,
            Employee.is_active.is_(True),
        ),
    )
    brief = EmployeeBrief.model_validate(employee)
    return MeResponse(
        **brief.model_dump(),
        permissions=PERMISSIONS.get(employee.role, []),
        reporting_manager_id=employee.reporting_manager_id,
        department_id=employee.department_id,
        direct_reports_count=result.scalar() or 0,
    )


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await auth_service.change_password(
        db, employee, body.current_password, body.new_password,
    )
    return {"success": True, "message": "Password changed successfully"}


# ── User administration (admin) ────────────────────────────────────

@router.get("/users", response_model=PaginatedResponse[EmployeeBrief])
async def list_users(
    role: Optional[UserRole] = Query(None),
    search: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(),
    _admin: Employee = Depends(_manage_users),
    db: AsyncSession = Depends(get_db),
):
    return await auth_service.list_users(db, pagination, role=role, search=search)


@router.post("/users/bulk-update-roles", response_model=BulkRoleUpdateResponse)
async def bulk_update_roles(
    body: BulkRoleUpdateRequest,
    admin: Employee = Depends(_manage_users),
    db: AsyncSession = Depends(get_db),
):
    result = await auth_service.bulk_update_roles(
        db, admin, [(u.user_id, u.role) for u in body.updates],
    )
    return BulkRoleUpdateResponse(**result)


@router.get("/users/{user_id}", response_model=EmployeeBrief)
async def get_user(
    user_id: int,
    _admin: Employee = Depends(_manage_users),
    db: AsyncSession = Depends(get_db),
):
    return await auth_service.get_user(db, user_id)


@router.put("/users/{user_id}/role", response_model=EmployeeBrief)
async def update_user_role(
    user_id: int,
    body: RoleUpdateRequest,
    admin: Employee = Depends(_manage_users),
    db: AsyncSession = Depends(get_db),
):
    return await auth_service.update_role(db, admin, user_id, body.role)


async def _make_role(db: AsyncSession, admin: Employee, user_id: int, role: UserRole) -> dict:
    employee = await auth_service.update_role(db, admin, user_id, role)
    return {
        "success": True,
        "message": f"{employee.full_name} is now {role.value}",
        "user": EmployeeBrief.model_validate(employee),
    }


@router.post("/users/{user_id}/make-hr")
async def make_hr(
    user_id: int,
    admin: Employee = Depends(_manage_users),
    db: AsyncSession = Depends(get_db),
):
    return await _make_role(db, admin, user_id, UserRole.hr)


@router.post("/users/{user_id}/make-manager")
async def make_manager(
    user_id: int,
    admin: Employee = Depends(_manage_users),
    db: AsyncSession = Depends(get_db),
):
    return await _make_role(db, admin, user_id, UserRole.manager)


@router.post("/users/{user_id}/make-admin")
async def make_admin(
    user_id: int,
    admin: Employee = Depends(_manage_users),
    db: AsyncSession = Depends(get_db),
):
    return await _make_role(db, admin, user_id, UserRole.admin)


@router.post("/users/{user_id}/make-employee")
async def make_employee(
    user_id: int,
    admin: Employee = Depends(_manage_users),
    db: AsyncSession = Depends(get_db),
):
    return await _make_role(db, admin, user_id, UserRole.employee)

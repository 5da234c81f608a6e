"""``/employees``: directory listing, own profile, teams and HR maintenance."""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.dependencies import get_current_user, has_permission, require_permission
from hrms.common.constants import EmploymentStatus
from hrms.common.exceptions import ForbiddenException
from hrms.common.pagination import PaginationParams
from hrms.database import get_db
from hrms.employees.models import Employee
from hrms.employees.schemas import (
    EmployeeBrief,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    ProfileUpdate,
)
from hrms.employees.service import EmployeeService

router = APIRouter(prefix="", tags=["employees"])

_create = require_permission("profile:create")
_update = require_permission("profile:update")


def _wrap(data: Any, message: str) -> dict:
    return {"data": data.model_dump(mode="json"), "message": message}


def _team(reports) -> dict:
    return {
        "data": [EmployeeBrief.model_validate(e).model_dump(mode="json") for e in reports],
        "count": len(reports),
    }


async def _ensure_visible(db: AsyncSession, viewer: Employee, employee_id: int) -> None:
    """HR see everyone; managers see their direct reports; everyone sees themselves."""
    if viewer.id == employee_id or has_permission(viewer, "profile:read_all"):
        return
    if not has_permission(viewer, "profile:read_team"):
        raise ForbiddenException("You can only view your own profile.")
    target = await EmployeeService.get_employee(db, employee_id)
    if target.reporting_manager_id != viewer.id:
        raise ForbiddenException("You can only view your own profile or your direct reports.")


@router.get("")
async def list_employees(
    pagination: PaginationParams = Depends(),
    search: Optional[str] = Query(None, description="Name, email or employee number"),
    department_id: Optional[int] = Query(None),
    employment_status: Optional[EmploymentStatus] = Query(None),
    is_active: Optional[bool] = Query(None),
    viewer: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """HR get full rows; everyone else gets the brief shape."""
    page = await EmployeeService.list_employees(
        db,
        pagination,
        search=search,
        department_id=department_id,
        employment_status=employment_status,
        is_active=is_active,
        schema=EmployeeResponse if has_permission(viewer, "profile:read_all") else EmployeeBrief,
    )
    return page.model_dump(mode="json")


@router.get("/profile/me")
async def get_my_profile(
    me: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _wrap(await EmployeeService.get_employee_detail(db, me.id), "Profile retrieved successfully.")


@router.put("/profile/me")
async def update_my_profile(
    body: ProfileUpdate,
    me: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await EmployeeService.update_employee(db, me.id, body, actor_id=me.id)
    return _wrap(await EmployeeService.get_employee_detail(db, me.id), "Profile updated successfully.")


@router.get("/my-team/list")
async def get_my_team(
    me: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _team(await EmployeeService.get_direct_reports(db, me.id))


@router.get("/reporting/{manager_id}")
async def get_reporting_employees(
    manager_id: int,
    viewer: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if viewer.id != manager_id and not has_permission(viewer, "profile:read_all"):
        raise ForbiddenException("You can only list your own direct reports.")
    return _team(await EmployeeService.get_direct_reports(db, manager_id))


@router.post("", status_code=201)
async def create_employee(
    body: EmployeeCreate,
    actor: Employee = Depends(_create),
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.create_employee(db, body, actor_id=actor.id)
    detail = await EmployeeService.get_employee_detail(db, employee.id)
    return _wrap(detail, "Employee created successfully.")


@router.get("/{employee_id}")
async def get_employee(
    employee_id: int,
    viewer: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _ensure_visible(db, viewer, employee_id)
    employee = await EmployeeService.get_employee(db, employee_id)
    return _wrap(EmployeeResponse.model_validate(employee), "Employee retrieved successfully.")


@router.get("/{employee_id}/details")
async def get_employee_details(
    employee_id: int,
    viewer: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _ensure_visible(db, viewer, employee_id)
    detail = await EmployeeService.get_employee_detail(db, employee_id)
    return _wrap(detail, "Employee profile retrieved successfully.")


@router.put("/{employee_id}")
async def update_employee(
    employee_id: int,
    body: EmployeeUpdate,
    actor: Employee = Depends(_update),
    db: AsyncSession = Depends(get_db),
):
    await EmployeeService.update_employee(db, employee_id, body, actor_id=actor.id)
    detail = await EmployeeService.get_employee_detail(db, employee_id)
    return _wrap(detail, "Employee updated successfully.")


@router.put("/{employee_id}/deactivate")
async def deactivate_employee(
    employee_id: int,
    actor: Employee = Depends(_update),
    db: AsyncSession = Depends(get_db),
):
    if employee_id == actor.id:
        raise ForbiddenException("You cannot deactivate your own account.")
    await EmployeeService.deactivate_employee(db, employee_id, actor_id=actor.id)
    return {"success": True, "message": "Employee deactivated successfully."}

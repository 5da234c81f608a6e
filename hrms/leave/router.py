"""Leave router — types, plans, balances, applications, approvals, WFH requests."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.dependencies import get_current_user, is_hr, require_permission, require_role
from hrms.common.constants import LeaveStatus, UserRole
from hrms.common.exceptions import ForbiddenException
from hrms.database import get_db
from hrms.employees.models import Employee
from hrms.leave.schemas import (
    CarryForwardRequest,
    InitializeBalanceRequest,
    LeaveApply,
    LeaveBalanceResponse,
    LeavePlanCreate,
    LeavePlanResponse,
    LeavePlanUpdate,
    LeaveReject,
    LeaveResponse,
    LeaveTypeCreate,
    LeaveTypeResponse,
    LeaveTypeUpdate,
    WfhRequestCreate,
)
from hrms.leave.service import LeaveService

router = APIRouter(prefix="", tags=["leave"])

_configure = require_permission("leave:configure")
_request = require_permission("leave:request")
_approve = require_permission("leave:approve")


def _year(body: Optional[InitializeBalanceRequest]) -> Optional[int]:
    return body.leave_year if body else None


# ═════════════════════════════════════════════════════════════════════
# Leave types
# ═════════════════════════════════════════════════════════════════════


@router.get("/types", response_model=list[LeaveTypeResponse])
async def list_leave_types(
    include_inactive: bool = Query(False),
    _user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.list_types(db, include_inactive=include_inactive)


@router.post("/types", response_model=LeaveTypeResponse, status_code=201)
async def create_leave_type(
    body: LeaveTypeCreate,
    _hr: Employee = Depends(_configure),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.create_type(db, body)


@router.put("/types/{type_id}", response_model=LeaveTypeResponse)
async def update_leave_type(
    type_id: int,
    body: LeaveTypeUpdate,
    _hr: Employee = Depends(_configure),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.update_type(db, type_id, body)


@router.delete("/types/{type_id}")
async def delete_leave_type(
    type_id: int,
    _hr: Employee = Depends(_configure),
    db: AsyncSession = Depends(get_db),
):
    await LeaveService.delete_type(db, type_id)
    return {"success": True, "message": "Leave type deleted"}


# ═════════════════════════════════════════════════════════════════════
# Leave plans
# ═════════════════════════════════════════════════════════════════════


@router.get("/plans", response_model=list[LeavePlanResponse])
async def list_leave_plans(
    _user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.list_plans(db)


@router.post("/plans", response_model=LeavePlanResponse, status_code=201)
async def create_leave_plan(
    body: LeavePlanCreate,
    hr: Employee = Depends(_configure),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.create_plan(db, body, actor_id=hr.id)


@router.get("/plans/{plan_id}", response_model=LeavePlanResponse)
async def get_leave_plan(
    plan_id: int,
    _user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.get_plan(db, plan_id)


@router.put("/plans/{plan_id}", response_model=LeavePlanResponse)
async def update_leave_plan(
    plan_id: int,
    body: LeavePlanUpdate,
    hr: Employee = Depends(_configure),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.update_plan(db, plan_id, body, actor_id=hr.id)


# ═════════════════════════════════════════════════════════════════════
# Balances
# ═════════════════════════════════════════════════════════════════════


@router.post("/initialize-balance/{employee_id}")
async def initialize_balance(
    employee_id: int,
    body: Optional[InitializeBalanceRequest] = None,
    _hr: Employee = Depends(_configure),
    db: AsyncSession = Depends(get_db),
):
    result = await LeaveService.initialize_balances(db, employee_id, _year(body))
    return {"success": True, "message": "Leave balances initialized successfully", **result}


@router.post("/initialize-my-balance")
async def initialize_my_balance(
    body: Optional[InitializeBalanceRequest] = None,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await LeaveService.initialize_balances(db, employee.id, _year(body))
    return {
        "success": True,
        "message": "Your leave balances have been initialized successfully",
        **result,
    }


@router.post("/initialize-all")
async def initialize_all(
    body: Optional[InitializeBalanceRequest] = None,
    _hr: Employee = Depends(_configure),
    db: AsyncSession = Depends(get_db),
):
    result = await LeaveService.initialize_all(db, _year(body))
    return {"success": True, **result}


@router.get("/balance", response_model=list[LeaveBalanceResponse])
async def my_balance(
    year: Optional[int] = Query(None),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.get_balances(db, employee.id, year)


@router.get("/balance/{employee_id}", response_model=list[LeaveBalanceResponse])
async def employee_balance(
    employee_id: int,
    year: Optional[int] = Query(None),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not is_hr(current_user) and current_user.id != employee_id:
        target = await db.get(Employee, employee_id)
        if target is None or target.reporting_manager_id != current_user.id:
            raise ForbiddenException("You can only view balances of your own team.")
    return await LeaveService.get_balances(db, employee_id, year)


@router.post("/carry-forward")
async def carry_forward(
    body: CarryForwardRequest,
    hr: Employee = Depends(_configure),
    db: AsyncSession = Depends(get_db),
):
    result = await LeaveService.carry_forward(
        db, body.employee_id, body.from_year, body.to_year, actor_id=hr.id,
    )
    return {"success": True, **result}


# ═════════════════════════════════════════════════════════════════════
# Applications
# ═════════════════════════════════════════════════════════════════════


@router.post("/apply", status_code=201)
async def apply_leave(
    body: LeaveApply,
    employee: Employee = Depends(_request),
    db: AsyncSession = Depends(get_db),
):
    leave = await LeaveService.apply_leave(db, employee, body)
    return {
        "success": True,
        "leave_id": leave.id,
        "message": "Leave application submitted successfully",
    }


@router.get("/my-leaves", response_model=list[LeaveResponse])
async def my_leaves(
    status: Optional[LeaveStatus] = Query(None),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.my_leaves(db, employee.id, status=status)


@router.get("/pending", response_model=list[LeaveResponse])
async def pending_leaves(
    approver: Employee = Depends(_approve),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.pending_leaves(db, approver)


@router.put("/approve/{leave_id}")
async def approve_leave(
    leave_id: int,
    approver: Employee = Depends(_approve),
    db: AsyncSession = Depends(get_db),
):
    await LeaveService.approve_leave(db, leave_id, approver)
    return {"success": True, "message": "Leave approved successfully"}


@router.put("/reject/{leave_id}")
async def reject_leave(
    leave_id: int,
    body: Optional[LeaveReject] = None,
    approver: Employee = Depends(_approve),
    db: AsyncSession = Depends(get_db),
):
    reason = body.rejection_reason if body else None
    await LeaveService.reject_leave(db, leave_id, approver, reason)
    return {"success": True, "message": "Leave rejected successfully"}


@router.put("/cancel/{leave_id}")
async def cancel_leave(
    leave_id: int,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await LeaveService.cancel_leave(db, leave_id, employee)
    return {"success": True, "message": "Leave cancelled successfully"}


# ═════════════════════════════════════════════════════════════════════
# WFH / Remote requests
# ═════════════════════════════════════════════════════════════════════


@router.post("/wfh-request", status_code=201)
async def wfh_request(
    body: WfhRequestCreate,
    employee: Employee = Depends(_request),
    db: AsyncSession = Depends(get_db),
):
    leave = await LeaveService.request_wfh(db, employee, body.date, body.work_mode, body.reason)
    return {
        "id": leave.id,
        "success": True,
        "message": f"{body.work_mode} request submitted successfully",
        "status": leave.status.value,
    }


@router.get("/wfh-requests", response_model=list[LeaveResponse])
async def my_wfh_requests(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.wfh_requests(db, employee_id=employee.id)


@router.get("/wfh-requests/pending", response_model=list[LeaveResponse])
async def pending_wfh_requests(
    _hr: Employee = Depends(require_role(UserRole.hr)),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.wfh_requests(db, pending_only=True)

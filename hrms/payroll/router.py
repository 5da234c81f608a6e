"""Payroll router — salary structures, monthly runs and payslips."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.dependencies import get_current_user, is_hr, require_permission, require_role
from hrms.common.constants import UserRole
from hrms.common.exceptions import ForbiddenException
from hrms.database import get_db
from hrms.employees.models import Employee
from hrms.payroll.schemas import (
    PayrollGenerateResponse,
    PayrollPeriodRequest,
    PayrollRunDetail,
    PayrollRunResponse,
    PayslipResponse,
    RecalculateResponse,
    SalaryStructureResponse,
    SalaryStructureUpdate,
)
from hrms.payroll.service import PayrollService

router = APIRouter(prefix="", tags=["payroll"])

_process = require_permission("payroll:process")
_read = require_permission("payroll:read")


# ── Salary structures ───────────────────────────────────────────────

@router.get("/my-salary-structure", response_model=SalaryStructureResponse)
async def my_salary_structure(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await PayrollService.get_structure(db, employee.id)


@router.get("/salary-structure/{employee_id}", response_model=SalaryStructureResponse)
async def get_salary_structure(
    employee_id: int,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not is_hr(current_user) and current_user.id != employee_id:
        raise ForbiddenException("You can only view your own salary structure.")
    return await PayrollService.get_structure(db, employee_id)


@router.put("/salary-structure/{employee_id}", response_model=SalaryStructureResponse)
async def upsert_salary_structure(
    employee_id: int,
    body: SalaryStructureUpdate,
    hr: Employee = Depends(require_role(UserRole.hr)),
    db: AsyncSession = Depends(get_db),
):
    return await PayrollService.upsert_structure(db, employee_id, body, actor_id=hr.id)


# ── Runs ────────────────────────────────────────────────────────────

@router.post("/generate", response_model=PayrollGenerateResponse, status_code=201)
async def generate_payroll(
    body: PayrollPeriodRequest,
    admin: Employee = Depends(_process),
    db: AsyncSession = Depends(get_db),
):
    run, processed = await PayrollService.generate(db, body.month, body.year, actor_id=admin.id)
    return PayrollGenerateResponse(
        message=f"Payroll generated for {body.month:02d}/{body.year}",
        run_id=run.id,
        processed=processed,
    )


@router.get("/runs", response_model=list[PayrollRunResponse])
async def list_runs(
    _hr: Employee = Depends(_read),
    db: AsyncSession = Depends(get_db),
):
    return await PayrollService.list_runs(db)


@router.get("/runs/{run_id}", response_model=PayrollRunDetail)
async def get_run(
    run_id: int,
    _hr: Employee = Depends(_read),
    db: AsyncSession = Depends(get_db),
):
    return await PayrollService.get_run(db, run_id)


@router.put("/{run_id}/finalize", response_model=PayrollRunResponse)
async def finalize_run(
    run_id: int,
    admin: Employee = Depends(_process),
    db: AsyncSession = Depends(get_db),
):
    return await PayrollService.finalize(db, run_id, actor_id=admin.id)


@router.put("/{run_id}/mark-paid", response_model=PayrollRunResponse)
async def mark_run_paid(
    run_id: int,
    admin: Employee = Depends(_process),
    db: AsyncSession = Depends(get_db),
):
    return await PayrollService.mark_paid(db, run_id, actor_id=admin.id)


@router.post("/recalculate/{employee_id}", response_model=RecalculateResponse)
async def recalculate(
    employee_id: int,
    body: PayrollPeriodRequest,
    admin: Employee = Depends(_process),
    db: AsyncSession = Depends(get_db),
):
    slip = await PayrollService.recalculate(
        db, employee_id, body.month, body.year, actor_id=admin.id,
    )
    return RecalculateResponse(slip_id=slip.id, net_salary=float(slip.net_salary))


# ── Payslips ────────────────────────────────────────────────────────

@router.get("/my-payslips", response_model=list[PayslipResponse])
async def my_payslips(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await PayrollService.my_payslips(db, employee.id)


@router.get("/slips/all", response_model=list[PayslipResponse])
async def all_payslips(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    _hr: Employee = Depends(_read),
    db: AsyncSession = Depends(get_db),
):
    return await PayrollService.all_payslips(db, month=month, year=year)


@router.get("/slips/{slip_id}", response_model=PayslipResponse)
async def get_payslip(
    slip_id: int,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    slip = await PayrollService.get_payslip(db, slip_id)
    if not is_hr(current_user) and slip.employee_id != current_user.id:
        raise ForbiddenException("You can only view your own payslips.")
    return slip

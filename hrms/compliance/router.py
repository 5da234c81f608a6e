"""Compliance router — employee status, admin monitoring, manager team views."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.dependencies import get_current_user, require_permission
from hrms.compliance.schemas import (
    BulkApproveRequest,
    BulkApproveResponse,
    CloseMonthRequest,
    CloseMonthResponse,
    ComplianceDashboard,
    ComplianceHistoryRow,
    MonthlyComplianceReport,
    MyComplianceStatus,
    NonCompliantEmployee,
    PeriodLockResponse,
    PeriodStatus,
    ReminderRequest,
    ReminderResponse,
    ReopenMonthRequest,
)
from hrms.compliance.service import ComplianceService
from hrms.database import get_db
from hrms.employees.models import Employee
from hrms.employees.service import EmployeeService

router = APIRouter(prefix="", tags=["compliance"])

_admin = require_permission("compliance:all")
_manager = require_permission("compliance:team")


# ── Employee ────────────────────────────────────────────────────────

@router.get("/my-status", response_model=MyComplianceStatus)
async def my_status(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ComplianceService.my_status(db, employee)


@router.get("/my-history", response_model=list[ComplianceHistoryRow])
async def my_history(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ComplianceService.my_history(db, employee.id, start_date, end_date)


@router.get("/period-status/{month}/{year}", response_model=PeriodStatus)
async def period_status(
    month: int,
    year: int,
    _user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ComplianceService.period_status(db, month, year)


# ── Admin ───────────────────────────────────────────────────────────

@router.get("/admin/dashboard", response_model=ComplianceDashboard)
async def admin_dashboard(
    _user: Employee = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ComplianceService.dashboard(db)


@router.get("/admin/non-compliant", response_model=list[NonCompliantEmployee])
async def admin_non_compliant(
    on_date: Optional[date] = Query(None, alias="date"),
    _user: Employee = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ComplianceService.non_compliant(db, on_date or date.today())


@router.post("/admin/send-reminders", response_model=ReminderResponse)
async def admin_send_reminders(
    body: Optional[ReminderRequest] = None,
    _user: Employee = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    body = body or ReminderRequest()
    return await ComplianceService.send_reminders(
        db, body.date or date.today(), employee_ids=body.employee_ids,
    )


@router.post("/admin/bulk-approve", response_model=BulkApproveResponse)
async def bulk_approve(
    body: BulkApproveRequest,
    hr: Employee = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    approved = await ComplianceService.bulk_approve(
        db, body.timesheet_ids, notes=body.notes, actor_id=hr.id,
    )
    return BulkApproveResponse(
        message=f"{approved} timesheet(s) approved",
        approved_count=approved,
    )


@router.post("/admin/close-month", response_model=CloseMonthResponse)
async def close_month(
    body: CloseMonthRequest,
    hr: Employee = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ComplianceService.close_month(db, body.month, body.year, actor_id=hr.id)


@router.post("/admin/reopen-month", response_model=PeriodLockResponse)
async def reopen_month(
    body: ReopenMonthRequest,
    hr: Employee = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ComplianceService.reopen_month(db, body, actor_id=hr.id)


@router.get("/admin/monthly-report", response_model=MonthlyComplianceReport)
async def monthly_report(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    _user: Employee = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    today = date.today()
    return await ComplianceService.monthly_report(db, month or today.month, year or today.year)


# ── Manager (direct reports only) ───────────────────────────────────

@router.get("/manager/dashboard", response_model=ComplianceDashboard)
async def manager_dashboard(
    manager: Employee = Depends(_manager),
    db: AsyncSession = Depends(get_db),
):
    team = await EmployeeService.get_direct_report_ids(db, manager.id)
    return await ComplianceService.dashboard(db, scope=team)


@router.get("/manager/non-compliant", response_model=list[NonCompliantEmployee])
async def manager_non_compliant(
    on_date: Optional[date] = Query(None, alias="date"),
    manager: Employee = Depends(_manager),
    db: AsyncSession = Depends(get_db),
):
    team = await EmployeeService.get_direct_report_ids(db, manager.id)
    return await ComplianceService.non_compliant(db, on_date or date.today(), scope=team)


@router.post("/manager/send-reminders", response_model=ReminderResponse)
async def manager_send_reminders(
    body: Optional[ReminderRequest] = None,
    manager: Employee = Depends(_manager),
    db: AsyncSession = Depends(get_db),
):
    body = body or ReminderRequest()
    team = await EmployeeService.get_direct_report_ids(db, manager.id)
    return await ComplianceService.send_reminders(
        db, body.date or date.today(), employee_ids=body.employee_ids, scope=team,
    )

"""Timesheets router — employee submissions plus the HR validation desk."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.dependencies import get_current_user, require_permission, require_role
from hrms.common.constants import TimesheetType, UserRole
from hrms.common.filters import resolve_period
from hrms.database import get_db
from hrms.employees.models import Employee
from hrms.timesheets.schemas import (
    AssignmentStatusResponse,
    ClientValidationRequest,
    ClientValidationResponse,
    ProjectTimesheetSubmit,
    RegularTimesheetSubmit,
    TimesheetAdminStats,
    TimesheetResponse,
    TimesheetReview,
    TimesheetStats,
    TimesheetSubmitResponse,
)
from hrms.timesheets.service import TimesheetService

router = APIRouter(prefix="", tags=["timesheets"])

_submit = require_permission("timesheet:submit")
_hr = require_role(UserRole.hr)


def _period(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
) -> Optional[tuple[date, date]]:
    return resolve_period(start_date=start_date, end_date=end_date, month=month, year=year)


def _submitted(ts, kind: str) -> TimesheetSubmitResponse:
    verb = "saved as draft" if ts.status.value == "draft" else "submitted"
    return TimesheetSubmitResponse(
        message=f"{kind} timesheet {verb} successfully",
        timesheet_id=ts.id,
        status=ts.status,
    )


@router.get("/assignment-status", response_model=AssignmentStatusResponse)
async def assignment_status(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await TimesheetService.assignment_status(db, employee.id)


# ── Regular ─────────────────────────────────────────────────────────

@router.post("/regular/submit", response_model=TimesheetSubmitResponse)
async def submit_regular(
    body: RegularTimesheetSubmit,
    employee: Employee = Depends(_submit),
    db: AsyncSession = Depends(get_db),
):
    ts = await TimesheetService.submit_regular(db, employee.id, body)
    return _submitted(ts, "Regular")


@router.get("/regular/my-timesheets", response_model=list[TimesheetResponse])
async def my_regular_timesheets(
    period: Optional[tuple[date, date]] = Depends(_period),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await TimesheetService.my_timesheets(
        db, employee.id, timesheet_type=TimesheetType.regular, period=period,
    )


# ── Project ─────────────────────────────────────────────────────────

@router.post("/project/submit", response_model=TimesheetSubmitResponse)
async def submit_project(
    body: ProjectTimesheetSubmit,
    employee: Employee = Depends(_submit),
    db: AsyncSession = Depends(get_db),
):
    ts = await TimesheetService.submit_project(db, employee.id, body)
    return _submitted(ts, "Project")


@router.get("/project/my-timesheets", response_model=list[TimesheetResponse])
async def my_project_timesheets(
    project_id: Optional[int] = Query(None),
    period: Optional[tuple[date, date]] = Depends(_period),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await TimesheetService.my_timesheets(
        db,
        employee.id,
        timesheet_type=TimesheetType.project,
        period=period,
        project_id=project_id,
    )


@router.get("/my-stats", response_model=TimesheetStats)
async def my_stats(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    today = date.today()
    return await TimesheetService.my_stats(
        db, employee.id, month or today.month, year or today.year,
    )


# ── Admin ───────────────────────────────────────────────────────────

@router.get("/admin/pending-validation", response_model=list[TimesheetResponse])
async def pending_validation(
    project_id: Optional[int] = Query(None),
    employee_id: Optional[int] = Query(None),
    period: Optional[tuple[date, date]] = Depends(_period),
    _user: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    return await TimesheetService.pending_validation(
        db, period=period, project_id=project_id, employee_id=employee_id,
    )


@router.post("/admin/validate", response_model=ClientValidationResponse)
async def validate_client(
    body: ClientValidationRequest,
    hr: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    affected = await TimesheetService.validate_client(db, body, actor_id=hr.id)
    return ClientValidationResponse(
        message=f"Client validation recorded for {affected} timesheet(s)",
        affected=affected,
    )


@router.put("/admin/validate/{timesheet_id}", response_model=TimesheetResponse)
async def review_timesheet(
    timesheet_id: int,
    body: TimesheetReview,
    hr: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    ts = await TimesheetService.review(db, timesheet_id, body, actor_id=hr.id)
    return TimesheetResponse.model_validate(ts)


@router.get("/admin/stats", response_model=TimesheetAdminStats)
async def admin_stats(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    _user: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    return await TimesheetService.admin_stats(db, month, year)

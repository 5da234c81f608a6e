"""Attendance router — check-in/out, multi-punch, reports, HR marking.

All endpoints require authentication. Report and marking endpoints enforce
role checks; managers only see their direct reports.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.attendance.schemas import (
    AttendanceDetailResponse,
    AttendanceReportResponse,
    AttendanceResponse,
    AttendanceStatusSummary,
    CheckInRequest,
    CheckInResponse,
    CheckOutRequest,
    CheckOutResponse,
    MarkAttendanceRequest,
    PunchInRequest,
    PunchOutRequest,
    PunchResponse,
    TodayAttendanceResponse,
)
from hrms.attendance.service import AttendanceService
from hrms.auth.dependencies import get_current_user, has_permission, require_permission
from hrms.common.exceptions import ForbiddenException
from hrms.common.filters import month_bounds, resolve_period
from hrms.database import get_db
from hrms.employees.models import Employee

router = APIRouter(prefix="", tags=["attendance"])

_read_team = require_permission("attendance:read_team", "attendance:read_all")
_read_all = require_permission("attendance:read_all")


def _client(request: Request) -> tuple[Optional[str], Optional[str]]:
    ip = request.client.host if request.client else None
    return ip, request.headers.get("user-agent")


def _period(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
) -> Optional[tuple[date, date]]:
    return resolve_period(start_date=start_date, end_date=end_date, month=month, year=year)


async def _check_can_view(db: AsyncSession, viewer: Employee, employee_id: int) -> None:
    if viewer.id == employee_id or has_permission(viewer, "attendance:read_all"):
        return
    target = await db.get(Employee, employee_id)
    if target is None or target.reporting_manager_id != viewer.id:
        raise ForbiddenException("You can only view attendance of your own team.")


# ── Simple check-in / check-out ─────────────────────────────────────

@router.post("/checkin", response_model=CheckInResponse)
async def check_in(
    body: CheckInRequest,
    request: Request,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    ip, device = _client(request)
    return await AttendanceService.check_in(
        db,
        employee,
        work_mode=body.work_mode,
        location=body.location,
        notes=body.notes,
        ip_address=ip,
        device_info=device,
    )


@router.post("/checkout", response_model=CheckOutResponse)
async def check_out(
    body: Optional[CheckOutRequest] = None,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.check_out(
        db, employee, notes=body.notes if body else None,
    )


# ── Multi-punch ─────────────────────────────────────────────────────

@router.post("/punch-in", response_model=PunchResponse)
async def punch_in(
    request: Request,
    body: Optional[PunchInRequest] = None,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    body = body or PunchInRequest()
    ip, device = _client(request)
    return await AttendanceService.punch_in(
        db,
        employee,
        work_mode=body.work_mode,
        location=body.location,
        notes=body.notes,
        ip_address=ip,
        device_info=device,
    )


@router.post("/punch-out", response_model=PunchResponse)
async def punch_out(
    request: Request,
    body: Optional[PunchOutRequest] = None,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    body = body or PunchOutRequest()
    ip, device = _client(request)
    return await AttendanceService.punch_out(
        db,
        employee,
        location=body.location,
        notes=body.notes,
        ip_address=ip,
        device_info=device,
    )


@router.get("/today", response_model=TodayAttendanceResponse)
async def today(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.today(db, employee)


@router.get("/details/{on_date}", response_model=AttendanceDetailResponse)
async def my_details(
    on_date: date,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.details(db, employee.id, on_date)


# ── Own rows ────────────────────────────────────────────────────────

@router.get("/me", response_model=list[AttendanceResponse])
async def my_attendance(
    period: Optional[tuple[date, date]] = Depends(_period),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.my_attendance(db, employee.id, period)


@router.get("/monthly", response_model=list[AttendanceResponse])
async def monthly(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.my_attendance(db, employee.id, month_bounds(month, year))


@router.get("/summary/{employee_id}", response_model=AttendanceStatusSummary)
async def status_summary(
    employee_id: int,
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _check_can_view(db, current_user, employee_id)
    return await AttendanceService.status_summary(db, employee_id, month, year)


# ── Reports ─────────────────────────────────────────────────────────

@router.get("/my-report", response_model=AttendanceReportResponse)
async def my_report(
    period: Optional[tuple[date, date]] = Depends(_period),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.report(db, employee_ids=[employee.id], period=period)


@router.get("/report/team", response_model=AttendanceReportResponse)
async def team_report(
    period: Optional[tuple[date, date]] = Depends(_period),
    manager: Employee = Depends(_read_team),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.team_report(db, manager, period)


@router.get("/report/all", response_model=AttendanceReportResponse)
async def all_report(
    on_date: Optional[date] = Query(None, alias="date"),
    period: Optional[tuple[date, date]] = Depends(_period),
    _hr: Employee = Depends(_read_all),
    db: AsyncSession = Depends(get_db),
):
    if on_date is not None:
        period = (on_date, on_date)
    return await AttendanceService.report(db, period=period)


@router.get("/report/employee/{employee_id}", response_model=AttendanceReportResponse)
async def employee_report(
    employee_id: int,
    period: Optional[tuple[date, date]] = Depends(_period),
    viewer: Employee = Depends(_read_team),
    db: AsyncSession = Depends(get_db),
):
    await _check_can_view(db, viewer, employee_id)
    return await AttendanceService.employee_report(db, employee_id, period)


@router.get(
    "/report/details/{employee_id}/{on_date}",
    response_model=AttendanceDetailResponse,
)
async def employee_details(
    employee_id: int,
    on_date: date,
    viewer: Employee = Depends(_read_team),
    db: AsyncSession = Depends(get_db),
):
    await _check_can_view(db, viewer, employee_id)
    return await AttendanceService.details(db, employee_id, on_date)


# ── HR ──────────────────────────────────────────────────────────────

@router.post("/mark", response_model=AttendanceResponse)
async def mark_attendance(
    body: MarkAttendanceRequest,
    hr: Employee = Depends(require_permission("attendance:mark")),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.mark(db, body, actor_id=hr.id)


@router.get("/date/{on_date}", response_model=list[AttendanceResponse])
async def attendance_by_date(
    on_date: date,
    _hr: Employee = Depends(_read_all),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.by_date(db, on_date)

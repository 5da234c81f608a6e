"""Reports router — HR-only aggregate reports with CSV download."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.dependencies import require_permission
from hrms.database import get_db
from hrms.employees.models import Employee
from hrms.reports.schemas import AttendanceReport, HeadcountReport, LeaveReport, PayrollReport
from hrms.reports.service import ReportService

router = APIRouter(prefix="", tags=["reports"])

_reader = require_permission("reports:read")


@router.get("/attendance", response_model=AttendanceReport)
async def attendance_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    department_id: Optional[int] = Query(None),
    _user: Employee = Depends(_reader),
    db: AsyncSession = Depends(get_db),
):
    return await ReportService.attendance(
        db, start_date=start_date, end_date=end_date, department_id=department_id,
    )


@router.get("/leaves", response_model=LeaveReport)
async def leave_report(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    department_id: Optional[int] = Query(None),
    _user: Employee = Depends(_reader),
    db: AsyncSession = Depends(get_db),
):
    return await ReportService.leaves(db, year=year, department_id=department_id)


@router.get("/payroll", response_model=PayrollReport)
async def payroll_report(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    _user: Employee = Depends(_reader),
    db: AsyncSession = Depends(get_db),
):
    return await ReportService.payroll(db, month=month, year=year)


@router.get("/headcount", response_model=HeadcountReport)
async def headcount_report(
    _user: Employee = Depends(_reader),
    db: AsyncSession = Depends(get_db),
):
    return await ReportService.headcount(db)


@router.get("/{report_type}/download")
async def download_report(
    report_type: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    department_id: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    _user: Employee = Depends(_reader),
    db: AsyncSession = Depends(get_db),
):
    content = await ReportService.export_csv(
        db,
        report_type,
        start_date=start_date,
        end_date=end_date,
        department_id=department_id,
        month=month,
        year=year,
    )
    filename = f"{report_type}_report_{date.today().isoformat()}.csv"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return StreamingResponse(iter([content]), media_type="text/csv", headers=headers)

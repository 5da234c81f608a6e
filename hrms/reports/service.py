"""HR reports — attendance, leave, payroll and headcount aggregations.

Every report is a list of flat rows so :func:`to_csv` can export it
without per-report formatting.
"""

from __future__ import annotations

import csv
import io
import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from hrms.attendance.models import Attendance
from hrms.common.constants import AttendanceStatus, LeaveStatus
from hrms.common.exceptions import NotFoundException, ValidationException
from hrms.common.filters import resolve_period
from hrms.employees.models import Employee
from hrms.leave.models import Leave, LeaveType
from hrms.master_data.models import MasterDataItem
from hrms.payroll.models import PayrollRun, PayrollSlip
from hrms.reports.schemas import (
    AttendanceReport,
    AttendanceReportRow,
    HeadcountBucket,
    HeadcountReport,
    LeaveReport,
    LeaveReportRow,
    PayrollReport,
    PayrollReportRow,
    PayrollTotals,
)

logger = logging.getLogger(__name__)

REPORT_TYPES = ("attendance", "leaves", "payroll", "headcount")

_STATUS_FIELD = {
    AttendanceStatus.present: "present",
    AttendanceStatus.absent: "absent",
    AttendanceStatus.late: "late",
    AttendanceStatus.half_day: "half_day",
    AttendanceStatus.leave: "leave",
}


def to_csv(rows: Iterable[BaseModel], columns: Optional[list[str]] = None) -> str:
    """Render pydantic rows as CSV text with a header line."""
    rows = list(rows)
    if columns is None:
        columns = list(rows[0].model_dump().keys()) if rows else []
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=columns, extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row.model_dump())
    return output.getvalue()


async def _employees(db: AsyncSession, department_id: Optional[int] = None):
    dept = aliased(MasterDataItem)
    query = (
        select(Employee, dept.name)
        .outerjoin(dept, dept.id == Employee.department_id)
        .where(Employee.is_active.is_(True))
        .order_by(Employee.first_name, Employee.last_name)
    )
    if department_id is not None:
        query = query.where(Employee.department_id == department_id)
    return (await db.execute(query)).all()


class ReportService:

    @staticmethod
    async def attendance(
        db: AsyncSession,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        department_id: Optional[int] = None,
    ) -> AttendanceReport:
        today = date.today()
        start_date, end_date = resolve_period(
            start_date=start_date, end_date=end_date,
            month=today.month, year=today.year,
        )

        hours = func.coalesce(Attendance.gross_hours, Attendance.total_hours, 0)
        stats: dict[int, dict] = defaultdict(dict)
        for emp_id, status, count, total in (await db.execute(
            select(
                Attendance.employee_id,
                Attendance.status,
                func.count(Attendance.id),
                func.sum(hours),
            )
            .where(
                Attendance.attendance_date >= start_date,
                Attendance.attendance_date <= end_date,
            )
            .group_by(Attendance.employee_id, Attendance.status)
        )).all():
            stats[emp_id][_STATUS_FIELD[status]] = count
            stats[emp_id]["hours"] = stats[emp_id].get("hours", Decimal("0")) + Decimal(str(total or 0))

        rows = []
        for employee, department in await _employees(db, department_id):
            counts = stats.get(employee.id, {})
            row = AttendanceReportRow(
                employee_id=employee.id,
                employee_number=employee.employee_number,
                employee_name=employee.full_name,
                department=department,
                **{field: counts.get(field, 0) for field in _STATUS_FIELD.values()},
                total_hours=float(round(counts.get("hours", Decimal("0")), 2)),
            )
            row.total_days = sum(counts.get(f, 0) for f in _STATUS_FIELD.values())
            rows.append(row)
        return AttendanceReport(start_date=start_date, end_date=end_date, rows=rows)

    @staticmethod
    async def leaves(
        db: AsyncSession,
        *,
        year: Optional[int] = None,
        department_id: Optional[int] = None,
    ) -> LeaveReport:
        year = year or date.today().year
        label = func.coalesce(LeaveType.name, Leave.leave_type, "Unknown")
        query = (
            select(
                Employee.id,
                Employee.employee_number,
                Employee.first_name,
                Employee.last_name,
                label.label("type_label"),
                Leave.status,
                func.count(Leave.id),
                func.sum(Leave.total_days),
            )
            .join(Employee, Employee.id == Leave.employee_id)
            .outerjoin(LeaveType, LeaveType.id == Leave.leave_type_id)
            .where(
                Leave.start_date >= date(year, 1, 1),
                Leave.start_date <= date(year, 12, 31),
            )
            .group_by(
                Employee.id,
                Employee.employee_number,
                Employee.first_name,
                Employee.last_name,
                label,
                Leave.status,
            )
        )
        if department_id is not None:
            query = query.where(Employee.department_id == department_id)

        grouped: dict[tuple[int, str], LeaveReportRow] = {}
        for emp_id, number, first, last, type_label, status, count, days in (
            await db.execute(query)
        ).all():
            row = grouped.setdefault(
                (emp_id, type_label),
                LeaveReportRow(
                    employee_id=emp_id,
                    employee_number=number,
                    employee_name=f"{first} {last}",
                    leave_type=type_label,
                ),
            )
            setattr(row, f"{status.value}_count", count)
            if status == LeaveStatus.approved:
                row.approved_days = float(days or 0)
            elif status == LeaveStatus.pending:
                row.pending_days = float(days or 0)

        rows = sorted(grouped.values(), key=lambda r: (r.employee_name, r.leave_type))
        return LeaveReport(year=year, rows=rows)

    @staticmethod
    async def payroll(
        db: AsyncSession,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> PayrollReport:
        today = date.today()
        month, year = month or today.month, year or today.year
        if not 1 <= month <= 12:
            raise ValidationException({"month": ["Month must be between 1 and 12."]})

        run = (await db.execute(
            select(PayrollRun).where(PayrollRun.month == month, PayrollRun.year == year)
        )).scalar_one_or_none()
        report = PayrollReport(month=month, year=year)
        if run is None:
            return report

        report.run_id, report.run_status = run.id, run.status.value
        gross = deductions = net = Decimal("0")
        for slip, number, first, last in (await db.execute(
            select(PayrollSlip, Employee.employee_number, Employee.first_name, Employee.last_name)
            .join(Employee, Employee.id == PayrollSlip.employee_id)
            .where(PayrollSlip.payroll_run_id == run.id)
            .order_by(Employee.first_name, Employee.last_name)
        )).all():
            report.rows.append(PayrollReportRow(
                employee_id=slip.employee_id,
                employee_number=number,
                employee_name=f"{first} {last}",
                working_days=slip.working_days,
                present_days=slip.present_days,
                gross_salary=float(slip.gross_salary),
                total_deductions=float(slip.total_deductions),
                net_salary=float(slip.net_salary),
                status=slip.status.value,
            ))
            gross += slip.gross_salary
            deductions += slip.total_deductions
            net += slip.net_salary

        report.totals = PayrollTotals(
            employees=len(report.rows),
            gross=float(gross),
            deductions=float(deductions),
            net=float(net),
        )
        return report

    @staticmethod
    async def headcount(db: AsyncSession) -> HeadcountReport:
        active = Employee.is_active.is_(True)

        async def _by_master(column) -> list[HeadcountBucket]:
            item = aliased(MasterDataItem)
            rows = (await db.execute(
                select(func.coalesce(item.name, "Unassigned"), func.count(Employee.id))
                .select_from(Employee)
                .outerjoin(item, item.id == column)
                .where(active)
                .group_by(item.name)
                .order_by(func.count(Employee.id).desc())
            )).all()
            return [HeadcountBucket(name=name, count=count) for name, count in rows]

        total = (await db.execute(select(func.count(Employee.id)).where(active))).scalar() or 0
        by_status = [
            HeadcountBucket(name=status.value, count=count)
            for status, count in (await db.execute(
                select(Employee.employment_status, func.count(Employee.id))
                .group_by(Employee.employment_status)
            )).all()
        ]
        return HeadcountReport(
            total=total,
            by_department=await _by_master(Employee.department_id),
            by_designation=await _by_master(Employee.designation_id),
            by_location=await _by_master(Employee.location_id),
            by_employment_status=by_status,
        )

    # ── CSV export ──────────────────────────────────────────────────

    @staticmethod
    async def export_csv(db: AsyncSession, report_type: str, **params) -> str:
        if report_type not in REPORT_TYPES:
            raise NotFoundException("Report", report_type)

        if report_type == "attendance":
            report = await ReportService.attendance(
                db,
                start_date=params.get("start_date"),
                end_date=params.get("end_date"),
                department_id=params.get("department_id"),
            )
            return to_csv(report.rows, list(AttendanceReportRow.model_fields))
        if report_type == "leaves":
            report = await ReportService.leaves(
                db, year=params.get("year"), department_id=params.get("department_id"),
            )
            return to_csv(report.rows, list(LeaveReportRow.model_fields))
        if report_type == "payroll":
            report = await ReportService.payroll(
                db, month=params.get("month"), year=params.get("year"),
            )
            return to_csv(report.rows, list(PayrollReportRow.model_fields))

        report = await ReportService.headcount(db)
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(["dimension", "name", "count"])
        for dimension in ("department", "designation", "location", "employment_status"):
            for bucket in getattr(report, f"by_{dimension}"):
                writer.writerow([dimension, bucket.name, bucket.count])
        return output.getvalue()

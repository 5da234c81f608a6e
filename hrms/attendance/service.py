"""Attendance service — check-in/out, multi-punch hours, reports and HR marking."""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.attendance.models import Attendance, AttendancePunch
from hrms.attendance.schemas import (
    AttendanceDetailResponse,
    AttendanceReportResponse,
    AttendanceReportSummary,
    AttendanceResponse,
    AttendanceStatusSummary,
    CheckInResponse,
    CheckOutResponse,
    MarkAttendanceRequest,
    PunchPair,
    PunchRecord,
    PunchResponse,
    ReportEmployee,
    TodayAttendanceResponse,
)
from hrms.common.audit import create_audit_entry
from hrms.common.constants import AttendanceStatus, EmploymentStatus, PunchType, WorkMode
from hrms.common.exceptions import BadRequestException, NotFoundException
from hrms.common.filters import apply_period, month_bounds
from hrms.employees.models import Employee

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")
_VALID_MODES = [m.value for m in WorkMode]


def _hours(seconds: float) -> Decimal:
    return (Decimal(str(seconds)) / Decimal(3600)).quantize(_CENT, rounding=ROUND_HALF_UP)


# ── Punch arithmetic ────────────────────────────────────────────────

def calculate_punch_hours(punches: Sequence[AttendancePunch]) -> tuple[Decimal, Decimal]:
    """Return ``(work_hours, break_hours)`` for time-ordered punches.

    Work time is summed over in→out pairs, break time over out→in gaps.
    A trailing unmatched ``in`` contributes nothing.
    """
    work_seconds = 0.0
    break_seconds = 0.0
    open_in: Optional[datetime] = None
    last_out: Optional[datetime] = None

    for punch in punches:
        if punch.punch_type == PunchType.punch_in:
            if last_out is not None:
                break_seconds += (punch.punch_time - last_out).total_seconds()
            open_in = punch.punch_time
        elif open_in is not None:
            work_seconds += (punch.punch_time - open_in).total_seconds()
            last_out = punch.punch_time
            open_in = None

    return _hours(work_seconds), _hours(break_seconds)


def build_punch_pairs(punches: Sequence[AttendancePunch]) -> list[PunchPair]:
    pairs: list[PunchPair] = []
    current: Optional[PunchPair] = None

    for punch in punches:
        if punch.punch_type == PunchType.punch_in:
            current = PunchPair(punch_in=punch.punch_time, punch_in_location=punch.location)
        elif current is not None:
            current.punch_out = punch.punch_time
            current.punch_out_location = punch.location
            current.hours_worked = float(
                _hours((punch.punch_time - current.punch_in).total_seconds())
            )
            pairs.append(current)
            current = None

    if current is not None:
        current.status = "In Progress"
        pairs.append(current)
    return pairs


def summarize(rows: Sequence[AttendanceResponse]) -> AttendanceReportSummary:
    """Day counts plus total/average worked hours (gross, else simple total)."""
    total = Decimal("0")
    for row in rows:
        worked = row.gross_hours if row.gross_hours is not None else row.total_hours
        total += Decimal(str(worked or 0))
    count = len(rows)
    return AttendanceReportSummary(
        total_days=count,
        present_days=sum(1 for r in rows if r.status == AttendanceStatus.present),
        absent_days=sum(1 for r in rows if r.status == AttendanceStatus.absent),
        half_days=sum(1 for r in rows if r.status == AttendanceStatus.half_day),
        total_work_hours=float(total.quantize(_CENT)),
        avg_work_hours=float((total / count).quantize(_CENT)) if count else 0.0,
    )


class AttendanceService:
    """Async operations over ``attendance`` / ``attendance_punches``."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    async def _get_day(
        db: AsyncSession,
        employee_id: int,
        on_date: date,
    ) -> Optional[Attendance]:
        result = await db.execute(
            select(Attendance).where(
                Attendance.employee_id == employee_id,
                Attendance.attendance_date == on_date,
            )
        )
        return result.scalars().first()

    @staticmethod
    async def _get_punches(db: AsyncSession, attendance_id: int) -> Sequence[AttendancePunch]:
        result = await db.execute(
            select(AttendancePunch)
            .where(AttendancePunch.attendance_id == attendance_id)
            .order_by(AttendancePunch.punch_time.asc(), AttendancePunch.id.asc())
        )
        return result.scalars().all()

    @staticmethod
    async def _rows_with_names(db: AsyncSession, query: Select) -> list[AttendanceResponse]:
        """Run an ``Attendance`` select and decorate each row with the employee name."""
        query = query.add_columns(
            Employee.employee_number, Employee.first_name, Employee.last_name,
        ).join(Employee, Employee.id == Attendance.employee_id)
        out = []
        for row, number, first, last in (await db.execute(query)).all():
            resp = AttendanceResponse.model_validate(row)
            resp.employee_number = number
            resp.employee_name = f"{first} {last}"
            out.append(resp)
        return out

    # ── Simple check-in / check-out ─────────────────────────────────

    @staticmethod
    async def check_in(
        db: AsyncSession,
        employee: Employee,
        *,
        work_mode: str = "Office",
        location: Optional[str] = None,
        notes: Optional[str] = None,
        ip_address: Optional[str] = None,
        device_info: Optional[str] = None,
    ) -> CheckInResponse:
        mode = work_mode or WorkMode.office.value
        if mode not in _VALID_MODES:
            raise BadRequestException("Invalid work mode. Use: Office, WFH, Remote, or Hybrid")

        now = datetime.now()
        today = now.date()
        if await AttendanceService._get_day(db, employee.id, today) is not None:
            raise BadRequestException("Already checked in today")

        attendance = Attendance(
            employee_id=employee.id,
            attendance_date=today,
            check_in=now,
            work_mode=mode,
            location=location or mode,
            status=AttendanceStatus.present,
            notes=notes,
            source="web",
            ip_address=ip_address,
            device_info=device_info,
        )
        db.add(attendance)
        await db.flush()

        await create_audit_entry(
            db,
            action="check_in",
            entity_type="attendance",
            entity_id=attendance.id,
            actor_id=employee.id,
            new_values={"work_mode": mode, "timestamp": now.isoformat()},
            ip_address=ip_address,
        )
        logger.info("Employee %s checked in (%s)", employee.id, mode)

        return CheckInResponse(
            message=f"Checked in successfully as {mode}",
            work_mode=mode,
            check_in_time=now,
            location=attendance.location,
        )

    @staticmethod
    async def check_out(
        db: AsyncSession,
        employee: Employee,
        *,
        notes: Optional[str] = None,
    ) -> CheckOutResponse:
        now = datetime.now()
        attendance = await AttendanceService._get_day(db, employee.id, now.date())
        if attendance is None or attendance.check_in is None or attendance.check_out is not None:
            raise BadRequestException("No active check-in found for today")

        total_hours = _hours((now - attendance.check_in).total_seconds())
        attendance.check_out = now
        attendance.total_hours = total_hours
        if notes:
            attendance.notes = f"{attendance.notes or ''} | Checkout: {notes}"
        await db.flush()

        await create_audit_entry(
            db,
            action="check_out",
            entity_type="attendance",
            entity_id=attendance.id,
            actor_id=employee.id,
            new_values={"total_hours": str(total_hours), "timestamp": now.isoformat()},
        )

        return CheckOutResponse(
            message="Checked out successfully",
            check_out_time=now,
            total_hours=float(total_hours),
            work_mode=attendance.work_mode,
        )

    # ── Multi-punch ─────────────────────────────────────────────────

    @staticmethod
    async def punch_in(
        db: AsyncSession,
        employee: Employee,
        *,
        work_mode: Optional[str] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
        ip_address: Optional[str] = None,
        device_info: Optional[str] = None,
    ) -> PunchResponse:
        mode = work_mode or WorkMode.office.value
        if mode not in _VALID_MODES:
            raise BadRequestException("Invalid work mode. Use: Office, WFH, Remote, or Hybrid")

        now = datetime.now()
        today = now.date()
        attendance = await AttendanceService._get_day(db, employee.id, today)

        punches: Sequence[AttendancePunch] = []
        if attendance is not None:
            punches = await AttendanceService._get_punches(db, attendance.id)
            if punches and punches[-1].punch_type == PunchType.punch_in:
                raise BadRequestException("Already punched in. Please punch out first.")

        if attendance is None:
            attendance = Attendance(
                employee_id=employee.id,
                attendance_date=today,
                first_check_in=now,
                work_mode=mode,
                location=location or "Office",
                status=AttendanceStatus.present,
                source="web",
            )
            db.add(attendance)
            await db.flush()
        elif not punches:
            attendance.first_check_in = now
            attendance.work_mode = mode
            attendance.location = location or "Office"

        db.add(
            AttendancePunch(
                attendance_id=attendance.id,
                employee_id=employee.id,
                punch_type=PunchType.punch_in,
                punch_time=now,
                punch_date=today,
                location=location,
                notes=notes,
                ip_address=ip_address,
                device_info=device_info,
            )
        )
        await db.flush()

        return PunchResponse(
            message="Punched in successfully",
            punch_time=now,
            attendance_id=attendance.id,
            work_mode=mode,
        )

    @staticmethod
    async def punch_out(
        db: AsyncSession,
        employee: Employee,
        *,
        location: Optional[str] = None,
        notes: Optional[str] = None,
        ip_address: Optional[str] = None,
        device_info: Optional[str] = None,
    ) -> PunchResponse:
        now = datetime.now()
        today = now.date()
        attendance = await AttendanceService._get_day(db, employee.id, today)
        if attendance is None:
            raise BadRequestException("No attendance record found. Please punch in first.")

        punches = list(await AttendanceService._get_punches(db, attendance.id))
        if not punches:
            raise BadRequestException("No punch-in found. Please punch in first.")
        if punches[-1].punch_type == PunchType.punch_out:
            raise BadRequestException("Already punched out. Punch in first to punch out again.")

        punch = AttendancePunch(
            attendance_id=attendance.id,
            employee_id=employee.id,
            punch_type=PunchType.punch_out,
            punch_time=now,
            punch_date=today,
            location=location,
            notes=notes,
            ip_address=ip_address,
            device_info=device_info,
        )
        db.add(punch)
        punches.append(punch)

        work_hours, break_hours = calculate_punch_hours(punches)
        attendance.last_check_out = now
        attendance.gross_hours = work_hours
        attendance.total_hours = work_hours
        attendance.break_hours = break_hours
        await db.flush()

        return PunchResponse(
            message="Punched out successfully",
            punch_time=now,
            attendance_id=attendance.id,
        )

    @staticmethod
    async def today(db: AsyncSession, employee: Employee) -> TodayAttendanceResponse:
        attendance = await AttendanceService._get_day(db, employee.id, date.today())
        if attendance is None:
            return TodayAttendanceResponse(
                has_attendance=False,
                message="No attendance record for today",
            )

        punches = await AttendanceService._get_punches(db, attendance.id)
        last_type = punches[-1].punch_type if punches else None
        return TodayAttendanceResponse(
            has_attendance=True,
            attendance=AttendanceResponse.model_validate(attendance),
            punches=[PunchRecord.model_validate(p) for p in punches],
            punch_count=len(punches),
            last_punch_type=last_type,
            can_punch_in=last_type != PunchType.punch_in,
            can_punch_out=last_type == PunchType.punch_in,
        )

    @staticmethod
    async def details(
        db: AsyncSession,
        employee_id: int,
        on_date: date,
    ) -> AttendanceDetailResponse:
        attendance = await AttendanceService._get_day(db, employee_id, on_date)
        if attendance is None:
            raise NotFoundException("Attendance", on_date.isoformat())
        punches = await AttendanceService._get_punches(db, attendance.id)
        return AttendanceDetailResponse(
            attendance=AttendanceResponse.model_validate(attendance),
            punches=[PunchRecord.model_validate(p) for p in punches],
            punch_pairs=build_punch_pairs(punches),
        )

    # ── Reports ─────────────────────────────────────────────────────

    @staticmethod
    async def report(
        db: AsyncSession,
        *,
        employee_ids: Optional[Sequence[int]] = None,
        period: Optional[tuple[date, date]] = None,
    ) -> AttendanceReportResponse:
        """Rows (newest first) and summary; ``employee_ids=None`` means everyone."""
        query = select(Attendance).order_by(
            Attendance.attendance_date.desc(), Attendance.employee_id.asc(),
        )
        if employee_ids is not None:
            query = query.where(Attendance.employee_id.in_(list(employee_ids)))
        query = apply_period(query, Attendance.attendance_date, period)
        rows = await AttendanceService._rows_with_names(db, query)
        return AttendanceReportResponse(summary=summarize(rows), attendance=rows)

    @staticmethod
    async def employee_report(
        db: AsyncSession,
        employee_id: int,
        period: Optional[tuple[date, date]] = None,
    ) -> AttendanceReportResponse:
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", employee_id)
        report = await AttendanceService.report(db, employee_ids=[employee_id], period=period)
        report.employee = ReportEmployee(
            id=employee.id,
            employee_number=employee.employee_number,
            name=employee.full_name,
            email=employee.email,
        )
        return report

    @staticmethod
    async def team_report(
        db: AsyncSession,
        manager: Employee,
        period: Optional[tuple[date, date]] = None,
    ) -> AttendanceReportResponse:
        team_ids = (
            await db.execute(
                select(Employee.id).where(
                    Employee.reporting_manager_id == manager.id,
                    Employee.is_active.is_(True),
                    Employee.employment_status == EmploymentStatus.working,
                )
            )
        ).scalars().all()
        return await AttendanceService.report(db, employee_ids=team_ids, period=period)

    @staticmethod
    async def my_attendance(
        db: AsyncSession,
        employee_id: int,
        period: Optional[tuple[date, date]] = None,
    ) -> Sequence[Attendance]:
        query = (
            select(Attendance)
            .where(Attendance.employee_id == employee_id)
            .order_by(Attendance.attendance_date.desc())
        )
        query = apply_period(query, Attendance.attendance_date, period)
        return (await db.execute(query)).scalars().all()

    @staticmethod
    async def by_date(db: AsyncSession, on_date: date) -> list[AttendanceResponse]:
        query = (
            select(Attendance)
            .where(Attendance.attendance_date == on_date)
            .order_by(Employee.employee_number)
        )
        return await AttendanceService._rows_with_names(db, query)

    @staticmethod
    async def status_summary(
        db: AsyncSession,
        employee_id: int,
        month: int,
        year: int,
    ) -> AttendanceStatusSummary:
        rows = await AttendanceService.my_attendance(
            db, employee_id, month_bounds(month, year),
        )
        counts = {status: 0 for status in AttendanceStatus}
        hours = Decimal("0")
        for row in rows:
            counts[row.status] += 1
            worked = row.gross_hours if row.gross_hours is not None else row.total_hours
            hours += worked or Decimal("0")
        return AttendanceStatusSummary(
            employee_id=employee_id,
            month=month,
            year=year,
            total_days=len(rows),
            present_days=counts[AttendanceStatus.present],
            absent_days=counts[AttendanceStatus.absent],
            late_days=counts[AttendanceStatus.late],
            half_days=counts[AttendanceStatus.half_day],
            leave_days=counts[AttendanceStatus.leave],
            total_hours=float(hours),
        )

    # ── HR marking ──────────────────────────────────────────────────

    @staticmethod
    async def mark(
        db: AsyncSession,
        data: MarkAttendanceRequest,
        *,
        actor_id: int,
    ) -> Attendance:
        """Insert, or overwrite the status of, an employee's day."""
        if await db.get(Employee, data.employee_id) is None:
            raise NotFoundException("Employee", data.employee_id)

        attendance = await AttendanceService._get_day(db, data.employee_id, data.attendance_date)
        old_status = attendance.status.value if attendance else None
        if attendance is None:
            attendance = Attendance(
                employee_id=data.employee_id,
                attendance_date=data.attendance_date,
                source="manual",
            )
            db.add(attendance)

        attendance.status = data.status
        attendance.work_mode = data.work_mode
        if data.check_in is not None:
            attendance.check_in = data.check_in
        if data.check_out is not None:
            attendance.check_out = data.check_out
        if attendance.check_in and attendance.check_out:
            attendance.total_hours = _hours(
                (attendance.check_out - attendance.check_in).total_seconds()
            )
        if data.notes is not None:
            attendance.notes = data.notes
        await db.flush()

        await create_audit_entry(
            db,
            action="mark",
            entity_type="attendance",
            entity_id=attendance.id,
            actor_id=actor_id,
            old_values={"status": old_status} if old_status else None,
            new_values={"status": data.status.value, "date": data.attendance_date.isoformat()},
        )
        logger.info(
            "Attendance marked %s for employee %s on %s",
            data.status.value, data.employee_id, data.attendance_date,
        )
        return attendance

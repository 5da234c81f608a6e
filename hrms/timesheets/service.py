"""Timesheet service — regular and project submissions, client validation."""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import extract, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.common.audit import create_audit_entry
from hrms.common.constants import (
    COMPLIANT_TIMESHEET_STATUSES,
    ClientValidationStatus,
    PeriodLockStatus,
    TimesheetStatus,
    TimesheetType,
)
from hrms.common.exceptions import (
    BadRequestException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from hrms.common.filters import apply_period, month_bounds
from hrms.compliance.models import PayrollPeriodLock, period_key
from hrms.employees.models import Employee
from hrms.projects.models import Project
from hrms.projects.service import active_assignments
from hrms.timesheets.models import Timesheet
from hrms.timesheets.schemas import (
    AssignmentStatusResponse,
    ClientValidationRequest,
    ProjectTimesheetSubmit,
    RegularTimesheetSubmit,
    TimesheetAdminStats,
    TimesheetResponse,
    TimesheetReview,
    TimesheetStats,
)

logger = logging.getLogger(__name__)


async def ensure_period_open(db: AsyncSession, day: date) -> None:
    """Raise 422 when the payroll period containing *day* is locked."""
    key = period_key(day.month, day.year)
    result = await db.execute(
        select(PayrollPeriodLock.lock_status).where(
            PayrollPeriodLock.payroll_period == key,
        )
    )
    if result.scalar_one_or_none() == PeriodLockStatus.locked:
        raise ValidationException(
            {"date": [f"Payroll period {key} is locked. Timesheets can no longer be changed."]}
        )


def _decorate(rows) -> list[TimesheetResponse]:
    out = []
    for ts, project_name, project_code, first, last, number in rows:
        resp = TimesheetResponse.model_validate(ts)
        resp.project_name, resp.project_code = project_name, project_code
        if first is not None:
            resp.employee_name = f"{first} {last}"
        resp.employee_number = number
        out.append(resp)
    return out


def _listing_query():
    return (
        select(
            Timesheet,
            Project.project_name,
            Project.project_code,
            Employee.first_name,
            Employee.last_name,
            Employee.employee_number,
        )
        .outerjoin(Project, Project.id == Timesheet.project_id)
        .join(Employee, Employee.id == Timesheet.employee_id)
    )


class TimesheetService:
    """Async business logic for daily timesheets."""

    @staticmethod
    async def assignment_status(
        db: AsyncSession, employee_id: int,
    ) -> AssignmentStatusResponse:
        assignments = await active_assignments(db, employee_id, date.today())
        return AssignmentStatusResponse(
            has_project=bool(assignments),
            assignments=assignments,
            timesheet_type="project_based" if assignments else "regular",
        )

    @staticmethod
    async def _upsert(
        db: AsyncSession,
        employee_id: int,
        data: RegularTimesheetSubmit,
        *,
        timesheet_type: TimesheetType,
        project_id: Optional[int] = None,
    ) -> Timesheet:
        query = select(Timesheet).where(
            Timesheet.employee_id == employee_id,
            Timesheet.date == data.date,
            Timesheet.timesheet_type == timesheet_type,
        )
        if project_id is None:
            query = query.where(Timesheet.project_id.is_(None))
        else:
            query = query.where(Timesheet.project_id == project_id)
        ts = (await db.execute(query)).scalars().first()

        status = TimesheetStatus.draft if data.save_as_draft else TimesheetStatus.submitted
        if ts is None:
            ts = Timesheet(
                employee_id=employee_id,
                project_id=project_id,
                date=data.date,
                timesheet_type=timesheet_type,
            )
            db.add(ts)
        elif ts.status == TimesheetStatus.verified:
            raise ValidationException(
                {"status": ["A verified timesheet can no longer be changed."]}
            )

        ts.hours_breakdown = data.hours_breakdown
        ts.total_hours = Decimal(str(data.total_hours))
        ts.notes = data.notes
        ts.status = status
        ts.submission_date = None if data.save_as_draft else datetime.now()
        await db.flush()
        await db.refresh(ts)
        logger.info(
            "Timesheet %s emp=%s date=%s type=%s -> %s",
            ts.id, employee_id, data.date, timesheet_type.value, status.value,
        )
        return ts

    @staticmethod
    async def submit_regular(
        db: AsyncSession, employee_id: int, data: RegularTimesheetSubmit,
    ) -> Timesheet:
        await ensure_period_open(db, data.date)
        if await active_assignments(db, employee_id, data.date):
            raise BadRequestException(
                "You are assigned to a project. Please use project-based timesheet."
            )
        return await TimesheetService._upsert(
            db, employee_id, data, timesheet_type=TimesheetType.regular,
        )

    @staticmethod
    async def submit_project(
        db: AsyncSession, employee_id: int, data: ProjectTimesheetSubmit,
    ) -> Timesheet:
        await ensure_period_open(db, data.date)
        if not await active_assignments(db, employee_id, data.date, data.project_id):
            raise ForbiddenException(
                "You are not assigned to this project or the assignment is not "
                "active for this date."
            )
        return await TimesheetService._upsert(
            db,
            employee_id,
            data,
            timesheet_type=TimesheetType.project,
            project_id=data.project_id,
        )

    @staticmethod
    async def my_timesheets(
        db: AsyncSession,
        employee_id: int,
        *,
        timesheet_type: TimesheetType,
        period: Optional[tuple[date, date]] = None,
        project_id: Optional[int] = None,
    ) -> list[TimesheetResponse]:
        query = _listing_query().where(
            Timesheet.employee_id == employee_id,
            Timesheet.timesheet_type == timesheet_type,
        )
        if project_id is not None:
            query = query.where(Timesheet.project_id == project_id)
        query = apply_period(query, Timesheet.date, period)
        query = query.order_by(Timesheet.date.desc(), Timesheet.id.desc())
        return _decorate((await db.execute(query)).all())

    @staticmethod
    async def my_stats(
        db: AsyncSession, employee_id: int, month: int, year: int,
    ) -> TimesheetStats:
        start, end = month_bounds(month, year)
        rows = (await db.execute(
            select(Timesheet.status, Timesheet.date, Timesheet.total_hours).where(
                Timesheet.employee_id == employee_id,
                Timesheet.date >= start,
                Timesheet.date <= end,
            )
        )).all()

        by_status: dict[str, int] = {}
        days: set[date] = set()
        hours = Decimal("0")
        for status, day, total in rows:
            by_status[status.value] = by_status.get(status.value, 0) + 1
            if status in COMPLIANT_TIMESHEET_STATUSES:
                days.add(day)
                hours += total or Decimal("0")
        avg = (hours / len(days)) if days else Decimal("0")
        return TimesheetStats(
            month=month,
            year=year,
            submitted_days=len(days),
            total_hours=float(round(hours, 2)),
            avg_hours=float(round(avg, 2)),
            by_status=by_status,
        )

    # ── Admin ───────────────────────────────────────────────────────

    @staticmethod
    async def pending_validation(
        db: AsyncSession,
        *,
        period: Optional[tuple[date, date]] = None,
        project_id: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> list[TimesheetResponse]:
        query = _listing_query().where(Timesheet.status == TimesheetStatus.submitted)
        if project_id is not None:
            query = query.where(Timesheet.project_id == project_id)
        if employee_id is not None:
            query = query.where(Timesheet.employee_id == employee_id)
        query = apply_period(query, Timesheet.date, period)
        query = query.order_by(Timesheet.date, Employee.first_name)
        return _decorate((await db.execute(query)).all())

    @staticmethod
    async def validate_client(
        db: AsyncSession, data: ClientValidationRequest, *, actor_id: int,
    ) -> int:
        """Record the client's verdict on a month of project timesheets."""
        start, end = month_bounds(data.month, data.year)
        values = {
            "client_timesheet_status": ClientValidationStatus(data.validation_status),
            "validation_remarks": data.remarks,
            "validated_by": actor_id,
            "validated_at": datetime.now(),
        }
        if data.client_hours is not None:
            values["client_reported_hours"] = Decimal(str(data.client_hours))

        result = await db.execute(
            update(Timesheet)
            .where(
                Timesheet.employee_id == data.employee_id,
                Timesheet.project_id == data.project_id,
                Timesheet.timesheet_type == TimesheetType.project,
                Timesheet.date >= start,
                Timesheet.date <= end,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        affected = result.rowcount or 0
        await create_audit_entry(
            db,
            action="client_validate",
            entity_type="timesheet",
            entity_id=data.employee_id,
            actor_id=actor_id,
            new_values={
                "project_id": data.project_id,
                "period": period_key(data.month, data.year),
                "validation_status": data.validation_status,
                "affected": affected,
            },
        )
        return affected

    @staticmethod
    async def review(
        db: AsyncSession,
        timesheet_id: int,
        data: TimesheetReview,
        *,
        actor_id: int,
    ) -> Timesheet:
        ts = await db.get(Timesheet, timesheet_id)
        if ts is None:
            raise NotFoundException("Timesheet", timesheet_id)
        if ts.status != TimesheetStatus.submitted:
            raise ValidationException(
                {"status": [f"Only submitted timesheets can be reviewed (current: {ts.status.value})."]}
            )
        old = ts.status.value
        ts.status = TimesheetStatus(data.status)
        ts.review_remarks = data.remarks
        ts.verified_by = actor_id
        ts.verified_at = datetime.now()
        await db.flush()
        await create_audit_entry(
            db,
            action=data.status,
            entity_type="timesheet",
            entity_id=ts.id,
            actor_id=actor_id,
            old_values={"status": old},
            new_values={"status": data.status, "remarks": data.remarks},
        )
        await db.refresh(ts)
        return ts

    @staticmethod
    async def admin_stats(
        db: AsyncSession,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> TimesheetAdminStats:
        def _scoped(query):
            if month is not None:
                query = query.where(extract("month", Timesheet.date) == month)
            if year is not None:
                query = query.where(extract("year", Timesheet.date) == year)
            return query

        by_status = {
            status.value: count
            for status, count in (await db.execute(
                _scoped(select(Timesheet.status, func.count()).group_by(Timesheet.status))
            )).all()
        }
        by_client = {
            (status.value if status else "not_validated"): count
            for status, count in (await db.execute(
                _scoped(
                    select(Timesheet.client_timesheet_status, func.count())
                    .where(Timesheet.timesheet_type == TimesheetType.project)
                    .group_by(Timesheet.client_timesheet_status)
                )
            )).all()
        }
        return TimesheetAdminStats(
            month=month,
            year=year,
            total=sum(by_status.values()),
            by_status=by_status,
            by_client_status=by_client,
        )

"""Timesheet compliance — daily submission tracking, reminders and period locks.

An employee is *compliant* for a day when they hold a submitted or
verified timesheet for it. Admin views cover every working employee;
manager views pass ``scope`` to restrict them to direct reports.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.common.audit import create_audit_entry
from hrms.common.constants import (
    COMPLIANT_TIMESHEET_STATUSES,
    ClientValidationStatus,
    EmploymentStatus,
    PeriodLockStatus,
    TimesheetStatus,
    TimesheetType,
)
from hrms.common.exceptions import BadRequestException, NotFoundException, ValidationException
from hrms.common.filters import month_bounds
from hrms.compliance.models import PayrollPeriodLock, period_key
from hrms.compliance.schemas import (
    CloseMonthResponse,
    CloseMonthWarnings,
    ComplianceDashboard,
    ComplianceHistoryRow,
    DailyCompliance,
    DepartmentCompliance,
    EmployeeMonthCompliance,
    MonthlyComplianceReport,
    MonthSummary,
    MyComplianceStatus,
    NonCompliantEmployee,
    PeriodLockResponse,
    PeriodStatus,
    RemindedEmployee,
    ReminderResponse,
    ReopenMonthRequest,
    SubmissionDetails,
    TodayTotals,
    TrendPoint,
)
from hrms.employees.models import Employee
from hrms.master_data.models import MasterDataItem
from hrms.notifications.service import notify_timesheet_reminder
from hrms.projects.models import ProjectAssignment
from hrms.projects.service import active_on
from hrms.timesheets.models import Timesheet
from hrms.timesheets.service import TimesheetService

logger = logging.getLogger(__name__)

HISTORY_DEFAULT_DAYS = 30
HISTORY_MAX_DAYS = 366
TREND_DAYS = 7
TOP_NON_COMPLIANT_LIMIT = 20


def compliance_rate(submitted: int, total: int) -> float:
    """Percentage rounded to 2 dp; 0 when there is nobody to count."""
    if not total:
        return 0.0
    return round(submitted * 100 / total, 2)


def _sheet_rank(sheet: Timesheet) -> int:
    if sheet.status in COMPLIANT_TIMESHEET_STATUSES:
        return 0
    return 1 if sheet.status == TimesheetStatus.draft else 2


async def _working_employees(
    db: AsyncSession, scope: Optional[Sequence[int]] = None,
) -> list[Employee]:
    query = (
        select(Employee)
        .where(
            Employee.employment_status == EmploymentStatus.working,
            Employee.is_active.is_(True),
        )
        .order_by(Employee.first_name, Employee.last_name)
    )
    if scope is not None:
        query = query.where(Employee.id.in_(list(scope) or [-1]))
    return list((await db.execute(query)).scalars().all())


async def _compliant_pairs(
    db: AsyncSession, start: date, end: date,
) -> set[tuple[int, date]]:
    rows = await db.execute(
        select(Timesheet.employee_id, Timesheet.date).where(
            Timesheet.date >= start,
            Timesheet.date <= end,
            Timesheet.status.in_(COMPLIANT_TIMESHEET_STATUSES),
        )
    )
    return {(emp_id, day) for emp_id, day in rows.all()}


async def _department_names(db: AsyncSession, ids: Iterable[Optional[int]]) -> dict[int, str]:
    wanted = {i for i in ids if i is not None}
    if not wanted:
        return {}
    rows = await db.execute(
        select(MasterDataItem.id, MasterDataItem.name).where(MasterDataItem.id.in_(wanted))
    )
    return dict(rows.all())


class ComplianceService:
    """Async compliance queries and period-lock management."""

    # ── Employee views ──────────────────────────────────────────────

    @staticmethod
    async def my_status(db: AsyncSession, employee: Employee) -> MyComplianceStatus:
        today = date.today()
        projects = await db.execute(
            select(func.count(ProjectAssignment.id)).where(
                ProjectAssignment.employee_id == employee.id, active_on(today),
            )
        )
        has_projects = (projects.scalar() or 0) > 0

        latest = (await db.execute(
            select(Timesheet)
            .where(Timesheet.employee_id == employee.id, Timesheet.date == today)
            .order_by(Timesheet.created_at.desc(), Timesheet.id.desc())
        )).scalars().first()
        submitted = latest is not None and latest.status != TimesheetStatus.draft

        details = None
        if latest is not None:
            details = SubmissionDetails(
                timesheet_id=latest.id,
                timesheet_type=latest.timesheet_type,
                status=latest.status,
                submission_date=latest.submission_date,
                total_hours=float(latest.total_hours or 0),
            )

        stats = await TimesheetService.my_stats(db, employee.id, today.month, today.year)
        return MyComplianceStatus(
            date=today,
            has_active_projects=has_projects,
            is_submitted=submitted,
            timesheet_type="project_based" if has_projects else "regular",
            submission_details=details,
            status="compliant" if submitted else "pending",
            this_month=MonthSummary(
                submitted_days=stats.submitted_days,
                total_hours=stats.total_hours,
                avg_hours=stats.avg_hours,
            ),
        )

    @staticmethod
    async def my_history(
        db: AsyncSession,
        employee_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[ComplianceHistoryRow]:
        end = end_date or date.today()
        start = start_date or end - timedelta(days=HISTORY_DEFAULT_DAYS - 1)
        if end < start:
            raise ValidationException({"date_range": ["end_date must be on or after start_date."]})
        if (end - start).days >= HISTORY_MAX_DAYS:
            raise ValidationException({"date_range": ["History is limited to one year."]})

        sheets = (await db.execute(
            select(Timesheet)
            .where(
                Timesheet.employee_id == employee_id,
                Timesheet.date >= start,
                Timesheet.date <= end,
            )
            .order_by(Timesheet.id)
        )).scalars().all()

        # Per day keep compliant over draft over anything else; later sheets win ties
        best: dict[date, Timesheet] = {}
        for ts in sheets:
            current = best.get(ts.date)
            if current is None or _sheet_rank(ts) <= _sheet_rank(current):
                best[ts.date] = ts

        history = []
        day = end
        while day >= start:
            ts = best.get(day)
            if ts is None:
                history.append(ComplianceHistoryRow(date=day, compliance_status="missing"))
            else:
                if ts.status in COMPLIANT_TIMESHEET_STATUSES:
                    verdict = "compliant"
                elif ts.status == TimesheetStatus.draft:
                    verdict = "pending"
                else:
                    verdict = "missing"
                history.append(ComplianceHistoryRow(
                    date=day,
                    timesheet_id=ts.id,
                    timesheet_type=ts.timesheet_type,
                    status=ts.status,
                    total_hours=float(ts.total_hours or 0),
                    compliance_status=verdict,
                ))
            day -= timedelta(days=1)
        return history

    # ── Admin / manager views ───────────────────────────────────────

    @staticmethod
    async def non_compliant(
        db: AsyncSession,
        day: date,
        scope: Optional[Sequence[int]] = None,
    ) -> list[NonCompliantEmployee]:
        employees = await _working_employees(db, scope)
        compliant = {emp for emp, _ in await _compliant_pairs(db, day, day)}
        missing = [e for e in employees if e.id not in compliant]
        if not missing:
            return []

        ids = [e.id for e in missing]
        drafts = set((await db.execute(
            select(Timesheet.employee_id).where(
                Timesheet.employee_id.in_(ids),
                Timesheet.date == day,
                Timesheet.status == TimesheetStatus.draft,
            )
        )).scalars().all())
        project_counts = dict((await db.execute(
            select(ProjectAssignment.employee_id, func.count(ProjectAssignment.id))
            .where(ProjectAssignment.employee_id.in_(ids), active_on(day))
            .group_by(ProjectAssignment.employee_id)
        )).all())
        departments = await _department_names(db, (e.department_id for e in missing))

        return [
            NonCompliantEmployee(
                employee_id=e.id,
                employee_number=e.employee_number,
                employee_name=e.full_name,
                email=e.email,
                department=departments.get(e.department_id),
                active_projects=int(project_counts.get(e.id, 0)),
                draft_status="draft_saved" if e.id in drafts else "not_started",
            )
            for e in missing
        ]

    @staticmethod
    async def dashboard(
        db: AsyncSession, scope: Optional[Sequence[int]] = None,
    ) -> ComplianceDashboard:
        today = date.today()
        employees = await _working_employees(db, scope)
        ids = {e.id for e in employees}
        total = len(ids)

        trend_start = today - timedelta(days=TREND_DAYS - 1)
        by_day: dict[date, set[int]] = defaultdict(set)
        for emp_id, day in await _compliant_pairs(db, trend_start, today):
            if emp_id in ids:
                by_day[day].add(emp_id)

        submitted_today = len(by_day.get(today, ()))
        trend = []
        for offset in range(TREND_DAYS):
            day = trend_start + timedelta(days=offset)
            count = len(by_day.get(day, ()))
            trend.append(TrendPoint(
                date=day,
                total_employees=total,
                submitted_count=count,
                compliance_rate=compliance_rate(count, total),
            ))

        pending_q = select(func.count(Timesheet.id)).where(
            Timesheet.status == TimesheetStatus.submitted,
        )
        if scope is not None:
            pending_q = pending_q.where(Timesheet.employee_id.in_(list(ids) or [-1]))
        pending_validations = (await db.execute(pending_q)).scalar() or 0

        locks = (await db.execute(
            select(PayrollPeriodLock)
            .order_by(PayrollPeriodLock.payroll_period.desc())
            .limit(3)
        )).scalars().all()

        return ComplianceDashboard(
            today=TodayTotals(
                date=today,
                total_employees=total,
                submitted_count=submitted_today,
                pending_count=total - submitted_today,
                compliance_rate=compliance_rate(submitted_today, total),
            ),
            non_compliant=await ComplianceService.non_compliant(db, today, scope),
            trend=trend,
            pending_validations=pending_validations,
            period_locks=[PeriodLockResponse.model_validate(lock) for lock in locks],
        )

    @staticmethod
    async def send_reminders(
        db: AsyncSession,
        day: date,
        *,
        employee_ids: Optional[Sequence[int]] = None,
        scope: Optional[Sequence[int]] = None,
    ) -> ReminderResponse:
        targets = await ComplianceService.non_compliant(db, day, scope)
        if employee_ids:
            wanted = set(employee_ids)
            targets = [t for t in targets if t.employee_id in wanted]

        for target in targets:
            await notify_timesheet_reminder(db, target.employee_id, day.isoformat())
        logger.info("Sent %d timesheet reminders for %s", len(targets), day)

        return ReminderResponse(
            date=day,
            count=len(targets),
            reminded=[
                RemindedEmployee(employee_id=t.employee_id, employee_name=t.employee_name)
                for t in targets
            ],
        )

    @staticmethod
    async def bulk_approve(
        db: AsyncSession,
        timesheet_ids: Sequence[int],
        *,
        notes: Optional[str],
        actor_id: int,
    ) -> int:
        if not timesheet_ids:
            raise BadRequestException("No timesheets selected for approval.")

        result = await db.execute(
            update(Timesheet)
            .where(
                Timesheet.id.in_(list(timesheet_ids)),
                Timesheet.status == TimesheetStatus.submitted,
            )
            .values(
                status=TimesheetStatus.verified,
                verified_by=actor_id,
                verified_at=datetime.now(),
                review_remarks=notes,
            )
            .execution_options(synchronize_session=False)
        )
        approved = result.rowcount or 0
        await create_audit_entry(
            db,
            action="bulk_approve",
            entity_type="timesheet",
            entity_id="bulk",
            actor_id=actor_id,
            new_values={
                "timesheet_ids": list(timesheet_ids),
                "approved_count": approved,
                "notes": notes,
            },
        )
        return approved

    # ── Period locks ────────────────────────────────────────────────

    @staticmethod
    async def _get_lock(db: AsyncSession, key: str) -> Optional[PayrollPeriodLock]:
        result = await db.execute(
            select(PayrollPeriodLock).where(PayrollPeriodLock.payroll_period == key)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def close_month(
        db: AsyncSession, month: int, year: int, *, actor_id: int,
    ) -> CloseMonthResponse:
        start, end = month_bounds(month, year)
        key = period_key(month, year)

        in_month = (Timesheet.date >= start, Timesheet.date <= end)
        pending_timesheets = (await db.execute(
            select(func.count(Timesheet.id)).where(
                *in_month, Timesheet.status == TimesheetStatus.submitted,
            )
        )).scalar() or 0
        pending_client = (await db.execute(
            select(func.count(Timesheet.id)).where(
                *in_month,
                Timesheet.timesheet_type == TimesheetType.project,
                Timesheet.status.in_(COMPLIANT_TIMESHEET_STATUSES),
                or_(
                    Timesheet.client_timesheet_status.is_(None),
                    Timesheet.client_timesheet_status == ClientValidationStatus.pending_validation,
                ),
            )
        )).scalar() or 0

        lock = await ComplianceService._get_lock(db, key)
        if lock is None:
            lock = PayrollPeriodLock(payroll_period=key)
            db.add(lock)
        lock.lock_status = PeriodLockStatus.locked
        lock.pending_verifications = pending_timesheets
        lock.locked_by = actor_id
        lock.locked_at = datetime.now()
        await db.flush()

        await create_audit_entry(
            db,
            action="close_month",
            entity_type="payroll_period",
            entity_id=key,
            actor_id=actor_id,
            new_values={
                "status": PeriodLockStatus.locked.value,
                "pending_timesheets": pending_timesheets,
                "pending_client_validations": pending_client,
            },
        )
        logger.info("Payroll period %s locked by %s", key, actor_id)
        return CloseMonthResponse(
            message=f"Payroll period {key} locked",
            period=key,
            warnings=CloseMonthWarnings(
                pending_timesheets=pending_timesheets,
                pending_client_validations=pending_client,
            ),
        )

    @staticmethod
    async def reopen_month(
        db: AsyncSession, data: ReopenMonthRequest, *, actor_id: int,
    ) -> PeriodLockResponse:
        if not data.month or not data.year or not (data.reason or "").strip():
            raise BadRequestException("Month, year and reason are required.")

        key = period_key(data.month, data.year)
        lock = await ComplianceService._get_lock(db, key)
        if lock is None:
            raise NotFoundException("Payroll period", key)

        old_status = lock.lock_status.value
        lock.lock_status = PeriodLockStatus.open
        lock.reopened_by = actor_id
        lock.reopened_at = datetime.now()
        lock.reopen_reason = data.reason.strip()
        await db.flush()

        await create_audit_entry(
            db,
            action="reopen_month",
            entity_type="payroll_period",
            entity_id=key,
            actor_id=actor_id,
            old_values={"status": old_status},
            new_values={"status": PeriodLockStatus.open.value, "reason": lock.reopen_reason},
        )
        logger.warning("Payroll period %s reopened by %s: %s", key, actor_id, lock.reopen_reason)
        await db.refresh(lock)
        return PeriodLockResponse.model_validate(lock)

    @staticmethod
    async def period_status(db: AsyncSession, month: int, year: int) -> PeriodStatus:
        month_bounds(month, year)
        key = period_key(month, year)
        lock = await ComplianceService._get_lock(db, key)
        if lock is None:
            return PeriodStatus(period=key, is_locked=False, status=PeriodLockStatus.open)
        return PeriodStatus(
            period=key,
            is_locked=lock.is_locked,
            status=lock.lock_status,
            locked_at=lock.locked_at,
            pending_verifications=lock.pending_verifications,
        )

    # ── Monthly report ──────────────────────────────────────────────

    @staticmethod
    async def monthly_report(db: AsyncSession, month: int, year: int) -> MonthlyComplianceReport:
        start, end = month_bounds(month, year)
        employees = await _working_employees(db)
        ids = {e.id for e in employees}
        total = len(employees)

        # Working days are the dates anyone filed a timesheet for
        dates = sorted(set((await db.execute(
            select(Timesheet.date).where(Timesheet.date >= start, Timesheet.date <= end).distinct()
        )).scalars().all()))
        pairs = {(emp, day) for emp, day in await _compliant_pairs(db, start, end) if emp in ids}

        daily = []
        for day in dates:
            count = sum(1 for emp, d in pairs if d == day)
            daily.append(DailyCompliance(
                date=day,
                total_employees=total,
                submitted_employees=count,
                compliance_rate=compliance_rate(count, total),
            ))

        departments = await _department_names(db, (e.department_id for e in employees))
        compliant_emps = {emp for emp, _ in pairs}
        per_dept: dict[str, list[int]] = defaultdict(lambda: [0, 0])
        for e in employees:
            name = departments.get(e.department_id)
            if name is None:
                continue
            per_dept[name][0] += 1
            if e.id in compliant_emps:
                per_dept[name][1] += 1
        dept_rows = sorted(
            (
                DepartmentCompliance(
                    department=name,
                    total_employees=counts[0],
                    compliant_employees=counts[1],
                    compliance_rate=compliance_rate(counts[1], counts[0]),
                )
                for name, counts in per_dept.items()
            ),
            key=lambda r: (-r.compliance_rate, r.department),
        )

        laggards = []
        if dates:
            for e in employees:
                submitted = sum(1 for day in dates if (e.id, day) in pairs)
                rate = compliance_rate(submitted, len(dates))
                if rate >= 100:
                    continue
                laggards.append(EmployeeMonthCompliance(
                    employee_id=e.id,
                    employee_number=e.employee_number,
                    employee_name=e.full_name,
                    department=departments.get(e.department_id),
                    working_days=len(dates),
                    submitted_days=submitted,
                    missing_days=len(dates) - submitted,
                    compliance_rate=rate,
                ))
            laggards.sort(key=lambda r: (-r.missing_days, r.employee_name))

        return MonthlyComplianceReport(
            month=month,
            year=year,
            period=period_key(month, year),
            daily_compliance=daily,
            department_compliance=dept_rows,
            top_non_compliant=laggards[:TOP_NON_COMPLIANT_LIMIT],
        )

"""Payroll service — salary structures, monthly runs, slip maths, lifecycle."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.attendance.models import Attendance
from hrms.common.audit import create_audit_entry
from hrms.common.constants import (
    AttendanceStatus,
    EmploymentStatus,
    PayrollRunStatus,
    PayslipStatus,
)
from hrms.common.exceptions import ConflictError, NotFoundException, ValidationException
from hrms.common.filters import month_bounds
from hrms.config import settings
from hrms.employees.models import Employee
from hrms.payroll.models import PayrollRun, PayrollSlip, SalaryStructure
from hrms.payroll.schemas import (
    PayrollRunDetail,
    PayrollRunResponse,
    PayslipResponse,
    SalaryStructureUpdate,
)

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")
EARNING_COMPONENTS = ("basic", "hra", "conveyance", "special_allowance")
DEDUCTION_COMPONENTS = ("pf", "esi", "professional_tax", "other_deductions")


def _money(value: Any) -> Decimal:
    if not isinstance(value, Decimal):
        value = Decimal(str(value or 0))
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def compute_slip(
    structure: SalaryStructure,
    present_days: int,
    working_days: int,
) -> dict[str, Decimal]:
    """Prorate earnings by ``present_days / working_days``; deductions stay flat."""
    values: dict[str, Decimal] = {}
    for name in EARNING_COMPONENTS:
        monthly = _money(getattr(structure, name))
        values[name] = _money(monthly / working_days * present_days)
    for name in DEDUCTION_COMPONENTS:
        values[name] = _money(getattr(structure, name))

    gross = sum((values[n] for n in EARNING_COMPONENTS), Decimal("0"))
    deductions = sum((values[n] for n in DEDUCTION_COMPONENTS), Decimal("0"))
    values["gross_salary"] = gross
    values["total_deductions"] = deductions
    values["net_salary"] = gross - deductions
    return values


# Allowed run transitions: current -> next
_RUN_TRANSITIONS = {
    "finalize": (PayrollRunStatus.draft, PayrollRunStatus.finalized, PayslipStatus.finalized),
    "mark_paid": (PayrollRunStatus.finalized, PayrollRunStatus.paid, PayslipStatus.paid),
}


class PayrollService:
    """Async payroll operations."""

    # ── Salary structures ───────────────────────────────────────────

    @staticmethod
    async def get_structure(db: AsyncSession, employee_id: int) -> SalaryStructure:
        result = await db.execute(
            select(SalaryStructure).where(SalaryStructure.employee_id == employee_id)
        )
        structure = result.scalars().first()
        if structure is None:
            raise NotFoundException("Salary structure", employee_id)
        return structure

    @staticmethod
    async def upsert_structure(
        db: AsyncSession,
        employee_id: int,
        data: SalaryStructureUpdate,
        *,
        actor_id: int,
    ) -> SalaryStructure:
        if await db.get(Employee, employee_id) is None:
            raise NotFoundException("Employee", employee_id)

        result = await db.execute(
            select(SalaryStructure).where(SalaryStructure.employee_id == employee_id)
        )
        structure = result.scalars().first()
        action = "update"
        if structure is None:
            structure = SalaryStructure(employee_id=employee_id)
            db.add(structure)
            action = "create"

        for name in EARNING_COMPONENTS + DEDUCTION_COMPONENTS:
            setattr(structure, name, _money(getattr(data, name)))
        structure.effective_from = data.effective_from
        await db.flush()

        await create_audit_entry(
            db,
            action=action,
            entity_type="salary_structure",
            entity_id=structure.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        return structure

    # ── Generation ──────────────────────────────────────────────────

    @staticmethod
    async def _present_days(db: AsyncSession, employee_id: int, month: int, year: int) -> int:
        start, end = month_bounds(month, year)
        result = await db.execute(
            select(func.count(Attendance.id)).where(
                Attendance.employee_id == employee_id,
                Attendance.status == AttendanceStatus.present,
                Attendance.attendance_date >= start,
                Attendance.attendance_date <= end,
            )
        )
        return int(result.scalar_one())

    @staticmethod
    async def _get_run(db: AsyncSession, run_id: int) -> PayrollRun:
        run = await db.get(PayrollRun, run_id)
        if run is None:
            raise NotFoundException("Payroll run", run_id)
        return run

    @staticmethod
    async def _refresh_totals(db: AsyncSession, run: PayrollRun) -> None:
        result = await db.execute(
            select(
                func.count(PayrollSlip.id),
                func.coalesce(func.sum(PayrollSlip.gross_salary), 0),
                func.coalesce(func.sum(PayrollSlip.total_deductions), 0),
                func.coalesce(func.sum(PayrollSlip.net_salary), 0),
            ).where(PayrollSlip.payroll_run_id == run.id)
        )
        count, gross, deductions, net = result.one()
        run.total_employees = int(count)
        run.total_gross = _money(gross)
        run.total_deductions = _money(deductions)
        run.total_net = _money(net)

    @staticmethod
    async def generate(
        db: AsyncSession,
        month: int,
        year: int,
        *,
        actor_id: int,
    ) -> tuple[PayrollRun, int]:
        """Create the month's run and a slip per working employee with a structure."""
        existing = await db.execute(
            select(PayrollRun.id).where(PayrollRun.month == month, PayrollRun.year == year)
        )
        if existing.first() is not None:
            raise ConflictError(
                "period",
                f"{year}-{month:02d}",
                detail=f"Payroll for {month:02d}/{year} has already been generated.",
            )

        run = PayrollRun(
            month=month,
            year=year,
            status=PayrollRunStatus.processing,
            generated_by=actor_id,
            generated_at=datetime.now(),
        )
        db.add(run)
        await db.flush()

        working_days = settings.PAYROLL_WORKING_DAYS
        result = await db.execute(
            select(Employee, SalaryStructure)
            .join(SalaryStructure, SalaryStructure.employee_id == Employee.id)
            .where(
                Employee.is_active.is_(True),
                Employee.employment_status == EmploymentStatus.working,
            )
            .order_by(Employee.id)
        )
        processed = 0
        for employee, structure in result.all():
            present = await PayrollService._present_days(db, employee.id, month, year)
            db.add(
                PayrollSlip(
                    payroll_run_id=run.id,
                    employee_id=employee.id,
                    month=month,
                    year=year,
                    working_days=working_days,
                    present_days=present,
                    status=PayslipStatus.generated,
                    **compute_slip(structure, present, working_days),
                )
            )
            processed += 1
        await db.flush()

        await PayrollService._refresh_totals(db, run)
        run.status = PayrollRunStatus.draft
        await db.flush()

        await create_audit_entry(
            db,
            action="generate",
            entity_type="payroll_run",
            entity_id=run.id,
            actor_id=actor_id,
            new_values={"period": f"{year}-{month:02d}", "processed": processed},
        )
        logger.info("Payroll %d-%02d generated: %d slips", year, month, processed)
        return run, processed

    @staticmethod
    async def recalculate(
        db: AsyncSession,
        employee_id: int,
        month: int,
        year: int,
        *,
        actor_id: int,
    ) -> PayrollSlip:
        """Recompute and upsert one employee's slip in the month's open run."""
        structure = await PayrollService.get_structure(db, employee_id)

        result = await db.execute(
            select(PayrollRun).where(PayrollRun.month == month, PayrollRun.year == year)
        )
        run = result.scalars().first()
        if run is None:
            raise NotFoundException("Payroll run", f"{year}-{month:02d}")
        if run.status not in (PayrollRunStatus.processing, PayrollRunStatus.draft):
            raise ValidationException(
                {"status": [f"Cannot recalculate a payroll run in '{run.status.value}' status."]}
            )

        working_days = settings.PAYROLL_WORKING_DAYS
        present = await PayrollService._present_days(db, employee_id, month, year)
        values = compute_slip(structure, present, working_days)

        slip_result = await db.execute(
            select(PayrollSlip).where(
                PayrollSlip.payroll_run_id == run.id,
                PayrollSlip.employee_id == employee_id,
            )
        )
        slip = slip_result.scalars().first()
        if slip is None:
            slip = PayrollSlip(
                payroll_run_id=run.id,
                employee_id=employee_id,
                month=month,
                year=year,
                status=PayslipStatus.generated,
            )
            db.add(slip)
        for name, value in values.items():
            setattr(slip, name, value)
        slip.working_days = working_days
        slip.present_days = present
        await db.flush()

        await PayrollService._refresh_totals(db, run)
        await db.flush()

        await create_audit_entry(
            db,
            action="recalculate",
            entity_type="payroll_slip",
            entity_id=slip.id,
            actor_id=actor_id,
            new_values={"net_salary": str(slip.net_salary), "present_days": present},
        )
        return slip

    # ── Runs ────────────────────────────────────────────────────────

    @staticmethod
    async def list_runs(db: AsyncSession) -> list[PayrollRunResponse]:
        stats = (
            select(
                PayrollSlip.payroll_run_id.label("run_id"),
                func.count(PayrollSlip.id).label("slip_count"),
                func.sum(PayrollSlip.net_salary).label("total_payout"),
            )
            .group_by(PayrollSlip.payroll_run_id)
            .subquery()
        )
        result = await db.execute(
            select(PayrollRun, stats.c.slip_count, stats.c.total_payout)
            .outerjoin(stats, stats.c.run_id == PayrollRun.id)
            .order_by(PayrollRun.year.desc(), PayrollRun.month.desc())
        )
        out = []
        for run, slip_count, total_payout in result.all():
            resp = PayrollRunResponse.model_validate(run)
            resp.slip_count = int(slip_count or 0)
            resp.total_payout = float(total_payout or 0)
            out.append(resp)
        return out

    @staticmethod
    async def _slips(db: AsyncSession, query) -> list[PayslipResponse]:
        result = await db.execute(
            query.add_columns(
                Employee.employee_number, Employee.first_name, Employee.last_name,
            ).join(Employee, Employee.id == PayrollSlip.employee_id)
        )
        out = []
        for slip, number, first, last in result.all():
            resp = PayslipResponse.model_validate(slip)
            resp.employee_number = number
            resp.employee_name = f"{first} {last}"
            out.append(resp)
        return out

    @staticmethod
    async def get_run(db: AsyncSession, run_id: int) -> PayrollRunDetail:
        run = await PayrollService._get_run(db, run_id)
        slips = await PayrollService._slips(
            db,
            select(PayrollSlip)
            .where(PayrollSlip.payroll_run_id == run_id)
            .order_by(PayrollSlip.employee_id),
        )
        detail = PayrollRunDetail.model_validate(run)
        detail.slips = slips
        detail.slip_count = len(slips)
        detail.total_payout = float(sum(Decimal(str(s.net_salary)) for s in slips))
        return detail

    @staticmethod
    async def _transition(
        db: AsyncSession,
        run_id: int,
        action: str,
        *,
        actor_id: int,
    ) -> PayrollRun:
        expected, target, slip_status = _RUN_TRANSITIONS[action]
        run = await PayrollService._get_run(db, run_id)
        if run.status != expected:
            raise ValidationException(
                {
                    "status": [
                        f"Payroll run is '{run.status.value}'; "
                        f"only '{expected.value}' runs can become '{target.value}'."
                    ]
                }
            )

        old = run.status.value
        run.status = target
        now = datetime.now()
        if target == PayrollRunStatus.finalized:
            run.finalized_at = now
        else:
            run.paid_at = now

        slips = (
            await db.execute(select(PayrollSlip).where(PayrollSlip.payroll_run_id == run.id))
        ).scalars().all()
        for slip in slips:
            slip.status = slip_status
        await db.flush()

        await create_audit_entry(
            db,
            action=action,
            entity_type="payroll_run",
            entity_id=run.id,
            actor_id=actor_id,
            old_values={"status": old},
            new_values={"status": target.value},
        )
        logger.info("Payroll run %s: %s -> %s", run.id, old, target.value)
        return run

    @staticmethod
    async def finalize(db: AsyncSession, run_id: int, *, actor_id: int) -> PayrollRun:
        return await PayrollService._transition(db, run_id, "finalize", actor_id=actor_id)

    @staticmethod
    async def mark_paid(db: AsyncSession, run_id: int, *, actor_id: int) -> PayrollRun:
        return await PayrollService._transition(db, run_id, "mark_paid", actor_id=actor_id)

    # ── Payslips ────────────────────────────────────────────────────

    @staticmethod
    async def my_payslips(db: AsyncSession, employee_id: int) -> Sequence[PayrollSlip]:
        result = await db.execute(
            select(PayrollSlip)
            .where(PayrollSlip.employee_id == employee_id)
            .order_by(PayrollSlip.year.desc(), PayrollSlip.month.desc())
        )
        return result.scalars().all()

    @staticmethod
    async def get_payslip(db: AsyncSession, slip_id: int) -> PayrollSlip:
        slip = await db.get(PayrollSlip, slip_id)
        if slip is None:
            raise NotFoundException("Payslip", slip_id)
        return slip

    @staticmethod
    async def all_payslips(
        db: AsyncSession,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> list[PayslipResponse]:
        query = select(PayrollSlip).order_by(
            PayrollSlip.year.desc(), PayrollSlip.month.desc(), PayrollSlip.employee_id,
        )
        if month is not None:
            query = query.where(PayrollSlip.month == month)
        if year is not None:
            query = query.where(PayrollSlip.year == year)
        return await PayrollService._slips(db, query)

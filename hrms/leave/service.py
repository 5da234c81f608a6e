"""Leave service — types, plans, balances, applications, approvals, WFH requests."""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Sequence

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.dependencies import is_hr
from hrms.common.audit import create_audit_entry
from hrms.common.constants import WFH_LEAVE_CODES, EmploymentStatus, LeaveStatus
from hrms.common.exceptions import (
    BadRequestException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from hrms.employees.models import Employee
from hrms.leave.models import (
    Leave,
    LeaveBalance,
    LeavePlan,
    LeavePlanAllocation,
    LeaveType,
)
from hrms.leave.schemas import (
    LeaveApply,
    LeaveBalanceResponse,
    LeavePlanCreate,
    LeavePlanUpdate,
    LeaveResponse,
    LeaveTypeCreate,
    LeaveTypeUpdate,
)
from hrms.notifications.service import (
    notify_leave_approved,
    notify_leave_rejected,
    notify_leave_request,
)

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


def _dec(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def prorated_allocation(days_allocated: Any, joining: Optional[date], year: int) -> Decimal:
    """Scale *days_allocated* by the share of *year* left after joining.

    Both spans run to Dec 31; the result is rounded half-up to whole days.
    """
    days = _dec(days_allocated)
    year_start, year_end = date(year, 1, 1), date(year, 12, 31)
    if joining is None or joining <= year_start:
        return days
    days_in_year = (year_end - year_start).days
    remaining = max((year_end - joining).days, 0)
    scaled = days * remaining / days_in_year
    return scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


class LeaveService:
    """Business logic for the leave module."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _get_leave(db: AsyncSession, leave_id: int) -> Leave:
        leave = await db.get(Leave, leave_id)
        if leave is None:
            raise NotFoundException("Leave", leave_id)
        return leave

    @staticmethod
    async def _get_balance(
        db: AsyncSession,
        employee_id: int,
        leave_type_id: int,
        year: int,
    ) -> Optional[LeaveBalance]:
        result = await db.execute(
            select(LeaveBalance).where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.leave_type_id == leave_type_id,
                LeaveBalance.leave_year == year,
            )
        )
        return result.scalars().first()

    @staticmethod
    async def _build_responses(db: AsyncSession, query) -> list[LeaveResponse]:
        """Run a ``select(Leave)`` query and enrich rows with names."""
        enriched = (
            query.add_columns(Employee.first_name, Employee.last_name, LeaveType.name)
            .join(Employee, Employee.id == Leave.employee_id)
            .outerjoin(LeaveType, LeaveType.id == Leave.leave_type_id)
        )
        rows = (await db.execute(enriched)).all()
        out: list[LeaveResponse] = []
        for leave, first, last, type_name in rows:
            resp = LeaveResponse.model_validate(leave)
            resp.employee_name = f"{first} {last}".strip()
            resp.leave_type_name = type_name or leave.leave_type
            out.append(resp)
        return out

    # ─────────────────────────────────────────────────────────────────
    # Leave types
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_types(
        db: AsyncSession,
        *,
        include_inactive: bool = False,
    ) -> Sequence[LeaveType]:
        query = select(LeaveType).order_by(LeaveType.name)
        if not include_inactive:
            query = query.where(LeaveType.is_active.is_(True))
        return (await db.execute(query)).scalars().all()

    @staticmethod
    async def get_type(db: AsyncSession, type_id: int) -> LeaveType:
        leave_type = await db.get(LeaveType, type_id)
        if leave_type is None:
            raise NotFoundException("LeaveType", type_id)
        return leave_type

    @staticmethod
    async def create_type(db: AsyncSession, data: LeaveTypeCreate) -> LeaveType:
        existing = await db.execute(select(LeaveType.id).where(LeaveType.code == data.code))
        if existing.first() is not None:
            raise ConflictError("code", data.code)
        values = data.model_dump()
        values["days_allowed"] = _dec(values["days_allowed"])
        values["max_carry_forward_days"] = _dec(values["max_carry_forward_days"])
        leave_type = LeaveType(**values)
        db.add(leave_type)
        await db.flush()
        return leave_type

    @staticmethod
    async def update_type(db: AsyncSession, type_id: int, data: LeaveTypeUpdate) -> LeaveType:
        leave_type = await LeaveService.get_type(db, type_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if field in ("days_allowed", "max_carry_forward_days") and value is not None:
                value = _dec(value)
            setattr(leave_type, field, value)
        await db.flush()
        return leave_type

    @staticmethod
    async def delete_type(db: AsyncSession, type_id: int) -> None:
        """Soft delete: the type stays referenced by balances and history."""
        leave_type = await LeaveService.get_type(db, type_id)
        leave_type.is_active = False
        await db.flush()

    # ─────────────────────────────────────────────────────────────────
    # Leave plans
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_plans(db: AsyncSession) -> Sequence[LeavePlan]:
        result = await db.execute(select(LeavePlan).order_by(LeavePlan.name))
        return result.scalars().all()

    @staticmethod
    async def get_plan(db: AsyncSession, plan_id: int) -> LeavePlan:
        result = await db.execute(select(LeavePlan).where(LeavePlan.id == plan_id))
        plan = result.scalars().first()
        if plan is None:
            raise NotFoundException("LeavePlan", plan_id)
        return plan

    @staticmethod
    async def _check_leave_types(db: AsyncSession, type_ids: list[int]) -> None:
        if not type_ids:
            return
        found = set(
            (await db.execute(select(LeaveType.id).where(LeaveType.id.in_(type_ids))))
            .scalars()
            .all()
        )
        missing = sorted(set(type_ids) - found)
        if missing:
            raise ValidationException(
                {"allocations": [f"Unknown leave type id(s): {missing}"]}
            )

    @staticmethod
    async def create_plan(
        db: AsyncSession,
        data: LeavePlanCreate,
        *,
        actor_id: Optional[int] = None,
    ) -> LeavePlan:
        existing = await db.execute(select(LeavePlan.id).where(LeavePlan.name == data.name))
        if existing.first() is not None:
            raise ConflictError("name", data.name)
        await LeaveService._check_leave_types(db, [a.leave_type_id for a in data.allocations])

        plan = LeavePlan(
            name=data.name,
            description=data.description,
            leave_year_start_month=data.leave_year_start_month,
            is_active=data.is_active,
            allocations=[
                LeavePlanAllocation(
                    leave_type_id=a.leave_type_id,
                    days_allocated=_dec(a.days_allocated),
                    prorate_on_joining=a.prorate_on_joining,
                )
                for a in data.allocations
            ],
        )
        db.add(plan)
        await db.flush()
        await create_audit_entry(
            db,
            action="create",
            entity_type="leave_plan",
            entity_id=plan.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        return plan

    @staticmethod
    async def update_plan(
        db: AsyncSession,
        plan_id: int,
        data: LeavePlanUpdate,
        *,
        actor_id: Optional[int] = None,
    ) -> LeavePlan:
        """Update plan fields; a given ``allocations`` list replaces the old one."""
        plan = await LeaveService.get_plan(db, plan_id)
        changes = data.model_dump(exclude_unset=True, exclude={"allocations"})

        if "name" in changes and changes["name"] != plan.name:
            clash = await db.execute(
                select(LeavePlan.id).where(
                    LeavePlan.name == changes["name"], LeavePlan.id != plan.id,
                )
            )
            if clash.first() is not None:
                raise ConflictError("name", changes["name"])

        for field, value in changes.items():
            setattr(plan, field, value)

        if data.allocations is not None:
            await LeaveService._check_leave_types(
                db, [a.leave_type_id for a in data.allocations],
            )
            plan.allocations.clear()
            await db.flush()
            plan.allocations.extend(
                LeavePlanAllocation(
                    leave_type_id=a.leave_type_id,
                    days_allocated=_dec(a.days_allocated),
                    prorate_on_joining=a.prorate_on_joining,
                )
                for a in data.allocations
            )

        await db.flush()
        await create_audit_entry(
            db,
            action="update",
            entity_type="leave_plan",
            entity_id=plan.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json", exclude_unset=True),
        )
        return plan

    # ─────────────────────────────────────────────────────────────────
    # Balances
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def initialize_balances(
        db: AsyncSession,
        employee_id: int,
        year: Optional[int] = None,
    ) -> dict:
        """Create the year's balances from the employee's leave plan.

        Existing rows are left untouched.
        """
        year = year or date.today().year
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", employee_id)
        if not employee.leave_plan_id:
            raise BadRequestException("Employee has no leave plan assigned")

        plan = await LeaveService.get_plan(db, employee.leave_plan_id)

        created = skipped = 0
        for allocation in plan.allocations:
            existing = await LeaveService._get_balance(
                db, employee.id, allocation.leave_type_id, year,
            )
            if existing is not None:
                skipped += 1
                continue

            allocated = (
                prorated_allocation(allocation.days_allocated, employee.date_of_joining, year)
                if allocation.prorate_on_joining
                else _dec(allocation.days_allocated)
            )
            db.add(
                LeaveBalance(
                    employee_id=employee.id,
                    leave_type_id=allocation.leave_type_id,
                    leave_year=year,
                    allocated_days=allocated,
                    used_days=_ZERO,
                    carry_forward_days=_ZERO,
                    available_days=allocated,
                )
            )
            created += 1

        await db.flush()
        logger.info(
            "Leave balances for employee %s (%s): %d created, %d skipped",
            employee.id, year, created, skipped,
        )
        return {"year": year, "created": created, "skipped": skipped}

    @staticmethod
    async def initialize_all(db: AsyncSession, year: Optional[int] = None) -> dict:
        year = year or date.today().year
        result = await db.execute(
            select(Employee.id).where(
                Employee.is_active.is_(True),
                Employee.employment_status == EmploymentStatus.working,
                Employee.leave_plan_id.is_not(None),
            )
        )
        employee_ids = result.scalars().all()

        created = skipped = 0
        for employee_id in employee_ids:
            outcome = await LeaveService.initialize_balances(db, employee_id, year)
            created += outcome["created"]
            skipped += outcome["skipped"]

        return {
            "year": year,
            "employees_processed": len(employee_ids),
            "balances_created": created,
            "balances_skipped": skipped,
        }

    @staticmethod
    async def get_balances(
        db: AsyncSession,
        employee_id: int,
        year: Optional[int] = None,
    ) -> list[LeaveBalanceResponse]:
        year = year or date.today().year
        result = await db.execute(
            select(LeaveBalance, LeaveType.name, LeaveType.code, LeaveType.is_paid)
            .join(LeaveType, LeaveType.id == LeaveBalance.leave_type_id)
            .where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.leave_year == year,
            )
            .order_by(LeaveType.name)
        )
        out = []
        for balance, name, code, is_paid in result.all():
            resp = LeaveBalanceResponse.model_validate(balance)
            resp.leave_type_name, resp.leave_type_code, resp.is_paid = name, code, is_paid
            out.append(resp)
        return out

    @staticmethod
    async def carry_forward(
        db: AsyncSession,
        employee_id: int,
        from_year: int,
        to_year: int,
        *,
        actor_id: Optional[int] = None,
    ) -> dict:
        """Move unused days of carry-forward types into *to_year* (capped)."""
        result = await db.execute(
            select(LeaveBalance, LeaveType)
            .join(LeaveType, LeaveType.id == LeaveBalance.leave_type_id)
            .where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.leave_year == from_year,
                LeaveType.can_carry_forward.is_(True),
            )
        )
        rows = result.all()
        if not rows:
            raise NotFoundException("LeaveBalance", f"{employee_id}/{from_year}")

        carried: list[dict] = []
        for balance, leave_type in rows:
            cf = min(_dec(balance.available_days), _dec(leave_type.max_carry_forward_days))
            cf = max(cf, _ZERO)

            target = await LeaveService._get_balance(db, employee_id, leave_type.id, to_year)
            if target is None:
                allocated = _dec(balance.allocated_days)
                target = LeaveBalance(
                    employee_id=employee_id,
                    leave_type_id=leave_type.id,
                    leave_year=to_year,
                    allocated_days=allocated,
                    used_days=_ZERO,
                )
                db.add(target)
            else:
                allocated = _dec(target.allocated_days)

            target.carry_forward_days = cf
            target.available_days = allocated + cf
            carried.append(
                {"leave_type_id": leave_type.id, "leave_type": leave_type.name, "carried": float(cf)}
            )

        await db.flush()
        await create_audit_entry(
            db,
            action="carry_forward",
            entity_type="leave_balance",
            entity_id=f"{employee_id}:{from_year}->{to_year}",
            actor_id=actor_id,
            new_values={"carried": carried},
        )
        logger.info("Carried forward leave for employee %s: %s -> %s", employee_id, from_year, to_year)
        return {"employee_id": employee_id, "from_year": from_year, "to_year": to_year, "carried": carried}

    # ─────────────────────────────────────────────────────────────────
    # Applications
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def apply_leave(
        db: AsyncSession,
        employee: Employee,
        data: LeaveApply,
    ) -> Leave:
        """Apply for leave against the balance of the start date's year."""

        if data.end_date < data.start_date:
            raise ValidationException({"end_date": ["End date cannot be before start date."]})

        leave_type = await LeaveService.get_type(db, data.leave_type_id)

        requested = (
            _dec(data.total_days)
            if data.total_days
            else Decimal((data.end_date - data.start_date).days + 1)
        )

        year = data.start_date.year
        balance = await LeaveService._get_balance(db, employee.id, leave_type.id, year)
        if balance is None:
            raise BadRequestException("No leave balance found for this leave type")
        if _dec(balance.available_days) < requested:
            logger.warning(
                "Leave rejected for employee %s: requested %s, available %s",
                employee.id, requested, balance.available_days,
            )
            raise BadRequestException("Insufficient leave balance")

        leave = Leave(
            employee_id=employee.id,
            leave_type_id=leave_type.id,
            leave_type=leave_type.code,
            start_date=data.start_date,
            end_date=data.end_date,
            total_days=requested,
            reason=data.reason,
            status=LeaveStatus.pending,
            applied_at=datetime.now(),
        )
        db.add(leave)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="leave",
            entity_id=leave.id,
            actor_id=employee.id,
            new_values={
                "leave_type": leave_type.code,
                "start_date": data.start_date.isoformat(),
                "end_date": data.end_date.isoformat(),
                "total_days": str(requested),
            },
        )

        if employee.reporting_manager_id:
            await notify_leave_request(
                db, leave, employee.reporting_manager_id, employee.full_name,
            )
        return leave

    @staticmethod
    def _check_approver(approver: Employee, requester: Employee) -> None:
        if is_hr(approver) or requester.reporting_manager_id == approver.id:
            return
        raise ForbiddenException("You can only approve leaves for your direct reports")

    @staticmethod
    async def approve_leave(db: AsyncSession, leave_id: int, approver: Employee) -> Leave:
        """Approve a pending leave; moves the days from available to used."""
        leave = await LeaveService._get_leave(db, leave_id)
        requester = await db.get(Employee, leave.employee_id)
        LeaveService._check_approver(approver, requester)

        if leave.status != LeaveStatus.pending:
            raise ValidationException(
                {"status": [f"Leave request is already {leave.status.value}."]}
            )

        leave.status = LeaveStatus.approved
        leave.approved_by = approver.id
        leave.approved_at = datetime.now()

        if leave.leave_type_id is not None:
            balance = await LeaveService._get_balance(
                db, leave.employee_id, leave.leave_type_id, leave.start_date.year,
            )
            if balance is not None:
                days = _dec(leave.total_days)
                balance.used_days = _dec(balance.used_days) + days
                balance.available_days = _dec(balance.available_days) - days

        await db.flush()
        await create_audit_entry(
            db,
            action="approve",
            entity_type="leave",
            entity_id=leave.id,
            actor_id=approver.id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={"status": LeaveStatus.approved.value},
        )
        await notify_leave_approved(db, leave)
        logger.info("Leave %s approved by %s", leave.id, approver.id)
        return leave

    @staticmethod
    async def reject_leave(
        db: AsyncSession,
        leave_id: int,
        approver: Employee,
        reason: Optional[str],
    ) -> Leave:
        leave = await LeaveService._get_leave(db, leave_id)
        requester = await db.get(Employee, leave.employee_id)
        LeaveService._check_approver(approver, requester)

        if leave.status != LeaveStatus.pending:
            raise ValidationException(
                {"status": [f"Leave request is already {leave.status.value}."]}
            )

        leave.status = LeaveStatus.rejected
        leave.approved_by = approver.id
        leave.approved_at = datetime.now()
        leave.rejection_reason = reason
        await db.flush()

        await create_audit_entry(
            db,
            action="reject",
            entity_type="leave",
            entity_id=leave.id,
            actor_id=approver.id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={"status": LeaveStatus.rejected.value, "reason": reason},
        )
        await notify_leave_rejected(db, leave, reason)
        logger.info("Leave %s rejected by %s", leave.id, approver.id)
        return leave

    @staticmethod
    async def cancel_leave(db: AsyncSession, leave_id: int, employee: Employee) -> Leave:
        """Owner cancels a pending or approved leave; approved days are restored."""
        leave = await LeaveService._get_leave(db, leave_id)
        if leave.employee_id != employee.id:
            raise ForbiddenException("You can only cancel your own leave requests.")
        if leave.status not in (LeaveStatus.pending, LeaveStatus.approved):
            raise ValidationException(
                {"status": [f"A {leave.status.value} leave cannot be cancelled."]}
            )

        was_approved = leave.status == LeaveStatus.approved
        old_status = leave.status.value
        leave.status = LeaveStatus.cancelled

        if was_approved and leave.leave_type_id is not None:
            balance = await LeaveService._get_balance(
                db, leave.employee_id, leave.leave_type_id, leave.start_date.year,
            )
            if balance is not None:
                days = _dec(leave.total_days)
                balance.used_days = max(_ZERO, _dec(balance.used_days) - days)
                balance.available_days = _dec(balance.available_days) + days

        await db.flush()
        await create_audit_entry(
            db,
            action="cancel",
            entity_type="leave",
            entity_id=leave.id,
            actor_id=employee.id,
            old_values={"status": old_status},
            new_values={"status": LeaveStatus.cancelled.value},
        )
        return leave

    # ─────────────────────────────────────────────────────────────────
    # Listing
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def my_leaves(
        db: AsyncSession,
        employee_id: int,
        *,
        status: Optional[LeaveStatus] = None,
    ) -> list[LeaveResponse]:
        query = (
            select(Leave)
            .where(Leave.employee_id == employee_id)
            .order_by(Leave.applied_at.desc(), Leave.id.desc())
        )
        if status is not None:
            query = query.where(Leave.status == status)
        return await LeaveService._build_responses(db, query)

    @staticmethod
    async def pending_leaves(db: AsyncSession, approver: Employee) -> list[LeaveResponse]:
        """HR sees every pending leave; managers only their direct reports'."""
        query = (
            select(Leave)
            .where(Leave.status == LeaveStatus.pending)
            .order_by(Leave.applied_at.asc(), Leave.id.asc())
        )
        if not is_hr(approver):
            query = query.where(
                Leave.employee_id.in_(
                    select(Employee.id).where(Employee.reporting_manager_id == approver.id)
                )
            )
        return await LeaveService._build_responses(db, query)

    # ─────────────────────────────────────────────────────────────────
    # WFH / Remote requests
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def request_wfh(
        db: AsyncSession,
        employee: Employee,
        on_date: date,
        work_mode: str,
        reason: Optional[str] = None,
    ) -> Leave:
        """Record a one-day WFH/Remote request. No balance is consumed."""
        if work_mode not in WFH_LEAVE_CODES:
            raise BadRequestException("Invalid work mode. Use: WFH or Remote")

        existing = await db.execute(
            select(Leave.id).where(
                Leave.employee_id == employee.id,
                Leave.start_date == on_date,
                Leave.leave_type.in_(WFH_LEAVE_CODES),
            )
        )
        if existing.first() is not None:
            raise BadRequestException("WFH/Remote request already exists for this date")

        leave = Leave(
            employee_id=employee.id,
            leave_type=work_mode,
            start_date=on_date,
            end_date=on_date,
            total_days=Decimal("1"),
            reason=reason or f"{work_mode} request",
            status=LeaveStatus.pending,
            applied_at=datetime.now(),
        )
        db.add(leave)
        await db.flush()

        if employee.reporting_manager_id:
            await notify_leave_request(
                db, leave, employee.reporting_manager_id, employee.full_name,
            )
        return leave

    @staticmethod
    async def wfh_requests(
        db: AsyncSession,
        *,
        employee_id: Optional[int] = None,
        pending_only: bool = False,
    ) -> list[LeaveResponse]:
        conditions = [Leave.leave_type.in_(WFH_LEAVE_CODES), Leave.leave_type_id.is_(None)]
        if employee_id is not None:
            conditions.append(Leave.employee_id == employee_id)
        if pending_only:
            conditions.append(Leave.status == LeaveStatus.pending)
        query = select(Leave).where(and_(*conditions)).order_by(Leave.applied_at.desc())
        return await LeaveService._build_responses(db, query)

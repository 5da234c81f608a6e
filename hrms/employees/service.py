"""Employee directory: listing, lookups, HR writes and the reporting tree."""

from __future__ import annotations

import enum
import logging
from typing import Any, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.models import UserSession
from hrms.auth.service import hash_password
from hrms.common.audit import create_audit_entry
from hrms.common.exceptions import ConflictError, NotFoundException
from hrms.common.filters import apply_filters, apply_search
from hrms.common.pagination import PaginatedResponse, PaginationParams, paginate
from hrms.employees.models import Employee
from hrms.employees.schemas import (
    EmployeeBrief,
    EmployeeCreate,
    EmployeeDetail,
    EmployeeUpdate,
    ProfileUpdate,
)
from hrms.leave.models import LeavePlan
from hrms.master_data.models import MasterDataItem

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = ("first_name", "last_name", "email", "employee_number")


def _plain(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value.value if isinstance(value, enum.Enum) else value)


def _reports_of(manager_id: int, *columns: Any) -> Select:
    """Active employees whose reporting manager is *manager_id*."""
    return select(*(columns or (Employee,))).where(
        Employee.reporting_manager_id == manager_id,
        Employee.is_active.is_(True),
    )


class EmployeeService:

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        pagination: PaginationParams,
        *,
        search: Optional[str] = None,
        department_id: Optional[int] = None,
        employment_status: Optional[str] = None,
        is_active: Optional[bool] = None,
        reporting_manager_id: Optional[int] = None,
        schema: Optional[type[BaseModel]] = None,
    ) -> PaginatedResponse:
        filters = {
            "department_id": department_id,
            "employment_status": employment_status,
            "is_active": is_active,
            "reporting_manager_id": reporting_manager_id,
        }
        query = apply_filters(
            select(Employee).order_by(Employee.first_name, Employee.last_name), Employee, filters,
        )
        query = apply_search(query, Employee, search, SEARCH_COLUMNS)
        return await paginate(db, query, pagination, model=Employee, schema=schema)

    @staticmethod
    async def get_employee(db: AsyncSession, employee_id: int) -> Employee:
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", employee_id)
        return employee

    @staticmethod
    async def get_employee_detail(db: AsyncSession, employee_id: int) -> EmployeeDetail:
        """Resolve department/designation/location/leave-plan names, the
        manager reference and the active direct-report count."""
        employee = await EmployeeService.get_employee(db, employee_id)

        refs = {
            "department_name": employee.department_id,
            "designation_name": employee.designation_id,
            "location_name": employee.location_id,
        }
        ids = {v for v in refs.values() if v is not None}
        names: dict[int, str] = {}
        if ids:
            rows = await db.execute(
                select(MasterDataItem.id, MasterDataItem.name).where(MasterDataItem.id.in_(ids)),
            )
            names = dict(rows.tuples().all())

        extra: dict[str, Any] = {key: names.get(ref) for key, ref in refs.items()}
        if employee.leave_plan_id is not None:
            plan = await db.get(LeavePlan, employee.leave_plan_id)
            extra["leave_plan_name"] = plan.name if plan else None
        if employee.reporting_manager_id is not None:
            manager = await db.get(Employee, employee.reporting_manager_id)
            if manager is not None:
                extra["reporting_manager"] = EmployeeBrief.model_validate(manager)
        extra["direct_reports_count"] = await db.scalar(
            _reports_of(employee.id, func.count(Employee.id)),
        ) or 0

        return EmployeeDetail.model_validate(employee).model_copy(update=extra)

    @staticmethod
    async def _ensure_unique(
        db: AsyncSession,
        *,
        email: Optional[str] = None,
        employee_number: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> None:
        """Raise ``ConflictError`` when another employee already holds the value."""
        for field, value in (("email", email), ("employee_number", employee_number)):
            if value is None:
                continue
            taken = select(Employee.id).where(getattr(Employee, field) == value)
            if exclude_id is not None:
                taken = taken.where(Employee.id != exclude_id)
            if await db.scalar(taken.limit(1)) is not None:
                raise ConflictError(field, value)

    @staticmethod
    async def create_employee(
        db: AsyncSession,
        data: EmployeeCreate,
        *,
        actor_id: Optional[int] = None,
    ) -> Employee:
        await EmployeeService._ensure_unique(
            db, email=data.email, employee_number=data.employee_number,
        )
        employee = Employee(**data.model_dump(exclude={"password"}))
        if data.password:
            employee.password_hash = hash_password(data.password)
        db.add(employee)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="employee",
            entity_id=employee.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json", exclude={"password"}),
        )
        logger.info("Created employee %s (%s)", employee.id, employee.employee_number)
        return employee

    @staticmethod
    async def update_employee(
        db: AsyncSession,
        employee_id: int,
        data: EmployeeUpdate | ProfileUpdate,
        *,
        actor_id: Optional[int] = None,
    ) -> Employee:
        """Apply only the fields present in *data*; a no-op body writes nothing."""
        employee = await EmployeeService.get_employee(db, employee_id)
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return employee
        if "email" in changes:
            await EmployeeService._ensure_unique(db, email=changes["email"], exclude_id=employee.id)

        before = {field: _plain(getattr(employee, field, None)) for field in changes}
        for field, value in changes.items():
            setattr(employee, field, value)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="employee",
            entity_id=employee.id,
            actor_id=actor_id,
            old_values=before,
            new_values=data.model_dump(mode="json", exclude_unset=True),
        )
        return employee

    @staticmethod
    async def deactivate_employee(
        db: AsyncSession,
        employee_id: int,
        *,
        actor_id: Optional[int] = None,
    ) -> Employee:
        """Mark inactive and revoke every open session so tokens stop working at once."""
        employee = await EmployeeService.get_employee(db, employee_id)
        employee.is_active = False
        await db.execute(
            update(UserSession)
            .where(UserSession.employee_id == employee.id, UserSession.is_revoked.is_(False))
            .values(is_revoked=True)
        )
        await db.flush()

        await create_audit_entry(
            db,
            action="deactivate",
            entity_type="employee",
            entity_id=employee.id,
            actor_id=actor_id,
            old_values={"is_active": True},
            new_values={"is_active": False},
        )
        logger.info("Employee %s deactivated by %s", employee.id, actor_id)
        return employee

    @staticmethod
    async def get_direct_reports(db: AsyncSession, manager_id: int) -> Sequence[Employee]:
        rows = await db.scalars(
            _reports_of(manager_id).order_by(Employee.first_name, Employee.last_name),
        )
        return rows.all()

    @staticmethod
    async def get_direct_report_ids(db: AsyncSession, manager_id: int) -> list[int]:
        return list((await db.scalars(_reports_of(manager_id, Employee.id))).all())

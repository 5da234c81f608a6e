"""Asset service — catalogue CRUD, allocation lifecycle and reports."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from hrms.assets.models import Asset, AssetAllocation
from hrms.assets.schemas import (
    AllocateRequest,
    AllocationResponse,
    AllocationStatusUpdate,
    AssetCreate,
    AssetDetail,
    AssetReport,
    AssetResponse,
    AssetTypeCount,
    AssetUpdate,
    DepartmentAllocationCount,
    OverdueReturn,
    ReturnRequest,
)
from hrms.common.audit import create_audit_entry
from hrms.common.constants import AllocationStatus, AssetCondition, AssetStatus
from hrms.common.exceptions import ConflictError, NotFoundException, ValidationException
from hrms.common.filters import apply_search
from hrms.employees.models import Employee
from hrms.master_data.models import MasterDataItem

logger = logging.getLogger(__name__)

# Asset status implied by an allocation's final state
_ASSET_STATUS_FOR = {
    AllocationStatus.active: AssetStatus.allocated,
    AllocationStatus.returned: AssetStatus.available,
    AllocationStatus.lost: AssetStatus.retired,
    AllocationStatus.damaged: AssetStatus.under_maintenance,
}


def _allocation_query():
    return (
        select(
            AssetAllocation,
            Asset.asset_code,
            Asset.asset_name,
            Asset.asset_type,
            Employee.first_name,
            Employee.last_name,
            Employee.employee_number,
        )
        .join(Asset, Asset.id == AssetAllocation.asset_id)
        .join(Employee, Employee.id == AssetAllocation.employee_id)
    )


def _allocation_rows(rows, schema=AllocationResponse, **extra) -> list:
    out = []
    for alloc, code, name, kind, first, last, number, *rest in rows:
        resp = schema.model_validate(
            {
                **AllocationResponse.model_validate(alloc).model_dump(),
                "asset_code": code,
                "asset_name": name,
                "asset_type": kind,
                "employee_name": f"{first} {last}",
                "employee_number": number,
                **{key: fn(alloc, *rest) for key, fn in extra.items()},
            }
        )
        out.append(resp)
    return out


class AssetService:

    @staticmethod
    async def _get_asset(db: AsyncSession, asset_id: int) -> Asset:
        asset = await db.get(Asset, asset_id)
        if asset is None:
            raise NotFoundException("Asset", asset_id)
        return asset

    @staticmethod
    async def _get_allocation(db: AsyncSession, allocation_id: int) -> AssetAllocation:
        allocation = await db.get(AssetAllocation, allocation_id)
        if allocation is None:
            raise NotFoundException("Asset allocation", allocation_id)
        return allocation

    @staticmethod
    async def _active_allocation(
        db: AsyncSession, asset_id: int,
    ) -> Optional[AssetAllocation]:
        result = await db.execute(
            select(AssetAllocation).where(
                AssetAllocation.asset_id == asset_id,
                AssetAllocation.status == AllocationStatus.active,
            )
        )
        return result.scalars().first()

    # ── Catalogue ───────────────────────────────────────────────────

    @staticmethod
    async def list_assets(
        db: AsyncSession,
        *,
        status: Optional[AssetStatus] = None,
        asset_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[AssetResponse]:
        holder = aliased(Employee)
        query = (
            select(Asset, AssetAllocation.employee_id, holder.first_name, holder.last_name)
            .outerjoin(
                AssetAllocation,
                (AssetAllocation.asset_id == Asset.id)
                & (AssetAllocation.status == AllocationStatus.active),
            )
            .outerjoin(holder, holder.id == AssetAllocation.employee_id)
            .order_by(Asset.asset_code)
        )
        if status is not None:
            query = query.where(Asset.status == status)
        if asset_type:
            query = query.where(Asset.asset_type == asset_type)
        query = apply_search(
            query, Asset, search, ["asset_code", "asset_name", "serial_number", "brand"],
        )

        out = []
        for asset, holder_id, first, last in (await db.execute(query)).all():
            resp = AssetResponse.model_validate(asset)
            if holder_id is not None:
                resp.allocated_to = holder_id
                resp.allocated_to_name = f"{first} {last}"
            out.append(resp)
        return out

    @staticmethod
    async def get_asset(db: AsyncSession, asset_id: int) -> AssetDetail:
        asset = await AssetService._get_asset(db, asset_id)
        detail = AssetDetail.model_validate(asset)
        rows = (await db.execute(
            _allocation_query().where(
                AssetAllocation.asset_id == asset_id,
                AssetAllocation.status == AllocationStatus.active,
            )
        )).all()
        if rows:
            current = _allocation_rows(rows)[0]
            detail.current_allocation = current
            detail.allocated_to = current.employee_id
            detail.allocated_to_name = current.employee_name
        return detail

    @staticmethod
    async def create_asset(
        db: AsyncSession, data: AssetCreate, *, actor_id: int,
    ) -> Asset:
        existing = await db.execute(select(Asset.id).where(Asset.asset_code == data.asset_code))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("asset_code", data.asset_code)

        values = data.model_dump()
        if values.get("purchase_cost") is not None:
            values["purchase_cost"] = Decimal(str(values["purchase_cost"]))
        asset = Asset(**values, created_by=actor_id)
        db.add(asset)
        await db.flush()
        await create_audit_entry(
            db,
            action="create",
            entity_type="asset",
            entity_id=asset.id,
            actor_id=actor_id,
            new_values={"asset_code": asset.asset_code, "asset_name": asset.asset_name},
        )
        await db.refresh(asset)
        logger.info("Asset %s created by %s", asset.asset_code, actor_id)
        return asset

    @staticmethod
    async def update_asset(
        db: AsyncSession, asset_id: int, data: AssetUpdate, *, actor_id: int,
    ) -> Asset:
        asset = await AssetService._get_asset(db, asset_id)
        changes = data.model_dump(exclude_unset=True)
        if "purchase_cost" in changes and changes["purchase_cost"] is not None:
            changes["purchase_cost"] = Decimal(str(changes["purchase_cost"]))
        if "status" in changes and changes["status"] != asset.status:
            active = await AssetService._active_allocation(db, asset_id)
            if active is not None:
                raise ValidationException(
                    {"status": ["Return the asset before changing its status."]}
                )

        old = {k: str(getattr(asset, k)) for k in changes}
        for key, value in changes.items():
            setattr(asset, key, value)
        await db.flush()
        await create_audit_entry(
            db,
            action="update",
            entity_type="asset",
            entity_id=asset.id,
            actor_id=actor_id,
            old_values=old,
            new_values={k: str(v) for k, v in changes.items()},
        )
        await db.refresh(asset)
        return asset

    @staticmethod
    async def delete_asset(db: AsyncSession, asset_id: int, *, actor_id: int) -> None:
        asset = await AssetService._get_asset(db, asset_id)
        if asset.status == AssetStatus.allocated:
            raise ValidationException(
                {"status": ["Cannot delete an allocated asset. Return it first."]}
            )
        await create_audit_entry(
            db,
            action="delete",
            entity_type="asset",
            entity_id=asset.id,
            actor_id=actor_id,
            old_values={"asset_code": asset.asset_code},
        )
        await db.delete(asset)
        await db.flush()

    # ── Allocation lifecycle ────────────────────────────────────────

    @staticmethod
    async def allocate(
        db: AsyncSession, data: AllocateRequest, *, actor_id: int,
    ) -> AssetAllocation:
        asset = await AssetService._get_asset(db, data.asset_id)
        if await db.get(Employee, data.employee_id) is None:
            raise NotFoundException("Employee", data.employee_id)
        if asset.status == AssetStatus.allocated:
            raise ConflictError(
                "asset_id", data.asset_id, detail="Asset is already allocated to an employee.",
            )
        if asset.status != AssetStatus.available:
            raise ValidationException(
                {"asset_id": [f"Asset is not available (status: {asset.status.value})."]}
            )

        allocation = AssetAllocation(
            asset_id=asset.id,
            employee_id=data.employee_id,
            allocated_date=data.allocated_date,
            expected_return_date=data.expected_return_date,
            condition_at_allocation=data.condition_at_allocation,
            allocation_remarks=data.allocation_remarks,
            allocated_by=actor_id,
        )
        db.add(allocation)
        asset.status = AssetStatus.allocated
        await db.flush()
        await create_audit_entry(
            db,
            action="allocate",
            entity_type="asset",
            entity_id=asset.id,
            actor_id=actor_id,
            new_values={"employee_id": data.employee_id, "allocation_id": allocation.id},
        )
        await db.refresh(allocation)
        logger.info("Asset %s allocated to employee %s", asset.asset_code, data.employee_id)
        return allocation

    @staticmethod
    async def return_asset(
        db: AsyncSession, allocation_id: int, data: ReturnRequest, *, actor_id: int,
    ) -> AssetAllocation:
        allocation = await AssetService._get_allocation(db, allocation_id)
        if allocation.status != AllocationStatus.active:
            raise ValidationException(
                {"status": [f"Allocation is already {allocation.status.value}."]}
            )

        allocation.status = AllocationStatus.returned
        allocation.returned_date = data.returned_date or date.today()
        allocation.condition_at_return = data.condition_at_return
        allocation.return_remarks = data.return_remarks
        allocation.received_by = actor_id

        asset = await AssetService._get_asset(db, allocation.asset_id)
        asset.condition = data.condition_at_return
        asset.status = (
            AssetStatus.under_maintenance
            if data.condition_at_return == AssetCondition.damaged
            else AssetStatus.available
        )
        await db.flush()
        await create_audit_entry(
            db,
            action="return",
            entity_type="asset",
            entity_id=asset.id,
            actor_id=actor_id,
            new_values={
                "allocation_id": allocation.id,
                "condition": data.condition_at_return.value,
                "asset_status": asset.status.value,
            },
        )
        await db.refresh(allocation)
        return allocation

    @staticmethod
    async def set_allocation_status(
        db: AsyncSession,
        allocation_id: int,
        data: AllocationStatusUpdate,
        *,
        actor_id: int,
    ) -> AssetAllocation:
        allocation = await AssetService._get_allocation(db, allocation_id)
        asset = await AssetService._get_asset(db, allocation.asset_id)
        new_status = AllocationStatus(data.status)
        old_status = allocation.status

        if new_status == AllocationStatus.active and old_status != AllocationStatus.active:
            if asset.status != AssetStatus.available:
                raise ConflictError(
                    "asset_id", asset.id, detail="Asset is not available for re-allocation.",
                )
            allocation.returned_date = None
        elif new_status != AllocationStatus.active and allocation.returned_date is None:
            allocation.returned_date = date.today()

        allocation.status = new_status
        if data.remarks is not None:
            allocation.return_remarks = data.remarks
        asset.status = _ASSET_STATUS_FOR[new_status]
        await db.flush()
        await create_audit_entry(
            db,
            action="allocation_status",
            entity_type="asset",
            entity_id=asset.id,
            actor_id=actor_id,
            old_values={"allocation_status": old_status.value},
            new_values={"allocation_status": new_status.value, "asset_status": asset.status.value},
        )
        await db.refresh(allocation)
        return allocation

    # ── Listings ────────────────────────────────────────────────────

    @staticmethod
    async def list_allocations(
        db: AsyncSession,
        *,
        status: Optional[AllocationStatus] = None,
        employee_id: Optional[int] = None,
        asset_id: Optional[int] = None,
    ) -> list[AllocationResponse]:
        query = _allocation_query()
        if status is not None:
            query = query.where(AssetAllocation.status == status)
        if employee_id is not None:
            query = query.where(AssetAllocation.employee_id == employee_id)
        if asset_id is not None:
            query = query.where(AssetAllocation.asset_id == asset_id)
        query = query.order_by(AssetAllocation.allocated_date.desc(), AssetAllocation.id.desc())
        return _allocation_rows((await db.execute(query)).all())

    @staticmethod
    async def get_allocation(db: AsyncSession, allocation_id: int) -> AllocationResponse:
        rows = (await db.execute(
            _allocation_query().where(AssetAllocation.id == allocation_id)
        )).all()
        if not rows:
            raise NotFoundException("Asset allocation", allocation_id)
        return _allocation_rows(rows)[0]

    @staticmethod
    async def history(db: AsyncSession, asset_id: int) -> list[AllocationResponse]:
        await AssetService._get_asset(db, asset_id)
        return await AssetService.list_allocations(db, asset_id=asset_id)

    # ── Reports ─────────────────────────────────────────────────────

    @staticmethod
    async def report(db: AsyncSession) -> AssetReport:
        summary = {status.value: 0 for status in AssetStatus}
        for status, count in (await db.execute(
            select(Asset.status, func.count(Asset.id)).group_by(Asset.status)
        )).all():
            summary[status.value] = count
        summary["total"] = sum(summary.values())

        allocated = case((Asset.status == AssetStatus.allocated, 1), else_=0)
        by_type = [
            AssetTypeCount(asset_type=kind, total_count=total, allocated_count=int(alloc or 0))
            for kind, total, alloc in (await db.execute(
                select(Asset.asset_type, func.count(Asset.id), func.sum(allocated))
                .group_by(Asset.asset_type)
                .order_by(func.count(Asset.id).desc(), Asset.asset_type)
            )).all()
        ]

        by_department = [
            DepartmentAllocationCount(department_name=name, allocated_count=count)
            for name, count in (await db.execute(
                select(MasterDataItem.name, func.count(AssetAllocation.id))
                .join(Employee, Employee.id == AssetAllocation.employee_id)
                .outerjoin(MasterDataItem, MasterDataItem.id == Employee.department_id)
                .where(AssetAllocation.status == AllocationStatus.active)
                .group_by(MasterDataItem.name)
                .order_by(func.count(AssetAllocation.id).desc())
            )).all()
        ]

        today = date.today()
        overdue_rows = (await db.execute(
            _allocation_query().where(
                AssetAllocation.status == AllocationStatus.active,
                AssetAllocation.expected_return_date.is_not(None),
                AssetAllocation.expected_return_date < today,
            ).order_by(AssetAllocation.expected_return_date)
        )).all()
        overdue = _allocation_rows(
            overdue_rows,
            schema=OverdueReturn,
            days_overdue=lambda alloc: (today - alloc.expected_return_date).days,
        )

        return AssetReport(
            summary=summary,
            by_asset_type=by_type,
            by_department=by_department,
            overdue_returns=overdue,
        )

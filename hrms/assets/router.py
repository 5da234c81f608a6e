"""Assets router — catalogue, allocations and reports.

Catalogue writes, allocation and reports need ``assets:manage``. Employees
may read their own allocations.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.assets.schemas import (
    AllocateRequest,
    AllocationResponse,
    AllocationStatusUpdate,
    AssetCreate,
    AssetDetail,
    AssetReport,
    AssetResponse,
    AssetUpdate,
    ReturnRequest,
)
from hrms.assets.service import AssetService
from hrms.auth.dependencies import get_current_user, is_hr, require_permission
from hrms.common.constants import AllocationStatus, AssetStatus
from hrms.common.exceptions import ForbiddenException
from hrms.database import get_db
from hrms.employees.models import Employee

router = APIRouter(prefix="", tags=["assets"])

_manage = require_permission("assets:manage")


# ── Static paths ────────────────────────────────────────────────────

@router.get("", response_model=list[AssetResponse])
async def list_assets(
    status: Optional[AssetStatus] = Query(None),
    asset_type: Optional[str] = Query(None, alias="type"),
    search: Optional[str] = Query(None),
    _user: Employee = Depends(_manage),
    db: AsyncSession = Depends(get_db),
):
    return await AssetService.list_assets(
        db, status=status, asset_type=asset_type, search=search,
    )


@router.post("", response_model=AssetResponse, status_code=201)
async def create_asset(
    body: AssetCreate,
    hr: Employee = Depends(_manage),
    db: AsyncSession = Depends(get_db),
):
    return await AssetService.create_asset(db, body, actor_id=hr.id)


@router.get("/reports", response_model=AssetReport)
async def asset_reports(
    _user: Employee = Depends(_manage),
    db: AsyncSession = Depends(get_db),
):
    return await AssetService.report(db)


@router.get("/my-assets", response_model=list[AllocationResponse])
async def my_assets(
    status: Optional[AllocationStatus] = Query(None),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AssetService.list_allocations(db, employee_id=employee.id, status=status)


@router.get("/allocations", response_model=list[AllocationResponse])
async def list_allocations(
    status: Optional[AllocationStatus] = Query(None),
    _user: Employee = Depends(_manage),
    db: AsyncSession = Depends(get_db),
):
    return await AssetService.list_allocations(db, status=status)


@router.post("/allocate", response_model=AllocationResponse, status_code=201)
async def allocate_asset(
    body: AllocateRequest,
    hr: Employee = Depends(_manage),
    db: AsyncSession = Depends(get_db),
):
    allocation = await AssetService.allocate(db, body, actor_id=hr.id)
    return await AssetService.get_allocation(db, allocation.id)


@router.put("/allocations/{allocation_id}", response_model=AllocationResponse)
async def update_allocation_status(
    allocation_id: int,
    body: AllocationStatusUpdate,
    hr: Employee = Depends(_manage),
    db: AsyncSession = Depends(get_db),
):
    await AssetService.set_allocation_status(db, allocation_id, body, actor_id=hr.id)
    return await AssetService.get_allocation(db, allocation_id)


@router.get("/employee/{employee_id}", response_model=list[AllocationResponse])
async def employee_assets(
    employee_id: int,
    status: Optional[AllocationStatus] = Query(None),
    viewer: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not is_hr(viewer) and viewer.id != employee_id:
        raise ForbiddenException("You can only view your own assets.")
    return await AssetService.list_allocations(db, employee_id=employee_id, status=status)


# ── Parameterised paths ─────────────────────────────────────────────

@router.get("/{asset_id}", response_model=AssetDetail)
async def get_asset(
    asset_id: int,
    _user: Employee = Depends(_manage),
    db: AsyncSession = Depends(get_db),
):
    return await AssetService.get_asset(db, asset_id)


@router.put("/{asset_id}", response_model=AssetResponse)
async def update_asset(
    asset_id: int,
    body: AssetUpdate,
    hr: Employee = Depends(_manage),
    db: AsyncSession = Depends(get_db),
):
    return await AssetService.update_asset(db, asset_id, body, actor_id=hr.id)


@router.delete("/{asset_id}")
async def delete_asset(
    asset_id: int,
    hr: Employee = Depends(_manage),
    db: AsyncSession = Depends(get_db),
):
    await AssetService.delete_asset(db, asset_id, actor_id=hr.id)
    return {"success": True, "message": "Asset deleted successfully"}


@router.get("/{asset_id}/history", response_model=list[AllocationResponse])
async def asset_history(
    asset_id: int,
    _user: Employee = Depends(_manage),
    db: AsyncSession = Depends(get_db),
):
    return await AssetService.history(db, asset_id)


@router.put("/{allocation_id}/return", response_model=AllocationResponse)
async def return_asset(
    allocation_id: int,
    body: ReturnRequest,
    hr: Employee = Depends(_manage),
    db: AsyncSession = Depends(get_db),
):
    await AssetService.return_asset(db, allocation_id, body, actor_id=hr.id)
    return await AssetService.get_allocation(db, allocation_id)

"""Master-data router — generic ``/{type}`` CRUD, mounted after every other router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.dependencies import get_current_user, require_permission
from hrms.database import get_db
from hrms.employees.models import Employee
from hrms.master_data.schemas import (
    MasterDataCreate,
    MasterDataMessage,
    MasterDataResponse,
    MasterDataUpdate,
)
from hrms.master_data.service import MasterDataService

router = APIRouter(prefix="", tags=["master-data"])

_hr_writer = require_permission("master_data:write")


@router.get("/{item_type}", response_model=list[MasterDataResponse])
async def list_items(
    item_type: str,
    include_inactive: bool = Query(True),
    search: Optional[str] = Query(None),
    _user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await MasterDataService.list_items(
        db, item_type, include_inactive=include_inactive, search=search,
    )


@router.get("/{item_type}/{item_id}", response_model=MasterDataResponse)
async def get_item(
    item_type: str,
    item_id: int,
    _user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await MasterDataService.get_item(db, item_type, item_id)


@router.post("/{item_type}", response_model=MasterDataMessage, status_code=201)
async def create_item(
    item_type: str,
    body: MasterDataCreate,
    hr: Employee = Depends(_hr_writer),
    db: AsyncSession = Depends(get_db),
):
    item = await MasterDataService.create_item(db, item_type, body, actor_id=hr.id)
    return MasterDataMessage(
        message=f"{item_type} created",
        data=MasterDataResponse.model_validate(item),
    )


@router.put("/{item_type}/{item_id}", response_model=MasterDataMessage)
async def update_item(
    item_type: str,
    item_id: int,
    body: MasterDataUpdate,
    hr: Employee = Depends(_hr_writer),
    db: AsyncSession = Depends(get_db),
):
    item = await MasterDataService.update_item(db, item_type, item_id, body, actor_id=hr.id)
    return MasterDataMessage(
        message=f"{item_type} updated successfully",
        data=MasterDataResponse.model_validate(item),
    )


@router.delete("/{item_type}/{item_id}", response_model=MasterDataMessage)
async def delete_item(
    item_type: str,
    item_id: int,
    hr: Employee = Depends(_hr_writer),
    db: AsyncSession = Depends(get_db),
):
    await MasterDataService.delete_item(db, item_type, item_id, actor_id=hr.id)
    return MasterDataMessage(message=f"{item_type} deleted successfully")

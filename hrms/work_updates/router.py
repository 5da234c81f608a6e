"""Work-updates router — the caller's daily per-project updates."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.dependencies import get_current_user
from hrms.common.filters import resolve_period
from hrms.database import get_db
from hrms.employees.models import Employee
from hrms.projects.schemas import AssignmentResponse
from hrms.work_updates.schemas import (
    WorkUpdateCompliance,
    WorkUpdateCreate,
    WorkUpdateResponse,
)
from hrms.work_updates.service import WorkUpdateService

router = APIRouter(prefix="", tags=["work-updates"])


@router.get("/my-projects", response_model=list[AssignmentResponse])
async def my_projects(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await WorkUpdateService.my_projects(db, employee.id)


@router.get("/my-updates", response_model=list[WorkUpdateResponse])
async def my_updates(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    project_id: Optional[int] = Query(None),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    period = resolve_period(start_date=start_date, end_date=end_date)
    return await WorkUpdateService.my_updates(
        db, employee.id, period=period, project_id=project_id,
    )


@router.post("/submit", response_model=WorkUpdateResponse, status_code=201)
async def submit_update(
    body: WorkUpdateCreate,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    update = await WorkUpdateService.submit(db, employee.id, body)
    return WorkUpdateResponse.model_validate(update)


@router.get("/compliance-status", response_model=WorkUpdateCompliance)
async def compliance_status(
    on_date: Optional[date] = Query(None, alias="date"),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await WorkUpdateService.compliance_status(
        db, employee.id, on_date or date.today(),
    )


@router.delete("/{update_id}")
async def delete_update(
    update_id: int,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await WorkUpdateService.delete(db, employee.id, update_id)
    return {"success": True, "message": "Work update deleted successfully"}

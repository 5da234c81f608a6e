"""Holidays router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.dependencies import get_current_user, require_role
from hrms.common.constants import UserRole
from hrms.database import get_db
from hrms.employees.models import Employee
from hrms.holidays.schemas import HolidayCreate, HolidayResponse, HolidayUpdate
from hrms.holidays.service import HolidayService

router = APIRouter(prefix="", tags=["holidays"])

_hr = require_role(UserRole.hr)


@router.get("", response_model=list[HolidayResponse])
async def list_holidays(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    location: Optional[str] = Query(None),
    _user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await HolidayService.list_holidays(db, year=year, location=location)


@router.get("/upcoming", response_model=list[HolidayResponse])
async def upcoming_holidays(
    limit: int = Query(5, ge=1, le=50),
    _user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await HolidayService.upcoming(db, limit)


@router.post("", response_model=HolidayResponse, status_code=201)
async def create_holiday(
    body: HolidayCreate,
    hr: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    return await HolidayService.create(db, body, actor_id=hr.id)


@router.put("/{holiday_id}", response_model=HolidayResponse)
async def update_holiday(
    holiday_id: int,
    body: HolidayUpdate,
    hr: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    return await HolidayService.update(db, holiday_id, body, actor_id=hr.id)


@router.delete("/{holiday_id}")
async def delete_holiday(
    holiday_id: int,
    hr: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    await HolidayService.delete(db, holiday_id, actor_id=hr.id)
    return {"success": True, "message": "Holiday deleted successfully"}

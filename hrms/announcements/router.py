"""Announcements router — everyone reads, HR writes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.announcements.schemas import (
    AnnouncementCreate,
    AnnouncementResponse,
    AnnouncementUpdate,
)
from hrms.announcements.service import AnnouncementService
from hrms.auth.dependencies import get_current_user, is_hr, require_role
from hrms.common.constants import UserRole
from hrms.database import get_db
from hrms.employees.models import Employee

router = APIRouter(prefix="", tags=["announcements"])

_hr = require_role(UserRole.hr)


@router.get("", response_model=list[AnnouncementResponse])
async def list_announcements(
    include_inactive: bool = Query(False),
    user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AnnouncementService.list_announcements(
        db, include_inactive=include_inactive and is_hr(user),
    )


@router.post("", response_model=AnnouncementResponse, status_code=201)
async def create_announcement(
    body: AnnouncementCreate,
    hr: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    return await AnnouncementService.create(db, body, actor_id=hr.id)


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
async def get_announcement(
    announcement_id: int,
    _user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AnnouncementService.get_announcement(db, announcement_id)


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    announcement_id: int,
    body: AnnouncementUpdate,
    hr: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    return await AnnouncementService.update(db, announcement_id, body, actor_id=hr.id)


@router.put("/{announcement_id}/deactivate", response_model=AnnouncementResponse)
async def deactivate_announcement(
    announcement_id: int,
    hr: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    return await AnnouncementService.deactivate(db, announcement_id, actor_id=hr.id)


@router.delete("/{announcement_id}")
async def delete_announcement(
    announcement_id: int,
    hr: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    await AnnouncementService.delete(db, announcement_id, actor_id=hr.id)
    return {"success": True, "message": "Announcement deleted successfully"}

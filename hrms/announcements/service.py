"""Announcement service — company notices with priority ordering and expiry."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import case, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.announcements.models import Announcement
from hrms.announcements.schemas import (
    AnnouncementCreate,
    AnnouncementResponse,
    AnnouncementUpdate,
)
from hrms.common.audit import create_audit_entry
from hrms.common.constants import AnnouncementPriority, AnnouncementType
from hrms.common.exceptions import NotFoundException
from hrms.employees.models import Employee
from hrms.notifications.service import NotificationService

logger = logging.getLogger(__name__)


def _with_author(query):
    return query.outerjoin(Employee, Employee.id == Announcement.created_by).add_columns(
        Employee.first_name, Employee.last_name,
    )


def _decorate(row) -> AnnouncementResponse:
    announcement, first, last = row
    resp = AnnouncementResponse.model_validate(announcement)
    if first is not None:
        resp.author_name = f"{first} {last}"
    return resp


class AnnouncementService:

    @staticmethod
    async def _get(db: AsyncSession, announcement_id: int) -> Announcement:
        announcement = await db.get(Announcement, announcement_id)
        if announcement is None:
            raise NotFoundException("Announcement", announcement_id)
        return announcement

    @staticmethod
    async def list_announcements(
        db: AsyncSession, *, include_inactive: bool = False,
    ) -> list[AnnouncementResponse]:
        # Urgent or high-priority items float to the top
        pinned = case(
            (
                or_(
                    Announcement.announcement_type == AnnouncementType.urgent,
                    Announcement.priority == AnnouncementPriority.high,
                ),
                0,
            ),
            else_=1,
        )
        query = _with_author(select(Announcement)).order_by(
            pinned, Announcement.created_at.desc(), Announcement.id.desc(),
        )
        if not include_inactive:
            query = query.where(
                Announcement.is_active.is_(True),
                or_(
                    Announcement.expires_at.is_(None),
                    Announcement.expires_at > datetime.now(),
                ),
            )
        return [_decorate(row) for row in (await db.execute(query)).all()]

    @staticmethod
    async def get_announcement(db: AsyncSession, announcement_id: int) -> AnnouncementResponse:
        row = (await db.execute(
            _with_author(select(Announcement)).where(Announcement.id == announcement_id)
        )).first()
        if row is None:
            raise NotFoundException("Announcement", announcement_id)
        return _decorate(row)

    @staticmethod
    async def create(
        db: AsyncSession, data: AnnouncementCreate, *, actor_id: int,
    ) -> AnnouncementResponse:
        announcement = Announcement(
            **data.model_dump(exclude={"notify_employees"}),
            created_by=actor_id,
        )
        db.add(announcement)
        await db.flush()
        await create_audit_entry(
            db,
            action="create",
            entity_type="announcement",
            entity_id=announcement.id,
            actor_id=actor_id,
            new_values={"title": announcement.title, "priority": announcement.priority.value},
        )
        if data.notify_employees:
            sent = await NotificationService.broadcast(
                db, title=announcement.title, message=announcement.content[:500],
            )
            logger.info("Announcement %s broadcast to %d employees", announcement.id, sent)
        return await AnnouncementService.get_announcement(db, announcement.id)

    @staticmethod
    async def update(
        db: AsyncSession, announcement_id: int, data: AnnouncementUpdate, *, actor_id: int,
    ) -> AnnouncementResponse:
        announcement = await AnnouncementService._get(db, announcement_id)
        changes = data.model_dump(exclude_unset=True)
        for key, value in changes.items():
            setattr(announcement, key, value)
        await db.flush()
        await create_audit_entry(
            db,
            action="update",
            entity_type="announcement",
            entity_id=announcement.id,
            actor_id=actor_id,
            new_values={k: str(v) for k, v in changes.items()},
        )
        await db.refresh(announcement)
        return await AnnouncementService.get_announcement(db, announcement.id)

    @staticmethod
    async def deactivate(
        db: AsyncSession, announcement_id: int, *, actor_id: int,
    ) -> AnnouncementResponse:
        return await AnnouncementService.update(
            db, announcement_id, AnnouncementUpdate(is_active=False), actor_id=actor_id,
        )

    @staticmethod
    async def delete(db: AsyncSession, announcement_id: int, *, actor_id: int) -> None:
        announcement = await AnnouncementService._get(db, announcement_id)
        await create_audit_entry(
            db,
            action="delete",
            entity_type="announcement",
            entity_id=announcement.id,
            actor_id=actor_id,
            old_values={"title": announcement.title},
        )
        await db.delete(announcement)
        await db.flush()

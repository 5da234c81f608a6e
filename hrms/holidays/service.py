"""Holiday service — calendar CRUD and the upcoming-holidays widget."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from sqlalchemy import extract, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.common.audit import create_audit_entry
from hrms.common.exceptions import ConflictError, NotFoundException
from hrms.holidays.models import Holiday
from hrms.holidays.schemas import HolidayCreate, HolidayUpdate

logger = logging.getLogger(__name__)


def _location_matches(location: Optional[str]):
    if location is None:
        return Holiday.location.is_(None)
    return Holiday.location == location


class HolidayService:

    @staticmethod
    async def _get(db: AsyncSession, holiday_id: int) -> Holiday:
        holiday = await db.get(Holiday, holiday_id)
        if holiday is None:
            raise NotFoundException("Holiday", holiday_id)
        return holiday

    @staticmethod
    async def _ensure_unique(
        db: AsyncSession,
        holiday_date: date,
        name: str,
        location: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> None:
        query = select(Holiday.id).where(
            Holiday.holiday_date == holiday_date,
            Holiday.name == name,
            _location_matches(location),
        )
        if exclude_id is not None:
            query = query.where(Holiday.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise ConflictError(
                "holiday",
                f"{holiday_date} {name}",
                detail="A holiday with this date, name and location already exists.",
            )

    @staticmethod
    async def list_holidays(
        db: AsyncSession,
        *,
        year: Optional[int] = None,
        location: Optional[str] = None,
    ) -> Sequence[Holiday]:
        query = select(Holiday).order_by(Holiday.holiday_date, Holiday.name)
        if year is not None:
            query = query.where(extract("year", Holiday.holiday_date) == year)
        if location:
            # Company-wide holidays (no location) apply everywhere
            query = query.where(or_(Holiday.location == location, Holiday.location.is_(None)))
        return (await db.execute(query)).scalars().all()

    @staticmethod
    async def upcoming(db: AsyncSession, limit: int = 5) -> Sequence[Holiday]:
        result = await db.execute(
            select(Holiday)
            .where(Holiday.holiday_date >= date.today())
            .order_by(Holiday.holiday_date, Holiday.name)
            .limit(limit)
        )
        return result.scalars().all()

    @staticmethod
    async def create(db: AsyncSession, data: HolidayCreate, *, actor_id: int) -> Holiday:
        await HolidayService._ensure_unique(db, data.holiday_date, data.name, data.location)
        holiday = Holiday(**data.model_dump(), created_by=actor_id)
        db.add(holiday)
        await db.flush()
        await create_audit_entry(
            db,
            action="create",
            entity_type="holiday",
            entity_id=holiday.id,
            actor_id=actor_id,
            new_values={"name": holiday.name, "holiday_date": holiday.holiday_date.isoformat()},
        )
        await db.refresh(holiday)
        logger.info("Holiday %s on %s created", holiday.name, holiday.holiday_date)
        return holiday

    @staticmethod
    async def update(
        db: AsyncSession, holiday_id: int, data: HolidayUpdate, *, actor_id: int,
    ) -> Holiday:
        holiday = await HolidayService._get(db, holiday_id)
        changes = data.model_dump(exclude_unset=True)
        await HolidayService._ensure_unique(
            db,
            changes.get("holiday_date", holiday.holiday_date),
            changes.get("name", holiday.name),
            changes.get("location", holiday.location),
            exclude_id=holiday.id,
        )
        for key, value in changes.items():
            setattr(holiday, key, value)
        await db.flush()
        await create_audit_entry(
            db,
            action="update",
            entity_type="holiday",
            entity_id=holiday.id,
            actor_id=actor_id,
            new_values={k: str(v) for k, v in changes.items()},
        )
        await db.refresh(holiday)
        return holiday

    @staticmethod
    async def delete(db: AsyncSession, holiday_id: int, *, actor_id: int) -> None:
        holiday = await HolidayService._get(db, holiday_id)
        await create_audit_entry(
            db,
            action="delete",
            entity_type="holiday",
            entity_id=holiday.id,
            actor_id=actor_id,
            old_values={"name": holiday.name, "holiday_date": holiday.holiday_date.isoformat()},
        )
        await db.delete(holiday)
        await db.flush()

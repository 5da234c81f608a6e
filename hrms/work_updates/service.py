"""Work-update service — one update per employee, project and day."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.common.exceptions import (
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from hrms.common.filters import apply_period
from hrms.projects.models import Project
from hrms.projects.schemas import AssignmentResponse
from hrms.projects.service import active_assignments
from hrms.work_updates.models import WorkUpdate
from hrms.work_updates.schemas import (
    ProjectCompliance,
    WorkUpdateCompliance,
    WorkUpdateCreate,
    WorkUpdateResponse,
)

logger = logging.getLogger(__name__)


class WorkUpdateService:

    @staticmethod
    async def my_projects(db: AsyncSession, employee_id: int) -> list[AssignmentResponse]:
        return await active_assignments(db, employee_id, date.today())

    @staticmethod
    async def my_updates(
        db: AsyncSession,
        employee_id: int,
        *,
        period: Optional[tuple[date, date]] = None,
        project_id: Optional[int] = None,
    ) -> list[WorkUpdateResponse]:
        query = (
            select(WorkUpdate, Project.project_name, Project.client_name)
            .join(Project, Project.id == WorkUpdate.project_id)
            .where(WorkUpdate.employee_id == employee_id)
        )
        if project_id is not None:
            query = query.where(WorkUpdate.project_id == project_id)
        query = apply_period(query, WorkUpdate.update_date, period)
        query = query.order_by(WorkUpdate.update_date.desc(), WorkUpdate.id.desc())

        out = []
        for update, project_name, client_name in (await db.execute(query)).all():
            resp = WorkUpdateResponse.model_validate(update)
            resp.project_name, resp.client_name = project_name, client_name
            out.append(resp)
        return out

    @staticmethod
    async def submit(
        db: AsyncSession, employee_id: int, data: WorkUpdateCreate,
    ) -> WorkUpdate:
        if not await active_assignments(db, employee_id, data.update_date, data.project_id):
            raise ForbiddenException("You are not assigned to this project")

        existing = await db.execute(
            select(WorkUpdate.id).where(
                WorkUpdate.employee_id == employee_id,
                WorkUpdate.project_id == data.project_id,
                WorkUpdate.update_date == data.update_date,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(
                "update_date",
                data.update_date.isoformat(),
                detail="A work update for this project and date already exists.",
            )

        update = WorkUpdate(
            employee_id=employee_id,
            project_id=data.project_id,
            update_date=data.update_date,
            description=data.description,
            hours_worked=Decimal(str(data.hours_worked)),
            tasks_completed=data.tasks_completed,
            blockers=data.blockers,
        )
        db.add(update)
        await db.flush()
        await db.refresh(update)
        logger.info(
            "Work update %s emp=%s project=%s date=%s",
            update.id, employee_id, data.project_id, data.update_date,
        )
        return update

    @staticmethod
    async def delete(db: AsyncSession, employee_id: int, update_id: int) -> None:
        update = await db.get(WorkUpdate, update_id)
        if update is None:
            raise NotFoundException("Work update", update_id)
        if update.employee_id != employee_id:
            raise ForbiddenException("You can only delete your own work updates.")
        if update.update_date != date.today():
            raise ValidationException(
                {"update_date": ["Only today's work updates can be deleted."]}
            )
        await db.delete(update)
        await db.flush()

    @staticmethod
    async def compliance_status(
        db: AsyncSession, employee_id: int, day: date,
    ) -> WorkUpdateCompliance:
        assignments = await active_assignments(db, employee_id, day)
        done = set(
            (await db.execute(
                select(WorkUpdate.project_id).where(
                    WorkUpdate.employee_id == employee_id,
                    WorkUpdate.update_date == day,
                )
            )).scalars().all()
        )
        projects = [
            ProjectCompliance(
                project_id=a.project_id,
                project_name=a.project_name,
                project_code=a.project_code,
                submitted=a.project_id in done,
            )
            for a in assignments
        ]
        submitted = sum(1 for p in projects if p.submitted)
        return WorkUpdateCompliance(
            date=day,
            projects=projects,
            total_projects=len(projects),
            submitted_count=submitted,
            is_compliant=submitted == len(projects),
        )

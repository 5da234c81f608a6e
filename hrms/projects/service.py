"""Project service — projects, assignments, and the *active on day* rule."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.common.audit import create_audit_entry
from hrms.common.constants import AssignmentStatus, ProjectStatus
from hrms.common.exceptions import ConflictError, NotFoundException
from hrms.employees.models import Employee
from hrms.projects.models import Project, ProjectAssignment
from hrms.projects.schemas import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentUpdate,
    ProjectCreate,
    ProjectDetail,
    ProjectResponse,
    ProjectUpdate,
)

logger = logging.getLogger(__name__)


def active_on(day: date):
    """SQL condition: assignment is active and its date range covers *day*."""
    return and_(
        ProjectAssignment.status == AssignmentStatus.active,
        ProjectAssignment.assignment_start_date <= day,
        or_(
            ProjectAssignment.assignment_end_date.is_(None),
            ProjectAssignment.assignment_end_date >= day,
        ),
    )


async def active_assignments(
    db: AsyncSession,
    employee_id: int,
    day: date,
    project_id: Optional[int] = None,
) -> list[AssignmentResponse]:
    """An employee's assignments active on *day*, decorated with project names."""
    query = (
        select(ProjectAssignment, Project.project_name, Project.project_code)
        .join(Project, Project.id == ProjectAssignment.project_id)
        .where(ProjectAssignment.employee_id == employee_id, active_on(day))
        .order_by(Project.project_name)
    )
    if project_id is not None:
        query = query.where(ProjectAssignment.project_id == project_id)
    out = []
    for assignment, name, code in (await db.execute(query)).all():
        resp = AssignmentResponse.model_validate(assignment)
        resp.project_name, resp.project_code = name, code
        out.append(resp)
    return out


class ProjectService:
    """Async CRUD for projects and their assignments."""

    @staticmethod
    async def _get_project(db: AsyncSession, project_id: int) -> Project:
        project = await db.get(Project, project_id)
        if project is None:
            raise NotFoundException("Project", project_id)
        return project

    @staticmethod
    async def _get_assignment(db: AsyncSession, assignment_id: int) -> ProjectAssignment:
        assignment = await db.get(ProjectAssignment, assignment_id)
        if assignment is None:
            raise NotFoundException("Project assignment", assignment_id)
        return assignment

    # ── Projects ────────────────────────────────────────────────────

    @staticmethod
    async def list_projects(
        db: AsyncSession,
        *,
        status: Optional[ProjectStatus] = None,
        client_name: Optional[str] = None,
    ) -> list[ProjectResponse]:
        counts = (
            select(
                ProjectAssignment.project_id.label("project_id"),
                func.count(ProjectAssignment.id).label("active"),
            )
            .where(ProjectAssignment.status == AssignmentStatus.active)
            .group_by(ProjectAssignment.project_id)
            .subquery()
        )
        query = (
            select(Project, counts.c.active)
            .outerjoin(counts, counts.c.project_id == Project.id)
            .order_by(Project.created_at.desc(), Project.id.desc())
        )
        if status is not None:
            query = query.where(Project.status == status)
        if client_name:
            query = query.where(Project.client_name.ilike(f"%{client_name}%"))

        out = []
        for project, active in (await db.execute(query)).all():
            resp = ProjectResponse.model_validate(project)
            resp.active_assignments = int(active or 0)
            out.append(resp)
        return out

    @staticmethod
    async def get_project(db: AsyncSession, project_id: int) -> ProjectDetail:
        project = await ProjectService._get_project(db, project_id)
        assignments = await ProjectService.list_assignments(db, project_id)

        detail = ProjectDetail.model_validate(project)
        detail.assignments = assignments
        detail.active_assignments = sum(
            1 for a in assignments if a.status == AssignmentStatus.active
        )
        if project.manager_id is not None:
            manager = await db.get(Employee, project.manager_id)
            detail.manager_name = manager.full_name if manager else None
        return detail

    @staticmethod
    async def create_project(
        db: AsyncSession,
        data: ProjectCreate,
        *,
        actor_id: int,
    ) -> Project:
        existing = await db.execute(
            select(Project.id).where(Project.project_code == data.project_code)
        )
        if existing.first() is not None:
            raise ConflictError("project_code", data.project_code)

        project = Project(**data.model_dump(), created_by=actor_id)
        db.add(project)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="project",
            entity_id=project.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        logger.info("Project %s created", project.project_code)
        return project

    @staticmethod
    async def update_project(
        db: AsyncSession,
        project_id: int,
        data: ProjectUpdate,
        *,
        actor_id: int,
    ) -> Project:
        project = await ProjectService._get_project(db, project_id)
        changes = data.model_dump(exclude_unset=True)
        old = {k: str(getattr(project, k)) for k in changes}
        for key, value in changes.items():
            setattr(project, key, value)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="project",
            entity_id=project.id,
            actor_id=actor_id,
            old_values=old,
            new_values=data.model_dump(mode="json", exclude_unset=True),
        )
        return project

    @staticmethod
    async def delete_project(db: AsyncSession, project_id: int, *, actor_id: int) -> None:
        """Close the project (status completed); history stays intact."""
        project = await ProjectService._get_project(db, project_id)
        old_status = project.status.value
        project.status = ProjectStatus.completed
        await db.flush()

        await create_audit_entry(
            db,
            action="delete",
            entity_type="project",
            entity_id=project.id,
            actor_id=actor_id,
            old_values={"status": old_status},
            new_values={"status": ProjectStatus.completed.value},
        )

    # ── Assignments ─────────────────────────────────────────────────

    @staticmethod
    async def list_assignments(
        db: AsyncSession,
        project_id: int,
        *,
        status: Optional[AssignmentStatus] = None,
    ) -> list[AssignmentResponse]:
        query = (
            select(
                ProjectAssignment,
                Employee.employee_number,
                Employee.first_name,
                Employee.last_name,
            )
            .join(Employee, Employee.id == ProjectAssignment.employee_id)
            .where(ProjectAssignment.project_id == project_id)
            .order_by(ProjectAssignment.status, Employee.first_name, Employee.last_name)
        )
        if status is not None:
            query = query.where(ProjectAssignment.status == status)

        out = []
        for assignment, number, first, last in (await db.execute(query)).all():
            resp = AssignmentResponse.model_validate(assignment)
            resp.employee_number = number
            resp.employee_name = f"{first} {last}"
            out.append(resp)
        return out

    @staticmethod
    async def assign(
        db: AsyncSession,
        project_id: int,
        data: AssignmentCreate,
        *,
        actor_id: int,
    ) -> ProjectAssignment:
        await ProjectService._get_project(db, project_id)
        if await db.get(Employee, data.employee_id) is None:
            raise NotFoundException("Employee", data.employee_id)

        duplicate = await db.execute(
            select(ProjectAssignment.id).where(
                ProjectAssignment.project_id == project_id,
                ProjectAssignment.employee_id == data.employee_id,
                ProjectAssignment.status == AssignmentStatus.active,
            )
        )
        if duplicate.first() is not None:
            raise ConflictError(
                "employee_id",
                data.employee_id,
                detail="Employee already has an active assignment on this project.",
            )

        assignment = ProjectAssignment(
            project_id=project_id,
            assigned_by=actor_id,
            status=AssignmentStatus.active,
            **data.model_dump(),
        )
        db.add(assignment)
        await db.flush()

        await create_audit_entry(
            db,
            action="assign",
            entity_type="project_assignment",
            entity_id=assignment.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        return assignment

    @staticmethod
    async def update_assignment(
        db: AsyncSession,
        assignment_id: int,
        data: AssignmentUpdate,
        *,
        actor_id: int,
    ) -> ProjectAssignment:
        assignment = await ProjectService._get_assignment(db, assignment_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(assignment, key, value)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="project_assignment",
            entity_id=assignment.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json", exclude_unset=True),
        )
        return assignment

    @staticmethod
    async def remove_assignment(
        db: AsyncSession,
        assignment_id: int,
        *,
        actor_id: int,
    ) -> ProjectAssignment:
        assignment = await ProjectService._get_assignment(db, assignment_id)
        assignment.status = AssignmentStatus.inactive
        if assignment.assignment_end_date is None or assignment.assignment_end_date > date.today():
            assignment.assignment_end_date = max(date.today(), assignment.assignment_start_date)
        await db.flush()

        await create_audit_entry(
            db,
            action="unassign",
            entity_type="project_assignment",
            entity_id=assignment.id,
            actor_id=actor_id,
        )
        return assignment

    @staticmethod
    async def my_projects(db: AsyncSession, employee_id: int) -> list[AssignmentResponse]:
        """Every active assignment of the employee, whatever its date range."""
        query = (
            select(ProjectAssignment, Project.project_name, Project.project_code)
            .join(Project, Project.id == ProjectAssignment.project_id)
            .where(
                ProjectAssignment.employee_id == employee_id,
                ProjectAssignment.status == AssignmentStatus.active,
            )
            .order_by(ProjectAssignment.assignment_start_date.desc())
        )
        out: list[AssignmentResponse] = []
        rows: Sequence = (await db.execute(query)).all()
        for assignment, name, code in rows:
            resp = AssignmentResponse.model_validate(assignment)
            resp.project_name, resp.project_code = name, code
            out.append(resp)
        return out

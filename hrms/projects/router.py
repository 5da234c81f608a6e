"""Projects router — projects, assignments and the caller's projects."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.dependencies import get_current_user, require_role
from hrms.common.constants import AssignmentStatus, ProjectStatus, UserRole
from hrms.database import get_db
from hrms.employees.models import Employee
from hrms.projects.schemas import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentUpdate,
    ProjectCreate,
    ProjectDetail,
    ProjectResponse,
    ProjectUpdate,
)
from hrms.projects.service import ProjectService

router = APIRouter(prefix="", tags=["projects"])

_hr = require_role(UserRole.hr)


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    status: Optional[ProjectStatus] = Query(None),
    client_name: Optional[str] = Query(None),
    _user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ProjectService.list_projects(db, status=status, client_name=client_name)


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    body: ProjectCreate,
    hr: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    return await ProjectService.create_project(db, body, actor_id=hr.id)


@router.get("/my-projects", response_model=list[AssignmentResponse])
async def my_projects(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ProjectService.my_projects(db, employee.id)


# ── Assignments (by id) ─────────────────────────────────────────────

@router.put("/assignments/{assignment_id}", response_model=AssignmentResponse)
async def update_assignment(
    assignment_id: int,
    body: AssignmentUpdate,
    hr: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    return await ProjectService.update_assignment(db, assignment_id, body, actor_id=hr.id)


@router.delete("/assignments/{assignment_id}")
async def remove_assignment(
    assignment_id: int,
    hr: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    await ProjectService.remove_assignment(db, assignment_id, actor_id=hr.id)
    return {"success": True, "message": "Employee removed from project"}


# ── Single project ──────────────────────────────────────────────────

@router.get("/{project_id}", response_model=ProjectDetail)
async def get_project(
    project_id: int,
    _user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ProjectService.get_project(db, project_id)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    body: ProjectUpdate,
    hr: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    return await ProjectService.update_project(db, project_id, body, actor_id=hr.id)


@router.delete("/{project_id}")
async def delete_project(
    project_id: int,
    admin: Employee = Depends(require_role(UserRole.admin)),
    db: AsyncSession = Depends(get_db),
):
    await ProjectService.delete_project(db, project_id, actor_id=admin.id)
    return {"success": True, "message": "Project marked as completed"}


@router.get("/{project_id}/assignments", response_model=list[AssignmentResponse])
async def list_assignments(
    project_id: int,
    status: Optional[AssignmentStatus] = Query(None),
    _user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ProjectService.list_assignments(db, project_id, status=status)


@router.post("/{project_id}/assignments", response_model=AssignmentResponse, status_code=201)
async def assign_employee(
    project_id: int,
    body: AssignmentCreate,
    hr: Employee = Depends(_hr),
    db: AsyncSession = Depends(get_db),
):
    return await ProjectService.assign(db, project_id, body, actor_id=hr.id)

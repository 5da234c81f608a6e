"""Project Pydantic v2 schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from hrms.common.constants import AssignmentStatus, ProjectStatus
from hrms.common.validators import not_null


class ProjectCreate(BaseModel):
    project_code: str = Field(..., min_length=1, max_length=50)
    project_name: str = Field(..., min_length=1, max_length=200)
    client_name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    status: ProjectStatus = ProjectStatus.active
    manager_id: Optional[int] = None

    @model_validator(mode="after")
    def _check_dates(self) -> "ProjectCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class ProjectUpdate(BaseModel):
    project_name: Optional[str] = Field(None, min_length=1, max_length=200)
    client_name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ProjectStatus] = None
    manager_id: Optional[int] = None

    reject_nulls = not_null("project_name", "client_name", "start_date", "status")


class AssignmentCreate(BaseModel):
    employee_id: int
    role: Optional[str] = Field(None, max_length=100)
    allocation_percentage: int = Field(100, ge=1, le=100)
    assignment_start_date: date
    assignment_end_date: Optional[date] = None

    @model_validator(mode="after")
    def _check_dates(self) -> "AssignmentCreate":
        end = self.assignment_end_date
        if end is not None and end < self.assignment_start_date:
            raise ValueError("assignment_end_date must be on or after assignment_start_date")
        return self


class AssignmentUpdate(BaseModel):
    role: Optional[str] = Field(None, max_length=100)
    allocation_percentage: Optional[int] = Field(None, ge=1, le=100)
    assignment_end_date: Optional[date] = None
    status: Optional[AssignmentStatus] = None

    reject_nulls = not_null("allocation_percentage", "status")


class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    employee_id: int
    role: Optional[str] = None
    allocation_percentage: int
    assignment_start_date: date
    assignment_end_date: Optional[date] = None
    status: AssignmentStatus
    employee_name: Optional[str] = None
    employee_number: Optional[str] = None
    project_name: Optional[str] = None
    project_code: Optional[str] = None


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_code: str
    project_name: str
    client_name: str
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    status: ProjectStatus
    manager_id: Optional[int] = None
    created_at: datetime
    active_assignments: int = 0


class ProjectDetail(ProjectResponse):
    manager_name: Optional[str] = None
    assignments: list[AssignmentResponse] = []

"""Work-update Pydantic v2 schemas."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WorkUpdateCreate(BaseModel):
    project_id: int
    update_date: date
    description: str = Field(..., min_length=1)
    hours_worked: float = Field(0, ge=0, le=24)
    tasks_completed: Optional[str] = None
    blockers: Optional[str] = None


class WorkUpdateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    project_id: int
    update_date: date
    description: str
    hours_worked: float
    tasks_completed: Optional[str] = None
    blockers: Optional[str] = None
    status: str
    created_at: datetime
    project_name: Optional[str] = None
    client_name: Optional[str] = None


class ProjectCompliance(BaseModel):
    project_id: int
    project_name: Optional[str] = None
    project_code: Optional[str] = None
    submitted: bool


class WorkUpdateCompliance(BaseModel):
    date: date
    projects: list[ProjectCompliance] = []
    total_projects: int = 0
    submitted_count: int = 0
    is_compliant: bool

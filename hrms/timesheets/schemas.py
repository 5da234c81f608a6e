"""Timesheet Pydantic v2 schemas."""

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from hrms.common.constants import (
    ClientValidationStatus,
    TimesheetStatus,
    TimesheetType,
)
from hrms.projects.schemas import AssignmentResponse


# ── Submission ──────────────────────────────────────────────────────

class RegularTimesheetSubmit(BaseModel):
    date: dt.date
    hours_breakdown: Optional[dict] = None
    total_hours: float = Field(..., ge=0, le=24)
    notes: Optional[str] = None
    save_as_draft: bool = False


class ProjectTimesheetSubmit(RegularTimesheetSubmit):
    project_id: int


class TimesheetSubmitResponse(BaseModel):
    success: bool = True
    message: str
    timesheet_id: int
    status: TimesheetStatus


# ── Reads ───────────────────────────────────────────────────────────

class TimesheetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    project_id: Optional[int] = None
    date: dt.date
    timesheet_type: TimesheetType
    hours_breakdown: Optional[dict] = None
    total_hours: float
    notes: Optional[str] = None
    status: TimesheetStatus
    submission_date: Optional[dt.datetime] = None
    verified_by: Optional[int] = None
    verified_at: Optional[dt.datetime] = None
    review_remarks: Optional[str] = None
    client_timesheet_status: Optional[ClientValidationStatus] = None
    client_reported_hours: Optional[float] = None
    validation_remarks: Optional[str] = None
    project_name: Optional[str] = None
    project_code: Optional[str] = None
    employee_name: Optional[str] = None
    employee_number: Optional[str] = None


class AssignmentStatusResponse(BaseModel):
    has_project: bool
    assignments: list[AssignmentResponse] = []
    timesheet_type: Literal["project_based", "regular"]


class TimesheetStats(BaseModel):
    month: int
    year: int
    submitted_days: int = 0
    total_hours: float = 0
    avg_hours: float = 0
    by_status: dict[str, int] = {}


# ── Admin ───────────────────────────────────────────────────────────

class ClientValidationRequest(BaseModel):
    employee_id: int
    project_id: int
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    validation_status: Literal["validated", "rejected", "mismatch"]
    remarks: Optional[str] = None
    client_hours: Optional[float] = Field(None, ge=0)


class ClientValidationResponse(BaseModel):
    success: bool = True
    message: str
    affected: int


class TimesheetReview(BaseModel):
    status: Literal["verified", "rejected"]
    remarks: Optional[str] = None


class TimesheetAdminStats(BaseModel):
    month: Optional[int] = None
    year: Optional[int] = None
    total: int = 0
    by_status: dict[str, int] = {}
    by_client_status: dict[str, int] = {}

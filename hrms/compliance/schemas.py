"""Compliance Pydantic v2 schemas."""

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from hrms.common.constants import PeriodLockStatus, TimesheetStatus, TimesheetType


# ── Employee views ──────────────────────────────────────────────────

class SubmissionDetails(BaseModel):
    timesheet_id: int
    timesheet_type: TimesheetType
    status: TimesheetStatus
    submission_date: Optional[dt.datetime] = None
    total_hours: float


class MonthSummary(BaseModel):
    submitted_days: int = 0
    total_hours: float = 0
    avg_hours: float = 0


class MyComplianceStatus(BaseModel):
    date: dt.date
    has_active_projects: bool
    is_submitted: bool
    timesheet_type: Literal["project_based", "regular"]
    submission_details: Optional[SubmissionDetails] = None
    status: Literal["compliant", "pending"]
    this_month: MonthSummary


class ComplianceHistoryRow(BaseModel):
    date: dt.date
    timesheet_id: Optional[int] = None
    timesheet_type: Optional[TimesheetType] = None
    status: Optional[TimesheetStatus] = None
    total_hours: float = 0
    compliance_status: Literal["compliant", "pending", "missing"]


# ── Admin / manager views ───────────────────────────────────────────

class NonCompliantEmployee(BaseModel):
    employee_id: int
    employee_number: str
    employee_name: str
    email: str
    department: Optional[str] = None
    active_projects: int = 0
    draft_status: Literal["draft_saved", "not_started"]


class TodayTotals(BaseModel):
    date: dt.date
    total_employees: int
    submitted_count: int
    pending_count: int
    compliance_rate: float


class TrendPoint(BaseModel):
    date: dt.date
    total_employees: int
    submitted_count: int
    compliance_rate: float


class PeriodLockResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    payroll_period: str
    lock_status: PeriodLockStatus
    pending_verifications: int
    locked_by: Optional[int] = None
    locked_at: Optional[dt.datetime] = None
    reopened_by: Optional[int] = None
    reopened_at: Optional[dt.datetime] = None
    reopen_reason: Optional[str] = None


class ComplianceDashboard(BaseModel):
    today: TodayTotals
    non_compliant: list[NonCompliantEmployee] = []
    trend: list[TrendPoint] = []
    pending_validations: int = 0
    period_locks: list[PeriodLockResponse] = []


class ReminderRequest(BaseModel):
    date: Optional[dt.date] = None
    employee_ids: Optional[list[int]] = None


class RemindedEmployee(BaseModel):
    employee_id: int
    employee_name: str


class ReminderResponse(BaseModel):
    success: bool = True
    date: dt.date
    count: int
    reminded: list[RemindedEmployee] = []


class BulkApproveRequest(BaseModel):
    timesheet_ids: list[int] = []
    notes: Optional[str] = None


class BulkApproveResponse(BaseModel):
    success: bool = True
    message: str
    approved_count: int


class CloseMonthRequest(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)


class CloseMonthWarnings(BaseModel):
    pending_timesheets: int = 0
    pending_client_validations: int = 0


class CloseMonthResponse(BaseModel):
    success: bool = True
    message: str
    period: str
    warnings: CloseMonthWarnings


# Fields are optional so a missing one surfaces as a 400, not a schema 422
class ReopenMonthRequest(BaseModel):
    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = Field(None, ge=2000, le=2100)
    reason: Optional[str] = None


class PeriodStatus(BaseModel):
    period: str
    is_locked: bool
    status: PeriodLockStatus
    locked_at: Optional[dt.datetime] = None
    pending_verifications: int = 0


# ── Monthly report ──────────────────────────────────────────────────

class DailyCompliance(BaseModel):
    date: dt.date
    total_employees: int
    submitted_employees: int
    compliance_rate: float


class DepartmentCompliance(BaseModel):
    department: str
    total_employees: int
    compliant_employees: int
    compliance_rate: float


class EmployeeMonthCompliance(BaseModel):
    employee_id: int
    employee_number: str
    employee_name: str
    department: Optional[str] = None
    working_days: int
    submitted_days: int
    missing_days: int
    compliance_rate: float


class MonthlyComplianceReport(BaseModel):
    month: int
    year: int
    period: str
    daily_compliance: list[DailyCompliance] = []
    department_compliance: list[DepartmentCompliance] = []
    top_non_compliant: list[EmployeeMonthCompliance] = []

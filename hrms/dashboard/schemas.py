"""Dashboard Pydantic v2 schemas — one response per role plus birthdays."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hrms.leave.schemas import LeaveBalanceResponse


# ═════════════════════════════════════════════════════════════════════
# Birthdays
# ═════════════════════════════════════════════════════════════════════


class UpcomingBirthdayItem(BaseModel):
    employee_id: int
    employee_number: str
    employee_name: str
    department_name: Optional[str] = None
    date_of_birth: date
    birthday_date: date = Field(..., description="Next occurrence of the birthday")
    days_away: int


class UpcomingBirthdaysResponse(BaseModel):
    days_ahead: int
    data: list[UpcomingBirthdayItem]


class BirthdayWishCreate(BaseModel):
    employee_id: int
    wish_message: str = Field(..., min_length=1, max_length=1000)


class BirthdayWishResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    wished_by: int
    wished_by_name: Optional[str] = None
    wish_message: str
    created_at: datetime


# ═════════════════════════════════════════════════════════════════════
# GET /admin
# ═════════════════════════════════════════════════════════════════════


class CountBucket(BaseModel):
    name: str
    count: int


class EmployeeStats(BaseModel):
    by_status: list[CountBucket]
    by_department: list[CountBucket]
    by_location: list[CountBucket]


class AttendanceToday(BaseModel):
    present: int = 0
    absent: int = 0
    late: int = 0
    half_day: int = 0
    on_leave: int = 0


class LeaveSummary(BaseModel):
    """Applications made this calendar year."""

    pending: int
    approved: int
    rejected: int
    on_leave_today: int


class TimesheetCompliance(BaseModel):
    """Distinct employees per timesheet state this month."""

    total_employees: int
    submitted_count: int
    verified_count: int
    draft_count: int


class ProjectStats(BaseModel):
    total_projects: int
    active_projects: int
    completed_projects: int


class SupportStats(BaseModel):
    open_tickets: int
    in_progress_tickets: int
    resolved_tickets: int
    closed_tickets: int


class AdminDashboard(BaseModel):
    employee_stats: EmployeeStats
    attendance_today: AttendanceToday
    leave_summary: LeaveSummary
    timesheet_compliance: TimesheetCompliance
    upcoming_birthdays: list[UpcomingBirthdayItem]
    project_stats: ProjectStats
    support_stats: SupportStats


# ═════════════════════════════════════════════════════════════════════
# GET /hr
# ═════════════════════════════════════════════════════════════════════


class PendingApprovals(BaseModel):
    leaves: int
    timesheets: int


class MarkedToday(BaseModel):
    total_marked: int
    present: int
    absent: int


class RecentJoiners(BaseModel):
    count: int
    names: list[str]


class HRDashboard(BaseModel):
    total_employees: int
    pending_approvals: PendingApprovals
    attendance_today: MarkedToday
    recent_joiners: RecentJoiners


# ═════════════════════════════════════════════════════════════════════
# GET /manager
# ═════════════════════════════════════════════════════════════════════


class TeamAttendance(BaseModel):
    marked_count: int
    present_count: int


class PendingLeaveItem(BaseModel):
    leave_id: int
    employee_id: int
    employee_name: str
    leave_type_name: Optional[str] = None
    start_date: date
    end_date: date
    total_days: float
    applied_at: datetime


class TeamLeaveItem(BaseModel):
    employee_id: int
    employee_name: str
    leave_type_name: Optional[str] = None
    start_date: date
    end_date: date


class ManagerDashboard(BaseModel):
    team_size: int
    team_attendance_today: TeamAttendance
    pending_leave_approvals: list[PendingLeaveItem]
    team_on_leave_today: list[TeamLeaveItem]
    pending_timesheet_approvals: int


# ═════════════════════════════════════════════════════════════════════
# GET /employee
# ═════════════════════════════════════════════════════════════════════


class MonthAttendance(BaseModel):
    days_present: int
    total_hours_worked: float


class MonthTimesheets(BaseModel):
    total_days: int
    submitted_days: int
    verified_days: int
    draft_days: int


class MyProject(BaseModel):
    project_id: int
    project_name: str
    client_name: str
    role: Optional[str] = None
    allocation_percentage: int
    assignment_start_date: date


class MyAsset(BaseModel):
    asset_id: int
    asset_code: str
    asset_type: str
    asset_name: str
    allocated_date: date


class UpcomingHoliday(BaseModel):
    holiday_date: date
    name: str
    day_name: str


class EmployeeDashboard(BaseModel):
    attendance_this_month: MonthAttendance
    leave_balance: list[LeaveBalanceResponse]
    pending_leave_requests: int
    timesheet_status: MonthTimesheets
    my_projects: list[MyProject]
    my_assets: list[MyAsset]
    upcoming_holidays: list[UpcomingHoliday]

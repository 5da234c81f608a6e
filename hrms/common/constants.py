"""Enums and constants for the HRMS — mirrors the MySQL ENUM columns."""

from __future__ import annotations

import enum


# ── Employee / Roles ────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    employee = "employee"
    manager = "manager"
    hr = "hr"
    admin = "admin"


class EmploymentStatus(str, enum.Enum):
    working = "working"
    resigned = "resigned"
    terminated = "terminated"


# ── Attendance ──────────────────────────────────────────────────────

class WorkMode(str, enum.Enum):
    office = "Office"
    wfh = "WFH"
    remote = "Remote"
    hybrid = "Hybrid"


class AttendanceStatus(str, enum.Enum):
    present = "present"
    absent = "absent"
    late = "late"
    half_day = "half-day"
    leave = "leave"


class PunchType(str, enum.Enum):
    punch_in = "in"
    punch_out = "out"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"


# Leave codes that represent a work mode rather than time off
WFH_LEAVE_CODES = ("WFH", "Remote")


# ── Payroll ─────────────────────────────────────────────────────────

class PayrollRunStatus(str, enum.Enum):
    processing = "processing"
    draft = "draft"
    finalized = "finalized"
    paid = "paid"


class PayslipStatus(str, enum.Enum):
    generated = "generated"
    finalized = "finalized"
    paid = "paid"


# ── Projects / Timesheets / Compliance ──────────────────────────────

class ProjectStatus(str, enum.Enum):
    active = "active"
    on_hold = "on_hold"
    completed = "completed"


class AssignmentStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"


class TimesheetType(str, enum.Enum):
    regular = "regular"
    project = "project"


class TimesheetStatus(str, enum.Enum):
    draft = "draft"
    submitted = "submitted"
    verified = "verified"
    rejected = "rejected"


class ClientValidationStatus(str, enum.Enum):
    pending_validation = "pending_validation"
    validated = "validated"
    rejected = "rejected"
    mismatch = "mismatch"


class PeriodLockStatus(str, enum.Enum):
    open = "open"
    locked = "locked"


# Timesheet states that count towards daily compliance
COMPLIANT_TIMESHEET_STATUSES = (TimesheetStatus.submitted, TimesheetStatus.verified)


# ── Assets ──────────────────────────────────────────────────────────

class AssetStatus(str, enum.Enum):
    available = "available"
    allocated = "allocated"
    under_maintenance = "under_maintenance"
    retired = "retired"


class AssetCondition(str, enum.Enum):
    new = "new"
    good = "good"
    fair = "fair"
    poor = "poor"
    damaged = "damaged"


class AllocationStatus(str, enum.Enum):
    active = "active"
    returned = "returned"
    lost = "lost"
    damaged = "damaged"


# ── Announcements ───────────────────────────────────────────────────

class AnnouncementType(str, enum.Enum):
    general = "general"
    urgent = "urgent"
    policy = "policy"
    event = "event"


class AnnouncementPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


# ── Support tickets ─────────────────────────────────────────────────

class TicketCategory(str, enum.Enum):
    it = "IT"
    hr = "HR"
    payroll = "Payroll"
    leave = "Leave"
    attendance = "Attendance"
    other = "Other"


class TicketPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class TicketStatus(str, enum.Enum):
    open = "open"
    in_progress = "in-progress"
    resolved = "resolved"
    closed = "closed"


TICKET_TRANSITIONS: dict[TicketStatus, set[TicketStatus]] = {
    TicketStatus.open: {TicketStatus.in_progress, TicketStatus.resolved, TicketStatus.closed},
    TicketStatus.in_progress: {TicketStatus.resolved, TicketStatus.closed, TicketStatus.open},
    TicketStatus.resolved: {TicketStatus.closed, TicketStatus.open},
    TicketStatus.closed: {TicketStatus.open},
}


# ── Notifications ───────────────────────────────────────────────────

class NotificationType(str, enum.Enum):
    info = "info"
    action_required = "action_required"
    approval = "approval"
    reminder = "reminder"
    alert = "alert"
    announcement = "announcement"


# ── Master data ─────────────────────────────────────────────────────

MASTER_DATA_TYPES: tuple[str, ...] = (
    "locations",
    "departments",
    "designations",
    "business-units",
    "legal-entities",
    "cost-centers",
    "sub-departments",
    "bands",
    "pay-grades",
    "leave-plans",
    "shift-policies",
    "weekly-off-policies",
    "attendance-policies",
    "attendance-capture-schemes",
    "holiday-lists",
    "expense-policies",
)


# ── Role-based permissions ──────────────────────────────────────────

PERMISSIONS: dict[UserRole, list[str]] = {
    UserRole.employee: [
        "leave:request",
        "timesheet:submit",
    ],
    UserRole.manager: [
        "profile:read_team",
        "leave:request",
        "leave:approve",
        "attendance:read_team",
        "timesheet:submit",
        "compliance:team",
    ],
    UserRole.hr: [
        "profile:read_all",
        "profile:create",
        "profile:update",
        "leave:request",
        "leave:approve",
        "leave:configure",
        "attendance:read_all",
        "attendance:mark",
        "compliance:team",
        "compliance:all",
        "payroll:read",
        "assets:manage",
        "notification:send",
        "reports:read",
        "master_data:write",
    ],
    UserRole.admin: [
        "profile:read_all",
        "profile:create",
        "profile:update",
        "leave:request",
        "leave:approve",
        "leave:configure",
        "attendance:read_all",
        "attendance:mark",
        "compliance:team",
        "compliance:all",
        "payroll:read",
        "payroll:process",
        "assets:manage",
        "notification:send",
        "reports:read",
        "master_data:write",
        "system:manage_users",
    ],
}

# ── Misc constants ──────────────────────────────────────────────────

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50

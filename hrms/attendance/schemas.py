"""Attendance Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Request       → request bodies (write)
  - *Response      → response bodies (read)
  - *Summary       → aggregated read representations
"""


from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hrms.common.constants import AttendanceStatus, PunchType


# ═════════════════════════════════════════════════════════════════════
# Check in / out and punches
# ═════════════════════════════════════════════════════════════════════


class CheckInRequest(BaseModel):
    """Payload for the single daily check-in."""

    work_mode: str = Field("Office", description="Office, WFH, Remote or Hybrid")
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=1000)


class CheckOutRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)


class PunchInRequest(BaseModel):
    work_mode: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=1000)


class PunchOutRequest(BaseModel):
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=1000)


class CheckInResponse(BaseModel):
    success: bool = True
    message: str
    work_mode: str
    check_in_time: datetime
    location: Optional[str] = None


class CheckOutResponse(BaseModel):
    success: bool = True
    message: str
    check_out_time: datetime
    total_hours: float
    work_mode: str


class PunchResponse(BaseModel):
    """Result of a punch-in or punch-out."""

    success: bool = True
    message: str
    punch_time: datetime
    attendance_id: int
    work_mode: Optional[str] = None


# ═════════════════════════════════════════════════════════════════════
# Attendance rows
# ═════════════════════════════════════════════════════════════════════


class AttendanceResponse(BaseModel):
    """A single attendance day."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    attendance_date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    first_check_in: Optional[datetime] = None
    last_check_out: Optional[datetime] = None
    work_mode: str
    location: Optional[str] = None
    status: AttendanceStatus
    total_hours: Optional[float] = None
    gross_hours: Optional[float] = None
    break_hours: Optional[float] = None
    notes: Optional[str] = None
    source: str = "web"
    employee_number: Optional[str] = None
    employee_name: Optional[str] = None


class PunchRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    punch_type: PunchType
    punch_time: datetime
    punch_date: date
    location: Optional[str] = None
    notes: Optional[str] = None


class PunchPair(BaseModel):
    """An in→out pair; an unpaired ``in`` is reported as "In Progress"."""

    punch_in: datetime
    punch_in_location: Optional[str] = None
    punch_out: Optional[datetime] = None
    punch_out_location: Optional[str] = None
    hours_worked: Optional[float] = None
    status: Optional[str] = None


class TodayAttendanceResponse(BaseModel):
    has_attendance: bool
    message: Optional[str] = None
    attendance: Optional[AttendanceResponse] = None
    punches: list[PunchRecord] = []
    punch_count: int = 0
    last_punch_type: Optional[PunchType] = None
    can_punch_in: bool = True
    can_punch_out: bool = False


class AttendanceDetailResponse(BaseModel):
    attendance: AttendanceResponse
    punches: list[PunchRecord]
    punch_pairs: list[PunchPair]


# ═════════════════════════════════════════════════════════════════════
# Reports
# ═════════════════════════════════════════════════════════════════════


class ReportEmployee(BaseModel):
    id: int
    employee_number: str
    name: str
    email: Optional[str] = None


class AttendanceReportSummary(BaseModel):
    """Aggregates over the rows of an attendance report."""

    total_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    half_days: int = 0
    total_work_hours: float = 0.0
    avg_work_hours: float = 0.0


class AttendanceReportResponse(BaseModel):
    employee: Optional[ReportEmployee] = None
    summary: AttendanceReportSummary
    attendance: list[AttendanceResponse]


class AttendanceStatusSummary(BaseModel):
    """Per-status day counts for one employee and month."""

    employee_id: int
    month: int
    year: int
    total_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    late_days: int = 0
    half_days: int = 0
    leave_days: int = 0
    total_hours: float = 0.0


# ═════════════════════════════════════════════════════════════════════
# HR marking
# ═════════════════════════════════════════════════════════════════════


class MarkAttendanceRequest(BaseModel):
    """HR upsert of one employee's status for a day."""

    employee_id: int
    attendance_date: date
    status: AttendanceStatus
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    work_mode: str = "Office"
    notes: Optional[str] = Field(None, max_length=1000)

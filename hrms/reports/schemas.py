"""Report Pydantic v2 schemas — flat rows so every report also exports as CSV."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel


class AttendanceReportRow(BaseModel):
    employee_id: int
    employee_number: str
    employee_name: str
    department: Optional[str] = None
    present: int = 0
    absent: int = 0
    late: int = 0
    half_day: int = 0
    leave: int = 0
    total_days: int = 0
    total_hours: float = 0


class AttendanceReport(BaseModel):
    start_date: date
    end_date: date
    rows: list[AttendanceReportRow] = []


class LeaveReportRow(BaseModel):
    employee_id: int
    employee_number: str
    employee_name: str
    leave_type: str
    pending_count: int = 0
    approved_count: int = 0
    rejected_count: int = 0
    cancelled_count: int = 0
    approved_days: float = 0
    pending_days: float = 0


class LeaveReport(BaseModel):
    year: int
    rows: list[LeaveReportRow] = []


class PayrollReportRow(BaseModel):
    employee_id: int
    employee_number: str
    employee_name: str
    working_days: int
    present_days: int
    gross_salary: float
    total_deductions: float
    net_salary: float
    status: str


class PayrollTotals(BaseModel):
    employees: int = 0
    gross: float = 0
    deductions: float = 0
    net: float = 0


class PayrollReport(BaseModel):
    month: int
    year: int
    run_id: Optional[int] = None
    run_status: Optional[str] = None
    rows: list[PayrollReportRow] = []
    totals: PayrollTotals = PayrollTotals()


class HeadcountBucket(BaseModel):
    name: str
    count: int


class HeadcountReport(BaseModel):
    total: int = 0
    by_department: list[HeadcountBucket] = []
    by_designation: list[HeadcountBucket] = []
    by_location: list[HeadcountBucket] = []
    by_employment_status: list[HeadcountBucket] = []

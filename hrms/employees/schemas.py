"""Employee request and response models.

Write models share two field groups: ``_PersonalDetails`` (what an
employee may edit on their own profile) and ``_Placement`` (where they
sit in the organisation, HR-only).
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from hrms.common.constants import EmploymentStatus, UserRole
from hrms.common.validators import not_null


class EmployeeBrief(BaseModel):
    """Compact reference used in team lists, manager links and user admin."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_number: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    role: UserRole
    is_active: bool = True


class EmployeeResponse(EmployeeBrief):
    attendance_number: Optional[str] = None
    middle_name: Optional[str] = None
    personal_email: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    blood_group: Optional[str] = None
    marital_status: Optional[str] = None

    reporting_manager_id: Optional[int] = None
    department_id: Optional[int] = None
    designation_id: Optional[int] = None
    location_id: Optional[int] = None
    leave_plan_id: Optional[int] = None

    current_address: Optional[str] = None
    permanent_address: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    spouse_name: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    pan_number: Optional[str] = None
    pf_number: Optional[str] = None
    uan_number: Optional[str] = None

    employment_type: Optional[str] = None
    employment_status: EmploymentStatus
    date_of_joining: Optional[date] = None
    probation_end_date: Optional[date] = None
    resignation_date: Optional[date] = None
    last_working_date: Optional[date] = None
    exit_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class EmployeeDetail(EmployeeResponse):
    """``EmployeeResponse`` with lookup names resolved and the manager embedded."""

    department_name: Optional[str] = None
    designation_name: Optional[str] = None
    location_name: Optional[str] = None
    leave_plan_name: Optional[str] = None
    reporting_manager: Optional[EmployeeBrief] = None
    direct_reports_count: int = 0


# ── Write models ────────────────────────────────────────────────────

class _PersonalDetails(BaseModel):
    phone: Optional[str] = Field(None, max_length=20)
    personal_email: Optional[EmailStr] = None
    blood_group: Optional[str] = None
    marital_status: Optional[str] = None
    current_address: Optional[str] = None
    permanent_address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None


class _Placement(BaseModel):
    reporting_manager_id: Optional[int] = None
    department_id: Optional[int] = None
    designation_id: Optional[int] = None
    location_id: Optional[int] = None
    leave_plan_id: Optional[int] = None
    employment_type: Optional[str] = None


class ProfileUpdate(_PersonalDetails):
    """Self-service edit of ``/employees/profile/me``."""


class EmployeeCreate(_PersonalDetails, _Placement):
    employee_number: str = Field(..., min_length=1, max_length=20)
    attendance_number: Optional[str] = Field(None, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    middle_name: Optional[str] = Field(None, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    role: UserRole = UserRole.employee
    # Omitted for staff who never sign in to the portal
    password: Optional[str] = Field(None, min_length=8)
    date_of_joining: date


class EmployeeUpdate(_PersonalDetails, _Placement):
    """HR partial update; only fields present in the body are applied."""

    attendance_number: Optional[str] = Field(None, max_length=50)
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    middle_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    spouse_name: Optional[str] = None
    pan_number: Optional[str] = None
    pf_number: Optional[str] = None
    uan_number: Optional[str] = None
    employment_status: Optional[EmploymentStatus] = None
    date_of_joining: Optional[date] = None
    probation_end_date: Optional[date] = None
    resignation_date: Optional[date] = None
    last_working_date: Optional[date] = None
    exit_reason: Optional[str] = None

    reject_nulls = not_null("first_name", "last_name", "email", "employment_status")

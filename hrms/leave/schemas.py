"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Response           → response bodies (read)
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from hrms.common.constants import LeaveStatus
from hrms.common.validators import not_null


# ═════════════════════════════════════════════════════════════════════
# Leave Type
# ═════════════════════════════════════════════════════════════════════


class LeaveTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=20)
    description: Optional[str] = None
    days_allowed: float = Field(0, ge=0)
    is_paid: bool = True
    can_carry_forward: bool = False
    max_carry_forward_days: float = Field(0, ge=0)
    is_active: bool = True


class LeaveTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    days_allowed: Optional[float] = Field(None, ge=0)
    is_paid: Optional[bool] = None
    can_carry_forward: Optional[bool] = None
    max_carry_forward_days: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None

    reject_nulls = not_null(
        "name", "days_allowed", "is_paid", "can_carry_forward", "max_carry_forward_days", "is_active",
    )


class LeaveTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    description: Optional[str] = None
    days_allowed: float
    is_paid: bool
    can_carry_forward: bool
    max_carry_forward_days: float
    is_active: bool


# ═════════════════════════════════════════════════════════════════════
# Leave Plan
# ═════════════════════════════════════════════════════════════════════


class PlanAllocation(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    leave_type_id: int
    days_allocated: float = Field(..., ge=0)
    prorate_on_joining: bool = False


class LeavePlanCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    leave_year_start_month: int = Field(1, ge=1, le=12)
    is_active: bool = True
    allocations: list[PlanAllocation] = []


class LeavePlanUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    leave_year_start_month: Optional[int] = Field(None, ge=1, le=12)
    is_active: Optional[bool] = None
    allocations: Optional[list[PlanAllocation]] = None

    reject_nulls = not_null("name", "leave_year_start_month", "is_active")


class LeavePlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    leave_year_start_month: int
    is_active: bool
    allocations: list[PlanAllocation] = []


# ═════════════════════════════════════════════════════════════════════
# Balances
# ═════════════════════════════════════════════════════════════════════


class InitializeBalanceRequest(BaseModel):
    leave_year: Optional[int] = Field(None, ge=2000, le=2100)


class LeaveBalanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    leave_type_id: int
    leave_type_name: Optional[str] = None
    leave_type_code: Optional[str] = None
    is_paid: Optional[bool] = None
    leave_year: int
    allocated_days: float
    used_days: float
    carry_forward_days: float
    available_days: float


class CarryForwardRequest(BaseModel):
    employee_id: int
    from_year: int
    to_year: int

    @model_validator(mode="after")
    def _years_in_order(self) -> "CarryForwardRequest":
        if self.to_year <= self.from_year:
            raise ValueError("to_year must be after from_year")
        return self


# ═════════════════════════════════════════════════════════════════════
# Leave applications
# ═════════════════════════════════════════════════════════════════════


class LeaveApply(BaseModel):
    leave_type_id: int
    start_date: date
    end_date: date
    total_days: Optional[float] = Field(None, gt=0)
    reason: Optional[str] = Field(None, max_length=1000)


class LeaveReject(BaseModel):
    rejection_reason: Optional[str] = Field(None, max_length=1000)


class WfhRequestCreate(BaseModel):
    date: date
    work_mode: str
    reason: Optional[str] = Field(None, max_length=1000)


class LeaveResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    employee_name: Optional[str] = None
    leave_type_id: Optional[int] = None
    leave_type: Optional[str] = None
    leave_type_name: Optional[str] = None
    start_date: date
    end_date: date
    total_days: float
    reason: Optional[str] = None
    status: LeaveStatus
    applied_at: datetime
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

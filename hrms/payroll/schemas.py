"""Payroll Pydantic v2 schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hrms.common.constants import PayrollRunStatus, PayslipStatus


# ═════════════════════════════════════════════════════════════════════
# Salary structure
# ═════════════════════════════════════════════════════════════════════


class SalaryStructureUpdate(BaseModel):
    """Upsert payload; omitted components are stored as 0."""

    basic: float = Field(0, ge=0)
    hra: float = Field(0, ge=0)
    conveyance: float = Field(0, ge=0)
    special_allowance: float = Field(0, ge=0)
    pf: float = Field(0, ge=0)
    esi: float = Field(0, ge=0)
    professional_tax: float = Field(0, ge=0)
    other_deductions: float = Field(0, ge=0)
    effective_from: Optional[date] = None


class SalaryStructureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    basic: float
    hra: float
    conveyance: float
    special_allowance: float
    pf: float
    esi: float
    professional_tax: float
    other_deductions: float
    effective_from: Optional[date] = None
    updated_at: datetime


# ═════════════════════════════════════════════════════════════════════
# Runs and slips
# ═════════════════════════════════════════════════════════════════════


class PayrollPeriodRequest(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)


class PayslipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    payroll_run_id: int
    employee_id: int
    month: int
    year: int
    basic: float
    hra: float
    conveyance: float
    special_allowance: float
    gross_salary: float
    pf: float
    esi: float
    professional_tax: float
    other_deductions: float
    total_deductions: float
    net_salary: float
    working_days: int
    present_days: int
    status: PayslipStatus
    employee_name: Optional[str] = None
    employee_number: Optional[str] = None


class PayrollRunResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    month: int
    year: int
    status: PayrollRunStatus
    total_employees: int
    total_gross: float
    total_deductions: float
    total_net: float
    generated_by: Optional[int] = None
    generated_at: datetime
    finalized_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    slip_count: int = 0
    total_payout: float = 0.0


class PayrollRunDetail(PayrollRunResponse):
    slips: list[PayslipResponse] = []


class PayrollGenerateResponse(BaseModel):
    success: bool = True
    message: str
    run_id: int
    processed: int


class RecalculateResponse(BaseModel):
    success: bool = True
    slip_id: int
    net_salary: float

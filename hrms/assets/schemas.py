"""Asset Pydantic v2 schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from hrms.common.constants import AllocationStatus, AssetCondition, AssetStatus
from hrms.common.validators import not_null


# ── Catalogue ───────────────────────────────────────────────────────

class AssetCreate(BaseModel):
    asset_code: str = Field(..., min_length=1, max_length=50)
    asset_type: str = Field(..., min_length=1, max_length=50)
    asset_name: str = Field(..., min_length=1, max_length=200)
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    serial_number: Optional[str] = Field(None, max_length=100)
    purchase_date: Optional[date] = None
    purchase_cost: Optional[float] = Field(None, ge=0)
    condition: AssetCondition = AssetCondition.good
    location: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None


class AssetUpdate(BaseModel):
    asset_type: Optional[str] = Field(None, min_length=1, max_length=50)
    asset_name: Optional[str] = Field(None, min_length=1, max_length=200)
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    serial_number: Optional[str] = Field(None, max_length=100)
    purchase_date: Optional[date] = None
    purchase_cost: Optional[float] = Field(None, ge=0)
    condition: Optional[AssetCondition] = None
    location: Optional[str] = Field(None, max_length=200)
    status: Optional[AssetStatus] = None
    notes: Optional[str] = None

    reject_nulls = not_null("asset_type", "asset_name", "condition", "status")


class AssetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    asset_code: str
    asset_type: str
    asset_name: str
    brand: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    purchase_date: Optional[date] = None
    purchase_cost: Optional[float] = None
    condition: AssetCondition
    location: Optional[str] = None
    status: AssetStatus
    notes: Optional[str] = None
    created_at: datetime
    allocated_to: Optional[int] = None
    allocated_to_name: Optional[str] = None


# ── Allocation ──────────────────────────────────────────────────────

class AllocateRequest(BaseModel):
    asset_id: int
    employee_id: int
    allocated_date: date
    expected_return_date: Optional[date] = None
    condition_at_allocation: AssetCondition = AssetCondition.good
    allocation_remarks: Optional[str] = None

    @model_validator(mode="after")
    def _check_dates(self) -> "AllocateRequest":
        if self.expected_return_date and self.expected_return_date < self.allocated_date:
            raise ValueError("expected_return_date must be on or after allocated_date")
        return self


class ReturnRequest(BaseModel):
    returned_date: Optional[date] = None
    condition_at_return: AssetCondition = AssetCondition.good
    return_remarks: Optional[str] = None


class AllocationStatusUpdate(BaseModel):
    status: Literal["active", "returned", "lost", "damaged"]
    remarks: Optional[str] = None


class AllocationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    asset_id: int
    employee_id: int
    allocated_date: date
    expected_return_date: Optional[date] = None
    returned_date: Optional[date] = None
    condition_at_allocation: AssetCondition
    condition_at_return: Optional[AssetCondition] = None
    allocation_remarks: Optional[str] = None
    return_remarks: Optional[str] = None
    status: AllocationStatus
    allocated_by: Optional[int] = None
    received_by: Optional[int] = None
    asset_code: Optional[str] = None
    asset_name: Optional[str] = None
    asset_type: Optional[str] = None
    employee_name: Optional[str] = None
    employee_number: Optional[str] = None


class AssetDetail(AssetResponse):
    current_allocation: Optional[AllocationResponse] = None


# ── Reports ─────────────────────────────────────────────────────────

class AssetTypeCount(BaseModel):
    asset_type: str
    total_count: int
    allocated_count: int


class DepartmentAllocationCount(BaseModel):
    department_name: Optional[str] = None
    allocated_count: int


class OverdueReturn(AllocationResponse):
    days_overdue: int


class AssetReport(BaseModel):
    summary: dict[str, int]
    by_asset_type: list[AssetTypeCount] = []
    by_department: list[DepartmentAllocationCount] = []
    overdue_returns: list[OverdueReturn] = []

"""Holiday Pydantic v2 schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hrms.common.validators import not_null


class HolidayCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    holiday_date: date
    holiday_type: str = Field("public", max_length=50)
    location: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    is_optional: bool = False


class HolidayUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    holiday_date: Optional[date] = None
    holiday_type: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    is_optional: Optional[bool] = None

    reject_nulls = not_null("name", "holiday_date", "holiday_type", "is_optional")


class HolidayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    holiday_date: date
    holiday_type: str
    location: Optional[str] = None
    description: Optional[str] = None
    is_optional: bool
    created_at: datetime

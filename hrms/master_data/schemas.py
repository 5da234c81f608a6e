"""Master-data Pydantic v2 schemas."""


from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from hrms.common.validators import not_null


class MasterDataCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    code: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    is_active: bool = True
    attributes: Optional[dict[str, Any]] = None


class MasterDataUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    code: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    attributes: Optional[dict[str, Any]] = None

    reject_nulls = not_null("name", "is_active")


class MasterDataResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    attributes: Optional[dict[str, Any]] = None
    created_at: datetime


class MasterDataMessage(BaseModel):
    """``{success, message}`` envelope returned by write endpoints."""

    success: bool = True
    message: str
    data: Optional[MasterDataResponse] = None

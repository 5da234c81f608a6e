"""Announcement Pydantic v2 schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hrms.common.constants import AnnouncementPriority, AnnouncementType
from hrms.common.validators import not_null


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    announcement_type: AnnouncementType = AnnouncementType.general
    priority: AnnouncementPriority = AnnouncementPriority.medium
    expires_at: Optional[datetime] = None
    notify_employees: bool = False


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    announcement_type: Optional[AnnouncementType] = None
    priority: Optional[AnnouncementPriority] = None
    expires_at: Optional[datetime] = None
    is_active: Optional[bool] = None

    reject_nulls = not_null("title", "content", "announcement_type", "priority", "is_active")


class AnnouncementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    announcement_type: AnnouncementType
    priority: AnnouncementPriority
    is_active: bool
    expires_at: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    author_name: Optional[str] = None

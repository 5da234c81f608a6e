from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hrms.common.constants import NotificationType


class _Outgoing(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)


class NotificationSend(_Outgoing):
    employee_id: int
    type: NotificationType = NotificationType.info
    action_url: Optional[str] = None


class NotificationBroadcast(_Outgoing):
    """Every working employee, or only those in ``department_id``."""

    type: NotificationType = NotificationType.announcement
    department_id: Optional[int] = None


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    notification_type: NotificationType
    title: str
    message: str
    action_url: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[int] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class NotificationListResponse(BaseModel):
    data: list[NotificationResponse]
    unread: int

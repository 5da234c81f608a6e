"""Per-employee inbox rows."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.constants import NotificationType
from hrms.database import Base, enum_column


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_recipient_read", "recipient_id", "is_read"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    recipient_id: Mapped[int] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"))
    notification_type: Mapped[NotificationType] = mapped_column(
        enum_column(NotificationType, "notification_type"), default=NotificationType.info,
    )
    title: Mapped[str] = mapped_column(String(200))
    message: Mapped[str] = mapped_column(Text)
    # Client route to open when the notification is tapped
    action_url: Mapped[Optional[str]] = mapped_column(String(500))
    entity_type: Mapped[Optional[str]] = mapped_column(String(50))
    entity_id: Mapped[Optional[int]]
    is_read: Mapped[bool] = mapped_column(default=False)
    read_at: Mapped[Optional[datetime]]
    created_at: Mapped[datetime] = mapped_column(default=datetime.now)

    def __repr__(self) -> str:
        state = "read" if self.is_read else "unread"
        return f"<Notification #{self.id} -> {self.recipient_id} {state}>"

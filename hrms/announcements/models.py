"""Announcement ORM model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.audit import AuditMixin
from hrms.common.constants import AnnouncementPriority, AnnouncementType
from hrms.database import Base, enum_column


class Announcement(Base, AuditMixin):
    __tablename__ = "announcements"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    content: Mapped[str] = mapped_column(sa.Text, nullable=False)
    announcement_type: Mapped[AnnouncementType] = mapped_column(
        enum_column(AnnouncementType, "announcement_type"),
        nullable=False,
        default=AnnouncementType.general,
    )
    priority: Mapped[AnnouncementPriority] = mapped_column(
        enum_column(AnnouncementPriority, "announcement_priority"),
        nullable=False,
        default=AnnouncementPriority.medium,
    )
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime)

    def __repr__(self) -> str:
        return f"<Announcement {self.id} {self.title!r}>"

"""Holiday ORM model."""

from __future__ import annotations

from datetime import date
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.audit import AuditMixin
from hrms.database import Base


class Holiday(Base, AuditMixin):
    __tablename__ = "holidays"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    holiday_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    holiday_type: Mapped[str] = mapped_column(sa.String(50), nullable=False, default="public")
    location: Mapped[Optional[str]] = mapped_column(sa.String(100))
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    is_optional: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)

    __table_args__ = (
        sa.UniqueConstraint("holiday_date", "name", "location", name="uq_holiday_date_name_loc"),
        sa.Index("ix_holidays_date", "holiday_date"),
    )

    def __repr__(self) -> str:
        return f"<Holiday {self.holiday_date} {self.name}>"

"""Daily per-project work update ORM model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.audit import TimestampMixin
from hrms.database import Base


class WorkUpdate(Base, TimestampMixin):
    __tablename__ = "work_updates"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    project_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("projects.id"), nullable=False,
    )
    update_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    description: Mapped[str] = mapped_column(sa.Text, nullable=False)
    hours_worked: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 2), nullable=False, default=Decimal("0"),
    )
    tasks_completed: Mapped[Optional[str]] = mapped_column(sa.Text)
    blockers: Mapped[Optional[str]] = mapped_column(sa.Text)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, default="submitted")

    __table_args__ = (
        sa.UniqueConstraint(
            "employee_id", "project_id", "update_date", name="uq_work_update_day",
        ),
    )

    def __repr__(self) -> str:
        return f"<WorkUpdate emp={self.employee_id} proj={self.project_id} {self.update_date}>"

"""Dashboard models.

The role dashboards only aggregate existing tables; the one row type
owned here is the birthday wish colleagues leave for each other.
"""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.database import Base


class BirthdayWish(Base):
    __tablename__ = "birthday_wishes"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    wished_by: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    wish_message: Mapped[str] = mapped_column(sa.Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime, nullable=False, default=datetime.now,
    )

    __table_args__ = (
        sa.Index("ix_birthday_wishes_employee_id", "employee_id"),
    )

    def __repr__(self) -> str:
        return f"<BirthdayWish to={self.employee_id} from={self.wished_by}>"

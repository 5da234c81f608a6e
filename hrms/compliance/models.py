"""Payroll-period lock: once a month is locked, timesheets for it are frozen."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.audit import TimestampMixin
from hrms.common.constants import PeriodLockStatus
from hrms.database import Base, enum_column


def period_key(month: int, year: int) -> str:
    """``YYYY-MM`` key used for :attr:`PayrollPeriodLock.payroll_period`."""
    return f"{year:04d}-{month:02d}"


class PayrollPeriodLock(Base, TimestampMixin):
    __tablename__ = "payroll_period_locks"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    payroll_period: Mapped[str] = mapped_column(sa.String(7), unique=True, nullable=False)
    lock_status: Mapped[PeriodLockStatus] = mapped_column(
        enum_column(PeriodLockStatus, "period_lock_status"),
        nullable=False,
        default=PeriodLockStatus.open,
    )
    pending_verifications: Mapped[int] = mapped_column(
        sa.Integer, nullable=False, default=0,
    )
    locked_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"),
    )
    locked_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime)
    reopened_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"),
    )
    reopened_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime)
    reopen_reason: Mapped[Optional[str]] = mapped_column(sa.Text)

    @property
    def is_locked(self) -> bool:
        return self.lock_status == PeriodLockStatus.locked

    def __repr__(self) -> str:
        return f"<PayrollPeriodLock {self.payroll_period} {self.lock_status.value}>"

"""Attendance ORM models: the daily Attendance row and its AttendancePunch events."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.audit import TimestampMixin
from hrms.common.constants import AttendanceStatus, PunchType
from hrms.database import Base, enum_column


class Attendance(Base, TimestampMixin):
    """One row per employee per day; simple check-in/out and multi-punch share it."""

    __tablename__ = "attendance"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    attendance_date: Mapped[date] = mapped_column(sa.Date, nullable=False)

    # Simple check-in / check-out
    check_in: Mapped[Optional[datetime]] = mapped_column(sa.DateTime)
    check_out: Mapped[Optional[datetime]] = mapped_column(sa.DateTime)

    # Multi-punch aggregates
    first_check_in: Mapped[Optional[datetime]] = mapped_column(sa.DateTime)
    last_check_out: Mapped[Optional[datetime]] = mapped_column(sa.DateTime)

    work_mode: Mapped[str] = mapped_column(sa.String(20), nullable=False, default="Office")
    location: Mapped[Optional[str]] = mapped_column(sa.String(255))
    status: Mapped[AttendanceStatus] = mapped_column(
        enum_column(AttendanceStatus, "attendance_status"),
        nullable=False,
        default=AttendanceStatus.present,
    )
    total_hours: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(6, 2))
    gross_hours: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(6, 2))
    break_hours: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(6, 2))
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    source: Mapped[str] = mapped_column(sa.String(20), nullable=False, default="web")
    ip_address: Mapped[Optional[str]] = mapped_column(sa.String(45))
    device_info: Mapped[Optional[str]] = mapped_column(sa.Text)

    __table_args__ = (
        sa.UniqueConstraint("employee_id", "attendance_date", name="uq_attendance_employee_date"),
        sa.Index("ix_attendance_date", "attendance_date"),
    )

    def __repr__(self) -> str:
        return f"<Attendance emp={self.employee_id} {self.attendance_date} {self.status.value}>"


class AttendancePunch(Base):
    __tablename__ = "attendance_punches"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    attendance_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("attendance.id", ondelete="CASCADE"), nullable=False,
    )
    employee_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    punch_type: Mapped[PunchType] = mapped_column(
        enum_column(PunchType, "punch_type"), nullable=False,
    )
    punch_time: Mapped[datetime] = mapped_column(sa.DateTime, nullable=False)
    punch_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    location: Mapped[Optional[str]] = mapped_column(sa.String(255))
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    ip_address: Mapped[Optional[str]] = mapped_column(sa.String(45))
    device_info: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime, nullable=False, default=datetime.now,
    )

    __table_args__ = (
        sa.Index("ix_attendance_punches_attendance_id", "attendance_id"),
        sa.Index("ix_attendance_punches_employee_date", "employee_id", "punch_date"),
    )

    def __repr__(self) -> str:
        return f"<AttendancePunch emp={self.employee_id} {self.punch_type.value} {self.punch_time}>"

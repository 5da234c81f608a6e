"""Timesheet ORM model — one row per employee, day and (optional) project."""

import datetime as dt
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.audit import TimestampMixin
from hrms.common.constants import (
    ClientValidationStatus,
    TimesheetStatus,
    TimesheetType,
)
from hrms.database import Base, enum_column


class Timesheet(Base, TimestampMixin):
    """Daily hours, either *regular* (no project) or *project* based.

    Project rows additionally carry the client-side validation outcome
    recorded by HR once the client confirms the billed hours.
    """

    __tablename__ = "timesheets"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    project_id: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("projects.id"),
    )
    date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    timesheet_type: Mapped[TimesheetType] = mapped_column(
        enum_column(TimesheetType, "timesheet_type"),
        nullable=False,
        default=TimesheetType.regular,
    )
    hours_breakdown: Mapped[Optional[dict]] = mapped_column(sa.JSON)
    total_hours: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 2), nullable=False, default=Decimal("0"),
    )
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    status: Mapped[TimesheetStatus] = mapped_column(
        enum_column(TimesheetStatus, "timesheet_status"),
        nullable=False,
        default=TimesheetStatus.draft,
    )
    submission_date: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime)
    verified_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"),
    )
    verified_at: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime)
    review_remarks: Mapped[Optional[str]] = mapped_column(sa.Text)

    # ── Client validation (project timesheets) ──────────────────────
    client_timesheet_status: Mapped[Optional[ClientValidationStatus]] = mapped_column(
        enum_column(ClientValidationStatus, "client_validation_status"),
    )
    client_reported_hours: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(6, 2))
    validation_remarks: Mapped[Optional[str]] = mapped_column(sa.Text)
    validated_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"),
    )
    validated_at: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime)

    __table_args__ = (
        sa.Index("ix_timesheets_employee_date", "employee_id", "date"),
        sa.Index("ix_timesheets_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Timesheet emp={self.employee_id} {self.date} "
            f"{self.timesheet_type.value} {self.status.value}>"
        )

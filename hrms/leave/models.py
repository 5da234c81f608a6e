"""Leave ORM models: LeaveType, LeavePlan, LeavePlanAllocation, LeaveBalance, Leave."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hrms.common.audit import TimestampMixin
from hrms.common.constants import LeaveStatus
from hrms.database import Base, enum_column


class LeaveType(Base, TimestampMixin):
    __tablename__ = "leave_types"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    code: Mapped[str] = mapped_column(sa.String(20), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    days_allowed: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), nullable=False, default=Decimal("0"),
    )
    is_paid: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
    can_carry_forward: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=False,
    )
    max_carry_forward_days: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), nullable=False, default=Decimal("0"),
    )
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<LeaveType {self.code}>"


class LeavePlan(Base, TimestampMixin):
    __tablename__ = "leave_plans"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(sa.String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    leave_year_start_month: Mapped[int] = mapped_column(
        sa.Integer, nullable=False, default=1,
    )
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    allocations: Mapped[list[LeavePlanAllocation]] = relationship(
        back_populates="leave_plan",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<LeavePlan {self.name}>"


class LeavePlanAllocation(Base):
    __tablename__ = "leave_plan_allocations"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    leave_plan_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("leave_plans.id", ondelete="CASCADE"), nullable=False,
    )
    leave_type_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("leave_types.id"), nullable=False,
    )
    days_allocated: Mapped[Decimal] = mapped_column(sa.Numeric(5, 1), nullable=False)
    prorate_on_joining: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=False,
    )

    leave_plan: Mapped[LeavePlan] = relationship(back_populates="allocations")

    __table_args__ = (
        sa.UniqueConstraint("leave_plan_id", "leave_type_id", name="uq_plan_leave_type"),
    )


class LeaveBalance(Base, TimestampMixin):
    __tablename__ = "employee_leave_balances"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    leave_type_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("leave_types.id"), nullable=False,
    )
    leave_year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    allocated_days: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), nullable=False, default=Decimal("0"),
    )
    used_days: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), nullable=False, default=Decimal("0"),
    )
    carry_forward_days: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), nullable=False, default=Decimal("0"),
    )
    available_days: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), nullable=False, default=Decimal("0"),
    )

    __table_args__ = (
        sa.UniqueConstraint(
            "employee_id", "leave_type_id", "leave_year", name="uq_leave_balance",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<LeaveBalance emp={self.employee_id} type={self.leave_type_id} "
            f"{self.leave_year} avail={self.available_days}>"
        )


class Leave(Base, TimestampMixin):
    """A leave application, or a WFH/Remote request (``leave_type`` code, no type id)."""

    __tablename__ = "leaves"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    leave_type_id: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("leave_types.id"),
    )
    leave_type: Mapped[Optional[str]] = mapped_column(sa.String(20))
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    total_days: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), nullable=False, default=Decimal("1"),
    )
    reason: Mapped[Optional[str]] = mapped_column(sa.Text)
    status: Mapped[LeaveStatus] = mapped_column(
        enum_column(LeaveStatus, "leave_status"),
        nullable=False,
        default=LeaveStatus.pending,
    )
    applied_at: Mapped[datetime] = mapped_column(
        sa.DateTime, nullable=False, default=datetime.now,
    )
    approved_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"),
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime)
    rejection_reason: Mapped[Optional[str]] = mapped_column(sa.Text)

    __table_args__ = (
        sa.Index("ix_leaves_employee_dates", "employee_id", "start_date", "end_date"),
        sa.Index("ix_leaves_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Leave emp={self.employee_id} {self.start_date}..{self.end_date} "
            f"{self.status.value}>"
        )

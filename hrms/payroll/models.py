"""Payroll ORM models: SalaryStructure, PayrollRun, PayrollSlip."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.audit import TimestampMixin
from hrms.common.constants import PayrollRunStatus, PayslipStatus
from hrms.database import Base, enum_column

_MONEY = sa.Numeric(12, 2)


def _money_column():
    return mapped_column(_MONEY, nullable=False, default=Decimal("0"))


class SalaryStructure(Base, TimestampMixin):
    """Monthly salary components for one employee."""

    __tablename__ = "salary_structures"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        sa.Integer,
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    # Earnings
    basic: Mapped[Decimal] = _money_column()
    hra: Mapped[Decimal] = _money_column()
    conveyance: Mapped[Decimal] = _money_column()
    special_allowance: Mapped[Decimal] = _money_column()

    # Deductions
    pf: Mapped[Decimal] = _money_column()
    esi: Mapped[Decimal] = _money_column()
    professional_tax: Mapped[Decimal] = _money_column()
    other_deductions: Mapped[Decimal] = _money_column()

    effective_from: Mapped[Optional[date]] = mapped_column(sa.Date)

    def __repr__(self) -> str:
        return f"<SalaryStructure emp={self.employee_id} basic={self.basic}>"


class PayrollRun(Base, TimestampMixin):
    __tablename__ = "payroll_runs"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    month: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    status: Mapped[PayrollRunStatus] = mapped_column(
        enum_column(PayrollRunStatus, "payroll_run_status"),
        nullable=False,
        default=PayrollRunStatus.processing,
    )
    total_employees: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    total_gross: Mapped[Decimal] = _money_column()
    total_deductions: Mapped[Decimal] = _money_column()
    total_net: Mapped[Decimal] = _money_column()
    generated_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"),
    )
    generated_at: Mapped[datetime] = mapped_column(
        sa.DateTime, nullable=False, default=datetime.now,
    )
    finalized_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime)
    paid_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime)

    __table_args__ = (
        sa.UniqueConstraint("month", "year", name="uq_payroll_run_period"),
    )

    def __repr__(self) -> str:
        return f"<PayrollRun {self.year}-{self.month:02d} {self.status.value}>"


class PayrollSlip(Base, TimestampMixin):
    __tablename__ = "payroll_slips"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    payroll_run_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("payroll_runs.id", ondelete="CASCADE"), nullable=False,
    )
    employee_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    month: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    year: Mapped[int] = mapped_column(sa.Integer, nullable=False)

    basic: Mapped[Decimal] = _money_column()
    hra: Mapped[Decimal] = _money_column()
    conveyance: Mapped[Decimal] = _money_column()
    special_allowance: Mapped[Decimal] = _money_column()
    gross_salary: Mapped[Decimal] = _money_column()

    pf: Mapped[Decimal] = _money_column()
    esi: Mapped[Decimal] = _money_column()
    professional_tax: Mapped[Decimal] = _money_column()
    other_deductions: Mapped[Decimal] = _money_column()
    total_deductions: Mapped[Decimal] = _money_column()

    net_salary: Mapped[Decimal] = _money_column()
    working_days: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=30)
    present_days: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    status: Mapped[PayslipStatus] = mapped_column(
        enum_column(PayslipStatus, "payslip_status"),
        nullable=False,
        default=PayslipStatus.generated,
    )

    __table_args__ = (
        sa.UniqueConstraint("payroll_run_id", "employee_id", name="uq_payroll_slip_run_employee"),
        sa.Index("ix_payroll_slips_employee_period", "employee_id", "year", "month"),
    )

    def __repr__(self) -> str:
        return f"<PayrollSlip emp={self.employee_id} {self.year}-{self.month:02d} net={self.net_salary}>"

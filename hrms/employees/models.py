"""Employee ORM model — the central entity every other domain points at."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.audit import TimestampMixin
from hrms.common.constants import EmploymentStatus, UserRole
from hrms.database import Base, enum_column


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(Base, TimestampMixin):
    """Core employee record, also the login account."""

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)

    # ── Identifiers ─────────────────────────────────────────────────
    employee_number: Mapped[str] = mapped_column(
        sa.String(20), unique=True, nullable=False,
    )
    attendance_number: Mapped[Optional[str]] = mapped_column(sa.String(50))

    # ── Name / contact ──────────────────────────────────────────────
    first_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    middle_name: Mapped[Optional[str]] = mapped_column(sa.String(100))
    last_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    personal_email: Mapped[Optional[str]] = mapped_column(sa.String(255))
    phone: Mapped[Optional[str]] = mapped_column(sa.String(20))
    gender: Mapped[Optional[str]] = mapped_column(sa.String(20))
    date_of_birth: Mapped[Optional[date]] = mapped_column(sa.Date)
    blood_group: Mapped[Optional[str]] = mapped_column(sa.String(5))
    marital_status: Mapped[Optional[str]] = mapped_column(sa.String(20))

    # ── Auth ────────────────────────────────────────────────────────
    role: Mapped[UserRole] = mapped_column(
        enum_column(UserRole, "user_role"), nullable=False, default=UserRole.employee,
    )
    password_hash: Mapped[Optional[str]] = mapped_column(sa.String(255))

    # ── Org mapping (master data) ───────────────────────────────────
    reporting_manager_id: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"),
    )
    department_id: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("master_data_items.id"),
    )
    designation_id: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("master_data_items.id"),
    )
    location_id: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("master_data_items.id"),
    )
    business_unit_id: Mapped[Optional[int]] = mapped_column(sa.Integer)
    legal_entity_id: Mapped[Optional[int]] = mapped_column(sa.Integer)
    cost_center_id: Mapped[Optional[int]] = mapped_column(sa.Integer)
    band_id: Mapped[Optional[int]] = mapped_column(sa.Integer)
    pay_grade_id: Mapped[Optional[int]] = mapped_column(sa.Integer)
    leave_plan_id: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("leave_plans.id"),
    )
    shift_policy_id: Mapped[Optional[int]] = mapped_column(sa.Integer)
    weekly_off_policy_id: Mapped[Optional[int]] = mapped_column(sa.Integer)
    holiday_list_id: Mapped[Optional[int]] = mapped_column(sa.Integer)

    # ── Address / family ────────────────────────────────────────────
    current_address: Mapped[Optional[str]] = mapped_column(sa.Text)
    permanent_address: Mapped[Optional[str]] = mapped_column(sa.Text)
    father_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    mother_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    spouse_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    emergency_contact_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    emergency_contact_phone: Mapped[Optional[str]] = mapped_column(sa.String(20))

    # ── Statutory ───────────────────────────────────────────────────
    pan_number: Mapped[Optional[str]] = mapped_column(sa.String(20))
    pf_number: Mapped[Optional[str]] = mapped_column(sa.String(50))
    uan_number: Mapped[Optional[str]] = mapped_column(sa.String(50))

    # ── Employment lifecycle ────────────────────────────────────────
    employment_type: Mapped[Optional[str]] = mapped_column(sa.String(50))
    employment_status: Mapped[EmploymentStatus] = mapped_column(
        enum_column(EmploymentStatus, "employment_status"),
        nullable=False,
        default=EmploymentStatus.working,
    )
    date_of_joining: Mapped[Optional[date]] = mapped_column(sa.Date)
    probation_end_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    resignation_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    last_working_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    exit_reason: Mapped[Optional[str]] = mapped_column(sa.Text)

    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime)

    __table_args__ = (
        sa.Index("ix_employees_reporting_manager_id", "reporting_manager_id"),
        sa.Index("ix_employees_department_id", "department_id"),
    )

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p)

    def __repr__(self) -> str:
        return f"<Employee {self.employee_number} {self.first_name} {self.last_name}>"

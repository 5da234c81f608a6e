"""Project ORM models: Project and ProjectAssignment."""

from __future__ import annotations

from datetime import date
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.audit import AuditMixin, TimestampMixin
from hrms.common.constants import AssignmentStatus, ProjectStatus
from hrms.database import Base, enum_column


class Project(Base, AuditMixin):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    project_code: Mapped[str] = mapped_column(sa.String(50), unique=True, nullable=False)
    project_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    client_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    status: Mapped[ProjectStatus] = mapped_column(
        enum_column(ProjectStatus, "project_status"),
        nullable=False,
        default=ProjectStatus.active,
    )
    manager_id: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"),
    )

    def __repr__(self) -> str:
        return f"<Project {self.project_code}>"


class ProjectAssignment(Base, TimestampMixin):
    """An employee's membership of a project over a date range."""

    __tablename__ = "project_assignments"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
    )
    employee_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    role: Mapped[Optional[str]] = mapped_column(sa.String(100))
    allocation_percentage: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=100)
    assignment_start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    assignment_end_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    status: Mapped[AssignmentStatus] = mapped_column(
        enum_column(AssignmentStatus, "assignment_status"),
        nullable=False,
        default=AssignmentStatus.active,
    )
    assigned_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"),
    )

    __table_args__ = (
        sa.Index("ix_project_assignments_employee", "employee_id", "status"),
        sa.Index("ix_project_assignments_project", "project_id"),
    )

    def is_active_on(self, day: date) -> bool:
        return (
            self.status == AssignmentStatus.active
            and self.assignment_start_date <= day
            and (self.assignment_end_date is None or self.assignment_end_date >= day)
        )

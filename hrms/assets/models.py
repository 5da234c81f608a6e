"""Asset catalogue and allocation ORM models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.audit import AuditMixin, TimestampMixin
from hrms.common.constants import AllocationStatus, AssetCondition, AssetStatus
from hrms.database import Base, enum_column


class Asset(Base, AuditMixin):
    __tablename__ = "assets"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    asset_code: Mapped[str] = mapped_column(sa.String(50), unique=True, nullable=False)
    asset_type: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    asset_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    brand: Mapped[Optional[str]] = mapped_column(sa.String(100))
    model: Mapped[Optional[str]] = mapped_column(sa.String(100))
    serial_number: Mapped[Optional[str]] = mapped_column(sa.String(100))
    purchase_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    purchase_cost: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(12, 2))
    condition: Mapped[AssetCondition] = mapped_column(
        enum_column(AssetCondition, "asset_condition"),
        nullable=False,
        default=AssetCondition.good,
    )
    location: Mapped[Optional[str]] = mapped_column(sa.String(200))
    status: Mapped[AssetStatus] = mapped_column(
        enum_column(AssetStatus, "asset_status"),
        nullable=False,
        default=AssetStatus.available,
    )
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)

    __table_args__ = (sa.Index("ix_assets_status_type", "status", "asset_type"),)

    def __repr__(self) -> str:
        return f"<Asset {self.asset_code} {self.status.value}>"


class AssetAllocation(Base, TimestampMixin):
    __tablename__ = "asset_allocations"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    asset_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("assets.id", ondelete="CASCADE"), nullable=False,
    )
    employee_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"), nullable=False,
    )
    allocated_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    expected_return_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    returned_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    condition_at_allocation: Mapped[AssetCondition] = mapped_column(
        enum_column(AssetCondition, "asset_condition"),
        nullable=False,
        default=AssetCondition.good,
    )
    condition_at_return: Mapped[Optional[AssetCondition]] = mapped_column(
        enum_column(AssetCondition, "asset_condition"),
    )
    allocation_remarks: Mapped[Optional[str]] = mapped_column(sa.Text)
    return_remarks: Mapped[Optional[str]] = mapped_column(sa.Text)
    status: Mapped[AllocationStatus] = mapped_column(
        enum_column(AllocationStatus, "allocation_status"),
        nullable=False,
        default=AllocationStatus.active,
    )
    allocated_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"),
    )
    received_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"),
    )

    __table_args__ = (
        sa.Index("ix_asset_allocations_asset", "asset_id", "status"),
        sa.Index("ix_asset_allocations_employee", "employee_id"),
    )

    def __repr__(self) -> str:
        return f"<AssetAllocation asset={self.asset_id} emp={self.employee_id} {self.status.value}>"

"""Master-data ORM model — one table keyed by ``type`` for every lookup list."""

from __future__ import annotations

from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrms.common.audit import TimestampMixin
from hrms.database import Base


class MasterDataItem(Base, TimestampMixin):
    """A location, department, designation, policy, ... row."""

    __tablename__ = "master_data_items"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    code: Mapped[Optional[str]] = mapped_column(sa.String(50))
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
    attributes: Mapped[Optional[dict]] = mapped_column(sa.JSON)

    __table_args__ = (
        sa.UniqueConstraint("type", "name", name="uq_master_data_type_name"),
        sa.Index("ix_master_data_items_type", "type"),
    )

    def __repr__(self) -> str:
        return f"<MasterDataItem {self.type}:{self.name}>"

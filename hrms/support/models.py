"""Support-ticket ORM models: tickets and their comment thread."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hrms.common.audit import TimestampMixin
from hrms.common.constants import TicketCategory, TicketPriority, TicketStatus
from hrms.database import Base, enum_column


class SupportTicket(Base, TimestampMixin):
    """Employee-raised ticket routed to HR/IT."""

    __tablename__ = "support_tickets"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    ticket_number: Mapped[str] = mapped_column(sa.String(20), unique=True, nullable=False)
    subject: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    description: Mapped[str] = mapped_column(sa.Text, nullable=False)
    category: Mapped[TicketCategory] = mapped_column(
        enum_column(TicketCategory, "ticket_category"),
        nullable=False,
        default=TicketCategory.other,
    )
    priority: Mapped[TicketPriority] = mapped_column(
        enum_column(TicketPriority, "ticket_priority"),
        nullable=False,
        default=TicketPriority.medium,
    )
    status: Mapped[TicketStatus] = mapped_column(
        enum_column(TicketStatus, "ticket_status"),
        nullable=False,
        default=TicketStatus.open,
    )
    raised_by: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"), nullable=False,
    )
    raised_by_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    assigned_to: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"),
    )
    assigned_to_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    resolved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime)
    closed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime)

    comments: Mapped[list[TicketComment]] = relationship(
        back_populates="ticket",
        cascade="all, delete-orphan",
        order_by="TicketComment.created_at",
    )

    __table_args__ = (
        sa.Index("ix_support_tickets_raised_by", "raised_by"),
        sa.Index("ix_support_tickets_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<SupportTicket {self.ticket_number} '{self.subject[:30]}'>"


class TicketComment(Base):
    __tablename__ = "ticket_comments"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    ticket_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("support_tickets.id", ondelete="CASCADE"), nullable=False,
    )
    author_id: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("employees.id"),
    )
    author_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    comment: Mapped[str] = mapped_column(sa.Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime, nullable=False, default=datetime.now,
    )

    ticket: Mapped[SupportTicket] = relationship(back_populates="comments")

    def __repr__(self) -> str:
        return f"<TicketComment ticket={self.ticket_id}>"

"""Support-ticket service — tickets, status workflow and comments."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hrms.auth.dependencies import is_hr
from hrms.common.audit import create_audit_entry
from hrms.common.constants import (
    TICKET_TRANSITIONS,
    NotificationType,
    TicketCategory,
    TicketPriority,
    TicketStatus,
)
from hrms.common.exceptions import ForbiddenException, NotFoundException, ValidationException
from hrms.common.pagination import PaginatedResponse, PaginationParams, paginate
from hrms.employees.models import Employee
from hrms.notifications.service import NotificationService
from hrms.support.models import SupportTicket, TicketComment
from hrms.support.schemas import CommentCreate, TicketCreate, TicketResponse, TicketUpdate

logger = logging.getLogger(__name__)


def can_view(ticket: SupportTicket, viewer: Employee) -> bool:
    return is_hr(viewer) or viewer.id in (ticket.raised_by, ticket.assigned_to)


def check_transition(current: TicketStatus, target: TicketStatus) -> None:
    """Raise 422 unless *current* → *target* is an allowed ticket transition."""
    if target == current:
        return
    if target not in TICKET_TRANSITIONS[current]:
        allowed = ", ".join(sorted(s.value for s in TICKET_TRANSITIONS[current]))
        raise ValidationException(
            {"status": [f"Cannot move a ticket from {current.value} to {target.value}. Allowed: {allowed}."]}
        )


class SupportService:
    """Business logic for support tickets."""

    @staticmethod
    async def _next_number(db: AsyncSession) -> str:
        total = (await db.execute(select(func.max(SupportTicket.id)))).scalar() or 0
        return f"TKT-{total + 1:05d}"

    @staticmethod
    async def get_ticket(db: AsyncSession, ticket_id: int) -> SupportTicket:
        result = await db.execute(
            select(SupportTicket)
            .options(selectinload(SupportTicket.comments))
            .where(SupportTicket.id == ticket_id)
            .execution_options(populate_existing=True)
        )
        ticket = result.scalar_one_or_none()
        if ticket is None:
            raise NotFoundException("Ticket", ticket_id)
        return ticket

    @staticmethod
    async def get_visible_ticket(
        db: AsyncSession, ticket_id: int, viewer: Employee,
    ) -> SupportTicket:
        ticket = await SupportService.get_ticket(db, ticket_id)
        if not can_view(ticket, viewer):
            raise ForbiddenException("You do not have access to this ticket.")
        return ticket

    @staticmethod
    async def list_tickets(
        db: AsyncSession,
        pagination: PaginationParams,
        *,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        category: Optional[TicketCategory] = None,
        raised_by: Optional[int] = None,
        assigned_to: Optional[int] = None,
    ) -> PaginatedResponse:
        query = select(SupportTicket).order_by(
            SupportTicket.created_at.desc(), SupportTicket.id.desc(),
        )
        if status is not None:
            query = query.where(SupportTicket.status == status)
        if priority is not None:
            query = query.where(SupportTicket.priority == priority)
        if category is not None:
            query = query.where(SupportTicket.category == category)
        if raised_by is not None:
            query = query.where(SupportTicket.raised_by == raised_by)
        if assigned_to is not None:
            query = query.where(SupportTicket.assigned_to == assigned_to)
        return await paginate(db, query, pagination, model=SupportTicket, schema=TicketResponse)

    @staticmethod
    async def my_tickets(db: AsyncSession, employee_id: int) -> list[SupportTicket]:
        result = await db.execute(
            select(SupportTicket)
            .where(SupportTicket.raised_by == employee_id)
            .order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def create_ticket(
        db: AsyncSession, employee: Employee, data: TicketCreate,
    ) -> SupportTicket:
        ticket = SupportTicket(
            ticket_number=await SupportService._next_number(db),
            subject=data.subject,
            description=data.description,
            category=data.category,
            priority=data.priority,
            status=TicketStatus.open,
            raised_by=employee.id,
            raised_by_name=employee.full_name,
        )
        db.add(ticket)
        await db.flush()
        await create_audit_entry(
            db,
            action="create",
            entity_type="support_ticket",
            entity_id=ticket.id,
            actor_id=employee.id,
            new_values={"ticket_number": ticket.ticket_number, "subject": ticket.subject},
        )
        logger.info("Ticket %s raised by employee %s", ticket.ticket_number, employee.id)
        return await SupportService.get_ticket(db, ticket.id)

    @staticmethod
    async def update_ticket(
        db: AsyncSession, ticket_id: int, data: TicketUpdate, actor: Employee,
    ) -> SupportTicket:
        ticket = await SupportService.get_ticket(db, ticket_id)
        if not (is_hr(actor) or ticket.assigned_to == actor.id):
            raise ForbiddenException("Only HR or the assignee can update this ticket.")

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        old = {k: str(getattr(ticket, k)) for k in changes}

        if "assigned_to" in changes:
            assignee = await db.get(Employee, changes["assigned_to"])
            if assignee is None:
                raise NotFoundException("Employee", changes["assigned_to"])
            if assignee.id != ticket.assigned_to:
                ticket.assigned_to = assignee.id
                ticket.assigned_to_name = assignee.full_name
                await NotificationService.create_notification(
                    db,
                    recipient_id=assignee.id,
                    type=NotificationType.action_required,
                    title="Ticket Assigned",
                    message=f"{ticket.ticket_number}: {ticket.subject}",
                    action_url=f"/support/{ticket.id}",
                    entity_type="support_ticket",
                    entity_id=ticket.id,
                )

        if "status" in changes:
            SupportService._apply_status(ticket, changes["status"])
        if "priority" in changes:
            ticket.priority = changes["priority"]
        if "category" in changes:
            ticket.category = changes["category"]

        await db.flush()
        await create_audit_entry(
            db,
            action="update",
            entity_type="support_ticket",
            entity_id=ticket.id,
            actor_id=actor.id,
            old_values=old,
            new_values={k: str(v) for k, v in changes.items()},
        )
        if "status" in changes and ticket.raised_by != actor.id:
            await NotificationService.create_notification(
                db,
                recipient_id=ticket.raised_by,
                type=NotificationType.info,
                title="Ticket Updated",
                message=f"{ticket.ticket_number} is now {ticket.status.value}.",
                action_url=f"/support/{ticket.id}",
                entity_type="support_ticket",
                entity_id=ticket.id,
            )
        return await SupportService.get_ticket(db, ticket.id)

    @staticmethod
    def _apply_status(ticket: SupportTicket, target: TicketStatus) -> None:
        check_transition(ticket.status, target)
        now = datetime.now()
        if target == TicketStatus.resolved and ticket.status != TicketStatus.resolved:
            ticket.resolved_at = now
        elif target == TicketStatus.closed and ticket.status != TicketStatus.closed:
            ticket.closed_at = now
        elif target == TicketStatus.open:
            ticket.resolved_at = None
            ticket.closed_at = None
        ticket.status = target

    @staticmethod
    async def close_ticket(
        db: AsyncSession, ticket_id: int, actor: Employee,
    ) -> SupportTicket:
        ticket = await SupportService.get_visible_ticket(db, ticket_id, actor)
        old = ticket.status.value
        SupportService._apply_status(ticket, TicketStatus.closed)
        await db.flush()
        await create_audit_entry(
            db,
            action="close",
            entity_type="support_ticket",
            entity_id=ticket.id,
            actor_id=actor.id,
            old_values={"status": old},
            new_values={"status": TicketStatus.closed.value},
        )
        return await SupportService.get_ticket(db, ticket.id)

    # ── Comments ────────────────────────────────────────────────────

    @staticmethod
    async def add_comment(
        db: AsyncSession, ticket_id: int, data: CommentCreate, author: Employee,
    ) -> TicketComment:
        ticket = await SupportService.get_visible_ticket(db, ticket_id, author)
        comment = TicketComment(
            ticket_id=ticket.id,
            author_id=author.id,
            author_name=author.full_name,
            comment=data.comment,
        )
        db.add(comment)
        await db.flush()
        await db.refresh(comment)
        return comment

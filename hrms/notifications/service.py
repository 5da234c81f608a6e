"""In-app notifications: inbox queries, read state, HR sends, and the
event helpers other services call when something needs a person's attention.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.common.constants import EmploymentStatus, NotificationType
from hrms.common.exceptions import ForbiddenException, NotFoundException
from hrms.employees.models import Employee
from hrms.notifications.models import Notification

logger = logging.getLogger(__name__)


def _inbox(employee_id: int, *, unread: bool = False) -> list[Any]:
    clauses = [Notification.recipient_id == employee_id]
    if unread:
        clauses.append(Notification.is_read.is_(False))
    return clauses


class NotificationService:

    @staticmethod
    async def create_notification(
        db: AsyncSession,
        *,
        recipient_id: int,
        type: NotificationType = NotificationType.info,
        title: str,
        message: str,
        action_url: Optional[str] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
    ) -> Notification:
        note = Notification(
            recipient_id=recipient_id,
            notification_type=type,
            title=title,
            message=message,
            action_url=action_url,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        db.add(note)
        await db.flush()
        return note

    @staticmethod
    async def get_notifications(
        db: AsyncSession,
        employee_id: int,
        *,
        unread_only: bool = False,
        limit: int = 50,
    ) -> Sequence[Notification]:
        """Newest first; ties on ``created_at`` fall back to id."""
        rows = await db.scalars(
            select(Notification)
            .where(*_inbox(employee_id, unread=unread_only))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        return rows.all()

    @staticmethod
    async def get_unread_count(db: AsyncSession, employee_id: int) -> int:
        count = await db.scalar(
            select(func.count(Notification.id)).where(*_inbox(employee_id, unread=True))
        )
        return count or 0

    @staticmethod
    async def _owned(db: AsyncSession, notification_id: int, employee_id: int) -> Notification:
        note = await db.get(Notification, notification_id)
        if note is None:
            raise NotFoundException("Notification", notification_id)
        if note.recipient_id != employee_id:
            raise ForbiddenException("You can only manage your own notifications.")
        return note

    @staticmethod
    async def mark_read(db: AsyncSession, notification_id: int, employee_id: int) -> Notification:
        note = await NotificationService._owned(db, notification_id, employee_id)
        if not note.is_read:
            note.is_read, note.read_at = True, datetime.now()
            await db.flush()
        return note

    @staticmethod
    async def mark_all_read(db: AsyncSession, employee_id: int) -> int:
        """Returns how many rows flipped to read."""
        result = await db.execute(
            update(Notification)
            .where(*_inbox(employee_id, unread=True))
            .values(is_read=True, read_at=datetime.now())
        )
        return result.rowcount or 0

    @staticmethod
    async def delete_notification(db: AsyncSession, notification_id: int, employee_id: int) -> None:
        note = await NotificationService._owned(db, notification_id, employee_id)
        await db.delete(note)
        await db.flush()

    @staticmethod
    async def send_to_employee(
        db: AsyncSession,
        *,
        employee_id: int,
        title: str,
        message: str,
        type: NotificationType = NotificationType.info,
        action_url: Optional[str] = None,
    ) -> Notification:
        if await db.get(Employee, employee_id) is None:
            raise NotFoundException("Employee", employee_id)
        return await NotificationService.create_notification(
            db, recipient_id=employee_id, type=type, title=title,
            message=message, action_url=action_url,
        )

    @staticmethod
    async def broadcast(
        db: AsyncSession,
        *,
        title: str,
        message: str,
        type: NotificationType = NotificationType.announcement,
        department_id: Optional[int] = None,
    ) -> int:
        """Fan one message out to active, working employees. Returns the recipient count."""
        audience = select(Employee.id).where(
            Employee.is_active.is_(True),
            Employee.employment_status == EmploymentStatus.working,
        )
        if department_id is not None:
            audience = audience.where(Employee.department_id == department_id)
        recipients = (await db.scalars(audience)).all()

        for recipient_id in recipients:
            db.add(Notification(
                recipient_id=recipient_id, notification_type=type, title=title, message=message,
            ))
        await db.flush()
        logger.info("Broadcast %r delivered to %d employees", title, len(recipients))
        return len(recipients)


# ── Event helpers for leave and compliance ──────────────────────────

async def _leave_notice(
    db: AsyncSession,
    leave: Any,
    *,
    recipient_id: int,
    type: NotificationType,
    title: str,
    message: str,
    action_url: str = "/leaves",
) -> Notification:
    return await NotificationService.create_notification(
        db,
        recipient_id=recipient_id,
        type=type,
        title=title,
        message=message,
        action_url=action_url,
        entity_type="leave",
        entity_id=leave.id,
    )


async def notify_leave_request(
    db: AsyncSession,
    leave: Any,
    approver_id: int,
    employee_name: str,
) -> Notification:
    """Ask *approver_id* to review a newly applied leave."""
    return await _leave_notice(
        db, leave,
        recipient_id=approver_id,
        type=NotificationType.action_required,
        title="New Leave Request",
        message=(
            f"{employee_name} applied for leave from {leave.start_date} to "
            f"{leave.end_date} ({leave.total_days} day(s))."
        ),
        action_url="/manager-approvals",
    )


async def notify_leave_approved(db: AsyncSession, leave: Any) -> Notification:
    return await _leave_notice(
        db, leave,
        recipient_id=leave.employee_id,
        type=NotificationType.approval,
        title="Leave Request Approved",
        message=f"Your leave request from {leave.start_date} to {leave.end_date} has been approved.",
    )


async def notify_leave_rejected(db: AsyncSession, leave: Any, reason: Optional[str]) -> Notification:
    message = f"Your leave request from {leave.start_date} to {leave.end_date} was rejected."
    if reason:
        message = f"{message} Reason: {reason}"
    return await _leave_notice(
        db, leave,
        recipient_id=leave.employee_id,
        type=NotificationType.alert,
        title="Leave Request Rejected",
        message=message,
    )


async def notify_timesheet_reminder(db: AsyncSession, employee_id: int, for_date: Any) -> Notification:
    return await NotificationService.create_notification(
        db,
        recipient_id=employee_id,
        type=NotificationType.reminder,
        title="Timesheet Reminder",
        message=f"Please submit your timesheet for {for_date}.",
        action_url="/timesheets",
        entity_type="timesheet",
    )

"""``/notifications``: the caller's inbox plus HR send and broadcast."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.dependencies import get_current_user, require_permission
from hrms.database import get_db
from hrms.employees.models import Employee
from hrms.notifications.schemas import (
    NotificationBroadcast,
    NotificationListResponse,
    NotificationResponse,
    NotificationSend,
)
from hrms.notifications.service import NotificationService as svc

router = APIRouter(prefix="", tags=["notifications"])

can_send = require_permission("notification:send")


def _ok(message: str, **extra) -> dict:
    return {"success": True, "message": message, **extra}


@router.get("/my", response_model=NotificationListResponse)
async def my_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    me: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notes = await svc.get_notifications(db, me.id, unread_only=unread_only, limit=limit)
    return NotificationListResponse(
        data=[NotificationResponse.model_validate(n) for n in notes],
        unread=await svc.get_unread_count(db, me.id),
    )


# Static paths stay above /{notification_id}

@router.get("/unread-count")
async def unread_count(
    me: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"count": await svc.get_unread_count(db, me.id)}


@router.put("/mark-all-read")
async def mark_all_read(
    me: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _ok("All notifications marked as read", count=await svc.mark_all_read(db, me.id))


@router.post("/send", status_code=201)
async def send_notification(
    body: NotificationSend,
    _: Employee = Depends(can_send),
    db: AsyncSession = Depends(get_db),
):
    note = await svc.send_to_employee(
        db,
        employee_id=body.employee_id,
        title=body.title,
        message=body.message,
        type=body.type,
        action_url=body.action_url,
    )
    return _ok("Notification sent", data=NotificationResponse.model_validate(note))


@router.post("/broadcast", status_code=201)
async def broadcast(
    body: NotificationBroadcast,
    _: Employee = Depends(can_send),
    db: AsyncSession = Depends(get_db),
):
    count = await svc.broadcast(db, **body.model_dump())
    return _ok(f"Notification sent to {count} employees", count=count)


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: int,
    me: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    note = await svc.mark_read(db, notification_id, me.id)
    return _ok("Notification marked as read", data=NotificationResponse.model_validate(note))


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: int,
    me: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await svc.delete_notification(db, notification_id, me.id)
    return _ok("Notification deleted")

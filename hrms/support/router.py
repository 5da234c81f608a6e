"""Support router — raise, track and resolve tickets.

HR sees every ticket; other employees see the tickets they raised or were
assigned.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.dependencies import get_current_user, is_hr
from hrms.common.constants import TicketCategory, TicketPriority, TicketStatus
from hrms.common.pagination import PaginatedResponse, PaginationParams
from hrms.database import get_db
from hrms.employees.models import Employee
from hrms.support.schemas import (
    CommentCreate,
    CommentResponse,
    TicketCreate,
    TicketDetail,
    TicketResponse,
    TicketUpdate,
)
from hrms.support.service import SupportService

router = APIRouter(prefix="", tags=["support"])


@router.get("", response_model=PaginatedResponse[TicketResponse])
async def list_tickets(
    status: Optional[TicketStatus] = Query(None),
    priority: Optional[TicketPriority] = Query(None),
    category: Optional[TicketCategory] = Query(None),
    pagination: PaginationParams = Depends(),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if is_hr(employee):
        return await SupportService.list_tickets(
            db, pagination, status=status, priority=priority, category=category,
        )
    return await SupportService.list_tickets(
        db,
        pagination,
        status=status,
        priority=priority,
        category=category,
        raised_by=employee.id,
    )


@router.post("", response_model=TicketDetail, status_code=201)
async def create_ticket(
    body: TicketCreate,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await SupportService.create_ticket(db, employee, body)


@router.get("/my-tickets", response_model=list[TicketResponse])
async def my_tickets(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await SupportService.my_tickets(db, employee.id)


@router.get("/{ticket_id}", response_model=TicketDetail)
async def get_ticket(
    ticket_id: int,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await SupportService.get_visible_ticket(db, ticket_id, employee)


@router.put("/{ticket_id}", response_model=TicketDetail)
async def update_ticket(
    ticket_id: int,
    body: TicketUpdate,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await SupportService.update_ticket(db, ticket_id, body, employee)


@router.put("/{ticket_id}/close", response_model=TicketDetail)
async def close_ticket(
    ticket_id: int,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await SupportService.close_ticket(db, ticket_id, employee)


@router.post("/{ticket_id}/comment", response_model=CommentResponse, status_code=201)
async def add_comment(
    ticket_id: int,
    body: CommentCreate,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await SupportService.add_comment(db, ticket_id, body, employee)

"""Dashboard router — a summary per role, upcoming birthdays and wishes.

Each role dashboard is open to that role and the roles above it; the
birthday endpoints are open to every signed-in employee.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.dependencies import get_current_user, require_role
from hrms.common.constants import UserRole
from hrms.dashboard.schemas import (
    AdminDashboard,
    BirthdayWishCreate,
    BirthdayWishResponse,
    EmployeeDashboard,
    HRDashboard,
    ManagerDashboard,
    UpcomingBirthdaysResponse,
)
from hrms.dashboard.service import DashboardService
from hrms.database import get_db
from hrms.employees.models import Employee

router = APIRouter(prefix="", tags=["dashboard"])


# ── Role dashboards ─────────────────────────────────────────────────

@router.get("/admin", response_model=AdminDashboard)
async def admin_dashboard(
    _admin: Employee = Depends(require_role(UserRole.admin)),
    db: AsyncSession = Depends(get_db),
):
    """Headcount, today's attendance, leave, timesheet, project and ticket totals."""
    return await DashboardService.admin(db)


@router.get("/hr", response_model=HRDashboard)
async def hr_dashboard(
    _hr: Employee = Depends(require_role(UserRole.hr)),
    db: AsyncSession = Depends(get_db),
):
    return await DashboardService.hr(db)


@router.get("/manager", response_model=ManagerDashboard)
async def manager_dashboard(
    manager: Employee = Depends(require_role(UserRole.manager)),
    db: AsyncSession = Depends(get_db),
):
    """Direct reports only."""
    return await DashboardService.manager(db, manager)


@router.get("/employee", response_model=EmployeeDashboard)
async def employee_dashboard(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await DashboardService.employee(db, employee)


# ── Birthdays ───────────────────────────────────────────────────────

@router.get("/birthdays", response_model=UpcomingBirthdaysResponse)
async def upcoming_birthdays(
    days: int = Query(7, ge=0, le=90, description="Lookahead window in days; 0 for today only"),
    _user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await DashboardService.upcoming_birthdays(db, days_ahead=days)


@router.post("/birthdays/wishes", response_model=BirthdayWishResponse, status_code=201)
async def send_birthday_wish(
    body: BirthdayWishCreate,
    sender: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await DashboardService.send_wish(db, sender, body)


@router.get("/birthdays/wishes/received", response_model=list[BirthdayWishResponse])
async def my_birthday_wishes(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await DashboardService.wishes_for(db, employee.id)


@router.get("/birthdays/{employee_id}/wishes", response_model=list[BirthdayWishResponse])
async def birthday_wishes(
    employee_id: int,
    _user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await DashboardService.wishes_for(db, employee_id)

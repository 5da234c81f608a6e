"""Dashboard service — role summaries, upcoming birthdays and birthday wishes.

Counts are COUNT/GROUP BY at the database; birthday dates are resolved
in Python because the next occurrence depends on leap years.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import and_, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from hrms.assets.models import Asset, AssetAllocation
from hrms.attendance.models import Attendance
from hrms.common.constants import (
    AllocationStatus,
    AttendanceStatus,
    EmploymentStatus,
    LeaveStatus,
    ProjectStatus,
    TicketStatus,
    TimesheetStatus,
)
from hrms.common.exceptions import BadRequestException, NotFoundException
from hrms.common.filters import month_bounds
from hrms.dashboard.models import BirthdayWish
from hrms.dashboard.schemas import (
    AdminDashboard,
    AttendanceToday,
    BirthdayWishCreate,
    BirthdayWishResponse,
    CountBucket,
    EmployeeDashboard,
    EmployeeStats,
    HRDashboard,
    LeaveSummary,
    ManagerDashboard,
    MarkedToday,
    MonthAttendance,
    MonthTimesheets,
    MyAsset,
    MyProject,
    PendingApprovals,
    PendingLeaveItem,
    ProjectStats,
    RecentJoiners,
    SupportStats,
    TeamAttendance,
    TeamLeaveItem,
    TimesheetCompliance,
    UpcomingBirthdayItem,
    UpcomingBirthdaysResponse,
    UpcomingHoliday,
)
from hrms.employees.models import Employee
from hrms.holidays.models import Holiday
from hrms.leave.models import Leave, LeaveType
from hrms.leave.service import LeaveService
from hrms.master_data.models import MasterDataItem
from hrms.notifications.service import NotificationService
from hrms.projects.models import Project, ProjectAssignment
from hrms.projects.service import active_on
from hrms.support.models import SupportTicket
from hrms.timesheets.models import Timesheet

logger = logging.getLogger(__name__)

# Attendance states counted as "present" on the HR, manager and employee views
_PRESENT = (AttendanceStatus.present, AttendanceStatus.late, AttendanceStatus.half_day)

_ATTENDANCE_FIELD = {
    AttendanceStatus.present: "present",
    AttendanceStatus.absent: "absent",
    AttendanceStatus.late: "late",
    AttendanceStatus.half_day: "half_day",
    AttendanceStatus.leave: "on_leave",
}

PENDING_LEAVES_SHOWN = 10
HOLIDAY_LOOKAHEAD_DAYS = 30
RECENT_JOINER_DAYS = 30


def next_birthday(date_of_birth: date, today: date) -> date:
    """First occurrence of the birthday on or after *today*.

    A 29 February birthday falls on 28 February in common years.
    """

    def in_year(year: int) -> date:
        try:
            return date_of_birth.replace(year=year)
        except ValueError:
            return date(year, 2, 28)

    upcoming = in_year(today.year)
    if upcoming < today:
        upcoming = in_year(today.year + 1)
    return upcoming


def _working():
    return and_(
        Employee.is_active.is_(True),
        Employee.employment_status == EmploymentStatus.working,
    )


def _on_leave(day: date):
    return and_(
        Leave.status == LeaveStatus.approved,
        Leave.start_date <= day,
        Leave.end_date >= day,
    )


async def _multi_scalar(db: AsyncSession, *stmts) -> list[int]:
    """Run scalar COUNT queries in order; missing results count as 0."""
    results = []
    for stmt in stmts:
        results.append((await db.execute(stmt)).scalar() or 0)
    return results


async def _headcount_by(db: AsyncSession, column, item_type: str) -> list[CountBucket]:
    """Working employees per master-data item, including empty items."""
    count = func.count(Employee.id)
    rows = (await db.execute(
        select(MasterDataItem.name, count)
        .outerjoin(Employee, and_(column == MasterDataItem.id, _working()))
        .where(MasterDataItem.type == item_type, MasterDataItem.is_active.is_(True))
        .group_by(MasterDataItem.id, MasterDataItem.name)
        .order_by(count.desc(), MasterDataItem.name)
    )).all()
    return [CountBucket(name=name, count=n) for name, n in rows]


def _leave_type_label(leave: Leave, type_name: Optional[str]) -> Optional[str]:
    # WFH / Remote requests carry a code instead of a leave type row
    return type_name or leave.leave_type


class DashboardService:

    # ═════════════════════════════════════════════════════════════════
    # Birthdays
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def upcoming_birthdays(
        db: AsyncSession,
        days_ahead: int = 7,
        today: Optional[date] = None,
    ) -> UpcomingBirthdaysResponse:
        """Working employees whose birthday falls within the next *days_ahead* days.

        ``days_ahead=0`` returns today's birthdays only.
        """
        today = today or date.today()
        dept = aliased(MasterDataItem)
        rows = (await db.execute(
            select(Employee, dept.name)
            .outerjoin(dept, dept.id == Employee.department_id)
            .where(_working(), Employee.date_of_birth.is_not(None))
        )).all()

        items = []
        for employee, department in rows:
            upcoming = next_birthday(employee.date_of_birth, today)
            days_away = (upcoming - today).days
            if days_away > days_ahead:
                continue
            items.append(UpcomingBirthdayItem(
                employee_id=employee.id,
                employee_number=employee.employee_number,
                employee_name=employee.full_name,
                department_name=department,
                date_of_birth=employee.date_of_birth,
                birthday_date=upcoming,
                days_away=days_away,
            ))
        items.sort(key=lambda item: (item.birthday_date, item.employee_name))
        return UpcomingBirthdaysResponse(days_ahead=days_ahead, data=items)

    @staticmethod
    async def send_wish(
        db: AsyncSession,
        sender: Employee,
        data: BirthdayWishCreate,
    ) -> BirthdayWishResponse:
        if data.employee_id == sender.id:
            raise BadRequestException("You cannot send a birthday wish to yourself.")
        recipient = await db.get(Employee, data.employee_id)
        if recipient is None or not recipient.is_active:
            raise NotFoundException("Employee", data.employee_id)

        wish = BirthdayWish(
            employee_id=recipient.id,
            wished_by=sender.id,
            wish_message=data.wish_message,
        )
        db.add(wish)
        await db.flush()

        await NotificationService.create_notification(
            db,
            recipient_id=recipient.id,
            title="Birthday Wish",
            message=f"{sender.full_name} wished you: {data.wish_message}",
            action_url="/birthdays",
            entity_type="birthday_wish",
            entity_id=wish.id,
        )
        logger.info("Birthday wish %s from %s to %s", wish.id, sender.id, recipient.id)

        resp = BirthdayWishResponse.model_validate(wish)
        resp.wished_by_name = sender.full_name
        return resp

    @staticmethod
    async def wishes_for(db: AsyncSession, employee_id: int) -> list[BirthdayWishResponse]:
        """Wishes received by *employee_id*, newest first."""
        if await db.get(Employee, employee_id) is None:
            raise NotFoundException("Employee", employee_id)
        rows = (await db.execute(
            select(BirthdayWish, Employee)
            .join(Employee, Employee.id == BirthdayWish.wished_by)
            .where(BirthdayWish.employee_id == employee_id)
            .order_by(BirthdayWish.created_at.desc(), BirthdayWish.id.desc())
        )).all()
        out = []
        for wish, sender in rows:
            resp = BirthdayWishResponse.model_validate(wish)
            resp.wished_by_name = sender.full_name
            out.append(resp)
        return out

    # ═════════════════════════════════════════════════════════════════
    # GET /admin
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def admin(db: AsyncSession, today: Optional[date] = None) -> AdminDashboard:
        today = today or date.today()
        month_start, month_end = month_bounds(today.month, today.year)
        year_start = datetime(today.year, 1, 1)

        by_status = [
            CountBucket(name=status.value, count=n)
            for status, n in (await db.execute(
                select(Employee.employment_status, func.count(Employee.id))
                .group_by(Employee.employment_status)
                .order_by(Employee.employment_status)
            )).all()
        ]
        employee_stats = EmployeeStats(
            by_status=by_status,
            by_department=await _headcount_by(db, Employee.department_id, "departments"),
            by_location=await _headcount_by(db, Employee.location_id, "locations"),
        )

        attendance = AttendanceToday()
        for status, n in (await db.execute(
            select(Attendance.status, func.count(distinct(Attendance.employee_id)))
            .where(Attendance.attendance_date == today)
            .group_by(Attendance.status)
        )).all():
            setattr(attendance, _ATTENDANCE_FIELD[status], n)

        this_year = and_(Leave.leave_type_id.is_not(None), Leave.applied_at >= year_start)
        pending, approved, rejected, on_leave = await _multi_scalar(
            db,
            select(func.count(Leave.id)).where(this_year, Leave.status == LeaveStatus.pending),
            select(func.count(Leave.id)).where(this_year, Leave.status == LeaveStatus.approved),
            select(func.count(Leave.id)).where(this_year, Leave.status == LeaveStatus.rejected),
            select(func.count(distinct(Leave.employee_id))).where(
                Leave.leave_type_id.is_not(None), _on_leave(today),
            ),
        )

        in_month = and_(Timesheet.date >= month_start, Timesheet.date <= month_end)
        employees = func.count(distinct(Timesheet.employee_id))
        sheet_counts = await _multi_scalar(
            db,
            select(employees).where(in_month),
            select(employees).where(in_month, Timesheet.status == TimesheetStatus.submitted),
            select(employees).where(in_month, Timesheet.status == TimesheetStatus.verified),
            select(employees).where(in_month, Timesheet.status == TimesheetStatus.draft),
        )

        project_counts = await _multi_scalar(
            db,
            select(func.count(Project.id)),
            select(func.count(Project.id)).where(Project.status == ProjectStatus.active),
            select(func.count(Project.id)).where(Project.status == ProjectStatus.completed),
        )

        ticket_counts = await _multi_scalar(db, *(
            select(func.count(SupportTicket.id)).where(SupportTicket.status == status)
            for status in (
                TicketStatus.open, TicketStatus.in_progress,
                TicketStatus.resolved, TicketStatus.closed,
            )
        ))

        birthdays = await DashboardService.upcoming_birthdays(db, 7, today=today)
        return AdminDashboard(
            employee_stats=employee_stats,
            attendance_today=attendance,
            leave_summary=LeaveSummary(
                pending=pending, approved=approved, rejected=rejected, on_leave_today=on_leave,
            ),
            timesheet_compliance=TimesheetCompliance(
                total_employees=sheet_counts[0],
                submitted_count=sheet_counts[1],
                verified_count=sheet_counts[2],
                draft_count=sheet_counts[3],
            ),
            upcoming_birthdays=birthdays.data,
            project_stats=ProjectStats(
                total_projects=project_counts[0],
                active_projects=project_counts[1],
                completed_projects=project_counts[2],
            ),
            support_stats=SupportStats(
                open_tickets=ticket_counts[0],
                in_progress_tickets=ticket_counts[1],
                resolved_tickets=ticket_counts[2],
                closed_tickets=ticket_counts[3],
            ),
        )

    # ═════════════════════════════════════════════════════════════════
    # GET /hr
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def hr(db: AsyncSession, today: Optional[date] = None) -> HRDashboard:
        today = today or date.today()
        month_start, month_end = month_bounds(today.month, today.year)

        total, pending_leaves, pending_sheets, marked, present, absent = await _multi_scalar(
            db,
            select(func.count(Employee.id)).where(_working()),
            select(func.count(Leave.id)).where(Leave.status == LeaveStatus.pending),
            select(func.count(Timesheet.id)).where(
                Timesheet.status == TimesheetStatus.submitted,
                Timesheet.date >= month_start,
                Timesheet.date <= month_end,
            ),
            select(func.count(Attendance.id)).where(Attendance.attendance_date == today),
            select(func.count(Attendance.id)).where(
                Attendance.attendance_date == today, Attendance.status.in_(_PRESENT),
            ),
            select(func.count(Attendance.id)).where(
                Attendance.attendance_date == today,
                Attendance.status == AttendanceStatus.absent,
            ),
        )

        joiners = (await db.execute(
            select(Employee)
            .where(
                _working(),
                Employee.date_of_joining >= today - timedelta(days=RECENT_JOINER_DAYS),
                Employee.date_of_joining <= today,
            )
            .order_by(Employee.date_of_joining.desc(), Employee.first_name)
        )).scalars().all()

        return HRDashboard(
            total_employees=total,
            pending_approvals=PendingApprovals(leaves=pending_leaves, timesheets=pending_sheets),
            attendance_today=MarkedToday(total_marked=marked, present=present, absent=absent),
            recent_joiners=RecentJoiners(
                count=len(joiners), names=[e.full_name for e in joiners],
            ),
        )

    # ═════════════════════════════════════════════════════════════════
    # GET /manager
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def manager(
        db: AsyncSession,
        manager: Employee,
        today: Optional[date] = None,
    ) -> ManagerDashboard:
        today = today or date.today()
        month_start, month_end = month_bounds(today.month, today.year)
        team = select(Employee.id).where(Employee.reporting_manager_id == manager.id)

        team_size, marked, present, pending_sheets = await _multi_scalar(
            db,
            select(func.count(Employee.id)).where(
                Employee.reporting_manager_id == manager.id, _working(),
            ),
            select(func.count(distinct(Attendance.employee_id))).where(
                Attendance.employee_id.in_(team), Attendance.attendance_date == today,
            ),
            select(func.count(distinct(Attendance.employee_id))).where(
                Attendance.employee_id.in_(team),
                Attendance.attendance_date == today,
                Attendance.status.in_(_PRESENT),
            ),
            select(func.count(Timesheet.id)).where(
                Timesheet.employee_id.in_(team),
                Timesheet.status == TimesheetStatus.submitted,
                Timesheet.date >= month_start,
                Timesheet.date <= month_end,
            ),
        )

        def team_leaves(*conditions):
            return (
                select(Leave, Employee, LeaveType.name)
                .join(Employee, Employee.id == Leave.employee_id)
                .outerjoin(LeaveType, LeaveType.id == Leave.leave_type_id)
                .where(Employee.reporting_manager_id == manager.id, *conditions)
            )

        pending = [
            PendingLeaveItem(
                leave_id=leave.id,
                employee_id=employee.id,
                employee_name=employee.full_name,
                leave_type_name=_leave_type_label(leave, type_name),
                start_date=leave.start_date,
                end_date=leave.end_date,
                total_days=float(leave.total_days),
                applied_at=leave.applied_at,
            )
            for leave, employee, type_name in (await db.execute(
                team_leaves(Leave.status == LeaveStatus.pending)
                .order_by(Leave.applied_at.desc(), Leave.id.desc())
                .limit(PENDING_LEAVES_SHOWN)
            )).all()
        ]
        away = [
            TeamLeaveItem(
                employee_id=employee.id,
                employee_name=employee.full_name,
                leave_type_name=_leave_type_label(leave, type_name),
                start_date=leave.start_date,
                end_date=leave.end_date,
            )
            for leave, employee, type_name in (await db.execute(
                team_leaves(_on_leave(today)).order_by(Employee.first_name, Leave.start_date)
            )).all()
        ]

        return ManagerDashboard(
            team_size=team_size,
            team_attendance_today=TeamAttendance(marked_count=marked, present_count=present),
            pending_leave_approvals=pending,
            team_on_leave_today=away,
            pending_timesheet_approvals=pending_sheets,
        )

    # ═════════════════════════════════════════════════════════════════
    # GET /employee
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def employee(
        db: AsyncSession,
        employee: Employee,
        today: Optional[date] = None,
    ) -> EmployeeDashboard:
        today = today or date.today()
        month_start, month_end = month_bounds(today.month, today.year)

        hours = func.coalesce(Attendance.gross_hours, Attendance.total_hours, 0)
        days_present, total_hours = (await db.execute(
            select(func.count(Attendance.id), func.sum(hours)).where(
                Attendance.employee_id == employee.id,
                Attendance.attendance_date >= month_start,
                Attendance.attendance_date <= month_end,
                Attendance.status.in_(_PRESENT),
            )
        )).one()

        in_month = and_(
            Timesheet.employee_id == employee.id,
            Timesheet.date >= month_start,
            Timesheet.date <= month_end,
        )
        pending_leaves, *sheet_counts = await _multi_scalar(
            db,
            select(func.count(Leave.id)).where(
                Leave.employee_id == employee.id, Leave.status == LeaveStatus.pending,
            ),
            select(func.count(Timesheet.id)).where(in_month),
            select(func.count(Timesheet.id)).where(in_month, Timesheet.status == TimesheetStatus.submitted),
            select(func.count(Timesheet.id)).where(in_month, Timesheet.status == TimesheetStatus.verified),
            select(func.count(Timesheet.id)).where(in_month, Timesheet.status == TimesheetStatus.draft),
        )

        projects = [
            MyProject(
                project_id=project.id,
                project_name=project.project_name,
                client_name=project.client_name,
                role=assignment.role,
                allocation_percentage=assignment.allocation_percentage,
                assignment_start_date=assignment.assignment_start_date,
            )
            for assignment, project in (await db.execute(
                select(ProjectAssignment, Project)
                .join(Project, Project.id == ProjectAssignment.project_id)
                .where(ProjectAssignment.employee_id == employee.id, active_on(today))
                .order_by(Project.project_name)
            )).all()
        ]

        assets = [
            MyAsset(
                asset_id=asset.id,
                asset_code=asset.asset_code,
                asset_type=asset.asset_type,
                asset_name=asset.asset_name,
                allocated_date=allocation.allocated_date,
            )
            for allocation, asset in (await db.execute(
                select(AssetAllocation, Asset)
                .join(Asset, Asset.id == AssetAllocation.asset_id)
                .where(
                    AssetAllocation.employee_id == employee.id,
                    AssetAllocation.status == AllocationStatus.active,
                )
                .order_by(AssetAllocation.allocated_date)
            )).all()
        ]

        holidays = [
            UpcomingHoliday(
                holiday_date=h.holiday_date,
                name=h.name,
                day_name=h.holiday_date.strftime("%A"),
            )
            for h in (await db.execute(
                select(Holiday)
                .where(
                    Holiday.holiday_date >= today,
                    Holiday.holiday_date <= today + timedelta(days=HOLIDAY_LOOKAHEAD_DAYS),
                )
                .order_by(Holiday.holiday_date)
            )).scalars().all()
        ]

        return EmployeeDashboard(
            attendance_this_month=MonthAttendance(
                days_present=days_present or 0,
                total_hours_worked=float(total_hours or 0),
            ),
            leave_balance=await LeaveService.get_balances(db, employee.id, today.year),
            pending_leave_requests=pending_leaves,
            timesheet_status=MonthTimesheets(
                total_days=sheet_counts[0],
                submitted_days=sheet_counts[1],
                verified_days=sheet_counts[2],
                draft_days=sheet_counts[3],
            ),
            my_projects=projects,
            my_assets=assets,
            upcoming_holidays=holidays,
        )

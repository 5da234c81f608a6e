"""Per-domain API wrappers.

Each class holds an :class:`~hrms.client.base.ApiClient` and maps one
method to one HTTP call, returning the decoded JSON. No caching, no
retries.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from hrms.client.base import ApiClient


class _Service:
    prefix = ""

    def __init__(self, api: ApiClient):
        self.api = api

    def _path(self, suffix: str = "") -> str:
        return f"{self.prefix}{suffix}"


def _period(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> dict[str, Any]:
    return {"start_date": start_date, "end_date": end_date, "month": month, "year": year}


# ── Auth / users ────────────────────────────────────────────────────

class AuthService(_Service):
    prefix = "/auth"

    async def login(self, username: str, password: str) -> dict:
        """Log in and keep the returned token on the client for later calls."""
        data = await self.api.post(self._path("/login"), {"username": username, "password": password})
        self.api.token = data["access_token"]
        return data

    async def logout(self) -> dict:
        data = await self.api.post(self._path("/logout"))
        self.api.token = None
        return data

    async def me(self) -> dict:
        return await self.api.get(self._path("/me"))

    async def change_password(self, current_password: str, new_password: str) -> dict:
        return await self.api.post(
            self._path("/change-password"),
            {"current_password": current_password, "new_password": new_password},
        )


class UserService(_Service):
    prefix = "/auth/users"

    async def list_users(
        self, *, role: Optional[str] = None, search: Optional[str] = None,
        page: int = 1, page_size: int = 50,
    ) -> dict:
        return await self.api.get(
            self._path(),
            {"role": role, "search": search, "page": page, "page_size": page_size},
        )

    async def get_user(self, user_id: int) -> dict:
        return await self.api.get(self._path(f"/{user_id}"))

    async def update_role(self, user_id: int, role: str) -> dict:
        return await self.api.put(self._path(f"/{user_id}/role"), {"role": role})

    async def make_hr(self, user_id: int) -> dict:
        return await self.api.post(self._path(f"/{user_id}/make-hr"))

    async def make_manager(self, user_id: int) -> dict:
        return await self.api.post(self._path(f"/{user_id}/make-manager"))

    async def make_admin(self, user_id: int) -> dict:
        return await self.api.post(self._path(f"/{user_id}/make-admin"))

    async def make_employee(self, user_id: int) -> dict:
        return await self.api.post(self._path(f"/{user_id}/make-employee"))

    async def bulk_update_roles(self, updates: list[dict]) -> dict:
        return await self.api.post(self._path("/bulk-update-roles"), {"updates": updates})


class EmployeeService(_Service):
    prefix = "/employees"

    async def list_employees(
        self, *, search: Optional[str] = None, department_id: Optional[int] = None,
        page: int = 1, page_size: int = 50,
    ) -> dict:
        return await self.api.get(
            self._path(),
            {"search": search, "department_id": department_id, "page": page, "page_size": page_size},
        )

    async def get_employee(self, employee_id: int) -> dict:
        return await self.api.get(self._path(f"/{employee_id}"))

    async def details(self, employee_id: int) -> dict:
        return await self.api.get(self._path(f"/{employee_id}/details"))

    async def create_employee(self, data: dict) -> dict:
        return await self.api.post(self._path(), data)

    async def update_employee(self, employee_id: int, data: dict) -> dict:
        return await self.api.put(self._path(f"/{employee_id}"), data)

    async def deactivate(self, employee_id: int) -> dict:
        return await self.api.put(self._path(f"/{employee_id}/deactivate"))

    async def my_profile(self) -> dict:
        return await self.api.get(self._path("/profile/me"))

    async def update_my_profile(self, data: dict) -> dict:
        return await self.api.put(self._path("/profile/me"), data)

    async def my_team(self) -> list:
        return await self.api.get(self._path("/my-team/list"))

    async def reporting(self, manager_id: int) -> list:
        return await self.api.get(self._path(f"/reporting/{manager_id}"))


# ── Attendance ──────────────────────────────────────────────────────

class AttendanceService(_Service):
    prefix = "/attendance"

    async def check_in(self, work_mode: str = "Office", location: Optional[str] = None,
                       notes: Optional[str] = None) -> dict:
        return await self.api.post(
            self._path("/checkin"), {"work_mode": work_mode, "location": location, "notes": notes},
        )

    async def check_out(self, notes: Optional[str] = None) -> dict:
        return await self.api.post(self._path("/checkout"), {"notes": notes})

    async def punch_in(self, work_mode: Optional[str] = None, location: Optional[str] = None,
                       notes: Optional[str] = None) -> dict:
        return await self.api.post(
            self._path("/punch-in"), {"work_mode": work_mode, "location": location, "notes": notes},
        )

    async def punch_out(self, location: Optional[str] = None, notes: Optional[str] = None) -> dict:
        return await self.api.post(self._path("/punch-out"), {"location": location, "notes": notes})

    async def today(self) -> dict:
        return await self.api.get(self._path("/today"))

    async def details(self, on_date: date) -> dict:
        return await self.api.get(self._path(f"/details/{on_date.isoformat()}"))

    async def my_attendance(self, **period) -> list:
        return await self.api.get(self._path("/me"), _period(**period))

    async def monthly(self, month: int, year: int) -> list:
        return await self.api.get(self._path("/monthly"), {"month": month, "year": year})

    async def summary(self, employee_id: int, month: int, year: int) -> dict:
        return await self.api.get(
            self._path(f"/summary/{employee_id}"), {"month": month, "year": year},
        )

    async def my_report(self, **period) -> dict:
        return await self.api.get(self._path("/my-report"), _period(**period))

    async def team_report(self, **period) -> dict:
        return await self.api.get(self._path("/report/team"), _period(**period))

    async def all_report(self, on_date: Optional[date] = None) -> dict:
        return await self.api.get(self._path("/report/all"), {"date": on_date})

    async def employee_report(self, employee_id: int, **period) -> dict:
        return await self.api.get(self._path(f"/report/employee/{employee_id}"), _period(**period))

    async def mark(self, data: dict) -> dict:
        return await self.api.post(self._path("/mark"), data)

    async def by_date(self, on_date: date) -> list:
        return await self.api.get(self._path(f"/date/{on_date.isoformat()}"))


# ── Leave ───────────────────────────────────────────────────────────

class LeaveService(_Service):
    prefix = "/leaves"

    async def leave_types(self, include_inactive: bool = False) -> list:
        return await self.api.get(self._path("/types"), {"include_inactive": include_inactive})

    async def create_leave_type(self, data: dict) -> dict:
        return await self.api.post(self._path("/types"), data)

    async def update_leave_type(self, type_id: int, data: dict) -> dict:
        return await self.api.put(self._path(f"/types/{type_id}"), data)

    async def delete_leave_type(self, type_id: int) -> dict:
        return await self.api.delete(self._path(f"/types/{type_id}"))

    async def balance(self, employee_id: Optional[int] = None, year: Optional[int] = None) -> list:
        suffix = f"/balance/{employee_id}" if employee_id is not None else "/balance"
        return await self.api.get(self._path(suffix), {"year": year})

    async def initialize_balance(self, employee_id: int, leave_year: Optional[int] = None) -> dict:
        return await self.api.post(
            self._path(f"/initialize-balance/{employee_id}"), {"leave_year": leave_year},
        )

    async def initialize_my_balance(self, leave_year: Optional[int] = None) -> dict:
        return await self.api.post(self._path("/initialize-my-balance"), {"leave_year": leave_year})

    async def initialize_all(self, leave_year: Optional[int] = None) -> dict:
        return await self.api.post(self._path("/initialize-all"), {"leave_year": leave_year})

    async def carry_forward(self, employee_id: int, from_year: int, to_year: int) -> dict:
        return await self.api.post(
            self._path("/carry-forward"),
            {"employee_id": employee_id, "from_year": from_year, "to_year": to_year},
        )

    async def apply(self, leave_type_id: int, start_date: date, end_date: date,
                    reason: Optional[str] = None, total_days: Optional[float] = None) -> dict:
        return await self.api.post(self._path("/apply"), {
            "leave_type_id": leave_type_id,
            "start_date": start_date,
            "end_date": end_date,
            "total_days": total_days,
            "reason": reason,
        })

    async def my_leaves(self, status: Optional[str] = None) -> list:
        return await self.api.get(self._path("/my-leaves"), {"status": status})

    async def pending(self) -> list:
        return await self.api.get(self._path("/pending"))

    async def approve(self, leave_id: int) -> dict:
        return await self.api.put(self._path(f"/approve/{leave_id}"))

    async def reject(self, leave_id: int, rejection_reason: Optional[str] = None) -> dict:
        return await self.api.put(
            self._path(f"/reject/{leave_id}"), {"rejection_reason": rejection_reason},
        )

    async def cancel(self, leave_id: int) -> dict:
        return await self.api.put(self._path(f"/cancel/{leave_id}"))

    async def request_wfh(self, on_date: date, work_mode: str = "WFH",
                          reason: Optional[str] = None) -> dict:
        return await self.api.post(
            self._path("/wfh-request"), {"date": on_date, "work_mode": work_mode, "reason": reason},
        )

    async def wfh_requests(self) -> list:
        return await self.api.get(self._path("/wfh-requests"))

    async def pending_wfh_requests(self) -> list:
        return await self.api.get(self._path("/wfh-requests/pending"))


class LeavePlanService(_Service):
    prefix = "/leaves/plans"

    async def list_plans(self) -> list:
        return await self.api.get(self._path())

    async def get_plan(self, plan_id: int) -> dict:
        return await self.api.get(self._path(f"/{plan_id}"))

    async def create_plan(self, data: dict) -> dict:
        return await self.api.post(self._path(), data)

    async def update_plan(self, plan_id: int, data: dict) -> dict:
        return await self.api.put(self._path(f"/{plan_id}"), data)


# ── Payroll ─────────────────────────────────────────────────────────

class PayrollService(_Service):
    prefix = "/payroll"

    async def generate(self, month: int, year: int) -> dict:
        return await self.api.post(self._path("/generate"), {"month": month, "year": year})

    async def runs(self) -> list:
        return await self.api.get(self._path("/runs"))

    async def run(self, run_id: int) -> dict:
        return await self.api.get(self._path(f"/runs/{run_id}"))

    async def finalize(self, run_id: int) -> dict:
        return await self.api.put(self._path(f"/{run_id}/finalize"))

    async def mark_paid(self, run_id: int) -> dict:
        return await self.api.put(self._path(f"/{run_id}/mark-paid"))

    async def recalculate(self, employee_id: int, month: int, year: int) -> dict:
        return await self.api.post(
            self._path(f"/recalculate/{employee_id}"), {"month": month, "year": year},
        )

    async def my_payslips(self) -> list:
        return await self.api.get(self._path("/my-payslips"))

    async def all_slips(self, month: Optional[int] = None, year: Optional[int] = None) -> list:
        return await self.api.get(self._path("/slips/all"), {"month": month, "year": year})

    async def slip(self, slip_id: int) -> dict:
        return await self.api.get(self._path(f"/slips/{slip_id}"))

    async def salary_structure(self, employee_id: Optional[int] = None) -> dict:
        if employee_id is None:
            return await self.api.get(self._path("/my-salary-structure"))
        return await self.api.get(self._path(f"/salary-structure/{employee_id}"))

    async def update_salary_structure(self, employee_id: int, data: dict) -> dict:
        return await self.api.put(self._path(f"/salary-structure/{employee_id}"), data)


# ── Projects / timesheets / compliance / work updates ──────────────

class ProjectService(_Service):
    prefix = "/projects"

    async def list_projects(self, status: Optional[str] = None,
                            client_name: Optional[str] = None) -> list:
        return await self.api.get(self._path(), {"status": status, "client_name": client_name})

    async def get_project(self, project_id: int) -> dict:
        return await self.api.get(self._path(f"/{project_id}"))

    async def create_project(self, data: dict) -> dict:
        return await self.api.post(self._path(), data)

    async def update_project(self, project_id: int, data: dict) -> dict:
        return await self.api.put(self._path(f"/{project_id}"), data)

    async def delete_project(self, project_id: int) -> dict:
        return await self.api.delete(self._path(f"/{project_id}"))

    async def my_projects(self) -> list:
        return await self.api.get(self._path("/my-projects"))

    async def assignments(self, project_id: int, status: Optional[str] = None) -> list:
        return await self.api.get(self._path(f"/{project_id}/assignments"), {"status": status})

    async def assign(self, project_id: int, data: dict) -> dict:
        return await self.api.post(self._path(f"/{project_id}/assignments"), data)

    async def update_assignment(self, assignment_id: int, data: dict) -> dict:
        return await self.api.put(self._path(f"/assignments/{assignment_id}"), data)

    async def remove_assignment(self, assignment_id: int) -> dict:
        return await self.api.delete(self._path(f"/assignments/{assignment_id}"))


class TimesheetService(_Service):
    prefix = "/timesheets"

    async def assignment_status(self) -> dict:
        return await self.api.get(self._path("/assignment-status"))

    async def submit_regular(self, data: dict) -> dict:
        return await self.api.post(self._path("/regular/submit"), data)

    async def my_regular_timesheets(self, **period) -> list:
        return await self.api.get(self._path("/regular/my-timesheets"), _period(**period))

    async def submit_project(self, data: dict) -> dict:
        return await self.api.post(self._path("/project/submit"), data)

    async def my_project_timesheets(self, project_id: Optional[int] = None, **period) -> list:
        params = _period(**period)
        params["project_id"] = project_id
        return await self.api.get(self._path("/project/my-timesheets"), params)

    async def my_stats(self, month: Optional[int] = None, year: Optional[int] = None) -> dict:
        return await self.api.get(self._path("/my-stats"), {"month": month, "year": year})

    async def pending_validation(self, project_id: Optional[int] = None,
                                 employee_id: Optional[int] = None, **period) -> list:
        params = _period(**period)
        params.update(project_id=project_id, employee_id=employee_id)
        return await self.api.get(self._path("/admin/pending-validation"), params)

    async def validate_client(self, data: dict) -> dict:
        return await self.api.post(self._path("/admin/validate"), data)

    async def review(self, timesheet_id: int, status: str, remarks: Optional[str] = None) -> dict:
        return await self.api.put(
            self._path(f"/admin/validate/{timesheet_id}"), {"status": status, "remarks": remarks},
        )

    async def admin_stats(self, month: Optional[int] = None, year: Optional[int] = None) -> dict:
        return await self.api.get(self._path("/admin/stats"), {"month": month, "year": year})


class ComplianceService(_Service):
    prefix = "/compliance"

    async def my_status(self) -> dict:
        return await self.api.get(self._path("/my-status"))

    async def my_history(self, start_date: Optional[date] = None,
                         end_date: Optional[date] = None) -> list:
        return await self.api.get(
            self._path("/my-history"), {"start_date": start_date, "end_date": end_date},
        )

    async def period_status(self, month: int, year: int) -> dict:
        return await self.api.get(self._path(f"/period-status/{month}/{year}"))

    async def admin_dashboard(self) -> dict:
        return await self.api.get(self._path("/admin/dashboard"))

    async def non_compliant(self, on_date: Optional[date] = None) -> list:
        return await self.api.get(self._path("/admin/non-compliant"), {"date": on_date})

    async def send_reminders(self, on_date: Optional[date] = None,
                             employee_ids: Optional[list[int]] = None) -> dict:
        return await self.api.post(
            self._path("/admin/send-reminders"), {"date": on_date, "employee_ids": employee_ids},
        )

    async def bulk_approve(self, timesheet_ids: list[int], notes: Optional[str] = None) -> dict:
        return await self.api.post(
            self._path("/admin/bulk-approve"), {"timesheet_ids": timesheet_ids, "notes": notes},
        )

    async def close_month(self, month: int, year: int) -> dict:
        return await self.api.post(self._path("/admin/close-month"), {"month": month, "year": year})

    async def reopen_month(self, month: int, year: int, reason: str) -> dict:
        return await self.api.post(
            self._path("/admin/reopen-month"), {"month": month, "year": year, "reason": reason},
        )

    async def monthly_report(self, month: Optional[int] = None, year: Optional[int] = None) -> dict:
        return await self.api.get(self._path("/admin/monthly-report"), {"month": month, "year": year})

    async def team_dashboard(self) -> dict:
        return await self.api.get(self._path("/manager/dashboard"))

    async def team_non_compliant(self, on_date: Optional[date] = None) -> list:
        return await self.api.get(self._path("/manager/non-compliant"), {"date": on_date})

    async def team_send_reminders(self, on_date: Optional[date] = None,
                                  employee_ids: Optional[list[int]] = None) -> dict:
        return await self.api.post(
            self._path("/manager/send-reminders"), {"date": on_date, "employee_ids": employee_ids},
        )


class WorkUpdateService(_Service):
    prefix = "/work-updates"

    async def my_projects(self) -> list:
        return await self.api.get(self._path("/my-projects"))

    async def my_updates(self, start_date: Optional[date] = None, end_date: Optional[date] = None,
                         project_id: Optional[int] = None) -> list:
        return await self.api.get(
            self._path("/my-updates"),
            {"start_date": start_date, "end_date": end_date, "project_id": project_id},
        )

    async def submit(self, data: dict) -> dict:
        return await self.api.post(self._path("/submit"), data)

    async def compliance_status(self, on_date: Optional[date] = None) -> dict:
        return await self.api.get(self._path("/compliance-status"), {"date": on_date})

    async def delete(self, update_id: int) -> dict:
        return await self.api.delete(self._path(f"/{update_id}"))


# ── Assets ──────────────────────────────────────────────────────────

class AssetService(_Service):
    prefix = "/assets"

    async def list_assets(self, status: Optional[str] = None, asset_type: Optional[str] = None,
                          search: Optional[str] = None) -> list:
        return await self.api.get(
            self._path(), {"status": status, "type": asset_type, "search": search},
        )

    async def get_asset(self, asset_id: int) -> dict:
        return await self.api.get(self._path(f"/{asset_id}"))

    async def create_asset(self, data: dict) -> dict:
        return await self.api.post(self._path(), data)

    async def update_asset(self, asset_id: int, data: dict) -> dict:
        return await self.api.put(self._path(f"/{asset_id}"), data)

    async def delete_asset(self, asset_id: int) -> dict:
        return await self.api.delete(self._path(f"/{asset_id}"))

    async def history(self, asset_id: int) -> list:
        return await self.api.get(self._path(f"/{asset_id}/history"))

    async def allocate(self, data: dict) -> dict:
        return await self.api.post(self._path("/allocate"), data)

    async def return_asset(self, allocation_id: int, data: dict) -> dict:
        return await self.api.put(self._path(f"/{allocation_id}/return"), data)

    async def allocations(self, status: Optional[str] = None) -> list:
        return await self.api.get(self._path("/allocations"), {"status": status})

    async def update_allocation_status(self, allocation_id: int, status: str,
                                       remarks: Optional[str] = None) -> dict:
        return await self.api.put(
            self._path(f"/allocations/{allocation_id}"), {"status": status, "remarks": remarks},
        )

    async def my_assets(self, status: Optional[str] = None) -> list:
        return await self.api.get(self._path("/my-assets"), {"status": status})

    async def employee_assets(self, employee_id: int, status: Optional[str] = None) -> list:
        return await self.api.get(self._path(f"/employee/{employee_id}"), {"status": status})

    async def reports(self) -> dict:
        return await self.api.get(self._path("/reports"))


# ── Announcements / holidays / notifications / support ─────────────

class AnnouncementService(_Service):
    prefix = "/announcements"

    async def list_announcements(self, include_inactive: bool = False) -> list:
        return await self.api.get(self._path(), {"include_inactive": include_inactive})

    async def get_announcement(self, announcement_id: int) -> dict:
        return await self.api.get(self._path(f"/{announcement_id}"))

    async def create_announcement(self, data: dict) -> dict:
        return await self.api.post(self._path(), data)

    async def update_announcement(self, announcement_id: int, data: dict) -> dict:
        return await self.api.put(self._path(f"/{announcement_id}"), data)

    async def deactivate(self, announcement_id: int) -> dict:
        return await self.api.put(self._path(f"/{announcement_id}/deactivate"))

    async def delete_announcement(self, announcement_id: int) -> dict:
        return await self.api.delete(self._path(f"/{announcement_id}"))


class HolidayService(_Service):
    prefix = "/holidays"

    async def list_holidays(self, year: Optional[int] = None,
                            location: Optional[str] = None) -> list:
        return await self.api.get(self._path(), {"year": year, "location": location})

    async def upcoming(self, limit: int = 5) -> list:
        return await self.api.get(self._path("/upcoming"), {"limit": limit})

    async def create_holiday(self, data: dict) -> dict:
        return await self.api.post(self._path(), data)

    async def update_holiday(self, holiday_id: int, data: dict) -> dict:
        return await self.api.put(self._path(f"/{holiday_id}"), data)

    async def delete_holiday(self, holiday_id: int) -> dict:
        return await self.api.delete(self._path(f"/{holiday_id}"))


class NotificationService(_Service):
    prefix = "/notifications"

    async def my_notifications(self, unread_only: bool = False, limit: int = 50) -> dict:
        return await self.api.get(self._path("/my"), {"unread_only": unread_only, "limit": limit})

    async def unread_count(self) -> dict:
        return await self.api.get(self._path("/unread-count"))

    async def mark_read(self, notification_id: int) -> dict:
        return await self.api.put(self._path(f"/{notification_id}/read"))

    async def mark_all_read(self) -> dict:
        return await self.api.put(self._path("/mark-all-read"))

    async def delete(self, notification_id: int) -> dict:
        return await self.api.delete(self._path(f"/{notification_id}"))

    async def send(self, employee_id: int, title: str, message: str, type: str = "info") -> dict:
        return await self.api.post(self._path("/send"), {
            "employee_id": employee_id, "title": title, "message": message, "type": type,
        })

    async def broadcast(self, title: str, message: str, type: str = "announcement",
                        department_id: Optional[int] = None) -> dict:
        return await self.api.post(self._path("/broadcast"), {
            "title": title, "message": message, "type": type, "department_id": department_id,
        })


class SupportService(_Service):
    prefix = "/support"

    async def list_tickets(self, status: Optional[str] = None, priority: Optional[str] = None,
                           category: Optional[str] = None, page: int = 1,
                           page_size: int = 50) -> dict:
        return await self.api.get(self._path(), {
            "status": status, "priority": priority, "category": category,
            "page": page, "page_size": page_size,
        })

    async def my_tickets(self) -> list:
        return await self.api.get(self._path("/my-tickets"))

    async def get_ticket(self, ticket_id: int) -> dict:
        return await self.api.get(self._path(f"/{ticket_id}"))

    async def create_ticket(self, subject: str, description: str, category: str = "Other",
                            priority: str = "medium") -> dict:
        return await self.api.post(self._path(), {
            "subject": subject, "description": description,
            "category": category, "priority": priority,
        })

    async def update_ticket(self, ticket_id: int, data: dict) -> dict:
        return await self.api.put(self._path(f"/{ticket_id}"), data)

    async def close_ticket(self, ticket_id: int) -> dict:
        return await self.api.put(self._path(f"/{ticket_id}/close"))

    async def add_comment(self, ticket_id: int, comment: str) -> dict:
        return await self.api.post(self._path(f"/{ticket_id}/comment"), {"comment": comment})


# ── Dashboard / birthdays ───────────────────────────────────────────

class DashboardService(_Service):
    prefix = "/dashboard"

    async def admin(self) -> dict:
        return await self.api.get(self._path("/admin"))

    async def hr(self) -> dict:
        return await self.api.get(self._path("/hr"))

    async def manager(self) -> dict:
        """Summary of the caller's direct reports."""
        return await self.api.get(self._path("/manager"))

    async def employee(self) -> dict:
        return await self.api.get(self._path("/employee"))


class BirthdayService(_Service):
    prefix = "/dashboard/birthdays"

    async def upcoming(self, days: int = 7) -> dict:
        return await self.api.get(self._path(), {"days": days})

    async def send_wish(self, employee_id: int, wish_message: str) -> dict:
        return await self.api.post(
            self._path("/wishes"), {"employee_id": employee_id, "wish_message": wish_message},
        )

    async def received(self) -> list:
        return await self.api.get(self._path("/wishes/received"))

    async def wishes_for(self, employee_id: int) -> list:
        return await self.api.get(self._path(f"/{employee_id}/wishes"))


# ── Reports / master data ───────────────────────────────────────────

class ReportService(_Service):
    prefix = "/reports"

    async def attendance(self, start_date: Optional[date] = None, end_date: Optional[date] = None,
                         department_id: Optional[int] = None) -> dict:
        return await self.api.get(self._path("/attendance"), {
            "start_date": start_date, "end_date": end_date, "department_id": department_id,
        })

    async def leaves(self, year: Optional[int] = None, department_id: Optional[int] = None) -> dict:
        return await self.api.get(self._path("/leaves"), {"year": year, "department_id": department_id})

    async def payroll(self, month: Optional[int] = None, year: Optional[int] = None) -> dict:
        return await self.api.get(self._path("/payroll"), {"month": month, "year": year})

    async def headcount(self) -> dict:
        return await self.api.get(self._path("/headcount"))

    async def download(self, report_type: str, **params) -> bytes:
        """Fetch a report as CSV bytes."""
        return await self.api.download(self._path(f"/{report_type}/download"), params)


class MasterDataService(_Service):
    """Generic ``/{type}`` CRUD; *item_type* is e.g. ``departments``."""

    async def list_items(self, item_type: str, include_inactive: bool = True,
                         search: Optional[str] = None) -> list:
        return await self.api.get(
            f"/{item_type}", {"include_inactive": include_inactive, "search": search},
        )

    async def get_item(self, item_type: str, item_id: int) -> dict:
        return await self.api.get(f"/{item_type}/{item_id}")

    async def create_item(self, item_type: str, data: dict) -> dict:
        return await self.api.post(f"/{item_type}", data)

    async def update_item(self, item_type: str, item_id: int, data: dict) -> dict:
        return await self.api.put(f"/{item_type}/{item_id}", data)

    async def delete_item(self, item_type: str, item_id: int) -> dict:
        return await self.api.delete(f"/{item_type}/{item_id}")

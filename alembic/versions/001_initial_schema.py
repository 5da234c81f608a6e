"""001 – Initial schema: every table, index and enum type.

Tables are created in dependency order: master data and leave plans
first, then employees, then everything that points at an employee.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000+05:30
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: dict[str, list[str]] = {
    "user_role": ["employee", "manager", "hr", "admin"],
    "employment_status": ["working", "resigned", "terminated"],
    "attendance_status": ["present", "absent", "late", "half-day", "leave"],
    "punch_type": ["in", "out"],
    "leave_status": ["pending", "approved", "rejected", "cancelled"],
    "payroll_run_status": ["processing", "draft", "finalized", "paid"],
    "payslip_status": ["generated", "finalized", "paid"],
    "project_status": ["active", "on_hold", "completed"],
    "assignment_status": ["active", "inactive"],
    "timesheet_type": ["regular", "project"],
    "timesheet_status": ["draft", "submitted", "verified", "rejected"],
    "client_validation_status": ["pending_validation", "validated", "rejected", "mismatch"],
    "period_lock_status": ["open", "locked"],
    "asset_status": ["available", "allocated", "under_maintenance", "retired"],
    "asset_condition": ["new", "good", "fair", "poor", "damaged"],
    "allocation_status": ["active", "returned", "lost", "damaged"],
    "announcement_type": ["general", "urgent", "policy", "event"],
    "announcement_priority": ["low", "medium", "high"],
    "ticket_category": ["IT", "HR", "Payroll", "Leave", "Attendance", "Other"],
    "ticket_priority": ["low", "medium", "high", "critical"],
    "ticket_status": ["open", "in-progress", "resolved", "closed"],
    "notification_type": [
        "info", "action_required", "approval", "reminder", "alert", "announcement",
    ],
}


def _enum(name: str) -> sa.Enum:
    return sa.Enum(*ENUM_TYPES[name], name=name)


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(12, 2), nullable=False, server_default="0")


def _days(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(5, 1), nullable=False, server_default="0")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    ]


def _employee_fk(name: str, *, nullable: bool = True, cascade: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.Integer(),
        sa.ForeignKey("employees.id", ondelete="CASCADE" if cascade else None),
        nullable=nullable,
    )


def _id() -> sa.Column:
    return sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True)


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Master data and leave configuration ──────────────────────────────
    op.create_table(
        "master_data_items",
        _id(),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("code", sa.String(50)),
        sa.Column("description", sa.Text()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("attributes", sa.JSON()),
        *_timestamps(),
        sa.UniqueConstraint("type", "name", name="uq_master_data_type_name"),
    )
    op.create_index("ix_master_data_items_type", "master_data_items", ["type"])

    op.create_table(
        "leave_types",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("code", sa.String(20), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        sa.Column("days_allowed", sa.Numeric(5, 1), nullable=False),
        sa.Column("is_paid", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("can_carry_forward", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("max_carry_forward_days", sa.Numeric(5, 1)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "leave_plans",
        _id(),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        sa.Column("leave_year_start_month", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "leave_plan_allocations",
        _id(),
        sa.Column(
            "leave_plan_id", sa.Integer(),
            sa.ForeignKey("leave_plans.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("leave_type_id", sa.Integer(), sa.ForeignKey("leave_types.id"), nullable=False),
        sa.Column("days_allocated", sa.Numeric(5, 1), nullable=False),
        sa.Column("prorate_on_joining", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("leave_plan_id", "leave_type_id", name="uq_plan_leave_type"),
    )

    # ── Employees ────────────────────────────────────────────────────────
    op.create_table(
        "employees",
        _id(),
        sa.Column("employee_number", sa.String(20), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("middle_name", sa.String(100)),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("personal_email", sa.String(255)),
        sa.Column("phone", sa.String(20)),
        sa.Column("gender", sa.String(20)),
        sa.Column("date_of_birth", sa.Date()),
        sa.Column("blood_group", sa.String(5)),
        sa.Column("marital_status", sa.String(20)),
        sa.Column("role", _enum("user_role"), nullable=False, server_default="employee"),
        sa.Column("password_hash", sa.String(255)),
        _employee_fk("reporting_manager_id"),
        sa.Column("department_id", sa.Integer(), sa.ForeignKey("master_data_items.id")),
        sa.Column("designation_id", sa.Integer(), sa.ForeignKey("master_data_items.id")),
        sa.Column("location_id", sa.Integer(), sa.ForeignKey("master_data_items.id")),
        sa.Column(
            "employment_status", _enum("employment_status"),
            nullable=False, server_default="working",
        ),
        sa.Column("date_of_joining", sa.Date()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime()),
        *_timestamps(),
    )
    op.create_index("ix_employees_reporting_manager_id", "employees", ["reporting_manager_id"])
    op.create_index("ix_employees_department_id", "employees", ["department_id"])

    # ── Auth, audit, notifications ───────────────────────────────────────
    op.create_table(
        "user_sessions",
        _id(),
        _employee_fk("employee_id", nullable=False, cascade=True),
        sa.Column("token_hash", sa.String(64), nullable=False, unique=True),
        sa.Column("ip_address", sa.String(45)),
        sa.Column("user_agent", sa.Text()),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("is_revoked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_user_sessions_employee_id", "user_sessions", ["employee_id"])

    op.create_table(
        "audit_trail",
        _id(),
        _employee_fk("actor_id"),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(50)),
        sa.Column("old_values", sa.JSON()),
        sa.Column("new_values", sa.JSON()),
        sa.Column("ip_address", sa.String(45)),
        sa.Column("user_agent", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_audit_trail_entity", "audit_trail", ["entity_type", "entity_id"])
    op.create_index("ix_audit_trail_actor_action", "audit_trail", ["actor_id", "action"])

    op.create_table(
        "notifications",
        _id(),
        _employee_fk("recipient_id", nullable=False, cascade=True),
        sa.Column(
            "notification_type", _enum("notification_type"),
            nullable=False, server_default="info",
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("action_url", sa.String(500)),
        sa.Column("entity_type", sa.String(50)),
        sa.Column("entity_id", sa.Integer()),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_recipient_read", "notifications", ["recipient_id", "is_read"])

    # ── Attendance ───────────────────────────────────────────────────────
    op.create_table(
        "attendance",
        _id(),
        _employee_fk("employee_id", nullable=False, cascade=True),
        sa.Column("attendance_date", sa.Date(), nullable=False),
        sa.Column("check_in", sa.DateTime()),
        sa.Column("check_out", sa.DateTime()),
        sa.Column("first_check_in", sa.DateTime()),
        sa.Column("last_check_out", sa.DateTime()),
        sa.Column("work_mode", sa.String(20), nullable=False, server_default="Office"),
        sa.Column("location", sa.String(255)),
        sa.Column("status", _enum("attendance_status"), nullable=False, server_default="present"),
        sa.Column("total_hours", sa.Numeric(6, 2)),
        sa.Column("gross_hours", sa.Numeric(6, 2)),
        sa.Column("break_hours", sa.Numeric(6, 2)),
        sa.Column("notes", sa.Text()),
        sa.Column("source", sa.String(20), nullable=False, server_default="web"),
        sa.Column("ip_address", sa.String(45)),
        sa.Column("device_info", sa.Text()),
        *_timestamps(),
        sa.UniqueConstraint("employee_id", "attendance_date", name="uq_attendance_employee_date"),
    )
    op.create_index("ix_attendance_date", "attendance", ["attendance_date"])

    op.create_table(
        "attendance_punches",
        _id(),
        sa.Column(
            "attendance_id", sa.Integer(),
            sa.ForeignKey("attendance.id", ondelete="CASCADE"), nullable=False,
        ),
        _employee_fk("employee_id", nullable=False, cascade=True),
        sa.Column("punch_type", _enum("punch_type"), nullable=False),
        sa.Column("punch_time", sa.DateTime(), nullable=False),
        sa.Column("punch_date", sa.Date(), nullable=False),
        sa.Column("location", sa.String(255)),
        sa.Column("notes", sa.Text()),
        sa.Column("ip_address", sa.String(45)),
        sa.Column("device_info", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_attendance_punches_attendance_id", "attendance_punches", ["attendance_id"])
    op.create_index(
        "ix_attendance_punches_employee_date", "attendance_punches", ["employee_id", "punch_date"],
    )

    # ── Leave ────────────────────────────────────────────────────────────
    op.create_table(
        "employee_leave_balances",
        _id(),
        _employee_fk("employee_id", nullable=False, cascade=True),
        sa.Column("leave_type_id", sa.Integer(), sa.ForeignKey("leave_types.id"), nullable=False),
        sa.Column("leave_year", sa.Integer(), nullable=False),
        _days("allocated_days"),
        _days("used_days"),
        _days("carry_forward_days"),
        _days("available_days"),
        *_timestamps(),
        sa.UniqueConstraint("employee_id", "leave_type_id", "leave_year", name="uq_leave_balance"),
    )

    op.create_table(
        "leaves",
        _id(),
        _employee_fk("employee_id", nullable=False, cascade=True),
        sa.Column("leave_type_id", sa.Integer(), sa.ForeignKey("leave_types.id")),
        sa.Column("leave_type", sa.String(20)),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("total_days", sa.Numeric(5, 1)),
        sa.Column("reason", sa.Text()),
        sa.Column("status", _enum("leave_status"), nullable=False, server_default="pending"),
        sa.Column("applied_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        _employee_fk("approved_by"),
        sa.Column("approved_at", sa.DateTime()),
        sa.Column("rejection_reason", sa.Text()),
        *_timestamps(),
    )
    op.create_index("ix_leaves_employee_dates", "leaves", ["employee_id", "start_date", "end_date"])
    op.create_index("ix_leaves_status", "leaves", ["status"])

    # ── Payroll ──────────────────────────────────────────────────────────
    op.create_table(
        "salary_structures",
        _id(),
        sa.Column(
            "employee_id", sa.Integer(),
            sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, unique=True,
        ),
        _money("basic"),
        _money("hra"),
        _money("conveyance"),
        _money("special_allowance"),
        _money("pf"),
        _money("esi"),
        _money("professional_tax"),
        _money("other_deductions"),
        sa.Column("effective_from", sa.Date()),
        *_timestamps(),
    )

    op.create_table(
        "payroll_runs",
        _id(),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("status", _enum("payroll_run_status"), nullable=False, server_default="processing"),
        sa.Column("total_employees", sa.Integer(), nullable=False, server_default="0"),
        _money("total_gross"),
        _money("total_deductions"),
        _money("total_net"),
        _employee_fk("generated_by"),
        sa.Column("generated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("finalized_at", sa.DateTime()),
        sa.Column("paid_at", sa.DateTime()),
        *_timestamps(),
        sa.UniqueConstraint("month", "year", name="uq_payroll_run_period"),
    )

    op.create_table(
        "payroll_slips",
        _id(),
        sa.Column(
            "payroll_run_id", sa.Integer(),
            sa.ForeignKey("payroll_runs.id", ondelete="CASCADE"), nullable=False,
        ),
        _employee_fk("employee_id", nullable=False, cascade=True),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        _money("basic"),
        _money("hra"),
        _money("conveyance"),
        _money("special_allowance"),
        _money("gross_salary"),
        _money("pf"),
        _money("esi"),
        _money("professional_tax"),
        _money("other_deductions"),
        _money("total_deductions"),
        _money("net_salary"),
        sa.Column("working_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("present_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", _enum("payslip_status"), nullable=False, server_default="generated"),
        *_timestamps(),
        sa.UniqueConstraint("payroll_run_id", "employee_id", name="uq_payroll_slip_run_employee"),
    )
    op.create_index(
        "ix_payroll_slips_employee_period", "payroll_slips", ["employee_id", "year", "month"],
    )

    # ── Projects, timesheets, compliance, work updates ───────────────────
    op.create_table(
        "projects",
        _id(),
        sa.Column("project_code", sa.String(50), unique=True),
        sa.Column("project_name", sa.String(200), nullable=False),
        sa.Column("client_name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date()),
        sa.Column("status", _enum("project_status"), nullable=False, server_default="active"),
        _employee_fk("manager_id"),
        _employee_fk("created_by"),
        *_timestamps(),
    )

    op.create_table(
        "project_assignments",
        _id(),
        sa.Column(
            "project_id", sa.Integer(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
        ),
        _employee_fk("employee_id", nullable=False, cascade=True),
        sa.Column("role", sa.String(100)),
        sa.Column("allocation_percentage", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("assignment_start_date", sa.Date(), nullable=False),
        sa.Column("assignment_end_date", sa.Date()),
        sa.Column("status", _enum("assignment_status"), nullable=False, server_default="active"),
        _employee_fk("assigned_by"),
        *_timestamps(),
    )
    op.create_index(
        "ix_project_assignments_employee", "project_assignments", ["employee_id", "status"],
    )
    op.create_index("ix_project_assignments_project", "project_assignments", ["project_id"])

    op.create_table(
        "timesheets",
        _id(),
        _employee_fk("employee_id", nullable=False, cascade=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id")),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("timesheet_type", _enum("timesheet_type"), nullable=False, server_default="regular"),
        sa.Column("hours_breakdown", sa.JSON()),
        sa.Column("total_hours", sa.Numeric(5, 2), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("status", _enum("timesheet_status"), nullable=False, server_default="draft"),
        sa.Column("submission_date", sa.DateTime()),
        _employee_fk("verified_by"),
        sa.Column("verified_at", sa.DateTime()),
        sa.Column("review_remarks", sa.Text()),
        sa.Column("client_timesheet_status", _enum("client_validation_status")),
        sa.Column("client_reported_hours", sa.Numeric(6, 2)),
        sa.Column("validation_remarks", sa.Text()),
        _employee_fk("validated_by"),
        sa.Column("validated_at", sa.DateTime()),
        *_timestamps(),
    )
    op.create_index("ix_timesheets_employee_date", "timesheets", ["employee_id", "date"])
    op.create_index("ix_timesheets_status", "timesheets", ["status"])

    op.create_table(
        "payroll_period_locks",
        _id(),
        sa.Column("payroll_period", sa.String(7), nullable=False, unique=True),
        sa.Column("lock_status", _enum("period_lock_status"), nullable=False, server_default="open"),
        sa.Column("pending_verifications", sa.Integer(), nullable=False, server_default="0"),
        _employee_fk("locked_by"),
        sa.Column("locked_at", sa.DateTime()),
        _employee_fk("reopened_by"),
        sa.Column("reopened_at", sa.DateTime()),
        sa.Column("reopen_reason", sa.Text()),
        *_timestamps(),
    )

    op.create_table(
        "work_updates",
        _id(),
        _employee_fk("employee_id", nullable=False, cascade=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("update_date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("hours_worked", sa.Numeric(5, 2), nullable=False),
        sa.Column("tasks_completed", sa.Text()),
        sa.Column("blockers", sa.Text()),
        sa.Column("status", sa.String(20), nullable=False, server_default="submitted"),
        *_timestamps(),
        sa.UniqueConstraint("employee_id", "project_id", "update_date", name="uq_work_update_day"),
    )

    # ── Assets ───────────────────────────────────────────────────────────
    op.create_table(
        "assets",
        _id(),
        sa.Column("asset_code", sa.String(50), unique=True),
        sa.Column("asset_type", sa.String(50), nullable=False),
        sa.Column("asset_name", sa.String(200), nullable=False),
        sa.Column("brand", sa.String(100)),
        sa.Column("model", sa.String(100)),
        sa.Column("serial_number", sa.String(100)),
        sa.Column("purchase_date", sa.Date()),
        sa.Column("purchase_cost", sa.Numeric(12, 2)),
        sa.Column("condition", _enum("asset_condition"), nullable=False, server_default="good"),
        sa.Column("location", sa.String(200)),
        sa.Column("status", _enum("asset_status"), nullable=False, server_default="available"),
        sa.Column("notes", sa.Text()),
        _employee_fk("created_by"),
        *_timestamps(),
    )
    op.create_index("ix_assets_status_type", "assets", ["status", "asset_type"])

    op.create_table(
        "asset_allocations",
        _id(),
        sa.Column(
            "asset_id", sa.Integer(),
            sa.ForeignKey("assets.id", ondelete="CASCADE"), nullable=False,
        ),
        _employee_fk("employee_id", nullable=False),
        sa.Column("allocated_date", sa.Date(), nullable=False),
        sa.Column("expected_return_date", sa.Date()),
        sa.Column("returned_date", sa.Date()),
        sa.Column("condition_at_allocation", _enum("asset_condition"), nullable=False),
        sa.Column("condition_at_return", _enum("asset_condition")),
        sa.Column("allocation_remarks", sa.Text()),
        sa.Column("return_remarks", sa.Text()),
        sa.Column("status", _enum("allocation_status"), nullable=False, server_default="active"),
        _employee_fk("allocated_by"),
        _employee_fk("received_by"),
        *_timestamps(),
    )
    op.create_index("ix_asset_allocations_asset", "asset_allocations", ["asset_id", "status"])
    op.create_index("ix_asset_allocations_employee", "asset_allocations", ["employee_id"])

    # ── Announcements, holidays, support ─────────────────────────────────
    op.create_table(
        "announcements",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "announcement_type", _enum("announcement_type"),
            nullable=False, server_default="general",
        ),
        sa.Column("priority", _enum("announcement_priority"), nullable=False, server_default="medium"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expires_at", sa.DateTime()),
        _employee_fk("created_by"),
        *_timestamps(),
    )

    op.create_table(
        "holidays",
        _id(),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("holiday_date", sa.Date(), nullable=False),
        sa.Column("holiday_type", sa.String(50), nullable=False, server_default="public"),
        sa.Column("location", sa.String(100)),
        sa.Column("description", sa.Text()),
        sa.Column("is_optional", sa.Boolean(), nullable=False, server_default=sa.false()),
        _employee_fk("created_by"),
        *_timestamps(),
        sa.UniqueConstraint("holiday_date", "name", "location", name="uq_holiday_date_name_loc"),
    )
    op.create_index("ix_holidays_date", "holidays", ["holiday_date"])

    op.create_table(
        "support_tickets",
        _id(),
        sa.Column("ticket_number", sa.String(20), unique=True),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", _enum("ticket_category"), nullable=False, server_default="Other"),
        sa.Column("priority", _enum("ticket_priority"), nullable=False, server_default="medium"),
        sa.Column("status", _enum("ticket_status"), nullable=False, server_default="open"),
        _employee_fk("raised_by", nullable=False),
        sa.Column("raised_by_name", sa.String(200)),
        _employee_fk("assigned_to"),
        sa.Column("assigned_to_name", sa.String(200)),
        sa.Column("resolved_at", sa.DateTime()),
        sa.Column("closed_at", sa.DateTime()),
        *_timestamps(),
    )
    op.create_index("ix_support_tickets_raised_by", "support_tickets", ["raised_by"])
    op.create_index("ix_support_tickets_status", "support_tickets", ["status"])

    op.create_table(
        "ticket_comments",
        _id(),
        sa.Column(
            "ticket_id", sa.Integer(),
            sa.ForeignKey("support_tickets.id", ondelete="CASCADE"), nullable=False,
        ),
        _employee_fk("author_id"),
        sa.Column("author_name", sa.String(200)),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------

CREATION_ORDER = [
    "master_data_items",
    "leave_types",
    "leave_plans",
    "leave_plan_allocations",
    "employees",
    "user_sessions",
    "audit_trail",
    "notifications",
    "attendance",
    "attendance_punches",
    "employee_leave_balances",
    "leaves",
    "salary_structures",
    "payroll_runs",
    "payroll_slips",
    "projects",
    "project_assignments",
    "timesheets",
    "payroll_period_locks",
    "work_updates",
    "assets",
    "asset_allocations",
    "announcements",
    "holidays",
    "support_tickets",
    "ticket_comments",
]


def downgrade() -> None:
    for table in reversed(CREATION_ORDER):
        op.drop_table(table)

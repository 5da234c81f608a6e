"""002 – Add extended employee profile columns.

Attendance number, address, family and emergency contacts, org mapping
and policy ids, statutory numbers and exit fields. Existing columns are
detected through the inspector and left alone, so the revision is safe
on databases already patched by ``migration/add_employee_columns.py``.

Revision ID: 002_add_employee_profile_columns
Revises: 001_initial_schema
Create Date: 2026-10-19 10:00:00.000000+05:30
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "002_add_employee_profile_columns"
down_revision = "001_initial_schema"
branch_labels = None
depends_on = None

LEAVE_PLAN_FK = "fk_employees_leave_plan_id_leave_plans"

PROFILE_COLUMNS = [
    sa.Column("attendance_number", sa.String(50)),
    sa.Column("current_address", sa.Text()),
    sa.Column("permanent_address", sa.Text()),
    sa.Column("father_name", sa.String(200)),
    sa.Column("mother_name", sa.String(200)),
    sa.Column("spouse_name", sa.String(200)),
    sa.Column("emergency_contact_name", sa.String(200)),
    sa.Column("emergency_contact_phone", sa.String(20)),
    sa.Column("employment_type", sa.String(50)),
    sa.Column("probation_end_date", sa.Date()),
    sa.Column("business_unit_id", sa.Integer()),
    sa.Column("legal_entity_id", sa.Integer()),
    sa.Column("cost_center_id", sa.Integer()),
    sa.Column("band_id", sa.Integer()),
    sa.Column("pay_grade_id", sa.Integer()),
    sa.Column("leave_plan_id", sa.Integer(), sa.ForeignKey("leave_plans.id", name=LEAVE_PLAN_FK)),
    sa.Column("shift_policy_id", sa.Integer()),
    sa.Column("weekly_off_policy_id", sa.Integer()),
    sa.Column("holiday_list_id", sa.Integer()),
    sa.Column("pan_number", sa.String(20)),
    sa.Column("pf_number", sa.String(50)),
    sa.Column("uan_number", sa.String(50)),
    sa.Column("resignation_date", sa.Date()),
    sa.Column("last_working_date", sa.Date()),
    sa.Column("exit_reason", sa.Text()),
]


def _fresh(column: sa.Column) -> sa.Column:
    foreign_keys = [sa.ForeignKey(fk.target_fullname, name=fk.name) for fk in column.foreign_keys]
    return sa.Column(column.name, column.type, *foreign_keys, nullable=True)


def _existing_columns() -> set[str]:
    inspector = sa.inspect(op.get_bind())
    return {col["name"] for col in inspector.get_columns("employees")}


def upgrade() -> None:
    existing = _existing_columns()
    for column in PROFILE_COLUMNS:
        if column.name not in existing:
            op.add_column("employees", _fresh(column))


def downgrade() -> None:
    existing = _existing_columns()
    for column in reversed(PROFILE_COLUMNS):
        if column.name in existing:
            for fk in column.foreign_keys:
                op.drop_constraint(fk.name, "employees", type_="foreignkey")
            op.drop_column("employees", column.name)

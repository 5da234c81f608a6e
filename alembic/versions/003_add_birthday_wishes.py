"""003 – Birthday wishes colleagues leave for each other.

Revision ID: 003_add_birthday_wishes
Revises: 002_add_employee_profile_columns
Create Date: 2026-10-19 11:00:00.000000+05:30
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "003_add_birthday_wishes"
down_revision = "002_add_employee_profile_columns"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "birthday_wishes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "employee_id", sa.Integer(),
            sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "wished_by", sa.Integer(),
            sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("wish_message", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_birthday_wishes_employee_id", "birthday_wishes", ["employee_id"])


def downgrade() -> None:
    op.drop_index("ix_birthday_wishes_employee_id", table_name="birthday_wishes")
    op.drop_table("birthday_wishes")

#!/usr/bin/env python3
"""Add the extended profile columns to ``employees``.

Each ``ALTER TABLE`` runs on its own, so the script can be re-run on a
partially migrated database: columns that already exist (MySQL error
1060) are counted as skipped.

Usage:
    python -m migration.add_employee_columns
"""

import re
import sys

from mysql.connector import Error as MySQLError

from migration.config import get_mysql_conn

ER_DUP_FIELDNAME = 1060

ALTERATIONS = [
    # Attendance
    "ADD COLUMN attendance_number VARCHAR(50) AFTER employee_number",
    # Address
    "ADD COLUMN current_address TEXT",
    "ADD COLUMN permanent_address TEXT",
    # Family / emergency
    "ADD COLUMN father_name VARCHAR(200)",
    "ADD COLUMN mother_name VARCHAR(200)",
    "ADD COLUMN spouse_name VARCHAR(200)",
    "ADD COLUMN emergency_contact_name VARCHAR(200)",
    "ADD COLUMN emergency_contact_phone VARCHAR(20)",
    # Employment
    "ADD COLUMN employment_type VARCHAR(50)",
    "ADD COLUMN probation_end_date DATE",
    # Organisation mapping
    "ADD COLUMN business_unit_id INT",
    "ADD COLUMN legal_entity_id INT",
    "ADD COLUMN cost_center_id INT",
    "ADD COLUMN band_id INT",
    "ADD COLUMN pay_grade_id INT",
    # Policies
    "ADD COLUMN leave_plan_id INT",
    "ADD COLUMN shift_policy_id INT",
    "ADD COLUMN weekly_off_policy_id INT",
    "ADD COLUMN holiday_list_id INT",
    # Statutory
    "ADD COLUMN pan_number VARCHAR(20)",
    "ADD COLUMN pf_number VARCHAR(50)",
    "ADD COLUMN uan_number VARCHAR(50)",
    # Exit
    "ADD COLUMN resignation_date DATE",
    "ADD COLUMN last_working_date DATE",
    "ADD COLUMN exit_reason TEXT",
]

_COLUMN_RE = re.compile(r"ADD COLUMN (\w+)")


def column_name(alteration: str) -> str:
    match = _COLUMN_RE.search(alteration)
    return match.group(1) if match else alteration


def apply_alterations(conn, alterations=ALTERATIONS) -> tuple[int, int, int]:
    """Run each alteration; return ``(added, skipped, failed)``."""
    added = skipped = failed = 0
    cur = conn.cursor()
    try:
        for alteration in alterations:
            try:
                cur.execute(f"ALTER TABLE employees {alteration}")
                print(f"  ✓ Added: {column_name(alteration)}")
                added += 1
            except MySQLError as exc:
                if exc.errno == ER_DUP_FIELDNAME:
                    skipped += 1
                else:
                    print(f"  ✗ Failed: {alteration}")
                    print(f"    Error: {exc}")
                    failed += 1
        conn.commit()
    finally:
        cur.close()
    return added, skipped, failed


def main() -> int:
    print("🔄 Adding missing columns to employees table...\n")
    try:
        conn = get_mysql_conn()
    except MySQLError as exc:
        print(f"❌ Could not connect: {exc}")
        return 1

    try:
        added, skipped, failed = apply_alterations(conn)
    finally:
        conn.close()

    print(f"\n✅ Migration complete: {added} added, {skipped} skipped")
    if failed:
        print(f"❌ {failed} alteration(s) failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Make sure an employee has an approved WFH leave for today.

An existing WFH request starting today is approved; otherwise a one-day
approved WFH leave is inserted. The result is re-read and printed.

Usage:
    python -m migration.create_today_wfh --employee-id 932
"""

import argparse
import json
import sys
from datetime import date

from migration.check_wfh import fetch_approved_for
from migration.config import get_mysql_conn


def ensure_wfh(conn, employee_id: int, day: date) -> tuple[str, int]:
    """Approve or insert today's WFH leave; return ``(action, leave_id)``."""
    cur = conn.cursor()
    try:
        cur.execute(
            """SELECT id FROM leaves
               WHERE employee_id = %s AND DATE(start_date) = %s AND leave_type = 'WFH'""",
            (employee_id, day),
        )
        row = cur.fetchone()
        if row:
            leave_id = row[0]
            cur.execute("UPDATE leaves SET status = 'approved' WHERE id = %s", (leave_id,))
            action = "updated"
        else:
            cur.execute(
                """INSERT INTO leaves
                       (employee_id, leave_type, start_date, end_date, total_days,
                        reason, status, applied_at)
                   VALUES (%s, 'WFH', %s, %s, 1, 'Work from home', 'approved', NOW())""",
                (employee_id, day, day),
            )
            leave_id = cur.lastrowid
            action = "created"
        conn.commit()
    finally:
        cur.close()
    return action, leave_id


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create or approve today's WFH leave")
    parser.add_argument("--employee-id", type=int, required=True)
    args = parser.parse_args(argv)

    today = date.today()
    print("Creating WFH request for today:", today.isoformat())

    conn = get_mysql_conn()
    try:
        action, leave_id = ensure_wfh(conn, args.employee_id, today)
        if action == "updated":
            print(f"WFH request {leave_id} already existed, updated to approved")
        else:
            print(f"Created new WFH request with ID: {leave_id}")

        verified = fetch_approved_for(conn, args.employee_id, today)
        print("\nVerified - Approved WFH for today:", json.dumps(verified, indent=2, default=str))
    finally:
        conn.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())

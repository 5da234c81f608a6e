#!/usr/bin/env python3
"""Print an employee's recent WFH/Remote requests and whether today is covered.

Usage:
    python -m migration.check_wfh --employee-id 932
"""

import argparse
import json
import sys
from datetime import date

from migration.config import get_mysql_conn

RECENT_SQL = """
    SELECT id, employee_id, leave_type, start_date, end_date, status, applied_at
    FROM leaves
    WHERE employee_id = %s AND leave_type IN ('WFH', 'Remote')
    ORDER BY start_date DESC
    LIMIT 10
"""

TODAY_SQL = """
    SELECT id, leave_type, start_date, end_date, status
    FROM leaves
    WHERE employee_id = %s
      AND DATE(start_date) <= %s
      AND DATE(end_date) >= %s
      AND leave_type IN ('WFH', 'Remote')
      AND status = 'approved'
"""


def fetch_recent(conn, employee_id: int) -> list[dict]:
    cur = conn.cursor(dictionary=True)
    try:
        cur.execute(RECENT_SQL, (employee_id,))
        return cur.fetchall()
    finally:
        cur.close()


def fetch_approved_for(conn, employee_id: int, day: date) -> list[dict]:
    cur = conn.cursor(dictionary=True)
    try:
        cur.execute(TODAY_SQL, (employee_id, day, day))
        return cur.fetchall()
    finally:
        cur.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Inspect WFH requests for one employee")
    parser.add_argument("--employee-id", type=int, required=True)
    args = parser.parse_args(argv)

    today = date.today()
    conn = get_mysql_conn()
    try:
        print(f"\n=== Checking WFH requests for employee {args.employee_id} ===\n")
        recent = fetch_recent(conn, args.employee_id)
        print("All WFH/Remote requests:", json.dumps(recent, indent=2, default=str))

        print("\nToday's date:", today.isoformat())
        approved = fetch_approved_for(conn, args.employee_id, today)
        print("\nApproved WFH for today:", json.dumps(approved, indent=2, default=str))
    finally:
        conn.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())

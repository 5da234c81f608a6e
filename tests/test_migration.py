"""Maintenance-script tests — run against fake DB-API connections."""

from __future__ import annotations

from datetime import date

from mysql.connector import Error as MySQLError

from migration.add_employee_columns import apply_alterations, column_name
from migration.create_today_wfh import ensure_wfh
from scripts.healthcheck import CheckResult, check_database, check_period_lock


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.lastrowid = None
        self.closed = False

    def execute(self, sql, params=None):
        self.conn.executed.append((" ".join(sql.split()), params))
        error = self.conn.errors.pop(0) if self.conn.errors else None
        if error is not None:
            raise error
        if sql.lstrip().startswith("INSERT"):
            self.lastrowid = 77

    def fetchone(self):
        return self.conn.rows.pop(0) if self.conn.rows else None

    def fetchall(self):
        rows, self.conn.rows = self.conn.rows, []
        return rows

    def close(self):
        self.closed = True


class FakeConn:
    def __init__(self, rows=None, errors=None):
        self.rows = list(rows or [])
        self.errors = list(errors or [])
        self.executed = []
        self.commits = 0
        self.cursors = []

    def cursor(self, dictionary=False):
        cur = FakeCursor(self)
        self.cursors.append(cur)
        return cur

    def commit(self):
        self.commits += 1


# ── add_employee_columns ────────────────────────────────────────────

def test_column_name():
    assert column_name("ADD COLUMN pan_number VARCHAR(20)") == "pan_number"


def test_apply_alterations_counts_existing_columns_as_skipped():
    conn = FakeConn(errors=[
        None,
        MySQLError(msg="Duplicate column name", errno=1060),
        MySQLError(msg="Unknown table", errno=1146),
    ])
    added, skipped, failed = apply_alterations(conn, [
        "ADD COLUMN a INT",
        "ADD COLUMN b INT",
        "ADD COLUMN c INT",
    ])
    assert (added, skipped, failed) == (1, 1, 1)
    assert conn.executed[0][0] == "ALTER TABLE employees ADD COLUMN a INT"
    assert conn.commits == 1
    assert conn.cursors[0].closed


# ── create_today_wfh ────────────────────────────────────────────────

def test_ensure_wfh_approves_existing():
    conn = FakeConn(rows=[(12,)])
    action, leave_id = ensure_wfh(conn, 932, date(2026, 2, 3))
    assert (action, leave_id) == ("updated", 12)
    assert conn.executed[1] == ("UPDATE leaves SET status = 'approved' WHERE id = %s", (12,))
    assert conn.commits == 1


def test_ensure_wfh_inserts_when_missing():
    day = date(2026, 2, 3)
    conn = FakeConn()
    action, leave_id = ensure_wfh(conn, 932, day)
    assert (action, leave_id) == ("created", 77)
    sql, params = conn.executed[1]
    assert sql.startswith("INSERT INTO leaves")
    assert params == (932, day, day)


# ── healthcheck ─────────────────────────────────────────────────────

def test_check_result_rendering():
    ok = CheckResult("Database", True, "Connected (5 tables)")
    assert str(ok) == "✅ Database: Connected (5 tables)"
    warn = CheckResult("Payroll Period", False, "locked", detail="2026-02", severity="warning")
    assert str(warn).startswith("⚠️")
    assert warn.to_dict()["detail"] == "2026-02"


def test_check_database_reports_missing_tables():
    conn = FakeConn(rows=[("employees",), ("attendance",), ("leaves",)])
    result = check_database(conn)
    assert not result.passed
    assert result.detail == "Missing: payroll_runs, timesheets"


def test_check_database_passes():
    tables = ["employees", "attendance", "leaves", "payroll_runs", "timesheets", "projects"]
    result = check_database(FakeConn(rows=[(t,) for t in tables]))
    assert result.passed
    assert result.message == "Connected (6 tables)"


def test_check_period_lock():
    result = check_period_lock(FakeConn(rows=[("locked",)]), date(2026, 2, 14))
    assert result.passed
    assert result.message == "2026-02 is locked"
    assert result.severity == "warning"

    result = check_period_lock(FakeConn(), date(2026, 3, 1))
    assert result.message == "2026-03 is open"
    assert result.severity == "info"


def test_check_period_lock_without_table():
    conn = FakeConn(errors=[MySQLError(msg="Table doesn't exist", errno=1146)])
    result = check_period_lock(conn, date(2026, 2, 14))
    assert result.passed
    assert result.message == "Lock table unavailable"

#!/usr/bin/env python3
"""Check a running HRMS deployment.

Three checks: ``GET /api/v1/health`` answers ``{"status": "healthy"}``,
MySQL holds the core tables, and the current payroll period's lock state
(reported, never failing).

    python -m scripts.healthcheck --url http://localhost:8000 [--skip-db] [--json]

Exits 1 when any check fails.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Optional

import httpx
import mysql.connector
from mysql.connector import Error as MySQLError

from migration.config import DB_CONFIG

logger = logging.getLogger("healthcheck")

CORE_TABLES = ("employees", "attendance", "leaves", "payroll_runs", "timesheets")

_ICONS = {"pass": "✅", "warning": "⚠️", "fail": "❌"}


@dataclass
class CheckResult:
    name: str
    passed: bool
    message: str
    detail: str = ""
    # error | warning | info
    severity: str = "error"

    def to_dict(self) -> dict:
        return asdict(self)

    def __str__(self) -> str:
        if self.passed:
            icon = _ICONS["pass"]
        else:
            icon = _ICONS["warning" if self.severity == "warning" else "fail"]
        line = f"{icon} {self.name}: {self.message}"
        return f"{line}\n     {self.detail}" if self.detail else line


def check_backend_health(base_url: str, timeout: float = 10) -> CheckResult:
    url = base_url.rstrip("/") + "/api/v1/health"

    def fail(message: str, detail: str = "") -> CheckResult:
        return CheckResult("Backend API", False, message, detail or f"URL: {url}")

    try:
        resp = httpx.get(url, timeout=timeout)
    except httpx.HTTPError as exc:
        return fail("Unreachable", f"{url}: {exc}")
    if resp.status_code != 200:
        return fail(f"HTTP {resp.status_code} (expected 200)")
    try:
        body = resp.json()
    except ValueError:
        return fail("Response is not JSON", resp.text[:200])
    if body.get("status") != "healthy":
        return fail(f"Status: {body.get('status', 'missing')} (expected 'healthy')", json.dumps(body))

    version, env = body.get("version", "unknown"), body.get("environment", "unknown")
    return CheckResult("Backend API", True, f"Healthy (v{version}, {env})", f"URL: {url}")


def check_database(conn) -> CheckResult:
    cur = conn.cursor()
    try:
        cur.execute("SHOW TABLES")
        present = {row[0] for row in cur.fetchall()}
    finally:
        cur.close()

    missing = [table for table in CORE_TABLES if table not in present]
    if not missing:
        return CheckResult("Database", True, f"Connected ({len(present)} tables)")
    return CheckResult(
        "Database", False, f"{len(missing)} core table(s) missing", "Missing: " + ", ".join(missing),
    )


def check_period_lock(conn, today: Optional[date] = None) -> CheckResult:
    """Informational only: a locked period is a warning, never a failure."""
    period = (today or date.today()).strftime("%Y-%m")
    cur = conn.cursor()
    try:
        cur.execute(
            "SELECT lock_status FROM payroll_period_locks WHERE payroll_period = %s", (period,),
        )
        row = cur.fetchone()
    except MySQLError as exc:
        return CheckResult("Payroll Period", True, "Lock table unavailable", str(exc), "warning")
    finally:
        cur.close()

    state = row[0] if row else "open"
    return CheckResult(
        "Payroll Period", True, f"{period} is {state}",
        severity="warning" if state == "locked" else "info",
    )


def run_healthcheck(url: str, skip_db: bool = False, timeout: float = 10) -> list[CheckResult]:
    results = [check_backend_health(url, timeout)]
    if skip_db:
        return results + [CheckResult("Database", True, "Skipped (--skip-db)", severity="info")]

    try:
        conn = mysql.connector.connect(**DB_CONFIG, connection_timeout=int(timeout))
    except MySQLError as exc:
        logger.error("Database connection failed: %s", exc)
        return results + [CheckResult("Database", False, "Connection failed", str(exc))]
    try:
        results += [check_database(conn), check_period_lock(conn)]
    finally:
        conn.close()
    return results


def _report(results: list[CheckResult], target: str, stamp: str) -> str:
    rule = "=" * 60
    failed = [r for r in results if not r.passed]
    verdict = (
        f"  ❌ {len(failed)}/{len(results)} CHECKS FAILED" if failed
        else f"  ✅ ALL {len(results)} CHECKS PASSED"
    )
    body = "\n\n".join(str(r) for r in results)
    return f"\n{rule}\n  HRMS HEALTH CHECK\n  Target : {target}\n  Time   : {stamp}\n{rule}\n\n{body}\n\n{rule}\n{verdict}\n{rule}"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="HRMS health check")
    parser.add_argument("--url", default="http://localhost:8000", help="API base URL")
    parser.add_argument("--skip-db", action="store_true", help="only check the API")
    parser.add_argument("--json", dest="as_json", action="store_true", help="machine-readable output")
    parser.add_argument("--timeout", type=float, default=10, help="seconds per check")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    results = run_healthcheck(args.url, skip_db=args.skip_db, timeout=args.timeout)
    stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    if args.as_json:
        print(json.dumps({
            "timestamp": stamp,
            "target": args.url,
            "checks": [r.to_dict() for r in results],
            "all_passed": all(r.passed for r in results),
        }, indent=2))
    else:
        print(_report(results, args.url, stamp))
    return 0 if all(r.passed for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())

"""Fixtures: a per-test SQLite schema, the app wired to it, signed-in users
for each role, and small row factories."""

from __future__ import annotations

import os

# Settings are read at import time, so these must land first
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")
os.environ.setdefault("PASSWORD_HASH_METHOD", "pbkdf2:sha256:1000")

import importlib
import itertools
from datetime import date, timedelta
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hrms.auth.service import create_session, hash_password
from hrms.common.constants import UserRole
from hrms.common.rate_limit import limiter
from hrms.database import Base, get_db
from hrms.main import create_app

DOMAINS = (
    "announcements", "assets", "attendance", "auth", "compliance", "dashboard", "employees",
    "holidays", "leave", "master_data", "notifications", "payroll", "projects",
    "support", "timesheets", "work_updates",
)
for _domain in DOMAINS:
    importlib.import_module(f"hrms.{_domain}.models")

# One shared in-memory connection; the schema is rebuilt around every test
engine = create_async_engine(
    "sqlite+aiosqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionFactory = async_sessionmaker(engine, expire_on_commit=False)

DEFAULT_PASSWORD = "Passw0rd!"

_seq = itertools.count(1)


@pytest.fixture(autouse=True)
async def _schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    limiter.reset()
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _test_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@pytest.fixture
def app():
    application = create_app()
    application.dependency_overrides[get_db] = _test_db
    return application


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http


@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging and asserting rows directly."""
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Factories ───────────────────────────────────────────────────────

async def make_employee(
    db: AsyncSession,
    *,
    role: UserRole = UserRole.employee,
    first_name: str = "Test",
    last_name: str | None = None,
    reporting_manager_id: int | None = None,
    department_id: int | None = None,
    password: str | None = DEFAULT_PASSWORD,
    **fields,
):
    from hrms.employees.models import Employee

    n = next(_seq)
    employee = Employee(
        employee_number=fields.pop("employee_number", f"EMP{n:04d}"),
        email=fields.pop("email", f"user{n}@example.com"),
        first_name=first_name,
        last_name=last_name or f"User{n}",
        role=role,
        reporting_manager_id=reporting_manager_id,
        department_id=department_id,
        date_of_joining=fields.pop("date_of_joining", date(2024, 1, 15)),
        password_hash=hash_password(password) if password else None,
        **fields,
    )
    db.add(employee)
    await db.commit()
    return employee


async def make_master_item(db: AsyncSession, item_type: str, name: str, **fields):
    from hrms.master_data.models import MasterDataItem

    item = MasterDataItem(type=item_type, name=name, **fields)
    db.add(item)
    await db.commit()
    return item


async def make_project(db: AsyncSession, *, code: str | None = None, **fields):
    from hrms.projects.models import Project

    n = next(_seq)
    project = Project(
        project_code=code or f"PRJ{n:03d}",
        project_name=fields.pop("project_name", f"Project {n}"),
        client_name=fields.pop("client_name", "Acme Corp"),
        start_date=fields.pop("start_date", date.today() - timedelta(days=90)),
        **fields,
    )
    db.add(project)
    await db.commit()
    return project


async def assign(db: AsyncSession, project, employee, *, start: date | None = None,
                 end: date | None = None):
    from hrms.projects.models import ProjectAssignment

    assignment = ProjectAssignment(
        project_id=project.id,
        employee_id=employee.id,
        role="Developer",
        assignment_start_date=start or date.today() - timedelta(days=30),
        assignment_end_date=end,
    )
    db.add(assignment)
    await db.commit()
    return assignment


async def make_timesheet(db: AsyncSession, employee, day: date, *, project=None,
                         hours: str = "8", **fields):
    from hrms.common.constants import TimesheetStatus, TimesheetType
    from hrms.timesheets.models import Timesheet

    sheet = Timesheet(
        employee_id=employee.id,
        project_id=project.id if project is not None else None,
        date=day,
        timesheet_type=TimesheetType.project if project is not None else TimesheetType.regular,
        total_hours=Decimal(hours),
        status=fields.pop("status", TimesheetStatus.submitted),
        **fields,
    )
    db.add(sheet)
    await db.commit()
    return sheet


async def headers_for(db: AsyncSession, employee) -> dict[str, str]:
    """Issue a real session for *employee* and return Bearer headers."""
    token, _ = await create_session(db, employee)
    await db.commit()
    return {"Authorization": f"Bearer {token}"}


# ── Role fixtures ───────────────────────────────────────────────────

@pytest.fixture
async def manager(db):
    return await make_employee(db, role=UserRole.manager, first_name="Maya")


@pytest.fixture
async def employee(db, manager):
    return await make_employee(db, first_name="Eli", reporting_manager_id=manager.id)


@pytest.fixture
async def hr_user(db):
    return await make_employee(db, role=UserRole.hr, first_name="Hana")


@pytest.fixture
async def admin_user(db):
    return await make_employee(db, role=UserRole.admin, first_name="Ada")


@pytest.fixture
async def auth_headers(db, employee) -> dict[str, str]:
    return await headers_for(db, employee)


@pytest.fixture
async def manager_headers(db, manager) -> dict[str, str]:
    return await headers_for(db, manager)


@pytest.fixture
async def hr_headers(db, hr_user) -> dict[str, str]:
    return await headers_for(db, hr_user)


@pytest.fixture
async def admin_headers(db, admin_user) -> dict[str, str]:
    return await headers_for(db, admin_user)

"""HRMS — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from hrms.announcements.router import router as announcements_router
from hrms.assets.router import router as assets_router
from hrms.attendance.router import router as attendance_router
from hrms.auth.router import router as auth_router
from hrms.common.exceptions import register_exception_handlers
from hrms.common.rate_limit import limiter
from hrms.compliance.router import router as compliance_router
from hrms.config import settings
from hrms.dashboard.router import router as dashboard_router
from hrms.database import engine
from hrms.employees.router import router as employees_router
from hrms.holidays.router import router as holidays_router
from hrms.leave.router import router as leave_router
from hrms.master_data.router import router as master_data_router
from hrms.notifications.router import router as notifications_router
from hrms.payroll.router import router as payroll_router
from hrms.projects.router import router as projects_router
from hrms.reports.router import router as reports_router
from hrms.support.router import router as support_router
from hrms.timesheets.router import router as timesheets_router
from hrms.work_updates.router import router as work_updates_router

API_PREFIX = "/api/v1"
VERSION = "2.0.0"

logger = logging.getLogger(__name__)

# Domain routers, mounted under API_PREFIX/<prefix>.
DOMAIN_ROUTERS = [
    ("auth", auth_router),
    ("employees", employees_router),
    ("attendance", attendance_router),
    ("leaves", leave_router),
    ("payroll", payroll_router),
    ("projects", projects_router),
    ("timesheets", timesheets_router),
    ("work-updates", work_updates_router),
    ("compliance", compliance_router),
    ("assets", assets_router),
    ("announcements", announcements_router),
    ("holidays", holidays_router),
    ("notifications", notifications_router),
    ("support", support_router),
    ("reports", reports_router),
    ("dashboard", dashboard_router),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup, release the connection pool on shutdown."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("HRMS API starting (environment=%s)", settings.ENVIRONMENT)
    yield
    await engine.dispose()
    logger.info("HRMS API stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="HRMS",
        description="Attendance, leave, payroll, projects, timesheets and compliance",
        version=VERSION,
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get(f"{API_PREFIX}/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": VERSION,
            "environment": settings.ENVIRONMENT,
        }

    for prefix, router in DOMAIN_ROUTERS:
        app.include_router(router, prefix=f"{API_PREFIX}/{prefix}")

    # /{type} catches any single segment, so master data goes last.
    app.include_router(master_data_router, prefix=API_PREFIX)

    return app


app = create_app()

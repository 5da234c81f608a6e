"""API client tests — wrappers driven against the ASGI app, error mapping."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import httpx
import pytest

from hrms.client.base import ApiClient, ApiError, _clean, _jsonable
from hrms.client.errors import GENERIC_MESSAGE, ErrorHandler, status_message
from hrms.client.services import (
    AuthService,
    BirthdayService,
    DashboardService,
    HolidayService,
    ReportService,
    SupportService,
)
from tests.conftest import DEFAULT_PASSWORD


@pytest.fixture
async def api(app):
    async with ApiClient("http://test/api/v1", transport=httpx.ASGITransport(app=app)) as client:
        yield client


# ── Helpers ─────────────────────────────────────────────────────────

def test_jsonable_encodes_dates_and_decimals():
    payload = {
        "day": date(2026, 2, 3),
        "at": datetime(2026, 2, 3, 9, 30),
        "hours": Decimal("7.5"),
        "items": [date(2026, 1, 1)],
    }
    assert _jsonable(payload) == {
        "day": "2026-02-03",
        "at": "2026-02-03T09:30:00",
        "hours": 7.5,
        "items": ["2026-01-01"],
    }


def test_clean_drops_none():
    assert _clean({"a": 1, "b": None, "c": False}) == {"a": 1, "c": False}
    assert _clean(None) is None


# ── Error mapping ───────────────────────────────────────────────────

class TestErrorHandler:

    def test_status_messages(self):
        assert status_message(403) == "You do not have permission to perform this action."
        assert status_message(418) == "An error occurred (418). Please try again."

    def test_body_message_wins_over_status(self):
        err = ApiError(409, {"error": "Holiday already exists."})
        assert ErrorHandler.message_for(err) == "Holiday already exists."

    def test_custom_message_first(self):
        err = ApiError(409, {"error": "Holiday already exists."})
        assert ErrorHandler.message_for(err, "Could not save") == "Could not save"

    def test_falls_back_to_status(self):
        assert ErrorHandler.message_for(ApiError(500)) == status_message(500)
        # FastAPI validation errors carry a list in ``detail``
        err = ApiError(422, {"detail": [{"loc": ["body"], "msg": "bad"}]})
        assert ErrorHandler.message_for(err) == status_message(422)

    def test_non_api_errors(self):
        assert ErrorHandler.message_for("Plain text") == "Plain text"
        assert ErrorHandler.message_for(RuntimeError("boom")) == GENERIC_MESSAGE
        assert ErrorHandler.handle_error(RuntimeError("boom"), "Try later") == "Try later"

    def test_format_validation_errors(self):
        text = ErrorHandler.format_validation_errors({
            "hours": ["must be positive", "must be at most 24"],
            "date": "is required",
        })
        assert text.splitlines() == [
            "hours: must be positive; must be at most 24",
            "date: is required",
        ]


# ── Against the app ─────────────────────────────────────────────────

async def test_login_keeps_token(api, employee):
    auth = AuthService(api)
    data = await auth.login(employee.employee_number, DEFAULT_PASSWORD)
    assert api.token == data["access_token"]

    me = await auth.me()
    assert me["id"] == employee.id
    assert "timesheet:submit" in me["permissions"]

    await auth.logout()
    assert api.token is None


async def test_bad_login_raises(api, employee):
    with pytest.raises(ApiError) as info:
        await AuthService(api).login(employee.employee_number, "wrong-password")
    assert info.value.status == 401
    assert ErrorHandler.message_for(info.value) == "Invalid username or password."


async def test_unauthenticated_call(api):
    with pytest.raises(ApiError) as info:
        await HolidayService(api).list_holidays()
    assert info.value.status == 401


async def test_not_found_maps_to_body_detail(api, employee):
    await AuthService(api).login(employee.employee_number, DEFAULT_PASSWORD)
    with pytest.raises(ApiError) as info:
        await SupportService(api).get_ticket(9999)
    assert info.value.status == 404
    assert info.value.body["title"] == "Ticket Not Found"
    assert "does not exist" in ErrorHandler.message_for(info.value)


async def test_ticket_round_trip(api, employee):
    await AuthService(api).login(employee.employee_number, DEFAULT_PASSWORD)
    support = SupportService(api)
    ticket = await support.create_ticket("VPN down", "Cannot connect", category="IT")
    assert ticket["ticket_number"] == "TKT-00001"

    await support.add_comment(ticket["id"], "Since this morning")
    mine = await support.my_tickets()
    assert [t["id"] for t in mine] == [ticket["id"]]


async def test_birthday_wish_round_trip(api, employee, manager):
    await AuthService(api).login(employee.employee_number, DEFAULT_PASSWORD)
    birthdays = BirthdayService(api)
    wish = await birthdays.send_wish(manager.id, "Many happy returns")
    assert wish["wished_by"] == employee.id

    upcoming = await birthdays.upcoming(days=0)
    assert upcoming["days_ahead"] == 0

    await AuthService(api).login(manager.employee_number, DEFAULT_PASSWORD)
    assert [w["id"] for w in await birthdays.received()] == [wish["id"]]
    assert [w["id"] for w in await birthdays.wishes_for(manager.id)] == [wish["id"]]


async def test_dashboard_follows_role(api, employee):
    await AuthService(api).login(employee.employee_number, DEFAULT_PASSWORD)
    dashboard = DashboardService(api)
    mine = await dashboard.employee()
    assert mine["pending_leave_requests"] == 0

    with pytest.raises(ApiError) as info:
        await dashboard.admin()
    assert info.value.status == 403


async def test_report_download_returns_bytes(api, hr_user):
    await AuthService(api).login(hr_user.employee_number, DEFAULT_PASSWORD)
    content = await ReportService(api).download("headcount")
    assert isinstance(content, bytes)
    assert content.decode().splitlines()[0] == "dimension,name,count"


async def test_transport_failure_is_status_zero():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with ApiClient("http://nowhere/api/v1", transport=httpx.MockTransport(refuse)) as api:
        with pytest.raises(ApiError) as info:
            await HolidayService(api).upcoming()
    assert info.value.status == 0
    assert ErrorHandler.message_for(info.value) == status_message(0)


async def test_plain_text_error_body():
    def handler(request):
        return httpx.Response(503, text="maintenance")

    async with ApiClient("http://svc/api/v1", transport=httpx.MockTransport(handler)) as api:
        with pytest.raises(ApiError) as info:
            await api.get("/holidays")
    assert info.value.body == {"detail": "maintenance"}
    assert ErrorHandler.message_for(info.value) == "maintenance"

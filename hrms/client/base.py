"""Async HTTP client for the HRMS REST API.

``ApiClient`` owns one ``httpx.AsyncClient`` bound to the API base path
and the caller's bearer token. Domain service classes in
:mod:`hrms.client.services` translate method calls into requests on it.

Usage::

    async with ApiClient("https://hr.example.com/api/v1") as api:
        await AuthService(api).login("EMP001", "secret")
        leaves = await LeaveService(api).my_leaves()
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

import httpx

from hrms.config import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response or transport failure (``status == 0``)."""

    def __init__(self, status: int, body: Any = None, message: str = ""):
        self.status = status
        self.body = body if body is not None else {}
        super().__init__(message or f"HTTP {status}")


def _clean(params: Optional[dict]) -> Optional[dict]:
    if params is None:
        return None
    return {k: v for k, v in params.items() if v is not None}


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        return response.json()
    return response.text


class ApiClient:
    """Thin wrapper around ``httpx.AsyncClient`` with bearer auth."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.API_TIMEOUT_SECONDS,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Any = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                path,
                params=_clean(params),
                json=_jsonable(json) if json is not None else None,
                headers=self._headers(),
            )
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(0, message=str(exc)) from exc

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {"detail": response.text}
            raise ApiError(response.status_code, body)
        return response

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Any = None,
    ) -> Any:
        response = await self._send(method, path, params=params, json=json)
        return _decode(response)

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None, params: Optional[dict] = None) -> Any:
        return await self.request("POST", path, params=params, json=json if json is not None else {})

    async def put(self, path: str, json: Any = None, params: Optional[dict] = None) -> Any:
        return await self.request("PUT", path, params=params, json=json if json is not None else {})

    async def delete(self, path: str, params: Optional[dict] = None) -> Any:
        return await self.request("DELETE", path, params=params)

    async def download(self, path: str, params: Optional[dict] = None) -> bytes:
        response = await self._send("GET", path, params=params)
        return response.content

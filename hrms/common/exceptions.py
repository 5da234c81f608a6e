"""Application errors and their RFC 7807 ``application/problem+json`` rendering.

Every body carries ``type``, ``title``, ``status``, ``detail`` and
``instance``; ``error`` repeats ``detail`` for the client's message
mapper, and ``errors`` holds per-field messages when there are any.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

BASE_ERROR_URI = "https://hrms.local/errors"
PROBLEM_JSON = "application/problem+json"

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application error. Subclasses set the class-level defaults."""

    status_code: int = 500
    error_type: str = "internal-error"
    title: str = "Internal Server Error"

    def __init__(
        self,
        detail: str,
        *,
        errors: Optional[dict[str, list[str]]] = None,
        status_code: Optional[int] = None,
        error_type: Optional[str] = None,
        title: Optional[str] = None,
    ) -> None:
        if status_code is not None:
            self.status_code = status_code
        if error_type is not None:
            self.error_type = error_type
        if title is not None:
            self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)


class BadRequestException(AppException):
    """The request is well-formed but the operation cannot proceed."""

    status_code = 400
    error_type = "bad-request"
    title = "Bad Request"


class UnauthorizedException(AppException):
    status_code = 401
    error_type = "unauthorized"
    title = "Unauthorized"

    def __init__(self, detail: str = "Invalid credentials.") -> None:
        super().__init__(detail)


class ForbiddenException(AppException):
    status_code = 403
    error_type = "forbidden"
    title = "Forbidden"

    def __init__(
        self, detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(detail)


class NotFoundException(AppException):
    """Title names the entity, e.g. ``Ticket Not Found``."""

    status_code = 404
    error_type = "not-found"

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(
            f"{entity_type} with id '{entity_id}' does not exist.",
            title=f"{entity_type} Not Found",
        )


class ConflictError(AppException):
    """Duplicate value for a field that must be unique."""

    status_code = 409
    error_type = "conflict"
    title = "Conflict"

    def __init__(self, field: str, value: Any, detail: Optional[str] = None) -> None:
        super().__init__(
            detail or f"An entry with {field}='{value}' already exists.",
            errors={field: [f"'{value}' is already in use."]},
        )


class ValidationException(AppException):
    """Business-rule failure; ``detail`` is the first field message."""

    status_code = 422
    error_type = "validation-error"
    title = "Validation Error"

    def __init__(self, errors: dict[str, list[str]]) -> None:
        messages = [m for field_messages in errors.values() for m in field_messages]
        super().__init__(
            messages[0] if messages else "One or more fields failed validation.",
            errors=errors,
        )


def problem(
    request: Request,
    *,
    status: int,
    error_type: str,
    title: str,
    detail: str,
    errors: Optional[dict[str, list[str]]] = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{error_type}",
        "title": title,
        "status": status,
        "detail": detail,
        "error": detail,
        "instance": request.url.path,
    }
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status, content=body, media_type=PROBLEM_JSON)


# ── Handlers ────────────────────────────────────────────────────────

async def _on_app_exception(request: Request, exc: AppException) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.detail)
    return problem(
        request,
        status=exc.status_code,
        error_type=exc.error_type,
        title=exc.title,
        detail=exc.detail,
        errors=exc.errors,
    )


async def _on_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Raised by the auth dependency and by routing (unknown path, bad method)
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    response = problem(
        request,
        status=exc.status_code,
        error_type=f"http-{exc.status_code}",
        title=detail if exc.status_code != 401 else "Unauthorized",
        detail=detail,
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def _field_name(loc: tuple) -> str:
    # Drop the leading "body"/"query"/"path" segment
    parts = loc[1:] if len(loc) > 1 else loc
    return ".".join(str(p) for p in parts) or "unknown"


async def _on_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        field_errors.setdefault(_field_name(tuple(err.get("loc", ()))), []).append(
            err.get("msg", "Invalid value"),
        )
    return problem(
        request,
        status=422,
        error_type="validation-error",
        title="Validation Error",
        detail="Request validation failed.",
        errors=field_errors,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, _on_app_exception)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _on_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _on_request_validation)  # type: ignore[arg-type]

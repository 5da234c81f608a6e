"""Map API failures to the fixed user-facing messages shown by the client."""

from __future__ import annotations

import logging
from typing import Any, Optional

from hrms.client.base import ApiError

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "An unexpected error occurred. Please try again."

STATUS_MESSAGES: dict[int, str] = {
    0: "Unable to connect to server. Please check your internet connection.",
    400: "Invalid request. Please check your input and try again.",
    401: "Your session has expired. Please login again.",
    403: "You do not have permission to perform this action.",
    404: "The requested resource was not found.",
    409: "This operation conflicts with existing data.",
    422: "Invalid data provided. Please check your input.",
    500: "Server error occurred. Please try again later.",
    503: "Service temporarily unavailable. Please try again later.",
}


def status_message(status: int) -> str:
    return STATUS_MESSAGES.get(status, f"An error occurred ({status}). Please try again.")


class ErrorHandler:
    """Stateless error-to-message mapping.

    For an :class:`ApiError` the message is, in order: *custom_message*,
    the body's ``message``, its ``error``, a string ``detail``, then the
    per-status default.
    """

    @staticmethod
    def message_for(error: Any, custom_message: Optional[str] = None) -> str:
        if isinstance(error, ApiError):
            if custom_message:
                return custom_message
            body = error.body if isinstance(error.body, dict) else {}
            for key in ("message", "error", "detail"):
                value = body.get(key)
                if isinstance(value, str) and value:
                    return value
            return status_message(error.status)
        if isinstance(error, str):
            return error
        return custom_message or GENERIC_MESSAGE

    @staticmethod
    def format_validation_errors(errors: dict[str, Any]) -> str:
        lines = []
        for field, message in errors.items():
            if isinstance(message, (list, tuple)):
                message = "; ".join(str(m) for m in message)
            lines.append(f"{field}: {message}")
        return "\n".join(lines)

    @staticmethod
    def handle_error(error: Any, custom_message: Optional[str] = None) -> str:
        message = ErrorHandler.message_for(error, custom_message)
        logger.error("Request failed: %r -> %s", error, message)
        return message

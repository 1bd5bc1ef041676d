"""
Common API utilities for consistent response formatting across all controllers.
"""

import logging
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from parlor_booking.core.exceptions import BookingError, InvalidInputError
from parlor_booking.domain.entities import Page

logger = logging.getLogger(__name__)


def api_response(
    success: bool,
    message: str,
    data: Optional[Any] = None,
    status_code: int = 200,
    **extra: Any,
) -> tuple:
    """
    Standardized API response format for all endpoints.

    Args:
        success: Whether the operation was successful
        message: Human-readable message about the operation
        data: Optional data payload
        status_code: HTTP status code
        **extra: Additional top-level keys (``error``, ``warnings``, ...)

    Returns:
        Tuple of (json_response, status_code)
    """
    response: Dict[str, Any] = {"success": success, "message": message}

    if data is not None:
        response["data"] = data
    for key, value in extra.items():
        if value is not None:
            response[key] = value

    return jsonify(response), status_code


def paginated(page: Page, key: str) -> Dict[str, Any]:
    """Render a Page of response DTOs under ``key`` with pagination metadata."""
    return {
        key: [item.to_dict() for item in page.items],
        "pagination": {
            "page": page.page,
            "limit": page.limit,
            "total": page.total,
            "total_pages": page.total_pages,
        },
    }


def get_json_body() -> Dict[str, Any]:
    """Decoded JSON object of the current request, or InvalidInputError."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return payload


def int_arg(name: str, default: Optional[int] = None) -> Optional[int]:
    value = request.args.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise InvalidInputError(f"{name} must be an integer")


def bool_arg(name: str) -> Optional[bool]:
    value = request.args.get(name)
    if value is None or value == "":
        return None
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise InvalidInputError(f"{name} must be true or false")


def register_error_handlers(app: Flask) -> None:
    """Map the error taxonomy onto the JSON envelope."""

    @app.errorhandler(BookingError)
    def handle_booking_error(error: BookingError):
        log = logger.error if error.status_code >= 500 else logger.info
        log(
            f"Request failed: {error.message}",
            extra={
                "context": {
                    "path": request.path,
                    "method": request.method,
                    "error_type": error.error_type,
                    "status_code": error.status_code,
                }
            },
        )
        return api_response(
            False,
            error.message,
            status_code=error.status_code,
            error=error.error_type,
            details=error.details or None,
        )

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return api_response(
            False,
            error.description or error.name,
            status_code=error.code or 500,
            error=error.name.lower().replace(" ", "_"),
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.error(
            "Unhandled error",
            extra={
                "context": {
                    "path": request.path,
                    "method": request.method,
                    "error": str(error),
                }
            },
            exc_info=True,
        )
        return api_response(
            False, "Internal server error", status_code=500, error="internal_error"
        )

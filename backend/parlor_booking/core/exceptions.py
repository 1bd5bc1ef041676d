"""
Custom exceptions for the application.
Centralized error taxonomy shared by the domain, services and controllers.
"""

from typing import Optional


class BookingError(Exception):
    """Base class for errors surfaced to API callers.

    Each subclass carries the HTTP status code the controllers answer with.
    """

    status_code = 500
    error_type = "internal_error"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidInputError(BookingError, ValueError):
    """Malformed time/date, missing required field or forbidden transition.

    Raised before any side effect happens.
    """

    status_code = 400
    error_type = "invalid_input"


class NotFoundError(BookingError):
    """Unknown customer, service or appointment id."""

    status_code = 404
    error_type = "not_found"

    def __init__(self, resource: str, identifier=None):
        message = f"{resource} not found"
        super().__init__(message, {"resource": resource, "id": identifier})
        self.resource = resource


class ConflictError(BookingError):
    """Slot overlap or duplicate unique key. Never silently resolved."""

    status_code = 409
    error_type = "conflict"


class UnavailableError(BookingError):
    """Storage or calendar I/O failure. Retrying is the caller's decision."""

    status_code = 500
    error_type = "unavailable"


class ExpiredAccessTokenError(Exception):
    """
    Exception raised when Google Calendar API access token has expired.
    """

    pass

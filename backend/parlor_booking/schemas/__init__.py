"""
Schemas package - Data Transfer Objects and validation.

This package contains DTOs that define the API contracts
and validate incoming request bodies.
"""

from .dtos import (
    AppointmentCreateRequest,
    AppointmentResponse,
    AppointmentUpdateRequest,
    AvailabilityResponse,
    BookingResult,
    CustomerCreateRequest,
    CustomerResponse,
    CustomerUpdateRequest,
    ServiceCreateRequest,
    ServiceResponse,
    ServiceUpdateRequest,
)

__all__ = [
    # Appointment DTOs
    "AppointmentCreateRequest",
    "AppointmentUpdateRequest",
    "AppointmentResponse",
    "AvailabilityResponse",
    "BookingResult",
    # Customer DTOs
    "CustomerCreateRequest",
    "CustomerUpdateRequest",
    "CustomerResponse",
    # Service catalog DTOs
    "ServiceCreateRequest",
    "ServiceUpdateRequest",
    "ServiceResponse",
]

"""
Data Transfer Objects (DTOs) and validation schemas.

Request DTOs are built from decoded JSON bodies and validate themselves;
response DTOs are built from domain entities and serialize to snake_case JSON.
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from parlor_booking.core.exceptions import InvalidInputError
from parlor_booking.domain.entities import APPOINTMENT_STATUSES, PAYMENT_STATUSES
from parlor_booking.domain.time_utils import format_time, parse_date, parse_time


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _to_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{field_name} must be an integer")


def _to_decimal(value: Any, field_name: str) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be a number")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInputError(f"{field_name} must be a number")


def _to_bool(value: Any, field_name: str) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "1", "yes"):
        return True
    if isinstance(value, str) and value.lower() in ("false", "0", "no"):
        return False
    raise InvalidInputError(f"{field_name} must be a boolean")


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _money(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


# Appointments


@dataclass
class AppointmentCreateRequest:
    """DTO for booking requests: who, what and when."""

    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    service_id: Optional[int] = None
    appointment_date: Optional[str] = None
    start_time: Optional[str] = None
    special_requests: Optional[str] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "AppointmentCreateRequest":
        return cls(
            customer_name=_clean(payload.get("customer_name")),
            customer_email=_clean(payload.get("customer_email")),
            customer_phone=_clean(payload.get("customer_phone")),
            service_id=_to_int(payload.get("service_id"), "service_id"),
            appointment_date=_clean(payload.get("appointment_date")),
            start_time=_clean(payload.get("start_time")),
            special_requests=_clean(payload.get("special_requests")),
        )

    def validate(self) -> None:
        """Validate the request data."""
        missing = [
            name
            for name in (
                "customer_name",
                "customer_email",
                "service_id",
                "appointment_date",
                "start_time",
            )
            if getattr(self, name) in (None, "")
        ]
        if missing:
            raise InvalidInputError(
                "Missing required fields", {"missing_fields": missing}
            )
        if "@" not in self.customer_email:
            raise InvalidInputError("Valid customer_email is required")
        if self.service_id <= 0:
            raise InvalidInputError("Valid service_id is required")
        parse_date(self.appointment_date)
        parse_time(self.start_time)

    @property
    def day(self) -> date:
        return parse_date(self.appointment_date)


@dataclass
class AppointmentUpdateRequest:
    """DTO for reschedules and administrative edits. None means unchanged."""

    appointment_date: Optional[str] = None
    start_time: Optional[str] = None
    status: Optional[str] = None
    special_requests: Optional[str] = None
    notes: Optional[str] = None
    payment_status: Optional[str] = None
    customer_id: Optional[int] = None
    service_id: Optional[int] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "AppointmentUpdateRequest":
        return cls(
            appointment_date=_clean(payload.get("appointment_date")),
            start_time=_clean(payload.get("start_time")),
            status=_clean(payload.get("status")),
            special_requests=payload.get("special_requests"),
            notes=payload.get("notes"),
            payment_status=_clean(payload.get("payment_status")),
            customer_id=_to_int(payload.get("customer_id"), "customer_id"),
            service_id=_to_int(payload.get("service_id"), "service_id"),
        )

    def validate(self) -> None:
        """Validate the request data."""
        if self.appointment_date is not None:
            parse_date(self.appointment_date)
        if self.start_time is not None:
            parse_time(self.start_time)
        if self.status is not None and self.status not in APPOINTMENT_STATUSES:
            raise InvalidInputError(f"Invalid status '{self.status}'")
        if (
            self.payment_status is not None
            and self.payment_status not in PAYMENT_STATUSES
        ):
            raise InvalidInputError(f"Invalid payment status '{self.payment_status}'")


@dataclass
class CustomerSummary:
    id: int
    name: str
    email: str
    phone: Optional[str]


@dataclass
class ServiceSummary:
    id: int
    name: str
    duration: int
    price: Optional[float]
    category: Optional[str]


@dataclass
class AppointmentResponse:
    """DTO for appointment API responses, joined with customer and service."""

    id: int
    customer_id: int
    service_id: int
    appointment_date: str
    start_time: str
    end_time: str
    status: str
    total_price: Optional[float]
    special_requests: Optional[str]
    calendar_event_id: Optional[str]
    payment_status: str
    notes: Optional[str]
    cancelled_at: Optional[str]
    cancelled_by: Optional[str]
    created_at: Optional[str]
    updated_at: Optional[str]
    customer: Optional[CustomerSummary] = None
    service: Optional[ServiceSummary] = None

    @classmethod
    def from_domain(cls, appointment) -> "AppointmentResponse":
        """Create response from domain entity."""
        customer = None
        if appointment.customer is not None:
            customer = CustomerSummary(
                id=appointment.customer.id,
                name=appointment.customer.name,
                email=appointment.customer.email,
                phone=appointment.customer.phone,
            )
        service = None
        if appointment.service is not None:
            service = ServiceSummary(
                id=appointment.service.id,
                name=appointment.service.name,
                duration=appointment.service.duration,
                price=_money(appointment.service.price),
                category=appointment.service.category,
            )
        return cls(
            id=appointment.id,
            customer_id=appointment.customer_id,
            service_id=appointment.service_id,
            appointment_date=appointment.appointment_date.isoformat(),
            start_time=format_time(parse_time(appointment.start_time)),
            end_time=format_time(parse_time(appointment.end_time)),
            status=appointment.status,
            total_price=_money(appointment.total_price),
            special_requests=appointment.special_requests,
            calendar_event_id=appointment.calendar_event_id,
            payment_status=appointment.payment_status,
            notes=appointment.notes,
            cancelled_at=_iso(appointment.cancelled_at),
            cancelled_by=appointment.cancelled_by,
            created_at=_iso(appointment.created_at),
            updated_at=_iso(appointment.updated_at),
            customer=customer,
            service=service,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BookingResult:
    """Outcome of a write on the booking engine plus calendar sync warnings."""

    appointment: AppointmentResponse
    warnings: List[str] = field(default_factory=list)


@dataclass
class AvailabilityResponse:
    """Open slots of one service on one date."""

    date: str
    service_id: int
    service_name: str
    duration: int
    slots: List[Dict[str, str]]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Customers


@dataclass
class CustomerCreateRequest:
    """DTO for customer creation requests."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    preferences: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "CustomerCreateRequest":
        return cls(
            name=_clean(payload.get("name")),
            email=_clean(payload.get("email")),
            phone=_clean(payload.get("phone")),
            address=_clean(payload.get("address")),
            preferences=payload.get("preferences") or {},
        )

    def validate(self) -> None:
        """Validate the request data."""
        if not self.name:
            raise InvalidInputError("Name is required")
        if not self.email or "@" not in self.email:
            raise InvalidInputError("Valid email is required")
        if not isinstance(self.preferences, dict):
            raise InvalidInputError("Preferences must be an object")


@dataclass
class CustomerUpdateRequest:
    """DTO for customer update requests."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "CustomerUpdateRequest":
        return cls(
            name=_clean(payload.get("name")),
            email=_clean(payload.get("email")),
            phone=_clean(payload.get("phone")),
            address=_clean(payload.get("address")),
            preferences=payload.get("preferences"),
            is_active=_to_bool(payload.get("is_active"), "is_active"),
        )

    def validate(self) -> None:
        """Validate the request data."""
        if self.email is not None and "@" not in self.email:
            raise InvalidInputError("Valid email is required")
        if self.preferences is not None and not isinstance(self.preferences, dict):
            raise InvalidInputError("Preferences must be an object")


@dataclass
class CustomerResponse:
    """DTO for customer API responses."""

    id: int
    name: str
    email: str
    phone: Optional[str]
    address: Optional[str]
    preferences: Dict[str, Any]
    is_active: bool
    created_at: Optional[str]
    updated_at: Optional[str]
    recent_appointments: Optional[List[Dict[str, Any]]] = None

    @classmethod
    def from_domain(cls, customer, recent_appointments=None) -> "CustomerResponse":
        """Create response from domain entity."""
        return cls(
            id=customer.id,
            name=customer.name,
            email=customer.email,
            phone=customer.phone,
            address=customer.address,
            preferences=dict(customer.preferences or {}),
            is_active=customer.is_active,
            created_at=_iso(customer.created_at),
            updated_at=_iso(customer.updated_at),
            recent_appointments=(
                [
                    AppointmentResponse.from_domain(a).to_dict()
                    for a in recent_appointments
                ]
                if recent_appointments is not None
                else None
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if data["recent_appointments"] is None:
            data.pop("recent_appointments")
        return data


# Service catalog


@dataclass
class ServiceCreateRequest:
    """DTO for service creation requests."""

    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = None
    price: Optional[Decimal] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "ServiceCreateRequest":
        is_active = _to_bool(payload.get("is_active"), "is_active")
        return cls(
            name=_clean(payload.get("name")),
            slug=_clean(payload.get("slug")),
            description=_clean(payload.get("description")),
            duration=_to_int(payload.get("duration"), "duration"),
            price=_to_decimal(payload.get("price"), "price"),
            category=_clean(payload.get("category")),
            image_url=_clean(payload.get("image_url")),
            is_active=True if is_active is None else is_active,
        )

    def validate(self) -> None:
        """Validate the request data."""
        missing = [
            name
            for name in ("name", "slug", "duration", "price")
            if getattr(self, name) is None
        ]
        if missing:
            raise InvalidInputError(
                "Missing required fields", {"missing_fields": missing}
            )
        if self.duration <= 0:
            raise InvalidInputError("Duration must be positive")
        if self.price < 0:
            raise InvalidInputError("Price cannot be negative")


@dataclass
class ServiceUpdateRequest:
    """DTO for service update requests."""

    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = None
    price: Optional[Decimal] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "ServiceUpdateRequest":
        return cls(
            name=_clean(payload.get("name")),
            slug=_clean(payload.get("slug")),
            description=_clean(payload.get("description")),
            duration=_to_int(payload.get("duration"), "duration"),
            price=_to_decimal(payload.get("price"), "price"),
            category=_clean(payload.get("category")),
            image_url=_clean(payload.get("image_url")),
            is_active=_to_bool(payload.get("is_active"), "is_active"),
        )

    def validate(self) -> None:
        """Validate the request data."""
        if self.duration is not None and self.duration <= 0:
            raise InvalidInputError("Duration must be positive")
        if self.price is not None and self.price < 0:
            raise InvalidInputError("Price cannot be negative")


@dataclass
class ServiceResponse:
    """DTO for service API responses."""

    id: int
    name: str
    slug: str
    description: Optional[str]
    duration: int
    price: Optional[float]
    category: Optional[str]
    image_url: Optional[str]
    is_active: bool
    created_at: Optional[str]
    updated_at: Optional[str]

    @classmethod
    def from_domain(cls, service) -> "ServiceResponse":
        """Create response from domain entity."""
        return cls(
            id=service.id,
            name=service.name,
            slug=service.slug,
            description=service.description,
            duration=service.duration,
            price=_money(service.price),
            category=service.category,
            image_url=service.image_url,
            is_active=service.is_active,
            created_at=_iso(service.created_at),
            updated_at=_iso(service.updated_at),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

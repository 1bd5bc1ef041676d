"""
Domain entities - Pure business logic, no framework dependencies.

Each entity represents one business concept of the parlor and validates its
own invariants on construction.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from parlor_booking.core.exceptions import InvalidInputError
from parlor_booking.domain.time_utils import parse_time

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"
STATUS_COMPLETED = "completed"

APPOINTMENT_STATUSES = (
    STATUS_PENDING,
    STATUS_CONFIRMED,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
)
# Statuses that hold a slot and block customer deactivation
ACTIVE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)

PAYMENT_STATUSES = ("pending", "paid", "refunded")


@dataclass
class Service:
    """A bookable service offered by the parlor (haircut, facial, ...)."""

    id: Optional[int] = None
    name: str = ""
    slug: str = ""
    description: Optional[str] = None
    duration: int = 60
    price: Decimal = Decimal("0")
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate business rules."""
        if not self.name or not self.name.strip():
            raise InvalidInputError("Service name is required")
        if not self.slug or not self.slug.strip():
            raise InvalidInputError("Service slug is required")
        if self.duration is None or int(self.duration) <= 0:
            raise InvalidInputError("Duration must be positive")
        self.price = Decimal(str(self.price))
        if self.price < 0:
            raise InvalidInputError("Price cannot be negative")


@dataclass
class Customer:
    """Domain entity representing a parlor customer."""

    id: Optional[int] = None
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    address: Optional[str] = None
    preferences: Dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate business rules."""
        if not self.name or not self.name.strip():
            raise InvalidInputError("Customer name is required")
        if not self.email or "@" not in self.email:
            raise InvalidInputError("Valid email is required")
        if self.preferences is None:
            self.preferences = {}


@dataclass
class BookedInterval:
    """The slice of an appointment the scheduling engine reasons about."""

    id: Optional[int]
    appointment_date: date
    start_time: str
    end_time: str
    status: str = STATUS_CONFIRMED

    @property
    def is_cancelled(self) -> bool:
        return self.status == STATUS_CANCELLED


@dataclass(frozen=True)
class TimeSlot:
    """A candidate bookable interval of one service duration."""

    start_time: str
    end_time: str

    def to_dict(self) -> Dict[str, Any]:
        return {"start_time": self.start_time, "end_time": self.end_time}


@dataclass
class Appointment:
    """Domain entity for a booked appointment.

    ``end_time`` is derived from the service duration when the booking is made
    and is stored as-is afterwards. ``total_price`` is a snapshot of the
    service price at that moment.
    """

    id: Optional[int] = None
    customer_id: int = 0
    service_id: int = 0
    appointment_date: Optional[date] = None
    start_time: str = ""
    end_time: str = ""
    status: str = STATUS_PENDING
    total_price: Decimal = Decimal("0")
    special_requests: Optional[str] = None
    calendar_event_id: Optional[str] = None
    payment_status: str = "pending"
    notes: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Joined summaries, populated by repositories when available
    customer: Optional[Customer] = None
    service: Optional[Service] = None

    def __post_init__(self):
        """Validate business rules."""
        if self.customer_id <= 0:
            raise InvalidInputError("Valid customer_id is required")
        if self.service_id <= 0:
            raise InvalidInputError("Valid service_id is required")
        if self.appointment_date is None:
            raise InvalidInputError("Appointment date is required")
        if self.status not in APPOINTMENT_STATUSES:
            raise InvalidInputError(f"Invalid status '{self.status}'")
        if self.payment_status not in PAYMENT_STATUSES:
            raise InvalidInputError(f"Invalid payment status '{self.payment_status}'")
        if parse_time(self.end_time) <= parse_time(self.start_time):
            raise InvalidInputError("Appointment must end after it starts")
        self.total_price = Decimal(str(self.total_price))
        if self.total_price < 0:
            raise InvalidInputError("Price cannot be negative")

    @property
    def is_cancelled(self) -> bool:
        return self.status == STATUS_CANCELLED

    @property
    def duration_minutes(self) -> int:
        return parse_time(self.end_time) - parse_time(self.start_time)

    def to_booked_interval(self) -> BookedInterval:
        return BookedInterval(
            id=self.id,
            appointment_date=self.appointment_date,
            start_time=self.start_time,
            end_time=self.end_time,
            status=self.status,
        )


@dataclass
class Page:
    """One page of a paginated listing."""

    items: List[Any]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit


@dataclass
class CalendarEvent:
    """
    Domain entity representing a remote calendar event for an appointment.
    """

    title: str = ""
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    timezone: str = "UTC"
    attendees: Optional[List[str]] = None
    google_event_id: Optional[str] = None

    def __post_init__(self):
        """Validate business rules."""
        if self.attendees is None:
            self.attendees = []

        if not self.title.strip():
            raise ValueError("Event title cannot be empty")

        if self.start_time and self.end_time:
            if self.end_time <= self.start_time:
                raise ValueError("End time must be after start time")

    @property
    def duration_minutes(self) -> int:
        """Calculate event duration in minutes."""
        if not self.start_time or not self.end_time:
            return 0
        delta = self.end_time - self.start_time
        return int(delta.total_seconds() / 60)

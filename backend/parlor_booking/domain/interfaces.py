"""
Abstract interfaces for repositories and collaborators.

These interfaces define contracts without implementation details, so the
booking services can be exercised with in-memory fakes or mocks.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date
from typing import List, Optional

from .entities import Appointment, BookedInterval, Customer, Page, Service


class ITransactional(ABC):
    """Unit-of-work boundary shared by repositories bound to one session."""

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        """Commit on success, roll back and translate storage errors on failure."""
        pass


class ICustomerReader(ABC):
    """Interface for customer read operations."""

    @abstractmethod
    def get_by_id(self, customer_id: int) -> Optional[Customer]:
        """Get customer by ID."""
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Customer]:
        """Get customer by exact (case-sensitive) email."""
        pass

    @abstractmethod
    def list(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Page:
        """List customers ordered by name."""
        pass

    @abstractmethod
    def search(self, query: str, limit: int = 10) -> List[Customer]:
        """Search active customers by name, email or phone."""
        pass


class ICustomerWriter(ABC):
    """Interface for customer write operations."""

    @abstractmethod
    def create(self, customer: Customer) -> Customer:
        """Create a new customer."""
        pass

    @abstractmethod
    def update(self, customer: Customer) -> Customer:
        """Update an existing customer."""
        pass


class ICustomerRepository(ICustomerReader, ICustomerWriter, ITransactional):
    """Complete customer repository interface."""

    pass


class IServiceReader(ABC):
    """Interface for service catalog read operations."""

    @abstractmethod
    def get_by_id(self, service_id: int) -> Optional[Service]:
        """Get service by ID."""
        pass

    @abstractmethod
    def get_by_slug(self, slug: str) -> Optional[Service]:
        """Get service by slug."""
        pass

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Service]:
        """Get service by name."""
        pass

    @abstractmethod
    def list(
        self, category: Optional[str] = None, is_active: Optional[bool] = None
    ) -> List[Service]:
        """List services ordered by name."""
        pass

    @abstractmethod
    def list_categories(self) -> List[str]:
        """Distinct non-empty categories."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of services in the catalog."""
        pass


class IServiceWriter(ABC):
    """Interface for service catalog write operations."""

    @abstractmethod
    def create(self, service: Service) -> Service:
        """Create a new service."""
        pass

    @abstractmethod
    def update(self, service: Service) -> Service:
        """Update an existing service."""
        pass

    @abstractmethod
    def delete(self, service_id: int) -> bool:
        """Hard-delete a service."""
        pass


class IServiceRepository(IServiceReader, IServiceWriter, ITransactional):
    """Complete service catalog repository interface."""

    pass


class IAppointmentReader(ABC):
    """Interface for appointment read operations."""

    @abstractmethod
    def get_by_id(self, appointment_id: int) -> Optional[Appointment]:
        """Get appointment by ID, joined with customer and service."""
        pass

    @abstractmethod
    def find_bookings_by_date(self, day: date) -> List[BookedInterval]:
        """Non-cancelled booked intervals on a date, ordered by start time."""
        pass

    @abstractmethod
    def list(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        day: Optional[date] = None,
        customer_id: Optional[int] = None,
        newest_first: bool = False,
    ) -> Page:
        """List appointments ordered by date and start time."""
        pass

    @abstractmethod
    def count_active_for_customer(self, customer_id: int) -> int:
        """Pending or confirmed appointments of a customer."""
        pass

    @abstractmethod
    def count_for_service(self, service_id: int) -> int:
        """Appointments of any status referencing a service."""
        pass


class IAppointmentWriter(ABC):
    """Interface for appointment write operations."""

    @abstractmethod
    def create(self, appointment: Appointment) -> Appointment:
        """Create a new appointment."""
        pass

    @abstractmethod
    def update(self, appointment: Appointment) -> Appointment:
        """Update an existing appointment."""
        pass

    @abstractmethod
    def set_calendar_event_id(
        self, appointment_id: int, event_id: Optional[str]
    ) -> bool:
        """Store the calendar event id alone, leaving every other field as is."""
        pass

    @abstractmethod
    def lock_date(self, day: date) -> None:
        """Serialize writers of ``day`` at the storage level (may be a no-op)."""
        pass


class IAppointmentRepository(IAppointmentReader, IAppointmentWriter, ITransactional):
    """Complete appointment repository interface."""

    pass


class ICalendarSync(ABC):
    """Best-effort mirror of appointments into an external calendar."""

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """Whether sync is configured at all."""
        pass

    @abstractmethod
    def create_event(self, appointment: Appointment) -> Optional[str]:
        """Create a remote event and return its id."""
        pass

    @abstractmethod
    def update_event(self, appointment: Appointment) -> bool:
        """Update the remote event of a rescheduled appointment."""
        pass

    @abstractmethod
    def delete_event(self, appointment: Appointment) -> bool:
        """Delete the remote event of a cancelled appointment."""
        pass


class IGoogleCalendarRepository(ABC):
    """Raw Google Calendar API operations."""

    @abstractmethod
    def create_event(self, access_token: str, event_data: dict) -> Optional[str]:
        """Create an event and return its Google id."""
        pass

    @abstractmethod
    def update_event(self, access_token: str, event_id: str, event_data: dict) -> bool:
        """Replace an existing event."""
        pass

    @abstractmethod
    def delete_event(self, access_token: str, event_id: str) -> bool:
        """Delete an event."""
        pass

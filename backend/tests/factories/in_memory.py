"""
Thread-safe in-memory repositories for exercising the booking engine
without a database (used by the concurrency tests).
"""

import copy
import threading
import time
from contextlib import contextmanager
from datetime import date
from typing import Dict, List

from parlor_booking.core.exceptions import ConflictError
from parlor_booking.domain.entities import (
    ACTIVE_STATUSES,
    Appointment,
    BookedInterval,
    Customer,
    Page,
    Service,
)
from parlor_booking.domain.interfaces import (
    IAppointmentRepository,
    ICustomerRepository,
    IServiceRepository,
)


def _page(rows, page, limit) -> Page:
    items = rows[(page - 1) * limit : page * limit]
    return Page(items=items, total=len(rows), page=page, limit=limit)


class InMemoryStore:
    """Rows shared by the in-memory repositories of one test."""

    def __init__(self):
        self.guard = threading.Lock()
        self.customers: Dict[int, Customer] = {}
        self.services: Dict[int, Service] = {}
        self.appointments: Dict[int, Appointment] = {}
        self._ids = 0

    def next_id(self) -> int:
        with self.guard:
            self._ids += 1
            return self._ids


class _Transactional:
    def __init__(self, store: InMemoryStore):
        self.store = store

    @contextmanager
    def transaction(self):
        yield self.store


class InMemoryCustomerRepository(_Transactional, ICustomerRepository):
    def get_by_id(self, customer_id):
        return copy.copy(self.store.customers.get(customer_id))

    def get_by_email(self, email):
        for customer in self.store.customers.values():
            if customer.email == email:
                return copy.copy(customer)
        return None

    def list(self, page=1, limit=10, search=None, is_active=None):
        rows = sorted(self.store.customers.values(), key=lambda c: c.name)
        return _page(rows, page, limit)

    def search(self, query, limit=10):
        return [c for c in self.store.customers.values() if query in c.name][:limit]

    def create(self, customer):
        with self.store.guard:
            if any(c.email == customer.email for c in self.store.customers.values()):
                raise ConflictError("Record conflicts with existing data")
        customer = copy.copy(customer)
        customer.id = self.store.next_id()
        self.store.customers[customer.id] = customer
        return copy.copy(customer)

    def update(self, customer):
        self.store.customers[customer.id] = copy.copy(customer)
        return copy.copy(customer)


class InMemoryServiceRepository(_Transactional, IServiceRepository):
    def get_by_id(self, service_id):
        return self.store.services.get(service_id)

    def get_by_slug(self, slug):
        return next((s for s in self.store.services.values() if s.slug == slug), None)

    def get_by_name(self, name):
        return next((s for s in self.store.services.values() if s.name == name), None)

    def list(self, category=None, is_active=None):
        return sorted(self.store.services.values(), key=lambda s: s.name)

    def list_categories(self):
        return sorted({s.category for s in self.store.services.values() if s.category})

    def count(self):
        return len(self.store.services)

    def create(self, service):
        service.id = self.store.next_id()
        self.store.services[service.id] = service
        return service

    def update(self, service):
        self.store.services[service.id] = service
        return service

    def delete(self, service_id):
        return self.store.services.pop(service_id, None) is not None


class InMemoryAppointmentRepository(_Transactional, IAppointmentRepository):
    """Appointment rows in memory.

    ``read_delay`` widens the window between the conflict check and the
    insert, so unsynchronized callers would double-book.
    """

    def __init__(self, store: InMemoryStore, read_delay: float = 0.0):
        super().__init__(store)
        self.read_delay = read_delay
        self.locked_dates: List[date] = []

    def get_by_id(self, appointment_id):
        return copy.copy(self.store.appointments.get(appointment_id))

    def find_bookings_by_date(self, day):
        bookings = [
            a.to_booked_interval()
            for a in list(self.store.appointments.values())
            if a.appointment_date == day and not a.is_cancelled
        ]
        if self.read_delay:
            time.sleep(self.read_delay)
        return sorted(bookings, key=lambda b: b.start_time)

    def list(
        self,
        page=1,
        limit=10,
        status=None,
        day=None,
        customer_id=None,
        newest_first=False,
    ):
        rows = [
            a
            for a in self.store.appointments.values()
            if (status is None or a.status == status)
            and (day is None or a.appointment_date == day)
            and (customer_id is None or a.customer_id == customer_id)
        ]
        rows.sort(key=lambda a: (a.appointment_date, a.start_time))
        if newest_first:
            rows.sort(key=lambda a: a.appointment_date, reverse=True)
        return _page(rows, page, limit)

    def count_active_for_customer(self, customer_id):
        return sum(
            1
            for a in self.store.appointments.values()
            if a.customer_id == customer_id and a.status in ACTIVE_STATUSES
        )

    def count_for_service(self, service_id):
        return sum(
            1 for a in self.store.appointments.values() if a.service_id == service_id
        )

    def create(self, appointment):
        appointment = copy.copy(appointment)
        appointment.id = self.store.next_id()
        appointment.customer = self.store.customers.get(appointment.customer_id)
        appointment.service = self.store.services.get(appointment.service_id)
        self.store.appointments[appointment.id] = appointment
        return copy.copy(appointment)

    def update(self, appointment):
        self.store.appointments[appointment.id] = copy.copy(appointment)
        return copy.copy(appointment)

    def set_calendar_event_id(self, appointment_id, event_id):
        with self.store.guard:
            appointment = self.store.appointments.get(appointment_id)
            if appointment is None:
                return False
            appointment.calendar_event_id = event_id
            return True

    def lock_date(self, day):
        self.locked_dates.append(day)

    def live_bookings(self, day) -> List[BookedInterval]:
        return [
            a.to_booked_interval()
            for a in self.store.appointments.values()
            if a.appointment_date == day and not a.is_cancelled
        ]

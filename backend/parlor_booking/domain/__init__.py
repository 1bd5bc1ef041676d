"""
Domain package - Pure business logic layer.

This package contains:
- entities.py: Domain entities with their invariants
- interfaces.py: Repository and collaborator contracts
- time_utils.py, availability.py, conflicts.py: the scheduling engine
"""

from .availability import BusinessHours, BusinessSchedule, generate_slots
from .conflicts import find_conflicts, has_conflict
from .entities import Appointment, BookedInterval, Customer, Page, Service, TimeSlot
from .interfaces import (
    IAppointmentReader,
    IAppointmentRepository,
    IAppointmentWriter,
    ICalendarSync,
    ICustomerReader,
    ICustomerRepository,
    ICustomerWriter,
    IServiceReader,
    IServiceRepository,
    IServiceWriter,
)
from .time_utils import add_minutes, format_time, overlaps, parse_date, parse_time

__all__ = [
    # Domain entities
    "Appointment",
    "BookedInterval",
    "Customer",
    "Page",
    "Service",
    "TimeSlot",
    # Scheduling engine
    "BusinessHours",
    "BusinessSchedule",
    "generate_slots",
    "find_conflicts",
    "has_conflict",
    "add_minutes",
    "format_time",
    "overlaps",
    "parse_date",
    "parse_time",
    # Repository interfaces
    "ICustomerRepository",
    "IServiceRepository",
    "IAppointmentRepository",
    "ICalendarSync",
    # Segregated interfaces
    "ICustomerReader",
    "ICustomerWriter",
    "IServiceReader",
    "IServiceWriter",
    "IAppointmentReader",
    "IAppointmentWriter",
]

# Services package initialization
# Application services sit between the controllers and the repositories

from . import appointment_service
from . import catalog_service
from . import customer_service
from . import date_locks
from . import google_calendar_service

__all__ = [
    "appointment_service",
    "catalog_service",
    "customer_service",
    "date_locks",
    "google_calendar_service",
]

"""
Database seeding and initialization functions.

Idempotent: running the seed against a catalog that already has services
changes nothing.
"""

import logging

from parlor_booking.db.session import SessionLocal
from parlor_booking.repositories.appointment_repo import AppointmentRepository
from parlor_booking.repositories.service_repo import ServiceRepository
from parlor_booking.services.catalog_service import ServiceCatalogService

logger = logging.getLogger(__name__)


def ensure_default_services() -> int:
    """
    Seed the default parlor services when the services table is empty.

    Returns:
        Number of services created (0 when the catalog already had data)
    """
    db = SessionLocal()
    try:
        catalog = ServiceCatalogService(
            ServiceRepository(db), AppointmentRepository(db)
        )
        created = catalog.seed_default_services()
        if not created:
            logger.info("Service catalog already populated; seed skipped")
        return created
    finally:
        db.close()

"""
Service catalog - the treatments customers can book.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from parlor_booking.core.exceptions import ConflictError, NotFoundError
from parlor_booking.domain.entities import Service
from parlor_booking.domain.interfaces import (
    IAppointmentRepository,
    IServiceRepository,
)
from parlor_booking.schemas.dtos import (
    ServiceCreateRequest,
    ServiceResponse,
    ServiceUpdateRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_SERVICES = (
    {
        "name": "Hair Styling",
        "slug": "hair-styling",
        "description": "Professional hair cutting, styling, and coloring services",
        "duration": 90,
        "price": Decimal("75.00"),
        "category": "hair",
    },
    {
        "name": "Makeup Application",
        "slug": "makeup",
        "description": "Professional makeup for special occasions and events",
        "duration": 120,
        "price": Decimal("95.00"),
        "category": "makeup",
    },
    {
        "name": "Facial Treatment",
        "slug": "facial",
        "description": "Rejuvenating facial treatments for healthy, glowing skin",
        "duration": 60,
        "price": Decimal("65.00"),
        "category": "skincare",
    },
    {
        "name": "Manicure & Pedicure",
        "slug": "manicure-pedicure",
        "description": "Complete nail care and beautiful nail art",
        "duration": 90,
        "price": Decimal("55.00"),
        "category": "nails",
    },
    {
        "name": "Waxing Services",
        "slug": "waxing",
        "description": "Professional hair removal services",
        "duration": 45,
        "price": Decimal("35.00"),
        "category": "hair-removal",
    },
    {
        "name": "Bridal Package",
        "slug": "bridal-package",
        "description": "Complete bridal beauty package for your special day",
        "duration": 240,
        "price": Decimal("250.00"),
        "category": "bridal",
    },
)


class ServiceCatalogService:
    """Application service for the service catalog."""

    def __init__(
        self,
        service_repo: IServiceRepository,
        appointment_repo: IAppointmentRepository,
    ) -> None:
        self.service_repo = service_repo
        self.appointment_repo = appointment_repo

    def list_services(
        self, category: Optional[str] = None, is_active: Optional[bool] = None
    ) -> List[ServiceResponse]:
        services = self.service_repo.list(category=category, is_active=is_active)
        return [ServiceResponse.from_domain(s) for s in services]

    def list_categories(self) -> List[str]:
        return self.service_repo.list_categories()

    def get_service(self, service_id: int) -> ServiceResponse:
        return ServiceResponse.from_domain(self._get(service_id))

    def create_service(self, request: ServiceCreateRequest) -> ServiceResponse:
        """Add a service. Slug and name must both be unused."""
        request.validate()
        with self.service_repo.transaction():
            self._ensure_unique(request.slug, request.name)
            created = self.service_repo.create(
                Service(
                    name=request.name,
                    slug=request.slug,
                    description=request.description,
                    duration=request.duration,
                    price=request.price,
                    category=request.category,
                    image_url=request.image_url,
                    is_active=request.is_active,
                )
            )

        logger.info(
            "Service created",
            extra={"context": {"service_id": created.id, "slug": created.slug}},
        )
        return ServiceResponse.from_domain(created)

    def update_service(
        self, service_id: int, request: ServiceUpdateRequest
    ) -> ServiceResponse:
        """Edit a service.

        A new duration only applies to future bookings; stored appointments
        keep the end time computed when they were made.
        """
        request.validate()
        with self.service_repo.transaction():
            service = self._get(service_id)
            self._ensure_unique(request.slug, request.name, exclude_id=service_id)

            for field_name in (
                "name",
                "slug",
                "description",
                "duration",
                "price",
                "category",
                "image_url",
                "is_active",
            ):
                value = getattr(request, field_name)
                if value is not None:
                    setattr(service, field_name, value)

            updated = self.service_repo.update(service)

        logger.info("Service updated", extra={"context": {"service_id": service_id}})
        return ServiceResponse.from_domain(updated)

    def delete_service(self, service_id: int) -> None:
        """Hard-delete a service nobody ever booked.

        Referenced services must be deactivated instead.
        """
        with self.service_repo.transaction():
            self._get(service_id)
            references = self.appointment_repo.count_for_service(service_id)
            if references:
                raise ConflictError(
                    "Service has appointments; deactivate it instead",
                    {"appointments": references},
                )
            self.service_repo.delete(service_id)

        logger.info("Service deleted", extra={"context": {"service_id": service_id}})

    def seed_default_services(self) -> int:
        """Insert the default parlor services when the catalog is empty.

        Returns the number of services created.
        """
        with self.service_repo.transaction():
            if self.service_repo.count() > 0:
                return 0
            for data in DEFAULT_SERVICES:
                self.service_repo.create(Service(**data))

        logger.info(
            "Default services seeded",
            extra={"context": {"count": len(DEFAULT_SERVICES)}},
        )
        return len(DEFAULT_SERVICES)

    def _get(self, service_id: int) -> Service:
        service = self.service_repo.get_by_id(service_id)
        if not service:
            raise NotFoundError("Service", service_id)
        return service

    def _ensure_unique(
        self,
        slug: Optional[str],
        name: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> None:
        if slug:
            existing = self.service_repo.get_by_slug(slug)
            if existing and existing.id != exclude_id:
                raise ConflictError("Service slug already exists")
        if name:
            existing = self.service_repo.get_by_name(name)
            if existing and existing.id != exclude_id:
                raise ConflictError("Service name already exists")

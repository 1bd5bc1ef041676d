"""Service catalog repository implementation."""

from typing import List, Optional

from parlor_booking.db.base import Service as DbService
from parlor_booking.domain.entities import Service as DomainService
from parlor_booking.domain.interfaces import IServiceRepository

from .base import SqlAlchemyRepository


class ServiceRepository(SqlAlchemyRepository, IServiceRepository):
    """Repository for Service persistence operations."""

    def get_by_id(self, service_id: int) -> Optional[DomainService]:
        db_service = self.db.get(DbService, service_id)
        return self._to_domain(db_service) if db_service else None

    def get_by_slug(self, slug: str) -> Optional[DomainService]:
        db_service = self.db.query(DbService).filter(DbService.slug == slug).first()
        return self._to_domain(db_service) if db_service else None

    def get_by_name(self, name: str) -> Optional[DomainService]:
        db_service = self.db.query(DbService).filter(DbService.name == name).first()
        return self._to_domain(db_service) if db_service else None

    def list(
        self, category: Optional[str] = None, is_active: Optional[bool] = None
    ) -> List[DomainService]:
        query = self.db.query(DbService)
        if category:
            query = query.filter(DbService.category == category)
        if is_active is not None:
            query = query.filter(DbService.is_active.is_(is_active))
        return [self._to_domain(row) for row in query.order_by(DbService.name).all()]

    def list_categories(self) -> List[str]:
        rows = (
            self.db.query(DbService.category)
            .filter(DbService.category.isnot(None), DbService.category != "")
            .distinct()
            .order_by(DbService.category)
            .all()
        )
        return [row[0] for row in rows]

    def count(self) -> int:
        return self.db.query(DbService).count()

    def create(self, service: DomainService) -> DomainService:
        db_service = DbService(
            name=service.name.strip(),
            slug=service.slug.strip(),
            description=service.description,
            duration=int(service.duration),
            price=service.price,
            category=service.category,
            image_url=service.image_url,
            is_active=service.is_active,
        )
        self.db.add(db_service)
        self.db.flush()
        self.db.refresh(db_service)
        return self._to_domain(db_service)

    def update(self, service: DomainService) -> DomainService:
        if not service.id:
            raise ValueError("Service ID is required for update")

        db_service = self.db.get(DbService, service.id)
        if not db_service:
            raise ValueError(f"Service with ID {service.id} not found")

        db_service.name = service.name.strip()
        db_service.slug = service.slug.strip()
        db_service.description = service.description
        db_service.duration = int(service.duration)
        db_service.price = service.price
        db_service.category = service.category
        db_service.image_url = service.image_url
        db_service.is_active = service.is_active
        self.db.flush()
        self.db.refresh(db_service)
        return self._to_domain(db_service)

    def delete(self, service_id: int) -> bool:
        db_service = self.db.get(DbService, service_id)
        if not db_service:
            return False
        self.db.delete(db_service)
        self.db.flush()
        return True

    @staticmethod
    def _to_domain(db_service: DbService) -> DomainService:
        """Convert database model to domain entity."""
        return DomainService(
            id=db_service.id,
            name=db_service.name,
            slug=db_service.slug,
            description=db_service.description,
            duration=db_service.duration,
            price=db_service.price,
            category=db_service.category,
            image_url=db_service.image_url,
            is_active=db_service.is_active,
            created_at=db_service.created_at,
            updated_at=db_service.updated_at,
        )

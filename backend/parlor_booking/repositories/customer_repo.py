"""Customer repository implementation."""

from typing import List, Optional

from sqlalchemy import or_

from parlor_booking.db.base import Customer as DbCustomer
from parlor_booking.domain.entities import Customer as DomainCustomer
from parlor_booking.domain.entities import Page
from parlor_booking.domain.interfaces import ICustomerRepository

from .base import SqlAlchemyRepository


class CustomerRepository(SqlAlchemyRepository, ICustomerRepository):
    """Repository for Customer persistence operations."""

    def get_by_id(self, customer_id: int) -> Optional[DomainCustomer]:
        db_customer = self.db.get(DbCustomer, customer_id)
        return self._to_domain(db_customer) if db_customer else None

    def get_by_email(self, email: str) -> Optional[DomainCustomer]:
        db_customer = (
            self.db.query(DbCustomer).filter(DbCustomer.email == email).first()
        )
        return self._to_domain(db_customer) if db_customer else None

    def list(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Page:
        query = self.db.query(DbCustomer)
        if is_active is not None:
            query = query.filter(DbCustomer.is_active.is_(is_active))
        if search:
            query = query.filter(self._search_clause(search))

        total = query.count()
        rows = (
            query.order_by(DbCustomer.name)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return Page(
            items=[self._to_domain(row) for row in rows],
            total=total,
            page=page,
            limit=limit,
        )

    def search(self, query: str, limit: int = 10) -> List[DomainCustomer]:
        rows = (
            self.db.query(DbCustomer)
            .filter(self._search_clause(query), DbCustomer.is_active.is_(True))
            .order_by(DbCustomer.name)
            .limit(limit)
            .all()
        )
        return [self._to_domain(row) for row in rows]

    def create(self, customer: DomainCustomer) -> DomainCustomer:
        db_customer = DbCustomer(
            name=customer.name.strip(),
            email=customer.email.strip(),
            phone=customer.phone,
            address=customer.address,
            preferences=dict(customer.preferences or {}),
            is_active=customer.is_active,
        )
        self.db.add(db_customer)
        self.db.flush()
        self.db.refresh(db_customer)
        return self._to_domain(db_customer)

    def update(self, customer: DomainCustomer) -> DomainCustomer:
        if not customer.id:
            raise ValueError("Customer ID is required for update")

        db_customer = self.db.get(DbCustomer, customer.id)
        if not db_customer:
            raise ValueError(f"Customer with ID {customer.id} not found")

        db_customer.name = customer.name.strip()
        db_customer.email = customer.email.strip()
        db_customer.phone = customer.phone
        db_customer.address = customer.address
        db_customer.preferences = dict(customer.preferences or {})
        db_customer.is_active = customer.is_active
        self.db.flush()
        self.db.refresh(db_customer)
        return self._to_domain(db_customer)

    @staticmethod
    def _search_clause(term: str):
        pattern = f"%{term}%"
        return or_(
            DbCustomer.name.ilike(pattern),
            DbCustomer.email.ilike(pattern),
            DbCustomer.phone.ilike(pattern),
        )

    @staticmethod
    def _to_domain(db_customer: DbCustomer) -> DomainCustomer:
        """Convert database model to domain entity."""
        return DomainCustomer(
            id=db_customer.id,
            name=db_customer.name,
            email=db_customer.email,
            phone=db_customer.phone,
            address=db_customer.address,
            preferences=dict(db_customer.preferences or {}),
            is_active=db_customer.is_active,
            created_at=db_customer.created_at,
            updated_at=db_customer.updated_at,
        )

"""
Customer service for business logic.

This service:
- Keeps customer rules separate from controllers and repositories
- Depends on repository interfaces, not concrete implementations
- Works with domain entities and returns response DTOs
"""

import logging
from typing import List, Optional

from parlor_booking.core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from parlor_booking.domain.entities import Customer, Page
from parlor_booking.domain.interfaces import (
    IAppointmentRepository,
    ICustomerRepository,
)
from parlor_booking.schemas.dtos import (
    CustomerCreateRequest,
    CustomerResponse,
    CustomerUpdateRequest,
)
from parlor_booking.services.appointment_service import validate_pagination

logger = logging.getLogger(__name__)

RECENT_APPOINTMENTS_LIMIT = 10


class CustomerService:
    """Application service for customer-related use-cases."""

    def __init__(
        self,
        customer_repo: ICustomerRepository,
        appointment_repo: IAppointmentRepository,
    ) -> None:
        self.customer_repo = customer_repo
        self.appointment_repo = appointment_repo

    def list_customers(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Page:
        validate_pagination(page, limit)
        result = self.customer_repo.list(
            page=page, limit=limit, search=search, is_active=is_active
        )
        result.items = [CustomerResponse.from_domain(c) for c in result.items]
        return result

    def get_customer(self, customer_id: int) -> CustomerResponse:
        """Customer details with their most recent appointments."""
        customer = self._get(customer_id)
        recent = self.appointment_repo.list(
            page=1,
            limit=RECENT_APPOINTMENTS_LIMIT,
            customer_id=customer_id,
            newest_first=True,
        )
        return CustomerResponse.from_domain(customer, recent_appointments=recent.items)

    def create_customer(self, request: CustomerCreateRequest) -> CustomerResponse:
        request.validate()
        with self.customer_repo.transaction():
            if self.customer_repo.get_by_email(request.email):
                raise ConflictError("Customer with this email already exists")
            created = self.customer_repo.create(
                Customer(
                    name=request.name,
                    email=request.email,
                    phone=request.phone,
                    address=request.address,
                    preferences=request.preferences,
                )
            )

        logger.info(
            "Customer created", extra={"context": {"customer_id": created.id}}
        )
        return CustomerResponse.from_domain(created)

    def update_customer(
        self, customer_id: int, request: CustomerUpdateRequest
    ) -> CustomerResponse:
        request.validate()
        with self.customer_repo.transaction():
            customer = self._get(customer_id)

            if request.email is not None and request.email != customer.email:
                owner = self.customer_repo.get_by_email(request.email)
                if owner and owner.id != customer_id:
                    raise ConflictError("Email is already used by another customer")
                customer.email = request.email
            if request.name is not None:
                customer.name = request.name
            if request.phone is not None:
                customer.phone = request.phone
            if request.address is not None:
                customer.address = request.address
            if request.preferences is not None:
                customer.preferences = request.preferences
            if request.is_active is False and customer.is_active:
                self._ensure_no_active_appointments(customer_id, "deactivate")
            if request.is_active is not None:
                customer.is_active = request.is_active

            updated = self.customer_repo.update(customer)

        logger.info(
            "Customer updated", extra={"context": {"customer_id": customer_id}}
        )
        return CustomerResponse.from_domain(updated)

    def delete_customer(self, customer_id: int) -> CustomerResponse:
        """Soft-delete a customer.

        Rejected while the customer still has pending or confirmed appointments.
        """
        with self.customer_repo.transaction():
            customer = self._get(customer_id)
            self._ensure_no_active_appointments(customer_id, "delete")
            customer.is_active = False
            deactivated = self.customer_repo.update(customer)

        logger.info(
            "Customer deactivated", extra={"context": {"customer_id": customer_id}}
        )
        return CustomerResponse.from_domain(deactivated)

    def search_customers(self, query: str, limit: int = 10) -> List[CustomerResponse]:
        query = (query or "").strip()
        if not query:
            raise InvalidInputError("Search query is required")
        validate_pagination(1, limit)
        return [
            CustomerResponse.from_domain(c)
            for c in self.customer_repo.search(query, limit=limit)
        ]

    def _ensure_no_active_appointments(self, customer_id: int, action: str) -> None:
        active = self.appointment_repo.count_active_for_customer(customer_id)
        if active:
            raise ConflictError(
                f"Cannot {action} customer with active appointments",
                {"active_appointments": active},
            )

    def _get(self, customer_id: int) -> Customer:
        customer = self.customer_repo.get_by_id(customer_id)
        if not customer:
            raise NotFoundError("Customer", customer_id)
        return customer

"""
Unit tests for CustomerService.
"""

from unittest.mock import Mock

import pytest

from parlor_booking.core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from parlor_booking.domain.entities import Page
from parlor_booking.schemas.dtos import CustomerCreateRequest, CustomerUpdateRequest
from parlor_booking.services.customer_service import (
    RECENT_APPOINTMENTS_LIMIT,
    CustomerService,
)
from tests.factories.repository_factories import (
    AppointmentRepositoryFactory,
    CustomerRepositoryFactory,
    make_appointment,
    make_customer,
)


@pytest.fixture
def mock_customer_repo() -> Mock:
    return CustomerRepositoryFactory.create_mock_full()


@pytest.fixture
def mock_appointment_repo() -> Mock:
    return AppointmentRepositoryFactory.create_mock_full()


@pytest.fixture
def service(mock_customer_repo, mock_appointment_repo) -> CustomerService:
    return CustomerService(mock_customer_repo, mock_appointment_repo)


@pytest.mark.unit
@pytest.mark.services
@pytest.mark.customer
class TestCustomerService:
    def test_create_customer(self, service, mock_customer_repo):
        result = service.create_customer(
            CustomerCreateRequest(
                name="Ana Lima",
                email="ana@example.com",
                preferences={"stylist": "Rita"},
            )
        )

        assert result.id == 10
        assert result.is_active is True
        assert result.preferences == {"stylist": "Rita"}
        assert "recent_appointments" not in result.to_dict()

    def test_create_duplicate_email(self, service, mock_customer_repo):
        mock_customer_repo.get_by_email.return_value = make_customer()

        with pytest.raises(ConflictError, match="already exists"):
            service.create_customer(
                CustomerCreateRequest(name="Jane", email="jane@example.com")
            )

        mock_customer_repo.create.assert_not_called()

    @pytest.mark.parametrize(
        "name, email", [(None, "a@example.com"), ("Ana", None), ("Ana", "nope")]
    )
    def test_create_invalid(self, service, name, email):
        with pytest.raises(InvalidInputError):
            service.create_customer(CustomerCreateRequest(name=name, email=email))

    def test_get_customer_includes_recent_appointments(
        self, service, mock_customer_repo, mock_appointment_repo
    ):
        mock_customer_repo.get_by_id.return_value = make_customer()
        mock_appointment_repo.list.return_value = Page(
            items=[make_appointment()], total=1, page=1, limit=10
        )

        result = service.get_customer(10)

        assert result.recent_appointments[0]["id"] == 100
        mock_appointment_repo.list.assert_called_once_with(
            page=1,
            limit=RECENT_APPOINTMENTS_LIMIT,
            customer_id=10,
            newest_first=True,
        )

    def test_get_missing_customer(self, service):
        with pytest.raises(NotFoundError):
            service.get_customer(1)

    def test_update_customer(self, service, mock_customer_repo):
        mock_customer_repo.get_by_id.return_value = make_customer()

        result = service.update_customer(
            10, CustomerUpdateRequest(phone="555-9999", email="new@example.com")
        )

        assert result.phone == "555-9999"
        assert result.email == "new@example.com"

    def test_update_email_taken(self, service, mock_customer_repo):
        mock_customer_repo.get_by_id.return_value = make_customer()
        mock_customer_repo.get_by_email.return_value = make_customer(
            id=11, email="taken@example.com"
        )

        with pytest.raises(ConflictError):
            service.update_customer(
                10, CustomerUpdateRequest(email="taken@example.com")
            )

    def test_soft_delete(self, service, mock_customer_repo):
        mock_customer_repo.get_by_id.return_value = make_customer()

        result = service.delete_customer(10)

        assert result.is_active is False
        mock_customer_repo.update.assert_called_once()

    def test_delete_with_active_appointments_rejected(
        self, service, mock_customer_repo, mock_appointment_repo
    ):
        mock_customer_repo.get_by_id.return_value = make_customer()
        mock_appointment_repo.count_active_for_customer.return_value = 2

        with pytest.raises(ConflictError) as exc_info:
            service.delete_customer(10)

        assert exc_info.value.details == {"active_appointments": 2}
        mock_customer_repo.update.assert_not_called()

    def test_deactivate_with_active_appointments_rejected(
        self, service, mock_customer_repo, mock_appointment_repo
    ):
        mock_customer_repo.get_by_id.return_value = make_customer()
        mock_appointment_repo.count_active_for_customer.return_value = 1

        with pytest.raises(ConflictError) as exc_info:
            service.update_customer(10, CustomerUpdateRequest(is_active=False))

        assert exc_info.value.details == {"active_appointments": 1}
        mock_customer_repo.update.assert_not_called()

    def test_deactivate_without_active_appointments(
        self, service, mock_customer_repo, mock_appointment_repo
    ):
        mock_customer_repo.get_by_id.return_value = make_customer()

        result = service.update_customer(10, CustomerUpdateRequest(is_active=False))

        assert result.is_active is False
        mock_appointment_repo.count_active_for_customer.assert_called_once_with(10)

    def test_search(self, service, mock_customer_repo):
        mock_customer_repo.search.return_value = [make_customer()]

        results = service.search_customers(" jane ", limit=5)

        assert [c.email for c in results] == ["jane@example.com"]
        mock_customer_repo.search.assert_called_once_with("jane", limit=5)

    def test_search_requires_query(self, service):
        with pytest.raises(InvalidInputError):
            service.search_customers("   ")

    def test_list_customers(self, service, mock_customer_repo):
        mock_customer_repo.list.return_value = Page(
            items=[make_customer()], total=1, page=1, limit=10
        )

        result = service.list_customers(search="jan", is_active=True)

        assert result.items[0].name == "Jane Doe"
        mock_customer_repo.list.assert_called_once_with(
            page=1, limit=10, search="jan", is_active=True
        )

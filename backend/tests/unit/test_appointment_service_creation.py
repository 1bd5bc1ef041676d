"""
Unit tests for AppointmentService creation functionality.

This module tests booking operations:
- Successful booking with a new or existing customer
- Validation of the request payload
- Service lookup errors
- Conflict detection for time slots
- Calendar sync outcomes
"""

from datetime import date
from decimal import Decimal
from unittest.mock import Mock

import pytest

from parlor_booking.core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from parlor_booking.domain.availability import BusinessHours, BusinessSchedule
from parlor_booking.schemas.dtos import AppointmentCreateRequest, BookingResult
from parlor_booking.services.appointment_service import AppointmentService
from parlor_booking.services.date_locks import DateLockRegistry
from tests.factories.repository_factories import (
    AppointmentRepositoryFactory,
    CalendarSyncFactory,
    CustomerRepositoryFactory,
    ServiceRepositoryFactory,
    booking,
    make_customer,
    make_service,
)


@pytest.fixture
def mock_appointment_repo() -> Mock:
    """Create a mock appointment repository."""
    return AppointmentRepositoryFactory.create_mock_full()


@pytest.fixture
def mock_customer_repo() -> Mock:
    """Create a mock customer repository."""
    return CustomerRepositoryFactory.create_mock_full()


@pytest.fixture
def mock_service_repo() -> Mock:
    """Create a mock service repository with one active service."""
    repo = ServiceRepositoryFactory.create_mock_full()
    repo.get_by_id.return_value = make_service()
    return repo


@pytest.fixture
def mock_calendar() -> Mock:
    return CalendarSyncFactory.create_mock(enabled=False)


@pytest.fixture
def service(
    mock_appointment_repo, mock_customer_repo, mock_service_repo, mock_calendar
) -> AppointmentService:
    """Initialize AppointmentService with mocked repositories."""
    return AppointmentService(
        mock_appointment_repo,
        mock_customer_repo,
        mock_service_repo,
        calendar_sync=mock_calendar,
        locks=DateLockRegistry(),
        schedule=BusinessSchedule.uniform(BusinessHours("09:00", "19:00")),
        slot_granularity=30,
    )


def _request(**overrides) -> AppointmentCreateRequest:
    data = {
        "customer_name": "Jane Doe",
        "customer_email": "jane@example.com",
        "customer_phone": "555-0100",
        "service_id": 1,
        "appointment_date": "2024-02-15",
        "start_time": "10:00",
    }
    data.update(overrides)
    return AppointmentCreateRequest(**data)


@pytest.mark.unit
@pytest.mark.services
@pytest.mark.appointment
class TestAppointmentServiceCreation:
    """Test booking functionality."""

    def test_create_appointment_success_new_customer(
        self, service, mock_appointment_repo, mock_customer_repo
    ):
        result = service.create_appointment(_request())

        assert isinstance(result, BookingResult)
        assert result.warnings == []
        appointment = result.appointment
        assert appointment.id == 100
        assert appointment.customer_id == 10
        assert appointment.service_id == 1
        assert appointment.appointment_date == "2024-02-15"
        assert appointment.start_time == "10:00"
        assert appointment.end_time == "11:00"
        assert appointment.status == "confirmed"
        assert appointment.total_price == 65.0
        assert appointment.customer.email == "jane@example.com"
        assert appointment.service.name == "Facial Treatment"

        mock_customer_repo.create.assert_called_once()
        mock_appointment_repo.create.assert_called_once()
        mock_appointment_repo.lock_date.assert_called_once_with(date(2024, 2, 15))

    def test_create_appointment_reuses_existing_customer(
        self, service, mock_customer_repo
    ):
        mock_customer_repo.get_by_email.return_value = make_customer(id=42)

        result = service.create_appointment(_request())

        assert result.appointment.customer_id == 42
        mock_customer_repo.create.assert_not_called()
        mock_customer_repo.get_by_email.assert_called_once_with("jane@example.com")

    def test_create_appointment_reactivates_inactive_customer(
        self, service, mock_customer_repo
    ):
        mock_customer_repo.get_by_email.return_value = make_customer(
            id=42, is_active=False
        )

        service.create_appointment(_request())

        updated = mock_customer_repo.update.call_args[0][0]
        assert updated.is_active is True

    def test_end_time_derived_from_service_duration(self, service, mock_service_repo):
        mock_service_repo.get_by_id.return_value = make_service(duration=90)

        result = service.create_appointment(_request(start_time="14:30"))

        assert result.appointment.end_time == "16:00"

    def test_price_is_snapshot_of_service_price(self, service, mock_appointment_repo):
        service.create_appointment(_request())

        created = mock_appointment_repo.create.call_args[0][0]
        assert created.total_price == Decimal("65.00")

    def test_missing_fields_reported(self, service, mock_appointment_repo):
        with pytest.raises(InvalidInputError) as exc_info:
            service.create_appointment(
                _request(customer_name=None, start_time=None)
            )

        assert exc_info.value.details["missing_fields"] == [
            "customer_name",
            "start_time",
        ]
        mock_appointment_repo.create.assert_not_called()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"customer_email": "not-an-email"},
            {"appointment_date": "15/02/2024"},
            {"start_time": "25:00"},
            {"service_id": 0},
        ],
    )
    def test_invalid_input_rejected(self, service, mock_appointment_repo, overrides):
        with pytest.raises(InvalidInputError):
            service.create_appointment(_request(**overrides))

        mock_appointment_repo.create.assert_not_called()

    def test_unknown_service(self, service, mock_service_repo):
        mock_service_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError, match="Service not found"):
            service.create_appointment(_request(service_id=999))

    def test_inactive_service_cannot_be_booked(self, service, mock_service_repo):
        mock_service_repo.get_by_id.return_value = make_service(is_active=False)

        with pytest.raises(NotFoundError):
            service.create_appointment(_request())

    def test_booking_past_midnight_rejected(self, service, mock_service_repo):
        mock_service_repo.get_by_id.return_value = make_service(duration=120)

        with pytest.raises(InvalidInputError, match="midnight"):
            service.create_appointment(_request(start_time="23:00"))

    def test_conflicting_booking_rejected(
        self, service, mock_appointment_repo, mock_customer_repo
    ):
        mock_appointment_repo.find_bookings_by_date.return_value = [
            booking(7, "10:00", "11:30")
        ]

        with pytest.raises(ConflictError) as exc_info:
            service.create_appointment(_request(start_time="11:00"))

        assert exc_info.value.status_code == 409
        assert exc_info.value.details["start_time"] == "11:00"
        mock_appointment_repo.create.assert_not_called()
        # No orphan customer is left behind by a rejected booking
        mock_customer_repo.create.assert_not_called()

    def test_back_to_back_booking_allowed(self, service, mock_appointment_repo):
        mock_appointment_repo.find_bookings_by_date.return_value = [
            booking(7, "10:00", "11:30")
        ]

        result = service.create_appointment(_request(start_time="11:30"))

        assert result.appointment.start_time == "11:30"

    def test_cancelled_booking_does_not_block(self, service, mock_appointment_repo):
        mock_appointment_repo.find_bookings_by_date.return_value = [
            booking(7, "10:00", "11:00", status="cancelled")
        ]

        result = service.create_appointment(_request())

        assert result.appointment.status == "confirmed"


@pytest.mark.unit
@pytest.mark.services
@pytest.mark.appointment
class TestAppointmentCreationCalendarSync:
    """Calendar sync runs after the booking is stored."""

    def test_event_id_stored_when_sync_succeeds(
        self, service, mock_appointment_repo, mock_calendar
    ):
        mock_calendar.enabled = True

        result = service.create_appointment(_request())

        assert result.warnings == []
        mock_calendar.create_event.assert_called_once()
        mock_appointment_repo.set_calendar_event_id.assert_called_once_with(
            100, "evt-123"
        )
        mock_appointment_repo.update.assert_not_called()
        assert result.appointment.calendar_event_id == "evt-123"

    def test_sync_failure_keeps_booking_and_warns(
        self, service, mock_appointment_repo, mock_calendar
    ):
        mock_calendar.enabled = True
        mock_calendar.create_event.return_value = None

        result = service.create_appointment(_request())

        assert result.appointment.id == 100
        assert result.warnings == [
            "Appointment booked but the calendar event could not be created"
        ]
        mock_appointment_repo.set_calendar_event_id.assert_not_called()

    def test_sync_exception_is_contained(self, service, mock_calendar):
        mock_calendar.enabled = True
        mock_calendar.create_event.side_effect = RuntimeError("network down")

        result = service.create_appointment(_request())

        assert result.appointment.status == "confirmed"
        assert len(result.warnings) == 1

    def test_disabled_sync_is_skipped(self, service, mock_calendar):
        service.create_appointment(_request())

        mock_calendar.create_event.assert_not_called()

"""
Unit tests for GoogleCalendarService: event building and failure handling.
"""

from datetime import datetime
from unittest.mock import Mock

import pytest

from parlor_booking.core.exceptions import ExpiredAccessTokenError
from parlor_booking.domain.interfaces import IGoogleCalendarRepository
from parlor_booking.services.google_calendar_service import (
    REMINDER_OVERRIDES,
    GoogleCalendarService,
)
from tests.factories.repository_factories import make_appointment


@pytest.fixture
def mock_calendar_repo() -> Mock:
    repo = Mock(spec=IGoogleCalendarRepository)
    repo.create_event.return_value = "google-evt-1"
    repo.update_event.return_value = True
    repo.delete_event.return_value = True
    return repo


@pytest.fixture
def calendar(mock_calendar_repo) -> GoogleCalendarService:
    return GoogleCalendarService(
        calendar_repo=mock_calendar_repo,
        access_token="token-abc",
        timezone="Europe/Lisbon",
        business_email="front-desk@parlor.test",
    )


@pytest.mark.unit
@pytest.mark.services
class TestBuildEvent:
    def test_event_fields(self, calendar):
        event = calendar.build_event(make_appointment())

        assert event.title == "Parlor Appointment - Facial Treatment"
        assert event.start_time == datetime(2024, 2, 15, 10, 0)
        assert event.end_time == datetime(2024, 2, 15, 11, 0)
        assert event.timezone == "Europe/Lisbon"
        assert event.attendees == ["jane@example.com", "front-desk@parlor.test"]
        assert "Customer: Jane Doe" in event.description
        assert "Booking ID: 100" in event.description
        assert "Special Requests: None" in event.description

    def test_rescheduled_event_is_marked(self, calendar):
        event = calendar.build_event(make_appointment(), rescheduled=True)

        assert event.title.endswith("(RESCHEDULED)")
        assert "Status: Rescheduled" in event.description

    def test_google_payload(self, calendar):
        payload = calendar.to_google_payload(calendar.build_event(make_appointment()))

        assert payload["summary"] == "Parlor Appointment - Facial Treatment"
        assert payload["start"] == {
            "dateTime": "2024-02-15T10:00:00",
            "timeZone": "Europe/Lisbon",
        }
        assert payload["end"]["dateTime"] == "2024-02-15T11:00:00"
        assert payload["reminders"] == {
            "useDefault": False,
            "overrides": REMINDER_OVERRIDES,
        }
        assert {"email": "jane@example.com"} in payload["attendees"]


@pytest.mark.unit
@pytest.mark.services
class TestCalendarSync:
    def test_disabled_without_token(self, mock_calendar_repo):
        calendar = GoogleCalendarService(calendar_repo=mock_calendar_repo)

        assert calendar.enabled is False
        assert calendar.create_event(make_appointment()) is None
        mock_calendar_repo.create_event.assert_not_called()

    def test_create_event(self, calendar, mock_calendar_repo):
        assert calendar.create_event(make_appointment()) == "google-evt-1"

        token, payload = mock_calendar_repo.create_event.call_args[0]
        assert token == "token-abc"
        assert payload["summary"].startswith("Parlor Appointment")

    def test_create_with_expired_token(self, calendar, mock_calendar_repo):
        mock_calendar_repo.create_event.side_effect = ExpiredAccessTokenError()

        assert calendar.create_event(make_appointment()) is None

    def test_create_unexpected_error_is_contained(self, calendar, mock_calendar_repo):
        mock_calendar_repo.create_event.side_effect = RuntimeError("boom")

        assert calendar.create_event(make_appointment()) is None

    def test_update_event(self, calendar, mock_calendar_repo):
        appointment = make_appointment(calendar_event_id="google-evt-1")

        assert calendar.update_event(appointment) is True

        token, event_id, payload = mock_calendar_repo.update_event.call_args[0]
        assert event_id == "google-evt-1"
        assert payload["summary"].endswith("(RESCHEDULED)")

    def test_update_without_event_id(self, calendar, mock_calendar_repo):
        assert calendar.update_event(make_appointment()) is False
        mock_calendar_repo.update_event.assert_not_called()

    def test_delete_event(self, calendar, mock_calendar_repo):
        appointment = make_appointment(calendar_event_id="google-evt-1")

        assert calendar.delete_event(appointment) is True
        mock_calendar_repo.delete_event.assert_called_once_with(
            "token-abc", "google-evt-1"
        )

    def test_delete_with_expired_token(self, calendar, mock_calendar_repo):
        mock_calendar_repo.delete_event.side_effect = ExpiredAccessTokenError()

        assert calendar.delete_event(make_appointment(calendar_event_id="e")) is False

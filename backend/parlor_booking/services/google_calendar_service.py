"""
Google Calendar Service - best-effort mirror of appointments
Single Responsibility: Turn appointments into calendar events
"""

import logging
from datetime import datetime
from typing import Optional

from ..core import config
from ..core.exceptions import ExpiredAccessTokenError
from ..domain.entities import Appointment, CalendarEvent
from ..domain.interfaces import ICalendarSync, IGoogleCalendarRepository
from ..domain.time_utils import to_time
from ..repositories.google_calendar_repo import GoogleCalendarRepository

logger = logging.getLogger(__name__)

# Email one day before, popup one hour before
REMINDER_OVERRIDES = [
    {"method": "email", "minutes": 24 * 60},
    {"method": "popup", "minutes": 60},
]


class GoogleCalendarService(ICalendarSync):
    """
    Calendar sync backed by the Google Calendar API.

    Never raises: every failure is logged and reported as a falsy result so a
    booking that was committed stays committed.
    """

    def __init__(
        self,
        calendar_repo: Optional[IGoogleCalendarRepository] = None,
        access_token: Optional[str] = None,
        timezone: Optional[str] = None,
        business_email: Optional[str] = None,
    ):
        self.calendar_repo = calendar_repo or GoogleCalendarRepository(
            calendar_id=config.GOOGLE_CALENDAR_ID
        )
        self.access_token = access_token
        self.timezone = timezone or config.CALENDAR_TIMEZONE
        self.business_email = business_email or config.BUSINESS_EMAIL

    @classmethod
    def from_config(cls) -> "GoogleCalendarService":
        return cls(access_token=config.get_google_calendar_access_token())

    @property
    def enabled(self) -> bool:
        return bool(self.access_token)

    def build_event(
        self, appointment: Appointment, rescheduled: bool = False
    ) -> CalendarEvent:
        """Describe an appointment as a calendar event."""
        service_name = appointment.service.name if appointment.service else "Service"
        customer = appointment.customer
        title = f"Parlor Appointment - {service_name}"
        if rescheduled:
            title += " (RESCHEDULED)"

        lines = [
            f"Customer: {customer.name if customer else ''}",
            f"Phone: {(customer.phone if customer else None) or ''}",
            f"Email: {customer.email if customer else ''}",
            f"Special Requests: {appointment.special_requests or 'None'}",
            f"Booking ID: {appointment.id}",
        ]
        if rescheduled:
            lines.append("Status: Rescheduled")

        attendees = [self.business_email]
        if customer and customer.email:
            attendees.insert(0, customer.email)

        return CalendarEvent(
            title=title,
            description="\n".join(lines),
            start_time=datetime.combine(
                appointment.appointment_date, to_time(appointment.start_time)
            ),
            end_time=datetime.combine(
                appointment.appointment_date, to_time(appointment.end_time)
            ),
            timezone=self.timezone,
            attendees=attendees,
            google_event_id=appointment.calendar_event_id,
        )

    @staticmethod
    def to_google_payload(event: CalendarEvent) -> dict:
        """Format a CalendarEvent the way the Google Calendar API expects it."""
        return {
            "summary": event.title,
            "description": event.description or "",
            "start": {
                "dateTime": event.start_time.isoformat() if event.start_time else None,
                "timeZone": event.timezone,
            },
            "end": {
                "dateTime": event.end_time.isoformat() if event.end_time else None,
                "timeZone": event.timezone,
            },
            "reminders": {"useDefault": False, "overrides": REMINDER_OVERRIDES},
            "attendees": [{"email": email} for email in event.attendees or []],
        }

    def create_event(self, appointment: Appointment) -> Optional[str]:
        if not self.enabled:
            return None
        payload = self.to_google_payload(self.build_event(appointment))
        try:
            event_id = self.calendar_repo.create_event(self.access_token, payload)
        except ExpiredAccessTokenError:
            logger.warning(
                "Calendar access token expired, event not created",
                extra={"context": {"appointment_id": appointment.id}},
            )
            return None
        except Exception as e:
            logger.error(
                "Unexpected error creating calendar event",
                extra={"context": {"appointment_id": appointment.id, "error": str(e)}},
                exc_info=True,
            )
            return None

        if not event_id:
            logger.warning(
                "Calendar event was not created",
                extra={"context": {"appointment_id": appointment.id}},
            )
        return event_id

    def update_event(self, appointment: Appointment) -> bool:
        if not self.enabled or not appointment.calendar_event_id:
            return False
        payload = self.to_google_payload(
            self.build_event(appointment, rescheduled=True)
        )
        try:
            return self.calendar_repo.update_event(
                self.access_token, appointment.calendar_event_id, payload
            )
        except ExpiredAccessTokenError:
            logger.warning(
                "Calendar access token expired, event not updated",
                extra={"context": {"appointment_id": appointment.id}},
            )
            return False
        except Exception as e:
            logger.error(
                "Unexpected error updating calendar event",
                extra={"context": {"appointment_id": appointment.id, "error": str(e)}},
                exc_info=True,
            )
            return False

    def delete_event(self, appointment: Appointment) -> bool:
        if not self.enabled or not appointment.calendar_event_id:
            return False
        try:
            return self.calendar_repo.delete_event(
                self.access_token, appointment.calendar_event_id
            )
        except ExpiredAccessTokenError:
            logger.warning(
                "Calendar access token expired, event not deleted",
                extra={"context": {"appointment_id": appointment.id}},
            )
            return False
        except Exception as e:
            logger.error(
                "Unexpected error deleting calendar event",
                extra={"context": {"appointment_id": appointment.id, "error": str(e)}},
                exc_info=True,
            )
            return False

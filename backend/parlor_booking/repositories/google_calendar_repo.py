"""
Google Calendar Repository
Single Responsibility: Handle Google Calendar API operations
"""

import logging
from typing import Optional

import requests

from parlor_booking.core.exceptions import ExpiredAccessTokenError
from parlor_booking.domain.interfaces import IGoogleCalendarRepository

logger = logging.getLogger(__name__)


class GoogleCalendarRepository(IGoogleCalendarRepository):
    """
    Repository for Google Calendar API operations.

    Failures are logged and reported through the return value; an expired
    token raises ExpiredAccessTokenError so the caller can tell it apart.
    """

    def __init__(self, calendar_id: str = "primary", timeout: int = 30):
        self.base_url = "https://www.googleapis.com/calendar/v3"
        self.calendar_id = calendar_id
        self.timeout = timeout

    def _events_url(self, event_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/calendars/{self.calendar_id}/events"
        return f"{url}/{event_id}" if event_id else url

    @staticmethod
    def _headers(access_token: str) -> dict:
        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    def create_event(self, access_token: str, event_data: dict) -> Optional[str]:
        """
        Create an event in Google Calendar.

        Returns:
            Google event ID if successful, None otherwise
        """
        try:
            response = requests.post(
                self._events_url(),
                headers=self._headers(access_token),
                params={"sendUpdates": "all"},
                json=event_data,
                timeout=self.timeout,
            )

            if response.status_code in (200, 201):
                event_id = response.json().get("id")
                logger.info(
                    "Google Calendar event created",
                    extra={"context": {"event_id": event_id}},
                )
                return event_id
            if response.status_code == 401:
                raise ExpiredAccessTokenError("Access token expired, needs refresh")

            logger.error(
                f"Google Calendar API error creating event: {response.status_code}",
                extra={"context": {"response": response.text[:500]}},
            )
            return None

        except requests.RequestException as e:
            logger.error(f"Request error creating calendar event: {str(e)}")
            return None

    def update_event(self, access_token: str, event_id: str, event_data: dict) -> bool:
        """Replace an existing event. Returns True on success."""
        try:
            response = requests.put(
                self._events_url(event_id),
                headers=self._headers(access_token),
                params={"sendUpdates": "all"},
                json=event_data,
                timeout=self.timeout,
            )

            if response.status_code == 200:
                logger.info(
                    "Google Calendar event updated",
                    extra={"context": {"event_id": event_id}},
                )
                return True
            if response.status_code == 401:
                raise ExpiredAccessTokenError("Access token expired, needs refresh")

            logger.error(
                f"Google Calendar API error updating event: {response.status_code}",
                extra={
                    "context": {"event_id": event_id, "response": response.text[:500]}
                },
            )
            return False

        except requests.RequestException as e:
            logger.error(f"Request error updating calendar event: {str(e)}")
            return False

    def delete_event(self, access_token: str, event_id: str) -> bool:
        """Delete an event. An already deleted event counts as success."""
        try:
            response = requests.delete(
                self._events_url(event_id),
                headers=self._headers(access_token),
                params={"sendUpdates": "all"},
                timeout=self.timeout,
            )

            if response.status_code in (200, 204, 404, 410):
                logger.info(
                    "Google Calendar event deleted",
                    extra={
                        "context": {
                            "event_id": event_id,
                            "status_code": response.status_code,
                        }
                    },
                )
                return True
            if response.status_code == 401:
                raise ExpiredAccessTokenError("Access token expired, needs refresh")

            logger.error(
                f"Google Calendar API error deleting event: {response.status_code}",
                extra={"context": {"event_id": event_id}},
            )
            return False

        except requests.RequestException as e:
            logger.error(f"Request error deleting calendar event: {str(e)}")
            return False

"""Google Calendar event operations."""

import asyncio
import logging
from dataclasses import dataclass

from googleapiclient.discovery import Resource

from core.config import EventSettings
from core.retry import RetryPolicy, Sleep

from .client import is_retryable_error, log_calendar_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarEventDetails:
    title: str
    location: str
    description: str
    start: str
    end: str
    timezone: str

    @classmethod
    def from_settings(cls, event: EventSettings) -> "CalendarEventDetails":
        return cls(
            title=event.title,
            location=event.location,
            description=event.description,
            start=event.start,
            end=event.end,
            timezone=event.timezone,
        )

    def to_body(self, attendee_email: str) -> dict:
        """Google Calendar insert body for a single attendee."""
        return {
            "summary": self.title,
            "location": self.location,
            "description": self.description,
            "start": {"dateTime": self.start, "timeZone": self.timezone},
            "end": {"dateTime": self.end, "timeZone": self.timezone},
            "attendees": [{"email": attendee_email}],
            "guestsCanSeeOtherGuests": False,
            "reminders": {"useDefault": True},
        }


class GoogleCalendarGateway:
    """Creates the party event for each confirmed participant."""

    def __init__(
        self,
        service: Resource | None,
        calendar_id: str,
        policy: RetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self._service = service
        self._calendar_id = calendar_id
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    @property
    def is_configured(self) -> bool:
        return self._service is not None

    async def create_event(
        self, details: CalendarEventDetails, attendee_email: str
    ) -> str | None:
        """
        Create a calendar event and send the invite to the attendee.

        Rate limits and server errors are retried with backoff. Other errors
        are not retried, since a repeated insert could create a second event.

        Returns:
            The event's htmlLink, or None if not configured or creation failed
        """
        if not self._service:
            logger.warning("Google Calendar not configured, skipping event creation")
            return None

        body = details.to_body(attendee_email)

        def _sync_insert():
            return (
                self._service.events()
                .insert(
                    calendarId=self._calendar_id,
                    body=body,
                    sendUpdates="all",
                )
                .execute()
            )

        for attempt in range(self._policy.max_attempts):
            try:
                event = await asyncio.to_thread(_sync_insert)
            except Exception as e:
                log_calendar_error(
                    e, operation="create_event", context={"attendee": attendee_email}
                )
                if not is_retryable_error(e) or attempt + 1 >= self._policy.max_attempts:
                    return None
                await self._sleep(self._policy.delay_for(attempt))
                continue

            link = event.get("htmlLink")
            logger.info(f"Event created for {attendee_email}: {link}")
            return link

        return None

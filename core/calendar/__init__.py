"""Google Calendar integration for party invites."""

from .client import build_calendar_service, is_calendar_configured
from .events import CalendarEventDetails, GoogleCalendarGateway

__all__ = [
    "build_calendar_service",
    "is_calendar_configured",
    "CalendarEventDetails",
    "GoogleCalendarGateway",
]

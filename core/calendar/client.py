"""Google Calendar service construction and error reporting."""

import json
import logging
import os

import sentry_sdk
from google.oauth2 import service_account
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError

from core.config import Settings

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]


def _status_of(exception: Exception) -> int | None:
    if isinstance(exception, HttpError):
        return exception.resp.status
    return None


def is_retryable_error(exception: Exception) -> bool:
    """Rate limits (429) and server-side errors (5xx) are worth another attempt."""
    status = _status_of(exception)
    return status is not None and (status == 429 or status >= 500)


def log_calendar_error(
    exception: Exception,
    operation: str,
    context: dict | None = None,
) -> None:
    """
    Report a failed calendar call.

    A rate limit is expected under load: WARNING plus a Sentry message.
    Anything else is an ERROR with the exception sent to Sentry.
    """
    extras = {"operation": operation, **(context or {})}

    if _status_of(exception) == 429:
        logger.warning(f"Calendar rate limited during {operation}", extra=extras)
        sentry_sdk.capture_message(
            f"Google Calendar rate limit: {operation}", level="warning", extras=extras
        )
        return

    logger.error(f"Calendar {operation} failed: {exception}", extra=extras)
    sentry_sdk.capture_exception(exception)


def is_calendar_configured(settings: Settings) -> bool:
    """Credentials come from GOOGLE_CALENDAR_CREDENTIALS_JSON or an existing file."""
    if settings.calendar_credentials_json:
        return True
    path = settings.calendar_credentials_file
    return bool(path and os.path.exists(path))


def _load_credentials(settings: Settings) -> service_account.Credentials:
    if settings.calendar_credentials_json:
        info = json.loads(settings.calendar_credentials_json)
        creds = service_account.Credentials.from_service_account_info(
            info, scopes=SCOPES
        )
    else:
        creds = service_account.Credentials.from_service_account_file(
            settings.calendar_credentials_file, scopes=SCOPES
        )
    # The service account sends invites as the organizer mailbox
    return creds.with_subject(settings.calendar_email)


def build_calendar_service(settings: Settings) -> Resource | None:
    """
    Build the Calendar v3 service, or None when it can't be used.

    A broken credential is logged and treated like a missing one, so the
    app still starts without calendar invites.
    """
    if not is_calendar_configured(settings):
        logger.info("Google Calendar credentials not set, invites disabled")
        return None

    try:
        return build("calendar", "v3", credentials=_load_credentials(settings))
    except Exception as e:
        logger.warning(f"Failed to initialize Google Calendar service: {e}")
        return None

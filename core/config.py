"""
Centralized configuration for the Secret Santa service.

Settings are read from the environment once at startup and passed explicitly
to every component (see core.app_context).
"""

import os
from dataclasses import dataclass, field
from datetime import datetime


def is_dev_mode() -> bool:
    """Check if running in development mode (--dev flag or DEV_MODE env)."""
    return os.getenv("DEV_MODE", "").lower() in ("true", "1", "yes")


def get_api_port() -> int:
    """Get API server port from env or default."""
    return int(os.getenv("API_PORT", "5000"))


def parse_target_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp that carries a UTC offset.

    Raises:
        ValueError: If the value is not ISO-8601 or has no offset
    """
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp {value!r} must include a UTC offset")
    return parsed


@dataclass(frozen=True)
class EventSettings:
    """Static details of the gift exchange party."""

    title: str = "Secret Santa Party"
    location: str = "123 Elf Road, North Pole, 88888"
    description: str = "Secret Santa event to exchange gifts!"
    start: str = "2024-12-25T18:00:00-05:00"
    end: str = "2024-12-25T22:00:00-05:00"
    timezone: str = "America/New_York"


@dataclass(frozen=True)
class Settings:
    database_url: str
    pairing_target: datetime | None = None
    sendgrid_api_key: str | None = None
    from_email: str = "santa@example.com"
    from_name: str = "Secret Santa"
    calendar_email: str = "calendar@example.com"
    calendar_credentials_json: str | None = None
    calendar_credentials_file: str | None = None
    event: EventSettings = field(default_factory=EventSettings)
    spending_min: int = 20
    spending_max: int = 30
    community_url: str | None = None
    admin_token: str | None = None
    notify_max_attempts: int = 5
    notify_base_delay: float = 1.0
    notify_max_delay: float = 60.0
    sentry_dsn: str | None = None


def load_settings() -> Settings:
    """
    Build Settings from environment variables.

    Raises:
        ValueError: If DATABASE_URL is missing, PAIRING_TARGET is malformed
            or NOTIFY_MAX_ATTEMPTS is below 1
    """
    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        raise ValueError("DATABASE_URL environment variable must be set")

    target = os.environ.get("PAIRING_TARGET", "").strip()
    max_attempts = int(os.environ.get("NOTIFY_MAX_ATTEMPTS", "5"))
    if max_attempts < 1:
        raise ValueError("NOTIFY_MAX_ATTEMPTS must be at least 1")
    defaults = EventSettings()

    return Settings(
        database_url=database_url,
        pairing_target=parse_target_timestamp(target) if target else None,
        sendgrid_api_key=os.environ.get("SENDGRID_API_KEY") or None,
        from_email=os.environ.get("FROM_EMAIL", "santa@example.com"),
        from_name=os.environ.get("FROM_NAME", "Secret Santa"),
        calendar_email=os.environ.get("GOOGLE_CALENDAR_EMAIL", "calendar@example.com"),
        calendar_credentials_json=os.environ.get("GOOGLE_CALENDAR_CREDENTIALS_JSON")
        or None,
        calendar_credentials_file=os.environ.get("GOOGLE_CALENDAR_CREDENTIALS_FILE")
        or None,
        event=EventSettings(
            title=os.environ.get("EVENT_TITLE", defaults.title),
            location=os.environ.get("EVENT_LOCATION", defaults.location),
            description=os.environ.get("EVENT_DESCRIPTION", defaults.description),
            start=os.environ.get("EVENT_START", defaults.start),
            end=os.environ.get("EVENT_END", defaults.end),
            timezone=os.environ.get("EVENT_TIMEZONE", defaults.timezone),
        ),
        spending_min=int(os.environ.get("SPENDING_MIN", "20")),
        spending_max=int(os.environ.get("SPENDING_MAX", "30")),
        community_url=os.environ.get("COMMUNITY_URL") or None,
        admin_token=os.environ.get("ADMIN_TOKEN") or None,
        notify_max_attempts=max_attempts,
        notify_base_delay=float(os.environ.get("NOTIFY_BASE_DELAY", "1.0")),
        notify_max_delay=float(os.environ.get("NOTIFY_MAX_DELAY", "60.0")),
        sentry_dsn=os.environ.get("SENTRY_DSN") or None,
    )


# Required environment variables
# Format: (name, description, required_in_dev)
REQUIRED_ENV_VARS = [
    ("DATABASE_URL", "PostgreSQL connection string", True),
    ("PAIRING_TARGET", "ISO-8601 time at which pairing fires", False),
    ("SENDGRID_API_KEY", "SendGrid API key for outbound e-mail", False),
    ("GOOGLE_CALENDAR_CREDENTIALS_JSON", "Service account credentials", False),
    ("ADMIN_TOKEN", "Token for the admin command endpoint", False),
]


def check_required_env_vars() -> tuple[bool, list[str]]:
    """
    Check that required environment variables are set.

    Returns:
        (all_ok, warnings): Tuple of success flag and list of warning messages
    """
    warnings = []
    errors = []
    in_dev = is_dev_mode()

    for name, description, required_in_dev in REQUIRED_ENV_VARS:
        if os.environ.get(name):
            continue
        if required_in_dev:
            errors.append(f"  ✗ {name}: Not set ({description})")
        elif not in_dev:
            warnings.append(f"  ⚠ {name}: Not set ({description})")

    if errors:
        for error in errors:
            print(error)
        return False, warnings

    return True, warnings

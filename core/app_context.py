"""
Application context: every long-lived component, built once at startup.

Usage:
    ctx = create_app_context(load_settings())
    ctx.start()
    ...
    await ctx.close()
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine

from core.calendar.client import build_calendar_service
from core.calendar.events import GoogleCalendarGateway
from core.config import Settings
from core.database import create_engine_for_url
from core.notifications.channels.email import SendGridGateway
from core.notifications.dispatcher import NotificationDispatcher
from core.pairing.engine import PairingEngine
from core.pairing.scheduler import PairingScheduler
from core.queries.participants import ParticipantStore
from core.retry import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    store: ParticipantStore
    calendar: GoogleCalendarGateway
    dispatcher: NotificationDispatcher
    pairing: PairingEngine
    scheduler: PairingScheduler

    def start(self) -> None:
        """Start the scheduler and arm the configured pairing time, if any."""
        self.scheduler.start()
        if self.settings.pairing_target is None:
            logger.warning("PAIRING_TARGET not set, pairing only runs on override")
            return
        self.scheduler.schedule_at(self.settings.pairing_target)

    async def close(self) -> None:
        self.scheduler.shutdown()
        await self.engine.dispose()


def create_app_context(settings: Settings) -> AppContext:
    policy = RetryPolicy(
        max_attempts=settings.notify_max_attempts,
        base_delay=settings.notify_base_delay,
        max_delay=settings.notify_max_delay,
    )

    engine = create_engine_for_url(settings.database_url)
    store = ParticipantStore(engine)
    calendar = GoogleCalendarGateway(
        build_calendar_service(settings),
        calendar_id=settings.calendar_email,
        policy=policy,
    )
    dispatcher = NotificationDispatcher(
        SendGridGateway(
            settings.sendgrid_api_key,
            from_email=settings.from_email,
            from_name=settings.from_name,
        ),
        policy=policy,
    )
    pairing = PairingEngine(store, dispatcher, settings)

    return AppContext(
        settings=settings,
        engine=engine,
        store=store,
        calendar=calendar,
        dispatcher=dispatcher,
        pairing=pairing,
        scheduler=PairingScheduler(pairing),
    )

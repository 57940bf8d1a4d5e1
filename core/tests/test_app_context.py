"""Tests for application wiring."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from core.app_context import AppContext, create_app_context
from core.config import Settings
from core.database import to_async_url
from core.enums import PairingState


def make_ctx(settings):
    return AppContext(
        settings=settings,
        engine=MagicMock(),
        store=MagicMock(),
        calendar=MagicMock(),
        dispatcher=MagicMock(),
        pairing=MagicMock(),
        scheduler=MagicMock(),
    )


class TestToAsyncUrl:
    def test_postgres_gets_asyncpg_driver(self):
        assert to_async_url("postgresql://u:p@host/db") == "postgresql+asyncpg://u:p@host/db"

    def test_other_urls_unchanged(self):
        assert to_async_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"


class TestAppContext:
    def test_start_arms_configured_target(self):
        target = datetime(2024, 12, 15, 23, 0, tzinfo=timezone.utc)
        ctx = make_ctx(Settings(database_url="sqlite://", pairing_target=target))

        ctx.start()

        ctx.scheduler.start.assert_called_once()
        ctx.scheduler.schedule_at.assert_called_once_with(target)

    def test_start_without_target_stays_idle(self):
        ctx = make_ctx(Settings(database_url="sqlite://"))

        ctx.start()

        ctx.scheduler.schedule_at.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_app_context_wires_components(self, tmp_path):
        settings = Settings(
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'santa.db'}",
            notify_max_attempts=2,
        )

        ctx = create_app_context(settings)
        try:
            assert ctx.calendar.is_configured is False
            assert ctx.dispatcher.policy.max_attempts == 2
            assert ctx.pairing.store is ctx.store
            assert ctx.scheduler.engine is ctx.pairing
            assert ctx.scheduler.state is PairingState.idle
        finally:
            await ctx.close()

        assert ctx.scheduler.accepting is False

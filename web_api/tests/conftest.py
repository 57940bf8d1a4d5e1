"""Shared fixtures for web API tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from core.app_context import AppContext
from core.config import Settings
from core.enums import PairingState


@pytest.fixture
def ctx():
    """AppContext with every component mocked."""
    scheduler = MagicMock()
    scheduler.state = PairingState.scheduled
    scheduler.trigger_now = AsyncMock(return_value=True)
    return AppContext(
        settings=Settings(database_url="sqlite+aiosqlite://", admin_token="secret"),
        engine=MagicMock(),
        store=MagicMock(),
        calendar=MagicMock(),
        dispatcher=MagicMock(),
        pairing=MagicMock(),
        scheduler=scheduler,
    )


@pytest.fixture
def client(ctx):
    from main import create_app

    return TestClient(create_app(ctx))

"""Root pytest configuration."""

from pathlib import Path

import pytest_asyncio
from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import create_async_engine

# Load environment variables before tests run
_root = Path(__file__).parent
load_dotenv(_root / ".env")
load_dotenv(_root / ".env.local", override=True)


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path):
    """
    Async engine on a throwaway SQLite file with the schema created.

    A file (not :memory:) so every pooled connection sees the same database.
    """
    from core.tables import metadata

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'santa.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def store(sqlite_engine):
    from core.queries.participants import ParticipantStore

    return ParticipantStore(sqlite_engine)

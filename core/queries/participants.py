"""Participant store backed by SQLAlchemy Core."""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncGenerator

from sqlalchemy import func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from ..database import get_connection, get_transaction
from ..tables import participants

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A read or write against the participant store failed."""


class DuplicateRowError(StoreError):
    """An insert violated the unique username/email constraint."""


@dataclass(frozen=True)
class Participant:
    participant_id: int
    username: str
    email: str
    gift: str | None = None
    recipient: str | None = None

    @classmethod
    def from_row(cls, row: Any) -> "Participant":
        return cls(
            participant_id=row["participant_id"],
            username=row["username"],
            email=row["email"],
            gift=row["gift"],
            recipient=row["recipient"],
        )


class ParticipantStore:
    """
    Narrow read/modify/write contract over the participants table.

    Every SQLAlchemy failure is re-raised as StoreError so callers don't
    depend on the database driver.
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine

    @asynccontextmanager
    async def _read(self) -> AsyncGenerator[AsyncConnection, None]:
        try:
            async with get_connection(self._engine) as conn:
                yield conn
        except SQLAlchemyError as e:
            raise StoreError(f"Participant store read failed: {e}") from e

    @asynccontextmanager
    async def _write(self) -> AsyncGenerator[AsyncConnection, None]:
        try:
            async with get_transaction(self._engine) as conn:
                yield conn
        except IntegrityError as e:
            raise DuplicateRowError(f"Participant already exists: {e}") from e
        except SQLAlchemyError as e:
            raise StoreError(f"Participant store write failed: {e}") from e

    async def find_eligible(self) -> list[Participant]:
        """Participants with a gift wish, in registration order."""
        async with self._read() as conn:
            result = await conn.execute(
                select(participants)
                .where(participants.c.gift.isnot(None))
                .order_by(participants.c.participant_id)
            )
            return [Participant.from_row(row) for row in result.mappings()]

    async def find_one(self, **criteria: Any) -> Participant | None:
        """
        Find the first participant whose columns equal the given values.

        Usage:
            await store.find_one(username="alice")
        """
        query = select(participants)
        for column, value in criteria.items():
            query = query.where(participants.c[column] == value)

        async with self._read() as conn:
            result = await conn.execute(
                query.order_by(participants.c.participant_id).limit(1)
            )
            row = result.mappings().first()
            return Participant.from_row(row) if row else None

    async def find_by_id(self, participant_id: int) -> Participant | None:
        return await self.find_one(participant_id=participant_id)

    async def get_password_hash(self, username: str) -> str | None:
        async with self._read() as conn:
            result = await conn.execute(
                select(participants.c.password_hash).where(
                    participants.c.username == username
                )
            )
            return result.scalar_one_or_none()

    async def exists(self, username: str, email: str) -> bool:
        """Check whether the username or the email is already registered."""
        async with self._read() as conn:
            result = await conn.execute(
                select(func.count())
                .select_from(participants)
                .where(
                    or_(
                        participants.c.username == username,
                        participants.c.email == email,
                    )
                )
            )
            return result.scalar_one() > 0

    async def insert_one(
        self, username: str, email: str, password_hash: str
    ) -> Participant:
        async with self._write() as conn:
            result = await conn.execute(
                insert(participants)
                .values(
                    username=username,
                    email=email,
                    password_hash=password_hash,
                    gift=None,
                    recipient=None,
                )
                .returning(participants)
            )
            return Participant.from_row(result.mappings().one())

    async def insert_many(self, rows: list[dict[str, Any]]) -> int:
        """Bulk insert participant rows and return how many were inserted."""
        if not rows:
            return 0
        async with self._write() as conn:
            await conn.execute(insert(participants), rows)
        return len(rows)

    async def set_gift_if_unset(self, participant_id: int, gift: str) -> bool:
        """
        Set the gift only if it is still NULL.

        Single conditional UPDATE, so two concurrent first submissions
        can't both observe an unset gift.

        Returns:
            True if this call performed the set
        """
        async with self._write() as conn:
            result = await conn.execute(
                update(participants)
                .where(participants.c.participant_id == participant_id)
                .where(participants.c.gift.is_(None))
                .values(gift=gift)
            )
            return result.rowcount == 1

    async def update_gift(self, participant_id: int, gift: str) -> None:
        async with self._write() as conn:
            await conn.execute(
                update(participants)
                .where(participants.c.participant_id == participant_id)
                .values(gift=gift)
            )

    async def set_recipient(self, participant_id: int, recipient_username: str) -> None:
        async with self._write() as conn:
            result = await conn.execute(
                update(participants)
                .where(participants.c.participant_id == participant_id)
                .values(recipient=recipient_username)
            )
            if result.rowcount != 1:
                raise StoreError(f"Participant {participant_id} not found")
        logger.debug(f"Recipient of participant {participant_id} set")

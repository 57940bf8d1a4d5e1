"""Query layer for database operations using SQLAlchemy Core."""

from .participants import DuplicateRowError, Participant, ParticipantStore, StoreError

__all__ = [
    "Participant",
    "ParticipantStore",
    "StoreError",
    "DuplicateRowError",
]

"""SQLAlchemy Core table definitions for the database schema."""

from sqlalchemy import Column, DateTime, Integer, MetaData, Table, Text, func

# Naming convention for constraints (helps Alembic generate better names)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# PARTICIPANTS
# =====================================================
participants = Table(
    "participants",
    metadata,
    Column("participant_id", Integer, primary_key=True, autoincrement=True),
    Column("username", Text, nullable=False, unique=True),
    Column("email", Text, nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    # Gift wish; NULL until the first submission
    Column("gift", Text),
    # Recipient username; NULL until pairing runs
    Column("recipient", Text),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

"""Create participants table.

Revision ID: 001
Revises:
Create Date: 2026-10-19

Holds registered participants, their gift wish (NULL until submitted) and
their recipient's username (NULL until pairing runs).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "participants",
        sa.Column("participant_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("gift", sa.Text(), nullable=True),
        sa.Column("recipient", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("participant_id", name=op.f("pk_participants")),
        sa.UniqueConstraint("username", name=op.f("uq_participants_username")),
        sa.UniqueConstraint("email", name=op.f("uq_participants_email")),
    )
    op.create_index(
        "idx_participants_gift_not_null",
        "participants",
        ["participant_id"],
        unique=False,
        postgresql_where=sa.text("gift IS NOT NULL"),
    )


def downgrade() -> None:
    op.drop_index("idx_participants_gift_not_null", table_name="participants")
    op.drop_table("participants")

"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "gift_exchanges",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("owner_email", sa.String(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("draft", "inviting", "active", "completed", name="exchange_status"),
            nullable=False,
            server_default="draft",
        ),
        sa.Column("budget_min", sa.Integer(), nullable=True),
        sa.Column("budget_max", sa.Integer(), nullable=True),
        sa.Column("match_seed", sa.Integer(), nullable=True),
        sa.Column("matched_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "exchange_participants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("gift_exchange_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("invited", "accepted", "declined", name="participant_status"),
            nullable=False,
            server_default="invited",
        ),
        sa.Column("matched_participant_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["gift_exchange_id"], ["gift_exchanges.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["matched_participant_id"], ["exchange_participants.id"], ondelete="SET NULL"
        ),
        sa.UniqueConstraint(
            "gift_exchange_id", "email", name="uq_exchange_participants_exchange_email"
        ),
    )
    op.create_index(
        "ix_exchange_participants_gift_exchange_id", "exchange_participants", ["gift_exchange_id"]
    )

    op.create_table(
        "exchange_exclusions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("gift_exchange_id", sa.Integer(), nullable=False),
        sa.Column("participant_a_id", sa.Integer(), nullable=False),
        sa.Column("participant_b_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["gift_exchange_id"], ["gift_exchanges.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["participant_a_id"], ["exchange_participants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["participant_b_id"], ["exchange_participants.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "gift_exchange_id",
            "participant_a_id",
            "participant_b_id",
            name="uq_exchange_exclusions_pair",
        ),
    )
    op.create_index(
        "ix_exchange_exclusions_gift_exchange_id", "exchange_exclusions", ["gift_exchange_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_exchange_exclusions_gift_exchange_id", table_name="exchange_exclusions")
    op.drop_table("exchange_exclusions")
    op.drop_index("ix_exchange_participants_gift_exchange_id", table_name="exchange_participants")
    op.drop_table("exchange_participants")
    op.drop_table("gift_exchanges")
    op.execute("DROP TYPE IF EXISTS participant_status")
    op.execute("DROP TYPE IF EXISTS exchange_status")

"""Initial schema — connections and messages.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

One row per unordered user pair: (pair_low, pair_high) is unique, so reciprocal
requests cannot both be stored regardless of which side inserts first.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "connections",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("initiator_id", UUID(as_uuid=True), nullable=False),
        sa.Column("recipient_id", UUID(as_uuid=True), nullable=False),
        sa.Column("pair_low", UUID(as_uuid=True), nullable=False),
        sa.Column("pair_high", UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("pair_low", "pair_high", name="uq_connections_pair"),
        sa.CheckConstraint("initiator_id <> recipient_id", name="ck_connections_not_self"),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name="ck_connections_status",
        ),
    )
    op.create_index("ix_connections_initiator_id", "connections", ["initiator_id"])
    op.create_index("ix_connections_recipient_id", "connections", ["recipient_id"])
    op.create_index("ix_connections_updated_at", "connections", ["updated_at"])

    op.create_table(
        "messages",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "connection_id", UUID(as_uuid=True),
            sa.ForeignKey("connections.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("sender_id", UUID(as_uuid=True), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("read", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_messages_connection_id", "messages", ["connection_id"])


def downgrade() -> None:
    op.drop_index("ix_messages_connection_id", table_name="messages")
    op.drop_table("messages")
    op.drop_index("ix_connections_updated_at", table_name="connections")
    op.drop_index("ix_connections_recipient_id", table_name="connections")
    op.drop_index("ix_connections_initiator_id", table_name="connections")
    op.drop_table("connections")

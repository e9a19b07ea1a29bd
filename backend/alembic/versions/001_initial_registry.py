"""Initial schema - parcels, sale_transactions, registrars, registry_events.

Revision ID: 001_initial_registry
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial_registry"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "parcels",
        sa.Column("plot_id", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column("boundary_east", sa.Text, nullable=False, server_default=""),
        sa.Column("boundary_west", sa.Text, nullable=False, server_default=""),
        sa.Column("boundary_north", sa.Text, nullable=False, server_default=""),
        sa.Column("boundary_south", sa.Text, nullable=False, server_default=""),
        sa.Column("government_value", sa.BigInteger, nullable=False),
        sa.Column("area", sa.BigInteger, nullable=False),
        sa.Column("current_owner", sa.String(255), nullable=False),
        sa.Column("is_encumbered", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_mutation_complete", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("owner_identity_hash", sa.String(66), nullable=False),
        sa.Column("secondary_identity_hash", sa.String(66), nullable=False),
        sa.Column("registered_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "sale_transactions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("plot_id", sa.BigInteger, sa.ForeignKey("parcels.plot_id"), nullable=False),
        sa.Column("sequence", sa.Integer, nullable=False),
        sa.Column("buyer", sa.String(255), nullable=False),
        sa.Column("seller", sa.String(255), nullable=False),
        sa.Column("sale_price", sa.BigInteger, nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("plot_id", "sequence", name="uq_sale_plot_sequence"),
    )

    op.create_table(
        "registrars",
        sa.Column("identity", sa.String(255), primary_key=True),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "registry_events",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("plot_id", sa.BigInteger, nullable=False),
        sa.Column("payload", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_registry_events_plot_id", "registry_events", ["plot_id"])


def downgrade() -> None:
    op.drop_index("ix_registry_events_plot_id", table_name="registry_events")
    op.drop_table("registry_events")
    op.drop_table("registrars")
    op.drop_table("sale_transactions")
    op.drop_table("parcels")

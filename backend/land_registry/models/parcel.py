"""Parcel ORM - persists the current title record of one plot.

Invariants:
    - plot_id is the primary key, supplied by the registrar (never generated)
    - boundaries, government_value, area and identity hashes are written once
    - current_owner, is_encumbered, is_mutation_complete change after creation

Design Decisions:
    - Boundaries flattened into four columns: fixed shape, no JSON needed
    - sales relationship ordered by sequence: history reads never sort in Python
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from land_registry.db.base import Base


class Parcel(Base):
    """Parcel aggregate root - owns its sale history."""
    __tablename__ = "parcels"

    plot_id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False,
    )
    boundary_east: Mapped[str] = mapped_column(Text, nullable=False, default="")
    boundary_west: Mapped[str] = mapped_column(Text, nullable=False, default="")
    boundary_north: Mapped[str] = mapped_column(Text, nullable=False, default="")
    boundary_south: Mapped[str] = mapped_column(Text, nullable=False, default="")
    government_value: Mapped[int] = mapped_column(BigInteger, nullable=False)
    area: Mapped[int] = mapped_column(BigInteger, nullable=False)
    current_owner: Mapped[str] = mapped_column(String(255), nullable=False)
    is_encumbered: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    is_mutation_complete: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    owner_identity_hash: Mapped[str] = mapped_column(String(66), nullable=False)
    secondary_identity_hash: Mapped[str] = mapped_column(
        String(66), nullable=False,
    )
    registered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    sales: Mapped[list["SaleTransactionRecord"]] = relationship(
        "SaleTransactionRecord", back_populates="parcel",
        order_by="SaleTransactionRecord.sequence",
        cascade="all, delete-orphan", lazy="selectin",
    )

"""SaleTransaction ORM - append-only ledger of completed transfers.

Invariants:
    - Always belongs to a Parcel (plot_id FK)
    - (plot_id, sequence) is unique; sequence starts at 0 and has no gaps
    - Rows are inserted, never updated or deleted by the service

Design Decisions:
    - Explicit sequence column over created_at ordering: two sales can share a
      clock reading
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    BigInteger, DateTime, ForeignKey, Integer, String, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from land_registry.db.base import Base


class SaleTransactionRecord(Base):
    """One ownership transfer of a parcel."""
    __tablename__ = "sale_transactions"
    __table_args__ = (
        UniqueConstraint("plot_id", "sequence", name="uq_sale_plot_sequence"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    plot_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("parcels.plot_id"), nullable=False,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    buyer: Mapped[str] = mapped_column(String(255), nullable=False)
    seller: Mapped[str] = mapped_column(String(255), nullable=False)
    sale_price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )

    # Relationships
    parcel: Mapped["Parcel"] = relationship("Parcel", back_populates="sales")

"""RegistryEvent ORM - outbound event log for external observers.

Invariants:
    - One row per event published by the core, in publication order
    - id is monotonically increasing: consumers page through it

Design Decisions:
    - Logging table, not enforcement: no registry rule reads it back
    - JSON payload: event shapes differ per type
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from land_registry.db.base import Base


class RegistryEventRecord(Base):
    """Persisted registry notification."""
    __tablename__ = "registry_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    plot_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

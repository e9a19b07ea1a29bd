"""Registrar ORM - accredited identities. Rows are only ever inserted."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from land_registry.db.base import Base


class Registrar(Base):
    __tablename__ = "registrars"

    identity: Mapped[str] = mapped_column(String(255), primary_key=True)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

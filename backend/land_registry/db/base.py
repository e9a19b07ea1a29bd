"""SQLAlchemy Declarative Base - metadata root for parcels, sales, registrars and events.

Invariants:
    - All registry models inherit from Base
    - Alembic autogenerate and test create_all read Base.metadata

Design Decisions:
    - Separate file for Base: models import it without importing each other
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all registry ORM models."""
    pass

"""Database Session Manager - async engine and sessions for the registry tables.

Invariants:
    - A session that raises is rolled back before the error leaves the manager
    - SQLAlchemy failures surface as DatabaseError (core/errors.py) with a
      registry-level message; the driver detail only goes to the log
    - SQLite URLs skip pool sizing (the driver pool does not accept it)
    - Ready means the registrars table answers, not merely that the socket does

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
      (ADR: no global import side effects)
    - expire_on_commit=False: RegistryService.load reads parcel and sale rows
      after the bootstrap commit
    - Failure mapping is an ordered table, most specific class first
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)

from land_registry.core.errors import DatabaseError
from land_registry.db.base import Base
from land_registry.models.registrar import Registrar

logger = logging.getLogger(__name__)

# (exception class, message, operation)
_FAILURES: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Registry row conflicts with an existing record", "commit"),
    (OperationalError, "Registry database unreachable", "execute"),
    (DBAPIError, "Registry database driver error", "query"),
)


def to_database_error(error: SQLAlchemyError) -> DatabaseError:
    for error_type, message, operation in _FAILURES:
        if isinstance(error, error_type):
            return DatabaseError(message, operation)
    return DatabaseError("Registry database operation failed", "unknown")


class DatabaseSessionManager:
    """Owns the engine behind parcels, sales, registrars and the event log."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            error = to_database_error(e)
            logger.error(f"{error.message}: {e}", extra={"error_code": error.code})
            raise error from e
        finally:
            await session.close()

    async def create_schema(self) -> None:
        """Create missing registry tables. Production schemas are managed by Alembic."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """Readiness: the registrars table can be queried."""
        try:
            async with self.session() as db:
                await db.execute(select(Registrar.identity).limit(1))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session

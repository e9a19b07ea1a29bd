"""Service test fixtures - async DB, loaded registry service + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db and get_registry_service overridden for route tests
    - db_manager patched so readiness probes see the test engine
    - The registry is loaded through RegistryService.load, exactly like startup

Design Decisions:
    - SQLite in-memory with StaticPool: every session shares one connection,
      so rows written by a request are visible to assertions
    - Deterministic FakeClock from the root conftest: sale timestamps are predictable
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from land_registry.db.base import Base
from land_registry.infrastructure.database import get_db, DatabaseSessionManager
import land_registry.infrastructure.database as db_module
import land_registry.models  # noqa: F401
from land_registry.services.registry_service import (
    RegistryService, get_registry_service,
)
import land_registry.services.registry_service as service_module
from land_registry.main import app

from tests.services.registry_helpers import REGISTRAR


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def registry_service(test_session_factory, clock) -> RegistryService:
    async with test_session_factory() as session:
        return await RegistryService.load(session, REGISTRAR, clock)


@pytest.fixture
async def client(test_engine, test_session_factory, registry_service):
    """FastAPI test client with DB and registry dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_registry_service] = lambda: registry_service

    # Patch module singletons read directly by the readiness probe
    original_manager = db_module.db_manager
    original_service = service_module.registry_service
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager
    service_module.registry_service = registry_service

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
    service_module.registry_service = original_service


@pytest.fixture
def parcel_payload() -> dict:
    return {
        "plot_id": 1,
        "boundaries": {
            "east": "river", "west": "road", "north": "temple", "south": "field",
        },
        "government_value": 1000,
        "area": 500,
        "owner": "alice",
        "owner_identity_hash": "aa" * 32,
        "secondary_identity_hash": "bb" * 32,
    }

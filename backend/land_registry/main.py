"""Land Registry API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map LandRegistryError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized and registry loaded on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Registry state rebuilt from the DB at startup; the bootstrap registrar
      comes from settings
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from land_registry.api.error_handlers import register_error_handlers
from land_registry.api.routes import events, health, parcels, registrars
from land_registry.config import get_settings
from land_registry.infrastructure.clock import SystemClock
from land_registry.infrastructure.database import init_db
from land_registry.infrastructure.observability import setup_logging
from land_registry.services.registry_service import init_registry_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.database_auto_create:
        await manager.create_schema()
    async with manager.session() as db:
        await init_registry_service(db, settings.bootstrap_registrar, SystemClock())
    logger.info("Land Registry API started")
    yield
    logger.info("Land Registry API shutting down")
    await manager.dispose()


app = FastAPI(
    title="Land Registry API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes - explicit registration
app.include_router(health.router)
app.include_router(parcels.router)
app.include_router(registrars.router)
app.include_router(events.router)

register_error_handlers(app)

"""Registry Service - runs core transitions and persists their effects.

Invariants:
    - One process-wide Registry, loaded from the DB on startup
    - Core transition and DB commit happen under one asyncio.Lock, in order
    - Domain errors raise before anything is written (core guarantees it)
    - Transitions run on a forked draft; the live registry only ever holds
      committed state, so concurrent readers never see a pending write
    - Any failure after the transition, cancellation included, drops the
      draft and its events and rolls back - core and DB never diverge
    - SQLAlchemy failures surface as DatabaseError; everything else re-raises
    - Events drained from the outbox are persisted in the same commit

Design Decisions:
    - Impureim sandwich: fork -> pure transition -> persist -> commit -> install
    - Module-level singleton initialized in lifespan, like db_manager
      (ADR: single-process uvicorn, the core is the authoritative store)
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from land_registry.core.domain_types import (
    Amount, Identity, IdentityHash, PlotId,
)
from land_registry.core.events import EventOutbox
from land_registry.core.registry import Registry
from land_registry.core.registry_state import (
    Boundaries, Property, SaleTransaction,
)
from land_registry.core.repository_protocols import Clock, RegistryRepository
from land_registry.infrastructure.database import to_database_error
from land_registry.services.registry_store import RegistryStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RegistryService:
    """Async facade over the core Registry with write-through persistence."""

    def __init__(self, registry: Registry, outbox: EventOutbox):
        self.registry = registry
        self._outbox = outbox
        self._lock = asyncio.Lock()

    @classmethod
    async def load(
        cls, db: AsyncSession, bootstrap_registrar: str, clock: Clock,
    ) -> "RegistryService":
        """Rebuild the registry from the DB; install the bootstrap registrar if new."""
        store = RegistryStore(db)
        state = await store.load_state()
        outbox = EventOutbox()
        registrar = Identity(bootstrap_registrar)
        registry = Registry(registrar, clock, state=state)
        if registrar not in state.registrars:
            await store.save_registrar(registrar)
            await db.commit()
            logger.info(f"Bootstrap registrar {registrar} installed")
        logger.info(
            f"Registry loaded: {len(state.properties)} parcels, "
            f"{len(registry.list_registrars())} registrars",
        )
        return cls(registry, outbox)

    # ─── Mutations ──────────────────────────────────────────────

    async def add_registrar(
        self, db: AsyncSession, caller: Identity, new_identity: Identity,
    ) -> bool:
        async def persist(
            store: RegistryRepository, draft: Registry, added: bool,
        ) -> None:
            if added:
                await store.save_registrar(new_identity)

        return await self._apply(
            db, lambda draft: draft.add_registrar(caller, new_identity), persist,
        )

    async def register_parcel(
        self,
        db: AsyncSession,
        caller: Identity,
        plot_id: PlotId,
        boundaries: Boundaries,
        government_value: Amount,
        area: Amount,
        owner: Identity,
        owner_identity_hash: IdentityHash,
        secondary_identity_hash: IdentityHash,
    ) -> Property:
        async def persist(
            store: RegistryRepository, draft: Registry, record: Property,
        ) -> None:
            await store.save_property(record)

        return await self._apply(
            db,
            lambda draft: draft.register_parcel(
                caller, plot_id, boundaries, government_value, area, owner,
                owner_identity_hash, secondary_identity_hash,
            ),
            persist,
        )

    async def transfer_parcel(
        self,
        db: AsyncSession,
        caller: Identity,
        plot_id: PlotId,
        buyer: Identity,
        sale_price: Amount,
    ) -> SaleTransaction:
        async def persist(
            store: RegistryRepository, draft: Registry, sale: SaleTransaction,
        ) -> None:
            await store.save_property(draft.get_property(plot_id))
            sequence = len(draft.get_history(plot_id)) - 1
            await store.append_sale(plot_id, sequence, sale)

        return await self._apply(
            db,
            lambda draft: draft.transfer_parcel(caller, plot_id, buyer, sale_price),
            persist,
        )

    async def set_encumbrance(
        self, db: AsyncSession, caller: Identity, plot_id: PlotId, status: bool,
    ) -> bool:
        async def persist(
            store: RegistryRepository, draft: Registry, changed: bool,
        ) -> None:
            if changed:
                await store.save_property(draft.get_property(plot_id))

        return await self._apply(
            db,
            lambda draft: draft.set_encumbrance(caller, plot_id, status),
            persist,
        )

    async def complete_mutation(
        self, db: AsyncSession, caller: Identity, plot_id: PlotId,
    ) -> Property:
        async def persist(
            store: RegistryRepository, draft: Registry, record: Property,
        ) -> None:
            await store.save_property(record)

        return await self._apply(
            db, lambda draft: draft.complete_mutation(caller, plot_id), persist,
        )

    # ─── Reads ──────────────────────────────────────────────────

    def get_property(self, plot_id: PlotId) -> Property:
        return self.registry.get_property(plot_id)

    def get_history(self, plot_id: PlotId) -> tuple[SaleTransaction, ...]:
        return self.registry.get_history(plot_id)

    def is_registrar(self, identity: Identity) -> bool:
        return self.registry.is_registrar(identity)

    def list_registrars(self) -> list[Identity]:
        return self.registry.list_registrars()

    # ─── Transaction boundary ───────────────────────────────────

    async def _apply(
        self,
        db: AsyncSession,
        transition: Callable[[Registry], T],
        persist: Callable[[RegistryRepository, Registry, T], Awaitable[None]],
    ) -> T:
        async with self._lock:
            draft = self.registry.fork(self._outbox)
            # domain errors raise here, before anything is published
            result = transition(draft)
            store: RegistryRepository = RegistryStore(db)
            try:
                await persist(store, draft, result)
                for event in self._outbox.drain():
                    await store.append_event(event)
                await db.commit()
            except SQLAlchemyError as e:
                await self._abandon(db, e)
                raise to_database_error(e) from e
            except BaseException as e:
                await self._abandon(db, e)
                raise
            self.registry.restore_state(draft.export_state())
            return result

    async def _abandon(self, db: AsyncSession, error: BaseException) -> None:
        """Discard the draft's events and the DB transaction; live state is untouched."""
        self._outbox.drain()
        logger.error(f"Registry write not persisted: {error!r}")
        await db.rollback()


# Singleton (initialized on startup)
registry_service: RegistryService | None = None


async def init_registry_service(
    db: AsyncSession, bootstrap_registrar: str, clock: Clock,
) -> RegistryService:
    global registry_service
    registry_service = await RegistryService.load(db, bootstrap_registrar, clock)
    return registry_service


def get_registry_service() -> RegistryService:
    """FastAPI dependency for the process-wide registry."""
    if not registry_service:
        raise RuntimeError("Registry not initialized")
    return registry_service

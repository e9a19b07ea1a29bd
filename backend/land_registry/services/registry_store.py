"""Registry Store - SQLAlchemy implementation of RegistryRepository.

Invariants:
    - Never commits: the caller owns the transaction boundary
    - Parcel immutable fields are written on insert only; updates touch
      current_owner, is_encumbered, is_mutation_complete
    - load_state returns histories ordered by sequence
    - Timestamps read back from the DB are normalised to UTC

Design Decisions:
    - Explicit get-then-update over session.merge(): merge would replace the
      sales collection and orphan existing history rows
"""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from land_registry.core.domain_types import (
    Amount, Identity, IdentityHash, PlotId,
)
from land_registry.core.events import RegistryEvent
from land_registry.core.registry_state import (
    Boundaries, Property, RegistryState, SaleTransaction,
)
from land_registry.models.parcel import Parcel
from land_registry.models.registrar import Registrar
from land_registry.models.registry_event import RegistryEventRecord
from land_registry.models.sale_transaction import SaleTransactionRecord


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_property(row: Parcel) -> Property:
    return Property(
        plot_id=PlotId(row.plot_id),
        boundaries=Boundaries(
            east=row.boundary_east, west=row.boundary_west,
            north=row.boundary_north, south=row.boundary_south,
        ),
        government_value=Amount(row.government_value),
        area=Amount(row.area),
        current_owner=Identity(row.current_owner),
        is_encumbered=row.is_encumbered,
        is_mutation_complete=row.is_mutation_complete,
        owner_identity_hash=IdentityHash(row.owner_identity_hash),
        secondary_identity_hash=IdentityHash(row.secondary_identity_hash),
        exists=True,
    )


def _to_sale(row: SaleTransactionRecord) -> SaleTransaction:
    return SaleTransaction(
        buyer=Identity(row.buyer),
        seller=Identity(row.seller),
        sale_price=Amount(row.sale_price),
        timestamp=_as_utc(row.timestamp),
    )


class RegistryStore:
    """Registry persistence bound to one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_state(self) -> RegistryState:
        """Rebuild the full in-memory store from the database."""
        state = RegistryState()
        parcels = (await self.db.execute(select(Parcel))).scalars().all()
        for row in parcels:
            plot_id = PlotId(row.plot_id)
            state.properties[plot_id] = _to_property(row)
            state.histories[plot_id] = tuple(_to_sale(s) for s in row.sales)
        registrars = (await self.db.execute(select(Registrar.identity))).scalars()
        state.registrars.update(Identity(i) for i in registrars)
        return state

    async def save_registrar(self, identity: Identity) -> None:
        self.db.add(Registrar(identity=identity))

    async def save_property(self, record: Property) -> None:
        row = await self.db.get(Parcel, record.plot_id)
        if row is None:
            self.db.add(Parcel(
                plot_id=record.plot_id,
                boundary_east=record.boundaries.east,
                boundary_west=record.boundaries.west,
                boundary_north=record.boundaries.north,
                boundary_south=record.boundaries.south,
                government_value=record.government_value,
                area=record.area,
                current_owner=record.current_owner,
                is_encumbered=record.is_encumbered,
                is_mutation_complete=record.is_mutation_complete,
                owner_identity_hash=record.owner_identity_hash,
                secondary_identity_hash=record.secondary_identity_hash,
                sales=[],
            ))
            return
        row.current_owner = record.current_owner
        row.is_encumbered = record.is_encumbered
        row.is_mutation_complete = record.is_mutation_complete

    async def append_sale(
        self, plot_id: PlotId, sequence: int, sale: SaleTransaction,
    ) -> None:
        record = SaleTransactionRecord(
            plot_id=plot_id,
            sequence=sequence,
            buyer=sale.buyer,
            seller=sale.seller,
            sale_price=sale.sale_price,
            timestamp=sale.timestamp,
        )
        parcel = await self.db.get(Parcel, plot_id)
        if parcel is None:
            self.db.add(record)
            return
        # keep the session's copy of the history in step with the DB
        parcel.sales.append(record)

    async def append_event(self, event: RegistryEvent) -> None:
        self.db.add(RegistryEventRecord(
            event_type=event.event_type.value,
            plot_id=event.plot_id,
            payload=event.to_payload(),
        ))

    async def list_events(
        self, plot_id: PlotId | None = None, limit: int = 50, offset: int = 0,
    ) -> list[RegistryEventRecord]:
        """Persisted events in publication order, optionally for one plot."""
        query = select(RegistryEventRecord).order_by(RegistryEventRecord.id)
        if plot_id is not None:
            query = query.where(RegistryEventRecord.plot_id == plot_id)
        query = query.limit(limit).offset(offset)
        return list((await self.db.execute(query)).scalars().all())

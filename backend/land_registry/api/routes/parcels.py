"""Parcel Routes - registration, transfer, encumbrance, mutation and reads.

Invariants:
    - Mutating endpoints require X-Caller-Identity; reads are public
    - Unknown plots read as an empty record (exists=false), not 404
    - Registry errors propagate to the global LandRegistryError handler

Design Decisions:
    - Routes translate schemas <-> core types and nothing else
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from land_registry.api.dependencies import get_caller_identity
from land_registry.core.domain_types import (
    Amount, Identity, IdentityHash, PlotId,
)
from land_registry.infrastructure.database import get_db
from land_registry.schemas.parcel import (
    EncumbranceResponse,
    EncumbranceUpdate,
    HistoryResponse,
    ParcelCreate,
    ParcelResponse,
    SaleTransactionResponse,
    TransferRequest,
    MAX_AMOUNT,
)
from land_registry.services.registry_service import (
    RegistryService, get_registry_service,
)

router = APIRouter(prefix="/api/v1/parcels", tags=["parcels"])

PlotIdPath = Annotated[int, Path(ge=0, le=MAX_AMOUNT)]


@router.post(
    "", response_model=ParcelResponse, status_code=status.HTTP_201_CREATED,
)
async def register_parcel(
    body: ParcelCreate,
    caller: Identity = Depends(get_caller_identity),
    service: RegistryService = Depends(get_registry_service),
    db: AsyncSession = Depends(get_db),
):
    """Register a new parcel. Registrars only."""
    record = await service.register_parcel(
        db,
        caller,
        PlotId(body.plot_id),
        body.boundaries.to_domain(),
        Amount(body.government_value),
        Amount(body.area),
        Identity(body.owner),
        IdentityHash(body.owner_identity_hash),
        IdentityHash(body.secondary_identity_hash),
    )
    return ParcelResponse.from_domain(record)


@router.get("/{plot_id}", response_model=ParcelResponse)
async def get_parcel(
    plot_id: PlotIdPath,
    service: RegistryService = Depends(get_registry_service),
):
    """Current title record; exists=false when the plot was never registered."""
    return ParcelResponse.from_domain(service.get_property(PlotId(plot_id)))


@router.get("/{plot_id}/history", response_model=HistoryResponse)
async def get_parcel_history(
    plot_id: PlotIdPath,
    service: RegistryService = Depends(get_registry_service),
):
    return HistoryResponse(
        plot_id=plot_id,
        transactions=[
            SaleTransactionResponse.from_domain(sale)
            for sale in service.get_history(PlotId(plot_id))
        ],
    )


@router.post("/{plot_id}/transfer", response_model=SaleTransactionResponse)
async def transfer_parcel(
    body: TransferRequest,
    plot_id: PlotIdPath,
    caller: Identity = Depends(get_caller_identity),
    service: RegistryService = Depends(get_registry_service),
    db: AsyncSession = Depends(get_db),
):
    """Transfer ownership to the buyer. Current owner only."""
    sale = await service.transfer_parcel(
        db, caller, PlotId(plot_id), Identity(body.buyer), Amount(body.sale_price),
    )
    return SaleTransactionResponse.from_domain(sale)


@router.put("/{plot_id}/encumbrance", response_model=EncumbranceResponse)
async def set_encumbrance(
    body: EncumbranceUpdate,
    plot_id: PlotIdPath,
    caller: Identity = Depends(get_caller_identity),
    service: RegistryService = Depends(get_registry_service),
    db: AsyncSession = Depends(get_db),
):
    """Flag or clear a dispute/lien. changed=false means the value was already set."""
    changed = await service.set_encumbrance(
        db, caller, PlotId(plot_id), body.is_encumbered,
    )
    return EncumbranceResponse(
        plot_id=plot_id, is_encumbered=body.is_encumbered, changed=changed,
    )


@router.post("/{plot_id}/mutation", response_model=ParcelResponse)
async def complete_mutation(
    plot_id: PlotIdPath,
    caller: Identity = Depends(get_caller_identity),
    service: RegistryService = Depends(get_registry_service),
    db: AsyncSession = Depends(get_db),
):
    """Record that the land-records office processed the latest transfer."""
    record = await service.complete_mutation(db, caller, PlotId(plot_id))
    return ParcelResponse.from_domain(record)

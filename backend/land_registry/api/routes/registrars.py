"""Registrar Routes - membership queries and admission of new registrars.

Invariants:
    - Admission requires the caller to be a registrar already
    - Re-admitting an existing registrar succeeds with added=false
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from land_registry.api.dependencies import get_caller_identity
from land_registry.core.domain_types import Identity
from land_registry.infrastructure.database import get_db
from land_registry.schemas.registrar import (
    RegistrarAdded, RegistrarCreate, RegistrarList, RegistrarStatus,
)
from land_registry.services.registry_service import (
    RegistryService, get_registry_service,
)

router = APIRouter(prefix="/api/v1/registrars", tags=["registrars"])


@router.get("", response_model=RegistrarList)
async def list_registrars(
    service: RegistryService = Depends(get_registry_service),
):
    return RegistrarList(registrars=service.list_registrars())


@router.get("/{identity}", response_model=RegistrarStatus)
async def get_registrar_status(
    identity: str,
    service: RegistryService = Depends(get_registry_service),
):
    return RegistrarStatus(
        identity=identity, is_registrar=service.is_registrar(Identity(identity)),
    )


@router.post("", response_model=RegistrarAdded)
async def add_registrar(
    body: RegistrarCreate,
    caller: Identity = Depends(get_caller_identity),
    service: RegistryService = Depends(get_registry_service),
    db: AsyncSession = Depends(get_db),
):
    added = await service.add_registrar(db, caller, Identity(body.identity))
    return RegistrarAdded(identity=body.identity, added=added)

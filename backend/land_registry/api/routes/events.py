"""Event Log Routes - read access to persisted registry notifications.

Invariants:
    - Events returned in publication order (ascending id)
    - Read-only: the log is written by RegistryService only

Design Decisions:
    - Offset pagination: consumers poll with the last offset they processed
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from land_registry.core.domain_types import PlotId
from land_registry.infrastructure.database import get_db
from land_registry.schemas.event import EventPage, RegistryEventResponse
from land_registry.services.registry_store import RegistryStore

router = APIRouter(prefix="/api/v1/events", tags=["events"])


@router.get("", response_model=EventPage)
async def list_events(
    plot_id: int | None = Query(None, ge=0),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """List persisted events, optionally for a single plot."""
    records = await RegistryStore(db).list_events(
        PlotId(plot_id) if plot_id is not None else None, limit, offset,
    )
    return EventPage(
        events=[RegistryEventResponse.model_validate(r) for r in records],
        limit=limit,
        offset=offset,
    )

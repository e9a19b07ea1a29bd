"""Event Schemas - persisted registry notifications exposed to observers."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class RegistryEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_type: str
    plot_id: int
    payload: dict
    created_at: datetime


class EventPage(BaseModel):
    events: list[RegistryEventResponse]
    limit: int
    offset: int

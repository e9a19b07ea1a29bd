"""Registry Events - notifications emitted after a committed state transition.

Invariants:
    - One event per successful mutating call (encumbrance dedup excepted)
    - Events are created only after the mutation is applied - never before
    - to_payload() is JSON-safe (persisted verbatim in the event log)

Design Decisions:
    - Frozen dataclasses with an event_type class attribute: the sink can route
      on type without isinstance chains
    - EventOutbox is the in-process sink: the shell drains it after each call and
      persists what it finds (ADR: outbound event log)
"""

from dataclasses import dataclass, asdict
from typing import ClassVar

from land_registry.core.domain_types import (
    Amount, Identity, PlotId, RegistryEventType,
)


@dataclass(frozen=True)
class RegistryEvent:
    """Base class for every registry notification."""
    event_type: ClassVar[RegistryEventType]
    plot_id: PlotId

    def to_payload(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PropertyRegistered(RegistryEvent):
    event_type: ClassVar[RegistryEventType] = RegistryEventType.PROPERTY_REGISTERED
    owner: Identity


@dataclass(frozen=True)
class PropertyTransferred(RegistryEvent):
    event_type: ClassVar[RegistryEventType] = RegistryEventType.PROPERTY_TRANSFERRED
    from_owner: Identity
    to_owner: Identity
    price: Amount

    def to_payload(self) -> dict:
        # external consumers expect the from/to keys
        return {
            "plot_id": self.plot_id,
            "from": self.from_owner,
            "to": self.to_owner,
            "price": self.price,
        }


@dataclass(frozen=True)
class EncumbranceUpdated(RegistryEvent):
    event_type: ClassVar[RegistryEventType] = RegistryEventType.ENCUMBRANCE_UPDATED
    status: bool


@dataclass(frozen=True)
class MutationStatusUpdated(RegistryEvent):
    event_type: ClassVar[RegistryEventType] = RegistryEventType.MUTATION_STATUS_UPDATED
    status: bool


class EventOutbox:
    """Ordered in-memory sink. drain() hands over and clears pending events."""

    def __init__(self) -> None:
        self._pending: list[RegistryEvent] = []

    def publish(self, event: RegistryEvent) -> None:
        self._pending.append(event)

    def drain(self) -> list[RegistryEvent]:
        events, self._pending = self._pending, []
        return events

    def __len__(self) -> int:
        return len(self._pending)

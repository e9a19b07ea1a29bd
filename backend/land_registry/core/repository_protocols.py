"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell - dependency arrows point inward only
    - Clock, event sink and persistence accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Clock and EventSink are sync: the core never awaits
    - RegistryRepository is async because implementations do IO; the shell
      orchestrates it around the pure transitions
"""

from datetime import datetime
from typing import Protocol

from land_registry.core.domain_types import Identity, PlotId
from land_registry.core.events import RegistryEvent
from land_registry.core.registry_state import Property, RegistryState, SaleTransaction


class Clock(Protocol):
    """Supplies a monotonically non-decreasing timestamp per transfer."""
    def now(self) -> datetime: ...


class EventSink(Protocol):
    """Receives events in the order transitions were applied."""
    def publish(self, event: RegistryEvent) -> None: ...


class RegistryRepository(Protocol):
    """Contract for registry persistence - implemented by shell."""
    async def load_state(self) -> RegistryState: ...
    async def save_registrar(self, identity: Identity) -> None: ...
    async def save_property(self, record: Property) -> None: ...
    async def append_sale(
        self, plot_id: PlotId, sequence: int, sale: SaleTransaction,
    ) -> None: ...
    async def append_event(self, event: RegistryEvent) -> None: ...

"""Registry - the land-title state machine.

Invariants:
    - The initialising identity is a registrar from construction
    - Every mutating call runs under one writer lock: check, mutate, publish
    - A failing call raises before any write - the store is left unchanged
    - Events are published only after the mutation is applied
    - Record reads take no lock: records are frozen, histories are tuples

Design Decisions:
    - Rules live in enforce_registry (pure); this class applies them and owns the store
    - threading.Lock over asyncio.Lock: the core is sync and may be driven from
      worker threads as well as the event loop
    - fork() gives the shell a draft to mutate while persistence is pending;
      restore_state installs the draft once the DB commit succeeds
      (ADR: core and DB never diverge)
"""

import logging
import threading

from land_registry.core.domain_types import (
    Amount, Identity, IdentityHash, PlotId, RegistryOperation,
)
from land_registry.core.enforce_registry import (
    validate_admission,
    validate_registration,
    validate_status_change,
    validate_transfer,
)
from land_registry.core.errors import LandRegistryError
from land_registry.core.events import (
    EncumbranceUpdated,
    EventOutbox,
    MutationStatusUpdated,
    PropertyRegistered,
    PropertyTransferred,
    RegistryEvent,
)
from land_registry.core.registry_state import (
    Boundaries, Property, RegistryState, SaleTransaction,
)
from land_registry.core.repository_protocols import Clock, EventSink

logger = logging.getLogger(__name__)


class Registry:
    """Authoritative parcel store with registrar-gated administration."""

    def __init__(
        self,
        initial_registrar: Identity,
        clock: Clock,
        sink: EventSink | None = None,
        state: RegistryState | None = None,
    ):
        if not initial_registrar or not initial_registrar.strip():
            raise ValueError("initial_registrar must be a non-empty identity")
        self._initial_registrar = initial_registrar
        self._clock = clock
        self._sink = sink if sink is not None else EventOutbox()
        self._lock = threading.Lock()
        self._state = state.copy() if state is not None else RegistryState()
        self._state.registrars.add(initial_registrar)

    # ─── Registrar admission ────────────────────────────────────

    def is_registrar(self, identity: Identity) -> bool:
        return identity in self._state.registrars

    def list_registrars(self) -> list[Identity]:
        # set iteration must not race add_registrar
        with self._lock:
            return sorted(self._state.registrars)

    def add_registrar(self, caller: Identity, new_identity: Identity) -> bool:
        """Admit new_identity. Returns False when it was already a registrar."""
        with self._lock:
            self._raise_if(validate_admission(self._state, caller, new_identity))
            if new_identity in self._state.registrars:
                return False
            self._state.registrars.add(new_identity)
        logger.info(
            f"Registrar {new_identity} admitted by {caller}",
            extra={"caller": caller},
        )
        return True

    # ─── Registration ───────────────────────────────────────────

    def register_parcel(
        self,
        caller: Identity,
        plot_id: PlotId,
        boundaries: Boundaries,
        government_value: Amount,
        area: Amount,
        owner: Identity,
        owner_identity_hash: IdentityHash,
        secondary_identity_hash: IdentityHash,
    ) -> Property:
        with self._lock:
            self._raise_if(validate_registration(
                self._state, caller, plot_id, government_value, area, owner,
            ))
            record = Property(
                plot_id=plot_id,
                boundaries=boundaries,
                government_value=government_value,
                area=area,
                current_owner=owner,
                is_encumbered=False,
                is_mutation_complete=False,
                owner_identity_hash=owner_identity_hash,
                secondary_identity_hash=secondary_identity_hash,
                exists=True,
            )
            self._state.properties[plot_id] = record
            self._state.histories[plot_id] = ()
            self._emit(PropertyRegistered(plot_id=plot_id, owner=owner))
        return record

    # ─── Transfer ───────────────────────────────────────────────

    def transfer_parcel(
        self,
        caller: Identity,
        plot_id: PlotId,
        buyer: Identity,
        sale_price: Amount,
    ) -> SaleTransaction:
        """Move ownership to buyer and append the sale to the parcel's history."""
        with self._lock:
            self._raise_if(validate_transfer(
                self._state, caller, plot_id, buyer, sale_price,
            ))
            sale = SaleTransaction(
                buyer=buyer,
                seller=caller,
                sale_price=sale_price,
                timestamp=self._clock.now(),
            )
            history = self._state.histories.get(plot_id, ())
            self._state.histories[plot_id] = history + (sale,)
            self._state.properties[plot_id] = (
                self._state.properties[plot_id].with_owner(buyer)
            )
            self._emit(PropertyTransferred(
                plot_id=plot_id, from_owner=caller, to_owner=buyer,
                price=sale_price,
            ))
        return sale

    # ─── Encumbrance / mutation status ──────────────────────────

    def set_encumbrance(
        self, caller: Identity, plot_id: PlotId, status: bool,
    ) -> bool:
        """Set the dispute flag. Returns False (no write, no event) if unchanged."""
        with self._lock:
            self._raise_if(validate_status_change(
                self._state, caller, plot_id, RegistryOperation.SET_ENCUMBRANCE,
            ))
            current = self._state.properties[plot_id]
            if current.is_encumbered == status:
                return False
            self._state.properties[plot_id] = current.with_encumbrance(status)
            self._emit(EncumbranceUpdated(plot_id=plot_id, status=status))
        return True

    def complete_mutation(self, caller: Identity, plot_id: PlotId) -> Property:
        """Mark the land-records update done. Always writes, always emits."""
        with self._lock:
            self._raise_if(validate_status_change(
                self._state, caller, plot_id, RegistryOperation.COMPLETE_MUTATION,
            ))
            record = self._state.properties[plot_id].with_mutation_complete()
            self._state.properties[plot_id] = record
            self._emit(MutationStatusUpdated(plot_id=plot_id, status=True))
        return record

    # ─── Reads ──────────────────────────────────────────────────

    def get_property(self, plot_id: PlotId) -> Property:
        """Registered record, or an empty one (exists=False) for unknown plots."""
        return self._state.properties.get(plot_id) or Property.empty(plot_id)

    def get_history(self, plot_id: PlotId) -> tuple[SaleTransaction, ...]:
        return self._state.histories.get(plot_id, ())

    def property_exists(self, plot_id: PlotId) -> bool:
        return self._state.property_exists(plot_id)

    # ─── Snapshot ───────────────────────────────────────────────

    def export_state(self) -> RegistryState:
        with self._lock:
            return self._state.copy()

    def restore_state(self, state: RegistryState) -> None:
        with self._lock:
            self._state = state.copy()

    def fork(self, sink: EventSink) -> "Registry":
        """Independent copy publishing to sink. The original is never touched."""
        return Registry(self._initial_registrar, self._clock, sink, self.export_state())

    # ─── Internals ──────────────────────────────────────────────

    def _raise_if(self, error: LandRegistryError | None) -> None:
        if error is None:
            return
        logger.warning(
            f"Rejected {error.context.operation}: {error.message}",
            extra={
                "plot_id": error.context.plot_id,
                "caller": error.context.caller,
                "error_code": error.code,
            },
        )
        raise error

    def _emit(self, event: RegistryEvent) -> None:
        self._sink.publish(event)
        logger.info(
            f"{event.event_type.value} plot={event.plot_id}",
            extra={"plot_id": event.plot_id, "event_type": event.event_type.value},
        )

"""Registry State - parcel records, sale history and registrar set.

Invariants:
    - Property and SaleTransaction are frozen: a record is replaced, never edited in place
    - histories map plot_id -> tuple; appending builds a new tuple (copy-on-write)
    - Existence is the explicit `exists` flag, never a zero-valued plot_id
    - registrars only grows

Design Decisions:
    - Frozen dataclasses + tuples: lock-free readers always see a complete record
      (ADR: single writer, many readers)
    - RegistryState.copy() is shallow: values are immutable, so copying the
      containers is enough for a rollback snapshot
"""

from dataclasses import dataclass, field, replace
from datetime import datetime

from land_registry.core.domain_types import Amount, Identity, IdentityHash, PlotId


@dataclass(frozen=True)
class Boundaries:
    """Neighbouring parcels or landmarks on each side - descriptive only."""
    east: str = ""
    west: str = ""
    north: str = ""
    south: str = ""


@dataclass(frozen=True)
class Property:
    """One parcel's title record."""

    plot_id: PlotId
    boundaries: Boundaries = field(default_factory=Boundaries)
    government_value: Amount = Amount(0)
    area: Amount = Amount(0)
    current_owner: Identity = Identity("")
    is_encumbered: bool = False
    is_mutation_complete: bool = False
    owner_identity_hash: IdentityHash = IdentityHash("")
    secondary_identity_hash: IdentityHash = IdentityHash("")
    exists: bool = False

    @classmethod
    def empty(cls, plot_id: PlotId) -> "Property":
        """Zero-valued record returned for plots that were never registered."""
        return cls(plot_id=plot_id)

    def with_owner(self, owner: Identity) -> "Property":
        """New owner; mutation status goes back to pending."""
        return replace(self, current_owner=owner, is_mutation_complete=False)

    def with_encumbrance(self, status: bool) -> "Property":
        return replace(self, is_encumbered=status)

    def with_mutation_complete(self) -> "Property":
        return replace(self, is_mutation_complete=True)


@dataclass(frozen=True)
class SaleTransaction:
    """Completed transfer - appended to a parcel's history, never changed."""
    buyer: Identity
    seller: Identity
    sale_price: Amount
    timestamp: datetime


@dataclass
class RegistryState:
    """The authoritative store - pure dataclass, no IO."""

    properties: dict[PlotId, Property] = field(default_factory=dict)
    histories: dict[PlotId, tuple[SaleTransaction, ...]] = field(default_factory=dict)
    registrars: set[Identity] = field(default_factory=set)

    def copy(self) -> "RegistryState":
        return RegistryState(
            properties=dict(self.properties),
            histories=dict(self.histories),
            registrars=set(self.registrars),
        )

    def property_exists(self, plot_id: PlotId) -> bool:
        record = self.properties.get(plot_id)
        return record is not None and record.exists

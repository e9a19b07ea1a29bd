"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - PlotId is a non-negative integer; 0 is a legitimate identifier
    - Identity is an opaque non-empty string supplied by the identity provider
    - IdentityHash is stored verbatim, never interpreted by the core
    - All event kinds encoded as Enums - no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (event log payloads)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

PlotId = NewType("PlotId", int)
Identity = NewType("Identity", str)
IdentityHash = NewType("IdentityHash", str)   # 32-byte commitment, hex


# ─── Value Types ─────────────────────────────────────────────────

Amount = NewType("Amount", int)   # government value, area, sale price (>= 0)


# ─── Enums ───────────────────────────────────────────────────────

class RegistryEventType(str, Enum):
    """Notifications emitted to the event sink - one per successful mutation."""
    PROPERTY_REGISTERED = "PropertyRegistered"
    PROPERTY_TRANSFERRED = "PropertyTransferred"
    ENCUMBRANCE_UPDATED = "EncumbranceUpdated"
    MUTATION_STATUS_UPDATED = "MutationStatusUpdated"


class RegistryOperation(str, Enum):
    """Mutating operations - used in error context and log records."""
    ADD_REGISTRAR = "add_registrar"
    REGISTER_PARCEL = "register_parcel"
    TRANSFER_PARCEL = "transfer_parcel"
    SET_ENCUMBRANCE = "set_encumbrance"
    COMPLETE_MUTATION = "complete_mutation"

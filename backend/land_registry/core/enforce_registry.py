"""Registry Rule Enforcement - validates preconditions of every mutating operation.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return an error instance on violation, None on success
    - validate_* functions chain checks - first error wins

Design Decisions:
    - Pure functions over method dispatch: testable without mocks (ADR: Functional Core)
    - Return errors (not raise): the Registry raises the first one, tests can
      inspect each rule in isolation
    - Transfer order: existence before ownership, so an unregistered parcel can
      never match an empty owner
"""

from land_registry.core.domain_types import Identity, PlotId, RegistryOperation
from land_registry.core.errors import (
    AlreadyExistsError,
    EncumberedError,
    ErrorContext,
    InvalidInputError,
    LandRegistryError,
    NotFoundError,
    NotOwnerError,
    UnauthorizedError,
)
from land_registry.core.registry_state import RegistryState


def _context(
    operation: RegistryOperation, caller: Identity, plot_id: PlotId | None = None,
) -> ErrorContext:
    return ErrorContext(plot_id=plot_id, caller=caller, operation=operation.value)


def check_registrar(
    state: RegistryState, caller: Identity, operation: RegistryOperation,
    plot_id: PlotId | None = None,
) -> UnauthorizedError | None:
    """Rule 1: administrative actions require an accredited registrar."""
    if caller not in state.registrars:
        return UnauthorizedError(caller, _context(operation, caller, plot_id))
    return None


def check_not_registered(
    state: RegistryState, caller: Identity, plot_id: PlotId,
) -> AlreadyExistsError | None:
    """Rule 2: a plot id is registered at most once."""
    if state.property_exists(plot_id):
        return AlreadyExistsError(
            plot_id, _context(RegistryOperation.REGISTER_PARCEL, caller, plot_id),
        )
    return None


def check_exists(
    state: RegistryState, caller: Identity, plot_id: PlotId,
    operation: RegistryOperation,
) -> NotFoundError | None:
    """Rule 3: transfers and status changes target registered parcels only."""
    if not state.property_exists(plot_id):
        return NotFoundError(plot_id, _context(operation, caller, plot_id))
    return None


def check_owner(
    state: RegistryState, caller: Identity, plot_id: PlotId,
) -> NotOwnerError | None:
    """Rule 4: only the current owner may transfer."""
    if state.properties[plot_id].current_owner != caller:
        return NotOwnerError(
            plot_id, caller,
            _context(RegistryOperation.TRANSFER_PARCEL, caller, plot_id),
        )
    return None


def check_not_encumbered(
    state: RegistryState, caller: Identity, plot_id: PlotId,
) -> EncumberedError | None:
    """Rule 5: disputed or liened parcels cannot change hands."""
    if state.properties[plot_id].is_encumbered:
        return EncumberedError(
            plot_id, _context(RegistryOperation.TRANSFER_PARCEL, caller, plot_id),
        )
    return None


def check_identity(
    value: str, field: str, caller: Identity, operation: RegistryOperation,
    plot_id: PlotId | None = None,
) -> InvalidInputError | None:
    if not value or not value.strip():
        return InvalidInputError(
            f"{field} must be a non-empty identity", field,
            _context(operation, caller, plot_id),
        )
    return None


def check_non_negative(
    value: int, field: str, caller: Identity, operation: RegistryOperation,
    plot_id: PlotId | None = None,
) -> InvalidInputError | None:
    if value < 0:
        return InvalidInputError(
            f"{field} must be non-negative, got {value}", field,
            _context(operation, caller, plot_id),
        )
    return None


def validate_registration(
    state: RegistryState,
    caller: Identity,
    plot_id: PlotId,
    government_value: int,
    area: int,
    owner: Identity,
) -> LandRegistryError | None:
    """Chain all registration checks. Returns first error or None."""
    op = RegistryOperation.REGISTER_PARCEL
    return (
        check_registrar(state, caller, op, plot_id)
        or check_not_registered(state, caller, plot_id)
        or check_non_negative(plot_id, "plot_id", caller, op, plot_id)
        or check_non_negative(government_value, "government_value", caller, op, plot_id)
        or check_non_negative(area, "area", caller, op, plot_id)
        or check_identity(owner, "owner", caller, op, plot_id)
    )


def validate_transfer(
    state: RegistryState,
    caller: Identity,
    plot_id: PlotId,
    buyer: Identity,
    sale_price: int,
) -> LandRegistryError | None:
    """Chain all transfer checks. Returns first error or None."""
    op = RegistryOperation.TRANSFER_PARCEL
    return (
        check_exists(state, caller, plot_id, op)
        or check_owner(state, caller, plot_id)
        or check_not_encumbered(state, caller, plot_id)
        or check_identity(buyer, "buyer", caller, op, plot_id)
        or check_non_negative(sale_price, "sale_price", caller, op, plot_id)
    )


def validate_status_change(
    state: RegistryState,
    caller: Identity,
    plot_id: PlotId,
    operation: RegistryOperation,
) -> LandRegistryError | None:
    """Encumbrance and mutation updates: registrar first, then existence."""
    return (
        check_registrar(state, caller, operation, plot_id)
        or check_exists(state, caller, plot_id, operation)
    )


def validate_admission(
    state: RegistryState, caller: Identity, new_identity: Identity,
) -> LandRegistryError | None:
    """Registrar admission: caller must be a registrar, newcomer a real identity."""
    op = RegistryOperation.ADD_REGISTRAR
    return (
        check_registrar(state, caller, op)
        or check_identity(new_identity, "new_identity", caller, op)
    )

"""Parcel Schemas - Pydantic models with field-level validation for API boundaries.

Invariants:
    - Magnitudes (plot_id, government_value, area, sale_price) are 0..2**63-1
      (BIGINT columns)
    - Identity hashes are 32 bytes as 64 hex chars, optional 0x prefix
    - Identities are stripped and non-empty

Design Decisions:
    - field_validator for side-effect-free transforms (strip) - keeps models pure
    - from_domain() classmethods: routes never build response dicts by hand
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from land_registry.core.registry_state import (
    Boundaries, Property, SaleTransaction,
)

MAX_AMOUNT = 2**63 - 1
IDENTITY_HASH_PATTERN = r"^(0x)?[0-9a-fA-F]{64}$"


def _strip_identity(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("identity cannot be empty or whitespace")
    return v


class BoundariesSchema(BaseModel):
    """Neighbouring parcels or landmarks - free text, may be empty."""
    east: str = Field("", max_length=500)
    west: str = Field("", max_length=500)
    north: str = Field("", max_length=500)
    south: str = Field("", max_length=500)

    def to_domain(self) -> Boundaries:
        return Boundaries(
            east=self.east, west=self.west, north=self.north, south=self.south,
        )


class ParcelCreate(BaseModel):
    """Parcel registration - every field is stored verbatim."""
    plot_id: int = Field(ge=0, le=MAX_AMOUNT)
    boundaries: BoundariesSchema = Field(default_factory=BoundariesSchema)
    government_value: int = Field(ge=0, le=MAX_AMOUNT)
    area: int = Field(ge=0, le=MAX_AMOUNT)
    owner: str = Field(min_length=1, max_length=255)
    owner_identity_hash: str = Field(pattern=IDENTITY_HASH_PATTERN)
    secondary_identity_hash: str = Field(pattern=IDENTITY_HASH_PATTERN)

    @field_validator("owner")
    @classmethod
    def strip_owner(cls, v: str) -> str:
        return _strip_identity(v)


class TransferRequest(BaseModel):
    """Ownership transfer initiated by the current owner."""
    buyer: str = Field(min_length=1, max_length=255)
    sale_price: int = Field(ge=0, le=MAX_AMOUNT)

    @field_validator("buyer")
    @classmethod
    def strip_buyer(cls, v: str) -> str:
        return _strip_identity(v)


class EncumbranceUpdate(BaseModel):
    is_encumbered: bool


class ParcelResponse(BaseModel):
    """Parcel title record. exists=False marks an unregistered plot."""
    plot_id: int
    exists: bool
    boundaries: BoundariesSchema
    government_value: int
    area: int
    current_owner: str
    is_encumbered: bool
    is_mutation_complete: bool
    owner_identity_hash: str
    secondary_identity_hash: str

    @classmethod
    def from_domain(cls, record: Property) -> "ParcelResponse":
        b = record.boundaries
        return cls(
            plot_id=record.plot_id,
            exists=record.exists,
            boundaries=BoundariesSchema(
                east=b.east, west=b.west, north=b.north, south=b.south,
            ),
            government_value=record.government_value,
            area=record.area,
            current_owner=record.current_owner,
            is_encumbered=record.is_encumbered,
            is_mutation_complete=record.is_mutation_complete,
            owner_identity_hash=record.owner_identity_hash,
            secondary_identity_hash=record.secondary_identity_hash,
        )


class SaleTransactionResponse(BaseModel):
    buyer: str
    seller: str
    sale_price: int
    timestamp: datetime

    @classmethod
    def from_domain(cls, sale: SaleTransaction) -> "SaleTransactionResponse":
        return cls(
            buyer=sale.buyer, seller=sale.seller,
            sale_price=sale.sale_price, timestamp=sale.timestamp,
        )


class HistoryResponse(BaseModel):
    """Sale history of one plot, oldest first."""
    plot_id: int
    transactions: list[SaleTransactionResponse]


class EncumbranceResponse(BaseModel):
    plot_id: int
    is_encumbered: bool
    changed: bool

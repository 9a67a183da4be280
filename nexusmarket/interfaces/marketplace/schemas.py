"""
Pydantic schemas for marketplace API request/response validation.

These schemas enforce input shape and define the API contract.
Business rules (price sign, image count, listing policy) are left to
the domain so that their failures carry the domain error codes.
No business logic belongs here.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Union

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
NAME_MAX_LEN = 100
SECRET_MAX_LEN = 72
ID_MAX_LEN = 64
REF_MAX_LEN = 2048
# Money columns are Numeric(20, 8).
MONEY_MAX_DIGITS = 20
MONEY_DECIMAL_PLACES = 8


# ── Identities ───────────────────────────────────────────────────────


class RegisterIdentityRequest(BaseModel):
    """Request schema for identity registration.

    Attributes:
        name: Display name (1-100 chars).
        email: Login email, unique case-insensitively.
        secret: Clear-text secret (1-72 chars), stored only as a bcrypt hash.
    """

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN)
    email: str = Field(..., max_length=254, pattern=EMAIL_PATTERN)
    secret: str = Field(..., min_length=1, max_length=SECRET_MAX_LEN)


class AuthenticateRequest(BaseModel):
    """Request schema for email/secret authentication."""

    email: str = Field(..., max_length=254)
    secret: str = Field(..., min_length=1, max_length=SECRET_MAX_LEN)


class TopUpRequest(BaseModel):
    """Request schema for crediting a balance. The amount must be positive."""

    amount: Decimal = Field(
        ...,
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        description="Amount to credit",
    )


class UpdateProfileRequest(BaseModel):
    """Request schema for profile changes. Omitted fields are unchanged.

    An empty avatar_ref clears the avatar.
    """

    secret: str | None = Field(default=None, min_length=1, max_length=SECRET_MAX_LEN)
    avatar_ref: str | None = Field(default=None, max_length=REF_MAX_LEN)


class IdentityResponse(BaseModel):
    """Public view of an identity. Never includes credentials."""

    id: str
    name: str
    email: str
    wallet_address: str
    balance: Decimal
    saved_item_ids: list[str]
    avatar_url: str | None
    created_at: datetime | None


# ── Items ────────────────────────────────────────────────────────────


class AttributeSchema(BaseModel):
    """A trait/value pair on an item."""

    trait_type: str = Field(..., min_length=1, max_length=NAME_MAX_LEN)
    value: Union[str, int, float]


class MintItemRequest(BaseModel):
    """Request schema for minting an item.

    Attributes:
        owner_id: Identity that will own the item.
        category: One of IDENTITY, OWNERSHIP, TICKET, GAMING, ART,
            REAL_ESTATE, MUSIC, COLLECTIBLE.
        name: Display name; must not be blank.
        description: Free text.
        creator: Creator label.
        price: Listing price; must not be negative.
        is_for_sale: List immediately. Never allowed for IDENTITY items.
        image_refs: One to eight image references.
        attributes: Ordered trait/value pairs.
        size: Optional size label.
    """

    owner_id: str = Field(..., min_length=1, max_length=ID_MAX_LEN)
    category: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., max_length=200)
    description: str = Field(default="", max_length=5000)
    creator: str = Field(default="", max_length=NAME_MAX_LEN)
    price: Decimal = Field(
        default=Decimal("0"),
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
    )
    is_for_sale: bool = False
    image_refs: list[str] = Field(default_factory=list)
    attributes: list[AttributeSchema] = Field(default_factory=list)
    size: str | None = Field(default=None, max_length=64)


class UpdateListingRequest(BaseModel):
    """Request schema for a listing change. Omitted fields keep their value.

    Attributes:
        acting_identity_id: Identity performing the change; must own the item.
        price: New listing price.
        is_for_sale: New sale flag.
    """

    acting_identity_id: str | None = Field(default=None, max_length=ID_MAX_LEN)
    price: Decimal | None = Field(
        default=None,
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
    )
    is_for_sale: bool | None = None


class ToggleSavedRequest(BaseModel):
    """Request schema for adding/removing an item from a watchlist."""

    identity_id: str = Field(..., min_length=1, max_length=ID_MAX_LEN)


class OwnershipRecordSchema(BaseModel):
    """One entry of an item's ownership history."""

    from_owner_id: str
    to_owner_id: str
    price: Decimal
    timestamp: datetime


class ItemResponse(BaseModel):
    """Public view of an item with resolved image URLs."""

    id: str
    owner_id: str
    category: str
    name: str
    description: str
    creator: str
    size: str | None
    image_urls: list[str]
    attributes: list[AttributeSchema]
    created_at: datetime | None
    tx_hash: str
    price: Decimal
    is_for_sale: bool
    history: list[OwnershipRecordSchema]


# ── Trade requests ───────────────────────────────────────────────────


class CreateTradeRequestRequest(BaseModel):
    """Request schema for opening a purchase request."""

    item_id: str = Field(..., min_length=1, max_length=ID_MAX_LEN)
    buyer_id: str = Field(..., min_length=1, max_length=ID_MAX_LEN)


class RespondToTradeRequestRequest(BaseModel):
    """Request schema for a seller decision."""

    decision: Literal["ACCEPT", "REJECT"]


class TradeRequestResponse(BaseModel):
    """Public view of a trade request with its display snapshots."""

    id: str
    item_id: str
    buyer_id: str
    seller_id: str
    price: Decimal
    status: str
    created_at: datetime
    resolved_at: datetime | None
    item_name: str
    item_image_url: str
    buyer_name: str
    seller_name: str


# ── Transactions ─────────────────────────────────────────────────────


class TransactionResponse(BaseModel):
    """One audit log entry."""

    id: str
    from_id: str
    to_id: str
    item_id: str
    kind: str
    timestamp: datetime
    memo: str
    price: Decimal | None


# ── Shared ───────────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str


class ErrorResponse(BaseModel):
    """Standard error response returned by all error handlers."""

    error: str
    detail: str | None = None

"""
Data Transfer Objects for the marketplace application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
Results never carry credential hashes.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union


# ── Identities ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class RegisterIdentityCommand:
    """Input DTO for creating an identity.

    Attributes:
        name: Display name.
        email: Login email, unique across identities.
        secret: Clear-text secret; hashed before storage.
    """

    name: str
    email: str
    secret: str


@dataclass(frozen=True)
class AuthenticateCommand:
    """Input DTO for checking an email/secret pair."""

    email: str
    secret: str


@dataclass(frozen=True)
class GetIdentityQuery:
    """Input DTO for reading one identity."""

    identity_id: str


@dataclass(frozen=True)
class TopUpCommand:
    """Input DTO for crediting an identity's balance.

    Attributes:
        identity_id: Identity to credit.
        amount: Strictly positive amount.
    """

    identity_id: str
    amount: Decimal


@dataclass(frozen=True)
class UpdateProfileCommand:
    """Input DTO for profile changes. None leaves a field unchanged."""

    identity_id: str
    secret: Optional[str] = None
    avatar_ref: Optional[str] = None


@dataclass(frozen=True)
class IdentityResult:
    """Output DTO for an identity, without credentials."""

    id: str
    name: str
    email: str
    wallet_address: str
    balance: Decimal
    saved_item_ids: list[str]
    avatar_url: Optional[str]
    created_at: Optional[datetime]


# ── Items ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AttributeData:
    """A (trait, value) pair travelling in or out of the application layer."""

    trait_type: str
    value: Union[str, int, float]


@dataclass(frozen=True)
class MintItemCommand:
    """Input DTO for minting an item.

    Attributes:
        owner_id: Identity that will own the item.
        category: Category name (e.g. "ART", "IDENTITY").
        name: Display name; must not be blank.
        description: Free text.
        creator: Creator label shown in the catalog.
        price: Listing price.
        is_for_sale: Whether to list immediately.
        image_refs: One to eight opaque image references.
        attributes: Ordered trait/value pairs.
        size: Optional free-form size label.
    """

    owner_id: str
    category: str
    name: str
    description: str
    creator: str
    price: Decimal
    is_for_sale: bool
    image_refs: list[str]
    attributes: list[AttributeData] = field(default_factory=list)
    size: Optional[str] = None


@dataclass(frozen=True)
class ListItemsQuery:
    """Input DTO for catalog listing.

    Attributes:
        search: Case-insensitive substring over name, category, creator and id.
        category: Exact category, or None / "ALL" for every category.
        sort: "NEWEST" (default) or "OLDEST".
        created_on: Calendar day of minting.
    """

    search: Optional[str] = None
    category: Optional[str] = None
    sort: Optional[str] = None
    created_on: Optional[date] = None


@dataclass(frozen=True)
class GetItemQuery:
    """Input DTO for reading one item."""

    item_id: str


@dataclass(frozen=True)
class UpdateListingCommand:
    """Input DTO for changing an item's price or sale flag.

    Attributes:
        item_id: Item to change.
        acting_identity_id: Identity performing the change; must be the owner
            when given.
        price: New price, or None to keep the current one.
        is_for_sale: New sale flag, or None to keep the current one.
    """

    item_id: str
    acting_identity_id: Optional[str] = None
    price: Optional[Decimal] = None
    is_for_sale: Optional[bool] = None


@dataclass(frozen=True)
class ToggleSavedCommand:
    """Input DTO for adding or removing an item from a watchlist."""

    item_id: str
    identity_id: str


@dataclass(frozen=True)
class OwnershipRecordResult:
    """Output DTO for one ownership history entry."""

    from_owner_id: str
    to_owner_id: str
    price: Decimal
    timestamp: datetime


@dataclass(frozen=True)
class ItemResult:
    """Output DTO for an item with resolved image URLs."""

    id: str
    owner_id: str
    category: str
    name: str
    description: str
    creator: str
    size: Optional[str]
    image_urls: list[str]
    attributes: list[AttributeData]
    created_at: Optional[datetime]
    tx_hash: str
    price: Decimal
    is_for_sale: bool
    history: list[OwnershipRecordResult]


# ── Trade requests ───────────────────────────────────────────────────


@dataclass(frozen=True)
class CreateTradeRequestCommand:
    """Input DTO for a buyer's purchase request."""

    item_id: str
    buyer_id: str


@dataclass(frozen=True)
class ListTradeRequestsQuery:
    """Input DTO for the requests an identity is party to."""

    identity_id: str


@dataclass(frozen=True)
class RespondToTradeRequestCommand:
    """Input DTO for a seller decision.

    Attributes:
        request_id: Trade request to resolve.
        decision: "ACCEPT" or "REJECT".
    """

    request_id: str
    decision: str


@dataclass(frozen=True)
class TradeRequestResult:
    """Output DTO for a trade request, including its display snapshots."""

    id: str
    item_id: str
    buyer_id: str
    seller_id: str
    price: Decimal
    status: str
    created_at: datetime
    resolved_at: Optional[datetime]
    item_name: str
    item_image_url: str
    buyer_name: str
    seller_name: str


# ── Transactions ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class TransactionResult:
    """Output DTO for one audit log entry."""

    id: str
    from_id: str
    to_id: str
    item_id: str
    kind: str
    timestamp: datetime
    memo: str
    price: Optional[Decimal]

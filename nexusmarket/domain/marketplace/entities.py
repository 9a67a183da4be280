"""
Domain entities for the marketplace bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
State changes that carry an invariant are methods on the entity,
so every caller goes through the same checks.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Union

from nexusmarket.domain.marketplace.enums import (
    ItemCategory,
    RequestStatus,
    TransactionKind,
)
from nexusmarket.domain.marketplace.errors import (
    AlreadyProcessedError,
    OwnershipMismatchError,
)
from nexusmarket.domain.marketplace.listing_policy import ensure_listing_allowed

SYSTEM_ACCOUNT = "SYSTEM"


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class Identity:
    """A marketplace account holding a balance and a watchlist."""

    id: str
    name: str
    email: str
    credential_hash: str
    wallet_address: str
    balance: Decimal
    saved_item_ids: list[str] = field(default_factory=list)
    avatar_ref: Optional[str] = None
    created_at: Optional[datetime] = None

    def can_afford(self, amount: Decimal) -> bool:
        """Return True if the current balance covers the amount."""
        return self.balance >= amount

    def toggle_saved(self, item_id: str) -> bool:
        """Add or remove an item from the watchlist.

        Returns:
            True if the item is saved after the call, False if it was removed.
        """
        if item_id in self.saved_item_ids:
            self.saved_item_ids.remove(item_id)
            return False
        self.saved_item_ids.append(item_id)
        return True


@dataclass(frozen=True)
class ItemAttribute:
    """A free-form (trait, value) pair attached to an item."""

    trait_type: str
    value: Union[str, int, float]


@dataclass(frozen=True)
class ItemMetadata:
    """Descriptive data captured at mint time. Never changes afterwards."""

    name: str
    description: str
    creator: str
    image_refs: tuple[str, ...]
    attributes: tuple[ItemAttribute, ...] = ()
    size: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class OwnershipRecord:
    """One completed sale in an item's ownership history."""

    from_owner_id: str
    to_owner_id: str
    price: Decimal
    timestamp: datetime


@dataclass
class Item:
    """A unique mintable, tradeable asset."""

    id: str
    owner_id: str
    category: ItemCategory
    metadata: ItemMetadata
    tx_hash: str
    price: Decimal
    is_for_sale: bool
    history: list[OwnershipRecord] = field(default_factory=list)

    def update_listing(
        self,
        price: Optional[Decimal] = None,
        is_for_sale: Optional[bool] = None,
    ) -> None:
        """Change price and/or sale flag. Unspecified fields keep their value.

        Raises:
            InvalidListingError: If the resulting state breaks the listing policy.
        """
        new_price = self.price if price is None else price
        new_for_sale = self.is_for_sale if is_for_sale is None else is_for_sale
        ensure_listing_allowed(self.category, new_for_sale, new_price, self.id)
        self.price = new_price
        self.is_for_sale = new_for_sale

    def transfer_ownership(
        self,
        from_owner_id: str,
        to_owner_id: str,
        price: Decimal,
        at: datetime,
    ) -> OwnershipRecord:
        """Hand the item to a new owner, delist it and append a history entry.

        Raises:
            OwnershipMismatchError: If the item is not currently owned by from_owner_id.
        """
        if self.owner_id != from_owner_id:
            raise OwnershipMismatchError(self.id, from_owner_id, self.owner_id)
        ensure_listing_allowed(self.category, False, self.price, self.id)

        record = OwnershipRecord(
            from_owner_id=from_owner_id,
            to_owner_id=to_owner_id,
            price=price,
            timestamp=at,
        )
        self.owner_id = to_owner_id
        self.is_for_sale = False
        self.history.append(record)
        return record


@dataclass
class TradeRequest:
    """A buyer's offer to purchase a listed item at the price seen at request time.

    Display fields (item_name, item_image_ref, buyer_name, seller_name) are
    snapshots taken at creation and are not refreshed afterwards.
    """

    id: str
    item_id: str
    buyer_id: str
    seller_id: str
    price: Decimal
    status: RequestStatus
    created_at: datetime
    item_name: str
    buyer_name: str
    seller_name: str
    item_image_ref: str = ""
    resolved_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status is RequestStatus.PENDING

    def resolve(self, status: RequestStatus, at: datetime) -> None:
        """Move the request into a terminal state.

        Raises:
            AlreadyProcessedError: If the request is no longer pending.
            ValueError: If status is not a terminal state.
        """
        if not self.is_pending:
            raise AlreadyProcessedError(self.id, self.status.value)
        if status is RequestStatus.PENDING:
            raise ValueError("A trade request can only be resolved to a terminal status")
        self.status = status
        self.resolved_at = at


@dataclass(frozen=True)
class Transaction:
    """Write-once audit record of a mint or a sale."""

    id: str
    from_id: str
    to_id: str
    item_id: str
    kind: TransactionKind
    timestamp: datetime
    memo: str
    price: Optional[Decimal] = None

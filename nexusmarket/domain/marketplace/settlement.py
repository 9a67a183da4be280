"""
Domain service: Trade settlement.

The state machine behind minting, trade request creation and
seller responses. Every method reads and writes through a
UnitOfWork it does not own: the caller opens it, commits on
success and discards it on failure, so a failed settlement
never leaves a partial write behind.

Settlement steps for an accepted request:
    1. Re-read item, buyer and seller from current state
    2. Re-check the buyer's balance against the frozen request price
    3. Debit the buyer, credit the seller
    4. Transfer ownership (delists and appends history)
    5. Append a SALE transaction
    6. Mark the request ACCEPTED
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from decimal import Decimal

from nexusmarket.domain.marketplace.entities import (
    SYSTEM_ACCOUNT,
    Item,
    ItemMetadata,
    TradeRequest,
    Transaction,
    utc_now,
)
from nexusmarket.domain.marketplace.enums import (
    Decision,
    ItemCategory,
    RequestStatus,
    TransactionKind,
)
from nexusmarket.domain.marketplace.errors import (
    AlreadyProcessedError,
    DataIntegrityError,
    InsufficientFundsError,
    InvalidMintError,
    NotFoundError,
    NotListedError,
    OwnershipMismatchError,
    SelfTradeError,
)
from nexusmarket.domain.marketplace.identifiers import (
    new_item_id,
    new_request_id,
    new_transaction_id,
    new_tx_hash,
)
from nexusmarket.domain.marketplace.listing_policy import ensure_listing_allowed
from nexusmarket.domain.marketplace.ports import UnitOfWork

logger = logging.getLogger(__name__)

UNKNOWN_SELLER_NAME = "Unknown"
MAX_ID_ATTEMPTS = 10


class SettlementEngine:
    """Domain service that moves items, money and requests between consistent states."""

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        max_images_per_item: int = 8,
        currency_symbol: str = "ETH",
    ) -> None:
        """Initialize the settlement engine.

        Args:
            clock: Source of timestamps for history and transaction records.
            max_images_per_item: Upper bound on image references per minted item.
            currency_symbol: Unit shown in transaction memos.
        """
        self._clock = clock
        self._max_images_per_item = max_images_per_item
        self._currency_symbol = currency_symbol

    # ── Mint ──────────────────────────────────────────────────────────

    def mint(
        self,
        uow: UnitOfWork,
        owner_id: str,
        category: ItemCategory,
        metadata: ItemMetadata,
        price: Decimal,
        is_for_sale: bool,
    ) -> tuple[Item, Transaction]:
        """Create a new item and record its MINT transaction.

        Raises:
            InvalidMintError: If the name is blank, the image count is out of
                range or the price is negative.
            InvalidListingError: If the category cannot be listed for sale.
            NotFoundError: If the owner does not exist.
        """
        if not metadata.name or not metadata.name.strip():
            raise InvalidMintError("name is required")
        if not metadata.image_refs:
            raise InvalidMintError("at least one image is required")
        if len(metadata.image_refs) > self._max_images_per_item:
            raise InvalidMintError(
                f"at most {self._max_images_per_item} images are allowed"
            )
        if price < 0:
            raise InvalidMintError(f"price must not be negative, got {price}")
        ensure_listing_allowed(category, is_for_sale, price)

        if uow.identities.get(owner_id) is None:
            raise NotFoundError("Identity", owner_id)

        now = self._clock()
        item = Item(
            id=self._fresh_item_id(uow),
            owner_id=owner_id,
            category=category,
            metadata=ItemMetadata(
                name=metadata.name.strip(),
                description=metadata.description,
                creator=metadata.creator,
                image_refs=tuple(metadata.image_refs),
                attributes=tuple(metadata.attributes),
                size=metadata.size,
                created_at=now,
            ),
            tx_hash=new_tx_hash(),
            price=price,
            is_for_sale=is_for_sale,
        )
        transaction = Transaction(
            id=new_transaction_id(),
            from_id=SYSTEM_ACCOUNT,
            to_id=owner_id,
            item_id=item.id,
            kind=TransactionKind.MINT,
            timestamp=now,
            memo=f"Minted {category.value} asset",
        )
        uow.items.add(item)
        uow.transactions.append(transaction)
        return item, transaction

    def _fresh_item_id(self, uow: UnitOfWork) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = new_item_id()
            if uow.items.get(candidate) is None:
                return candidate
        raise DataIntegrityError("could not allocate a unique item id")

    # ── Trade requests ────────────────────────────────────────────────

    def open_request(self, uow: UnitOfWork, item_id: str, buyer_id: str) -> TradeRequest:
        """Create a PENDING trade request at the item's current listing price.

        Preconditions are checked in order and the first failure wins.

        Raises:
            NotFoundError: If the item or the buyer does not exist.
            NotListedError: If the item is not for sale.
            SelfTradeError: If the buyer already owns the item.
            InsufficientFundsError: If the buyer cannot cover the price.
        """
        item = uow.items.get(item_id)
        if item is None:
            raise NotFoundError("Item", item_id)
        if not item.is_for_sale:
            raise NotListedError(item.id)
        if buyer_id == item.owner_id:
            raise SelfTradeError(item.id, buyer_id)
        buyer = uow.identities.get(buyer_id)
        if buyer is None:
            raise NotFoundError("Identity", buyer_id)
        if not buyer.can_afford(item.price):
            raise InsufficientFundsError(item.price, buyer.balance)

        seller = uow.identities.get(item.owner_id)
        request = TradeRequest(
            id=new_request_id(),
            item_id=item.id,
            buyer_id=buyer.id,
            seller_id=item.owner_id,
            price=item.price,
            status=RequestStatus.PENDING,
            created_at=self._clock(),
            item_name=item.metadata.name,
            item_image_ref=item.metadata.image_refs[0] if item.metadata.image_refs else "",
            buyer_name=buyer.name,
            seller_name=seller.name if seller is not None else UNKNOWN_SELLER_NAME,
        )
        uow.trade_requests.add(request)
        return request

    def respond(self, uow: UnitOfWork, request_id: str, decision: Decision) -> TradeRequest:
        """Apply a seller decision to a pending trade request.

        Raises:
            NotFoundError: If the request does not exist.
            AlreadyProcessedError: If the request is no longer pending.
            InsufficientFundsError: If the buyer can no longer cover the price.
            DataIntegrityError: If a referenced record is missing or the item
                is no longer owned by the seller.
        """
        request = uow.trade_requests.get(request_id, for_update=True)
        if request is None:
            raise NotFoundError("TradeRequest", request_id)

        if not request.is_pending:
            raise AlreadyProcessedError(request.id, request.status.value)

        now = self._clock()
        if decision is Decision.REJECT:
            request.resolve(RequestStatus.REJECTED, now)
            uow.trade_requests.save(request)
            return request

        self._settle(uow, request, now)
        request.resolve(RequestStatus.ACCEPTED, now)
        uow.trade_requests.save(request)
        return request

    def _settle(self, uow: UnitOfWork, request: TradeRequest, now: datetime) -> None:
        item = uow.items.get(request.item_id, for_update=True)
        buyer = uow.identities.get(request.buyer_id, for_update=True)
        seller = uow.identities.get(request.seller_id, for_update=True)

        missing = _missing_references(
            (("Item", request.item_id, item),
             ("buyer", request.buyer_id, buyer),
             ("seller", request.seller_id, seller))
        )
        if missing:
            reason = f"trade request {request.id} references missing {', '.join(missing)}"
            logger.error(reason)
            raise DataIntegrityError(reason)

        if not buyer.can_afford(request.price):
            raise InsufficientFundsError(request.price, buyer.balance)

        uow.identities.adjust_balance(buyer.id, -request.price)
        uow.identities.adjust_balance(seller.id, request.price)

        try:
            item.transfer_ownership(seller.id, buyer.id, request.price, now)
        except OwnershipMismatchError as exc:
            logger.error(
                "Ownership mismatch settling request=%s: %s", request.id, exc.message
            )
            raise DataIntegrityError(
                f"item {item.id} is no longer owned by seller {seller.id}"
            ) from exc
        uow.items.save(item)

        uow.transactions.append(
            Transaction(
                id=new_transaction_id(),
                from_id=seller.id,
                to_id=buyer.id,
                item_id=item.id,
                kind=TransactionKind.SALE,
                timestamp=now,
                memo=f"Sold for {_format_amount(request.price)} {self._currency_symbol}",
                price=request.price,
            )
        )


def _missing_references(candidates: Sequence[tuple[str, str, object]]) -> list[str]:
    return [f"{label} {ref_id}" for label, ref_id, found in candidates if found is None]


def _format_amount(amount: Decimal) -> str:
    """Render an amount without trailing zeros ("10", "2.5")."""
    normalized = amount.normalize()
    if normalized == normalized.to_integral():
        return str(normalized.quantize(Decimal(1)))
    return format(normalized, "f")

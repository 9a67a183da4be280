"""
Entity-to-result conversion shared by the marketplace use cases.
"""

from nexusmarket.application.marketplace.dtos import (
    AttributeData,
    IdentityResult,
    ItemResult,
    OwnershipRecordResult,
    TradeRequestResult,
    TransactionResult,
)
from nexusmarket.domain.marketplace.entities import (
    Identity,
    Item,
    TradeRequest,
    Transaction,
)
from nexusmarket.domain.marketplace.ports import ImageUrlResolver


def to_identity_result(identity: Identity, resolver: ImageUrlResolver) -> IdentityResult:
    return IdentityResult(
        id=identity.id,
        name=identity.name,
        email=identity.email,
        wallet_address=identity.wallet_address,
        balance=identity.balance,
        saved_item_ids=list(identity.saved_item_ids),
        avatar_url=resolver.resolve(identity.avatar_ref) if identity.avatar_ref else None,
        created_at=identity.created_at,
    )


def to_item_result(item: Item, resolver: ImageUrlResolver) -> ItemResult:
    meta = item.metadata
    return ItemResult(
        id=item.id,
        owner_id=item.owner_id,
        category=item.category.value,
        name=meta.name,
        description=meta.description,
        creator=meta.creator,
        size=meta.size,
        image_urls=[resolver.resolve(ref) for ref in meta.image_refs],
        attributes=[
            AttributeData(trait_type=attr.trait_type, value=attr.value)
            for attr in meta.attributes
        ],
        created_at=meta.created_at,
        tx_hash=item.tx_hash,
        price=item.price,
        is_for_sale=item.is_for_sale,
        history=[
            OwnershipRecordResult(
                from_owner_id=record.from_owner_id,
                to_owner_id=record.to_owner_id,
                price=record.price,
                timestamp=record.timestamp,
            )
            for record in item.history
        ],
    )


def to_trade_request_result(
    request: TradeRequest, resolver: ImageUrlResolver
) -> TradeRequestResult:
    return TradeRequestResult(
        id=request.id,
        item_id=request.item_id,
        buyer_id=request.buyer_id,
        seller_id=request.seller_id,
        price=request.price,
        status=request.status.value,
        created_at=request.created_at,
        resolved_at=request.resolved_at,
        item_name=request.item_name,
        item_image_url=resolver.resolve(request.item_image_ref),
        buyer_name=request.buyer_name,
        seller_name=request.seller_name,
    )


def to_transaction_result(transaction: Transaction) -> TransactionResult:
    return TransactionResult(
        id=transaction.id,
        from_id=transaction.from_id,
        to_id=transaction.to_id,
        item_id=transaction.item_id,
        kind=transaction.kind.value,
        timestamp=transaction.timestamp,
        memo=transaction.memo,
        price=transaction.price,
    )

"""
SQLAlchemy models for the marketplace stores.

Identities, items, trade requests and transactions are independent
collections: they reference each other by id only, without foreign keys,
and the settlement engine checks those references at use time.
Saved items and ownership history are owned child rows of their parent.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from nexusmarket.domain.marketplace.entities import (
    Identity,
    Item,
    ItemAttribute,
    ItemMetadata,
    OwnershipRecord,
    TradeRequest,
    Transaction,
)
from nexusmarket.domain.marketplace.enums import (
    ItemCategory,
    RequestStatus,
    TransactionKind,
)
from nexusmarket.infrastructure.marketplace.database import Base

MONEY = Numeric(precision=20, scale=8, asdecimal=True)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo on read; every stored timestamp is UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _as_decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


class IdentityModel(Base):
    """An account row."""

    __tablename__ = "identities"

    id = Column(String(16), primary_key=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    credential_hash = Column(String(255), nullable=False)
    wallet_address = Column(String(42), nullable=False)
    balance = Column(MONEY, nullable=False)
    avatar_ref = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    saved_items = relationship(
        "SavedItemModel",
        order_by="SavedItemModel.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def to_entity(self) -> Identity:
        """Convert to domain entity."""
        return Identity(
            id=self.id,
            name=self.name,
            email=self.email,
            credential_hash=self.credential_hash,
            wallet_address=self.wallet_address,
            balance=_as_decimal(self.balance),
            saved_item_ids=[saved.item_id for saved in self.saved_items],
            avatar_ref=self.avatar_ref,
            created_at=_as_utc(self.created_at),
        )

    @classmethod
    def from_entity(cls, entity: Identity) -> "IdentityModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            name=entity.name,
            email=entity.email,
            credential_hash=entity.credential_hash,
            wallet_address=entity.wallet_address,
            balance=entity.balance,
            avatar_ref=entity.avatar_ref,
            created_at=entity.created_at,
            saved_items=[SavedItemModel(item_id=item_id) for item_id in entity.saved_item_ids],
        )


class SavedItemModel(Base):
    """A watchlist entry. Insertion order is preserved by the surrogate key."""

    __tablename__ = "saved_items"
    __table_args__ = (UniqueConstraint("identity_id", "item_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    identity_id = Column(
        String(16), ForeignKey("identities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id = Column(String(16), nullable=False)


class ItemModel(Base):
    """A catalog row. Metadata columns are written once at mint time."""

    __tablename__ = "items"

    id = Column(String(16), primary_key=True)
    owner_id = Column(String(16), nullable=False, index=True)
    category = Column(String(32), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    creator = Column(String(200), nullable=False, default="")
    size = Column(String(64), nullable=True)
    image_refs = Column(JSON, nullable=False)
    attributes = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    tx_hash = Column(String(66), nullable=False)
    price = Column(MONEY, nullable=False)
    is_for_sale = Column(Boolean, nullable=False, default=False)

    history = relationship(
        "OwnershipHistoryModel",
        order_by="OwnershipHistoryModel.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def to_entity(self) -> Item:
        """Convert to domain entity."""
        return Item(
            id=self.id,
            owner_id=self.owner_id,
            category=ItemCategory(self.category),
            metadata=ItemMetadata(
                name=self.name,
                description=self.description,
                creator=self.creator,
                image_refs=tuple(self.image_refs or ()),
                attributes=tuple(
                    ItemAttribute(trait_type=attr["trait_type"], value=attr["value"])
                    for attr in (self.attributes or ())
                ),
                size=self.size,
                created_at=_as_utc(self.created_at),
            ),
            tx_hash=self.tx_hash,
            price=_as_decimal(self.price),
            is_for_sale=self.is_for_sale,
            history=[entry.to_entity() for entry in self.history],
        )

    @classmethod
    def from_entity(cls, entity: Item) -> "ItemModel":
        """Create from domain entity."""
        meta = entity.metadata
        return cls(
            id=entity.id,
            owner_id=entity.owner_id,
            category=entity.category.value,
            name=meta.name,
            description=meta.description,
            creator=meta.creator,
            size=meta.size,
            image_refs=list(meta.image_refs),
            attributes=[
                {"trait_type": attr.trait_type, "value": attr.value}
                for attr in meta.attributes
            ],
            created_at=meta.created_at,
            tx_hash=entity.tx_hash,
            price=entity.price,
            is_for_sale=entity.is_for_sale,
            history=[OwnershipHistoryModel.from_entity(record) for record in entity.history],
        )


class OwnershipHistoryModel(Base):
    """One completed sale of an item. Rows are only ever inserted."""

    __tablename__ = "ownership_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(
        String(16), ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_owner_id = Column(String(16), nullable=False)
    to_owner_id = Column(String(16), nullable=False)
    price = Column(MONEY, nullable=False)
    recorded_at = Column(DateTime(timezone=True), nullable=False)

    def to_entity(self) -> OwnershipRecord:
        """Convert to domain entity."""
        return OwnershipRecord(
            from_owner_id=self.from_owner_id,
            to_owner_id=self.to_owner_id,
            price=_as_decimal(self.price),
            timestamp=_as_utc(self.recorded_at),
        )

    @classmethod
    def from_entity(cls, entity: OwnershipRecord) -> "OwnershipHistoryModel":
        """Create from domain entity."""
        return cls(
            from_owner_id=entity.from_owner_id,
            to_owner_id=entity.to_owner_id,
            price=entity.price,
            recorded_at=entity.timestamp,
        )


class TradeRequestModel(Base):
    """A trade request row. The sequence column orders requests by insertion."""

    __tablename__ = "trade_requests"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(16), nullable=False, unique=True, index=True)
    item_id = Column(String(16), nullable=False, index=True)
    buyer_id = Column(String(16), nullable=False, index=True)
    seller_id = Column(String(16), nullable=False, index=True)
    price = Column(MONEY, nullable=False)
    status = Column(String(16), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    item_name = Column(String(200), nullable=False)
    item_image_ref = Column(Text, nullable=False, default="")
    buyer_name = Column(String(120), nullable=False)
    seller_name = Column(String(120), nullable=False)

    def to_entity(self) -> TradeRequest:
        """Convert to domain entity."""
        return TradeRequest(
            id=self.id,
            item_id=self.item_id,
            buyer_id=self.buyer_id,
            seller_id=self.seller_id,
            price=_as_decimal(self.price),
            status=RequestStatus(self.status),
            created_at=_as_utc(self.created_at),
            item_name=self.item_name,
            item_image_ref=self.item_image_ref,
            buyer_name=self.buyer_name,
            seller_name=self.seller_name,
            resolved_at=_as_utc(self.resolved_at),
        )

    @classmethod
    def from_entity(cls, entity: TradeRequest) -> "TradeRequestModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            item_id=entity.item_id,
            buyer_id=entity.buyer_id,
            seller_id=entity.seller_id,
            price=entity.price,
            status=entity.status.value,
            created_at=entity.created_at,
            resolved_at=entity.resolved_at,
            item_name=entity.item_name,
            item_image_ref=entity.item_image_ref,
            buyer_name=entity.buyer_name,
            seller_name=entity.seller_name,
        )


class TransactionModel(Base):
    """An audit log row. Never updated."""

    __tablename__ = "transactions"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(16), nullable=False, unique=True, index=True)
    from_id = Column(String(16), nullable=False)
    to_id = Column(String(16), nullable=False)
    item_id = Column(String(16), nullable=False, index=True)
    kind = Column(String(8), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    price = Column(MONEY, nullable=True)
    memo = Column(Text, nullable=False, default="")

    def to_entity(self) -> Transaction:
        """Convert to domain entity."""
        return Transaction(
            id=self.id,
            from_id=self.from_id,
            to_id=self.to_id,
            item_id=self.item_id,
            kind=TransactionKind(self.kind),
            timestamp=_as_utc(self.timestamp),
            memo=self.memo,
            price=_as_decimal(self.price) if self.price is not None else None,
        )

    @classmethod
    def from_entity(cls, entity: Transaction) -> "TransactionModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            from_id=entity.from_id,
            to_id=entity.to_id,
            item_id=entity.item_id,
            kind=entity.kind.value,
            timestamp=entity.timestamp,
            price=entity.price,
            memo=entity.memo,
        )

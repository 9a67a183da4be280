"""
Adapter: Item catalog.

Implements ItemRepository port on top of a SQLAlchemy session.
Ownership history rows are append-only: save() inserts the entries
the entity gained since it was loaded and never touches older ones.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from nexusmarket.domain.marketplace.entities import Item
from nexusmarket.domain.marketplace.errors import DataIntegrityError, NotFoundError
from nexusmarket.domain.marketplace.ports import ItemRepository
from nexusmarket.infrastructure.marketplace.orm_models import ItemModel, OwnershipHistoryModel


class SqlAlchemyItemRepository(ItemRepository):
    """SQLAlchemy implementation of the item catalog."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _load(self, item_id: str, for_update: bool = False) -> Optional[ItemModel]:
        stmt = select(ItemModel).where(ItemModel.id == item_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self._session.execute(stmt).scalar_one_or_none()

    def add(self, item: Item) -> None:
        self._session.add(ItemModel.from_entity(item))
        self._session.flush()

    def get(self, item_id: str, for_update: bool = False) -> Optional[Item]:
        model = self._load(item_id, for_update)
        return model.to_entity() if model else None

    def list_all(self) -> list[Item]:
        models = self._session.execute(select(ItemModel)).scalars().all()
        return [model.to_entity() for model in models]

    def save(self, item: Item) -> None:
        """Persist owner and listing changes and append new history entries.

        Args:
            item: Item entity carrying the new state.

        Raises:
            NotFoundError: If the item does not exist.
            DataIntegrityError: If the entity has fewer history entries than stored.
        """
        model = self._load(item.id)
        if model is None:
            raise NotFoundError("Item", item.id)

        stored_count = len(model.history)
        if len(item.history) < stored_count:
            raise DataIntegrityError(
                f"item {item.id} history shrank from {stored_count} to {len(item.history)}"
            )

        model.owner_id = item.owner_id
        model.price = item.price
        model.is_for_sale = item.is_for_sale
        for record in item.history[stored_count:]:
            model.history.append(OwnershipHistoryModel.from_entity(record))
        self._session.flush()

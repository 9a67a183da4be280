"""
Use case: Mint a new item.

Input: MintItemCommand (owner, category, metadata, price, sale flag, images)
Output: ItemResult
Side effects: Inserts one item and one MINT transaction.
Failure cases: InvalidMintError, InvalidListingError, NotFoundError.
"""

import logging
from collections.abc import Callable

from nexusmarket.application.marketplace.dtos import ItemResult, MintItemCommand
from nexusmarket.application.marketplace.mappers import to_item_result
from nexusmarket.domain.marketplace.entities import ItemAttribute, ItemMetadata
from nexusmarket.domain.marketplace.enums import ItemCategory
from nexusmarket.domain.marketplace.errors import InvalidMintError
from nexusmarket.domain.marketplace.ports import ImageUrlResolver, UnitOfWork
from nexusmarket.domain.marketplace.settlement import SettlementEngine

logger = logging.getLogger(__name__)


def parse_category(raw: str) -> ItemCategory:
    """Map a category name to ItemCategory.

    Raises:
        InvalidMintError: If the name is not a known category.
    """
    try:
        return ItemCategory(raw.strip().upper())
    except ValueError:
        raise InvalidMintError(f"unknown category: {raw}") from None


class MintItemUseCase:
    """Creates an item owned by an existing identity.

    The item and its MINT transaction are committed together.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        engine: SettlementEngine,
        image_resolver: ImageUrlResolver,
    ) -> None:
        self._uow_factory = uow_factory
        self._engine = engine
        self._image_resolver = image_resolver

    def execute(self, command: MintItemCommand) -> ItemResult:
        """Run the mint use case.

        Args:
            command: Owner, category, descriptive fields and listing state.

        Returns:
            The minted item with resolved image URLs.

        Raises:
            InvalidMintError: Unknown category, blank name, bad image count
                or negative price.
            InvalidListingError: IDENTITY item requested for sale.
            NotFoundError: If the owner does not exist.
        """
        category = parse_category(command.category)
        metadata = ItemMetadata(
            name=command.name,
            description=command.description,
            creator=command.creator,
            image_refs=tuple(command.image_refs),
            attributes=tuple(
                ItemAttribute(trait_type=attr.trait_type, value=attr.value)
                for attr in command.attributes
            ),
            size=command.size,
        )

        with self._uow_factory() as uow:
            item, transaction = self._engine.mint(
                uow,
                owner_id=command.owner_id,
                category=category,
                metadata=metadata,
                price=command.price,
                is_for_sale=command.is_for_sale,
            )
            uow.commit()

        logger.info(
            "Minted item=%s category=%s owner=%s tx=%s",
            item.id,
            category.value,
            item.owner_id,
            transaction.id,
        )
        return to_item_result(item, self._image_resolver)

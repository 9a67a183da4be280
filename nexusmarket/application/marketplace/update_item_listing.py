"""
Use case: Change an item's price and/or sale flag.

Input: UpdateListingCommand (item_id, acting_identity_id?, price?, is_for_sale?)
Output: ItemResult
Side effects: Updates the stored listing state.
Failure cases: NotFoundError, NotOwnerError, InvalidListingError.
"""

import logging
from collections.abc import Callable

from nexusmarket.application.marketplace.dtos import ItemResult, UpdateListingCommand
from nexusmarket.application.marketplace.lock_keys import item_key
from nexusmarket.application.marketplace.mappers import to_item_result
from nexusmarket.domain.marketplace.errors import NotFoundError, NotOwnerError
from nexusmarket.domain.marketplace.identifiers import normalize_item_id
from nexusmarket.domain.marketplace.ports import ImageUrlResolver, LockManager, UnitOfWork

logger = logging.getLogger(__name__)


class UpdateItemListingUseCase:
    """Applies a listing change under the item's lock.

    Pending trade requests keep the price they captured; only new
    requests see the updated price.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        locks: LockManager,
        image_resolver: ImageUrlResolver,
    ) -> None:
        self._uow_factory = uow_factory
        self._locks = locks
        self._image_resolver = image_resolver

    def execute(self, command: UpdateListingCommand) -> ItemResult:
        """Run the listing update.

        Args:
            command: Item id, optional acting identity and the fields to change.

        Returns:
            The item after the change.

        Raises:
            NotFoundError: If the item does not exist.
            NotOwnerError: If an acting identity is given and does not own the item.
            InvalidListingError: If the new state breaks the listing policy.
        """
        item_id = normalize_item_id(command.item_id)

        with self._locks.hold(item_key(item_id)):
            with self._uow_factory() as uow:
                item = uow.items.get(item_id, for_update=True)
                if item is None:
                    raise NotFoundError("Item", item_id)
                if (
                    command.acting_identity_id is not None
                    and command.acting_identity_id != item.owner_id
                ):
                    raise NotOwnerError(item.id, command.acting_identity_id)

                item.update_listing(price=command.price, is_for_sale=command.is_for_sale)
                uow.items.save(item)
                uow.commit()

        logger.info(
            "Updated listing item=%s price=%s for_sale=%s",
            item.id,
            item.price,
            item.is_for_sale,
        )
        return to_item_result(item, self._image_resolver)

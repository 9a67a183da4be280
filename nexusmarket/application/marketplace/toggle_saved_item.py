"""
Use case: Add or remove an item from an identity's watchlist.

Input: ToggleSavedCommand (item_id, identity_id)
Output: IdentityResult
Side effects: Inserts or deletes one saved-item row.
Failure cases: NotFoundError.
"""

import logging
from collections.abc import Callable

from nexusmarket.application.marketplace.dtos import IdentityResult, ToggleSavedCommand
from nexusmarket.application.marketplace.lock_keys import identity_key
from nexusmarket.application.marketplace.mappers import to_identity_result
from nexusmarket.domain.marketplace.errors import NotFoundError
from nexusmarket.domain.marketplace.identifiers import normalize_item_id
from nexusmarket.domain.marketplace.ports import ImageUrlResolver, LockManager, UnitOfWork

logger = logging.getLogger(__name__)


class ToggleSavedItemUseCase:
    """Flips watchlist membership of an item for one identity.

    Removing an id that no longer resolves to an item is allowed, so
    stale entries can always be cleared.
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

    def execute(self, command: ToggleSavedCommand) -> IdentityResult:
        """Run the toggle.

        Raises:
            NotFoundError: If the identity does not exist, or the item does
                not exist and is not already saved.
        """
        item_id = normalize_item_id(command.item_id)

        with self._locks.hold(identity_key(command.identity_id)):
            with self._uow_factory() as uow:
                identity = uow.identities.get(command.identity_id, for_update=True)
                if identity is None:
                    raise NotFoundError("Identity", command.identity_id)
                if item_id not in identity.saved_item_ids and uow.items.get(item_id) is None:
                    raise NotFoundError("Item", item_id)

                saved = identity.toggle_saved(item_id)
                uow.identities.save(identity)
                uow.commit()

        logger.info("Toggled saved item=%s identity=%s saved=%s", item_id, identity.id, saved)
        return to_identity_result(identity, self._image_resolver)

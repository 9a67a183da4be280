"""
Use case: Read one item.

Input: GetItemQuery (item_id)
Output: ItemResult
Side effects: None.
Failure cases: NotFoundError.
"""

from collections.abc import Callable

from nexusmarket.application.marketplace.dtos import GetItemQuery, ItemResult
from nexusmarket.application.marketplace.mappers import to_item_result
from nexusmarket.domain.marketplace.errors import NotFoundError
from nexusmarket.domain.marketplace.identifiers import normalize_item_id
from nexusmarket.domain.marketplace.ports import ImageUrlResolver, UnitOfWork


class GetItemUseCase:
    """Loads an item by id. Ids are matched case-insensitively."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        image_resolver: ImageUrlResolver,
    ) -> None:
        self._uow_factory = uow_factory
        self._image_resolver = image_resolver

    def execute(self, query: GetItemQuery) -> ItemResult:
        item_id = normalize_item_id(query.item_id)
        with self._uow_factory() as uow:
            item = uow.items.get(item_id)
        if item is None:
            raise NotFoundError("Item", item_id)
        return to_item_result(item, self._image_resolver)

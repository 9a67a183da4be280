"""
Use case: Browse the catalog.

Input: ListItemsQuery (search, category, sort, created_on)
Output: list[ItemResult]
Side effects: None.
Failure cases: None. An unknown category matches nothing.
"""

from collections.abc import Callable
from typing import Optional

from nexusmarket.application.marketplace.dtos import ItemResult, ListItemsQuery
from nexusmarket.application.marketplace.mappers import to_item_result
from nexusmarket.domain.marketplace.catalog_query import ItemFilter, filter_items
from nexusmarket.domain.marketplace.enums import CatalogSort, ItemCategory
from nexusmarket.domain.marketplace.ports import ImageUrlResolver, UnitOfWork

ALL_CATEGORIES = "ALL"


def _parse_sort(raw: Optional[str]) -> CatalogSort:
    if raw and raw.strip().upper() == CatalogSort.OLDEST.value:
        return CatalogSort.OLDEST
    return CatalogSort.NEWEST


class ListItemsUseCase:
    """Filters and orders every item in the catalog."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        image_resolver: ImageUrlResolver,
    ) -> None:
        self._uow_factory = uow_factory
        self._image_resolver = image_resolver

    def execute(self, query: ListItemsQuery) -> list[ItemResult]:
        category: Optional[ItemCategory] = None
        if query.category and query.category.strip().upper() != ALL_CATEGORIES:
            try:
                category = ItemCategory(query.category.strip().upper())
            except ValueError:
                return []

        with self._uow_factory() as uow:
            items = uow.items.list_all()

        criteria = ItemFilter(
            search=query.search,
            category=category,
            created_on=query.created_on,
            sort=_parse_sort(query.sort),
        )
        return [to_item_result(item, self._image_resolver) for item in filter_items(items, criteria)]

"""
Domain service: Catalog filtering and ordering.

Pure projection over a list of items. No IO.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

from nexusmarket.domain.marketplace.entities import Item
from nexusmarket.domain.marketplace.enums import CatalogSort, ItemCategory

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ItemFilter:
    """Catalog query criteria. Unset fields do not filter.

    Attributes:
        search: Case-insensitive substring matched against name,
            category, creator and id.
        category: Exact category match.
        created_on: Calendar day (UTC) the item was minted.
        sort: Creation-time ordering, newest first by default.
    """

    search: Optional[str] = None
    category: Optional[ItemCategory] = None
    created_on: Optional[date] = None
    sort: CatalogSort = CatalogSort.NEWEST


def _created_at(item: Item) -> datetime:
    return item.metadata.created_at or _EPOCH


def _matches_search(item: Item, needle: str) -> bool:
    haystack = (
        item.metadata.name,
        item.category.value,
        item.metadata.creator,
        item.id,
    )
    return any(needle in field.lower() for field in haystack)


def filter_items(items: list[Item], criteria: ItemFilter) -> list[Item]:
    """Apply search, category and date filters, then sort by creation time.

    Args:
        items: Candidate items.
        criteria: Filter and sort options.

    Returns:
        A new list; the input is not modified.
    """
    result = list(items)

    if criteria.search:
        needle = criteria.search.strip().lower()
        if needle:
            result = [item for item in result if _matches_search(item, needle)]

    if criteria.category is not None:
        result = [item for item in result if item.category is criteria.category]

    if criteria.created_on is not None:
        result = [
            item
            for item in result
            if item.metadata.created_at is not None
            and item.metadata.created_at.astimezone(timezone.utc).date() == criteria.created_on
        ]

    result.sort(key=_created_at, reverse=criteria.sort is CatalogSort.NEWEST)
    return result

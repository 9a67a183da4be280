"""
Listing policy for catalog items.

Every code path that creates an item or changes its listing
(mint, listing update, ownership transfer) calls
ensure_listing_allowed before the new state becomes visible.
Invalid states are rejected, never coerced.
"""

from decimal import Decimal
from typing import Optional

from nexusmarket.domain.marketplace.enums import ItemCategory
from nexusmarket.domain.marketplace.errors import InvalidListingError

UNLISTABLE_CATEGORIES = frozenset({ItemCategory.IDENTITY})


def ensure_listing_allowed(
    category: ItemCategory,
    is_for_sale: bool,
    price: Decimal,
    item_id: Optional[str] = None,
) -> None:
    """Validate a prospective listing state for an item.

    Args:
        category: The item's category.
        is_for_sale: Requested sale flag.
        price: Requested listing price.
        item_id: Id of the item being changed, or None for a new item.

    Raises:
        InvalidListingError: If the category can never be listed for sale,
            or the price is negative.
    """
    if price < 0:
        raise InvalidListingError(item_id, f"price must not be negative, got {price}")
    if is_for_sale and category in UNLISTABLE_CATEGORIES:
        raise InvalidListingError(
            item_id, f"{category.value} items can never be listed for sale"
        )

"""
Closed value sets for the marketplace bounded context.
"""

from enum import Enum


class ItemCategory(Enum):
    """Kind of asset an item represents.

    IDENTITY items are personal documents and can never be listed for sale.
    """

    IDENTITY = "IDENTITY"
    OWNERSHIP = "OWNERSHIP"
    TICKET = "TICKET"
    GAMING = "GAMING"
    ART = "ART"
    REAL_ESTATE = "REAL_ESTATE"
    MUSIC = "MUSIC"
    COLLECTIBLE = "COLLECTIBLE"


class RequestStatus(Enum):
    """Lifecycle status of a trade request. PENDING is the only non-terminal state."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class Decision(Enum):
    """Seller response to a pending trade request."""

    ACCEPT = "ACCEPT"
    REJECT = "REJECT"


class TransactionKind(Enum):
    """Kind of audit log entry."""

    MINT = "MINT"
    SALE = "SALE"


class CatalogSort(Enum):
    """Ordering of catalog listings by creation time."""

    NEWEST = "NEWEST"
    OLDEST = "OLDEST"

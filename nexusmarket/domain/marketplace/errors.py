"""
Domain-specific errors for the marketplace bounded context.

All errors raised from the domain layer must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""

from decimal import Decimal


class MarketplaceDomainError(Exception):
    """Base error for all marketplace domain errors."""

    code = "MarketplaceError"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class NotFoundError(MarketplaceDomainError):
    """Raised when a referenced identity, item or trade request is absent."""

    code = "NotFound"

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class DuplicateIdentityError(MarketplaceDomainError):
    """Raised when an email address is already registered."""

    code = "DuplicateIdentity"

    def __init__(self, email: str) -> None:
        super().__init__(f"Identity already registered for email: {email}")
        self.email = email


class InvalidCredentialsError(MarketplaceDomainError):
    """Raised when an email/secret pair does not match a stored identity."""

    code = "InvalidCredentials"

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class InvalidSecretError(MarketplaceDomainError):
    """Raised when a new secret cannot be hashed, e.g. it exceeds 72 UTF-8 bytes."""

    code = "InvalidSecret"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid secret: {reason}")
        self.reason = reason


class InvalidAmountError(MarketplaceDomainError):
    """Raised when a top-up amount is not strictly positive."""

    code = "InvalidAmount"

    def __init__(self, amount: Decimal) -> None:
        super().__init__(f"Amount must be positive, got {amount}")
        self.amount = amount


class InvalidListingError(MarketplaceDomainError):
    """Raised when a listing change would break a catalog invariant."""

    code = "InvalidListing"

    def __init__(self, item_id: str | None, reason: str) -> None:
        super().__init__(f"Invalid listing for item {item_id or '<new>'}: {reason}")
        self.item_id = item_id
        self.reason = reason


class InvalidMintError(MarketplaceDomainError):
    """Raised when mint input is incomplete or malformed."""

    code = "InvalidMint"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid mint: {reason}")
        self.reason = reason


class NotOwnerError(MarketplaceDomainError):
    """Raised when an identity tries to change the listing of an item it does not own."""

    code = "NotOwner"

    def __init__(self, item_id: str, identity_id: str) -> None:
        super().__init__(f"Identity {identity_id} does not own item {item_id}")
        self.item_id = item_id
        self.identity_id = identity_id


class NotListedError(MarketplaceDomainError):
    """Raised when a trade is requested on an item that is not for sale."""

    code = "NotListed"

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Item is not for sale: {item_id}")
        self.item_id = item_id


class SelfTradeError(MarketplaceDomainError):
    """Raised when the buyer already owns the requested item."""

    code = "SelfTrade"

    def __init__(self, item_id: str, identity_id: str) -> None:
        super().__init__(f"Identity {identity_id} already owns item {item_id}")
        self.item_id = item_id
        self.identity_id = identity_id


class InsufficientFundsError(MarketplaceDomainError):
    """Raised when the buyer's balance does not cover the price."""

    code = "InsufficientFunds"

    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            f"Insufficient funds: required {required}, available {available}"
        )
        self.required = required
        self.available = available


class AlreadyProcessedError(MarketplaceDomainError):
    """Raised when responding to a trade request that is no longer pending."""

    code = "AlreadyProcessed"

    def __init__(self, request_id: str, status: str) -> None:
        super().__init__(f"Trade request {request_id} already processed ({status})")
        self.request_id = request_id
        self.status = status


class OwnershipMismatchError(MarketplaceDomainError):
    """Raised by the transfer primitive when the item changed hands since the precondition was read."""

    code = "OwnershipMismatch"

    def __init__(self, item_id: str, expected_owner_id: str, actual_owner_id: str) -> None:
        super().__init__(
            f"Item {item_id} is owned by {actual_owner_id}, expected {expected_owner_id}"
        )
        self.item_id = item_id
        self.expected_owner_id = expected_owner_id
        self.actual_owner_id = actual_owner_id


class DataIntegrityError(MarketplaceDomainError):
    """Raised when stored records contradict each other. Never expected in correct operation."""

    code = "DataIntegrityError"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Data integrity error: {reason}")
        self.reason = reason

"""
Port interfaces (ABCs) for the marketplace bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from decimal import Decimal
from typing import Optional

from nexusmarket.domain.marketplace.entities import (
    Identity,
    Item,
    TradeRequest,
    Transaction,
)


class IdentityRepository(ABC):
    """Port for the identity store."""

    @abstractmethod
    def add(self, identity: Identity) -> None:
        """Persist a new identity.

        Raises:
            DuplicateIdentityError: If the email is already registered.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, identity_id: str, for_update: bool = False) -> Optional[Identity]:
        """Return an identity by id, or None if absent.

        Args:
            identity_id: Id of the identity.
            for_update: Lock the underlying record until the unit of work ends.
        """
        raise NotImplementedError

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Identity]:
        """Return the identity registered under an email, or None."""
        raise NotImplementedError

    @abstractmethod
    def adjust_balance(self, identity_id: str, delta: Decimal) -> Identity:
        """Add delta (possibly negative) to an identity's balance.

        Does not reject negative results; callers validate sufficiency first.

        Raises:
            NotFoundError: If the identity does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, identity: Identity) -> None:
        """Persist profile fields and the watchlist of an existing identity."""
        raise NotImplementedError


class ItemRepository(ABC):
    """Port for the item catalog."""

    @abstractmethod
    def add(self, item: Item) -> None:
        """Persist a newly minted item."""
        raise NotImplementedError

    @abstractmethod
    def get(self, item_id: str, for_update: bool = False) -> Optional[Item]:
        """Return an item by id, or None if absent."""
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> list[Item]:
        """Return every item in the catalog, in no particular order."""
        raise NotImplementedError

    @abstractmethod
    def save(self, item: Item) -> None:
        """Persist owner and listing changes and append new history entries.

        History entries already stored are never rewritten.
        """
        raise NotImplementedError


class TradeRequestRepository(ABC):
    """Port for the trade request ledger."""

    @abstractmethod
    def add(self, request: TradeRequest) -> None:
        """Persist a new trade request."""
        raise NotImplementedError

    @abstractmethod
    def get(self, request_id: str, for_update: bool = False) -> Optional[TradeRequest]:
        """Return a trade request by id, or None if absent."""
        raise NotImplementedError

    @abstractmethod
    def list_for_identity(self, identity_id: str) -> list[TradeRequest]:
        """Return requests where the identity is buyer or seller, newest first."""
        raise NotImplementedError

    @abstractmethod
    def save(self, request: TradeRequest) -> None:
        """Persist the status change of an existing request."""
        raise NotImplementedError


class TransactionRepository(ABC):
    """Port for the append-only transaction log."""

    @abstractmethod
    def append(self, transaction: Transaction) -> None:
        """Persist a new transaction record."""
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> list[Transaction]:
        """Return every transaction, newest first."""
        raise NotImplementedError


class UnitOfWork(ABC):
    """A single all-or-nothing scope over the four marketplace stores.

    Usage::

        with uow:
            ...
            uow.commit()

    Leaving the block without commit discards every change.
    """

    identities: IdentityRepository
    items: ItemRepository
    trade_requests: TradeRequestRepository
    transactions: TransactionRepository

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        raise NotImplementedError


class LockManager(ABC):
    """Port for keyed mutual exclusion across concurrent operations."""

    @abstractmethod
    def hold(self, *keys: str) -> AbstractContextManager[None]:
        """Return a context manager holding every key for its duration."""
        raise NotImplementedError


class CredentialHasher(ABC):
    """Port for one-way hashing of identity secrets."""

    @abstractmethod
    def hash(self, secret: str) -> str:
        """Return a salted one-way hash. Raises InvalidSecretError for unusable secrets."""
        raise NotImplementedError

    @abstractmethod
    def verify(self, secret: str, hashed: str) -> bool:
        raise NotImplementedError


class ImageUrlResolver(ABC):
    """Port for turning opaque stored image references into public URLs."""

    @abstractmethod
    def resolve(self, image_ref: str) -> str:
        raise NotImplementedError

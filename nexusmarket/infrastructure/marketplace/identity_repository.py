"""
Adapter: Identity store.

Implements IdentityRepository port on top of a SQLAlchemy session.
The session belongs to the unit of work; this adapter only flushes.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nexusmarket.domain.marketplace.entities import Identity
from nexusmarket.domain.marketplace.errors import DuplicateIdentityError, NotFoundError
from nexusmarket.domain.marketplace.ports import IdentityRepository
from nexusmarket.infrastructure.marketplace.orm_models import IdentityModel, SavedItemModel


class SqlAlchemyIdentityRepository(IdentityRepository):
    """SQLAlchemy implementation of the identity store."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _load(self, identity_id: str, for_update: bool = False) -> Optional[IdentityModel]:
        stmt = select(IdentityModel).where(IdentityModel.id == identity_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self._session.execute(stmt).scalar_one_or_none()

    def add(self, identity: Identity) -> None:
        """Persist a new identity.

        Args:
            identity: Identity entity to save.

        Raises:
            DuplicateIdentityError: If the email is already registered.
        """
        self._session.add(IdentityModel.from_entity(identity))
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise DuplicateIdentityError(identity.email) from exc

    def get(self, identity_id: str, for_update: bool = False) -> Optional[Identity]:
        model = self._load(identity_id, for_update)
        return model.to_entity() if model else None

    def get_by_email(self, email: str) -> Optional[Identity]:
        stmt = select(IdentityModel).where(
            func.lower(IdentityModel.email) == email.strip().lower()
        )
        model = self._session.execute(stmt).scalar_one_or_none()
        return model.to_entity() if model else None

    def adjust_balance(self, identity_id: str, delta: Decimal) -> Identity:
        """Add delta to the stored balance under a row lock.

        Args:
            identity_id: Id of the identity to credit or debit.
            delta: Signed amount to add.

        Returns:
            The identity after the change.

        Raises:
            NotFoundError: If the identity does not exist.
        """
        model = self._load(identity_id, for_update=True)
        if model is None:
            raise NotFoundError("Identity", identity_id)
        model.balance = Decimal(str(model.balance)) + delta
        self._session.flush()
        return model.to_entity()

    def save(self, identity: Identity) -> None:
        """Persist profile fields and the watchlist.

        The balance is not written here; it only changes through adjust_balance.

        Raises:
            NotFoundError: If the identity does not exist.
        """
        model = self._load(identity.id)
        if model is None:
            raise NotFoundError("Identity", identity.id)

        model.name = identity.name
        model.credential_hash = identity.credential_hash
        model.avatar_ref = identity.avatar_ref

        wanted = list(identity.saved_item_ids)
        model.saved_items = [saved for saved in model.saved_items if saved.item_id in wanted]
        stored = {saved.item_id for saved in model.saved_items}
        for item_id in wanted:
            if item_id not in stored:
                model.saved_items.append(SavedItemModel(item_id=item_id))
        self._session.flush()

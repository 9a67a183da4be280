"""
Use case: Register a new identity.

Input: RegisterIdentityCommand (name, email, secret)
Output: IdentityResult
Side effects: Inserts one identity with the starting balance.
Failure cases: DuplicateIdentityError, InvalidSecretError.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from nexusmarket.application.marketplace.dtos import IdentityResult, RegisterIdentityCommand
from nexusmarket.application.marketplace.mappers import to_identity_result
from nexusmarket.domain.marketplace.entities import Identity, utc_now
from nexusmarket.domain.marketplace.errors import DataIntegrityError, DuplicateIdentityError
from nexusmarket.domain.marketplace.identifiers import new_identity_id, new_wallet_address
from nexusmarket.domain.marketplace.ports import (
    CredentialHasher,
    ImageUrlResolver,
    UnitOfWork,
)

logger = logging.getLogger(__name__)

MAX_ID_ATTEMPTS = 10


class RegisterIdentityUseCase:
    """Orchestrates signup.

    Hashes the secret before opening the unit of work, checks the
    email is free, then stores the identity with the starting balance.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        hasher: CredentialHasher,
        image_resolver: ImageUrlResolver,
        starting_balance: Decimal = Decimal("100"),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._hasher = hasher
        self._image_resolver = image_resolver
        self._starting_balance = starting_balance
        self._clock = clock

    def execute(self, command: RegisterIdentityCommand) -> IdentityResult:
        """Run the registration use case.

        Args:
            command: Name, email and clear-text secret.

        Returns:
            The new identity, without credentials.

        Raises:
            DuplicateIdentityError: If the email is already registered.
            InvalidSecretError: If the secret is too long to hash.
        """
        email = command.email.strip().lower()
        credential_hash = self._hasher.hash(command.secret)

        with self._uow_factory() as uow:
            if uow.identities.get_by_email(email) is not None:
                raise DuplicateIdentityError(email)

            identity = Identity(
                id=self._fresh_identity_id(uow),
                name=command.name.strip(),
                email=email,
                credential_hash=credential_hash,
                wallet_address=new_wallet_address(),
                balance=self._starting_balance,
                created_at=self._clock(),
            )
            uow.identities.add(identity)
            uow.commit()

        logger.info("Registered identity=%s", identity.id)
        return to_identity_result(identity, self._image_resolver)

    @staticmethod
    def _fresh_identity_id(uow: UnitOfWork) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = new_identity_id()
            if uow.identities.get(candidate) is None:
                return candidate
        raise DataIntegrityError("could not allocate a unique identity id")

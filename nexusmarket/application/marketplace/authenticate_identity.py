"""
Use case: Authenticate an identity by email and secret.

Input: AuthenticateCommand (email, secret)
Output: IdentityResult
Side effects: None.
Failure cases: InvalidCredentialsError.
"""

import logging
from collections.abc import Callable

from nexusmarket.application.marketplace.dtos import AuthenticateCommand, IdentityResult
from nexusmarket.application.marketplace.mappers import to_identity_result
from nexusmarket.domain.marketplace.errors import InvalidCredentialsError
from nexusmarket.domain.marketplace.ports import (
    CredentialHasher,
    ImageUrlResolver,
    UnitOfWork,
)

logger = logging.getLogger(__name__)


class AuthenticateIdentityUseCase:
    """Checks a secret against the stored hash for an email."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        hasher: CredentialHasher,
        image_resolver: ImageUrlResolver,
    ) -> None:
        self._uow_factory = uow_factory
        self._hasher = hasher
        self._image_resolver = image_resolver

    def execute(self, command: AuthenticateCommand) -> IdentityResult:
        """Return the identity when the credentials match.

        Raises:
            InvalidCredentialsError: If the email is unknown or the secret is wrong.
        """
        with self._uow_factory() as uow:
            identity = uow.identities.get_by_email(command.email.strip())

        if identity is None or not self._hasher.verify(command.secret, identity.credential_hash):
            raise InvalidCredentialsError()

        logger.info("Authenticated identity=%s", identity.id)
        return to_identity_result(identity, self._image_resolver)

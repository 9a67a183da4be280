"""
Use case: Update an identity's profile.

Input: UpdateProfileCommand (identity_id, secret?, avatar_ref?)
Output: IdentityResult
Side effects: Re-hashes the secret and/or replaces the avatar reference.
Failure cases: NotFoundError, InvalidSecretError.
"""

import logging
from collections.abc import Callable

from nexusmarket.application.marketplace.dtos import IdentityResult, UpdateProfileCommand
from nexusmarket.application.marketplace.lock_keys import identity_key
from nexusmarket.application.marketplace.mappers import to_identity_result
from nexusmarket.domain.marketplace.errors import NotFoundError
from nexusmarket.domain.marketplace.ports import (
    CredentialHasher,
    ImageUrlResolver,
    LockManager,
    UnitOfWork,
)

logger = logging.getLogger(__name__)


class UpdateIdentityProfileUseCase:
    """Changes the secret and/or avatar of an identity. Balance is never touched."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        locks: LockManager,
        hasher: CredentialHasher,
        image_resolver: ImageUrlResolver,
    ) -> None:
        self._uow_factory = uow_factory
        self._locks = locks
        self._hasher = hasher
        self._image_resolver = image_resolver

    def execute(self, command: UpdateProfileCommand) -> IdentityResult:
        """Run the profile update.

        An empty avatar reference clears the avatar.

        Raises:
            NotFoundError: If the identity does not exist.
            InvalidSecretError: If the new secret is too long to hash.
        """
        new_hash = self._hasher.hash(command.secret) if command.secret else None

        with self._locks.hold(identity_key(command.identity_id)):
            with self._uow_factory() as uow:
                identity = uow.identities.get(command.identity_id, for_update=True)
                if identity is None:
                    raise NotFoundError("Identity", command.identity_id)

                if new_hash is not None:
                    identity.credential_hash = new_hash
                if command.avatar_ref is not None:
                    identity.avatar_ref = command.avatar_ref or None
                uow.identities.save(identity)
                uow.commit()

        logger.info(
            "Updated profile identity=%s secret_changed=%s avatar_changed=%s",
            identity.id,
            new_hash is not None,
            command.avatar_ref is not None,
        )
        return to_identity_result(identity, self._image_resolver)

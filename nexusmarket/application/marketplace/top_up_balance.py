"""
Use case: Top up an identity's balance.

Input: TopUpCommand (identity_id, amount)
Output: IdentityResult
Side effects: Credits the identity's balance.
Failure cases: InvalidAmountError, NotFoundError.
"""

import logging
from collections.abc import Callable

from nexusmarket.application.marketplace.dtos import IdentityResult, TopUpCommand
from nexusmarket.application.marketplace.lock_keys import identity_key
from nexusmarket.application.marketplace.mappers import to_identity_result
from nexusmarket.domain.marketplace.errors import InvalidAmountError
from nexusmarket.domain.marketplace.ports import ImageUrlResolver, LockManager, UnitOfWork

logger = logging.getLogger(__name__)


class TopUpBalanceUseCase:
    """Credits a positive amount to an identity.

    Holds the identity's lock so a concurrent settlement cannot
    interleave its read-modify-write of the same balance.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        locks: LockManager,
        image_resolver: ImageUrlResolver,
    ) -> None:
        self._uow_factory = uow_factory
        self._locks = locks
        self._image_resolver = image_resolver

    def execute(self, command: TopUpCommand) -> IdentityResult:
        """Run the top-up use case.

        Raises:
            InvalidAmountError: If the amount is zero or negative.
            NotFoundError: If the identity does not exist.
        """
        if command.amount <= 0:
            raise InvalidAmountError(command.amount)

        with self._locks.hold(identity_key(command.identity_id)):
            with self._uow_factory() as uow:
                identity = uow.identities.adjust_balance(command.identity_id, command.amount)
                uow.commit()

        logger.info("Topped up identity=%s", identity.id)
        return to_identity_result(identity, self._image_resolver)

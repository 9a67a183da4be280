"""
Use case: Open a purchase request for a listed item.

Input: CreateTradeRequestCommand (item_id, buyer_id)
Output: TradeRequestResult
Side effects: Inserts one PENDING trade request.
Failure cases: NotFoundError, NotListedError, SelfTradeError,
    InsufficientFundsError.
"""

import logging
from collections.abc import Callable

from nexusmarket.application.marketplace.dtos import (
    CreateTradeRequestCommand,
    TradeRequestResult,
)
from nexusmarket.application.marketplace.lock_keys import identity_key, item_key
from nexusmarket.application.marketplace.mappers import to_trade_request_result
from nexusmarket.domain.marketplace.identifiers import normalize_item_id
from nexusmarket.domain.marketplace.ports import ImageUrlResolver, LockManager, UnitOfWork
from nexusmarket.domain.marketplace.settlement import SettlementEngine

logger = logging.getLogger(__name__)


class CreateTradeRequestUseCase:
    """Freezes the current listing price into a new PENDING request.

    The item lock keeps a concurrent listing change from slipping
    between the price read and the insert.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        locks: LockManager,
        engine: SettlementEngine,
        image_resolver: ImageUrlResolver,
    ) -> None:
        self._uow_factory = uow_factory
        self._locks = locks
        self._engine = engine
        self._image_resolver = image_resolver

    def execute(self, command: CreateTradeRequestCommand) -> TradeRequestResult:
        """Run the request creation.

        Args:
            command: Item and buyer ids.

        Returns:
            The new PENDING request.

        Raises:
            NotFoundError: If the item or the buyer does not exist.
            NotListedError: If the item is not for sale.
            SelfTradeError: If the buyer owns the item.
            InsufficientFundsError: If the buyer cannot cover the price.
        """
        item_id = normalize_item_id(command.item_id)

        with self._locks.hold(item_key(item_id), identity_key(command.buyer_id)):
            with self._uow_factory() as uow:
                request = self._engine.open_request(uow, item_id, command.buyer_id)
                uow.commit()

        logger.info(
            "Opened trade request=%s item=%s buyer=%s price=%s",
            request.id,
            request.item_id,
            request.buyer_id,
            request.price,
        )
        return to_trade_request_result(request, self._image_resolver)

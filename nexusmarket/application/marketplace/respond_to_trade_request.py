"""
Use case: Seller accepts or rejects a pending trade request.

Input: RespondToTradeRequestCommand (request_id, decision)
Output: TradeRequestResult
Side effects: On REJECT, marks the request REJECTED.
    On ACCEPT, moves the frozen price from buyer to seller, transfers
    and delists the item, appends history and a SALE transaction, and
    marks the request ACCEPTED. All or nothing.
Failure cases: NotFoundError, AlreadyProcessedError, InsufficientFundsError,
    DataIntegrityError.
"""

import logging
from collections.abc import Callable

from nexusmarket.application.marketplace.dtos import (
    RespondToTradeRequestCommand,
    TradeRequestResult,
)
from nexusmarket.application.marketplace.lock_keys import (
    identity_key,
    item_key,
    request_key,
)
from nexusmarket.application.marketplace.mappers import to_trade_request_result
from nexusmarket.domain.marketplace.enums import Decision
from nexusmarket.domain.marketplace.errors import NotFoundError
from nexusmarket.domain.marketplace.ports import ImageUrlResolver, LockManager, UnitOfWork
from nexusmarket.domain.marketplace.settlement import SettlementEngine

logger = logging.getLogger(__name__)


def parse_decision(raw: str) -> Decision:
    """Map "ACCEPT"/"REJECT" (any case) to Decision.

    Raises:
        ValueError: If the value is neither.
    """
    return Decision(raw.strip().upper())


class RespondToTradeRequestUseCase:
    """Resolves a trade request as one atomic settlement.

    Process:
        1. Read the request to learn which item and identities it touches
        2. Hold the request, item, buyer and seller locks
        3. Re-read everything inside a fresh unit of work and apply the decision
        4. Commit, or discard every change on failure
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        locks: LockManager,
        engine: SettlementEngine,
        image_resolver: ImageUrlResolver,
    ) -> None:
        """Initialize the use case.

        Args:
            uow_factory: Returns a fresh unit of work per call.
            locks: Keyed lock manager shared by every mutating use case.
            engine: Settlement state machine.
            image_resolver: Resolves the snapshot image reference for output.
        """
        self._uow_factory = uow_factory
        self._locks = locks
        self._engine = engine
        self._image_resolver = image_resolver

    def execute(self, command: RespondToTradeRequestCommand) -> TradeRequestResult:
        """Run the respond use case.

        Args:
            command: Request id and the seller decision.

        Returns:
            The request in its terminal state.

        Raises:
            ValueError: If the decision is neither ACCEPT nor REJECT.
            NotFoundError: If the request does not exist.
            AlreadyProcessedError: If the request is no longer pending.
            InsufficientFundsError: If the buyer can no longer cover the price.
            DataIntegrityError: If a referenced record is missing or the seller
                no longer owns the item.
        """
        decision = parse_decision(command.decision)

        with self._uow_factory() as uow:
            pending = uow.trade_requests.get(command.request_id)
        if pending is None:
            raise NotFoundError("TradeRequest", command.request_id)

        keys = (
            request_key(pending.id),
            item_key(pending.item_id),
            identity_key(pending.buyer_id),
            identity_key(pending.seller_id),
        )
        with self._locks.hold(*keys):
            with self._uow_factory() as uow:
                request = self._engine.respond(uow, pending.id, decision)
                uow.commit()

        logger.info(
            "Resolved trade request=%s decision=%s status=%s item=%s",
            request.id,
            decision.value,
            request.status.value,
            request.item_id,
        )
        return to_trade_request_result(request, self._image_resolver)
